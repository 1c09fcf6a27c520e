"""gitlite object layer.

This package provides the narrow adapter between the command controllers
and the content-addressable store, with type-safe dependency injection.

Classes:
    ObjectLayer: Runtime-checkable protocol the controllers depend on.
    DulwichObjectLayer: Implementation backed by dulwich.
    FakeObjectLayer: In-memory implementation for tests.

Models:
    FileState: One side of the three-way comparison.
    StatusEntry: One row of the three-way comparison.
    StatusBucket: User-facing status categories.
    StatusReport: Classified working tree status.
    Author: Commit identity.
    CommitInfo: Metadata about a single commit.
    MergeResult: Outcome of merging one ref into another.
    Remote: A registered remote.
    Credentials: HTTP basic-auth credentials.
    ItemOutcome: Per-item outcome of a bulk operation.

Example:
    >>> from gitlite.repository import DulwichObjectLayer
    >>> with DulwichObjectLayer.discover() as layer:
    ...     entries = layer.status_matrix()
"""

from gitlite.repository._dulwich import DulwichObjectLayer, init_repository
from gitlite.repository._fake import FakeCommit, FakeObjectLayer
from gitlite.repository._models import (
    Author,
    CommitInfo,
    Credentials,
    FileState,
    ItemOutcome,
    MergeResult,
    Remote,
    StatusBucket,
    StatusEntry,
    StatusReport,
)
from gitlite.repository._protocol import (
    AuthFailureCallback,
    CredentialsCallback,
    ObjectLayer,
)

__all__ = [
    "AuthFailureCallback",
    "Author",
    "CommitInfo",
    "Credentials",
    "CredentialsCallback",
    "DulwichObjectLayer",
    "FakeCommit",
    "FakeObjectLayer",
    "FileState",
    "ItemOutcome",
    "MergeResult",
    "ObjectLayer",
    "Remote",
    "StatusBucket",
    "StatusEntry",
    "StatusReport",
    "init_repository",
]
