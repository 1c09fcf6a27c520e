"""Allow ``python -m gitlite``."""

from gitlite.cli import main

if __name__ == "__main__":
    main()
