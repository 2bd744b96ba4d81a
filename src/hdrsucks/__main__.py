"""Allow ``python -m hdrsucks``."""

from hdrsucks.cli import main

if __name__ == "__main__":
    main()
