"""Allow ``python -m methodtrace``."""

from .cli import main

if __name__ == "__main__":
    main()
