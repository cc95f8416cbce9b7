"""Allow ``python -m forkreduce``."""

from .cli import main

if __name__ == "__main__":
    main()
