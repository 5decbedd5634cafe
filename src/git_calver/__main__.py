"""Allow running git-calver as ``python -m git_calver``."""

from .cli import main

if __name__ == "__main__":
    main()
