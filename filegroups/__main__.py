"""Module entrypoint for ``python -m filegroups``."""

from .cli import main


if __name__ == "__main__":
    main()
