"""Module entrypoint for ``python -m peek``.

All argument parsing and runtime setup happen in ``peek.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
