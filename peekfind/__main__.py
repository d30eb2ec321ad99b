"""Module entrypoint for ``python -m peekfind``.

All argument parsing and runtime setup happen in ``peekfind.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
