"""Module entrypoint for ``python -m tpgtui``.

Keeps module-mode execution identical to the ``tpg-tui`` console script.
"""

from .cli import main


if __name__ == "__main__":
    main()
