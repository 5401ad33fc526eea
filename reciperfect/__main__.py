"""Module entrypoint for running Reciperfect as ``python -m reciperfect``."""

from __future__ import annotations

from reciperfect.cli import main


if __name__ == "__main__":
    main()
