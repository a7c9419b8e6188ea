"""Entry point: python -m registrygen

Generates package metadata and API docs for registry packages.
"""

from __future__ import annotations

from .cli import app


def main() -> None:
    app(prog_name="registrygen")


if __name__ == "__main__":
    main()
