"""Module entrypoint for python -m smurf."""

from __future__ import annotations

from smurf.cli import app

if __name__ == "__main__":
    app()
