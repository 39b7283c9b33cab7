"""Command-line interface for smurf."""

from __future__ import annotations

# ruff: noqa: F401
from smurf.commands import images, root, state
from smurf.commands.common import app

if __name__ == "__main__":
    app()
