"""CLI entry point -- python -m incusdash."""
from __future__ import annotations

from cli.dash import main

if __name__ == "__main__":
    main()
