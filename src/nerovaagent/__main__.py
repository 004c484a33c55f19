"""Allow ``python -m nerovaagent``; the daemon manager spawns itself this way."""

from __future__ import annotations

from .cli.nerovaagent import main

if __name__ == "__main__":
    main()
