"""nerovaagent - client for the local Nerova agent daemon.

Commands and flags are routed by the dispatcher rather than by click, so
every token (unknown options and ``--help`` included) is forwarded as-is.
"""

from __future__ import annotations

import asyncio
import sys

import click


@click.command(
    name="nerovaagent",
    context_settings={
        "ignore_unknown_options": True,
        "allow_extra_args": True,
        "help_option_names": [],
    },
)
@click.argument("argv", nargs=-1, type=click.UNPROCESSED)
def nerovaagent_cli(argv: tuple[str, ...]) -> None:
    """Activate the agent daemon, submit runs, and render their timelines."""
    from ..core.dispatcher import dispatch
    from ..utils.console import emit_error

    try:
        exit_code = asyncio.run(dispatch(list(argv)))
    except KeyboardInterrupt:
        emit_error("Aborted.", style="yellow")
        sys.exit(130)
    except Exception as e:  # noqa: BLE001
        emit_error(f"{type(e).__name__}: {e}")
        sys.exit(1)
    sys.exit(exit_code)


def main() -> None:
    nerovaagent_cli()


if __name__ == "__main__":
    main()
