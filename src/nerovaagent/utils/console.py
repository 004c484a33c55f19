"""Shared rich consoles.

Lines that carry daemon text are written to the console's file untouched:
no markup, no tab expansion, no control-code stripping and no wrapping.
Only fixed status lines of our own go through rich styling.
"""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.text import Text

console = Console(soft_wrap=True, highlight=False, emoji=False)
err_console = Console(stderr=True, soft_wrap=True, highlight=False, emoji=False)


def _write(target: Console, line: str, style: Optional[str]) -> None:
    if style:
        target.print(Text(line, style=style))
        return
    target.file.write(f"{line}\n")
    target.file.flush()


def emit(line: str, style: Optional[str] = None) -> None:
    _write(console, line, style)


def emit_error(line: str, style: Optional[str] = None) -> None:
    _write(err_console, line, style)


def debug_line(line: str) -> None:
    err_console.print(Text(line, style="dim"))
