from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.text import Text

LEVEL_STYLES = {
    "INFO": "bold green",
    "WARN": "bold yellow",
    "ERROR": "bold red",
    "DEBUG": "bold blue",
    "DONE": "bold cyan",
}


class RichLogger:
    def __init__(self, console: Optional[Console] = None, verbose: bool = False):
        self.console = console or Console(stderr=True)
        self.verbose = verbose

    def _emit(self, level: str, msg: str) -> None:
        tag = Text(level.ljust(5), style=LEVEL_STYLES[level])
        # multi-line diagnostics keep their tag on every line
        for line in msg.splitlines() or [""]:
            self.console.log(tag, line)

    def info(self, msg: str) -> None:
        self._emit("INFO", msg)

    def warn(self, msg: str) -> None:
        self._emit("WARN", msg)

    def error(self, msg: str) -> None:
        self._emit("ERROR", msg)

    def debug(self, msg: str) -> None:
        if not self.verbose:
            return
        self._emit("DEBUG", msg)

    def done(self, msg: str) -> None:
        self._emit("DONE", msg)
