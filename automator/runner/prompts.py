from __future__ import annotations

from typing import List, Optional, Sequence

from rich.console import Console
from rich.prompt import Prompt

from automator.core.cancellation import CancellationToken
from automator.core.exceptions import PromptAborted
from automator.core.schemas import MenuChoice


class Prompter:
    """
    Interactive input backed by ``rich.prompt``.

    Every read first checks the cancellation token, and a closed input stream
    or Ctrl-C inside a read surfaces as ``PromptAborted``.
    """

    def __init__(self, console: Optional[Console] = None, token: Optional[CancellationToken] = None) -> None:
        self.console = console or Console()
        self.token = token or CancellationToken()

    def _read(self, message: str, default: Optional[str] = None) -> str:
        self.token.raise_if_cancelled()
        try:
            if default:
                return Prompt.ask(message, console=self.console, default=default)
            return Prompt.ask(message, console=self.console, default="", show_default=False)
        except (EOFError, KeyboardInterrupt) as exc:
            raise PromptAborted("Input aborted") from exc

    def select(self, message: str, choices: Sequence[MenuChoice]) -> str:
        for idx, choice in enumerate(choices, 1):
            self.console.print(f"  [bold cyan]{idx}.[/bold cyan] {choice.label}")
        return self._read(f"[bold]{message}[/bold]").strip()

    def ask(self, message: str, default: Optional[str] = None) -> str:
        return self._read(message, default=default)

    def read_lines(self, message: str, terminator: str) -> List[str]:
        """Collect lines until ``terminator`` is entered on a line of its own."""
        self.console.print(f"{message} [dim](finish with '{terminator}' on its own line)[/dim]")
        lines: List[str] = []
        while True:
            self.token.raise_if_cancelled()
            try:
                line = self.console.input("[dim]>[/dim] ")
            except (EOFError, KeyboardInterrupt) as exc:
                raise PromptAborted("Input aborted") from exc
            if line.strip() == terminator:
                return lines
            lines.append(line)
