"""Interactive yes/no confirmation used before irreversible actions."""

from __future__ import annotations

from typing import Callable

import typer

from .errors import UserDeclined

AskFn = Callable[[str], str]


def _console_ask(question: str) -> str:
    """Read one answer from the terminal."""

    return typer.prompt(question, default="", show_default=False, prompt_suffix=": ")


class ConfirmationGate:
    """Ask yes/no questions until a valid answer arrives.

    ``ask`` receives the full question text and returns the raw answer; tests
    pass a scripted responder instead of reading the console.
    """

    def __init__(self, ask: AskFn | None = None) -> None:
        self._ask = ask or _console_ask

    def confirm(self, question: str) -> bool:
        """Return ``True`` for ``y``/``Y`` and ``False`` for ``n``/``N``."""

        while True:
            answer = str(self._ask(f"{question} (y/n)")).strip()
            if answer in ("y", "Y"):
                return True
            if answer in ("n", "N"):
                return False
            typer.echo("Invalid response: Please reply with a Y or a N")

    def require(self, question: str, farewell: str = "Understood! Have a nice day") -> None:
        """Confirm *question* or raise :class:`UserDeclined` with *farewell*."""

        if not self.confirm(question):
            raise UserDeclined(farewell)


__all__ = ["AskFn", "ConfirmationGate"]
