"""Interactive choices presented to the operator.

Core operations that may need confirmation receive a Chooser and branch on
the selected index, so tests can inject a scripted implementation.
"""

from collections.abc import Sequence
from typing import NamedTuple
from typing import Protocol

import click

from .console import console
from .utils.error_format import escape_markup


class Choice(NamedTuple):
    """One selectable option."""

    label: str
    help: str = ""


class Chooser(Protocol):
    def present_choice(self, prompt: str, options: Sequence[Choice]) -> int:
        """Ask the operator to pick one option and return its index."""
        ...

    def ask_text(self, prompt: str) -> str:
        """Ask the operator for a line of text."""
        ...


class ConsoleChooser:
    """Numbered-option prompts on the terminal.

    The default answer is the last option, which by convention is Cancel.
    """

    def present_choice(self, prompt: str, options: Sequence[Choice]) -> int:
        console.print(f"\n{escape_markup(prompt)}")
        for index, option in enumerate(options, start=1):
            line = f"  [{index}] {escape_markup(option.label)}"
            if option.help:
                line += f" [dim]- {escape_markup(option.help)}[/dim]"
            console.print(line, highlight=False)

        keys = [str(i) for i in range(1, len(options) + 1)]
        choice = click.prompt("Choice", type=click.Choice(keys), default=keys[-1])
        return int(choice) - 1

    def ask_text(self, prompt: str) -> str:
        return click.prompt(prompt, type=str)
