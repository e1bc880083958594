"""Safe error message formatting utilities.

Ensures exceptions always have useful display messages, even when
their str() representation is empty, and that dynamic values such as
paths never get interpreted as Rich markup.
"""

from __future__ import annotations

import sys
from typing import NoReturn

from rich.markup import escape as _escape_markup

from ..console import console

# Friendly messages for exception types known to have empty str()
FRIENDLY_MESSAGES: dict[type, str] = {
    PermissionError: "Permission denied.",
    KeyboardInterrupt: "Operation interrupted by user.",
}


def format_error_message(e: BaseException, *, include_type: bool = True) -> str:
    """Format an exception into a useful display message.

    Examples:
        >>> format_error_message(ValueError("invalid input"))
        'ValueError: invalid input'

        >>> format_error_message(ValueError("invalid input"), include_type=False)
        'invalid input'
    """
    error_str = str(e)
    error_type = type(e).__name__

    if error_str:
        if include_type and error_type not in error_str:
            return f"{error_type}: {error_str}"
        return error_str

    for exc_type, friendly_msg in FRIENDLY_MESSAGES.items():
        if isinstance(e, exc_type):
            return f"{error_type}: {friendly_msg}"

    return f"{error_type}: (no additional details)"


def escape_markup(value: object) -> str:
    """Escape a value for safe interpolation into Rich markup strings."""
    return _escape_markup(str(value))


def exit_with_error(e: BaseException) -> NoReturn:
    """Print an error the way every command reports failures, then exit with status 1."""
    console.print(f"[red]Error:[/red] {escape_markup(format_error_message(e, include_type=False))}")
    sys.exit(1)
