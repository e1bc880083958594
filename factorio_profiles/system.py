"""Thin wrappers around the operating system shell."""

import logging
import os
import subprocess
from pathlib import Path

import click

logger = logging.getLogger(__name__)


def open_in_file_browser(path: Path) -> None:
    """Open path in the platform file browser."""
    logger.debug(f"Opening file browser at {path}")
    click.launch(str(path))


def is_process_running(name: str) -> bool:
    """Check whether a process with the given executable name is running.

    Returns False when the platform probe tool is unavailable.
    """
    if os.name == "nt":
        image = name if name.lower().endswith(".exe") else f"{name}.exe"
        cmd = ["tasklist", "/FI", f"IMAGENAME eq {image}", "/NH"]
    else:
        cmd = ["pgrep", "-x", name]

    try:
        result = subprocess.run(cmd, capture_output=True, text=True)
    except OSError as e:
        logger.warning(f"Could not check for running process {name}: {e}")
        return False

    if os.name == "nt":
        return image.lower() in result.stdout.lower()
    return result.returncode == 0
