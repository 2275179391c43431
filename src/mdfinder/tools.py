"""External collaborators: the user's editor and the system clipboard."""

import os
import shlex
import subprocess
from pathlib import Path

import pyperclip

from .logger import get_logger

logger = get_logger("tools")

DEFAULT_EDITOR = "vim"


def editor_command(path: Path) -> list:
    """Command line that opens ``path`` in $VISUAL, $EDITOR or vim."""
    editor = os.getenv("VISUAL") or os.getenv("EDITOR") or DEFAULT_EDITOR
    return shlex.split(editor) + [str(path)]


def launch_editor(path: Path) -> int:
    """Run the editor in the foreground and return its exit code."""
    cmd = editor_command(path)
    logger.info(f"Launching editor: {' '.join(cmd)}")
    try:
        result = subprocess.run(cmd)
    except FileNotFoundError:
        logger.error(f"Editor not found: {cmd[0]}")
        return 127
    if result.returncode != 0:
        logger.warning(f"Editor exited with {result.returncode}")
    return result.returncode


def copy_to_clipboard(text: str) -> None:
    """Write ``text`` to the system clipboard. Raises on failure."""
    pyperclip.copy(text)
    logger.debug(f"Copied {len(text)} characters to clipboard")
