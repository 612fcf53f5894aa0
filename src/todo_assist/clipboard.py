"""Best-effort clipboard output across macOS and Linux."""

from __future__ import annotations

import logging
import subprocess

logger = logging.getLogger(__name__)

CLIPBOARD_COMMANDS: tuple[tuple[str, ...], ...] = (
    ("pbcopy",),
    ("wl-copy",),
    ("xclip", "-selection", "clipboard"),
    ("xsel", "--clipboard", "--input"),
)


def copy_to_clipboard(text: str) -> bool:
    """Copy ``text`` to the system clipboard.

    Tries each known clipboard command in turn. Failure is never fatal;
    the prompt is still written to stdout by the caller.

    Args:
        text: Text to copy.

    Returns:
        True if one of the commands accepted the text.

    """
    for cmd in CLIPBOARD_COMMANDS:
        try:
            proc = subprocess.run(
                list(cmd),
                input=text,
                check=False,
                capture_output=True,
                text=True,
                timeout=5,
            )
        except (OSError, subprocess.TimeoutExpired):
            continue
        if proc.returncode == 0:
            logger.debug("Copied %d characters with %s", len(text), cmd[0])
            return True
    logger.warning("No clipboard command available; prompt not copied")
    return False
