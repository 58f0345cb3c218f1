# SPDX-License-Identifier: MIT
"""Copy text to the system clipboard through the platform's CLI tool."""

import subprocess
import sys
from typing import List, Optional

from conv.debug_logger import get_logger

CLIPBOARD_TIMEOUT = 5


def clipboard_commands(platform: Optional[str] = None) -> List[List[str]]:
    """Commands to try, in order, for ``platform`` (defaults to sys.platform)."""
    platform = platform or sys.platform
    if platform == "darwin":
        return [["pbcopy"]]
    if platform == "win32":
        return [["clip"]]
    return [["xclip", "-selection", "clipboard"], ["wl-copy"]]


def copy_to_clipboard(text: str, platform: Optional[str] = None) -> bool:
    """Copy ``text`` to the clipboard.

    Returns:
        True if one of the clipboard tools accepted the text. Never raises.
    """
    logger = get_logger()
    for command in clipboard_commands(platform):
        try:
            subprocess.run(
                command,
                input=text.encode("utf-8"),
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=True,
                timeout=CLIPBOARD_TIMEOUT,
            )
        except (OSError, subprocess.CalledProcessError, subprocess.TimeoutExpired):
            continue
        logger.clipboard_result(command[0], True)
        return True
    logger.clipboard_result(None, False)
    return False
