# SPDX-License-Identifier: MIT
"""Conversation utilities for mapped Claude project transcripts."""

from conv._version import __version__

__all__ = ["__version__"]
