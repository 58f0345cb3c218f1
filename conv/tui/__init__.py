# SPDX-License-Identifier: MIT
"""Interactive picker for searching and exporting transcripts."""
