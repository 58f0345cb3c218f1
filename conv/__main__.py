# SPDX-License-Identifier: MIT
"""Allow ``python -m conv``."""

from conv.cli import run

if __name__ == "__main__":
    run()
