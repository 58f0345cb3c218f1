#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Error types for the conversation utilities.

Library code raises these; only the CLI entry point turns them into a
message on stderr and a process exit status.
"""

EXIT_OK = 0
EXIT_NOT_MAPPED = 1
EXIT_NO_LOG_FILES = 2
EXIT_NO_VALID_INPUT = 3
EXIT_USAGE = 64
EXIT_CANT_CREATE = 73


class ConvError(Exception):
    """Base class for errors that end a command with a non-zero exit."""

    exit_code = EXIT_NOT_MAPPED


class UsageError(ConvError):
    """Malformed or missing command-line values."""

    exit_code = EXIT_USAGE


class HomeNotFoundError(ConvError):
    """No home directory could be resolved to locate the projects root."""

    exit_code = EXIT_USAGE


class MappedDirNotFoundError(ConvError):
    """No session-log directory maps to the working directory."""

    exit_code = EXIT_NOT_MAPPED

    def __init__(self, start: str, root: str) -> None:
        self.start = start
        self.root = root
        super().__init__(
            f"No mapped directory found for:\n  {start}\nunder:\n  {root}\n"
            "(try: --debug to see attempted candidates)"
        )


class NoLogFilesError(ConvError):
    """The mapped directory holds no .jsonl files."""

    exit_code = EXIT_NO_LOG_FILES

    def __init__(self, directory: str) -> None:
        self.directory = directory
        super().__init__(f"No .jsonl files found in:\n  {directory}")


class NoValidInputError(ConvError):
    """Every explicitly supplied input file was missing or not a .jsonl."""

    exit_code = EXIT_NO_VALID_INPUT

    def __init__(self) -> None:
        super().__init__("No valid input files")


class OutputWriteError(ConvError):
    """An export destination could not be created or written."""

    exit_code = EXIT_CANT_CREATE

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        super().__init__(f"Cannot write output file:\n  {path}\n({reason})")
