"""Utility types for consistent CLI error handling."""

from __future__ import annotations

from enum import IntEnum

from libraries.blocks.errors import (
    BlockConflictError,
    BlockError,
    BlockNotFoundError,
    BlockStoreError,
    InvalidBlockKindError,
)


class ExitCode(IntEnum):
    """Standardised exit codes for the boardfix CLI."""

    SUCCESS = 0
    VALIDATION = 1
    IO = 2
    CONFIG = 3
    RUNTIME = 5


class BoardfixError(Exception):
    """Base for predictable CLI errors that surface to users."""

    exit_code: ExitCode = ExitCode.RUNTIME
    label = "Error"

    def __init__(
        self, message: str, *, exit_code: ExitCode | int | None = None
    ) -> None:
        super().__init__(message)
        self.message = message
        if exit_code is None:
            exit_code = type(self).exit_code
        self.exit_code = ExitCode(exit_code)

    def __str__(self) -> str:  # pragma: no cover - exercised through Typer.
        return self.message

    @property
    def heading(self) -> str:
        """Return a short label describing the error class."""

        return type(self).label


class BoardfixValidationError(BoardfixError):
    """Raised when the requested block cannot be processed as asked."""

    exit_code = ExitCode.VALIDATION
    label = "Validation error"


class BoardfixIOError(BoardfixError):
    """Raised when the block store cannot be read or written."""

    exit_code = ExitCode.IO
    label = "I/O error"


class BoardfixConfigError(BoardfixError):
    """Raised when configuration or environment is invalid."""

    exit_code = ExitCode.CONFIG
    label = "Configuration error"


class BoardfixRuntimeError(BoardfixError):
    """Raised for failures that a retry may resolve."""

    exit_code = ExitCode.RUNTIME
    label = "Runtime error"


def translate_block_error(exc: BlockError) -> BoardfixError:
    """Return the CLI error matching a library block error."""

    if isinstance(exc, (BlockNotFoundError, InvalidBlockKindError)):
        return BoardfixValidationError(str(exc))
    if isinstance(exc, BlockStoreError):
        return BoardfixIOError(str(exc))
    if isinstance(exc, BlockConflictError):
        return BoardfixRuntimeError(f"{exc}; retry the repair")
    return BoardfixRuntimeError(str(exc))
