"""Exceptions raised while loading, checking, and persisting blocks."""

from __future__ import annotations


class BlockError(Exception):
    """Base class for block storage and block kind failures."""


class BlockNotFoundError(BlockError):
    """Raised when a block identifier does not resolve to a stored block."""

    def __init__(self, block_id: str) -> None:
        super().__init__(f"block {block_id} not found")
        self.block_id = block_id


class InvalidBlockKindError(BlockError):
    """Raised when a block exists but is not of the expected kind."""

    def __init__(self, block_id: str, *, actual: str, expected: str) -> None:
        super().__init__(f"block {block_id} is not a {expected} (type: {actual})")
        self.block_id = block_id
        self.actual = actual
        self.expected = expected


class BlockStoreError(BlockError):
    """Raised when the block store cannot be read or written."""


class BlockConflictError(BlockError):
    """Raised when a conditional update finds a newer version of the block."""

    def __init__(self, block_id: str, *, expected: int, actual: int) -> None:
        super().__init__(
            f"block {block_id} was modified concurrently "
            f"(expected update_at {expected}, found {actual})"
        )
        self.block_id = block_id
        self.expected = expected
        self.actual = actual


__all__ = [
    "BlockError",
    "BlockNotFoundError",
    "InvalidBlockKindError",
    "BlockStoreError",
    "BlockConflictError",
]
