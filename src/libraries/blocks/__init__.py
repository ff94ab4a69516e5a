"""Board block model and storage backends."""

from libraries.blocks.errors import (
    BlockConflictError,
    BlockError,
    BlockNotFoundError,
    BlockStoreError,
    InvalidBlockKindError,
)
from libraries.blocks.models import CONTENT_ORDER_FIELD, TYPE_CARD, Block
from libraries.blocks.store import BlockStore, InMemoryBlockStore, JsonBlockStore

__all__ = [
    "Block",
    "BlockConflictError",
    "BlockError",
    "BlockNotFoundError",
    "BlockStore",
    "BlockStoreError",
    "CONTENT_ORDER_FIELD",
    "InMemoryBlockStore",
    "InvalidBlockKindError",
    "JsonBlockStore",
    "TYPE_CARD",
]
