"""Validation of a card's content order against its stored content blocks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

import structlog

from libraries.blocks.models import Block
from libraries.content_order.entries import (
    Group,
    OrderEntry,
    Single,
    decode_content_order,
    encode_content_order,
)

log = structlog.get_logger(__name__)


@dataclass(slots=True)
class ContentOrderValidation:
    """Classification of every entry in a content order.

    ``valid_order`` keeps the entries that reference existing blocks, in their
    original order and including duplicates.  ``orphaned_ids`` lists ids that
    point at blocks which no longer exist and ``missing_ids`` lists blocks that
    exist but are not referenced anywhere in the order.
    """

    valid_order: list[OrderEntry] = field(default_factory=list)
    orphaned_ids: list[str] = field(default_factory=list)
    missing_ids: list[str] = field(default_factory=list)
    has_issues: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid_order": encode_content_order(self.valid_order),
            "orphaned_ids": list(self.orphaned_ids),
            "missing_ids": list(self.missing_ids),
            "has_issues": self.has_issues,
        }


def validate_content_order(
    content_order: Sequence[Any] | None,
    blocks: Sequence[Block],
) -> ContentOrderValidation:
    """Compare *content_order* with the content *blocks* of a card.

    *content_order* may hold raw ``contentOrder`` values or decoded entries.
    Irregularities are reported in the result, never raised.
    """

    entries = decode_content_order(content_order)
    result = ContentOrderValidation()

    if not entries:
        if blocks:
            result.missing_ids = [block.id for block in blocks]
            result.has_issues = True
        log.debug(
            "content_order.validate.complete",
            entries=0,
            blocks=len(blocks),
            orphaned=0,
            missing=len(result.missing_ids),
        )
        return result

    block_ids = frozenset(block.id for block in blocks)
    seen: set[str] = set()

    for entry in entries:
        if isinstance(entry, Single):
            if entry.id in block_ids:
                result.valid_order.append(entry)
                seen.add(entry.id)
            else:
                result.orphaned_ids.append(entry.id)
                result.has_issues = True
            continue

        kept: list[str] = []
        for block_id in entry.ids:
            if block_id in block_ids:
                kept.append(block_id)
                seen.add(block_id)
            else:
                result.orphaned_ids.append(block_id)
                result.has_issues = True
        if kept:
            result.valid_order.append(Group(tuple(kept)))

    for block in blocks:
        if block.id not in seen:
            result.missing_ids.append(block.id)
            result.has_issues = True

    log.debug(
        "content_order.validate.complete",
        entries=len(entries),
        blocks=len(blocks),
        orphaned=len(result.orphaned_ids),
        missing=len(result.missing_ids),
    )
    return result


__all__ = ["ContentOrderValidation", "validate_content_order"]
