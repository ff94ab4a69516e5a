"""Derive a corrected content order from a validation result."""

from __future__ import annotations

from typing import Sequence

from libraries.blocks.models import CONTENT_ORDER_FIELD, Block
from libraries.content_order.entries import OrderEntry, Single, decode_content_order
from libraries.content_order.validator import (
    ContentOrderValidation,
    validate_content_order,
)


def repair_from_validation(validation: ContentOrderValidation) -> list[OrderEntry]:
    """Return the valid entries followed by every missing block id."""

    repaired: list[OrderEntry] = list(validation.valid_order)
    repaired.extend(Single(block_id) for block_id in validation.missing_ids)
    return repaired


def repair_content_order(card: Block | None, blocks: Sequence[Block]) -> list[OrderEntry]:
    """Return a content order for *card* that matches its content *blocks*.

    Valid entries keep their position, references to deleted blocks are
    dropped, and unreferenced blocks are appended individually at the end.
    When nothing is wrong the declared order is returned as-is.

    A missing card, or a card without any fields, yields an empty order.
    """

    if card is None or card.fields is None:
        return []

    content_order = decode_content_order(card.fields.get(CONTENT_ORDER_FIELD))
    validation = validate_content_order(content_order, blocks)
    if not validation.has_issues:
        return content_order
    return repair_from_validation(validation)


__all__ = ["repair_content_order", "repair_from_validation"]
