"""Repair stored card content orders through a block store."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

import structlog

from libraries.blocks.errors import BlockNotFoundError, InvalidBlockKindError
from libraries.blocks.models import CONTENT_ORDER_FIELD, TYPE_CARD, Block
from libraries.blocks.store import BlockStore
from libraries.content_order.entries import (
    OrderEntry,
    decode_content_order,
    encode_content_order,
)
from libraries.content_order.repair import repair_content_order
from libraries.content_order.validator import (
    ContentOrderValidation,
    validate_content_order,
)

log = structlog.get_logger(__name__)

ProgressCallback = Callable[[int], None]


@dataclass(slots=True)
class ContentOrderRepairOutcome:
    """What a repair run found and whether it rewrote the card."""

    card_id: str
    changed: bool
    validation: ContentOrderValidation
    previous_order: list[OrderEntry]
    repaired_order: list[OrderEntry]

    def to_dict(self) -> dict[str, Any]:
        return {
            "card_id": self.card_id,
            "changed": self.changed,
            "orphaned_ids": list(self.validation.orphaned_ids),
            "missing_ids": list(self.validation.missing_ids),
            "previous_order": encode_content_order(self.previous_order),
            "repaired_order": encode_content_order(self.repaired_order),
        }


class ContentOrderRepairService:
    """Load a card and its content blocks, then persist a corrected order.

    Writes are conditioned on the card's ``update_at`` as it was read, so a
    concurrent edit surfaces as :class:`~libraries.blocks.errors.BlockConflictError`
    instead of being overwritten.  Callers can simply retry.
    """

    def __init__(self, store: BlockStore, *, parent_kind: str = TYPE_CARD) -> None:
        self.store = store
        self.parent_kind = parent_kind

    def _load_card(self, card_id: str) -> Block:
        card = self.store.get_block(card_id)
        if card is None:
            raise BlockNotFoundError(card_id)
        if card.type != self.parent_kind:
            raise InvalidBlockKindError(
                card_id, actual=card.type, expected=self.parent_kind
            )
        return card

    def check_card_block_order(self, card_id: str) -> ContentOrderValidation:
        """Validate the content order of *card_id* without modifying it."""

        card = self._load_card(card_id)
        blocks = self.store.get_blocks_with_parent(card_id)
        return validate_content_order(
            decode_content_order(card.get_field(CONTENT_ORDER_FIELD)), blocks
        )

    def repair_card_block_order(
        self, card_id: str, modified_by: str
    ) -> ContentOrderRepairOutcome:
        """Repair the content order of *card_id* on behalf of *modified_by*.

        Nothing is written when the repaired order equals the stored one.
        """

        card = self._load_card(card_id)
        blocks = self.store.get_blocks_with_parent(card_id)

        previous = decode_content_order(card.get_field(CONTENT_ORDER_FIELD))
        validation = validate_content_order(previous, blocks)
        repaired = repair_content_order(card, blocks)

        if repaired == previous:
            log.debug("content_order.repair.unchanged", card_id=card_id)
            return ContentOrderRepairOutcome(
                card_id=card_id,
                changed=False,
                validation=validation,
                previous_order=previous,
                repaired_order=repaired,
            )

        self.store.patch_block_fields(
            card_id,
            {CONTENT_ORDER_FIELD: encode_content_order(repaired)},
            modified_by=modified_by,
            expected_update_at=card.update_at,
        )
        log.info(
            "content_order.repair.applied",
            card_id=card_id,
            modified_by=modified_by,
            orphaned=len(validation.orphaned_ids),
            missing=len(validation.missing_ids),
        )
        return ContentOrderRepairOutcome(
            card_id=card_id,
            changed=True,
            validation=validation,
            previous_order=previous,
            repaired_order=repaired,
        )

    def repair_board(
        self,
        board_id: str,
        modified_by: str,
        *,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> list[ContentOrderRepairOutcome]:
        """Repair every card on *board_id* and return one outcome per card."""

        cards = self.store.get_blocks_with_type(board_id, self.parent_kind)
        outcomes: list[ContentOrderRepairOutcome] = []
        for card in cards:
            outcomes.append(self.repair_card_block_order(card.id, modified_by))
            if progress_callback:
                progress_callback(1)

        log.info(
            "content_order.repair_board.complete",
            board_id=board_id,
            cards=len(outcomes),
            changed=sum(1 for outcome in outcomes if outcome.changed),
        )
        return outcomes


__all__ = [
    "ContentOrderRepairOutcome",
    "ContentOrderRepairService",
    "ProgressCallback",
]
