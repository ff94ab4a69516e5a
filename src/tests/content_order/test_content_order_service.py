from __future__ import annotations

from typing import Any, Mapping

import pytest

from libraries.blocks.errors import (
    BlockConflictError,
    BlockNotFoundError,
    BlockStoreError,
    InvalidBlockKindError,
)
from libraries.blocks.models import Block
from libraries.blocks.store import InMemoryBlockStore
from libraries.content_order.service import ContentOrderRepairService


def _card(card_id: str, content_order: Any, *, board_id: str = "board1") -> Block:
    return Block(
        id=card_id,
        type="card",
        board_id=board_id,
        fields={"contentOrder": content_order, "icon": "x"},
        update_at=1,
    )


def _content(block_id: str, parent_id: str, *, board_id: str = "board1") -> Block:
    return Block(
        id=block_id, type="text", parent_id=parent_id, board_id=board_id, update_at=1
    )


@pytest.fixture()
def store() -> InMemoryBlockStore:
    return InMemoryBlockStore(
        [
            _content("block1", "card1"),
            _content("block2", "card1"),
            _content("block3", "card1"),
            _card("card1", ["block1", "ghost", "block2"]),
        ]
    )


def test_repair_removes_orphans_and_appends_missing(store: InMemoryBlockStore) -> None:
    service = ContentOrderRepairService(store)

    outcome = service.repair_card_block_order("card1", "user-id")

    assert outcome.changed is True
    assert outcome.validation.orphaned_ids == ["ghost"]
    assert outcome.validation.missing_ids == ["block3"]

    card = store.get_block("card1")
    assert card is not None
    assert card.fields == {"contentOrder": ["block1", "block2", "block3"], "icon": "x"}
    assert card.modified_by == "user-id"
    assert card.update_at > 1


def test_repair_is_a_noop_when_consistent() -> None:
    store = InMemoryBlockStore(
        [
            _content("block1", "card1"),
            _content("block2", "card1"),
            _card("card1", ["block1", ["block2"], None]),
        ]
    )
    service = ContentOrderRepairService(store)

    outcome = service.repair_card_block_order("card1", "user-id")

    assert outcome.changed is False
    card = store.get_block("card1")
    assert card is not None
    assert card.update_at == 1
    assert card.modified_by is None
    assert card.fields == {"contentOrder": ["block1", ["block2"], None], "icon": "x"}


def test_second_repair_does_not_write(store: InMemoryBlockStore) -> None:
    service = ContentOrderRepairService(store)
    service.repair_card_block_order("card1", "user-id")
    card = store.get_block("card1")
    assert card is not None

    outcome = service.repair_card_block_order("card1", "other-user")

    assert outcome.changed is False
    repaired = store.get_block("card1")
    assert repaired is not None
    assert repaired.update_at == card.update_at
    assert repaired.modified_by == "user-id"


def test_repair_fills_an_absent_content_order() -> None:
    card = Block(id="card1", type="card", fields={"icon": "x"}, update_at=1)
    store = InMemoryBlockStore(
        [card, _content("block1", "card1"), _content("block2", "card1")]
    )

    ContentOrderRepairService(store).repair_card_block_order("card1", "user-id")

    stored = store.get_block("card1")
    assert stored is not None
    assert stored.fields == {"icon": "x", "contentOrder": ["block1", "block2"]}


def test_missing_card_raises_not_found() -> None:
    service = ContentOrderRepairService(InMemoryBlockStore())

    with pytest.raises(BlockNotFoundError):
        service.repair_card_block_order("nope", "user-id")


@pytest.mark.parametrize("children", [[], ["block1"]])
def test_non_card_is_rejected(children: list[str]) -> None:
    board = Block(id="board1", type="board", fields={"contentOrder": []})
    store = InMemoryBlockStore(
        [board, *(_content(block_id, "board1") for block_id in children)]
    )
    service = ContentOrderRepairService(store)

    with pytest.raises(InvalidBlockKindError, match="not a card"):
        service.repair_card_block_order("board1", "user-id")
    with pytest.raises(InvalidBlockKindError, match="not a card"):
        service.check_card_block_order("board1")


def test_check_does_not_modify(store: InMemoryBlockStore) -> None:
    service = ContentOrderRepairService(store)

    validation = service.check_card_block_order("card1")

    assert validation.has_issues is True
    assert validation.orphaned_ids == ["ghost"]
    card = store.get_block("card1")
    assert card is not None
    assert card.fields is not None
    assert card.fields["contentOrder"] == ["block1", "ghost", "block2"]


class _StaleReadStore(InMemoryBlockStore):
    """Simulates a concurrent edit landing between the read and the write."""

    def get_blocks_with_parent(self, parent_id: str) -> list[Block]:
        blocks = super().get_blocks_with_parent(parent_id)
        super().patch_block_fields(parent_id, {"title": "edited"}, modified_by="other")
        return blocks


def test_concurrent_edit_raises_conflict() -> None:
    store = _StaleReadStore(
        [_content("block1", "card1"), _card("card1", ["ghost"])]
    )
    service = ContentOrderRepairService(store)

    with pytest.raises(BlockConflictError):
        service.repair_card_block_order("card1", "user-id")

    card = store.get_block("card1")
    assert card is not None
    assert card.fields is not None
    assert card.fields["contentOrder"] == ["ghost"]


class _FailingStore(InMemoryBlockStore):
    def patch_block_fields(
        self,
        block_id: str,
        updated_fields: Mapping[str, Any],
        *,
        modified_by: str,
        expected_update_at: int | None = None,
    ) -> Block:
        raise BlockStoreError("disk full")


def test_store_errors_propagate() -> None:
    store = _FailingStore([_content("block1", "card1"), _card("card1", [])])

    with pytest.raises(BlockStoreError, match="disk full"):
        ContentOrderRepairService(store).repair_card_block_order("card1", "user-id")


def test_repair_board_visits_every_card() -> None:
    store = InMemoryBlockStore(
        [
            _card("card1", ["block1"]),
            _card("card2", ["ghost"]),
            _card("card3", [], board_id="board2"),
            _content("block1", "card1"),
            _content("block2", "card2"),
        ]
    )
    service = ContentOrderRepairService(store)
    calls: list[int] = []

    outcomes = service.repair_board("board1", "user-id", progress_callback=calls.append)

    assert [outcome.card_id for outcome in outcomes] == ["card1", "card2"]
    assert [outcome.changed for outcome in outcomes] == [False, True]
    assert calls == [1, 1]
    card2 = store.get_block("card2")
    assert card2 is not None
    assert card2.fields is not None
    assert card2.fields["contentOrder"] == ["block2"]
    assert outcomes[1].to_dict()["repaired_order"] == ["block2"]


def test_custom_parent_kind() -> None:
    store = InMemoryBlockStore(
        [
            Block(id="page1", type="page", fields={"contentOrder": []}),
            _content("block1", "page1"),
        ]
    )
    service = ContentOrderRepairService(store, parent_kind="page")

    outcome = service.repair_card_block_order("page1", "user-id")

    assert outcome.changed is True
    with pytest.raises(InvalidBlockKindError, match="not a card"):
        ContentOrderRepairService(store).repair_card_block_order("page1", "user-id")
