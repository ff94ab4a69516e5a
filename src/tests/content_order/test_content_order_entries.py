from __future__ import annotations

import pytest

from libraries.content_order.entries import (
    Group,
    Single,
    decode_content_order,
    encode_content_order,
)


@pytest.mark.parametrize("raw", [None, "invalid", 12, {"block1": True}])
def test_non_sequence_values_decode_to_empty(raw: object) -> None:
    assert decode_content_order(raw) == []


def test_decode_keeps_groups_one_level_deep() -> None:
    raw = ["block1", None, ("block2", None, ["block3"], "block4"), [], 5]

    assert decode_content_order(raw) == [
        Single("block1"),
        Group(("block2", "block4")),
        Group(()),
    ]


def test_decode_passes_through_entries() -> None:
    entries = [Single("block1"), Group(("block2",))]

    assert decode_content_order(entries) == entries


def test_encode_produces_stored_shape() -> None:
    assert encode_content_order([Single("block1"), Group(("block2", "block3"))]) == [
        "block1",
        ["block2", "block3"],
    ]
