"""Typed representation of a card's ``contentOrder`` attribute.

The stored attribute is loosely shaped JSON: a list whose elements are block
ids, lists of block ids rendered together, or ``null``.  It is decoded once
into :class:`Single` and :class:`Group` entries so the validation code never
has to inspect raw values.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Union


@dataclass(frozen=True, slots=True)
class Single:
    """Reference to one content block."""

    id: str


@dataclass(frozen=True, slots=True)
class Group:
    """Blocks that must stay adjacent and in this relative order."""

    ids: tuple[str, ...]


OrderEntry = Union[Single, Group]


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _decode_entry(item: Any) -> OrderEntry | None:
    if item is None:
        return None
    if isinstance(item, (Single, Group)):
        return item
    if isinstance(item, str):
        return Single(item)
    if _is_sequence(item):
        # Only block ids are kept; nulls and nested lists are not addressable.
        return Group(tuple(sub for sub in item if isinstance(sub, str)))
    return None


def decode_content_order(raw: Any) -> list[OrderEntry]:
    """Return the entries described by a raw ``contentOrder`` value.

    Anything that is not a list or tuple decodes to an empty ordering.
    Elements of an unsupported shape are dropped.
    """

    if not _is_sequence(raw):
        return []
    entries: list[OrderEntry] = []
    for item in raw:
        entry = _decode_entry(item)
        if entry is not None:
            entries.append(entry)
    return entries


def encode_content_order(entries: Iterable[OrderEntry]) -> list[str | list[str]]:
    """Return the JSON shape stored on the card for *entries*."""

    encoded: list[str | list[str]] = []
    for entry in entries:
        if isinstance(entry, Group):
            encoded.append(list(entry.ids))
        else:
            encoded.append(entry.id)
    return encoded


def entry_ids(entry: OrderEntry) -> Iterator[str]:
    """Yield the block ids referenced by *entry*."""

    if isinstance(entry, Group):
        yield from entry.ids
    else:
        yield entry.id


__all__ = [
    "Group",
    "OrderEntry",
    "Single",
    "decode_content_order",
    "encode_content_order",
    "entry_ids",
]
