"""Content order validation and repair for board cards."""

from libraries.content_order.entries import (
    Group,
    OrderEntry,
    Single,
    decode_content_order,
    encode_content_order,
    entry_ids,
)
from libraries.content_order.repair import repair_content_order, repair_from_validation
from libraries.content_order.service import (
    ContentOrderRepairOutcome,
    ContentOrderRepairService,
)
from libraries.content_order.validator import (
    ContentOrderValidation,
    validate_content_order,
)

__all__ = [
    "ContentOrderRepairOutcome",
    "ContentOrderRepairService",
    "ContentOrderValidation",
    "Group",
    "OrderEntry",
    "Single",
    "decode_content_order",
    "encode_content_order",
    "entry_ids",
    "repair_content_order",
    "repair_from_validation",
    "validate_content_order",
]
