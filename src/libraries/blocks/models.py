"""Block records exchanged with the block store."""

from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field

TYPE_CARD = "card"

CONTENT_ORDER_FIELD = "contentOrder"


class Block(BaseModel):
    """A stored board entity.

    Cards own content blocks through ``parent_id`` and keep the presentation
    order of those blocks in ``fields["contentOrder"]``.  Serialised payloads
    use the camelCase names of the wire format; either spelling is accepted
    when loading.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    type: str
    parent_id: str | None = Field(default=None, alias="parentId")
    board_id: str | None = Field(default=None, alias="boardId")
    title: str = ""
    fields: Dict[str, Any] | None = None
    create_at: int = Field(default=0, alias="createAt")
    update_at: int = Field(default=0, alias="updateAt")
    created_by: str | None = Field(default=None, alias="createdBy")
    modified_by: str | None = Field(default=None, alias="modifiedBy")

    def get_field(self, name: str, default: Any = None) -> Any:
        if self.fields is None:
            return default
        return self.fields.get(name, default)

    def to_storage(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)

    @classmethod
    def from_storage(cls, payload: Dict[str, Any]) -> "Block":
        return cls.model_validate(payload)


__all__ = [
    "Block",
    "CONTENT_ORDER_FIELD",
    "TYPE_CARD",
]
