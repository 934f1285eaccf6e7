"""
Note schemas.

A note travels as a document in the store: the document id is kept apart
from the record body, and the body uses the stored key names
(``userId``, ``createdAt``).
"""

from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..exceptions import DecodeError


class NoteRecord(BaseModel):
    """Stored body of a note document, validated strictly on the way in."""

    model_config = ConfigDict(strict=True, extra="ignore", populate_by_name=True)

    title: str = Field(default="")
    content: str = Field(default="")
    owner_id: str = Field(default="", alias="userId")
    # Ordering key of the live query, so it has no default
    created_at: int = Field(alias="createdAt")


class Note(BaseModel):
    """A single note as seen by the UI layer.

    ``id`` is ``None`` until the store mints one on first save. ``owner_id``
    and ``created_at`` are owned by the synchronizer; values supplied by
    callers are ignored on save.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: Optional[str] = Field(default=None, description="Document id, None until persisted")
    title: str = Field(default="", description="Note title")
    content: str = Field(default="", description="Note body")
    owner_id: str = Field(default="", alias="userId", description="Owning identity uid")
    created_at: int = Field(default=0, alias="createdAt", description="Creation time in ms")

    @property
    def is_persisted(self) -> bool:
        return bool(self.id)

    @classmethod
    def from_record(cls, doc_id: Any, data: Any) -> "Note":
        """Decode one store document, raising DecodeError if it is malformed."""
        if not isinstance(doc_id, str) or not doc_id:
            raise DecodeError("Document has no usable id", record_id=None, details={"id": repr(doc_id)})
        if not isinstance(data, Mapping):
            raise DecodeError(
                f"Document {doc_id} body is not a mapping",
                record_id=doc_id,
                details={"type": type(data).__name__},
            )

        try:
            record = NoteRecord.model_validate(dict(data))
        except ValidationError as e:
            raise DecodeError(
                f"Document {doc_id} is malformed",
                record_id=doc_id,
                details={"errors": e.errors(include_url=False, include_context=False)},
            ) from e

        return cls(
            id=doc_id,
            title=record.title,
            content=record.content,
            owner_id=record.owner_id,
            created_at=record.created_at,
        )

    def to_record(self) -> Dict[str, Any]:
        """Encode the record body (never includes the document id)."""
        return self.model_dump(by_alias=True, exclude={"id"})
