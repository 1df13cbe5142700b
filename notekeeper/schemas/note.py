"""
Note Schemas.

Pydantic models for the note record and for the inputs that mutate it.

NoteDraft and NoteChanges are the only way external input reaches the
state manager. They accept the loose shapes UI code produces (legacy
``is_pinned``, hex colors, untrimmed text) and turn them into one strict
internal representation. Anything they cannot coerce is a ValidationFailure.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from notekeeper.core.exceptions import ValidationFailure
from notekeeper.core.utils import as_utc
from notekeeper.services.colors import NoteColor, normalize_color

EDITABLE_FIELDS = ("title", "content", "color", "pinned")


def _clean_title(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip() or None
    return value


def _clean_content(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    return value


def _remap_legacy_pinned(data: Any) -> Any:
    if isinstance(data, Mapping) and "is_pinned" in data:
        data = dict(data)
        legacy = data.pop("is_pinned")
        data.setdefault("pinned", legacy)
    return data


class Note(BaseModel):
    """Canonical note record, as held in local state and returned by the store."""

    id: str = Field(min_length=1, description="Note unique identifier")
    title: str | None = Field(default=None, description="Note title")
    content: str = Field(default="", description="Note body")
    color: NoteColor = Field(default=NoteColor.DEFAULT, description="Palette color")
    pinned: bool = Field(default=False, description="Whether the note is pinned")
    created_at: datetime = Field(description="Creation timestamp")
    updated_at: datetime = Field(description="Last update timestamp")

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("color", mode="before")
    @classmethod
    def _normalize_color(cls, value: Any) -> NoteColor:
        return normalize_color(value)

    @field_validator("content", mode="before")
    @classmethod
    def _content_not_null(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("created_at", "updated_at")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    @property
    def is_empty(self) -> bool:
        return not (self.title or "").strip() and not self.content.strip()

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match on title or content."""
        needle = query.lower()
        return needle in (self.title or "").lower() or needle in self.content.lower()


class NoteDraft(BaseModel):
    """Input for creating a note."""

    title: str | None = None
    content: str = ""
    color: NoteColor = NoteColor.DEFAULT
    pinned: bool = False

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="before")
    @classmethod
    def _legacy_shapes(cls, data: Any) -> Any:
        return _remap_legacy_pinned(data)

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, value: Any) -> Any:
        return _clean_title(value)

    @field_validator("content", mode="before")
    @classmethod
    def _strip_content(cls, value: Any) -> Any:
        return _clean_content(value)

    @field_validator("color", mode="before")
    @classmethod
    def _normalize_color(cls, value: Any) -> NoteColor:
        return normalize_color(value)

    @field_validator("pinned", mode="before")
    @classmethod
    def _pinned_not_null(cls, value: Any) -> Any:
        return False if value is None else value

    @model_validator(mode="after")
    def _not_empty(self) -> "NoteDraft":
        if not self.title and not self.content:
            raise ValueError("A note needs a title or content")
        return self


class NoteChanges(BaseModel):
    """
    Sparse change-set for an existing note.

    Only fields explicitly supplied are applied; see fields().
    An explicit ``title=None`` clears the title.
    """

    title: str | None = None
    content: str = ""
    color: NoteColor = NoteColor.DEFAULT
    pinned: bool = False

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="before")
    @classmethod
    def _legacy_shapes(cls, data: Any) -> Any:
        return _remap_legacy_pinned(data)

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, value: Any) -> Any:
        return _clean_title(value)

    @field_validator("content", mode="before")
    @classmethod
    def _strip_content(cls, value: Any) -> Any:
        return _clean_content(value)

    @field_validator("color", mode="before")
    @classmethod
    def _normalize_color(cls, value: Any) -> NoteColor:
        return normalize_color(value)

    @field_validator("pinned", mode="before")
    @classmethod
    def _pinned_not_null(cls, value: Any) -> Any:
        return False if value is None else value

    def fields(self) -> dict[str, Any]:
        """Return only the fields the caller explicitly supplied."""
        return self.model_dump(exclude_unset=True)


def _error_details(error: PydanticValidationError) -> dict[str, Any]:
    return {
        "errors": [
            {
                "field": ".".join(str(part) for part in err["loc"]) or "__root__",
                "message": err["msg"],
            }
            for err in error.errors()
        ],
    }


def parse_draft(data: NoteDraft | Mapping[str, Any]) -> NoteDraft:
    """
    Convert caller input into a NoteDraft.

    Raises:
        ValidationFailure: If the input cannot be coerced or is empty
    """
    if isinstance(data, NoteDraft):
        return data
    try:
        return NoteDraft.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationFailure("Invalid note", details=_error_details(e)) from e


def parse_changes(data: NoteChanges | Mapping[str, Any]) -> NoteChanges:
    """
    Convert caller input into a NoteChanges change-set.

    Raises:
        ValidationFailure: If the input has unknown fields or bad values
    """
    if isinstance(data, NoteChanges):
        return data
    try:
        return NoteChanges.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationFailure("Invalid note changes", details=_error_details(e)) from e
