"""
grimoire/models/base.py -- Base source models shared by every document type.

``ItemSource`` is the persisted shape common to all items: identity,
display fields, and a free-form ``data`` block whose unknown keys are kept.
Unknown *top-level* keys are dropped on validation, which is what strips
overlay bookkeeping (``overlayType``) from a constructed variant.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from grimoire.errors import DocumentValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


class ItemSystemData(BaseModel):
    """The ``data`` block of an item source."""

    model_config = ConfigDict(extra="allow")

    description: dict[str, Any] = Field(default_factory=lambda: {"value": ""})
    slug: str | None = None
    rules: list[Any] = Field(default_factory=list)


class ItemSource(BaseModel):
    """Persisted source of an item owned by an actor (or free-standing)."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(alias="_id", min_length=1)
    name: str = Field(min_length=1)
    type: str
    img: str = ""
    sort: int = 0
    flags: dict[str, Any] = Field(default_factory=dict)
    data: ItemSystemData = Field(default_factory=ItemSystemData)

    def to_source(self) -> dict[str, Any]:
        """Dump back to the on-disk dict shape (``_id`` alias, extras kept)."""
        return self.model_dump(by_alias=True)


def validate_source(model: type[ModelT], source: dict[str, Any]) -> ModelT:
    """Validate *source* with *model*, converting pydantic errors into a
    ``DocumentValidationError`` with a readable message."""
    try:
        return model.model_validate(source)
    except ValidationError as exc:
        issues = [humanize_pydantic_error(err) for err in exc.errors()]
        name = source.get("name") or source.get("_id") or "document"
        raise DocumentValidationError(
            f"'{name}' is not a valid {model.__name__}: " + " ".join(issues),
            issues,
        ) from exc


def humanize_pydantic_error(err: dict) -> str:
    """Convert a single pydantic error dict to a human-friendly message."""
    loc = err.get("loc", ())
    msg = err.get("msg", "Validation error")
    err_type = err.get("type", "")

    field_path = " -> ".join(str(part) for part in loc if part != "__root__")
    if not field_path:
        field_path = "(root)"

    if err_type == "missing":
        return f"The field '{field_path}' is required but was not provided."
    elif err_type == "literal_error":
        return f"The field '{field_path}' has an invalid value. {msg}."
    elif "type" in err_type:
        return f"The field '{field_path}' has the wrong type. {msg}."
    else:
        return f"Field '{field_path}': {msg}."
