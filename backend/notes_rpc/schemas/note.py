"""
Notes RPC Backend — Pydantic Request/Response Schemas
=======================================================

What:  Pydantic models defining the RPC contract.
How:   Input models validate the untyped, already-decoded JSON payload of an
       operation; response models turn ORM rows into wire entities.
Who:   Input models are used by NoteService via `validate_input`; response
       models by NoteService and the health route.

Input rules shared by every input model:
    - Types are strict: 1 is not a string, "true" is not a boolean
    - Unknown fields are silently ignored
    - Fields are optional, not nullable: an explicit null is a type error
      (except the pagination fields of getNotes, where null means default)
"""

from typing import Any, ClassVar, Dict, FrozenSet, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

# 2**31 - 1; (page - 1) * limit stays below 2**62
MAX_PAGE_VALUE = 2_147_483_647


# ══════════════════════════════════════════════════════════════════════════
# Input Models — What the client sends as `input`
# ══════════════════════════════════════════════════════════════════════════


class _RpcInput(BaseModel):
    """Common configuration for operation inputs."""

    model_config = {"strict": True, "extra": "ignore"}

    # Fields where an explicit null means "use the default"
    nullable_fields: ClassVar[FrozenSet[str]] = frozenset()

    @field_validator("*", mode="before")
    @classmethod
    def reject_null(cls, v: Any, info: ValidationInfo) -> Any:
        # Validators never run for omitted fields, only for explicit values
        if v is None and info.field_name not in cls.nullable_fields:
            raise PydanticCustomError("null_not_allowed", "Value must not be null")
        return v


class CreateNoteInput(_RpcInput):
    """
    What:  Payload of createNote.
    Required: title (non-empty), content. Optional: category, published.
    """
    title: str = Field(min_length=1)
    content: str
    category: Optional[str] = None
    published: Optional[bool] = None


class UpdateNoteInput(_RpcInput):
    """
    What:  `body` of updateNote; every field optional, an empty body is legal.
    How:   Only fields present in the payload are written
           (see `changes()`); omitted fields keep their stored value.
    """
    title: Optional[str] = Field(default=None, min_length=1)
    content: Optional[str] = None
    category: Optional[str] = None
    published: Optional[bool] = None

    def changes(self) -> Dict[str, Any]:
        """Fields explicitly present in the request, by column attribute."""
        return {name: getattr(self, name) for name in self.model_fields_set}


class FilterInput(_RpcInput):
    """
    What:  Payload of getNotes (offset pagination).

    Defaults:
        limit: 10 items per page
        page:  1 (first page)
    0 and null are treated like an omitted value by the handler.
    Integral floats (2.0) count as integers. Both values are capped at
    MAX_PAGE_VALUE so the computed offset fits a 64-bit SQLite INTEGER.
    """
    limit: Optional[int] = Field(default=10, ge=0, le=MAX_PAGE_VALUE)
    page: Optional[int] = Field(default=1, ge=0, le=MAX_PAGE_VALUE)

    nullable_fields: ClassVar[FrozenSet[str]] = frozenset({"limit", "page"})

    @field_validator("*", mode="before")
    @classmethod
    def accept_integral_float(cls, v: Any) -> Any:
        if isinstance(v, float) and v.is_integer():
            return int(v)
        return v


# ══════════════════════════════════════════════════════════════════════════
# Response Models — What the API returns inside the envelope
# ══════════════════════════════════════════════════════════════════════════


class NoteResponse(BaseModel):
    """
    What:  Wire representation of a stored note.
    How:   Built from the ORM row with `model_validate(note)`, serialized
           with `to_wire()`.

    Row mapping:
        published: stored as 0/1 (possibly NULL) → real boolean
        category:  NULL or empty → omitted from the output
    """
    id: str
    title: str
    content: str
    category: Optional[str] = None
    published: bool = False
    created_at: str = Field(serialization_alias="createdAt")
    updated_at: str = Field(serialization_alias="updatedAt")

    model_config = {"from_attributes": True}

    @field_validator("published", mode="before")
    @classmethod
    def coerce_published(cls, v: Any) -> bool:
        return v is True or v == 1

    @field_validator("category", mode="before")
    @classmethod
    def blank_category(cls, v: Any) -> Optional[str]:
        return v or None

    def to_wire(self) -> Dict[str, Any]:
        """camelCase dict with absent category left out."""
        return self.model_dump(by_alias=True, exclude_none=True)


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and store status.
    Who:   Returned by GET /health for container probes.
    """
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Store connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
