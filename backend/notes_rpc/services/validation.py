"""
Notes RPC Backend — Input Validation
======================================

What:  Validates an untyped decoded value against one of the input schemas.
How:   Runs pydantic validation and converts a failure into BadRequestError
       with a short, human-readable message per offending field. The raw
       pydantic error structure is never returned to the client.
Who:   Called by every NoteService operation that accepts input.
"""

import logging
from typing import Any, List, Type, TypeVar

from pydantic import BaseModel, ValidationError

from notes_rpc.exceptions import BadRequestError

logger = logging.getLogger(__name__)

InputModel = TypeVar("InputModel", bound=BaseModel)


def _field_name(loc: tuple) -> str:
    return ".".join(str(part) for part in loc) or "input"


def _describe(error: dict) -> str:
    field = _field_name(error.get("loc", ()))
    label = field[:1].upper() + field[1:]
    if error.get("type") == "missing":
        return f"{label} is required"
    return f"{label}: {error.get('msg', 'Invalid value')}"


def validate_input(schema: Type[InputModel], raw: Any) -> InputModel:
    """
    Validate `raw` against `schema`.

    Returns:
        A populated instance of `schema` (unknown keys dropped).

    Raises:
        BadRequestError: required field missing or wrong type. The message
        joins one entry per offending field, e.g.
        "Title is required; Published: Input should be a valid boolean".
    """
    try:
        return schema.model_validate(raw)
    except ValidationError as exc:
        errors = exc.errors()
        fields: List[str] = [_field_name(e.get("loc", ())) for e in errors]
        message = "; ".join(_describe(e) for e in errors)
        logger.debug("%s rejected: %s", schema.__name__, message)
        raise BadRequestError(message=message, fields=fields) from None
