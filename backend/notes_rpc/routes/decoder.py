"""
Notes RPC Backend — Request Decoder
=====================================

What:  Turns the transport-level parts of a request into the logical payload
       `{"input": ...}` an operation works on.
How:   Pure function of (method, headers, query, body, batch); no I/O, no
       framework objects, so every wire convention is unit-testable.
Who:   Called by the RPC router before dispatching to a NoteService handler.

Wire Conventions:
    GET   payload is the JSON text of the `input` query parameter
          (absent parameter → {"input": {}})
    POST  payload is the JSON body; Content-Type must declare JSON
    batch when the `batch` query parameter is present and the decoded
          value is an object with key "0", that entry is the input
    wrap  a decoded object that already has an `input` key is used as-is,
          anything else becomes {"input": <value>}

    Every decode failure (bad JSON, wrong content type, other methods)
    yields {"input": {}}; validation downstream reports the real problem.
"""

import json
import logging
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

READ_METHODS = frozenset({"GET"})
WRITE_METHODS = frozenset({"POST"})

JSON_CONTENT_TYPE = "application/json"

_EMPTY = object()


class DecodeError(ValueError):
    """Transport-level payload could not be decoded."""


def is_batch(query: Mapping[str, str]) -> bool:
    """Batch mode is keyed on the parameter's presence; its value is irrelevant."""
    return "batch" in query


def _header(headers: Mapping[str, str], name: str) -> str:
    # Starlette headers are case-insensitive; plain dicts in tests may not be
    value = headers.get(name)
    if value is None:
        value = headers.get(name.title())
    return value or ""


def _read_raw(
    method: str,
    headers: Mapping[str, str],
    query: Mapping[str, str],
    body: Optional[bytes],
) -> Any:
    method = method.upper()

    if method in READ_METHODS:
        input_param = query.get("input")
        if not input_param:
            return _EMPTY
        try:
            return json.loads(input_param)
        except ValueError as exc:
            raise DecodeError(f"Malformed input parameter: {exc}") from exc

    if method in WRITE_METHODS:
        content_type = _header(headers, "content-type")
        if JSON_CONTENT_TYPE not in content_type.lower():
            raise DecodeError(f"Unsupported content type: {content_type}")
        try:
            return json.loads(body or b"")
        except ValueError as exc:
            raise DecodeError(f"Malformed JSON body: {exc}") from exc

    raise DecodeError(f"Unsupported method: {method}")


def decode_payload(
    method: str,
    headers: Mapping[str, str],
    query: Mapping[str, str],
    body: Optional[bytes],
    batch: bool,
) -> Dict[str, Any]:
    """
    Extract the logical payload of an RPC call.

    Returns:
        A dict with an `input` key. Never raises for malformed transport.

    Example:
        decode_payload("GET", {}, {"input": '{"noteId": "n1"}'}, None, False)
        → {"input": {"noteId": "n1"}}

        decode_payload("POST", {"content-type": "application/json"}, {"batch": "1"},
                       b'{"0": {"title": "A"}}', True)
        → {"input": {"title": "A"}}
    """
    try:
        raw = _read_raw(method, headers, query, body)
    except DecodeError as exc:
        logger.debug("Payload decode failed, using empty input: %s", exc)
        return {"input": {}}

    if raw is _EMPTY:
        return {"input": {}}

    if batch and isinstance(raw, dict) and "0" in raw:
        return {"input": raw["0"]}

    if isinstance(raw, dict) and "input" in raw:
        return raw

    return {"input": raw}
