"""
Notes RPC Backend — Note Service (Operation Handlers)
=======================================================

What:  Business rules of the five note operations plus the greeting payload.
How:   Each operation follows the same skeleton:
           method check (write-only ops) → extract input → validate
           → business checks → store operation → result payload
       Failures are raised as RpcError subclasses; the router renders them.
Who:   Called by the RPC router with the decoded payload; calls NoteStore.
When:  Once per RPC request, inside the store lock and a session scope.

Result Payloads (placed in the success envelope by the router):
    createNote   {"status": "success", "data": {"note": {...}}}
    getNote      {"status": "success", "note": {...}}
    getNotes     {"status": "success", "results": n, "notes": [...]}
    updateNote   {"status": "success", "note": {...}}
    deleteNote   {"status": "success"}
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from notes_rpc.exceptions import (
    BadRequestError,
    ConflictError,
    MethodNotSupportedError,
    NotFoundError,
    UniqueViolation,
)
from notes_rpc.models.note import Note
from notes_rpc.schemas.note import (
    CreateNoteInput,
    FilterInput,
    NoteResponse,
    UpdateNoteInput,
)
from notes_rpc.services.note_store import NoteStore
from notes_rpc.services.validation import validate_input

logger = logging.getLogger(__name__)

GREETING = {"message": "Welcome to Full-Stack tRPC CRUD App"}

WRITE_METHODS = frozenset({"POST"})

DEFAULT_LIMIT = 10
DEFAULT_PAGE = 1

MISSING_NOTE_ID = "Invalid request format: missing noteId"


def utc_now_iso() -> str:
    """ISO-8601 UTC timestamp with microseconds and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")


def get_hello() -> Dict[str, Any]:
    """Static payload for connectivity checks; needs no store."""
    return dict(GREETING)


def _require_write(method: str) -> None:
    if method.upper() not in WRITE_METHODS:
        raise MethodNotSupportedError()


def _extract_note_id(container: Any) -> str:
    """noteId from an input object; missing, empty or non-scalar ids are rejected."""
    note_id = container.get("noteId") if isinstance(container, dict) else None
    if isinstance(note_id, bool) or not isinstance(note_id, (str, int)) or not note_id:
        raise BadRequestError(message=MISSING_NOTE_ID)
    return str(note_id)


def _serialize(note: Note) -> Dict[str, Any]:
    return NoteResponse.model_validate(note).to_wire()


class NoteService:
    """
    Operation handlers for the notes RPC surface.

    Dependencies are injected per request:
        store: NoteStore bound to the operation's session
        clock: returns the current timestamp string (tests pin it)
    """

    def __init__(self, store: NoteStore, clock: Optional[Callable[[], str]] = None):
        self.store = store
        self.clock = clock or utc_now_iso

    async def create_note(self, method: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a note with a server-generated id.

        Raises:
            MethodNotSupportedError: not a POST
            BadRequestError: input missing, not an object, or invalid
            ConflictError: title already used (pre-check or constraint race)
        """
        _require_write(method)

        raw = payload.get("input")
        if not isinstance(raw, dict):
            raise BadRequestError(message="Invalid request format")

        data = validate_input(CreateNoteInput, raw)

        if await self.store.title_exists(data.title):
            raise ConflictError(context={"title": data.title})

        now = self.clock()
        note = Note(
            id=str(uuid.uuid4()),
            title=data.title,
            content=data.content,
            category=data.category,
            published=1 if data.published else 0,
            created_at=now,
            updated_at=now,
        )

        try:
            await self.store.insert(note)
        except UniqueViolation as exc:
            # Another create won the race between pre-check and insert
            logger.warning("Insert rejected by unique constraint on '%s'", exc.column)
            raise ConflictError(context={"title": data.title}) from exc

        created = await self.store.select_by_id(note.id)
        logger.info("Note created: %s", note.id)
        return {"status": "success", "data": {"note": _serialize(created or note)}}

    async def get_note(self, method: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Fetch one note by id.

        Raises:
            BadRequestError: noteId missing
            NotFoundError: no note with that id
        """
        note_id = _extract_note_id(payload.get("input"))

        note = await self.store.select_by_id(note_id)
        if note is None:
            raise NotFoundError(resource_id=note_id)

        return {"status": "success", "note": _serialize(note)}

    async def get_notes(self, method: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        One page of notes, newest first.

        Absent or zero limit/page fall back to 10/1; offset = (page - 1) * limit.

        Raises:
            BadRequestError: limit/page present with the wrong type or negative
        """
        raw = payload.get("input")
        if not isinstance(raw, dict):
            raw = {}

        filters = validate_input(FilterInput, raw)
        limit = filters.limit or DEFAULT_LIMIT
        page = filters.page or DEFAULT_PAGE
        offset = (page - 1) * limit

        notes = await self.store.select_page(limit=limit, offset=offset)
        return {
            "status": "success",
            "results": len(notes),
            "notes": [_serialize(note) for note in notes],
        }

    async def update_note(self, method: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply a partial update.

        Only fields present in `body` change; updatedAt is always refreshed.
        Keeping the current title is never a conflict.

        Raises:
            MethodNotSupportedError: not a POST
            BadRequestError: params.noteId missing or body invalid
            NotFoundError: no note with that id
            ConflictError: new title belongs to another note
        """
        _require_write(method)

        raw = payload.get("input")
        params = raw.get("params") if isinstance(raw, dict) else None
        note_id = _extract_note_id(params)

        body = raw.get("body")
        if body is None:
            body = {}
        changes = validate_input(UpdateNoteInput, body).changes()

        current = await self.store.select_by_id(note_id)
        if current is None:
            raise NotFoundError(resource_id=note_id)

        new_title = changes.get("title")
        if (
            new_title is not None
            and new_title != current.title
            and await self.store.title_exists(new_title)
        ):
            raise ConflictError(context={"title": new_title})

        try:
            await self.store.update_fields(note_id, changes, updated_at=self.clock())
        except UniqueViolation as exc:
            logger.warning("Update of %s rejected by unique constraint on '%s'", note_id, exc.column)
            raise ConflictError(context={"title": new_title}) from exc

        updated = await self.store.select_by_id(note_id)
        if updated is None:
            raise NotFoundError(resource_id=note_id)

        logger.info("Note updated: %s (fields=%s)", note_id, sorted(changes))
        return {"status": "success", "note": _serialize(updated)}

    async def delete_note(self, method: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Physically delete a note.

        Raises:
            MethodNotSupportedError: not a POST
            BadRequestError: noteId missing
            NotFoundError: no note with that id
        """
        _require_write(method)

        note_id = _extract_note_id(payload.get("input"))

        if await self.store.select_by_id(note_id) is None:
            raise NotFoundError(resource_id=note_id)

        await self.store.delete_by_id(note_id)
        logger.info("Note deleted: %s", note_id)
        return {"status": "success"}
