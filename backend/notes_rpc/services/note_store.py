"""
Notes RPC Backend — Note Store
================================

What:  Owns every statement executed against the `notes` table.
How:   SQLAlchemy Core/ORM expressions on an AsyncSession; values are always
       bound parameters. A uniqueness rejection from the database is
       translated into `UniqueViolation` here and nowhere else.
Who:   Constructed per operation with the operation's session and handed
       to NoteService.

Failure Contract:
    UniqueViolation   title (or id) collided with an existing row
    anything else     propagates unchanged (becomes INTERNAL_SERVER_ERROR)
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, desc, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from notes_rpc.exceptions import UniqueViolation
from notes_rpc.models.note import Note

logger = logging.getLogger(__name__)

# Columns updateNote is allowed to touch
UPDATABLE_FIELDS = ("title", "content", "category", "published")


def _is_unique_violation(exc: IntegrityError) -> bool:
    """
    True when the driver reports a UNIQUE/PRIMARY KEY constraint failure.

    sqlite3 exposes the extended result code on Python 3.11+; older
    interpreters only carry it in the message.
    """
    orig = exc.orig
    error_name = getattr(orig, "sqlite_errorname", None)
    if error_name:
        return error_name in ("SQLITE_CONSTRAINT_UNIQUE", "SQLITE_CONSTRAINT_PRIMARYKEY")
    return "UNIQUE constraint failed" in str(orig)


def _violated_column(exc: IntegrityError) -> str:
    # sqlite message: "UNIQUE constraint failed: notes.title"
    text = str(exc.orig)
    if ":" in text:
        return text.rsplit(":", 1)[1].strip().split(".")[-1]
    return "title"


class NoteStore:
    """
    Persistence operations for notes.

    The store never commits; the surrounding `session_scope` owns the
    transaction. Writes are flushed immediately so constraint violations
    surface inside the call that caused them.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def title_exists(self, title: str) -> bool:
        """Case-sensitive equality check against every stored title."""
        result = await self.session.execute(
            select(func.count(Note.id)).where(Note.title == title)
        )
        return (result.scalar() or 0) > 0

    async def insert(self, note: Note) -> Note:
        """
        Insert a fully populated note.

        Raises:
            UniqueViolation: title already taken (lost race with the pre-check)
        """
        self.session.add(note)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            await self.session.rollback()
            if _is_unique_violation(exc):
                raise UniqueViolation(_violated_column(exc)) from exc
            raise
        return note

    async def select_by_id(self, note_id: str) -> Optional[Note]:
        # populate_existing: rows changed by update_fields in this session are re-read
        result = await self.session.execute(
            select(Note)
            .where(Note.id == note_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def select_page(self, limit: int, offset: int) -> List[Note]:
        """Newest first by createdAt; `offset` rows skipped, at most `limit` returned."""
        result = await self.session.execute(
            select(Note)
            .order_by(desc(Note.created_at))
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all())

    async def update_fields(
        self,
        note_id: str,
        fields: Dict[str, Any],
        updated_at: str,
    ) -> None:
        """
        Write only `fields` plus updatedAt.

        An empty `fields` mapping still refreshes updatedAt. Keys outside
        UPDATABLE_FIELDS are ignored; booleans are stored as 0/1.

        Raises:
            UniqueViolation: new title collides with another note
        """
        values: Dict[Any, Any] = {}
        for name, value in fields.items():
            if name not in UPDATABLE_FIELDS:
                continue
            if name == "published":
                value = 1 if value else 0
            values[getattr(Note, name)] = value
        values[Note.updated_at] = updated_at

        try:
            await self.session.execute(
                update(Note)
                .where(Note.id == note_id)
                .values(values)
                .execution_options(synchronize_session=False)
            )
        except IntegrityError as exc:
            await self.session.rollback()
            if _is_unique_violation(exc):
                raise UniqueViolation(_violated_column(exc)) from exc
            raise

    async def delete_by_id(self, note_id: str) -> bool:
        """Physically remove the row; returns False when nothing was deleted."""
        result = await self.session.execute(
            delete(Note)
            .where(Note.id == note_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0
