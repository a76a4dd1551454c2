"""
Notes RPC Backend — Note SQLAlchemy Model
===========================================

What:  ORM model representing the `notes` table in the embedded SQLite store.
How:   Inherits from the shared DeclarativeBase; `init_models` creates it.
Who:   Used by NoteStore for every read and write.

Table Layout:
    id         TEXT    PRIMARY KEY        (uuid4 string, generated server-side)
    title      TEXT    UNIQUE NOT NULL
    content    TEXT    NOT NULL
    category   TEXT    NULL
    published  INTEGER DEFAULT 0          (boolean stored as 0/1)
    createdAt  TEXT    NOT NULL           (ISO-8601 UTC)
    updatedAt  TEXT    NOT NULL           (ISO-8601 UTC)

    Column names match the wire format (camelCase timestamps); attributes
    on the Python side are snake_case.
"""

import uuid
from typing import Optional

from sqlalchemy import Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from notes_rpc.database import Base


class Note(Base):
    """
    A single note row.

    Lifecycle:
        1. Inserted by createNote (id and both timestamps assigned)
        2. Content fields and updatedAt changed by updateNote
        3. Physically deleted by deleteNote (no soft delete)
    """

    __tablename__ = "notes"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    title: Mapped[str] = mapped_column(Text, unique=True, nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    category: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)

    published: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        default=0,
        server_default=text("0"),
    )

    created_at: Mapped[str] = mapped_column("createdAt", Text, nullable=False)

    updated_at: Mapped[str] = mapped_column("updatedAt", Text, nullable=False)

    # getNotes always orders by createdAt DESC; SQLite scans the index backwards
    __table_args__ = (
        Index("idx_notes_created_at", "createdAt"),
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, title='{self.title}', created_at='{self.created_at}')>"
