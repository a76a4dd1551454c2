"""
Notes RPC Backend — Note Store Tests
======================================

What:  Tests for NoteStore against a real SQLite file.
How:   Uses the db_session fixture (per-test database under tmp_path).

What we test:
    ✅ Insert / select round trip and row mapping
    ✅ Unique title constraint surfaces as UniqueViolation
    ✅ Page ordering (createdAt DESC) and offsets
    ✅ Partial updates always refresh updatedAt
    ✅ Physical delete
"""

import pytest
from sqlalchemy import text

from notes_rpc.exceptions import UniqueViolation
from notes_rpc.models.note import Note
from notes_rpc.schemas.note import NoteResponse
from notes_rpc.services.note_store import NoteStore


def _note(index: int, **overrides) -> Note:
    values = {
        "id": f"note-{index}",
        "title": f"Title {index}",
        "content": f"Content {index}",
        "created_at": f"2024-01-15T12:00:{index:02d}.000000Z",
        "updated_at": f"2024-01-15T12:00:{index:02d}.000000Z",
    }
    values.update(overrides)
    return Note(**values)


class TestInsertAndSelect:

    @pytest.mark.asyncio
    async def test_insert_then_select(self, db_session, sample_note_data):
        store = NoteStore(db_session)
        await store.insert(Note(**sample_note_data))

        note = await store.select_by_id(sample_note_data["id"])

        assert note is not None
        assert note.title == "Shopping list"
        assert note.created_at == sample_note_data["created_at"]

    @pytest.mark.asyncio
    async def test_select_missing_returns_none(self, db_session):
        assert await NoteStore(db_session).select_by_id("does-not-exist") is None

    @pytest.mark.asyncio
    async def test_title_exists_is_case_sensitive(self, db_session):
        store = NoteStore(db_session)
        await store.insert(_note(1, title="Groceries"))

        assert await store.title_exists("Groceries") is True
        assert await store.title_exists("groceries") is False

    @pytest.mark.asyncio
    async def test_duplicate_title_raises_unique_violation(self, db_session):
        store = NoteStore(db_session)
        await store.insert(_note(1, title="Same"))

        with pytest.raises(UniqueViolation) as exc_info:
            await store.insert(_note(2, title="Same"))
        assert exc_info.value.column == "title"


class TestRowMapping:

    @pytest.mark.asyncio
    async def test_published_integer_becomes_boolean(self, db_session):
        store = NoteStore(db_session)
        await store.insert(_note(1, published=1))
        await store.insert(_note(2, published=0))

        first = NoteResponse.model_validate(await store.select_by_id("note-1")).to_wire()
        second = NoteResponse.model_validate(await store.select_by_id("note-2")).to_wire()

        assert first["published"] is True
        assert second["published"] is False

    @pytest.mark.asyncio
    async def test_null_category_is_omitted(self, db_session):
        store = NoteStore(db_session)
        await store.insert(_note(1, category=None))

        entity = NoteResponse.model_validate(await store.select_by_id("note-1")).to_wire()

        assert "category" not in entity
        assert set(entity) == {"id", "title", "content", "published", "createdAt", "updatedAt"}

    @pytest.mark.asyncio
    async def test_published_defaults_to_zero_in_table(self, db_session):
        await db_session.execute(
            text(
                'INSERT INTO notes (id, title, content, "createdAt", "updatedAt") '
                "VALUES ('raw', 'Raw', 'c', '2024-01-01T00:00:00Z', '2024-01-01T00:00:00Z')"
            )
        )
        row = (await db_session.execute(text("SELECT published FROM notes WHERE id = 'raw'"))).one()
        assert row.published == 0


class TestSelectPage:

    @pytest.mark.asyncio
    async def test_newest_first_with_offset(self, db_session):
        store = NoteStore(db_session)
        for i in range(1, 6):
            await store.insert(_note(i))

        first_page = await store.select_page(limit=2, offset=0)
        second_page = await store.select_page(limit=2, offset=2)
        last_page = await store.select_page(limit=2, offset=4)

        assert [n.id for n in first_page] == ["note-5", "note-4"]
        assert [n.id for n in second_page] == ["note-3", "note-2"]
        assert [n.id for n in last_page] == ["note-1"]

    @pytest.mark.asyncio
    async def test_offset_past_end_is_empty(self, db_session):
        store = NoteStore(db_session)
        await store.insert(_note(1))
        assert await store.select_page(limit=10, offset=10) == []


class TestUpdateFields:

    @pytest.mark.asyncio
    async def test_only_given_fields_change(self, db_session):
        store = NoteStore(db_session)
        await store.insert(_note(1, category="work", published=1))

        await store.update_fields("note-1", {"content": "new"}, updated_at="2024-02-01T00:00:00.000000Z")
        note = await store.select_by_id("note-1")

        assert note.content == "new"
        assert note.title == "Title 1"
        assert note.category == "work"
        assert note.published == 1
        assert note.updated_at == "2024-02-01T00:00:00.000000Z"
        assert note.created_at == "2024-01-15T12:00:01.000000Z"

    @pytest.mark.asyncio
    async def test_empty_update_refreshes_updated_at(self, db_session):
        store = NoteStore(db_session)
        await store.insert(_note(1))

        await store.update_fields("note-1", {}, updated_at="2024-03-01T00:00:00.000000Z")
        note = await store.select_by_id("note-1")

        assert note.updated_at == "2024-03-01T00:00:00.000000Z"
        assert note.content == "Content 1"

    @pytest.mark.asyncio
    async def test_boolean_stored_as_integer(self, db_session):
        store = NoteStore(db_session)
        await store.insert(_note(1))

        await store.update_fields("note-1", {"published": True}, updated_at="2024-03-01T00:00:00Z")

        row = (await db_session.execute(text("SELECT published FROM notes WHERE id = 'note-1'"))).one()
        assert row.published == 1

    @pytest.mark.asyncio
    async def test_unknown_fields_ignored(self, db_session):
        store = NoteStore(db_session)
        await store.insert(_note(1))

        await store.update_fields(
            "note-1", {"id": "hijack", "created_at": "x"}, updated_at="2024-03-01T00:00:00Z"
        )
        note = await store.select_by_id("note-1")

        assert note is not None
        assert note.created_at == "2024-01-15T12:00:01.000000Z"

    @pytest.mark.asyncio
    async def test_title_collision_raises_unique_violation(self, db_session):
        store = NoteStore(db_session)
        await store.insert(_note(1))
        await store.insert(_note(2))

        with pytest.raises(UniqueViolation):
            await store.update_fields("note-2", {"title": "Title 1"}, updated_at="2024-03-01T00:00:00Z")


class TestDelete:

    @pytest.mark.asyncio
    async def test_delete_removes_row(self, db_session):
        store = NoteStore(db_session)
        await store.insert(_note(1))

        assert await store.delete_by_id("note-1") is True
        assert await store.select_by_id("note-1") is None
        assert await store.title_exists("Title 1") is False

    @pytest.mark.asyncio
    async def test_delete_missing_returns_false(self, db_session):
        assert await NoteStore(db_session).delete_by_id("nope") is False
