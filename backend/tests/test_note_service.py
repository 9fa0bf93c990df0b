"""
Daylog Backend — Note Service Unit Tests
==========================================

What:  Tests for NoteService business rules (ownership, validation, paging).
How:   Mock DB sessions; statements handed to execute() are compiled with the
       PostgreSQL dialect to check their filters.

What we test:
    ✅ Notes of another user are reported as not found
    ✅ Malformed ids are rejected before any query
    ✅ Title is required and trimmed; content/images defaults
    ✅ PUT resets omitted fields, PATCH leaves them alone
    ✅ Listing: paging math, pageSize over limit, search scoped to the caller
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import Text
from sqlalchemy.dialects import postgresql

from app.exceptions import DatabaseError, InvalidArgumentError, NotFoundError
from app.models.note import Note
from app.schemas.note import NoteInput
from app.services.note_service import NoteService, parse_sort, require_title


def make_note(user_id, **overrides) -> Note:
    now = datetime(2024, 3, 1, 4, 0, tzinfo=timezone.utc)
    fields = {
        "id": uuid.uuid4(),
        "user_id": user_id,
        "title": "Groceries",
        "content": "milk, eggs",
        "images": ["http://test/uploads/2024/03/01/a.jpg"],
        "created_at": now,
        "updated_at": now,
    }
    fields.update(overrides)
    return Note(**fields)


def compiled(statement):
    return statement.compile(dialect=postgresql.dialect())


class TestTitleAndSort:

    def test_require_title_trims(self):
        assert require_title("  Trip plan  ") == "Trip plan"

    @pytest.mark.parametrize("title", [None, "", "   ", "\t\n"])
    def test_require_title_rejects_blank(self, title):
        with pytest.raises(InvalidArgumentError, match="Title"):
            require_title(title)

    def test_parse_sort_descending(self):
        clause = parse_sort("-updatedAt")
        assert "updated_at DESC" in str(clause.compile(dialect=postgresql.dialect()))

    def test_parse_sort_ascending_title(self):
        clause = parse_sort("title")
        assert "title ASC" in str(clause.compile(dialect=postgresql.dialect()))

    def test_parse_sort_unknown_field(self):
        with pytest.raises(InvalidArgumentError) as exc_info:
            parse_sort("-password")
        assert exc_info.value.field == "sort"

    @pytest.mark.parametrize("sort", ["--title", "+-title", "+title", "-+createdAt"])
    def test_parse_sort_malformed_prefix(self, sort):
        with pytest.raises(InvalidArgumentError):
            parse_sort(sort)


class TestNoteServiceGet:

    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_get_note_found(self, mock_db_session, make_result, user_id):
        note = make_note(user_id)
        mock_db_session.execute.return_value = make_result(one=note)

        result = await self.service.get_note(mock_db_session, user_id, str(note.id))

        assert result.id == note.id
        assert result.title == "Groceries"
        assert result.images == note.images

    @pytest.mark.asyncio
    async def test_get_note_filters_on_owner(self, mock_db_session, make_result, user_id):
        """A note owned by someone else never matches, so it reads as missing."""
        mock_db_session.execute.return_value = make_result(one=None)
        note_id = uuid.uuid4()

        with pytest.raises(NotFoundError, match=str(note_id)):
            await self.service.get_note(mock_db_session, user_id, str(note_id))

        statement = mock_db_session.execute.call_args.args[0]
        params = compiled(statement).params
        assert user_id in params.values()
        assert note_id in params.values()

    @pytest.mark.asyncio
    async def test_get_note_malformed_id(self, mock_db_session, user_id):
        with pytest.raises(InvalidArgumentError, match="Invalid note ID"):
            await self.service.get_note(mock_db_session, user_id, "not-a-uuid")
        mock_db_session.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_note_database_failure(self, mock_db_session, user_id):
        mock_db_session.execute.side_effect = ConnectionError("connection reset")
        with pytest.raises(DatabaseError):
            await self.service.get_note(mock_db_session, user_id, str(uuid.uuid4()))


class TestNoteServiceCreate:

    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_create_note_trims_title_and_applies_defaults(self, mock_db_session, user_id):
        result = await self.service.create_note(
            mock_db_session, user_id, NoteInput(title="  Morning pages  ")
        )

        assert result.title == "Morning pages"
        assert result.content == ""
        assert result.images == []
        assert result.user_id == user_id
        assert result.created_at == result.updated_at
        mock_db_session.add.assert_called_once()
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_note_blank_title_rejected(self, mock_db_session, user_id):
        with pytest.raises(InvalidArgumentError):
            await self.service.create_note(mock_db_session, user_id, NoteInput(title="   "))
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_note_keeps_image_order(self, mock_db_session, user_id):
        images = ["http://x/uploads/b.png", "http://x/uploads/a.png"]
        result = await self.service.create_note(
            mock_db_session, user_id, NoteInput(title="Trip", content="day 1", images=images)
        )
        assert result.images == images
        assert result.content == "day 1"


class TestNoteServiceUpdate:

    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_replace_resets_omitted_fields(self, mock_db_session, make_result, user_id):
        note = make_note(user_id)
        before = note.updated_at
        mock_db_session.execute.return_value = make_result(one=note)

        result = await self.service.replace_note(
            mock_db_session, user_id, str(note.id), NoteInput(title=" Renamed ")
        )

        assert result.title == "Renamed"
        assert result.content == ""
        assert result.images == []
        assert result.updated_at > before
        assert result.created_at == note.created_at

    @pytest.mark.asyncio
    async def test_patch_leaves_omitted_fields(self, mock_db_session, make_result, user_id):
        note = make_note(user_id)
        mock_db_session.execute.return_value = make_result(one=note)

        result = await self.service.update_note(
            mock_db_session, user_id, str(note.id), NoteInput(content="milk, eggs, bread")
        )

        assert result.title == "Groceries"
        assert result.content == "milk, eggs, bread"
        assert result.images == note.images

    @pytest.mark.asyncio
    async def test_patch_blank_title_rejected(self, mock_db_session, make_result, user_id):
        note = make_note(user_id)
        mock_db_session.execute.return_value = make_result(one=note)

        with pytest.raises(InvalidArgumentError):
            await self.service.update_note(
                mock_db_session, user_id, str(note.id), NoteInput(title="  ")
            )
        assert note.title == "Groceries"

    @pytest.mark.asyncio
    async def test_update_missing_note(self, mock_db_session, make_result, user_id):
        mock_db_session.execute.return_value = make_result(one=None)
        with pytest.raises(NotFoundError):
            await self.service.replace_note(
                mock_db_session, user_id, str(uuid.uuid4()), NoteInput(title="x")
            )


class TestNoteServiceDelete:

    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_delete_returns_prior_state(self, mock_db_session, make_result, user_id):
        note = make_note(user_id)
        mock_db_session.execute.return_value = make_result(one=note)

        result = await self.service.delete_note(mock_db_session, user_id, str(note.id))

        assert result.id == note.id
        assert result.title == note.title
        mock_db_session.delete.assert_awaited_once_with(note)

    @pytest.mark.asyncio
    async def test_delete_missing_note(self, mock_db_session, make_result, user_id):
        mock_db_session.execute.return_value = make_result(one=None)
        with pytest.raises(NotFoundError):
            await self.service.delete_note(mock_db_session, user_id, str(uuid.uuid4()))
        mock_db_session.delete.assert_not_called()


class TestNoteServiceList:

    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_list_pagination_metadata(self, mock_db_session, make_result, user_id):
        start = datetime(2024, 3, 1, tzinfo=timezone.utc)
        notes = [make_note(user_id, created_at=start - timedelta(hours=i)) for i in range(5)]
        mock_db_session.execute.side_effect = [make_result(many=notes), make_result(one=23)]

        result = await self.service.list_notes(mock_db_session, user_id, page=2, limit=5)

        assert len(result.data) == 5
        assert result.total == 23
        assert result.pagination.page == 2
        assert result.pagination.limit == 5
        assert result.pagination.pages == 5

        items_query = compiled(mock_db_session.execute.call_args_list[0].args[0])
        assert 5 in items_query.params.values()

    @pytest.mark.asyncio
    async def test_page_size_overrides_limit(self, mock_db_session, make_result, user_id):
        mock_db_session.execute.side_effect = [make_result(many=[]), make_result(one=0)]

        result = await self.service.list_notes(
            mock_db_session, user_id, page=3, limit=5, page_size=20
        )

        assert result.pagination.limit == 20
        assert result.pagination.pages == 0
        sql = str(compiled(mock_db_session.execute.call_args_list[0].args[0]))
        assert "LIMIT" in sql and "OFFSET" in sql
        params = compiled(mock_db_session.execute.call_args_list[0].args[0]).params
        assert 40 in params.values()

    @pytest.mark.asyncio
    async def test_page_size_capped(self, mock_db_session, make_result, user_id):
        mock_db_session.execute.side_effect = [make_result(many=[]), make_result(one=0)]
        result = await self.service.list_notes(mock_db_session, user_id, page_size=10_000)
        assert result.pagination.limit == 100

    @pytest.mark.asyncio
    async def test_default_page_size(self, mock_db_session, make_result, user_id):
        mock_db_session.execute.side_effect = [make_result(many=[]), make_result(one=0)]
        result = await self.service.list_notes(mock_db_session, user_id)
        assert result.pagination.page == 1
        assert result.pagination.limit == 10

    @pytest.mark.asyncio
    async def test_search_scoped_to_caller(self, mock_db_session, make_result, user_id):
        mock_db_session.execute.side_effect = [make_result(many=[]), make_result(one=0)]

        await self.service.list_notes(mock_db_session, user_id, search="abc")

        for call in mock_db_session.execute.call_args_list:
            statement = compiled(call.args[0])
            sql = str(statement)
            assert "notes.user_id" in sql
            assert "notes.title ILIKE" in sql
            assert "notes.content ILIKE" in sql
            assert " OR notes.content ILIKE" in sql
            assert user_id in statement.params.values()
            assert "abc" in statement.params.values()

    @pytest.mark.asyncio
    async def test_invalid_page_rejected(self, mock_db_session, user_id):
        with pytest.raises(InvalidArgumentError):
            await self.service.list_notes(mock_db_session, user_id, page=0)
        mock_db_session.execute.assert_not_called()


class TestNoteLongValues:

    @pytest.mark.asyncio
    async def test_long_title_accepted(self, mock_db_session, user_id):
        title = "t" * 600
        result = await NoteService().create_note(mock_db_session, user_id, NoteInput(title=title))
        assert result.title == title

    def test_text_columns_have_no_length_cap(self):
        assert isinstance(Note.__table__.c.title.type, Text)
        assert Note.__table__.c.title.type.length is None
