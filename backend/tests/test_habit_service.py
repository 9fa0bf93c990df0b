"""
Daylog Backend — Habit Service Unit Tests
===========================================

What:  Streak arithmetic, duplicate check-ins and habit creation.
How:   Check-ins are driven with explicit `now` instants against a transient
       Habit returned by a mock session.
"""

import uuid
from datetime import date, datetime, timedelta, timezone

import pytest
from sqlalchemy import Text
from sqlalchemy.dialects import postgresql

from app.exceptions import DuplicateOperationError, InvalidArgumentError, NotFoundError
from app.models.habit import Habit
from app.schemas.habit import HabitCreate
from app.services.habit_service import HabitService, next_streak

UTC8 = timezone(timedelta(hours=8))


def make_habit(user_id, **overrides) -> Habit:
    created = datetime(2024, 2, 28, 1, 0, tzinfo=timezone.utc)
    fields = {
        "id": uuid.uuid4(),
        "user_id": user_id,
        "name": "Run",
        "frequency": "daily",
        "target": "每日",
        "current_streak": 0,
        "max_streak": 0,
        "check_ins": [],
        "created_at": created,
        "updated_at": created,
    }
    fields.update(overrides)
    return Habit(**fields)


class TestNextStreak:

    def test_first_check_in(self):
        assert next_streak(0, None, date(2024, 3, 1)) == 1

    def test_consecutive_day_extends(self):
        assert next_streak(4, date(2024, 2, 29), date(2024, 3, 1)) == 5

    @pytest.mark.parametrize("gap_days", [2, 3, 60])
    def test_any_gap_resets(self, gap_days):
        today = date(2024, 3, 10)
        assert next_streak(7, today - timedelta(days=gap_days), today) == 1


class TestHabitCreate:

    def setup_method(self):
        self.service = HabitService()

    @pytest.mark.asyncio
    async def test_create_applies_defaults(self, mock_db_session, user_id):
        result = await self.service.create_habit(
            mock_db_session, user_id, HabitCreate(name="  Run  ")
        )

        assert result.name == "Run"
        assert result.frequency == "daily"
        assert result.target == "每日"
        assert result.current_streak == 0
        assert result.max_streak == 0
        assert result.check_ins == []
        mock_db_session.add.assert_called_once()

    @pytest.mark.asyncio
    async def test_create_keeps_given_frequency(self, mock_db_session, user_id):
        result = await self.service.create_habit(
            mock_db_session,
            user_id,
            HabitCreate(name="Read", frequency="weekly_3", target="30 pages"),
        )
        assert result.frequency == "weekly_3"
        assert result.target == "30 pages"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", [None, "", "   "])
    async def test_create_requires_name(self, mock_db_session, user_id, name):
        with pytest.raises(InvalidArgumentError, match="name"):
            await self.service.create_habit(mock_db_session, user_id, HabitCreate(name=name))
        mock_db_session.add.assert_not_called()


class TestHabitCheckIn:

    def setup_method(self):
        self.service = HabitService()

    @pytest.mark.asyncio
    async def test_streak_example(self, mock_db_session, make_result, user_id):
        """Day 1 and day 2 build a streak of 2; skipping day 3 resets it on day 4."""
        habit = make_habit(user_id)
        mock_db_session.execute.return_value = make_result(one=habit)
        habit_id = str(habit.id)

        day1 = await self.service.check_in(
            mock_db_session, user_id, habit_id, now=datetime(2024, 3, 1, 7, 0, tzinfo=UTC8)
        )
        assert (day1.current_streak, day1.max_streak) == (1, 1)

        day2 = await self.service.check_in(
            mock_db_session, user_id, habit_id, now=datetime(2024, 3, 2, 22, 0, tzinfo=UTC8)
        )
        assert (day2.current_streak, day2.max_streak) == (2, 2)

        day4 = await self.service.check_in(
            mock_db_session, user_id, habit_id, now=datetime(2024, 3, 4, 6, 30, tzinfo=UTC8)
        )
        assert (day4.current_streak, day4.max_streak) == (1, 2)
        assert len(day4.check_ins) == 3

    @pytest.mark.asyncio
    async def test_second_check_in_same_day_rejected(self, mock_db_session, make_result, user_id):
        morning = datetime(2024, 3, 1, 8, 0, tzinfo=UTC8)
        habit = make_habit(user_id, current_streak=3, max_streak=5, check_ins=[morning])
        mock_db_session.execute.return_value = make_result(one=habit)

        with pytest.raises(DuplicateOperationError, match="Already checked in today"):
            await self.service.check_in(
                mock_db_session, user_id, str(habit.id),
                now=datetime(2024, 3, 1, 23, 59, tzinfo=UTC8),
            )

        assert habit.check_ins == [morning]
        assert habit.current_streak == 3
        assert habit.max_streak == 5
        mock_db_session.flush.assert_not_called()

    @pytest.mark.asyncio
    async def test_days_follow_display_zone(self, mock_db_session, make_result, user_id):
        """15:00Z and 17:00Z on one UTC date fall on consecutive UTC+8 days."""
        previous = datetime(2024, 3, 1, 15, 0, tzinfo=timezone.utc)
        habit = make_habit(user_id, current_streak=1, max_streak=1, check_ins=[previous])
        mock_db_session.execute.return_value = make_result(one=habit)

        result = await self.service.check_in(
            mock_db_session, user_id, str(habit.id),
            now=datetime(2024, 3, 1, 17, 0, tzinfo=timezone.utc),
        )

        assert result.current_streak == 2

    @pytest.mark.asyncio
    async def test_max_streak_never_decreases(self, mock_db_session, make_result, user_id):
        last = datetime(2024, 3, 1, 8, 0, tzinfo=UTC8)
        habit = make_habit(user_id, current_streak=2, max_streak=9, check_ins=[last])
        mock_db_session.execute.return_value = make_result(one=habit)

        result = await self.service.check_in(
            mock_db_session, user_id, str(habit.id),
            now=datetime(2024, 3, 2, 8, 0, tzinfo=UTC8),
        )

        assert result.current_streak == 3
        assert result.max_streak == 9

    @pytest.mark.asyncio
    async def test_check_in_locks_owned_row(self, mock_db_session, make_result, user_id):
        habit = make_habit(user_id)
        mock_db_session.execute.return_value = make_result(one=habit)

        await self.service.check_in(mock_db_session, user_id, str(habit.id))

        statement = mock_db_session.execute.call_args.args[0]
        compiled = statement.compile(dialect=postgresql.dialect())
        assert "FOR UPDATE" in str(compiled)
        assert user_id in compiled.params.values()

    @pytest.mark.asyncio
    async def test_check_in_unknown_habit(self, mock_db_session, make_result, user_id):
        mock_db_session.execute.return_value = make_result(one=None)
        with pytest.raises(NotFoundError):
            await self.service.check_in(mock_db_session, user_id, str(uuid.uuid4()))

    @pytest.mark.asyncio
    async def test_check_in_malformed_id(self, mock_db_session, user_id):
        with pytest.raises(InvalidArgumentError, match="Invalid habit ID"):
            await self.service.check_in(mock_db_session, user_id, "12345")
        mock_db_session.execute.assert_not_called()


class TestHabitList:

    @pytest.mark.asyncio
    async def test_list_returns_caller_habits(self, mock_db_session, make_result, user_id):
        habits = [make_habit(user_id, name="Run"), make_habit(user_id, name="Read")]
        mock_db_session.execute.return_value = make_result(many=habits)

        result = await HabitService().list_habits(mock_db_session, user_id)

        assert [h.name for h in result] == ["Run", "Read"]
        statement = mock_db_session.execute.call_args.args[0]
        assert user_id in statement.compile(dialect=postgresql.dialect()).params.values()


class TestHabitLongValues:

    @pytest.mark.asyncio
    async def test_long_fields_accepted(self, mock_db_session, user_id):
        result = await HabitService().create_habit(
            mock_db_session,
            user_id,
            HabitCreate(name="n" * 300, frequency="f" * 51, target="g" * 400),
        )
        assert result.name == "n" * 300
        assert result.frequency == "f" * 51
        assert result.target == "g" * 400

    @pytest.mark.parametrize("column", ["name", "frequency", "target"])
    def test_text_columns_have_no_length_cap(self, column):
        column_type = Habit.__table__.c[column].type
        assert isinstance(column_type, Text)
        assert column_type.length is None
