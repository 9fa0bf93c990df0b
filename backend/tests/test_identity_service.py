"""
Daylog Backend — Identity Service Unit Tests
==============================================

What:  Token → user id resolution and first-sight provisioning.
"""

import logging
import uuid

import pytest
from sqlalchemy import Text
from sqlalchemy.dialects import postgresql

from app.exceptions import AuthenticationError, DatabaseError
from app.models.user import User
from app.services.identity_service import IdentityService


class TestIdentityResolve:

    def setup_method(self):
        self.service = IdentityService()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", [None, "", "   "])
    async def test_missing_token(self, mock_db_session, token):
        with pytest.raises(AuthenticationError) as exc_info:
            await self.service.resolve(mock_db_session, token, "X-User-Token")

        assert "X-User-Token" in exc_info.value.message
        assert "X-User-Token" in exc_info.value.suggestion
        mock_db_session.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_known_token(self, mock_db_session, make_result):
        existing = uuid.uuid4()
        mock_db_session.execute.return_value = make_result(one=existing)

        assert await self.service.resolve(mock_db_session, "u1", "X-User-Token") == existing
        assert mock_db_session.execute.await_count == 1

    @pytest.mark.asyncio
    async def test_new_token_is_provisioned(self, mock_db_session, make_result):
        created = uuid.uuid4()
        mock_db_session.execute.side_effect = [
            make_result(one=None),
            make_result(),
            make_result(one=created),
        ]

        assert await self.service.resolve(mock_db_session, "u1", "X-User-Token") == created

        insert = mock_db_session.execute.call_args_list[1].args[0]
        sql = str(insert.compile(dialect=postgresql.dialect()))
        assert sql.startswith("INSERT INTO users")
        assert "ON CONFLICT (anonymous_token) DO NOTHING" in sql

    @pytest.mark.asyncio
    async def test_provisioning_logged_only_when_inserted(self, mock_db_session, make_result, caplog):
        created = uuid.uuid4()
        lost_race = make_result()
        lost_race.rowcount = 0
        mock_db_session.execute.side_effect = [
            make_result(one=None),
            lost_race,
            make_result(one=created),
        ]

        with caplog.at_level(logging.INFO, logger="app.services.identity_service"):
            assert await self.service.resolve(mock_db_session, "u1", "X-User-Token") == created
        assert "Provisioned" not in caplog.text

        won_race = make_result()
        won_race.rowcount = 1
        mock_db_session.execute.side_effect = [
            make_result(one=None),
            won_race,
            make_result(one=created),
        ]

        with caplog.at_level(logging.INFO, logger="app.services.identity_service"):
            await self.service.resolve(mock_db_session, "u2", "X-User-Token")
        assert "Provisioned" in caplog.text

    @pytest.mark.asyncio
    async def test_long_token_accepted(self, mock_db_session, make_result):
        existing = uuid.uuid4()
        mock_db_session.execute.return_value = make_result(one=existing)
        token = "t" * 300

        assert await self.service.resolve(mock_db_session, token, "X-User-Token") == existing
        assert isinstance(User.__table__.c.anonymous_token.type, Text)

    @pytest.mark.asyncio
    async def test_store_failure(self, mock_db_session):
        mock_db_session.execute.side_effect = OSError("connection refused")
        with pytest.raises(DatabaseError):
            await self.service.resolve(mock_db_session, "u1", "X-User-Token")
