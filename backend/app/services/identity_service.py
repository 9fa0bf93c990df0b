"""
Daylog Backend — Anonymous Identity Service
=============================================

What:  Maps a client-supplied anonymous token to a stable user id, creating
       the user on first sight.
Who:   Called once per request by the get_current_user_id dependency.

Provisioning Flow:
    1. SELECT id FROM users WHERE anonymous_token = :token   (fast path)
    2. If absent:
       INSERT INTO users (anonymous_token) VALUES (:token)
       ON CONFLICT (anonymous_token) DO NOTHING
    3. SELECT again

    Two concurrent first requests with the same new token both reach step 2;
    the unique index makes the second insert a no-op, and both read the same
    row in step 3. The user row itself is never updated.
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import AuthenticationError, DatabaseError
from app.models.user import User

logger = logging.getLogger(__name__)

MISSING_TOKEN_SUGGESTION = (
    "Generate a unique ID when the app starts, store it on the device, "
    "and send it with every request in the {header} header."
)


class IdentityService:
    """Resolves anonymous tokens to user ids."""

    async def resolve(self, db: AsyncSession, token: str | None, header: str) -> uuid.UUID:
        """
        Return the user id for `token`, provisioning a user if needed.

        Raises:
            AuthenticationError: token missing or blank (→ 401)
            DatabaseError: store failure (→ 500)
        """
        if token is None or not token.strip():
            raise AuthenticationError(
                message=f"Missing {header} header",
                suggestion=MISSING_TOKEN_SUGGESTION.format(header=header),
            )

        try:
            user_id = await self._find(db, token)
            if user_id is not None:
                return user_id

            inserted = await db.execute(
                pg_insert(User)
                .values(anonymous_token=token)
                .on_conflict_do_nothing(index_elements=[User.anonymous_token])
            )
            user_id = await self._find(db, token)
        except Exception as e:
            logger.error("Database error resolving identity: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Authentication failed. Please try again.",
                context={"error_type": type(e).__name__},
            )

        if user_id is None:
            # Unreachable under READ COMMITTED: a conflicting insert commits
            # before ours returns
            raise DatabaseError(
                message="Authentication failed. Please try again.",
                context={"reason": "user row missing after provisioning"},
            )

        # rowcount is 0 when a concurrent request provisioned the same token
        if inserted.rowcount == 1:
            logger.info("Provisioned anonymous user %s", user_id)
        return user_id

    async def _find(self, db: AsyncSession, token: str) -> uuid.UUID | None:
        result = await db.execute(select(User.id).where(User.anonymous_token == token))
        return result.scalar_one_or_none()


identity_service = IdentityService()
