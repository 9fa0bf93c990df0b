"""
Daylog Backend — Request Dependencies
=======================================

What:  FastAPI dependencies shared by the resource routers.
How:   get_current_user_id reads the identity header, resolves it through
       IdentityService, and hands the user id to the route handler. Route
       handlers pass it explicitly to every service call.
"""

import uuid

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db_session
from app.services.identity_service import identity_service


async def get_current_user_id(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> uuid.UUID:
    """
    Resolve the caller's anonymous identity.

    The header name is configurable (default X-User-Token), so it is read
    from the request rather than declared as a Header() parameter.
    Missing header → AuthenticationError (401).
    """
    token = request.headers.get(settings.identity_header)
    user_id = await identity_service.resolve(db, token, settings.identity_header)
    request.state.user_id = user_id
    return user_id
