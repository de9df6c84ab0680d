"""
Shared route dependencies.
"""

from typing import Optional

from fastapi import Header

from crisper.app.errors import UnauthorizedError
from crisper.app.security import bearer_token, decode_token
from crisper.services import users as user_service


async def current_user_id(authorization: Optional[str] = Header(default=None)) -> int:
    """
    Resolve the caller from the Authorization header.

    Accepts "Bearer <token>" or a bare token. Tokens of deleted accounts are
    rejected like invalid ones.

    Raises:
        UnauthorizedError: If the token is missing, invalid or orphaned.
    """
    payload = decode_token(bearer_token(authorization))
    user_id = payload["userId"]
    if not await user_service.user_exists(user_id):
        raise UnauthorizedError()
    return user_id
