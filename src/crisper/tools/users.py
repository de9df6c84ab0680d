"""
User tools: search the member list and look up a single profile.
Password hashes are never part of the output.
"""

from typing import Literal, Optional

from crisper.app.errors import NotFoundError
from crisper.app.mcp_app import mcp
from crisper.app.models import User, dump
from crisper.services import users as user_service


@mcp.tool
async def list_users(
    search: Optional[str] = None,
    limit: Optional[int] = None,
    sort_by: Literal["name", "email", "createdAt"] = "createdAt",
    order: Literal["asc", "desc"] = "desc",
) -> dict:
    """
    List Crisper users, optionally searching by name.

    Args:
        search: Case-insensitive text to look for in user names.
        limit: Maximum number of users to return.
        sort_by: "name", "email" or "createdAt".
        order: "asc" or "desc".
    """
    if limit is not None and limit <= 0:
        raise ValueError("limit must be > 0")

    rows = await user_service.list_users(search=search, limit=limit, sort_by=sort_by, order=order)
    return {"ok": True, "users": [dump(User, r) for r in rows]}


@mcp.tool
async def get_user(user_id: int) -> dict:
    """Get a user's public profile by id."""
    try:
        row = await user_service.get_user(user_id)
    except NotFoundError:
        return {"ok": False, "error": "USER_NOT_FOUND", "user_id": user_id}
    return {"ok": True, "user": dump(User, row)}
