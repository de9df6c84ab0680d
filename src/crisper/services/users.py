"""
User accounts: listing, lookup, signup, signin, avatar and deletion.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, insert, select, update

from crisper.app.db import get_engine
from crisper.app.errors import ConflictError, NotFoundError
from crisper.app.schema import post_likes, post_replies, posts, users, utcnow
from crisper.app.security import hash_password, verify_password

logger = logging.getLogger(__name__)

# Every column except the password hash
_PUBLIC_COLUMNS = [c for c in users.c if c.name != "password"]

_USER_SORT = {
    "name": users.c.name,
    "email": users.c.email,
    "createdAt": users.c.created_at,
}


async def list_users(
    search: Optional[str] = None,
    limit: Optional[int] = None,
    sort_by: str = "createdAt",
    order: str = "desc",
) -> List[Dict[str, Any]]:
    """
    List users, optionally filtered by a case-insensitive name search.

    Args:
        search:  Substring to look for in user names.
        limit:   Maximum number of users to return.
        sort_by: "name", "email" or "createdAt" (default).
        order:   "asc" or "desc" (default).

    Returns:
        list[dict]: Users without their password hash.
    """
    column = _USER_SORT.get(sort_by, users.c.created_at)
    if order == "asc":
        ordering = (column.asc(), users.c.id.asc())
    else:
        ordering = (column.desc(), users.c.id.desc())

    stmt = select(*_PUBLIC_COLUMNS).order_by(*ordering)
    if search:
        stmt = stmt.where(func.lower(users.c.name).like(f"%{search.lower()}%"))
    if limit is not None:
        stmt = stmt.limit(limit)

    async with get_engine().connect() as conn:
        rows = (await conn.execute(stmt)).mappings().all()
    return [dict(r) for r in rows]


async def get_user(user_id: int) -> Dict[str, Any]:
    """
    Fetch one user by id.

    Raises:
        NotFoundError: If no such user exists.
    """
    async with get_engine().connect() as conn:
        row = (
            await conn.execute(select(*_PUBLIC_COLUMNS).where(users.c.id == user_id))
        ).mappings().first()
    if row is None:
        raise NotFoundError("User not found")
    return dict(row)


async def user_exists(user_id: int) -> bool:
    async with get_engine().connect() as conn:
        found = await conn.scalar(select(users.c.id).where(users.c.id == user_id))
    return found is not None


async def signup(name: str, email: str, password: str) -> Dict[str, Any]:
    """
    Register a new account.

    Args:
        name:     Display name.
        email:    Unique email address.
        password: Plain-text password; only its hash is stored.

    Returns:
        dict: id, name and email of the new user.

    Raises:
        ConflictError: If the email is already registered.
    """
    async with get_engine().begin() as conn:
        existing = await conn.scalar(select(users.c.id).where(users.c.email == email))
        if existing is not None:
            raise ConflictError("Signup failed: this email is already in use")

        row = (
            await conn.execute(
                insert(users)
                .values(name=name, email=email, password=hash_password(password))
                .returning(users.c.id, users.c.name, users.c.email)
            )
        ).mappings().one()

    logger.info(f"New user registered: id={row['id']}")
    return dict(row)


async def authenticate(email: str, password: str) -> Optional[Dict[str, Any]]:
    """
    Check credentials.

    Returns:
        dict | None: The public user row if the email/password pair is valid.
    """
    async with get_engine().connect() as conn:
        row = (
            await conn.execute(select(users).where(users.c.email == email))
        ).mappings().first()

    if row is None or not verify_password(password, row["password"]):
        return None

    user = dict(row)
    user.pop("password")
    return user


async def set_avatar(user_id: int, avatar_url: str) -> None:
    async with get_engine().begin() as conn:
        await conn.execute(
            update(users)
            .where(users.c.id == user_id)
            .values(avatar=avatar_url, update_at=utcnow())
        )


async def delete_user(user_id: int) -> None:
    """
    Delete an account together with its posts, replies and likes
    (including replies and likes other users left on those posts).
    """
    async with get_engine().begin() as conn:
        own_posts = select(posts.c.id).where(posts.c.creator == user_id)

        await conn.execute(
            delete(post_likes).where(
                (post_likes.c.user_id == user_id) | post_likes.c.post_id.in_(own_posts)
            )
        )
        await conn.execute(
            delete(post_replies).where(
                (post_replies.c.user_id == user_id) | post_replies.c.post_id.in_(own_posts)
            )
        )
        await conn.execute(delete(posts).where(posts.c.creator == user_id))
        await conn.execute(delete(users).where(users.c.id == user_id))

    logger.info(f"User {user_id} deleted")
