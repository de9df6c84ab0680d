"""
Likes: one row per (user, post) pair.
"""

from typing import Any, Dict

from sqlalchemy import and_, delete, select
from sqlalchemy.ext.asyncio import AsyncConnection

from crisper.app.db import get_engine, insert_ignore
from crisper.app.errors import NotFoundError
from crisper.app.schema import post_likes, posts


async def _require_post(conn: AsyncConnection, post_id: int) -> None:
    post = await conn.scalar(select(posts.c.id).where(posts.c.id == post_id))
    if post is None:
        raise NotFoundError("Post not found")


def _like_of(user_id: int, post_id: int):
    return and_(post_likes.c.user_id == user_id, post_likes.c.post_id == post_id)


async def set_like(user_id: int, post_id: int, liked: bool) -> Dict[str, Any]:
    """
    Like or unlike a post.

    Args:
        user_id: The caller.
        post_id: The post to (un)like.
        liked:   Desired state.

    Returns:
        dict: {"message", "liked"}; the message tells whether anything changed.

    Raises:
        NotFoundError: If the post does not exist.
    """
    async with get_engine().begin() as conn:
        await _require_post(conn, post_id)

        if liked:
            result = await conn.execute(
                insert_ignore(conn, post_likes).values(user_id=user_id, post_id=post_id)
            )
            if result.rowcount:
                return {"message": "Liked", "liked": True}
        else:
            result = await conn.execute(delete(post_likes).where(_like_of(user_id, post_id)))
            if result.rowcount:
                return {"message": "Like removed", "liked": False}

    return {"message": "No change", "liked": liked}


async def like_status(user_id: int, post_id: int) -> Dict[str, Any]:
    async with get_engine().connect() as conn:
        await _require_post(conn, post_id)
        found = await conn.scalar(select(post_likes.c.post_id).where(_like_of(user_id, post_id)))
    return {"post_id": post_id, "liked": found is not None}
