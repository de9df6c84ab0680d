"""
Replies left on posts.
"""

import logging
from collections import defaultdict
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncConnection

from crisper.app.db import get_engine
from crisper.app.errors import (
    BadReferenceError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
)
from crisper.app.schema import post_replies, posts, utcnow
from crisper.services.topics import paginate

logger = logging.getLogger(__name__)

_NEWEST_FIRST = (post_replies.c.created_at.desc(), post_replies.c.id.desc())


def _require_content(content: str) -> str:
    if not content.strip():
        raise InvalidInputError("content must not be blank")
    return content


async def replies_for_posts(
    conn: AsyncConnection, post_ids: List[int]
) -> Dict[int, List[Dict[str, Any]]]:
    """Group the replies of several posts by post id, newest first."""
    grouped: Dict[int, List[Dict[str, Any]]] = defaultdict(list)
    if not post_ids:
        return grouped

    rows = (
        await conn.execute(
            select(post_replies)
            .where(post_replies.c.post_id.in_(post_ids))
            .order_by(*_NEWEST_FIRST)
        )
    ).mappings().all()
    for row in rows:
        grouped[row["post_id"]].append(dict(row))
    return grouped


async def list_replies(
    post_id: int, page: int = 1, limit: Optional[int] = None
) -> Dict[str, Any]:
    """
    List the replies of a post, newest first.

    Args:
        post_id: The post whose replies are wanted.
        page:    1-based page number, only meaningful together with limit.
        limit:   Page size; without it every reply is returned.

    Returns:
        dict: {"data": [...]} plus a "pagination" block when limit is given.
    """
    stmt = (
        select(post_replies)
        .where(post_replies.c.post_id == post_id)
        .order_by(*_NEWEST_FIRST)
    )
    if limit:
        stmt = stmt.limit(limit).offset((page - 1) * limit)

    async with get_engine().connect() as conn:
        total = await conn.scalar(
            select(func.count())
            .select_from(post_replies)
            .where(post_replies.c.post_id == post_id)
        )
        rows = (await conn.execute(stmt)).mappings().all()

    result: Dict[str, Any] = {"data": [dict(r) for r in rows]}
    pagination = paginate(page, limit, total or 0)
    if pagination:
        result["pagination"] = pagination
    return result


async def create_reply(user_id: int, post_id: int, content: str) -> Dict[str, Any]:
    """
    Reply to a post as the given user.

    Raises:
        InvalidInputError: If the content is blank.
        BadReferenceError: If the post does not exist.
    """
    _require_content(content)

    async with get_engine().begin() as conn:
        post = await conn.scalar(select(posts.c.id).where(posts.c.id == post_id))
        if post is None:
            raise BadReferenceError("No post matches the given postId")

        row = (
            await conn.execute(
                insert(post_replies)
                .values(post_id=post_id, user_id=user_id, content=content)
                .returning(*post_replies.c)
            )
        ).mappings().one()

    logger.info(f"User {user_id} replied to post {post_id}")
    return dict(row)


async def _owned_reply(conn: AsyncConnection, reply_id: int, user_id: int, action: str) -> None:
    owner = (
        await conn.execute(
            select(post_replies.c.user_id).where(post_replies.c.id == reply_id)
        )
    ).first()
    if owner is None:
        raise NotFoundError("Reply not found")
    if owner.user_id != user_id:
        raise ForbiddenError(f"Not allowed to {action} this reply")


async def update_reply(user_id: int, reply_id: int, content: str) -> None:
    _require_content(content)

    async with get_engine().begin() as conn:
        await _owned_reply(conn, reply_id, user_id, "modify")
        await conn.execute(
            update(post_replies)
            .where(post_replies.c.id == reply_id)
            .values(content=content, updated_at=utcnow())
        )


async def delete_reply(user_id: int, reply_id: int) -> None:
    async with get_engine().begin() as conn:
        await _owned_reply(conn, reply_id, user_id, "delete")
        await conn.execute(delete(post_replies).where(post_replies.c.id == reply_id))
