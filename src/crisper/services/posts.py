"""
Posts: listing with like counts, lookup, creation, update and deletion.

Every post returned here carries a derived ``likes_count``. When
``include_replies`` is set, a ``replies`` list (newest first) is attached.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncConnection

from crisper.app import storage
from crisper.app.db import get_engine
from crisper.app.errors import ForbiddenError, InvalidInputError, NotFoundError
from crisper.app.schema import post_likes, post_replies, posts, utcnow
from crisper.services.replies import replies_for_posts
from crisper.services.topics import ensure_topic

logger = logging.getLogger(__name__)

_POST_SORT = {
    "title": posts.c.title,
    "createdAt": posts.c.created_at,
}


def _with_likes():
    likes_count = (
        select(func.count())
        .select_from(post_likes)
        .where(post_likes.c.post_id == posts.c.id)
        .scalar_subquery()
        .label("likes_count")
    )
    return select(posts, likes_count)


async def _fetch_post(conn: AsyncConnection, post_id: int) -> Optional[Dict[str, Any]]:
    row = (
        await conn.execute(_with_likes().where(posts.c.id == post_id))
    ).mappings().first()
    return dict(row) if row else None


def _check_images(images: Optional[List[str]]) -> None:
    if not storage.post_images_exist(images):
        raise InvalidInputError("Image does not exist or its path is invalid")


async def list_posts(
    search: Optional[str] = None,
    limit: Optional[int] = None,
    sort_by: str = "createdAt",
    order: str = "desc",
    include_replies: bool = False,
) -> List[Dict[str, Any]]:
    """
    List posts, optionally filtered by a case-insensitive title search.

    Args:
        search:          Substring to look for in post titles.
        limit:           Maximum number of posts to return.
        sort_by:         "title" or "createdAt" (default).
        order:           "asc" or "desc" (default).
        include_replies: Attach each post's replies.

    Returns:
        list[dict]: Posts with their like counts.
    """
    column = _POST_SORT.get(sort_by, posts.c.created_at)
    if order == "asc":
        ordering = (column.asc(), posts.c.id.asc())
    else:
        ordering = (column.desc(), posts.c.id.desc())

    stmt = _with_likes().order_by(*ordering)
    if search:
        stmt = stmt.where(func.lower(posts.c.title).like(f"%{search.lower()}%"))
    if limit is not None:
        stmt = stmt.limit(limit)

    async with get_engine().connect() as conn:
        result = [dict(r) for r in (await conn.execute(stmt)).mappings().all()]
        if include_replies:
            grouped = await replies_for_posts(conn, [p["id"] for p in result])
            for post in result:
                post["replies"] = grouped.get(post["id"], [])

    return result


async def get_post(post_id: int, include_replies: bool = False) -> Dict[str, Any]:
    """
    Fetch one post by id.

    Raises:
        NotFoundError: If no such post exists.
    """
    async with get_engine().connect() as conn:
        post = await _fetch_post(conn, post_id)
        if post is None:
            raise NotFoundError("Post not found")
        if include_replies:
            grouped = await replies_for_posts(conn, [post_id])
            post["replies"] = grouped.get(post_id, [])
    return post


async def create_post(
    user_id: int,
    title: str,
    content: str,
    topics: Optional[str] = None,
    images: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """
    Publish a post as the given user. An unknown topic is created on the fly.

    Raises:
        InvalidInputError: If an image URL does not point at an uploaded file.
    """
    _check_images(images)

    async with get_engine().begin() as conn:
        await ensure_topic(conn, topics)
        post_id = (
            await conn.execute(
                insert(posts)
                .values(
                    creator=user_id,
                    title=title,
                    content=content,
                    topics=topics,
                    images=images,
                )
                .returning(posts.c.id)
            )
        ).scalar_one()
        post = await _fetch_post(conn, post_id)

    logger.info(f"User {user_id} created post {post_id}")
    return post


async def _owned_post(conn: AsyncConnection, post_id: int, user_id: int, action: str) -> None:
    creator = await conn.scalar(select(posts.c.creator).where(posts.c.id == post_id))
    if creator is None:
        raise NotFoundError("Post not found")
    if creator != user_id:
        raise ForbiddenError(f"Not allowed to {action} this post")


async def update_post(user_id: int, post_id: int, changes: Dict[str, Any]) -> None:
    """
    Apply a partial update to a post owned by the user.

    Args:
        user_id: The caller; must be the post's creator.
        post_id: The post to change.
        changes: Any of title, content, topics, images.

    Raises:
        InvalidInputError: If an image URL is invalid.
        NotFoundError:     If the post does not exist.
        ForbiddenError:    If the caller is not the creator.
    """
    _check_images(changes.get("images"))

    async with get_engine().begin() as conn:
        await _owned_post(conn, post_id, user_id, "modify")
        await ensure_topic(conn, changes.get("topics"))
        await conn.execute(
            update(posts)
            .where(posts.c.id == post_id)
            .values(**changes, update_at=utcnow())
        )


async def delete_post(user_id: int, post_id: int) -> None:
    """Delete a post owned by the user together with its likes and replies."""
    async with get_engine().begin() as conn:
        await _owned_post(conn, post_id, user_id, "delete")
        await conn.execute(delete(post_likes).where(post_likes.c.post_id == post_id))
        await conn.execute(delete(post_replies).where(post_replies.c.post_id == post_id))
        await conn.execute(delete(posts).where(posts.c.id == post_id))

    logger.info(f"User {user_id} deleted post {post_id}")
