"""
Topics: paginated listing and on-demand creation.
"""

import math
from typing import Any, Dict, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncConnection

from crisper.app.db import get_engine, insert_ignore
from crisper.app.schema import topics

_TOPIC_SORT = {
    "name": topics.c.name,
    "createdAt": topics.c.created_at,
}


def paginate(page: int, limit: Optional[int], total: int) -> Optional[Dict[str, int]]:
    """Pagination block returned next to a page of results, or None without a limit."""
    if not limit:
        return None
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "total_pages": math.ceil(total / limit),
    }


async def list_topics(
    page: int = 1,
    limit: Optional[int] = None,
    sort_by: str = "createdAt",
    order: str = "desc",
) -> Dict[str, Any]:
    """
    List topics, optionally one page at a time.

    Args:
        page:    1-based page number, only meaningful together with limit.
        limit:   Page size; without it every topic is returned.
        sort_by: "name" or "createdAt" (default).
        order:   "asc" or "desc" (default).

    Returns:
        dict: {"data": [...]} plus a "pagination" block when limit is given.
    """
    column = _TOPIC_SORT.get(sort_by, topics.c.created_at)
    direction = column.asc() if order == "asc" else column.desc()

    stmt = select(topics).order_by(direction, topics.c.name)
    if limit:
        stmt = stmt.limit(limit).offset((page - 1) * limit)

    async with get_engine().connect() as conn:
        total = await conn.scalar(select(func.count()).select_from(topics))
        rows = (await conn.execute(stmt)).mappings().all()

    result: Dict[str, Any] = {"data": [dict(r) for r in rows]}
    pagination = paginate(page, limit, total or 0)
    if pagination:
        result["pagination"] = pagination
    return result


async def ensure_topic(conn: AsyncConnection, name: Optional[str]) -> None:
    """Create the topic inside the caller's transaction if it does not exist yet."""
    if not name:
        return
    await conn.execute(insert_ignore(conn, topics).values(name=name))
