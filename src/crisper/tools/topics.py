from typing import Literal, Optional

from crisper.app.mcp_app import mcp
from crisper.app.models import Topic, dump
from crisper.services import topics as topic_service


@mcp.tool
async def list_topics(
    page: int = 1,
    limit: Optional[int] = None,
    sort_by: Literal["name", "createdAt"] = "createdAt",
    order: Literal["asc", "desc"] = "desc",
) -> dict:
    """
    List the topics posts can be filed under.

    Args:
        page: 1-based page number (used with limit).
        limit: Page size; omit to get every topic.
        sort_by: "name" or "createdAt".
        order: "asc" or "desc".
    """
    if page < 1 or (limit is not None and limit < 1):
        raise ValueError("page and limit must be >= 1")

    result = await topic_service.list_topics(page=page, limit=limit, sort_by=sort_by, order=order)
    return {
        "ok": True,
        "topics": [dump(Topic, r) for r in result["data"]],
        "total": result.get("pagination", {}).get("total", len(result["data"])),
    }
