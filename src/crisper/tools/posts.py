"""
Post tools.

Read-only MCP tools over posts and their replies:
  - get_all_posts:    list posts with like counts, optionally searched/sorted.
  - get_post:         one post, optionally with its replies.
  - get_post_replies: replies of a post, optionally paginated.
"""

from typing import Literal, Optional

from crisper.app.errors import NotFoundError
from crisper.app.mcp_app import mcp
from crisper.app.models import Pagination, Post, Reply, dump
from crisper.services import posts as post_service
from crisper.services import replies as reply_service


@mcp.tool
async def get_all_posts(
    search: Optional[str] = None,
    limit: Optional[int] = None,
    sort_by: Literal["title", "createdAt"] = "createdAt",
    order: Literal["asc", "desc"] = "desc",
    include_replies: bool = False,
) -> dict:
    """
    List the posts published on the Crisper platform.

    Args:
        search: Case-insensitive text to look for in post titles.
        limit: Maximum number of posts to return.
        sort_by: Sort key, "title" or "createdAt".
        order: "asc" or "desc" (newest first by default).
        include_replies: Include each post's replies.

    Returns:
        dict: {"ok": True, "posts": [...]} where every post has a likesCount.

    Raises:
        ValueError: If limit is not positive.
    """
    if limit is not None and limit <= 0:
        raise ValueError("limit must be > 0")

    rows = await post_service.list_posts(
        search=search,
        limit=limit,
        sort_by=sort_by,
        order=order,
        include_replies=include_replies,
    )
    return {"ok": True, "posts": [dump(Post, r) for r in rows]}


@mcp.tool
async def get_post(post_id: int, include_replies: bool = False) -> dict:
    """
    Get a single post by id.

    Args:
        post_id: Id of the post.
        include_replies: Include the post's replies (newest first).

    Returns:
        dict: {"ok": True, "post": {...}} on success, or an error with
              "POST_NOT_FOUND" if the post does not exist.
    """
    try:
        row = await post_service.get_post(post_id, include_replies=include_replies)
    except NotFoundError:
        return {"ok": False, "error": "POST_NOT_FOUND", "post_id": post_id}
    return {"ok": True, "post": dump(Post, row)}


@mcp.tool
async def get_post_replies(post_id: int, page: int = 1, limit: Optional[int] = None) -> dict:
    """
    List the replies left on a post, newest first.

    Args:
        post_id: Id of the post.
        page: 1-based page number (used with limit).
        limit: Page size; omit to get every reply.

    Returns:
        dict: The replies, plus pagination details when limit is given.

    Raises:
        ValueError: If page or limit is smaller than 1.
    """
    if page < 1 or (limit is not None and limit < 1):
        raise ValueError("page and limit must be >= 1")

    result = await reply_service.list_replies(post_id, page=page, limit=limit)
    out = {"ok": True, "replies": [dump(Reply, r) for r in result["data"]]}
    if "pagination" in result:
        out["pagination"] = dump(Pagination, result["pagination"])
    return out
