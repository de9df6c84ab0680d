from typing import Literal, Optional

from fastapi import APIRouter, Query

from crisper.app.models import TopicPage
from crisper.services import topics as topic_service

router = APIRouter(prefix="/api/topics", tags=["Topics"])


@router.get("", response_model=TopicPage, response_model_exclude_none=True, summary="List topics")
async def list_topics(
    page: int = Query(default=1, ge=1),
    limit: Optional[int] = Query(default=None, ge=1),
    sort_by: Literal["name", "createdAt"] = Query(default="createdAt", alias="sortBy"),
    order: Literal["asc", "desc"] = "desc",
):
    """List every topic, or one page of them when `limit` is given."""
    return await topic_service.list_topics(page=page, limit=limit, sort_by=sort_by, order=order)
