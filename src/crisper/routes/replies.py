from typing import Optional

from fastapi import APIRouter, Depends, Query

from crisper.app.models import Message, ReplyCreated, ReplyIn, ReplyPage, ReplyUpdateIn
from crisper.routes.deps import current_user_id
from crisper.services import replies as reply_service

router = APIRouter(prefix="/api/post/reply", tags=["Reply"])


@router.get(
    "/{post_id}",
    response_model=ReplyPage,
    response_model_exclude_none=True,
    summary="List the replies of a post",
)
async def list_replies(
    post_id: int,
    page: int = Query(default=1, ge=1),
    limit: Optional[int] = Query(default=None, ge=1),
):
    """Newest first. Pagination details are returned when `limit` is given."""
    return await reply_service.list_replies(post_id, page=page, limit=limit)


@router.post("", response_model=ReplyCreated, summary="Reply to a post")
async def create_reply(payload: ReplyIn, user_id: int = Depends(current_user_id)):
    reply = await reply_service.create_reply(user_id, payload.post_id, payload.content)
    return {"message": "Reply created", "reply": reply}


@router.put("/{reply_id}", response_model=Message, summary="Update a reply")
async def update_reply(
    reply_id: int,
    payload: ReplyUpdateIn,
    user_id: int = Depends(current_user_id),
):
    """Only the author may change a reply."""
    await reply_service.update_reply(user_id, reply_id, payload.content)
    return {"message": "Reply updated"}


@router.delete("/{reply_id}", response_model=Message, summary="Delete a reply")
async def delete_reply(reply_id: int, user_id: int = Depends(current_user_id)):
    """Only the author may delete a reply."""
    await reply_service.delete_reply(user_id, reply_id)
    return {"message": "Reply deleted"}
