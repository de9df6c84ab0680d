from fastapi import APIRouter, Depends

from crisper.app.models import LikeIn, LikeOut, LikeStatus
from crisper.routes.deps import current_user_id
from crisper.services import likes as like_service

router = APIRouter(prefix="/api/posts/likes", tags=["Likes"])


@router.post("/{post_id}", response_model=LikeOut, summary="Set like state")
async def set_like(post_id: int, payload: LikeIn, user_id: int = Depends(current_user_id)):
    """Send {"liked": true} to like a post and {"liked": false} to remove the like."""
    return await like_service.set_like(user_id, post_id, payload.liked)


@router.get("/{post_id}", response_model=LikeStatus, summary="Check like state")
async def like_status(post_id: int, user_id: int = Depends(current_user_id)):
    return await like_service.like_status(user_id, post_id)
