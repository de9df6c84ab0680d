"""
Post routes: listing, lookup, image upload, creation, update and deletion.
"""

from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile

from crisper.app import storage
from crisper.app.models import ImageOut, Message, Post, PostCreated, PostIn, PostUpdateIn
from crisper.routes.deps import current_user_id
from crisper.services import posts as post_service

router = APIRouter(prefix="/api/posts", tags=["Posts"])


@router.get(
    "",
    response_model=List[Post],
    summary="List posts",
)
async def list_posts(
    search: Optional[str] = None,
    limit: Optional[int] = Query(default=None, ge=1),
    sort_by: Literal["title", "createdAt"] = Query(default="createdAt", alias="sortBy"),
    order: Literal["asc", "desc"] = "desc",
    include_replies: bool = Query(default=False, alias="includeReplies"),
):
    """
    List posts with their like counts. Supports a title search, a limit and
    ordering (newest first by default); replies can be included.
    """
    return await post_service.list_posts(
        search=search,
        limit=limit,
        sort_by=sort_by,
        order=order,
        include_replies=include_replies,
    )


@router.get(
    "/{post_id}",
    response_model=Post,
    summary="Get a post",
)
async def get_post(
    post_id: int,
    include_replies: bool = Query(default=False, alias="includeReplies"),
):
    return await post_service.get_post(post_id, include_replies=include_replies)


@router.post("/image", response_model=ImageOut, summary="Upload a post image")
async def upload_image(
    image: UploadFile = File(...),
    user_id: int = Depends(current_user_id),
):
    """
    Upload an image to attach to a post. The returned URL goes into the
    `images` list when creating or updating the post.
    """
    url = await storage.save_image(image, storage.POST_IMAGES)
    return {"message": "Image uploaded", "image_url": url}


@router.post("", response_model=PostCreated, summary="Create a post")
async def create_post(payload: PostIn, user_id: int = Depends(current_user_id)):
    """Publish a post; an unknown topic is created automatically."""
    post = await post_service.create_post(
        user_id,
        title=payload.title,
        content=payload.content,
        topics=payload.topics,
        images=payload.images,
    )
    return {"message": "Post created", "post": post}


@router.put("/{post_id}", response_model=Message, summary="Update a post")
async def update_post(
    post_id: int,
    payload: PostUpdateIn,
    user_id: int = Depends(current_user_id),
):
    """Change the title, content, topic or images of one of your posts."""
    await post_service.update_post(user_id, post_id, payload.model_dump(exclude_unset=True))
    return {"message": "Post updated"}


@router.delete("/{post_id}", response_model=Message, summary="Delete a post")
async def delete_post(post_id: int, user_id: int = Depends(current_user_id)):
    await post_service.delete_post(user_id, post_id)
    return {"message": "Post deleted"}
