"""
User routes: listing, profile lookup, signup/signin, avatar upload and
account deletion.
"""

from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import JSONResponse

from crisper.app import storage
from crisper.app.models import (
    AvatarOut,
    Message,
    SigninIn,
    SigninOut,
    SignupIn,
    SignupOut,
    User,
)
from crisper.app.security import create_token
from crisper.routes.deps import current_user_id
from crisper.services import users as user_service

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.get("", response_model=List[User], summary="List users")
async def list_users(
    search: Optional[str] = None,
    limit: Optional[int] = Query(default=None, ge=1),
    sort_by: Literal["name", "email", "createdAt"] = Query(default="createdAt", alias="sortBy"),
    order: Literal["asc", "desc"] = "desc",
):
    """
    List users with an optional name search, limit and ordering.
    Passwords are never included. Newest accounts come first by default.
    """
    return await user_service.list_users(search=search, limit=limit, sort_by=sort_by, order=order)


@router.get("/{user_id}", response_model=User, summary="Get a user")
async def get_user(user_id: int):
    return await user_service.get_user(user_id)


@router.post("/signup", response_model=SignupOut, summary="Sign up")
async def signup(payload: SignupIn):
    """
    Register a new account. The email must be unique; the password needs at
    least one letter and one digit and a minimum length of 4.
    """
    info = await user_service.signup(payload.name, payload.email, payload.password)
    return {"message": "Signup successful", "info": info}


@router.post(
    "/signin",
    response_model=SigninOut,
    responses={401: {"description": "Invalid email or password"}},
    summary="Sign in",
)
async def signin(payload: SigninIn):
    """Check the credentials and return a bearer token."""
    user = await user_service.authenticate(payload.email, payload.password)
    if user is None:
        return JSONResponse(
            {
                "message": "Signin failed: invalid email or password",
                "userInfo": None,
                "token": None,
            },
            status_code=401,
        )

    return {
        "message": "Signin successful",
        "user_info": user,
        "token": create_token(user["id"]),
    }


@router.patch("/avatar", response_model=AvatarOut, summary="Update avatar")
async def update_avatar(
    image: UploadFile = File(...),
    user_id: int = Depends(current_user_id),
):
    """Upload a new avatar image for the signed-in user (image files only)."""
    url = await storage.save_image(image, storage.AVATARS, stem=str(user_id))
    await user_service.set_avatar(user_id, url)
    return {"message": "Avatar updated", "avatar_url": url}


@router.delete("", response_model=Message, summary="Delete account")
async def delete_account(user_id: int = Depends(current_user_id)):
    """Delete the signed-in account with its posts, replies and likes. Cannot be undone."""
    await user_service.delete_user(user_id)
    return {"message": "Account deleted"}
