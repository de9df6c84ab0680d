"""
Request and response models.

Field names are snake_case in Python and camelCase on the wire
(``created_at`` <-> ``createdAt``); both spellings are accepted on input.
"""

import re
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_serializer
from pydantic.alias_generators import to_camel

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_PASSWORD = re.compile(r"^(?=.*[A-Za-z])(?=.*\d)[A-Za-z\d]{4,}$")


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _check_email(value: str) -> str:
    if not _EMAIL.match(value):
        raise ValueError("must be a valid email address")
    return value


def _check_password(value: str) -> str:
    if not _PASSWORD.match(value):
        raise ValueError(
            "must be at least 4 letters or digits and contain both a letter and a digit"
        )
    return value


class Message(ApiModel):
    message: str


class Pagination(ApiModel):
    page: int
    limit: int
    total: int
    total_pages: int


# --- Users ---

class User(ApiModel):
    id: int
    name: str
    email: str
    description: Optional[str] = None
    avatar: Optional[str] = None
    created_at: datetime
    update_at: datetime


class Credentials(ApiModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def valid_email(cls, value: str) -> str:
        return _check_email(value)

    @field_validator("password")
    @classmethod
    def valid_password(cls, value: str) -> str:
        return _check_password(value)


class SignupIn(Credentials):
    name: str


class SigninIn(Credentials):
    pass


class SignupInfo(ApiModel):
    id: int
    name: str
    email: str


class SignupOut(ApiModel):
    message: str
    info: SignupInfo


class UserInfo(ApiModel):
    id: int
    name: str
    email: str
    avatar: Optional[str] = None
    description: Optional[str] = None
    created_at: datetime


class SigninOut(ApiModel):
    message: str
    user_info: UserInfo
    token: str


class AvatarOut(ApiModel):
    message: str
    avatar_url: str


# --- Replies ---

class Reply(ApiModel):
    id: int
    post_id: int
    user_id: int
    content: str
    created_at: datetime
    updated_at: datetime


class ReplyIn(ApiModel):
    post_id: int
    content: str


class ReplyUpdateIn(ApiModel):
    content: str


class ReplyCreated(ApiModel):
    message: str
    reply: Reply


class ReplyPage(ApiModel):
    data: List[Reply]
    pagination: Optional[Pagination] = None


# --- Posts ---

class Post(ApiModel):
    id: int
    creator: int
    title: str
    content: str
    topics: Optional[str] = None
    images: Optional[List[str]] = None
    likes_count: int = 0
    created_at: datetime
    update_at: datetime
    replies: Optional[List[Reply]] = None

    @model_serializer(mode="wrap")
    def serialize(self, handler):
        data = handler(self)
        # replies are only part of the payload when they were asked for
        if self.replies is None:
            data.pop("replies", None)
        return data


class PostIn(ApiModel):
    title: str
    content: str
    topics: Optional[str] = None
    images: Optional[List[str]] = None


class PostUpdateIn(ApiModel):
    title: Optional[str] = None
    content: Optional[str] = None
    topics: Optional[str] = None
    images: Optional[List[str]] = None

    @field_validator("title", "content")
    @classmethod
    def not_null(cls, value: Optional[str]) -> str:
        # Omit the field to keep it; null would clear a required column
        if value is None:
            raise ValueError("must not be null")
        return value


class PostCreated(ApiModel):
    message: str
    post: Post


class ImageOut(ApiModel):
    message: str
    image_url: str


# --- Likes ---

class LikeIn(ApiModel):
    liked: bool


class LikeOut(ApiModel):
    message: str
    liked: bool


class LikeStatus(ApiModel):
    post_id: int
    liked: bool


# --- Topics ---

class Topic(ApiModel):
    name: str
    created_at: datetime


class TopicPage(ApiModel):
    data: List[Topic]
    pagination: Optional[Pagination] = None


# --- Agent ---

class ChatTurn(ApiModel):
    role: Literal["user", "assistant"]
    content: str


class AgentIn(ApiModel):
    message: str
    history: List[ChatTurn] = Field(default_factory=list)


class AgentOut(ApiModel):
    answer: str
    trace: list


def dump(model: type, data: dict) -> dict:
    """Validate a service row through a model and return its JSON-ready wire form."""
    return model.model_validate(data).model_dump(mode="json", by_alias=True)
