"""
Table definitions.

SQLAlchemy Core tables for the Crisper data model. Services build their
queries from these objects; nothing else in the project writes raw SQL.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    PrimaryKeyConstraint,
    Table,
    Text,
)

DEFAULT_AVATAR = "/s3/avatars/default.png"

metadata = MetaData()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", Text, nullable=False),
    Column("email", Text, nullable=False, unique=True),
    Column("password", Text, nullable=False),
    Column("description", Text, default=""),
    Column("avatar", Text, default=DEFAULT_AVATAR),
    Column("created_at", DateTime(timezone=True), nullable=False, default=utcnow),
    Column("update_at", DateTime(timezone=True), nullable=False, default=utcnow),
)

topics = Table(
    "topics",
    metadata,
    Column("name", Text, primary_key=True),
    Column("created_at", DateTime(timezone=True), nullable=False, default=utcnow),
)

posts = Table(
    "posts",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("creator", Integer, ForeignKey("users.id"), nullable=False),
    Column("title", Text, nullable=False),
    Column("content", Text, nullable=False),
    Column("topics", Text, ForeignKey("topics.name"), nullable=True),
    Column("images", JSON, nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False, default=utcnow),
    Column("update_at", DateTime(timezone=True), nullable=False, default=utcnow),
)

post_likes = Table(
    "post_likes",
    metadata,
    Column("user_id", Integer, ForeignKey("users.id"), nullable=False),
    Column("post_id", Integer, ForeignKey("posts.id"), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False, default=utcnow),
    PrimaryKeyConstraint("user_id", "post_id"),
)

post_replies = Table(
    "post_replies",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("post_id", Integer, ForeignKey("posts.id"), nullable=False),
    Column("user_id", Integer, ForeignKey("users.id"), nullable=False),
    Column("content", Text, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False, default=utcnow),
    Column("updated_at", DateTime(timezone=True), nullable=False, default=utcnow),
)
