from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ContentType(str, Enum):
    IMAGE = "image"
    VIDEO = "video"


@dataclass(frozen=True)
class Comment:
    id: str
    username: str
    text: str
    timestamp: str


@dataclass(frozen=True)
class CommentRecord:
    """A comment still carrying the post foreign key; only exists during ingestion."""

    post_id: str
    comment: Comment


@dataclass
class Post:
    """
    One feed entry for the current session.

    `content_type` and `content_url` are always set together; `liked` and
    `saved` track the participant's interactions and are never persisted.
    """

    id: str
    username: str
    content_url: str
    content_type: ContentType
    caption: str = ""
    likes: int = 0
    user_avatar: str | None = None
    thumbnail_url: str | None = None
    comments: list[Comment] = field(default_factory=list)
    timestamp: str | None = None
    location: str | None = None

    liked: bool = False
    saved: bool = False
