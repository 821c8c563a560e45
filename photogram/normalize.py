from __future__ import annotations

import re
from enum import Enum
from typing import Any, Callable, Mapping, Sequence, TypeVar

from .media import DEFAULT_MEDIA, MediaUrls
from .post import Comment, CommentRecord, ContentType, Post
from .run_log import RunLogger

E = TypeVar("E", bound=Enum)

Converter = Callable[[str, MediaUrls], Any]

_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")


class PostColumn(str, Enum):
    ID = "id"
    USERNAME = "username"
    CAPTION = "caption"
    LOCATION = "location"
    TIMESTAMP = "timestamp"
    USER_AVATAR = "userAvatar"
    CONTENT_URL = "contentUrl"
    THUMBNAIL_URL = "thumbnailUrl"
    LIKES = "likes"
    CONTENT_TYPE = "contentType"


class CommentColumn(str, Enum):
    ID = "id"
    POST_ID = "postId"
    USERNAME = "username"
    TEXT = "text"
    TIMESTAMP = "timestamp"


def _copy(value: str, media: MediaUrls) -> str:
    return value


def _optional(value: str, media: MediaUrls) -> str | None:
    s = value.strip()
    return s if s else None


def _avatar(value: str, media: MediaUrls) -> str:
    return media.avatar_url(value)


def _image(value: str, media: MediaUrls) -> str:
    return media.image_url(value)


def _content(value: str, media: MediaUrls) -> str | None:
    # A blank filename counts as missing content, not a placeholder image.
    if not value.strip():
        return None
    return media.image_url(value)


def coerce_likes(value: str, media: MediaUrls | None = None) -> int:
    """Leading-integer parse; anything unparseable or negative becomes 0."""
    m = _LEADING_INT_RE.match(value or "")
    if m is None:
        return 0
    return max(0, int(m.group(1)))


def coerce_content_type(value: str, media: MediaUrls | None = None) -> ContentType | None:
    try:
        return ContentType((value or "").strip())
    except ValueError:
        return None


POST_COLUMNS: Mapping[PostColumn, tuple[str, Converter]] = {
    PostColumn.ID: ("id", _copy),
    PostColumn.USERNAME: ("username", _copy),
    PostColumn.CAPTION: ("caption", _copy),
    PostColumn.LOCATION: ("location", _optional),
    PostColumn.TIMESTAMP: ("timestamp", _optional),
    PostColumn.USER_AVATAR: ("user_avatar", _avatar),
    PostColumn.CONTENT_URL: ("content_url", _content),
    PostColumn.THUMBNAIL_URL: ("thumbnail_url", _image),
    PostColumn.LIKES: ("likes", coerce_likes),
    PostColumn.CONTENT_TYPE: ("content_type", coerce_content_type),
}

COMMENT_COLUMNS: Mapping[CommentColumn, tuple[str, Converter]] = {
    CommentColumn.ID: ("id", _copy),
    CommentColumn.POST_ID: ("post_id", _copy),
    CommentColumn.USERNAME: ("username", _copy),
    CommentColumn.TEXT: ("text", _copy),
    CommentColumn.TIMESTAMP: ("timestamp", _copy),
}


def _resolve_header(enum_cls: type[E], header: str) -> E | None:
    try:
        return enum_cls(header.strip())
    except ValueError:
        return None


def unknown_columns(headers: Sequence[str], enum_cls: type[Enum]) -> list[str]:
    return [h for h in headers if _resolve_header(enum_cls, h) is None]


def _map_row(
    headers: Sequence[str],
    row: Sequence[str],
    *,
    enum_cls: type[E],
    table: Mapping[E, tuple[str, Converter]],
    media: MediaUrls,
) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for index, header in enumerate(headers):
        column = _resolve_header(enum_cls, header)
        if column is None:
            continue
        attr, convert = table[column]
        value = row[index] if index < len(row) else ""
        out[attr] = convert(value, media)
    return out


def post_from_row(
    headers: Sequence[str],
    row: Sequence[str],
    *,
    media: MediaUrls = DEFAULT_MEDIA,
) -> Post:
    fields = _map_row(headers, row, enum_cls=PostColumn, table=POST_COLUMNS, media=media)

    content_type = fields.pop("content_type", None)
    content_url = fields.pop("content_url", None)
    if content_type is None or content_url is None:
        content_type = ContentType.IMAGE
        content_url = media.placeholder_path

    return Post(
        id=fields.pop("id", ""),
        username=fields.pop("username", ""),
        content_url=content_url,
        content_type=content_type,
        **fields,
    )


def comment_record_from_row(headers: Sequence[str], row: Sequence[str]) -> CommentRecord:
    fields = _map_row(
        headers,
        row,
        enum_cls=CommentColumn,
        table=COMMENT_COLUMNS,
        media=DEFAULT_MEDIA,
    )
    return CommentRecord(
        post_id=fields.get("post_id", ""),
        comment=Comment(
            id=fields.get("id", ""),
            username=fields.get("username", ""),
            text=fields.get("text", ""),
            timestamp=fields.get("timestamp", ""),
        ),
    )


def _log_unknown(
    logger: RunLogger | None, table: str, headers: Sequence[str], enum_cls: type[Enum]
) -> None:
    if logger is None:
        return
    ignored = unknown_columns(headers, enum_cls)
    if ignored:
        logger.warning("unknown_columns", table=table, columns=ignored)


def posts_from_rows(
    rows: Sequence[Sequence[str]],
    *,
    media: MediaUrls = DEFAULT_MEDIA,
    logger: RunLogger | None = None,
) -> list[Post]:
    if not rows:
        return []

    headers, data_rows = rows[0], rows[1:]
    _log_unknown(logger, "posts", headers, PostColumn)
    return [post_from_row(headers, row, media=media) for row in data_rows]


def comment_records_from_rows(
    rows: Sequence[Sequence[str]],
    *,
    logger: RunLogger | None = None,
) -> list[CommentRecord]:
    if not rows:
        return []

    headers, data_rows = rows[0], rows[1:]
    _log_unknown(logger, "comments", headers, CommentColumn)
    return [comment_record_from_row(headers, row) for row in data_rows]
