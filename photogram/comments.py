from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Sequence

from .post import Comment, CommentRecord, Post
from .timestamps import sort_key


def _newest_first(comments: Iterable[Comment]) -> list[Comment]:
    keyed = [(sort_key(c.timestamp), c) for c in comments]
    dated = [(k, c) for k, c in keyed if k is not None]
    undated = [c for k, c in keyed if k is None]
    dated.sort(key=lambda pair: pair[0], reverse=True)
    return [c for _, c in dated] + undated


def comments_for_post(records: Iterable[CommentRecord], post_id: str) -> list[Comment]:
    """Comments whose foreign key matches `post_id`, most recent first."""
    return _newest_first(r.comment for r in records if r.post_id == post_id)


def attach_comments(posts: Sequence[Post], records: Sequence[CommentRecord]) -> list[Post]:
    by_post: dict[str, list[Comment]] = {}
    for record in records:
        by_post.setdefault(record.post_id, []).append(record.comment)

    for post in posts:
        post.comments = _newest_first(by_post.get(post.id, []))
    return list(posts)


def new_comment(username: str, text: str, *, now: datetime | None = None) -> Comment | None:
    """
    Build a live comment stamped with the current time; blank text yields None.

    Live comments are prepended, which keeps newest-first order as long as
    stored comments are not future-dated.
    """
    body = (text or "").strip()
    if not body:
        return None

    moment = now or datetime.now(timezone.utc)
    millis = int(moment.timestamp() * 1000)
    return Comment(
        id=f"c{millis}",
        username=username,
        text=body,
        timestamp=moment.isoformat(),
    )
