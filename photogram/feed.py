from __future__ import annotations

import random
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Protocol

from .comments import attach_comments, new_comment
from .conditions import Condition
from .errors import FetchError, SessionError
from .post import Comment, CommentRecord, Post
from .run_log import RunLogger
from .session import SessionScope

NO_CONDITION_MESSAGE = "No condition set. Please register first."
LOAD_FAILED_MESSAGE = "Failed to load data. Please try again later."


class FeedStatus(str, Enum):
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class FeedSource(Protocol):
    async def fetch_feed_data(
        self, condition: Condition
    ) -> tuple[list[Post], list[CommentRecord]]: ...


@dataclass
class FeedState:
    status: FeedStatus = FeedStatus.LOADING
    posts: list[Post] = field(default_factory=list)
    error: str | None = None


class FeedSession:
    """
    The participant's feed for one session.

    Loading is all-or-nothing: if either table fails, the state is ERROR with
    a single message and no posts. Interactions mutate posts in memory only.
    """

    def __init__(
        self,
        scope: SessionScope,
        source: FeedSource,
        *,
        rng: random.Random | None = None,
        shuffle: bool = True,
        logger: RunLogger | None = None,
    ) -> None:
        self._scope = scope
        self._source = source
        self._rng = rng or random.Random()
        self._shuffle = bool(shuffle)
        self._logger = logger
        self.state = FeedState()

    @property
    def posts(self) -> list[Post]:
        return self.state.posts

    def _fail(self, message: str) -> FeedState:
        self.state = FeedState(status=FeedStatus.ERROR, posts=[], error=message)
        return self.state

    async def load(self) -> FeedState:
        self.state = FeedState()

        try:
            identity = self._scope.identity
        except SessionError:
            return self._fail(NO_CONDITION_MESSAGE)

        try:
            posts, records = await self._source.fetch_feed_data(identity.condition)
        except FetchError as e:
            if self._logger is not None:
                self._logger.exception(
                    "feed_load_failed", exc=e, condition=identity.condition.value
                )
            return self._fail(LOAD_FAILED_MESSAGE)

        ordered = attach_comments(posts, records)
        if self._shuffle:
            self._rng.shuffle(ordered)

        self.state = FeedState(status=FeedStatus.READY, posts=ordered)
        if self._logger is not None:
            self._logger.info(
                "feed_loaded",
                condition=identity.condition.value,
                posts=len(ordered),
                comments=len(records),
                order=[p.id for p in ordered],
            )
        return self.state

    def get_post(self, post_id: str) -> Post:
        for post in self.state.posts:
            if post.id == post_id:
                return post
        raise KeyError(f"Unknown post id: {post_id}")

    def toggle_like(self, post_id: str) -> Post:
        post = self.get_post(post_id)
        if post.liked:
            post.likes = max(0, post.likes - 1)
        else:
            post.likes += 1
        post.liked = not post.liked
        self._log_interaction("post_like_toggled", post, liked=post.liked, likes=post.likes)
        return post

    def toggle_save(self, post_id: str) -> Post:
        post = self.get_post(post_id)
        post.saved = not post.saved
        self._log_interaction("post_save_toggled", post, saved=post.saved)
        return post

    def add_comment(
        self, post_id: str, text: str, *, now: datetime | None = None
    ) -> Comment | None:
        """Prepend a comment by the session user; blank text is ignored."""
        post = self.get_post(post_id)
        comment = new_comment(self._scope.identity.username, text, now=now)
        if comment is None:
            return None

        post.comments.insert(0, comment)
        self._log_interaction("comment_added", post, comment_id=comment.id)
        return comment

    def search(self, keyword: str) -> list[Post]:
        needle = (keyword or "").lower()
        if not needle:
            return list(self.state.posts)
        return [
            p
            for p in self.state.posts
            if needle in p.caption.lower() or needle in p.username.lower()
        ]

    def end(self) -> None:
        self._scope.end()
        if self._logger is not None:
            self._logger.info("session_ended")

    def _log_interaction(self, event: str, post: Post, **data: object) -> None:
        if self._logger is not None:
            self._logger.info(event, post_id=post.id, **data)
