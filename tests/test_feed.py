from __future__ import annotations

import random
import unittest
from datetime import datetime, timezone

from photogram.conditions import Condition
from photogram.errors import FetchError, SessionError
from photogram.feed import (
    LOAD_FAILED_MESSAGE,
    NO_CONDITION_MESSAGE,
    FeedSession,
    FeedStatus,
)
from photogram.offline import OfflineSheetTransport
from photogram.post import Comment, CommentRecord, ContentType, Post
from photogram.session import SessionScope
from photogram.sheets_client import SheetsFetcher


def _posts() -> list[Post]:
    return [
        Post(
            id=f"p{i}",
            username=name,
            content_url=f"/p{i}.jpg",
            content_type=ContentType.IMAGE,
            caption=caption,
            likes=10,
        )
        for i, (name, caption) in enumerate(
            [
                ("ana", "Sunset in Lisbon"),
                ("kai", "Fjord morning"),
                ("Lisbon_Lover", "Tram 28"),
                ("mira", "Ramen"),
            ],
            start=1,
        )
    ]


class _FakeSource:
    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[Condition] = []

    async def fetch_feed_data(self, condition: Condition) -> tuple[list[Post], list[CommentRecord]]:
        self.calls.append(condition)
        if self.fail:
            raise FetchError("Failed to fetch data from Google Sheet: Comments1")
        records = [
            CommentRecord(
                post_id="p1",
                comment=Comment(id="c1", username="kai", text="old", timestamp="2024-01-01 10:00:00"),
            ),
            CommentRecord(
                post_id="p1",
                comment=Comment(id="c2", username="mira", text="new", timestamp="2024-01-02 10:00:00"),
            ),
        ]
        return _posts(), records


def _started_scope(code: str = "235") -> SessionScope:
    scope = SessionScope()
    scope.begin("ana", code)
    return scope


class TestFeedLoad(unittest.IsolatedAsyncioTestCase):
    async def test_load_attaches_comments_and_shuffles(self) -> None:
        source = _FakeSource()
        feed = FeedSession(_started_scope("254"), source, rng=random.Random(3))

        state = await feed.load()

        self.assertEqual(state.status, FeedStatus.READY)
        self.assertIsNone(state.error)
        self.assertEqual(source.calls, [Condition.CONDITION2])
        self.assertEqual(sorted(p.id for p in state.posts), ["p1", "p2", "p3", "p4"])
        self.assertEqual([c.id for c in feed.get_post("p1").comments], ["c2", "c1"])

        expected = [p.id for p in _posts()]
        random.Random(3).shuffle(expected)
        self.assertEqual([p.id for p in state.posts], expected)

    async def test_shuffle_can_be_disabled(self) -> None:
        feed = FeedSession(_started_scope(), _FakeSource(), shuffle=False)

        state = await feed.load()

        self.assertEqual([p.id for p in state.posts], ["p1", "p2", "p3", "p4"])

    async def test_failed_fetch_leaves_single_error_and_no_posts(self) -> None:
        feed = FeedSession(_started_scope(), _FakeSource(fail=True))

        state = await feed.load()

        self.assertEqual(state.status, FeedStatus.ERROR)
        self.assertEqual(state.error, LOAD_FAILED_MESSAGE)
        self.assertEqual(state.posts, [])

    async def test_partial_table_failure_is_a_failed_load(self) -> None:
        transport = OfflineSheetTransport({"Posts1": "id,username\np1,ana\n"})
        feed = FeedSession(_started_scope(), SheetsFetcher("abc", transport=transport))

        state = await feed.load()

        self.assertEqual(state.status, FeedStatus.ERROR)
        self.assertEqual(state.error, LOAD_FAILED_MESSAGE)
        self.assertEqual(state.posts, [])

    async def test_missing_posts_table_is_a_failed_load(self) -> None:
        comments = "id,postId,username,text,timestamp\nc1,p1,kai,Wow,2024-01-01 10:00:00\n"
        transport = OfflineSheetTransport({"Comments1": comments})
        feed = FeedSession(_started_scope(), SheetsFetcher("abc", transport=transport))

        state = await feed.load()

        self.assertEqual(state.status, FeedStatus.ERROR)
        self.assertEqual(state.error, LOAD_FAILED_MESSAGE)
        self.assertEqual(state.posts, [])
        self.assertIn("Posts1", transport.requested)

    async def test_out_of_range_comment_timestamp_does_not_abort_load(self) -> None:
        posts = "id,username,contentUrl,contentType\np1,ana,lake,image\n"
        comments = (
            "id,postId,username,text,timestamp\n"
            "c1,p1,kai,Ancient,1/1/0001 00:00:00\n"
            "c2,p1,mira,Recent,2024-01-01 10:00:00\n"
        )
        transport = OfflineSheetTransport({"Posts1": posts, "Comments1": comments})
        feed = FeedSession(_started_scope(), SheetsFetcher("abc", transport=transport))

        state = await feed.load()

        self.assertEqual(state.status, FeedStatus.READY)
        self.assertEqual([c.id for c in feed.get_post("p1").comments], ["c2", "c1"])

    async def test_load_without_registration(self) -> None:
        source = _FakeSource()
        feed = FeedSession(SessionScope(), source)

        state = await feed.load()

        self.assertEqual(state.status, FeedStatus.ERROR)
        self.assertEqual(state.error, NO_CONDITION_MESSAGE)
        self.assertEqual(source.calls, [])


class TestFeedInteractions(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.scope = _started_scope()
        self.feed = FeedSession(self.scope, _FakeSource(), shuffle=False)
        await self.feed.load()

    def test_toggle_like(self) -> None:
        post = self.feed.toggle_like("p2")
        self.assertTrue(post.liked)
        self.assertEqual(post.likes, 11)

        post = self.feed.toggle_like("p2")
        self.assertFalse(post.liked)
        self.assertEqual(post.likes, 10)

    def test_toggle_save(self) -> None:
        self.assertTrue(self.feed.toggle_save("p3").saved)
        self.assertFalse(self.feed.toggle_save("p3").saved)

    def test_add_comment_prepends_with_session_username(self) -> None:
        now = datetime(2024, 2, 1, tzinfo=timezone.utc)

        comment = self.feed.add_comment("p1", " lovely ", now=now)

        assert comment is not None
        self.assertEqual(comment.username, "ana")
        self.assertEqual([c.id for c in self.feed.get_post("p1").comments][0], comment.id)
        self.assertEqual(len(self.feed.get_post("p1").comments), 3)

    def test_blank_comment_is_ignored(self) -> None:
        self.assertIsNone(self.feed.add_comment("p1", "  "))
        self.assertEqual(len(self.feed.get_post("p1").comments), 2)

    def test_unknown_post(self) -> None:
        with self.assertRaises(KeyError):
            self.feed.toggle_like("missing")

    def test_search_matches_caption_or_username(self) -> None:
        self.assertEqual([p.id for p in self.feed.search("lisbon")], ["p1", "p3"])
        self.assertEqual([p.id for p in self.feed.search("")], ["p1", "p2", "p3", "p4"])
        self.assertEqual(self.feed.search("nothing-here"), [])

    def test_comment_after_end_fails_fast(self) -> None:
        self.feed.end()
        with self.assertRaises(SessionError):
            self.feed.add_comment("p1", "too late")


if __name__ == "__main__":
    unittest.main()
