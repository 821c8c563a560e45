from __future__ import annotations

import asyncio

import httpx

from .conditions import Condition, tables_for
from .config_schema import DEFAULT_URL_TEMPLATE
from .errors import ConfigError, FetchError
from .media import DEFAULT_MEDIA, MediaUrls
from .normalize import comment_records_from_rows, posts_from_rows
from .post import CommentRecord, Post
from .rows import parse_rows
from .run_log import RunLogger


class SheetsFetcher:
    """
    Reads the posts and comments tables for a condition from a published sheet.

    Each table is one GET against the CSV export URL. There is no retry; a
    failed request surfaces as FetchError.
    """

    def __init__(
        self,
        sheet_id: str,
        *,
        url_template: str = DEFAULT_URL_TEMPLATE,
        timeout_seconds: float = 30.0,
        media: MediaUrls = DEFAULT_MEDIA,
        transport: httpx.AsyncBaseTransport | None = None,
        logger: RunLogger | None = None,
    ) -> None:
        sid = (sheet_id or "").strip()
        if not sid:
            raise ConfigError("Missing Google Sheet ID")

        self._sheet_id = sid
        try:
            url_template.format(sheet_id=sid, sheet_name="")
        except (KeyError, IndexError, ValueError) as e:
            raise ConfigError(f"Invalid sheet URL template: {url_template}") from e

        self._url_template = url_template
        self._timeout = httpx.Timeout(timeout_seconds)
        self._media = media
        self._transport = transport
        self._logger = logger

    def table_url(self, sheet_name: str) -> str:
        return self._url_template.format(sheet_id=self._sheet_id, sheet_name=sheet_name)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def _get_text(self, client: httpx.AsyncClient, sheet_name: str) -> str:
        url = self.table_url(sheet_name)
        if self._logger is not None:
            self._logger.info("table_fetch_started", url=url, sheet=sheet_name)

        try:
            response = await client.get(url)
        except httpx.HTTPError as e:
            raise FetchError(f"Failed to fetch data from Google Sheet: {sheet_name}") from e

        if not response.is_success:
            raise FetchError(
                f"Failed to fetch data from Google Sheet: {sheet_name} "
                f"(HTTP {response.status_code})"
            )

        if self._logger is not None:
            self._logger.info(
                "table_fetch_completed",
                url=url,
                sheet=sheet_name,
                bytes=len(response.content),
            )
        return response.text

    async def fetch_table(self, sheet_name: str) -> str:
        async with self._client() as client:
            return await self._get_text(client, sheet_name)

    async def fetch_condition_tables(self, condition: Condition) -> tuple[str, str]:
        """Fetch the posts and comments tables concurrently; either failure fails both."""
        tables = tables_for(condition)
        async with self._client() as client:
            # Both requests run to completion before the client closes.
            results = await asyncio.gather(
                self._get_text(client, tables.posts),
                self._get_text(client, tables.comments),
                return_exceptions=True,
            )

        for result in results:
            if isinstance(result, BaseException):
                raise result
        posts_text, comments_text = results
        return posts_text, comments_text

    def parse_posts(self, text: str) -> list[Post]:
        return posts_from_rows(parse_rows(text), media=self._media, logger=self._logger)

    def parse_comments(self, text: str) -> list[CommentRecord]:
        return comment_records_from_rows(parse_rows(text), logger=self._logger)

    async def fetch_posts(self, condition: Condition) -> list[Post]:
        try:
            text = await self.fetch_table(tables_for(condition).posts)
        except FetchError as e:
            raise FetchError("Failed to load posts") from e
        return self.parse_posts(text)

    async def fetch_comments(self, condition: Condition) -> list[CommentRecord]:
        try:
            text = await self.fetch_table(tables_for(condition).comments)
        except FetchError as e:
            raise FetchError("Failed to load comments") from e
        return self.parse_comments(text)

    async def fetch_feed_data(
        self, condition: Condition
    ) -> tuple[list[Post], list[CommentRecord]]:
        posts_text, comments_text = await self.fetch_condition_tables(condition)
        return self.parse_posts(posts_text), self.parse_comments(comments_text)
