"""News query API client implementation."""

from __future__ import annotations

import time
from typing import Any

import httpx
from loguru import logger

from newsfeed.core.config import settings
from newsfeed.core.infrastructure.http import backend_error_message
from newsfeed.modules.news.domain.entities import Article, FeedPage, FeedQuery
from newsfeed.modules.news.domain.exceptions import FeedQueryError
from newsfeed.modules.news.domain.ports import NewsQueryPort
from newsfeed.modules.news.domain.search import build_search_query, date_range_params


class HttpNewsQueryClient(NewsQueryPort):
    """Fetch feed pages from the intranet `/news` endpoint."""

    def __init__(
        self,
        *,
        base_url: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout_sec: float | None = None,
        page_size: int | None = None,
    ) -> None:
        self.base_url = (base_url or settings.news_api_base).rstrip("/")
        self.client = client
        self.timeout_sec = timeout_sec or settings.HTTP_TIMEOUT_SEC
        self.page_size = page_size or settings.NEWS_PAGE_SIZE

    @property
    def url(self) -> str:
        return f"{self.base_url}{settings.NEWS_QUERY_PATH}"

    async def fetch_page(
        self,
        query: FeedQuery,
        cursor: str | None = None,
    ) -> FeedPage:
        start_time = time.time()
        params = self.build_params(query, cursor)
        headers = {
            "User-Agent": settings.HTTP_USER_AGENT,
            "Accept": "application/json",
            **settings.auth_headers,
        }

        try:
            if self.client is not None:
                response = await self.client.get(self.url, params=params, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self.timeout_sec) as client:
                    response = await client.get(self.url, params=params, headers=headers)
            response.raise_for_status()
            payload = response.json()
        except httpx.TimeoutException as exc:
            logger.warning(f"News query timeout (cursor={cursor}): {exc}")
            raise FeedQueryError(f"Timeout: {exc}") from exc
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            logger.warning(f"News query HTTP error (cursor={cursor}): {status_code}")
            message = backend_error_message(exc.response) or f"HTTP {status_code}"
            raise FeedQueryError(message, status_code=status_code) from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(f"News query error (cursor={cursor}): {exc}")
            raise FeedQueryError(f"Error: {exc}") from exc

        page = self.parse_payload(payload)
        duration_ms = int((time.time() - start_time) * 1000)
        logger.debug(
            f"News query returned {len(page.articles)} articles in {duration_ms}ms "
            f"(cursor={cursor}, next={page.next_cursor})"
        )
        return page

    def build_params(self, query: FeedQuery, cursor: str | None) -> dict[str, str]:
        """Encode a query as `/news` request params."""
        filters = query.filters
        params: dict[str, str] = {}

        q = build_search_query(query.search_text, filters.exact_phrase, filters.search_type)
        if q:
            params["q"] = q
        if query.categories:
            params["category"] = ",".join(sorted(query.categories))
        params.update(
            date_range_params(filters.date_range, filters.date_from, filters.date_to)
        )
        if query.language:
            params["language"] = query.language
        if filters.source:
            params["source"] = filters.source
        params["sort"] = filters.sort.value
        if cursor:
            params["nextPage"] = cursor
        params["limit"] = str(self.page_size)
        return params

    @staticmethod
    def parse_payload(payload: Any) -> FeedPage:
        """Parse the `{success, message, data: {results, nextPage}}` envelope."""
        if not isinstance(payload, dict):
            raise FeedQueryError("News response payload must be an object")

        message = payload.get("message")
        if not isinstance(message, str):
            message = None
        if payload.get("success") is False:
            raise FeedQueryError(message or "News query failed")

        data = payload.get("data", payload)
        if not isinstance(data, dict):
            raise FeedQueryError("News response missing data object")

        results = data.get("results")
        if results is None:
            results = data.get("news", [])
        if not isinstance(results, list):
            raise FeedQueryError("News response results must be a list")

        articles = [Article.from_payload(raw) for raw in results if isinstance(raw, dict)]

        next_page = data.get("nextPage")
        if isinstance(next_page, int) and not isinstance(next_page, bool):
            next_page = str(next_page)
        if not isinstance(next_page, str) or not next_page:
            next_page = None

        return FeedPage(articles=articles, next_cursor=next_page, message=message)
