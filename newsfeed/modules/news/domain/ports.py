"""News module ports."""

from typing import Protocol

from newsfeed.modules.news.domain.entities import FeedPage, FeedQuery


class NewsQueryPort(Protocol):
    """Port for querying one page of the backend news feed."""

    async def fetch_page(
        self,
        query: FeedQuery,
        cursor: str | None = None,
    ) -> FeedPage:
        """Fetch the page after `cursor` (page 1 when None).

        Raises:
            FeedQueryError: on transport errors, timeouts or non-success responses
        """
        ...
