"""News module infrastructure wiring."""

from collections.abc import Callable

import httpx

from newsfeed.modules.news.application.aggregator import FeedAggregator
from newsfeed.modules.news.application.session import FeedSession
from newsfeed.modules.news.infrastructure.news_api_client import HttpNewsQueryClient
from newsfeed.modules.preferences.application.resolver import PreferenceResolver
from newsfeed.modules.preferences.domain.entities import ViewMode
from newsfeed.modules.preferences.infrastructure.http_store import HttpPreferenceStore


def create_feed_session(
    *,
    http_client: httpx.AsyncClient | None = None,
    base_url: str | None = None,
    view_mode: ViewMode | None = None,
    on_onboarding_required: Callable[[], None] | None = None,
) -> FeedSession:
    """Build a FeedSession over the HTTP news and preference endpoints.

    A shared http_client is reused for every request; without one each request
    opens its own client.
    """
    news_client = HttpNewsQueryClient(base_url=base_url, client=http_client)
    store = HttpPreferenceStore(base_url=base_url, client=http_client)
    resolver = PreferenceResolver(store, on_onboarding_required=on_onboarding_required)
    return FeedSession(FeedAggregator(news_client), resolver, view_mode=view_mode)
