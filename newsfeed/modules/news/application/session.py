"""Feed session: the seam the rendering surface drives."""

from loguru import logger

from newsfeed.modules.news.application.aggregator import FeedAggregator
from newsfeed.modules.news.domain.entities import FeedFilters, FeedPhase, FeedState
from newsfeed.modules.preferences.application.resolver import PreferenceResolver
from newsfeed.modules.preferences.domain.entities import ViewMode


class FeedSession:
    """Combine preference resolution with feed aggregation.

    A view-mode change or a search submission starts a fresh query with the
    resolved categories; a visible scroll sentinel continues the current one.
    Viewport tracking itself stays with the rendering surface.
    """

    def __init__(
        self,
        aggregator: FeedAggregator,
        resolver: PreferenceResolver,
        view_mode: ViewMode | None = None,
    ):
        self.aggregator = aggregator
        self.resolver = resolver
        self.view_mode = view_mode or ViewMode.personal()
        self.search_text = ""
        self.filters = FeedFilters()

    @property
    def state(self) -> FeedState:
        return self.aggregator.state

    async def open(self) -> FeedState:
        """Load preferences once, then fetch page 1 for the current view."""
        await self.resolver.load()
        return await self._start_fresh()

    async def select_view(self, view_mode: ViewMode) -> FeedState:
        self.view_mode = view_mode
        return await self._start_fresh()

    async def submit_search(
        self,
        search_text: str,
        filters: FeedFilters | None = None,
    ) -> FeedState:
        self.search_text = search_text
        if filters is not None:
            self.filters = filters
        return await self._start_fresh()

    async def on_sentinel_visible(self) -> bool:
        """Continue the feed when the end-of-list sentinel scrolls into view.

        Returns True when a continuation request was issued.
        """
        state = self.state
        if not state.has_more or state.phase != FeedPhase.IDLE:
            return False
        if self.aggregator.in_flight:
            return False
        await self.aggregator.load_more()
        return True

    async def retry(self) -> FeedState:
        """Re-run whatever failed: the continuation if one failed, else page 1."""
        state = self.state
        if state.phase != FeedPhase.ERROR:
            return state
        if state.can_load_more:
            logger.info("Retrying failed continuation")
            return await self.aggregator.load_more()
        logger.info("Retrying failed fresh query")
        return await self._start_fresh()

    async def _start_fresh(self) -> FeedState:
        categories = self.resolver.resolve(self.view_mode)
        return await self.aggregator.start_fresh_query(
            self.search_text,
            categories,
            self.resolver.language,
            self.filters,
        )
