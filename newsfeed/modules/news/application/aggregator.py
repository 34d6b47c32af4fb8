"""信息流聚合服务。

协调分页查询、结果合并、去重、游标跟踪和加载状态。

并发模型：
- 单线程事件循环，只在两次网络调用处挂起
- 每次查询携带 generation，结算时 generation 不匹配即丢弃（新查询覆盖旧查询）
- in-flight 标志在第一次 await 之前同步检查并设置，保证同一时刻最多一个请求
"""

from collections.abc import Iterable
from dataclasses import replace

from loguru import logger

from newsfeed.core.domain.exceptions import DomainException
from newsfeed.core.infrastructure.logging import FeedEvents
from newsfeed.modules.news.domain.dedup import merge_unique
from newsfeed.modules.news.domain.entities import (
    FeedFilters,
    FeedPage,
    FeedPhase,
    FeedQuery,
    FeedState,
)
from newsfeed.modules.news.domain.ports import NewsQueryPort


class FeedAggregator:
    """信息流聚合器。

    职责：
    - 发起首页查询（清空已累积结果）
    - 按游标加载下一页并与已累积结果去重合并
    - 维护 IDLE / LOADING_FRESH / LOADING_MORE / ERROR 状态
    - 丢弃被新查询覆盖的过期结果

    渲染层只能读取 state 并调用 start_fresh_query / load_more。
    """

    def __init__(self, client: NewsQueryPort):
        self.client = client
        self._state = FeedState()
        self._seen_keys: set[str] = set()
        self._generation = 0
        self._in_flight = False

    @property
    def state(self) -> FeedState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    async def start_fresh_query(
        self,
        search_text: str,
        categories: Iterable[str],
        language: str,
        filters: FeedFilters | None = None,
    ) -> FeedState:
        """Reset the feed and fetch page 1 of a new query.

        Any fetch still in flight is superseded: its result is discarded when
        it settles.
        """
        query = FeedQuery(
            search_text=search_text,
            categories=frozenset(categories),
            language=language,
            filters=filters or FeedFilters(),
        )

        self._generation += 1
        generation = self._generation
        self._in_flight = True
        self._seen_keys = set()
        self._state = FeedState(phase=FeedPhase.LOADING_FRESH, query=query)

        FeedEvents.query_started(
            generation=generation,
            fresh=True,
            categories=sorted(query.categories),
            language=language,
            search_text=search_text,
        )
        return await self._fetch(generation, query, cursor=None)

    async def load_more(self) -> FeedState:
        """Fetch the next page; a no-op unless more pages exist and nothing is in flight.

        After a failed continuation the cursor is unchanged, so calling again
        retries the same page.
        """
        state = self._state
        if self._in_flight or not state.can_load_more or state.query is None:
            logger.debug(
                f"load_more ignored: in_flight={self._in_flight}, "
                f"phase={state.phase}, has_more={state.has_more}"
            )
            return state

        self._in_flight = True
        generation = self._generation
        self._state = replace(state, phase=FeedPhase.LOADING_MORE, error_message=None)

        FeedEvents.query_started(
            generation=generation,
            fresh=False,
            categories=sorted(state.query.categories),
            language=state.query.language,
            cursor=state.cursor,
        )
        return await self._fetch(generation, state.query, cursor=state.cursor)

    async def _fetch(
        self,
        generation: int,
        query: FeedQuery,
        cursor: str | None,
    ) -> FeedState:
        fresh = cursor is None
        try:
            page = await self.client.fetch_page(query, cursor)
        except DomainException as exc:
            return self._apply_failure(generation, fresh, exc.message)
        except BaseException:
            # Release the in-flight flag before propagating.
            self._apply_failure(generation, fresh, "Request interrupted")
            raise
        return self._apply_page(generation, fresh, page)

    def _is_stale(self, generation: int) -> bool:
        if generation == self._generation:
            return False
        FeedEvents.result_discarded(
            generation=generation,
            current_generation=self._generation,
        )
        return True

    def _apply_page(self, generation: int, fresh: bool, page: FeedPage) -> FeedState:
        if self._is_stale(generation):
            return self._state

        accepted = merge_unique(page.articles, self._seen_keys)
        state = self._state
        if fresh:
            is_empty = not accepted
            cursor = None if is_empty else page.next_cursor
            self._state = FeedState(
                items=tuple(accepted),
                cursor=cursor,
                has_more=cursor is not None,
                phase=FeedPhase.IDLE,
                is_empty=is_empty,
                empty_message=page.message if is_empty else None,
                query=state.query,
            )
        else:
            self._state = replace(
                state,
                items=state.items + tuple(accepted),
                cursor=page.next_cursor,
                has_more=page.next_cursor is not None,
                phase=FeedPhase.IDLE,
                error_message=None,
            )
        self._in_flight = False

        FeedEvents.page_applied(
            generation=generation,
            fresh=fresh,
            received=len(page.articles),
            accepted=len(accepted),
            total=len(self._state.items),
            has_more=self._state.has_more,
        )
        return self._state

    def _apply_failure(self, generation: int, fresh: bool, message: str) -> FeedState:
        if self._is_stale(generation):
            return self._state

        if fresh:
            self._state = FeedState(
                phase=FeedPhase.ERROR,
                error_message=message,
                query=self._state.query,
            )
        else:
            # Items and cursor stay as they were so the same page can be retried.
            self._state = replace(
                self._state,
                phase=FeedPhase.ERROR,
                error_message=message,
            )
        self._in_flight = False

        FeedEvents.fetch_failed(generation=generation, fresh=fresh, error=message)
        return self._state
