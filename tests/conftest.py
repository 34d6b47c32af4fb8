"""
pytest 配置和共享 fixtures。

测试分层：
- unit/: 单元测试（不依赖外部服务，HTTP 使用 httpx.MockTransport）

使用方法：
    # 运行所有测试
    pytest

    # 运行带覆盖率
    pytest --cov=newsfeed --cov-report=html
"""

import asyncio
from collections.abc import Callable
from typing import Any

import pytest

from newsfeed.modules.news.domain.entities import Article, FeedPage, FeedQuery

# ============================================
# 配置 Fixtures
# ============================================


@pytest.fixture
def anyio_backend() -> str:
    """聚合器基于 asyncio 事件循环。"""
    return "asyncio"


# ============================================
# 领域对象 Fixtures
# ============================================


@pytest.fixture
def make_article() -> Callable[..., Article]:
    """Article 工厂。"""

    def _make(url: str | None = None, title: str | None = None, **extra: Any) -> Article:
        return Article(source_url=url, title=title, **extra)

    return _make


@pytest.fixture
def sample_result_payload() -> dict[str, Any]:
    """后端 /news 返回的单条结果。"""
    return {
        "article_id": "rss-42",
        "title": "Kubernetes 1.31 released",
        "description": "The new release brings sidecar containers to GA.",
        "link": "https://example.com/k8s-131",
        "image_url": "https://example.com/k8s.png",
        "pubDate": "2026-10-18 09:00:00",
        "source_id": "cncf",
        "source_name": "CNCF Blog",
        "category": ["DevOps"],
    }


# ============================================
# Mock 服务 Fixtures
# ============================================


class StubNewsClient:
    """按顺序返回预设结果的查询客户端（FeedPage 或异常）。"""

    def __init__(self, responses: list[FeedPage | Exception] | None = None):
        self.responses = list(responses or [])
        self.calls: list[tuple[FeedQuery, str | None]] = []

    async def fetch_page(self, query: FeedQuery, cursor: str | None = None) -> FeedPage:
        self.calls.append((query, cursor))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class GatedNewsClient:
    """每次调用都挂起，直到测试显式 resolve/fail 对应的请求。"""

    def __init__(self) -> None:
        self.calls: list[tuple[FeedQuery, str | None]] = []
        self._futures: list[asyncio.Future[FeedPage]] = []

    async def fetch_page(self, query: FeedQuery, cursor: str | None = None) -> FeedPage:
        self.calls.append((query, cursor))
        future: asyncio.Future[FeedPage] = asyncio.get_running_loop().create_future()
        self._futures.append(future)
        return await future

    def resolve(self, index: int, page: FeedPage) -> None:
        self._futures[index].set_result(page)

    def fail(self, index: int, exc: Exception) -> None:
        self._futures[index].set_exception(exc)


@pytest.fixture
def stub_client() -> Callable[..., StubNewsClient]:
    def _make(*responses: FeedPage | Exception) -> StubNewsClient:
        return StubNewsClient(list(responses))

    return _make


@pytest.fixture
def gated_client() -> GatedNewsClient:
    return GatedNewsClient()


# ============================================
# 辅助函数
# ============================================


async def settle() -> None:
    """让已创建的任务运行到下一个挂起点。"""
    for _ in range(5):
        await asyncio.sleep(0)


@pytest.fixture
def let_tasks_run() -> Callable[[], Any]:
    return settle
