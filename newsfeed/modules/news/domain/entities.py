"""News feed domain entities.

Article 是后端查询接口返回的单条新闻；FeedState 是聚合器的只读快照，
每次状态迁移都会生成新的快照而不是原地修改。
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Article(BaseModel):
    """单条新闻。

    不同 RSS 源可能以不同 ID 报告同一篇文章，因此只有 source_url 和 title
    可以用来判断重复；其余字段原样透传给渲染层。
    """

    model_config = ConfigDict(frozen=True)

    source_url: str | None = Field(default=None, description="原文链接")
    title: str | None = Field(default=None, description="标题")
    summary: str | None = Field(default=None, description="摘要")
    image_url: str | None = Field(default=None, description="配图")
    published_at: str | None = Field(default=None, description="发布时间（原始字符串）")
    source_name: str | None = Field(default=None, description="来源名称")
    category: str | None = Field(default=None, description="分类")
    article_id: str | None = Field(default=None, description="上游 ID（跨源不稳定）")
    raw: dict[str, Any] = Field(default_factory=dict, description="原始数据")

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Article":
        """Build an article from one backend result object."""
        category = payload.get("category")
        if isinstance(category, list):
            category = next((c for c in category if isinstance(c, str)), None)

        return cls(
            source_url=_first_str(payload, "sourceUrl", "link", "url"),
            title=_first_str(payload, "title"),
            summary=_first_str(payload, "description", "summary", "content"),
            image_url=_first_str(payload, "image_url", "imageUrl", "image"),
            published_at=_first_str(payload, "pubDate", "publishedAt", "published_at"),
            source_name=_first_str(payload, "source_name", "sourceName"),
            category=category if isinstance(category, str) else None,
            article_id=_first_str(payload, "article_id", "_id", "id"),
            raw=dict(payload),
        )


def _first_str(payload: dict[str, Any], *keys: str) -> str | None:
    for key in keys:
        value = payload.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return None


class FeedPhase(StrEnum):
    """聚合器阶段。"""

    IDLE = "idle"
    LOADING_FRESH = "loading_fresh"
    LOADING_MORE = "loading_more"
    ERROR = "error"


class DateRange(StrEnum):
    ALL = "all"
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    CUSTOM = "custom"


class SortOrder(StrEnum):
    RELEVANCE = "relevance"
    DATE = "date"
    POPULARITY = "popularity"


class SearchType(StrEnum):
    ALL = "all"
    TITLE = "title"
    CONTENT = "content"


@dataclass(frozen=True)
class FeedFilters:
    """高级筛选条件（日期、排序、来源、搜索方式）。"""

    date_range: DateRange = DateRange.ALL
    date_from: str | None = None  # YYYY-MM-DD, custom range only
    date_to: str | None = None
    sort: SortOrder = SortOrder.RELEVANCE
    source: str | None = None
    search_type: SearchType = SearchType.ALL
    exact_phrase: bool = False

    @property
    def active_count(self) -> int:
        """Number of filters that differ from their defaults."""
        return sum(
            (
                self.date_range != DateRange.ALL,
                self.sort != SortOrder.RELEVANCE,
                bool(self.source),
                self.search_type != SearchType.ALL,
                self.exact_phrase,
            )
        )


@dataclass(frozen=True)
class FeedQuery:
    """The effective query; a change to any field invalidates accumulated items."""

    search_text: str = ""
    categories: frozenset[str] = frozenset()
    language: str = "en"
    filters: FeedFilters = field(default_factory=FeedFilters)


@dataclass(frozen=True)
class FeedPage:
    """One parsed page from the news query endpoint."""

    articles: list[Article]
    next_cursor: str | None = None
    message: str | None = None


@dataclass(frozen=True)
class FeedState:
    """Read-only snapshot of the aggregator's accumulated feed."""

    items: tuple[Article, ...] = ()
    cursor: str | None = None
    has_more: bool = False
    phase: FeedPhase = FeedPhase.IDLE
    error_message: str | None = None
    is_empty: bool = False
    empty_message: str | None = None
    query: FeedQuery | None = None

    @property
    def is_loading(self) -> bool:
        return self.phase in (FeedPhase.LOADING_FRESH, FeedPhase.LOADING_MORE)

    @property
    def can_load_more(self) -> bool:
        return (
            self.has_more
            and self.cursor is not None
            and self.phase in (FeedPhase.IDLE, FeedPhase.ERROR)
        )

    @property
    def available_sources(self) -> list[str]:
        """Distinct source names among accumulated items, sorted."""
        return sorted({a.source_name for a in self.items if a.source_name})
