"""分类偏好解析服务。

根据视图模式（我的订阅 / 全部 / 单一分类）与用户偏好计算查询的分类过滤集合。
空集合表示不限制分类。
"""

from collections.abc import Callable

from loguru import logger

from newsfeed.core.config import settings
from newsfeed.core.domain.exceptions import DomainException
from newsfeed.core.infrastructure.logging import FeedEvents
from newsfeed.modules.preferences.domain.entities import (
    PreferenceRecord,
    ViewKind,
    ViewMode,
)
from newsfeed.modules.preferences.domain.ports import PreferenceStore


def resolve_categories(
    view_mode: ViewMode,
    preference_record: PreferenceRecord | None,
) -> frozenset[str]:
    """Return the effective category filter for a view mode.

    ALL yields the empty set, CATEGORY(c) yields {c} regardless of preferences,
    PERSONAL yields the stored categories verbatim (possibly empty).
    """
    if view_mode.kind == ViewKind.ALL:
        return frozenset()
    if view_mode.kind == ViewKind.CATEGORY:
        return frozenset({view_mode.category})

    record = preference_record or PreferenceRecord()
    return frozenset(record.categories)


class PreferenceResolver:
    """会话级偏好解析器。

    职责：
    - 每个会话只读取一次偏好（读取失败时回退默认值）
    - 解析视图模式对应的分类集合
    - 未完成首次选择时通过回调提示渲染层（建议性，不阻塞查询）
    """

    def __init__(
        self,
        store: PreferenceStore | None = None,
        on_onboarding_required: Callable[[], None] | None = None,
    ):
        self.store = store
        self.on_onboarding_required = on_onboarding_required
        self._record: PreferenceRecord | None = None
        self._onboarding_signalled = False

    @property
    def record(self) -> PreferenceRecord:
        if self._record is None:
            return PreferenceRecord(language=settings.NEWS_DEFAULT_LANGUAGE)
        return self._record

    @property
    def language(self) -> str:
        return self.record.language

    @property
    def needs_onboarding(self) -> bool:
        return not self.record.onboarding_complete and not self._onboarding_signalled

    async def load(self) -> PreferenceRecord:
        """Load preferences once per session; later calls return the cached record."""
        if self._record is not None:
            return self._record
        if self.store is None:
            self._record = PreferenceRecord(language=settings.NEWS_DEFAULT_LANGUAGE)
            return self._record

        try:
            self._record = await self.store.get_preferences()
        except DomainException as exc:
            logger.warning(f"Failed to load news preferences, using defaults: {exc}")
            FeedEvents.preferences_defaulted(reason=exc.message)
            # Left unset so a later load() retries the read.
            return PreferenceRecord(language=settings.NEWS_DEFAULT_LANGUAGE)
        return self._record

    def use_record(self, record: PreferenceRecord) -> None:
        """Replace the session record, e.g. after the settings surface saved one."""
        self._record = record
        self._onboarding_signalled = False

    def resolve(self, view_mode: ViewMode) -> frozenset[str]:
        """Resolve categories and raise the onboarding signal if still pending."""
        if self.needs_onboarding:
            self._onboarding_signalled = True
            FeedEvents.onboarding_required(view_mode=view_mode.kind.value)
            if self.on_onboarding_required is not None:
                self.on_onboarding_required()
        return resolve_categories(view_mode, self._record)

    def dismiss_onboarding(self) -> None:
        """Mark the prompt as handled for this session without saving anything."""
        self._onboarding_signalled = True
