"""新闻偏好单元测试。

测试覆盖：
- PreferenceRecord 容错解析（缺失/格式错误回退默认值）
- ViewMode 构造与侧边栏筛选值映射
- resolve_categories 分类解析规则
- PreferenceResolver 会话缓存、读取失败回退、首次选择提示
- HttpPreferenceStore 读取、保存与校验
"""

import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from newsfeed.modules.preferences.application.resolver import (
    PreferenceResolver,
    resolve_categories,
)
from newsfeed.modules.preferences.domain.entities import (
    PreferenceRecord,
    ViewKind,
    ViewMode,
)
from newsfeed.modules.preferences.domain.exceptions import (
    InvalidPreferenceError,
    PreferenceStoreError,
)
from newsfeed.modules.preferences.infrastructure.http_store import HttpPreferenceStore

# 使用 anyio 作为异步测试后端
pytestmark = pytest.mark.anyio


# ============================================
# PreferenceRecord 测试
# ============================================


class TestPreferenceRecord:
    """PreferenceRecord 解析测试。"""

    def test_defaults(self):
        record = PreferenceRecord()
        assert record.categories == []
        assert record.language == "en"
        assert record.onboarding_complete is False

    def test_from_backend_payload(self):
        record = PreferenceRecord.from_payload(
            {"categories": ["Cloud", "DevOps"], "language": "de", "onboardingComplete": True}
        )
        assert record.categories == ["Cloud", "DevOps"]
        assert record.language == "de"
        assert record.onboarding_complete is True

    @pytest.mark.parametrize("payload", [None, [], "prefs", 42])
    def test_non_object_payload_defaults(self, payload):
        assert PreferenceRecord.from_payload(payload) == PreferenceRecord()

    def test_malformed_fields_default_independently(self):
        record = PreferenceRecord.from_payload(
            {"categories": "AI", "language": "fr", "onboardingComplete": "yes"}
        )
        assert record.categories == []
        assert record.language == "fr"
        assert record.onboarding_complete is False

    def test_bad_category_entries_dropped(self):
        record = PreferenceRecord.from_payload(
            {"categories": ["AI", 3, None, "  ", " Cloud ", "AI"]}
        )
        assert record.categories == ["AI", "Cloud"]

    def test_blank_language_uses_default(self):
        record = PreferenceRecord.from_payload({"language": "  "}, default_language="es")
        assert record.language == "es"

    def test_to_payload_uses_backend_names(self):
        record = PreferenceRecord(categories=["AI"], language="en", onboarding_complete=True)
        assert record.to_payload() == {
            "categories": ["AI"],
            "language": "en",
            "onboardingComplete": True,
        }


# ============================================
# ViewMode 测试
# ============================================


class TestViewMode:
    """ViewMode 测试。"""

    def test_from_filter(self):
        assert ViewMode.from_filter(None) == ViewMode.personal()
        assert ViewMode.from_filter("all") == ViewMode.all()
        assert ViewMode.from_filter("AI") == ViewMode.for_category("AI")

    def test_category_required_for_category_view(self):
        with pytest.raises(ValueError):
            ViewMode(ViewKind.CATEGORY)

    def test_category_rejected_for_other_views(self):
        with pytest.raises(ValueError):
            ViewMode(ViewKind.ALL, "AI")


# ============================================
# resolve_categories 测试
# ============================================


class TestResolveCategories:
    """分类解析规则测试。"""

    prefs = PreferenceRecord(categories=["Cloud", "DevOps"], onboarding_complete=True)

    def test_all_ignores_preferences(self):
        assert resolve_categories(ViewMode.all(), self.prefs) == frozenset()

    def test_category_ignores_preferences(self):
        assert resolve_categories(ViewMode.for_category("AI"), self.prefs) == {"AI"}

    def test_personal_uses_stored_categories(self):
        assert resolve_categories(ViewMode.personal(), self.prefs) == {"Cloud", "DevOps"}

    def test_personal_with_empty_preferences(self):
        assert resolve_categories(ViewMode.personal(), PreferenceRecord()) == frozenset()

    def test_personal_without_record(self):
        assert resolve_categories(ViewMode.personal(), None) == frozenset()


# ============================================
# PreferenceResolver 测试
# ============================================


class TestPreferenceResolver:
    """会话级偏好解析器测试。"""

    async def test_load_reads_store_once(self):
        store = MagicMock()
        store.get_preferences = AsyncMock(
            return_value=PreferenceRecord(categories=["AI"], language="fr")
        )
        resolver = PreferenceResolver(store)

        await resolver.load()
        await resolver.load()

        store.get_preferences.assert_awaited_once()
        assert resolver.language == "fr"
        assert resolver.resolve(ViewMode.personal()) == {"AI"}

    async def test_load_failure_falls_back_to_defaults(self):
        store = MagicMock()
        store.get_preferences = AsyncMock(side_effect=PreferenceStoreError("HTTP 500"))
        resolver = PreferenceResolver(store)

        record = await resolver.load()

        assert record == PreferenceRecord()
        assert resolver.resolve(ViewMode.personal()) == frozenset()
        assert resolver.language == "en"

    async def test_without_store_uses_defaults(self):
        resolver = PreferenceResolver()
        record = await resolver.load()
        assert record.categories == []

    def test_onboarding_signalled_once(self):
        callback = MagicMock()
        resolver = PreferenceResolver(on_onboarding_required=callback)
        resolver.use_record(PreferenceRecord(onboarding_complete=False))

        first = resolver.resolve(ViewMode.personal())
        resolver.resolve(ViewMode.all())

        callback.assert_called_once_with()
        assert first == frozenset()

    def test_onboarding_not_signalled_when_complete(self):
        callback = MagicMock()
        resolver = PreferenceResolver(on_onboarding_required=callback)
        resolver.use_record(PreferenceRecord(categories=["AI"], onboarding_complete=True))

        assert resolver.resolve(ViewMode.personal()) == {"AI"}
        callback.assert_not_called()

    def test_dismissed_onboarding_does_not_block(self):
        callback = MagicMock()
        resolver = PreferenceResolver(on_onboarding_required=callback)
        resolver.use_record(PreferenceRecord())
        resolver.dismiss_onboarding()

        assert resolver.needs_onboarding is False
        assert resolver.resolve(ViewMode.personal()) == frozenset()
        callback.assert_not_called()


# ============================================
# HttpPreferenceStore 测试
# ============================================


def _store(handler) -> HttpPreferenceStore:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpPreferenceStore(base_url="https://intranet.test/api", client=client)


class TestHttpPreferenceStore:
    """偏好 HTTP 存储测试。"""

    async def test_get_preferences(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "GET"
            assert request.url.path == "/api/users/news-preferences"
            return httpx.Response(
                200,
                json={
                    "success": True,
                    "data": {
                        "categories": ["AI"],
                        "language": "hi",
                        "onboardingComplete": True,
                    },
                },
            )

        record = await _store(handler).get_preferences()

        assert record.categories == ["AI"]
        assert record.language == "hi"
        assert record.onboarding_complete is True

    async def test_malformed_data_defaults(self):
        store = _store(lambda request: httpx.Response(200, json={"success": True, "data": "oops"}))
        record = await store.get_preferences()
        assert record == PreferenceRecord()

    async def test_http_error_uses_backend_message(self):
        store = _store(lambda request: httpx.Response(404, json={"message": "User not found"}))

        with pytest.raises(PreferenceStoreError) as exc_info:
            await store.get_preferences()

        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "User not found"

    async def test_http_error_without_body(self):
        store = _store(lambda request: httpx.Response(503, text="Service Unavailable"))

        with pytest.raises(PreferenceStoreError) as exc_info:
            await store.get_preferences()

        assert exc_info.value.status_code == 503
        assert exc_info.value.message == "HTTP 503"

    async def test_save_preferences_sends_backend_payload(self):
        sent: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            sent.update(json.loads(request.content))
            return httpx.Response(200, json={"success": True, "data": sent})

        record = PreferenceRecord(categories=["AI", "Cloud"], language="en", onboarding_complete=True)
        saved = await _store(handler).save_preferences(record)

        assert sent == {
            "categories": ["AI", "Cloud"],
            "language": "en",
            "onboardingComplete": True,
        }
        assert saved == record

    async def test_save_rejects_unknown_category(self):
        handler = MagicMock()
        store = _store(handler)

        with pytest.raises(InvalidPreferenceError, match="Invalid categories: Sports"):
            await store.save_preferences(PreferenceRecord(categories=["AI", "Sports"]))

        handler.assert_not_called()

    async def test_save_rejects_unknown_language(self):
        store = _store(MagicMock())

        with pytest.raises(InvalidPreferenceError, match="Invalid language code"):
            await store.save_preferences(PreferenceRecord(language="xx"))
