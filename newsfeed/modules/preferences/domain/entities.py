"""Preference domain entities.

PreferenceRecord 是用户持久化的信息流配置；ViewMode 是渲染层的临时选择，
两者共同决定一次查询的分类过滤集合。
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_LANGUAGE = "en"

# 可选分类（value, label）
AVAILABLE_CATEGORIES: tuple[tuple[str, str], ...] = (
    ("AI", "AI & Machine Learning"),
    ("Cloud", "Cloud Computing"),
    ("DevOps", "DevOps"),
    ("Programming", "Programming"),
    ("Cybersecurity", "Cybersecurity"),
    ("HealthcareIT", "Healthcare IT"),
)

SUPPORTED_LANGUAGES: frozenset[str] = frozenset(
    {
        "en", "es", "fr", "de", "it", "hi", "mr", "ta", "te",
        "ur", "bn", "pa", "gu", "kn", "ml", "or", "sd",
    }
)


class PreferenceRecord(BaseModel):
    """User news preferences - 用户新闻偏好。"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    categories: list[str] = Field(default_factory=list, description="订阅分类")
    language: str = Field(default=DEFAULT_LANGUAGE, description="语言代码")
    onboarding_complete: bool = Field(
        default=False,
        alias="onboardingComplete",
        description="是否已完成首次分类选择",
    )

    @classmethod
    def from_payload(
        cls,
        payload: Any,
        default_language: str = DEFAULT_LANGUAGE,
    ) -> "PreferenceRecord":
        """Build a record from an untrusted payload.

        Never raises: a non-object payload yields the default record, and each
        malformed field falls back to its default independently.
        """
        if not isinstance(payload, dict):
            return cls(language=default_language)

        categories = _coerce_categories(payload.get("categories"))

        language_value = payload.get("language")
        language = default_language
        if isinstance(language_value, str) and language_value.strip():
            language = language_value.strip()

        onboarding_value = payload.get(
            "onboardingComplete", payload.get("onboarding_complete")
        )

        return cls(
            categories=categories,
            language=language,
            onboarding_complete=onboarding_value is True,
        )

    def to_payload(self) -> dict[str, Any]:
        """Serialize using the backend's field names."""
        return self.model_dump(by_alias=True)


def _coerce_categories(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    categories: list[str] = []
    for raw in value:
        if not isinstance(raw, str):
            continue
        category = raw.strip()
        if category and category not in categories:
            categories.append(category)
    return categories


class ViewKind(StrEnum):
    """信息流视图类型。"""

    PERSONAL = "personal"
    ALL = "all"
    CATEGORY = "category"


@dataclass(frozen=True)
class ViewMode:
    """User-selected feed scope: personal, all, or one explicit category."""

    kind: ViewKind
    category: str | None = None

    def __post_init__(self) -> None:
        if self.kind == ViewKind.CATEGORY and not self.category:
            raise ValueError("CATEGORY view mode requires a category")
        if self.kind != ViewKind.CATEGORY and self.category is not None:
            raise ValueError(f"{self.kind} view mode does not take a category")

    @classmethod
    def personal(cls) -> "ViewMode":
        return cls(ViewKind.PERSONAL)

    @classmethod
    def all(cls) -> "ViewMode":
        return cls(ViewKind.ALL)

    @classmethod
    def for_category(cls, category: str) -> "ViewMode":
        return cls(ViewKind.CATEGORY, category)

    @classmethod
    def from_filter(cls, value: str | None) -> "ViewMode":
        """Map the topic sidebar filter value (None = My Feed, "all" = All News)."""
        if value is None:
            return cls.personal()
        if value == "all":
            return cls.all()
        return cls.for_category(value)
