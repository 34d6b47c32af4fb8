"""文章去重。

上游 RSS 源每次轮询都可能重新排序，同一篇文章会在后续页再次出现。
去重键优先使用 source_url，其次使用 title，两者都缺失的文章永远视为唯一。
"""

from collections.abc import Iterable

from newsfeed.modules.news.domain.entities import Article


def dedup_key(article: Article) -> str | None:
    """Lower-cased, trimmed source_url, else title, else None (always unique)."""
    for value in (article.source_url, article.title):
        if value:
            key = value.strip().lower()
            if key:
                return key
    return None


def merge_unique(
    incoming: Iterable[Article],
    seen_keys: set[str],
) -> list[Article]:
    """Return the incoming articles whose keys are not yet in seen_keys.

    seen_keys is updated in place, so duplicates within the batch and against
    every previously accepted article are both dropped. First occurrence wins
    and arrival order is kept.
    """
    accepted: list[Article] = []
    for article in incoming:
        key = dedup_key(article)
        if key is not None:
            if key in seen_keys:
                continue
            seen_keys.add(key)
        accepted.append(article)
    return accepted


def deduplicate(articles: Iterable[Article]) -> list[Article]:
    """Deduplicate a standalone sequence of articles."""
    return merge_unique(articles, set())
