#!/usr/bin/env python
"""预览信息流。

按视图模式拉取若干页新闻并打印去重后的结果，用于排查分页和去重问题。

用法:
    python scripts/preview_feed.py [--view personal|all|<category>] [--query <text>] [--pages 3]
"""

import argparse
import asyncio
import sys
from pathlib import Path


def _ensure_project_root_on_path() -> None:
    """确保项目根目录在 Python 路径中，便于直接运行脚本。"""
    project_root = Path(__file__).parent.parent
    project_root_str = str(project_root)
    if project_root_str not in sys.path:
        sys.path.insert(0, project_root_str)


_ensure_project_root_on_path()


async def preview(view: str, query: str, pages: int, base_url: str | None) -> int:
    """拉取最多 pages 页并打印，返回最终条目数。"""
    import httpx
    from loguru import logger

    from newsfeed.core.config import settings
    from newsfeed.modules.news.infrastructure.dependencies import create_feed_session
    from newsfeed.modules.preferences.domain.entities import ViewMode

    view_mode = ViewMode.from_filter(None if view == "personal" else view)

    async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SEC) as client:
        session = create_feed_session(
            http_client=client,
            base_url=base_url,
            view_mode=view_mode,
            on_onboarding_required=lambda: logger.info(
                "Preferences not set up yet, showing unfiltered feed"
            ),
        )
        await session.open()
        if query:
            await session.submit_search(query)

        fetched = 1
        while fetched < pages and await session.on_sentinel_visible():
            fetched += 1

        state = session.state
        if state.error_message:
            logger.error(f"Feed error: {state.error_message}")
        elif state.is_empty:
            logger.info("No articles found")

        for index, article in enumerate(state.items, start=1):
            print(f"{index:3d}. [{article.source_name or '-'}] {article.title or '(untitled)'}")
            if article.source_url:
                print(f"     {article.source_url}")

        logger.info(
            f"{len(state.items)} articles over {fetched} page(s), has_more={state.has_more}"
        )
        return len(state.items)


def main() -> None:
    parser = argparse.ArgumentParser(description="预览信息流分页与去重结果")
    parser.add_argument(
        "--view",
        default="personal",
        help="personal（我的订阅）、all（全部）或具体分类，如 AI",
    )
    parser.add_argument("--query", default="", help="搜索关键词")
    parser.add_argument("--pages", type=int, default=3, help="最多拉取页数")
    parser.add_argument("--base-url", default=None, help="覆盖 NEWS_API_BASE_URL")
    args = parser.parse_args()

    from newsfeed.core.infrastructure.logging import setup_logging

    setup_logging()
    asyncio.run(preview(args.view, args.query, args.pages, args.base_url))


if __name__ == "__main__":
    main()
