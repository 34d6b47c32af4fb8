"""Logging configuration with structlog integration.

提供两种日志记录方式：
1. loguru: 用于一般调试日志
2. structlog: 用于关键业务事件的结构化日志（查询、翻页、丢弃、失败）
"""

import sys
from typing import Any

import structlog
from loguru import logger

from newsfeed.core.config import settings


def setup_logging() -> None:
    """Configure application logging with structlog and loguru."""
    _configure_structlog()
    _configure_loguru()

    logger.info(f"Logging configured with level: {settings.LOG_LEVEL}")


def _configure_structlog() -> None:
    """配置 structlog 处理器链。"""
    if settings.ENVIRONMENT == "local":
        renderer = structlog.dev.ConsoleRenderer(colors=True)
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.CallsiteParameterAdder(
                [
                    structlog.processors.CallsiteParameter.MODULE,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                    structlog.processors.CallsiteParameter.LINENO,
                ]
            ),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            _get_log_level_number(settings.LOG_LEVEL)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def _configure_loguru() -> None:
    """配置 loguru。"""
    logger.remove()

    logger.add(
        sys.stderr,
        level=settings.LOG_LEVEL,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        colorize=True,
    )

    if settings.ENVIRONMENT != "local":
        logger.add(
            "logs/newsfeed_{time:YYYY-MM-DD}.log",
            rotation="00:00",
            retention="14 days",
            level="INFO",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        )


def _get_log_level_number(level: str) -> int:
    """将日志级别字符串转换为数字。"""
    levels = {
        "DEBUG": 10,
        "INFO": 20,
        "WARNING": 30,
        "ERROR": 40,
        "CRITICAL": 50,
    }
    return levels.get(level.upper(), 20)


# ============================================================================
# 业务事件日志记录器
# ============================================================================


def get_business_logger(name: str = "business") -> structlog.BoundLogger:
    """获取业务事件日志记录器。

    Usage:
        from newsfeed.core.infrastructure.logging import get_business_logger

        log = get_business_logger()
        log.info("feed_page_applied", generation=3, accepted=8)
    """
    return structlog.get_logger(name)


class FeedEvents:
    """信息流业务事件日志助手类。

    提供统一的事件记录接口，确保事件格式一致。

    Usage:
        FeedEvents.query_started(generation=1, fresh=True, categories=["AI"])
        FeedEvents.fetch_failed(generation=1, fresh=False, error="HTTP 502")
    """

    _log = get_business_logger("business.feed")

    @classmethod
    def query_started(
        cls,
        generation: int,
        fresh: bool,
        categories: list[str],
        language: str,
        cursor: str | None = None,
        **extra: Any,
    ) -> None:
        """记录查询发起事件。"""
        cls._log.info(
            "feed_query_started",
            event_type="query",
            generation=generation,
            fresh=fresh,
            categories=categories,
            language=language,
            cursor=cursor,
            **extra,
        )

    @classmethod
    def page_applied(
        cls,
        generation: int,
        fresh: bool,
        received: int,
        accepted: int,
        total: int,
        has_more: bool,
        **extra: Any,
    ) -> None:
        """记录分页结果合并事件。"""
        cls._log.info(
            "feed_page_applied",
            event_type="merge",
            generation=generation,
            fresh=fresh,
            received=received,
            accepted=accepted,
            duplicates=received - accepted,
            total=total,
            has_more=has_more,
            **extra,
        )

    @classmethod
    def result_discarded(
        cls,
        generation: int,
        current_generation: int,
        **extra: Any,
    ) -> None:
        """记录过期结果被丢弃事件。"""
        cls._log.info(
            "feed_result_discarded",
            event_type="supersede",
            generation=generation,
            current_generation=current_generation,
            **extra,
        )

    @classmethod
    def fetch_failed(
        cls,
        generation: int,
        fresh: bool,
        error: str,
        **extra: Any,
    ) -> None:
        """记录查询失败事件。"""
        cls._log.warning(
            "feed_fetch_failed",
            event_type="query_error",
            generation=generation,
            fresh=fresh,
            error=error,
            **extra,
        )

    @classmethod
    def onboarding_required(cls, **extra: Any) -> None:
        """记录需要首次选择分类事件。"""
        cls._log.info(
            "onboarding_required",
            event_type="preferences",
            **extra,
        )

    @classmethod
    def preferences_defaulted(cls, reason: str, **extra: Any) -> None:
        """记录偏好数据回退为默认值事件。"""
        cls._log.warning(
            "preferences_defaulted",
            event_type="preferences",
            reason=reason,
            **extra,
        )
