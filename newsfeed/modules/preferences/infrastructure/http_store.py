"""Preference store backed by the intranet news-preferences endpoint."""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from newsfeed.core.config import settings
from newsfeed.core.infrastructure.http import backend_error_message
from newsfeed.core.infrastructure.logging import FeedEvents
from newsfeed.modules.preferences.domain.entities import (
    AVAILABLE_CATEGORIES,
    SUPPORTED_LANGUAGES,
    PreferenceRecord,
)
from newsfeed.modules.preferences.domain.exceptions import (
    InvalidPreferenceError,
    PreferenceStoreError,
)
from newsfeed.modules.preferences.domain.ports import PreferenceStore


class HttpPreferenceStore(PreferenceStore):
    """Read and save news preferences over HTTP.

    Reads never fail on malformed payloads: anything that is not a proper
    record degrades to the default record. Transport and status errors raise
    PreferenceStoreError.
    """

    def __init__(
        self,
        *,
        base_url: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout_sec: float | None = None,
        known_categories: frozenset[str] | None = None,
    ) -> None:
        self.base_url = (base_url or settings.news_api_base).rstrip("/")
        self.client = client
        self.timeout_sec = timeout_sec or settings.HTTP_TIMEOUT_SEC
        self.known_categories = known_categories or frozenset(
            value for value, _ in AVAILABLE_CATEGORIES
        )

    @property
    def url(self) -> str:
        return f"{self.base_url}{settings.NEWS_PREFERENCES_PATH}"

    async def get_preferences(self) -> PreferenceRecord:
        payload = await self._request("GET")
        data = _unwrap(payload)
        if not isinstance(data, dict):
            FeedEvents.preferences_defaulted(reason="malformed payload")
        return PreferenceRecord.from_payload(
            data, default_language=settings.NEWS_DEFAULT_LANGUAGE
        )

    async def save_preferences(self, record: PreferenceRecord) -> PreferenceRecord:
        self.validate(record)
        payload = await self._request("PUT", json=record.to_payload())
        logger.info(
            f"Saved news preferences: {len(record.categories)} categories, "
            f"language={record.language}"
        )
        return PreferenceRecord.from_payload(
            _unwrap(payload), default_language=settings.NEWS_DEFAULT_LANGUAGE
        )

    def validate(self, record: PreferenceRecord) -> None:
        """Reject unknown categories and language codes before sending."""
        invalid = [c for c in record.categories if c not in self.known_categories]
        if invalid:
            raise InvalidPreferenceError(f"Invalid categories: {', '.join(invalid)}")
        if record.language not in SUPPORTED_LANGUAGES:
            raise InvalidPreferenceError(f"Invalid language code: {record.language}")

    async def _request(self, method: str, json: dict[str, Any] | None = None) -> Any:
        headers = {
            "User-Agent": settings.HTTP_USER_AGENT,
            "Accept": "application/json",
            **settings.auth_headers,
        }
        try:
            if self.client is not None:
                response = await self.client.request(
                    method, self.url, json=json, headers=headers
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout_sec) as client:
                    response = await client.request(
                        method, self.url, json=json, headers=headers
                    )
            response.raise_for_status()
            return response.json()
        except httpx.TimeoutException as exc:
            logger.warning(f"News preferences {method} timeout: {exc}")
            raise PreferenceStoreError(f"Timeout: {exc}") from exc
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            logger.warning(f"News preferences {method} HTTP error: {status_code}")
            message = backend_error_message(exc.response) or f"HTTP {status_code}"
            raise PreferenceStoreError(message, status_code=status_code) from exc
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(f"News preferences {method} error: {exc}")
            raise PreferenceStoreError(f"Error: {exc}") from exc


def _unwrap(payload: Any) -> Any:
    """Return the `data` member of a `{success, data}` envelope."""
    if isinstance(payload, dict) and "data" in payload:
        if payload.get("success") is False:
            return None
        return payload["data"]
    return payload
