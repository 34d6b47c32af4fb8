"""Preference module ports."""

from typing import Protocol

from newsfeed.modules.preferences.domain.entities import PreferenceRecord


class PreferenceStore(Protocol):
    """Port for reading and saving the user's news preferences."""

    async def get_preferences(self) -> PreferenceRecord:
        """Fetch the current user's preference record."""
        ...

    async def save_preferences(self, record: PreferenceRecord) -> PreferenceRecord:
        """Persist the record and return what the backend stored."""
        ...
