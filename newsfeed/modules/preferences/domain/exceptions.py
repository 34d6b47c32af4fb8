"""Preference domain exceptions."""

from newsfeed.core.domain.exceptions import ExternalServiceError, ValidationError


class PreferenceStoreError(ExternalServiceError):
    """Raised when the preference endpoint cannot be read or written."""

    error_code = "PREFERENCE_STORE_ERROR"


class InvalidPreferenceError(ValidationError):
    """Raised when preferences contain unknown categories or languages."""

    error_code = "INVALID_PREFERENCE"
