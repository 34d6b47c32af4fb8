"""News domain exceptions."""

from newsfeed.core.domain.exceptions import ExternalServiceError


class FeedQueryError(ExternalServiceError):
    """Raised when the news query endpoint rejects or fails a request."""

    error_code = "FEED_QUERY_ERROR"
