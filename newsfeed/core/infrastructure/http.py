"""HTTP helpers shared by the intranet API clients."""

import httpx


def backend_error_message(response: httpx.Response) -> str | None:
    """Return the `message` of a `{success, message}` error body, if any."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message:
            return message
    return None
