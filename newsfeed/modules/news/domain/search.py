"""Search query and date range helpers for the news query endpoint."""

import calendar
from datetime import date, timedelta

from newsfeed.modules.news.domain.entities import DateRange, SearchType


def build_search_query(
    text: str,
    exact_phrase: bool = False,
    search_type: SearchType = SearchType.ALL,
) -> str:
    """Build the backend `q` parameter.

    Exact phrases are quoted unless the text is already quoted at either end;
    title/content searches get a field prefix. Empty text stays empty.
    """
    query = text.strip()
    if not query:
        return ""

    if exact_phrase and not query.startswith('"') and not query.endswith('"'):
        query = f'"{query}"'

    if search_type == SearchType.TITLE:
        query = f"title:{query}"
    elif search_type == SearchType.CONTENT:
        query = f"content:{query}"
    return query


def date_range_params(
    date_range: DateRange,
    date_from: str | None = None,
    date_to: str | None = None,
    today: date | None = None,
) -> dict[str, str]:
    """Return the `from`/`to` query params for a date range.

    Relative ranges only set `from`; a custom range needs both bounds and is
    ignored otherwise.
    """
    if date_range == DateRange.CUSTOM:
        if date_from and date_to:
            return {"from": date_from, "to": date_to}
        return {}

    today = today or date.today()
    if date_range == DateRange.TODAY:
        start = today
    elif date_range == DateRange.WEEK:
        start = today - timedelta(days=7)
    elif date_range == DateRange.MONTH:
        start = _shift_months(today, -1)
    elif date_range == DateRange.YEAR:
        start = _shift_months(today, -12)
    else:
        return {}
    return {"from": start.isoformat()}


def _shift_months(value: date, months: int) -> date:
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)
