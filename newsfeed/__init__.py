"""newsfeed - intranet news feed aggregation client."""

__version__ = "0.1.0"
