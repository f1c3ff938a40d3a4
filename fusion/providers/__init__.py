"""Data fetcher implementations.

The resolver only sees the DataFetchers interface; this package holds the
concrete platform client used by the default service wiring.
"""

from fusion.providers.http import FetchError, HttpDataFetchers, HTTPStatusFetchError

__all__ = [
    "FetchError",
    "HTTPStatusFetchError",
    "HttpDataFetchers",
]
