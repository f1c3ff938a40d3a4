"""Fusion page data application - settings, cache, fetchers, API."""
