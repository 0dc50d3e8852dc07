"""Data source connectors."""

from .http import FetchError, FetchResult, HttpJsonSource, validate_url

__all__ = ["FetchError", "FetchResult", "HttpJsonSource", "validate_url"]
