"""Query session and workspace state."""

from .query_session import QuerySession
from .sample_queries import SampleQuery, detect_family, sample_queries_for
from .workspace import EndpointHistoryEntry, Workspace, endpoint_name

__all__ = [
    "EndpointHistoryEntry",
    "QuerySession",
    "SampleQuery",
    "Workspace",
    "detect_family",
    "endpoint_name",
    "sample_queries_for",
]
