"""Page-level state: the fetched data, its filtered view and the query session."""

import logging
import time
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple
from urllib.parse import urlsplit

from ..config.config import Config
from ..datasources.http import FetchResult, HttpJsonSource
from ..dataset.dataset import Dataset
from ..executor import QueryExecutor
from ..export.exporter import ExportFormat, export_data
from ..filters.panel import FilterRule, apply_filters
from ..utils.logging import get_contextual_logger
from .query_session import QuerySession

logger = logging.getLogger(__name__)

# (hostname fragment, path fragment, display name); first match wins
_KNOWN_ENDPOINTS: List[Tuple[str, str, str]] = [
    ("jsonplaceholder", "/users", "JSONPlaceholder Users"),
    ("jsonplaceholder", "/posts", "JSONPlaceholder Posts"),
    ("jsonplaceholder", "", "JSONPlaceholder API"),
    ("restcountries", "", "Countries Data"),
    ("dog.ceo", "", "Dog Breeds"),
    ("openweathermap", "", "Weather Data"),
    ("coingecko", "", "Cryptocurrency Prices"),
    ("quotable", "", "Random Quotes"),
]


@dataclass(frozen=True)
class EndpointHistoryEntry:
    url: str
    name: str
    timestamp: float


def endpoint_name(url: str) -> str:
    """Friendly name for a fetched URL."""
    try:
        parsed = urlsplit(url)
        hostname = parsed.hostname or ""
    except ValueError:
        return url
    if not hostname:
        return url
    for host_part, path_part, name in _KNOWN_ENDPOINTS:
        if host_part in hostname and path_part in parsed.path:
            return name
    return f"{hostname}{parsed.path}"


class Workspace:
    """Everything one user is looking at.

    Loading new data swaps the dataset, the filtered view and the query
    session together, so the three never describe different data.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        source: Optional[HttpJsonSource] = None,
    ):
        self.config = config or Config()
        self.source = source or HttpJsonSource(self.config.fetch)
        self.session = QuerySession(executor=QueryExecutor(self.config.query))
        self.history: List[EndpointHistoryEntry] = []
        self.last_fetch_error: Optional[str] = None
        self._dataset: Optional[Dataset] = None
        self._filtered: Any = None
        self._filters: Tuple[FilterRule, ...] = ()

    @property
    def dataset(self) -> Optional[Dataset]:
        return self._dataset

    @property
    def filters(self) -> Tuple[FilterRule, ...]:
        return self._filters

    @property
    def filtered_data(self) -> Any:
        return self._filtered

    @property
    def displayed_data(self) -> Any:
        """Active query result, else the (possibly filtered) data."""
        if self.session.is_active:
            return self.session.displayed
        return self._filtered

    def fetch(self, url: str) -> FetchResult:
        """Fetch a URL and load its data on success."""
        result = self.source.fetch(url)
        if not result.success:
            logger.warning(f"Fetch failed, clearing workspace: {result.error}")
            self.last_fetch_error = result.error
            self._publish(None)
            return result
        self.load(result.data, url)
        return result

    def load(self, data: Any, url: Optional[str] = None) -> Dataset:
        """Publish new data and record the endpoint in the history."""
        dataset = Dataset(data, source_url=url)
        self.last_fetch_error = None
        self._publish(dataset)
        if url:
            self._remember(url)
        context_logger = get_contextual_logger(__name__, {"source_url": url})
        context_logger.bind(records=len(dataset)).info("Workspace loaded new data")
        return dataset

    def apply_filters(self, rules: Sequence[FilterRule]) -> Any:
        """Filter the raw data; only arrays can be filtered."""
        self._filters = tuple(rules)
        if self._dataset is None:
            return None
        raw = self._dataset.raw
        if isinstance(raw, list):
            self._filtered = apply_filters(raw, self._filters)
        else:
            self._filtered = raw
        return self._filtered

    def export(self, fmt: ExportFormat) -> Tuple[str, bytes]:
        """Export whatever is currently displayed."""
        return export_data(self.displayed_data, fmt, self.config.export)

    def clear(self) -> None:
        """Drop the data, filters and query state."""
        self.last_fetch_error = None
        self._publish(None)

    def _publish(self, dataset: Optional[Dataset]) -> None:
        # the new dataset is fully built before any reference changes
        self._filters = ()
        self._filtered = dataset.raw if dataset is not None else None
        self._dataset = dataset
        self.session.load(dataset)

    def _remember(self, url: str) -> None:
        entry = EndpointHistoryEntry(url=url, name=endpoint_name(url), timestamp=time.time())
        kept = [item for item in self.history if item.url != url]
        self.history = ([entry] + kept)[: self.config.fetch.history_size]
