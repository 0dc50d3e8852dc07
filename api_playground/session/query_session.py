"""Query session state shared with the view layer."""

from typing import Any, Callable, List, Optional, Tuple

from ..catalog.schema import SchemaSnapshot
from ..dataset.dataset import Dataset, NoDataAvailable
from ..executor import QueryExecutor
from ..parser import ParseError
from ..utils.logging import get_contextual_logger
from .sample_queries import SampleQuery, sample_queries_for

ResultListener = Callable[[Any, str], None]


class QuerySession:
    """Holds the current query text, last result and last error.

    ``execute`` always leaves exactly one of ``last_result`` and
    ``last_error`` set, while ``displayed`` only changes on success or
    reset. ``reset`` hands back the caller's original data object, never
    the flattened rows.
    """

    def __init__(
        self,
        dataset: Optional[Dataset] = None,
        executor: Optional[QueryExecutor] = None,
        on_result: Optional[ResultListener] = None,
    ):
        """Initialize session.

        Args:
            dataset: Dataset to query
            executor: Query executor
            on_result: Called with ``(data, query_text)`` whenever the
                displayed data changes; ``query_text`` is empty on reset
        """
        self.executor = executor or QueryExecutor()
        self.on_result = on_result
        self._dataset = dataset
        self._clear_state()

    def _clear_state(self) -> None:
        self.query_text = ""
        self.last_error: Optional[str] = None
        self.last_result: Any = None
        if self._dataset is not None:
            self.last_result = self._dataset.raw
        self.displayed: Any = self.last_result
        self.last_warnings: Tuple[str, ...] = ()
        self.is_active = False

    @property
    def dataset(self) -> Optional[Dataset]:
        return self._dataset

    @property
    def available(self) -> bool:
        return self._dataset is not None and self._dataset.is_queryable

    @property
    def unavailable_reason(self) -> Optional[str]:
        """Standing message shown instead of the editor, if any."""
        if self._dataset is None:
            return "No data available for querying"
        return self._dataset.unavailable_reason

    @property
    def schema(self) -> Optional[SchemaSnapshot]:
        if self._dataset is None:
            return None
        return self._dataset.schema

    def load(self, dataset: Optional[Dataset]) -> None:
        """Replace the dataset and reset the session to its defaults."""
        self._dataset = dataset
        self._clear_state()

    def execute(self, query_text: str) -> Tuple[Optional[List[dict]], Optional[str]]:
        """Run a query and record its outcome.

        Args:
            query_text: Query string

        Returns:
            ``(rows, None)`` on success or ``(None, message)`` on failure
        """
        self.query_text = query_text
        try:
            result = self.executor.execute(self._dataset, query_text)
        except (ParseError, NoDataAvailable) as exc:
            get_contextual_logger(__name__, {"query": query_text}).info(
                f"Query rejected: {exc}"
            )
            self.last_error = str(exc)
            self.last_result = None
            self.last_warnings = ()
            return None, self.last_error

        self.last_error = None
        self.last_result = result.rows
        self.last_warnings = result.warnings
        self.is_active = True
        self._notify(result.rows, query_text)
        return result.rows, None

    def reset(self) -> Any:
        """Clear the query and return the original, unflattened data."""
        self._clear_state()
        original = self.last_result
        self._notify(original, "")
        return original

    def sample_queries(self) -> List[SampleQuery]:
        """Query templates matching the loaded dataset."""
        if not self.available:
            return []
        return sample_queries_for(self._dataset.rows[0])

    def _notify(self, data: Any, query_text: str) -> None:
        self.displayed = data
        if self.on_result is not None:
            self.on_result(data, query_text)

    def __repr__(self) -> str:
        return f"QuerySession(active={self.is_active}, dataset={self._dataset!r})"
