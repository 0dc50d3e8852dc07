"""Query executor running parsed queries over flattened rows."""

import logging
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ..config.config import QueryConfig
from ..dataset.dataset import Dataset, NoDataAvailable
from ..dataset.flatten import value_to_text
from ..parser import QueryParser
from ..plan.query import OrderBy, ParsedQuery, Predicate, Projection, ProjectionItem
from .aggregate import HashAggregator
from .predicate import PredicateEvaluator

logger = logging.getLogger(__name__)

Row = Dict[str, Any]

INERT_AGGREGATE_WARNING = (
    "Aggregate functions and GROUP BY are not executed; "
    "those entries are treated as plain column names"
)


@dataclass(frozen=True)
class QueryResult:
    """Rows produced by one query, plus the warnings raised on the way."""

    rows: List[Row]
    query: ParsedQuery
    warnings: Tuple[str, ...] = ()

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def column_names(self) -> List[str]:
        """Union of row keys in first-seen order."""
        names: List[str] = []
        seen = set()
        for row in self.rows:
            for key in row:
                if key not in seen:
                    seen.add(key)
                    names.append(key)
        return names


class QueryExecutor:
    """Runs filter, sort, limit and projection over a dataset.

    The stage order is fixed: filter before sort so the predicate sees
    every column, sort before limit so the right rows are kept, and
    projection last. When aggregation is enabled and the query asks for
    it, the projection is replaced by a grouping stage that runs right
    after the filter.
    """

    def __init__(
        self,
        config: Optional[QueryConfig] = None,
        parser: Optional[QueryParser] = None,
        evaluator: Optional[PredicateEvaluator] = None,
    ):
        """Initialize executor.

        Args:
            config: Query configuration
            parser: Parser used by ``execute``
            evaluator: Predicate evaluator
        """
        self.config = config or QueryConfig()
        self.parser = parser or QueryParser()
        self.evaluator = evaluator or PredicateEvaluator()

    def execute(self, dataset: Optional[Dataset], sql: str) -> QueryResult:
        """Parse and run a query against a dataset.

        Args:
            dataset: Loaded dataset
            sql: Query text

        Returns:
            Query result

        Raises:
            NoDataAvailable: If there is no queryable dataset
            ParseError: If the query is empty or not a SELECT
        """
        if dataset is None:
            raise NoDataAvailable("No data available for querying")
        rows = dataset.require_queryable()
        query = self.parser.parse(sql)
        return self.run(rows, query)

    def run(self, rows: Sequence[Mapping[str, Any]], query: ParsedQuery) -> QueryResult:
        """Run an already parsed query over flattened rows."""
        warnings = list(query.warnings)
        result = self._filter(rows, query.predicate)

        if query.is_aggregate and self.config.enable_aggregates:
            result = self._aggregate(result, query)
            result = self._sort(result, query.order_by)
            result = self._limit(result, query.limit)
        else:
            if query.is_aggregate:
                warnings.append(INERT_AGGREGATE_WARNING)
            result = self._sort(result, query.order_by)
            result = self._limit(result, query.limit)
            result = self._project(result, query.projection)

        for warning in warnings:
            logger.warning(f"Query degraded: {warning}")
        logger.info(f"Query returned {len(result)} of {len(rows)} rows")
        return QueryResult(rows=result, query=query, warnings=tuple(warnings))

    def _filter(
        self, rows: Sequence[Mapping[str, Any]], predicate: Optional[Predicate]
    ) -> List[Mapping[str, Any]]:
        if predicate is None:
            return list(rows)
        matched = []
        for row in rows:
            if self.evaluator.matches(row, predicate):
                matched.append(row)
        return matched

    def _aggregate(self, rows: List[Mapping[str, Any]], query: ParsedQuery) -> List[Row]:
        items = query.projection.items
        if query.projection.is_wildcard:
            items = _group_columns_as_items(query.group_by)
        aggregator = HashAggregator(items, query.group_by)
        return aggregator.aggregate(rows)

    def _sort(self, rows: List, order_by: Optional[OrderBy]) -> List:
        """Stable sort with nulls and missing keys always last."""
        if order_by is None:
            return rows
        column = order_by.column
        present = []
        missing = []
        for row in rows:
            if row.get(column) is None:
                missing.append(row)
            else:
                present.append(row)

        def compare(left, right) -> int:
            return compare_values(left[column], right[column])

        present.sort(key=cmp_to_key(compare), reverse=order_by.descending)
        return present + missing

    def _limit(self, rows: List, limit: Optional[int]) -> List:
        if limit is None:
            return rows
        return rows[:limit]

    def _project(self, rows: List[Mapping[str, Any]], projection: Projection) -> List[Row]:
        """Keep requested keys; keys a row lacks are left out, not nulled."""
        if projection.is_wildcard:
            return [dict(row) for row in rows]
        keys = []
        for item in projection.items:
            keys.append(item.lookup_key)
        projected = []
        for row in rows:
            output: Row = {}
            for key in keys:
                if key in row:
                    output[key] = row[key]
            projected.append(output)
        return projected


def compare_values(left: Any, right: Any) -> int:
    """Three-way comparison of two non-null values.

    Numbers compare numerically, booleans false before true, strings by
    collation key; any other pairing compares the values' text forms.
    """
    if _is_number(left) and _is_number(right):
        return _three_way(left, right)
    if isinstance(left, bool) and isinstance(right, bool):
        return _three_way(int(left), int(right))
    if isinstance(left, str) and isinstance(right, str):
        return _three_way(collation_key(left), collation_key(right))
    return _three_way(
        collation_key(value_to_text(left)), collation_key(value_to_text(right))
    )


def collation_key(text: str) -> Tuple[str, str]:
    """Case-insensitive primary order with the raw text as tiebreak."""
    return (text.casefold(), text)


def _three_way(left, right) -> int:
    return (left > right) - (left < right)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _group_columns_as_items(group_by: Tuple[str, ...]) -> Tuple[ProjectionItem, ...]:
    items = []
    for column in group_by:
        items.append(ProjectionItem(text=column, column=column))
    return tuple(items)
