"""Query execution."""

from .aggregate import HashAggregator
from .executor import QueryExecutor, QueryResult, compare_values
from .predicate import PredicateEvaluator, like_to_regex

__all__ = [
    "HashAggregator",
    "PredicateEvaluator",
    "QueryExecutor",
    "QueryResult",
    "compare_values",
    "like_to_regex",
]
