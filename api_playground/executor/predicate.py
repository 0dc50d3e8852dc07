"""Row-level evaluation of WHERE predicates."""

import re
from functools import lru_cache
from typing import Any, Mapping, Pattern

from ..dataset.flatten import value_to_text
from ..plan.query import Predicate, PredicateOperator

LIKE_WILDCARD = "%"


class PredicateEvaluator:
    """Decides whether a flattened row satisfies a predicate."""

    def matches(self, row: Mapping[str, Any], predicate: Predicate) -> bool:
        """Evaluate ``predicate`` against one row.

        Args:
            row: Flattened record
            predicate: Parsed comparison

        Returns:
            True when the row matches
        """
        if predicate.operator == PredicateOperator.EQUALS:
            return self._evaluate_equals(row, predicate)
        if predicate.operator == PredicateOperator.LIKE:
            return self._evaluate_like(row, predicate)
        raise NotImplementedError(f"Operator {predicate.operator} not supported")

    def _evaluate_equals(self, row: Mapping[str, Any], predicate: Predicate) -> bool:
        """Compare using the row value's runtime type."""
        literal = predicate.literal
        value = row.get(predicate.column)
        if value is None:
            # absent and null fields only match an empty literal
            return literal == ""
        if isinstance(value, str):
            return value == literal
        if isinstance(value, bool):
            return value == (literal.lower() == "true")
        if isinstance(value, (int, float)):
            return _numeric_equals(value, literal)
        return value_to_text(value) == literal

    def _evaluate_like(self, row: Mapping[str, Any], predicate: Predicate) -> bool:
        value = row.get(predicate.column)
        if not isinstance(value, str):
            return False
        pattern = like_to_regex(predicate.literal)
        return pattern.fullmatch(value) is not None


def _numeric_equals(value: float, literal: str) -> bool:
    try:
        return value == float(literal)
    except ValueError:
        return False


@lru_cache(maxsize=128)
def like_to_regex(pattern: str) -> Pattern[str]:
    """Translate a LIKE pattern into an anchored regular expression.

    ``%`` matches any run of characters; every other character, ``_``
    included, matches itself. Matching is case-sensitive.
    """
    parts = []
    for piece in pattern.split(LIKE_WILDCARD):
        parts.append(re.escape(piece))
    return re.compile(".*".join(parts), re.DOTALL)
