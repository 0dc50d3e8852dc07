"""Query plan representations."""

from .query import (
    AggregateFunction,
    OrderBy,
    ParsedQuery,
    Predicate,
    PredicateOperator,
    Projection,
    ProjectionItem,
    SortDirection,
    STAR_ARGUMENT,
    WILDCARD,
)

__all__ = [
    "AggregateFunction",
    "OrderBy",
    "ParsedQuery",
    "Predicate",
    "PredicateOperator",
    "Projection",
    "ProjectionItem",
    "SortDirection",
    "STAR_ARGUMENT",
    "WILDCARD",
]
