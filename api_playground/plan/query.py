"""Parsed query representation."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class PredicateOperator(Enum):
    """Comparison operators supported in WHERE."""

    EQUALS = "="
    LIKE = "LIKE"


class SortDirection(Enum):
    """ORDER BY directions."""

    ASC = "ASC"
    DESC = "DESC"


class AggregateFunction(Enum):
    """Aggregate functions understood by the aggregation stage."""

    COUNT = "COUNT"
    SUM = "SUM"
    AVG = "AVG"
    MIN = "MIN"
    MAX = "MAX"


STAR_ARGUMENT = "*"


@dataclass(frozen=True)
class ProjectionItem:
    """One comma-separated entry of the SELECT list.

    ``text`` is the trimmed source text of the entry and is the key used
    for plain projection. The structured fields are filled in when the
    entry has a recognisable shape: a column reference or an aggregate
    call, each with an optional alias.
    """

    text: str
    column: Optional[str] = None
    function: Optional[AggregateFunction] = None
    argument: Optional[str] = None
    alias: Optional[str] = None

    @property
    def is_aggregate(self) -> bool:
        return self.function is not None

    @property
    def lookup_key(self) -> str:
        """Key used for plain projection.

        A bare column reference resolves to the column name (so quoted
        names work); anything else, aliases and calls included, resolves
        to its source text and is therefore normally absent from rows.
        """
        if self.column and not self.alias and not self.is_aggregate:
            return self.column
        return self.text

    @property
    def output_name(self) -> str:
        """Key used for this item in aggregated output rows."""
        if self.alias:
            return self.alias
        if self.column and not self.is_aggregate:
            return self.column
        return self.text

    def to_sql(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"ProjectionItem({self.text})"


@dataclass(frozen=True)
class Projection:
    """SELECT list: either the wildcard or an ordered list of items."""

    items: Tuple[ProjectionItem, ...] = ()
    is_wildcard: bool = False

    @property
    def has_aggregates(self) -> bool:
        for item in self.items:
            if item.is_aggregate:
                return True
        return False

    def to_sql(self) -> str:
        if self.is_wildcard:
            return "*"
        texts = []
        for item in self.items:
            texts.append(item.to_sql())
        return ", ".join(texts)

    def __repr__(self) -> str:
        return f"Projection({self.to_sql()})"


WILDCARD = Projection(is_wildcard=True)


@dataclass(frozen=True)
class Predicate:
    """Single ``column <op> literal`` comparison.

    ``literal`` is always the literal's text with quotes removed; coercion
    to the column's runtime type happens during evaluation.
    """

    column: str
    operator: PredicateOperator
    literal: str
    quoted: bool = False

    def to_sql(self) -> str:
        value = f"'{self.literal}'" if self.quoted else self.literal
        return f"{self.column} {self.operator.value} {value}"

    def __repr__(self) -> str:
        return f"Predicate({self.to_sql()})"


@dataclass(frozen=True)
class OrderBy:
    """Sort key."""

    column: str
    direction: SortDirection = SortDirection.ASC

    @property
    def descending(self) -> bool:
        return self.direction == SortDirection.DESC

    def to_sql(self) -> str:
        return f"{self.column} {self.direction.value}"


@dataclass(frozen=True)
class ParsedQuery:
    """Structured result of parsing one query string.

    Built fresh for every execution. ``warnings`` lists every clause that
    was present but could not be understood and therefore fell back to a
    permissive default.
    """

    text: str
    projection: Projection = WILDCARD
    source: Optional[str] = None
    predicate: Optional[Predicate] = None
    group_by: Tuple[str, ...] = ()
    order_by: Optional[OrderBy] = None
    limit: Optional[int] = None
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_aggregate(self) -> bool:
        """True when the query asks for grouping or aggregate functions."""
        return bool(self.group_by) or self.projection.has_aggregates

    def to_sql(self) -> str:
        parts = [f"SELECT {self.projection.to_sql()}"]
        if self.source:
            parts.append(f"FROM {self.source}")
        if self.predicate:
            parts.append(f"WHERE {self.predicate.to_sql()}")
        if self.group_by:
            parts.append(f"GROUP BY {', '.join(self.group_by)}")
        if self.order_by:
            parts.append(f"ORDER BY {self.order_by.to_sql()}")
        if self.limit is not None:
            parts.append(f"LIMIT {self.limit}")
        return " ".join(parts)

    def __repr__(self) -> str:
        return f"ParsedQuery({self.to_sql()})"
