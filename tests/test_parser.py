"""Tests for the query parser."""

import pytest

from api_playground.parser import ParseError, QueryParser, UnsupportedQueryKind
from api_playground.plan import AggregateFunction, PredicateOperator, SortDirection


def test_parse_full_query():
    """All clauses are extracted from a well-formed query."""
    parser = QueryParser()
    query = parser.parse(
        "SELECT name, population FROM data WHERE region = 'Europe' "
        "ORDER BY population DESC LIMIT 2"
    )

    assert [item.text for item in query.projection.items] == ["name", "population"]
    assert query.source == "data"
    assert query.predicate.column == "region"
    assert query.predicate.operator == PredicateOperator.EQUALS
    assert query.predicate.literal == "Europe"
    assert query.predicate.quoted is True
    assert query.order_by.column == "population"
    assert query.order_by.direction == SortDirection.DESC
    assert query.limit == 2
    assert query.warnings == ()


def test_parse_lowercase_keywords_and_semicolon():
    """Keywords are case-insensitive and a trailing ';' is allowed."""
    query = QueryParser().parse("select * from users where id = 1 order by name limit 5;")

    assert query.projection.is_wildcard
    assert query.source == "users"
    assert query.predicate.literal == "1"
    assert query.predicate.quoted is False
    assert query.order_by.direction == SortDirection.ASC
    assert query.limit == 5


def test_parse_rejects_non_select():
    """Statements other than SELECT are rejected."""
    parser = QueryParser()
    with pytest.raises(UnsupportedQueryKind) as exc_info:
        parser.parse("DROP TABLE data")

    assert str(exc_info.value) == "Only SELECT queries are supported"
    assert isinstance(exc_info.value, ParseError)


def test_parse_rejects_empty_query():
    """Blank text is a parse error."""
    with pytest.raises(ParseError, match="Query is empty"):
        QueryParser().parse("   \n ")


def test_missing_from_defaults_to_wildcard():
    """Without FROM every column is returned."""
    query = QueryParser().parse("SELECT name")

    assert query.projection.is_wildcard
    assert query.source is None
    assert "No FROM clause; returning all columns" in query.warnings


def test_unrecognised_where_means_no_filter():
    """Comparisons other than '=' and LIKE degrade to no filtering."""
    query = QueryParser().parse("SELECT * FROM data WHERE age > 18")

    assert query.predicate is None
    assert query.warnings[0].startswith("WHERE clause not recognised")
    assert "age > 18" in query.warnings[0]


def test_compound_where_means_no_filter():
    """Only a single comparison is understood."""
    query = QueryParser().parse("SELECT * FROM data WHERE a = 1 AND b = 2")

    assert query.predicate is None
    assert len(query.warnings) == 1


def test_like_requires_quoted_pattern():
    """LIKE takes a quoted pattern."""
    parser = QueryParser()

    query = parser.parse("SELECT * FROM data WHERE name LIKE '%an%'")
    assert query.predicate.operator == PredicateOperator.LIKE
    assert query.predicate.literal == "%an%"

    query = parser.parse("SELECT * FROM data WHERE name LIKE an")
    assert query.predicate is None


def test_order_by_uses_first_key_only():
    """Extra ORDER BY keys are reported and ignored."""
    query = QueryParser().parse("SELECT * FROM data ORDER BY a DESC, b")

    assert query.order_by.column == "a"
    assert query.order_by.descending
    assert query.warnings == ("Only the first ORDER BY key is used: a",)


@pytest.mark.parametrize("limit_text", ["abc", "-1", "2.5", ""])
def test_invalid_limit_means_no_limit(limit_text):
    """LIMIT must be a non-negative integer."""
    query = QueryParser().parse(f"SELECT * FROM data LIMIT {limit_text}")

    assert query.limit is None
    assert "LIMIT must be a non-negative integer; no limit applied" in query.warnings


def test_limit_zero_is_kept():
    """LIMIT 0 is a valid limit."""
    assert QueryParser().parse("SELECT * FROM data LIMIT 0").limit == 0


def test_repeated_clause_is_ignored():
    """The first occurrence of a clause wins."""
    query = QueryParser().parse("SELECT * FROM data WHERE a = 1 WHERE b = 2")

    assert query.predicate.column == "a"
    assert "Repeated WHERE clause ignored" in query.warnings


def test_quoted_column_names():
    """Double-quoted names work in projection, WHERE and ORDER BY."""
    query = QueryParser().parse(
        'SELECT "first name" FROM data WHERE "last name" = \'Doe\' ORDER BY "first name"'
    )

    item = query.projection.items[0]
    assert item.column == "first name"
    assert item.lookup_key == "first name"
    assert query.predicate.column == "last name"
    assert query.order_by.column == "first name"


def test_parse_aggregate_items():
    """Aggregate calls and aliases are recognised."""
    query = QueryParser().parse(
        "SELECT department, COUNT(*) as count, AVG(salary) avg_salary "
        "FROM users GROUP BY department"
    )

    department, count, average = query.projection.items
    assert department.column == "department"
    assert not department.is_aggregate
    assert count.function == AggregateFunction.COUNT
    assert count.argument == "*"
    assert count.alias == "count"
    assert count.text == "COUNT(*) as count"
    assert average.function == AggregateFunction.AVG
    assert average.argument == "salary"
    assert average.output_name == "avg_salary"
    assert query.group_by == ("department",)
    assert query.is_aggregate


def test_alias_key_is_source_text():
    """An aliased column is looked up by its full source text."""
    query = QueryParser().parse("SELECT name AS full_name FROM data")

    item = query.projection.items[0]
    assert item.alias == "full_name"
    assert item.lookup_key == "name AS full_name"


def test_parsed_query_to_sql():
    """ParsedQuery renders back to normalized text."""
    query = QueryParser().parse("select name from data where id = 3 order by name desc limit 1")

    assert query.to_sql() == "SELECT name FROM data WHERE id = 3 ORDER BY name DESC LIMIT 1"


def test_keyword_column_names_point_to_quoting():
    """A column named like a clause keyword gets a quoting hint."""
    query = QueryParser().parse("SELECT limit FROM data")

    assert query.projection.is_wildcard
    assert (
        'LIMIT read as a clause keyword; quote column names that are keywords, e.g. "limit"'
        in query.warnings
    )


def test_keyword_after_comma_points_to_quoting():
    """The hint also fires inside a SELECT list."""
    query = QueryParser().parse("SELECT id, limit FROM data")

    assert any(warning.startswith("LIMIT read as a clause keyword") for warning in query.warnings)


def test_quoted_keyword_column_is_projected():
    """Quoting a keyword makes it an ordinary column."""
    query = QueryParser().parse('SELECT "limit" FROM data')

    assert query.projection.items[0].lookup_key == "limit"
    assert query.warnings == ()
