"""Recursive-descent parser for the SELECT-only query language.

Grammar (keywords case-insensitive, each clause optional after SELECT)::

    query      := SELECT projection [FROM name] [WHERE predicate]
                  [GROUP BY name {, name}] [ORDER BY name [ASC|DESC]]
                  [LIMIT integer]
    projection := '*' | item {, item}
    item       := name [[AS] name] | func '(' ('*' | name) ')' [[AS] name]
    predicate  := name '=' literal | name LIKE string

The token stream is first cut into clauses at top-level clause keywords,
then every clause is parsed on its own. Only a missing SELECT is fatal; a
clause that does not match its grammar falls back to a permissive default
(no filter, no sort, no limit, all columns) and records a warning on the
parsed query.
"""

import logging
from typing import Dict, List, Optional, Tuple

from ..plan.query import (
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
from .tokenizer import Token, TokenKind, tokenize

logger = logging.getLogger(__name__)

SELECT = "SELECT"
FROM = "FROM"
WHERE = "WHERE"
GROUP_BY = "GROUP BY"
ORDER_BY = "ORDER BY"
LIMIT = "LIMIT"

_SINGLE_WORD_CLAUSES = (SELECT, FROM, WHERE, LIMIT)
_NAME_KINDS = (TokenKind.WORD, TokenKind.QUOTED_NAME)
_LITERAL_KINDS = (
    TokenKind.STRING,
    TokenKind.QUOTED_NAME,
    TokenKind.NUMBER,
    TokenKind.WORD,
)


class ParseError(ValueError):
    """Raised when query text cannot be parsed at all."""


class UnsupportedQueryKind(ParseError):
    """Raised for statements other than SELECT."""


class QueryParser:
    """Parses query text into a ParsedQuery."""

    def parse(self, text: str) -> ParsedQuery:
        """Parse query text.

        Args:
            text: Query string

        Returns:
            Parsed query with any degradation warnings

        Raises:
            ParseError: If the text is empty
            UnsupportedQueryKind: If the text does not start with SELECT
        """
        source_text = text.strip()
        if not source_text:
            raise ParseError("Query is empty")

        tokens = self._strip_terminators(tokenize(source_text))
        if not tokens or not tokens[0].is_word(SELECT):
            raise UnsupportedQueryKind("Only SELECT queries are supported")

        clauses, warnings = self._split_clauses(tokens)
        builder = _QueryBuilder(source_text, warnings)
        query = builder.build(clauses)
        logger.debug(f"Parsed query: {query}")
        return query

    def _strip_terminators(self, tokens: List[Token]) -> List[Token]:
        """Drop trailing statement terminators."""
        end = len(tokens)
        while end > 0 and tokens[end - 1].kind == TokenKind.OTHER and tokens[end - 1].value == ";":
            end -= 1
        return tokens[:end]

    def _split_clauses(
        self, tokens: List[Token]
    ) -> Tuple[Dict[str, List[Token]], List[str]]:
        """Cut the token stream at top-level clause keywords."""
        clauses: Dict[str, List[Token]] = {}
        warnings: List[str] = []
        current: List[Token] = []
        depth = 0
        index = 0
        while index < len(tokens):
            keyword, width = self._clause_keyword_at(tokens, index, depth)
            if keyword is not None:
                if index > 0 and self._expects_name(current):
                    warnings.append(_keyword_as_name_hint(tokens[index]))
                if keyword in clauses:
                    warnings.append(f"Repeated {keyword} clause ignored")
                    current = []
                else:
                    current = []
                    clauses[keyword] = current
                index += width
                continue
            token = tokens[index]
            if token.kind == TokenKind.LPAREN:
                depth += 1
            elif token.kind == TokenKind.RPAREN and depth > 0:
                depth -= 1
            current.append(token)
            index += 1
        return clauses, warnings

    def _expects_name(self, current: List[Token]) -> bool:
        """True right after a clause keyword or a top-level comma."""
        return not current or current[-1].kind == TokenKind.COMMA

    def _clause_keyword_at(
        self, tokens: List[Token], index: int, depth: int
    ) -> Tuple[Optional[str], int]:
        """Return the clause keyword starting at ``index`` and its width."""
        if depth > 0:
            return None, 0
        token = tokens[index]
        if token.is_word(*_SINGLE_WORD_CLAUSES):
            return token.upper, 1
        if token.is_word("ORDER", "GROUP"):
            if index + 1 < len(tokens) and tokens[index + 1].is_word("BY"):
                return f"{token.upper} BY", 2
        return None, 0


class _QueryBuilder:
    """Parses individual clauses and assembles the ParsedQuery."""

    def __init__(self, text: str, warnings: List[str]):
        self.text = text
        self.warnings = warnings

    def build(self, clauses: Dict[str, List[Token]]) -> ParsedQuery:
        projection = self._parse_projection(clauses)
        source = self._parse_source(clauses.get(FROM))
        predicate = self._parse_where(clauses.get(WHERE))
        group_by = self._parse_group_by(clauses.get(GROUP_BY))
        order_by = self._parse_order_by(clauses.get(ORDER_BY))
        limit = self._parse_limit(clauses.get(LIMIT))
        return ParsedQuery(
            text=self.text,
            projection=projection,
            source=source,
            predicate=predicate,
            group_by=group_by,
            order_by=order_by,
            limit=limit,
            warnings=tuple(self.warnings),
        )

    # Projection

    def _parse_projection(self, clauses: Dict[str, List[Token]]) -> Projection:
        if FROM not in clauses:
            self.warnings.append("No FROM clause; returning all columns")
            return WILDCARD
        tokens = clauses[SELECT]
        if not tokens:
            self.warnings.append("Empty SELECT list; returning all columns")
            return WILDCARD
        if len(tokens) == 1 and tokens[0].kind == TokenKind.STAR:
            return WILDCARD

        items: List[ProjectionItem] = []
        for segment in self._split_on_commas(tokens):
            if not segment:
                self.warnings.append("Empty entry in SELECT list ignored")
                continue
            items.append(self._parse_projection_item(segment))
        if not items:
            return WILDCARD
        return Projection(items=tuple(items))

    def _split_on_commas(self, tokens: List[Token]) -> List[List[Token]]:
        segments: List[List[Token]] = [[]]
        depth = 0
        for token in tokens:
            if token.kind == TokenKind.COMMA and depth == 0:
                segments.append([])
                continue
            if token.kind == TokenKind.LPAREN:
                depth += 1
            elif token.kind == TokenKind.RPAREN and depth > 0:
                depth -= 1
            segments[-1].append(token)
        return segments

    def _parse_projection_item(self, segment: List[Token]) -> ProjectionItem:
        text = self._source_text(segment)
        head = segment[0]

        if _is_call(segment):
            return self._parse_call(segment, text)
        if head.kind in _NAME_KINDS:
            alias = self._parse_alias(segment[1:])
            if alias is not None:
                return ProjectionItem(text=text, column=head.value, alias=alias or None)
        return ProjectionItem(text=text)

    def _parse_call(self, segment: List[Token], text: str) -> ProjectionItem:
        """Parse ``func(arg) [[AS] alias]``."""
        function = _aggregate_function(segment[0].upper)
        if function is None or len(segment) < 4:
            return ProjectionItem(text=text)
        argument = segment[2]
        if segment[3].kind != TokenKind.RPAREN:
            return ProjectionItem(text=text)
        if argument.kind == TokenKind.STAR:
            argument_name = STAR_ARGUMENT
        elif argument.kind in _NAME_KINDS:
            argument_name = argument.value
        else:
            return ProjectionItem(text=text)
        if argument_name == STAR_ARGUMENT and function != AggregateFunction.COUNT:
            return ProjectionItem(text=text)

        alias = self._parse_alias(segment[4:])
        if alias is None and len(segment) > 4:
            return ProjectionItem(text=text)
        return ProjectionItem(
            text=text,
            function=function,
            argument=argument_name,
            alias=alias or None,
        )

    def _parse_alias(self, tokens: List[Token]) -> Optional[str]:
        """Parse ``[AS] name``; empty string means no alias present."""
        if not tokens:
            return ""
        if tokens[0].is_word("AS"):
            tokens = tokens[1:]
        if len(tokens) == 1 and tokens[0].kind in _NAME_KINDS + (TokenKind.STRING,):
            return tokens[0].value
        return None

    # FROM

    def _parse_source(self, tokens: Optional[List[Token]]) -> Optional[str]:
        if tokens is None:
            return None
        if not tokens or tokens[0].kind not in _NAME_KINDS:
            self.warnings.append("FROM clause has no table name")
            return None
        if len(tokens) > 1:
            self.warnings.append(
                f"Ignored text after table name: {self._source_text(tokens[1:])}"
            )
        return tokens[0].value

    # WHERE

    def _parse_where(self, tokens: Optional[List[Token]]) -> Optional[Predicate]:
        if tokens is None:
            return None
        if not tokens:
            self.warnings.append("Empty WHERE clause; no filtering applied")
            return None
        predicate = self._parse_comparison(tokens)
        if predicate is None:
            self.warnings.append(
                "WHERE clause not recognised; no filtering applied: "
                f"{self._source_text(tokens)}"
            )
        return predicate

    def _parse_comparison(self, tokens: List[Token]) -> Optional[Predicate]:
        """Parse ``name = literal`` or ``name LIKE 'pattern'``."""
        if len(tokens) != 3 or tokens[0].kind not in _NAME_KINDS:
            return None
        column, operator, literal = tokens
        quoted = literal.kind in (TokenKind.STRING, TokenKind.QUOTED_NAME)
        if operator.kind == TokenKind.OPERATOR and operator.value == "=":
            if literal.kind not in _LITERAL_KINDS:
                return None
            return Predicate(
                column=column.value,
                operator=PredicateOperator.EQUALS,
                literal=literal.value,
                quoted=quoted,
            )
        if operator.is_word("LIKE") and quoted:
            return Predicate(
                column=column.value,
                operator=PredicateOperator.LIKE,
                literal=literal.value,
                quoted=True,
            )
        return None

    # GROUP BY

    def _parse_group_by(self, tokens: Optional[List[Token]]) -> Tuple[str, ...]:
        if tokens is None:
            return ()
        columns: List[str] = []
        for segment in self._split_on_commas(tokens):
            if len(segment) != 1 or segment[0].kind not in _NAME_KINDS:
                self.warnings.append("GROUP BY clause not recognised; no grouping applied")
                return ()
            columns.append(segment[0].value)
        return tuple(columns)

    # ORDER BY

    def _parse_order_by(self, tokens: Optional[List[Token]]) -> Optional[OrderBy]:
        if tokens is None:
            return None
        if not tokens or tokens[0].kind not in _NAME_KINDS:
            self.warnings.append("ORDER BY clause not recognised; no sorting applied")
            return None

        column = tokens[0].value
        direction = SortDirection.ASC
        rest = tokens[1:]
        if rest and rest[0].is_word("ASC", "DESC"):
            direction = SortDirection(rest[0].upper)
            rest = rest[1:]
        if rest:
            if rest[0].kind == TokenKind.COMMA:
                self.warnings.append(
                    f"Only the first ORDER BY key is used: {column}"
                )
            else:
                self.warnings.append(
                    f"Ignored text after ORDER BY key: {self._source_text(rest)}"
                )
        return OrderBy(column=column, direction=direction)

    # LIMIT

    def _parse_limit(self, tokens: Optional[List[Token]]) -> Optional[int]:
        if tokens is None:
            return None
        if not tokens or tokens[0].kind != TokenKind.NUMBER or not tokens[0].value.isdigit():
            self.warnings.append(
                "LIMIT must be a non-negative integer; no limit applied"
            )
            return None
        if len(tokens) > 1:
            self.warnings.append(
                f"Ignored text after LIMIT value: {self._source_text(tokens[1:])}"
            )
        return int(tokens[0].value)

    def _source_text(self, tokens: List[Token]) -> str:
        """Original text spanned by ``tokens``."""
        return self.text[tokens[0].start : tokens[-1].end].strip()


def _keyword_as_name_hint(token: Token) -> str:
    return (
        f"{token.upper} read as a clause keyword; quote column names that are "
        f'keywords, e.g. "{token.value}"'
    )


def _is_call(segment: List[Token]) -> bool:
    return (
        len(segment) >= 2
        and segment[0].kind == TokenKind.WORD
        and segment[1].kind == TokenKind.LPAREN
    )


def _aggregate_function(name: str) -> Optional[AggregateFunction]:
    for function in AggregateFunction:
        if function.value == name:
            return function
    return None
