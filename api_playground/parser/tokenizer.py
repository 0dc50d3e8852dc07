"""Query tokenizer built on the sqlparse lexer."""

from dataclasses import dataclass
from enum import Enum
from typing import List

from sqlparse import lexer
from sqlparse import tokens as T


class TokenKind(Enum):
    """Token categories the query parser distinguishes."""

    WORD = "word"
    STRING = "string"
    QUOTED_NAME = "quoted_name"
    NUMBER = "number"
    OPERATOR = "operator"
    STAR = "star"
    COMMA = "comma"
    LPAREN = "lparen"
    RPAREN = "rparen"
    OTHER = "other"


@dataclass(frozen=True)
class Token:
    """A lexical token with its position in the source text.

    ``value`` is the normalized payload: quotes are stripped from strings
    and quoted names, everything else keeps its source spelling.
    """

    kind: TokenKind
    value: str
    start: int
    end: int

    @property
    def upper(self) -> str:
        return self.value.upper()

    def is_word(self, *words: str) -> bool:
        """Check for a bare word, optionally one of ``words`` (case-insensitive)."""
        if self.kind != TokenKind.WORD:
            return False
        if not words:
            return True
        return self.upper in words

    def __repr__(self) -> str:
        return f"Token({self.kind.value}, {self.value!r})"


_PUNCTUATION_KINDS = {
    ",": TokenKind.COMMA,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
}


def tokenize(text: str) -> List[Token]:
    """Split query text into tokens, dropping whitespace and comments.

    Multi-word keywords the lexer reports as one token (``ORDER BY``,
    ``NOT LIKE``) are split back into one WORD token per word so the
    parser only has to match single words.

    Args:
        text: Query text

    Returns:
        Tokens in source order
    """
    result: List[Token] = []
    position = 0
    for ttype, raw in lexer.tokenize(text):
        start = position
        position += len(raw)
        if ttype in T.Whitespace or ttype in T.Comment:
            continue
        result.extend(_convert(ttype, raw, start))
    return result


def _convert(ttype, raw: str, start: int) -> List[Token]:
    """Map one sqlparse token to parser tokens."""
    end = start + len(raw)
    if raw == "*":
        return [Token(TokenKind.STAR, raw, start, end)]
    if ttype in T.String:
        return [_quoted_token(raw, start, end)]
    if ttype in T.Number:
        return [Token(TokenKind.NUMBER, raw, start, end)]
    if ttype in T.Punctuation:
        kind = _PUNCTUATION_KINDS.get(raw, TokenKind.OTHER)
        return [Token(kind, raw, start, end)]
    if ttype in T.Keyword or ttype in T.Name or ttype in T.Operator.Comparison:
        if raw[0] == "`":
            return [_quoted_token(raw, start, end)]
        if raw[0].isalpha() or raw[0] == "_":
            return _split_words(raw, start)
        if ttype in T.Operator.Comparison:
            return [Token(TokenKind.OPERATOR, raw, start, end)]
        return [Token(TokenKind.WORD, raw, start, end)]
    if ttype in T.Operator:
        return [Token(TokenKind.OPERATOR, raw, start, end)]
    return [Token(TokenKind.OTHER, raw, start, end)]


def _quoted_token(raw: str, start: int, end: int) -> Token:
    """Strip quotes from a string literal or a double-quoted name."""
    quote = raw[0]
    if len(raw) >= 2 and raw[-1] == quote and quote in ("'", '"', "`"):
        inner = raw[1:-1].replace(quote * 2, quote)
    else:
        inner = raw
    if quote == "'":
        return Token(TokenKind.STRING, inner, start, end)
    return Token(TokenKind.QUOTED_NAME, inner, start, end)


def _split_words(raw: str, start: int) -> List[Token]:
    """Split a possibly multi-word token on whitespace, keeping offsets."""
    words: List[Token] = []
    index = 0
    while index < len(raw):
        if raw[index].isspace():
            index += 1
            continue
        word_start = index
        while index < len(raw) and not raw[index].isspace():
            index += 1
        words.append(
            Token(TokenKind.WORD, raw[word_start:index], start + word_start, start + index)
        )
    return words
