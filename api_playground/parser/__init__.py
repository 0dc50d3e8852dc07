"""Query tokenizing and parsing."""

from .parser import ParseError, QueryParser, UnsupportedQueryKind
from .tokenizer import Token, TokenKind, tokenize

__all__ = [
    "ParseError",
    "QueryParser",
    "Token",
    "TokenKind",
    "UnsupportedQueryKind",
    "tokenize",
]
