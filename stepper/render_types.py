"""Rendering data types (pure data, no business logic)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel


@dataclass(frozen=True)
class Fragment:
    """A piece of rendered text and the node that produced it.

    ``node`` is None for separators that belong to no node (the newline
    between top-level statements).
    """

    text: str
    node: Any = None


class TokenCategory(str, Enum):
    KEYWORD = "keyword"
    IDENTIFIER = "identifier"
    NUMERAL = "numeral"
    STRING = "string"
    OPERATOR = "operator"
    BRACKET = "bracket"
    SEMICOLON = "semicolon"
    TYPE = "type"
    WHITESPACE = "whitespace"


class Token(BaseModel):
    text: str
    category: TokenCategory


class HighlightRange(BaseModel):
    """Inclusive token-index range."""

    start: int
    end: int


class SymbolState(BaseModel):
    tokens: list[Token] = []
    range: Optional[HighlightRange] = None
