"""Syntax highlighting of rendered fragments."""

from __future__ import annotations

from typing import Optional, Sequence

from . import constants
from .errors import UnsupportedNode
from .nodes import (
    AddAssign,
    Assign,
    BinaryOp,
    Constant,
    Declaration,
    ForLoop,
    Identifier,
    If,
    Increment,
    Invoke,
)
from .render_types import Fragment, Token, TokenCategory

_KEYWORDS: dict[type, str] = {If: "if", ForLoop: "for"}


def _is_trivia(char: str) -> bool:
    return char.isspace() or char in constants.BRACKETS


def _trivia_category(char: str) -> TokenCategory:
    if char in constants.BRACKETS:
        return TokenCategory.BRACKET
    return TokenCategory.WHITESPACE


def _split_trivia(text: str) -> tuple[str, str, str]:
    """Split *text* into (leading trivia, core, trailing trivia)."""
    start = 0
    while start < len(text) and _is_trivia(text[start]):
        start += 1
    end = len(text)
    while end > start and _is_trivia(text[end - 1]):
        end -= 1
    return text[:start], text[start:end], text[end:]


def _tag_trivia(text: str) -> list[Token]:
    """Group runs of brackets and runs of whitespace into tokens."""
    tokens: list[Token] = []
    for char in text:
        category = _trivia_category(char)
        if tokens and tokens[-1].category == category:
            tokens[-1] = Token(text=tokens[-1].text + char, category=category)
        else:
            tokens.append(Token(text=char, category=category))
    return tokens


def _tag_constant(core: str, node: Constant) -> list[Token]:
    if node.datatype == constants.INT_TYPE:
        if core.startswith("-"):
            return [
                Token(text="-", category=TokenCategory.OPERATOR),
                Token(text=core[1:], category=TokenCategory.NUMERAL),
            ]
        return [Token(text=core, category=TokenCategory.NUMERAL)]
    if node.datatype == constants.STRING_TYPE and node.value is None:
        return [Token(text=core, category=TokenCategory.KEYWORD)]
    return [Token(text=core, category=TokenCategory.STRING)]


def _core_category(core: str, node) -> Optional[TokenCategory]:
    if isinstance(node, Identifier):
        return TokenCategory.IDENTIFIER
    if isinstance(node, (BinaryOp, Assign, AddAssign, Increment, Invoke)):
        # Invoke contributes only brackets and the argument comma
        return TokenCategory.OPERATOR
    if core == ";":
        return TokenCategory.SEMICOLON
    if isinstance(node, Declaration):
        if core == "=":
            return TokenCategory.OPERATOR
        if core == constants.C_TYPE_NAMES[node.datatype]:
            return TokenCategory.TYPE
    if core == _KEYWORDS.get(type(node)):
        return TokenCategory.KEYWORD
    return None


def _tag_fragment(fragment: Fragment) -> list[Token]:
    leading, core, trailing = _split_trivia(fragment.text)
    tokens = _tag_trivia(leading)

    if core:
        node = fragment.node
        if isinstance(node, Constant):
            tokens.extend(_tag_constant(core, node))
        else:
            category = _core_category(core, node)
            if category is None:
                raise UnsupportedNode(
                    f"Cannot classify {core!r} from {type(node).__name__}", node
                )
            tokens.append(Token(text=core, category=category))

    tokens.extend(_tag_trivia(trailing))
    return tokens


def tag_tokens(fragments: Sequence[Fragment]) -> list[Token]:
    """Split each fragment into trivia and core, and classify each piece."""
    return [token for fragment in fragments for token in _tag_fragment(fragment)]
