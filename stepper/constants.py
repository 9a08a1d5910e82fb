"""Named constants — eliminates magic strings across the codebase."""

from __future__ import annotations

INT_TYPE = "int"
STRING_TYPE = "string"
VOID_TYPE = "void"

DATATYPES: tuple[str, ...] = (INT_TYPE, STRING_TYPE, VOID_TYPE)

# How each declarable datatype is spelled in rendered source
C_TYPE_NAMES: dict[str, str] = {
    INT_TYPE: "int",
    STRING_TYPE: "char*",
}

# Numeric stand-ins used when a string constant is compared
NULL_STRING_NUMERIC = 0
STRING_NUMERIC = 99

PRINTF = "printf"
FORMAT_PLACEHOLDER = "%d"

IF_TRUE_LABEL_PREFIX = "if_true"
IF_FALSE_LABEL_PREFIX = "if_false"
IF_END_LABEL_PREFIX = "if_end"
FOR_BEGIN_LABEL_PREFIX = "for_begin"
FOR_BODY_LABEL_PREFIX = "for_body"
FOR_END_LABEL_PREFIX = "for_end"

INDENT = "  "
NULL_LITERAL = "NULL"

BRACKETS = frozenset("()[]{}")
