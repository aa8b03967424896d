"""Layout table for the Pony grammar.

Every node kind maps to exactly one ``NodeRule``. Kinds that are not listed
fall back to ``UNKNOWN`` when they look like statements or declarations the
printer does not understand (verbatim pass-through) and to ``INLINE``
otherwise.
"""

from enum import StrEnum
from typing import NamedTuple


class NodeRule(StrEnum):
    SOURCE_FILE = "source_file"
    ENTITY = "entity"
    MEMBERS = "members"
    METHOD = "method"
    BLOCK = "block"
    CASE = "case"
    ATOMIC = "atomic"
    ERROR = "error"
    INLINE = "inline"
    UNKNOWN = "unknown"


class Spacing(StrEnum):
    NONE = "none"
    SPACE = "space"


_SOURCE_FILE_KINDS = frozenset({"source_file", "module", "program"})

ENTITY_KINDS = frozenset(
    {
        "actor_definition",
        "class_definition",
        "primitive_definition",
        "struct_definition",
        "trait_definition",
        "interface_definition",
        "type_alias",
        "type_definition",
        "object_literal",
    }
)

_MEMBERS_KINDS = frozenset({"members", "entity_body", "class_body"})

METHOD_KINDS = frozenset(
    {
        "constructor",
        "method",
        "behavior",
        "behaviour",
        "function_definition",
        "constructor_definition",
        "method_definition",
        "behavior_definition",
    }
)

FIELD_KINDS = frozenset({"field", "field_definition"})

MEMBER_KINDS = METHOD_KINDS | FIELD_KINDS

_BLOCK_KINDS = frozenset({"block", "sequence", "statements", "statement_list"})

CASE_KINDS = frozenset({"match_case", "case", "case_clause", "match_arm", "case_statement"})

MATCH_KINDS = frozenset({"match_statement", "match_expression", "match"})

COMPOUND_KINDS = frozenset(
    {
        "if_statement",
        "ifdef_statement",
        "iftype_statement",
        "match_statement",
        "while_statement",
        "repeat_statement",
        "for_statement",
        "with_statement",
        "try_statement",
        "recover_statement",
        "if_expression",
        "match_expression",
        "while_expression",
        "repeat_expression",
        "for_expression",
        "try_expression",
        "recover_expression",
        "object_literal",
    }
)

_ATOMIC_KINDS = frozenset(
    {
        "string",
        "character",
        "char",
        "number",
        "integer",
        "float",
        "boolean",
        "true",
        "false",
        "bool",
        "annotation",
        "annotations",
    }
)

_COMPOSITE_PARTS = ("array", "lambda", "tuple", "object")

USE_KINDS = frozenset({"use_statement", "use"})

# Unknown declarations are copied verbatim; any other unknown kind is an
# expression, statement or type fragment and goes through the generic rules.
_STRUCTURAL_SUFFIXES = ("_definition", "_declaration")

BODY_OPENERS = frozenset({"then", "do", "else", "try", "repeat", "recover"})

CAPABILITIES = frozenset({"iso", "trn", "ref", "val", "box", "tag"})

LINE_LEADING_KEYWORDS = frozenset({"end", "else", "elseif"})

_NO_SPACE_BEFORE = frozenset({")", "]", "}", ",", ";", ".", "~", ".>", ":", "?", "^", "!", "->"})

_NO_SPACE_AFTER = frozenset({"(", "[", "{", ".", "~", ".>", "@", "#", "->"})

_CALL_OPENERS = frozenset({"(", "["})


class Token(NamedTuple):
    """A leaf as the printer writes it, with enough context for spacing."""

    text: str
    kind: str
    named: bool
    parent_kind: str = ""

    @property
    def is_keyword(self) -> bool:
        return not self.named and self.text.isalpha()


def is_atomic_kind(kind: str) -> bool:
    if kind in _ATOMIC_KINDS:
        return True
    if any(part in kind for part in _COMPOSITE_PARTS):
        return False
    return "string" in kind or "char" in kind or kind.endswith("_literal")


def is_block_kind(kind: str) -> bool:
    return kind in _BLOCK_KINDS


def classify(kind: str, is_error: bool = False) -> NodeRule:
    if is_error or kind == "ERROR":
        return NodeRule.ERROR
    if kind in _SOURCE_FILE_KINDS:
        return NodeRule.SOURCE_FILE
    if kind in ENTITY_KINDS:
        return NodeRule.ENTITY
    if kind in _MEMBERS_KINDS:
        return NodeRule.MEMBERS
    if kind in METHOD_KINDS:
        return NodeRule.METHOD
    if kind in _BLOCK_KINDS:
        return NodeRule.BLOCK
    if kind in CASE_KINDS:
        return NodeRule.CASE
    if is_atomic_kind(kind):
        return NodeRule.ATOMIC
    if kind in COMPOUND_KINDS or kind in USE_KINDS or kind in FIELD_KINDS:
        return NodeRule.INLINE
    if kind.endswith(_STRUCTURAL_SUFFIXES):
        return NodeRule.UNKNOWN
    return NodeRule.INLINE


def _is_unary_operator(token: Token) -> bool:
    return not token.named and not token.text.isalpha() and "unary" in token.parent_kind


def _is_callee(token: Token) -> bool:
    if token.text in (")", "]"):
        return True
    return token.named and not is_atomic_kind(token.kind)


def spacing(left: Token, right: Token) -> Spacing:
    """Decide the gap between two tokens written on the same line."""
    if right.text == "?" and right.parent_kind in METHOD_KINDS:
        # fun apply(): A ? =>
        return Spacing.SPACE
    if right.text in _NO_SPACE_BEFORE and not right.named:
        return Spacing.NONE
    if left.text in _NO_SPACE_AFTER and not left.named:
        return Spacing.NONE
    if _is_unary_operator(left):
        return Spacing.NONE
    if right.text in _CALL_OPENERS and not right.named and _is_callee(left):
        return Spacing.NONE
    return Spacing.SPACE
