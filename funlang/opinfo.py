"""Operator kinds of the Fun language with their spelling, precedence and associativity."""

from __future__ import annotations

import enum


class OpKind(enum.Enum):
    """Kind of an AST node: every construct of the language is one of these."""

    PROGRAM = enum.auto()
    INT = enum.auto()
    ID = enum.auto()
    TUPLE = enum.auto()
    FUN_DECL = enum.auto()
    INT_TYPE = enum.auto()
    TUPLE_TYPE = enum.auto()
    PROJ = enum.auto()
    REF = enum.auto()
    REF_TYPE = enum.auto()
    CALL = enum.auto()
    GET = enum.auto()
    UMINUS = enum.auto()
    FUN_TYPE = enum.auto()
    MUL = enum.auto()
    ADD = enum.auto()
    SUB = enum.auto()
    EQUAL = enum.auto()
    LT = enum.auto()
    NOT = enum.auto()
    AND = enum.auto()
    OR = enum.auto()
    CONSTRAIN = enum.auto()
    SET = enum.auto()
    IF_THEN_ELSE = enum.auto()
    IF_THEN = enum.auto()
    WHILE = enum.auto()
    SEQ = enum.auto()
    LET = enum.auto()


class OpAssoc(enum.Enum):
    """Associativity of an operator."""

    NONE = enum.auto()
    UNARY_LEFT = enum.auto()
    UNARY_RIGHT = enum.auto()
    BINARY_LEFT = enum.auto()
    BINARY_RIGHT = enum.auto()


_STRINGS: dict[OpKind, str] = {
    OpKind.REF: "ref ",
    OpKind.REF_TYPE: " ref",
    OpKind.FUN_TYPE: "->",
    OpKind.GET: "!",
    OpKind.UMINUS: "-",
    OpKind.MUL: "*",
    OpKind.ADD: "+",
    OpKind.SUB: "-",
    OpKind.EQUAL: "=",
    OpKind.LT: "<",
    OpKind.NOT: "not ",
    OpKind.AND: "&",
    OpKind.OR: "||",
    OpKind.CONSTRAIN: ":",
    OpKind.SET: ":=",
    OpKind.SEQ: ";",
}

# Lower numbers bind tighter.  If-then-else binds tighter than if-then so that
# a dangling 'else' belongs to the closest 'if'.  Non-operators get 100.
_PRECEDENCE: dict[OpKind, int] = {
    OpKind.PROJ: 1,
    OpKind.REF: 1,
    OpKind.REF_TYPE: 1,
    OpKind.CALL: 1,
    OpKind.GET: 1,
    OpKind.UMINUS: 1,
    OpKind.FUN_TYPE: 2,
    OpKind.MUL: 2,
    OpKind.ADD: 3,
    OpKind.SUB: 3,
    OpKind.EQUAL: 4,
    OpKind.LT: 4,
    OpKind.NOT: 5,
    OpKind.AND: 6,
    OpKind.OR: 6,
    OpKind.CONSTRAIN: 7,
    OpKind.SET: 8,
    OpKind.IF_THEN_ELSE: 9,
    OpKind.IF_THEN: 10,
    OpKind.WHILE: 10,
    OpKind.SEQ: 11,
    OpKind.LET: 12,
    OpKind.PROGRAM: 100,
    OpKind.INT: 100,
    OpKind.ID: 100,
    OpKind.TUPLE: 100,
    OpKind.FUN_DECL: 100,
    OpKind.INT_TYPE: 100,
    OpKind.TUPLE_TYPE: 100,
}

_ASSOC: dict[OpKind, OpAssoc] = {
    OpKind.PROJ: OpAssoc.UNARY_RIGHT,
    OpKind.REF: OpAssoc.UNARY_RIGHT,
    OpKind.REF_TYPE: OpAssoc.UNARY_LEFT,
    OpKind.CALL: OpAssoc.BINARY_LEFT,
    OpKind.FUN_TYPE: OpAssoc.BINARY_RIGHT,
    OpKind.GET: OpAssoc.UNARY_RIGHT,
    OpKind.UMINUS: OpAssoc.UNARY_RIGHT,
    OpKind.MUL: OpAssoc.BINARY_LEFT,
    OpKind.ADD: OpAssoc.BINARY_LEFT,
    OpKind.SUB: OpAssoc.BINARY_LEFT,
    OpKind.EQUAL: OpAssoc.BINARY_LEFT,
    OpKind.LT: OpAssoc.BINARY_LEFT,
    OpKind.NOT: OpAssoc.UNARY_RIGHT,
    OpKind.AND: OpAssoc.BINARY_LEFT,
    OpKind.OR: OpAssoc.BINARY_LEFT,
    OpKind.CONSTRAIN: OpAssoc.BINARY_LEFT,
    OpKind.SET: OpAssoc.NONE,
    OpKind.IF_THEN_ELSE: OpAssoc.NONE,
    OpKind.IF_THEN: OpAssoc.NONE,
    OpKind.WHILE: OpAssoc.NONE,
    OpKind.SEQ: OpAssoc.BINARY_LEFT,
    OpKind.LET: OpAssoc.NONE,
    OpKind.PROGRAM: OpAssoc.NONE,
    OpKind.INT: OpAssoc.NONE,
    OpKind.ID: OpAssoc.NONE,
    OpKind.TUPLE: OpAssoc.NONE,
    OpKind.FUN_DECL: OpAssoc.NONE,
    OpKind.INT_TYPE: OpAssoc.NONE,
    OpKind.TUPLE_TYPE: OpAssoc.NONE,
}

_UNARY = frozenset({OpKind.REF, OpKind.REF_TYPE, OpKind.GET, OpKind.UMINUS, OpKind.NOT})

_BINARY = frozenset(
    {
        OpKind.FUN_TYPE,
        OpKind.MUL,
        OpKind.ADD,
        OpKind.SUB,
        OpKind.EQUAL,
        OpKind.LT,
        OpKind.AND,
        OpKind.OR,
        OpKind.CONSTRAIN,
        OpKind.SET,
        OpKind.SEQ,
    }
)


def op_str(op: OpKind) -> str:
    """Return the source spelling of a unary or binary operator."""
    try:
        return _STRINGS[op]
    except KeyError:
        raise ValueError(
            f"Only unary and binary operators are supported, not {op.name}"
        ) from None


def op_precedence(op: OpKind) -> int:
    """Return the precedence level of ``op``; lower binds tighter."""
    return _PRECEDENCE[op]


def op_assoc(op: OpKind) -> OpAssoc:
    """Return the associativity of ``op``."""
    return _ASSOC[op]


def is_unary_op(op: OpKind) -> bool:
    """Tell whether ``op`` is a unary operator."""
    return op in _UNARY


def is_binary_op(op: OpKind) -> bool:
    """Tell whether ``op`` is a binary operator."""
    return op in _BINARY