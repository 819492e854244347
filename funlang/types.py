"""Semantic types of the Fun language.

Types are immutable values compared structurally, so two types built from the
same parts are equal and hash alike.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


class Type:
    """Base of all Fun types."""

    __slots__ = ()


@dataclass(frozen=True)
class IntType(Type):
    """The integer type."""

    def __str__(self) -> str:
        return "int"


@dataclass(frozen=True)
class RefType(Type):
    """A reference to a cell holding a value of ``base``."""

    base: Type

    def __str__(self) -> str:
        inner = str(self.base)
        if isinstance(self.base, FunType):
            inner = f"({inner})"
        return f"{inner} ref"


@dataclass(frozen=True)
class FunType(Type):
    """A one-parameter function type."""

    param: Type
    ret: Type

    def __str__(self) -> str:
        param = str(self.param)
        if isinstance(self.param, FunType):
            param = f"({param})"
        return f"{param}->{self.ret}"


@dataclass(frozen=True)
class TupleType(Type):
    """A tuple of types; the empty tuple is the unit type."""

    types: tuple[Type, ...] = ()

    def __init__(self, types: Iterable[Type] = ()) -> None:
        object.__setattr__(self, "types", tuple(types))

    def __str__(self) -> str:
        return "<" + ", ".join(str(t) for t in self.types) + ">"


def unit_type() -> TupleType:
    """Return the unit type, the empty tuple type."""
    return TupleType(())