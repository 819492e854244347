"""Runtime values of the Fun language.

Integers, function names and tuples compare by content; every reference is a
fresh storage cell and compares by identity.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


class Value:
    """Base of all Fun runtime values."""

    __slots__ = ()


@dataclass(frozen=True)
class IntValue(Value):
    """An integer."""

    num: int

    def __str__(self) -> str:
        return str(self.num)


@dataclass(eq=False)
class RefValue(Value):
    """A mutable storage cell; each one is distinct from every other."""

    base: Value

    def __str__(self) -> str:
        return f"ref {self.base}"


@dataclass(frozen=True)
class FunValue(Value):
    """A function, identified by its name."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class TupleValue(Value):
    """A tuple of values; the empty tuple is the unit value."""

    values: tuple[Value, ...] = ()

    def __init__(self, values: Iterable[Value] = ()) -> None:
        object.__setattr__(self, "values", tuple(values))

    def __str__(self) -> str:
        return "<" + ", ".join(str(v) for v in self.values) + ">"


def unit_value() -> TupleValue:
    """Return the unit value, the empty tuple."""
    return TupleValue(())