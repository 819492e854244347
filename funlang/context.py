"""Scoped name bindings used while walking a Fun program."""

from __future__ import annotations

from typing import Generic, Iterator, TypeVar

V = TypeVar("V")


class Context(Generic[V]):
    """A stack of name bindings; later bindings shadow earlier ones.

    Bindings are undone in the reverse order they were made, either one at a
    time or back to a checkpoint taken earlier.
    """

    def __init__(self) -> None:
        self._bindings: list[tuple[str, V]] = []

    def bind(self, name: str, value: V) -> None:
        """Bind ``name`` to ``value``, shadowing any earlier binding."""
        self._bindings.append((name, value))

    def has(self, name: str) -> bool:
        """Tell whether ``name`` is bound."""
        return any(bound == name for bound, _ in self._bindings)

    def get(self, name: str) -> V:
        """Return the value of the most recent binding of ``name``."""
        for bound, value in reversed(self._bindings):
            if bound == name:
                return value
        raise KeyError(name)

    def undo_one(self) -> None:
        """Remove the most recent binding."""
        if not self._bindings:
            raise IndexError("no binding to undo")
        self._bindings.pop()

    def checkpoint(self) -> int:
        """Return a marker for the current set of bindings."""
        return len(self._bindings)

    def restore(self, checkpoint: int) -> None:
        """Drop every binding made since ``checkpoint`` was taken."""
        if not 0 <= checkpoint <= len(self._bindings):
            raise ValueError(f"invalid checkpoint {checkpoint}")
        del self._bindings[checkpoint:]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)

    def __len__(self) -> int:
        return len(self._bindings)

    def __iter__(self) -> Iterator[str]:
        """Yield the bound names, most recent first."""
        return (name for name, _ in reversed(self._bindings))