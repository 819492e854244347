"""Abstract syntax tree of the Fun language.

Every node knows its operator kind, its source location and its parent.
``accept`` dispatches to ``visitor.visit_<kind>(node)``, where ``<kind>`` is
the node's ``visit_name``.
"""

from __future__ import annotations

from dataclasses import InitVar, dataclass, field
from typing import Any, ClassVar, Iterable, Iterator, Optional

from .opinfo import (
    OpAssoc,
    OpKind,
    is_binary_op,
    is_unary_op,
    op_assoc,
    op_precedence,
    op_str,
)
from .types import FunType, IntType, RefType, TupleType, Type


@dataclass(frozen=True)
class SrcLoc:
    """A position in a source file."""

    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


class FunError(Exception):
    """An error found in a Fun program, tied to where it occurs."""

    def __init__(self, loc: Optional[SrcLoc], message: str) -> None:
        super().__init__(message)
        self.loc = loc
        self.message = message

    def __str__(self) -> str:
        if self.loc is None:
            return self.message
        return f"{self.loc}: {self.message}"


_BINARY_EXP_OPS = frozenset(
    {
        OpKind.MUL,
        OpKind.ADD,
        OpKind.SUB,
        OpKind.EQUAL,
        OpKind.LT,
        OpKind.AND,
        OpKind.OR,
        OpKind.SET,
    }
)

_UNARY_EXP_OPS = frozenset({OpKind.REF, OpKind.GET, OpKind.UMINUS, OpKind.NOT})


@dataclass(eq=False)
class Node:
    """Base of all syntax tree nodes; nodes compare by identity."""

    loc: SrcLoc = field(default_factory=SrcLoc, kw_only=True)

    visit_name: ClassVar[str] = "node"

    def __post_init__(self) -> None:
        self.parent: Optional[Node] = None
        for child in self.children():
            child.parent = self

    def children(self) -> list[Node]:
        """Return the direct child nodes, in source order."""
        return []

    def accept(self, visitor: Any) -> Any:
        """Call the visitor's method for this kind of node and return its result."""
        return getattr(visitor, f"visit_{self.visit_name}")(self)

    def is_left_child(self, node: Node) -> bool:
        """Tell whether ``node`` is this node's first child."""
        kids = self.children()
        return bool(kids) and kids[0] is node

    def is_right_child(self, node: Node) -> bool:
        """Tell whether ``node`` is this node's last child of at least two."""
        kids = self.children()
        return len(kids) >= 2 and kids[-1] is node

    def walk(self) -> Iterator[Node]:
        """Yield this node and all of its descendants, depth first."""
        yield self
        for child in self.children():
            yield from child.walk()

    @property
    def precedence(self) -> int:
        return op_precedence(self.op)  # type: ignore[attr-defined]

    @property
    def assoc(self) -> OpAssoc:
        return op_assoc(self.op)  # type: ignore[attr-defined]

    @property
    def unary(self) -> bool:
        return is_unary_op(self.op)  # type: ignore[attr-defined]

    @property
    def binary(self) -> bool:
        return is_binary_op(self.op)  # type: ignore[attr-defined]

    @property
    def op_str(self) -> str:
        return op_str(self.op)  # type: ignore[attr-defined]


# ---------------------------------------------------------------- expressions


@dataclass(eq=False)
class BinExp(Node):
    """A binary operator applied to two expressions."""

    op: OpKind
    left: Node
    right: Node

    visit_name: ClassVar[str] = "bin_exp"

    def __post_init__(self) -> None:
        if self.op not in _BINARY_EXP_OPS:
            raise ValueError(f"{self.op.name} is not a binary expression operator")
        super().__post_init__()

    def children(self) -> list[Node]:
        return [self.left, self.right]


@dataclass(eq=False)
class UnExp(Node):
    """A unary operator applied to one expression."""

    op: OpKind
    operand: Node

    visit_name: ClassVar[str] = "un_exp"

    def __post_init__(self) -> None:
        if self.op not in _UNARY_EXP_OPS:
            raise ValueError(f"{self.op.name} is not a unary expression operator")
        super().__post_init__()

    def children(self) -> list[Node]:
        return [self.operand]


@dataclass(eq=False)
class IntExp(Node):
    """An integer literal."""

    num: int

    op: ClassVar[OpKind] = OpKind.INT
    visit_name: ClassVar[str] = "int_exp"


@dataclass(eq=False)
class IdExp(Node):
    """A reference to a variable or function by name."""

    name: str

    op: ClassVar[OpKind] = OpKind.ID
    visit_name: ClassVar[str] = "id_exp"


@dataclass(eq=False)
class CallExp(Node):
    """A call of a one-argument function."""

    fun: Node
    arg: Node

    op: ClassVar[OpKind] = OpKind.CALL
    visit_name: ClassVar[str] = "call_exp"

    def children(self) -> list[Node]:
        return [self.fun, self.arg]


@dataclass(eq=False)
class ConstrainExp(Node):
    """An expression annotated with the type it must have."""

    exp: Node
    type_node: Node

    op: ClassVar[OpKind] = OpKind.CONSTRAIN
    visit_name: ClassVar[str] = "constrain_exp"

    def children(self) -> list[Node]:
        return [self.exp, self.type_node]


@dataclass(eq=False)
class IfExp(Node):
    """A conditional, with or without an else branch."""

    cond: Node
    then: Node
    else_: Optional[Node] = None

    visit_name: ClassVar[str] = "if_exp"

    @property
    def op(self) -> OpKind:
        return OpKind.IF_THEN if self.else_ is None else OpKind.IF_THEN_ELSE

    def children(self) -> list[Node]:
        kids = [self.cond, self.then]
        if self.else_ is not None:
            kids.append(self.else_)
        return kids


@dataclass(eq=False)
class LetExp(Node):
    """Binds ``name`` to the value of ``value`` while evaluating ``body``."""

    name: str
    value: Node
    body: Node

    op: ClassVar[OpKind] = OpKind.LET
    visit_name: ClassVar[str] = "let_exp"

    def children(self) -> list[Node]:
        return [self.value, self.body]


@dataclass(eq=False)
class ProjExp(Node):
    """Projection ``#index target`` of a tuple component."""

    index: int
    target: Node

    op: ClassVar[OpKind] = OpKind.PROJ
    visit_name: ClassVar[str] = "proj_exp"

    def children(self) -> list[Node]:
        return [self.target]


@dataclass(eq=False)
class SeqExp(Node):
    """Two expressions evaluated one after the other."""

    first: Node
    second: Node

    op: ClassVar[OpKind] = OpKind.SEQ
    visit_name: ClassVar[str] = "seq_exp"

    def children(self) -> list[Node]:
        return [self.first, self.second]


@dataclass(eq=False)
class TupleExp(Node):
    """A tuple built from expressions; empty means unit."""

    exps: tuple[Node, ...] = ()

    op: ClassVar[OpKind] = OpKind.TUPLE
    visit_name: ClassVar[str] = "tuple_exp"

    def __post_init__(self) -> None:
        self.exps = tuple(self.exps)
        super().__post_init__()

    def children(self) -> list[Node]:
        return list(self.exps)


@dataclass(eq=False)
class WhileExp(Node):
    """A loop running ``body`` while ``cond`` is non-zero."""

    cond: Node
    body: Node

    op: ClassVar[OpKind] = OpKind.WHILE
    visit_name: ClassVar[str] = "while_exp"

    def children(self) -> list[Node]:
        return [self.cond, self.body]


# ---------------------------------------------------------------- type nodes


@dataclass(eq=False)
class IntTypeNode(Node):
    """The written type ``int``."""

    op: ClassVar[OpKind] = OpKind.INT_TYPE
    visit_name: ClassVar[str] = "int_type"

    def to_type(self) -> IntType:
        return IntType()


@dataclass(eq=False)
class RefTypeNode(Node):
    """The written type ``base ref``."""

    base: Node

    op: ClassVar[OpKind] = OpKind.REF_TYPE
    visit_name: ClassVar[str] = "ref_type"

    def children(self) -> list[Node]:
        return [self.base]

    def to_type(self) -> RefType:
        return RefType(_type_of(self.base))


@dataclass(eq=False)
class FunTypeNode(Node):
    """The written type ``param->ret``."""

    param: Node
    ret: Node

    op: ClassVar[OpKind] = OpKind.FUN_TYPE
    visit_name: ClassVar[str] = "fun_type"

    def children(self) -> list[Node]:
        return [self.param, self.ret]

    def to_type(self) -> FunType:
        return FunType(_type_of(self.param), _type_of(self.ret))


@dataclass(eq=False)
class TupleTypeNode(Node):
    """The written type ``<t1, t2, ...>``."""

    types: tuple[Node, ...] = ()

    op: ClassVar[OpKind] = OpKind.TUPLE_TYPE
    visit_name: ClassVar[str] = "tuple_type"

    def __post_init__(self) -> None:
        self.types = tuple(self.types)
        super().__post_init__()

    def children(self) -> list[Node]:
        return list(self.types)

    def to_type(self) -> TupleType:
        return TupleType(_type_of(t) for t in self.types)


def _type_of(node: Node) -> Type:
    to_type = getattr(node, "to_type", None)
    if to_type is None:
        raise FunError(node.loc, f"{type(node).__name__} is not a type")
    return to_type()


# ---------------------------------------------------------------- declarations


@dataclass(eq=False)
class FunDecl(Node):
    """A function ``fun name(param_name: param_type): ret_type = body``."""

    name: str
    param_name: str
    param_type: Node
    ret_type: Node
    body: Node

    op: ClassVar[OpKind] = OpKind.FUN_DECL
    visit_name: ClassVar[str] = "fun_decl"

    def children(self) -> list[Node]:
        return [self.param_type, self.ret_type, self.body]


@dataclass(eq=False)
class Program(Node):
    """A whole program: its function declarations, kept in name order."""

    decls: InitVar[Iterable[FunDecl]] = ()
    functions: dict[str, FunDecl] = field(init=False, default_factory=dict)

    op: ClassVar[OpKind] = OpKind.PROGRAM
    visit_name: ClassVar[str] = "program"

    def __post_init__(self, decls: Iterable[FunDecl]) -> None:
        super().__post_init__()
        for decl in decls:
            self.append(decl)

    def append(self, decl: FunDecl) -> None:
        """Add a declaration; a later one replaces an earlier one of the same name."""
        decl.parent = self
        merged = dict(self.functions)
        merged[decl.name] = decl
        self.functions = dict(sorted(merged.items()))

    def function(self, name: str) -> FunDecl:
        """Return the declaration of function ``name``."""
        try:
            return self.functions[name]
        except KeyError:
            raise FunError(self.loc, f"No function {name}") from None

    def children(self) -> list[Node]:
        return list(self.functions.values())