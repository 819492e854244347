"""Pretty printer turning a Fun syntax tree back into source text."""

from __future__ import annotations

import re
from contextlib import contextmanager
from typing import Iterator

from .ast import (
    BinExp,
    CallExp,
    ConstrainExp,
    FunDecl,
    FunTypeNode,
    IdExp,
    IfExp,
    IntExp,
    IntTypeNode,
    LetExp,
    Node,
    Program,
    ProjExp,
    RefTypeNode,
    SeqExp,
    TupleExp,
    TupleTypeNode,
    UnExp,
    WhileExp,
)
from .opinfo import OpAssoc, OpKind

_BLANK_LINES = re.compile(r"\n\s*\n\s*\n+")
_INDENT = "  "


class CodePrinter:
    """Formats a program with minimal parentheses (or all, if asked)."""

    def __init__(self, program: Program, all_paren: bool = False) -> None:
        self.program = program
        self.all_paren = all_paren
        self._out: list[str] = []
        self._indent = 0

    def run(self) -> str:
        """Return the formatted source of the program."""
        self._out = []
        self._indent = 0
        self.program.accept(self)
        return _BLANK_LINES.sub("\n\n", "".join(self._out))

    # ------------------------------------------------------------ helpers

    def _write(self, text: str) -> None:
        self._out.append(text)

    def _nl(self) -> None:
        self._out.append("\n" + _INDENT * max(self._indent, 0))

    @contextmanager
    def _parens(self, node: Node) -> Iterator[None]:
        wrap = self.need_paren(node)
        if wrap:
            self._write("(")
        yield
        if wrap:
            self._write(")")

    def need_paren(self, node: Node) -> bool:
        """Tell whether ``node`` must be parenthesised where it stands."""
        if self.all_paren:
            return True
        parent = node.parent
        if parent is None:
            return False
        if parent.op is OpKind.CALL and parent.is_right_child(node):
            return False

        if node.precedence < parent.precedence:
            return False
        if node.precedence > parent.precedence:
            return True

        if node.unary:
            if parent.unary:
                return node.assoc is not parent.assoc
            if parent.binary:
                return (
                    node.assoc is OpAssoc.UNARY_LEFT and parent.is_right_child(node)
                ) or (node.assoc is OpAssoc.UNARY_RIGHT and parent.is_left_child(node))
            return False

        if node.binary:
            if parent.unary:
                return True
            if parent.binary:
                return (
                    (node.assoc is OpAssoc.BINARY_LEFT and parent.is_right_child(node))
                    or (
                        node.assoc is OpAssoc.BINARY_RIGHT
                        and parent.is_left_child(node)
                    )
                    or (
                        node.assoc is OpAssoc.NONE and parent.assoc is OpAssoc.NONE
                    )
                )
            return False

        return False

    # ------------------------------------------------------------ visitors

    def visit_program(self, n: Program) -> None:
        for i, decl in enumerate(n.functions.values()):
            if i:
                self._nl()
            decl.accept(self)

    def visit_fun_decl(self, n: FunDecl) -> None:
        self._write(f"fun {n.name}({n.param_name}:")
        n.param_type.accept(self)
        self._write("):")
        n.ret_type.accept(self)
        self._write(" =")
        self._indent += 1
        self._nl()
        n.body.accept(self)
        self._indent -= 1
        self._nl()

    def visit_bin_exp(self, n: BinExp) -> None:
        with self._parens(n):
            n.left.accept(self)
            self._write(f" {n.op_str} ")
            n.right.accept(self)

    def visit_call_exp(self, n: CallExp) -> None:
        with self._parens(n):
            n.fun.accept(self)
            self._write("(")
            n.arg.accept(self)
            self._write(")")

    def visit_constrain_exp(self, n: ConstrainExp) -> None:
        with self._parens(n):
            n.exp.accept(self)
            self._write(":")
            n.type_node.accept(self)

    def visit_fun_type(self, n: FunTypeNode) -> None:
        with self._parens(n):
            n.param.accept(self)
            self._write("->")
            n.ret.accept(self)

    def visit_id_exp(self, n: IdExp) -> None:
        self._write(n.name)

    def visit_if_exp(self, n: IfExp) -> None:
        with self._parens(n):
            self._write("if ")
            n.cond.accept(self)
            self._write(" then")
            self._indent += 1
            self._nl()
            n.then.accept(self)
            self._indent -= 1
            if n.else_ is not None:
                self._nl()
                self._write("else")
                self._indent += 1
                self._nl()
                n.else_.accept(self)
                self._indent -= 1
            self._nl()

    def visit_int_exp(self, n: IntExp) -> None:
        self._write(str(n.num))

    def visit_int_type(self, n: IntTypeNode) -> None:
        self._write("int")

    def visit_let_exp(self, n: LetExp) -> None:
        with self._parens(n):
            self._write(f"let {n.name} = ")
            n.value.accept(self)
            self._write(" in")
            # Consecutive lets share one indentation level.
            nested = n.body.op is OpKind.LET
            if not nested:
                self._indent += 1
            self._nl()
            n.body.accept(self)
            if not nested:
                self._indent -= 1

    def visit_proj_exp(self, n: ProjExp) -> None:
        with self._parens(n):
            self._write(f"#{n.index} ")
            n.target.accept(self)

    def visit_ref_type(self, n: RefTypeNode) -> None:
        with self._parens(n):
            n.base.accept(self)
            self._write(" ref")

    def visit_seq_exp(self, n: SeqExp) -> None:
        with self._parens(n):
            n.first.accept(self)
            self._write(";")
            self._nl()
            n.second.accept(self)

    def _write_list(self, nodes: tuple[Node, ...]) -> None:
        self._write("<")
        for i, node in enumerate(nodes):
            if i:
                self._write(", ")
            node.accept(self)
        self._write(">")

    def visit_tuple_exp(self, n: TupleExp) -> None:
        self._write_list(n.exps)

    def visit_tuple_type(self, n: TupleTypeNode) -> None:
        self._write_list(n.types)

    def visit_un_exp(self, n: UnExp) -> None:
        with self._parens(n):
            if n.assoc is OpAssoc.UNARY_LEFT:
                n.operand.accept(self)
                self._write(n.op_str)
            elif n.assoc is OpAssoc.UNARY_RIGHT:
                self._write(n.op_str)
                n.operand.accept(self)
            else:
                raise ValueError(f"{n.op.name} has no unary associativity")

    def visit_while_exp(self, n: WhileExp) -> None:
        with self._parens(n):
            self._write("while ")
            n.cond.accept(self)
            self._write(" do")
            self._indent += 1
            self._nl()
            n.body.accept(self)
            self._indent -= 1
            self._nl()


def format_program(program: Program, all_paren: bool = False) -> str:
    """Return the source text of ``program``."""
    return CodePrinter(program, all_paren).run()