"""Tree-walking evaluator for Fun programs."""

from __future__ import annotations

import sys
from typing import Optional, TextIO

from .ast import (
    BinExp,
    CallExp,
    ConstrainExp,
    FunError,
    IdExp,
    IfExp,
    IntExp,
    LetExp,
    Node,
    Program,
    ProjExp,
    SeqExp,
    TupleExp,
    UnExp,
    WhileExp,
)
from .context import Context
from .opinfo import OpKind
from .values import (
    FunValue,
    IntValue,
    RefValue,
    TupleValue,
    Value,
    unit_value,
)

_BUILTIN_PRINT = "printint"


class Interpreter:
    """Evaluates a program, starting from its ``main`` function.

    Functions are looked up by name when called, and a call's parameter is
    bound on top of the caller's bindings.
    """

    def __init__(self, program: Program, out: Optional[TextIO] = None) -> None:
        self.program = program
        self.out = out if out is not None else sys.stdout
        self.ctxt: Context[Value] = Context()

    def run(self, argc: int) -> Value:
        """Run ``main`` with its parameter bound to ``argc`` and return its value."""
        self.ctxt = Context()
        self.program.accept(self)
        decl = self.program.function("main")
        self.ctxt.bind(decl.param_name, IntValue(argc))
        try:
            return decl.body.accept(self)
        finally:
            self.ctxt.undo_one()

    # ------------------------------------------------------------ helpers

    @staticmethod
    def _as_int(value: Value, where: Node) -> int:
        if not isinstance(value, IntValue):
            raise FunError(where.loc, "Operand is not int type")
        return value.num

    # ------------------------------------------------------------ visitors

    def visit_program(self, n: Program) -> None:
        self.ctxt.bind(_BUILTIN_PRINT, FunValue(_BUILTIN_PRINT))
        for decl in n.functions.values():
            if self.ctxt.has(decl.name):
                raise FunError(decl.loc, f"Function name {decl.name} already exists")
            self.ctxt.bind(decl.name, FunValue(decl.name))
        if not self.ctxt.has("main"):
            raise FunError(n.loc, "No function main")

    def visit_bin_exp(self, n: BinExp) -> Value:
        v1 = n.left.accept(self)

        # Short-circuit: the right operand is evaluated only when needed.
        if n.op is OpKind.AND:
            num1 = self._as_int(v1, n.left)
            if num1 == 0:
                return IntValue(0)
            num2 = self._as_int(n.right.accept(self), n.left)
            return IntValue(int(bool(num1) and bool(num2)))
        if n.op is OpKind.OR:
            num1 = self._as_int(v1, n.left)
            if num1 != 0:
                return IntValue(1)
            num2 = self._as_int(n.right.accept(self), n.left)
            return IntValue(int(bool(num1) or bool(num2)))

        v2 = n.right.accept(self)

        if n.op is OpKind.SET:
            if not isinstance(v1, RefValue):
                raise FunError(n.left.loc, "Lhs of := operator is not a reference type")
            v1.base = v2
            return unit_value()

        num1 = self._as_int(v1, n.left)
        num2 = self._as_int(v2, n.left)
        if n.op is OpKind.MUL:
            return IntValue(num1 * num2)
        if n.op is OpKind.ADD:
            return IntValue(num1 + num2)
        if n.op is OpKind.SUB:
            return IntValue(num1 - num2)
        if n.op is OpKind.EQUAL:
            return IntValue(int(num1 == num2))
        if n.op is OpKind.LT:
            return IntValue(int(num1 < num2))
        raise FunError(n.loc, f"Unsupported binary operator {n.op.name}")

    def visit_call_exp(self, n: CallExp) -> Value:
        fun_v = n.fun.accept(self)
        arg_v = n.arg.accept(self)

        if not isinstance(fun_v, FunValue):
            raise FunError(n.fun.loc, f"{fun_v} is not a function")

        if fun_v.name == _BUILTIN_PRINT:
            if not isinstance(arg_v, IntValue):
                raise FunError(n.arg.loc, "Argument is not int type")
            print(arg_v.num, file=self.out)
            return unit_value()

        decl = self.program.function(fun_v.name)
        self.ctxt.bind(decl.param_name, arg_v)
        try:
            return decl.body.accept(self)
        finally:
            self.ctxt.undo_one()

    def visit_constrain_exp(self, n: ConstrainExp) -> Value:
        return n.exp.accept(self)

    def visit_id_exp(self, n: IdExp) -> Value:
        if not self.ctxt.has(n.name):
            raise FunError(n.loc, f"Unbound symbol '{n.name}' detected")
        return self.ctxt.get(n.name)

    def visit_if_exp(self, n: IfExp) -> Value:
        cond_v = n.cond.accept(self)
        if not isinstance(cond_v, IntValue):
            raise FunError(n.cond.loc, "Condition of if expression is not int type")

        if cond_v.num != 0:
            then_v = n.then.accept(self)
            return unit_value() if n.else_ is None else then_v
        if n.else_ is None:
            return unit_value()
        return n.else_.accept(self)

    def visit_int_exp(self, n: IntExp) -> Value:
        return IntValue(n.num)

    def visit_let_exp(self, n: LetExp) -> Value:
        self.ctxt.bind(n.name, n.value.accept(self))
        try:
            return n.body.accept(self)
        finally:
            self.ctxt.undo_one()

    def visit_proj_exp(self, n: ProjExp) -> Value:
        target_v = n.target.accept(self)
        if not isinstance(target_v, TupleValue):
            raise FunError(n.target.loc, "Invalid tuple type for # op")
        if len(target_v.values) < n.index + 1:
            raise FunError(n.target.loc, f"Tuple size is less than {n.index + 1}")
        return target_v.values[n.index]

    def visit_seq_exp(self, n: SeqExp) -> Value:
        n.first.accept(self)
        return n.second.accept(self)

    def visit_tuple_exp(self, n: TupleExp) -> Value:
        return TupleValue(e.accept(self) for e in n.exps)

    def visit_un_exp(self, n: UnExp) -> Value:
        v1 = n.operand.accept(self)

        if n.op is OpKind.REF:
            return RefValue(v1)
        if n.op is OpKind.GET:
            if not isinstance(v1, RefValue):
                raise FunError(n.operand.loc, "Dereference of non-reference type")
            return v1.base

        num1 = self._as_int(v1, n.operand)
        if n.op is OpKind.UMINUS:
            return IntValue(0 - num1)
        if n.op is OpKind.NOT:
            return IntValue(0 if num1 != 0 else 1)
        raise FunError(n.loc, f"Unsupported unary operator {n.op.name}")

    def visit_while_exp(self, n: WhileExp) -> Value:
        while True:
            cond_v = n.cond.accept(self)
            if not isinstance(cond_v, IntValue):
                raise FunError(n.cond.loc, "Condition of while loop is not int type")
            if cond_v.num == 0:
                return unit_value()
            n.body.accept(self)


def interpret(program: Program, argc: int = 0, out: Optional[TextIO] = None) -> Value:
    """Run ``program`` with ``argc`` as main's argument and return the result."""
    return Interpreter(program, out).run(argc)