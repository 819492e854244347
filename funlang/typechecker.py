"""Static type checker for Fun programs."""

from __future__ import annotations

import sys

from .ast import (
    BinExp,
    CallExp,
    ConstrainExp,
    FunDecl,
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
from .types import FunType, IntType, RefType, TupleType, Type, unit_type


class TypeChecker:
    """Checks the functions of a program in name order, collecting errors.

    An ill-typed expression is reported and then treated as ``int`` so that
    checking can go on.
    """

    def __init__(self, program: Program) -> None:
        self.program = program
        self.ctxt: Context[Type] = Context()
        self.errors: list[FunError] = []

    def run(self) -> list[FunError]:
        """Check the whole program and return the errors found, in order."""
        self.ctxt = Context()
        self.errors = []
        self.program.accept(self)
        return list(self.errors)

    # ------------------------------------------------------------ helpers

    def _error(self, node: Node, message: str) -> None:
        self.errors.append(FunError(node.loc, message))

    @staticmethod
    def _is_subtype(t1: Type, t2: Type) -> bool:
        # No subtyping relation is defined yet: every type is accepted.
        return True

    def join(self, t1: Type, t2: Type) -> Type:
        """Return the common type of two branches; differing types keep ``t1``."""
        if t1 != t2:
            sys.stderr.write(f"Join error: {t1} != {t2}\n")
        return t1

    # ------------------------------------------------------------ visitors

    def visit_id_exp(self, n: IdExp) -> Type:
        if not self.ctxt.has(n.name):
            self._error(n, f"IdExp Error: {n.name} is not in env")
            return IntType()
        return self.ctxt.get(n.name)

    def visit_int_exp(self, n: IntExp) -> Type:
        return IntType()

    def visit_seq_exp(self, n: SeqExp) -> Type:
        n.first.accept(self)
        return n.second.accept(self)

    def visit_un_exp(self, n: UnExp) -> Type:
        exp_ty = n.operand.accept(self)
        if n.op is OpKind.UMINUS:
            if exp_ty != IntType():
                self._error(n, "UnExp Error: UMinus must be applied to Int")
                return IntType()
            return exp_ty
        if n.op is OpKind.NOT:
            if exp_ty != IntType():
                self._error(n, "UnExp Error: NOT must be applied to Int")
                return IntType()
            return exp_ty
        if n.op is OpKind.REF:
            return RefType(exp_ty)
        if n.op is OpKind.GET:
            if not isinstance(exp_ty, RefType):
                self._error(n, "UnExp Error: GET must be applied to RefType")
                return IntType()
            return exp_ty.base
        self._error(n, "UnExp Error: case does not match")
        return IntType()

    def visit_bin_exp(self, n: BinExp) -> Type:
        left_ty = n.left.accept(self)
        right_ty = n.right.accept(self)
        if n.op is OpKind.SET:
            if not isinstance(left_ty, RefType):
                self._error(n, "BinExp Error: LeftTy is null")
            elif left_ty.base != right_ty:
                self._error(
                    n,
                    "BinExp Error: SET BaseType of Left must be the same as Right Type",
                )
            return unit_type()
        if left_ty != IntType():
            self._error(n, "BinExp: left must be Int Type")
        if right_ty != IntType():
            self._error(n, "BinExp: right must be Int Type")
        return IntType()

    def visit_tuple_exp(self, n: TupleExp) -> Type:
        return TupleType(e.accept(self) for e in n.exps)

    def visit_if_exp(self, n: IfExp) -> Type:
        cond_ty = n.cond.accept(self)
        if cond_ty != IntType():
            self._error(n, "IfExp Error: condTy should be Int")
            return IntType()
        then_ty = n.then.accept(self)
        if n.else_ is None:
            if then_ty != unit_type():
                self._error(n, "IfExp Error: THEN should have UnitTy (case: no ELSE)")
            return unit_type()
        else_ty = n.else_.accept(self)
        return self.join(then_ty, else_ty)

    def visit_proj_exp(self, n: ProjExp) -> Type:
        target_ty = n.target.accept(self)
        if isinstance(target_ty, TupleType):
            if n.index >= len(target_ty.types):
                self._error(n, "ProjExp Error: Index >= tuple list size")
                return IntType()
            return target_ty.types[n.index]
        self._error(n, "ProjExp Error: target is not Tuple Type")
        return IntType()

    def visit_call_exp(self, n: CallExp) -> Type:
        fun_ty = n.fun.accept(self)
        arg_ty = n.arg.accept(self)
        if not isinstance(fun_ty, FunType):
            self._error(n, "CallExp Error: exp is not a function type")
            return IntType()
        if not self._is_subtype(arg_ty, fun_ty.param):
            self._error(n, "CallExp Error: argTy and declTy mistmatches")
            return IntType()
        return fun_ty.ret

    def visit_while_exp(self, n: WhileExp) -> Type:
        cond_ty = n.cond.accept(self)
        body_ty = n.body.accept(self)
        if cond_ty != IntType():
            self._error(n, "WhileExp Error: Cond type must be int")
            return IntType()
        if body_ty != unit_type():
            self._error(n, "WhileExp Error: body type must be unit")
            return IntType()
        return unit_type()

    def visit_let_exp(self, n: LetExp) -> Type:
        value_ty = n.value.accept(self)
        mark = self.ctxt.checkpoint()
        self.ctxt.bind(n.name, value_ty)
        body_ty = n.body.accept(self)
        self.ctxt.restore(mark)
        return body_ty

    def visit_constrain_exp(self, n: ConstrainExp) -> Type:
        exp_ty = n.exp.accept(self)
        if exp_ty != n.type_node.to_type():
            self._error(n, "ConstrainExp Error: Exp and tp does not match")
            return IntType()
        return exp_ty

    def visit_fun_decl(self, n: FunDecl) -> Type:
        ret_ty = n.ret_type.to_type()
        param_ty = n.param_type.to_type()
        fun_ty = FunType(param_ty, ret_ty)
        self.ctxt.bind(n.name, fun_ty)
        self.ctxt.bind(n.param_name, param_ty)
        body_ty = n.body.accept(self)
        if body_ty != ret_ty:
            self._error(n, "FunDeclExp Error: body vs. ret type mistmatches")
            return IntType()
        self.ctxt.undo_one()
        return fun_ty

    def visit_program(self, n: Program) -> None:
        for decl in n.functions.values():
            decl.accept(self)


def check_program(program: Program) -> list[FunError]:
    """Type-check ``program`` and return the errors found."""
    return TypeChecker(program).run()