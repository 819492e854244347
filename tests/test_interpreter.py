import io

import pytest

from funlang.ast import (
    BinExp,
    CallExp,
    ConstrainExp,
    FunDecl,
    FunError,
    IdExp,
    IfExp,
    IntExp,
    IntTypeNode,
    LetExp,
    Program,
    ProjExp,
    SeqExp,
    TupleExp,
    UnExp,
    WhileExp,
)
from funlang.interpreter import Interpreter, interpret
from funlang.opinfo import OpKind
from funlang.values import IntValue, RefValue, TupleValue, unit_value


def main_program(body, *extra):
    decl = FunDecl("main", "n", IntTypeNode(), IntTypeNode(), body)
    return Program([decl, *extra])


def run(body, argc, *extra):
    return Interpreter(main_program(body, *extra), io.StringIO()).run(argc)


def test_main_returns_its_argument():
    assert run(IdExp("n"), 7) == IntValue(7)


def test_uminus_negates_argument():
    assert run(UnExp(OpKind.UMINUS, IdExp("n")), 9) == IntValue(-9)


def test_comparisons_yield_zero_or_one():
    assert run(BinExp(OpKind.LT, IdExp("n"), IdExp("n")), 4) == IntValue(0)
    assert run(BinExp(OpKind.EQUAL, IdExp("n"), IdExp("n")), 4) == IntValue(1)


def test_not_inverts_truth():
    body = UnExp(OpKind.NOT, UnExp(OpKind.NOT, IdExp("n")))
    assert run(body, 0) == IntValue(0)


def test_and_short_circuits():
    body = BinExp(OpKind.AND, IntExp(0), IdExp("undefined"))
    assert run(body, 1) == IntValue(0)


def test_or_short_circuits():
    body = BinExp(OpKind.OR, IdExp("n"), IdExp("undefined"))
    assert run(body, 3) == IntValue(1)


def test_ref_set_and_get():
    body = LetExp(
        "r",
        UnExp(OpKind.REF, IntExp(1)),
        SeqExp(
            BinExp(OpKind.SET, IdExp("r"), IdExp("n")),
            UnExp(OpKind.GET, IdExp("r")),
        ),
    )
    assert run(body, 11) == IntValue(11)


def test_set_returns_unit():
    body = BinExp(OpKind.SET, UnExp(OpKind.REF, IntExp(2)), IdExp("n"))
    assert run(body, 3) == unit_value()


def test_ref_creates_fresh_cells():
    body = TupleExp((UnExp(OpKind.REF, IdExp("n")), UnExp(OpKind.REF, IdExp("n"))))
    result = run(body, 2)
    first, second = result.values
    assert isinstance(first, RefValue) and first is not second


def test_while_loop_counts_to_argument():
    i = lambda: IdExp("i")  # noqa: E731
    body = LetExp(
        "i",
        UnExp(OpKind.REF, IntExp(0)),
        SeqExp(
            WhileExp(
                BinExp(OpKind.LT, UnExp(OpKind.GET, i()), IdExp("n")),
                BinExp(
                    OpKind.SET,
                    i(),
                    BinExp(OpKind.ADD, UnExp(OpKind.GET, i()), IntExp(1)),
                ),
            ),
            UnExp(OpKind.GET, i()),
        ),
    )
    assert run(body, 5) == IntValue(5)


def test_recursive_function():
    x = lambda: IdExp("x")  # noqa: E731
    g = FunDecl(
        "g",
        "x",
        IntTypeNode(),
        IntTypeNode(),
        IfExp(
            BinExp(OpKind.EQUAL, x(), IntExp(0)),
            IntExp(0),
            BinExp(
                OpKind.ADD,
                IntExp(1),
                CallExp(IdExp("g"), BinExp(OpKind.SUB, x(), IntExp(1))),
            ),
        ),
    )
    assert run(CallExp(IdExp("g"), IdExp("n")), 6, g) == IntValue(6)


def test_if_then_without_else_is_unit():
    assert run(IfExp(IdExp("n"), IntExp(5)), 1) == unit_value()


def test_if_then_else_picks_branch():
    body = IfExp(IdExp("n"), IntExp(5), IntExp(8))
    assert run(body, 1) == IntValue(5)
    assert run(IfExp(IdExp("n"), IntExp(5), IntExp(8)), 0) == IntValue(8)


def test_tuple_projection():
    body = ProjExp(1, TupleExp((IdExp("n"), IntExp(5))))
    assert run(body, 2) == IntValue(5)


def test_tuple_value():
    body = TupleExp((IdExp("n"), IdExp("n")))
    assert run(body, 3) == TupleValue((IntValue(3), IntValue(3)))


def test_constrain_passes_value_through():
    assert run(ConstrainExp(IdExp("n"), IntTypeNode()), 4) == IntValue(4)


def test_printint_writes_line():
    out = io.StringIO()
    result = interpret(main_program(CallExp(IdExp("printint"), IdExp("n"))), 42, out)
    assert result == unit_value()
    assert out.getvalue() == "42\n"


def test_run_can_be_repeated():
    interp = Interpreter(main_program(IdExp("n")), io.StringIO())
    assert interp.run(1) == IntValue(1)
    assert interp.run(2) == IntValue(2)


def test_projection_out_of_range():
    body = ProjExp(2, TupleExp((IdExp("n"),)))
    with pytest.raises(FunError, match="Tuple size is less than 3"):
        run(body, 1)


def test_projection_of_non_tuple():
    with pytest.raises(FunError, match="Invalid tuple type for # op"):
        run(ProjExp(0, IdExp("n")), 1)


def test_unbound_symbol():
    with pytest.raises(FunError, match="Unbound symbol 'y' detected"):
        run(IdExp("y"), 1)


def test_missing_main():
    decl = FunDecl("other", "x", IntTypeNode(), IntTypeNode(), IdExp("x"))
    with pytest.raises(FunError, match="No function main"):
        interpret(Program([decl]), 0, io.StringIO())


def test_function_named_printint_rejected():
    clash = FunDecl("printint", "x", IntTypeNode(), IntTypeNode(), IdExp("x"))
    with pytest.raises(FunError, match="Function name printint already exists"):
        run(IdExp("n"), 1, clash)


def test_set_on_non_reference():
    with pytest.raises(FunError, match="not a reference type"):
        run(BinExp(OpKind.SET, IdExp("n"), IntExp(1)), 1)


def test_get_on_non_reference():
    with pytest.raises(FunError, match="Dereference of non-reference type"):
        run(UnExp(OpKind.GET, IdExp("n")), 1)


def test_arithmetic_on_tuple_rejected():
    with pytest.raises(FunError, match="Operand is not int type"):
        run(BinExp(OpKind.ADD, TupleExp(()), IdExp("n")), 1)


def test_call_of_non_function():
    with pytest.raises(FunError, match="3 is not a function"):
        run(CallExp(IntExp(3), IdExp("n")), 1)


def test_printint_of_tuple_rejected():
    with pytest.raises(FunError, match="Argument is not int type"):
        run(CallExp(IdExp("printint"), TupleExp(())), 1)


def test_if_condition_must_be_int():
    with pytest.raises(FunError, match="Condition of if expression"):
        run(IfExp(TupleExp(()), IntExp(1), IntExp(2)), 1)


def test_while_condition_must_be_int():
    with pytest.raises(FunError, match="Condition of while loop"):
        run(WhileExp(TupleExp(()), TupleExp(())), 1)