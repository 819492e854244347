import pytest

from funlang.ast import (
    BinExp,
    CallExp,
    ConstrainExp,
    FunDecl,
    IdExp,
    IfExp,
    IntExp,
    IntTypeNode,
    LetExp,
    Program,
    ProjExp,
    RefTypeNode,
    SeqExp,
    SrcLoc,
    TupleExp,
    TupleTypeNode,
    UnExp,
    WhileExp,
)
from funlang.opinfo import OpKind
from funlang.typechecker import TypeChecker, check_program
from funlang.types import IntType, RefType, unit_type


def main_program(body, ret=None, *extra):
    decl = FunDecl("main", "n", IntTypeNode(), ret or IntTypeNode(), body)
    return Program([decl, *extra])


def messages(program):
    return [e.message for e in check_program(program)]


def test_well_typed_arithmetic():
    body = BinExp(OpKind.ADD, IdExp("n"), IntExp(1))
    assert messages(main_program(body)) == []


def test_body_return_mismatch():
    errs = messages(main_program(IdExp("n"), TupleTypeNode()))
    assert errs == ["FunDeclExp Error: body vs. ret type mistmatches"]


def test_unbound_identifier():
    errs = messages(main_program(IdExp("y")))
    assert errs == ["IdExp Error: y is not in env"]


def test_error_carries_location():
    loc = SrcLoc(3, 4)
    errs = check_program(main_program(IdExp("y", loc=loc)))
    assert len(errs) == 1 and errs[0].loc == loc


def test_ref_set_get_well_typed():
    body = LetExp(
        "r",
        UnExp(OpKind.REF, IdExp("n")),
        SeqExp(
            BinExp(OpKind.SET, IdExp("r"), IdExp("n")),
            UnExp(OpKind.GET, IdExp("r")),
        ),
    )
    assert messages(main_program(body)) == []


def test_set_on_non_reference():
    body = SeqExp(BinExp(OpKind.SET, IdExp("n"), IntExp(1)), IdExp("n"))
    assert messages(main_program(body)) == ["BinExp Error: LeftTy is null"]


def test_set_with_wrong_type():
    body = SeqExp(
        BinExp(OpKind.SET, UnExp(OpKind.REF, IdExp("n")), TupleExp(())),
        IdExp("n"),
    )
    errs = messages(main_program(body))
    assert errs == ["BinExp Error: SET BaseType of Left must be the same as Right Type"]


def test_get_on_non_reference():
    errs = messages(main_program(UnExp(OpKind.GET, IdExp("n"))))
    assert errs == ["UnExp Error: GET must be applied to RefType"]


def test_uminus_of_tuple():
    errs = messages(main_program(UnExp(OpKind.UMINUS, TupleExp(()))))
    assert errs == ["UnExp Error: UMinus must be applied to Int"]


def test_binary_operand_types():
    body = BinExp(OpKind.MUL, TupleExp(()), IdExp("n"))
    assert messages(main_program(body)) == ["BinExp: left must be Int Type"]


def test_if_without_else_needs_unit_then():
    body = SeqExp(IfExp(IdExp("n"), IntExp(1)), IdExp("n"))
    errs = messages(main_program(body))
    assert errs == ["IfExp Error: THEN should have UnitTy (case: no ELSE)"]


def test_if_without_else_is_unit():
    body = IfExp(IdExp("n"), TupleExp(()))
    assert messages(main_program(body, TupleTypeNode())) == []


def test_if_condition_must_be_int():
    body = IfExp(TupleExp(()), IdExp("n"), IdExp("n"))
    assert messages(main_program(body)) == ["IfExp Error: condTy should be Int"]


def test_while_with_unit_body():
    r = lambda: IdExp("r")  # noqa: E731
    body = LetExp(
        "r",
        UnExp(OpKind.REF, IdExp("n")),
        WhileExp(
            UnExp(OpKind.GET, r()),
            BinExp(OpKind.SET, r(), IntExp(0)),
        ),
    )
    assert messages(main_program(body, TupleTypeNode())) == []


def test_while_body_must_be_unit():
    body = SeqExp(WhileExp(IdExp("n"), IdExp("n")), IdExp("n"))
    assert messages(main_program(body)) == ["WhileExp Error: body type must be unit"]


def test_tuple_and_projection():
    body = ProjExp(0, TupleExp((IdExp("n"), TupleExp(()))))
    assert messages(main_program(body)) == []


def test_projection_out_of_range():
    body = ProjExp(2, TupleExp((IdExp("n"),)))
    assert messages(main_program(body)) == ["ProjExp Error: Index >= tuple list size"]


def test_projection_of_non_tuple():
    body = ProjExp(0, IdExp("n"))
    assert messages(main_program(body)) == ["ProjExp Error: target is not Tuple Type"]


def test_tuple_return_type():
    body = TupleExp((IdExp("n"), IdExp("n")))
    ret = TupleTypeNode((IntTypeNode(), IntTypeNode()))
    assert messages(main_program(body, ret)) == []


def test_call_of_earlier_function():
    helper = FunDecl("a", "x", IntTypeNode(), IntTypeNode(), IdExp("x"))
    body = CallExp(IdExp("a"), IdExp("n"))
    assert messages(main_program(body, None, helper)) == []


def test_call_of_non_function():
    body = CallExp(IdExp("n"), IdExp("n"))
    assert messages(main_program(body)) == ["CallExp Error: exp is not a function type"]


def test_constrain_match_and_mismatch():
    ok = ConstrainExp(IdExp("n"), IntTypeNode())
    assert messages(main_program(ok)) == []
    bad = ConstrainExp(IdExp("n"), RefTypeNode(IntTypeNode()))
    assert messages(main_program(bad)) == [
        "ConstrainExp Error: Exp and tp does not match"
    ]


def test_run_resets_between_calls():
    checker = TypeChecker(main_program(IdExp("y")))
    first = checker.run()
    second = checker.run()
    assert [e.message for e in first] == [e.message for e in second]
    assert len(second) == 1


@pytest.mark.parametrize(
    "t1, t2",
    [(IntType(), IntType()), (IntType(), unit_type()), (RefType(IntType()), IntType())],
)
def test_join_keeps_first(t1, t2):
    checker = TypeChecker(Program())
    assert checker.join(t1, t2) == t1