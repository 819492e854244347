# funlang

Tools for working with programs in Fun, a small expression language with
integers, tuples, mutable references, functions named at the top level,
`if`/`while`, `let` bindings and sequencing with `;`.

## What is in the package

- **`funlang.ast`**: the syntax tree. Expression nodes `IntExp`, `IdExp`,
  `BinExp`, `UnExp`, `CallExp`, `IfExp`, `WhileExp`, `LetExp`, `SeqExp`,
  `TupleExp`, `ProjExp` and `ConstrainExp`; type nodes `IntTypeNode`,
  `RefTypeNode`, `FunTypeNode` and `TupleTypeNode`, each with `to_type()`;
  and the top-level `FunDecl` and `Program`. Every node has a `loc`
  (a `SrcLoc`, keyword-only) and a `parent`, set when the node is placed
  in a tree. `Node.accept(visitor)` calls `visitor.visit_<kind>(node)`;
  `children()`, `walk()`, `is_left_child()` and `is_right_child()` help in
  traversals. `Program` keeps its declarations in name order in
  `functions`; `append(decl)` adds one (a later declaration replaces an
  earlier one of the same name) and `function(name)` looks one up.
  Errors in a program are raised or reported as `FunError`, which carries
  the `SrcLoc` and the message.
- **`funlang.types`**: `IntType`, `RefType`, `FunType` and `TupleType`,
  immutable and compared by structure; `unit_type()` is the empty tuple
  type.
- **`funlang.values`**: `IntValue`, `FunValue` and `TupleValue`, compared
  by content, and `RefValue`, a mutable cell compared by identity;
  `unit_value()` is the empty tuple.
- **`funlang.opinfo`**: `OpKind`, `OpAssoc` and the tables behind
  `op_str`, `op_precedence` (lower binds tighter), `op_assoc`,
  `is_unary_op` and `is_binary_op`.
- **`funlang.context`**: `Context`, a stack of name bindings with `bind`,
  `has`, `get`, `undo_one`, `checkpoint` and `restore`.
- **`funlang.typechecker`**: `check_program(program)` (or
  `TypeChecker(program).run()`) checks every function in name order and
  returns the list of `FunError`s found. An ill-typed expression is
  reported and then treated as `int` so checking goes on.
- **`funlang.printer`**: `format_program(program, all_paren=False)` (or
  `CodePrinter(program, all_paren).run()`) renders a program as Fun source,
  with only the parentheses that precedence and associativity require, or
  around every operator when `all_paren` is true.
- **`funlang.interpreter`**: `interpret(program, argc=0, out=None)` (or
  `Interpreter(program, out).run(argc)`) runs `main` with its parameter
  bound to `argc` and returns the value it produced. What `printint`
  prints goes to `out`, or to standard output when `out` is `None`.
  Run-time errors are raised as `FunError`.

## Example

```python
import io

from funlang.ast import BinExp, FunDecl, IdExp, IntExp, IntTypeNode, Program
from funlang.interpreter import interpret
from funlang.opinfo import OpKind
from funlang.printer import format_program
from funlang.typechecker import check_program

main = FunDecl(
    "main", "n", IntTypeNode(), IntTypeNode(),
    BinExp(OpKind.ADD, IdExp("n"), IntExp(1)),
)
program = Program([main])

print(check_program(program))       # []
print(format_program(program))      # fun main(n:int):int =
                                    #   n + 1
out = io.StringIO()
print(interpret(program, 1, out))   # 2
```

## Semantics in brief

- `&` and `||` short-circuit and yield `0` or `1`; `=` and `<` yield `0`
  or `1`; `not` maps zero to `1` and anything else to `0`.
- `ref e` allocates a fresh cell every time; `!r` reads it and `r := e`
  updates it, yielding unit.
- `#i e` projects the `i`-th component, counting from zero, of a tuple.
- `if` without `else`, and `while`, yield unit.
- The interpreter predefines `printint`, which prints an integer on its
  own line. The type checker does not know `printint` and reports it as
  unbound.

## Limits of the type checker

- The argument of a call is not compared with the function's parameter
  type.
- When the two branches of an `if`/`else` have different types, the
  result is the type of the `then` branch and a note is written to
  standard error; no error is reported.

## What the package does not do

There is no parser: programs are built as trees of `funlang.ast` nodes.
There is no command-line tool and no code generation to machine code;
programs are only checked, printed and interpreted.

## Running the tests

Install the `test` extra and run `pytest` from the project directory.