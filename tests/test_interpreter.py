import builtins

import pytest

from petrel.errors import PetrelRuntimeError
from petrel.interpreter import Interpreter, run_source
from petrel.parser import parse_source


def output(capsys):
    return capsys.readouterr().out.strip().split('\n')


def execute_unchecked(source):
    """Run a program without semantic analysis to reach the run-time checks."""
    Interpreter().execute(parse_source(source))


def test_arithmetic_and_printing(capsys):
    run_source("""
        print(1 + 2 * 3);
        print(7 / 2);
        print(-7 % 2);
        print(1.5 * 2);
        print(7.5 % 2);
        print('x');
        print(3 >= 3);
    """)
    assert output(capsys) == ['7', '3', '-1', '3.0', '1.5', 'x', 'true']


def test_int64_wraps_around(capsys):
    run_source("print(9223372036854775807 + 1); print(-9223372036854775807 - 2);")
    assert output(capsys) == ['-9223372036854775808', '9223372036854775807']


@pytest.mark.parametrize("source, message", [
    ("print(1 / 0);", "division by zero"),
    ("print(1 % 0);", "modulo by zero"),
    ("print(1.0 / 0);", "division by zero"),
])
def test_division_by_zero(source, message):
    with pytest.raises(PetrelRuntimeError) as excinfo:
        run_source(source)
    assert excinfo.value.message == message


def test_output_before_an_error_is_kept(capsys):
    with pytest.raises(PetrelRuntimeError):
        run_source("print(1); print(2 / 0); print(3);")
    assert output(capsys) == ['1']


def test_widening_on_declaration_assignment_and_calls(capsys):
    run_source("""
        var f: float = 5;
        print(f);
        f = 2;
        print(f);
        func half(x: float): float { return x / 2; }
        func three(): float { return 3; }
        print(half(5));
        print(three());
    """)
    assert output(capsys) == ['5.0', '2.0', '2.5', '3.0']


def test_string_concatenation_and_equality(capsys):
    run_source('var s: string = "ab" + "cd"; print(s); print(s == "abcd"); print(\'a\' != \'b\');')
    assert output(capsys) == ['abcd', 'true', 'true']


def test_logical_operators_short_circuit(capsys):
    run_source("""
        func boom(): bool { print("boom"); return true; }
        print(false && boom());
        print(true || boom());
        print(true && boom());
    """)
    assert output(capsys) == ['false', 'true', 'boom', 'true']


def test_return_from_inside_a_loop(capsys):
    run_source("""
        func firstSquareOver(limit: int): int {
            var i: int = 0;
            while (true) {
                if (i * i > limit) { return i; }
                i = i + 1;
            }
        }
        print(firstSquareOver(10));
    """)
    assert output(capsys) == ['4']


def test_functions_assign_globals_by_name(capsys):
    run_source("var g: int = 1; func setG(v: int): void { g = v; } setG(5); print(g);")
    assert output(capsys) == ['5']


def test_functions_cannot_read_globals():
    with pytest.raises(PetrelRuntimeError) as excinfo:
        run_source("var g: int = 1; func f(): int { return g; } print(f());")
    assert excinfo.value.message == "undefined variable 'g'"


def test_unassigned_variable():
    with pytest.raises(PetrelRuntimeError) as excinfo:
        run_source("var x: int; print(x);")
    assert "before it was assigned" in str(excinfo.value)


def test_missing_return_value():
    with pytest.raises(PetrelRuntimeError) as excinfo:
        run_source("func f(n: int): int { if (n > 0) { return 1; } } print(f(0));")
    assert "must return a value of type int" in str(excinfo.value)


def test_call_depth_limit_and_frames_are_popped():
    interpreter = Interpreter(max_call_depth=10)
    program = parse_source("func down(n: int): int { return down(n + 1); } print(down(0));")
    with pytest.raises(PetrelRuntimeError) as excinfo:
        interpreter.execute(program)
    assert "maximum call depth 10" in str(excinfo.value)
    assert interpreter.env.depth == 0


def test_recursion_within_the_limit(capsys):
    run_source("func sum(n: int): int { if (n == 0) { return 0; } return n + sum(n - 1); } print(sum(100));")
    assert output(capsys) == ['5050']


@pytest.mark.parametrize("source, fragment", [
    ("if (1) { print(1); }", "'if' condition must be bool"),
    ('func f(a: int): int { return a; } print(f("x"));', "argument 1 of 'f' must be int"),
    ('func f(): int { return "x"; } print(f());', "return value of 'f' must be int"),
    ("func f(): void { return 1; } f();", "returned a value"),
    ("print(1 && true);", "expects bool operands"),
    ('print(1 == "1");', "cannot compare"),
    ("print(1 + 2.5);", "unsupported + for int and float"),
])
def test_run_time_type_checks(source, fragment):
    with pytest.raises(PetrelRuntimeError) as excinfo:
        execute_unchecked(source)
    assert fragment in str(excinfo.value)


@pytest.mark.parametrize("declaration, typed, printed", [
    ("var v: int;", "-12", "-12"),
    ("var v: float;", "2", "2.0"),
    ("var v: bool;", "TRUE", "true"),
    ("var v: char;", "xyz", "x"),
    ("var v: string;", "hello there", "hello there"),
    ("var v: char;", "", "\0"),
])
def test_input_parses_by_declared_type(monkeypatch, capsys, declaration, typed, printed):
    monkeypatch.setattr(builtins, 'input', lambda prompt='': typed)
    run_source(f"{declaration} input(v); print(v);")
    assert output(capsys) == [printed]


def test_input_prompt_names_the_variable(monkeypatch, capsys):
    prompts = []

    def fake_input(prompt=''):
        prompts.append(prompt)
        return '3'

    monkeypatch.setattr(builtins, 'input', fake_input)
    run_source("var count: int; input(count); print(count);")
    assert prompts == ['count = ']
    assert output(capsys) == ['3']


@pytest.mark.parametrize("declaration", ["var n: int;", "var n: float;", "var n: bool;"])
def test_invalid_input(monkeypatch, declaration):
    monkeypatch.setattr(builtins, 'input', lambda prompt='': 'abc')
    with pytest.raises(PetrelRuntimeError) as excinfo:
        run_source(f"{declaration} input(n);")
    assert "invalid input for 'n'" in str(excinfo.value)


def test_return_from_inside_a_for_loop(capsys):
    run_source("""
        func firstMultiple(of: int, from: int): int {
            for (var i: int = from; i < from + of; i = i + 1) {
                if (i % of == 0) { return i; }
            }
            return -1;
        }
        print(firstMultiple(7, 30));
    """)
    assert output(capsys) == ['35']


def test_unary_plus(capsys):
    run_source("var x: int = 4; print(+x); print(+2.5); print(-+3);")
    assert output(capsys) == ['4', '2.5', '-3']


def test_float_on_the_left_promotes_int_operand(capsys):
    run_source("print(2.5 + 1); print(3.0 == 3); print(0.5 < 1);")
    assert output(capsys) == ['3.5', 'true', 'true']


def test_deep_recursion_with_default_limit(capsys):
    run_source("func sum(n: int): int { if (n == 0) { return 0; } return n + sum(n - 1); } print(sum(500));")
    assert output(capsys) == ['125250']
