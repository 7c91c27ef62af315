from pathlib import Path

import pytest

from petrel.errors import LexError, ParseError
from petrel.frontend import parse
from petrel.grammar import expected_terminals, parse_with_grammar
from petrel.parser import parse_source

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


@pytest.mark.parametrize("path", sorted(EXAMPLES.glob('*.petrel')), ids=lambda p: p.stem)
def test_both_front_ends_build_the_same_ast(path):
    source = path.read_text(encoding='utf-8')
    assert parse_with_grammar(source) == parse_source(source)


@pytest.mark.parametrize("source", [
    "",
    "print(a < b && c || d);",
    "x = -(1 + 2) * 3 % 4;",
    "for (i = 0; i < 3; i = i + 1;) { }",
    "for (var i: int = 0; i < 3; f(i)) { }",
    "func f(): void { return; } f();",
    "var trueish: bool = true; var c: char = 'q'; var s: string = \"a \\\"b\\\"\";",
    "/* block */ print(1.5); // trailing",
    'print("a"); print("b");',
    'print("a"); print("say \\"hi\\"");',
    'var s: string = "two\nlines"; print(s + "!");',
    'print("back\\slash"); print("x");',
])
def test_grammar_matches_hand_written_parser(source):
    assert parse_with_grammar(source) == parse_source(source)


@pytest.mark.parametrize("source", [
    "var x int;",
    "print(1)",
    "var x: number;",
    "func f(a: void): int { return 1; }",
    "print(9223372036854775808);",
])
def test_grammar_parse_errors(source):
    with pytest.raises(ParseError):
        parse_with_grammar(source)


def test_grammar_lex_error_position():
    with pytest.raises(LexError) as excinfo:
        parse_with_grammar("var x: int = 1 @ 2;")
    assert (excinfo.value.line, excinfo.value.column) == (1, 16)


def test_expected_terminals():
    assert expected_terminals("print(1);") == []
    assert 'SEMICOLON' in expected_terminals("var x: int = 1 var")


def test_frontend_selection():
    source = "print(1);"
    assert parse(source, 'grammar') == parse(source, 'descent')
    with pytest.raises(ValueError):
        parse(source, 'yacc')


@pytest.mark.parametrize("source", [
    "var x: int = 2\u00b2;",
    "var \u00e9: int = 1;",
    "var x: int = 1;\u00a0print(x);",
])
def test_non_ascii_input_is_a_lex_error_in_both_front_ends(source):
    with pytest.raises(LexError):
        parse_source(source)
    with pytest.raises(LexError):
        parse_with_grammar(source)
