import json
from pathlib import Path

import pytest

from petrel.ast import Literal
from petrel.ast_json import ast_from_obj, ast_to_obj
from petrel.errors import ParseError
from petrel.parser import parse_source
from petrel.types import FloatVal, IntVal

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_json_round_trip_preserves_the_program():
    program = parse_source((EXAMPLES / 'program_7.petrel').read_text(encoding='utf-8'))
    text = json.dumps(ast_to_obj(program))
    assert ast_from_obj(json.loads(text)) == program


def test_literal_tags_keep_int_and_float_apart():
    assert ast_to_obj(Literal(FloatVal(2.0))) == {"type": "Literal", "value": {"tag": "float", "value": 2.0}}
    assert ast_from_obj({"type": "Literal", "value": {"tag": "float", "value": 2}}) == Literal(FloatVal(2.0))
    assert ast_from_obj({"type": "Literal", "value": {"tag": "int", "value": 2}}) == Literal(IntVal(2))


@pytest.mark.parametrize("obj", [
    {"type": "Goto"},
    {"type": "Program", "statements": [{"type": "Print"}]},
    {"type": "Program", "statements": "print"},
    {"type": "VarDecl", "name": "x", "type_spec": "number"},
    {"type": "VarDecl", "name": "x", "type_spec": "void"},
    {"type": "Literal", "value": {"tag": "decimal", "value": 1}},
    ["not", "a", "node"],
])
def test_malformed_ast_is_a_parse_error(obj):
    with pytest.raises(ParseError):
        ast_from_obj(obj)
