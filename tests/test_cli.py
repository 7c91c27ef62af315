import builtins
import json
import logging
import shutil
from pathlib import Path

import pytest

from petrel.__main__ import main

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_run_program_file(capsys):
    main([str(EXAMPLES / 'program_3.petrel')])
    assert capsys.readouterr().out.strip().split('\n') == ['120', '55']


def test_run_with_grammar_front_end(capsys):
    main(['--parser', 'grammar', str(EXAMPLES / 'program_2.petrel')])
    assert capsys.readouterr().out.strip().split('\n') == ['8', '10', '3', '2', '-3', '-1']


def test_check_only_does_not_execute(capsys):
    main(['--check', str(EXAMPLES / 'program_1.petrel')])
    assert capsys.readouterr().out == ''


def test_sample_program(monkeypatch, capsys):
    monkeypatch.setattr(builtins, 'input', lambda prompt='': '7')
    main([])
    assert capsys.readouterr().out.strip().split('\n') == [
        'Enter a number:', 'You entered:', '7', '47', 'z is greater than 30', '0', '1', '2',
    ]


def test_emit_ast_then_run_it(tmp_path, capsys):
    source = tmp_path / 'program_4.petrel'
    shutil.copy(EXAMPLES / 'program_4.petrel', source)
    main(['--emit-ast', str(source)])
    ast_path = Path(capsys.readouterr().out.strip())
    assert ast_path == tmp_path / 'program_4.petrel.ast.json'
    assert json.loads(ast_path.read_text(encoding='utf-8'))['type'] == 'Program'

    main(['--ast', str(ast_path)])
    assert capsys.readouterr().out.strip().split('\n') == ['0', '1', '2', '55']


def test_error_exits_with_status_1(tmp_path, capsys):
    bad = tmp_path / 'bad.petrel'
    bad.write_text("print(missing);\n", encoding='utf-8')
    with pytest.raises(SystemExit) as excinfo:
        main([str(bad)])
    assert excinfo.value.code == 1
    assert capsys.readouterr().err.startswith("SemanticError: undeclared identifier 'missing'")


def test_missing_file(tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([str(tmp_path / 'nope.petrel')])
    assert excinfo.value.code == 1
    assert 'not found' in capsys.readouterr().err


@pytest.mark.parametrize("text, kind", [
    ('{"type": "Program", "statements": [{"type": "Print"}]}', 'ParseError'),
    ('{"type": "Program", "statements": [', 'ParseError'),
])
def test_bad_ast_json_exits_with_status_1(tmp_path, capsys, text, kind):
    ast_path = tmp_path / 'bad.ast.json'
    ast_path.write_text(text, encoding='utf-8')
    with pytest.raises(SystemExit) as excinfo:
        main(['--ast', str(ast_path)])
    assert excinfo.value.code == 1
    assert capsys.readouterr().err.startswith(f"{kind}: ")


def test_repeated_runs_do_not_stack_log_handlers(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    program = str(EXAMPLES / 'program_1.petrel')
    main(['-vv', program])
    main([program])
    handler_count = len(logging.getLogger().handlers)
    main([program])
    assert len(logging.getLogger().handlers) == handler_count
    assert 'DEBUG' in (tmp_path / 'debug.txt').read_text(encoding='utf-8')
