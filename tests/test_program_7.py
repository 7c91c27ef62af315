from pathlib import Path

from petrel.interpreter import run_file

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_7_functions(capsys):
    run_file(str(EXAMPLES / 'program_7.petrel'))
    out_lines = capsys.readouterr().out.strip().split('\n')
    assert out_lines == ['area', '7.5', '9', '-1']


def test_program_7_with_grammar_front_end(capsys):
    run_file(str(EXAMPLES / 'program_7.petrel'), parser='grammar')
    out_lines = capsys.readouterr().out.strip().split('\n')
    assert out_lines == ['area', '7.5', '9', '-1']
