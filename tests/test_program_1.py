from pathlib import Path

from petrel.interpreter import run_file

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_1(capsys):
    run_file(str(EXAMPLES / 'program_1.petrel'))
    out = capsys.readouterr().out.strip()
    assert out == 'Hello World!!'
