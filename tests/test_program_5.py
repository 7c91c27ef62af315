from pathlib import Path

from petrel.interpreter import run_file

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_5_values(capsys):
    run_file(str(EXAMPLES / 'program_5.petrel'))
    out_lines = capsys.readouterr().out.strip().split('\n')
    assert out_lines == ['5.0', '2.5', 'Hello, Petrel', 'P', 'true', 'true', 'say "hi"']
