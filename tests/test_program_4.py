from pathlib import Path

from petrel.interpreter import run_file

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_4_loops(capsys):
    run_file(str(EXAMPLES / 'program_4.petrel'))
    out_lines = capsys.readouterr().out.strip().split('\n')
    assert out_lines == ['0', '1', '2', '55']
