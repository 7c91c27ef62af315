from pathlib import Path

from petrel.interpreter import run_file

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_2_precedence(capsys):
    """Test program 2: `*` binds tighter than `+`, integer division truncates toward zero."""
    run_file(str(EXAMPLES / 'program_2.petrel'))
    out_lines = capsys.readouterr().out.strip().split('\n')
    assert out_lines == ['8', '10', '3', '2', '-3', '-1']
