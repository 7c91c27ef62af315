from pathlib import Path

from petrel.interpreter import run_file

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_3_recursion(capsys):
    """Test program 3: recursive functions, one of them called before its declaration."""
    run_file(str(EXAMPLES / 'program_3.petrel'))
    out_lines = capsys.readouterr().out.strip().split('\n')
    assert out_lines == ['120', '55']
