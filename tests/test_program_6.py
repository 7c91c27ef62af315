import builtins
from pathlib import Path

from petrel.interpreter import run_file

EXAMPLES = Path(__file__).resolve().parent.parent / 'examples'


def test_program_6_input(monkeypatch, capsys):
    """Test program 6: user-driven repetition.

    It reads a count and prints the square of every index below it. We
    simulate user input to supply the count and check the printed lines.
    """
    monkeypatch.setattr(builtins, 'input', lambda prompt='': '4')
    run_file(str(EXAMPLES / 'program_6.petrel'))
    out_lines = capsys.readouterr().out.strip().split('\n')
    assert out_lines == ['0', '1', '4', '9']
