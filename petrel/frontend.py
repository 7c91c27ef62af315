from typing import Callable, Dict

from petrel.ast import Program
from petrel.grammar import parse_with_grammar
from petrel.parser import parse_source


# Both front-ends turn source text into the same Program AST
FRONT_ENDS: Dict[str, Callable[[str], Program]] = {
    'descent': parse_source,
    'grammar': parse_with_grammar,
}


def parse(source: str, front_end: str = 'descent') -> Program:
    try:
        parse_fn = FRONT_ENDS[front_end]
    except KeyError:
        raise ValueError(f"unknown front-end {front_end!r}, expected one of {sorted(FRONT_ENDS)}")
    return parse_fn(source)
