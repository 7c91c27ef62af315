# Petrel language package
# This package provides a lexer, parsers, a semantic analyzer and an interpreter for the Petrel language.
from .errors import PetrelError, LexError, ParseError, SemanticError, PetrelRuntimeError
from .interpreter import run_source, run_file, Interpreter
from .lexer import Lexer, tokenize
from .parser import parse_program, parse_source
from .semantic import SemanticAnalyzer, analyze

__all__ = [
    'run_source',
    'run_file',
    'Interpreter',
    'Lexer',
    'tokenize',
    'parse_program',
    'parse_source',
    'SemanticAnalyzer',
    'analyze',
    'PetrelError',
    'LexError',
    'ParseError',
    'SemanticError',
    'PetrelRuntimeError',
]
