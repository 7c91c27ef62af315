from typing import Optional


class PetrelError(Exception):
    """Base class for every error raised while processing a Petrel program."""
    kind = 'Error'

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        if line is not None and column is not None:
            text = f"{message} at line {line}, column {column}"
        else:
            text = message
        super().__init__(text)
        self.message = message
        self.line = line
        self.column = column


class LexError(PetrelError):
    """Malformed literal or unrecognized symbol in the source text."""
    kind = 'LexError'


class ParseError(PetrelError):
    """Unexpected token at a grammar position."""
    kind = 'ParseError'


class SemanticError(PetrelError):
    """Scoping or typing rule violated by a well-formed program."""
    kind = 'SemanticError'


class PetrelRuntimeError(PetrelError):
    """Failure while executing an analyzed program."""
    kind = 'RuntimeError'
