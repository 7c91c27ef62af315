"""Lexical scanner for the Petrel language.

`Lexer.next_token` produces one token per call and keeps returning an EOF
token once the input is exhausted. Malformed input never raises here:
unterminated strings, malformed character literals and unknown symbols come
back as INVALID tokens whose text is a diagnostic, and it is up to the caller
(normally the parser) to decide when to stop.
"""

from __future__ import annotations

import logging
import string
from dataclasses import dataclass
from enum import Enum
from typing import List


logger = logging.getLogger(__name__)

# ASCII only, matching the terminals of the Lark grammar
DIGITS = frozenset(string.digits)
IDENT_START = frozenset(string.ascii_letters + '_')
IDENT_CHARS = IDENT_START | DIGITS
WHITESPACE = frozenset(' \t\f\r\n')


class TokenKind(Enum):
    # Keywords
    IF = 'if'
    ELSE = 'else'
    WHILE = 'while'
    FOR = 'for'
    RETURN = 'return'
    VAR = 'var'
    PRINT = 'print'
    INPUT = 'input'
    FUNC = 'func'

    # Literals and names
    INTEGER = 'INTEGER'
    FLOAT = 'FLOAT'
    CHAR = 'CHAR'
    BOOLEAN = 'BOOLEAN'
    STRING = 'STRING'
    IDENT = 'IDENT'

    # Operators
    PLUS = '+'
    MINUS = '-'
    STAR = '*'
    SLASH = '/'
    PERCENT = '%'
    ASSIGN = '='
    EQ = '=='
    NE = '!='
    LT = '<'
    LE = '<='
    GT = '>'
    GE = '>='
    AND = '&&'
    OR = '||'

    # Delimiters
    LPAREN = '('
    RPAREN = ')'
    LBRACE = '{'
    RBRACE = '}'
    COMMA = ','
    SEMICOLON = ';'
    COLON = ':'

    EOF = 'EOF'
    INVALID = 'INVALID'


KEYWORDS = {
    'if': TokenKind.IF,
    'else': TokenKind.ELSE,
    'while': TokenKind.WHILE,
    'for': TokenKind.FOR,
    'return': TokenKind.RETURN,
    'var': TokenKind.VAR,
    'print': TokenKind.PRINT,
    'input': TokenKind.INPUT,
    'func': TokenKind.FUNC,
}

TWO_CHAR_OPS = {
    '==': TokenKind.EQ,
    '!=': TokenKind.NE,
    '<=': TokenKind.LE,
    '>=': TokenKind.GE,
    '&&': TokenKind.AND,
    '||': TokenKind.OR,
}

SINGLE_CHAR_OPS = {
    '+': TokenKind.PLUS,
    '-': TokenKind.MINUS,
    '*': TokenKind.STAR,
    '/': TokenKind.SLASH,
    '%': TokenKind.PERCENT,
    '=': TokenKind.ASSIGN,
    '<': TokenKind.LT,
    '>': TokenKind.GT,
    '(': TokenKind.LPAREN,
    ')': TokenKind.RPAREN,
    '{': TokenKind.LBRACE,
    '}': TokenKind.RBRACE,
    ',': TokenKind.COMMA,
    ';': TokenKind.SEMICOLON,
    ':': TokenKind.COLON,
}


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.kind.name} {self.text!r} {self.line}:{self.column}"


class Lexer:
    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1

    def peek(self, offset: int = 0) -> str:
        i = self.pos + offset
        if i < len(self.source):
            return self.source[i]
        return ''

    def advance(self, n: int = 1):
        for _ in range(n):
            if self.pos >= len(self.source):
                return
            if self.source[self.pos] == '\n':
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1

    def skip_whitespace_and_comments(self):
        while self.pos < len(self.source):
            c = self.peek()
            if c in WHITESPACE:
                self.advance()
            elif c == '/' and self.peek(1) == '/':
                while self.pos < len(self.source) and self.peek() != '\n':
                    self.advance()
            elif c == '/' and self.peek(1) == '*':
                self.advance(2)
                while self.pos < len(self.source) and not (self.peek() == '*' and self.peek(1) == '/'):
                    self.advance()
                # an unterminated block comment swallows the rest of the input
                self.advance(2)
            else:
                break

    def next_token(self) -> Token:
        self.skip_whitespace_and_comments()
        if self.pos >= len(self.source):
            return Token(TokenKind.EOF, '', self.line, self.column)
        c = self.peek()
        if c in DIGITS:
            return self.read_number()
        if c in IDENT_START:
            return self.read_identifier()
        if c == '\'':
            return self.read_char()
        if c == '"':
            return self.read_string()
        return self.read_symbol()

    def read_number(self) -> Token:
        line, column, start = self.line, self.column, self.pos
        has_dot = False
        while self.pos < len(self.source):
            c = self.peek()
            if c in DIGITS:
                self.advance()
            elif c == '.' and not has_dot:
                has_dot = True
                self.advance()
            else:
                break
        text = self.source[start:self.pos]
        kind = TokenKind.FLOAT if has_dot else TokenKind.INTEGER
        return Token(kind, text, line, column)

    def read_identifier(self) -> Token:
        line, column, start = self.line, self.column, self.pos
        while self.pos < len(self.source) and self.peek() in IDENT_CHARS:
            self.advance()
        text = self.source[start:self.pos]
        if text in ('true', 'false'):
            return Token(TokenKind.BOOLEAN, text, line, column)
        return Token(KEYWORDS.get(text, TokenKind.IDENT), text, line, column)

    def read_char(self) -> Token:
        line, column = self.line, self.column
        self.advance()  # opening quote
        c = self.peek()
        if c == '' or c == '\n' or c == '\'':
            return Token(TokenKind.INVALID, 'malformed character literal', line, column)
        self.advance()
        if self.peek() != '\'':
            return Token(TokenKind.INVALID, 'malformed character literal', line, column)
        self.advance()  # closing quote
        return Token(TokenKind.CHAR, c, line, column)

    def read_string(self) -> Token:
        line, column = self.line, self.column
        self.advance()  # opening quote
        chars: List[str] = []
        while self.pos < len(self.source) and self.peek() != '"':
            if self.peek() == '\\' and self.peek(1) == '"':
                chars.append('"')
                self.advance(2)
                continue
            chars.append(self.peek())
            self.advance()
        if self.pos >= len(self.source):
            return Token(TokenKind.INVALID, 'unterminated string literal', line, column)
        self.advance()  # closing quote
        return Token(TokenKind.STRING, ''.join(chars), line, column)

    def read_symbol(self) -> Token:
        line, column = self.line, self.column
        pair = self.source[self.pos:self.pos + 2]
        if pair in TWO_CHAR_OPS:
            self.advance(2)
            return Token(TWO_CHAR_OPS[pair], pair, line, column)
        c = self.peek()
        self.advance()
        if c in SINGLE_CHAR_OPS:
            return Token(SINGLE_CHAR_OPS[c], c, line, column)
        return Token(TokenKind.INVALID, f"unexpected character {c!r}", line, column)

    def tokenize(self) -> List[Token]:
        """Collect tokens up to and including the first EOF or INVALID token."""
        tokens: List[Token] = []
        while True:
            token = self.next_token()
            tokens.append(token)
            if token.kind in (TokenKind.EOF, TokenKind.INVALID):
                break
        logger.debug("scanned %d tokens", len(tokens))
        return tokens


def tokenize(source: str) -> List[Token]:
    return Lexer(source).tokenize()
