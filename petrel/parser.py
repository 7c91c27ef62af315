"""Recursive-descent parser for the Petrel language.

The parser consumes the token list produced by `petrel.lexer` and builds a
single `Program` node. It fails fast: the first token that does not fit the
grammar raises a `ParseError` carrying that token's position, and no partial
tree is returned. An INVALID token from the lexer surfaces as a `LexError`.

Expression precedence, loosest first:

    ||   &&   == !=   < <= > >=   + -   * / %   unary - +   primary

All binary levels are left-associative.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Union

from .ast import (
    Program, Block, VarDecl, Assignment, Print, Input, If, While, For,
    Param, FunctionDecl, Return, ExprStmt, Literal, Identifier, BinaryExpr,
    UnaryExpr, Call, Node,
)
from .errors import LexError, ParseError
from .lexer import Token, TokenKind, tokenize
from .types import (
    TypeSpec, IntVal, FloatVal, BoolVal, CharVal, StrVal,
    VALUE_TYPE_NAMES, RETURN_TYPE_NAMES, INT64_MAX,
)


logger = logging.getLogger(__name__)

Expected = Union[TokenKind, List[TokenKind]]


def describe(expected: Expected) -> str:
    if isinstance(expected, list):
        return 'one of ' + ', '.join(repr(k.value) for k in expected)
    return repr(expected.value)


class Parser:
    def __init__(self, tokens: List[Token]):
        if not tokens or tokens[-1].kind not in (TokenKind.EOF, TokenKind.INVALID):
            last = tokens[-1] if tokens else None
            line = last.line if last else 1
            column = last.column + len(last.text) if last else 1
            tokens = list(tokens) + [Token(TokenKind.EOF, '', line, column)]
        self.tokens = tokens
        self.pos = 0

    def peek(self, offset: int = 0) -> Token:
        i = min(self.pos + offset, len(self.tokens) - 1)
        token = self.tokens[i]
        if token.kind == TokenKind.INVALID:
            raise LexError(token.text, token.line, token.column)
        return token

    def match(self, expected: Expected) -> bool:
        token = self.peek()
        if isinstance(expected, list):
            return token.kind in expected
        return token.kind == expected

    def consume(self, expected: Expected) -> Token:
        token = self.peek()
        if not self.match(expected):
            found = 'end of input' if token.kind == TokenKind.EOF else repr(token.text)
            raise ParseError(f"expected {describe(expected)}, got {found}", token.line, token.column)
        self.pos += 1
        return token

    def error(self, message: str, token: Optional[Token] = None) -> ParseError:
        token = token or self.peek()
        return ParseError(message, token.line, token.column)

    def parse_program(self) -> Program:
        statements: List[Node] = []
        while not self.match(TokenKind.EOF):
            statements.append(self.parse_statement())
        logger.debug("parsed program with %d top-level statements", len(statements))
        return Program(tuple(statements))

    def parse_statement(self) -> Node:
        token = self.peek()
        kind = token.kind
        if kind == TokenKind.VAR:
            return self.parse_var_decl()
        if kind == TokenKind.PRINT:
            return self.parse_print_stmt()
        if kind == TokenKind.INPUT:
            return self.parse_input_stmt()
        if kind == TokenKind.IF:
            return self.parse_if_stmt()
        if kind == TokenKind.WHILE:
            return self.parse_while_stmt()
        if kind == TokenKind.FOR:
            return self.parse_for_stmt()
        if kind == TokenKind.FUNC:
            return self.parse_func_decl()
        if kind == TokenKind.RETURN:
            return self.parse_return_stmt()
        if kind == TokenKind.IDENT and self.peek(1).kind == TokenKind.ASSIGN:
            return self.parse_assignment()
        expr = self.parse_expression()
        self.consume(TokenKind.SEMICOLON)
        return ExprStmt(expr)

    def parse_type_spec(self, allow_void: bool = False) -> TypeSpec:
        token = self.consume(TokenKind.IDENT)
        names = RETURN_TYPE_NAMES if allow_void else VALUE_TYPE_NAMES
        if token.text not in names:
            raise self.error(f"unknown type {token.text!r}", token)
        return TypeSpec(token.text)

    def parse_var_decl(self) -> VarDecl:
        self.consume(TokenKind.VAR)
        name_token = self.consume(TokenKind.IDENT)
        self.consume(TokenKind.COLON)
        type_spec = self.parse_type_spec()
        initializer: Optional[Node] = None
        if self.match(TokenKind.ASSIGN):
            self.consume(TokenKind.ASSIGN)
            initializer = self.parse_expression()
        self.consume(TokenKind.SEMICOLON)
        return VarDecl(name_token.text, type_spec, initializer)

    def parse_assignment(self, require_semicolon: bool = True) -> Assignment:
        name_token = self.consume(TokenKind.IDENT)
        self.consume(TokenKind.ASSIGN)
        value = self.parse_expression()
        if require_semicolon or self.match(TokenKind.SEMICOLON):
            self.consume(TokenKind.SEMICOLON)
        return Assignment(name_token.text, value)

    def parse_print_stmt(self) -> Print:
        self.consume(TokenKind.PRINT)
        self.consume(TokenKind.LPAREN)
        expr = self.parse_expression()
        self.consume(TokenKind.RPAREN)
        self.consume(TokenKind.SEMICOLON)
        return Print(expr)

    def parse_input_stmt(self) -> Input:
        self.consume(TokenKind.INPUT)
        self.consume(TokenKind.LPAREN)
        name_token = self.consume(TokenKind.IDENT)
        self.consume(TokenKind.RPAREN)
        self.consume(TokenKind.SEMICOLON)
        return Input(name_token.text)

    def parse_block(self) -> Block:
        self.consume(TokenKind.LBRACE)
        statements: List[Node] = []
        while not self.match(TokenKind.RBRACE):
            if self.match(TokenKind.EOF):
                raise self.error("unterminated block, expected '}'")
            statements.append(self.parse_statement())
        self.consume(TokenKind.RBRACE)
        return Block(tuple(statements))

    def parse_if_stmt(self) -> If:
        self.consume(TokenKind.IF)
        self.consume(TokenKind.LPAREN)
        condition = self.parse_expression()
        self.consume(TokenKind.RPAREN)
        then_block = self.parse_block()
        else_block = None
        if self.match(TokenKind.ELSE):
            self.consume(TokenKind.ELSE)
            else_block = self.parse_block()
        return If(condition, then_block, else_block)

    def parse_while_stmt(self) -> While:
        self.consume(TokenKind.WHILE)
        self.consume(TokenKind.LPAREN)
        condition = self.parse_expression()
        self.consume(TokenKind.RPAREN)
        body = self.parse_block()
        return While(condition, body)

    def parse_for_stmt(self) -> For:
        self.consume(TokenKind.FOR)
        self.consume(TokenKind.LPAREN)
        # init: var declaration or assignment, each with its own ';'
        if self.match(TokenKind.VAR):
            init: Node = self.parse_var_decl()
        elif self.match(TokenKind.IDENT) and self.peek(1).kind == TokenKind.ASSIGN:
            init = self.parse_assignment()
        else:
            raise self.error("expected variable declaration or assignment in for initializer")
        condition = self.parse_expression()
        self.consume(TokenKind.SEMICOLON)
        # increment: the trailing ';' before ')' is optional
        if self.match(TokenKind.IDENT) and self.peek(1).kind == TokenKind.ASSIGN:
            increment: Node = self.parse_assignment(require_semicolon=False)
        else:
            increment = ExprStmt(self.parse_expression())
            if self.match(TokenKind.SEMICOLON):
                self.consume(TokenKind.SEMICOLON)
        self.consume(TokenKind.RPAREN)
        body = self.parse_block()
        return For(init, condition, increment, body)

    def parse_func_decl(self) -> FunctionDecl:
        self.consume(TokenKind.FUNC)
        name_token = self.consume(TokenKind.IDENT)
        self.consume(TokenKind.LPAREN)
        params: List[Param] = []
        if not self.match(TokenKind.RPAREN):
            params = self.parse_param_list()
        self.consume(TokenKind.RPAREN)
        self.consume(TokenKind.COLON)
        return_type = self.parse_type_spec(allow_void=True)
        body = self.parse_block()
        logger.debug("parsed function %s/%d", name_token.text, len(params))
        return FunctionDecl(name_token.text, tuple(params), return_type, body)

    def parse_param_list(self) -> List[Param]:
        params: List[Param] = []
        while True:
            name_token = self.consume(TokenKind.IDENT)
            self.consume(TokenKind.COLON)
            params.append(Param(name_token.text, self.parse_type_spec()))
            if not self.match(TokenKind.COMMA):
                break
            self.consume(TokenKind.COMMA)
        return params

    def parse_return_stmt(self) -> Return:
        self.consume(TokenKind.RETURN)
        if self.match(TokenKind.SEMICOLON):
            self.consume(TokenKind.SEMICOLON)
            return Return(None)
        value = self.parse_expression()
        self.consume(TokenKind.SEMICOLON)
        return Return(value)

    # Expression parsing (precedence climbing)
    def parse_expression(self) -> Node:
        return self.parse_logic_or()

    def parse_binary_level(self, operators: List[TokenKind], operand) -> Node:
        node = operand()
        while self.match(operators):
            op_token = self.consume(operators)
            right = operand()
            node = BinaryExpr(node, op_token.text, right)
        return node

    def parse_logic_or(self) -> Node:
        return self.parse_binary_level([TokenKind.OR], self.parse_logic_and)

    def parse_logic_and(self) -> Node:
        return self.parse_binary_level([TokenKind.AND], self.parse_equality)

    def parse_equality(self) -> Node:
        return self.parse_binary_level([TokenKind.EQ, TokenKind.NE], self.parse_comparison)

    def parse_comparison(self) -> Node:
        ops = [TokenKind.LT, TokenKind.LE, TokenKind.GT, TokenKind.GE]
        return self.parse_binary_level(ops, self.parse_term)

    def parse_term(self) -> Node:
        return self.parse_binary_level([TokenKind.PLUS, TokenKind.MINUS], self.parse_factor)

    def parse_factor(self) -> Node:
        ops = [TokenKind.STAR, TokenKind.SLASH, TokenKind.PERCENT]
        return self.parse_binary_level(ops, self.parse_unary)

    def parse_unary(self) -> Node:
        if self.match([TokenKind.MINUS, TokenKind.PLUS]):
            op_token = self.consume([TokenKind.MINUS, TokenKind.PLUS])
            operand = self.parse_unary()
            return UnaryExpr(op_token.text, operand)
        return self.parse_primary()

    def parse_primary(self) -> Node:
        token = self.peek()
        kind = token.kind
        if kind == TokenKind.INTEGER:
            self.consume(TokenKind.INTEGER)
            value = int(token.text)
            if value > INT64_MAX:
                raise self.error(f"integer literal {token.text} out of range", token)
            return Literal(IntVal(value))
        if kind == TokenKind.FLOAT:
            self.consume(TokenKind.FLOAT)
            return Literal(FloatVal(float(token.text)))
        if kind == TokenKind.BOOLEAN:
            self.consume(TokenKind.BOOLEAN)
            return Literal(BoolVal(token.text == 'true'))
        if kind == TokenKind.CHAR:
            self.consume(TokenKind.CHAR)
            return Literal(CharVal(token.text))
        if kind == TokenKind.STRING:
            self.consume(TokenKind.STRING)
            return Literal(StrVal(token.text))
        if kind == TokenKind.IDENT:
            self.consume(TokenKind.IDENT)
            if self.match(TokenKind.LPAREN):
                return Call(token.text, tuple(self.parse_arguments()))
            return Identifier(token.text)
        if kind == TokenKind.LPAREN:
            self.consume(TokenKind.LPAREN)
            expr = self.parse_expression()
            self.consume(TokenKind.RPAREN)
            return expr
        found = 'end of input' if kind == TokenKind.EOF else repr(token.text)
        raise self.error(f"expected expression, got {found}", token)

    def parse_arguments(self) -> List[Node]:
        self.consume(TokenKind.LPAREN)
        args: List[Node] = []
        if not self.match(TokenKind.RPAREN):
            args.append(self.parse_expression())
            while self.match(TokenKind.COMMA):
                self.consume(TokenKind.COMMA)
                args.append(self.parse_expression())
        self.consume(TokenKind.RPAREN)
        return args


def parse_program(tokens: List[Token]) -> Program:
    """Parse a token list into a Program AST."""
    return Parser(tokens).parse_program()


def parse_source(source: str) -> Program:
    """Tokenize and parse Petrel source code into a Program AST."""
    return parse_program(tokenize(source))
