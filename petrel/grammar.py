"""Grammar-driven front-end for the Petrel language.

This module describes Petrel with a Lark LALR grammar and transforms the
resulting parse tree into the same AST the recursive-descent parser in
`petrel.parser` produces. The two front-ends are interchangeable: for any
program the hand-written parser accepts, `parse_with_grammar` returns an
equal `Program`.

Lark reports failures through its own exception types; they are mapped onto
`LexError` (no terminal matches the input) and `ParseError` (a terminal
arrives where the grammar does not allow it), keeping line and column.
"""

from __future__ import annotations

import logging
from typing import List

from lark import Lark, Transformer, Token, v_args
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedToken, VisitError

from .ast import (
    Program, Block, VarDecl, Assignment, Print, Input, If, While, For,
    Param, FunctionDecl, Return, ExprStmt, Literal, Identifier, BinaryExpr,
    UnaryExpr, Call,
)
from .errors import LexError, ParseError, PetrelError
from .types import (
    TypeSpec, IntVal, FloatVal, BoolVal, CharVal, StrVal,
    VALUE_TYPE_NAMES, RETURN_TYPE_NAMES, INT64_MAX,
)


logger = logging.getLogger(__name__)


PETREL_GRAMMAR = r"""
    start: statement*

    ?statement: var_decl
              | assignment
              | print_stmt
              | input_stmt
              | if_stmt
              | while_stmt
              | for_stmt
              | func_decl
              | return_stmt
              | expr_stmt

    var_decl: "var" NAME ":" NAME ["=" expr] ";"
    assignment: NAME "=" expr ";"
    print_stmt: "print" "(" expr ")" ";"
    input_stmt: "input" "(" NAME ")" ";"
    if_stmt: "if" "(" expr ")" block ["else" block]
    while_stmt: "while" "(" expr ")" block
    for_stmt: "for" "(" for_init expr ";" for_step ")" block
    ?for_init: var_decl | assignment
    for_step: NAME "=" expr [";"]     -> step_assignment
            | expr [";"]              -> step_expr
    func_decl: "func" NAME "(" [param ("," param)*] ")" ":" NAME block
    param: NAME ":" NAME
    return_stmt: "return" [expr] ";"
    expr_stmt: expr ";"

    block: "{" statement* "}"

    ?expr: logic_or
    ?logic_or: logic_and (OR_OP logic_and)*
    ?logic_and: equality (AND_OP equality)*
    ?equality: comparison (EQ_OP comparison)*
    ?comparison: term (REL_OP term)*
    ?term: factor (ADD_OP factor)*
    ?factor: unary (MUL_OP unary)*
    ?unary: ADD_OP unary           -> unary_op
          | primary
    ?primary: INT                  -> int_lit
            | FLOAT                -> float_lit
            | BOOL                 -> bool_lit
            | CHAR                 -> char_lit
            | STRING               -> string_lit
            | NAME "(" [expr ("," expr)*] ")"  -> call
            | NAME                 -> identifier
            | "(" expr ")"

    OR_OP: "||"
    AND_OP: "&&"
    EQ_OP: "==" | "!="
    REL_OP: "<=" | ">=" | "<" | ">"
    ADD_OP: "+" | "-"
    MUL_OP: "*" | "/" | "%"

    BOOL.2: /(true|false)(?![A-Za-z0-9_])/
    FLOAT.2: /[0-9]+\.[0-9]*/
    INT: /[0-9]+/
    CHAR: /'[^'\n]'/
    STRING: /"([\\]"|[\\](?!")|[^"\\])*"/

    %import common.CNAME -> NAME
    %import common.WS
    %ignore WS

    LINE_COMMENT: /\/\/[^\n]*/
    %ignore LINE_COMMENT
    BLOCK_COMMENT: /\/\*[\s\S]*?(\*\/|$)/
    %ignore BLOCK_COMMENT
"""


PETREL_PARSER = Lark(
    PETREL_GRAMMAR,
    parser='lalr',
    propagate_positions=True,
    maybe_placeholders=True,
)


def type_from_token(token: Token, allow_void: bool = False) -> TypeSpec:
    names = RETURN_TYPE_NAMES if allow_void else VALUE_TYPE_NAMES
    if token.value not in names:
        raise ParseError(f"unknown type {token.value!r}", token.line, token.column)
    return TypeSpec(token.value)


def binary_chain(items) -> object:
    # items pattern: expr (op expr)*, folded left-associatively
    left = items[0]
    i = 1
    while i < len(items):
        left = BinaryExpr(left, str(items[i]), items[i + 1])
        i += 2
    return left


class ASTTransformer(Transformer):
    """Transforms the raw parse tree into a Petrel AST."""

    def start(self, items):
        return Program(tuple(items))

    def block(self, items):
        return Block(tuple(items))

    def var_decl(self, items):
        name, type_token, initializer = items
        return VarDecl(str(name), type_from_token(type_token), initializer)

    def assignment(self, items):
        name, value = items
        return Assignment(str(name), value)

    def step_assignment(self, items):
        return Assignment(str(items[0]), items[1])

    def step_expr(self, items):
        return ExprStmt(items[0])

    def print_stmt(self, items):
        return Print(items[0])

    def input_stmt(self, items):
        return Input(str(items[0]))

    def if_stmt(self, items):
        condition, then_block, else_block = items
        return If(condition, then_block, else_block)

    def while_stmt(self, items):
        condition, body = items
        return While(condition, body)

    def for_stmt(self, items):
        init, condition, increment, body = items
        return For(init, condition, increment, body)

    def param(self, items):
        name, type_token = items
        return Param(str(name), type_from_token(type_token))

    def func_decl(self, items):
        name = str(items[0])
        return_type = type_from_token(items[-2], allow_void=True)
        body = items[-1]
        params = tuple(p for p in items[1:-2] if p is not None)
        return FunctionDecl(name, params, return_type, body)

    def return_stmt(self, items):
        return Return(items[0])

    def expr_stmt(self, items):
        return ExprStmt(items[0])

    # Expressions
    logic_or = logic_and = equality = comparison = term = factor = staticmethod(binary_chain)

    def unary_op(self, items):
        op, operand = items
        return UnaryExpr(str(op), operand)

    @v_args(inline=True)
    def int_lit(self, token):
        value = int(token)
        if value > INT64_MAX:
            raise ParseError(f"integer literal {token} out of range", token.line, token.column)
        return Literal(IntVal(value))

    @v_args(inline=True)
    def float_lit(self, token):
        return Literal(FloatVal(float(token)))

    @v_args(inline=True)
    def bool_lit(self, token):
        return Literal(BoolVal(token == 'true'))

    @v_args(inline=True)
    def char_lit(self, token):
        return Literal(CharVal(token[1]))

    @v_args(inline=True)
    def string_lit(self, token):
        return Literal(StrVal(token[1:-1].replace('\\"', '"')))

    def call(self, items):
        name = str(items[0])
        args = tuple(a for a in items[1:] if a is not None)
        return Call(name, args)

    @v_args(inline=True)
    def identifier(self, token):
        return Identifier(str(token))


def parse_with_grammar(source: str) -> Program:
    """Parse Petrel source code into a Program AST using the Lark grammar."""
    try:
        tree = PETREL_PARSER.parse(source)
    except UnexpectedCharacters as e:
        raise LexError(f"unexpected character {source[e.pos_in_stream]!r}", e.line, e.column)
    except UnexpectedEOF as e:
        raise ParseError("unexpected end of input", e.line if e.line > 0 else None,
                         e.column if e.column > 0 else None)
    except UnexpectedToken as e:
        found = 'end of input' if e.token.type == '$END' else repr(str(e.token))
        raise ParseError(f"unexpected {found}", e.line, e.column)
    try:
        program = ASTTransformer().transform(tree)
    except VisitError as e:
        if isinstance(e.orig_exc, PetrelError):
            raise e.orig_exc
        raise
    logger.debug("grammar front-end parsed %d top-level statements", len(program.statements))
    return program


def expected_terminals(source: str) -> List[str]:
    """Return the terminal names the grammar accepts at the first syntax error, or [] if none."""
    try:
        PETREL_PARSER.parse(source)
    except UnexpectedToken as e:
        return sorted(e.expected)
    except (UnexpectedCharacters, UnexpectedEOF):
        return []
    return []
