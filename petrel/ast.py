"""Abstract Syntax Tree (AST) definitions for the Petrel language.

The AST classes defined in this module represent the syntactic structure
of parsed Petrel programs. Both front-ends (the recursive-descent parser
and the Lark grammar) build these nodes, the semantic analyzer checks them,
and the interpreter evaluates them. Nodes are frozen and hold tuples, so a
tree is immutable once built and two trees compare equal exactly when they
have the same shape and contents.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .types import TypeSpec, Value


@dataclass(frozen=True)
class Node:
    """Base class for all AST nodes."""
    pass


@dataclass(frozen=True)
class Program(Node):
    statements: Tuple[Node, ...]


@dataclass(frozen=True)
class Block(Node):
    statements: Tuple[Node, ...]


@dataclass(frozen=True)
class VarDecl(Node):
    name: str
    type_spec: TypeSpec
    initializer: Optional[Node]


@dataclass(frozen=True)
class Assignment(Node):
    name: str
    value: Node


@dataclass(frozen=True)
class Print(Node):
    expr: Node


@dataclass(frozen=True)
class Input(Node):
    name: str


@dataclass(frozen=True)
class If(Node):
    condition: Node
    then_block: Block
    else_block: Optional[Block]


@dataclass(frozen=True)
class While(Node):
    condition: Node
    body: Block


@dataclass(frozen=True)
class For(Node):
    init: Node  # VarDecl or Assignment
    condition: Node
    increment: Node  # Assignment or ExprStmt
    body: Block


@dataclass(frozen=True)
class Param:
    name: str
    type_spec: TypeSpec


@dataclass(frozen=True)
class FunctionDecl(Node):
    name: str
    params: Tuple[Param, ...]
    return_type: TypeSpec
    body: Block


@dataclass(frozen=True)
class Return(Node):
    value: Optional[Node]


@dataclass(frozen=True)
class ExprStmt(Node):
    expr: Node


@dataclass(frozen=True)
class Literal(Node):
    value: Value


@dataclass(frozen=True)
class Identifier(Node):
    name: str


@dataclass(frozen=True)
class BinaryExpr(Node):
    left: Node
    op: str
    right: Node


@dataclass(frozen=True)
class UnaryExpr(Node):
    op: str
    operand: Node


@dataclass(frozen=True)
class Call(Node):
    name: str
    args: Tuple[Node, ...]


Statement = Union[VarDecl, Assignment, Print, Input, If, While, For, FunctionDecl, Return, ExprStmt, Block]
Expression = Union[Literal, Identifier, BinaryExpr, UnaryExpr, Call]
