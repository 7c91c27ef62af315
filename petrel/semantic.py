"""Static checks for Petrel programs.

The analyzer walks the AST once and stops at the first violation, raising
`SemanticError`. It keeps its scopes in an arena: a list of `Scope` objects
each holding the arena index of its parent. Entering a block pushes a scope
whose parent is the current one; leaving the block pops it again, so a
scope's lifetime is exactly its block's.

Top-level function signatures are entered into the global scope before any
statement is checked, so functions may call themselves and each other
regardless of their order in the source.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .ast import (
    Program, Block, VarDecl, Assignment, Print, Input, If, While, For,
    Param, FunctionDecl, Return, ExprStmt, Literal, Identifier, BinaryExpr,
    UnaryExpr, Call, Node,
)
from .errors import SemanticError
from .types import TypeSpec, is_compatible


logger = logging.getLogger(__name__)

ARITHMETIC_OPS = ('+', '-', '*', '/', '%')
RELATIONAL_OPS = ('<', '<=', '>', '>=')
EQUALITY_OPS = ('==', '!=')
LOGICAL_OPS = ('&&', '||')


@dataclass
class Symbol:
    name: str
    type_spec: TypeSpec
    params: Optional[Tuple[Param, ...]] = None  # set for functions only

    @property
    def is_function(self) -> bool:
        return self.params is not None


@dataclass
class Scope:
    parent: Optional[int]
    symbols: Dict[str, Symbol] = field(default_factory=dict)


class SemanticAnalyzer:
    def __init__(self):
        self.scopes: List[Scope] = [Scope(parent=None)]
        self.current = 0
        # return type of the function whose body is being analyzed
        self.function_return: Optional[TypeSpec] = None

    # Scope arena
    def enter_scope(self):
        self.scopes.append(Scope(parent=self.current))
        self.current = len(self.scopes) - 1
        logger.debug("enter scope %d (parent %s)", self.current, self.scopes[self.current].parent)

    def exit_scope(self):
        scope = self.scopes[self.current]
        if scope.parent is None:
            raise SemanticError("cannot exit the global scope")
        logger.debug("exit scope %d", self.current)
        self.scopes.pop()
        self.current = scope.parent

    def declare(self, symbol: Symbol):
        scope = self.scopes[self.current]
        if symbol.name in scope.symbols:
            what = 'function' if symbol.is_function else 'variable'
            raise SemanticError(f"{what} '{symbol.name}' already declared in this scope")
        scope.symbols[symbol.name] = symbol

    def resolve(self, name: str) -> Symbol:
        index: Optional[int] = self.current
        while index is not None:
            scope = self.scopes[index]
            if name in scope.symbols:
                return scope.symbols[name]
            index = scope.parent
        raise SemanticError(f"undeclared identifier '{name}'")

    def resolve_variable(self, name: str) -> Symbol:
        symbol = self.resolve(name)
        if symbol.is_function:
            raise SemanticError(f"'{name}' is a function, not a variable")
        return symbol

    # Statements
    def analyze(self, program: Program):
        # First pass: top-level function signatures, so calls may precede declarations
        for stmt in program.statements:
            if isinstance(stmt, FunctionDecl):
                self.declare(Symbol(stmt.name, stmt.return_type, stmt.params))
                logger.debug("declare function %s(%s): %s", stmt.name,
                             ", ".join(f"{p.name}: {p.type_spec}" for p in stmt.params), stmt.return_type)
        for stmt in program.statements:
            self.analyze_statement(stmt)

    def analyze_block(self, block: Block):
        self.enter_scope()
        for stmt in block.statements:
            self.analyze_statement(stmt)
        self.exit_scope()

    def analyze_statement(self, node: Node):
        if isinstance(node, VarDecl):
            if node.initializer is not None:
                value_type = self.analyze_value(node.initializer)
                if not is_compatible(node.type_spec, value_type):
                    raise SemanticError(
                        f"cannot initialize '{node.name}' of type {node.type_spec} with a value of type {value_type}")
            # declared after the initializer, so `var x: int = x;` does not see itself
            self.declare(Symbol(node.name, node.type_spec))
            logger.debug("declare %s: %s", node.name, node.type_spec)
            return
        if isinstance(node, Assignment):
            symbol = self.resolve_variable(node.name)
            value_type = self.analyze_value(node.value)
            if not is_compatible(symbol.type_spec, value_type):
                raise SemanticError(
                    f"cannot assign a value of type {value_type} to '{node.name}' of type {symbol.type_spec}")
            return
        if isinstance(node, Print):
            self.analyze_value(node.expr)
            return
        if isinstance(node, Input):
            self.resolve_variable(node.name)
            return
        if isinstance(node, If):
            self.require_bool(node.condition, 'if')
            self.analyze_block(node.then_block)
            if node.else_block is not None:
                self.analyze_block(node.else_block)
            return
        if isinstance(node, While):
            self.require_bool(node.condition, 'while')
            self.analyze_block(node.body)
            return
        if isinstance(node, For):
            # the loop variable lives in a scope wrapping the header and the body
            self.enter_scope()
            self.analyze_statement(node.init)
            self.require_bool(node.condition, 'for')
            self.analyze_statement(node.increment)
            self.analyze_block(node.body)
            self.exit_scope()
            return
        if isinstance(node, FunctionDecl):
            self.analyze_function(node)
            return
        if isinstance(node, Return):
            self.analyze_return(node)
            return
        if isinstance(node, ExprStmt):
            self.analyze_expression(node.expr)
            return
        if isinstance(node, Block):
            self.analyze_block(node)
            return
        raise NotImplementedError(f"analyze: unexpected node type {type(node).__name__}")

    def analyze_function(self, node: FunctionDecl):
        if self.function_return is not None or self.scopes[self.current].parent is not None:
            raise SemanticError(f"function '{node.name}' must be declared at top level")
        self.enter_scope()
        for param in node.params:
            if param.name in self.scopes[self.current].symbols:
                raise SemanticError(f"duplicate parameter '{param.name}' in function '{node.name}'")
            self.declare(Symbol(param.name, param.type_spec))
        self.function_return = node.return_type
        try:
            for stmt in node.body.statements:
                self.analyze_statement(stmt)
        finally:
            self.function_return = None
        self.exit_scope()

    def analyze_return(self, node: Return):
        expected = self.function_return
        if expected is None:
            raise SemanticError("'return' outside of a function")
        if node.value is None:
            if expected.kind != 'void':
                raise SemanticError(f"missing return value, expected {expected}")
            return
        if expected.kind == 'void':
            raise SemanticError("a void function cannot return a value")
        actual = self.analyze_value(node.value)
        if not is_compatible(expected, actual):
            raise SemanticError(f"cannot return a value of type {actual} from a function returning {expected}")

    def require_bool(self, condition: Node, construct: str):
        cond_type = self.analyze_value(condition)
        if cond_type.kind != 'bool':
            raise SemanticError(f"'{construct}' condition must be bool, got {cond_type}")

    # Expressions
    def analyze_value(self, node: Node) -> TypeSpec:
        """Type an expression whose result is used as a value."""
        result = self.analyze_expression(node)
        if result.kind == 'void':
            raise SemanticError("a void function call has no value")
        return result

    def analyze_expression(self, node: Node) -> TypeSpec:
        if isinstance(node, Literal):
            return node.value.type
        if isinstance(node, Identifier):
            return self.resolve_variable(node.name).type_spec
        if isinstance(node, UnaryExpr):
            operand = self.analyze_value(node.operand)
            if not operand.is_numeric:
                raise SemanticError(f"unary '{node.op}' expects a numeric operand, got {operand}")
            return operand
        if isinstance(node, BinaryExpr):
            return self.analyze_binary(node)
        if isinstance(node, Call):
            return self.analyze_call(node)
        raise NotImplementedError(f"analyze_expression: unexpected node type {type(node).__name__}")

    def analyze_binary(self, node: BinaryExpr) -> TypeSpec:
        left = self.analyze_value(node.left)
        right = self.analyze_value(node.right)
        op = node.op
        if op in LOGICAL_OPS:
            if left.kind != 'bool' or right.kind != 'bool':
                raise SemanticError(f"operator '{op}' expects bool operands, got {left} and {right}")
            return TypeSpec.boolean()
        # the right operand must fit the left one; only int on the right widens
        if not is_compatible(left, right):
            raise SemanticError(f"incompatible operand types for '{op}': {left} and {right}")
        if op in EQUALITY_OPS:
            return TypeSpec.boolean()
        if op in RELATIONAL_OPS:
            if not left.is_numeric:
                raise SemanticError(f"operator '{op}' expects numeric operands, got {left} and {right}")
            return TypeSpec.boolean()
        if op in ARITHMETIC_OPS:
            if op == '+' and left.kind == 'string' and right.kind == 'string':
                return left
            if not left.is_numeric:
                raise SemanticError(f"operator '{op}' expects numeric operands, got {left} and {right}")
            return left
        raise SemanticError(f"unknown operator '{op}'")

    def analyze_call(self, node: Call) -> TypeSpec:
        symbol = self.resolve(node.name)
        if not symbol.is_function:
            raise SemanticError(f"'{node.name}' is not a function")
        params = symbol.params
        if len(node.args) != len(params):
            raise SemanticError(
                f"function '{node.name}' expects {len(params)} argument(s), got {len(node.args)}")
        for index, (param, arg) in enumerate(zip(params, node.args), start=1):
            arg_type = self.analyze_value(arg)
            if not is_compatible(param.type_spec, arg_type):
                raise SemanticError(
                    f"argument {index} of '{node.name}' must be {param.type_spec}, got {arg_type}")
        return symbol.type_spec


def analyze(program: Program):
    """Check `program`, raising SemanticError at the first violation."""
    SemanticAnalyzer().analyze(program)
