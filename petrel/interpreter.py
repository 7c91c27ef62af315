"""Tree-walking interpreter for the Petrel language.

`Interpreter.execute` expects a program that has already passed semantic
analysis, but still checks everything that can only be known at run time:
division by zero, input that does not parse, unassigned variables and the
types of values crossing a call boundary.

Statements report how they finished through a small result type instead of
exceptions. `NORMAL` means carry on with the next statement; `Returning`
means a `return` ran and carries the value back to the call that is being
evaluated. Blocks, conditionals and loops hand a `Returning` result straight
back to their caller without running anything else.
"""

from __future__ import annotations

import logging
import math
import sys
from dataclasses import dataclass
from typing import Dict, Optional, Union

from .ast import (
    Program, Block, VarDecl, Assignment, Print, Input, If, While, For,
    FunctionDecl, Return, ExprStmt, Literal, Identifier, BinaryExpr,
    UnaryExpr, Call, Node,
)
from .environment import Binding, Environment
from .errors import PetrelRuntimeError
from .frontend import parse
from .semantic import analyze
from .types import (
    TypeSpec, Value, IntVal, FloatVal, BoolVal, StrVal,
    wrap_int64, widen, to_string, parse_input,
)


logger = logging.getLogger(__name__)

DEFAULT_MAX_CALL_DEPTH = 1000
# Python frames used per Petrel call, with room for nested expressions
FRAMES_PER_CALL = 20


class Normal:
    """Statement finished; continue with the next one."""
    def __repr__(self) -> str:
        return 'NORMAL'


NORMAL = Normal()


@dataclass(frozen=True)
class Returning:
    """A `return` ran; `value` is None for a bare `return;` in a void function."""
    value: Optional[Value]


ExecResult = Union[Normal, Returning]


class Interpreter:
    """Core interpreter that executes a Petrel AST."""
    def __init__(self, max_call_depth: int = DEFAULT_MAX_CALL_DEPTH):
        self.env = Environment()
        self.functions: Dict[str, FunctionDecl] = {}
        self.max_call_depth = max_call_depth

    # Public API
    def execute(self, program: Program) -> None:
        # Pre-pass: every top-level function is callable from anywhere
        for stmt in program.statements:
            if isinstance(stmt, FunctionDecl):
                self.functions[stmt.name] = stmt
                logger.debug("define function %s", stmt.name)
        body = [stmt for stmt in program.statements if not isinstance(stmt, FunctionDecl)]
        old_limit = sys.getrecursionlimit()
        needed = self.max_call_depth * FRAMES_PER_CALL + 1000
        if needed > old_limit:
            sys.setrecursionlimit(needed)
        try:
            self.execute_block(body)
        except RecursionError:
            raise PetrelRuntimeError("call stack exhausted")
        finally:
            sys.setrecursionlimit(old_limit)

    def execute_block(self, statements) -> ExecResult:
        for stmt in statements:
            result = self.execute_statement(stmt)
            # propagate return signals
            if isinstance(result, Returning):
                return result
        return NORMAL

    def execute_statement(self, node: Node) -> ExecResult:
        if isinstance(node, VarDecl):
            value = None
            if node.initializer is not None:
                value = self.check_type(widen(self.evaluate(node.initializer), node.type_spec),
                                        node.type_spec, f"initializer of '{node.name}'")
            self.env.declare(node.name, node.type_spec, value)
            logger.debug("declare %s: %s = %s", node.name, node.type_spec,
                         'unassigned' if value is None else to_string(value))
            return NORMAL
        if isinstance(node, Assignment):
            binding = self.env.find_assignable(node.name)
            value = widen(self.evaluate(node.value), binding.type_spec)
            self.env.set(node.name, value)
            return NORMAL
        if isinstance(node, Print):
            print(to_string(self.evaluate(node.expr)))
            return NORMAL
        if isinstance(node, Input):
            self.read_input(node.name)
            return NORMAL
        if isinstance(node, If):
            if self.evaluate_condition(node.condition, 'if'):
                return self.execute_block(node.then_block.statements)
            if node.else_block is not None:
                return self.execute_block(node.else_block.statements)
            return NORMAL
        if isinstance(node, While):
            while self.evaluate_condition(node.condition, 'while'):
                result = self.execute_block(node.body.statements)
                if isinstance(result, Returning):
                    return result
            return NORMAL
        if isinstance(node, For):
            self.execute_statement(node.init)
            while self.evaluate_condition(node.condition, 'for'):
                result = self.execute_block(node.body.statements)
                if isinstance(result, Returning):
                    return result
                self.execute_statement(node.increment)
            return NORMAL
        if isinstance(node, Return):
            value = self.evaluate(node.value) if node.value is not None else None
            return Returning(value)
        if isinstance(node, ExprStmt):
            if isinstance(node.expr, Call):
                self.call_function(node.expr)
            else:
                self.evaluate(node.expr)
            return NORMAL
        if isinstance(node, Block):
            return self.execute_block(node.statements)
        if isinstance(node, FunctionDecl):
            raise PetrelRuntimeError(f"function '{node.name}' must be declared at top level")
        raise NotImplementedError(f"execute: unexpected node type {type(node).__name__}")

    def evaluate_condition(self, node: Node, construct: str) -> bool:
        cond = self.evaluate(node)
        if not isinstance(cond, BoolVal):
            raise PetrelRuntimeError(f"'{construct}' condition must be bool, got {cond.type}")
        logger.debug("%s condition -> %s", construct, to_string(cond))
        return cond.value

    def read_input(self, name: str):
        binding: Binding = self.env.lookup(name)
        line = input(f"{name} = ")
        try:
            value = parse_input(line, binding.type_spec)
        except ValueError as e:
            raise PetrelRuntimeError(f"invalid input for '{name}': {e}")
        binding.value = value

    def check_type(self, value: Value, expected: TypeSpec, what: str) -> Value:
        if value.type != expected:
            raise PetrelRuntimeError(f"{what} must be {expected}, got {value.type}")
        return value

    # Expressions
    def evaluate(self, node: Node) -> Value:
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, Identifier):
            return self.env.get(node.name)
        if isinstance(node, UnaryExpr):
            operand = self.evaluate(node.operand)
            if node.op == '-':
                if isinstance(operand, IntVal):
                    return IntVal(wrap_int64(-operand.value))
                if isinstance(operand, FloatVal):
                    return FloatVal(-operand.value)
            elif node.op == '+':
                if isinstance(operand, (IntVal, FloatVal)):
                    return operand
            else:
                raise PetrelRuntimeError(f"unsupported unary operator {node.op}")
            raise PetrelRuntimeError(f"unary {node.op} expects a numeric operand, got {operand.type}")
        if isinstance(node, BinaryExpr):
            left = self.evaluate(node.left)
            # Short-circuit for && and ||
            if node.op in ('&&', '||'):
                if not isinstance(left, BoolVal):
                    raise PetrelRuntimeError(f"operator {node.op} expects bool operands, got {left.type}")
                if node.op == '&&' and not left.value:
                    return left
                if node.op == '||' and left.value:
                    return left
                right = self.evaluate(node.right)
                if not isinstance(right, BoolVal):
                    raise PetrelRuntimeError(f"operator {node.op} expects bool operands, got {right.type}")
                return right
            right = self.evaluate(node.right)
            return self.apply_binary_op(node.op, left, right)
        if isinstance(node, Call):
            result = self.call_function(node)
            if result is None:
                raise PetrelRuntimeError(f"function '{node.name}' does not return a value")
            return result
        raise NotImplementedError(f"evaluate: unexpected node type {type(node).__name__}")

    def call_function(self, node: Call) -> Optional[Value]:
        func = self.functions.get(node.name)
        if func is None:
            raise PetrelRuntimeError(f"undefined function '{node.name}'")
        if len(node.args) != len(func.params):
            raise PetrelRuntimeError(
                f"function '{func.name}' expects {len(func.params)} argument(s), got {len(node.args)}")
        if self.env.depth >= self.max_call_depth:
            raise PetrelRuntimeError(f"maximum call depth {self.max_call_depth} exceeded in '{func.name}'")
        # Arguments are evaluated in the caller's frame
        frame: Dict[str, Binding] = {}
        for index, (param, arg) in enumerate(zip(func.params, node.args), start=1):
            value = widen(self.evaluate(arg), param.type_spec)
            self.check_type(value, param.type_spec, f"argument {index} of '{func.name}'")
            frame[param.name] = Binding(param.type_spec, value)
        logger.debug("call %s(%s)", func.name, ', '.join(to_string(b.value) for b in frame.values()))
        self.env.push_frame(frame)
        try:
            result = self.execute_block(func.body.statements)
        finally:
            self.env.pop_frame()
        if func.return_type.kind == 'void':
            if isinstance(result, Returning) and result.value is not None:
                raise PetrelRuntimeError(f"void function '{func.name}' returned a value")
            return None
        if not isinstance(result, Returning) or result.value is None:
            raise PetrelRuntimeError(f"function '{func.name}' must return a value of type {func.return_type}")
        value = widen(result.value, func.return_type)
        return self.check_type(value, func.return_type, f"return value of '{func.name}'")

    def apply_binary_op(self, op: str, a: Value, b: Value) -> Value:
        # a float on the left promotes an int on the right
        if isinstance(a, FloatVal) and isinstance(b, IntVal):
            b = FloatVal(float(b.value))
        if op in ('==', '!='):
            if type(a) is not type(b):
                raise PetrelRuntimeError(f"cannot compare {a.type} with {b.type}")
            equal = a.value == b.value
            return BoolVal(equal if op == '==' else not equal)
        if isinstance(a, IntVal) and isinstance(b, IntVal):
            return self.int_op(op, a.value, b.value)
        if isinstance(a, FloatVal) and isinstance(b, FloatVal):
            return self.float_op(op, a.value, b.value)
        if op == '+' and isinstance(a, StrVal) and isinstance(b, StrVal):
            return StrVal(a.value + b.value)
        raise PetrelRuntimeError(f"unsupported {op} for {a.type} and {b.type}")

    def int_op(self, op: str, x: int, y: int) -> Value:
        if op == '+':
            return IntVal(wrap_int64(x + y))
        if op == '-':
            return IntVal(wrap_int64(x - y))
        if op == '*':
            return IntVal(wrap_int64(x * y))
        if op in ('/', '%'):
            if y == 0:
                raise PetrelRuntimeError('division by zero' if op == '/' else 'modulo by zero')
            # truncate toward zero; the remainder takes the dividend's sign
            quotient = abs(x) // abs(y)
            if (x < 0) != (y < 0):
                quotient = -quotient
            if op == '/':
                return IntVal(wrap_int64(quotient))
            return IntVal(x - y * quotient)
        return self.compare(op, x, y)

    def float_op(self, op: str, x: float, y: float) -> Value:
        if op == '+':
            return FloatVal(x + y)
        if op == '-':
            return FloatVal(x - y)
        if op == '*':
            return FloatVal(x * y)
        if op == '/':
            if y == 0.0:
                raise PetrelRuntimeError('division by zero')
            return FloatVal(x / y)
        if op == '%':
            if y == 0.0:
                raise PetrelRuntimeError('modulo by zero')
            return FloatVal(math.fmod(x, y))
        return self.compare(op, x, y)

    def compare(self, op: str, x, y) -> Value:
        if op == '<':
            return BoolVal(x < y)
        if op == '<=':
            return BoolVal(x <= y)
        if op == '>':
            return BoolVal(x > y)
        if op == '>=':
            return BoolVal(x >= y)
        raise PetrelRuntimeError(f"unknown operator {op}")


def run_source(source: str, parser: str = 'descent', max_call_depth: int = DEFAULT_MAX_CALL_DEPTH) -> Interpreter:
    """Lex, parse, analyze and execute Petrel source, returning the interpreter used."""
    program = parse(source, parser)
    analyze(program)
    interpreter = Interpreter(max_call_depth=max_call_depth)
    interpreter.execute(program)
    return interpreter


def run_file(file_path: str, parser: str = 'descent', max_call_depth: int = DEFAULT_MAX_CALL_DEPTH) -> Interpreter:
    """Read a Petrel file and run it like `run_source`."""
    with open(file_path, 'r', encoding='utf-8') as f:
        source = f.read()
    return run_source(source, parser=parser, max_call_depth=max_call_depth)
