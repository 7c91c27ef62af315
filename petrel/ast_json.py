"""JSON serialization/deserialization for Petrel AST.

This module converts between Petrel AST dataclasses and plain Python
dict/list structures suitable for JSON encoding. Literals keep their value
tag, so an `int` literal and a `float` literal with the same magnitude stay
distinct after a round-trip.
"""

from __future__ import annotations

from typing import Any, Dict

from .ast import (
    Program, Block, VarDecl, Assignment, Print, Input, If, While, For,
    Param, FunctionDecl, Return, ExprStmt, Literal, Identifier, BinaryExpr,
    UnaryExpr, Call,
)
from .errors import ParseError
from .types import (
    TypeSpec, Value, IntVal, FloatVal, BoolVal, CharVal, StrVal,
    VALUE_TYPE_NAMES, RETURN_TYPE_NAMES,
)


VALUE_TAGS = {
    IntVal: 'int',
    FloatVal: 'float',
    BoolVal: 'bool',
    CharVal: 'char',
    StrVal: 'string',
}
VALUE_CLASSES = {tag: cls for cls, tag in VALUE_TAGS.items()}


def value_to_obj(v: Value) -> Dict[str, Any]:
    return {"tag": VALUE_TAGS[type(v)], "value": v.value}


def value_from_obj(o: Dict[str, Any]) -> Value:
    if not isinstance(o, dict) or o.get("tag") not in VALUE_CLASSES or "value" not in o:
        raise ParseError(f"invalid literal value in AST: {o!r}")
    cls = VALUE_CLASSES[o["tag"]]
    if cls is FloatVal:
        return FloatVal(float(o["value"]))
    return cls(o["value"])


def ast_to_obj(node: Any) -> Any:
    if node is None:
        return None

    if isinstance(node, Program):
        return {"type": "Program", "statements": [ast_to_obj(s) for s in node.statements]}
    if isinstance(node, Block):
        return {"type": "Block", "statements": [ast_to_obj(s) for s in node.statements]}
    if isinstance(node, VarDecl):
        return {
            "type": "VarDecl",
            "name": node.name,
            "type_spec": node.type_spec.kind,
            "initializer": ast_to_obj(node.initializer),
        }
    if isinstance(node, Assignment):
        return {"type": "Assignment", "name": node.name, "value": ast_to_obj(node.value)}
    if isinstance(node, Print):
        return {"type": "Print", "expr": ast_to_obj(node.expr)}
    if isinstance(node, Input):
        return {"type": "Input", "name": node.name}
    if isinstance(node, If):
        return {
            "type": "If",
            "condition": ast_to_obj(node.condition),
            "then_block": ast_to_obj(node.then_block),
            "else_block": ast_to_obj(node.else_block),
        }
    if isinstance(node, While):
        return {"type": "While", "condition": ast_to_obj(node.condition), "body": ast_to_obj(node.body)}
    if isinstance(node, For):
        return {
            "type": "For",
            "init": ast_to_obj(node.init),
            "condition": ast_to_obj(node.condition),
            "increment": ast_to_obj(node.increment),
            "body": ast_to_obj(node.body),
        }
    if isinstance(node, FunctionDecl):
        return {
            "type": "FunctionDecl",
            "name": node.name,
            "params": [{"name": p.name, "type_spec": p.type_spec.kind} for p in node.params],
            "return_type": node.return_type.kind,
            "body": ast_to_obj(node.body),
        }
    if isinstance(node, Return):
        return {"type": "Return", "value": ast_to_obj(node.value)}
    if isinstance(node, ExprStmt):
        return {"type": "ExprStmt", "expr": ast_to_obj(node.expr)}
    if isinstance(node, Literal):
        return {"type": "Literal", "value": value_to_obj(node.value)}
    if isinstance(node, Identifier):
        return {"type": "Identifier", "name": node.name}
    if isinstance(node, BinaryExpr):
        return {"type": "BinaryExpr", "op": node.op, "left": ast_to_obj(node.left), "right": ast_to_obj(node.right)}
    if isinstance(node, UnaryExpr):
        return {"type": "UnaryExpr", "op": node.op, "operand": ast_to_obj(node.operand)}
    if isinstance(node, Call):
        return {"type": "Call", "name": node.name, "args": [ast_to_obj(a) for a in node.args]}

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def require(obj: Dict[str, Any], key: str) -> Any:
    if obj.get(key) is None:
        raise ParseError(f"AST node {obj.get('type')!r} is missing field {key!r}")
    return obj[key]


def require_list(obj: Dict[str, Any], key: str) -> list:
    items = require(obj, key)
    if not isinstance(items, list):
        raise ParseError(f"field {key!r} of AST node {obj.get('type')!r} must be a list")
    return items


def type_spec_from_obj(name: Any, allow_void: bool = False) -> TypeSpec:
    names = RETURN_TYPE_NAMES if allow_void else VALUE_TYPE_NAMES
    if name not in names:
        raise ParseError(f"unknown type {name!r} in AST")
    return TypeSpec(name)


def ast_from_obj(obj: Any) -> Any:
    if obj is None:
        return None
    if not isinstance(obj, dict):
        raise ParseError(f"invalid AST object: {obj!r}")
    t = obj.get("type")
    if t == "Program":
        return Program(tuple(ast_from_obj(s) for s in require_list(obj, "statements")))
    if t == "Block":
        return Block(tuple(ast_from_obj(s) for s in require_list(obj, "statements")))
    if t == "VarDecl":
        return VarDecl(
            name=require(obj, "name"),
            type_spec=type_spec_from_obj(require(obj, "type_spec")),
            initializer=ast_from_obj(obj.get("initializer")),
        )
    if t == "Assignment":
        return Assignment(name=require(obj, "name"), value=ast_from_obj(require(obj, "value")))
    if t == "Print":
        return Print(expr=ast_from_obj(require(obj, "expr")))
    if t == "Input":
        return Input(name=require(obj, "name"))
    if t == "If":
        return If(
            condition=ast_from_obj(require(obj, "condition")),
            then_block=ast_from_obj(require(obj, "then_block")),
            else_block=ast_from_obj(obj.get("else_block")),
        )
    if t == "While":
        return While(condition=ast_from_obj(require(obj, "condition")), body=ast_from_obj(require(obj, "body")))
    if t == "For":
        return For(
            init=ast_from_obj(require(obj, "init")),
            condition=ast_from_obj(require(obj, "condition")),
            increment=ast_from_obj(require(obj, "increment")),
            body=ast_from_obj(require(obj, "body")),
        )
    if t == "FunctionDecl":
        return FunctionDecl(
            name=require(obj, "name"),
            params=tuple(Param(require(p, "name"), type_spec_from_obj(require(p, "type_spec")))
                         for p in require_list(obj, "params")),
            return_type=type_spec_from_obj(require(obj, "return_type"), allow_void=True),
            body=ast_from_obj(require(obj, "body")),
        )
    if t == "Return":
        return Return(value=ast_from_obj(obj.get("value")))
    if t == "ExprStmt":
        return ExprStmt(expr=ast_from_obj(require(obj, "expr")))
    if t == "Literal":
        return Literal(value=value_from_obj(require(obj, "value")))
    if t == "Identifier":
        return Identifier(name=require(obj, "name"))
    if t == "BinaryExpr":
        return BinaryExpr(
            left=ast_from_obj(require(obj, "left")),
            op=require(obj, "op"),
            right=ast_from_obj(require(obj, "right")),
        )
    if t == "UnaryExpr":
        return UnaryExpr(op=require(obj, "op"), operand=ast_from_obj(require(obj, "operand")))
    if t == "Call":
        return Call(name=require(obj, "name"), args=tuple(ast_from_obj(a) for a in require_list(obj, "args")))

    raise ParseError(f"Unknown AST node type: {t}")
