from dataclasses import dataclass
from typing import Dict, List, Optional

from petrel.errors import PetrelRuntimeError
from petrel.types import TypeSpec, Value


@dataclass
class Binding:
    """A declared variable: its declared type and current value (None while unassigned)."""
    type_spec: TypeSpec
    value: Optional[Value] = None


class Environment:
    """Runtime bindings: a global scope plus a stack of call frames.

    While a call is active only its own frame is visible to reads; globals
    are reached again once the frame is popped. Assignment looks in the
    active frame first and then falls back to the globals.
    """
    def __init__(self):
        self.globals: Dict[str, Binding] = {}
        self.frames: List[Dict[str, Binding]] = []

    @property
    def depth(self) -> int:
        return len(self.frames)

    def current(self) -> Dict[str, Binding]:
        return self.frames[-1] if self.frames else self.globals

    def push_frame(self, frame: Dict[str, Binding]):
        self.frames.append(frame)

    def pop_frame(self):
        self.frames.pop()

    def declare(self, name: str, type_spec: TypeSpec, value: Optional[Value]):
        # blocks do not open runtime scopes, so re-running a declaration rebinds it
        self.current()[name] = Binding(type_spec, value)

    def lookup(self, name: str) -> Binding:
        scope = self.current()
        if name in scope:
            return scope[name]
        raise PetrelRuntimeError(f"undefined variable '{name}'")

    def get(self, name: str) -> Value:
        binding = self.lookup(name)
        if binding.value is None:
            raise PetrelRuntimeError(f"variable '{name}' used before it was assigned")
        return binding.value

    def find_assignable(self, name: str) -> Binding:
        if self.frames and name in self.frames[-1]:
            return self.frames[-1][name]
        if name in self.globals:
            return self.globals[name]
        raise PetrelRuntimeError(f"assignment to undeclared variable '{name}'")

    def set(self, name: str, value: Value):
        binding = self.find_assignable(name)
        if value.type != binding.type_spec:
            raise PetrelRuntimeError(
                f"cannot store a value of type {value.type} in '{name}' of type {binding.type_spec}")
        binding.value = value
