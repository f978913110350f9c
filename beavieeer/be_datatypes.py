"""
Defines the runtime data types for the Beavieeer interpreter.

Every value a program can produce is one of the classes below. Values are
immutable: operations that "change" an array or hash build a new one. The
`Environment` class holds identifier bindings and links to its enclosing
scope; functions capture the environment they were defined in.
"""

from abc import ABC
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from beavieeer.be_ast import Identifier, BlockStatement


# =================================================================
# Abstract Base Classes
# =================================================================

class BeObject(ABC):
    """Abstract base class for all Beavieeer runtime values."""
    type_name = "OBJECT"

    def __repr__(self) -> str:
        from beavieeer.be_printer import Printer
        return Printer().pformat(self)


class Hashable(BeObject):
    """A value that may be used as a hash key."""

    def hash_key(self) -> 'HashKey':
        return HashKey(self.type_name, self.value)  # type: ignore[attr-defined]


# =================================================================
# Core Runtime Types
# =================================================================

@dataclass(frozen=True, repr=False)
class Integer(Hashable):
    value: int
    type_name = "INTEGER"


@dataclass(frozen=True, repr=False)
class String(Hashable):
    value: str
    type_name = "STRING"


@dataclass(frozen=True, repr=False)
class Boolean(Hashable):
    value: bool
    type_name = "BOOLEAN"


class Null(BeObject):
    """The absence of a value. Use the `NULL` singleton."""
    type_name = "NULL"

    def __eq__(self, other):
        return isinstance(other, Null)

    def __hash__(self):
        return hash(Null)


TRUE = Boolean(True)
FALSE = Boolean(False)
NULL = Null()


def native_bool(value: bool) -> Boolean:
    return TRUE if value else FALSE


@dataclass(frozen=True, repr=False)
class Array(BeObject):
    elements: Tuple[BeObject, ...] = ()
    type_name = "ARRAY"

    def __len__(self) -> int:
        return len(self.elements)

    def __iter__(self) -> Iterator[BeObject]:
        return iter(self.elements)


@dataclass(frozen=True)
class HashKey:
    """The identity of a hashable value: its type plus its native value.

    Keeping the type in the key stops `1` and `true` from colliding.
    """
    type_name: str
    value: object


@dataclass(frozen=True, repr=False)
class HashPair:
    key: BeObject
    value: BeObject


@dataclass(frozen=True, repr=False)
class Hash(BeObject):
    """Maps hash keys to the original key object and its value, in insertion order."""
    pairs: Dict[HashKey, HashPair] = field(default_factory=dict)
    type_name = "HASH"

    __hash__ = None  # type: ignore[assignment]

    def __len__(self) -> int:
        return len(self.pairs)

    def get(self, key: Hashable) -> Optional[BeObject]:
        pair = self.pairs.get(key.hash_key())
        return pair.value if pair is not None else None


@dataclass(eq=False, repr=False)
class Function(BeObject):
    """A user-defined function.

    This is a closure: the parameter list, the body, and the environment that
    was active where the `fun` literal was evaluated. Equality is identity.
    """
    parameters: Tuple['Identifier', ...]
    body: 'BlockStatement'
    env: 'Environment'
    type_name = "FUNCTION"


@dataclass(frozen=True, repr=False)
class Builtin(BeObject):
    """A native operation, looked up by name when called."""
    name: str
    type_name = "BUILTIN"


@dataclass(frozen=True, repr=False)
class Error(BeObject):
    """A runtime error. Errors are ordinary values that short-circuit evaluation."""
    message: str
    type_name = "ERROR"


@dataclass(frozen=True, repr=False)
class ReturnValue(BeObject):
    """Signals a `return` until the enclosing function call unwraps it."""
    value: BeObject
    type_name = "RETURN_VALUE"


def is_error(obj: Optional[BeObject]) -> bool:
    return isinstance(obj, Error)


def is_truthy(obj: BeObject) -> bool:
    """Only `false` and `null` are falsy."""
    if isinstance(obj, Null):
        return False
    if isinstance(obj, Boolean):
        return obj.value
    return True


# =================================================================
# Environments
# =================================================================

class Environment:
    """Identifier bindings for one scope, plus a link to the enclosing scope.

    Lookup walks outward and stops at the first binding found. `define`
    only ever writes to this scope; outer scopes are never modified from
    inside.
    """
    def __init__(self, outer: Optional['Environment'] = None):
        self.bindings: Dict[str, BeObject] = {}
        self.outer = outer

    def get(self, name: str) -> Optional[BeObject]:
        env: Optional[Environment] = self
        while env is not None:
            if name in env.bindings:
                return env.bindings[name]
            env = env.outer
        return None

    def define(self, name: str, value: BeObject) -> BeObject:
        self.bindings[name] = value
        return value

    def enclosed(self) -> 'Environment':
        """Creates a child scope of this one."""
        return Environment(outer=self)

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None

    def __repr__(self) -> str:
        keys = ', '.join(self.bindings.keys())
        outer_id = f", outer=#{id(self.outer)}" if self.outer else ""
        return f"<Environment bindings=[{keys}]{outer_id}>"
