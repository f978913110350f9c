"""
The Beavieeer standard library: native built-ins that need no host I/O.
"""
import inspect
import re
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import yaml

from beavieeer.be_datatypes import (
    BeObject, Integer, String, Array, Function, Builtin, Error, is_truthy,
)

INT64_MAX = 2 ** 63 - 1
NUMBER_RE = re.compile(r'^[+-]?[0-9]+$')

_docs: Optional[Dict[str, Dict[str, Any]]] = None


def builtin_docs() -> Dict[str, Dict[str, Any]]:
    """Loads the built-in documentation table shipped with the package."""
    global _docs
    if _docs is None:
        docs_path = Path(__file__).parent / "be_builtins.yaml"
        with docs_path.open(encoding="utf-8") as f:
            _docs = yaml.safe_load(f) or {}
    return _docs


def to_be_name(method_name: str) -> str:
    """Maps a StdLib method name to its Beavieeer name: `_replace_n` -> `replaceN`."""
    first, *rest = method_name.lstrip('_').split('_')
    return first + ''.join(part.capitalize() for part in rest)


def is_callable(obj: BeObject) -> bool:
    return isinstance(obj, (Function, Builtin))


def wrong_type(name: str, expected: str, *got: BeObject) -> Error:
    found = ", ".join(o.type_name for o in got)
    return Error(f"argument to `{name}` must be {expected}, got {found}")


def not_callable(name: str, position: str, got: BeObject) -> Error:
    return Error(f"{position} argument to `{name}` must be callable, got {got.type_name}")


class StdLib:
    """Contains Python implementations for all core Beavieeer built-ins.

    Every method named `_something` is exposed to scripts under its
    camelCase name. The method's parameter count is the built-in's arity,
    checked before the call.
    """
    def __init__(self, evaluator):
        self.evaluator = evaluator
        self.functions: Dict[str, Callable[..., BeObject]] = {}
        self.arity: Dict[str, int] = {}
        for name, member in inspect.getmembers(self):
            if name.startswith('_') and not name.startswith('__') and callable(member):
                be_name = to_be_name(name)
                self.functions[be_name] = member
                self.arity[be_name] = len(inspect.signature(member).parameters)

    @property
    def names(self) -> List[str]:
        return sorted(self.functions)

    def __contains__(self, name: str) -> bool:
        return name in self.functions

    def invoke(self, name: str, args: List[BeObject]) -> BeObject:
        expected = self.arity[name]
        if len(args) != expected:
            return Error(f"wrong number of arguments to `{name}`: expected {expected}, got {len(args)}")
        return self.functions[name](*args)

    # --- Arrays and strings ---
    def _len(self, obj):
        if isinstance(obj, String):
            return Integer(len(obj.value))
        if isinstance(obj, Array):
            return Integer(len(obj.elements))
        return Error(f"argument to `len` not supported, got {obj.type_name}")

    def _first(self, arr):
        if not isinstance(arr, Array):
            return wrong_type("first", "ARRAY", arr)
        if not arr.elements:
            return Error("`first` called on empty array")
        return arr.elements[0]

    def _last(self, arr):
        if not isinstance(arr, Array):
            return wrong_type("last", "ARRAY", arr)
        if not arr.elements:
            return Error("`last` called on empty array")
        return arr.elements[-1]

    def _tail(self, arr):
        return self.tail_of("tail", arr)

    def _rest(self, arr):
        return self.tail_of("rest", arr)

    def tail_of(self, name, arr):
        if not isinstance(arr, Array):
            return wrong_type(name, "ARRAY", arr)
        if not arr.elements:
            return Error(f"`{name}` called on empty array")
        return Array(arr.elements[1:])

    def _get(self, arr, index):
        if not isinstance(arr, Array) or not isinstance(index, Integer):
            return wrong_type("get", "ARRAY, INTEGER", arr, index)
        if not 0 <= index.value < len(arr.elements):
            return Error(f"index {index.value} out of range for array of length {len(arr.elements)}")
        return arr.elements[index.value]

    def _push(self, arr, value):
        if not isinstance(arr, Array):
            return wrong_type("push", "ARRAY", arr)
        return Array(arr.elements + (value,))

    def _reverse(self, arr):
        if not isinstance(arr, Array):
            return wrong_type("reverse", "ARRAY", arr)
        return Array(arr.elements[::-1])

    def _sort(self, arr):
        if not isinstance(arr, Array):
            return wrong_type("sort", "ARRAY", arr)
        kinds = {type(e) for e in arr.elements}
        if kinds and kinds not in ({Integer}, {String}):
            found = ", ".join(sorted({e.type_name for e in arr.elements}))
            return Error(f"`sort` needs all INTEGER or all STRING elements, got {found}")
        return Array(tuple(sorted(arr.elements, key=lambda e: e.value)))

    # --- Higher-order ---
    def _map(self, arr, fn):
        if not isinstance(arr, Array):
            return wrong_type("map", "ARRAY", arr)
        if not is_callable(fn):
            return not_callable("map", "second", fn)
        out = []
        for element in arr.elements:
            result = self.evaluator.call(fn, [element])
            if isinstance(result, Error):
                return result
            out.append(result)
        return Array(tuple(out))

    def _filter(self, arr, predicate):
        if not isinstance(arr, Array):
            return wrong_type("filter", "ARRAY", arr)
        if not is_callable(predicate):
            return not_callable("filter", "second", predicate)
        out = []
        for element in arr.elements:
            keep = self.evaluator.call(predicate, [element])
            if isinstance(keep, Error):
                return keep
            if is_truthy(keep):
                out.append(element)
        return Array(tuple(out))

    def _fold(self, fn, initial, arr):
        if not is_callable(fn):
            return not_callable("fold", "first", fn)
        if not isinstance(arr, Array):
            return Error(f"third argument to `fold` must be ARRAY, got {arr.type_name}")
        acc = initial
        for element in arr.elements:
            acc = self.evaluator.call(fn, [acc, element])
            if isinstance(acc, Error):
                return acc
        return acc

    # --- String transforms ---
    def _lowercase(self, s):
        if not isinstance(s, String):
            return wrong_type("lowercase", "STRING", s)
        return String(s.value.lower())

    def _uppercase(self, s):
        if not isinstance(s, String):
            return wrong_type("uppercase", "STRING", s)
        return String(s.value.upper())

    def _trim(self, s):
        if not isinstance(s, String):
            return wrong_type("trim", "STRING", s)
        return String(s.value.strip())

    def _explode(self, s):
        if not isinstance(s, String):
            return wrong_type("explode", "STRING", s)
        return Array(tuple(String(c) for c in s.value))

    def _replace_string(self, s, pattern, replacement):
        if not all(isinstance(o, String) for o in (s, pattern, replacement)):
            return wrong_type("replaceString", "STRING, STRING, STRING", s, pattern, replacement)
        return String(s.value.replace(pattern.value, replacement.value))

    def _replace_n(self, s, pattern, replacement, count):
        if not (all(isinstance(o, String) for o in (s, pattern, replacement)) and isinstance(count, Integer)):
            return wrong_type("replaceN", "STRING, STRING, STRING, INTEGER", s, pattern, replacement, count)
        if count.value < 0:
            return Error(f"count for `replaceN` must not be negative, got {count.value}")
        return String(s.value.replace(pattern.value, replacement.value, count.value))

    def _parse_number(self, s):
        if not isinstance(s, String):
            return wrong_type("parseNumber", "STRING", s)
        text = s.value.strip()
        if not NUMBER_RE.match(text) or not -INT64_MAX - 1 <= int(text) <= INT64_MAX:
            return Error(f"could not parse {s.value!r} as a number")
        return Integer(int(text))
