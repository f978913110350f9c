"""
Host-supplied built-ins: console and file I/O.

The evaluator reaches these only through `Host.invoke(name, args)`, and a
failure comes back as an `Error` value rather than an exception.
"""
import logging
import os
from typing import Callable, Dict, List, Optional

from beavieeer.be_datatypes import BeObject, String, Error, NULL
from beavieeer.be_printer import Printer

logger = logging.getLogger(__name__)


def _resolve_path(path: str, base_dir: Optional[str]) -> str:
    if path.startswith("~"):
        return os.path.expanduser(path)
    if os.path.isabs(path):
        return path
    base = base_dir or os.getcwd()
    return os.path.normpath(os.path.join(base, path))


def _arity_error(name: str, expected: str, got: int) -> Error:
    return Error(f"wrong number of arguments to `{name}`: expected {expected}, got {got}")


class Host:
    """I/O built-ins for scripts run from the REPL or a file.

    `print` always records a `stdout` side effect. Without an `output_func`
    nothing is written and the caller decides what to show; the driver
    passes one so output appears in order with `read` prompts.
    """
    names = ("print", "read", "readFile", "writeFile")

    def __init__(self, side_effects: Optional[List[Dict]] = None,
                 input_func: Callable[[str], str] = input,
                 base_dir: Optional[str] = None,
                 output_func: Optional[Callable[[str], None]] = None):
        self.side_effects: List[Dict] = side_effects if side_effects is not None else []
        self.input_func = input_func
        # When set, `print` output is written as it happens, so it shows up
        # before any later `read` prompt.
        self.output_func = output_func
        # Directory that relative paths in readFile/writeFile resolve against.
        self.base_dir = base_dir
        self.printer = Printer()
        self._handlers: Dict[str, Callable[[List[BeObject]], BeObject]] = {
            "print": self.print_values,
            "read": self.read_line,
            "readFile": self.read_file,
            "writeFile": self.write_file,
        }

    def invoke(self, name: str, args: List[BeObject]) -> BeObject:
        handler = self._handlers.get(name)
        if handler is None:
            return Error(f"unknown builtin: {name}")
        return handler(args)

    def print_values(self, args: List[BeObject]) -> BeObject:
        for arg in args:
            message = self.printer.pstr(arg)
            self.side_effects.append({'topics': ['stdout'], 'message': message})
            if self.output_func is not None:
                self.output_func(message)
        return NULL

    def read_line(self, args: List[BeObject]) -> BeObject:
        if len(args) > 1:
            return _arity_error("read", "0 or 1", len(args))
        prompt = ""
        if args:
            if not isinstance(args[0], String):
                return Error(f"argument to `read` must be STRING, got {args[0].type_name}")
            prompt = args[0].value
        try:
            line = self.input_func(prompt)
        except EOFError:
            return Error("`read` reached end of input")
        return String(line.rstrip("\n"))

    def read_file(self, args: List[BeObject]) -> BeObject:
        if len(args) != 1:
            return _arity_error("readFile", "1", len(args))
        if not isinstance(args[0], String):
            return Error(f"argument to `readFile` must be STRING, got {args[0].type_name}")
        path = _resolve_path(args[0].value, self.base_dir)
        logger.debug("readFile %s", path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                return String(f.read())
        except OSError as e:
            return Error(f"could not read file {args[0].value!r}: {e.strerror or e}")
        except UnicodeDecodeError:
            return Error(f"could not read file {args[0].value!r}: not valid UTF-8 text")

    def write_file(self, args: List[BeObject]) -> BeObject:
        if len(args) != 2:
            return _arity_error("writeFile", "2", len(args))
        target, content = args
        if not isinstance(target, String):
            return Error(f"first argument to `writeFile` must be STRING, got {target.type_name}")
        path = _resolve_path(target.value, self.base_dir)
        logger.debug("writeFile %s", path)
        try:
            with open(path, "w", encoding="utf-8") as f:
                f.write(self.printer.pstr(content))
        except OSError as e:
            return Error(f"could not write file {target.value!r}: {e.strerror or e}")
        return NULL
