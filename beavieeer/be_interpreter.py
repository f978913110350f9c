"""
The core Beavieeer interpreter: a tree-walking Evaluator.

Runtime problems are never raised. They come back as `Error` values, and
every step that combines sub-results checks for one and passes it up
unchanged. A `return` travels the same way as a `ReturnValue` signal until
the enclosing function call unwraps it.
"""
import logging
from typing import List, Optional, Sequence, Union

from beavieeer.be_ast import (
    Program, LetStatement, ReturnStatement, ExpressionStatement, BlockStatement,
    Identifier, IntegerLiteral, StringLiteral, BooleanLiteral, ArrayLiteral, HashLiteral,
    PrefixExpression, InfixExpression, IfExpression, FunctionLiteral, CallExpression,
    IndexExpression, Expression,
)
from beavieeer.be_builtins import StdLib
from beavieeer.be_datatypes import (
    BeObject, Integer, String, Array, Hash, HashPair, Hashable, Function,
    Builtin, Error, ReturnValue, Environment, NULL, native_bool, is_truthy,
)

logger = logging.getLogger(__name__)

INT64_MIN = -2 ** 63
INT64_MAX = 2 ** 63 - 1


def interrupts(obj: BeObject) -> bool:
    """True for values that must abort the enclosing evaluation: errors and return signals."""
    return isinstance(obj, (Error, ReturnValue))


def values_equal(left: BeObject, right: BeObject) -> bool:
    if isinstance(left, Function) or isinstance(right, Function):
        return left is right
    return left == right


class Evaluator:
    """The Beavieeer execution engine."""

    def __init__(self, host=None):
        # Supplies print/read/readFile/writeFile; see be_host.Host.
        self.host = host
        self.stdlib = StdLib(self)

    def eval(self, node, env: Environment) -> BeObject:
        """Reduces an AST node to a value in the given environment."""
        match node:
            case Program():
                return self.eval_program(node, env)

            # --- Statements ---
            case ExpressionStatement(expression=expression):
                return self.eval(expression, env)

            case LetStatement(name=name, value=value_node):
                value = self.eval(value_node, env)
                if interrupts(value):
                    return value
                env.define(name.name, value)
                return NULL

            case ReturnStatement(value=value_node):
                value = self.eval(value_node, env)
                if interrupts(value):
                    return value
                return ReturnValue(value)

            case BlockStatement():
                return self.eval_block(node, env)

            # --- Literals ---
            case IntegerLiteral(value=value):
                return Integer(value)

            case StringLiteral(value=value):
                return String(value)

            case BooleanLiteral(value=value):
                return native_bool(value)

            case ArrayLiteral(elements=elements):
                values = self.eval_expressions(elements, env)
                if isinstance(values, BeObject):
                    return values
                return Array(tuple(values))

            case HashLiteral():
                return self.eval_hash_literal(node, env)

            case FunctionLiteral(parameters=parameters, body=body):
                logger.debug(
                    "closure created: params=(%s), env=#%x",
                    ", ".join(p.name for p in parameters), id(env),
                )
                return Function(parameters, body, env)

            # --- Expressions ---
            case Identifier(name=name):
                return self.eval_identifier(name, env)

            case PrefixExpression(operator=operator, right=right_node):
                right = self.eval(right_node, env)
                if interrupts(right):
                    return right
                return self.eval_prefix(operator, right)

            case InfixExpression(left=left_node, operator=operator, right=right_node):
                left = self.eval(left_node, env)
                if interrupts(left):
                    return left
                right = self.eval(right_node, env)
                if interrupts(right):
                    return right
                return self.eval_infix(operator, left, right)

            case IfExpression(condition=condition_node, consequence=consequence, alternative=alternative):
                condition = self.eval(condition_node, env)
                if interrupts(condition):
                    return condition
                if is_truthy(condition):
                    return self.eval_block(consequence, env.enclosed())
                if alternative is not None:
                    return self.eval_block(alternative, env.enclosed())
                return NULL

            case CallExpression(function=function_node, arguments=argument_nodes):
                function = self.eval(function_node, env)
                if interrupts(function):
                    return function
                args = self.eval_expressions(argument_nodes, env)
                if isinstance(args, BeObject):
                    return args
                return self.call(function, args)

            case IndexExpression(left=left_node, index=index_node):
                left = self.eval(left_node, env)
                if interrupts(left):
                    return left
                index = self.eval(index_node, env)
                if interrupts(index):
                    return index
                return self.eval_index(left, index)

            case _:
                raise TypeError(f"cannot evaluate {type(node).__name__}")

    def eval_program(self, program: Program, env: Environment) -> BeObject:
        result: BeObject = NULL
        for statement in program.statements:
            result = self.eval(statement, env)
            if isinstance(result, ReturnValue):
                return result.value
            if isinstance(result, Error):
                return result
        return result

    def eval_block(self, block: BlockStatement, env: Environment) -> BeObject:
        # ReturnValue is passed up still wrapped so outer blocks stop too.
        result: BeObject = NULL
        for statement in block.statements:
            result = self.eval(statement, env)
            if interrupts(result):
                return result
        return result

    def eval_expressions(self, nodes: Sequence[Expression], env: Environment) -> Union[List[BeObject], BeObject]:
        """Evaluates left to right; returns the first error or return signal instead of a list."""
        values = []
        for node in nodes:
            value = self.eval(node, env)
            if interrupts(value):
                return value
            values.append(value)
        return values

    def eval_identifier(self, name: str, env: Environment) -> BeObject:
        value = env.get(name)
        if value is not None:
            return value
        if name in self.stdlib:
            return Builtin(name)
        if self.host is not None and name in self.host.names:
            return Builtin(name)
        return Error(f"identifier not found: {name}")

    def eval_prefix(self, operator: str, right: BeObject) -> BeObject:
        match operator:
            case "!":
                return native_bool(not is_truthy(right))
            case "-" if isinstance(right, Integer):
                return self.check_int(-right.value, f"-{right.value}")
            case "+" if isinstance(right, Integer):
                return right
        return Error(f"unknown operator: {operator}{right.type_name}")

    def eval_infix(self, operator: str, left: BeObject, right: BeObject) -> BeObject:
        match (left, right):
            case (Integer(), Integer()):
                return self.eval_integer_infix(operator, left.value, right.value)
            case (String(), String()):
                result = self.eval_string_infix(operator, left.value, right.value)
                if result is not None:
                    return result
            case (Array(), Array()) if operator == "+":
                return Array(left.elements + right.elements)

        if operator == "==":
            return native_bool(values_equal(left, right))
        if operator == "!=":
            return native_bool(not values_equal(left, right))
        if type(left) is not type(right):
            return Error(f"type mismatch: {left.type_name} {operator} {right.type_name}")
        return Error(f"unknown operator: {left.type_name} {operator} {right.type_name}")

    def eval_integer_infix(self, operator: str, a: int, b: int) -> BeObject:
        match operator:
            case "+":
                result = a + b
            case "-":
                result = a - b
            case "*":
                result = a * b
            case "/":
                if b == 0:
                    return Error("division by zero")
                # Truncate toward zero.
                quotient = abs(a) // abs(b)
                result = quotient if (a < 0) == (b < 0) else -quotient
            case "<":
                return native_bool(a < b)
            case "<=":
                return native_bool(a <= b)
            case ">":
                return native_bool(a > b)
            case ">=":
                return native_bool(a >= b)
            case "==":
                return native_bool(a == b)
            case "!=":
                return native_bool(a != b)
            case _:
                return Error(f"unknown operator: INTEGER {operator} INTEGER")
        return self.check_int(result, f"{a} {operator} {b}")

    def eval_string_infix(self, operator: str, a: str, b: str) -> Optional[BeObject]:
        match operator:
            case "+":
                return String(a + b)
            case "<":
                return native_bool(a < b)
            case "<=":
                return native_bool(a <= b)
            case ">":
                return native_bool(a > b)
            case ">=":
                return native_bool(a >= b)
        return None

    def check_int(self, value: int, expression: str) -> BeObject:
        if not INT64_MIN <= value <= INT64_MAX:
            return Error(f"integer overflow: {expression}")
        return Integer(value)

    def eval_index(self, left: BeObject, index: BeObject) -> BeObject:
        match left:
            case Array(elements=elements):
                if not isinstance(index, Integer):
                    return Error(f"array index must be INTEGER, got {index.type_name}")
                if 0 <= index.value < len(elements):
                    return elements[index.value]
                return NULL
            case Hash():
                if not isinstance(index, Hashable):
                    return Error(f"unusable as hash key: {index.type_name}")
                value = left.get(index)
                return value if value is not None else NULL
        return Error(f"index operator not supported: {left.type_name}")

    def eval_hash_literal(self, node: HashLiteral, env: Environment) -> BeObject:
        pairs = {}
        for key_node, value_node in node.pairs:
            key = self.eval(key_node, env)
            if interrupts(key):
                return key
            if not isinstance(key, Hashable):
                return Error(f"unusable as hash key: {key.type_name}")
            value = self.eval(value_node, env)
            if interrupts(value):
                return value
            pairs[key.hash_key()] = HashPair(key, value)
        return Hash(pairs)

    def call(self, function: BeObject, args: Sequence[BeObject]) -> BeObject:
        """Calls a Function or Builtin with already-evaluated arguments."""
        match function:
            case Function(parameters=parameters, body=body, env=closure):
                if len(args) != len(parameters):
                    return Error(
                        f"wrong number of arguments: expected {len(parameters)}, got {len(args)}"
                    )
                logger.debug("call fun(%s) with %d args", ", ".join(p.name for p in parameters), len(args))
                call_env = closure.enclosed()
                for parameter, arg in zip(parameters, args):
                    call_env.define(parameter.name, arg)
                result = self.eval_block(body, call_env)
                if isinstance(result, ReturnValue):
                    return result.value
                return result

            case Builtin(name=name):
                logger.debug("call builtin %s with %d args", name, len(args))
                if name in self.stdlib:
                    return self.stdlib.invoke(name, list(args))
                if self.host is not None and name in self.host.names:
                    return self.host.invoke(name, list(args))
                return Error(f"unknown builtin: {name}")

        return Error(f"not a function: {function.type_name}")
