"""
AST node definitions produced by the Beavieeer parser.

Nodes are frozen dataclasses holding tuples, so a parsed tree can't be
changed after the parser hands it over. `str(node)` renders a fully
parenthesised form of the source, which the parser tests use to check
precedence.
"""
from dataclasses import dataclass
from typing import Optional, Tuple

__all__ = (
    'Node',
    'Statement',
    'Expression',
    'Program',
    'LetStatement',
    'ReturnStatement',
    'ExpressionStatement',
    'BlockStatement',
    'Identifier',
    'IntegerLiteral',
    'StringLiteral',
    'BooleanLiteral',
    'ArrayLiteral',
    'HashLiteral',
    'PrefixExpression',
    'InfixExpression',
    'IfExpression',
    'FunctionLiteral',
    'CallExpression',
    'IndexExpression',
)


class Node:
    pass


class Statement(Node):
    pass


class Expression(Node):
    pass


# --- Expressions ---

@dataclass(frozen=True)
class Identifier(Expression):
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class IntegerLiteral(Expression):
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class StringLiteral(Expression):
    value: str

    def __str__(self) -> str:
        escaped = self.value.replace('\\', '\\\\').replace('"', '\\"')
        return f'"{escaped}"'


@dataclass(frozen=True)
class BooleanLiteral(Expression):
    value: bool

    def __str__(self) -> str:
        return 'true' if self.value else 'false'


@dataclass(frozen=True)
class ArrayLiteral(Expression):
    elements: Tuple[Expression, ...]

    def __str__(self) -> str:
        return '[' + ', '.join(str(e) for e in self.elements) + ']'


@dataclass(frozen=True)
class HashLiteral(Expression):
    pairs: Tuple[Tuple[Expression, Expression], ...]

    def __str__(self) -> str:
        return '{' + ', '.join(f'{k}: {v}' for k, v in self.pairs) + '}'


@dataclass(frozen=True)
class PrefixExpression(Expression):
    operator: str
    right: Expression

    def __str__(self) -> str:
        return f'({self.operator}{self.right})'


@dataclass(frozen=True)
class InfixExpression(Expression):
    left: Expression
    operator: str
    right: Expression

    def __str__(self) -> str:
        return f'({self.left} {self.operator} {self.right})'


@dataclass(frozen=True)
class IfExpression(Expression):
    condition: Expression
    consequence: 'BlockStatement'
    alternative: Optional['BlockStatement'] = None

    def __str__(self) -> str:
        out = f'if ({self.condition}) {self.consequence}'
        if self.alternative is not None:
            out += f' else {self.alternative}'
        return out


@dataclass(frozen=True)
class FunctionLiteral(Expression):
    parameters: Tuple[Identifier, ...]
    body: 'BlockStatement'

    def __str__(self) -> str:
        params = ', '.join(str(p) for p in self.parameters)
        return f'fun({params}) {self.body}'


@dataclass(frozen=True)
class CallExpression(Expression):
    function: Expression
    arguments: Tuple[Expression, ...]

    def __str__(self) -> str:
        return f'{self.function}(' + ', '.join(str(a) for a in self.arguments) + ')'


@dataclass(frozen=True)
class IndexExpression(Expression):
    left: Expression
    index: Expression

    def __str__(self) -> str:
        return f'({self.left}[{self.index}])'


# --- Statements ---

@dataclass(frozen=True)
class LetStatement(Statement):
    name: Identifier
    value: Expression

    def __str__(self) -> str:
        return f'let {self.name} = {self.value};'


@dataclass(frozen=True)
class ReturnStatement(Statement):
    value: Expression

    def __str__(self) -> str:
        return f'return {self.value};'


@dataclass(frozen=True)
class ExpressionStatement(Statement):
    expression: Expression

    def __str__(self) -> str:
        return str(self.expression)


@dataclass(frozen=True)
class BlockStatement(Statement):
    statements: Tuple[Statement, ...]

    def __str__(self) -> str:
        return '{ ' + '; '.join(str(s).rstrip(';') for s in self.statements) + ' }'


@dataclass(frozen=True)
class Program(Node):
    statements: Tuple[Statement, ...]

    def __str__(self) -> str:
        return ' '.join(
            str(s) if not isinstance(s, ExpressionStatement) else f'{s};'
            for s in self.statements
        )
