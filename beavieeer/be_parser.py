"""
The Beavieeer parser: recursive descent for statements, Pratt parsing for
expressions.

Syntax errors are collected as `Diagnostic` records instead of stopping the
parse. After an error the parser skips ahead to the next statement boundary
and carries on, so a single pass can report several independent problems.
"""
import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Dict, Iterator, List, Optional, Tuple, Union

from beavieeer.be_ast import (
    Program, Statement, Expression, LetStatement, ReturnStatement, ExpressionStatement,
    BlockStatement, Identifier, IntegerLiteral, StringLiteral, BooleanLiteral,
    ArrayLiteral, HashLiteral, PrefixExpression, InfixExpression, IfExpression,
    FunctionLiteral, CallExpression, IndexExpression,
)
from beavieeer.be_lexer import Lexer
from beavieeer.be_token import Token, TokenType, TOKEN_DISPLAY, describe

logger = logging.getLogger(__name__)

INT64_MAX = 2 ** 63 - 1


class Precedence(IntEnum):
    LOWEST = 1
    EQUALS = 2       # == !=
    LESSGREATER = 3  # < > <= >=
    SUM = 4          # + -
    PRODUCT = 5      # * /
    PREFIX = 6       # -x !x +x
    CALL = 7         # f(x)
    INDEX = 8        # a[i]


PRECEDENCES = {
    TokenType.Eq: Precedence.EQUALS,
    TokenType.NotEq: Precedence.EQUALS,
    TokenType.Lt: Precedence.LESSGREATER,
    TokenType.LtEq: Precedence.LESSGREATER,
    TokenType.Gt: Precedence.LESSGREATER,
    TokenType.GtEq: Precedence.LESSGREATER,
    TokenType.Plus: Precedence.SUM,
    TokenType.Minus: Precedence.SUM,
    TokenType.Asterisk: Precedence.PRODUCT,
    TokenType.Slash: Precedence.PRODUCT,
    TokenType.LParen: Precedence.CALL,
    TokenType.LBracket: Precedence.INDEX,
}


@dataclass(frozen=True)
class Diagnostic:
    """A syntax error found while parsing."""
    message: str
    line: int
    col: int

    def __str__(self) -> str:
        return f"line {self.line}, col {self.col}: {self.message}"


class ParseError(Exception):
    """Unwinds the parser to the nearest recovery point."""


class Parser:
    def __init__(self, tokens: Union[Lexer, Iterator[Token]]) -> None:
        self.tokens = iter(tokens)
        self.errors: List[Diagnostic] = []
        # Hash literals whose closing brace has not been seen yet.
        self.open_hashes = 0

        self.previous: Optional[Token] = None
        self.current: Token = next(self.tokens)

        self.prefix_rules: Dict[TokenType, Callable[[], Expression]] = {
            TokenType.Ident: self.parse_identifier,
            TokenType.Int: self.parse_integer_literal,
            TokenType.String: self.parse_string_literal,
            TokenType.True_: self.parse_boolean_literal,
            TokenType.False_: self.parse_boolean_literal,
            TokenType.Bang: self.parse_prefix_expression,
            TokenType.Minus: self.parse_prefix_expression,
            TokenType.Plus: self.parse_prefix_expression,
            TokenType.LParen: self.parse_grouped_expression,
            TokenType.If: self.parse_if_expression,
            TokenType.Function: self.parse_function_literal,
            TokenType.LBracket: self.parse_array_literal,
            TokenType.LBrace: self.parse_hash_literal,
        }
        self.infix_rules: Dict[TokenType, Callable[[Expression], Expression]] = {
            TokenType.LParen: self.parse_call_expression,
            TokenType.LBracket: self.parse_index_expression,
        }
        for token_type in PRECEDENCES:
            self.infix_rules.setdefault(token_type, self.parse_infix_expression)

    # --- Token stream helpers ---

    def advance(self) -> Token:
        """Consumes the current token and returns it."""
        token = self.current
        self.previous = token
        if token.type is not TokenType.EOF:
            self.current = next(self.tokens)
        return token

    def error(self, token: Token, message: str) -> ParseError:
        self.errors.append(Diagnostic(message, token.line, token.col))
        return ParseError(message)

    def expect(self, type: TokenType, expected: str) -> Token:
        if self.current.type is not type:
            raise self.error(self.current, f"expected {expected}, got {describe(self.current)}")

        return self.advance()

    def current_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.current.type, Precedence.LOWEST)

    def synchronize(self, mark: int) -> None:
        """Skips tokens up to the end of the statement that failed to parse.

        Stops after a `;`, or before a `}` that closes the enclosing block,
        stepping over any nested braces on the way. Hash literals left open
        since `mark` still own a closing brace, so they count as nesting.
        """
        depth = self.open_hashes - mark
        self.open_hashes = mark
        while self.current.type is not TokenType.EOF:
            match self.current.type:
                case TokenType.LBrace:
                    depth += 1
                case TokenType.RBrace:
                    if depth == 0:
                        return
                    depth -= 1
                case TokenType.Semicolon if depth == 0:
                    self.advance()
                    return
            self.advance()

    # --- Statements ---

    def parse_program(self) -> Program:
        statements: List[Statement] = []

        while self.current.type is not TokenType.EOF:
            if self.current.type is TokenType.Semicolon:
                self.advance()
                continue

            if self.current.type is TokenType.RBrace:
                self.error(self.current, "unexpected '}' outside of a block")
                self.advance()
                continue

            mark = self.open_hashes
            try:
                statements.append(self.parse_statement())
            except ParseError:
                self.synchronize(mark)

        logger.debug("parsed %d statements with %d diagnostics", len(statements), len(self.errors))
        return Program(tuple(statements))

    def parse_statement(self) -> Statement:
        match self.current.type:
            case TokenType.Let:
                statement = self.parse_let_statement()
            case TokenType.Return:
                statement = self.parse_return_statement()
            case _:
                statement = ExpressionStatement(self.parse_expression(Precedence.LOWEST))

        self.end_statement()
        return statement

    def end_statement(self) -> None:
        if self.current.type is TokenType.Semicolon:
            self.advance()
            return

        if self.current.type in (TokenType.RBrace, TokenType.EOF):
            return

        # A statement ending in a block (if/fun) needs no separator.
        if self.previous is not None and self.previous.type is TokenType.RBrace:
            return

        # Report and keep going; the next statement starts at the current token.
        self.error(self.current, f"expected ';' after statement, got {describe(self.current)}")

    def parse_let_statement(self) -> LetStatement:
        self.advance()

        name = self.expect(TokenType.Ident, "identifier after 'let'")
        self.expect(TokenType.Assign, f"'=' after 'let {name.value}'")

        value = self.parse_expression(Precedence.LOWEST)
        return LetStatement(Identifier(name.value), value)

    def parse_return_statement(self) -> ReturnStatement:
        self.advance()
        return ReturnStatement(self.parse_expression(Precedence.LOWEST))

    def parse_block(self) -> BlockStatement:
        opening = self.expect(TokenType.LBrace, "'{'")
        statements: List[Statement] = []

        while self.current.type is not TokenType.RBrace:
            if self.current.type is TokenType.EOF:
                raise self.error(
                    self.current,
                    f"unclosed '{{' opened at line {opening.line}, col {opening.col}",
                )

            if self.current.type is TokenType.Semicolon:
                self.advance()
                continue

            mark = self.open_hashes
            try:
                statements.append(self.parse_statement())
            except ParseError:
                self.synchronize(mark)

        self.advance()
        return BlockStatement(tuple(statements))

    # --- Expressions ---

    def parse_expression(self, precedence: Precedence) -> Expression:
        token = self.current
        prefix = self.prefix_rules.get(token.type)
        if prefix is None:
            raise self.error(token, self.no_prefix_message(token))

        left = prefix()
        while self.current.type is not TokenType.Semicolon and precedence < self.current_precedence():
            if self.starts_new_statement():
                break
            infix = self.infix_rules[self.current.type]
            left = infix(left)

        return left

    def starts_new_statement(self) -> bool:
        """True when a `(` or `[` opens a line right after a closing `}`.

        A statement ending in a block needs no `;`, so `fun(x) { x }` followed
        by `(1 + 2)` on the next line is two statements, not a call.
        """
        return (
            self.previous is not None
            and self.previous.type is TokenType.RBrace
            and self.current.type in (TokenType.LParen, TokenType.LBracket)
            and self.current.line > self.previous.line
        )

    def no_prefix_message(self, token: Token) -> str:
        if token.type is TokenType.Illegal:
            if token.value.startswith('"'):
                return "unterminated string literal"
            return f"illegal character {token.value!r}"
        if token.type is TokenType.EOF:
            return "unexpected end of input, expected an expression"

        return f"unexpected {describe(token)}, expected an expression"

    def parse_identifier(self) -> Expression:
        return Identifier(self.advance().value)

    def parse_integer_literal(self) -> Expression:
        token = self.advance()
        value = int(token.value)
        if value > INT64_MAX:
            raise self.error(token, f"could not parse {token.value} as integer")

        return IntegerLiteral(value)

    def parse_string_literal(self) -> Expression:
        return StringLiteral(self.advance().value)

    def parse_boolean_literal(self) -> Expression:
        return BooleanLiteral(self.advance().type is TokenType.True_)

    def parse_prefix_expression(self) -> Expression:
        operator = self.advance()
        right = self.parse_expression(Precedence.PREFIX)
        return PrefixExpression(operator.value, right)

    def parse_infix_expression(self, left: Expression) -> Expression:
        operator = self.advance()
        right = self.parse_expression(PRECEDENCES[operator.type])
        return InfixExpression(left, operator.value, right)

    def parse_grouped_expression(self) -> Expression:
        self.advance()
        expr = self.parse_expression(Precedence.LOWEST)
        self.expect(TokenType.RParen, "')'")
        return expr

    def parse_if_expression(self) -> Expression:
        self.advance()

        self.expect(TokenType.LParen, "'(' after 'if'")
        condition = self.parse_expression(Precedence.LOWEST)
        self.expect(TokenType.RParen, "')' after if condition")

        consequence = self.parse_block()
        alternative = None

        if self.current.type is TokenType.Else:
            self.advance()
            if self.current.type is TokenType.If:
                nested = self.parse_if_expression()
                alternative = BlockStatement((ExpressionStatement(nested),))
            else:
                alternative = self.parse_block()

        return IfExpression(condition, consequence, alternative)

    def parse_function_literal(self) -> Expression:
        self.advance()

        self.expect(TokenType.LParen, "'(' after 'fun'")
        parameters = self.parse_parameters()
        body = self.parse_block()

        return FunctionLiteral(parameters, body)

    def parse_parameters(self) -> Tuple[Identifier, ...]:
        parameters: List[Identifier] = []
        if self.current.type is TokenType.RParen:
            self.advance()
            return ()

        while True:
            token = self.expect(TokenType.Ident, "parameter name")
            if any(p.name == token.value for p in parameters):
                raise self.error(token, f"duplicate parameter {token.value!r}")
            parameters.append(Identifier(token.value))

            if self.current.type is TokenType.Comma:
                self.advance()
                if self.current.type is TokenType.RParen:
                    raise self.error(self.current, "trailing ',' is not allowed in parameter list")
                continue

            self.expect(TokenType.RParen, "',' or ')' in parameter list")
            return tuple(parameters)

    def parse_expression_list(self, end: TokenType, what: str) -> Tuple[Expression, ...]:
        items: List[Expression] = []
        if self.current.type is end:
            self.advance()
            return ()

        while True:
            items.append(self.parse_expression(Precedence.LOWEST))

            if self.current.type is TokenType.Comma:
                self.advance()
                if self.current.type is end:
                    raise self.error(self.current, f"trailing ',' is not allowed in {what}")
                continue

            self.expect(end, f"',' or {TOKEN_DISPLAY[end]} in {what}")
            return tuple(items)

    def parse_array_literal(self) -> Expression:
        self.advance()
        return ArrayLiteral(self.parse_expression_list(TokenType.RBracket, "array literal"))

    def parse_hash_literal(self) -> Expression:
        self.advance()
        pairs: List[Tuple[Expression, Expression]] = []
        if self.current.type is TokenType.RBrace:
            self.advance()
            return HashLiteral(())

        self.open_hashes += 1

        while True:
            key = self.parse_expression(Precedence.LOWEST)
            self.expect(TokenType.Colon, "':' after hash key")
            value = self.parse_expression(Precedence.LOWEST)
            pairs.append((key, value))

            if self.current.type is TokenType.Comma:
                self.advance()
                if self.current.type is TokenType.RBrace:
                    raise self.error(self.current, "trailing ',' is not allowed in hash literal")
                continue

            self.expect(TokenType.RBrace, "',' or '}' in hash literal")
            self.open_hashes -= 1
            return HashLiteral(tuple(pairs))

    def parse_call_expression(self, function: Expression) -> Expression:
        self.advance()
        arguments = self.parse_expression_list(TokenType.RParen, "call arguments")
        return CallExpression(function, arguments)

    def parse_index_expression(self, left: Expression) -> Expression:
        self.advance()
        index = self.parse_expression(Precedence.LOWEST)
        self.expect(TokenType.RBracket, "']' after index")
        return IndexExpression(left, index)


def parse_program(source: str) -> Tuple[Program, List[Diagnostic]]:
    """Parses a whole source text, returning the program and any syntax errors."""
    parser = Parser(Lexer(source))
    program = parser.parse_program()
    return program, parser.errors
