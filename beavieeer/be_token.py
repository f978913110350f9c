"""
Token definitions for the Beavieeer lexer.
"""
from enum import IntEnum, auto
from typing import NamedTuple


class TokenType(IntEnum):
    Illegal = auto()
    EOF = auto()

    # Identifiers + literals
    Ident = auto()
    Int = auto()
    String = auto()

    # Keywords
    Let = auto()
    Function = auto()
    If = auto()
    Else = auto()
    True_ = auto()
    False_ = auto()
    Return = auto()

    # Operators
    Assign = auto()     # =
    Plus = auto()
    Minus = auto()
    Bang = auto()
    Asterisk = auto()
    Slash = auto()

    Eq = auto()         # ==
    NotEq = auto()      # !=
    Lt = auto()
    LtEq = auto()
    Gt = auto()
    GtEq = auto()

    # Delimiters
    Comma = auto()
    Colon = auto()
    Semicolon = auto()
    LParen = auto()
    RParen = auto()
    LBrace = auto()
    RBrace = auto()
    LBracket = auto()
    RBracket = auto()


class Token(NamedTuple):
    type: TokenType
    value: str
    line: int = 1
    col: int = 1

    def __repr__(self) -> str:
        return f'<Token type={self.type.name} value={self.value!r}>'


KEYWORDS = {
    "let": TokenType.Let,
    "fun": TokenType.Function,
    "if": TokenType.If,
    "else": TokenType.Else,
    "true": TokenType.True_,
    "false": TokenType.False_,
    "return": TokenType.Return,
}

SINGLE_CHAR_TOKENS = {
    '+': TokenType.Plus,
    '-': TokenType.Minus,
    '*': TokenType.Asterisk,
    '/': TokenType.Slash,
    ',': TokenType.Comma,
    ':': TokenType.Colon,
    ';': TokenType.Semicolon,
    '(': TokenType.LParen,
    ')': TokenType.RParen,
    '{': TokenType.LBrace,
    '}': TokenType.RBrace,
    '[': TokenType.LBracket,
    ']': TokenType.RBracket,
}

# Characters that may be followed by '=' to form a two-character operator.
TWO_CHAR_TOKENS = {
    '=': (TokenType.Assign, TokenType.Eq),
    '!': (TokenType.Bang, TokenType.NotEq),
    '<': (TokenType.Lt, TokenType.LtEq),
    '>': (TokenType.Gt, TokenType.GtEq),
}

# Human-readable spellings used in parser diagnostics.
TOKEN_DISPLAY = {
    TokenType.EOF: "end of input",
    TokenType.Ident: "identifier",
    TokenType.Int: "integer",
    TokenType.String: "string",
    TokenType.Assign: "'='",
    TokenType.Colon: "':'",
    TokenType.Comma: "','",
    TokenType.Semicolon: "';'",
    TokenType.LParen: "'('",
    TokenType.RParen: "')'",
    TokenType.LBrace: "'{'",
    TokenType.RBrace: "'}'",
    TokenType.LBracket: "'['",
    TokenType.RBracket: "']'",
}


def describe(token: Token) -> str:
    """Describes a token for an error message."""
    if token.type is TokenType.EOF:
        return "end of input"
    if token.type is TokenType.String:
        return f'string "{token.value}"'
    return repr(token.value)
