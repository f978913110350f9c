from typing import Iterator, Optional

from beavieeer.be_token import Token, TokenType, KEYWORDS, SINGLE_CHAR_TOKENS, TWO_CHAR_TOKENS

ESCAPES = {
    '"': '"',
    '\\': '\\',
    'n': '\n',
    't': '\t',
}


def is_letter(char: Optional[str]) -> bool:
    return char is not None and (char == '_' or ('a' <= char <= 'z') or ('A' <= char <= 'Z'))


def is_digit(char: Optional[str]) -> bool:
    return char is not None and '0' <= char <= '9'


class Lexer:
    """Turns Beavieeer source text into tokens, one `next_token()` call at a time.

    Lexing never fails: a character the language does not know becomes an
    `Illegal` token and the parser decides how to report it.
    """

    def __init__(self, source: str) -> None:
        self.source = source

        self.index = -1
        self.line = 1
        self.column = 0

        self.current_char: Optional[str] = None
        self.next()

    def next(self) -> None:
        if self.current_char == '\n':
            self.line += 1
            self.column = 0

        self.index += 1
        self.column += 1

        if self.index < len(self.source):
            self.current_char = self.source[self.index]
        else:
            self.current_char = None

    def peek(self) -> Optional[str]:
        if self.index + 1 < len(self.source):
            return self.source[self.index + 1]

        return None

    def skip_whitespace(self) -> None:
        while self.current_char:
            if self.current_char.isspace():
                self.next()
            elif self.current_char == '/' and self.peek() == '/':
                while self.current_char and self.current_char != '\n':
                    self.next()
            else:
                break

    def parse_string(self) -> Token:
        line, col = self.line, self.column
        value = ""

        self.next()
        while self.current_char != '"':
            if self.current_char is None:
                return Token(TokenType.Illegal, '"' + value, line, col)

            if self.current_char == '\\':
                self.next()
                if self.current_char is None:
                    return Token(TokenType.Illegal, '"' + value + '\\', line, col)

                value += ESCAPES.get(self.current_char, '\\' + self.current_char)
            else:
                value += self.current_char
            self.next()

        self.next()
        return Token(TokenType.String, value, line, col)

    def parse_number(self) -> Token:
        line, col = self.line, self.column
        value = ""

        while is_digit(self.current_char):
            value += self.current_char
            self.next()

        return Token(TokenType.Int, value, line, col)

    def parse_identifier(self) -> Token:
        line, col = self.line, self.column
        value = ""

        while is_letter(self.current_char) or is_digit(self.current_char):
            value += self.current_char
            self.next()

        return Token(KEYWORDS.get(value, TokenType.Ident), value, line, col)

    def next_token(self) -> Token:
        self.skip_whitespace()

        char = self.current_char
        if char is None:
            return Token(TokenType.EOF, "", self.line, self.column)

        if char == '"':
            return self.parse_string()
        if is_digit(char):
            return self.parse_number()
        if is_letter(char):
            return self.parse_identifier()

        line, col = self.line, self.column
        if char in TWO_CHAR_TOKENS:
            single, double = TWO_CHAR_TOKENS[char]
            if self.peek() == '=':
                self.next()
                self.next()
                return Token(double, char + '=', line, col)

            self.next()
            return Token(single, char, line, col)

        self.next()
        if char in SINGLE_CHAR_TOKENS:
            return Token(SINGLE_CHAR_TOKENS[char], char, line, col)

        return Token(TokenType.Illegal, char, line, col)

    def __iter__(self) -> Iterator[Token]:
        """Yields every token up to and including the end-of-input token."""
        while True:
            token = self.next_token()
            yield token
            if token.type is TokenType.EOF:
                return
