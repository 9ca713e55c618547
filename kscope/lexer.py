import io
import re

KEYWORDS = {
    'def': 'DEF',
    'extern': 'EXTERN',
}

# Longest prefix strtod() would accept for a run of digits and dots.
_NUMBER_PREFIX = re.compile(r'[0-9]+\.?[0-9]*|\.[0-9]+')


def is_alpha(char):
    return char.isascii() and char.isalpha()


def is_digit(char):
    return char.isascii() and char.isdigit()


def parse_number(text):
    """Convert a digit/dot run the way C's strtod does.

    Malformed literals such as ``1.2.3`` are not rejected: the longest valid
    prefix is used and the rest is dropped. No valid prefix at all gives 0.0.
    """
    match = _NUMBER_PREFIX.match(text)
    if not match:
        return 0.0
    return float(match.group(0))


class Token:
    def __init__(self, type, value=None, line=None, column=None):
        self.type = type
        self.value = value
        self.line = line
        self.column = column

    def __repr__(self):
        return f"Token({self.type}, {self.value!r})"

    def __eq__(self, other):
        if not isinstance(other, Token):
            return NotImplemented
        return (self.type, self.value) == (other.type, other.value)

    def is_char(self, char):
        return self.type == 'CHAR' and self.value == char


class Lexer:
    """Turns a character stream into tokens, one call at a time.

    The last character read is kept between calls to ``next_token``; it is
    the only lookahead the language needs.
    """

    def __init__(self, source):
        if isinstance(source, str):
            source = io.StringIO(source)
        self.stream = source
        self.last_char = ' '
        self.line = 1
        self.column = 0

    def _getchar(self):
        char = self.stream.read(1)
        if char == '\n':
            self.line += 1
            self.column = 0
        elif char:
            self.column += 1
        return char

    def next_token(self):
        while True:
            # Skip whitespace
            while self.last_char and self.last_char.isspace():
                self.last_char = self._getchar()

            if self.last_char != '#':
                break
            # Comment until end of line.
            while self.last_char and self.last_char not in '\n\r':
                self.last_char = self._getchar()

        line, column = self.line, self.column

        if is_alpha(self.last_char):
            ident = self.last_char
            self.last_char = self._getchar()
            while is_alpha(self.last_char) or is_digit(self.last_char):
                ident += self.last_char
                self.last_char = self._getchar()
            if ident in KEYWORDS:
                return Token(KEYWORDS[ident], ident, line, column)
            return Token('IDENTIFIER', ident, line, column)

        if is_digit(self.last_char) or self.last_char == '.':
            text = ''
            while is_digit(self.last_char) or self.last_char == '.':
                text += self.last_char
                self.last_char = self._getchar()
            return Token('NUMBER', parse_number(text), line, column)

        if not self.last_char:
            return Token('EOF', None, line, column)

        char = self.last_char
        self.last_char = self._getchar()
        return Token('CHAR', char, line, column)

    def tokenize(self):
        tokens = []
        while True:
            token = self.next_token()
            tokens.append(token)
            if token.type == 'EOF':
                return tokens
