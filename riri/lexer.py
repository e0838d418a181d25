"""
RiriLang Lexer

Tokenizes RiriLang source code into a stream of tokens in a single
left-to-right pass.
"""

import logging
import string
from typing import List, Optional

from .tokens import (Token, TokenType, KEYWORDS, TWO_CHAR_OPERATORS,
                     SINGLE_CHAR_OPERATORS)
from .errors import LexicalError

logger = logging.getLogger(__name__)

IDENTIFIER_START = set(string.ascii_letters + '_')
IDENTIFIER_CHARS = IDENTIFIER_START | set(string.digits)
DIGITS = set(string.digits)


class Lexer:
    """Lexical analyzer for RiriLang source code."""

    def __init__(self, source: str, filename: Optional[str] = None):
        """
        Initialize the lexer.

        Args:
            source: RiriLang source code to tokenize
            filename: Optional file name used in error messages
        """
        self.source = source
        self.filename = filename
        self.tokens: List[Token] = []
        self.start = 0      # Start of current token
        self.current = 0    # Current position
        self.line = 1       # Current line number
        self.line_start = 0 # Position of current line start

    def tokenize(self) -> List[Token]:
        """
        Tokenize the entire source code.

        Returns:
            List of tokens, always terminated by a single EOF token

        Raises:
            LexicalError: On an unrecognized character or unterminated string
        """
        while not self.is_at_end():
            self.start = self.current
            self.scan_token()

        self.start = self.current
        self.tokens.append(Token(TokenType.EOF, "", self.line, self.column()))
        logger.debug("Tokenized %s: %d tokens",
                     self.filename or "<source>", len(self.tokens))
        return self.tokens

    def scan_token(self) -> None:
        """Scan the next token."""
        c = self.advance()

        # Newline
        if c == '\n':
            self.line += 1
            self.line_start = self.current
            return

        # Skip whitespace
        if c.isspace():
            return

        # Line comment
        if c == '/' and self.peek() == '/':
            while self.peek() != '\n' and not self.is_at_end():
                self.advance()
            return

        if c in DIGITS:
            self.number()
        elif c in IDENTIFIER_START:
            self.identifier()
        elif c == '"':
            self.string()
        elif c + self.peek() in TWO_CHAR_OPERATORS:
            self.advance()
            self.add_token(TWO_CHAR_OPERATORS[c + self.previous_char()])
        elif c in SINGLE_CHAR_OPERATORS:
            self.add_token(SINGLE_CHAR_OPERATORS[c])
        else:
            raise LexicalError(f"Unexpected character: {c!r}", self.line,
                               self.column(), self.filename)

    def advance(self) -> str:
        """Consume and return the current character."""
        c = self.source[self.current]
        self.current += 1
        return c

    def peek(self) -> str:
        """Return the current character without consuming it."""
        if self.is_at_end():
            return '\0'
        return self.source[self.current]

    def previous_char(self) -> str:
        return self.source[self.current - 1]

    def is_at_end(self) -> bool:
        """Check if we've reached the end of the source."""
        return self.current >= len(self.source)

    def column(self) -> int:
        """1-based column of the token being scanned."""
        return self.start - self.line_start + 1

    def add_token(self, type: TokenType, value: Optional[str] = None) -> None:
        """Add a token to the token list."""
        lexeme = self.source[self.start:self.current]
        self.tokens.append(Token(type, lexeme, self.line, self.column(), value))

    def number(self) -> None:
        """
        Scan a number literal: digits with at most one '.'.

        A second '.' ends the literal and is left for the next token.
        """
        has_decimal = False
        while not self.is_at_end():
            c = self.peek()
            if c in DIGITS:
                self.advance()
            elif c == '.' and not has_decimal:
                has_decimal = True
                self.advance()
            else:
                break

        self.add_token(TokenType.NUMBER)

    def identifier(self) -> None:
        """Scan an identifier or keyword."""
        while self.peek() in IDENTIFIER_CHARS:
            self.advance()

        text = self.source[self.start:self.current]
        self.add_token(KEYWORDS.get(text, TokenType.IDENTIFIER))

    def string(self) -> None:
        """
        Scan a string literal.

        Escapes are kept verbatim (backslash included); they are interpreted
        by the host compiler once the literal is emitted.
        """
        while self.peek() != '"':
            if self.is_at_end() or self.peek() == '\n':
                raise LexicalError("Unterminated string literal", self.line,
                                   self.column(), self.filename)
            if self.advance() == '\\' and not self.is_at_end() and self.peek() != '\n':
                self.advance()

        # Consume closing quote
        self.advance()

        self.add_token(TokenType.STRING, self.source[self.start + 1:self.current - 1])


def tokenize(source: str, filename: Optional[str] = None) -> List[Token]:
    """Convert source text into a list of tokens ending with EOF."""
    return Lexer(source, filename).tokenize()
