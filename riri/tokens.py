"""
RiriLang Token Definitions

Defines all token types and the Token class for lexical analysis.
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Optional


class TokenType(Enum):
    """All token types in RiriLang."""

    # Literals
    NUMBER = auto()
    STRING = auto()
    IDENTIFIER = auto()

    # Keywords
    LET = auto()
    IF = auto()
    ELSE = auto()
    WHILE = auto()
    FOR = auto()
    FUNC = auto()
    RETURN = auto()
    CLASS = auto()
    NEW = auto()
    THIS = auto()
    SWITCH = auto()
    CASE = auto()
    DEFAULT = auto()
    BREAK = auto()
    CONTINUE = auto()
    IMPORT = auto()
    TRY = auto()
    CATCH = auto()
    FINALLY = auto()
    ASYNC = auto()
    AWAIT = auto()

    # Operators
    PLUS = auto()          # +
    MINUS = auto()         # -
    STAR = auto()          # *
    SLASH = auto()         # /
    PERCENT = auto()       # %

    # Comparison
    EQ = auto()            # ==
    NE = auto()            # !=
    LT = auto()            # <
    LE = auto()            # <=
    GT = auto()            # >
    GE = auto()            # >=

    # Logical
    AND = auto()           # &&
    OR = auto()            # ||

    # Assignment
    ASSIGN = auto()        # =
    ARROW = auto()         # =>

    # Delimiters
    LPAREN = auto()        # (
    RPAREN = auto()        # )
    LBRACE = auto()        # {
    RBRACE = auto()        # }
    LBRACKET = auto()      # [
    RBRACKET = auto()      # ]
    COMMA = auto()         # ,
    DOT = auto()           # .
    COLON = auto()         # :
    SEMICOLON = auto()     # ;
    QUESTION = auto()      # ?

    # Special
    EOF = auto()


# Keyword mapping
KEYWORDS = {
    'let': TokenType.LET,
    'if': TokenType.IF,
    'else': TokenType.ELSE,
    'while': TokenType.WHILE,
    'for': TokenType.FOR,
    'func': TokenType.FUNC,
    'fn': TokenType.FUNC,
    'return': TokenType.RETURN,
    'class': TokenType.CLASS,
    'new': TokenType.NEW,
    'this': TokenType.THIS,
    'switch': TokenType.SWITCH,
    'case': TokenType.CASE,
    'default': TokenType.DEFAULT,
    'break': TokenType.BREAK,
    'continue': TokenType.CONTINUE,
    'import': TokenType.IMPORT,
    'try': TokenType.TRY,
    'catch': TokenType.CATCH,
    'finally': TokenType.FINALLY,
    'async': TokenType.ASYNC,
    'await': TokenType.AWAIT,
}

# Two-character operators are matched before single-character ones
TWO_CHAR_OPERATORS = {
    '==': TokenType.EQ,
    '!=': TokenType.NE,
    '<=': TokenType.LE,
    '>=': TokenType.GE,
    '&&': TokenType.AND,
    '||': TokenType.OR,
    '=>': TokenType.ARROW,
}

SINGLE_CHAR_OPERATORS = {
    '(': TokenType.LPAREN,
    ')': TokenType.RPAREN,
    '{': TokenType.LBRACE,
    '}': TokenType.RBRACE,
    '[': TokenType.LBRACKET,
    ']': TokenType.RBRACKET,
    ';': TokenType.SEMICOLON,
    ',': TokenType.COMMA,
    '.': TokenType.DOT,
    ':': TokenType.COLON,
    '=': TokenType.ASSIGN,
    '+': TokenType.PLUS,
    '-': TokenType.MINUS,
    '*': TokenType.STAR,
    '/': TokenType.SLASH,
    '%': TokenType.PERCENT,
    '<': TokenType.LT,
    '>': TokenType.GT,
    '?': TokenType.QUESTION,
}


@dataclass(frozen=True)
class Token:
    """
    Represents a single token from the source code.

    ``lexeme`` is the exact source text of the token. For strings ``value``
    holds the text between the quotes with escape sequences left verbatim;
    numbers keep their literal text in ``lexeme`` and are converted by the
    parser.
    """

    type: TokenType
    lexeme: str
    line: int
    column: int
    value: Optional[str] = None

    def __repr__(self) -> str:
        if self.value is not None:
            return f"Token({self.type.name}, {self.value!r}, line={self.line})"
        return f"Token({self.type.name}, {self.lexeme!r}, line={self.line})"

    @property
    def text(self) -> str:
        """The token's payload text (string contents or lexeme)."""
        return self.value if self.value is not None else self.lexeme

    def is_keyword(self) -> bool:
        """Check if this token is a keyword."""
        return self.type in KEYWORDS.values()


# Binary operator tokens and the source text the AST keeps for them
BINARY_OPERATORS = {
    TokenType.OR: '||',
    TokenType.AND: '&&',
    TokenType.EQ: '==',
    TokenType.NE: '!=',
    TokenType.LT: '<',
    TokenType.LE: '<=',
    TokenType.GT: '>',
    TokenType.GE: '>=',
    TokenType.PLUS: '+',
    TokenType.MINUS: '-',
    TokenType.STAR: '*',
    TokenType.SLASH: '/',
    TokenType.PERCENT: '%',
}
