"""
RiriLang Lexer Tests

Tests for tokenization: literals, keywords, operators, comments and errors.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from riri import Lexer, tokenize
from riri.tokens import Token, TokenType
from riri.errors import LexicalError


def types(source):
    return [t.type for t in tokenize(source)]


# =============================================================================
# Basics
# =============================================================================

class TestLexerBasics:
    """Basic lexer functionality tests."""

    def test_empty_source(self):
        tokens = Lexer("").tokenize()
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.EOF

    def test_whitespace_only(self):
        tokens = tokenize("   \t\n  \r\n")
        assert [t.type for t in tokens] == [TokenType.EOF]

    def test_variable_declaration(self):
        assert types("let x = 1 + 2 * 3;") == [
            TokenType.LET,
            TokenType.IDENTIFIER,
            TokenType.ASSIGN,
            TokenType.NUMBER,
            TokenType.PLUS,
            TokenType.NUMBER,
            TokenType.STAR,
            TokenType.NUMBER,
            TokenType.SEMICOLON,
            TokenType.EOF,
        ]

    def test_lexemes(self):
        tokens = tokenize("let x = 1 + 2 * 3;")
        assert [t.lexeme for t in tokens[:-1]] == ["let", "x", "=", "1", "+", "2", "*", "3", ";"]

    def test_single_eof(self):
        tokens = tokenize("a; b;")
        assert sum(1 for t in tokens if t.type == TokenType.EOF) == 1
        assert tokens[-1].type == TokenType.EOF

    def test_tokens_are_immutable(self):
        token = tokenize("x")[0]
        with pytest.raises(Exception):
            token.lexeme = "y"

    def test_non_whitespace_is_preserved(self):
        source = "let a = b+c;\nif (a >= b) { x = y * (z - 1); }\n"
        joined = "".join(t.lexeme for t in tokenize(source))
        assert joined == "".join(source.split())


# =============================================================================
# Positions
# =============================================================================

class TestLexerPositions:
    """Line and column tracking tests."""

    def test_columns_are_one_based(self):
        tokens = tokenize("let x = 10;")
        assert [t.column for t in tokens[:-1]] == [1, 5, 7, 9, 11]

    def test_newline_resets_column(self):
        tokens = tokenize("a;\n  b;")
        b = tokens[2]
        assert b.lexeme == "b"
        assert b.line == 2
        assert b.column == 3

    def test_line_after_comment(self):
        tokens = tokenize("// header\nx;")
        assert tokens[0].lexeme == "x"
        assert tokens[0].line == 2


# =============================================================================
# Literals
# =============================================================================

class TestLexerNumbers:
    """Number literal tokenization tests."""

    def test_integer(self):
        token = tokenize("42")[0]
        assert token.type == TokenType.NUMBER
        assert token.lexeme == "42"

    def test_decimal(self):
        token = tokenize("3.14")[0]
        assert token.type == TokenType.NUMBER
        assert token.lexeme == "3.14"

    def test_second_dot_ends_number(self):
        tokens = tokenize("1.2.3")
        assert [(t.type, t.lexeme) for t in tokens] == [
            (TokenType.NUMBER, "1.2"),
            (TokenType.DOT, "."),
            (TokenType.NUMBER, "3"),
            (TokenType.EOF, ""),
        ]

    def test_number_then_identifier(self):
        assert types("12abc") == [TokenType.NUMBER, TokenType.IDENTIFIER, TokenType.EOF]


class TestLexerStrings:
    """String literal tokenization tests."""

    def test_string_value(self):
        token = tokenize('"hello world"')[0]
        assert token.type == TokenType.STRING
        assert token.value == "hello world"
        assert token.lexeme == '"hello world"'

    def test_empty_string(self):
        assert tokenize('""')[0].value == ""

    def test_escapes_are_kept_verbatim(self):
        token = tokenize(r'"line\nnext \"quoted\""')[0]
        assert token.value == r'line\nnext \"quoted\"'

    def test_escaped_backslash_before_quote(self):
        tokens = tokenize(r'"a\\" b')
        assert tokens[0].value == r"a\\"
        assert tokens[1].type == TokenType.IDENTIFIER

    def test_unterminated_string(self):
        with pytest.raises(LexicalError) as exc:
            tokenize('let s = "abc')
        assert exc.value.line == 1
        assert exc.value.column == 9

    def test_newline_in_string(self):
        with pytest.raises(LexicalError):
            tokenize('"abc\ndef"')


# =============================================================================
# Keywords and Identifiers
# =============================================================================

class TestLexerKeywords:
    """Keyword tokenization tests."""

    @pytest.mark.parametrize("keyword,expected_type", [
        ("let", TokenType.LET),
        ("if", TokenType.IF),
        ("else", TokenType.ELSE),
        ("while", TokenType.WHILE),
        ("for", TokenType.FOR),
        ("func", TokenType.FUNC),
        ("fn", TokenType.FUNC),
        ("return", TokenType.RETURN),
        ("class", TokenType.CLASS),
        ("new", TokenType.NEW),
        ("this", TokenType.THIS),
        ("switch", TokenType.SWITCH),
        ("case", TokenType.CASE),
        ("default", TokenType.DEFAULT),
        ("break", TokenType.BREAK),
        ("continue", TokenType.CONTINUE),
        ("import", TokenType.IMPORT),
        ("try", TokenType.TRY),
        ("catch", TokenType.CATCH),
        ("finally", TokenType.FINALLY),
        ("async", TokenType.ASYNC),
        ("await", TokenType.AWAIT),
    ])
    def test_keywords(self, keyword, expected_type):
        token = tokenize(keyword)[0]
        assert token.type == expected_type
        assert token.is_keyword()

    @pytest.mark.parametrize("name", ["x", "_tmp", "camelCase", "snake_case2", "lettuce", "null", "true"])
    def test_identifiers(self, name):
        token = tokenize(name)[0]
        assert token.type == TokenType.IDENTIFIER
        assert token.lexeme == name


# =============================================================================
# Operators
# =============================================================================

class TestLexerOperators:
    """Operator tokenization tests."""

    @pytest.mark.parametrize("op,expected_type", [
        ("==", TokenType.EQ),
        ("!=", TokenType.NE),
        ("<=", TokenType.LE),
        (">=", TokenType.GE),
        ("&&", TokenType.AND),
        ("||", TokenType.OR),
        ("=>", TokenType.ARROW),
        ("=", TokenType.ASSIGN),
        ("+", TokenType.PLUS),
        ("-", TokenType.MINUS),
        ("*", TokenType.STAR),
        ("/", TokenType.SLASH),
        ("%", TokenType.PERCENT),
        ("<", TokenType.LT),
        (">", TokenType.GT),
        ("?", TokenType.QUESTION),
        (":", TokenType.COLON),
        ("(", TokenType.LPAREN),
        (")", TokenType.RPAREN),
        ("{", TokenType.LBRACE),
        ("}", TokenType.RBRACE),
        ("[", TokenType.LBRACKET),
        ("]", TokenType.RBRACKET),
        (",", TokenType.COMMA),
        (".", TokenType.DOT),
        (";", TokenType.SEMICOLON),
    ])
    def test_operators(self, op, expected_type):
        tokens = tokenize(op)
        assert tokens[0].type == expected_type
        assert tokens[0].lexeme == op

    def test_two_char_before_single(self):
        assert types("a<=b") == [TokenType.IDENTIFIER, TokenType.LE,
                                 TokenType.IDENTIFIER, TokenType.EOF]

    def test_arrow(self):
        assert types("(a) => a") == [TokenType.LPAREN, TokenType.IDENTIFIER, TokenType.RPAREN,
                                     TokenType.ARROW, TokenType.IDENTIFIER, TokenType.EOF]

    @pytest.mark.parametrize("char", ["@", "#", "!", "&", "|", "'", "$"])
    def test_unexpected_character(self, char):
        with pytest.raises(LexicalError) as exc:
            tokenize(f"x {char} y")
        assert exc.value.line == 1
        assert exc.value.column == 3


class TestLexerComments:
    """Comment handling tests."""

    def test_line_comment(self):
        assert types("// nothing here") == [TokenType.EOF]

    def test_trailing_comment(self):
        tokens = tokenize("42 // the answer\n10")
        assert [t.lexeme for t in tokens] == ["42", "10", ""]

    def test_division_is_not_comment(self):
        assert types("a / b") == [TokenType.IDENTIFIER, TokenType.SLASH,
                                  TokenType.IDENTIFIER, TokenType.EOF]


class TestLexerErrors:
    """Error reporting tests."""

    def test_error_position_on_later_line(self):
        with pytest.raises(LexicalError) as exc:
            tokenize("let x = 1;\n  @")
        assert exc.value.line == 2
        assert exc.value.column == 3

    def test_error_names_file(self):
        with pytest.raises(LexicalError) as exc:
            Lexer("@", "main.rr").tokenize()
        assert exc.value.filename == "main.rr"
        assert str(exc.value).startswith("main.rr:1:1:")

    def test_error_without_file(self):
        with pytest.raises(LexicalError) as exc:
            tokenize("@")
        assert str(exc.value).startswith("line 1:1:")


# =============================================================================
# Run Tests
# =============================================================================

if __name__ == "__main__":
    pytest.main([__file__, "-v"])
