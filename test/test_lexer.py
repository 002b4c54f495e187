"""
Token source tests for Monkey
"""

import pytest
from lexer import (
  ASSIGN, ASTERISK, BANG, COLON, COMMA, ELSE, EOF, EQ, FALSE, FUNCTION, GT, IDENT, IF,
  ILLEGAL, INT, LBRACE, LBRACKET, LET, LPAREN, LT, MINUS, NOT_EQ, PLUS, RBRACE, RBRACKET,
  RETURN, RPAREN, SEMICOLON, SLASH, STRING, TRUE, Lexer, Token, lookup_ident, tokenize,
)


def kinds_and_literals(source):
  return [(t.kind, t.literal) for t in tokenize(source)]


class TestTokenStream:
  """Test the token stream for representative programs"""

  def test_let_and_function(self):
    source = "let add = fn(x, y) { x + y; };"
    assert kinds_and_literals(source) == [
      (LET, "let"), (IDENT, "add"), (ASSIGN, "="), (FUNCTION, "fn"), (LPAREN, "("),
      (IDENT, "x"), (COMMA, ","), (IDENT, "y"), (RPAREN, ")"), (LBRACE, "{"),
      (IDENT, "x"), (PLUS, "+"), (IDENT, "y"), (SEMICOLON, ";"), (RBRACE, "}"),
      (SEMICOLON, ";"), (EOF, ""),
    ]

  def test_operators(self):
    source = "!-/*5; 5 < 10 > 5; 10 == 10; 10 != 9;"
    assert [t.kind for t in tokenize(source)] == [
      BANG, MINUS, SLASH, ASTERISK, INT, SEMICOLON,
      INT, LT, INT, GT, INT, SEMICOLON,
      INT, EQ, INT, SEMICOLON,
      INT, NOT_EQ, INT, SEMICOLON, EOF,
    ]

  def test_keywords(self):
    source = "if (5 < 10) { return true; } else { return false; }"
    kinds = [t.kind for t in tokenize(source)]
    assert kinds[0] == IF
    assert RETURN in kinds and TRUE in kinds and ELSE in kinds and FALSE in kinds

  def test_collections(self):
    source = '[1, 2]; {"foo": "bar"}'
    assert kinds_and_literals(source) == [
      (LBRACKET, "["), (INT, "1"), (COMMA, ","), (INT, "2"), (RBRACKET, "]"), (SEMICOLON, ";"),
      (LBRACE, "{"), (STRING, "foo"), (COLON, ":"), (STRING, "bar"), (RBRACE, "}"), (EOF, ""),
    ]

  def test_identifiers_may_contain_digits_and_underscores(self):
    assert kinds_and_literals("foo_bar1 _x") == [(IDENT, "foo_bar1"), (IDENT, "_x"), (EOF, "")]

  def test_lookup_ident(self):
    assert lookup_ident("fn") == FUNCTION
    assert lookup_ident("let") == LET
    assert lookup_ident("lettuce") == IDENT


class TestStrings:
  """Test string literal scanning"""

  def test_simple_strings(self):
    assert kinds_and_literals('"foobar" "foo bar"') == [
      (STRING, "foobar"), (STRING, "foo bar"), (EOF, ""),
    ]

  def test_escapes(self):
    tokens = tokenize(r'"a\"b\n\tc\\"')
    assert tokens[0].kind == STRING
    assert tokens[0].literal == 'a"b\n\tc\\'

  def test_unterminated_string_is_illegal(self):
    assert kinds_and_literals('"abc') == [(ILLEGAL, '"'), (IDENT, "abc"), (EOF, "")]


class TestScannerEdges:
  """Test whitespace, comments, illegal input and EOF handling"""

  def test_comments_are_skipped(self):
    assert [t.kind for t in tokenize("5 // ignore me\n+ 3")] == [INT, PLUS, INT, EOF]

  def test_illegal_character(self):
    assert kinds_and_literals("5 @ 3") == [(INT, "5"), (ILLEGAL, "@"), (INT, "3"), (EOF, "")]

  def test_empty_input(self):
    assert kinds_and_literals("") == [(EOF, "")]

  def test_eof_repeats(self):
    lexer = Lexer("x")
    assert lexer.next_token().kind == IDENT
    assert lexer.next_token().kind == EOF
    assert lexer.next_token().kind == EOF

  def test_positions(self):
    tokens = tokenize("let x = 5;\nx")
    assert [(t.line, t.column) for t in tokens] == [
      (1, 1), (1, 5), (1, 7), (1, 9), (1, 10), (2, 1), (2, 2),
    ]

  def test_tokens_compare_by_value(self):
    assert Token(INT, "5", 1, 1) == Token(INT, "5", 1, 1)

  def test_tabs_are_kept(self):
    tokens = tokenize('\t"a\tb"')
    assert tokens[0].literal == "a\tb"
    assert tokens[0].column == 2
