"""
Monkey Token Source
Single-pass scanner turning source text into a stream of typed tokens
"""

from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional

from pyparsing import Literal, MatchFirst, ParserElement, Regex, col, dbl_slash_comment, lineno


# ============================================================================
# TOKEN KINDS
# ============================================================================

ILLEGAL = "ILLEGAL"
EOF = "EOF"

# Identifiers and literals
IDENT = "IDENT"
INT = "INT"
STRING = "STRING"

# Operators
ASSIGN = "="
PLUS = "+"
MINUS = "-"
BANG = "!"
ASTERISK = "*"
SLASH = "/"
LT = "<"
GT = ">"
EQ = "=="
NOT_EQ = "!="

# Delimiters
COMMA = ","
SEMICOLON = ";"
COLON = ":"
LPAREN = "("
RPAREN = ")"
LBRACE = "{"
RBRACE = "}"
LBRACKET = "["
RBRACKET = "]"

# Keywords
FUNCTION = "FUNCTION"
LET = "LET"
IF = "IF"
ELSE = "ELSE"
TRUE = "TRUE"
FALSE = "FALSE"
RETURN = "RETURN"

KEYWORDS: Dict[str, str] = {
    "fn": FUNCTION,
    "let": LET,
    "if": IF,
    "else": ELSE,
    "true": TRUE,
    "false": FALSE,
    "return": RETURN,
}


@dataclass(frozen=True)
class Token:
    """Monkey token with its source position"""
    kind: str
    literal: str
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        return f"{self.kind}({self.literal!r}) at {self.line}:{self.column}"


def lookup_ident(word: str) -> str:
    """Classify a bare word as a keyword or an identifier"""
    return KEYWORDS.get(word, IDENT)


# ============================================================================
# SCANNER GRAMMAR
# ============================================================================

_ESCAPES = {'n': '\n', 't': '\t', 'r': '\r', '"': '"', '\\': '\\'}


def _process_string_escapes(body: str) -> str:
    """Decode backslash escapes inside a string literal"""
    result = []
    i = 0
    while i < len(body):
        if body[i] == '\\' and i + 1 < len(body):
            result.append(_ESCAPES.get(body[i + 1], body[i + 1]))
            i += 2
        else:
            result.append(body[i])
            i += 1
    return ''.join(result)


def _emit(kind: Optional[str], convert: Callable[[str], str] = lambda text: text):
    """Build a parse action producing a Token of the given kind"""
    def action(source: str, loc: int, toks):
        text = toks[0]
        token_kind = kind if kind is not None else lookup_ident(text)
        return Token(token_kind, convert(text), lineno(loc, source), col(loc, source))
    return action


def _build_scanner() -> ParserElement:
    """Assemble the token patterns in priority order"""
    string_literal = Regex(r'"(?:[^"\\]|\\.)*"').set_parse_action(
        _emit(STRING, lambda text: _process_string_escapes(text[1:-1])))

    integer = Regex(r"[0-9]+").set_parse_action(_emit(INT))
    word = Regex(r"[A-Za-z_][A-Za-z0-9_]*").set_parse_action(_emit(None))

    # Two-character operators must be tried before their one-character prefixes
    symbols = [EQ, NOT_EQ, ASSIGN, PLUS, MINUS, BANG, ASTERISK, SLASH, LT, GT,
               COMMA, SEMICOLON, COLON, LPAREN, RPAREN, LBRACE, RBRACE, LBRACKET, RBRACKET]
    operators = [Literal(symbol).set_parse_action(_emit(symbol)) for symbol in symbols]

    illegal = Regex(r"\S").set_parse_action(_emit(ILLEGAL))

    scanner = MatchFirst([string_literal, integer, word] + operators + [illegal])
    scanner.ignore(dbl_slash_comment)
    # Tabs stay literal so string contents and columns match the source
    scanner.parse_with_tabs()
    return scanner


_SCANNER = _build_scanner()


# ============================================================================
# LEXER
# ============================================================================

class Lexer:
    """Pull-based token source over a piece of Monkey source text"""

    def __init__(self, source: str):
        self.source = source
        self._matches = _SCANNER.scan_string(source)
        self._eof: Optional[Token] = None

    def next_token(self) -> Token:
        """Return the next token, or EOF forever once the input is exhausted"""
        if self._eof is None:
            match = next(self._matches, None)
            if match is not None:
                toks, _start, _end = match
                return toks[0]
            end = len(self.source)
            self._eof = Token(EOF, "", lineno(end, self.source), col(end, self.source))
        return self._eof

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next_token()
            yield token
            if token.kind == EOF:
                return


def tokenize(source: str) -> List[Token]:
    """Scan a whole source string, EOF token included"""
    return list(Lexer(source))
