"""
Monkey Programming Language Parser
Operator-precedence (Pratt) parser building the AST from a token stream.

Every token kind may register a prefix rule and/or an infix rule. Infix rules
are only applied while their precedence exceeds the caller's threshold, which
yields precedence and left-associativity without a grammar table.
"""

from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

from lexer import (
    ASSIGN, ASTERISK, BANG, COLON, COMMA, ELSE, EOF, EQ, FALSE, FUNCTION, GT, IDENT, IF, INT,
    LBRACE, LBRACKET, LET, LPAREN, LT, MINUS, NOT_EQ, PLUS, RBRACE, RBRACKET, RETURN, RPAREN,
    SEMICOLON, SLASH, STRING, TRUE, Lexer, Token,
)
from ast_nodes import (
    ArrayLiteral, BlockStatement, Boolean, CallExpression, Expression, ExpressionStatement,
    FunctionLiteral, HashLiteral, Identifier, IfExpression, IndexExpression, InfixExpression,
    IntegerLiteral, LetStatement, PrefixExpression, Program, ReturnStatement, Statement,
    StringLiteral,
)
from error_handling import make_parse_error


# ============================================================================
# PRECEDENCE LADDER
# ============================================================================

LOWEST = 1
EQUALS = 2       # ==
LESSGREATER = 3  # > or <
SUM = 4          # +
PRODUCT = 5      # *
PREFIX = 6       # -X or !X
CALL = 7         # myFunction(X)
INDEX = 8        # array[index]

PRECEDENCES: Dict[str, int] = {
    EQ: EQUALS,
    NOT_EQ: EQUALS,
    LT: LESSGREATER,
    GT: LESSGREATER,
    PLUS: SUM,
    MINUS: SUM,
    SLASH: PRODUCT,
    ASTERISK: PRODUCT,
    LPAREN: CALL,
    LBRACKET: INDEX,
}

INT64_MAX = 2 ** 63 - 1

PrefixParseFn = Callable[[], Optional[Expression]]
InfixParseFn = Callable[[Expression], Optional[Expression]]


def _token_supplier(token_source: Union[Lexer, Iterable[Token]]) -> Callable[[], Token]:
    """Adapt a lexer or a plain token iterable to a next-token callable"""
    if hasattr(token_source, 'next_token'):
        return token_source.next_token

    iterator = iter(token_source)
    eof = Token(EOF, "")

    def supply() -> Token:
        return next(iterator, eof)

    return supply


class Parser:
    """Error-tolerant Pratt parser for Monkey programs"""

    def __init__(self, token_source: Union[Lexer, Iterable[Token]], debug: bool = False):
        self.debug = debug
        self._next_token = _token_supplier(token_source)
        self.errors: List[str] = []
        self.error_details: List[Dict] = []

        self.prefix_parse_fns: Dict[str, PrefixParseFn] = {}
        self.infix_parse_fns: Dict[str, InfixParseFn] = {}
        self._setup_rules()

        # Two reads fill both cur_token and peek_token
        self.cur_token = Token(EOF, "")
        self.peek_token = Token(EOF, "")
        self.next_token()
        self.next_token()

    def _setup_rules(self):
        """Register the prefix and infix rule tables"""
        self.register_prefix(IDENT, self.parse_identifier)
        self.register_prefix(INT, self.parse_integer_literal)
        self.register_prefix(STRING, self.parse_string_literal)
        self.register_prefix(TRUE, self.parse_boolean)
        self.register_prefix(FALSE, self.parse_boolean)
        self.register_prefix(BANG, self.parse_prefix_expression)
        self.register_prefix(MINUS, self.parse_prefix_expression)
        self.register_prefix(LPAREN, self.parse_grouped_expression)
        self.register_prefix(IF, self.parse_if_expression)
        self.register_prefix(FUNCTION, self.parse_function_literal)
        self.register_prefix(LBRACKET, self.parse_array_literal)
        self.register_prefix(LBRACE, self.parse_hash_literal)

        for kind in (PLUS, MINUS, SLASH, ASTERISK, EQ, NOT_EQ, LT, GT):
            self.register_infix(kind, self.parse_infix_expression)
        self.register_infix(LPAREN, self.parse_call_expression)
        self.register_infix(LBRACKET, self.parse_index_expression)

    def register_prefix(self, kind: str, fn: PrefixParseFn):
        self.prefix_parse_fns[kind] = fn

    def register_infix(self, kind: str, fn: InfixParseFn):
        self.infix_parse_fns[kind] = fn

    # ------------------------------------------------------------------------
    # Token cursor
    # ------------------------------------------------------------------------

    def next_token(self):
        self.cur_token = self.peek_token
        self.peek_token = self._next_token()

    def cur_token_is(self, kind: str) -> bool:
        return self.cur_token.kind == kind

    def peek_token_is(self, kind: str) -> bool:
        return self.peek_token.kind == kind

    def expect_peek(self, kind: str) -> bool:
        """Advance if the next token has the given kind, otherwise record an error"""
        if self.peek_token_is(kind):
            self.next_token()
            return True
        self.peek_error(kind)
        return False

    def peek_precedence(self) -> int:
        return PRECEDENCES.get(self.peek_token.kind, LOWEST)

    def cur_precedence(self) -> int:
        return PRECEDENCES.get(self.cur_token.kind, LOWEST)

    # ------------------------------------------------------------------------
    # Errors
    # ------------------------------------------------------------------------

    def _record_error(self, message: str, token: Token, expected: Optional[List[str]] = None):
        self.errors.append(message)
        self.error_details.append(make_parse_error(
            message, token.line, token.column, expected=expected, got=token.literal))
        if self.debug:
            print(f"Parse error: {message} ({token})")

    def peek_error(self, kind: str):
        message = f"expected next token to be {kind}, got {self.peek_token.kind} instead"
        self._record_error(message, self.peek_token, expected=[kind])

    def no_prefix_parse_fn_error(self, token: Token):
        self._record_error(f"no prefix parse function for {token.kind} found", token)

    def _trace(self, rule: str):
        if self.debug:
            print(f"Parsing: {rule} at {self.cur_token}")

    # ------------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------------

    def parse_program(self) -> Program:
        """Parse statements until EOF; a broken statement is dropped and parsing resumes one token later"""
        statements = []

        while not self.cur_token_is(EOF):
            statement = self.parse_statement()
            if statement is not None:
                statements.append(statement)
            self.next_token()

        return Program(tuple(statements))

    def parse_statement(self) -> Optional[Statement]:
        if self.cur_token_is(LET):
            return self.parse_let_statement()
        if self.cur_token_is(RETURN):
            return self.parse_return_statement()
        return self.parse_expression_statement()

    def parse_let_statement(self) -> Optional[LetStatement]:
        """let <ident> = <expr>;"""
        self._trace("let statement")
        token = self.cur_token

        if not self.expect_peek(IDENT):
            return None
        name = Identifier(self.cur_token.literal, token=self.cur_token)

        if not self.expect_peek(ASSIGN):
            return None

        self.next_token()
        value = self.parse_expression(LOWEST)
        if value is None:
            return None

        if self.peek_token_is(SEMICOLON):
            self.next_token()

        return LetStatement(name, value, token=token)

    def parse_return_statement(self) -> Optional[ReturnStatement]:
        """return <expr>;"""
        self._trace("return statement")
        token = self.cur_token

        self.next_token()
        value = self.parse_expression(LOWEST)
        if value is None:
            return None

        if self.peek_token_is(SEMICOLON):
            self.next_token()

        return ReturnStatement(value, token=token)

    def parse_expression_statement(self) -> Optional[ExpressionStatement]:
        self._trace("expression statement")
        token = self.cur_token

        expression = self.parse_expression(LOWEST)
        if expression is None:
            return None

        if self.peek_token_is(SEMICOLON):
            self.next_token()

        return ExpressionStatement(expression, token=token)

    def parse_block_statement(self) -> BlockStatement:
        """{ <statements> } terminated by '}' or end of input"""
        self._trace("block statement")
        token = self.cur_token
        statements = []

        self.next_token()
        while not self.cur_token_is(RBRACE) and not self.cur_token_is(EOF):
            statement = self.parse_statement()
            if statement is not None:
                statements.append(statement)
            self.next_token()

        return BlockStatement(tuple(statements), token=token)

    # ------------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------------

    def parse_expression(self, precedence: int) -> Optional[Expression]:
        """Core Pratt loop: one prefix rule, then infix rules while they bind tighter"""
        prefix = self.prefix_parse_fns.get(self.cur_token.kind)
        if prefix is None:
            self.no_prefix_parse_fn_error(self.cur_token)
            return None

        left = prefix()

        while left is not None and precedence < self.peek_precedence():
            infix = self.infix_parse_fns.get(self.peek_token.kind)
            if infix is None:
                return left
            self.next_token()
            left = infix(left)

        return left

    def parse_identifier(self) -> Expression:
        return Identifier(self.cur_token.literal, token=self.cur_token)

    def parse_integer_literal(self) -> Optional[Expression]:
        token = self.cur_token
        value = int(token.literal)
        if value > INT64_MAX:
            self._record_error(f'could not parse "{token.literal}" as integer', token)
            return None
        return IntegerLiteral(value, token=token)

    def parse_string_literal(self) -> Expression:
        return StringLiteral(self.cur_token.literal, token=self.cur_token)

    def parse_boolean(self) -> Expression:
        return Boolean(self.cur_token_is(TRUE), token=self.cur_token)

    def parse_prefix_expression(self) -> Optional[Expression]:
        self._trace("prefix expression")
        token = self.cur_token

        self.next_token()
        right = self.parse_expression(PREFIX)
        if right is None:
            return None

        return PrefixExpression(token.literal, right, token=token)

    def parse_infix_expression(self, left: Expression) -> Optional[Expression]:
        self._trace("infix expression")
        token = self.cur_token
        precedence = self.cur_precedence()

        self.next_token()
        right = self.parse_expression(precedence)
        if right is None:
            return None

        return InfixExpression(left, token.literal, right, token=token)

    def parse_grouped_expression(self) -> Optional[Expression]:
        self.next_token()
        expression = self.parse_expression(LOWEST)
        if expression is None or not self.expect_peek(RPAREN):
            return None
        return expression

    def parse_if_expression(self) -> Optional[Expression]:
        """if (<cond>) <block> [else <block>]"""
        self._trace("if expression")
        token = self.cur_token

        if not self.expect_peek(LPAREN):
            return None

        self.next_token()
        condition = self.parse_expression(LOWEST)
        if condition is None:
            return None

        if not self.expect_peek(RPAREN):
            return None
        if not self.expect_peek(LBRACE):
            return None

        consequence = self.parse_block_statement()
        alternative = None

        if self.peek_token_is(ELSE):
            self.next_token()
            if not self.expect_peek(LBRACE):
                return None
            alternative = self.parse_block_statement()

        return IfExpression(condition, consequence, alternative, token=token)

    def parse_function_literal(self) -> Optional[Expression]:
        """fn (<ident, ...>) <block>"""
        self._trace("function literal")
        token = self.cur_token

        if not self.expect_peek(LPAREN):
            return None

        parameters = self.parse_function_parameters()
        if parameters is None:
            return None

        if not self.expect_peek(LBRACE):
            return None

        body = self.parse_block_statement()
        return FunctionLiteral(parameters, body, token=token)

    def parse_function_parameters(self) -> Optional[Tuple[Identifier, ...]]:
        if self.peek_token_is(RPAREN):
            self.next_token()
            return ()

        if not self.expect_peek(IDENT):
            return None
        identifiers = [Identifier(self.cur_token.literal, token=self.cur_token)]

        while self.peek_token_is(COMMA):
            self.next_token()
            if not self.expect_peek(IDENT):
                return None
            identifiers.append(Identifier(self.cur_token.literal, token=self.cur_token))

        if not self.expect_peek(RPAREN):
            return None

        return tuple(identifiers)

    def parse_call_expression(self, function: Expression) -> Optional[Expression]:
        self._trace("call expression")
        token = self.cur_token

        arguments = self.parse_expression_list(RPAREN)
        if arguments is None:
            return None

        return CallExpression(function, arguments, token=token)

    def parse_expression_list(self, end: str) -> Optional[Tuple[Expression, ...]]:
        """Comma-separated expressions up to the closing token"""
        if self.peek_token_is(end):
            self.next_token()
            return ()

        self.next_token()
        first = self.parse_expression(LOWEST)
        if first is None:
            return None
        items = [first]

        while self.peek_token_is(COMMA):
            self.next_token()
            self.next_token()
            item = self.parse_expression(LOWEST)
            if item is None:
                return None
            items.append(item)

        if not self.expect_peek(end):
            return None

        return tuple(items)

    def parse_array_literal(self) -> Optional[Expression]:
        token = self.cur_token
        elements = self.parse_expression_list(RBRACKET)
        if elements is None:
            return None
        return ArrayLiteral(elements, token=token)

    def parse_index_expression(self, left: Expression) -> Optional[Expression]:
        self._trace("index expression")
        token = self.cur_token

        self.next_token()
        index = self.parse_expression(LOWEST)
        if index is None or not self.expect_peek(RBRACKET):
            return None

        return IndexExpression(left, index, token=token)

    def parse_hash_literal(self) -> Optional[Expression]:
        """{ <expr> : <expr>, ... }"""
        self._trace("hash literal")
        token = self.cur_token
        pairs = []

        while not self.peek_token_is(RBRACE):
            self.next_token()
            key = self.parse_expression(LOWEST)
            if key is None or not self.expect_peek(COLON):
                return None

            self.next_token()
            value = self.parse_expression(LOWEST)
            if value is None:
                return None
            pairs.append((key, value))

            if not self.peek_token_is(RBRACE) and not self.expect_peek(COMMA):
                return None

        if not self.expect_peek(RBRACE):
            return None

        return HashLiteral(tuple(pairs), token=token)


# ============================================================================
# ENTRY POINTS
# ============================================================================

def create_parser(source: str, debug: bool = False) -> Parser:
    """Create a parser reading tokens straight from source text"""
    return Parser(Lexer(source), debug=debug)


def create_debug_parser(source: str) -> Parser:
    """Create a parser with rule tracing enabled"""
    return create_parser(source, debug=True)


def parse(tokens: Union[Lexer, Iterable[Token]]) -> Tuple[Program, List[str]]:
    """Parse a token stream into a (possibly partial) program and its error list"""
    parser = Parser(tokens)
    program = parser.parse_program()
    return program, parser.errors


def parse_source(source: str) -> Tuple[Program, List[str]]:
    """Tokenize and parse source text"""
    return parse(Lexer(source))
