"""
RiriLang Parser

Recursive descent parser that produces an AST from tokens. Parsing stops at
the first malformed construct; there is no error recovery.
"""

import logging
from typing import List, Optional

from .tokens import Token, TokenType, BINARY_OPERATORS
from .ast import *
from .errors import SyntaxError
from .config import MAX_NESTING_DEPTH

logger = logging.getLogger(__name__)


class Parser:
    """Recursive descent parser for RiriLang."""

    def __init__(self, tokens: List[Token], filename: Optional[str] = None):
        """
        Initialize the parser.

        Args:
            tokens: List of tokens from the lexer, terminated by EOF
            filename: Optional file name used in error messages
        """
        self.tokens = tokens
        self.filename = filename
        self.current = 0
        self.depth = 0

    def parse(self) -> Program:
        """
        Parse the token stream into an AST.

        Returns:
            Program AST node

        Raises:
            SyntaxError: On the first unexpected token
        """
        statements = []

        while not self.is_at_end():
            statements.append(self.statement())

        logger.debug("Parsed %s: %d top-level statements",
                     self.filename or "<source>", len(statements))
        return Program(statements)

    # =========================================================================
    # Statements
    # =========================================================================

    def statement(self) -> Statement:
        """Parse a statement."""
        self.enter()
        try:
            if self.match(TokenType.LET):
                return self.variable_declaration()
            if self.match(TokenType.FUNC):
                return self.function_declaration()
            if self.match(TokenType.ASYNC):
                self.consume(TokenType.FUNC, "Expected 'func' after 'async'")
                return self.function_declaration(is_async=True)
            if self.match(TokenType.RETURN):
                return self.return_statement()
            if self.match(TokenType.IF):
                return self.if_statement()
            if self.match(TokenType.WHILE):
                return self.while_statement()
            if self.match(TokenType.FOR):
                return self.for_statement()
            if self.match(TokenType.CLASS):
                return self.class_declaration()
            if self.match(TokenType.SWITCH):
                return self.switch_statement()
            if self.match(TokenType.BREAK):
                self.consume(TokenType.SEMICOLON, "Expected ';' after 'break'")
                return BreakStatement()
            if self.match(TokenType.CONTINUE):
                self.consume(TokenType.SEMICOLON, "Expected ';' after 'continue'")
                return ContinueStatement()
            if self.match(TokenType.IMPORT):
                return self.import_declaration()
            if self.match(TokenType.TRY):
                return self.try_statement()

            return self.expression_statement()
        finally:
            self.depth -= 1

    def variable_declaration(self) -> VariableDeclaration:
        """Parse `let name (= value)? ;` after the `let` keyword."""
        name = self.consume(TokenType.IDENTIFIER, "Expected variable name")

        value = None
        if self.match(TokenType.ASSIGN):
            value = self.expression()

        self.consume(TokenType.SEMICOLON, "Expected ';' after variable declaration")
        return VariableDeclaration(name.lexeme, value)

    def function_declaration(self, is_async: bool = False) -> FunctionDeclaration:
        """Parse a function declaration after the `func` keyword."""
        name = self.consume(TokenType.IDENTIFIER, "Expected function name")
        return self.function_rest(name.lexeme, is_async)

    def function_rest(self, name: str, is_async: bool = False) -> FunctionDeclaration:
        """Parse `(params) { body }` of a function or method."""
        self.consume(TokenType.LPAREN, f"Expected '(' after '{name}'")
        params = self.parameters()
        self.consume(TokenType.RPAREN, "Expected ')' after parameters")

        self.consume(TokenType.LBRACE, "Expected '{' before function body")
        body = self.block()

        return FunctionDeclaration(name, params, body, is_async)

    def parameters(self) -> List[str]:
        """Parse an identifier-only parameter list."""
        params = []

        if not self.check(TokenType.RPAREN):
            params.append(self.consume(TokenType.IDENTIFIER, "Expected parameter name").lexeme)

            while self.match(TokenType.COMMA):
                params.append(self.consume(TokenType.IDENTIFIER, "Expected parameter name").lexeme)

        return params

    def class_declaration(self) -> ClassDeclaration:
        """
        Parse a class declaration.

        Each member is a name followed either by `(` (a method) or by an
        optional `= initializer` and `;` (a field). A leading `let` or `func`
        is accepted and ignored.
        """
        name = self.consume(TokenType.IDENTIFIER, "Expected class name")
        self.consume(TokenType.LBRACE, "Expected '{' before class body")

        fields: List[VariableDeclaration] = []
        methods: List[FunctionDeclaration] = []

        while not self.check(TokenType.RBRACE) and not self.is_at_end():
            self.match(TokenType.LET, TokenType.FUNC)
            member = self.consume(TokenType.IDENTIFIER, "Expected field or method name")

            if self.check(TokenType.LPAREN):
                methods.append(self.function_rest(member.lexeme))
                continue

            value = None
            if self.match(TokenType.ASSIGN):
                value = self.expression()
            self.consume(TokenType.SEMICOLON, "Expected ';' after field declaration")
            fields.append(VariableDeclaration(member.lexeme, value))

        self.consume(TokenType.RBRACE, "Expected '}' after class body")
        return ClassDeclaration(name.lexeme, fields, methods)

    def import_declaration(self) -> ImportDeclaration:
        """Parse `import "path";`."""
        keyword = self.previous()
        path = self.consume(TokenType.STRING, "Expected module path string after 'import'")
        self.consume(TokenType.SEMICOLON, "Expected ';' after import")
        return ImportDeclaration(path.text, keyword.line)

    def return_statement(self) -> ReturnStatement:
        """Parse a return statement; the value is optional."""
        value = None
        if not self.check(TokenType.SEMICOLON):
            value = self.expression()

        self.consume(TokenType.SEMICOLON, "Expected ';' after return value")
        return ReturnStatement(value)

    def if_statement(self) -> IfStatement:
        """
        Parse an if statement. Each `else if` nests an IfStatement as the
        sole statement of the previous else branch; the chain is read in a
        loop so its length is unbounded.
        """
        node = self.if_clause()
        tail = node

        while self.match(TokenType.ELSE):
            if self.match(TokenType.IF):
                nested = self.if_clause()
                tail.else_branch = [nested]
                tail = nested
            else:
                self.consume(TokenType.LBRACE, "Expected '{' after 'else'")
                tail.else_branch = self.block()
                break

        return node

    def if_clause(self) -> IfStatement:
        """Parse `(condition) { body }` after `if`."""
        self.consume(TokenType.LPAREN, "Expected '(' after 'if'")
        condition = self.expression()
        self.consume(TokenType.RPAREN, "Expected ')' after if condition")

        self.consume(TokenType.LBRACE, "Expected '{' after if condition")
        return IfStatement(condition, self.block())

    def while_statement(self) -> WhileStatement:
        """Parse a while statement."""
        self.consume(TokenType.LPAREN, "Expected '(' after 'while'")
        condition = self.expression()
        self.consume(TokenType.RPAREN, "Expected ')' after while condition")

        self.consume(TokenType.LBRACE, "Expected '{' after while condition")
        body = self.block()

        return WhileStatement(condition, body)

    def for_statement(self) -> ForStatement:
        """Parse a C-style three-clause for statement."""
        self.consume(TokenType.LPAREN, "Expected '(' after 'for'")

        # Initializer (a full statement consumes its own ';')
        init = None
        if not self.match(TokenType.SEMICOLON):
            init = self.statement()

        # Condition
        condition = None
        if not self.check(TokenType.SEMICOLON):
            condition = self.expression()
        self.consume(TokenType.SEMICOLON, "Expected ';' after for condition")

        # Update
        update = None
        if not self.check(TokenType.RPAREN):
            update = self.expression()
        self.consume(TokenType.RPAREN, "Expected ')' after for clauses")

        self.consume(TokenType.LBRACE, "Expected '{' before for body")
        body = self.block()

        return ForStatement(init, condition, update, body)

    def switch_statement(self) -> SwitchStatement:
        """Parse a switch statement with fallthrough case clauses."""
        self.consume(TokenType.LPAREN, "Expected '(' after 'switch'")
        discriminant = self.expression()
        self.consume(TokenType.RPAREN, "Expected ')' after switch value")
        self.consume(TokenType.LBRACE, "Expected '{' before switch body")

        cases: List[CaseClause] = []
        default_case = None

        while not self.check(TokenType.RBRACE) and not self.is_at_end():
            if self.match(TokenType.CASE):
                test = self.expression()
                self.consume(TokenType.COLON, "Expected ':' after case value")
                cases.append(CaseClause(test, self.case_body()))
            elif self.match(TokenType.DEFAULT):
                self.consume(TokenType.COLON, "Expected ':' after 'default'")
                default_case = self.case_body()
            else:
                raise self.error(self.peek(), "Expected 'case' or 'default' in switch body")

        self.consume(TokenType.RBRACE, "Expected '}' after switch body")
        return SwitchStatement(discriminant, cases, default_case)

    def case_body(self) -> List[Statement]:
        """
        Parse the statements of one switch clause: either a single `{...}`
        block or everything up to the next `case`, `default` or `}`.
        """
        if self.match(TokenType.LBRACE):
            return self.block()

        statements = []
        while not self.check(TokenType.CASE) and not self.check(TokenType.DEFAULT) \
                and not self.check(TokenType.RBRACE) and not self.is_at_end():
            statements.append(self.statement())
        return statements

    def try_statement(self) -> TryStatement:
        """Parse try / catch(param)? / finally?."""
        keyword = self.previous()
        self.consume(TokenType.LBRACE, "Expected '{' after 'try'")
        body = self.block()

        catch_body = None
        catch_param = None
        if self.match(TokenType.CATCH):
            if self.match(TokenType.LPAREN):
                catch_param = self.consume(TokenType.IDENTIFIER,
                                           "Expected identifier in catch clause").lexeme
                self.consume(TokenType.RPAREN, "Expected ')' after catch parameter")
            self.consume(TokenType.LBRACE, "Expected '{' after 'catch'")
            catch_body = self.block()

        finally_body = None
        if self.match(TokenType.FINALLY):
            self.consume(TokenType.LBRACE, "Expected '{' after 'finally'")
            finally_body = self.block()

        return TryStatement(body, catch_body, catch_param, finally_body, keyword.line)

    def block(self) -> List[Statement]:
        """Parse statements up to and including the closing '}'."""
        statements = []

        while not self.check(TokenType.RBRACE) and not self.is_at_end():
            statements.append(self.statement())

        self.consume(TokenType.RBRACE, "Expected '}' after block")
        return statements

    def expression_statement(self) -> ExpressionStatement:
        """Parse an expression statement."""
        expr = self.expression()
        self.consume(TokenType.SEMICOLON, "Expected ';' after expression")
        return ExpressionStatement(expr)

    # =========================================================================
    # Expressions
    # =========================================================================

    def expression(self) -> Expression:
        """Parse an expression."""
        self.enter()
        try:
            return self.assignment()
        finally:
            self.depth -= 1

    def assignment(self) -> Expression:
        """Parse an assignment expression (right-associative)."""
        expr = self.ternary()

        if self.match(TokenType.ASSIGN):
            equals = self.previous()
            self.enter()
            try:
                value = self.assignment()
            finally:
                self.depth -= 1

            if isinstance(expr, (Identifier, MemberExpression)):
                return AssignmentExpression(expr, value)

            raise self.error(equals, "Invalid assignment target")

        return expr

    def ternary(self) -> Expression:
        """Parse a ternary conditional expression."""
        expr = self.or_expr()

        if self.match(TokenType.QUESTION):
            consequent = self.expression()
            self.consume(TokenType.COLON, "Expected ':' in conditional expression")
            self.enter()
            try:
                alternate = self.ternary()
            finally:
                self.depth -= 1
            return ConditionalExpression(expr, consequent, alternate)

        return expr

    def or_expr(self) -> Expression:
        """Parse a logical OR expression."""
        expr = self.and_expr()

        while self.match(TokenType.OR):
            expr = BinaryExpression(expr, '||', self.and_expr())

        return expr

    def and_expr(self) -> Expression:
        """Parse a logical AND expression."""
        expr = self.comparison()

        while self.match(TokenType.AND):
            expr = BinaryExpression(expr, '&&', self.comparison())

        return expr

    def comparison(self) -> Expression:
        """Parse equality and relational operators (one level, folds left)."""
        expr = self.additive()

        while self.match(TokenType.EQ, TokenType.NE, TokenType.LT,
                         TokenType.LE, TokenType.GT, TokenType.GE):
            operator = BINARY_OPERATORS[self.previous().type]
            expr = BinaryExpression(expr, operator, self.additive())

        return expr

    def additive(self) -> Expression:
        """Parse addition/subtraction."""
        expr = self.multiplicative()

        while self.match(TokenType.PLUS, TokenType.MINUS):
            operator = BINARY_OPERATORS[self.previous().type]
            expr = BinaryExpression(expr, operator, self.multiplicative())

        return expr

    def multiplicative(self) -> Expression:
        """Parse multiplication/division/modulo."""
        expr = self.unary()

        while self.match(TokenType.STAR, TokenType.SLASH, TokenType.PERCENT):
            operator = BINARY_OPERATORS[self.previous().type]
            expr = BinaryExpression(expr, operator, self.unary())

        return expr

    def unary(self) -> Expression:
        """Parse prefix minus."""
        if self.match(TokenType.MINUS):
            self.enter()
            try:
                return UnaryExpression('-', self.unary())
            finally:
                self.depth -= 1

        return self.call()

    def call(self) -> Expression:
        """Parse a chain of calls, member accesses and index accesses."""
        expr = self.primary()

        while True:
            if self.match(TokenType.LPAREN):
                expr = CallExpression(expr, self.arguments())
            elif self.match(TokenType.DOT):
                name = self.consume(TokenType.IDENTIFIER, "Expected property name after '.'")
                expr = MemberExpression(expr, name.lexeme)
            elif self.match(TokenType.LBRACKET):
                index = self.expression()
                self.consume(TokenType.RBRACKET, "Expected ']' after index")
                expr = MemberExpression(expr, index, computed=True)
            else:
                break

        return expr

    def arguments(self) -> List[Expression]:
        """Parse call arguments after '('."""
        args = []

        if not self.check(TokenType.RPAREN):
            args.append(self.expression())
            while self.match(TokenType.COMMA):
                args.append(self.expression())

        self.consume(TokenType.RPAREN, "Expected ')' after arguments")
        return args

    def primary(self) -> Expression:
        """Parse primary expressions."""
        if self.match(TokenType.NUMBER):
            return NumericLiteral(float(self.previous().lexeme))
        if self.match(TokenType.STRING):
            return StringLiteral(self.previous().text)
        if self.match(TokenType.IDENTIFIER):
            return Identifier(self.previous().lexeme)
        if self.match(TokenType.THIS):
            return ThisExpression()

        if self.match(TokenType.NEW):
            name = self.consume(TokenType.IDENTIFIER, "Expected class name after 'new'")
            self.consume(TokenType.LPAREN, "Expected '(' after class name")
            return NewExpression(name.lexeme, self.arguments())

        if self.match(TokenType.AWAIT):
            return AwaitExpression(self.expression())

        if self.match(TokenType.LBRACKET):
            elements = []
            if not self.check(TokenType.RBRACKET):
                elements.append(self.expression())
                while self.match(TokenType.COMMA):
                    elements.append(self.expression())
            self.consume(TokenType.RBRACKET, "Expected ']' after array elements")
            return ArrayLiteral(elements)

        if self.match(TokenType.LPAREN):
            return self.parenthesized()

        raise self.error(self.peek(), "Expected expression")

    def parenthesized(self) -> Expression:
        """
        Parse a parenthesized expression or an arrow function.

        The comma-separated list is parsed eagerly; a following `=>` turns
        it into a parameter list, otherwise it must hold exactly one
        expression.
        """
        paren = self.previous()
        items = []
        if not self.check(TokenType.RPAREN):
            items.append(self.expression())
            while self.match(TokenType.COMMA):
                items.append(self.expression())
        self.consume(TokenType.RPAREN, "Expected ')' after expression")

        if self.match(TokenType.ARROW):
            params = []
            for item in items:
                if not isinstance(item, Identifier):
                    raise self.error(paren, "Arrow function parameters must be identifiers")
                params.append(item.name)

            if self.match(TokenType.LBRACE):
                body = self.block()
            else:
                body = [ReturnStatement(self.expression())]
            return ArrowFunctionExpression(params, body)

        if not items:
            raise self.error(paren, "Empty parentheses are only allowed before '=>'")
        if len(items) > 1:
            raise self.error(paren, "Comma expressions are not supported; missing '=>'?")

        return items[0]

    # =========================================================================
    # Helper Methods
    # =========================================================================

    def enter(self) -> None:
        """Track one more open statement or expression."""
        self.depth += 1
        if self.depth > MAX_NESTING_DEPTH:
            self.depth -= 1
            raise self.error(self.peek(), f"Nesting deeper than {MAX_NESTING_DEPTH} levels")

    def match(self, *types: TokenType) -> bool:
        """Check if current token matches any of the given types and advance."""
        for type in types:
            if self.check(type):
                self.advance()
                return True
        return False

    def check(self, type: TokenType) -> bool:
        """Check if current token is of given type."""
        if self.is_at_end():
            return False
        return self.peek().type == type

    def advance(self) -> Token:
        """Consume and return the current token."""
        if not self.is_at_end():
            self.current += 1
        return self.previous()

    def is_at_end(self) -> bool:
        """Check if we've reached the end of tokens."""
        return self.peek().type == TokenType.EOF

    def peek(self) -> Token:
        """Return the current token."""
        return self.tokens[self.current]

    def previous(self) -> Token:
        """Return the previous token."""
        return self.tokens[self.current - 1]

    def consume(self, type: TokenType, message: str) -> Token:
        """Consume a token of the expected type or raise an error."""
        if self.check(type):
            return self.advance()

        raise self.error(self.peek(), message)

    def error(self, token: Token, message: str) -> SyntaxError:
        """Build a SyntaxError that names the offending token."""
        found = "end of file" if token.type == TokenType.EOF else repr(token.lexeme)
        return SyntaxError(f"{message}, found {found}", token.line, token.column,
                           self.filename)


def parse(tokens: List[Token], filename: Optional[str] = None) -> Program:
    """Parse a token list into a Program."""
    return Parser(tokens, filename).parse()
