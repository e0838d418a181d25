"""
RiriLang Abstract Syntax Tree

Defines AST node classes for the RiriLang language. A Program owns all of its
descendants; nodes are never shared between parents.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Any, Union


# =============================================================================
# Base Classes
# =============================================================================

class ASTNode(ABC):
    """Base class for all AST nodes."""

    @abstractmethod
    def accept(self, visitor: 'ASTVisitor') -> Any:
        """Accept a visitor for traversal."""
        pass


class Expression(ASTNode):
    """Base class for expression nodes."""
    pass


class Statement(ASTNode):
    """Base class for statement nodes."""
    pass


# =============================================================================
# Expressions
# =============================================================================

@dataclass
class Identifier(Expression):
    """Variable, function or class name reference."""
    name: str

    def accept(self, visitor: 'ASTVisitor') -> Any:
        return visitor.visit_identifier(self)


@dataclass
class NumericLiteral(Expression):
    """Number literal. Always stored as a float."""
    value: float

    def accept(self, visitor: 'ASTVisitor') -> Any:
        return visitor.visit_numeric_literal(self)


@dataclass
class StringLiteral(Expression):
    """String literal; escape sequences are kept verbatim."""
    value: str

    def accept(self, visitor: 'ASTVisitor') -> Any:
        return visitor.visit_string_literal(self)


@dataclass
class ThisExpression(Expression):
    """The `this` receiver inside a method."""

    def accept(self, visitor: 'ASTVisitor') -> Any:
        return visitor.visit_this(self)


@dataclass
class ArrayLiteral(Expression):
    """Array literal `[a, b, c]`."""
    elements: List[Expression]

    def accept(self, visitor: 'ASTVisitor') -> Any:
        return visitor.visit_array_literal(self)


@dataclass
class UnaryExpression(Expression):
    """Prefix operator expression (only `-`)."""
    operator: str
    operand: Expression

    def accept(self, visitor: 'ASTVisitor') -> Any:
        return visitor.visit_unary(self)


@dataclass
class BinaryExpression(Expression):
    """Binary operator expression."""
    left: Expression
    operator: str
    right: Expression

    def accept(self, visitor: 'ASTVisitor') -> Any:
        return visitor.visit_binary(self)


@dataclass
class ConditionalExpression(Expression):
    """Ternary conditional expression (test ? consequent : alternate)."""
    test: Expression
    consequent: Expression
    alternate: Expression

    def accept(self, visitor: 'ASTVisitor') -> Any:
        return visitor.visit_conditional(self)


@dataclass
class AssignmentExpression(Expression):
    """Assignment expression."""
    target: Expression
    value: Expression

    def accept(self, visitor: 'ASTVisitor') -> Any:
        return visitor.visit_assignment(self)


@dataclass
class CallExpression(Expression):
    """Function or method call expression."""
    callee: Expression
    args: List[Expression]

    def accept(self, visitor: 'ASTVisitor') -> Any:
        return visitor.visit_call(self)


@dataclass
class MemberExpression(Expression):
    """Property access (a.b) or computed access (a[b])."""
    object: Expression
    property: Union[str, Expression]
    computed: bool = False

    def accept(self, visitor: 'ASTVisitor') -> Any:
        return visitor.visit_member(self)


@dataclass
class NewExpression(Expression):
    """Object construction `new ClassName(args)`."""
    class_name: str
    args: List[Expression]

    def accept(self, visitor: 'ASTVisitor') -> Any:
        return visitor.visit_new(self)


@dataclass
class AwaitExpression(Expression):
    """`await expr`."""
    argument: Expression

    def accept(self, visitor: 'ASTVisitor') -> Any:
        return visitor.visit_await(self)


@dataclass
class ArrowFunctionExpression(Expression):
    """Arrow function. An expression body is stored as a single return."""
    params: List[str]
    body: List[Statement]

    def accept(self, visitor: 'ASTVisitor') -> Any:
        return visitor.visit_arrow_function(self)


# =============================================================================
# Statements
# =============================================================================

@dataclass
class ExpressionStatement(Statement):
    """Expression as a statement."""
    expression: Expression

    def accept(self, visitor: 'ASTVisitor') -> Any:
        return visitor.visit_expression_statement(self)


@dataclass
class VariableDeclaration(Statement):
    """`let name = value;` (also used for class fields)."""
    name: str
    value: Optional[Expression] = None

    def accept(self, visitor: 'ASTVisitor') -> Any:
        return visitor.visit_variable_declaration(self)


@dataclass
class FunctionDeclaration(Statement):
    """Function declaration; also used for class methods."""
    name: str
    params: List[str]
    body: List[Statement]
    is_async: bool = False

    def accept(self, visitor: 'ASTVisitor') -> Any:
        return visitor.visit_function_declaration(self)


@dataclass
class ClassDeclaration(Statement):
    """Class declaration with fields and methods."""
    name: str
    fields: List[VariableDeclaration]
    methods: List[FunctionDeclaration]

    def accept(self, visitor: 'ASTVisitor') -> Any:
        return visitor.visit_class_declaration(self)


@dataclass
class ImportDeclaration(Statement):
    """`import "path";`"""
    path: str
    line: Optional[int] = field(default=None, compare=False)

    def accept(self, visitor: 'ASTVisitor') -> Any:
        return visitor.visit_import(self)


@dataclass
class ReturnStatement(Statement):
    """Return statement; value is None for a bare `return;`."""
    value: Optional[Expression] = None

    def accept(self, visitor: 'ASTVisitor') -> Any:
        return visitor.visit_return(self)


@dataclass
class IfStatement(Statement):
    """If/else statement. `else if` is an else branch holding one IfStatement."""
    condition: Expression
    then_branch: List[Statement]
    else_branch: Optional[List[Statement]] = None

    def accept(self, visitor: 'ASTVisitor') -> Any:
        return visitor.visit_if(self)


@dataclass
class WhileStatement(Statement):
    """While loop statement."""
    condition: Expression
    body: List[Statement]

    def accept(self, visitor: 'ASTVisitor') -> Any:
        return visitor.visit_while(self)


@dataclass
class ForStatement(Statement):
    """C-style for loop; every clause is optional."""
    init: Optional[Statement]
    condition: Optional[Expression]
    update: Optional[Expression]
    body: List[Statement]

    def accept(self, visitor: 'ASTVisitor') -> Any:
        return visitor.visit_for(self)


@dataclass
class CaseClause:
    """Single `case test:` clause of a switch."""
    test: Expression
    consequent: List[Statement]


@dataclass
class SwitchStatement(Statement):
    """Switch statement with native fallthrough."""
    discriminant: Expression
    cases: List[CaseClause]
    default_case: Optional[List[Statement]] = None

    def accept(self, visitor: 'ASTVisitor') -> Any:
        return visitor.visit_switch(self)


@dataclass
class BreakStatement(Statement):
    """Break statement."""

    def accept(self, visitor: 'ASTVisitor') -> Any:
        return visitor.visit_break(self)


@dataclass
class ContinueStatement(Statement):
    """Continue statement."""

    def accept(self, visitor: 'ASTVisitor') -> Any:
        return visitor.visit_continue(self)


@dataclass
class TryStatement(Statement):
    """try / catch(param)? / finally? statement.

    catch_body is None when the source had no catch clause.
    """
    body: List[Statement]
    catch_body: Optional[List[Statement]] = None
    catch_param: Optional[str] = None
    finally_body: Optional[List[Statement]] = None
    line: Optional[int] = field(default=None, compare=False)

    def accept(self, visitor: 'ASTVisitor') -> Any:
        return visitor.visit_try(self)


@dataclass
class Program(ASTNode):
    """Root node of the AST."""
    body: List[Statement]

    def accept(self, visitor: 'ASTVisitor') -> Any:
        return visitor.visit_program(self)


# =============================================================================
# Visitor Interface
# =============================================================================

class ASTVisitor(ABC):
    """Visitor interface for AST traversal."""

    # Expressions
    @abstractmethod
    def visit_identifier(self, node: Identifier) -> Any:
        pass

    @abstractmethod
    def visit_numeric_literal(self, node: NumericLiteral) -> Any:
        pass

    @abstractmethod
    def visit_string_literal(self, node: StringLiteral) -> Any:
        pass

    @abstractmethod
    def visit_this(self, node: ThisExpression) -> Any:
        pass

    @abstractmethod
    def visit_array_literal(self, node: ArrayLiteral) -> Any:
        pass

    @abstractmethod
    def visit_unary(self, node: UnaryExpression) -> Any:
        pass

    @abstractmethod
    def visit_binary(self, node: BinaryExpression) -> Any:
        pass

    @abstractmethod
    def visit_conditional(self, node: ConditionalExpression) -> Any:
        pass

    @abstractmethod
    def visit_assignment(self, node: AssignmentExpression) -> Any:
        pass

    @abstractmethod
    def visit_call(self, node: CallExpression) -> Any:
        pass

    @abstractmethod
    def visit_member(self, node: MemberExpression) -> Any:
        pass

    @abstractmethod
    def visit_new(self, node: NewExpression) -> Any:
        pass

    @abstractmethod
    def visit_await(self, node: AwaitExpression) -> Any:
        pass

    @abstractmethod
    def visit_arrow_function(self, node: ArrowFunctionExpression) -> Any:
        pass

    # Statements
    @abstractmethod
    def visit_expression_statement(self, node: ExpressionStatement) -> Any:
        pass

    @abstractmethod
    def visit_variable_declaration(self, node: VariableDeclaration) -> Any:
        pass

    @abstractmethod
    def visit_function_declaration(self, node: FunctionDeclaration) -> Any:
        pass

    @abstractmethod
    def visit_class_declaration(self, node: ClassDeclaration) -> Any:
        pass

    @abstractmethod
    def visit_import(self, node: ImportDeclaration) -> Any:
        pass

    @abstractmethod
    def visit_return(self, node: ReturnStatement) -> Any:
        pass

    @abstractmethod
    def visit_if(self, node: IfStatement) -> Any:
        pass

    @abstractmethod
    def visit_while(self, node: WhileStatement) -> Any:
        pass

    @abstractmethod
    def visit_for(self, node: ForStatement) -> Any:
        pass

    @abstractmethod
    def visit_switch(self, node: SwitchStatement) -> Any:
        pass

    @abstractmethod
    def visit_break(self, node: BreakStatement) -> Any:
        pass

    @abstractmethod
    def visit_continue(self, node: ContinueStatement) -> Any:
        pass

    @abstractmethod
    def visit_try(self, node: TryStatement) -> Any:
        pass

    @abstractmethod
    def visit_program(self, node: Program) -> Any:
        pass
