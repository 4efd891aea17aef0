import enum
import logging
from typing import Optional

from stackcalc.nodes import (
    Assignment,
    BinaryOperation,
    BinaryOperator,
    Expression,
    NumberLiteral,
    VariableRef,
    format_expression,
)
from stackcalc.source import CalculatorError, SourceContext
from stackcalc.tokenizer import Token, TokenType
from stackcalc.utils import PrintableEnum

logger = logging.getLogger(__name__)


class ParseError(CalculatorError):
    stage = "Parser error"


class InvalidNumberError(ParseError):
    """Raised for number tokens that are not a valid numeral, like '1.2.3' or '.'"""


class Precedence(PrintableEnum):
    """Grouping rules for binary operators.

    REFERENCE parses the right operand of + and - as a single factor and the right
    operand of * and / as a whole term. As a result `8 / 4 / 2` is `8 / (4 / 2)` and
    `3 + 4 * 2` stops after `4`, leaving `* 2` unparsed (a ParseError).

    STANDARD is the usual grammar: * and / bind tighter than + and -, and all four
    are left-associative.
    """

    REFERENCE = enum.auto()
    STANDARD = enum.auto()


ADDITIVE_OPERATORS = {
    TokenType.PLUS: BinaryOperator.ADD,
    TokenType.MINUS: BinaryOperator.SUB,
}

MULTIPLICATIVE_OPERATORS = {
    TokenType.STAR: BinaryOperator.MUL,
    TokenType.SLASH: BinaryOperator.DIV,
}


class TokenCursor:
    """Forward-only, bounds-checked position in a token list"""

    def __init__(self, ctx: SourceContext, tokens: list[Token]) -> None:
        self.ctx = ctx
        self.tokens = tokens
        self.idx = 0

    def at_end(self) -> bool:
        return self.idx >= len(self.tokens)

    def peek(self, offset: int = 0) -> Optional[Token]:
        idx = self.idx + offset
        if idx < len(self.tokens):
            return self.tokens[idx]
        return None

    def peek_type(self, offset: int = 0) -> Optional[TokenType]:
        token = self.peek(offset)
        return token.type if token is not None else None

    def advance(self) -> Token:
        token = self.peek()
        if token is None:
            raise self.error("unexpected end of input")
        self.idx += 1
        return token

    def error(self, errmsg: str, token: Optional[Token] = None, cls: type[ParseError] = ParseError) -> ParseError:
        if token is None:
            token = self.peek()
        position = token.range.start if token is not None else len(self.ctx)
        return cls(errmsg, code=self.ctx.src, position=position)


def parse(ctx: SourceContext, tokens: list[Token], precedence: Precedence = Precedence.REFERENCE) -> Expression:
    cursor = TokenCursor(ctx, tokens)
    try:
        result = _parse_statement(cursor, precedence)
    except RecursionError:
        # deep parentheses, or long * and / chains grouped to the right
        raise cursor.error("expression nested too deeply") from None
    leftover = cursor.peek()
    if leftover is not None:
        raise cursor.error(f"unexpected token after expression: {leftover.lexeme(ctx)!r}", token=leftover)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Parsed (%s): %s", precedence, format_expression(result))
    return result


def _parse_statement(cursor: TokenCursor, precedence: Precedence) -> Expression:
    # one token of lookahead decides between `name = expr` and a bare expression
    if cursor.peek_type(1) is TokenType.EQUAL:
        return _parse_assignment(cursor, precedence)
    return _parse_expr(cursor, precedence)


def _parse_assignment(cursor: TokenCursor, precedence: Precedence) -> Assignment:
    target = cursor.advance()
    if target.type is not TokenType.IDENTIFIER:
        raise cursor.error("expected an identifier on the left side of an assignment", token=target)
    cursor.advance()  # EQUAL, checked by the caller
    rhs = _parse_expr(cursor, precedence)
    return Assignment(name=target.lexeme(cursor.ctx), rhs=rhs)


def _parse_expr(cursor: TokenCursor, precedence: Precedence) -> Expression:
    left = _parse_term(cursor, precedence)
    while cursor.peek_type() in ADDITIVE_OPERATORS:
        operator = ADDITIVE_OPERATORS[cursor.advance().type]
        if precedence is Precedence.STANDARD:
            right = _parse_term(cursor, precedence)
        else:
            right = _parse_factor(cursor, precedence)
        left = BinaryOperation(operator=operator, left=left, right=right)
    return left


def _parse_term(cursor: TokenCursor, precedence: Precedence) -> Expression:
    left = _parse_factor(cursor, precedence)
    while cursor.peek_type() in MULTIPLICATIVE_OPERATORS:
        operator = MULTIPLICATIVE_OPERATORS[cursor.advance().type]
        if precedence is Precedence.STANDARD:
            right = _parse_factor(cursor, precedence)
        else:
            right = _parse_term(cursor, precedence)
        left = BinaryOperation(operator=operator, left=left, right=right)
    return left


def _parse_factor(cursor: TokenCursor, precedence: Precedence) -> Expression:
    token = cursor.advance()
    if token.type is TokenType.NUMBER:
        lexeme = token.lexeme(cursor.ctx)
        try:
            return NumberLiteral(float(lexeme))
        except ValueError:
            raise cursor.error(f"invalid number literal: {lexeme!r}", token=token, cls=InvalidNumberError) from None
    elif token.type is TokenType.IDENTIFIER:
        return VariableRef(token.lexeme(cursor.ctx))
    elif token.type is TokenType.PAREN_OPEN:
        inner = _parse_expr(cursor, precedence)
        if cursor.peek_type() is not TokenType.PAREN_CLOSE:
            raise cursor.error("expected closing parenthesis")
        cursor.advance()
        return inner
    else:
        raise cursor.error(f"unexpected token in expression: {token.lexeme(cursor.ctx)!r}", token=token)
