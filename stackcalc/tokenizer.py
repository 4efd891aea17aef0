import enum
import logging
from dataclasses import dataclass
from typing import Callable

from stackcalc.source import CalculatorError, Range, SourceContext
from stackcalc.utils import PrintableEnum

logger = logging.getLogger(__name__)


class LexError(CalculatorError):
    stage = "Lexer error"


class TokenType(PrintableEnum):
    NUMBER = enum.auto()
    IDENTIFIER = enum.auto()
    PLUS = enum.auto()
    MINUS = enum.auto()
    STAR = enum.auto()
    SLASH = enum.auto()
    PAREN_OPEN = enum.auto()
    PAREN_CLOSE = enum.auto()
    EQUAL = enum.auto()


@dataclass(frozen=True)
class Token:
    type: TokenType
    range: Range

    def lexeme(self, ctx: SourceContext) -> str:
        return ctx.get_from_range(self.range)

    def __str__(self) -> str:
        return f"<{self.type}>[{self.range.start}:{self.range.end}]"


def _is_valid_in_number(s: str) -> bool:
    return "0" <= s <= "9" or s == "."


def _is_identifier_start(s: str) -> bool:
    return s.isascii() and s.isalpha()


def _is_valid_in_identifier(s: str) -> bool:
    return s.isascii() and s.isalnum()


SINGLE_CHAR_TOKENS = {
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "(": TokenType.PAREN_OPEN,
    ")": TokenType.PAREN_CLOSE,
    "=": TokenType.EQUAL,
}


def _scan_while(code: str, start: int, predicate: Callable[[str], bool]) -> int:
    """Returns the offset of the first character at or after start that fails predicate"""
    end = start
    while end < len(code) and predicate(code[end]):
        end += 1
    return end


def tokenize(code: str) -> list[Token]:
    i = 0
    tokens: list[Token] = []
    while i < len(code):
        ch = code[i]
        if ch.isspace():
            i = _scan_while(code, i, str.isspace)
        elif ch in SINGLE_CHAR_TOKENS:
            tokens.append(Token(type=SINGLE_CHAR_TOKENS[ch], range=Range(i, i + 1)))
            i += 1
        elif _is_valid_in_number(ch):
            number_end_idx = _scan_while(code, i, _is_valid_in_number)
            tokens.append(Token(type=TokenType.NUMBER, range=Range(i, number_end_idx)))
            i = number_end_idx
        elif _is_identifier_start(ch):
            ident_end_idx = _scan_while(code, i, _is_valid_in_identifier)
            tokens.append(Token(type=TokenType.IDENTIFIER, range=Range(i, ident_end_idx)))
            i = ident_end_idx
        else:
            raise LexError(f"Unexpected character: {ch!r}", code=code, position=i)

    logger.debug("Scanned %d token(s) from %r", len(tokens), code)
    return tokens


def describe_tokens(ctx: SourceContext, tokens: list[Token]) -> str:
    return " ".join(f"<{t.type}>{t.lexeme(ctx)}" for t in tokens)
