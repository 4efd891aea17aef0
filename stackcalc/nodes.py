import enum
from dataclasses import dataclass

from stackcalc.utils import PrintableEnum


class BinaryOperator(PrintableEnum):
    ADD = enum.auto()
    SUB = enum.auto()
    MUL = enum.auto()
    DIV = enum.auto()


@dataclass
class NumberLiteral:
    value: float


@dataclass
class VariableRef:
    name: str


@dataclass
class BinaryOperation:
    operator: BinaryOperator
    left: "Expression"
    right: "Expression"


@dataclass
class Assignment:
    name: str
    rhs: "Expression"


Expression = NumberLiteral | VariableRef | BinaryOperation | Assignment


OPERATOR_SYMBOLS = {
    BinaryOperator.ADD: "+",
    BinaryOperator.SUB: "-",
    BinaryOperator.MUL: "*",
    BinaryOperator.DIV: "/",
}


def format_expression(expression: Expression) -> str:
    """Fully parenthesized rendering, used to show how a line was grouped"""
    parts: list[str] = []
    pending: list[tuple[Expression, bool]] = [(expression, False)]
    while pending:
        node, operands_ready = pending.pop()
        if isinstance(node, NumberLiteral):
            parts.append(repr(node.value))
        elif isinstance(node, VariableRef):
            parts.append(node.name)
        elif isinstance(node, BinaryOperation):
            if operands_ready:
                right = parts.pop()
                left = parts.pop()
                parts.append(f"({left} {OPERATOR_SYMBOLS[node.operator]} {right})")
            else:
                pending.append((node, True))
                pending.append((node.right, False))
                pending.append((node.left, False))
        elif isinstance(node, Assignment):
            if operands_ready:
                parts.append(f"{node.name} = {parts.pop()}")
            else:
                pending.append((node, True))
                pending.append((node.rhs, False))
        else:
            raise TypeError(f"Unexpected expression type: {node!r}")
    return parts.pop()
