import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Optional

from stackcalc.nodes import Assignment, BinaryOperation, BinaryOperator, Expression, NumberLiteral, VariableRef
from stackcalc.source import CalculatorError

logger = logging.getLogger(__name__)


@dataclass
class EvalError(CalculatorError):
    code: str = ""
    position: int = 0

    stage = "Runtime error"

    # nodes carry no source ranges, so there is no offset worth reporting
    def __str__(self) -> str:
        return f"[{self.stage}] {self.errmsg}"

    def snippet(self) -> str:
        return ""


@dataclass
class VirtualMachine:
    """Operand stack plus the variable table that outlives a single line.

    In the default lenient mode reading a variable that was never assigned gives 0.0;
    with strict=True it raises EvalError instead.
    """

    stack: list[float] = field(default_factory=list)
    variables: dict[str, float] = field(default_factory=dict)
    strict: bool = False

    def push(self, value: float) -> None:
        self.stack.append(value)

    def pop(self) -> float:
        if not self.stack:
            raise EvalError("operand stack underflow")
        return self.stack.pop()

    def stack_size(self) -> int:
        return len(self.stack)

    def get(self, name: str) -> float:
        if name in self.variables:
            return self.variables[name]
        if self.strict:
            raise EvalError(f"undefined variable {name!r}")
        return 0.0

    def set(self, name: str, value: float) -> None:
        self.variables[name] = value


def _divide(a: float, b: float) -> float:
    # python raises on x / 0.0, IEEE-754 gives a signed infinity or nan
    if b == 0.0:
        if a == 0.0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


BINARY_OPERATION_IMPLS: dict[BinaryOperator, Callable[[float, float], float]] = {
    BinaryOperator.ADD: lambda a, b: a + b,
    BinaryOperator.SUB: lambda a, b: a - b,
    BinaryOperator.MUL: lambda a, b: a * b,
    BinaryOperator.DIV: _divide,
}


def execute(expression: Expression, vm: VirtualMachine) -> None:
    """Runs expression against vm, communicating results only through the operand stack.

    The tree is walked in post-order with an explicit work stack, so the depth of the
    tree is not limited by the interpreter's recursion limit. Each entry is a node and
    a flag telling whether its operands have already been pushed.
    """
    pending: list[tuple[Expression, bool]] = [(expression, False)]
    while pending:
        node, operands_ready = pending.pop()
        if isinstance(node, NumberLiteral):
            vm.push(node.value)
        elif isinstance(node, VariableRef):
            vm.push(vm.get(node.name))
        elif isinstance(node, BinaryOperation):
            if operands_ready:
                right_val = vm.pop()
                left_val = vm.pop()
                vm.push(BINARY_OPERATION_IMPLS[node.operator](left_val, right_val))
            else:
                # left is popped first, so it runs first
                pending.append((node, True))
                pending.append((node.right, False))
                pending.append((node.left, False))
        elif isinstance(node, Assignment):
            if operands_ready:
                vm.set(node.name, vm.pop())
            else:
                pending.append((node, True))
                pending.append((node.rhs, False))
        else:
            raise EvalError(f"Unexpected expression type: {node!r}")


def evaluate(expression: Expression, vm: VirtualMachine) -> Optional[float]:
    """Executes a top-level node and pops its result; None for a bare assignment"""
    execute(expression, vm)
    if vm.stack_size() == 0:
        logger.debug("No result, variables: %s", vm.variables)
        return None
    result = vm.pop()
    logger.debug("Result: %r", result)
    return result
