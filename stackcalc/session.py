from dataclasses import dataclass, field
from typing import Optional

from stackcalc.nodes import Expression
from stackcalc.parser import Precedence, parse
from stackcalc.runtime import VirtualMachine, evaluate
from stackcalc.source import SourceContext
from stackcalc.tokenizer import Token, tokenize
from stackcalc.utils import format_number

QUIT_COMMAND = "quit"


def is_quit(line: str) -> bool:
    return line == QUIT_COMMAND


def is_blank(line: str) -> bool:
    return not line.strip()


@dataclass
class Session:
    vm: VirtualMachine = field(default_factory=VirtualMachine)
    precedence: Precedence = Precedence.REFERENCE

    def scan(self, line: str) -> tuple[SourceContext, list[Token]]:
        return SourceContext(line), tokenize(line)

    def parse(self, ctx: SourceContext, tokens: list[Token]) -> Expression:
        return parse(ctx, tokens, precedence=self.precedence)

    def execute(self, expression: Expression) -> Optional[float]:
        # leftovers of a line that failed half-way must not become operands of the next one
        self.vm.stack.clear()
        return evaluate(expression, self.vm)

    def evaluate_line(self, line: str) -> Optional[float]:
        return self.execute(self.parse(*self.scan(line)))

    def run_expression(self, expression: Expression) -> Optional[str]:
        """Evaluates an already parsed line and formats the result; None when there is nothing to print"""
        result = self.execute(expression)
        if result is None:
            return None
        return format_number(result)

    def run(self, line: str) -> Optional[str]:
        return self.run_expression(self.parse(*self.scan(line)))
