import argparse
import logging
import sys
from typing import Optional

from stackcalc.nodes import format_expression
from stackcalc.parser import Precedence
from stackcalc.runtime import VirtualMachine
from stackcalc.session import Session, is_blank, is_quit
from stackcalc.source import CalculatorError
from stackcalc.tokenizer import describe_tokens

logger = logging.getLogger("stackcalc")


def build_argparser() -> argparse.ArgumentParser:
    argparser = argparse.ArgumentParser(description="Interactive arithmetic calculator")
    argparser.add_argument("--prompt", default=">> ", help="Input prompt (default: %(default)r)")
    argparser.add_argument(
        "--standard-precedence",
        action="store_true",
        help="Use conventional operator precedence instead of the reference grouping rules",
    )
    argparser.add_argument(
        "--strict-variables", action="store_true", help="Fail on reading a variable that was never assigned"
    )
    argparser.add_argument("--emit-tokens", action="store_true", help="Print the token stream of every line")
    argparser.add_argument("--emit-ast", action="store_true", help="Print the parsed tree of every line")
    argparser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return argparser


def process_line(session: Session, line: str, emit_tokens: bool = False, emit_ast: bool = False) -> Optional[str]:
    """Returns the text to print for one input line: a result, an error message or None"""
    try:
        ctx, tokens = session.scan(line)
        if emit_tokens:
            print(f"tokens: {describe_tokens(ctx, tokens)}")
        expression = session.parse(ctx, tokens)
        if emit_ast:
            print(f"ast: {format_expression(expression)}")
        return session.run_expression(expression)
    except CalculatorError as e:
        snippet = e.snippet()
        if snippet:
            logger.debug("Failed line:\n%s", snippet)
        return str(e)


def main(argv: Optional[list[str]] = None) -> int:
    args = build_argparser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO, stream=sys.stderr)

    session = Session(
        vm=VirtualMachine(strict=args.strict_variables),
        precedence=Precedence.STANDARD if args.standard_precedence else Precedence.REFERENCE,
    )
    logger.debug("Starting session with %s precedence", session.precedence)

    print('Type "quit" to leave.')
    while True:
        try:
            line = input(args.prompt)
        except EOFError:
            break

        if is_quit(line):
            break
        if is_blank(line):
            continue

        output = process_line(session, line, emit_tokens=args.emit_tokens, emit_ast=args.emit_ast)
        if output is not None:
            print(output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
