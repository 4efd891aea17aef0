"""Differential fuzzing of the STANDARD precedence mode against Python's eval"""
import math
import random
import re
import string
import warnings

from stackcalc.parser import Precedence
from stackcalc.session import Session

warnings.filterwarnings("ignore")


def eval_py(code: str) -> float | str:
    try:
        res = eval(code)
    except Exception as e:
        return str(e)
    if isinstance(res, (int, float)):
        return res
    return f"not a number: {res!r}"


def eval_my(code: str) -> float | str:
    try:
        res = Session(precedence=Precedence.STANDARD).evaluate_line(code)
    except Exception as e:
        return str(e)
    return res if res is not None else "no result"


if __name__ == "__main__":
    alphabet = string.digits + ".()+-*/ "

    def generate(length: int) -> str:
        return "".join(random.choices(alphabet, k=length))

    while True:
        code = generate(10)

        if not code.strip():
            continue  # blank lines never reach the calculator

        if re.findall(r"\*\s*\*", code):
            continue  # avoid generating powers (10**4)

        if re.findall(r"/\s*/", code):
            continue  # avoid generating int devision (10 // 3)

        if re.findall(r"(^|[-+*/(])\s*[-+]", code):
            continue  # no unary operators

        res_py = eval_py(code)
        res_my = eval_my(code)
        if isinstance(res_py, str) and "division by zero" in res_py and isinstance(res_my, float):
            continue  # python raises where IEEE gives inf or nan
        if isinstance(res_py, float) and isinstance(res_my, float) and math.isclose(res_my, res_py):
            continue
        if isinstance(res_py, int) and isinstance(res_my, float) and math.isclose(float(res_py), res_my):
            continue
        if isinstance(res_py, str) and isinstance(res_my, str):
            continue
        if isinstance(res_py, str) and res_py.startswith("leading zeros in decimal integer literals are not permitted"):
            continue
        print(f"{code!r}\npy: {res_py}\nmy: {res_my}\n\n")
