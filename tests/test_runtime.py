import math

import pytest

from stackcalc.nodes import Assignment, BinaryOperation, BinaryOperator, NumberLiteral, VariableRef
from stackcalc.runtime import EvalError, VirtualMachine, evaluate, execute


def binop(operator: BinaryOperator, left: float, right: float) -> BinaryOperation:
    return BinaryOperation(operator=operator, left=NumberLiteral(left), right=NumberLiteral(right))


def test_number_literal_pushes_value() -> None:
    vm = VirtualMachine()
    execute(NumberLiteral(4.5), vm)
    assert vm.stack == [4.5]


@pytest.mark.parametrize(
    "operator, expected",
    [
        pytest.param(BinaryOperator.ADD, 14.0),
        pytest.param(BinaryOperator.SUB, 6.0),
        pytest.param(BinaryOperator.MUL, 40.0),
        pytest.param(BinaryOperator.DIV, 2.5),
    ],
)
def test_binary_operation_operand_order(operator: BinaryOperator, expected: float) -> None:
    vm = VirtualMachine()
    execute(binop(operator, 10.0, 4.0), vm)
    assert vm.stack == [expected]


@pytest.mark.parametrize(
    "left, right, expected",
    [
        pytest.param(1.0, 0.0, math.inf),
        pytest.param(-1.0, 0.0, -math.inf),
        pytest.param(1.0, -0.0, -math.inf),
        pytest.param(math.inf, 0.0, math.inf),
    ],
)
def test_division_by_zero_follows_ieee(left: float, right: float, expected: float) -> None:
    assert evaluate(binop(BinaryOperator.DIV, left, right), VirtualMachine()) == expected


def test_zero_divided_by_zero_is_nan() -> None:
    result = evaluate(binop(BinaryOperator.DIV, 0.0, 0.0), VirtualMachine())
    assert result is not None and math.isnan(result)


def test_assignment_consumes_value() -> None:
    vm = VirtualMachine()
    assert evaluate(Assignment(name="x", rhs=binop(BinaryOperator.ADD, 1.0, 2.0)), vm) is None
    assert vm.stack == []
    assert vm.variables == {"x": 3.0}


def test_variables_persist() -> None:
    vm = VirtualMachine()
    evaluate(Assignment(name="x", rhs=NumberLiteral(5.0)), vm)
    assert evaluate(VariableRef("x"), vm) == 5.0
    assert evaluate(VariableRef("x"), vm) == 5.0


def test_unset_variable_reads_as_zero() -> None:
    vm = VirtualMachine()
    assert evaluate(VariableRef("nothing"), vm) == 0.0
    assert vm.variables == {}


def test_strict_mode_rejects_unset_variable() -> None:
    vm = VirtualMachine(strict=True)
    with pytest.raises(EvalError) as exc_info:
        evaluate(Assignment(name="x", rhs=VariableRef("nothing")), vm)
    assert str(exc_info.value) == "[Runtime error] undefined variable 'nothing'"
    assert "x" not in vm.variables


def test_pop_from_empty_stack() -> None:
    with pytest.raises(EvalError, match="underflow"):
        VirtualMachine().pop()


def test_unexpected_expression_type() -> None:
    with pytest.raises(EvalError, match="Unexpected expression type"):
        execute("1 + 1", VirtualMachine())  # type: ignore


def chain(operator: BinaryOperator, count: int, grow_left: bool) -> BinaryOperation | NumberLiteral:
    tree: BinaryOperation | NumberLiteral = NumberLiteral(1.0)
    for _ in range(count - 1):
        if grow_left:
            tree = BinaryOperation(operator=operator, left=tree, right=NumberLiteral(1.0))
        else:
            tree = BinaryOperation(operator=operator, left=NumberLiteral(1.0), right=tree)
    return tree


@pytest.mark.parametrize(
    "operator, grow_left, expected",
    [
        pytest.param(BinaryOperator.ADD, True, 5000.0),
        pytest.param(BinaryOperator.ADD, False, 5000.0),
        pytest.param(BinaryOperator.MUL, False, 1.0),
        pytest.param(BinaryOperator.SUB, True, -4998.0),
    ],
)
def test_deep_trees_evaluate(operator: BinaryOperator, grow_left: bool, expected: float) -> None:
    vm = VirtualMachine()
    assert evaluate(chain(operator, 5000, grow_left), vm) == expected
    assert vm.stack == []


def test_deep_assignment() -> None:
    vm = VirtualMachine()
    assert evaluate(Assignment(name="total", rhs=chain(BinaryOperator.ADD, 5000, grow_left=True)), vm) is None
    assert vm.variables == {"total": 5000.0}


def test_eval_error_has_no_source_snippet() -> None:
    error = EvalError("operand stack underflow")
    assert error.code == ""
    assert error.snippet() == ""
