import pytest

from recfun.recfun_config import OverflowPolicy
from recfun.recfun_datatypes import (
    Function, Zero, Successor, Projection, Composition, PrimitiveRecursion,
    MAX_NATURAL,
)
from recfun.recfun_errors import NaturalOverflow
from recfun.recfun_interpreter import Evaluator, successor
from recfun.recfun_runtime import parse_functions

SCRIPT = """
dec = [$z, $p2.1];
add = [$p1.1, ($s:$p3.3)];
sub = [$p1.1, (dec:$p3.3)];
mult = [$z, (add:$p3.3, $p3.1)];
root = {sub, 100};
short = {sub, 3};
never = {($s:$p3.1), 5};
neverPair = {never, 10};
one3 = ($s:($z:$p3.1));
gate = (sub:one3, $p3.2);
gated = {gate, 5};
outer = {gated, 10};
never3 = {($s:$p4.1), 5};
loopy = [$p1.1, ($p3.1:never3, $p3.2, $p3.3)];
stuck = [neverPair, $p3.3];
"""

@pytest.fixture(scope="module")
def names():
    return parse_functions(SCRIPT)

@pytest.fixture
def evaluator():
    """Returns a new Evaluator for each test."""
    return Evaluator()

ZERO = Function(Zero(), 1, 0)
SUCC = Function(Successor(), 1)

# --- Base functions ---

def test_zero_ignores_arguments(evaluator):
    assert evaluator.evaluate(ZERO, [7]) == 0
    assert evaluator.evaluate(ZERO, []) == 0

def test_successor(evaluator):
    assert evaluator.evaluate(SUCC, [4]) == 5
    assert evaluator.evaluate(SUCC, []) is None

@pytest.mark.parametrize("n", [1, 2, 3, 5])
def test_projection_selects_argument(evaluator, n):
    args = [10 * k + 1 for k in range(n)]
    for i in range(1, n + 1):
        assert evaluator.evaluate(Function(Projection(n, i), n), args) == args[i - 1]

def test_projection_out_of_range_is_undefined(evaluator):
    assert evaluator.evaluate(Function(Projection(3, 3), 3), [1]) is None

# --- Composition ---

def test_composition_feeds_component_results_to_base(evaluator, names):
    swap_sub = Function(Composition(names["sub"], (Function(Projection(2, 2), 2), Function(Projection(2, 1), 2))), 2)
    assert evaluator.evaluate(swap_sub, [3, 10]) == 7

def test_composition_short_circuits_on_undefined(evaluator, names):
    fn = Function(Composition(SUCC, (names["neverPair"],)), 1)
    assert evaluator.evaluate(fn, [1]) is None

# --- Primitive recursion ---

@pytest.mark.parametrize("x, n, expected", [(2, 3, 5), (0, 0, 0), (7, 0, 7), (0, 9, 9)])
def test_add(evaluator, names, x, n, expected):
    assert evaluator.evaluate(names["add"], [x, n]) == expected

@pytest.mark.parametrize("n, expected", [(0, 0), (1, 0), (5, 4), (100, 99)])
def test_dec(evaluator, names, n, expected):
    assert evaluator.evaluate(names["dec"], [n]) == expected

@pytest.mark.parametrize("x, n, expected", [(10, 3, 7), (3, 10, 0), (4, 4, 0)])
def test_truncated_sub(evaluator, names, x, n, expected):
    assert evaluator.evaluate(names["sub"], [x, n]) == expected

def test_mult_uses_constant_base(evaluator, names):
    assert evaluator.evaluate(names["mult"], [3, 4]) == 12
    assert evaluator.evaluate(names["mult"], [3, 0]) == 0

def test_zero_bound_returns_base_value(evaluator):
    base = Function(Projection(2, 2), 2)
    step = Function(Projection(4, 1), 4)
    fn = Function(PrimitiveRecursion(base, step), 3)
    assert evaluator.evaluate(fn, [5, 6, 0]) == 6

def test_step_sees_previous_counter_and_result(evaluator):
    # step(k, acc) = k, so after n iterations the result is n - 1
    fn = Function(PrimitiveRecursion(ZERO, Function(Projection(2, 1), 2)), 1)
    assert evaluator.evaluate(fn, [3]) == 2

def test_undefined_base_is_undefined(evaluator, names):
    assert evaluator.evaluate(names["stuck"], [1, 0]) is None
    assert evaluator.evaluate(names["stuck"], [1, 4]) is None

def test_undefined_step_aborts(evaluator, names):
    assert evaluator.evaluate(names["loopy"], [1, 0]) == 1
    assert evaluator.evaluate(names["loopy"], [1, 1]) is None

def test_primitive_without_arguments_is_undefined(evaluator, names):
    assert evaluator.evaluate(names["dec"], []) is None

# --- Minimization ---

def test_minimization_returns_least_zero(evaluator, names):
    # sub(x, i) is zero for every i >= x; the smallest wins
    assert evaluator.evaluate(names["root"], [7]) == 7
    assert evaluator.evaluate(names["root"], [0]) == 0

def test_minimization_without_zero_in_bound_is_undefined(evaluator, names):
    assert evaluator.evaluate(names["short"], [7]) is None
    assert evaluator.evaluate(names["short"], [3]) == 3

def test_minimization_bound_is_inclusive(evaluator):
    # base(x, i) = x - i truncated, bound equals the root
    fn = parse_functions("dec=[$z,$p2.1];sub=[$p1.1,(dec:$p3.3)];m={sub,5};")["m"]
    assert evaluator.evaluate(fn, [5]) == 5
    assert evaluator.evaluate(fn, [6]) is None

def test_minimization_stops_at_first_undefined(evaluator, names):
    # gated(x, i) is undefined at i = 0 and zero for i >= 1
    assert evaluator.evaluate(names["gated"], [4, 0]) is None
    assert evaluator.evaluate(names["gated"], [4, 1]) == 0
    assert evaluator.evaluate(names["outer"], [4]) is None

def test_never_is_undefined(evaluator, names):
    assert evaluator.evaluate(names["never"], [1, 2]) is None

# --- Overflow ---

def test_successor_helper():
    assert successor(0) == 1
    assert successor(MAX_NATURAL - 1) == MAX_NATURAL
    with pytest.raises(NaturalOverflow):
        successor(MAX_NATURAL)
    assert successor(MAX_NATURAL, OverflowPolicy.WRAP) == 0
    assert successor(MAX_NATURAL, OverflowPolicy.SATURATE) == MAX_NATURAL

def test_evaluator_overflow_fails_by_default(evaluator):
    with pytest.raises(NaturalOverflow) as exc:
        evaluator.evaluate(SUCC, [MAX_NATURAL])
    assert exc.value.value == MAX_NATURAL

@pytest.mark.parametrize("policy, expected", [("wrap", 0), ("saturate", MAX_NATURAL)])
def test_evaluator_overflow_policy(policy, expected):
    assert Evaluator(policy).evaluate(SUCC, [MAX_NATURAL]) == expected

def test_overflow_inside_primitive_recursion(names):
    assert Evaluator(OverflowPolicy.SATURATE).evaluate(names["add"], [MAX_NATURAL - 1, 3]) == MAX_NATURAL
    assert Evaluator(OverflowPolicy.WRAP).evaluate(names["add"], [MAX_NATURAL - 1, 3]) == 1

def test_unknown_kind_is_a_type_error(evaluator):
    with pytest.raises(TypeError):
        evaluator.evaluate(Function(object(), 1), [1])
