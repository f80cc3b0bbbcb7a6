"""
Evaluates validated recursive functions on natural-number arguments.

The result of an evaluation is an ``int`` or ``None`` when the function is
undefined on the given arguments. Undefinedness propagates through every
combinator; it is never raised as an exception.
"""

from typing import List, Optional, Sequence

from recfun.recfun_config import OverflowPolicy
from recfun.recfun_datatypes import (
    Function, Zero, Successor, Projection, Composition, PrimitiveRecursion, Minimization,
    MAX_NATURAL,
)
from recfun.recfun_errors import NaturalOverflow


def successor(value: int, policy: OverflowPolicy = OverflowPolicy.FAIL) -> int:
    """``value + 1`` within the natural range, resolved by ``policy`` at the top."""
    if value < MAX_NATURAL:
        return value + 1
    match policy:
        case OverflowPolicy.WRAP:
            return 0
        case OverflowPolicy.SATURATE:
            return MAX_NATURAL
        case _:
            raise NaturalOverflow(value)


class Evaluator:
    """The recursive function execution engine."""

    def __init__(self, overflow: OverflowPolicy = OverflowPolicy.FAIL):
        self.overflow = OverflowPolicy(overflow)

    def evaluate(self, function: Function, arguments: Sequence[int]) -> Optional[int]:
        match function.kind:
            case Zero():
                return 0

            case Successor():
                if not arguments:
                    return None
                return successor(arguments[0], self.overflow)

            case Projection(index=index):
                if index < 1 or index > len(arguments):
                    return None
                return arguments[index - 1]

            case Composition(base=base, components=components):
                results: List[int] = []
                for component in components:
                    value = self.evaluate(component, arguments)
                    if value is None:
                        return None
                    results.append(value)
                return self.evaluate(base, results)

            case PrimitiveRecursion(base=base, step=step):
                return self._primitive(base, step, arguments)

            case Minimization(base=base, bound=bound):
                return self._minimize(base, bound, arguments)

            case _:
                raise TypeError(f"Unknown function kind: {type(function.kind).__name__}")

    def _primitive(self, base: Function, step: Function, arguments: Sequence[int]) -> Optional[int]:
        # The last argument is the recursion counter, the rest are parameters.
        if not arguments:
            return None
        params = list(arguments[:-1])
        count = arguments[-1]

        if base.constant is not None:
            acc = base.constant
        else:
            acc = self.evaluate(base, params)
            if acc is None:
                return None

        for i in range(count):
            acc = self.evaluate(step, params + [i, acc])
            if acc is None:
                return None
        return acc

    def _minimize(self, base: Function, bound: int, arguments: Sequence[int]) -> Optional[int]:
        args = list(arguments)
        for i in range(bound + 1):
            value = self.evaluate(base, args + [i])
            if value is None:
                return None
            if value == 0:
                return i
        return None
