"""
Builds validated ``Function`` values from the syntax layer's node tree.
"""

from typing import List, Optional

import structlog

from recfun.recfun_config import OverflowPolicy
from recfun.recfun_datatypes import (
    Function, NameTable, Zero, Successor, Projection, Composition, PrimitiveRecursion, Minimization,
    MAX_NATURAL,
)
from recfun.recfun_errors import (
    InvalidProjectionArgumentNumber, InvalidCompositionFunctionsCount,
    InvalidPrimitiveBaseArgumentsCount, InvalidPrimitiveStepArgumentsCount,
    InvalidArgumentsCount, FunctionExpected, IntegerExpected, IntegerParseError,
    UndefinedIdentifier, UndefinedRule,
)
from recfun.recfun_interpreter import successor
from recfun.recfun_parser import Node

logger = structlog.get_logger()


def parse_natural(node: Node) -> int:
    """Reads an ``integer`` node as a natural in the machine range."""
    text = node.get('text') or ''
    try:
        value = int(text, 10)
    except ValueError:
        raise IntegerParseError(f"invalid digit found in string {text!r}") from None
    if value > MAX_NATURAL:
        raise IntegerParseError(f"number too large to fit in target type: {text}")
    return value


class FunctionBuilder:
    """Turns function nodes into ``Function`` values against a table of earlier names."""

    def __init__(self, overflow: OverflowPolicy = OverflowPolicy.FAIL):
        self.overflow = OverflowPolicy(overflow)

    def build(self, node: Node, names: NameTable) -> Function:
        while node.get('tag') == 'recursive_function':
            node = self._function(node.get('children', []), 0, node.get('text', ''))

        tag = node.get('tag')
        text = node.get('text', '')
        children = node.get('children', [])

        match tag:
            case 'zero':
                return Function(Zero(), 1, 0)

            case 'successor':
                return Function(Successor(), 1)

            case 'projection':
                arity = parse_natural(self._integer(children, 0, text))
                index = parse_natural(self._integer(children, 1, text))
                if index == 0:
                    raise InvalidProjectionArgumentNumber(text)
                if arity < index:
                    raise InvalidArgumentsCount(text)
                return Function(Projection(arity, index), arity)

            case 'composition':
                return self._composition(children, text, names)

            case 'primitive':
                return self._primitive(children, text, names)

            case 'minimization':
                base = self.build(self._function(children, 0, text), names)
                if base.arity <= 1:
                    raise InvalidArgumentsCount(text)
                bound = parse_natural(self._integer(children, 1, text))
                return Function(Minimization(base, bound), base.arity - 1)

            case 'identifier':
                function = names.get(text)
                if function is None:
                    raise UndefinedIdentifier(text)
                return function

            case _:
                raise UndefinedRule(text)

    # --- Combinators ---

    def _composition(self, children: List[Node], text: str, names: NameTable) -> Function:
        base = self.build(self._function(children, 0, text), names)

        components: List[Function] = []
        arity: Optional[int] = None
        for child in children[1:]:
            component = self.build(child, names)
            if arity is None:
                arity = component.arity
            elif component.arity != arity:
                raise InvalidArgumentsCount(text)
            components.append(component)

        if len(components) != base.arity:
            raise InvalidCompositionFunctionsCount(text)

        constant = None
        if (
            arity == 1
            and len(components) == 1
            and components[0].constant is not None
            and isinstance(base.kind, Successor)
        ):
            # ($s:c) is the literal c + 1
            constant = successor(components[0].constant, self.overflow)
            logger.debug("constant_folded", constant=constant)

        return Function(Composition(base, tuple(components)), arity, constant)

    def _primitive(self, children: List[Node], text: str, names: NameTable) -> Function:
        base = self.build(self._function(children, 0, text), names)
        step = self.build(self._function(children, 1, text), names)

        if step.arity < 2:
            raise InvalidPrimitiveStepArgumentsCount(text)
        if step.arity == 2 and (base.arity != 1 or base.constant is None):
            raise InvalidPrimitiveBaseArgumentsCount(text)
        if step.arity > 2 and base.arity != step.arity - 2:
            raise InvalidPrimitiveBaseArgumentsCount(text)

        return Function(PrimitiveRecursion(base, step), step.arity - 1)

    # --- Child access ---

    def _function(self, children: List[Node], position: int, text: str) -> Node:
        if position >= len(children):
            raise FunctionExpected(text)
        return children[position]

    def _integer(self, children: List[Node], position: int, text: str) -> Node:
        if position >= len(children) or children[position].get('tag') != 'integer':
            raise IntegerExpected(text)
        return children[position]
