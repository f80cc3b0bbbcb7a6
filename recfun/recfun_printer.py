"""
A pretty-printer for recursive functions and evaluation results.
"""
from typing import Mapping

from recfun.recfun_datatypes import (
    Function, Zero, Successor, Projection, Composition, PrimitiveRecursion, Minimization,
)


class Printer:
    """Formats functions into source strings the parser accepts."""

    def __init__(self):
        self._handlers = self._create_handlers()

    def pformat(self, obj):
        """Public entry point to format an object."""
        if obj is None:
            return "Undefined"
        if isinstance(obj, Function):
            return self.pformat(obj.kind)
        handler = self._handlers.get(type(obj))
        if handler is None:
            return repr(obj)
        return handler(obj)

    def pformat_table(self, names: Mapping[str, Function]) -> str:
        """One ``name = expression;`` line per definition, in definition order."""
        return "\n".join(f"{name} = {self.pformat(fn)};" for name, fn in names.items())

    def pformat_result(self, value) -> str:
        return f"Result: {self.pformat(value)}"

    def _create_handlers(self):
        return {
            int: str,
            Zero: lambda k: "$z",
            Successor: lambda k: "$s",
            Projection: self._pformat_projection,
            Composition: self._pformat_composition,
            PrimitiveRecursion: self._pformat_primitive,
            Minimization: self._pformat_minimization,
        }

    def _pformat_projection(self, kind):
        return f"$p{kind.arity}.{kind.index}"

    def _pformat_composition(self, kind):
        components = ",".join(self.pformat(c) for c in kind.components)
        return f"({self.pformat(kind.base)}:{components})"

    def _pformat_primitive(self, kind):
        return f"[{self.pformat(kind.base)},{self.pformat(kind.step)}]"

    def _pformat_minimization(self, kind):
        return f"{{{self.pformat(kind.base)},{kind.bound}}}"
