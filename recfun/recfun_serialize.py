from __future__ import annotations

import json
from typing import Any, Mapping

import yaml

from recfun.recfun_datatypes import (
    Function, Zero, Successor, Projection, Composition, PrimitiveRecursion, Minimization,
)


def to_builtin(function: Function) -> dict:
    """Convert a function tree into plain dicts, lists and ints."""
    out: dict[str, Any] = {}
    match function.kind:
        case Zero():
            out['kind'] = 'zero'
        case Successor():
            out['kind'] = 'successor'
        case Projection(index=index):
            out['kind'] = 'projection'
            out['index'] = index
        case Composition(base=base, components=components):
            out['kind'] = 'composition'
            out['base'] = to_builtin(base)
            out['components'] = [to_builtin(c) for c in components]
        case PrimitiveRecursion(base=base, step=step):
            out['kind'] = 'primitive'
            out['base'] = to_builtin(base)
            out['step'] = to_builtin(step)
        case Minimization(base=base, bound=bound):
            out['kind'] = 'minimization'
            out['base'] = to_builtin(base)
            out['bound'] = bound
    out['arity'] = function.arity
    if function.constant is not None:
        out['constant'] = function.constant
    return out


def serialize(names: Mapping[str, Function], *, fmt: str = "json", pretty: bool = True) -> str:
    """
    Dump a name table as text.
    - fmt: 'json' | 'yaml'
    """
    f = (fmt or '').lower()
    built = {name: to_builtin(fn) for name, fn in names.items()}
    if f == 'json':
        return json.dumps(built, ensure_ascii=False, indent=2 if pretty else None)
    if f == 'yaml':
        return yaml.safe_dump(built, sort_keys=False)
    raise ValueError(f"Unsupported serialization format: {fmt!r}")


__all__ = [
    "to_builtin",
    "serialize",
]
