"""
Defines the core data types for recursive functions.

A ``Function`` pairs one of six kind variants with the number of arguments it
consumes and, when it is provably a literal number, that constant. Functions
are immutable once built, so references to an already defined name simply
share the stored object.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union

# Naturals are unsigned 32-bit words.
NATURAL_BITS = 32
MAX_NATURAL = (1 << NATURAL_BITS) - 1


# =================================================================
# Function kinds
# =================================================================

@dataclass(frozen=True)
class Zero:
    pass


@dataclass(frozen=True)
class Successor:
    pass


@dataclass(frozen=True)
class Projection:
    arity: int
    index: int


@dataclass(frozen=True)
class Composition:
    base: 'Function'
    components: Tuple['Function', ...]


@dataclass(frozen=True)
class PrimitiveRecursion:
    base: 'Function'
    step: 'Function'


@dataclass(frozen=True)
class Minimization:
    base: 'Function'
    bound: int


FunctionKind = Union[Zero, Successor, Projection, Composition, PrimitiveRecursion, Minimization]


# =================================================================
# Functions, name tables and queries
# =================================================================

@dataclass(frozen=True)
class Function:
    """A validated recursive function."""
    kind: FunctionKind
    arity: int
    constant: Optional[int] = None

    @property
    def is_constant(self) -> bool:
        return self.constant is not None


NameTable = Dict[str, Function]


@dataclass(frozen=True)
class Query:
    """A call of a named function on concrete arguments."""
    identifier: str
    arguments: Tuple[int, ...] = ()
