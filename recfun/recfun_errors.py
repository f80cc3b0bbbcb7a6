"""
Errors raised while building functions and queries.

Each error keeps the offending source fragment on ``.fragment``. Evaluation
never raises these: an undefined result is ``None``, not an error.
"""

from typing import Optional


class RecurFunctionParseError(Exception):
    """Base class for semantic failures of the builder and query parser."""
    message = "Recursive function parse error"

    def __init__(self, fragment: str):
        super().__init__(f"{self.message}: {fragment}")
        self.fragment = fragment


class InvalidProjectionArgumentNumber(RecurFunctionParseError):
    message = "Invalid projection argument number"


class InvalidCompositionFunctionsCount(RecurFunctionParseError):
    message = "Invalid composition functions count"


class InvalidPrimitiveBaseArgumentsCount(RecurFunctionParseError):
    message = "Invalid primitive base arguments count"


class InvalidPrimitiveStepArgumentsCount(RecurFunctionParseError):
    message = "Invalid primitive step arguments count"


class InvalidArgumentsCount(RecurFunctionParseError):
    message = "Invalid arguments count"


class FunctionExpected(RecurFunctionParseError):
    message = "Expected function, but it wasn't there"


class IntegerExpected(RecurFunctionParseError):
    message = "Expected integer, but it wasn't there"


class IdentifierExpected(RecurFunctionParseError):
    message = "Expected identifier, but it wasn't there"


class UndefinedIdentifier(RecurFunctionParseError):
    message = "Undefined identifier while parsing"


class IdentifierAlreadyExists(RecurFunctionParseError):
    message = "Identifier already exists"


class UndefinedRule(RecurFunctionParseError):
    message = "Undefined rule while parsing"

    def __init__(self, fragment: str, line: Optional[int] = None, col: Optional[int] = None):
        super().__init__(fragment)
        self.line = line
        self.col = col


class IntegerParseError(RecurFunctionParseError):
    message = "Failed to parse int"


class NaturalOverflow(ArithmeticError):
    """Successor applied to the largest representable natural."""
    def __init__(self, value: int):
        super().__init__(f"Natural overflow: successor of {value}")
        self.value = value
