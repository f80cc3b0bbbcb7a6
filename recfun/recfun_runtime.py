# recfun_runtime.py

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, List, Literal, Mapping, Optional

import structlog

from recfun.recfun_builder import FunctionBuilder, parse_natural
from recfun.recfun_config import OverflowPolicy, get_settings
from recfun.recfun_datatypes import Function, NameTable, Query
from recfun.recfun_errors import (
    RecurFunctionParseError, NaturalOverflow,
    FunctionExpected, IntegerExpected, IdentifierExpected,
    UndefinedIdentifier, IdentifierAlreadyExists, UndefinedRule, InvalidArgumentsCount,
)
from recfun.recfun_interpreter import Evaluator
from recfun.recfun_parser import RecfunParser

logger = structlog.get_logger()


# ===================================================================
# 1. Definitions and queries
# ===================================================================

def _parse_or_raise(parser: RecfunParser, source: str, start_rule: str, fragment: Optional[str] = None):
    parse_out = parser.parse(source, start_rule)
    if parse_out['status'] != 'success':
        node = parse_out.get('error_node') or {}
        if fragment is None:
            fragment = parse_out.get('error_message') or source
        raise UndefinedRule(fragment, line=node.get('line'), col=node.get('col'))
    return parse_out['ast']


def parse_functions(
    source: str,
    names: Optional[Mapping[str, Function]] = None,
    *,
    parser: Optional[RecfunParser] = None,
    builder: Optional[FunctionBuilder] = None,
) -> NameTable:
    """
    Parses a definitions script into a name table.

    Definitions are processed in source order and each one sees only the
    names defined before it (plus ``names``, when extending an existing
    table). The first failure aborts the whole script; ``names`` is never
    modified.
    """
    parser = parser or RecfunParser()
    builder = builder or FunctionBuilder(get_settings().OVERFLOW_POLICY)

    ast = _parse_or_raise(parser, source, 'functions')
    table: NameTable = dict(names or {})
    children = ast.get('children', [])

    position = 0
    while position < len(children):
        node = children[position]
        if node.get('tag') != 'identifier':
            raise IdentifierExpected(node.get('text', ''))
        identifier = node['text']
        if identifier in table:
            raise IdentifierAlreadyExists(identifier)

        if position + 1 >= len(children):
            raise FunctionExpected(source)
        body = children[position + 1]
        if body.get('tag') != 'recursive_function':
            raise FunctionExpected(body.get('text', ''))

        function = builder.build(body, table)
        table[identifier] = function
        logger.debug("function_defined", name=identifier, arity=function.arity, constant=function.constant)
        position += 2

    return table


def parse_query(
    source: str,
    names: Mapping[str, Function],
    *,
    parser: Optional[RecfunParser] = None,
) -> Query:
    """Parses ``name arg1 arg2 ...`` and checks the argument count against ``names``."""
    parser = parser or RecfunParser()
    ast = _parse_or_raise(parser, source, 'query', source)
    children = ast.get('children', [])

    if not children:
        raise IdentifierExpected(source)
    head = children[0]
    if head.get('tag') != 'identifier':
        raise IdentifierExpected(head.get('text', ''))
    identifier = head['text']

    function = names.get(identifier)
    if function is None:
        raise UndefinedIdentifier(source)

    arguments = []
    for node in children[1:]:
        if node.get('tag') != 'integer':
            raise IntegerExpected(node.get('text', ''))
        arguments.append(parse_natural(node))

    # A constant may be queried without arguments whatever its arity.
    if function.constant is not None and not arguments:
        return Query(identifier, ())
    if function.arity != len(arguments):
        raise InvalidArgumentsCount(source)
    return Query(identifier, tuple(arguments))


def execute_query(
    query: Query,
    names: Mapping[str, Function],
    evaluator: Optional[Evaluator] = None,
) -> Optional[int]:
    """Evaluates a parsed query. ``None`` means the result is undefined."""
    function = names.get(query.identifier)
    if function is None:
        return None
    if function.constant is not None:
        return function.constant
    evaluator = evaluator or Evaluator(get_settings().OVERFLOW_POLICY)
    return evaluator.evaluate(function, query.arguments)


# ===================================================================
# 2. Sessions
# ===================================================================

Token = Dict[str, Any]


@dataclass
class ExecutionResult:
    """The structured result of loading definitions or running a query."""
    status: Literal['success', 'error']
    value: Any = None
    error_message: Optional[str] = None
    error_token: Optional[Token] = None
    source: Optional[str] = None

    def format_error(self) -> str:
        """Formats an error message with line and column if available."""
        if self.status != 'error':
            return ""
        msg = str(self.error_message or "Unknown error")

        if self.error_token and self.error_token.get('line') is not None:
            line = self.error_token.get('line')
            col = self.error_token.get('col')
            col_info = f", col {col}" if col is not None else ""
            out = f"Error on line {line}{col_info}: {msg}"
            context = source_context(self.source or "", line, col)
            if context:
                out = f"{out}\n{context}"
            return out
        return msg


def source_context(source: str, line: int, col: Optional[int], radius: int = 2) -> str:
    lines = source.splitlines()
    if not line or line < 1 or line > len(lines):
        return ""
    start = max(1, line - radius)
    end = min(len(lines), line + radius)
    width = len(str(end))
    out = []
    for i in range(start, end + 1):
        prefix = ">" if i == line else " "
        ln = str(i).rjust(width)
        out.append(f"{prefix} {ln} | {lines[i - 1]}")
        if i == line and col is not None:
            caret = " " * max(col - 1, 0)
            out.append(f"  {' ' * width} | {caret}^")
    return "\n".join(out)


class ScriptRunner:
    """Holds a name table and runs definitions and queries against it."""

    def __init__(self, overflow: Optional[OverflowPolicy] = None):
        policy = OverflowPolicy(overflow or get_settings().OVERFLOW_POLICY)
        self.parser = RecfunParser()
        self.builder = FunctionBuilder(policy)
        self.evaluator = Evaluator(policy)
        self._names: NameTable = {}

    @property
    def functions(self) -> Mapping[str, Function]:
        return MappingProxyType(self._names)

    def load_definitions(self, source: str) -> List[str]:
        """Adds the definitions in ``source``; the table is unchanged if any of them fails."""
        table = parse_functions(source, self._names, parser=self.parser, builder=self.builder)
        added = [name for name in table if name not in self._names]
        self._names = table
        logger.info("definitions_loaded", count=len(added), total=len(table))
        return added

    def run_query(self, source: str) -> Optional[int]:
        query = parse_query(source, self._names, parser=self.parser)
        value = execute_query(query, self._names, self.evaluator)
        logger.info("query_evaluated", name=query.identifier, arguments=list(query.arguments), result=value)
        return value

    def handle_definitions(self, source: str) -> ExecutionResult:
        try:
            added = self.load_definitions(source)
        except (RecurFunctionParseError, NaturalOverflow, RecursionError) as e:
            logger.warning("definitions_rejected", error=str(e))
            return self._error(e, source)
        return ExecutionResult(status='success', value=added, source=source)

    def handle_query(self, source: str) -> ExecutionResult:
        try:
            value = self.run_query(source)
        except (RecurFunctionParseError, NaturalOverflow, RecursionError) as e:
            logger.warning("query_rejected", query=source, error=str(e))
            return self._error(e, source)
        return ExecutionResult(status='success', value=value, source=source)

    def _error(self, e: Exception, source: str) -> ExecutionResult:
        match e:
            case UndefinedRule(line=line, col=col) if line is not None:
                token = {'line': line, 'col': col}
                msg = f"SyntaxError: {e}"
            case RecurFunctionParseError():
                token = None
                msg = f"{type(e).__name__}: {e}"
            case RecursionError():
                token = None
                msg = "RecursionError: expression nested too deeply"
            case _:
                token = None
                msg = f"OverflowError: {e}"
        return ExecutionResult(status='error', error_message=msg, error_token=token, source=source)
