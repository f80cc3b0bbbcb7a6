"""
Syntax layer: turns source text into a tree of tagged nodes.

Nodes are plain dicts so the builder can dispatch on ``node['tag']`` without
knowing anything about the parsing library:

    {'tag': 'projection', 'text': '$p3.1', 'line': 1, 'col': 1,
     'children': [{'tag': 'integer', 'text': '3', ...},
                  {'tag': 'integer', 'text': '1', ...}]}

Terminal leaves (``identifier``, ``integer``) carry no ``children`` key.
"""

from pathlib import Path
from typing import Any, Dict, Optional

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedInput, LarkError

Node = Dict[str, Any]

START_RULES = (
    "functions",
    "query",
    "recursive_function",
    "zero",
    "successor",
    "projection",
    "composition",
    "primitive",
    "minimization",
)


class RecfunParser:
    """Parses recursive function scripts and queries."""

    _lark: Optional[Lark] = None

    def __init__(self):
        if RecfunParser._lark is None:
            grammar = Path(__file__).with_name("recfun_grammar.lark").read_text(encoding="utf-8")
            RecfunParser._lark = Lark(grammar, start=list(START_RULES), parser="earley", propagate_positions=True)
        self.lark = RecfunParser._lark

    def parse(self, text: str, start_rule: str = "functions") -> Dict[str, Any]:
        """
        Parse ``text`` starting at ``start_rule``.

        Returns ``{'status': 'success', 'ast': node}`` or
        ``{'status': 'error', 'error_message': ..., 'error_node': {...} | None}``.
        """
        if start_rule not in START_RULES:
            raise ValueError(f"Unknown start rule: {start_rule!r}")
        try:
            tree = self.lark.parse(text, start=start_rule)
        except UnexpectedInput as e:
            line = getattr(e, "line", None)
            col = getattr(e, "column", None)
            node = None
            if isinstance(line, int) and isinstance(col, int) and line > 0 and col > 0:
                node = {"line": line, "col": col}
            return {"status": "error", "error_message": _first_line(str(e)), "error_node": node}
        except LarkError as e:
            return {"status": "error", "error_message": _first_line(str(e)), "error_node": None}
        return {"status": "success", "ast": self._to_node(tree, text)}

    def _to_node(self, tree: Tree, source: str) -> Node:
        # explicit stack: nesting depth is bounded by the input, not the call stack
        root = self._branch(tree, source)
        pending = [(tree, root)]
        while pending:
            item, node = pending.pop()
            for ch in item.children:
                if isinstance(ch, Token):
                    node["children"].append(self._leaf(ch))
                elif isinstance(ch, Tree):
                    child = self._branch(ch, source)
                    node["children"].append(child)
                    pending.append((ch, child))
        return root

    @staticmethod
    def _leaf(token: Token) -> Node:
        return {
            "tag": token.type.lower(),
            "text": str(token),
            "line": token.line,
            "col": token.column,
        }

    @staticmethod
    def _branch(tree: Tree, source: str) -> Node:
        meta = tree.meta
        if getattr(meta, "empty", True):
            text, line, col = "", None, None
        else:
            text = source[meta.start_pos:meta.end_pos]
            line, col = meta.line, meta.column
        return {"tag": str(tree.data), "text": text, "line": line, "col": col, "children": []}


def _first_line(message: str) -> str:
    message = message.strip()
    return message.splitlines()[0] if message else "parse failed"
