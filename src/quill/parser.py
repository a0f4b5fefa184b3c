"""Reference parser: source text -> `quill.tree.Tree`.

The lark grammar (``grammar.lark``) does the syntax; `TreeBuilder` turns the
parse into interpreter nodes (wrapping every variable chain in a
``reference``), and `resolve_scopes` assigns register indices to parameters
and ``var`` locals and records what each lambda captures from its parents.
"""
from __future__ import annotations

import logging
import re
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Any, List, Sequence

from lark import Lark, Token, Transformer, v_args
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken, VisitError

from .tree import Tree, is_property_link, link_parents
from .types import QuillParseError, Scope

logger = logging.getLogger(__name__)

GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")

# heads that start a variable chain and therefore always get a reference
_CHAIN_HEADS = frozenset({'identifier', 'method', 'function', 'array_access', 'reference_expression'})

_ESCAPE_RE = re.compile(r"\\(u[0-9a-fA-F]{4}|.)", re.S)
_ESCAPES = {'n': '\n', 't': '\t', 'r': '\r', 'b': '\b', 'f': '\f', '0': '\0'}


@lru_cache(maxsize=1)
def build_parser() -> Lark:
    return Lark(
        GRAMMAR_PATH.read_text(encoding="utf-8"),
        parser="lalr",
        start="start",
        maybe_placeholders=False,
        propagate_positions=True,
    )


def unescape_string(literal: str) -> str:
    """Strip the quotes of a string literal and decode backslash escapes."""
    def repl(match: re.Match[str]) -> str:
        seq = match.group(1)
        if seq[0] == 'u' and len(seq) == 5:
            return chr(int(seq[1:], 16))
        return _ESCAPES.get(seq, seq)

    return _ESCAPE_RE.sub(repl, literal[1:-1])


def _statements(children: Sequence[Any]) -> List[Tree]:
    return [ch for ch in children if isinstance(ch, Tree) and ch.data != 'empty']


def _body(node: Tree) -> Tree:
    if node.data == 'empty':
        return Tree('block', [], node.meta)
    return node


def _arguments(children: Sequence[Any]) -> List[Tree]:
    for ch in children:
        if isinstance(ch, list):
            return ch
    return []


@v_args(meta=True)
class TreeBuilder(Transformer):
    """Builds interpreter nodes from the lark parse."""

    def __default__(self, data, children, meta):
        return Tree(data, children, meta)

    # ---------------- roots & statements ----------------

    def start(self, meta, c):
        return c[0]

    def script(self, meta, c):
        return Tree('script', _statements(c), meta)

    def block(self, meta, c):
        return Tree('block', _statements(c), meta)

    def empty_statement(self, meta, c):
        return Tree('empty', [], meta)

    def var_decl(self, meta, c):
        var = Tree('var', [], meta, value=str(c[0]))
        if len(c) > 1:
            return Tree('assign', [var, c[1]], meta)
        return var

    def return_stmt(self, meta, c):
        return Tree('return', c, meta)

    def break_stmt(self, meta, c):
        return Tree('break', [], meta)

    def continue_stmt(self, meta, c):
        return Tree('continue', [], meta)

    def ifstmt(self, meta, c):
        return Tree('ifstmt', [c[0]] + [_body(b) for b in c[1:]], meta)

    def whilestmt(self, meta, c):
        cond, body = c
        return Tree('whilestmt', [cond, _body(body)], meta)

    def foreach(self, meta, c):
        name, items, body = c
        loop_var = Tree('identifier', [], meta, value=str(name))
        return Tree('foreach', [loop_var, items, _body(body)], meta)

    def foreach_var(self, meta, c):
        name, items, body = c
        loop_var = Tree('var', [], meta, value=str(name))
        return Tree('foreach', [loop_var, items, _body(body)], meta)

    # ---------------- expressions ----------------

    def elvis(self, meta, c):
        return Tree('ternary', c, meta)

    def arguments(self, meta, c):
        return list(c)

    def parameters(self, meta, c):
        return [str(tok) for tok in c]

    def function_def(self, meta, c):
        params = c[0] if isinstance(c[0], list) else []
        return Tree('lambda', [c[-1]], meta, value=tuple(params))

    def paren(self, meta, c):
        return Tree('paren', c, meta)

    def index(self, meta, c):
        return Tree('index', c, meta)

    def postfix(self, meta, c):
        head, links = c[0], c[1:]
        items: List[Tree] = [head]

        for link in links:
            if link.data != 'index':
                items.append(link)
                continue

            last = items[-1]
            index = link.children[0]

            if last.data == 'paren':
                items[-1] = Tree('reference_expression', [last.children[0], index], meta)
            elif last.data in ('array_access', 'reference_expression'):
                last.children.append(index)
            else:
                items[-1] = Tree('array_access', [last, index], meta)

        if items[0].data == 'paren':
            if len(items) == 1:
                return items[0].children[0]
            items[0] = Tree('reference_expression', items[0].children, meta)

        if len(items) > 1 or items[0].data in _CHAIN_HEADS:
            return Tree('reference', items, meta)

        return items[0]

    def name(self, meta, c):
        return Tree('identifier', [], meta, value=str(c[0]))

    def member_name(self, meta, c):
        return Tree('identifier', [], meta, value=str(c[0]))

    def member_index(self, meta, c):
        return Tree('number', [], meta, value=int(c[0]))

    def member_call(self, meta, c):
        return Tree('method', _arguments(c), meta, value=str(c[0]))

    def call(self, meta, c):
        return Tree('method', _arguments(c), meta, value=str(c[0]))

    def function(self, meta, c):
        prefix, _, name = str(c[0]).partition(':')
        return Tree('function', _arguments(c), meta, value=(prefix, name))

    def constructor(self, meta, c):
        return Tree('constructor', _arguments(c), meta)

    def size_method(self, meta, c):
        return Tree('size_method', [], meta)

    def array_literal(self, meta, c):
        return Tree('array_literal', _arguments(c), meta)

    # ---------------- literals ----------------

    def null(self, meta, c):
        return Tree('null', [], meta)

    def true(self, meta, c):
        return Tree('true', [], meta, value=True)

    def false(self, meta, c):
        return Tree('false', [], meta, value=False)

    def number(self, meta, c):
        tok: Token = c[0]
        text = str(tok)

        if tok.type == 'DECIMAL':
            value: Any = Decimal(text[:-1])
        elif tok.type == 'FLOAT':
            value = float(text)
        else:
            value = int(text)

        return Tree('number', [], meta, value=value)

    def string(self, meta, c):
        return Tree('string', [], meta, value=unescape_string(str(c[0])))


# ---------------- scopes ----------------

def resolve_scopes(node: Tree, scope: Scope) -> None:
    """Assign registers top-down; parents must already be linked."""
    kind = node.data

    if kind == 'lambda':
        inner = Scope(scope, node.value)
        node.scope = inner
        for ch in node.children:
            resolve_scopes(ch, inner)
        return

    if kind == 'var':
        node.register = scope.declare_variable(node.value)
        return

    if kind == 'identifier':
        if not is_property_link(node):
            node.register = scope.get_register(node.value)
        return

    if kind == 'method' and not is_property_link(node):
        # a local may hold the closure a top-level call names
        node.register = scope.get_register(node.value)

    for ch in node.children:
        resolve_scopes(ch, scope)


def _syntax_message(err: UnexpectedInput) -> str:
    if isinstance(err, UnexpectedEOF):
        return "unexpected end of input"

    if isinstance(err, UnexpectedToken):
        return f"unexpected token {str(err.token)!r} at line {err.line}, column {err.column}"

    if isinstance(err, UnexpectedCharacters):
        return f"unexpected character {err.char!r} at line {err.line}, column {err.column}"

    return f"syntax error at line {err.line}, column {err.column}"


def parse(source: str, parameters: Sequence[str] = ()) -> Tree:
    """Parse ``source`` into a ``script`` node whose scope declares ``parameters``."""
    try:
        parsed = build_parser().parse(source)
        root = TreeBuilder().transform(parsed)
    except UnexpectedInput as err:
        raise QuillParseError(_syntax_message(err)) from err
    except VisitError as err:
        raise QuillParseError(f"malformed {err.rule or 'token'}", cause=err.orig_exc) from err

    link_parents(root)
    root.scope = Scope(None, parameters)
    resolve_scopes(root, root.scope)

    logger.debug("parsed %d statement(s), %d local(s)", len(root.children), len(root.scope.names))
    return root
