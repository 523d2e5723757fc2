# -*- coding: utf-8 -*-
"""Captured expressions: an expression that remembers where it should run."""

__all__ = ["Quoted", "quote"]

from ast import Expression, Expr, expr, parse
from copy import deepcopy
import textwrap

from mcpyrate import unparse

from .env import env as _envcls
from .evaluate import evaluate

class Quoted:
    """An expression AST, together with the `env` it was captured in.

    Create instances with `quote`.

    This is the explicit-context counterpart of a closure: nothing is looked
    up until `eval` is called, and then the names are looked up in `env`,
    optionally shadowed by a *mask* (for example, the columns of a table).
    """
    def __init__(self, tree, env):
        if not isinstance(tree, expr):
            raise TypeError("expected an ast.expr, got {} with value {}".format(type(tree), repr(tree)))
        self._tree = tree
        self.env = env

    @property
    def tree(self):
        """A fresh copy of the expression AST."""
        return deepcopy(self._tree)

    @property
    def source(self):
        return unparse(self._tree)

    def eval(self, mask=None):
        """Evaluate the expression in its env.

        `mask`: optional mapping of names that shadow the names in the env.
        The env itself is not modified.
        """
        context = self.env.child(mask) if mask else self.env.child()
        return evaluate(Expression(body=self.tree), context)

    def __repr__(self):  # pragma: no cover
        return "<Quoted {} in env at 0x{:x}>".format(repr(self.source), id(self.env))

def quote(source, env=None):
    """Capture an expression together with its evaluation context.

    `source`: a `str` holding exactly one Python expression, an `ast.expr`,
    or an `ast.Expression`. An AST is copied.

    `env`: the `env` to evaluate in later. If `None`, capture the caller's
    frame (see `env.capture`).

    Example::

        def make_quoted():
            offset = 10
            return quote("x + offset")

        qx = make_quoted()
        assert qx.eval({"x": 1}) == 11

    Note `offset` is found even though `make_quoted` has returned. The
    captured bindings are a snapshot, taken when `quote` was called.
    """
    if env is None:
        env = _envcls.capture(depth=1)
    if isinstance(source, str):
        tree = parse(textwrap.dedent(source).strip(), mode="eval").body
    elif type(source) is Expression:
        tree = deepcopy(source.body)
    elif type(source) is Expr:
        tree = deepcopy(source.value)
    elif isinstance(source, expr):
        tree = deepcopy(source)
    else:
        raise TypeError("expected source code or an expression AST, got {} with value {}".format(type(source), repr(source)))
    return Quoted(tree, env)
