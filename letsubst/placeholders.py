# -*- coding: utf-8 -*-
"""Placeholders: which names in a template are meant to be substituted.

A placeholder is an identifier matching the regex in the dynvar
``placeholder_pattern`` (full match). By default, that is any all-uppercase
identifier, such as ``RESVAR`` or ``INPUT_COL``. To use another convention::

    from unpythonic import dyn

    with dyn.let(placeholder_pattern=r"_[a-z]+_"):
        ...
"""

__all__ = ["UnresolvedPlaceholder", "is_placeholder", "held_names",
           "find_placeholders", "canonize_mapping"]

import re
from ast import (Name, keyword, arg, Attribute, FunctionDef, AsyncFunctionDef, ClassDef,
                 Global, Nonlocal, ExceptHandler, Constant, expr)
from collections.abc import Mapping

from mcpyrate.quotes import is_captured_value
from mcpyrate.walkers import ASTVisitor

from unpythonic.dynassign import dyn, make_dynvar

from .quote import Quoted

class UnresolvedPlaceholder(LookupError):
    """A template references placeholders that the substitution mapping does not define.

    The offending names are available in the `names` attribute, sorted.
    """
    def __init__(self, names):
        self.names = sorted(names)
        plural = "s" if len(self.names) != 1 else ""
        super().__init__("unresolved placeholder{}: {}".format(plural, ", ".join(repr(name) for name in self.names)))

def is_placeholder(name):
    """Return whether the string `name` is a placeholder under the current pattern."""
    return isinstance(name, str) and re.fullmatch(dyn.placeholder_pattern, name) is not None

def held_names(tree, strings=False):
    """Return the identifiers stored directly in the AST node `tree`.

    These are the positions the substitution pass rewrites: `Name` nodes,
    keyword argument names, attribute names, function parameter names,
    the names in `def`/`class`, `global`/`nonlocal` and `except ... as`.

    If `strings` is true, also the value of a `str` constant.

    Child nodes are not examined.
    """
    T = type(tree)
    if T is Name:
        return [tree.id]
    elif T in (keyword, arg):
        return [tree.arg] if tree.arg is not None else []  # `**kwargs` in a call has no name
    elif T is Attribute:
        return [tree.attr]
    elif T in (FunctionDef, AsyncFunctionDef, ClassDef):
        return [tree.name]
    elif T in (Global, Nonlocal):
        return list(tree.names)
    elif T is ExceptHandler:
        return [tree.name] if tree.name is not None else []
    elif strings and T is Constant and type(tree.value) is str:
        return [tree.value]
    return []

def find_placeholders(tree, strings=None, qualified=True):
    """Return the placeholders referenced in `tree`, in order of first appearance.

    `strings`: whether to consider `str` constants, too. If `None`, use
    the dynvar ``substitute_strings``.

    `qualified`: whether to consider attribute names and keyword argument
    names. An uppercase name after a dot is often just a constant of some
    library, as in ``re.IGNORECASE``.
    """
    if strings is None:
        strings = dyn.substitute_strings
    class PlaceholderCollector(ASTVisitor):
        def examine(self, tree):
            if is_captured_value(tree):
                return  # don't recurse!
            if qualified or type(tree) not in (Attribute, keyword):
                for name in held_names(tree, strings):
                    if is_placeholder(name):
                        self.collect(name)
            self.generic_visit(tree)
    c = PlaceholderCollector()
    c.visit(tree)
    return list(dict.fromkeys(c.collected))

def canonize_mapping(mapping):
    """Validate a substitution mapping, and return it as a `dict`.

    `mapping` is a mapping, or an iterable of `(name, replacement)` pairs.
    Order is preserved.

    Each name must be an identifier, and appear at most once. Each
    replacement must be a `str`, an `ast.expr`, or a `Quoted`.
    """
    if isinstance(mapping, Mapping):
        pairs = mapping.items()
    else:
        pairs = mapping
    out = {}
    for pair in pairs:
        try:
            name, value = pair
        except (TypeError, ValueError) as err:
            raise ValueError("expected a (name, replacement) pair, got {}".format(repr(pair))) from err
        if not isinstance(name, str) or not name.isidentifier():
            raise ValueError("{} is not a valid identifier".format(repr(name)))
        if name in out:
            raise ValueError("duplicate placeholder {}; names in the same substitution mapping must be unique".format(repr(name)))
        if not isinstance(value, (str, expr, Quoted)):
            raise TypeError("replacement for {} must be a str, an ast.expr or a Quoted; got {} with value {}".format(repr(name), type(value), repr(value)))
        out[name] = value
    return out

make_dynvar(placeholder_pattern=r"[A-Z][A-Z0-9_]*")
make_dynvar(substitute_strings=False)
