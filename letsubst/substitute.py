# -*- coding: utf-8 -*-
"""The rewrite pass: substitute placeholders in an expression template.

The substitution is purely syntactic. It never evaluates the replacements,
and it operates on the AST, never on the source text, so e.g. a placeholder
``X`` does not touch the name ``XS`` or the string ``"X marks the spot"``.
"""

__all__ = ["parse_template", "substitute", "rewrite", "expand", "print_expansion"]

from ast import (Module, Expression, Interactive, Expr, Name, Constant, Load,
                 keyword, arg, Attribute, FunctionDef, AsyncFunctionDef, ClassDef,
                 Global, Nonlocal, ExceptHandler, expr, stmt, parse, copy_location, walk)
from copy import deepcopy
import textwrap

from mcpyrate import unparse
from mcpyrate.quotes import is_captured_value
from mcpyrate.walkers import ASTTransformer

from unpythonic.dynassign import dyn, make_dynvar

from .placeholders import UnresolvedPlaceholder, canonize_mapping, find_placeholders, is_placeholder
from .quote import Quoted

def parse_template(template, *, filename="<letsubst>"):
    """Convert `template` into an `ast.Module`.

    `template` may be:

      - Source code (`str`). Common indentation is removed first, so that
        triple-quoted templates can be indented along with the code around them.
      - A `Quoted`. Its expression becomes the only statement of the module.
      - An AST: `Module`, `Interactive`, `Expression`, a statement, an
        expression, or a `list` of statements. The AST is copied.
    """
    if isinstance(template, str):
        return parse(textwrap.dedent(template), filename=filename, mode="exec")
    if isinstance(template, Quoted):
        template = template.tree
    else:
        template = deepcopy(template)
    if type(template) is Module:
        return template
    if type(template) is Interactive:
        body = template.body
    elif type(template) is Expression:
        body = [copy_location(Expr(value=template.body), template.body)]
    elif isinstance(template, expr):
        body = [copy_location(Expr(value=template), template)]
    elif isinstance(template, stmt):
        body = [template]
    elif isinstance(template, list) and all(isinstance(x, stmt) for x in template):
        body = template
    else:
        raise TypeError("expected a template as source code, an AST or a Quoted; got {} with value {}".format(type(template), repr(template)))
    return Module(body=body, type_ignores=[])

def substitute(tree, mapping, *, strings=None):
    """Substitute placeholders in `tree` according to `mapping`.

    Return a new tree; `tree` itself is not modified. `tree` may be an AST
    node or a `list` of them.

    `mapping`: see `canonize_mapping`. A `str` replacement is a name. It is
    used everywhere the placeholder appears as an identifier; so
    ``RESVAR`` also matches ``d.RESVAR``, ``f(RESVAR=...)`` and
    ``def RESVAR(...)``.

    An expression replacement (an `ast.expr` or a `Quoted`) is spliced in
    wherever the placeholder appears as an expression to be read. Each use
    site gets a fresh copy. In a position that takes only an identifier,
    the expression must be a bare name.

    `strings`: whether to also replace `str` constants whose value is exactly
    the placeholder, e.g. ``d["COL"]``. If `None`, use the dynvar
    ``substitute_strings``. A replacement that is not an identifier, such as
    a column name containing a space, can only be used there.

    The substitution is simultaneous: the replacements are not scanned for
    placeholders. So ``{"A": "B", "B": "A"}`` swaps ``A`` and ``B``.

    Placeholders are not checked here; any name in `mapping` is substituted,
    whether or not it matches the placeholder pattern. (The macro
    `let_names` relies on this; `rewrite` keeps only the placeholder keys.)
    """
    if strings is None:
        strings = dyn.substitute_strings
    mapping = canonize_mapping(mapping)
    if not mapping:
        return deepcopy(tree)

    def expression_for(name):
        value = mapping[name]
        if isinstance(value, str):
            return None
        if isinstance(value, Quoted):
            return value.tree
        return deepcopy(value)
    def identifier_for(name, where):
        value = mapping[name]
        if isinstance(value, Quoted):
            value = value.tree
        if type(value) is Name:
            value = value.id
        if isinstance(value, str) and value.isidentifier():
            return value
        shown = repr(value) if isinstance(value, str) else unparse(value)
        raise ValueError("cannot substitute {} for placeholder {} in {}; expected an identifier".format(shown, repr(name), where))
    def text_for(name):
        value = mapping[name]
        if isinstance(value, str):
            return value
        return identifier_for(name, "a string constant")

    class Substituter(ASTTransformer):
        def transform(self, tree):
            if is_captured_value(tree):
                return tree  # don't recurse!
            T = type(tree)
            if T is Name and tree.id in mapping:
                replacement = expression_for(tree.id)
                if replacement is not None and type(tree.ctx) is Load:
                    return _relocate(replacement, tree)  # simultaneous substitution; don't recurse into the replacement
                tree.id = identifier_for(tree.id, "a name")
            elif T in (keyword, arg) and tree.arg in mapping:
                tree.arg = identifier_for(tree.arg, "an argument name")
            elif T is Attribute and tree.attr in mapping:
                tree.attr = identifier_for(tree.attr, "an attribute name")
            elif T in (FunctionDef, AsyncFunctionDef, ClassDef) and tree.name in mapping:
                tree.name = identifier_for(tree.name, "a definition name")
            elif T in (Global, Nonlocal):
                tree.names = [identifier_for(name, "a scope declaration") if name in mapping else name
                              for name in tree.names]
            elif T is ExceptHandler and tree.name in mapping:
                tree.name = identifier_for(tree.name, "an exception handler")
            elif strings and T is Constant and type(tree.value) is str and tree.value in mapping:
                return copy_location(Constant(value=text_for(tree.value)), tree)
            return self.generic_visit(tree)

    tree = deepcopy(tree)
    if isinstance(tree, list):
        return [Substituter().visit(x) for x in tree]
    return Substituter().visit(tree)

# A spliced expression gets the source location of the placeholder it replaces.
# Its own locations refer to some other source, so they can't be kept.
def _relocate(replacement, site):
    for node in walk(replacement):
        if "lineno" in node._attributes:
            for attr in ("lineno", "col_offset", "end_lineno", "end_col_offset"):
                if hasattr(site, attr):
                    setattr(node, attr, getattr(site, attr))
    return replacement

def rewrite(mapping, template, *, strings=None, strict=True, filename="<letsubst>"):
    """Parse `template` and substitute placeholders in it; return an `ast.Module`.

    This is the common part of `expand` and `substitute_and_evaluate`.

    Only the keys of `mapping` that are placeholders (see `is_placeholder`)
    are substituted; other keys are ignored. Hence a template that contains
    no placeholders is used as-is, whatever the mapping.

    If `strict`, raise `UnresolvedPlaceholder` if the template references
    any placeholder that is not in `mapping`. A placeholder-like attribute
    name or keyword argument name (``re.IGNORECASE``, ``f(KEY=1)``) counts
    only if the template is parameterized, i.e. it uses a placeholder as a
    bare name, or uses at least one name in `mapping`. To keep such a name
    as-is in a parameterized template, map it to itself, e.g. ``{"NA": "NA"}``.

    If the dynvar ``expansion_printer`` is set, it is called with the source
    code before and after the substitution; see `print_expansion`.
    """
    mapping = {name: value for name, value in canonize_mapping(mapping).items()
               if is_placeholder(name)}
    if strings is None:
        strings = dyn.substitute_strings
    tree = parse_template(template, filename=filename)
    if strict:
        bare = find_placeholders(tree, strings, qualified=False)
        referenced = find_placeholders(tree, strings)
        if not bare and not any(name in mapping for name in referenced):
            referenced = []
        unresolved = [name for name in referenced if name not in mapping]
        if unresolved:
            raise UnresolvedPlaceholder(unresolved)
    newtree = substitute(tree, mapping, strings=strings)
    printer = dyn.expansion_printer
    if printer is not None:
        printer(unparse(tree), unparse(newtree), filename=filename)
    return newtree

def expand(mapping, template, *, strings=None, strict=True, filename="<letsubst>"):
    """Substitute placeholders in `template`, and return the result as source code.

    Nothing is evaluated. Useful for seeing what `substitute_and_evaluate`
    would run::

        expand({"RESVAR": "res", "INPUTVAR": "a"},
               "d.assign(RESVAR=d.INPUTVAR + 1)")
        # --> "d.assign(res=(d.a + 1))"

    The source code is back-converted from the AST representation; hence its
    surface syntax may look slightly different to the original (e.g. extra
    parentheses). See ``mcpyrate.unparse``. A `Quoted` replacement appears
    as its source code.
    """
    return unparse(rewrite(mapping, template, strings=strings, strict=strict, filename=filename)).strip()

def print_expansion(template, expansion, *, filename=None, **kwargs):
    """Default printer for the dynvar ``expansion_printer``.

    The print format looks like::

        [<letsubst>] d.assign(RESVAR=(d.INPUTVAR + 1)) --> d.assign(res=(d.a + 1))

    Parameters:

        ``template``: ``str``
            source code before substitution

        ``expansion``: ``str``
            source code after substitution

        ``filename``: ``str``
            filename given to the substitution call

        ``kwargs``: anything
            passed through to built-in ``print``

    Tracing is off by default. To turn it on::

        with dyn.let(expansion_printer=print_expansion):
            ...
    """
    header = "[{}] ".format(filename) if filename is not None else ""
    print("{}{} --> {}".format(header, template.strip(), expansion.strip()), **kwargs)

make_dynvar(expansion_printer=None)
