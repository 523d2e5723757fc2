# -*- coding: utf-8 -*-
"""letsubst.syntax: placeholder substitution at macro expansion time.

Requires `mcpyrate`. Usage::

    from letsubst.syntax import macros, let_names  # noqa: F401

The run-time counterpart is `letsubst.let`.
"""

__all__ = ["let_names"]

from ast import BinOp, LShift, Name, Constant

from mcpyrate import parametricmacro

from ..placeholders import canonize_mapping
from ..substitute import substitute

@parametricmacro
def let_names(tree, *, args, syntax, **kw):
    """[syntax, expr/block] Substitute placeholders in a section of code.

    **Expression variant**::

        let_names[RESVAR << res, INPUTVAR << a][d.assign(RESVAR=d.INPUTVAR + 1)]

    **Block variant**::

        with let_names[RESVAR << res, INPUTVAR << a]:
            d2 = d.assign(RESVAR=d.INPUTVAR + 1)

    The RHS of each binding is one of:

      - A bare name. The placeholder is renamed everywhere it appears as an
        identifier, also in attribute names, keyword arguments and ``def``.
      - A string literal. Same as a bare name, but the name can be a keyword
        or anything else not expressible as a bare name at the use site.
      - Any other expression. Spliced in (a fresh copy at each use) where the
        placeholder is read.

    The substitution is simultaneous, so ``let_names[A << B, B << A]`` swaps.

    The bindings are applied **at macro expansion time**; at run time,
    `let_names` has zero overhead. Expansion is outside-in, so the body can
    contain other macro invocations, which see the substituted code.

    Unlike the run-time `letsubst.let`, placeholders missing from the bindings
    are not an error here, because regular code often has uppercase
    constants. Only the names listed are touched.

    **CAUTION**: No hygiene. The names on the RHS are looked up at the use
    site, after substitution.
    """
    if syntax not in ("expr", "block"):
        raise SyntaxError("let_names is an expr and block macro only")  # pragma: no cover
    if syntax == "block" and kw['optional_vars'] is not None:
        raise SyntaxError("let_names (block mode) does not take an as-part")  # pragma: no cover
    if not args:
        raise SyntaxError("let_names: expected at least one binding of the form 'name << replacement'")  # pragma: no cover

    mapping = _canonize_bindings(args)
    # DON'T expand inner macro invocations first - outside-in ordering is the default, so we simply do nothing.
    return substitute(tree, mapping, strings=False)

# RESVAR << res --> ("RESVAR", "res")
# RESVAR << "res" --> ("RESVAR", "res")
# RESVAR << f(x) --> ("RESVAR", <ast.Call>)
def _canonize_bindings(args):
    pairs = []
    for binding in args:
        if not (type(binding) is BinOp and type(binding.op) is LShift and type(binding.left) is Name):
            raise SyntaxError("let_names: expected bindings of the form 'name << replacement'")  # pragma: no cover
        rhs = binding.right
        if type(rhs) is Name:
            rhs = rhs.id
        elif type(rhs) is Constant and type(rhs.value) is str:
            rhs = rhs.value
        pairs.append((binding.left.id, rhs))
    try:
        return canonize_mapping(pairs)
    except ValueError as err:
        raise SyntaxError("let_names: {}".format(err)) from err
