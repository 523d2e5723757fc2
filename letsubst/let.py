# -*- coding: utf-8 -*-
"""Substitute placeholders in a template, then evaluate the result.

This is the run-time `let`: a small macro expander for a single expression
(or block), which renames placeholders before the code runs. For the same
at macro expansion time, see `letsubst.syntax.let_names`.
"""

__all__ = ["substitute_and_evaluate", "let", "letdef"]

from ast import Call, Name, Load, FunctionDef, AsyncFunctionDef, fix_missing_locations, increment_lineno, parse
import inspect
import textwrap

from mcpyrate import gensym

from .env import env as _envcls
from .evaluate import evaluate
from .placeholders import canonize_mapping
from .quote import Quoted
from .substitute import rewrite

def substitute_and_evaluate(mapping, template, env=None, *, strings=None, strict=True, filename="<letsubst>"):
    """Substitute placeholders in `template`, then evaluate it; return the result.

    `mapping`: placeholder -> replacement; see `letsubst.placeholders.canonize_mapping`
    and `letsubst.substitute.substitute`.
    A `Quoted` replacement is evaluated in its own env, wherever it was
    captured, each time the placeholder is read. So it can only stand where
    a value is read, unless it was captured in `env` itself, in which case
    it is spliced in as plain code.

    `template`: source code, an AST, or a `Quoted`.

    `env`: the evaluation context. If `None`, use the env of `template` if it
    is a `Quoted`, else capture the caller's frame. The caller's frame itself
    is never written to; any names bound by the template go into the env.

    `strings`: also substitute `str` constants; if `None`, use the dynvar
    ``substitute_strings``.

    `strict`: raise `UnresolvedPlaceholder` if the template references any
    placeholder that is not in `mapping`. Nothing is evaluated in that case.

    Example::

        d = pd.DataFrame({"a": [1]})
        res = let({"RESVAR": "res", "INPUTVAR": "a"},
                  "d.assign(RESVAR=d.INPUTVAR + 1)")
        # same as d.assign(res=d.a + 1)

    Each call is independent; nothing is cached between calls.
    """
    if env is None:
        env = template.env if isinstance(template, Quoted) else _envcls.capture(depth=1)
    mapping, bindings = _bind_foreign_quotes(canonize_mapping(mapping), env)
    tree = rewrite(mapping, template, strings=strings, strict=strict, filename=filename)
    return evaluate(tree, env, filename=filename, bindings=bindings)

# A `Quoted` captured in another env is spliced in as a call that evaluates it
# there, so that its free names still refer to where it was written.
def _bind_foreign_quotes(mapping, env):
    out = {}
    bindings = {}
    for name, value in mapping.items():
        if isinstance(value, Quoted) and value.env is not env:
            evaluator = gensym("quoted")
            bindings[evaluator] = value.eval
            value = Call(func=Name(id=evaluator, ctx=Load()), args=[], keywords=[])
        out[name] = value
    return out, bindings

let = substitute_and_evaluate

def letdef(mapping, *, strings=None, strict=True):
    """Decorator. Substitute placeholders in the definition of a function.

    Usage::

        @letdef({"COL": "price"})
        def discount(d, rate):
            return d.assign(COL=d.COL * (1 - rate))

    This parameterizes a data-transformation function by column names at
    definition time. The result is an ordinary function; there is no
    run-time overhead when it is called.

    The function's source code is obtained with `inspect.getsource`, so it must
    live in a file. The decorators are dropped from the source, so `letdef`
    should be the innermost (bottom-most) decorator.

    The new function is compiled in the globals of the original. Closures are
    not supported, because the rewritten code can't refer to the original
    cells; use default arguments or globals instead. This includes methods
    that call zero-argument `super()`. Default values are evaluated again,
    from the rewritten source. A `Quoted` replacement is spliced in as plain
    code, to be looked up in the function's own scope.

    If the function's own name is substituted, the result is still returned
    by the decorator, so it ends up bound to the name in the source.
    """
    def decorator(f):
        if f.__closure__:
            if "__class__" in f.__code__.co_freevars:
                raise ValueError("letdef: cannot rewrite {}, a method that uses zero-argument super() or __class__ is a closure over its class".format(f.__qualname__))
            raise ValueError("letdef: cannot rewrite {}, it closes over {}".format(f.__qualname__, f.__code__.co_freevars))
        lines, lineno = inspect.getsourcelines(f)
        filename = inspect.getsourcefile(f) or "<letsubst>"
        tree = parse(textwrap.dedent("".join(lines)), filename=filename)
        increment_lineno(tree, lineno - 1)  # keep tracebacks pointing into the original file
        funcdef = tree.body[0]
        if type(funcdef) not in (FunctionDef, AsyncFunctionDef):
            raise TypeError("letdef: expected a function definition, got {}".format(type(funcdef)))
        funcdef.decorator_list = []
        tree = rewrite(mapping, tree, strings=strings, strict=strict, filename=filename)
        name = tree.body[0].name

        # Run the `def` with a scratch locals dict, so that the module globals
        # are not written to, but the new function still sees them as its globals.
        namespace = {}
        exec(compile(fix_missing_locations(tree), filename, "exec"), f.__globals__, namespace)
        newf = namespace[name]
        if name == f.__name__:
            newf.__qualname__ = f.__qualname__
        newf.__module__ = f.__module__
        return newf
    return decorator
