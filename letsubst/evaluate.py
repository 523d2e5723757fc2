# -*- coding: utf-8 -*-
"""Compile and run a (rewritten) AST in an explicit `env`."""

__all__ = ["evaluate"]

from ast import Module, Expression, Interactive, Expr, fix_missing_locations

def evaluate(tree, env, *, filename="<letsubst>", bindings=None):
    """Evaluate `tree` in the evaluation context `env`, and return the result.

    `tree` is an `ast.Expression`, or an `ast.Module` (`ast.Interactive`
    is treated the same way).

    An `ast.Expression` is evaluated as an expression, and its value returned.

    A `Module` runs as a block of statements. If its last statement is an
    expression statement, the value of that expression is returned, so that
    a one-line expression template behaves the same either way. Otherwise
    the result is `None`.

    Names bound by the code (assignments, `def`, walrus...) are written back
    into `env` itself; the code never writes into anyone's actual frame, nor
    into the module globals of `env`.

    `bindings`: optional extra names visible to the code, on top of `env`.
    They are not written back into `env` unless the code rebinds them.

    Missing source locations are filled in, in-place.
    """
    if type(tree) is Expression:
        body, last = [], tree.body
    elif type(tree) in (Module, Interactive):
        body = list(tree.body)
        last = body.pop().value if body and type(body[-1]) is Expr else None
    else:
        raise TypeError("expected an ast.Expression or ast.Module, got {} with value {}".format(type(tree), repr(tree)))

    # Use a single dict as both globals and locals, so that also lambdas and
    # functions defined by the code see the names in `env`.
    namespace = dict(env.globals)
    namespace.update(env.namespace())
    if bindings:
        namespace.update(bindings)
    snapshot = dict(namespace)

    result = None
    if body:
        code = compile(fix_missing_locations(Module(body=body, type_ignores=[])), filename, "exec")
        exec(code, namespace)
    if last is not None:
        code = compile(fix_missing_locations(Expression(body=last)), filename, "eval")
        result = eval(code, namespace)

    for name, value in namespace.items():
        if name == "__builtins__" or not name.isidentifier():
            continue
        if name not in snapshot or snapshot[name] is not value:
            env[name] = value
    return result
