# -*- coding: utf-8 -*-
"""Data-masked evaluation over `pandas.DataFrame` tables.

The captured-expression style of parameterizing a transformation: the
expressions refer to columns by bare name, and the names are resolved when
the expression runs, against a *data mask* layered on top of the env the
expression was captured in::

    d = pd.DataFrame({"a": [1, 2, 3]})
    offset = 10
    mutate(d, b="a + offset")             # `a` is a column, `offset` a local
    filter_rows(d, "a > 1")

Compare `letsubst.let`, where the names are substituted into the code
before it runs::

    let({"RESVAR": "b", "INPUTVAR": "a"},
        "mutate(d, RESVAR=lambda m: m.INPUTVAR + offset)")
"""

__all__ = ["columns_of", "data_mask", "mutate", "filter_rows"]

from keyword import iskeyword

from pandas.api.types import is_bool

from .env import env as _envcls
from .quote import Quoted, quote

def columns_of(frame):
    """Return the columns of `frame` that can be referred to by a bare name.

    The result is a `dict` of column name -> `pandas.Series`, plus the name
    ``data`` bound to `frame` itself (unless a column is called ``data``).

    Columns whose name is not an identifier, or is a keyword, are left out;
    refer to those as ``data["my column"]``. In the data mask passed to a
    callable, a column named like an `env` method (e.g. ``values``) is
    reached by subscripting, ``m["values"]``.
    """
    out = {"data": frame}
    for name in frame.columns:
        if isinstance(name, str) and name.isidentifier() and not iskeyword(name):
            out[name] = frame[name]
    return out

def data_mask(frame, env):
    """Return a child of `env` in which the columns of `frame` are visible by name."""
    return env.child(columns_of(frame))

def _evaluate_against(frame, value, env):
    if isinstance(value, str):
        value = quote(value, env)
    if isinstance(value, Quoted):
        return value.eval(columns_of(frame))
    if callable(value):
        return value(data_mask(frame, env))
    return value

def mutate(frame, env=None, **columns):
    """Add or replace columns; return a new `DataFrame`.

    `frame` itself is not modified.

    Each value in `columns` is one of:

      - A `Quoted`. Evaluated in its own env, with the data mask on top.
      - Source code (`str`). Quoted in `env` first.
      - A callable. Called with the data mask (an `env`), as in
        ``mutate(d, b=lambda m: m.a * 2)``.
      - Anything else is stored as-is (a scalar, a list, a Series...).

    The columns are computed in the order given, so later ones see earlier ones.

    `env`: where to look up non-column names. If `None`, capture the caller's frame.
    """
    if env is None:
        env = _envcls.capture(depth=1)
    result = frame.copy()
    for name, value in columns.items():
        result[name] = _evaluate_against(result, value, env)
    return result

def filter_rows(frame, predicate, env=None):
    """Return the rows of `frame` for which `predicate` is true.

    `predicate` is a `Quoted`, source code, or a callable taking the data
    mask, as in `mutate`. It should produce a boolean `Series`; a single
    `bool` keeps all rows or none. The index is preserved.

    `env`: where to look up non-column names. If `None`, capture the caller's frame.
    """
    if env is None:
        env = _envcls.capture(depth=1)
    if not isinstance(predicate, (str, Quoted)) and not callable(predicate):
        raise TypeError("expected a Quoted, source code or a callable as the predicate, got {} with value {}".format(type(predicate), repr(predicate)))
    selected = _evaluate_against(frame, predicate, env)
    if is_bool(selected):
        return frame.copy() if selected else frame.iloc[0:0]
    return frame.loc[selected]
