# -*- coding: utf-8 -*-
"""Substitute, then evaluate."""

from unpythonic.syntax import macros, test, test_raises  # noqa: F401
from unpythonic.test.fixtures import session, testset

import re

import pandas as pd

from unpythonic.dynassign import dyn

from ..env import env
from ..let import substitute_and_evaluate, let, letdef
from ..placeholders import UnresolvedPlaceholder
from ..quote import quote

factor = 3

@letdef({"SCALE": "factor", "COL": "price"})
def scaled(d):
    """Multiply a column by a module-level factor."""
    return d.assign(COL=d.COL * SCALE)  # noqa: F821, `letdef` defines `SCALE`.

@letdef({"NAME": "renamed"})
def NAME(x):
    return x + 1

def runtests():
    with testset("scenario: parameterized column names"):
        d = pd.DataFrame({"a": [1]})
        result = substitute_and_evaluate({"RESVAR": "res", "INPUTVAR": "a"},
                                         "d.assign(RESVAR=d.INPUTVAR + 1)")
        test[list(result["res"]) == [2]]
        test[list(result["a"]) == [1]]
        test[list(d.columns) == ["a"]]  # the input is not modified

    with testset("unresolved placeholder"):
        d = pd.DataFrame({"a": [1]})
        test_raises[UnresolvedPlaceholder,
                    let({"RESVAR": "res"}, "d.assign(RESVAR=d.INPUTVAR + 1)", env(d=d))]

        # nothing is evaluated
        calls = []
        e = env(record=calls.append)
        test_raises[UnresolvedPlaceholder, let({}, "record(1) or X", e)]
        test[calls == []]

        # unless asked to
        test_raises[NameError, let({}, "record(1) or X", e, strict=False)]
        test[calls == [1]]

    with testset("independent calls"):
        d = pd.DataFrame({"a": [1, 2]})
        template = "d.assign(RESVAR=d.INPUTVAR * 10)"
        r1 = let({"RESVAR": "b", "INPUTVAR": "a"}, template)
        r2 = let({"RESVAR": "c", "INPUTVAR": "a"}, template)
        test[list(r1.columns) == ["a", "b"]]
        test[list(r2.columns) == ["a", "c"]]
        test[list(r2["c"]) == [10, 20]]

    with testset("substitution semantics"):
        # no placeholders: the template's own value, for any mapping
        e = env(x=20)
        test[let({"X": "y"}, "x + 1", e) == 21]
        test[let({}, "x + 1", e) == 21]

        # same as writing the replacements in by hand
        e = env(a=2, b=5)
        test[let({"P": "a", "Q": "b"}, "P ** Q - Q", e) == eval("a ** b - b", {}, {"a": 2, "b": 5})]

        # spliced expressions keep their grouping
        e = env(a=3, b=4)
        test[let({"X": quote("a + b", e)}, "X * X", e) == 49]

        # lambdas see the env, too
        e = env(k=10, xs=[1, 2, 3])
        test[let({"K": "k"}, "list(map(lambda x: x + K, xs))", e) == [11, 12, 13]]

        # string constants, for column names that aren't identifiers
        d2 = pd.DataFrame({"my col": [1, 2]})
        total = let({"COL": "my col"}, 'd2["COL"].sum()', strings=True)
        test[total == 3]

    with testset("statement blocks"):
        e = env(a=1)
        out = let({"OUT": "total", "IN": "a"}, """
            OUT = IN * 10
            OUT + 1
        """, e)
        test[out == 11]
        test[e.total == 10]  # bindings go into the env

        test[let({"X": "z"}, "X = 5", e) is None]
        test[e.z == 5]

        # the caller's frame is not written to
        w = 1
        let({"W": "w"}, "W = 2")
        test[w == 1]

    with testset("quoted templates"):
        qt = quote("INPUTVAR * 2", env(a=21))
        test[let({"INPUTVAR": "a"}, qt) == 42]  # evaluates in the env of the Quoted
        test[let({"INPUTVAR": "a"}, qt, env(a=5)) == 10]  # unless given one

    with testset("configuration"):
        with dyn.let(placeholder_pattern=r"_[a-z]+_"):
            test[let({"_in_": "a"}, "_in_ + 1", env(a=1)) == 2]
            test_raises[UnresolvedPlaceholder, let({}, "_in_ + 1", env(a=1))]
            test[let({}, "A + 1", env(A=1)) == 2]  # not a placeholder now

    with testset("names shared with env methods"):
        values = [1, 2, 3]  # noqa: F841, used by the template.
        keys = 10  # noqa: F841, used by the template.
        result = let({}, "sum(values) + keys")
        test[result == 16]

        e = env()
        let({"X": "values"}, "X = [1]", e)
        test["values" in e]
        test[e["values"] == [1]]

    with testset("only placeholders are substituted"):
        test[let({"x": "q"}, "x + 1", env(x=20, q=0)) == 21]
        test[let({"x": "q", "X": "q"}, "x + X", env(x=20, q=1)) == 21]

    with testset("library constants"):
        test[let({}, "re.IGNORECASE", env(re=re)) == re.IGNORECASE]
        test[let({}, "dict(KEY=1)", env()) == {"KEY": 1}]
        test[let({"P": "p"}, "P", env(p=2)) == 2]
        test_raises[UnresolvedPlaceholder, let({"P": "p"}, "P | re.IGNORECASE", env(re=re, p=0))]
        test[let({"P": "p", "IGNORECASE": "IGNORECASE"}, "P | re.IGNORECASE", env(re=re, p=0)) == re.IGNORECASE]

    with testset("captured expressions keep their env"):
        q = quote("offset", env(offset=5))
        test[let({"X": q}, "X + 1", env()) == 6]
        test[let({"X": q}, "X + offset", env(offset=100)) == 105]
        e = env()
        let({"X": q, "OUT": "out"}, "OUT = X * 2", e)
        test[e["out"] == 10]
        test[len(e) == 1]  # the evaluator of the captured expression is not written back
        test_raises[ValueError, let({"X": q}, "X = 1", env()), "only where a value is read"]

    with testset("letdef"):
        prices = pd.DataFrame({"price": [1.0, 2.0]})
        test[list(scaled(prices)["price"]) == [3.0, 6.0]]
        test[scaled.__name__ == "scaled"]
        test[scaled.__doc__ == "Multiply a column by a module-level factor."]
        test[NAME.__name__ == "renamed"]
        test[NAME(1) == 2]

        def uses_missing(d):
            return d[COL]  # noqa: F821, never defined.
        test_raises[UnresolvedPlaceholder, letdef({})(uses_missing)]

        y = 1
        def closes_over():
            return y
        test_raises[ValueError, letdef({})(closes_over), "closures are not supported"]

        class Base:
            def describe(self):
                return "base"
        class Derived(Base):
            def describe(self):
                return "derived " + super().describe()
        test[Derived().describe() == "derived base"]
        test_raises[ValueError, letdef({})(Derived.describe), "zero-argument super() makes a closure"]

if __name__ == '__main__':  # pragma: no cover
    with session(__file__):
        runtests()
