# -*- coding: utf-8 -*-
"""Data-masked evaluation over tables."""

from unpythonic.syntax import macros, test, test_raises  # noqa: F401
from unpythonic.test.fixtures import session, testset

import pandas as pd

from ..env import env
from ..frames import columns_of, data_mask, mutate, filter_rows
from ..let import let
from ..quote import quote

def runtests():
    with testset("data mask"):
        d = pd.DataFrame({"a": [1, 2, 3], "my col": [4, 5, 6], "items": [0, 0, 0], "class": [1, 1, 1]})
        cols = columns_of(d)
        test[set(cols) == {"data", "a", "items"}]  # not "my col", not the keyword "class"
        test[cols["data"] is d]

        m = data_mask(d, env(k=10))
        test[list(m.a) == [1, 2, 3]]
        test[m.k == 10]
        test[list(m.data["my col"]) == [4, 5, 6]]
        test[list(m["items"]) == [0, 0, 0]]  # shares its name with a method

    with testset("mutate"):
        d = pd.DataFrame({"a": [1, 2, 3]})
        offset = 10  # noqa: F841, used by the quoted expression.
        out = mutate(d, b="a + offset", c=lambda m: m.b * 2, z=0)
        test[list(out["b"]) == [11, 12, 13]]
        test[list(out["c"]) == [22, 24, 26]]  # later columns see earlier ones
        test[list(out["z"]) == [0, 0, 0]]
        test[list(d.columns) == ["a"]]

        qb = quote("a * factor", env(factor=100))
        out = mutate(d, b=qb)
        test[list(out["b"]) == [100, 200, 300]]

        out = mutate(d, a="a + 1")
        test[list(out["a"]) == [2, 3, 4]]
        test[list(d["a"]) == [1, 2, 3]]

        out = mutate(d, s='data["a"].sum()', env=env())
        test[list(out["s"]) == [6, 6, 6]]

        d3 = pd.DataFrame({"values": [1, 2]})
        out = mutate(d3, doubled="values * 2", env=env())
        test[list(out["doubled"]) == [2, 4]]

    with testset("filter_rows"):
        d = pd.DataFrame({"a": [1, 2, 3]}, index=[10, 20, 30])
        threshold = 1  # noqa: F841, used by the quoted expression.
        out = filter_rows(d, "a > threshold")
        test[list(out.index) == [20, 30]]

        out = filter_rows(d, lambda m: m.a == 2)
        test[list(out.index) == [20]]

        out = filter_rows(d, quote("a < limit", env(limit=3)))
        test[list(out.index) == [10, 20]]

        test[len(filter_rows(d, "True", env())) == 3]
        test[len(filter_rows(d, "False", env())) == 0]
        test_raises[TypeError, filter_rows(d, 42, env())]

    with testset("both styles together"):
        d = pd.DataFrame({"a": [1]})
        out = let({"RESVAR": "res", "INPUTVAR": "a"},
                  "mutate(d, RESVAR=lambda m: m.INPUTVAR + 1)")
        test[list(out["res"]) == [2]]
        test[list(out["a"]) == [1]]

        # a placeholder can also stand for a column name inside quoted source
        out = let({"RESVAR": "res", "INPUTVAR": "a"},
                  "mutate(d, RESVAR='INPUTVAR')",
                  strings=True)
        test[list(out["res"]) == [1]]

if __name__ == '__main__':  # pragma: no cover
    with session(__file__):
        runtests()
