# -*- coding: utf-8 -*-
"""Run all tests for `letsubst`.

The test framework uses macros, but this top-level script does not. This can be
run under regular `python3` (i.e. does not need the `macropython` wrapper from
`mcpyrate`).

Under `pytest`, the whole suite runs as the single test `test_all`
(see `setup.cfg`).
"""

import os
import sys
from importlib import import_module

from unpythonic.test.fixtures import session, testset, tests_errored, tests_failed
from unpythonic.collections import unbox

import mcpyrate.activate  # noqa: F401

here = os.path.dirname(os.path.abspath(__file__))

def listtestmodules(package):  # "some.pkg" --> ["some.pkg.test_a", "some.pkg.test_b", ...]
    path = os.path.join(here, *package.split("."))
    return list(sorted(".".join([package, fn[:-len(".py")]]) for fn in listtestfiles(path)))

def listtestfiles(path, prefix="test_", suffix=".py"):
    return [fn for fn in os.listdir(path) if fn.startswith(prefix) and fn.endswith(suffix)]

def main():
    if here not in sys.path:
        sys.path.insert(0, here)
    # Keep counts from any earlier session in this process out of our verdict.
    failed_before, errored_before = unbox(tests_failed), unbox(tests_errored)
    with session():
        for m in listtestmodules("letsubst.tests"):
            # Wrap each module in its own testset to protect the session
            # against ImportError as well as any failures at macro expansion time.
            with testset(m):
                mod = import_module(m)
                mod.runtests()
    failures = (unbox(tests_failed) - failed_before) + (unbox(tests_errored) - errored_before)
    return failures == 0

def test_all():
    assert main()

if __name__ == '__main__':
    if not main():
        sys.exit(1)  # pragma: no cover, this only runs when the tests fail.
