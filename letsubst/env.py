# -*- coding: utf-8 -*-
"""Explicit evaluation contexts.

An `env` is what a captured expression remembers about where it should run.
Instead of implicitly closing over the caller's scope, every operation that
needs deferred evaluation takes an `env` (or captures one explicitly with
`env.capture`).
"""

__all__ = ["env"]

import builtins
import sys
from collections.abc import Container, Sized, Iterable, Mapping, MutableMapping

class env:
    """Evaluation context for substitution and captured expressions.

    Names must be identifiers (see str.isidentifier()), even when introduced
    by subscripting the env instance.

    Essentially a fancy bunch, with an optional parent and a globals dict.

    Bare bunch::

        e = env(s="hello", orange="fruit", answer=42)
        print(e.s)

    Layering (lookups fall back to the parent, writes go to the child)::

        inner = e.child(answer=23)
        assert inner.answer == 23 and inner.s == "hello"
        assert e.answer == 42

    Capturing the calling frame::

        def f():
            x = 42
            e = env.capture()
            assert e.x == 42

    Iteration, `len` and membership see the whole chain, innermost binding
    winning; mutation only ever touches the env itself, like
    `collections.ChainMap`.

    Any identifier can be bound. A name that is also the name of a method
    (such as ``values`` or ``items``) is accessible by subscripting only::

        e = env(values=[1, 2, 3])
        assert e["values"] == [1, 2, 3]

    Code evaluated in an env sees such bindings like any other name.

    Context manager::

        with env(s="hello", orange="fruit", answer=42) as e:
            ...  # ...code that uses e...

    When the `with` block exits, ``e`` forgets all its own bindings.
    """
    # do not allow attribute writes that would break functionality.
    _reserved_names = ("set", "clear", "child", "capture", "namespace", "globals", "parent",
                       "items", "keys", "values", "get", "update", "pop", "_bind",
                       "_env", "_parent", "_globals", "_direct_write", "_reserved_names")
    _direct_write = ("_env", "_parent", "_globals")

    def __init__(self, *mapping, **bindings):
        self._env = {}
        self._parent = None
        self._globals = None
        self.update(*mapping, **bindings)

    @classmethod
    def capture(cls, depth=0):
        """Capture a frame on the call stack as an `env`.

        ``depth=0`` is the frame that calls `capture`, ``depth=1`` its caller,
        and so on.

        The bindings are a snapshot of the frame's locals at the time of the
        call; the frame's globals dict is used as-is, so later changes to
        module-level names are seen.

        **CAUTION**: The `sys._getframe` function exists in CPython and in PyPy3,
        but it is an implementation detail of the interpreter.
        """
        try:
            getframe = sys._getframe
        except AttributeError as err:  # pragma: no cover, both CPython and PyPy3 have sys._getframe.
            raise NotImplementedError("Need a Python interpreter which has `sys._getframe`") from err
        frame = getframe(depth + 1)
        try:
            # Skip internal names such as the ".0" iterator of a comprehension.
            e = cls({k: v for k, v in frame.f_locals.items() if k.isidentifier()})
            e._globals = frame.f_globals
        finally:
            del frame
        return e

    def child(self, *mapping, **bindings):
        """Return a new `env` whose lookups fall back to this one."""
        e = type(self)(*mapping, **bindings)
        e._parent = self
        return e

    @property
    def parent(self):
        return self._parent

    @property
    def globals(self):
        """The globals dict used when evaluating code in this env.

        Inherited from the parent if not set. An env chain with no globals
        anywhere gets a fresh dict with just the builtins.
        """
        e = self
        while e is not None:
            if e._globals is not None:
                return e._globals
            e = e._parent
        self._globals = {"__builtins__": builtins}
        return self._globals

    def namespace(self):
        """Flatten the chain into a `dict`, innermost binding winning."""
        chain = []
        e = self
        while e is not None:
            chain.append(e._env)
            e = e._parent
        out = {}
        for bindings in reversed(chain):
            out.update(bindings)
        return out

    # item access by name
    def __setattr__(self, name, value):
        if name in self._direct_write:  # hook to allow creating internal variables directly in self
            return super().__setattr__(name, value)
        if name in self._reserved_names:
            raise AttributeError("cannot overwrite reserved name {} as an attribute, use e[{}] = ...; complete list: {}".format(repr(name), repr(name), self._reserved_names))
        self._bind(name, value)

    def _bind(self, name, value):
        if not isinstance(name, str) or not name.isidentifier():
            raise ValueError("{} is not a valid identifier".format(repr(name)))
        self._env[name] = value

    def __getattr__(self, name):
        # don't pretend to have special methods (copy, pickle), and don't recurse before __init__ has run
        if (name.startswith("__") and name.endswith("__")) or name in self._direct_write:
            raise AttributeError(name)
        if not name.isidentifier():
            raise ValueError("{} is not a valid identifier".format(repr(name)))
        e = self
        while e is not None:
            if name in e._env:
                return e._env[name]
            e = e._parent
        raise AttributeError("name {} is not defined".format(repr(name)))

    def __delattr__(self, name):
        if not name.isidentifier():  # Can happen through delattr().
            raise ValueError("{} is not a valid identifier".format(repr(name)))
        if name not in self._env:
            raise AttributeError("name {} is not defined in this env".format(repr(name)))
        del self._env[name]

    # membership test (in, not in)
    def __contains__(self, k):
        e = self
        while e is not None:
            if k in e._env:
                return True
            e = e._parent
        return False

    # iteration
    def __iter__(self):
        return iter(self.namespace())

    def __len__(self):
        return len(self.namespace())

    # Mapping
    def items(self):
        """Like dict.items(), over the whole chain."""
        return self.namespace().items()
    def keys(self):
        return self.namespace().keys()
    def values(self):
        return self.namespace().values()
    def get(self, k, default=None):
        return self[k] if k in self else default
    def __eq__(self, other):
        return other == self.namespace()
    __hash__ = None

    # MutableMapping
    def pop(self, k, *default):
        return self._env.pop(k, *default)
    def clear(self):
        return self._env.clear()
    def update(self, *mapping, **bindings):
        """See `dict.update` for the signature."""
        if len(mapping) > 1:
            raise ValueError("Expected at most one `mapping`, got {}.".format(len(mapping)))
        if mapping:
            m = mapping[0]
            pairs = m.items() if isinstance(m, Mapping) else m
            for name, value in pairs:
                self._bind(name, value)
        for name, value in bindings.items():
            self._bind(name, value)

    # subscripting; unlike attribute access, this reaches also names that
    # coincide with a method name.
    def __getitem__(self, k):
        e = self
        while e is not None:
            if k in e._env:
                return e._env[k]
            e = e._parent
        raise KeyError(k)

    def __setitem__(self, k, v):
        self._bind(k, v)

    def __delitem__(self, k):
        if not isinstance(k, str) or not k.isidentifier():
            raise ValueError("{} is not a valid identifier".format(repr(k)))
        if k not in self._env:
            raise KeyError(k)
        del self._env[k]

    # context manager
    def __enter__(self):
        return self

    def __exit__(self, exctype, excvalue, traceback):
        self._env.clear()

    # pretty-printing
    def __repr__(self):  # pragma: no cover
        bindings = ["{:s}={}".format(name, repr(value)) for name, value in self._env.items()]
        parent = " parent=0x{:x}".format(id(self._parent)) if self._parent is not None else ""
        return "<env object at 0x{:x}{:s}: {{{:s}}}>".format(id(self), parent, ", ".join(bindings))

    def set(self, name, value):
        """Convenience method to allow assignment in expression contexts.

        Only rebinding is allowed; the name may live anywhere in the chain,
        but the new binding is always created in this env.

        For convenience, returns the `value` argument.
        """
        if name not in self:  # allow only rebinding
            raise AttributeError("name {} is not defined".format(repr(name)))
        self._bind(name, value)
        return value

# register virtual base classes
for abscls in (Container, Sized, Iterable, Mapping, MutableMapping):
    abscls.register(env)
del abscls
