# -*- coding: utf-8 -*
"""Parameterize code by names: captured expressions and `let`-style substitution.

Two styles of non-standard evaluation, side by side:

  - `quote` captures an expression together with its evaluation context
    (an `env`), to be evaluated later, possibly with a data mask on top
    (see `letsubst.frames`).
  - `let` (a.k.a. `substitute_and_evaluate`) rewrites placeholder names in
    a template before evaluating it.

See ``dir(letsubst)`` and submodule docstrings for more.

For the same substitution at macro expansion time, see ``letsubst.syntax``
(requires `mcpyrate`).
"""

__version__ = '0.1.0'

from .env import *  # noqa: F401, F403
from .evaluate import *  # noqa: F401, F403
from .frames import *  # noqa: F401, F403
from .let import *  # noqa: F401, F403
from .placeholders import *  # noqa: F401, F403
from .quote import *  # noqa: F401, F403
from .substitute import *  # noqa: F401, F403
