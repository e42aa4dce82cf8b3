r"""**optmodel** is a library for assembling large-scale optimization programmes (e.g.,
optimal power flow problems) from independently defined, named blocks of variables and
constraints, built on top of CasADi.

Variables and constraints are declared in named, optionally indexed, blocks, each of
which is allocated contiguously in a flat numbering space. Linear constraints are
written only in terms of the blocks of variables they touch (a *varset*), and are then
scattered into the full-width sparse constraint matrix automatically.
"""

__version__ = "0.1.0"

__all__ = [
    "OptModel",
    "VarsetReference",
    "core",
    "errors",
    "sets",
]

from . import core, errors, sets
from .model.model import OptModel
from .sets.varsets import VarsetReference
