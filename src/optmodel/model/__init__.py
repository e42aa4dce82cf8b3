"""A module for defining optimization models and their building blocks. From simplest
to most complex, and following the inheritance hierarchy, these are:

- :class:`optmodel.model.HasNamedSets`: a class for the bookkeeping of named (and,
  optionally, indexed) blocks in the three numbering spaces of a model: variables,
  linear constraints and nonlinear constraints
- :class:`optmodel.model.HasVariables`: a class for the creation and storage of blocks
  of variables, with their initial values, bounds and types
- :class:`optmodel.model.HasLinearConstraints`: a class for the creation and storage of
  blocks of linear constraints defined on varsets, and for assembling them into the
  full-width sparse constraint matrix
- :class:`optmodel.model.HasNonlinearConstraints`: a class for the creation and storage
  of blocks of symbolic nonlinear constraints defined on varsets
- :class:`optmodel.OptModel`: a class that combines all the above building blocks into
  a full-fledged model, ready to be handed to a CasADi solver.
"""

__all__ = [
    "HasLinearConstraints",
    "HasNamedSets",
    "HasNonlinearConstraints",
    "HasVariables",
    "OptModel",
]

from .base import HasNamedSets
from .linear import HasLinearConstraints
from .model import OptModel
from .nonlinear import HasNonlinearConstraints
from .variables import HasVariables
