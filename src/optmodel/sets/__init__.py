"""A module for the bookkeeping of named sets in flat numbering spaces. It contains

- :mod:`optmodel.sets.named_sets`: the registry :class:`NumberingSpace`, which
  allocates named (and, optionally, indexed) blocks contiguously and keeps track of the
  declared shapes of the indexed families
- :mod:`optmodel.sets.varsets`: the stateless resolution of varsets, i.e., ordered
  references to blocks of variables, into ranges of the variable numbering space.
"""

__all__ = [
    "IndexedFamily",
    "NamedSetEntry",
    "NumberingSpace",
    "VarsetReference",
    "normalize_varsets",
    "resolve",
    "varset_len",
]

from .named_sets import IndexedFamily, NamedSetEntry, NumberingSpace
from .varsets import VarsetReference, normalize_varsets, resolve, varset_len
