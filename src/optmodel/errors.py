"""Exceptions raised while declaring the blocks of an :class:`optmodel.OptModel`.

Every error is raised eagerly, at declaration time, and leaves the model untouched.
Each class also derives from the builtin exception a caller would expect, so that,
e.g., ``except ValueError`` keeps working."""

__all__ = [
    "OptModelError",
    "DuplicateNameError",
    "UnknownFamilyError",
    "DuplicateIndexError",
    "NotFoundError",
    "ShapeMismatchError",
    "FrozenModelError",
]


class OptModelError(Exception):
    """Base class of all the errors of the package."""


class DuplicateNameError(OptModelError, ValueError):
    """A name is already in use in the numbering space."""


class UnknownFamilyError(OptModelError, ValueError):
    """An index was given for a name that was never declared as an indexed family, or
    it does not match the dimensions of the family."""


class DuplicateIndexError(OptModelError, ValueError):
    """The same member of an indexed family was added twice."""


class NotFoundError(OptModelError, LookupError):
    """No block with the given name and index exists in the numbering space."""


class ShapeMismatchError(OptModelError, ValueError):
    """Row or column counts of a block are inconsistent."""


class FrozenModelError(OptModelError, RuntimeError):
    """The model was frozen and cannot accept new blocks."""
