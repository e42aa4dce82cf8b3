"""Resolution of varsets, i.e., ordered lists of references to blocks of variables, into
ranges of the variable numbering space."""

from collections.abc import Iterable, Mapping
from numbers import Integral
from typing import NamedTuple, Union

from .named_sets import IndexType, NumberingSpace, as_index, format_name


class VarsetReference(NamedTuple):
    """A reference to a block of variables, by name and (optionally) index."""

    name: str
    index: IndexType = ()

    def __str__(self) -> str:
        return format_name(self.name, self.index)


VarsetLike = Union[
    None,
    str,
    Iterable[Union[str, VarsetReference, tuple, Mapping]],
]


def _is_index(obj: object) -> bool:
    if isinstance(obj, Integral):
        return True
    return isinstance(obj, (tuple, list)) and all(isinstance(i, Integral) for i in obj)


def _as_reference(vs: Union[str, VarsetReference, tuple, Mapping]) -> VarsetReference:
    if isinstance(vs, VarsetReference):
        return vs
    if isinstance(vs, str):
        return VarsetReference(vs)
    if isinstance(vs, Mapping):
        index = vs.get("index", vs.get("idx"))
        return VarsetReference(vs["name"], as_index(index))
    if isinstance(vs, tuple) and len(vs) in (1, 2) and isinstance(vs[0], str):
        return VarsetReference(vs[0], as_index(vs[1] if len(vs) == 2 else None))
    raise TypeError(f"Invalid varset reference {vs!r}.")


def normalize_varsets(varsets: VarsetLike) -> tuple[VarsetReference, ...]:
    """Converts the shorthand forms of a varset into a tuple of references.

    Parameters
    ----------
    varsets : None, str, or iterable
        Either ``None`` or empty (i.e., the full vector of variables); a single
        reference; or an iterable of references. A reference is a name, a
        ``(name, index)`` tuple, a dict with keys ``"name"`` and ``"idx"`` (or
        ``"index"``), or a :class:`VarsetReference`. A top-level ``(name, index)``
        tuple is a single reference, whereas a tuple of names is a list of them.

    Returns
    -------
    tuple of VarsetReference
        The canonical form of the varset. Empty if the full vector is referenced.

    Raises
    ------
    TypeError
        Raises if an item cannot be interpreted as a reference.
    """
    if varsets is None:
        return ()
    if isinstance(varsets, (str, VarsetReference, Mapping)) or (
        isinstance(varsets, tuple)
        and len(varsets) == 2
        and isinstance(varsets[0], str)
        and _is_index(varsets[1])
    ):
        return (_as_reference(varsets),)
    return tuple(_as_reference(vs) for vs in varsets)


def resolve(
    space: NumberingSpace, varsets: Iterable[VarsetReference]
) -> list[tuple[int, int]]:
    """Resolves the given references to their ``(first, last)`` ranges in the variable
    numbering space, in the order given. An empty varset resolves to the whole space.

    Raises
    ------
    NotFoundError
        Raises if a reference points to a block that was never added.
    """
    varsets = tuple(varsets)
    if not varsets:
        return [(0, space.N - 1)]
    ranges = []
    for name, index in varsets:
        entry = space.lookup(name, index)
        ranges.append((entry.first, entry.last))
    return ranges


def varset_len(space: NumberingSpace, varsets: Iterable[VarsetReference]) -> int:
    """Returns the number of variables referenced by the given varset."""
    return sum(last - first + 1 for first, last in resolve(space, varsets))
