from collections.abc import Iterable, Mapping
from typing import Any, Generic, Literal, Optional, TypeVar, Union

import casadi as cs

from ..errors import FrozenModelError
from ..sets.named_sets import (
    IndexType,
    NamedSetEntry,
    NumberingSpace,
    SpaceType,
    as_index,
)

SymType = TypeVar("SymType", cs.SX, cs.MX)
SPACES: tuple[SpaceType, ...] = ("var", "lin", "nln")


class HasNamedSets(Generic[SymType]):
    """Class for the bookkeeping of named sets in the three numbering spaces of a model:
    variables ``"var"``, linear constraints ``"lin"`` and nonlinear constraints
    ``"nln"``.

    Parameters
    ----------
    sym_type : {"SX", "MX"}, optional
        The CasADi symbolic variable type to use in the model, by default ``"SX"``.
    """

    def __init__(self, sym_type: Literal["SX", "MX"] = "SX") -> None:
        super().__init__()
        self._sym_type: type[SymType] = getattr(cs, sym_type)
        self._spaces: dict[SpaceType, NumberingSpace] = {
            s: NumberingSpace(s) for s in SPACES
        }
        self._frozen = False

    @property
    def var(self) -> NumberingSpace:
        """Gets the numbering space of the variables."""
        return self._spaces["var"]

    @property
    def lin(self) -> NumberingSpace:
        """Gets the numbering space of the linear constraints."""
        return self._spaces["lin"]

    @property
    def nln(self) -> NumberingSpace:
        """Gets the numbering space of the nonlinear constraints."""
        return self._spaces["nln"]

    @property
    def frozen(self) -> bool:
        """Gets whether the model is frozen, i.e., it accepts no new blocks."""
        return self._frozen

    def freeze(self) -> None:
        """Freezes the model. Afterwards, any attempt to declare new blocks raises
        :class:`optmodel.errors.FrozenModelError`."""
        self._frozen = True

    def space(self, space: SpaceType) -> NumberingSpace:
        """Gets the numbering space ``"var"``, ``"lin"`` or ``"nln"``.

        Raises
        ------
        ValueError
            Raises if the space is not recognized.
        """
        try:
            return self._spaces[space]
        except KeyError:
            raise ValueError(
                f"Unrecognized numbering space '{space}'; expected one of {SPACES}."
            ) from None

    def init_indexed_name(
        self, space: SpaceType, name: str, dims: Iterable[int]
    ) -> None:
        """Declares the dimensions of an indexed named set, before any of its members is
        added.

        Parameters
        ----------
        space : {"var", "lin", "nln"}
            The numbering space of the indexed named set.
        name : str
            Name of the set. Must not be already in use in ``space``.
        dims : iterable of ints
            The extent of each dimension. Members' indices are 0-based, so the ``k``-th
            component must lie in ``[0, dims[k])``.

        Raises
        ------
        DuplicateNameError
            Raises if the name is already in use in the space.
        FrozenModelError
            Raises if the model is frozen.
        """
        self._check_not_frozen()
        self.space(space).init_indexed_name(name, dims)

    def add_named_set(
        self,
        space: SpaceType,
        name: str,
        count: int,
        index: Union[None, int, Iterable[int]] = None,
        **data: Any,
    ) -> NamedSetEntry:
        """Allocates a new named set of ``count`` entries in the given space, storing
        ``data`` as its payload. See :meth:`optmodel.sets.NumberingSpace.add`."""
        self._check_not_frozen()
        return self.space(space).add(name, as_index(index), count, **data)

    def lookup(
        self,
        space: SpaceType,
        name: str,
        index: Union[None, int, Iterable[int]] = None,
    ) -> NamedSetEntry:
        """Gets the entry of a named set.

        Raises
        ------
        NotFoundError
            Raises if no such named set exists in the space.
        """
        return self.space(space).lookup(name, as_index(index))

    def lookup_offsets(
        self,
        space: SpaceType,
        name: str,
        index: Union[None, int, Iterable[int]] = None,
    ) -> tuple[int, int, int]:
        """Gets the position of the first and last (inclusive) entry of a named set in
        its space, as well as its number of entries.

        Raises
        ------
        NotFoundError
            Raises if no such named set exists in the space.
        """
        entry = self.lookup(space, name, index)
        return entry.first, entry.last, entry.count

    def getN(
        self,
        space: SpaceType,
        name: Optional[str] = None,
        index: Union[None, int, Iterable[int]] = None,
    ) -> int:
        """Gets the total number of entries in a space or, if ``name`` is given, the
        number of entries in that named set (zero if it does not exist)."""
        s = self.space(space)
        if name is None:
            return s.N
        index = as_index(index)
        return s.lookup(name, index).count if s.has(name, index) else 0

    def get_idx(
        self, space: SpaceType
    ) -> Mapping[tuple[str, IndexType], NamedSetEntry]:
        """Gets a read-only mapping from ``(name, index)`` to the entries of a space, in
        allocation order."""
        return self.space(space).entries

    def _check_not_frozen(self) -> None:
        if self._frozen:
            raise FrozenModelError("Model is frozen; no new blocks can be declared.")
