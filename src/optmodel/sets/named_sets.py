"""Registry of named sets, i.e., the bookkeeping of named blocks of scalar entities
(variables or constraint rows) inside one flat numbering space."""

from collections.abc import Iterable, Iterator, Mapping
from numbers import Integral
from types import MappingProxyType
from typing import Any, Literal, NamedTuple, Union

from ..errors import (
    DuplicateIndexError,
    DuplicateNameError,
    NotFoundError,
    UnknownFamilyError,
)

SpaceType = Literal["var", "lin", "nln"]
IndexType = tuple[int, ...]


def format_name(name: str, index: IndexType = ()) -> str:
    """Formats a name and its index as, e.g., ``"R(1,2)"``, or ``"R"`` if no index."""
    if not index:
        return name
    return f"{name}({','.join(str(i) for i in index)})"


def as_index(index: Union[None, int, Iterable[int]]) -> IndexType:
    """Converts the given index to a tuple of ints. ``None`` yields the empty index;
    a single integer, including numpy ones, yields a one-dimensional index."""
    if index is None:
        return ()
    if isinstance(index, Integral):
        return (int(index),)
    return tuple(int(i) for i in index)


class NamedSetEntry(NamedTuple):
    """A named block of contiguous entries in a numbering space."""

    name: str
    """Name of the block."""

    index: IndexType
    """Index of the block in its family, or the empty tuple for simple names."""

    count: int
    """Number of entries in the block."""

    first: int
    """Position of the first entry in the numbering space (0-based)."""

    last: int
    """Position of the last entry in the numbering space (inclusive)."""

    data: Mapping[str, Any]
    """Payload stored with the block, e.g., bounds or coefficient matrices."""

    @property
    def slice(self) -> slice:
        """Gets the slice selecting this block from a vector of the numbering space."""
        return slice(self.first, self.last + 1)

    @property
    def label(self) -> str:
        """Gets the name of the block formatted together with its index."""
        return format_name(self.name, self.index)


class IndexedFamily(NamedTuple):
    """The declared shape of a family of indexed named sets."""

    name: str
    dims: IndexType

    def check(self, index: IndexType) -> None:
        """Checks that ``index`` is a valid member index of this family.

        Raises
        ------
        UnknownFamilyError
            Raises if the arity of the index does not match the family's, or if any
            component is out of range.
        """
        if len(index) != len(self.dims):
            raise UnknownFamilyError(
                f"Index {index} of '{self.name}' has {len(index)} dimensions; "
                f"expected {len(self.dims)}."
            )
        for k, (i, n) in enumerate(zip(index, self.dims)):
            if not 0 <= i < n:
                raise UnknownFamilyError(
                    f"Index {index} of '{self.name}' is out of range in dimension {k}: "
                    f"{i} not in [0, {n})."
                )


class NumberingSpace:
    """A flat numbering space in which named blocks are allocated contiguously, in the
    order they are added.

    Parameters
    ----------
    kind : {"var", "lin", "nln"}
        The kind of entities numbered by this space.

    Notes
    -----
    Blocks are keyed by the composite ``(name, index)``. Families of indexed blocks
    must first be declared via :meth:`init_indexed_name`, which fixes their shape;
    afterwards, their members can be added in any order.
    """

    def __init__(self, kind: SpaceType) -> None:
        self.kind = kind
        self._N = 0
        self._entries: dict[tuple[str, IndexType], NamedSetEntry] = {}
        self._families: dict[str, IndexedFamily] = {}
        self._names: set[str] = set()

    @property
    def N(self) -> int:
        """Total number of entries allocated in the space."""
        return self._N

    @property
    def NS(self) -> int:
        """Number of blocks allocated in the space."""
        return len(self._entries)

    @property
    def entries(self) -> Mapping[tuple[str, IndexType], NamedSetEntry]:
        """Gets a read-only view of the blocks, in allocation order."""
        return MappingProxyType(self._entries)

    @property
    def families(self) -> Mapping[str, IndexedFamily]:
        """Gets a read-only view of the declared indexed families."""
        return MappingProxyType(self._families)

    def __iter__(self) -> Iterator[NamedSetEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: tuple[str, IndexType]) -> bool:
        return key in self._entries

    def has(self, name: str, index: IndexType = ()) -> bool:
        """Returns whether a block with the given name and index exists."""
        return (name, index) in self._entries

    def dims(self, name: str) -> IndexType:
        """Returns the declared dimensions of the indexed family ``name``."""
        try:
            return self._families[name].dims
        except KeyError:
            raise NotFoundError(
                f"No indexed family named '{name}' in '{self.kind}'."
            ) from None

    def init_indexed_name(self, name: str, dims: Iterable[int]) -> IndexedFamily:
        """Declares the shape of the indexed family ``name``.

        Parameters
        ----------
        name : str
            Name of the family. Must not be already in use in this space.
        dims : iterable of ints
            The extent of each dimension of the family's index.

        Returns
        -------
        IndexedFamily
            The newly declared family.

        Raises
        ------
        DuplicateNameError
            Raises if the name is already in use, either as a simple name or a family.
        ValueError
            Raises if ``dims`` is empty or contains non-positive extents.
        """
        if name in self._names:
            raise DuplicateNameError(
                f"Name '{name}' already exists in '{self.kind}'."
            )
        dims = tuple(int(d) for d in dims)
        if not dims or any(d <= 0 for d in dims):
            raise ValueError(f"Invalid dimensions {dims} for indexed name '{name}'.")
        family = IndexedFamily(name, dims)
        self._families[name] = family
        self._names.add(name)
        return family

    def add(
        self, name: str, index: IndexType = (), count: int = 0, **data: Any
    ) -> NamedSetEntry:
        """Allocates a new block of ``count`` entries at the end of the space.

        Parameters
        ----------
        name : str
            Name of the block.
        index : tuple of ints, optional
            Index of the block inside its family. Must be empty for simple names.
        count : int
            Number of entries in the block.
        data
            Payload to be stored with the block.

        Returns
        -------
        NamedSetEntry
            The entry of the new block.

        Raises
        ------
        UnknownFamilyError
            Raises if an index is given but ``name`` is not a declared family, if no
            index is given for a family name, or if the index does not fit the family.
        DuplicateIndexError
            Raises if the member ``(name, index)`` already exists.
        DuplicateNameError
            Raises if the simple name ``name`` already exists.
        ValueError
            Raises if ``count`` is negative.
        """
        count = int(count)
        if count < 0:
            raise ValueError(f"Invalid size {count} for '{format_name(name, index)}'.")
        family = self._families.get(name)
        if index:
            if family is None:
                raise UnknownFamilyError(
                    f"'{name}' was not declared as an indexed name in '{self.kind}'; "
                    "call `init_indexed_name` first."
                )
            family.check(index)
            if (name, index) in self._entries:
                raise DuplicateIndexError(
                    f"'{format_name(name, index)}' already exists in '{self.kind}'."
                )
        elif family is not None:
            raise UnknownFamilyError(
                f"'{name}' is an indexed name in '{self.kind}' with dimensions "
                f"{family.dims}; an index is required."
            )
        elif name in self._names:
            raise DuplicateNameError(
                f"Name '{name}' already exists in '{self.kind}'."
            )

        first = self._N
        entry = NamedSetEntry(
            name, index, count, first, first + count - 1, MappingProxyType(data)
        )
        self._entries[(name, index)] = entry
        self._names.add(name)
        self._N += count
        return entry

    def lookup(self, name: str, index: IndexType = ()) -> NamedSetEntry:
        """Gets the block with the given name and index.

        Raises
        ------
        NotFoundError
            Raises if no such block exists.
        """
        try:
            return self._entries[(name, index)]
        except KeyError:
            raise NotFoundError(
                f"'{format_name(name, index)}' not found in '{self.kind}'."
            ) from None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.kind!r}, N={self._N}, NS={self.NS})"
