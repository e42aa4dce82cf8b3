"""Contains classes for storing debug information on the variables and constraints
declared in an instance of the :class:`optmodel.OptModel` class."""

from inspect import getframeinfo as _getframeinfo
from itertools import dropwhile as _dropwhile
from traceback import walk_stack as _walk_stack
from types import MappingProxyType as _MappingProxyType
from typing import Literal
from typing import NamedTuple as _NamedTuple

from ..sets.named_sets import format_name as _format_name


class ModelDebugEntry(_NamedTuple):
    """Class representing a single entry of the debug information for an
    :class:`optmodel.OptModel` instance."""

    name: str
    """Name of the block."""

    index: tuple[int, ...]
    """Index of the block in its family (empty for simple names)."""

    type: Literal["Variable", "Linear constraint", "Nonlinear constraint"]
    """Type of the block."""

    count: int
    """Number of entries in the block."""

    filename: str
    """Name of the file where the block is declared."""

    function: str
    """Name of the function/method where the block is declared."""

    lineno: int
    """Line number where the block is declared."""

    context: str
    """Context in which the block is declared."""

    def __str__(self) -> str:
        return (
            f"{self.type} '{_format_name(self.name, self.index)}' of size "
            f"{self.count} defined at\n"
            f"  filename: {self.filename}\n"
            f"  function: {self.function}:{self.lineno}\n"
            f"  context:  {self.context}"
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.__str__()})"


class ModelDebug:
    """Debug class for information about the blocks declared in an instance of the
    :class:`optmodel.OptModel` class. In particular, it records, for each numbering
    space, where each block was declared in the user's code

    - the variables ``var``
    - the linear constraints ``lin``
    - the nonlinear constraints ``nln``.
    """

    _types = _MappingProxyType(
        {
            "var": "Variable",
            "lin": "Linear constraint",
            "nln": "Nonlinear constraint",
        }
    )
    """Possible types of blocks and their definition."""

    def __init__(self) -> None:
        self._var_info: list[tuple[range, ModelDebugEntry]] = []
        self._lin_info: list[tuple[range, ModelDebugEntry]] = []
        self._nln_info: list[tuple[range, ModelDebugEntry]] = []

    def describe(
        self, space: Literal["var", "lin", "nln"], index: int
    ) -> ModelDebugEntry:
        """Returns debug information on the entry at the given position of a space.

        Parameters
        ----------
        space : {"var", "lin", "nln"}
            The numbering space to query.
        index : int
            Global position in the numbering space.

        Returns
        -------
        ModelDebugEntry
            A class instance containing debug information on the block that contains
            the given position.

        Raises
        ------
        IndexError
            Index not found, or outside bounds of the space.
        AttributeError
            Raises in case the given space is invalid.
        """
        info: list[tuple[range, ModelDebugEntry]] = getattr(self, f"_{space}_info")
        for range_, description in info:
            if index in range_:
                return description
        raise IndexError(f"Index {index} not found in '{space}'.")

    def register(
        self,
        space: Literal["var", "lin", "nln"],
        name: str,
        index: tuple[int, ...],
        first: int,
        count: int,
    ) -> None:
        """Registers debug information on a new block in the given space.

        Parameters
        ----------
        space : {"var", "lin", "nln"}
            Indentifies the numbering space the block belongs to.
        name : str
            Name of the block.
        index : tuple of ints
            Index of the block.
        first : int
            Position of the first entry of the block in the space.
        count : int
            Number of entries of the block.

        Raises
        ------
        AttributeError
            Raises in case the given space is invalid.
        """
        info: list[tuple[range, ModelDebugEntry]] = getattr(self, f"_{space}_info")
        stack = _dropwhile(
            lambda f: f[0].f_globals["__name__"].startswith("optmodel."),
            _walk_stack(None),
        )
        frame, lineno = next(stack)
        traceback = _getframeinfo(frame, context=3)
        info.append(
            (
                range(first, first + count),
                ModelDebugEntry(
                    name,
                    index,
                    self._types[space],
                    count,
                    traceback.filename,
                    traceback.function,
                    lineno,
                    (
                        "".join(traceback.code_context)
                        if traceback.code_context is not None
                        else ""
                    ),
                ),
            )
        )
