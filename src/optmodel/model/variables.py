from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Literal, Optional, TypeVar, Union

import casadi as cs
import numpy as np
import numpy.typing as npt

from ..core.data import as_vector, readonly, vector_length
from ..errors import ShapeMismatchError
from ..sets.named_sets import IndexType, as_index, format_name
from ..sets.varsets import VarsetLike, normalize_varsets, resolve
from .base import HasNamedSets

SymType = TypeVar("SymType", cs.SX, cs.MX)
VAR_TYPES = frozenset("CIB")


class HasVariables(HasNamedSets[SymType]):
    """Class for the creation and storage of blocks of variables in a model. It builds
    on top of :class:`HasNamedSets`, which handles the numbering spaces.

    Each block is allocated contiguously in the ``"var"`` numbering space and is
    associated with a CasADi symbol, so that the full vector of variables :meth:`x` is
    the vertical concatenation of all the blocks, in the order they were added.

    Parameters
    ----------
    sym_type : {"SX", "MX"}, optional
        The CasADi symbolic variable type to use in the model, by default ``"SX"``.
    """

    def __init__(self, sym_type: Literal["SX", "MX"] = "SX") -> None:
        super().__init__(sym_type)
        self._vars: dict[tuple[str, IndexType], SymType] = {}
        self._x = self._sym_type(0, 1)

    @property
    def x(self) -> SymType:
        """Gets the full vector of variables of the model."""
        return self._x

    @property
    def nx(self) -> int:
        """Number of variables in the model."""
        return self.var.N

    @property
    def variables(self) -> Mapping[tuple[str, IndexType], SymType]:
        """Gets the symbols of the blocks of variables, keyed by ``(name, index)``."""
        return MappingProxyType(self._vars)

    @property
    def discrete(self) -> npt.NDArray[np.bool_]:
        """Gets the boolean array indicating which variables are integer or binary."""
        vt = self.params_var()[3]
        return np.fromiter((t != "C" for t in vt), dtype=bool, count=len(vt))

    def add_var(
        self,
        name: str,
        count: int,
        v0: Union[npt.ArrayLike, cs.DM] = 0.0,
        vl: Union[npt.ArrayLike, cs.DM] = -np.inf,
        vu: Union[npt.ArrayLike, cs.DM] = +np.inf,
        vt: str = "C",
        index: Union[None, int, Iterable[int]] = None,
    ) -> SymType:
        """Adds a block of variables to the model.

        Parameters
        ----------
        name : str
            Name of the block. Must not be already in use, unless it was declared as an
            indexed name via :meth:`init_indexed_name`, in which case ``index`` must be
            provided.
        count : int
            Number of variables in the block.
        v0 : array_like, optional
            Initial values of the variables. By default, zero.
        vl, vu : array_like, optional
            Lower and upper bounds of the variables. By default, unbounded. Scalars are
            broadcast to the size of the block.
        vt : str, optional
            Type of the variables: ``"C"`` for continuous, ``"I"`` for integer, ``"B"``
            for binary. Either a single character for the whole block, or one per
            variable. By default, continuous.
        index : int or iterable of ints, optional
            Index of the block in its indexed family.

        Returns
        -------
        casadi.SX or MX
            The symbol of the new block, a column vector of ``count`` entries.

        Raises
        ------
        ShapeMismatchError
            Raises if ``v0``, ``vl``, ``vu`` or ``vt`` do not have ``count`` entries.
        ValueError
            Raises if any lower bound is larger than the corresponding upper bound, or
            if ``vt`` contains an unknown variable type.
        DuplicateNameError, DuplicateIndexError, UnknownFamilyError
            Raises if the name or index are invalid (see :meth:`add_named_set`).
        """
        index = as_index(index)
        count = int(count)
        v0 = as_vector(v0, count, 0.0)
        vl = as_vector(vl, count, -np.inf)
        vu = as_vector(vu, count, +np.inf)
        if len(vt) == 1:
            vt = vt * count
        for a, n in ((v0, "v0"), (vl, "vl"), (vu, "vu"), (vt, "vt")):
            size = len(a) if isinstance(a, str) else a.shape
            if size != count and size != (count,):
                raise ShapeMismatchError(
                    f"Size of `{n}` {size} does not match the number of variables "
                    f"of '{format_name(name, index)}' ({count})."
                )
        if not VAR_TYPES.issuperset(vt):
            raise ValueError(f"Unrecognized variable types in '{vt}'.")
        if np.any(vl > vu):
            raise ValueError("Improper variable bounds.")
        readonly(v0, vl, vu)

        self.add_named_set("var", name, count, index, v0=v0, vl=vl, vu=vu, vt=vt)
        var = self._sym_type.sym(format_name(name, index), count)
        self._vars[(name, index)] = var
        self._x = cs.vertcat(self._x, var)
        return var

    def params_var(
        self, name: Optional[str] = None, index: Union[None, int, Iterable[int]] = None
    ) -> tuple[
        npt.NDArray[np.floating],
        npt.NDArray[np.floating],
        npt.NDArray[np.floating],
        str,
    ]:
        """Gets the initial values, lower bounds, upper bounds and types of the full
        vector of variables or, if ``name`` is given, of that block only.

        Returns
        -------
        v0, vl, vu : array of floats
            Initial values, lower and upper bounds.
        vt : str
            One character per variable, indicating its type.

        Raises
        ------
        NotFoundError
            Raises if the given block does not exist.
        """
        if name is not None:
            data = self.lookup("var", name, index).data
            return data["v0"], data["vl"], data["vu"], data["vt"]
        entries = list(self.var)
        if not entries:
            empty = np.empty(0, dtype=float)
            return empty, empty.copy(), empty.copy(), ""
        return (
            np.concatenate([e.data["v0"] for e in entries]),
            np.concatenate([e.data["vl"] for e in entries]),
            np.concatenate([e.data["vu"] for e in entries]),
            "".join(e.data["vt"] for e in entries),
        )

    def varsets_x(self, x, varsets: VarsetLike = None):
        """Splits the full vector of variables ``x`` into the sub-vectors of the blocks
        referenced by ``varsets``.

        Parameters
        ----------
        x : array_like, casadi.SX, MX or DM
            A vector with as many entries as variables in the model, e.g., a solution or
            the symbolic :meth:`x`.
        varsets : None, str or iterable, optional
            The varset. See :func:`optmodel.sets.normalize_varsets` for the accepted
            forms.

        Returns
        -------
        sub-vector or list of sub-vectors
            ``x`` itself if the varset is empty; the sub-vector of the single block if
            the varset references one block only; otherwise, the list of sub-vectors
            in the order of ``varsets``.

        Raises
        ------
        ShapeMismatchError
            Raises if ``x`` does not have as many entries as variables in the model.
        NotFoundError
            Raises if the varset references a block that does not exist.
        """
        n = vector_length(x)
        if n != self.nx:
            raise ShapeMismatchError(
                f"Vector has {n} entries, but the model has {self.nx} variables."
            )
        varsets = normalize_varsets(varsets)
        if not varsets:
            return x
        xx = [x[first : last + 1] for first, last in resolve(self.var, varsets)]
        return xx[0] if len(xx) == 1 else xx
