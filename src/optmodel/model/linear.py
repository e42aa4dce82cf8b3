import warnings
from collections.abc import Iterable
from functools import cached_property
from typing import Any, Literal, Optional, TypeVar, Union

import casadi as cs
import numpy as np
import numpy.typing as npt
import scipy.sparse as sp

from ..core.cache import invalidate_cache
from ..core.data import MatrixLike, as_sparse, as_vector, readonly
from ..errors import ShapeMismatchError
from ..sets.named_sets import NamedSetEntry, as_index, format_name
from ..sets.varsets import (
    VarsetLike,
    VarsetReference,
    normalize_varsets,
    resolve,
    varset_len,
)
from .variables import HasVariables

SymType = TypeVar("SymType", cs.SX, cs.MX)


def _rows(a: np.ndarray) -> Union[int, tuple[int, ...]]:
    """Number of rows of a 1D bound, or the whole shape if it is not a vector."""
    return a.shape[0] if a.ndim == 1 else a.shape


class HasLinearConstraints(HasVariables[SymType]):
    r"""Class for the creation and storage of blocks of linear constraints in a model.
    It builds on top of :class:`HasVariables`, which handles the variables.

    Linear constraints are in the form :math:`l \le A x_s \le u`, where :math:`x_s` is
    the vector made of the blocks of variables referenced by a varset, in the order
    given. This allows :math:`A` to be defined only in terms of the relevant variables,
    without the need to manually create a lot of zero columns. The full-width matrix
    over all the variables of the model is assembled in :meth:`linear_constraints`.

    Parameters
    ----------
    sym_type : {"SX", "MX"}, optional
        The CasADi symbolic variable type to use in the model, by default ``"SX"``.
    """

    def __init__(self, sym_type: Literal["SX", "MX"] = "SX") -> None:
        super().__init__(sym_type)

    @cached_property
    def linear_constraints(
        self,
    ) -> tuple[sp.csr_array, npt.NDArray[np.floating], npt.NDArray[np.floating]]:
        """Gets the full set of linear constraints :math:`l \\le A x \\le u`, where
        :math:`A` is a sparse matrix with one row per linear constraint and one column
        per variable of the model.

        Notes
        -----
        The columns of each block are scattered to the positions of the referenced
        variables. A block declared with an empty varset spans the first columns, i.e.,
        the variables that existed when the block was declared.
        """
        nrows = self.lin.N
        ncols = self.var.N
        rows, cols, vals = [], [], []
        l = np.full(nrows, -np.inf)
        u = np.full(nrows, +np.inf)
        for entry in self.lin:
            if entry.count == 0:
                continue
            data = entry.data
            Ak: sp.coo_array = data["A"].tocoo()
            colmap = self._column_map(data["varsets"], Ak.shape[1])
            rows.append(Ak.row + entry.first)
            cols.append(colmap[Ak.col])
            vals.append(Ak.data)
            l[entry.slice] = data["l"]
            u[entry.slice] = data["u"]
        if vals:
            A = sp.csr_array(
                (np.concatenate(vals), (np.concatenate(rows), np.concatenate(cols))),
                shape=(nrows, ncols),
            )
        else:
            A = sp.csr_array((nrows, ncols))
        readonly(A, l, u)
        return A, l, u

    @invalidate_cache(linear_constraints)
    def add_named_set(self, *args: Any, **kwargs: Any) -> NamedSetEntry:
        return super().add_named_set(*args, **kwargs)

    def add_lin_constraints(
        self,
        name: str,
        A: MatrixLike,
        l: Union[None, npt.ArrayLike, cs.DM] = None,
        u: Union[None, npt.ArrayLike, cs.DM] = None,
        varsets: VarsetLike = None,
        index: Union[None, int, Iterable[int]] = None,
    ) -> NamedSetEntry:
        """Adds a block of linear constraints :math:`l \\le A x_s \\le u` to the model.

        Parameters
        ----------
        name : str
            Name of the block. Must not be already in use, unless it was declared as an
            indexed name via :meth:`init_indexed_name`, in which case ``index`` must be
            provided.
        A : array_like, scipy sparse matrix or casadi.DM
            The coefficient matrix, with one row per constraint and one column per
            variable in :math:`x_s`. A 1D array is interpreted as a single row.
        l, u : array_like, optional
            Lower and upper bounds. If ``None`` or empty, they default to ``-inf`` and
            ``+inf``, respectively.
        varsets : None, str or iterable, optional
            The blocks of variables making up :math:`x_s`, in order. If ``None`` or
            empty, :math:`x_s` is the full vector of variables.
        index : int or iterable of ints, optional
            Index of the block in its indexed family.

        Returns
        -------
        NamedSetEntry
            The entry of the new block in the ``"lin"`` numbering space.

        Raises
        ------
        ShapeMismatchError
            Raises if ``A``, ``l`` and ``u`` do not have the same number of rows, or if
            the number of columns of ``A`` does not match the number of variables
            referenced by ``varsets``.
        NotFoundError
            Raises if ``varsets`` references a block of variables that does not exist.
        DuplicateNameError, DuplicateIndexError, UnknownFamilyError
            Raises if the name or index are invalid (see :meth:`add_named_set`).
        """
        index = as_index(index)
        A = as_sparse(A)
        N, M = A.shape
        l = as_vector(l, N, -np.inf)
        u = as_vector(u, N, +np.inf)
        if l.shape != (N,) or u.shape != (N,):
            raise ShapeMismatchError(
                "Sizes of A, l and u must match; got "
                f"{N}, {_rows(l)} and {_rows(u)} rows, respectively."
            )

        varsets = normalize_varsets(varsets)
        nv = varset_len(self.var, varsets)
        if M != nv:
            raise ShapeMismatchError(
                "Number of columns of A does not match number of variables; "
                f"A is {N} x {M}, nv = {nv}."
            )
        readonly(A, l, u)

        entry = self.add_named_set(
            "lin", name, N, index, A=A, l=l, u=u, varsets=varsets
        )
        if np.any(l > u):
            warnings.warn(
                f"Linear constraint '{format_name(name, index)}' has lower bounds "
                "larger than upper bounds.",
                RuntimeWarning,
                stacklevel=2,
            )
        return entry

    def params_lin_constraint(
        self, name: Optional[str] = None, index: Union[None, int, Iterable[int]] = None
    ) -> tuple[
        sp.csr_array,
        npt.NDArray[np.floating],
        npt.NDArray[np.floating],
        tuple[VarsetReference, ...],
    ]:
        """Gets the linear constraint parameters :math:`A, l, u` and the varset of the
        given block, as they were declared, or, if ``name`` is not given, the full-width
        ones (see :meth:`linear_constraints`) and an empty varset.

        Raises
        ------
        NotFoundError
            Raises if the given block does not exist.
        """
        if name is None:
            A, l, u = self.linear_constraints
            return A, l, u, ()
        data = self.lookup("lin", name, index).data
        return data["A"], data["l"], data["u"], data["varsets"]

    def _column_map(
        self, varsets: tuple[VarsetReference, ...], width: int
    ) -> npt.NDArray[np.int_]:
        """Maps the local columns of a block to the global columns of the variables."""
        if not varsets:
            return np.arange(width)
        return np.concatenate(
            [
                np.arange(first, last + 1)
                for first, last in resolve(self.var, varsets)
            ]
        )
