"""A collection of functions for converting user-provided data (bounds, initial values,
coefficient matrices) to the canonical numpy/scipy forms stored in the model, and to
CasADi matrices when handing the model to a solver."""

from typing import Union

import casadi as cs
import numpy as np
import numpy.typing as npt
import scipy.sparse as sp

MatrixLike = Union[npt.ArrayLike, sp.sparray, sp.spmatrix, cs.DM]


def as_vector(
    value: Union[None, npt.ArrayLike, cs.DM], n: int, default: float
) -> npt.NDArray[np.floating]:
    """Converts ``value`` to a 1D float array.

    Parameters
    ----------
    value : array_like, casadi.DM or None
        The data to be converted. If ``None`` or empty, a vector of ``n`` entries equal
        to ``default`` is returned. Scalars are broadcast to ``n`` entries; row or
        column vectors are flattened.
    n : int
        The expected number of entries.
    default : float
        The default value of the entries.

    Returns
    -------
    array of floats
        The data as a new 1D array, never a view of ``value``. Its length is not
        checked against ``n`` if ``value`` is not a scalar; this is left to the
        caller.
    """
    if value is None:
        return np.full(n, default, dtype=float)
    if isinstance(value, cs.DM):
        value = value.full()
    arr = np.array(value, dtype=float)
    if arr.size == 0:
        return np.full(n, default, dtype=float)
    if arr.ndim == 0:
        return np.full(n, arr.item(), dtype=float)
    if arr.ndim == 2 and 1 in arr.shape:
        arr = arr.reshape(-1)
    return arr


def as_sparse(A: MatrixLike) -> sp.csr_array:
    """Converts the matrix ``A`` to a float CSR sparse array. A 1D ``A`` is interpreted
    as a single row.

    Raises
    ------
    ValueError
        Raises if ``A`` has more than 2 dimensions.
    """
    if isinstance(A, cs.DM):
        out = sp.csr_array(A.sparse(), dtype=float)
    elif sp.issparse(A):
        out = sp.csr_array(A, dtype=float, copy=True)
    else:
        arr = np.asarray(A, dtype=float)
        if arr.ndim > 2:
            raise ValueError("Can only convert 1D and 2D arrays to sparse matrices.")
        out = sp.csr_array(np.atleast_2d(arr))
    out.sum_duplicates()
    return out


def readonly(*arrays: Union[np.ndarray, sp.sparray]) -> None:
    """Marks the given numpy arrays, or the buffers of the given sparse arrays, as
    read-only, so that data stored in a model cannot be modified in place."""
    for a in arrays:
        if sp.issparse(a):
            for buffer in (a.data, a.indices, a.indptr):
                buffer.flags.writeable = False
        else:
            a.flags.writeable = False


def sparse2cs(A: Union[sp.sparray, sp.spmatrix]) -> cs.DM:
    """Converts the scipy sparse matrix ``A`` to a sparse :class:`casadi.DM`, preserving
    its sparsity pattern."""
    coo = sp.coo_array(A)
    coo.sum_duplicates()
    nrow, ncol = coo.shape
    if coo.nnz == 0:
        return cs.DM(nrow, ncol)
    return cs.DM.triplet(
        coo.row.tolist(), coo.col.tolist(), coo.data.tolist(), nrow, ncol
    )


def vector_length(x) -> int:
    """Returns the number of entries of the vector ``x``, either a sequence, a numpy
    array or a CasADi column vector."""
    if isinstance(x, (cs.SX, cs.MX, cs.DM)):
        return x.numel()
    if isinstance(x, np.ndarray):
        return x.shape[0]
    return len(x)
