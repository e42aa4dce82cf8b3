from collections.abc import Iterable
from functools import cached_property
from typing import Any, Callable, Literal, Optional, TypeVar, Union

import casadi as cs
import numpy as np
import numpy.typing as npt

from ..core.cache import invalidate_cache
from ..core.data import readonly, vector_length
from ..errors import ShapeMismatchError
from ..sets.named_sets import NamedSetEntry, as_index, format_name
from ..sets.varsets import VarsetLike, VarsetReference, normalize_varsets, resolve
from .linear import HasLinearConstraints

SymType = TypeVar("SymType", cs.SX, cs.MX)


class HasNonlinearConstraints(HasLinearConstraints[SymType]):
    r"""Class for the creation and storage of blocks of nonlinear constraints in a
    model. It builds on top of :class:`HasLinearConstraints`, which handles variables
    and linear constraints.

    Nonlinear constraints are symbolic expressions of the blocks of variables referenced
    by a varset, and are either equalities :math:`g(x_s) = 0` or inequalities
    :math:`h(x_s) \le 0`. They are numbered in their own ``"nln"`` space.

    Parameters
    ----------
    sym_type : {"SX", "MX"}, optional
        The CasADi symbolic variable type to use in the model, by default ``"SX"``.
    """

    def __init__(self, sym_type: Literal["SX", "MX"] = "SX") -> None:
        super().__init__(sym_type)
        self._g_nln = self._sym_type(0, 1)

    @cached_property
    def nonlinear_constraints(
        self,
    ) -> tuple[SymType, npt.NDArray[np.floating], npt.NDArray[np.floating]]:
        """Gets the full set of nonlinear constraints, i.e., the vector of expressions
        and its lower and upper bounds (``0`` and ``0`` for equalities, ``-inf`` and
        ``0`` for inequalities)."""
        lb = np.zeros(self.nln.N)
        for entry in self.nln:
            if not entry.data["iseq"]:
                lb[entry.slice] = -np.inf
        ub = np.zeros(self.nln.N)
        readonly(lb, ub)
        return self._g_nln, lb, ub

    @invalidate_cache(nonlinear_constraints)
    def add_named_set(self, *args: Any, **kwargs: Any) -> NamedSetEntry:
        return super().add_named_set(*args, **kwargs)

    def add_nln_constraints(
        self,
        name: str,
        N: int,
        fcn: Callable[..., Union[SymType, cs.DM]],
        varsets: VarsetLike = None,
        iseq: bool = True,
        index: Union[None, int, Iterable[int]] = None,
    ) -> SymType:
        """Adds a block of nonlinear constraints to the model.

        Parameters
        ----------
        name : str
            Name of the block. Must not be already in use, unless it was declared as an
            indexed name via :meth:`init_indexed_name`, in which case ``index`` must be
            provided.
        N : int
            Number of constraints in the block.
        fcn : callable
            Function returning the constraint expressions. It is called with one
            argument per block referenced in ``varsets`` (the symbolic sub-vectors, in
            order), or with the full symbolic vector of variables if ``varsets`` is
            empty.
        varsets : None, str or iterable, optional
            The blocks of variables the constraints depend on.
        iseq : bool, optional
            If ``True``, the constraints are equalities :math:`g = 0`; otherwise,
            inequalities :math:`h \\le 0`. By default, equalities.
        index : int or iterable of ints, optional
            Index of the block in its indexed family.

        Returns
        -------
        casadi.SX or MX
            The constraint expressions, as a column vector.

        Raises
        ------
        TypeError
            Raises if ``fcn`` does not return a symbolic expression.
        ShapeMismatchError
            Raises if the expression does not have ``N`` entries.
        NotFoundError
            Raises if ``varsets`` references a block of variables that does not exist.
        DuplicateNameError, DuplicateIndexError, UnknownFamilyError
            Raises if the name or index are invalid (see :meth:`add_named_set`).
        """
        index = as_index(index)
        varsets = normalize_varsets(varsets)
        if varsets:
            args = [self._x[f : l + 1] for f, l in resolve(self.var, varsets)]
        else:
            args = [self._x]
        expr = fcn(*args)
        if not isinstance(expr, (cs.SX, cs.MX)):
            raise TypeError("Constraint must be symbolic.")
        expr = cs.vec(expr)
        if expr.numel() != N:
            raise ShapeMismatchError(
                f"Nonlinear constraint '{format_name(name, index)}' has "
                f"{expr.numel()} entries; expected {N}."
            )

        self.add_named_set(
            "nln", name, N, index, expr=expr, iseq=iseq, varsets=varsets
        )
        self._g_nln = cs.vertcat(self._g_nln, expr)
        return expr

    def params_nln_constraint(
        self, name: Optional[str] = None, index: Union[None, int, Iterable[int]] = None
    ) -> tuple[
        SymType,
        npt.NDArray[np.floating],
        npt.NDArray[np.floating],
        tuple[VarsetReference, ...],
    ]:
        """Gets the expressions, lower bounds, upper bounds and varset of the given
        block of nonlinear constraints or, if ``name`` is not given, of all of them
        (with an empty varset).

        Raises
        ------
        NotFoundError
            Raises if the given block does not exist.
        """
        g, lb, ub = self.nonlinear_constraints
        if name is None:
            return g, lb, ub, ()
        entry = self.lookup("nln", name, index)
        return (
            entry.data["expr"],
            lb[entry.slice],
            ub[entry.slice],
            entry.data["varsets"],
        )

    def eval_nln_constraint(
        self,
        x: Union[npt.ArrayLike, cs.DM],
        name: Optional[str] = None,
        index: Union[None, int, Iterable[int]] = None,
    ) -> npt.NDArray[np.floating]:
        """Evaluates numerically the given block of nonlinear constraints (or all of
        them, if ``name`` is not given) at the full vector of variables ``x``.

        Raises
        ------
        ShapeMismatchError
            Raises if ``x`` does not have as many entries as variables in the model.
        NotFoundError
            Raises if the given block does not exist.
        """
        n = vector_length(x)
        if n != self.nx:
            raise ShapeMismatchError(
                f"Vector has {n} entries, but the model has {self.nx} variables."
            )
        g = self.params_nln_constraint(name, index)[0]
        F = cs.Function("g", (self._x,), (g,))
        x = np.asarray(x.full() if isinstance(x, cs.DM) else x, dtype=float)
        return F(x.reshape(-1)).full().reshape(-1)
