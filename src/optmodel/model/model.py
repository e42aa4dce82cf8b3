from collections.abc import Iterable, Iterator
from itertools import count
from typing import Any, Callable, ClassVar, Literal, Optional, TypeVar, Union

import casadi as cs
import numpy as np
import numpy.typing as npt

from ..core.data import MatrixLike, sparse2cs
from ..core.debug import ModelDebug
from ..sets.named_sets import NamedSetEntry, as_index
from ..sets.varsets import VarsetLike
from .base import SPACES
from .nonlinear import HasNonlinearConstraints

SymType = TypeVar("SymType", cs.SX, cs.MX)

_SPACE_TITLES = {
    "var": "VARIABLES",
    "lin": "LINEAR CONSTRAINTS",
    "nln": "NONLINEAR CONSTRAINTS",
}


class OptModel(HasNonlinearConstraints[SymType]):
    r"""The optimization model class keeps track of named blocks of variables, linear
    constraints and nonlinear constraints, each allocated contiguously in its own flat
    numbering space, and assembles them into the full vectors and matrices of the
    optimization problem. It does not solve the problem, but hands it over to a CasADi
    solver via :meth:`to_casadi`.

    Parameters
    ----------
    sym_type : {"SX", "MX"}, optional
        The CasADi symbolic variable type to use in the model, by default ``"SX"``.
    name : str, optional
        Name of the model. If `None`, it is automatically assigned.
    debug : bool, optional
        If ``True``, the model logs in the :meth:`debug` property information regarding
        where the blocks of variables and constraints were declared. By default,
        ``False``.

    Raises
    ------
    AttributeError
        Raises if the specified CasADi's symbolic type is neither ``"SX"`` nor ``"MX"``.
    """

    __ids: ClassVar[Iterator[int]] = count(0)

    def __init__(
        self,
        sym_type: Literal["SX", "MX"] = "SX",
        name: Optional[str] = None,
        debug: bool = False,
    ) -> None:
        super().__init__(sym_type)
        id = next(self.__ids)
        self.name = f"{self.__class__.__name__}{id}" if name is None else name
        self.id = id
        self._debug = ModelDebug() if debug else None
        self._user_data: dict[str, Any] = {}

    @property
    def sym_type(self) -> type[SymType]:
        """Gets the CasADi symbolic type used in this model."""
        return self._sym_type

    @property
    def debug(self) -> Optional[ModelDebug]:
        """Gets debug information on the model."""
        return self._debug

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
        index = as_index(index)
        out = super().add_var(name, count, v0, vl, vu, vt, index)
        self._register("var", name, index)
        return out

    def add_lin_constraints(
        self,
        name: str,
        A: MatrixLike,
        l: Union[None, npt.ArrayLike, cs.DM] = None,
        u: Union[None, npt.ArrayLike, cs.DM] = None,
        varsets: VarsetLike = None,
        index: Union[None, int, Iterable[int]] = None,
    ) -> NamedSetEntry:
        index = as_index(index)
        out = super().add_lin_constraints(name, A, l, u, varsets, index)
        self._register("lin", name, index)
        return out

    def add_nln_constraints(
        self,
        name: str,
        N: int,
        fcn: Callable[..., Union[SymType, cs.DM]],
        varsets: VarsetLike = None,
        iseq: bool = True,
        index: Union[None, int, Iterable[int]] = None,
    ) -> SymType:
        index = as_index(index)
        out = super().add_nln_constraints(name, N, fcn, varsets, iseq, index)
        self._register("nln", name, index)
        return out

    def userdata(self, name: str, val: Any = None) -> Any:
        """Saves (if ``val`` is given) or retrieves arbitrary user data, e.g., indexing
        information needed to unpack the solution of the model. Retrieving a name that
        was never saved returns ``None``."""
        if val is not None:
            self._user_data[name] = val
            return val
        return self._user_data.get(name)

    def to_casadi(
        self, f: Optional[SymType] = None
    ) -> tuple[dict[str, SymType], dict[str, npt.NDArray[np.floating]]]:
        r"""Freezes the model and converts it to the inputs of a CasADi solver, e.g.,
        :func:`casadi.nlpsol`. The constraints are stacked as

        .. math:: g(x) = \begin{bmatrix} A x \\ g_{nln}(x) \end{bmatrix},

        i.e., first the linear constraints (see :meth:`linear_constraints`) and then the
        nonlinear ones (see :meth:`nonlinear_constraints`).

        Parameters
        ----------
        f : casadi.SX or MX, optional
            The scalar objective to be minimized. If ``None``, the objective is zero.

        Returns
        -------
        problem : dict
            The problem dictionary with keys ``"x"``, ``"f"`` and ``"g"``.
        args : dict
            The numerical arguments of the solver with keys ``"x0"``, ``"lbx"``,
            ``"ubx"``, ``"lbg"`` and ``"ubg"``.

        Raises
        ------
        ValueError
            Raises if the objective is not scalar.
        """
        if f is None:
            f = self._sym_type(1, 1)
        elif not f.is_scalar():
            raise ValueError("Objective must be scalar.")
        self.freeze()

        A, l, u = self.linear_constraints
        g_nln, lb_nln, ub_nln = self.nonlinear_constraints
        v0, vl, vu, _ = self.params_var()
        g = cs.vertcat(cs.mtimes(sparse2cs(A), self._x), g_nln)
        problem = {"x": self._x, "f": f, "g": g}
        args = {
            "x0": v0,
            "lbx": vl,
            "ubx": vu,
            "lbg": np.concatenate((l, lb_nln)),
            "ubg": np.concatenate((u, ub_nln)),
        }
        return problem, args

    def describe(self) -> str:
        """Returns a table of the blocks declared in each numbering space, with their
        first and last (inclusive) positions and their sizes."""
        lines = []
        for space in SPACES:
            s = self.space(space)
            title = _SPACE_TITLES[space]
            if not s.NS:
                lines.append(f"{title}  :  <none>")
                continue
            lines.append(f"{title:<22} {'name':>12} {'first':>8} {'last':>8} {'N':>8}")
            underline = "=" * len(title)
            lines.append(
                f"{underline:<22} {'-' * 12} {'-' * 8} {'-' * 8} {'-' * 8}"
            )
            for k, entry in enumerate(s):
                lines.append(
                    f"{k:>21}: {entry.label:>12} {entry.first:>8} {entry.last:>8} "
                    f"{entry.count:>8}"
                )
            totals = f"{space}.NS = {s.NS}", f"{space}.N = {s.N}"
            lines.append(f"{totals[0]:>22} {totals[1]:>39}")
        return "\n".join(lines)

    def _register(self, space: str, name: str, index: tuple[int, ...]) -> None:
        if self._debug is not None:
            entry = self.space(space).lookup(name, index)
            self._debug.register(space, name, index, entry.first, entry.count)

    def __str__(self) -> str:
        """Returns the model name and a short description."""
        msg = "frozen" if self._frozen else "not frozen"
        return (
            f"{type(self).__name__} {{\n"
            f"  name: {self.name}\n"
            f"  #variables: {self.var.NS} (nx={self.var.N})\n"
            f"  #linear constraints: {self.lin.NS} (nlin={self.lin.N})\n"
            f"  #nonlinear constraints: {self.nln.NS} (nnln={self.nln.N})\n"
            f"  Model {msg}.\n}}"
        )

    def __repr__(self) -> str:
        """Returns the string representation of the model."""
        return f"{type(self).__name__}: {self.name}"
