import contextlib
import os
import sys
import unittest

import casadi as cs
import numpy as np
from parameterized import parameterized_class

from optmodel import OptModel

IPOPT_OPTS = {
    "expand": True,
    "print_time": False,
    "ipopt": {
        "max_iter": 500,
        "sb": "yes",
        # for debugging
        "print_level": 0,
        "print_user_options": "no",
        "print_options_documentation": "no",
    },
}


@contextlib.contextmanager
def nostdout(suppress: bool = True):
    if suppress:
        save_stdout = sys.stdout
        with open(os.devnull, "w") as f:
            sys.stdout = f
            try:
                yield
            finally:
                sys.stdout = save_stdout
    else:
        yield


def solve(om: OptModel, f) -> dict:
    problem, args = om.to_casadi(f)
    solver = cs.nlpsol("solver", "ipopt", problem, IPOPT_OPTS)
    with nostdout():
        sol = solver(**args)
    assert solver.stats()["success"]
    return sol


@parameterized_class("sym_type", [("SX",), ("MX",)])
class TestExamples(unittest.TestCase):
    def test__dc_opf(self):
        B = np.array([[2.0, -1.0, -1.0], [-1.0, 2.0, -1.0], [-1.0, -1.0, 2.0]])
        Cg = np.array([[1.0, 0.0], [0.0, 1.0], [0.0, 0.0]])
        Pd = np.array([0.0, 0.0, 1.5])
        branches = [(0, 1), (1, 2), (0, 2)]
        om = OptModel(sym_type=self.sym_type, name="case3")
        om.add_var("Va", 3, vl=[0, -np.pi, -np.pi], vu=[0, np.pi, np.pi])
        om.add_var("Pg", 2, v0=0.5, vl=0, vu=1)
        om.add_lin_constraints("Pmis", np.hstack((B, -Cg)), -Pd, -Pd, ["Va", "Pg"])
        om.init_indexed_name("lin", "Pf", (len(branches),))
        for k, (i, j) in enumerate(branches):
            A = np.zeros((1, 3))
            A[0, i], A[0, j] = 1.0, -1.0
            om.add_lin_constraints("Pf", A, -1.0, 1.0, "Va", index=k)
        f = cs.dot(cs.DM([1.0, 2.0]), om.varsets_x(om.x, "Pg"))

        sol = solve(om, f)

        Va, Pg = om.varsets_x(sol["x"].full().reshape(-1), ["Va", "Pg"])
        np.testing.assert_allclose(Pg, [1.0, 0.5], atol=1e-6)
        np.testing.assert_allclose(Va, [0.0, -1 / 6, -5 / 6], atol=1e-6)
        np.testing.assert_allclose(float(sol["f"]), 2.0, atol=1e-6)
        first, last, _ = om.lookup_offsets("lin", "Pf", 2)
        flow = sol["g"].full().reshape(-1)[first : last + 1]
        np.testing.assert_allclose(flow, [5 / 6], atol=1e-6)

    def test__nonlinear_constraints(self):
        om = OptModel(sym_type=self.sym_type)
        om.add_var("x", 1, v0=2, vl=0)
        om.add_var("y", 1, v0=0.5)
        om.add_lin_constraints("sym", [[1, -1]], 0, 0, ["x", "y"])
        om.add_nln_constraints("hyp", 1, lambda x, y: 1 - x * y, ["x", "y"])
        om.add_nln_constraints("cap", 1, lambda y: y - 5, "y", iseq=False)

        sol = solve(om, cs.sumsqr(om.x))

        np.testing.assert_allclose(sol["x"].full().reshape(-1), [1, 1], atol=1e-6)
        np.testing.assert_allclose(float(sol["f"]), 2.0, atol=1e-6)
        x_opt = sol["x"].full().reshape(-1)
        np.testing.assert_allclose(om.eval_nln_constraint(x_opt), [0, -4], atol=1e-6)


if __name__ == "__main__":
    unittest.main()
