r"""
A small DC optimal power flow
=============================

This example shows how to lay out an optimization problem in blocks with
:class:`optmodel.OptModel`, and hand it over to a CasADi solver.

We consider a 3-bus network, with a generator at bus 0, a generator at bus 1, and a
load of :math:`P_d = 1.5` at bus 2. All three branches have unitary susceptance. In the
DC approximation, the power injected at each bus is :math:`B \theta`, where
:math:`\theta` are the voltage angles and :math:`B` is the bus susceptance matrix, so
the power balance reads

.. math:: B \theta - C_g P_g = -P_d,

where :math:`C_g` maps generators to buses. The cheapest dispatch minimizes
:math:`c^\top P_g` subject to the power balance, the generator limits and the branch
flow limits.
"""

# %%
# Declaring the blocks
# --------------------
# Variables and constraints are added in named blocks. Note how the coefficient
# matrices only span the variables they refer to, i.e., the varset.

import casadi as cs
import numpy as np

from optmodel import OptModel

B = np.array([[2.0, -1.0, -1.0], [-1.0, 2.0, -1.0], [-1.0, -1.0, 2.0]])
Cg = np.array([[1.0, 0.0], [0.0, 1.0], [0.0, 0.0]])
Pd = np.array([0.0, 0.0, 1.5])
branches = [(0, 1), (1, 2), (0, 2)]
c = np.array([1.0, 2.0])

om = OptModel(name="case3", debug=True)
om.add_var("Va", 3, vl=[0, -np.pi, -np.pi], vu=[0, np.pi, np.pi])
om.add_var("Pg", 2, v0=0.5, vl=0, vu=1)
om.add_lin_constraints("Pmis", np.hstack((B, -Cg)), -Pd, -Pd, ["Va", "Pg"])

# %%
# Branch flows are added as an indexed family, one member per branch.

om.init_indexed_name("lin", "Pf", (len(branches),))
for k, (i, j) in enumerate(branches):
    A = np.zeros((1, 3))
    A[0, i], A[0, j] = 1.0, -1.0
    om.add_lin_constraints("Pf", A, -1.0, 1.0, "Va", index=k)
print(om.describe())

# %%
# Debug information tells where each row was declared, e.g., the last one.

print(om.debug.describe("lin", om.lin.N - 1))

# %%
# Solving the problem
# -------------------
# The model is converted to the inputs of :func:`casadi.nlpsol`, and the solution is
# split back into its blocks via :meth:`optmodel.OptModel.varsets_x`.

f = cs.dot(cs.DM(c), om.varsets_x(om.x, "Pg"))
problem, args = om.to_casadi(f)
solver = cs.nlpsol("solver", "ipopt", problem, {"print_time": False})
sol = solver(**args)
Va, Pg = om.varsets_x(sol["x"].full().reshape(-1), ["Va", "Pg"])
print(f"Pg = {Pg}, Va = {Va}, cost = {float(sol['f'])}")
