import random
import unittest
from functools import cached_property

import casadi as cs
import numpy as np
import scipy.sparse as sp
from parameterized import parameterized

from optmodel.core.cache import invalidate_cache
from optmodel.core.data import (
    as_sparse,
    as_vector,
    readonly,
    sparse2cs,
    vector_length,
)
from optmodel.core.debug import ModelDebug, ModelDebugEntry

SPACES = set(ModelDebug._types.keys())


class Dummy:
    def __init__(self) -> None:
        self.counter1 = 0
        self.counter2 = 0

    @cached_property
    def prop1(self) -> int:
        self.counter1 += 1
        return self.counter1

    @cached_property
    def prop2(self) -> int:
        self.counter2 += 1
        return self.counter2

    @invalidate_cache(prop1, prop2)
    def clear_cache(self) -> None:
        return


class Dummy2(Dummy):
    def __init__(self) -> None:
        super().__init__()
        self.counter3 = 0

    @cached_property
    def prop3(self) -> int:
        self.counter3 += 1
        return self.counter3

    @invalidate_cache(prop3)
    def clear_cache(self) -> None:
        return super().clear_cache()


class TestCache(unittest.TestCase):
    def test_invalidate_cache__raises__with_invalid_type(self):
        with self.assertRaises(TypeError):
            invalidate_cache(5)

    def test_invalidate_cache__raises__with_no_properties(self):
        with self.assertRaises(ValueError):
            invalidate_cache()

    def test_invalidate_cache__clears_property_cache(self):
        dummy = Dummy()
        dummy.prop1
        dummy.prop1
        dummy.prop2
        self.assertEqual(dummy.counter1, 1)
        self.assertEqual(dummy.counter2, 1)
        dummy.clear_cache()
        dummy.prop1
        dummy.prop2
        self.assertEqual(dummy.counter1, 2)
        self.assertEqual(dummy.counter2, 2)

    def test_invalidate_cache__clears_property_cache_of_subclasses(self):
        dummy = Dummy2()
        dummy.prop1
        dummy.prop3
        dummy.clear_cache()
        dummy.prop1
        dummy.prop3
        self.assertEqual(dummy.counter1, 2)
        self.assertEqual(dummy.counter3, 2)

    def test_invalidate_cache__does_not_fail_on_uncached_properties(self):
        dummy = Dummy()
        dummy.clear_cache()
        self.assertEqual(dummy.counter1, 0)


class TestData(unittest.TestCase):
    @parameterized.expand(
        [
            (None, [7.0, 7.0, 7.0]),
            ([], [7.0, 7.0, 7.0]),
            (2, [2.0, 2.0, 2.0]),
            ([1, 2, 3], [1.0, 2.0, 3.0]),
            (np.array([[1], [2], [3]]), [1.0, 2.0, 3.0]),
            (cs.DM([1, 2, 3]), [1.0, 2.0, 3.0]),
        ]
    )
    def test_as_vector__converts_to_1d(self, value, expected):
        out = as_vector(value, 3, 7.0)
        self.assertEqual(out.ndim, 1)
        np.testing.assert_array_equal(out, expected)

    def test_as_vector__does_not_check_length(self):
        self.assertEqual(as_vector([1, 2], 3, 0.0).shape, (2,))

    @parameterized.expand([("numpy",), ("list",), ("scipy",), ("casadi",)])
    def test_as_sparse__converts_to_csr(self, kind):
        A = np.array([[1.0, 0.0, 2.0], [0.0, 0.0, 3.0]])
        if kind == "list":
            A_ = A.tolist()
        elif kind == "scipy":
            A_ = sp.csc_matrix(A)
        elif kind == "casadi":
            A_ = cs.DM(A)
        else:
            A_ = A
        out = as_sparse(A_)
        self.assertIsInstance(out, sp.csr_array)
        np.testing.assert_array_equal(out.toarray(), A)

    def test_as_vector__does_not_alias_input(self):
        value = np.array([1.0, 2.0, 3.0])
        out = as_vector(value, 3, 0.0)
        out[0] = 99.0
        self.assertEqual(value[0], 1.0)

    def test_as_sparse__does_not_alias_input(self):
        A = sp.csr_array(np.eye(3))
        out = as_sparse(A)
        out.data[0] = 99.0
        self.assertEqual(A.data[0], 1.0)

    def test_readonly__prevents_in_place_changes(self):
        x = np.arange(3.0)
        A = sp.csr_array(np.eye(3))
        readonly(x, A)
        with self.assertRaises(ValueError):
            x[0] = 5.0
        with self.assertRaises(ValueError):
            A.data[0] = 5.0
        with self.assertRaises(ValueError):
            A.indices[0] = 2
        np.testing.assert_array_equal(A.toarray(), np.eye(3))

    def test_as_sparse__interprets_1d_as_row(self):
        out = as_sparse([1, 2, 3])
        self.assertEqual(out.shape, (1, 3))

    def test_as_sparse__raises__with_3d_arrays(self):
        with self.assertRaises(ValueError):
            as_sparse(np.zeros((2, 2, 2)))

    def test_sparse2cs__preserves_values_and_sparsity(self):
        A = sp.csr_array(
            np.array(
                [[0.0, 1.5, 0.0, 0.0], [2.0, 0.0, 0.0, -1.0], [0.0] * 4, [0, 3, 4, 0]]
            )
        )
        out = sparse2cs(A)
        self.assertEqual(out.shape, A.shape)
        self.assertEqual(out.nnz(), A.nnz)
        np.testing.assert_allclose(out.full(), A.toarray())

    def test_sparse2cs__with_empty_matrix(self):
        out = sparse2cs(sp.csr_array((0, 5)))
        self.assertEqual(out.shape, (0, 5))
        out = sparse2cs(sp.csr_array((2, 5)))
        self.assertEqual(out.shape, (2, 5))
        self.assertEqual(out.nnz(), 0)

    def test_vector_length(self):
        self.assertEqual(vector_length([1, 2, 3]), 3)
        self.assertEqual(vector_length(np.zeros(4)), 4)
        self.assertEqual(vector_length(np.zeros((4, 1))), 4)
        self.assertEqual(vector_length(cs.SX.sym("x", 5)), 5)
        self.assertEqual(vector_length(cs.DM.zeros(2, 1)), 2)


class TestDebug(unittest.TestCase):
    def test_register__adds_correct_info(self):
        debug = ModelDebug()
        name = "a name"
        for space in SPACES:
            debug.register(space, name, (1, 2), 0, 6)
            info: tuple[range, ModelDebugEntry] = getattr(debug, f"_{space}_info")[0]
            self.assertEqual(info[0], range(6))
            self.assertEqual(info[1].name, name)
            self.assertEqual(info[1].index, (1, 2))
            self.assertEqual(info[1].count, 6)
            self.assertEqual(info[1].type, ModelDebug._types[space])
            self.assertEqual(info[1].function, "test_register__adds_correct_info")

    def test_register__raises__with_invalid_space(self):
        debug = ModelDebug()
        while True:
            space = chr(random.randint(ord("a"), ord("z")))
            if space not in SPACES:
                break
        with self.assertRaises(AttributeError):
            debug.register(space, "var1", (), 0, 2)

    def test_describe__gets_correct_blocks(self):
        debug = ModelDebug()
        for space in SPACES:
            debug.register(space, "var1", (), 0, 9)
            debug.register(space, "var2", (), 9, 1)
            self.assertEqual(debug.describe(space, 0).name, "var1")
            self.assertEqual(debug.describe(space, 9).name, "var2")
            self.assertIn("var2", str(debug.describe(space, 9)))

    def test_describe__raises__with_outofbound_index(self):
        debug = ModelDebug()
        for space in SPACES:
            debug.register(space, "var1", (), 0, 1)
            debug.register(space, "var2", (), 1, 1)
            with self.assertRaises(IndexError):
                debug.describe(space, 10_000)


if __name__ == "__main__":
    unittest.main()
