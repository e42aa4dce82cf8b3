import unittest
from itertools import product

import numpy as np
from parameterized import parameterized

from optmodel.errors import (
    DuplicateIndexError,
    DuplicateNameError,
    NotFoundError,
    UnknownFamilyError,
)
from optmodel.sets import (
    NumberingSpace,
    VarsetReference,
    normalize_varsets,
    resolve,
    varset_len,
)
from optmodel.sets.named_sets import as_index


class TestNumberingSpace(unittest.TestCase):
    def test_add__allocates_contiguous_ranges(self):
        space = NumberingSpace("var")
        pg = space.add("Pg", (), 3)
        qg = space.add("Qg", (), 2)
        self.assertEqual((pg.first, pg.last, pg.count), (0, 2, 3))
        self.assertEqual((qg.first, qg.last, qg.count), (3, 4, 2))
        self.assertEqual(space.N, 5)
        self.assertEqual(space.NS, 2)
        self.assertEqual(pg.slice, slice(0, 3))

    def test_add__partitions_the_space(self):
        np_random = np.random.default_rng(42)
        space = NumberingSpace("lin")
        counts = np_random.integers(0, 10, 50)
        for i, n in enumerate(counts):
            space.add(f"c{i}", (), n)
        covered = np.zeros(space.N, dtype=int)
        for entry in space:
            self.assertEqual(entry.last - entry.first + 1, entry.count)
            covered[entry.slice] += 1
        self.assertEqual(space.N, counts.sum())
        np.testing.assert_array_equal(covered, 1)

    def test_add__stores_payload(self):
        space = NumberingSpace("var")
        entry = space.add("x", (), 2, v0=[1, 2])
        self.assertEqual(entry.data["v0"], [1, 2])
        with self.assertRaises(TypeError):
            entry.data["v0"] = None

    def test_add__raises__with_duplicate_simple_name(self):
        space = NumberingSpace("var")
        space.add("x", (), 2)
        with self.assertRaises(DuplicateNameError):
            space.add("x", (), 2)
        self.assertEqual(space.N, 2)

    def test_add__raises__with_negative_count(self):
        space = NumberingSpace("var")
        with self.assertRaises(ValueError):
            space.add("x", (), -1)

    def test_add__raises__with_index_of_undeclared_family(self):
        space = NumberingSpace("lin")
        with self.assertRaises(UnknownFamilyError):
            space.add("R", (0, 0), 2)
        self.assertEqual(space.N, 0)
        self.assertEqual(space.NS, 0)

    def test_add__raises__without_index_for_family(self):
        space = NumberingSpace("lin")
        space.init_indexed_name("R", (2, 3))
        with self.assertRaises(UnknownFamilyError):
            space.add("R", (), 2)

    @parameterized.expand([((2, 0),), ((0, 3),), ((-1, 0),), ((0,),), ((0, 0, 0),)])
    def test_add__raises__with_index_out_of_family_shape(self, index):
        space = NumberingSpace("lin")
        space.init_indexed_name("R", (2, 3))
        with self.assertRaises(UnknownFamilyError):
            space.add("R", index, 1)
        self.assertEqual(space.N, 0)

    def test_add__raises__with_duplicate_index(self):
        space = NumberingSpace("lin")
        space.init_indexed_name("R", (2, 3))
        space.add("R", (1, 2), 4)
        with self.assertRaises(DuplicateIndexError):
            space.add("R", (1, 2), 4)
        self.assertEqual(space.N, 4)

    def test_add__members_of_family_in_any_order(self):
        space = NumberingSpace("lin")
        space.init_indexed_name("R", (2, 3))
        indices = list(product(range(2), range(3)))[::-1]
        for k, index in enumerate(indices):
            space.add("R", index, k + 1)
            self.assertEqual(space.N, sum(range(1, k + 2)))
        ranges = sorted((e.first, e.last) for e in space)
        for (_, last), (first, _) in zip(ranges, ranges[1:]):
            self.assertEqual(last + 1, first)
        self.assertEqual(space.lookup("R", (1, 2)).first, 0)
        self.assertEqual(space.dims("R"), (2, 3))

    def test_add__accepts_numpy_integer_indices(self):
        space = NumberingSpace("var")
        space.init_indexed_name("y", (3,))
        for i in np.arange(3):
            space.add("y", as_index(i), 1)
        entry = space.lookup("y", as_index(np.int64(2)))
        self.assertEqual(entry.index, (2,))
        self.assertIs(type(entry.index[0]), int)
        self.assertEqual(as_index(np.array([1, 0])), (1, 0))

    def test_init_indexed_name__raises__with_duplicate_name(self):
        space = NumberingSpace("var")
        space.add("x", (), 1)
        space.init_indexed_name("y", (2,))
        with self.assertRaises(DuplicateNameError):
            space.init_indexed_name("x", (2,))
        with self.assertRaises(DuplicateNameError):
            space.init_indexed_name("y", (3,))

    @parameterized.expand([((),), ((0, 2),), ((2, -1),)])
    def test_init_indexed_name__raises__with_invalid_dims(self, dims):
        space = NumberingSpace("var")
        with self.assertRaises(ValueError):
            space.init_indexed_name("y", dims)

    def test_lookup__raises__if_not_found(self):
        space = NumberingSpace("var")
        space.init_indexed_name("y", (2,))
        space.add("y", (0,), 1)
        with self.assertRaises(NotFoundError):
            space.lookup("x")
        with self.assertRaises(NotFoundError):
            space.lookup("y", (1,))
        with self.assertRaises(LookupError):
            space.dims("x")


class TestVarsets(unittest.TestCase):
    def setUp(self) -> None:
        self.space = NumberingSpace("var")
        self.space.add("Pg", (), 3)
        self.space.add("Qg", (), 2)
        self.space.init_indexed_name("V", (2,))
        self.space.add("V", (1,), 4)
        self.space.add("V", (0,), 1)

    def test_normalize_varsets__accepts_shorthand_forms(self):
        expected = (
            VarsetReference("Pg"),
            VarsetReference("V", (1,)),
            VarsetReference("V", (0,)),
            VarsetReference("Qg"),
        )
        varsets = normalize_varsets(
            ["Pg", ("V", (1,)), {"name": "V", "idx": [0]}, VarsetReference("Qg")]
        )
        self.assertEqual(varsets, expected)
        self.assertEqual(normalize_varsets("Pg"), (VarsetReference("Pg"),))
        self.assertEqual(normalize_varsets(None), ())
        self.assertEqual(normalize_varsets([]), ())

    def test_normalize_varsets__accepts_single_indexed_tuple(self):
        self.assertEqual(
            normalize_varsets(("V", (1,))), (VarsetReference("V", (1,)),)
        )
        self.assertEqual(normalize_varsets(("V", 0)), (VarsetReference("V", (0,)),))
        self.assertEqual(
            normalize_varsets({"name": "V", "idx": 1}), (VarsetReference("V", (1,)),)
        )
        self.assertEqual(
            normalize_varsets(("Pg", "Qg")),
            (VarsetReference("Pg"), VarsetReference("Qg")),
        )

    def test_normalize_varsets__raises__with_invalid_reference(self):
        with self.assertRaises(TypeError):
            normalize_varsets([5])

    def test_resolve__preserves_given_order(self):
        varsets = normalize_varsets(["Qg", "Pg", ("V", 0), ("V", 1)])
        self.assertListEqual(
            resolve(self.space, varsets), [(3, 4), (0, 2), (9, 9), (5, 8)]
        )
        self.assertEqual(varset_len(self.space, varsets), 10)

    def test_resolve__with_empty_varsets_covers_whole_space(self):
        self.assertListEqual(resolve(self.space, ()), [(0, 9)])
        self.assertEqual(varset_len(self.space, ()), 10)

    def test_resolve__raises__with_unknown_reference(self):
        with self.assertRaises(NotFoundError):
            resolve(self.space, normalize_varsets(["Pg", "Vm"]))
        with self.assertRaises(NotFoundError):
            resolve(self.space, normalize_varsets([("V", 3)]))


if __name__ == "__main__":
    unittest.main()
