import unittest
import numpy as np
from cecvm.identification.geometry import Vector3D, Site, Sublattice, Cluster
from cecvm.identification.symmetry import SymmetryOperation, Orbit
from cecvm.identification.symmetry import generate_orbit, is_translated
from cecvm.identification.symmetry import transform_to_reference
from cecvm.identification.cluster_enumeration import subclusters
from cecvm.identification.cluster_enumeration import decorated_subclusters
from cecvm.identification.cluster_enumeration import basis_symbols
from cecvm.errors import InvalidInputError


def bcc_tetrahedron(decoration=None):
    return Cluster.from_positions(
        [[[0, 0, 0], [1, 0, 0], [0.5, 0.5, 0.5], [0.5, -0.5, 0.5]]],
        decoration=decoration)


def pair(p1, p2, decoration=1):
    return Cluster([Sublattice([Site(p1, decoration), Site(p2, decoration)])])


class TestVector3D(unittest.TestCase):
    def test_tolerant_equality(self):
        v1 = Vector3D(0.5, 0.5, 0.5)
        v2 = Vector3D(0.5 + 1E-12, 0.5, 0.5 - 1E-12)
        self.assertEqual(v1, v2)
        self.assertEqual(hash(v1), hash(v2))
        self.assertNotEqual(v1, Vector3D(0.5, 0.5, 0.5001))

    def test_equal_vectors_hash_equal_at_rounding_boundary(self):
        base = 0.4999995
        for delta in [1E-11, 1E-12, 3E-11]:
            v1 = Vector3D(base - delta, 0.0, 0.0)
            v2 = Vector3D(base + delta, 0.0, 0.0)
            if v1 == v2:
                self.assertEqual(hash(v1), hash(v2))
            self.assertEqual(v1 == v2, v1.rounded() == v2.rounded())
            self.assertEqual(len({v1, v2}), 1 if v1 == v2 else 2)

    def test_transform(self):
        rot = [[0, -1, 0], [1, 0, 0], [0, 0, 1]]
        v = Vector3D(1, 0, 0).transform(rot, [0.5, 0.5, 0.5])
        self.assertEqual(v, Vector3D(0.5, 1.5, 0.5))

    def test_wrong_length(self):
        with self.assertRaises(ValueError):
            Vector3D.from_array([1, 2])


class TestCanonicalKey(unittest.TestCase):
    def test_translation_invariant(self):
        c1 = pair([0, 0, 0], [0.5, 0.5, 0.5])
        c2 = pair([3, -2, 1], [3.5, -1.5, 1.5])
        self.assertEqual(c1.canonical_key(), c2.canonical_key())
        self.assertTrue(is_translated(c1, c2))

    def test_non_integer_shift_differs(self):
        c1 = pair([0, 0, 0], [0.5, 0.5, 0.5])
        c2 = pair([0.5, 0.5, 0.5], [1, 1, 1])
        self.assertFalse(is_translated(c1, c2))

    def test_site_order_irrelevant(self):
        c1 = pair([0, 0, 0], [1, 0, 0])
        c2 = pair([1, 0, 0], [0, 0, 0])
        self.assertEqual(c1, c2)

    def test_decoration_matters(self):
        c1 = Cluster([[Site([0, 0, 0], 1), Site([1, 0, 0], 2)]])
        c2 = Cluster([[Site([0, 0, 0], 2), Site([1, 0, 0], 1)]])
        c3 = Cluster([[Site([1, 0, 0], 2), Site([2, 0, 0], 1)]])
        self.assertNotEqual(c1.canonical_key(), c2.canonical_key())
        self.assertEqual(c2.canonical_key(), c3.canonical_key())

    def test_sublattice_matters(self):
        c1 = Cluster([[Site([0, 0, 0])], [Site([0.5, 0.5, 0.5])]])
        c2 = Cluster([[Site([0.5, 0.5, 0.5])], [Site([0, 0, 0])]])
        self.assertNotEqual(c1, c2)
        self.assertEqual(c1.flattened_key(), c2.flattened_key())

    def test_empty_cluster(self):
        empty = Cluster([Sublattice()])
        self.assertTrue(empty.is_empty)
        self.assertEqual(empty, Cluster([[]]))


class TestSymmetry(unittest.TestCase):
    def test_operation_from_matrix(self):
        op = SymmetryOperation.from_matrix([[1, 0, 0, 0.5], [0, 1, 0, 0.5],
                                            [0, 0, 1, 0.5]])
        image = op.apply(pair([0, 0, 0], [1, 0, 0]))
        self.assertEqual(image, pair([0.5, 0.5, 0.5], [1.5, 0.5, 0.5]))

    def test_invalid_operation(self):
        with self.assertRaises(InvalidInputError):
            SymmetryOperation.from_matrix([[1, 0, 0], [0, 1, 0]])
        with self.assertRaises(InvalidInputError):
            SymmetryOperation(np.identity(2))

    def test_orbit_removes_translations(self):
        clusters = [pair([0, 0, 0], [1, 0, 0]), pair([2, 0, 0], [3, 0, 0]),
                    pair([0, 0, 0], [0, 1, 0])]
        orbit = Orbit(clusters)
        self.assertEqual(len(orbit), 2)
        self.assertIn(pair([5, 5, 5], [5, 6, 5]), orbit)
        self.assertNotIn(pair([0, 0, 0], [0, 0, 1]), orbit)

    def test_orbit_of_cubic_pair(self):
        # The 4-fold rotations and the inversion generate all three
        # directions of a nearest neighbour pair on a simple cubic lattice
        rot_z = [[0, -1, 0], [1, 0, 0], [0, 0, 1]]
        rot_x = [[1, 0, 0], [0, 0, -1], [0, 1, 0]]
        ops = [SymmetryOperation.identity(), SymmetryOperation(rot_z),
               SymmetryOperation(rot_x), SymmetryOperation(-np.identity(3))]
        orbit = generate_orbit(pair([0, 0, 0], [1, 0, 0]), ops)
        self.assertEqual(len(orbit), 2)
        orbit = generate_orbit(pair([0, 0, 0], [0, 1, 0]), ops)
        self.assertEqual(len(orbit), 3)

    def test_transform_to_reference(self):
        rot = 0.5 * np.identity(3)
        transformed = transform_to_reference(
            [pair([0, 0, 0], [2, 0, 0])], rot, [0, 0, 0])
        self.assertEqual(transformed[0], pair([0, 0, 0], [1, 0, 0]))

    def test_identity_transform(self):
        cluster = bcc_tetrahedron(decoration=1)
        transformed = transform_to_reference([cluster], np.identity(3),
                                             np.zeros(3))
        self.assertEqual(transformed[0], cluster)


class TestSubClusters(unittest.TestCase):
    def test_number_of_subclusters(self):
        subs = subclusters(bcc_tetrahedron())
        self.assertEqual(len(subs), 16)
        sizes = sorted(s.num_sites for s in subs)
        self.assertEqual(sizes, [0, 1, 1, 1, 1, 2, 2, 2, 2, 2, 2, 3, 3, 3,
                                 3, 4])

    def test_sublattices_kept(self):
        cluster = Cluster.from_positions(
            [[[0, 0, 0], [1, 0, 0]], [[0.5, 0.5, 0.5]]])
        for sub in subclusters(cluster):
            self.assertEqual(sub.num_sublattices, 2)
            for site in sub.sublattices[1]:
                self.assertEqual(site.position, Vector3D(0.5, 0.5, 0.5))

    def test_decorated_subclusters(self):
        subs = decorated_subclusters(bcc_tetrahedron(), [1, 2])
        self.assertEqual(len(subs), 81)
        full = [s for s in subs if s.num_sites == 4]
        self.assertEqual(len(full), 16)

    def test_basis_symbols(self):
        self.assertEqual(basis_symbols(2), [1])
        self.assertEqual(basis_symbols(4), [1, 2, 3])
        with self.assertRaises(InvalidInputError):
            basis_symbols(1)


if __name__ == "__main__":
    from cecvm import TimeLoggingTestRunner
    unittest.main(testRunner=TimeLoggingTestRunner)
