"""Symmetry operations and orbits of clusters."""
import numpy as np
from cecvm.errors import InvalidInputError


class SymmetryOperation(object):
    """
    Space group operation r' = rotation*r + translation

    :param rotation: 3x3 matrix
    :param translation: Length 3 vector
    """

    def __init__(self, rotation, translation=None):
        rotation = np.array(rotation, dtype=float)
        if translation is None:
            translation = np.zeros(3)
        translation = np.array(translation, dtype=float)
        if rotation.shape != (3, 3):
            raise InvalidInputError("The rotation part of a symmetry "
                                    "operation has to be 3x3. Got shape "
                                    "{}".format(rotation.shape))
        if translation.shape != (3,):
            raise InvalidInputError("The translation part of a symmetry "
                                    "operation needs 3 components. Got "
                                    "shape {}".format(translation.shape))
        rotation.setflags(write=False)
        translation.setflags(write=False)
        self.rotation = rotation
        self.translation = translation

    @staticmethod
    def from_matrix(matrix):
        """
        Construct from a 3x4 matrix [R | t]

        :param matrix: Nested list with 3 rows of 4 numbers
        """
        matrix = np.array(matrix, dtype=float)
        if matrix.shape != (3, 4):
            raise InvalidInputError("A symmetry operation has to be given "
                                    "as a 3x4 matrix. Got shape "
                                    "{}".format(matrix.shape))
        return SymmetryOperation(matrix[:, :3], matrix[:, 3])

    @staticmethod
    def identity():
        return SymmetryOperation(np.identity(3), np.zeros(3))

    def apply(self, cluster):
        """Return the image of the cluster."""
        return cluster.transform(self.rotation, self.translation)

    def __call__(self, cluster):
        return self.apply(cluster)

    def __repr__(self):
        return "SymmetryOperation(rotation={}, translation={})".format(
            self.rotation.tolist(), self.translation.tolist())


class Orbit(object):
    """
    Set of clusters that are equivalent under a symmetry group

    Clusters that are translations of a cluster already in the orbit are
    not added again, so len(orbit) is the number of distinct clusters per
    unit cell.

    :param clusters: Iterable of Cluster
    """

    def __init__(self, clusters=()):
        unique = []
        keys = set()
        for cluster in clusters:
            key = cluster.canonical_key()
            if key in keys:
                continue
            keys.add(key)
            unique.append(cluster)
        self._clusters = tuple(unique)
        self._keys = frozenset(keys)
        self._flat_keys = frozenset(c.flattened_key() for c in unique)

    @property
    def clusters(self):
        return self._clusters

    @property
    def keys(self):
        return self._keys

    def contains_flattened(self, cluster):
        """
        Check if the cluster belongs to the orbit when the sublattice
        information of both sides is discarded
        """
        return cluster.flattened_key() in self._flat_keys

    def __contains__(self, cluster):
        return cluster.canonical_key() in self._keys

    def __len__(self):
        return len(self._clusters)

    def __iter__(self):
        return iter(self._clusters)

    def __getitem__(self, indx):
        return self._clusters[indx]

    def __repr__(self):
        return "Orbit(size={})".format(len(self))


def generate_orbit(cluster, operations):
    """
    Apply all symmetry operations to a cluster

    :param cluster: Cluster
    :param operations: List of SymmetryOperation
    """
    return Orbit(op.apply(cluster) for op in operations)


def is_translated(cluster1, cluster2):
    """Check if cluster2 is a lattice translation of cluster1."""
    return cluster1.canonical_key() == cluster2.canonical_key()


def transform_to_reference(clusters, rotation, translation):
    """
    Map clusters of an ordered phase into the frame of the disordered
    reference structure

    :param clusters: List of Cluster in the ordered-phase frame
    :param rotation: 3x3 matrix
    :param translation: Length 3 vector
    """
    op = SymmetryOperation(rotation, translation)
    return [op.apply(c) for c in clusters]
