"""Sub-cluster containment table and Kikuchi-Baker entropy coefficients."""
import numpy as np
from cecvm.errors import InvalidInputError
from cecvm.identification.cluster_enumeration import subclusters


def nij_table(cluster_types):
    """
    Count how often type j occurs as a sub-cluster of type i

    :param cluster_types: ClusterTypeList without the empty cluster, sorted
        by descending size
    :return: Integer matrix where entry (i, j) is non-zero only for j >= i
    """
    n = len(cluster_types)
    sizes = cluster_types.num_sites()
    nij = np.zeros((n, n), dtype=int)
    for i, cluster in enumerate(cluster_types.clusters):
        for sub in subclusters(cluster):
            if sub.is_empty:
                continue
            for j in range(i, n):
                if sizes[j] != sub.num_sites:
                    continue
                if sub in cluster_types.orbits[j]:
                    nij[i, j] += 1
    nij.setflags(write=False)
    return nij


def kikuchi_baker_coefficients(multiplicities, nij):
    """
    Solve the inclusion-exclusion recurrence for the entropy weights

    kb[j] = (m[j] - sum_{i<j} m[i]*Nij[i][j]*kb[i]) / m[j]

    :param multiplicities: Multiplicity of each cluster type
    :param nij: Containment table (see :func:`nij_table`)
    """
    m = np.array(multiplicities, dtype=float)
    nij = np.array(nij)
    n = len(m)
    if nij.shape != (n, n):
        raise InvalidInputError(
            "The containment table has shape {} but there are {} "
            "multiplicities".format(nij.shape, n))

    kb = np.zeros(n)
    for j in range(n):
        if m[j] == 0.0:
            raise InvalidInputError(
                "Cluster type {} has zero multiplicity".format(j))
        total = 0.0
        for i in range(j):
            total += m[i] * nij[i, j] * kb[i]
        kb[j] = (m[j] - total) / m[j]
    kb.setflags(write=False)
    return kb
