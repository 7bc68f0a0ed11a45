"""Enumeration of symmetry distinct (decorated) sub-clusters."""
import itertools
import logging
from collections import namedtuple
from cecvm.errors import InvalidInputError, InconsistencyError
from cecvm.identification.geometry import Cluster, Sublattice
from cecvm.identification.symmetry import generate_orbit

logger = logging.getLogger(__name__)


def basis_symbols(num_components):
    """
    Decorations used to enumerate correlation functions

    A K component system is described by the site operators s1, ..., s(K-1)
    which are represented by the integers 1, ..., K-1.
    """
    if num_components < 2:
        raise InvalidInputError("At least two components are needed. "
                                "Got {}".format(num_components))
    return list(range(1, num_components))


def _flat_sites_with_sublattice(cluster):
    sites = []
    for sub_index, sub in enumerate(cluster.sublattices):
        for site in sub:
            sites.append((sub_index, site))
    sites.sort(key=lambda x: x[1].sort_key())
    return sites


def _regroup(selection, num_sublattices):
    subs = [[] for _ in range(num_sublattices)]
    for sub_index, site in selection:
        subs[sub_index].append(site)
    return Cluster([Sublattice(s) for s in subs])


def subclusters(cluster):
    """
    Return all 2^n subsets of the sites of a cluster

    The empty cluster is included. Each site stays on its sublattice.
    """
    sites = _flat_sites_with_sublattice(cluster)
    num_subs = cluster.num_sublattices
    result = []
    for mask in range(2**len(sites)):
        selection = [sites[i] for i in range(len(sites)) if mask & (1 << i)]
        result.append(_regroup(selection, num_subs))
    return result


def decorated_subclusters(cluster, basis):
    """
    Return all decorated sub-clusters of a cluster

    Every site is either absent or carries one of the decorations in basis.

    :param cluster: Cluster
    :param basis: List of decorations (integers)
    """
    sites = _flat_sites_with_sublattice(cluster)
    num_subs = cluster.num_sublattices
    choices = [None] + list(basis)
    result = []
    for combination in itertools.product(choices, repeat=len(sites)):
        selection = []
        for (sub_index, site), dec in zip(sites, combination):
            if dec is None:
                continue
            selection.append((sub_index, site.with_decoration(dec)))
        result.append(_regroup(selection, num_subs))
    return result


class ClusterTypeList(object):
    """
    Symmetry distinct cluster types sorted by descending size

    :param clusters: Representative of each type
    :param multiplicities: Orbit sizes normalized by the number of
        point-cluster positions
    :param orbits: Orbit of each type
    :param rc: Number of sites on each sublattice for each type
    """

    def __init__(self, clusters, multiplicities, orbits, rc):
        n = len(clusters)
        if any(len(x) != n for x in (multiplicities, orbits, rc)):
            raise InvalidInputError(
                "Inconsistent cluster type data: {} clusters, {} "
                "multiplicities, {} orbits, {} rc entries".format(
                    n, len(multiplicities), len(orbits), len(rc)))
        self.clusters = tuple(clusters)
        self.multiplicities = tuple(float(m) for m in multiplicities)
        self.orbits = tuple(orbits)
        self.rc = tuple(tuple(r) for r in rc)

    @property
    def num_non_empty(self):
        return sum(1 for c in self.clusters if not c.is_empty)

    def non_empty(self):
        """Return a copy without the empty cluster."""
        n = self.num_non_empty
        for c in self.clusters[:n]:
            if c.is_empty:
                raise InconsistencyError("The empty cluster has to be the "
                                         "last cluster type")
        return ClusterTypeList(self.clusters[:n], self.multiplicities[:n],
                               self.orbits[:n], self.rc[:n])

    def num_sites(self):
        return [c.num_sites for c in self.clusters]

    def __len__(self):
        return len(self.clusters)

    def __repr__(self):
        return "ClusterTypeList(sizes={}, multiplicities={})".format(
            self.num_sites(), list(self.multiplicities))


def enumerate_cluster_types(max_clusters, operations, basis=None):
    """
    Find all symmetry distinct sub-clusters of a set of maximal clusters

    :param max_clusters: List of Cluster
    :param operations: List of SymmetryOperation
    :param basis: Decorations. If None, only the topology is enumerated and
        the decoration already on the sites is kept.
    """
    if not max_clusters:
        raise InvalidInputError("At least one maximal cluster is required")
    if not operations:
        raise InvalidInputError("At least one symmetry operation is "
                                "required")

    types = []
    orbits = []
    for max_cluster in max_clusters:
        if basis is None:
            candidates = subclusters(max_cluster)
        else:
            candidates = decorated_subclusters(max_cluster, basis)
        candidates.sort(key=lambda c: c.num_sites, reverse=True)

        # Smallest candidates are visited first
        for candidate in reversed(candidates):
            if any(candidate in orbit for orbit in orbits):
                continue
            types.append(candidate)
            orbits.append(generate_orbit(candidate, operations))

    # Normalize by the number of point clusters per unit cell
    point_m = 0.0
    point_positions = set()
    for cluster, orbit in zip(types, orbits):
        if cluster.num_sites != 1:
            continue
        pos = cluster.all_sites[0].position.rounded()
        if pos not in point_positions:
            point_positions.add(pos)
            point_m += len(orbit)

    if point_m == 0.0:
        raise InvalidInputError("No point cluster was found among the "
                                "sub-clusters of the maximal clusters")

    order = sorted(range(len(types)), key=lambda i: types[i].num_sites,
                   reverse=True)
    result = ClusterTypeList(
        [types[i] for i in order],
        [len(orbits[i]) / point_m for i in order],
        [orbits[i] for i in order],
        [types[i].rc for i in order])
    logger.debug("Found %d cluster types with sizes %s",
                 len(result), result.num_sites())
    return result


ClassifiedEntry = namedtuple("ClassifiedEntry",
                             ["cluster", "multiplicity", "orbit", "rc",
                              "ordered_index"])


class ClassifiedClusters(object):
    """
    Ordered-phase cluster types grouped under their reference type

    Entries are stored flat and addressed by (t, j) where t is the
    reference type and j numbers the ordered-phase groups of that type.

    :param num_types: Number of reference types
    :param entries: Dictionary (t, j) -> ClassifiedEntry
    """

    def __init__(self, num_types, entries):
        self.num_types = num_types
        self._entries = dict(entries)
        counts = [0] * num_types
        for t, j in self._entries.keys():
            counts[t] = max(counts[t], j + 1)
        for t in range(num_types):
            for j in range(counts[t]):
                if (t, j) not in self._entries:
                    raise InconsistencyError(
                        "Missing classified entry ({}, {})".format(t, j))
        self.group_counts = tuple(counts)

    def groups(self, t):
        return [self._entries[(t, j)] for j in range(self.group_counts[t])]

    def keys(self):
        for t in range(self.num_types):
            for j in range(self.group_counts[t]):
                yield (t, j)

    def items(self):
        for key in self.keys():
            yield key, self._entries[key]

    def __getitem__(self, key):
        return self._entries[key]

    def __len__(self):
        return len(self._entries)


def classify_ordered_clusters(reference, ordered, transformed):
    """
    Assign every ordered-phase cluster type to a reference type

    :param reference: ClusterTypeList of the reference (no empty cluster)
    :param ordered: ClusterTypeList of the ordered phase (no empty cluster)
    :param transformed: Ordered representatives mapped into the reference
        frame, one per ordered type
    """
    if len(transformed) != len(ordered):
        raise InvalidInputError(
            "Got {} transformed clusters for {} ordered types".format(
                len(transformed), len(ordered)))

    entries = {}
    for t, orbit in enumerate(reference.orbits):
        j = 0
        for i, trans in enumerate(transformed):
            if not orbit.contains_flattened(trans):
                continue
            entries[(t, j)] = ClassifiedEntry(
                cluster=ordered.clusters[i],
                multiplicity=ordered.multiplicities[i],
                orbit=ordered.orbits[i], rc=ordered.rc[i], ordered_index=i)
            j += 1
    return ClassifiedClusters(len(reference), entries)
