"""Stage 1: identify the cluster types of the reference and ordered phase."""
import logging
import numpy as np
from cecvm.errors import InvalidInputError, InconsistencyError
from cecvm.identification.cluster_enumeration import (
    enumerate_cluster_types, classify_ordered_clusters)
from cecvm.identification.kikuchi_baker import (
    nij_table, kikuchi_baker_coefficients)
from cecvm.identification.symmetry import transform_to_reference

logger = logging.getLogger(__name__)

# Decoration used when only the topology of the clusters matters
TOPOLOGY_BASIS = [1]


class ClusterIdentification(object):
    """
    Result of the cluster identification

    Attributes
    ----------
    tcdis - Number of non-empty reference cluster types
    nxcdis - Number of point types in the reference (always 1)
    tc - Number of non-empty ordered-phase cluster types
    nxc - Number of ordered-phase point types
    nc - tc - nxc
    lc - Number of ordered groups per reference type
    mh - mh[t][j] ordered multiplicity normalized by mhdis[t]
    mhdis - Reference multiplicities
    kb - Kikuchi-Baker coefficients of the reference types
    nij - Containment table of the reference types
    """

    def __init__(self, reference, ordered, classified, nij, kb):
        self.reference = reference
        self.ordered = ordered
        self.classified = classified
        self.nij = nij
        self.kb = kb

        mhdis = np.array(reference.multiplicities)
        mhdis.setflags(write=False)
        self.mhdis = mhdis
        self.tcdis = len(reference)
        self.nxcdis = 1
        self.tc = len(ordered)
        self.lc = classified.group_counts
        self.nxc = self.lc[self.tcdis - 1]
        self.nc = self.tc - self.nxc

        mh = []
        for t in range(self.tcdis):
            mh.append(tuple(entry.multiplicity / mhdis[t]
                            for entry in classified.groups(t)))
        self.mh = tuple(mh)

    def num_sites(self):
        """Number of sites of each reference type."""
        return self.reference.num_sites()

    def summary(self):
        return {
            "tcdis": self.tcdis,
            "nxcdis": self.nxcdis,
            "tc": self.tc,
            "nxc": self.nxc,
            "nc": self.nc,
            "lc": list(self.lc),
            "mh": [list(row) for row in self.mh],
            "mhdis": self.mhdis.tolist(),
            "kb": self.kb.tolist(),
            "nij": self.nij.tolist()
        }


def identify_clusters(reference_clusters, reference_operations,
                      ordered_clusters, ordered_operations,
                      rotation=None, translation=None):
    """
    Enumerate reference and ordered cluster types and classify the latter

    :param reference_clusters: Maximal clusters of the disordered reference
    :param reference_operations: Symmetry operations of the reference
    :param ordered_clusters: Maximal clusters of the ordered phase
    :param ordered_operations: Symmetry operations of the ordered phase
    :param rotation: Map from ordered to reference frame (default identity)
    :param translation: Translation ordered to reference (default zero)
    """
    if rotation is None:
        rotation = np.identity(3)
    if translation is None:
        translation = np.zeros(3)

    reference = enumerate_cluster_types(
        reference_clusters, reference_operations, basis=TOPOLOGY_BASIS)
    reference = reference.non_empty()
    if len(reference) == 0:
        raise InvalidInputError("The reference structure has no clusters")

    nij = nij_table(reference)
    kb = kikuchi_baker_coefficients(reference.multiplicities, nij)

    ordered = enumerate_cluster_types(
        ordered_clusters, ordered_operations, basis=TOPOLOGY_BASIS)
    ordered = ordered.non_empty()

    transformed = transform_to_reference(ordered.clusters, rotation,
                                         translation)
    classified = classify_ordered_clusters(reference, ordered, transformed)
    matched = sorted(e.ordered_index for _, e in classified.items())
    if matched != list(range(len(ordered))):
        missing = sorted(set(range(len(ordered))) - set(matched))
        raise InconsistencyError(
            "Every ordered cluster type has to belong to exactly one "
            "reference type. Unclassified: {}, classified: {}".format(
                missing, matched))
    result = ClusterIdentification(reference, ordered, classified, nij, kb)
    logger.debug("Cluster identification: tcdis=%d tc=%d lc=%s kb=%s",
                 result.tcdis, result.tc, list(result.lc),
                 result.kb.tolist())
    return result
