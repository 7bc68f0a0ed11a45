"""Stage 2: identify and group the correlation functions."""
import logging
from collections import namedtuple
import numpy as np
from cecvm.errors import InconsistencyError
from cecvm.identification.cluster_enumeration import (
    enumerate_cluster_types, classify_ordered_clusters, basis_symbols)
from cecvm.identification.cluster_identifier import TOPOLOGY_BASIS
from cecvm.identification.symmetry import transform_to_reference

logger = logging.getLogger(__name__)

# Position of a correlation function: reference cluster type, reference CF
# type inside that cluster type and ordered CF inside that reference CF
CFIndex = namedtuple("CFIndex", ["type", "group", "index"])

GroupedCF = namedtuple("GroupedCF", ["cluster", "multiplicity", "orbit",
                                     "rc"])


class GroupedCFs(object):
    """
    Correlation functions addressed by CFIndex(t, j, k)

    :param lcf: lcf[t][j] number of CFs in group (t, j)
    :param entries: Dictionary CFIndex -> GroupedCF
    """

    def __init__(self, lcf, entries):
        self.lcf = tuple(tuple(row) for row in lcf)
        self._entries = dict(entries)
        self._order = []
        for t, row in enumerate(self.lcf):
            for j, count in enumerate(row):
                for k in range(count):
                    index = CFIndex(t, j, k)
                    if index not in self._entries:
                        raise InconsistencyError(
                            "No correlation function stored for "
                            "{}".format(index))
                    self._order.append(index)
        if len(self._order) != len(self._entries):
            raise InconsistencyError(
                "lcf accounts for {} correlation functions but {} are "
                "stored".format(len(self._order), len(self._entries)))
        self._columns = {index: col for col, index in enumerate(self._order)}

    def indices(self):
        """CF indices in column order."""
        return list(self._order)

    def column(self, cf_index):
        return self._columns[cf_index]

    def items(self):
        for index in self._order:
            yield index, self._entries[index]

    def __getitem__(self, cf_index):
        return self._entries[cf_index]

    def __len__(self):
        return len(self._order)


def group_cf_data(reference_clusters, reference_cfs, classified_cfs):
    """
    Group the ordered-phase CFs by reference cluster type

    :param reference_clusters: Topological ClusterTypeList of the reference
        (from the cluster identification)
    :param reference_cfs: Decorated ClusterTypeList of the reference
    :param classified_cfs: Ordered CFs classified into reference CF types
    """
    undecorated = [cf.with_decoration(TOPOLOGY_BASIS[0])
                   for cf in reference_cfs.clusters]
    lcf = []
    entries = {}
    for t, orbit in enumerate(reference_clusters.orbits):
        row = []
        for ref_cf, cluster in enumerate(undecorated):
            if cluster not in orbit:
                continue
            j = len(row)
            groups = classified_cfs.groups(ref_cf)
            for k, entry in enumerate(groups):
                entries[CFIndex(t, j, k)] = GroupedCF(
                    cluster=entry.cluster, multiplicity=entry.multiplicity,
                    orbit=entry.orbit, rc=entry.rc)
            row.append(len(groups))
        lcf.append(row)
    return GroupedCFs(lcf, entries)


class CFIdentification(object):
    """
    Result of the correlation function identification

    Attributes
    ----------
    tcfdis - Number of reference CFs
    lcf - lcf[t][j] number of CFs in each group
    tcf - Total number of CFs
    nxcf - Number of point CFs
    ncf - Number of independent (non-point) CFs
    """

    def __init__(self, num_components, reference_cfs, ordered_cfs,
                 classified, grouped):
        self.num_components = num_components
        self.reference_cfs = reference_cfs
        self.ordered_cfs = ordered_cfs
        self.classified = classified
        self.grouped = grouped
        self.tcfdis = len(reference_cfs)
        self.lcf = grouped.lcf
        self.tcf = sum(sum(row) for row in self.lcf)
        self.nxcf = sum(self.lcf[-1])
        self.ncf = self.tcf - self.nxcf

    def cf_types(self):
        """Reference cluster type of each CF column."""
        types = np.array([index.type for index in self.grouped.indices()],
                         dtype=int)
        types.setflags(write=False)
        return types

    def summary(self):
        return {
            "tcfdis": self.tcfdis,
            "lcf": [list(row) for row in self.lcf],
            "tcf": self.tcf,
            "nxcf": self.nxcf,
            "ncf": self.ncf
        }


def identify_cfs(cluster_identification, reference_clusters,
                 reference_operations, ordered_clusters, ordered_operations,
                 num_components, rotation=None, translation=None):
    """
    Enumerate, classify and group the correlation functions

    :param cluster_identification: ClusterIdentification from stage 1
    :param reference_clusters: Maximal clusters of the reference
    :param reference_operations: Symmetry operations of the reference
    :param ordered_clusters: Maximal clusters of the ordered phase
    :param ordered_operations: Symmetry operations of the ordered phase
    :param num_components: Number of chemical components
    :param rotation: Map from ordered to reference frame (default identity)
    :param translation: Translation ordered to reference (default zero)
    """
    if rotation is None:
        rotation = np.identity(3)
    if translation is None:
        translation = np.zeros(3)
    basis = basis_symbols(num_components)

    reference_cfs = enumerate_cluster_types(
        reference_clusters, reference_operations, basis=basis).non_empty()
    ordered_cfs = enumerate_cluster_types(
        ordered_clusters, ordered_operations, basis=basis).non_empty()

    transformed = transform_to_reference(ordered_cfs.clusters, rotation,
                                         translation)
    classified = classify_ordered_clusters(reference_cfs, ordered_cfs,
                                           transformed)
    grouped = group_cf_data(cluster_identification.reference, reference_cfs,
                            classified)

    if len(grouped) != len(ordered_cfs):
        raise InconsistencyError(
            "{} of {} ordered correlation functions were grouped under a "
            "reference cluster type".format(len(grouped), len(ordered_cfs)))
    if len(grouped.lcf) != cluster_identification.tcdis:
        raise InconsistencyError(
            "Grouped CF table has {} rows, expected tcdis={}".format(
                len(grouped.lcf), cluster_identification.tcdis))

    result = CFIdentification(num_components, reference_cfs, ordered_cfs,
                              classified, grouped)
    logger.debug("CF identification: tcf=%d nxcf=%d ncf=%d lcf=%s",
                 result.tcf, result.nxcf, result.ncf,
                 [list(row) for row in result.lcf])
    return result
