"""Stage 3: linear map from correlation functions to cluster variables."""
import itertools
import logging
import numpy as np
from cecvm.errors import InvalidInputError
from cecvm.cvm.basis import r_matrix
from cecvm.cvm.site_operators import SiteOp, SiteList, SubstitutionRules

logger = logging.getLogger(__name__)

# R-matrix entries below this are treated as zero
COEFF_TOL = 1E-12

# Rows are merged when they agree to this many decimals
MERGE_DECIMALS = 10


class CMatrix(object):
    """
    Cluster variables as affine functions of the correlation functions

    For each ordered cluster group (t, j), block(t, j) has one row per
    merged cluster variable and tcf + 1 columns, the last one being the
    constant. weights(t, j) holds the number of configurations merged into
    each row.

    :param blocks: Dictionary (t, j) -> matrix
    :param weights: Dictionary (t, j) -> integer vector
    :param lcv: lcv[t][j] number of merged cluster variables
    :param cf_basis_indices: Decorations of each CF column
    :param cf_types: Reference cluster type of each CF column
    :param tcf: Total number of CFs
    :param ncf: Number of independent CFs
    :param num_components: Number of components
    :param site_list: SiteList used to build the matrix
    """

    def __init__(self, blocks, weights, lcv, cf_basis_indices, cf_types,
                 tcf, ncf, num_components, site_list=None):
        self._blocks = {}
        self._weights = {}
        for key, block in blocks.items():
            block = np.array(block, dtype=float)
            block.setflags(write=False)
            self._blocks[key] = block
        for key, w in weights.items():
            w = np.array(w, dtype=int)
            w.setflags(write=False)
            self._weights[key] = w
        self.lcv = tuple(tuple(row) for row in lcv)
        self.cf_basis_indices = tuple(tuple(b) for b in cf_basis_indices)
        self.cf_types = np.array(cf_types, dtype=int)
        self.cf_types.setflags(write=False)
        self.tcf = tcf
        self.ncf = ncf
        self.nxcf = tcf - ncf
        self.num_components = num_components
        self.site_list = site_list

    def keys(self):
        for t, row in enumerate(self.lcv):
            for j in range(len(row)):
                yield (t, j)

    def block(self, t, j):
        return self._blocks[(t, j)]

    def weights(self, t, j):
        return self._weights[(t, j)]

    def summary(self):
        return {
            "tcf": self.tcf,
            "ncf": self.ncf,
            "nxcf": self.nxcf,
            "lcv": [list(row) for row in self.lcv],
            "wcv": [[self._weights[(t, j)].tolist()
                     for j in range(len(row))]
                    for t, row in enumerate(self.lcv)],
            "cf_basis_indices": [list(b) for b in self.cf_basis_indices]
        }


def _expand_configuration(site_indices, config, r):
    """
    Expand prod_s p_{e_s}(s_s) into site-operator products

    :return: Dictionary product -> coefficient. The empty product is the
        constant term.
    """
    poly = {(): 1.0}
    for site, element in zip(site_indices, config):
        coeffs = r[element]
        expanded = {}
        for ops, coeff in poly.items():
            for power, c in enumerate(coeffs):
                if abs(c) < COEFF_TOL:
                    continue
                if power > 0:
                    new_ops = ops + (SiteOp(site, power),)
                else:
                    new_ops = ops
                expanded[new_ops] = expanded.get(new_ops, 0.0) + coeff * c
        poly = expanded
    return poly


def build(cluster_identification, cf_identification, ordered_max_clusters,
          num_components):
    """
    Build the C-matrix of the ordered phase

    :param cluster_identification: ClusterIdentification (stage 1)
    :param cf_identification: CFIdentification (stage 2)
    :param ordered_max_clusters: Maximal clusters of the ordered phase
    :param num_components: Number of components
    """
    if num_components != cf_identification.num_components:
        raise InvalidInputError(
            "The CFs were identified for {} components, but the C-matrix "
            "is requested for {}".format(cf_identification.num_components,
                                         num_components))
    site_list = SiteList(ordered_max_clusters)
    r = r_matrix(num_components)
    grouped = cf_identification.grouped
    rules = SubstitutionRules(grouped, site_list)
    tcf = cf_identification.tcf

    cf_basis_indices = []
    for cf_index, entry in grouped.items():
        cf_basis_indices.append(entry.cluster.decorations())

    classified = cluster_identification.classified
    blocks = {}
    weights = {}
    lcv = []
    for t in range(cluster_identification.tcdis):
        row_lcv = []
        for j, entry in enumerate(classified.groups(t)):
            site_indices = site_list.site_indices(entry.cluster)
            rows = {}
            counts = {}
            for config in itertools.product(range(num_components),
                                            repeat=len(site_indices)):
                poly = _expand_configuration(site_indices, config, r)
                row = np.zeros(tcf + 1)
                for ops, coeff in poly.items():
                    if not ops:
                        row[tcf] += coeff
                        continue
                    cf_index = rules.lookup(ops)
                    row[grouped.column(cf_index)] += coeff
                key = tuple(np.round(row, MERGE_DECIMALS) + 0.0)
                counts[key] = counts.get(key, 0) + 1
                if key not in rows:
                    rows[key] = row
            blocks[(t, j)] = np.array(list(rows.values()))
            weights[(t, j)] = [counts[k] for k in rows.keys()]
            row_lcv.append(len(rows))
        lcv.append(row_lcv)

    cmat = CMatrix(blocks, weights, lcv, cf_basis_indices,
                   cf_identification.cf_types(), tcf, cf_identification.ncf,
                   num_components, site_list=site_list)
    logger.debug("C-matrix built: %d sites, lcv=%s", len(site_list),
                 [list(row) for row in cmat.lcv])
    return cmat
