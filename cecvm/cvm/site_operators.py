"""Site-operator products and their mapping onto correlation functions."""
from collections import namedtuple
from cecvm.errors import InvalidInputError, InconsistencyError
from cecvm.identification.geometry import Cluster, Site, Sublattice

# Site operator s_basis acting on the site with the given index
SiteOp = namedtuple("SiteOp", ["site", "basis"])


def product_key(ops):
    """Order independent key of a product of site operators."""
    return tuple(sorted((op.site, op.basis) for op in ops))


class SiteList(object):
    """
    Union of the sites of the maximal clusters of the ordered phase

    :param max_clusters: List of Cluster
    """

    def __init__(self, max_clusters):
        num_subs = set(c.num_sublattices for c in max_clusters)
        if len(num_subs) != 1:
            raise InvalidInputError(
                "All maximal clusters must have the same number of "
                "sublattices. Got {}".format(sorted(num_subs)))
        self.num_sublattices = num_subs.pop()

        positions = []
        sublattice = []
        index = {}
        for cluster in max_clusters:
            for sub_index, sub in enumerate(cluster.sublattices):
                for site in sub:
                    key = site.position.rounded()
                    if key in index:
                        if sublattice[index[key]] != sub_index:
                            raise InvalidInputError(
                                "Position {} belongs to sublattice {} and "
                                "{}".format(site.position,
                                            sublattice[index[key]],
                                            sub_index))
                        continue
                    index[key] = len(positions)
                    positions.append(site.position)
                    sublattice.append(sub_index)
        self.positions = tuple(positions)
        self.sublattice = tuple(sublattice)
        self._index = index

    def index_of(self, position):
        """Index of a position, -1 if it is not in the list."""
        return self._index.get(position.rounded(), -1)

    def site_indices(self, cluster):
        """Flattened site indices of a cluster."""
        indices = []
        for sub in cluster.sublattices:
            for site in sub:
                indx = self.index_of(site.position)
                if indx < 0:
                    raise InconsistencyError(
                        "Site {} is not part of any maximal cluster".format(
                            site.position))
                indices.append(indx)
        return indices

    def to_cluster(self, ops):
        """Decorated cluster described by a product of site operators."""
        subs = [[] for _ in range(self.num_sublattices)]
        for op in ops:
            subs[self.sublattice[op.site]].append(
                Site(self.positions[op.site], decoration=op.basis))
        return Cluster([Sublattice(s).sorted() for s in subs])

    def __len__(self):
        return len(self.positions)


class SubstitutionRules(object):
    """
    Lookup table from site-operator products to correlation functions

    Products are resolved through the canonical key of the decorated
    cluster they describe, so every product that is a symmetry image of a
    correlation function is found. Resolved products are cached by their
    order independent key.

    :param grouped_cfs: GroupedCFs from the CF identification
    :param site_list: SiteList
    """

    def __init__(self, grouped_cfs, site_list):
        self.site_list = site_list
        self._by_cluster = {}
        self._rules = {}
        for cf_index, entry in grouped_cfs.items():
            for cluster in entry.orbit:
                self._register_cluster(cluster.canonical_key(), cf_index)
                ops = self._as_site_ops(cluster)
                if ops is not None:
                    self.add(ops, cf_index)

    def _register_cluster(self, key, cf_index):
        existing = self._by_cluster.get(key)
        if existing is not None and existing != cf_index:
            raise InconsistencyError(
                "Cluster {} belongs to correlation function {} and "
                "{}".format(key, existing, cf_index))
        self._by_cluster[key] = cf_index

    def _as_site_ops(self, cluster):
        ops = []
        for sub in cluster.sublattices:
            for site in sub:
                indx = self.site_list.index_of(site.position)
                if indx < 0:
                    return None
                ops.append(SiteOp(indx, site.decoration))
        return ops

    def add(self, ops, cf_index):
        """Register a product. Conflicting mappings are fatal."""
        key = product_key(ops)
        existing = self._rules.get(key)
        if existing is not None and existing != cf_index:
            raise InconsistencyError(
                "Site-operator product {} maps to both {} and {}".format(
                    key, existing, cf_index))
        self._rules[key] = cf_index

    def lookup(self, ops):
        """
        Return the CFIndex of a product of site operators

        :raises InconsistencyError: if no correlation function matches
        """
        key = product_key(ops)
        cf_index = self._rules.get(key)
        if cf_index is not None:
            return cf_index

        cluster = self.site_list.to_cluster(ops)
        cf_index = self._by_cluster.get(cluster.canonical_key())
        if cf_index is None:
            raise InconsistencyError(
                "No correlation function matches the site-operator product "
                "{}".format(key))
        self.add(ops, cf_index)
        return cf_index

    def __len__(self):
        return len(self._rules)
