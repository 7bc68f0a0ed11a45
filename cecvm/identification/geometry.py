"""Geometric primitives used to describe (decorated) clusters."""
import numpy as np

# Number of decimals kept when building hashable keys from coordinates
KEY_DECIMALS = 6


def _key_coordinate(value):
    # Adding 0.0 turns -0.0 into 0.0
    return round(value, KEY_DECIMALS) + 0.0


class Vector3D(object):
    """
    Immutable point in space

    :param x: First coordinate
    :param y: Second coordinate
    :param z: Third coordinate
    """

    def __init__(self, x, y, z):
        self._xyz = (float(x), float(y), float(z))

    @staticmethod
    def from_array(values):
        if len(values) != 3:
            raise ValueError("A position needs exactly 3 coordinates. "
                             "Got {}".format(values))
        return Vector3D(values[0], values[1], values[2])

    @property
    def x(self):
        return self._xyz[0]

    @property
    def y(self):
        return self._xyz[1]

    @property
    def z(self):
        return self._xyz[2]

    def as_array(self):
        return np.array(self._xyz)

    def rounded(self):
        """Return the coordinates as a hashable, rounded tuple."""
        return tuple(_key_coordinate(v) for v in self._xyz)

    def transform(self, rotation, translation):
        """Return rotation*self + translation."""
        new = np.dot(rotation, self._xyz) + translation
        return Vector3D(new[0], new[1], new[2])

    def __iter__(self):
        return iter(self._xyz)

    def __add__(self, other):
        return Vector3D(*[a + b for a, b in zip(self, other)])

    def __sub__(self, other):
        return Vector3D(*[a - b for a, b in zip(self, other)])

    def __eq__(self, other):
        if not isinstance(other, Vector3D):
            return NotImplemented
        # Same rounding as the hash, so equal vectors hash equal
        return self.rounded() == other.rounded()

    def __ne__(self, other):
        res = self.__eq__(other)
        if res is NotImplemented:
            return res
        return not res

    def __hash__(self):
        return hash(self.rounded())

    def __repr__(self):
        return "Vector3D({:.6f}, {:.6f}, {:.6f})".format(*self._xyz)


class Site(object):
    """
    A lattice position, optionally decorated with a site operator

    :param position: Vector3D (or any 3 numbers)
    :param decoration: Integer index of the site operator. None means
        that the site only carries topological information.
    """

    def __init__(self, position, decoration=None):
        if not isinstance(position, Vector3D):
            position = Vector3D.from_array(position)
        self.position = position
        self.decoration = decoration

    def sort_key(self):
        dec = 0 if self.decoration is None else self.decoration
        return self.position.rounded() + (dec,)

    def with_decoration(self, decoration):
        return Site(self.position, decoration=decoration)

    def transform(self, rotation, translation):
        return Site(self.position.transform(rotation, translation),
                    decoration=self.decoration)

    def __eq__(self, other):
        if not isinstance(other, Site):
            return NotImplemented
        return self.position == other.position and \
            self.decoration == other.decoration

    def __ne__(self, other):
        res = self.__eq__(other)
        if res is NotImplemented:
            return res
        return not res

    def __hash__(self):
        return hash((self.position, self.decoration))

    def __repr__(self):
        if self.decoration is None:
            return "Site({})".format(self.position)
        return "Site({}, s{})".format(self.position, self.decoration)


class Sublattice(object):
    """Ordered group of sites belonging to the same sublattice."""

    def __init__(self, sites=()):
        self.sites = tuple(sites)

    def sorted(self):
        return Sublattice(sorted(self.sites, key=lambda s: s.sort_key()))

    def __len__(self):
        return len(self.sites)

    def __iter__(self):
        return iter(self.sites)

    def __repr__(self):
        return "Sublattice({})".format(list(self.sites))


class Cluster(object):
    """
    A collection of sites grouped into sublattices

    Clusters are compared via :meth:`canonical_key`, which is invariant
    under lattice translations and under reordering of the sites inside
    each sublattice.

    :param sublattices: List of Sublattice (or of lists of Site)
    """

    def __init__(self, sublattices):
        subs = []
        for sub in sublattices:
            if not isinstance(sub, Sublattice):
                sub = Sublattice(sub)
            subs.append(sub)
        self.sublattices = tuple(subs)
        self._key = None
        self._flat_key = None

    @staticmethod
    def from_positions(positions, decoration=None):
        """
        Build a cluster from nested lists of coordinates

        :param positions: [[[x, y, z], ...], ...], one list per sublattice
        :param decoration: Decoration applied to all sites
        """
        subs = []
        for sub in positions:
            subs.append(Sublattice([Site(p, decoration=decoration)
                                    for p in sub]))
        return Cluster(subs)

    @property
    def all_sites(self):
        sites = []
        for sub in self.sublattices:
            sites += list(sub.sites)
        return sites

    @property
    def num_sites(self):
        return sum(len(sub) for sub in self.sublattices)

    @property
    def num_sublattices(self):
        return len(self.sublattices)

    @property
    def rc(self):
        """Number of sites on each sublattice."""
        return tuple(len(sub) for sub in self.sublattices)

    @property
    def is_empty(self):
        return self.num_sites == 0

    def decorations(self):
        """Decorations of the sites sorted by position (flattened)."""
        sites = sorted(self.all_sites, key=lambda s: s.sort_key())
        return [s.decoration for s in sites]

    def flattened(self):
        """Return a copy where all sites live on one sorted sublattice."""
        return Cluster([Sublattice(self.all_sites).sorted()])

    def with_decoration(self, decoration):
        """Return a copy where every site carries the given decoration."""
        return Cluster([Sublattice([s.with_decoration(decoration)
                                    for s in sub])
                        for sub in self.sublattices])

    def transform(self, rotation, translation):
        """Apply r' = rotation*r + translation to all sites."""
        subs = []
        for sub in self.sublattices:
            sites = [s.transform(rotation, translation) for s in sub]
            subs.append(Sublattice(sites).sorted())
        return Cluster(subs)

    def canonical_key(self):
        """
        Return a hashable key identifying the cluster up to a lattice
        translation.

        The sites are sorted by position, the whole cluster is shifted such
        that the first site lies in the unit cell [0, 1)^3 and the rounded
        coordinates together with the sublattice index and the decoration
        form the key.
        """
        if self._key is None:
            self._key = self._build_key()
        return self._key

    def flattened_key(self):
        """Canonical key of the flattened cluster."""
        if self._flat_key is None:
            self._flat_key = self.flattened().canonical_key()
        return self._flat_key

    def _build_key(self):
        entries = []
        for sub_index, sub in enumerate(self.sublattices):
            for site in sub:
                dec = 0 if site.decoration is None else site.decoration
                entries.append((site.position.rounded(), sub_index, dec))

        if not entries:
            return (self.rc, ())
        entries.sort()
        origin = entries[0][0]
        shift = [np.floor(v + 1E-6) for v in origin]
        shifted = []
        for pos, sub_index, dec in entries:
            new_pos = tuple(_key_coordinate(p - s) for p, s in zip(pos, shift))
            shifted.append((new_pos, sub_index, dec))
        shifted.sort()
        return (self.rc, tuple(shifted))

    def __eq__(self, other):
        if not isinstance(other, Cluster):
            return NotImplemented
        return self.canonical_key() == other.canonical_key()

    def __ne__(self, other):
        res = self.__eq__(other)
        if res is NotImplemented:
            return res
        return not res

    def __hash__(self):
        return hash(self.canonical_key())

    def __len__(self):
        return self.num_sites

    def __repr__(self):
        return "Cluster({})".format([list(sub.sites)
                                     for sub in self.sublattices])
