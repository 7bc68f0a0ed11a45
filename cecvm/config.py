"""Configuration of a CVM calculation."""
import json
import numpy as np
from cecvm.errors import InvalidInputError
from cecvm.input_loader import load_clusters, load_symmetry_data


def _as_matrix(value, default, shape, name):
    if value is None:
        value = default
    value = np.array(value, dtype=float)
    if value.shape != shape:
        raise InvalidInputError("{} must have shape {}. Got {}".format(
            name, shape, value.shape))
    value.setflags(write=False)
    return value


class CVMConfiguration(object):
    """
    Structure, ordered phase, approximation and number of components

    All sources are resolved when the object is created. When no ordered
    phase is given the calculation is done for the disordered reference.

    :param reference_clusters: Maximal clusters of the disordered
        reference (packaged model name, JSON file or list of Cluster)
    :param reference_symmetry: Symmetry of the reference (space group
        number/symbol, alias, JSON file or list of SymmetryOperation)
    :param ordered_clusters: Maximal clusters of the ordered phase
    :param ordered_symmetry: Symmetry of the ordered phase
    :param rotation: 3x3 map from the ordered to the reference frame.
        If None, the rotation stored with the ordered symmetry is used,
        otherwise the identity.
    :param translation: Translation from the ordered to the reference frame
    :param num_components: Number of chemical components (at least 2)
    """

    def __init__(self, reference_clusters, reference_symmetry,
                 ordered_clusters=None, ordered_symmetry=None, rotation=None,
                 translation=None, num_components=2):
        if isinstance(num_components, bool) or \
                not isinstance(num_components, (int, np.integer)):
            raise InvalidInputError("num_components has to be an integer. "
                                    "Got {}".format(num_components))
        if num_components < 2:
            raise InvalidInputError("num_components has to be at least 2. "
                                    "Got {}".format(num_components))
        if (ordered_clusters is None) != (ordered_symmetry is None):
            raise InvalidInputError("ordered_clusters and ordered_symmetry "
                                    "have to be given together")

        self._num_components = int(num_components)
        self._reference_clusters = tuple(load_clusters(reference_clusters))
        ops, _, _ = load_symmetry_data(reference_symmetry)
        self._reference_symmetry = tuple(ops)

        if ordered_clusters is None:
            self._ordered_clusters = self._reference_clusters
            self._ordered_symmetry = self._reference_symmetry
            stored_rot = stored_trans = None
        else:
            self._ordered_clusters = tuple(load_clusters(ordered_clusters))
            ops, stored_rot, stored_trans = load_symmetry_data(
                ordered_symmetry)
            self._ordered_symmetry = tuple(ops)

        if rotation is None:
            rotation = stored_rot
        if translation is None:
            translation = stored_trans
        self._rotation = _as_matrix(rotation, np.identity(3), (3, 3),
                                    "rotation")
        self._translation = _as_matrix(translation, np.zeros(3), (3,),
                                       "translation")

        self._sources = {
            "reference_clusters": _source_name(reference_clusters),
            "reference_symmetry": _source_name(reference_symmetry),
            "ordered_clusters": _source_name(ordered_clusters),
            "ordered_symmetry": _source_name(ordered_symmetry)
        }

    @property
    def num_components(self):
        return self._num_components

    @property
    def reference_clusters(self):
        return list(self._reference_clusters)

    @property
    def reference_symmetry(self):
        return list(self._reference_symmetry)

    @property
    def ordered_clusters(self):
        return list(self._ordered_clusters)

    @property
    def ordered_symmetry(self):
        return list(self._ordered_symmetry)

    @property
    def rotation(self):
        return self._rotation

    @property
    def translation(self):
        return self._translation

    @property
    def is_disordered(self):
        return self._sources["ordered_clusters"] is None

    @staticmethod
    def from_dict(data):
        """
        Create a configuration from a dictionary with the same keys as the
        constructor arguments
        """
        allowed = ["reference_clusters", "reference_symmetry",
                   "ordered_clusters", "ordered_symmetry", "rotation",
                   "translation", "num_components"]
        unknown = [k for k in data.keys() if k not in allowed]
        if unknown:
            raise InvalidInputError("Unknown configuration keys {}. Allowed "
                                    "keys: {}".format(unknown, allowed))
        for key in ["reference_clusters", "reference_symmetry"]:
            if key not in data:
                raise InvalidInputError("Configuration needs {}".format(key))
        return CVMConfiguration(**data)

    @staticmethod
    def from_json(fname):
        with open(fname, 'r') as infile:
            data = json.load(infile)
        return CVMConfiguration.from_dict(data)

    def to_dict(self):
        """Dictionary describing the configuration (sources by name)."""
        data = dict(self._sources)
        data["rotation"] = self._rotation.tolist()
        data["translation"] = self._translation.tolist()
        data["num_components"] = self._num_components
        return data

    def __repr__(self):
        return "CVMConfiguration({})".format(self._sources)


def _source_name(source):
    if source is None or isinstance(source, (str, int, np.integer)):
        return source
    return "<{} objects>".format(len(source))
