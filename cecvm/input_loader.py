"""Loaders for maximal clusters and symmetry operations."""
import os
import json
import numpy as np
from ase.spacegroup import Spacegroup
from ase.spacegroup.spacegroup import SpacegroupError
from cecvm.errors import InvalidInputError
from cecvm.identification.geometry import Cluster
from cecvm.identification.symmetry import SymmetryOperation

DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data")
CLUSTER_DIR = os.path.join(DATA_DIR, "clusters")

# Names of symmetry groups used by the packaged models
SPACE_GROUP_ALIASES = {
    "A1-SG": 225,
    "A2-SG": 229,
    "B2-SG": 221
}


def packaged_models():
    """Names of the cluster files shipped with the package."""
    names = []
    for fname in sorted(os.listdir(CLUSTER_DIR)):
        if fname.endswith(".json"):
            names.append(fname[:-5])
    return names


def clusters_from_dict(data):
    """
    Build maximal clusters from a dictionary

    :param data: {"clusters": [[[[x, y, z], ...], ...], ...]} where the
        nesting is cluster -> sublattice -> site
    """
    if "clusters" not in data:
        raise InvalidInputError("Cluster data has no 'clusters' entry")
    clusters = []
    for positions in data["clusters"]:
        try:
            clusters.append(Cluster.from_positions(positions))
        except (TypeError, ValueError) as exc:
            raise InvalidInputError("Invalid cluster {}: {}".format(
                positions, str(exc)))
    if not clusters:
        raise InvalidInputError("At least one maximal cluster is required")
    return clusters


def load_clusters(source):
    """
    Load maximal clusters

    :param source: Name of a packaged model (e.g. "A2-T"), path to a JSON
        file or a list of Cluster
    """
    if source is None:
        raise InvalidInputError("No cluster source given")
    if isinstance(source, (list, tuple)):
        if not all(isinstance(c, Cluster) for c in source):
            raise InvalidInputError("A cluster list can only contain "
                                    "Cluster objects")
        if not source:
            raise InvalidInputError("At least one maximal cluster is "
                                    "required")
        return list(source)

    fname = os.path.join(CLUSTER_DIR, "{}.json".format(source))
    if not os.path.exists(fname):
        fname = source
    if not os.path.exists(fname):
        raise InvalidInputError(
            "Unknown cluster source {}. Packaged models: {}".format(
                source, packaged_models()))
    with open(fname, 'r') as infile:
        data = json.load(infile)
    return clusters_from_dict(data)


def space_group_operations(space_group):
    """
    Symmetry operations of a space group generated by ASE

    :param space_group: International number or Hermann-Mauguin symbol
    """
    try:
        sg = Spacegroup(space_group)
    except (SpacegroupError, ValueError, KeyError) as exc:
        raise InvalidInputError("Unknown space group {}: {}".format(
            space_group, str(exc)))
    return [SymmetryOperation(rot, trans) for rot, trans in sg.get_symop()]


def symmetry_from_dict(data):
    """
    Read symmetry operations and the optional frame transformation

    :param data: {"operations": [3x4 matrices], "rotation": 3x3,
        "translation": [3]}
    :return: operations, rotation, translation (the last two may be None)
    """
    if "operations" not in data:
        raise InvalidInputError("Symmetry data has no 'operations' entry")
    ops = [SymmetryOperation.from_matrix(m) for m in data["operations"]]
    if not ops:
        raise InvalidInputError("At least one symmetry operation is "
                                "required")
    rotation = data.get("rotation", None)
    translation = data.get("translation", None)
    if rotation is not None:
        rotation = np.array(rotation, dtype=float)
    if translation is not None:
        translation = np.array(translation, dtype=float)
    return ops, rotation, translation


def load_symmetry_data(source):
    """
    Load symmetry operations together with the optional transformation
    into the reference frame stored next to them

    :param source: Space group number or symbol, alias ("A2-SG"), path to
        a JSON file or a list of SymmetryOperation
    :return: operations, rotation, translation (the last two may be None)
    """
    if source is None:
        raise InvalidInputError("No symmetry source given")
    if isinstance(source, (list, tuple)):
        if not source or \
                not all(isinstance(op, SymmetryOperation) for op in source):
            raise InvalidInputError("Expected a non-empty list of "
                                    "SymmetryOperation")
        return list(source), None, None
    if isinstance(source, (int, np.integer)):
        return space_group_operations(int(source)), None, None
    if source in SPACE_GROUP_ALIASES:
        return space_group_operations(SPACE_GROUP_ALIASES[source]), None, None
    if os.path.exists(source):
        with open(source, 'r') as infile:
            data = json.load(infile)
        return symmetry_from_dict(data)
    return space_group_operations(source), None, None


def load_symmetry(source):
    """Load the symmetry operations of a structure."""
    return load_symmetry_data(source)[0]


def save_symmetry(fname, operations, rotation=None, translation=None):
    """Store symmetry operations in the JSON format read by load_symmetry."""
    data = {
        "operations": [np.column_stack((op.rotation, op.translation)).tolist()
                       for op in operations]
    }
    if rotation is not None:
        data["rotation"] = np.array(rotation).tolist()
    if translation is not None:
        data["translation"] = np.array(translation).tolist()
    with open(fname, 'w') as outfile:
        json.dump(data, outfile, indent=2)
