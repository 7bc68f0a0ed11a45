"""Evaluation of cluster variables from correlation functions."""
import numpy as np
from cecvm.errors import InvalidInputError
from cecvm.cvm.basis import site_operator_basis


def check_mole_fractions(mole_fractions, num_components, tol=1E-8):
    """
    Validate a composition vector

    :return: The mole fractions as a numpy array
    """
    x = np.array(mole_fractions, dtype=float)
    if x.shape != (num_components,):
        raise InvalidInputError(
            "Expected {} mole fractions. Got {}".format(num_components,
                                                        x.tolist()))
    if np.any(x < 0.0):
        raise InvalidInputError("Mole fractions can not be negative. "
                                "Got {}".format(x.tolist()))
    if abs(np.sum(x) - 1.0) > tol:
        raise InvalidInputError("Mole fractions have to sum to one. "
                                "Got {}".format(x.tolist()))
    return x


def point_cfs(mole_fractions, num_components):
    """
    Point correlation functions <s^p> = sum_i x_i*basis_i**p

    :return: Array of length K where entry p corresponds to the power p
        (entry 0 is always 1)
    """
    x = check_mole_fractions(mole_fractions, num_components)
    basis = np.array(site_operator_basis(num_components), dtype=float)
    return np.array([np.sum(x * basis**p) for p in range(num_components)])


def random_cfs(mole_fractions, cmatrix):
    """
    Independent CFs of the fully disordered state

    In the random state every CF factorizes into the product of the
    point CFs of its decorations.
    """
    points = point_cfs(mole_fractions, cmatrix.num_components)
    u = np.ones(cmatrix.ncf)
    for col in range(cmatrix.ncf):
        for power in cmatrix.cf_basis_indices[col]:
            u[col] *= points[power]
    return u


def full_cf_vector(u, mole_fractions, cmatrix):
    """
    Append the point CFs determined by the composition to the independent
    CFs
    """
    u = np.asarray(u, dtype=float)
    if u.shape != (cmatrix.ncf,):
        raise InvalidInputError(
            "Expected {} independent CFs. Got shape {}".format(cmatrix.ncf,
                                                                u.shape))
    points = point_cfs(mole_fractions, cmatrix.num_components)
    full = np.zeros(cmatrix.tcf)
    full[:cmatrix.ncf] = u
    for col in range(cmatrix.ncf, cmatrix.tcf):
        full[col] = points[cmatrix.cf_basis_indices[col][0]]
    return full


def evaluate(u, mole_fractions, cmatrix):
    """
    Compute all cluster variables

    :param u: Independent CFs (length ncf)
    :param mole_fractions: Composition
    :param cmatrix: CMatrix
    :return: Dictionary (t, j) -> array of cluster variables
    """
    full = full_cf_vector(u, mole_fractions, cmatrix)
    tcf = cmatrix.tcf
    cvs = {}
    for t, j in cmatrix.keys():
        block = cmatrix.block(t, j)
        cvs[(t, j)] = block[:, :tcf].dot(full) + block[:, tcf]
    return cvs
