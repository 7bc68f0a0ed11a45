"""Site-operator basis and the R-matrix of a K component system."""
import numpy as np
from cecvm.errors import InvalidInputError
from cecvm.cvm.linalg import invert


def site_operator_basis(num_components):
    """
    Spin values assigned to the components

    K=2 gives [-1, 1], K=3 gives [-1, 0, 1], K=4 gives [-2, -1, 1, 2].
    """
    if num_components < 2:
        raise InvalidInputError("At least two components are needed. "
                                "Got {}".format(num_components))
    if num_components % 2 == 0:
        half = num_components // 2
        return list(range(-half, 0)) + list(range(1, half + 1))
    half = (num_components - 1) // 2
    return list(range(-half, half + 1))


def vandermonde(num_components):
    """Matrix M[i][j] = basis[j]**i."""
    basis = site_operator_basis(num_components)
    m = np.zeros((num_components, num_components))
    for i in range(num_components):
        for j, spin in enumerate(basis):
            m[i, j] = float(spin)**i
    return m


def r_matrix(num_components):
    """
    Inverse of the Vandermonde matrix of the basis

    The occupation indicator of component e is
    p_e(s) = sum_a R[e][a]*s**a
    """
    r = invert(vandermonde(num_components))
    r.setflags(write=False)
    return r
