"""Dense linear algebra with explicit singularity checks."""
import warnings
import numpy as np
from scipy.linalg import lu_factor, lu_solve, LinAlgWarning
from scipy.linalg import cho_factor, cho_solve, LinAlgError
from cecvm.errors import InvalidInputError, SingularMatrixError

# Pivots smaller than this make a linear system singular
SOLVE_PIVOT_TOL = 1E-30

# Pivots smaller than this make a matrix non-invertible
INVERSE_PIVOT_TOL = 1E-12


def _factorize(matrix, pivot_tol):
    matrix = np.array(matrix, dtype=float)
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        raise InvalidInputError("Expected a square matrix. Got shape "
                                "{}".format(matrix.shape))
    if not np.all(np.isfinite(matrix)):
        raise InvalidInputError("The matrix contains NaN or inf")

    with warnings.catch_warnings():
        # Exactly singular matrices are reported below
        warnings.simplefilter("ignore", LinAlgWarning)
        lu, piv = lu_factor(matrix)

    pivots = np.abs(np.diag(lu))
    small = np.nonzero(pivots < pivot_tol)[0]
    if len(small) > 0:
        raise SingularMatrixError(
            "Matrix of shape {} is singular. Pivot {} is {:.3e} "
            "(threshold {:.1e})".format(matrix.shape, small[0],
                                        pivots[small[0]], pivot_tol))
    return lu, piv


def solve_linear(matrix, rhs, pivot_tol=SOLVE_PIVOT_TOL):
    """
    Solve matrix*x = rhs by LU decomposition with partial pivoting

    :param matrix: Square matrix
    :param rhs: Right hand side (vector or matrix)
    :param pivot_tol: Smallest accepted pivot
    """
    lu, piv = _factorize(matrix, pivot_tol)
    rhs = np.array(rhs, dtype=float)
    if rhs.ndim == 0 or rhs.shape[0] != lu.shape[0]:
        raise InvalidInputError(
            "Right hand side has shape {}, but the matrix has {} "
            "rows".format(rhs.shape, lu.shape[0]))
    return lu_solve((lu, piv), rhs)


def invert(matrix, pivot_tol=INVERSE_PIVOT_TOL):
    """Return the inverse of a square matrix."""
    lu, piv = _factorize(matrix, pivot_tol)
    return lu_solve((lu, piv), np.identity(lu.shape[0]))


def is_positive_definite(matrix):
    """Return True if the symmetric matrix has a Cholesky factorization."""
    try:
        cho_factor(matrix)
    except LinAlgError:
        return False
    return True


def solve_positive_definite(matrix, rhs, initial_shift=1E-10,
                            max_shift=1E10):
    """
    Solve (matrix + mu*I)*x = rhs for the smallest tried shift mu that makes
    the shifted matrix positive definite

    The shift starts at zero, then initial_shift times the largest diagonal
    element, and grows by a factor of 10.

    :param matrix: Symmetric matrix
    :param rhs: Right hand side
    :return: Solution and the shift that was used
    """
    matrix = np.array(matrix, dtype=float)
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        raise InvalidInputError("Expected a square matrix. Got shape "
                                "{}".format(matrix.shape))
    rhs = np.array(rhs, dtype=float)
    if rhs.ndim == 0 or rhs.shape[0] != matrix.shape[0]:
        raise InvalidInputError(
            "Right hand side has shape {}, but the matrix has {} "
            "rows".format(rhs.shape, matrix.shape[0]))

    scale = max(1.0, np.max(np.abs(np.diag(matrix))))
    identity = np.identity(matrix.shape[0])
    shift = 0.0
    while shift <= max_shift * scale:
        try:
            factor = cho_factor(matrix + shift * identity)
        except LinAlgError:
            shift = initial_shift * scale if shift == 0.0 else 10.0 * shift
            continue
        return cho_solve(factor, rhs), shift
    raise SingularMatrixError(
        "No shift up to {:.1e} makes the matrix positive "
        "definite".format(max_shift * scale))
