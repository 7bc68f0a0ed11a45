import unittest
import numpy as np
from cecvm.cvm.basis import site_operator_basis, r_matrix, vandermonde
from cecvm.cvm.linalg import solve_linear, invert
from cecvm.cvm.linalg import is_positive_definite, solve_positive_definite
from cecvm.errors import InvalidInputError, SingularMatrixError


class TestBasis(unittest.TestCase):
    def test_basis_values(self):
        self.assertEqual(site_operator_basis(2), [-1, 1])
        self.assertEqual(site_operator_basis(3), [-1, 0, 1])
        self.assertEqual(site_operator_basis(4), [-2, -1, 1, 2])
        self.assertEqual(site_operator_basis(5), [-2, -1, 0, 1, 2])

    def test_invalid_number_of_components(self):
        with self.assertRaises(InvalidInputError):
            site_operator_basis(1)

    def test_r_matrix_is_inverse(self):
        for k in range(2, 6):
            r = r_matrix(k)
            m = vandermonde(k)
            self.assertTrue(np.allclose(r.dot(m), np.identity(k)))

    def test_occupation_indicators(self):
        # p_e evaluated at the spin of component e' is delta(e, e')
        for k in range(2, 5):
            r = r_matrix(k)
            basis = site_operator_basis(k)
            for e in range(k):
                for e2, spin in enumerate(basis):
                    value = sum(r[e, a] * float(spin)**a for a in range(k))
                    self.assertAlmostEqual(value, 1.0 if e == e2 else 0.0)

    def test_binary_r_matrix(self):
        self.assertTrue(np.allclose(r_matrix(2), [[0.5, -0.5], [0.5, 0.5]]))

    def test_r_matrix_read_only(self):
        r = r_matrix(3)
        with self.assertRaises(ValueError):
            r[0, 0] = 2.0


class TestLinearSolve(unittest.TestCase):
    def test_residual(self):
        prng = np.random.RandomState(42)
        for n in [1, 3, 10, 25]:
            a = prng.rand(n, n) + n * np.identity(n)
            b = prng.rand(n)
            x = solve_linear(a, b)
            self.assertLess(np.linalg.norm(a.dot(x) - b), 1E-10)

    def test_needs_pivoting(self):
        a = [[0.0, 1.0], [1.0, 0.0]]
        x = solve_linear(a, [2.0, 3.0])
        self.assertTrue(np.allclose(x, [3.0, 2.0]))

    def test_singular(self):
        with self.assertRaises(SingularMatrixError):
            solve_linear([[1.0, 2.0], [2.0, 4.0]], [1.0, 2.0])

    def test_singular_is_invalid_input(self):
        with self.assertRaises(InvalidInputError):
            solve_linear(np.zeros((3, 3)), np.ones(3))

    def test_dimension_mismatch(self):
        with self.assertRaises(InvalidInputError):
            solve_linear(np.identity(3), np.ones(2))
        with self.assertRaises(InvalidInputError):
            solve_linear(np.ones((2, 3)), np.ones(2))

    def test_invert(self):
        a = np.array([[4.0, 1.0], [2.0, 3.0]])
        self.assertTrue(np.allclose(invert(a).dot(a), np.identity(2)))
        with self.assertRaises(SingularMatrixError):
            invert([[1.0, 1.0], [1.0, 1.0]])


class TestPositiveDefiniteSolve(unittest.TestCase):
    def test_is_positive_definite(self):
        self.assertTrue(is_positive_definite([[2.0, 1.0], [1.0, 2.0]]))
        self.assertFalse(is_positive_definite([[1.0, 2.0], [2.0, 1.0]]))
        self.assertFalse(is_positive_definite(np.zeros((2, 2))))

    def test_no_shift_for_positive_definite(self):
        a = np.array([[4.0, 1.0], [1.0, 3.0]])
        x, shift = solve_positive_definite(a, [1.0, 2.0])
        self.assertEqual(shift, 0.0)
        self.assertTrue(np.allclose(a.dot(x), [1.0, 2.0]))

    def test_indefinite_matrix_is_shifted(self):
        a = np.array([[4.0, 0.0], [0.0, -2.0]])
        b = np.array([-1.0, -1.0])
        x, shift = solve_positive_definite(a, b)
        self.assertGreater(shift, 2.0)
        shifted = a + shift * np.identity(2)
        self.assertTrue(np.allclose(shifted.dot(x), b))
        # The solution is a descent direction of x^T a x/2 - b^T x
        self.assertGreater(np.dot(b, x), 0.0)

    def test_dimension_mismatch(self):
        with self.assertRaises(InvalidInputError):
            solve_positive_definite(np.ones((2, 3)), np.ones(2))
        with self.assertRaises(InvalidInputError):
            solve_positive_definite(np.identity(3), np.ones(2))


if __name__ == "__main__":
    from cecvm import TimeLoggingTestRunner
    unittest.main(testRunner=TimeLoggingTestRunner)
