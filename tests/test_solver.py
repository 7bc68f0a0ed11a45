import unittest
import numpy as np
try:
    from helper_functions import get_model, nn_pair_eci
    from cecvm.cvm.free_energy import CVMFreeEnergy
    from cecvm.cvm.newton_raphson import NewtonRaphsonSolver
    from cecvm.cvm.observers import ConvergenceTracker, CFHistory
    from cecvm.cvm.cluster_variables import random_cfs
    from cecvm.errors import InvalidInputError
    from cecvm import solve
    available = True
    reason = ""
except ImportError as exc:
    available = False
    reason = str(exc)
    print(str(exc))


class TestBinarySolver(unittest.TestCase):
    def setUp(self):
        if not available:
            self.skipTest(reason)
        self.model = get_model("A2")

    def check_physical(self, res):
        self.assertTrue(res.converged)
        self.assertLess(res.gradient_norm, 1E-8)
        self.assertTrue(np.all(res.u >= -1.0 - 1E-12))
        self.assertTrue(np.all(res.u <= 1.0 + 1E-12))
        for cv in res.cluster_variables.values():
            self.assertTrue(np.all(cv >= -1E-10))

    def test_nearest_neighbour_pair(self):
        eci = nn_pair_eci(self.model)
        self.assertEqual(eci, [0.0, 0.0, -1.0, 0.0])
        res = self.model.solve([0.5, 0.5], 6.2, eci)
        self.check_physical(res)
        self.assertGreater(res.S, 0.0)
        self.assertLess(res.S, np.log(2.0))
        self.assertLess(res.G, 0.0)
        self.assertAlmostEqual(res.G, res.H - 6.2 * res.S)

    def test_two_pair_interactions(self):
        res = self.model.solve([0.5, 0.5], 6.2, [0.0, 0.0, -1.0, -0.5])
        self.check_physical(res)
        self.assertGreater(res.S, 0.0)
        self.assertLess(res.G, 0.0)

    def test_off_stoichiometric(self):
        res = self.model.solve([0.3, 0.7], 8.0, nn_pair_eci(self.model))
        self.check_physical(res)
        point = res.cluster_variables[(4, 0)]
        self.assertTrue(np.allclose(sorted(point), [0.3, 0.7]))

    def test_high_temperature_limit(self):
        eci = nn_pair_eci(self.model)
        deviation = []
        for T in [10.0, 50.0, 100.0, 1000.0]:
            res = self.model.solve([0.5, 0.5], T, eci)
            self.assertTrue(res.converged)
            deviation.append(abs(res.S - np.log(2.0)))
        for i in range(1, len(deviation)):
            self.assertLess(deviation[i], deviation[i - 1])
        self.assertLess(deviation[-1], 1E-5)

    def test_zero_eci_stays_random(self):
        res = self.model.solve([0.2, 0.8], 1.0, np.zeros(4))
        self.assertTrue(res.converged)
        self.assertEqual(res.iterations, 0)
        expect = -0.2 * np.log(0.2) - 0.8 * np.log(0.8)
        self.assertAlmostEqual(res.S, expect)

    def test_warm_start(self):
        eci = nn_pair_eci(self.model)
        cold = self.model.solve([0.5, 0.5], 7.0, eci)
        warm = self.model.solve([0.5, 0.5], 7.0, eci, u0=cold.u)
        self.assertTrue(warm.converged)
        self.assertLessEqual(warm.iterations, 1)
        self.assertTrue(np.allclose(warm.u, cold.u))

    def test_module_level_solve(self):
        m = self.model
        res = solve([0.5, 0.5], 6.2, nn_pair_eci(m), m.clusters, m.cfs,
                    m.cmatrix)
        ref = m.solve([0.5, 0.5], 6.2, nn_pair_eci(m))
        self.assertAlmostEqual(res.G, ref.G)

    def test_invalid_input(self):
        eci = nn_pair_eci(self.model)
        with self.assertRaises(InvalidInputError):
            self.model.solve([0.6, 0.6], 6.2, eci)
        with self.assertRaises(InvalidInputError):
            self.model.solve([1.2, -0.2], 6.2, eci)
        with self.assertRaises(InvalidInputError):
            self.model.solve([0.5, 0.5], 0.0, eci)
        with self.assertRaises(InvalidInputError):
            self.model.solve([0.5, 0.5], -1.0, eci)
        with self.assertRaises(InvalidInputError):
            self.model.solve([0.5, 0.5], 6.2, eci[:2])
        with self.assertRaises(InvalidInputError):
            self.model.solve([0.5, 0.5], 6.2, eci, u0=[0.0, 0.0])

    def test_result_to_dict(self):
        res = self.model.solve([0.5, 0.5], 6.2, nn_pair_eci(self.model))
        data = res.to_dict()
        self.assertEqual(len(data["u"]), 4)
        self.assertTrue(data["converged"])
        self.assertEqual(data["mole_fractions"], [0.5, 0.5])
        self.assertIn("4_0", data["cluster_variables"])


class TestSolverObservers(unittest.TestCase):
    def setUp(self):
        if not available:
            self.skipTest(reason)
        model = get_model("A2")
        self.free_energy = CVMFreeEnergy(model.clusters, model.cfs,
                                         model.cmatrix, nn_pair_eci(model))

    def test_convergence_tracker(self):
        solver = NewtonRaphsonSolver(self.free_energy)
        tracker = ConvergenceTracker()
        history = CFHistory()
        solver.attach(tracker)
        solver.attach(history)
        res = solver.solve([0.5, 0.5], 6.2)
        data = tracker.get_history()
        self.assertEqual(len(data["G"]), res.iterations + 1)
        self.assertEqual(len(history.cf), res.iterations + 1)
        self.assertLess(data["gradient_norm"][-1], 1E-8)
        self.assertTrue(np.allclose(history.cf[-1], res.u))
        tracker.reset()
        self.assertEqual(tracker.get_history()["G"].size, 0)

    def test_interval(self):
        solver = NewtonRaphsonSolver(self.free_energy)
        tracker = ConvergenceTracker()
        solver.attach(tracker, interval=2)
        solver.solve([0.5, 0.5], 6.2)
        self.assertTrue(all(i % 2 == 0 for i in tracker.iterations))

    def test_attach_non_callable(self):
        solver = NewtonRaphsonSolver(self.free_energy)
        with self.assertRaises(ValueError):
            solver.attach(5)

    def test_not_converged(self):
        solver = NewtonRaphsonSolver(self.free_energy, max_iter=1)
        res = solver.solve([0.5, 0.5], 6.2)
        self.assertFalse(res.converged)
        self.assertEqual(res.iterations, 1)
        self.assertGreater(res.gradient_norm, 1E-10)

    def test_invalid_parameters(self):
        with self.assertRaises(InvalidInputError):
            NewtonRaphsonSolver(self.free_energy, step=0.0)
        with self.assertRaises(InvalidInputError):
            NewtonRaphsonSolver(self.free_energy, max_iter=0)

    def test_log_mode(self):
        solver = NewtonRaphsonSolver(self.free_energy)
        with self.assertRaises(ValueError):
            solver.log("message", mode="critical")


class TestB2Solver(unittest.TestCase):
    def setUp(self):
        if not available:
            self.skipTest(reason)
        self.model = get_model("B2")

    def test_ordering_interaction(self):
        # A positive nearest neighbour ECI favours unlike neighbours
        eci = nn_pair_eci(self.model, value=1.0)
        res = self.model.solve([0.5, 0.5], 20.0, eci)
        self.assertTrue(res.converged)
        self.assertGreater(res.S, 0.0)
        for cv in res.cluster_variables.values():
            self.assertTrue(np.all(cv >= -1E-10))

    def test_ordered_below_transition(self):
        eci = nn_pair_eci(self.model, value=1.0)
        pair_cols = [i for i, v in enumerate(eci) if v != 0.0]
        for T in [4.0, 3.0]:
            res = self.model.solve([0.5, 0.5], T, eci)
            self.assertTrue(res.converged)
            self.assertGreater(res.S, 0.0)
            for cv in res.cluster_variables.values():
                self.assertTrue(np.all(cv >= -1E-10))
            for col in pair_cols:
                self.assertLess(res.u[col], 0.0)

            # The two sublattices have different occupations
            points = [cv for (t, j), cv in
                      sorted(res.cluster_variables.items()) if t == 4]
            self.assertEqual(len(points), 2)
            self.assertFalse(np.allclose(points[0], points[1], atol=0.1))

    def test_minimum_check(self):
        eci = nn_pair_eci(self.model, value=1.0)
        free_energy = CVMFreeEnergy(self.model.clusters, self.model.cfs,
                                    self.model.cmatrix, eci)
        solver = NewtonRaphsonSolver(free_energy)
        res = solver.solve([0.5, 0.5], 4.0)
        terms = free_energy.evaluate(res.u, [0.5, 0.5], 4.0)
        self.assertTrue(solver._is_minimum(terms))

        # A pair correlation below -1 gives negative pair probabilities
        u = random_cfs([0.5, 0.5], self.model.cmatrix)
        for col, value in enumerate(eci):
            if value != 0.0:
                u[col] = -2.0
        terms = free_energy.evaluate(u, [0.5, 0.5], 4.0)
        self.assertFalse(solver._is_minimum(terms))


class TestFCCSolver(unittest.TestCase):
    def setUp(self):
        if not available:
            self.skipTest(reason)
        self.model = get_model("A1")

    def test_nearest_neighbour_pair(self):
        res = self.model.solve([0.5, 0.5], 20.0, nn_pair_eci(self.model))
        self.assertTrue(res.converged)
        self.assertLess(res.S, np.log(2.0))


if __name__ == "__main__":
    from cecvm import TimeLoggingTestRunner
    unittest.main(testRunner=TimeLoggingTestRunner)
