"""Damped Newton-Raphson solver for the equilibrium correlation functions."""
import logging
from collections import namedtuple
import numpy as np
from cecvm.errors import InvalidInputError, SingularMatrixError
from cecvm.cvm.cluster_variables import random_cfs, check_mole_fractions
from cecvm.cvm.linalg import solve_linear, solve_positive_definite
from cecvm.cvm.linalg import is_positive_definite

# Positive cluster variables are not pushed below this value
CV_FLOOR = 1E-12

# Cluster variables below -NEGATIVE_CV_TOL make a state unphysical
NEGATIVE_CV_TOL = 1E-10

# Sufficient decrease parameter of the line search
ARMIJO = 1E-4

# Relative change of G that is indistinguishable from rounding errors
ROUNDOFF = 1E-13

# Newton steps shorter than this (relative to |u|) end the iteration
STAGNATION_TOL = 1E-14

IterationInfo = namedtuple("IterationInfo",
                           ["iteration", "u", "G", "gradient_norm",
                            "step_length"])


class SolverResult(namedtuple("SolverResult",
                              ["u", "G", "H", "S", "iterations",
                               "gradient_norm", "converged", "temperature",
                               "mole_fractions", "cluster_variables"])):
    """Equilibrium state found by the Newton-Raphson solver."""

    def to_dict(self):
        """Return a JSON serializable dictionary."""
        cvs = {}
        for (t, j), cv in self.cluster_variables.items():
            cvs["{}_{}".format(t, j)] = cv.tolist()
        return {
            "u": self.u.tolist(),
            "G": float(self.G),
            "H": float(self.H),
            "S": float(self.S),
            "iterations": self.iterations,
            "gradient_norm": float(self.gradient_norm),
            "converged": self.converged,
            "temperature": float(self.temperature),
            "mole_fractions": self.mole_fractions.tolist(),
            "cluster_variables": cvs
        }


class NewtonRaphsonSolver(object):
    """
    Find the stationary point of the CVM free energy

    The Newton step is damped by a constant factor, shortened further
    when it would drive a positive cluster variable below CV_FLOOR and
    halved until G decreases. An indefinite Hessian is shifted until it is
    positive definite, so every step is a descent direction.
    Failing to converge is reported through SolverResult.converged.

    :param free_energy: Instance of CVMFreeEnergy
    :param step: Damping factor applied to every Newton step
    :param max_iter: Maximum number of iterations
    :param tol: Convergence threshold on the norm of the gradient,
        relative to max(1, R*T, max|Hcu|)
    :param min_step: Smallest accepted step length
    :param logfile: Filename for logging (default is logging to console)
    """

    def __init__(self, free_energy, step=0.99, max_iter=200, tol=1E-10,
                 min_step=1E-6, logfile=""):
        if step <= 0.0:
            raise InvalidInputError("The step has to be positive")
        if max_iter < 1:
            raise InvalidInputError("max_iter has to be at least 1")
        self.name = "NewtonRaphson"
        self.free_energy = free_energy
        self.step = step
        self.max_iter = max_iter
        self.tol = tol
        self.min_step = min_step
        self.observers = []

        self.logger = logging.getLogger("NewtonRaphson")
        self.logger.setLevel(logging.DEBUG)
        if logfile == "":
            ch = logging.StreamHandler()
        else:
            ch = logging.FileHandler(logfile)
        ch.setLevel(logging.INFO)
        if not self.logger.handlers:
            self.logger.addHandler(ch)

    def log(self, msg, mode="info"):
        """
        Logs the message as info
        """
        allowed_modes = ["info", "warning", "debug"]
        if mode not in allowed_modes:
            raise ValueError("Mode has to be one of {}".format(allowed_modes))

        if mode == "info":
            self.logger.info(msg)
        elif mode == "warning":
            self.logger.warning(msg)
        else:
            self.logger.debug(msg)

    def attach(self, obs, interval=1):
        """
        Attach observers that are called during the iterations

        :param obs: Instance of SolverObserver (or any callable)
        :param interval: obs.__call__ is called every interval iteration
        """
        if callable(obs):
            self.observers.append((interval, obs))
        else:
            raise ValueError("The observer has to be a callable class!")

    def _notify(self, info):
        for interval, obs in self.observers:
            if info.iteration % interval == 0:
                obs(info)

    def _step_length(self, cvs, delta):
        """Largest step that keeps positive cluster variables positive."""
        cmat = self.free_energy.cmatrix
        ncf = cmat.ncf
        alpha = min(self.step, 1.0)
        for key, cv in cvs.items():
            dcv = cmat.block(*key)[:, :ncf].dot(delta)
            mask = np.logical_and(cv > CV_FLOOR, dcv < -1E-30)
            if np.any(mask):
                limit = np.min((cv[mask] - CV_FLOOR) / (-dcv[mask]))
                alpha = min(alpha, limit)
        return max(alpha, self.min_step)

    def _newton_direction(self, terms, iteration):
        """
        Newton direction, with the Hessian shifted towards the identity
        when it is not positive definite so the direction lowers G
        """
        if is_positive_definite(terms.Gcuu):
            return solve_linear(terms.Gcuu, -terms.Gcu)
        delta, shift = solve_positive_definite(terms.Gcuu, -terms.Gcu)
        self.log("Iteration {}: Hessian is not positive definite. Shifted "
                 "by {:.3E}".format(iteration, shift), mode="debug")
        return delta

    def _line_search(self, u, delta, terms, mole_fractions, temperature,
                     alpha):
        """Halve the step until G decreases sufficiently."""
        slope = np.dot(terms.Gcu, delta)
        noise = ROUNDOFF * max(1.0, abs(terms.G))
        while True:
            trial = self.free_energy.evaluate(u + alpha * delta,
                                              mole_fractions, temperature)
            if trial.G <= terms.G + ARMIJO * alpha * slope + noise:
                return alpha, trial
            if alpha <= self.min_step:
                return alpha, trial
            alpha = max(0.5 * alpha, self.min_step)

    def _gradient_scale(self, temperature):
        """Size of the terms that make up the gradient."""
        f = self.free_energy
        return max(1.0, temperature * f.gas_constant,
                   np.max(np.abs(f.Hcu), initial=0.0))

    def _is_minimum(self, terms):
        """A converged state needs non-negative CVs and a convex G."""
        min_cv = min(np.min(cv) for cv in terms.cluster_variables.values())
        if min_cv < -NEGATIVE_CV_TOL:
            self.log("Stationary point has a negative cluster variable "
                     "({:.3E})".format(min_cv), mode="debug")
            return False
        if not is_positive_definite(terms.Gcuu):
            self.log("Stationary point is a saddle point of G",
                     mode="debug")
            return False
        return True

    def _leave_saddle(self, u, terms, mole_fractions, temperature):
        """
        Step along the eigenvector of the lowest Hessian eigenvalue

        :return: Step length, direction and the new terms, or None if G
            has no negative curvature or does not decrease along it
        """
        eigval, eigvec = np.linalg.eigh(terms.Gcuu)
        if eigval[0] >= 0.0:
            return None
        direction = eigvec[:, 0]
        if np.dot(terms.Gcu, direction) > 0.0:
            direction = -direction

        alpha = self._step_length(terms.cluster_variables, direction)
        noise = ROUNDOFF * max(1.0, abs(terms.G))
        while alpha >= self.min_step:
            trial = self.free_energy.evaluate(u + alpha * direction,
                                              mole_fractions, temperature)
            if trial.G < terms.G - noise:
                self.log("Left saddle point along the direction of "
                         "curvature {:.3E}".format(eigval[0]), mode="debug")
                return alpha, direction, trial
            alpha *= 0.5
        return None

    def solve(self, mole_fractions, temperature, u0=None):
        """
        Run the Newton-Raphson iterations

        The iteration reaches a stationary point when the gradient norm is
        below tol*max(1, R*T, max|Hcu|) or when the Newton step vanishes.
        A stationary point with negative curvature is left along the
        direction of the lowest Hessian eigenvalue. The result only counts
        as converged at a minimum of G with non-negative cluster variables.

        :param mole_fractions: Composition (sums to one)
        :param temperature: Temperature
        :param u0: Initial guess. Default is the random state.
        """
        cmat = self.free_energy.cmatrix
        x = check_mole_fractions(mole_fractions, cmat.num_components)
        if temperature <= 0.0:
            raise InvalidInputError("The temperature has to be positive. "
                                    "Got {}".format(temperature))
        if u0 is None:
            u = random_cfs(x, cmat)
        else:
            u = np.array(u0, dtype=float)
            if u.shape != (cmat.ncf,):
                raise InvalidInputError(
                    "Initial guess needs {} CFs. Got shape {}".format(
                        cmat.ncf, u.shape))

        tol = self.tol * self._gradient_scale(temperature)
        converged = False
        iteration = 0
        alpha = 0.0
        terms = self.free_energy.evaluate(u, x, temperature)
        grad_norm = np.linalg.norm(terms.Gcu)
        while True:
            self._notify(IterationInfo(iteration=iteration, u=u.copy(),
                                       G=terms.G, gradient_norm=grad_norm,
                                       step_length=alpha))
            stationary = grad_norm < tol
            if not stationary:
                if iteration >= self.max_iter:
                    break
                try:
                    delta = self._newton_direction(terms, iteration)
                except SingularMatrixError as exc:
                    self.log("Singular Hessian at iteration {}: {}".format(
                        iteration, str(exc)), mode="warning")
                    break
                # Only rounding noise is left in the gradient
                stationary = np.linalg.norm(delta) < STAGNATION_TOL * max(
                    1.0, np.linalg.norm(u))

            if stationary:
                if self._is_minimum(terms):
                    converged = True
                    break
                if iteration >= self.max_iter:
                    break
                step = self._leave_saddle(u, terms, x, temperature)
                if step is None:
                    break
                alpha, delta, terms = step
            else:
                alpha = self._step_length(terms.cluster_variables, delta)
                alpha, terms = self._line_search(u, delta, terms, x,
                                                 temperature, alpha)

            u = u + alpha * delta
            iteration += 1
            grad_norm = np.linalg.norm(terms.Gcu)
            self.log("Iteration {}: G={:.8E} |Gcu|={:.3E} step={:.3E}".format(
                iteration, terms.G, grad_norm, alpha), mode="debug")

        if converged:
            self.log("Converged after {} iterations at T={}. G={:.8E}, "
                     "S={:.8E}".format(iteration, temperature, terms.G,
                                       terms.S), mode="debug")
        else:
            self.log("Newton-Raphson stopped after {} iterations at T={} "
                     "without reaching a minimum of G. |Gcu|={:.3E}".format(
                         iteration, temperature, grad_norm), mode="warning")

        return SolverResult(u=u, G=terms.G, H=terms.H, S=terms.S,
                            iterations=iteration, gradient_norm=grad_norm,
                            converged=converged, temperature=temperature,
                            mole_fractions=x,
                            cluster_variables=terms.cluster_variables)
