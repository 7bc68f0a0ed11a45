import json
import logging
import numpy as np
from cecvm.errors import InvalidInputError


class TemperatureSweep(object):
    """
    Solve the CVM equations along a path in temperature or composition

    Each point starts from the solution of the previous one. If that
    fails to converge the point is solved again from the random state.

    :param model: Instance of CVMModel
    :param eci: ECIs (array or ECISet)
    :param logfile: Filename for logging (default is logging to console)
    :param solver_kwargs: Passed to the Newton-Raphson solver
    """

    def __init__(self, model, eci, logfile="", **solver_kwargs):
        self.name = "TemperatureSweep"
        self.model = model
        self.eci = eci
        self.solver_kwargs = solver_kwargs
        self.results = []
        self.logger = logging.getLogger("TemperatureSweep")
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
        allowed_modes = ["info", "warning"]
        if mode not in allowed_modes:
            raise ValueError("Mode has to be one of {}".format(allowed_modes))

        if mode == "info":
            self.logger.info(msg)
        elif mode == "warning":
            self.logger.warning(msg)

    def _solve_point(self, mole_fractions, temperature, u0):
        res = self.model.solve(mole_fractions, temperature, self.eci, u0=u0,
                               **self.solver_kwargs)
        if not res.converged and u0 is not None:
            self.log("T={}, x={}: warm start did not converge. Restarting "
                     "from the random state".format(
                         temperature, list(mole_fractions)), mode="warning")
            res = self.model.solve(mole_fractions, temperature, self.eci,
                                   **self.solver_kwargs)
        return res

    def run(self, temperatures, mole_fractions):
        """
        Sweep over temperatures at fixed composition

        :param temperatures: List of temperatures (solved in the given order)
        :param mole_fractions: Composition
        """
        if len(temperatures) == 0:
            raise InvalidInputError("No temperatures given")
        results = []
        u0 = None
        for T in temperatures:
            res = self._solve_point(mole_fractions, T, u0)
            self.log("T={:.4f}: G={:.6E} S={:.6E} converged={}".format(
                T, res.G, res.S, res.converged))
            if res.converged:
                u0 = res.u
            results.append(res)
        self.results += results
        return results

    def run_composition(self, temperature, compositions):
        """
        Sweep over compositions at fixed temperature

        :param temperature: Temperature
        :param compositions: List of mole fraction vectors
        """
        if len(compositions) == 0:
            raise InvalidInputError("No compositions given")
        results = []
        u0 = None
        for x in compositions:
            res = self._solve_point(x, temperature, u0)
            self.log("x={}: G={:.6E} S={:.6E} converged={}".format(
                list(x), res.G, res.S, res.converged))
            if res.converged:
                u0 = res.u
            results.append(res)
        self.results += results
        return results

    def as_arrays(self):
        """Return the stored results as a dictionary of arrays."""
        return {
            "temperature": np.array([r.temperature for r in self.results]),
            "G": np.array([r.G for r in self.results]),
            "H": np.array([r.H for r in self.results]),
            "S": np.array([r.S for r in self.results]),
            "converged": np.array([r.converged for r in self.results])
        }

    def save(self, fname):
        """Store all results in a JSON file."""
        with open(fname, 'w') as outfile:
            json.dump([r.to_dict() for r in self.results], outfile,
                      indent=2)
