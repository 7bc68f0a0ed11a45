import numpy as np


class SolverObserver(object):
    """Base class for all Newton-Raphson observers."""

    def __init__(self):
        self.name = "GenericObserver"

    def __call__(self, info):
        """
        Gets information about the current iterate

        :param IterationInfo info: Iteration number, CFs, Gibbs energy,
            gradient norm and the step length used to reach the iterate
        """
        pass

    def reset(self):
        """Reset all values of the observer"""
        pass


class ConvergenceTracker(SolverObserver):
    """Track the Gibbs energy and gradient norm of every visited iterate."""

    def __init__(self):
        self.name = "ConvergenceTracker"
        self.iterations = []
        self.gibbs = []
        self.gradient_norm = []
        self.step_length = []

    def __call__(self, info):
        self.iterations.append(info.iteration)
        self.gibbs.append(info.G)
        self.gradient_norm.append(info.gradient_norm)
        self.step_length.append(info.step_length)

    def reset(self):
        self.iterations = []
        self.gibbs = []
        self.gradient_norm = []
        self.step_length = []

    def get_history(self):
        return {
            "iterations": np.array(self.iterations),
            "G": np.array(self.gibbs),
            "gradient_norm": np.array(self.gradient_norm),
            "step_length": np.array(self.step_length)
        }


class CFHistory(SolverObserver):
    """Store the independent correlation functions of every iterate."""

    def __init__(self):
        self.name = "CFHistory"
        self.cf = []

    def __call__(self, info):
        self.cf.append(np.array(info.u))

    def reset(self):
        self.cf = []
