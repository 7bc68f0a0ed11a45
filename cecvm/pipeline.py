"""Entry points running the identification stages and the solver."""
import logging
import json
from collections import namedtuple
from cecvm.cvm import cmatrix as cmatrix_builder
from cecvm.cvm.free_energy import CVMFreeEnergy
from cecvm.cvm.newton_raphson import NewtonRaphsonSolver
from cecvm.eci import ECISet
from cecvm.identification.cluster_identifier import identify_clusters
from cecvm.identification.cf_identifier import identify_cfs

Identification = namedtuple("Identification", ["clusters", "cfs"])


def identify(config):
    """
    Run the cluster (stage 1) and correlation function (stage 2)
    identification

    :param config: CVMConfiguration
    """
    clusters = identify_clusters(
        config.reference_clusters, config.reference_symmetry,
        config.ordered_clusters, config.ordered_symmetry,
        rotation=config.rotation, translation=config.translation)
    cfs = identify_cfs(
        clusters, config.reference_clusters, config.reference_symmetry,
        config.ordered_clusters, config.ordered_symmetry,
        config.num_components, rotation=config.rotation,
        translation=config.translation)
    return Identification(clusters=clusters, cfs=cfs)


def build_cmatrix(config, identification=None):
    """
    Build the C-matrix of the ordered phase

    :param config: CVMConfiguration
    :param identification: Result of :func:`identify`. Computed if not given.
    """
    if identification is None:
        identification = identify(config)
    return cmatrix_builder.build(identification.clusters, identification.cfs,
                                 config.ordered_clusters,
                                 config.num_components)


def solve(mole_fractions, temperature, eci, stage1, stage2, stage3,
          tolerance=1E-10, gas_constant=1.0, u0=None, **solver_kwargs):
    """
    Find the equilibrium correlation functions

    :param mole_fractions: Composition (sums to one)
    :param temperature: Temperature
    :param eci: One ECI per independent CF, or an ECISet that is evaluated
        at the temperature
    :param stage1: ClusterIdentification
    :param stage2: CFIdentification
    :param stage3: CMatrix
    :param tolerance: Convergence threshold on the gradient norm
    :param gas_constant: Unit of the entropy (1 gives reduced units)
    :param u0: Initial guess (default is the random state)
    :param solver_kwargs: Passed to NewtonRaphsonSolver
    """
    if isinstance(eci, ECISet):
        eci = eci.at(temperature, required_length=stage3.ncf)
    free_energy = CVMFreeEnergy(stage1, stage2, stage3, eci,
                                gas_constant=gas_constant)
    solver = NewtonRaphsonSolver(free_energy, tol=tolerance, **solver_kwargs)
    return solver.solve(mole_fractions, temperature, u0=u0)


class CVMModel(object):
    """
    Identification and C-matrix of one configuration, computed once and
    reused for many temperatures and compositions

    :param config: CVMConfiguration
    :param logfile: Filename for logging (default is logging to console)
    """

    def __init__(self, config, logfile=""):
        self.name = "CVMModel"
        self.config = config
        self.logger = logging.getLogger("CVMModel")
        self.logger.setLevel(logging.DEBUG)
        if logfile == "":
            ch = logging.StreamHandler()
        else:
            ch = logging.FileHandler(logfile)
        ch.setLevel(logging.INFO)
        if not self.logger.handlers:
            self.logger.addHandler(ch)

        self.identification = identify(config)
        self.cmatrix = build_cmatrix(config, self.identification)
        self.log("Model ready: tcdis={}, tcf={}, ncf={}".format(
            self.clusters.tcdis, self.cfs.tcf, self.cfs.ncf))

    @property
    def clusters(self):
        return self.identification.clusters

    @property
    def cfs(self):
        return self.identification.cfs

    @property
    def num_eci(self):
        """Number of ECIs the model requires."""
        return self.cmatrix.ncf

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

    def solve(self, mole_fractions, temperature, eci, tolerance=1E-10,
              **kwargs):
        """Solve for the equilibrium state. See :func:`solve`."""
        return solve(mole_fractions, temperature, eci, self.clusters,
                     self.cfs, self.cmatrix, tolerance=tolerance, **kwargs)

    def summary(self):
        data = {"config": self.config.to_dict()}
        data.update(self.clusters.summary())
        data.update(self.cfs.summary())
        data.update(self.cmatrix.summary())
        return data

    def save_summary(self, fname):
        """Store the identification results in a JSON file."""
        with open(fname, 'w') as outfile:
            json.dump(self.summary(), outfile, indent=2)
