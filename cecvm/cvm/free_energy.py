"""CVM free-energy functional with gradient and Hessian."""
from collections import namedtuple
import numpy as np
from cecvm.errors import InvalidInputError
from cecvm.cvm.cluster_variables import evaluate

# Below this cluster variable p*ln(p) is replaced by its Taylor expansion
EPS = 1E-6

FreeEnergyTerms = namedtuple(
    "FreeEnergyTerms",
    ["G", "H", "S", "Gcu", "Gcuu", "Hcu", "Scu", "Scuu",
     "cluster_variables"])


def smooth_entropy_terms(cv):
    """
    Return p*ln(p), its first and its second derivative

    Below EPS the function is continued by the second order Taylor
    expansion around EPS, which keeps it finite for negative arguments.
    """
    cv = np.asarray(cv, dtype=float)
    above = cv > EPS
    safe = np.where(above, cv, EPS)
    d = cv - EPS
    log_eps = np.log(EPS)
    value = np.where(above, safe * np.log(safe),
                     EPS * log_eps + (1.0 + log_eps) * d + d**2 / (2 * EPS))
    first = np.where(above, 1.0 + np.log(safe), 1.0 + log_eps + d / EPS)
    second = np.where(above, 1.0 / safe, 1.0 / EPS)
    return value, first, second


class CVMFreeEnergy(object):
    """
    Gibbs free energy G = H - T*S of the cluster variation method

    :param cluster_identification: ClusterIdentification
    :param cf_identification: CFIdentification
    :param cmatrix: CMatrix
    :param eci: Effective cluster interactions, one per independent CF
    :param gas_constant: Unit of the entropy. 1 gives reduced units, use
        ase.units.kB for energies in eV and temperatures in K.
    """

    def __init__(self, cluster_identification, cf_identification, cmatrix,
                 eci, gas_constant=1.0):
        self.clusters = cluster_identification
        self.cfs = cf_identification
        self.cmatrix = cmatrix
        eci = np.array(eci, dtype=float)
        if eci.shape != (cmatrix.ncf,):
            raise InvalidInputError(
                "Expected {} ECIs (one per independent CF). Got {}".format(
                    cmatrix.ncf, eci.tolist()))
        if cf_identification.tcf != cmatrix.tcf:
            raise InvalidInputError(
                "The C-matrix has {} CF columns, but {} CFs were "
                "identified".format(cmatrix.tcf, cf_identification.tcf))
        self.eci = eci
        self.gas_constant = gas_constant

        mhdis = cluster_identification.mhdis
        types = cmatrix.cf_types[:cmatrix.ncf]
        self.Hcu = mhdis[types] * self.eci

        # Prefactor kb[t]*mhdis[t]*mh[t][j] of each cluster group
        self.prefactors = {}
        for t, j in cmatrix.keys():
            self.prefactors[(t, j)] = cluster_identification.kb[t] * \
                mhdis[t] * cluster_identification.mh[t][j]

    def enthalpy(self, u):
        return np.dot(self.Hcu, u)

    def evaluate(self, u, mole_fractions, temperature):
        """
        Compute G, H, S and the derivatives with respect to the
        independent CFs

        :param u: Independent CFs
        :param mole_fractions: Composition
        :param temperature: Temperature (same unit as ECI/gas_constant)
        """
        u = np.asarray(u, dtype=float)
        ncf = self.cmatrix.ncf
        cvs = evaluate(u, mole_fractions, self.cmatrix)

        S = 0.0
        Scu = np.zeros(ncf)
        Scuu = np.zeros((ncf, ncf))
        for key, cv in cvs.items():
            prefactor = self.prefactors[key]
            if prefactor == 0.0:
                continue
            w = self.cmatrix.weights(*key)
            cm = self.cmatrix.block(*key)[:, :ncf]
            value, first, second = smooth_entropy_terms(cv)
            S -= prefactor * np.sum(w * value)
            Scu -= prefactor * cm.T.dot(w * first)
            Scuu -= prefactor * (cm.T * (w * second)).dot(cm)

        S *= self.gas_constant
        Scu *= self.gas_constant
        Scuu *= self.gas_constant

        H = self.enthalpy(u)
        G = H - temperature * S
        Gcu = self.Hcu - temperature * Scu
        Gcuu = -temperature * Scuu
        return FreeEnergyTerms(G=G, H=H, S=S, Gcu=Gcu, Gcuu=Gcuu,
                               Hcu=self.Hcu.copy(), Scu=Scu, Scuu=Scuu,
                               cluster_variables=cvs)
