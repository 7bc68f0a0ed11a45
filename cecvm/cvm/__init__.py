# Empty file
from cecvm.cvm.basis import site_operator_basis, r_matrix
from cecvm.cvm.linalg import solve_linear, invert
from cecvm.cvm.site_operators import SiteOp, SiteList, SubstitutionRules
from cecvm.cvm.cmatrix import CMatrix, build as build_cmatrix
from cecvm.cvm.cluster_variables import point_cfs, random_cfs
from cecvm.cvm.cluster_variables import full_cf_vector, evaluate
from cecvm.cvm.free_energy import CVMFreeEnergy
from cecvm.cvm.observers import SolverObserver, ConvergenceTracker, CFHistory
from cecvm.cvm.newton_raphson import NewtonRaphsonSolver, SolverResult
