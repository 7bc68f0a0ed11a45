"""
This example shows how to compute the equilibrium state of a disordered
binary BCC alloy in the tetrahedron approximation

Features
1. Identify clusters and correlation functions of the A2 phase
2. Build the C-matrix
3. Solve for the correlation functions at a given temperature
"""
import numpy as np
from cecvm import CVMConfiguration, CVMModel

# The packaged BCC tetrahedron and the Im-3m space group
config = CVMConfiguration(reference_clusters="A2-T",
                          reference_symmetry="A2-SG",
                          num_components=2)
model = CVMModel(config)

# One ECI per independent correlation function. The columns are ordered
# tetrahedron, triangle, 1NN pair, 2NN pair
eci = [0.0, 0.0, -1.0, 0.0]

# Temperatures are in the same unit as the ECIs (reduced units)
res = model.solve([0.5, 0.5], 6.2, eci)
print("Converged: {} after {} iterations".format(res.converged,
                                                 res.iterations))
print("G = {:.6f}, H = {:.6f}, S = {:.6f} (ideal {:.6f})".format(
    res.G, res.H, res.S, np.log(2.0)))
print("Correlation functions: {}".format(res.u))

# With ECIs in eV and temperatures in K the entropy is measured in units
# of the Boltzmann constant
from ase.units import kB
res = model.solve([0.5, 0.5], 2000.0, [0.0, 0.0, -0.02, 0.0], gas_constant=kB)
print("At 2000 K: G = {:.6f} eV/atom, S = {:.6e} eV/K atom".format(res.G,
                                                                   res.S))
