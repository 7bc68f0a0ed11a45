"""
This example shows how to set up a calculation for the ordered B2 (CsCl)
phase on the BCC lattice of a ternary alloy

Features
1. Ordered phase described relative to the disordered reference
2. Identification summary of clusters and correlation functions
"""
import numpy as np
from cecvm import CVMConfiguration, CVMModel

config = CVMConfiguration(reference_clusters="A2-T",
                          reference_symmetry="A2-SG",
                          ordered_clusters="B2-T",
                          ordered_symmetry="B2-SG",
                          num_components=3)
model = CVMModel(config)

summary = model.summary()
print("Cluster types: {}".format(summary["tcdis"]))
print("Cluster groups per type: {}".format(summary["lc"]))
print("Independent correlation functions: {}".format(summary["ncf"]))

eci = np.zeros(model.num_eci)
res = model.solve([0.2, 0.3, 0.5], 10.0, eci)
print("Entropy of the random state: {:.6f}".format(res.S))
