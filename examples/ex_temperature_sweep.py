"""
This example shows how to follow the equilibrium state of a binary BCC
alloy on cooling

Features
1. Temperature dependent ECIs
2. Sweep over temperatures where each point starts from the previous
3. Track the convergence of the Newton-Raphson iterations
"""
from cecvm import CVMConfiguration, CVMModel, ECISet
from cecvm.tools import TemperatureSweep
from cecvm.cvm import ConvergenceTracker, CVMFreeEnergy, NewtonRaphsonSolver

config = CVMConfiguration("A2-T", "A2-SG")
model = CVMModel(config)

# ECI(T) = a + b*T for the nearest neighbour pair
eci = ECISet([0.0, 0.0, -1.0, 0.0], b=[0.0, 0.0, 1E-3, 0.0],
             names=["tetrahedron", "triangle", "pair1", "pair2"])

sweep = TemperatureSweep(model, eci)
sweep.run([20.0, 15.0, 10.0, 8.0, 7.0], [0.5, 0.5])
data = sweep.as_arrays()
for T, S in zip(data["temperature"], data["S"]):
    print("T = {:.2f}: S = {:.6f}".format(T, S))

# Observers can be attached to the solver to monitor the iterations
free_energy = CVMFreeEnergy(model.clusters, model.cfs, model.cmatrix,
                            eci.at(7.0, required_length=model.num_eci))
solver = NewtonRaphsonSolver(free_energy)
tracker = ConvergenceTracker()
solver.attach(tracker)
solver.solve([0.5, 0.5], 7.0)
history = tracker.get_history()
print("Gradient norm per iteration: {}".format(history["gradient_norm"]))
