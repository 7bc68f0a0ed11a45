# Empty file
from cecvm.tools.temperature_sweep import TemperatureSweep
