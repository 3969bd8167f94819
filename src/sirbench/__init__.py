"""SIRBench, importance sampling benchmarks on an SIR epidemic model.

Synthetic counts are generated from an SIR ODE solved with diffrax, a
posterior is fitted with numpyro NUTS, and importance sampling estimators of
the posterior mean that draw from the prior or from a fitted posterior
approximation are compared by effective sample size, variance and speed.
"""

import importlib

from . import config, importance, infer, simulation, typing, utils

# Defines all the different modules able to be imported from src
__all__ = ["config", "importance", "infer", "simulation", "typing", "utils"]
submodules = ["config", "importance", "infer", "simulation", "typing", "utils"]
# Append the __all__ of all submodules to the main __all__
for submodule in submodules:
    module = importlib.import_module(f".{submodule}", package="sirbench")
    if hasattr(module, "__all__"):
        for attr in module.__all__:
            globals()[attr] = getattr(module, attr)
            __all__.append(attr)
# effectively flattens all submodules into the sirbench namespace.
