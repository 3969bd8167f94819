"""SIRBench configuration module."""

from .experiment import ExperimentConfig
from .parameter_distribution import SIRParameterDistribution
from .params import ObservationParams, SolverParams
from .pre_packaged import SIRExample, sir_example

__all__ = [
    "SIRParameterDistribution",
    "ObservationParams",
    "SolverParams",
    "ExperimentConfig",
    "SIRExample",
    "sir_example",
]
