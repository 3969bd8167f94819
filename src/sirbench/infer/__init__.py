"""A module for sampling, posterior fitting and inference in SIRBench."""

from .fit import FittedDistribution, fit_distribution
from .inference import InferenceProcess, MCMCProcess
from .model import sir_model
from .sample import draw_parameters, log_prior_density, sample_distributions

__all__ = [
    "InferenceProcess",
    "MCMCProcess",
    "FittedDistribution",
    "fit_distribution",
    "sir_model",
    "sample_distributions",
    "draw_parameters",
    "log_prior_density",
]
