"""Module to hold the SIR ODE, forward simulator and count likelihood."""

from .likelihood import (
    CountDistribution,
    count_distribution,
    count_log_likelihood,
    generate_observations,
)
from .odes import SIRODEParams, simulate, sir_ode
from .trajectory import (
    TRAJECTORY_FLOOR,
    SIRParameters,
    prior_predictive,
    resolve_parameters,
    simulate_trajectory,
)

__all__ = [
    "simulate",
    "sir_ode",
    "SIRODEParams",
    "SIRParameters",
    "TRAJECTORY_FLOOR",
    "resolve_parameters",
    "simulate_trajectory",
    "prior_predictive",
    "CountDistribution",
    "count_distribution",
    "count_log_likelihood",
    "generate_observations",
]
