"""A module for typing utilities in SIRBench."""

from .typing import (
    CompartmentGradients,
    CompartmentState,
    Observation,
    ODE_Eqns,
    ParameterDraws,
    SIRName,
    Trajectory,
    WeightSet,
)

__all__ = [
    "CompartmentState",
    "CompartmentGradients",
    "SIRName",
    "ODE_Eqns",
    "Trajectory",
    "Observation",
    "WeightSet",
    "ParameterDraws",
]
