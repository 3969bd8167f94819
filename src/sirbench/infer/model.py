"""Numpyro model of an SIR epidemic observed through noisy counts."""

from typing import Optional

import numpyro

from ..config import ObservationParams, SIRParameterDistribution, SolverParams
from ..simulation import (
    count_distribution,
    resolve_parameters,
    simulate_trajectory,
)
from ..typing import Observation, Trajectory
from .sample import sample_distributions


def sir_model(
    distribution: SIRParameterDistribution,
    observation_params: ObservationParams,
    solver_params: SolverParams,
    obs: Optional[Observation] = None,
) -> Trajectory:
    """Sample free parameters, simulate the infection curve and score `obs`.

    Sites
    -----
    one sample site per free parameter of `distribution`, named after it,
    a deterministic `trajectory` site and an `obs` count site.
    """
    draws = sample_distributions(distribution.free_parameters())
    params = resolve_parameters(distribution, draws)
    trajectory = numpyro.deterministic(
        "trajectory",
        simulate_trajectory(params, observation_params, solver_params),
    )
    numpyro.sample(
        "obs",
        count_distribution(trajectory, observation_params),
        obs=obs,
    )
    return trajectory
