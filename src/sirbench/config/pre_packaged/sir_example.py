"""A basic SIR experiment setup for demonstration and testing purposes."""

import jax.numpy as jnp
import numpyro.distributions as dist
from pydantic import BaseModel, ConfigDict, model_validator
from typing_extensions import Self

from ..parameter_distribution import SIRParameterDistribution
from ..params import ObservationParams, SolverParams


class SIRExample(BaseModel):
    """True parameters, prior and observation design of one experiment."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    true_parameters: SIRParameterDistribution
    prior: SIRParameterDistribution
    observation_params: ObservationParams
    solver_params: SolverParams

    @model_validator(mode="after")
    def _validate_true_parameters_fixed(self) -> Self:
        assert self.true_parameters.is_fixed, (
            "true_parameters can not contain distributions, found "
            f"{list(self.true_parameters.free_parameters().keys())}"
        )
        return self


def sir_example(
    population_size: float = 10_000.0,
    initial_infected: float = 10.0,
    beta: float = 0.5,
    gamma: float = 0.25,
    num_days: int = 50,
    dispersion: float = 0.1,
) -> SIRExample:
    """Build the default experiment, R0 = beta / gamma = 2 by default.

    The prior places log-normal distributions on `beta` and `gamma` centered
    below the true values, the rest of the parameters are held fixed.
    """
    true_parameters = SIRParameterDistribution(
        population_size=population_size,
        initial_infected=initial_infected,
        beta=beta,
        gamma=gamma,
    )
    prior = SIRParameterDistribution(
        population_size=population_size,
        initial_infected=initial_infected,
        beta=dist.LogNormal(jnp.log(0.4), 0.5),
        gamma=dist.LogNormal(jnp.log(0.2), 0.5),
    )
    observation_params = ObservationParams(
        times=[float(day) for day in range(1, num_days + 1)],
        dispersion=dispersion,
    )
    return SIRExample(
        true_parameters=true_parameters,
        prior=prior,
        observation_params=observation_params,
        solver_params=SolverParams(),
    )
