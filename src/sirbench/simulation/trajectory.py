"""Forward simulation of infection curves from parameter draws."""

import logging

import chex
import jax
import jax.numpy as jnp

from ..config import ObservationParams, SIRParameterDistribution, SolverParams
from ..typing import ParameterDraws, Trajectory
from .odes import SIRODEParams, simulate, sir_ode

logger = logging.getLogger("sirbench")

# smallest value a trajectory may take, keeps count likelihoods finite.
TRAJECTORY_FLOOR = 1e-6


@chex.dataclass
class SIRParameters:
    """Realized SIR parameters, scalars for one draw or arrays for many."""

    population_size: chex.ArrayDevice
    initial_infected: chex.ArrayDevice
    beta: chex.ArrayDevice
    gamma: chex.ArrayDevice


def resolve_parameters(
    distribution: SIRParameterDistribution,
    draws: ParameterDraws | None = None,
) -> SIRParameters:
    """Combine the fixed values of `distribution` with per-draw values.

    Parameters
    ----------
    distribution : SIRParameterDistribution
        parameter bundle, its free parameters are looked up in `draws`.
    draws : ParameterDraws, optional
        parameter name -> array of shape `(num_draws,)` or a scalar for a
        single draw, must contain every free parameter of `distribution`.
        May be omitted if `distribution` has no free parameters.

    Returns
    -------
    SIRParameters
        every field an array of shape `(num_draws,)` with fixed values
        broadcast, or scalars if the draws are scalars or there are none.

    Raises
    ------
    ValueError
        if a free parameter is missing from `draws` or the draws do not all
        share the same shape.
    """
    draws = {} if draws is None else draws
    free_names = list(distribution.free_parameters().keys())
    missing = [name for name in free_names if name not in draws]
    if missing:
        raise ValueError(
            f"draws are missing values for the free parameters {missing}, "
            f"found {list(draws.keys())}"
        )
    shapes = {name: jnp.shape(draws[name]) for name in free_names}
    if len(set(shapes.values())) > 1:
        raise ValueError(
            f"all parameter draws must have the same shape, got {shapes}"
        )
    draw_shape = shapes[free_names[0]] if free_names else ()
    if len(draw_shape) > 1:
        raise ValueError(
            f"parameter draws must be scalars or 1-d, got shape {draw_shape}"
        )
    realized = {
        name: jnp.full(draw_shape, value)
        for name, value in distribution.fixed_parameters().items()
    }
    realized.update({name: jnp.asarray(draws[name]) for name in free_names})
    return SIRParameters(**realized)


def simulate_trajectory(
    params: SIRParameters,
    observation_params: ObservationParams,
    solver_params: SolverParams,
) -> Trajectory:
    """Integrate the SIR model for one parameter draw.

    Returns
    -------
    Trajectory
        size of the infected compartment at each observation time, shape
        `(num_observations,)`, floored at `TRAJECTORY_FLOOR`.
    """
    initial_infected = jnp.atleast_1d(params.initial_infected)
    initial_state = (
        jnp.atleast_1d(params.population_size) - initial_infected,
        initial_infected,
        jnp.zeros_like(initial_infected),
    )
    solution = simulate(
        sir_ode,
        initial_state=initial_state,
        ode_parameters=SIRODEParams(
            beta=params.beta,
            gamma=params.gamma,
            population_size=params.population_size,
        ),
        solver_parameters=solver_params,
        save_times=observation_params.times_array(),
    )
    assert solution.ys is not None, "mypy assert"
    infected = solution.ys[1][:, 0]
    return jnp.maximum(infected, TRAJECTORY_FLOOR)


def prior_predictive(
    distribution: SIRParameterDistribution,
    draws: ParameterDraws,
    observation_params: ObservationParams,
    solver_params: SolverParams,
) -> Trajectory:
    """Map every parameter draw through the forward simulator.

    Returns
    -------
    Trajectory
        simulated infection curves of shape `(num_draws, num_observations)`.
    """
    params = resolve_parameters(distribution, draws)
    logger.debug(
        "simulating trajectories of shape %s", jnp.shape(params.beta)
    )
    return jax.vmap(
        lambda p: simulate_trajectory(p, observation_params, solver_params)
    )(params)
