"""Count observation model linking infection curves to observed counts."""

import jax.numpy as jnp
import numpyro.distributions as dist
from jax import Array, lax, random
from numpyro.distributions import constraints
from numpyro.distributions.util import promote_shapes, validate_sample

from ..config import ObservationParams
from ..typing import Observation, Trajectory


class CountDistribution(dist.Distribution):
    """Negative binomial counts with a per-point dispersion, Poisson at zero.

    Each point has mean `expected` and variance
    `expected + dispersion * expected**2`. Where `dispersion` is 0 the point
    is Poisson distributed, otherwise it is `NegativeBinomial2` with
    concentration `1 / dispersion`.
    """

    arg_constraints = {
        "expected": constraints.positive,
        "dispersion": constraints.nonnegative,
    }
    support = constraints.nonnegative_integer
    is_discrete = True

    def __init__(self, expected, dispersion=0.0, *, validate_args=None):
        self.expected, self.dispersion = promote_shapes(expected, dispersion)
        batch_shape = lax.broadcast_shapes(
            jnp.shape(expected), jnp.shape(dispersion)
        )
        self.expected = jnp.broadcast_to(self.expected, batch_shape)
        self.dispersion = jnp.broadcast_to(self.dispersion, batch_shape)
        super().__init__(batch_shape=batch_shape, validate_args=validate_args)

    def _concentration(self) -> Array:
        # placeholder of 1 where Poisson, never used there.
        return 1.0 / jnp.where(self.dispersion > 0, self.dispersion, 1.0)

    def sample(self, key, sample_shape=()):
        shape = sample_shape + self.batch_shape
        key_gamma, key_poisson = random.split(key)
        concentration = self._concentration()
        gamma_rate = (
            random.gamma(key_gamma, concentration, shape=shape)
            / concentration
            * self.expected
        )
        rate = jnp.where(self.dispersion > 0, gamma_rate, self.expected)
        return random.poisson(key_poisson, rate, shape=shape)

    @validate_sample
    def log_prob(self, value):
        poisson = dist.Poisson(self.expected).log_prob(value)
        negative_binomial = dist.NegativeBinomial2(
            self.expected, self._concentration()
        ).log_prob(value)
        return jnp.where(self.dispersion > 0, negative_binomial, poisson)

    @property
    def mean(self):
        return self.expected

    @property
    def variance(self):
        return self.expected + self.dispersion * self.expected**2


def count_distribution(
    trajectory: Trajectory, observation_params: ObservationParams
) -> CountDistribution:
    """Build the per-time-point count distribution around `trajectory`."""
    return CountDistribution(trajectory, observation_params.dispersion_array())


def generate_observations(
    rng_key: Array,
    trajectory: Trajectory,
    observation_params: ObservationParams,
) -> Observation:
    """Corrupt an infection curve with count noise to get synthetic data."""
    return count_distribution(trajectory, observation_params).sample(rng_key)


def count_log_likelihood(
    observation: Observation,
    trajectories: Trajectory,
    observation_params: ObservationParams,
) -> Array:
    """Score one observation against one or many simulated trajectories.

    Parameters
    ----------
    observation : Observation
        observed counts, shape `(num_observations,)`.
    trajectories : Trajectory
        simulated infection curves, shape `(num_observations,)` or
        `(num_draws, num_observations)`.
    observation_params : ObservationParams
        observation design providing the dispersion of each time point.

    Returns
    -------
    jax.Array
        log likelihood summed over time, one per trajectory.

    Raises
    ------
    ValueError
        if the observation, trajectories and observation times do not have
        matching lengths.
    """
    observation = jnp.asarray(observation)
    trajectories = jnp.asarray(trajectories)
    num_observations = observation_params.num_observations
    if (
        observation.shape != (num_observations,)
        or trajectories.shape[-1] != num_observations
    ):
        raise ValueError(
            f"observation of shape {observation.shape} and trajectories of "
            f"shape {trajectories.shape} must both end in the "
            f"{num_observations} observation times."
        )
    log_prob = count_distribution(trajectories, observation_params).log_prob(
        observation
    )
    return jnp.sum(log_prob, axis=-1)
