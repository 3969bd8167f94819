"""Fit a parametric approximation to posterior samples as a proposal."""

import logging
from typing import List

import jax.numpy as jnp
import numpyro.distributions as dist
from jax import Array
from numpyro.distributions.transforms import Transform, biject_to
from pydantic import BaseModel, ConfigDict, Field

from ..config import SIRParameterDistribution
from ..typing import ParameterDraws

logger = logging.getLogger("sirbench")

# added to the diagonal of fitted covariances to keep them positive definite
COVARIANCE_JITTER = 1e-9


class FittedDistribution(BaseModel):
    """A multivariate normal over the unconstrained free parameters.

    Each parameter is mapped to the real line with the bijection to its prior
    support (e.g. `log` for positive parameters), so draws always land within
    the support of the prior and correlations between parameters are kept.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    parameter_names: List[str] = Field(
        description="""Names of the parameters, in the order of the
        dimensions of `loc` and `covariance`."""
    )
    transforms: List[Transform] = Field(
        description="""Bijections from the real line to each parameter's
        support."""
    )
    loc: Array = Field(description="Mean in unconstrained space.")
    covariance: Array = Field(
        description="Covariance matrix in unconstrained space."
    )

    @property
    def base_distribution(self) -> dist.MultivariateNormal:
        """The normal distribution over unconstrained parameters."""
        return dist.MultivariateNormal(
            self.loc, covariance_matrix=self.covariance
        )

    def sample(self, rng_key: Array, num_draws: int) -> ParameterDraws:
        """Draw `num_draws` parameter vectors, keyed by parameter name."""
        unconstrained = self.base_distribution.sample(rng_key, (num_draws,))
        return {
            name: transform(unconstrained[:, idx])
            for idx, (name, transform) in enumerate(
                zip(self.parameter_names, self.transforms)
            )
        }

    def log_prob(self, draws: ParameterDraws) -> Array:
        """Log density of each draw in the constrained parameter space.

        Raises
        ------
        ValueError
            if `draws` is missing one of `parameter_names`.
        """
        missing = [name for name in self.parameter_names if name not in draws]
        if missing:
            raise ValueError(f"draws are missing values for {missing}")
        unconstrained = [
            transform.inv(jnp.asarray(draws[name]))
            for name, transform in zip(self.parameter_names, self.transforms)
        ]
        log_prob = self.base_distribution.log_prob(
            jnp.stack(unconstrained, axis=-1)
        )
        # change of variables from unconstrained to constrained space
        for name, transform, value in zip(
            self.parameter_names, self.transforms, unconstrained
        ):
            log_prob = log_prob - transform.log_abs_det_jacobian(
                value, jnp.asarray(draws[name])
            )
        return log_prob


def fit_distribution(
    samples: ParameterDraws,
    distribution: SIRParameterDistribution,
    inflation: float = 1.0,
) -> FittedDistribution:
    """Fit a `FittedDistribution` to posterior samples by moment matching.

    Parameters
    ----------
    samples : ParameterDraws
        posterior samples, e.g. from `MCMCProcess.get_samples()`, must hold
        every free parameter of `distribution`. Extra keys are ignored.
    distribution : SIRParameterDistribution
        the prior the samples were drawn under, its free parameters decide
        which samples are fitted and which support each one lives on.
    inflation : float, optional
        factor applied to the fitted covariance, by default 1.0.

    Returns
    -------
    FittedDistribution
        the fitted approximation.

    Raises
    ------
    ValueError
        if a free parameter has no samples, or fewer than two samples are
        available.
    """
    free = distribution.free_parameters()
    missing = [name for name in free if name not in samples]
    if missing:
        raise ValueError(f"samples are missing the free parameters {missing}")
    if len(free) == 0:
        raise ValueError("distribution has no free parameters to fit.")
    transforms = [biject_to(prior.support) for prior in free.values()]
    unconstrained = jnp.stack(
        [
            transform.inv(jnp.ravel(jnp.asarray(samples[name])))
            for name, transform in zip(free, transforms)
        ],
        axis=-1,
    )
    if unconstrained.shape[0] < 2:
        raise ValueError(
            f"need at least two samples to fit, got {unconstrained.shape[0]}"
        )
    loc = jnp.mean(unconstrained, axis=0)
    covariance = jnp.atleast_2d(jnp.cov(unconstrained, rowvar=False))
    covariance = inflation * covariance + COVARIANCE_JITTER * jnp.eye(
        len(free)
    )
    logger.info(
        "fitted proposal to %s samples of %s",
        unconstrained.shape[0],
        list(free.keys()),
    )
    return FittedDistribution(
        parameter_names=list(free.keys()),
        transforms=transforms,
        loc=loc,
        covariance=covariance,
    )
