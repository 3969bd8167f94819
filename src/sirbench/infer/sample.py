"""A utility module containing helper code for sampling SIRBench parameters."""

import logging
from typing import Any

import jax.numpy as jnp
import numpy as np
import numpyro  # type: ignore
import numpyro.distributions as Dist  # type: ignore
from jax import Array
from numpyro.infer import Predictive
from pydantic import BaseModel

from ..config import SIRParameterDistribution
from ..typing import ParameterDraws

logger = logging.getLogger("sirbench")


def sample_distributions(
    obj: Any, rng_key: Array | None = None, _prefix: str = ""
):
    """Recursively scan data structures and sample numpyro Distributions.

    Parameters
    ----------
    obj: Any
        object to be sampled or searched for distributions.
    rng_key : Array
        optional rng_key to use if this function is called outside of an
        mcmc or inference context where one is automatically provided.
    _prefix : str
        prefix to prepend to all site names, used to build up site names.

    Note
    ----
    Sampled distributions receive site names according to a set of rules
    - Distributions within lists are appended with _i identifing the index.
    - Dictionaries and Pydantic models are recursively searched with
    sites names prepending the key that parameter belongs to.

    Returns
    -------
    Any | jax.Array
        obj with all instances of `numpyro.Distributions` sampled, if `obj`
        itself is a distribution, the sample will be returned.
    """
    if isinstance(obj, (BaseModel, dict)):
        obj_dict = dict(obj)
        for key, value in obj_dict.items():
            obj_dict[key] = sample_distributions(
                value, rng_key=rng_key, _prefix=_prefix + f"{key}_"
            )
        return (
            dict(obj_dict)
            if isinstance(obj, dict)
            else obj.__class__(**obj_dict)
        )
    elif isinstance(obj, (np.ndarray, list)):
        return [
            sample_distributions(
                item, rng_key=rng_key, _prefix=_prefix + f"{i}_"
            )
            for i, item in enumerate(obj)
        ]
    elif issubclass(type(obj), Dist.Distribution):
        # remove trailing underscore from recursive calls above.
        if len(_prefix) > 0:
            _prefix = _prefix[:-1]
        return numpyro.sample(_prefix, obj, rng_key=rng_key)
    else:
        return obj


def _prior_model(distribution: SIRParameterDistribution):
    sample_distributions(distribution.free_parameters())


def draw_parameters(
    distribution: SIRParameterDistribution, rng_key: Array, num_draws: int
) -> ParameterDraws:
    """Draw the free parameters of `distribution` from their priors.

    Parameters
    ----------
    distribution : SIRParameterDistribution
        parameter bundle whose distribution fields are sampled.
    rng_key : Array
        jax PRNGKey used for every draw.
    num_draws : int
        number of independent draws.

    Returns
    -------
    ParameterDraws
        free parameter name -> array of shape `(num_draws,)`. Fixed
        parameters are not included.
    """
    if distribution.is_fixed:
        return {}
    draws = Predictive(_prior_model, num_samples=num_draws)(
        rng_key, distribution=distribution
    )
    logger.debug("drew %s samples of %s", num_draws, list(draws.keys()))
    return draws


def log_prior_density(
    distribution: SIRParameterDistribution, draws: ParameterDraws
) -> Array:
    """Evaluate the joint prior log density of each draw.

    Free parameters are independent a priori, so the joint density is the
    sum of each parameter's log density. Draws outside a parameter's support
    get a log density of `-inf`.

    Raises
    ------
    ValueError
        if `draws` is missing one of the free parameters.
    """
    free = distribution.free_parameters()
    missing = [name for name in free if name not in draws]
    if missing:
        raise ValueError(
            f"can not evaluate the prior density without draws of {missing}"
        )
    total: Array | float = 0.0
    for name, prior in free.items():
        value = jnp.asarray(draws[name])
        log_prob = prior.log_prob(value)
        total = total + jnp.where(prior.support(value), log_prob, -jnp.inf)
    return jnp.asarray(total)
