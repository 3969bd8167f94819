"""Importance weights, weighted means and effective sample sizes.

Weights are computed in log space and normalized with log-sum-exp, so
likelihoods far below the smallest representable float still produce usable
weights as long as at least one draw has a finite log weight. A draw with a
log weight of `-inf` simply gets weight zero. A weight set in which every
weight is zero, or which contains NaN or infinite weights, can not be
normalized and raises `DegenerateWeightsError`.
"""

from typing import Mapping, Optional, Union

import jax.numpy as jnp
from jax import Array
from jax.scipy.special import logsumexp
from jax.typing import ArrayLike

from ..typing import WeightSet


class DegenerateWeightsError(ValueError):
    """Raised when a weight set has no positive mass or non-finite entries."""

    pass


def importance_log_weights(
    log_likelihood: ArrayLike,
    log_prior_density: Optional[ArrayLike] = None,
    log_proposal_density: Optional[ArrayLike] = None,
) -> Array:
    """Unnormalized log importance weights of a set of draws.

    The weight of draw `i` is `L_i * p_i / g_i` where `L_i` is the likelihood
    of the observed data, `p_i` the target prior density and `g_i` the
    density of the distribution the draw actually came from. When draws come
    from the prior itself the correction `p_i / g_i` is 1 and both densities
    may be omitted.

    Parameters
    ----------
    log_likelihood : ArrayLike
        log likelihood of each draw, shape `(num_draws,)`.
    log_prior_density : ArrayLike, optional
        log target prior density of each draw.
    log_proposal_density : ArrayLike, optional
        log density of each draw under the sampling distribution.

    Returns
    -------
    jax.Array
        log weights of shape `(num_draws,)`.

    Raises
    ------
    ValueError
        if only one of the two densities is given or shapes do not match.
    """
    log_likelihood = jnp.asarray(log_likelihood)
    if log_likelihood.ndim != 1:
        raise ValueError(
            f"log_likelihood must be 1-d, got shape {log_likelihood.shape}"
        )
    if (log_prior_density is None) != (log_proposal_density is None):
        raise ValueError(
            "log_prior_density and log_proposal_density must be passed "
            "together, the correction is their ratio."
        )
    if log_prior_density is None or log_proposal_density is None:
        return log_likelihood
    log_prior_density = jnp.asarray(log_prior_density)
    log_proposal_density = jnp.asarray(log_proposal_density)
    if not (
        log_prior_density.shape
        == log_proposal_density.shape
        == log_likelihood.shape
    ):
        raise ValueError(
            f"shape mismatch: log_likelihood {log_likelihood.shape}, "
            f"log_prior_density {log_prior_density.shape}, "
            f"log_proposal_density {log_proposal_density.shape}"
        )
    return log_likelihood + log_prior_density - log_proposal_density


def normalize_log_weights(log_weights: ArrayLike) -> WeightSet:
    """Exponentiate and normalize log weights so they sum to 1.

    Raises
    ------
    DegenerateWeightsError
        if any log weight is NaN or `+inf`, or if all of them are `-inf`.
    """
    log_weights = jnp.asarray(log_weights)
    if bool(jnp.any(jnp.isnan(log_weights))) or bool(
        jnp.any(log_weights == jnp.inf)
    ):
        raise DegenerateWeightsError(
            "log weights contain NaN or +inf values and can not be normalized."
        )
    if not bool(jnp.any(jnp.isfinite(log_weights))):
        raise DegenerateWeightsError(
            f"all {log_weights.shape[0]} weights are zero, no draw is "
            "consistent with the observed data."
        )
    return jnp.exp(log_weights - logsumexp(log_weights))


def importance_weights(
    log_likelihood: ArrayLike,
    log_prior_density: Optional[ArrayLike] = None,
    log_proposal_density: Optional[ArrayLike] = None,
) -> WeightSet:
    """Normalized importance weights, see `importance_log_weights`.

    Returns
    -------
    WeightSet
        non-negative weights of shape `(num_draws,)` summing to 1.
    """
    return normalize_log_weights(
        importance_log_weights(
            log_likelihood, log_prior_density, log_proposal_density
        )
    )


def _normalize_weights(weights: ArrayLike) -> WeightSet:
    weights = jnp.asarray(weights)
    if weights.ndim != 1:
        raise ValueError(f"weights must be 1-d, got shape {weights.shape}")
    if not bool(jnp.all(jnp.isfinite(weights))):
        raise DegenerateWeightsError("weights contain non-finite values.")
    if bool(jnp.any(weights < 0)):
        raise ValueError("weights must be non-negative.")
    total = jnp.sum(weights)
    if not bool(total > 0):
        raise DegenerateWeightsError("weights sum to zero.")
    return weights / total


def _weighted_mean(values: ArrayLike, weights: WeightSet) -> Array:
    values = jnp.asarray(values)
    if values.ndim == 0 or values.shape[0] != weights.shape[0]:
        raise ValueError(
            f"got {weights.shape[0]} weights for draws of shape "
            f"{values.shape}, the leading dimension must match."
        )
    return jnp.tensordot(weights, values, axes=1)


def importance_mean(
    draws: Union[ArrayLike, Mapping[str, ArrayLike]], weights: ArrayLike
) -> Union[Array, dict[str, Array]]:
    """Weighted average of parameter draws.

    Parameters
    ----------
    draws : ArrayLike | Mapping[str, ArrayLike]
        draws with a leading dimension of `num_draws`, either a single array
        of shape `(num_draws, ...)` or a mapping of such arrays.
    weights : ArrayLike
        non-negative weights of shape `(num_draws,)`, renormalized to sum
        to 1 before averaging.

    Returns
    -------
    jax.Array | dict[str, jax.Array]
        the weighted mean, with the trailing shape of the draws, or a dict of
        weighted means if `draws` was a mapping.

    Raises
    ------
    ValueError
        if the number of weights and draws differ or a weight is negative.
    DegenerateWeightsError
        if the weights sum to zero or are not finite.
    """
    normalized = _normalize_weights(weights)
    if isinstance(draws, Mapping):
        return {
            name: _weighted_mean(values, normalized)
            for name, values in draws.items()
        }
    return _weighted_mean(draws, normalized)


def importance_ess(weights: ArrayLike) -> Array:
    """Effective sample size `1 / sum(w_i**2)` of a weight set.

    Weights are normalized first, so the result lies in `[1, num_draws]`:
    `num_draws` for uniform weights and 1 when a single draw has all the
    weight.
    """
    normalized = _normalize_weights(weights)
    return 1.0 / jnp.sum(normalized**2)
