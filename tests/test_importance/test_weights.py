import jax.numpy as jnp
import pytest

from sirbench.importance import (
    DegenerateWeightsError,
    importance_ess,
    importance_log_weights,
    importance_mean,
    importance_weights,
    normalize_log_weights,
)


@pytest.fixture
def log_likelihood():
    return jnp.array([-10.0, -12.0, -9.5, -30.0, -11.0])


def test_weights_sum_to_one(log_likelihood):
    weights = importance_weights(log_likelihood)
    assert weights.shape == (5,)
    assert jnp.all(weights >= 0)
    assert jnp.allclose(jnp.sum(weights), 1.0)
    # largest likelihood, largest weight
    assert jnp.argmax(weights) == 2


def test_weights_proportional_to_likelihood(log_likelihood):
    weights = importance_weights(log_likelihood)
    likelihood = jnp.exp(log_likelihood)
    assert jnp.allclose(weights, likelihood / jnp.sum(likelihood))


def test_weights_survive_underflow():
    # exp of these underflows to zero in double precision
    log_likelihood = jnp.array([-1e5, -1e5 - jnp.log(3.0)])
    weights = importance_weights(log_likelihood)
    assert jnp.all(jnp.isfinite(weights))
    assert jnp.allclose(weights, jnp.array([0.75, 0.25]))


def test_negative_infinity_gets_zero_weight():
    weights = normalize_log_weights(jnp.array([-jnp.inf, 0.0, 0.0]))
    assert weights[0] == 0.0
    assert jnp.allclose(weights, jnp.array([0.0, 0.5, 0.5]))


def test_all_negative_infinity_raises():
    with pytest.raises(DegenerateWeightsError):
        normalize_log_weights(jnp.full((4,), -jnp.inf))


@pytest.mark.parametrize("bad_value", [jnp.nan, jnp.inf])
def test_non_finite_log_weights_raise(bad_value):
    with pytest.raises(DegenerateWeightsError):
        normalize_log_weights(jnp.array([0.0, bad_value]))


def test_degenerate_is_value_error():
    assert issubclass(DegenerateWeightsError, ValueError)


def test_equal_densities_match_likelihood_only(log_likelihood):
    density = jnp.array([-1.0, 2.0, 0.5, -3.0, 0.0])
    corrected = importance_weights(
        log_likelihood,
        log_prior_density=density,
        log_proposal_density=density,
    )
    assert jnp.allclose(corrected, importance_weights(log_likelihood))


def test_correction_ratio(log_likelihood):
    log_prior = jnp.log(jnp.array([0.1, 0.2, 0.3, 0.2, 0.2]))
    log_proposal = jnp.log(jnp.array([0.2, 0.2, 0.2, 0.2, 0.2]))
    log_weights = importance_log_weights(
        log_likelihood, log_prior, log_proposal
    )
    assert jnp.allclose(
        log_weights, log_likelihood + log_prior - log_proposal
    )


def test_one_density_raises(log_likelihood):
    with pytest.raises(ValueError):
        importance_log_weights(
            log_likelihood, log_prior_density=jnp.zeros(5)
        )
    with pytest.raises(ValueError):
        importance_log_weights(
            log_likelihood, log_proposal_density=jnp.zeros(5)
        )


def test_log_weights_shape_mismatch(log_likelihood):
    with pytest.raises(ValueError):
        importance_log_weights(log_likelihood, jnp.zeros(4), jnp.zeros(4))
    with pytest.raises(ValueError):
        importance_log_weights(jnp.zeros((2, 2)))


def test_ess_uniform():
    for num_draws in [1, 10, 1000]:
        weights = jnp.full((num_draws,), 1.0 / num_draws)
        assert jnp.allclose(importance_ess(weights), num_draws)


def test_ess_one_hot():
    assert jnp.allclose(importance_ess(jnp.array([0.0, 0.0, 1.0, 0.0])), 1.0)


def test_ess_unnormalized():
    assert jnp.allclose(importance_ess(jnp.array([2.0, 2.0])), 2.0)


def test_ess_between_bounds(log_likelihood):
    ess = importance_ess(importance_weights(log_likelihood))
    assert 1.0 <= ess <= 5.0


def test_ess_zero_weights():
    with pytest.raises(DegenerateWeightsError):
        importance_ess(jnp.zeros(3))


def test_mean_of_constant():
    weights = jnp.array([0.1, 0.5, 0.2, 0.2])
    assert jnp.allclose(importance_mean(jnp.full((4,), 3.5), weights), 3.5)


def test_mean_weighted():
    draws = jnp.array([1.0, 2.0, 3.0])
    weights = jnp.array([1.0, 0.0, 1.0])
    assert jnp.allclose(importance_mean(draws, weights), 2.0)


def test_mean_multivariate():
    draws = jnp.array([[1.0, 10.0], [3.0, 30.0]])
    mean = importance_mean(draws, jnp.array([0.25, 0.75]))
    assert mean.shape == (2,)
    assert jnp.allclose(mean, jnp.array([2.5, 25.0]))


def test_mean_of_parameter_draws():
    draws = {"beta": jnp.array([0.4, 0.6]), "gamma": jnp.array([0.2, 0.2])}
    mean = importance_mean(draws, jnp.array([0.5, 0.5]))
    assert set(mean.keys()) == {"beta", "gamma"}
    assert jnp.allclose(mean["beta"], 0.5)
    assert jnp.allclose(mean["gamma"], 0.2)


def test_mean_length_mismatch():
    with pytest.raises(ValueError):
        importance_mean(jnp.ones(3), jnp.ones(4))
    with pytest.raises(ValueError):
        importance_mean({"beta": jnp.ones(3)}, jnp.ones(4))


def test_mean_negative_weights():
    with pytest.raises(ValueError):
        importance_mean(jnp.ones(2), jnp.array([1.5, -0.5]))


def test_mean_zero_weights():
    with pytest.raises(DegenerateWeightsError):
        importance_mean(jnp.ones(2), jnp.zeros(2))
