import jax.numpy as jnp
import pytest
from jax.random import PRNGKey
from numpyro import handlers

import sirbench.config as config
from sirbench.infer import sir_model


@pytest.fixture
def example():
    return config.sir_example(num_days=20)


def _trace(example, obs=None):
    return handlers.trace(handlers.seed(sir_model, PRNGKey(0))).get_trace(
        distribution=example.prior,
        observation_params=example.observation_params,
        solver_params=example.solver_params,
        obs=obs,
    )


def test_sir_model_sites(example):
    model_trace = _trace(example)
    assert {"beta", "gamma", "trajectory", "obs"} <= set(model_trace.keys())
    assert model_trace["trajectory"]["type"] == "deterministic"
    assert model_trace["trajectory"]["value"].shape == (20,)
    assert model_trace["obs"]["value"].shape == (20,)
    assert not model_trace["obs"]["is_observed"]


def test_sir_model_observed(example):
    obs = jnp.arange(20)
    model_trace = _trace(example, obs=obs)
    assert model_trace["obs"]["is_observed"]
    assert jnp.array_equal(model_trace["obs"]["value"], obs)


def test_sir_model_fixed_parameters_not_sampled(example):
    model_trace = _trace(example)
    assert "population_size" not in model_trace
    assert "initial_infected" not in model_trace
