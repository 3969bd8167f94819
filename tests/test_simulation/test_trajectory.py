import jax.numpy as jnp
import numpyro.distributions as dist
import pytest

import sirbench.config as config
import sirbench.simulation as simulation


@pytest.fixture
def example():
    return config.sir_example(num_days=30)


@pytest.fixture
def draws():
    return {
        "beta": jnp.array([0.3, 0.5, 0.7]),
        "gamma": jnp.array([0.2, 0.25, 0.3]),
    }


def test_resolve_fixed_parameters(example):
    params = simulation.resolve_parameters(example.true_parameters)
    assert jnp.shape(params.beta) == ()
    assert params.beta == 0.5
    assert params.population_size == 10_000.0


def test_resolve_parameters_broadcasts_fixed(example, draws):
    params = simulation.resolve_parameters(example.prior, draws)
    assert params.population_size.shape == (3,)
    assert jnp.all(params.population_size == 10_000.0)
    assert jnp.all(params.initial_infected == 10.0)
    assert jnp.array_equal(params.beta, draws["beta"])
    assert jnp.array_equal(params.gamma, draws["gamma"])


def test_resolve_parameters_scalar_draws(example):
    params = simulation.resolve_parameters(
        example.prior, {"beta": jnp.array(0.5), "gamma": jnp.array(0.25)}
    )
    assert jnp.shape(params.population_size) == ()
    assert jnp.shape(params.beta) == ()


def test_resolve_parameters_missing(example, draws):
    with pytest.raises(ValueError):
        simulation.resolve_parameters(example.prior, {"beta": draws["beta"]})
    with pytest.raises(ValueError):
        simulation.resolve_parameters(example.prior)


def test_resolve_parameters_shape_mismatch(example, draws):
    with pytest.raises(ValueError):
        simulation.resolve_parameters(
            example.prior, {"beta": draws["beta"], "gamma": jnp.ones(4)}
        )
    with pytest.raises(ValueError):
        simulation.resolve_parameters(
            example.prior,
            {"beta": jnp.ones((2, 2)), "gamma": jnp.ones((2, 2))},
        )


def test_simulate_trajectory(example):
    trajectory = simulation.simulate_trajectory(
        simulation.resolve_parameters(example.true_parameters),
        example.observation_params,
        example.solver_params,
    )
    assert trajectory.shape == (30,)
    assert jnp.all(trajectory > 0)
    # R0 of 2 from 10 infected grows over the first weeks
    assert trajectory[10] > trajectory[0]


def test_simulate_trajectory_floor(example):
    extinct = config.SIRParameterDistribution(
        population_size=10_000.0, initial_infected=1.0, beta=0.0, gamma=5.0
    )
    trajectory = simulation.simulate_trajectory(
        simulation.resolve_parameters(extinct),
        example.observation_params,
        example.solver_params,
    )
    assert jnp.all(trajectory >= simulation.TRAJECTORY_FLOOR)
    assert trajectory[-1] < 1e-5


def test_prior_predictive_matches_single_draws(example, draws):
    trajectories = simulation.prior_predictive(
        example.prior,
        draws,
        example.observation_params,
        example.solver_params,
    )
    assert trajectories.shape == (3, 30)
    for idx in range(3):
        single = simulation.simulate_trajectory(
            simulation.resolve_parameters(
                example.prior,
                {name: value[idx] for name, value in draws.items()},
            ),
            example.observation_params,
            example.solver_params,
        )
        assert jnp.allclose(trajectories[idx], single)


def test_prior_predictive_free_initial_infected(example):
    distribution = config.SIRParameterDistribution(
        population_size=10_000.0,
        initial_infected=dist.Uniform(1.0, 100.0),
        beta=0.5,
        gamma=0.25,
    )
    trajectories = simulation.prior_predictive(
        distribution,
        {"initial_infected": jnp.array([1.0, 10.0, 100.0])},
        example.observation_params,
        example.solver_params,
    )
    # more initial infections, more infections early on
    assert trajectories[0, 0] < trajectories[1, 0] < trajectories[2, 0]
