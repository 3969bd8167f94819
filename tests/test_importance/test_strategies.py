from functools import partial

import jax.numpy as jnp
import pytest
from jax.random import PRNGKey

import sirbench.config as config
import sirbench.importance as importance
from sirbench.simulation import (
    generate_observations,
    resolve_parameters,
    simulate_trajectory,
)

NUM_DRAWS = 100


@pytest.fixture(scope="module")
def example():
    return config.sir_example()


@pytest.fixture(scope="module")
def observation(example):
    true_trajectory = simulate_trajectory(
        resolve_parameters(example.true_parameters),
        example.observation_params,
        example.solver_params,
    )
    return generate_observations(
        PRNGKey(0), true_trajectory, example.observation_params
    )


@pytest.fixture(scope="module")
def experiment():
    return config.ExperimentConfig(
        num_draws=NUM_DRAWS,
        num_repeats=100,
        num_warmup=200,
        num_samples=200,
        nuts_max_tree_depth=6,
    )


@pytest.fixture(scope="module")
def proposal(example, observation, experiment):
    return importance.fit_posterior_proposal(
        PRNGKey(1),
        example.prior,
        observation,
        example.observation_params,
        example.solver_params,
        experiment,
    )


@pytest.fixture(scope="module")
def estimators(example, observation, proposal):
    shared_args = dict(
        prior=example.prior,
        observation=observation,
        observation_params=example.observation_params,
        solver_params=example.solver_params,
        num_draws=NUM_DRAWS,
    )
    return {
        importance.PRIOR_STRATEGY: partial(
            importance.prior_importance_sampling, **shared_args
        ),
        importance.PROPOSAL_STRATEGY: partial(
            importance.proposal_importance_sampling,
            proposal=proposal,
            **shared_args,
        ),
    }


def _prior_estimate(example, observation, key):
    return importance.prior_importance_sampling(
        key,
        example.prior,
        observation,
        example.observation_params,
        example.solver_params,
        NUM_DRAWS,
    )


def test_prior_importance_sampling(example, observation):
    estimate = _prior_estimate(example, observation, PRNGKey(2))
    assert estimate.strategy == importance.PRIOR_STRATEGY
    assert estimate.num_draws == NUM_DRAWS
    assert set(estimate.mean.keys()) == {"beta", "gamma"}
    assert jnp.allclose(jnp.sum(estimate.weights), 1.0)
    assert 1.0 <= estimate.ess <= NUM_DRAWS


def test_prior_importance_sampling_reproducible(example, observation):
    first = _prior_estimate(example, observation, PRNGKey(3))
    second = _prior_estimate(example, observation, PRNGKey(3))
    other = _prior_estimate(example, observation, PRNGKey(4))
    assert first.mean == second.mean
    assert first.ess == second.ess
    assert jnp.array_equal(first.weights, second.weights)
    assert first.mean != other.mean


def test_repeated_estimates_use_distinct_keys(example, observation):
    estimates = importance.repeated_estimates(
        partial(_prior_estimate, example, observation), PRNGKey(5), 3
    )
    assert len(estimates) == 3
    assert len({estimate.mean["beta"] for estimate in estimates}) == 3


def _constant_estimator(key, value=1.0, strategy="constant"):
    return importance.ImportanceEstimate(
        strategy=strategy,
        mean={"beta": value},
        ess=2.0,
        num_draws=2,
        weights=jnp.array([0.5, 0.5]),
    )


def test_compare_strategies_summary():
    comparison = importance.compare_strategies(
        {"constant": _constant_estimator}, PRNGKey(0), num_repeats=5
    )
    summary = comparison.summaries["constant"]
    assert summary.num_repeats == 5
    assert summary.mean == {"beta": 1.0}
    assert summary.variance == {"beta": 0.0}
    assert summary.mean_ess == 2.0
    assert summary.estimates == {"beta": [1.0] * 5}


def test_summarize_estimates_variance():
    estimates = [
        _constant_estimator(None, value=value) for value in [1.0, 2.0, 3.0]
    ]
    summary = importance.summarize_estimates(estimates)
    assert summary.mean == {"beta": 2.0}
    # unbiased sample variance
    assert summary.variance == {"beta": 1.0}


def test_summarize_estimates_empty():
    with pytest.raises(ValueError):
        importance.summarize_estimates([])


def test_comparison_dataframe_and_ratio():
    comparison = importance.StrategyComparison(
        summaries={
            name: importance.summarize_estimates(
                [
                    _constant_estimator(None, value=v, strategy=name)
                    for v in values
                ]
            )
            for name, values in [("wide", [0.0, 4.0]), ("narrow", [1.0, 3.0])]
        }
    )
    df = comparison.to_dataframe()
    assert len(df) == 2
    assert set(df["strategy"]) == {"wide", "narrow"}
    assert comparison.variance_ratio("narrow", "wide") == {"beta": 0.25}


@pytest.mark.parametrize("baseline_values", [[2.0], [2.0, 2.0, 2.0]])
def test_variance_ratio_zero_baseline(baseline_values):
    comparison = importance.StrategyComparison(
        summaries={
            name: importance.summarize_estimates(
                [
                    _constant_estimator(None, value=v, strategy=name)
                    for v in values
                ]
            )
            for name, values in [
                ("wide", [0.0, 4.0]),
                ("flat", baseline_values),
            ]
        }
    )
    assert comparison.summaries["flat"].variance == {"beta": 0.0}
    with pytest.raises(ValueError, match="flat"):
        comparison.variance_ratio("wide", "flat")


def test_compare_strategies_labels_by_key():
    comparison = importance.compare_strategies(
        {
            "small": partial(_constant_estimator, strategy="prior"),
            "large": partial(_constant_estimator, strategy="prior"),
        },
        PRNGKey(0),
        num_repeats=2,
    )
    assert comparison.summaries["small"].strategy == "small"
    assert comparison.summaries["large"].strategy == "large"
    df = comparison.to_dataframe()
    assert set(df["strategy"]) == {"small", "large"}


def test_summarize_estimates_strategy_override():
    estimates = [_constant_estimator(None, strategy="prior")]
    assert importance.summarize_estimates(estimates).strategy == "prior"
    summary = importance.summarize_estimates(estimates, strategy="renamed")
    assert summary.strategy == "renamed"


@pytest.mark.slow
def test_fit_posterior_proposal(proposal, example):
    assert proposal.parameter_names == ["beta", "gamma"]
    # normal over log parameters, centered near the truth
    assert jnp.allclose(
        jnp.exp(proposal.loc), jnp.array([0.5, 0.25]), rtol=0.1
    )


@pytest.mark.slow
def test_proposal_importance_sampling(estimators, example):
    estimate = estimators[importance.PROPOSAL_STRATEGY](PRNGKey(6))
    assert estimate.strategy == importance.PROPOSAL_STRATEGY
    assert jnp.allclose(jnp.sum(estimate.weights), 1.0)
    assert estimate.ess > 10
    assert jnp.allclose(estimate.mean["beta"], 0.5, rtol=0.1)
    assert jnp.allclose(estimate.mean["gamma"], 0.25, rtol=0.1)


@pytest.mark.slow
def test_proposal_reduces_variance(estimators, experiment):
    comparison = importance.compare_strategies(
        estimators, PRNGKey(7), experiment.num_repeats
    )
    prior_summary = comparison.summaries[importance.PRIOR_STRATEGY]
    proposal_summary = comparison.summaries[importance.PROPOSAL_STRATEGY]
    assert proposal_summary.num_repeats == 100
    for name in ["beta", "gamma"]:
        assert proposal_summary.variance[name] < prior_summary.variance[name]
    assert proposal_summary.mean_ess > prior_summary.mean_ess


@pytest.mark.slow
def test_pipeline_reproducible(estimators):
    first = importance.compare_strategies(estimators, PRNGKey(8), 3)
    second = importance.compare_strategies(estimators, PRNGKey(8), 3)
    assert first == second
