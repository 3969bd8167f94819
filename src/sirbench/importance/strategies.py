"""Importance sampling estimators of posterior means and their comparison."""

import logging
from typing import Callable, Dict, List, Optional

import jax
import jax.numpy as jnp
import pandas as pd
from jax import Array
from pydantic import BaseModel, ConfigDict, Field, PositiveInt

from ..config import (
    ExperimentConfig,
    ObservationParams,
    SIRParameterDistribution,
    SolverParams,
)
from ..infer import (
    FittedDistribution,
    MCMCProcess,
    draw_parameters,
    fit_distribution,
    log_prior_density,
    sir_model,
)
from ..simulation import count_log_likelihood, prior_predictive
from ..typing import Observation, ParameterDraws, SIRName, WeightSet
from ..utils import log_decorator
from .weights import importance_ess, importance_mean, importance_weights

logger = logging.getLogger("sirbench")

PRIOR_STRATEGY = "prior"
PROPOSAL_STRATEGY = "posterior_proposal"


class ImportanceEstimate(BaseModel):
    """One importance sampling estimate of the posterior mean."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    strategy: SIRName
    mean: Dict[str, float] = Field(
        description="Weighted posterior mean of each free parameter."
    )
    ess: float = Field(description="Effective sample size of the weights.")
    num_draws: PositiveInt
    weights: Array = Field(repr=False)


def _estimate(
    strategy: str, draws: ParameterDraws, weights: WeightSet
) -> ImportanceEstimate:
    mean = importance_mean(draws, weights)
    assert isinstance(mean, dict)
    return ImportanceEstimate(
        strategy=strategy,
        mean={name: float(value) for name, value in mean.items()},
        ess=float(importance_ess(weights)),
        num_draws=weights.shape[0],
        weights=weights,
    )


def prior_importance_sampling(
    rng_key: Array,
    prior: SIRParameterDistribution,
    observation: Observation,
    observation_params: ObservationParams,
    solver_params: SolverParams,
    num_draws: int,
) -> ImportanceEstimate:
    """Estimate the posterior mean by weighting prior draws by likelihood.

    Draws come from the prior itself, so no prior / proposal correction is
    applied.
    """
    draws = draw_parameters(prior, rng_key, num_draws)
    trajectories = prior_predictive(
        prior, draws, observation_params, solver_params
    )
    log_likelihood = count_log_likelihood(
        observation, trajectories, observation_params
    )
    return _estimate(PRIOR_STRATEGY, draws, importance_weights(log_likelihood))


def proposal_importance_sampling(
    rng_key: Array,
    prior: SIRParameterDistribution,
    proposal: FittedDistribution,
    observation: Observation,
    observation_params: ObservationParams,
    solver_params: SolverParams,
    num_draws: int,
) -> ImportanceEstimate:
    """Estimate the posterior mean from draws of a fitted proposal.

    Each draw is weighted by its likelihood times the ratio of its prior
    density to its proposal density, which corrects for not sampling from
    the prior.
    """
    draws = proposal.sample(rng_key, num_draws)
    trajectories = prior_predictive(
        prior, draws, observation_params, solver_params
    )
    log_likelihood = count_log_likelihood(
        observation, trajectories, observation_params
    )
    weights = importance_weights(
        log_likelihood,
        log_prior_density=log_prior_density(prior, draws),
        log_proposal_density=proposal.log_prob(draws),
    )
    return _estimate(PROPOSAL_STRATEGY, draws, weights)


@log_decorator()
def fit_posterior_proposal(
    rng_key: Array,
    prior: SIRParameterDistribution,
    observation: Observation,
    observation_params: ObservationParams,
    solver_params: SolverParams,
    experiment: ExperimentConfig,
) -> FittedDistribution:
    """Run MCMC on `sir_model` and fit a proposal to the posterior samples."""
    process = MCMCProcess(
        numpyro_model=sir_model,
        num_warmup=experiment.num_warmup,
        num_samples=experiment.num_samples,
        num_chains=experiment.num_chains,
        nuts_max_tree_depth=experiment.nuts_max_tree_depth,
        inference_prngkey=rng_key,
        progress_bar=experiment.progress_bar,
    )
    process.infer(
        distribution=prior,
        observation_params=observation_params,
        solver_params=solver_params,
        obs=observation,
    )
    return fit_distribution(
        process.get_samples(), prior, inflation=experiment.proposal_inflation
    )


def repeated_estimates(
    estimator: Callable[[Array], ImportanceEstimate],
    rng_key: Array,
    num_repeats: int,
) -> List[ImportanceEstimate]:
    """Run `estimator` `num_repeats` times, each with its own PRNGKey.

    Repetitions share no state, they run one after the other.
    """
    return [estimator(key) for key in jax.random.split(rng_key, num_repeats)]


class StrategySummary(BaseModel):
    """Spread of repeated estimates of one strategy."""

    strategy: SIRName
    num_draws: PositiveInt
    num_repeats: PositiveInt
    mean: Dict[str, float] = Field(
        description="Average of the repeated posterior mean estimates."
    )
    variance: Dict[str, float] = Field(
        description="Empirical variance of the repeated estimates."
    )
    mean_ess: float
    estimates: Dict[str, List[float]] = Field(
        description="Every repeated estimate, per parameter.", repr=False
    )


def summarize_estimates(
    estimates: List[ImportanceEstimate],
    strategy: Optional[str] = None,
) -> StrategySummary:
    """Aggregate repeated estimates of the same strategy.

    The summary is labelled `strategy` when given, otherwise with the
    strategy of the first estimate.
    """
    if len(estimates) == 0:
        raise ValueError("can not summarize an empty list of estimates.")
    names = list(estimates[0].mean.keys())
    values = {
        name: jnp.array([estimate.mean[name] for estimate in estimates])
        for name in names
    }
    return StrategySummary(
        strategy=estimates[0].strategy if strategy is None else strategy,
        num_draws=estimates[0].num_draws,
        num_repeats=len(estimates),
        mean={name: float(jnp.mean(value)) for name, value in values.items()},
        variance={
            name: float(jnp.var(value, ddof=1 if len(estimates) > 1 else 0))
            for name, value in values.items()
        },
        mean_ess=float(jnp.mean(jnp.array([e.ess for e in estimates]))),
        estimates={
            name: [float(v) for v in value] for name, value in values.items()
        },
    )


class StrategyComparison(BaseModel):
    """Summaries of several strategies run with the same draw budget."""

    summaries: Dict[str, StrategySummary]

    def variance_ratio(self, strategy: str, baseline: str) -> Dict[str, float]:
        """Variance of `strategy` relative to `baseline`, per parameter.

        Raises
        ------
        ValueError
            if `baseline` has zero variance for a parameter, e.g. when it
            was summarized from a single repetition.
        """
        baseline_variance = self.summaries[baseline].variance
        degenerate = [
            name
            for name, variance in baseline_variance.items()
            if variance == 0
        ]
        if degenerate:
            raise ValueError(
                f"baseline strategy {baseline} has zero variance for "
                f"{degenerate}, the variance ratio is undefined."
            )
        return {
            name: self.summaries[strategy].variance[name] / variance
            for name, variance in baseline_variance.items()
        }

    def to_dataframe(self) -> pd.DataFrame:
        """One row per strategy and parameter."""
        rows = [
            {
                "strategy": summary.strategy,
                "parameter": name,
                "num_draws": summary.num_draws,
                "num_repeats": summary.num_repeats,
                "mean": summary.mean[name],
                "variance": summary.variance[name],
                "mean_ess": summary.mean_ess,
            }
            for summary in self.summaries.values()
            for name in summary.mean
        ]
        return pd.DataFrame(rows)


@log_decorator()
def compare_strategies(
    estimators: Dict[str, Callable[[Array], ImportanceEstimate]],
    rng_key: Array,
    num_repeats: int,
) -> StrategyComparison:
    """Repeat every estimator `num_repeats` times and summarize the spread.

    Parameters
    ----------
    estimators : dict[str, Callable[[Array], ImportanceEstimate]]
        strategy name -> estimator taking only a PRNGKey, usually a
        `functools.partial` of `prior_importance_sampling` or
        `proposal_importance_sampling`.
    rng_key : Array
        root key, every strategy receives the same repetition keys.
    num_repeats : int
        number of repetitions per strategy.
    """
    summaries = {}
    for name, estimator in estimators.items():
        summary = summarize_estimates(
            repeated_estimates(estimator, rng_key, num_repeats), strategy=name
        )
        logger.info(
            "%s: variance %s, mean ESS %.1f",
            name,
            summary.variance,
            summary.mean_ess,
        )
        summaries[name] = summary
    return StrategyComparison(summaries=summaries)
