"""Importance sampling of SIR posterior means and strategy comparison."""

from .strategies import (
    PRIOR_STRATEGY,
    PROPOSAL_STRATEGY,
    ImportanceEstimate,
    StrategyComparison,
    StrategySummary,
    compare_strategies,
    fit_posterior_proposal,
    prior_importance_sampling,
    proposal_importance_sampling,
    repeated_estimates,
    summarize_estimates,
)
from .weights import (
    DegenerateWeightsError,
    importance_ess,
    importance_log_weights,
    importance_mean,
    importance_weights,
    normalize_log_weights,
)

__all__ = [
    "DegenerateWeightsError",
    "importance_log_weights",
    "normalize_log_weights",
    "importance_weights",
    "importance_mean",
    "importance_ess",
    "PRIOR_STRATEGY",
    "PROPOSAL_STRATEGY",
    "ImportanceEstimate",
    "StrategySummary",
    "StrategyComparison",
    "prior_importance_sampling",
    "proposal_importance_sampling",
    "fit_posterior_proposal",
    "repeated_estimates",
    "summarize_estimates",
    "compare_strategies",
]
