"""Runtime settings for a single importance sampling experiment."""

from pydantic import (
    BaseModel,
    Field,
    NonNegativeInt,
    PositiveFloat,
    PositiveInt,
)


class ExperimentConfig(BaseModel):
    """Draw budgets, repetitions and MCMC settings of an experiment run."""

    num_draws: PositiveInt = Field(
        default=1000,
        description="""Number of parameter draws per importance sampling
        estimate, the same budget is used for every strategy.""",
    )
    num_repeats: PositiveInt = Field(
        default=100,
        description="""Number of independent repetitions of each estimator
        used to measure the variance of the estimate.""",
    )
    seed: NonNegativeInt = Field(
        default=8675309,
        description="""Seed of the root jax PRNGKey, every random step of the
        experiment derives its key from this one.""",
    )
    num_warmup: PositiveInt = Field(default=500)
    num_samples: PositiveInt = Field(default=500)
    num_chains: PositiveInt = Field(default=1)
    nuts_max_tree_depth: PositiveInt = Field(default=10)
    proposal_inflation: PositiveFloat = Field(
        default=1.5,
        description="""Factor applied to the covariance of the fitted
        posterior approximation, values above 1 widen the proposal so its
        tails cover the posterior.""",
    )
    benchmark_runs: PositiveInt = Field(
        default=10,
        description="""Number of timed runs per benchmarked estimator.""",
    )
    progress_bar: bool = False
