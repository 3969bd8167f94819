"""Compare importance sampling strategies on a synthetic SIR epidemic.

Run as a script or cell by cell as a notebook.
"""

# %%
from functools import partial

import jax
import matplotlib.pyplot as plt

from sirbench import (
    PRIOR_STRATEGY,
    PROPOSAL_STRATEGY,
    ExperimentConfig,
    benchmark,
    compare_strategies,
    draw_parameters,
    fit_posterior_proposal,
    generate_observations,
    plot_estimate_spread,
    plot_trajectories,
    plot_weights,
    prior_importance_sampling,
    prior_predictive,
    proposal_importance_sampling,
    resolve_parameters,
    simulate_trajectory,
    sir_example,
    use_logging,
)

jax.config.update("jax_enable_x64", True)
use_logging("info", output="console")

if __name__ == "__main__":
    example = sir_example()
    experiment = ExperimentConfig(num_draws=1000, num_repeats=100)
    data_key, mcmc_key, repeat_key, plot_key = jax.random.split(
        jax.random.PRNGKey(experiment.seed), 4
    )
    # %%
    # generate synthetic counts from the true parameters
    true_trajectory = simulate_trajectory(
        resolve_parameters(example.true_parameters),
        example.observation_params,
        example.solver_params,
    )
    observation = generate_observations(
        data_key, true_trajectory, example.observation_params
    )
    times = example.observation_params.times_array()
    plt.plot(times, true_trajectory, label="true infected")
    plt.scatter(times, observation, s=10, color="C1", label="observed")
    plt.legend()
    plt.show()

    # %%
    # prior predictive, most trajectories miss the data entirely
    prior_draws = draw_parameters(example.prior, plot_key, 200)
    prior_trajectories = prior_predictive(
        example.prior,
        prior_draws,
        example.observation_params,
        example.solver_params,
    )
    plot_trajectories(times, prior_trajectories, observation)
    plt.show()

    # %%
    # fit the posterior with NUTS and approximate it with a normal
    # distribution in unconstrained space
    proposal = fit_posterior_proposal(
        mcmc_key,
        example.prior,
        observation,
        example.observation_params,
        example.solver_params,
        experiment,
    )
    print(f"proposal mean (unconstrained): {proposal.loc}")

    # %%
    # one estimate of each strategy with the same draw budget
    shared_args = dict(
        prior=example.prior,
        observation=observation,
        observation_params=example.observation_params,
        solver_params=example.solver_params,
        num_draws=experiment.num_draws,
    )
    estimators = {
        PRIOR_STRATEGY: partial(prior_importance_sampling, **shared_args),
        PROPOSAL_STRATEGY: partial(
            proposal_importance_sampling, proposal=proposal, **shared_args
        ),
    }
    fig, axs = plt.subplots(1, 2, figsize=(10, 3))
    for ax, (name, estimator) in zip(axs, estimators.items()):
        estimate = estimator(plot_key)
        print(f"{name}: mean {estimate.mean}, ESS {estimate.ess:.1f}")
        plot_weights(estimate.weights, ax=ax)
        ax.set_title(f"{name}, {ax.get_title()}")
    fig.tight_layout()
    plt.show()

    # %%
    # variance of the estimates over repeated runs
    comparison = compare_strategies(
        estimators, repeat_key, experiment.num_repeats
    )
    print(comparison.to_dataframe())
    print(
        "variance ratio proposal / prior: "
        f"{comparison.variance_ratio(PROPOSAL_STRATEGY, PRIOR_STRATEGY)}"
    )
    plot_estimate_spread(
        {
            name: summary.estimates
            for name, summary in comparison.summaries.items()
        },
        true_values={
            "beta": float(example.true_parameters.beta),
            "gamma": float(example.true_parameters.gamma),
        },
    )
    plt.show()

    # %%
    # wall-clock cost per estimate
    for name, estimator in estimators.items():
        timing = benchmark(
            estimator, plot_key, repeat=experiment.benchmark_runs
        )
        print(f"{name}: median {timing.median:.4f}s, mean {timing.mean:.4f}s")
    # the proposal strategy also paid for MCMC once
    mcmc_timing = benchmark(
        fit_posterior_proposal,
        mcmc_key,
        example.prior,
        observation,
        example.observation_params,
        example.solver_params,
        experiment,
        repeat=1,
    )
    print(f"MCMC and proposal fit: {mcmc_timing.median:.2f}s")
    ess_gain = (
        comparison.summaries[PROPOSAL_STRATEGY].mean_ess
        / comparison.summaries[PRIOR_STRATEGY].mean_ess
    )
    print(f"ESS gain of the proposal: {ess_gain:.1f}x")
