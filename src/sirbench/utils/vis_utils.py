"""A set of utility functions for visualizing trajectories and weights."""

from typing import Optional

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns
from jax.typing import ArrayLike
from matplotlib.axes import Axes


class VisualizationError(Exception):
    """An exception class for Visualization Errors."""

    pass


def plot_trajectories(
    times: ArrayLike,
    trajectories: ArrayLike,
    observation: Optional[ArrayLike] = None,
    weights: Optional[ArrayLike] = None,
    matplotlib_style: list[str] | str = [
        "seaborn-v0_8-colorblind",
    ],
) -> plt.Figure:
    """Plot simulated infection curves against observed counts.

    Parameters
    ----------
    times : ArrayLike
        observation times, shape `(T,)`.
    trajectories : ArrayLike
        simulated curves, shape `(N, T)` or `(T,)`.
    observation : ArrayLike, optional
        observed counts, shape `(T,)`, drawn as points, by default None.
    weights : ArrayLike, optional
        importance weights of shape `(N,)`, used as line opacity so that
        heavily weighted trajectories stand out, by default None.
    matplotlib_style : list[str] | str, optional
        matplotlib style(s) to apply, by default ["seaborn-v0_8-colorblind"].

    Returns
    -------
    plt.Figure
        figure with a single axis.

    Raises
    ------
    VisualizationError
        if the number of weights does not match the number of trajectories.
    """
    times = np.asarray(times)
    trajectories = np.atleast_2d(np.asarray(trajectories))
    if weights is None:
        alphas = np.full(trajectories.shape[0], 0.3)
    else:
        weights = np.asarray(weights)
        if weights.shape[0] != trajectories.shape[0]:
            raise VisualizationError(
                f"got {weights.shape[0]} weights for "
                f"{trajectories.shape[0]} trajectories"
            )
        alphas = 0.05 + 0.95 * weights / np.max(weights)
    with plt.style.context(matplotlib_style):
        fig, ax = plt.subplots(figsize=(8, 4))
        for trajectory, alpha in zip(trajectories, alphas):
            ax.plot(times, trajectory, color="C0", alpha=float(alpha), lw=1)
        if observation is not None:
            ax.scatter(
                times,
                np.asarray(observation),
                color="C1",
                s=12,
                zorder=3,
                label="observed",
            )
            ax.legend(loc="upper right")
        ax.set_xlabel("day")
        ax.set_ylabel("infected")
    fig.tight_layout()
    return fig


def plot_weights(
    weights: ArrayLike,
    ax: Optional[Axes] = None,
) -> Axes:
    """Plot sorted importance weights, largest first."""
    weights = np.sort(np.asarray(weights))[::-1]
    if ax is None:
        _, ax = plt.subplots(figsize=(6, 3))
    ax.bar(np.arange(weights.shape[0]), weights, width=1.0)
    ax.set_xlabel("rank")
    ax.set_ylabel("weight")
    ax.set_title(f"ESS {1.0 / np.sum(weights**2):.1f} of {weights.shape[0]}")
    return ax


def plot_estimate_spread(
    estimates: dict[str, dict[str, list[float]]],
    true_values: Optional[dict[str, float]] = None,
    matplotlib_style: list[str] | str = [
        "seaborn-v0_8-colorblind",
    ],
) -> plt.Figure:
    """Violin plots of repeated posterior mean estimates per strategy.

    Parameters
    ----------
    estimates : dict[str, dict[str, list[float]]]
        strategy name -> parameter name -> repeated estimates.
    true_values : dict[str, float], optional
        parameter name -> true value, drawn as a horizontal line.

    Returns
    -------
    plt.Figure
        one subplot per parameter.
    """
    if len(estimates) == 0:
        raise VisualizationError("must provide estimates of a strategy")
    df = pd.DataFrame(
        [
            {"strategy": strategy, "param": param, "values": value}
            for strategy, params in estimates.items()
            for param, values in params.items()
            for value in values
        ]
    )
    params = list(df["param"].unique())
    with plt.style.context(matplotlib_style):
        fig, axs = plt.subplots(
            1, len(params), figsize=(4 * len(params), 4), squeeze=False
        )
    for ax, param in zip(axs.flatten(), params):
        sns.violinplot(
            data=df.loc[df["param"] == param],
            x="strategy",
            y="values",
            hue="strategy",
            ax=ax,
        )
        if true_values is not None and param in true_values:
            ax.axhline(true_values[param], color="k", ls="--", lw=1)
        ax.set_title(param)
        ax.set_xlabel("")
        ax.set_ylabel("")
    fig.suptitle("Repeated Posterior Mean Estimates")
    fig.tight_layout()
    return fig
