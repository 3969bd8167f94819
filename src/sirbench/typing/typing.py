"""Module for declaring types used across SIRBench."""

from typing import Annotated, Callable, Dict, Tuple

import jax
from jaxtyping import PyTree
from pydantic import BeforeValidator

CompartmentState = Tuple[jax.Array, ...]
CompartmentGradients = Tuple[jax.Array, ...]

ODE_Eqns = Callable[
    [jax.typing.ArrayLike, CompartmentState, PyTree],
    CompartmentGradients,
]

# one value per observation time, shape (T,) or (num_draws, T) when batched.
Trajectory = jax.Array
# noisy counts, same length as a Trajectory.
Observation = jax.Array
# non-negative, one per parameter draw, sums to 1 once normalized.
WeightSet = jax.Array
# parameter name -> array of shape (num_draws,)
ParameterDraws = Dict[str, jax.Array]


def _verify_name(name: str) -> str:
    """Validate to ensure names have no spaces and dont begin with a number."""
    if len(name) == 0:
        raise ValueError("Name can not be empty.")
    elif name[0].isnumeric():
        raise ValueError("Name can not start with a number.")
    elif " " in name:
        raise ValueError("Name can not have spaces.")
    elif not all([char.isalnum() or char == "_" for char in name]):
        raise ValueError("Name can only contain alphanumerics or underscores.")
    return name


# a str with no spaces or leading numbers, usable as a numpyro site name.
SIRName = Annotated[str, BeforeValidator(_verify_name)]
