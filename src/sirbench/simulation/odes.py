"""Define the SIR ODE and the diffrax wrapper used to solve it."""

from inspect import getfullargspec
from typing import get_type_hints

import chex
import jax.numpy as jnp
from diffrax import (  # type: ignore
    AbstractStepSizeController,
    ConstantStepSize,
    ODETerm,
    PIDController,
    SaveAt,
    Solution,
    diffeqsolve,
)
from jax import Array
from jax.typing import ArrayLike

from ..config import SolverParams
from ..typing import CompartmentGradients, CompartmentState, ODE_Eqns


@chex.dataclass
class SIRODEParams:
    """The internal representation of the parameters passed to `sir_ode`."""

    beta: chex.ArrayDevice
    gamma: chex.ArrayDevice
    population_size: chex.ArrayDevice


def sir_ode(
    t: ArrayLike, state: CompartmentState, p: SIRODEParams
) -> CompartmentGradients:
    """A simple SIR ODE model with no time-varying components."""
    s, i, _ = state
    s_to_i = p.beta * s * i / p.population_size
    i_to_r = p.gamma * i
    ds = -s_to_i
    di = s_to_i - i_to_r
    dr = i_to_r
    return (ds, di, dr)


def simulate(
    ode: ODE_Eqns,
    initial_state: CompartmentState,
    ode_parameters: chex.dataclass,
    solver_parameters: SolverParams,
    save_times: ArrayLike,
) -> Solution:
    """Solve `ode` from t=0 up to the last of `save_times`.

    Parameters
    ----------
    ode: ODE_Eqns
        a callable that takes in a numeric time, a compartment state, and the
        passed `ode_parameters` in that order and returns the gradients
        of the compartment state at that numeric time.
    initial_state : CompartmentState
        tuple of jax arrays representing the compartments modeled by
        ODEs in their initial states at t=0.
    ode_parameters : chex.dataclass
        ode specific parameters, must be of the type `ode` annotates its
        third argument with.
    solver_parameters : SolverParams
        solver specific parameters that dictate how the ODE solver works.
    save_times : ArrayLike
        increasing, non-negative times at which the state is saved.

    Returns
    -------
    diffrax.Solution
        Solution object, sol.ys containing compartment states at each of
        `save_times`. For more information on whats included within
        diffrax.Solution see: https://docs.kidger.site/diffrax/api/solution/

    Raises
    ------
    TypeError
        `initial_state` must only contain jax.Array types.
    """
    if any(
        [not isinstance(compartment, Array) for compartment in initial_state]
    ):
        raise TypeError(
            "Please pass jax.numpy.array instead of np.array to ODEs"
        )
    # check that simulate passes expected params object to `ode`
    expected_ode_parameters_type = get_type_hints(ode)[
        getfullargspec(ode).args[2]
    ]
    assert type(ode_parameters) is expected_ode_parameters_type, (
        f"passed {type(ode_parameters)} ode parameters, but your ODE model "
        f"expects {expected_ode_parameters_type}"
    )
    save_times = jnp.asarray(save_times)
    t0 = 0.0
    t1 = save_times[-1]
    dt0 = None  # first step size determined automatically

    stepsize_controller: AbstractStepSizeController
    if solver_parameters.constant_step_size > 0.0:
        stepsize_controller = ConstantStepSize()
        dt0 = solver_parameters.constant_step_size
    else:
        stepsize_controller = PIDController(
            rtol=solver_parameters.ode_solver_rel_tolerance,
            atol=solver_parameters.ode_solver_abs_tolerance,
        )

    solution = diffeqsolve(
        ODETerm(ode),
        solver_parameters.solver_method,
        t0,
        t1,
        dt0,
        initial_state,
        args=ode_parameters,
        stepsize_controller=stepsize_controller,
        saveat=SaveAt(ts=save_times),
        max_steps=solver_parameters.max_steps,
    )
    return solution
