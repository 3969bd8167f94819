"""Module containing parameter classes for the solver and observation model."""

from typing import List, Union

import jax.numpy as jnp
from diffrax import AbstractSolver, Tsit5
from jax import Array
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeFloat,
    PositiveFloat,
    PositiveInt,
    field_validator,
    model_validator,
)
from typing_extensions import Self


class SolverParams(BaseModel):
    """Parameters used by the ODE solver."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    solver_method: AbstractSolver = Field(
        default_factory=lambda: Tsit5(),
        description="""What sort of differential equation solver you wish to
        use to solve ODEs, defaults to Tsit5(), a general solver good for
        non-stiff problems. For more information on picking a solver see:
        https://docs.kidger.site/diffrax/usage/how-to-choose-a-solver/""",
    )
    ode_solver_rel_tolerance: PositiveFloat = Field(
        default=1e-5,
        description="""Solver relative tolerance, used for adaptive step sizer
        to decide the size of a subsequent step. Use constant_step_size to
        switch to constant solver mode.""",
    )
    ode_solver_abs_tolerance: PositiveFloat = Field(
        default=1e-6,
        description="""Solver absolute tolerance, used for adaptive step sizer
        to decide the size of a subsequent step. Use constant_step_size to
        switch to constant solver mode.""",
    )
    max_steps: PositiveInt = Field(
        default=int(1e5),
        description="""The maximum number of steps the ode solver will take
        before raising an error.""",
    )
    constant_step_size: NonNegativeFloat = Field(
        default=0,
        description="""If non-zero, solver will use constant step size
        equal to the value set. If 0 solver will use adaptive step size with
        ode_solver_rel/abs_tolerance""",
    )


class ObservationParams(BaseModel):
    """Design of the count observation process.

    Observations are taken of the infected compartment at each of `times`,
    with negative binomial noise of dispersion `d` (variance
    `mean + d * mean**2`). A dispersion of zero is a Poisson observation.
    """

    times: List[PositiveFloat] = Field(
        description="""Strictly increasing days since the start of the
        epidemic at which the infection curve is observed."""
    )
    dispersion: Union[NonNegativeFloat, List[NonNegativeFloat]] = Field(
        default=0.0,
        description="""Negative binomial dispersion, either one value shared
        by all observation times or one value per time point. 0 = Poisson.""",
    )

    @field_validator("times", mode="after")
    @classmethod
    def _validate_times_increasing(cls, times: List[float]) -> List[float]:
        if len(times) == 0:
            raise ValueError("times must contain at least one observation.")
        if any(later <= earlier for earlier, later in zip(times, times[1:])):
            raise ValueError(f"times must be strictly increasing, got {times}")
        return times

    @model_validator(mode="after")
    def _validate_dispersion_length(self) -> Self:
        if isinstance(self.dispersion, list):
            assert len(self.dispersion) == len(self.times), (
                f"dispersion has {len(self.dispersion)} values but there are "
                f"{len(self.times)} observation times."
            )
        return self

    @property
    def num_observations(self) -> int:
        """Number of observation time points."""
        return len(self.times)

    def times_array(self) -> Array:
        """Observation times as a jax array."""
        return jnp.asarray(self.times)

    def dispersion_array(self) -> Array:
        """Dispersion broadcast to one value per observation time."""
        return jnp.broadcast_to(
            jnp.asarray(self.dispersion), (self.num_observations,)
        )
