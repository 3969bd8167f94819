"""A bundle of fixed values and prior distributions over SIR parameters."""

from typing import Union

import jax.numpy as jnp
from jax.typing import ArrayLike
from numpyro.distributions import Distribution
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeFloat,
    PositiveFloat,
    model_validator,
)
from typing_extensions import Self


class SIRParameterDistribution(BaseModel):
    """Parameters of an SIR model, each either fixed or drawn from a prior.

    Fields holding a numpyro `Distribution` are the free parameters that get
    sampled and inferred, the field name doubles as the numpyro site name.
    Fields holding a number are fixed for every draw.
    """

    # allow Distribution objects as field values
    model_config = ConfigDict(arbitrary_types_allowed=True)

    population_size: PositiveFloat = Field(
        description="""Total population N = S + I + R, always fixed."""
    )
    initial_infected: Union[PositiveFloat, ArrayLike, Distribution] = Field(
        description="""Number of infected individuals at t=0, the remainder
        of the population starts susceptible."""
    )
    beta: Union[NonNegativeFloat, ArrayLike, Distribution] = Field(
        description="""Transmission rate per day."""
    )
    gamma: Union[PositiveFloat, ArrayLike, Distribution] = Field(
        description="""Recovery rate per day, 1 / infectious period."""
    )

    @model_validator(mode="after")
    def _validate_fixed_values(self) -> Self:
        for name, strictly_positive in [
            ("initial_infected", True),
            ("beta", False),
            ("gamma", True),
        ]:
            value = getattr(self, name)
            if isinstance(value, Distribution):
                continue
            value = jnp.asarray(value)
            if value.ndim != 0:
                raise ValueError(
                    f"{name} must be a scalar or a Distribution, got an "
                    f"array of shape {value.shape}."
                )
            if strictly_positive and not value > 0:
                raise ValueError(f"{name} must be positive, got {value}.")
            if not value >= 0:
                raise ValueError(f"{name} must be non-negative, got {value}.")
        if not isinstance(self.initial_infected, Distribution):
            assert float(self.initial_infected) < self.population_size, (
                f"initial_infected ({self.initial_infected}) must be smaller "
                f"than population_size ({self.population_size})."
            )
        return self

    def free_parameters(self) -> dict[str, Distribution]:
        """Get the parameters described by a distribution, in field order."""
        return {
            name: value
            for name, value in self
            if isinstance(value, Distribution)
        }

    def fixed_parameters(self) -> dict[str, float]:
        """Get the parameters with a fixed value, in field order."""
        return {
            name: value
            for name, value in self
            if not isinstance(value, Distribution)
        }

    @property
    def is_fixed(self) -> bool:
        """Whether every parameter has a fixed value."""
        return len(self.free_parameters()) == 0
