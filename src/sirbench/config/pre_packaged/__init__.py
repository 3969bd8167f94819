"""A module containing pre-packaged experiment setups for off the shelf use."""

from .sir_example import SIRExample, sir_example

__all__ = ["SIRExample", "sir_example"]
