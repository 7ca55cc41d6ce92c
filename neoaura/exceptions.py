"""
Exceptions and warning categories raised by the neoaura engine.

Programmer errors (an unknown deflection method, a negative time to impact)
are raised as ConfigurationError. Physics trouble inside a simulation tick
is never raised: the engine returns a fallback value and emits one of the
warning categories below so the caller can observe or filter it.
"""


class NeoAuraError(Exception):
    """Base class for all neoaura errors."""


class ConfigurationError(NeoAuraError, ValueError):
    """Invalid call: unknown method id, non-positive time to impact, horizon over the cap."""


class DegenerateOrbitWarning(RuntimeWarning):
    """Orbital elements outside the bound-orbit domain; a fallback value was used."""


class NumericDivergenceWarning(RuntimeWarning):
    """A solver failed to converge or produced non-finite values; a fallback was used."""
