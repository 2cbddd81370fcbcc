"""Exceptions raised while validating sampling requests.

Every sampling error is raised before any random draw is made, so a failed
call never leaves a partially sampled data file behind. All of them derive
from `ValueError`, so callers that only care about bad input can catch that.
"""


class SamplingError(ValueError):
    """Base class for invalid sampling input."""


class InvalidDatError(SamplingError):
    """Input is not a data-file structure with an index table."""


class ShapeMismatchError(SamplingError):
    """Parallel per-fleet arguments disagree in length."""


class UnknownFleetError(SamplingError):
    """A requested fleet is not present in the data file."""


class EmptyJoinError(SamplingError):
    """None of the requested fleet, year and season combinations exist."""
