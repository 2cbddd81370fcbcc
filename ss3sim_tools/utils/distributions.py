"""
# Observation Error Distributions

This module provides the observation-error families used when sampling
indices of abundance from expected values, and the sampling function for
each family.

## Classes

- `ErrorFamily`: Distribution family of a fleet's observation error

## Functions

- `lognormal_error`: Bias-corrected lognormal perturbation of expected values
- `normal_error`: Additive normal perturbation of expected values
- `sample_lognormal`: Draw bias-corrected lognormal samples
- `draw_observations`: Row-wise sampling for mixed families

## Example Usage

```python
import numpy as np
from ss3sim_tools.utils.distributions import ErrorFamily, sample_lognormal

rng = np.random.default_rng(3)

# Stock Synthesis error type 0 is lognormal
family = ErrorFamily.from_errtype(0)
sample = family.sample(1.5e9, 0.2, rng=rng)

# Same draw without going through the family
sample = sample_lognormal(1.5e9, 0.2, rng=rng)
```
"""

from enum import Enum
from typing import Callable

import numpy as np
from numpy.typing import ArrayLike
from scipy.stats import norm


def lognormal_error(expected: ArrayLike, sd: ArrayLike, z: ArrayLike) -> np.ndarray:
    """
    Apply a bias-corrected lognormal error to expected values.

    Args:
        expected (ArrayLike): Expected values.
        sd (ArrayLike): Standard deviation of the error in log space.
        z (ArrayLike): Standard-normal variates, one per expected value.

    Returns:
        np.ndarray: `expected * exp(z * sd - sd**2 / 2)`.

    Note:
        Subtracting half the log-space variance makes the expected value of
        the sample equal to `expected`.
    """
    expected = np.asarray(expected, dtype=float)
    sd = np.asarray(sd, dtype=float)
    return expected * np.exp(np.asarray(z) * sd - sd ** 2 / 2)


def normal_error(expected: ArrayLike, sd: ArrayLike, z: ArrayLike) -> np.ndarray:
    """
    Apply an additive normal error to expected values.

    Args:
        expected (ArrayLike): Expected values.
        sd (ArrayLike): Standard deviation of the error.
        z (ArrayLike): Standard-normal variates, one per expected value.

    Returns:
        np.ndarray: `expected + z * sd`, i.e. a draw from Normal(expected, sd).
    """
    expected = np.asarray(expected, dtype=float)
    return expected + np.asarray(z) * np.asarray(sd, dtype=float)


class ErrorFamily(str, Enum):
    """
    Distribution family of a fleet's observation error.

    Stock Synthesis stores the family as the `Errtype` column of the
    `CPUEinfo` table, where 0 is lognormal. Every other code is sampled with
    a normal error.

    Values:
        LOGNORMAL: Multiplicative, bias-corrected lognormal error
        NORMAL: Additive normal error

    Example:
        ```python
        ErrorFamily.from_errtype(0)          # ErrorFamily.LOGNORMAL
        ErrorFamily.from_errtype(-1)         # ErrorFamily.NORMAL
        ErrorFamily.from_name("lognormal")   # ErrorFamily.LOGNORMAL
        ```
    """
    LOGNORMAL = "lognormal"
    NORMAL = "normal"

    @staticmethod
    def from_errtype(code: int) -> "ErrorFamily":
        """Map a Stock Synthesis `Errtype` code to its family."""
        return ErrorFamily.LOGNORMAL if int(code) == 0 else ErrorFamily.NORMAL

    @staticmethod
    def from_name(name: str) -> "ErrorFamily":
        """
        Create an ErrorFamily from a string name.

        Raises:
            ValueError: If name is not 'lognormal' or 'normal'.
        """
        try:
            return ErrorFamily(name.lower())
        except ValueError:
            raise ValueError(f"Unknown error family: {name}")

    @property
    def error(self) -> Callable:
        """Function applying this family's error to expected values."""
        return _ERRORS[self]

    def sample(self, expected: ArrayLike, sd: ArrayLike, rng=None) -> np.ndarray:
        """
        Draw observations around expected values.

        Args:
            expected (ArrayLike): Expected values.
            sd (ArrayLike): Observation error standard deviation(s).
            rng (np.random.Generator, optional): Generator to draw from. If
                None, NumPy's global random stream is used.

        Returns:
            np.ndarray: One sample per expected value.
        """
        expected = np.asarray(expected, dtype=float)
        z = norm.rvs(size=expected.shape or None, random_state=rng)
        return self.error(expected, sd, z)


_ERRORS = {
    ErrorFamily.LOGNORMAL: lognormal_error,
    ErrorFamily.NORMAL: normal_error,
}


def sample_lognormal(expected: ArrayLike, sd: ArrayLike, rng=None) -> np.ndarray:
    """
    Draw bias-corrected lognormal samples.

    Samples follow `expected * exp(Z * sd - sd**2 / 2)` with `Z ~ N(0, 1)`,
    the parameterization Stock Synthesis uses for index observations. If only
    the coefficient of variation is known, `sd` can be approximated with
    `sqrt(log(1 + CV**2))`.

    Args:
        expected (ArrayLike): Expected values.
        sd (ArrayLike): Standard deviation in log space.
        rng (np.random.Generator, optional): Generator to draw from. Defaults
            to NumPy's global random stream.

    Returns:
        np.ndarray: Samples with the same shape as `expected`.

    Example:
        ```python
        rng = np.random.default_rng(1)
        samples = sample_lognormal(np.full(10_000, 100.0), 0.3, rng=rng)
        samples.mean()  # close to 100
        ```
    """
    return ErrorFamily.LOGNORMAL.sample(expected, sd, rng=rng)


def draw_observations(
    expected: ArrayLike,
    sd: ArrayLike,
    families: list[ErrorFamily],
    rng=None
) -> np.ndarray:
    """
    Sample one observation per row, each with its own error family.

    A single standard-normal variate is drawn for every row, in row order,
    then passed through the row's family.

    Args:
        expected (ArrayLike): Expected value per row.
        sd (ArrayLike): Observation error standard deviation per row.
        families (list[ErrorFamily]): Error family per row.
        rng (np.random.Generator, optional): Generator to draw from. Defaults
            to NumPy's global random stream.

    Returns:
        np.ndarray: Sampled observations, aligned with the input rows.
    """
    expected = np.asarray(expected, dtype=float)
    sd = np.asarray(sd, dtype=float)
    families = [ErrorFamily(f) for f in families]

    z = norm.rvs(size=expected.shape, random_state=rng)
    out = np.empty_like(expected)
    for family in ErrorFamily:
        mask = np.array([f is family for f in families], dtype=bool)
        if mask.any():
            out[mask] = family.error(expected[mask], sd[mask], z[mask])
    return out
