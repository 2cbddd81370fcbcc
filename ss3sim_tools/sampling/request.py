"""Per-fleet sampling requests.

A `FleetRequest` bundles everything needed to sample one fleet: the years to
sample, the season of each year and the observation error used to sample and
to report. Scalar entries are broadcast to the number of years when the
request is created, so a request that exists is always internally consistent.

`build_requests` is the front door for the parallel-list style of arguments
(one list entry per fleet), and `standardize_sampling_args` exposes the
broadcasting rule on its own.

Typical usage example:

    from ss3sim_tools.sampling import FleetRequest, build_requests

    request = FleetRequest.create(fleet=2, years=range(76, 101, 2), sds_obs=0.1)

    requests = build_requests(
        fleets=[2, 3],
        years=[range(76, 101, 2), [90, 95, 100]],
        sds_obs=[0.1, [0.2, 0.3, 0.4]],
    )
"""

from dataclasses import dataclass
from typing import Any, Sequence

import numpy as np
import pandas as pd

from .errors import SamplingError, ShapeMismatchError


REQUEST_COLUMNS = ["year", "seas", "index", "se_in", "se_log"]


def _as_list(value: Any) -> list:
    """Flatten a scalar, range or sequence into a plain list."""
    return np.atleast_1d(np.asarray(value)).ravel().tolist()


def _broadcast(value: Any, n: int, name: str, fleet: int) -> tuple:
    values = _as_list(value)
    if len(values) == 1:
        return tuple(values * n)
    if len(values) != n:
        raise ShapeMismatchError(
            f"Length of {name} ({len(values)}) does not match length of "
            f"years ({n}) for fleet {fleet}"
        )
    return tuple(values)


@dataclass(frozen=True)
class FleetRequest:
    """
    Sampling request for a single fleet.

    All sequences have one entry per sampled year.

    Attributes:
        fleet (int): Fleet (index) number in the data file.
        years (tuple[int]): Years to sample.
        seas (tuple[int]): Season of each sampled year.
        sds_obs (tuple[float]): Standard deviation used to sample each year.
        sds_out (tuple[float]): Standard deviation written to the output for
            each year.
    """
    fleet: int
    years: tuple[int, ...]
    seas: tuple[int, ...]
    sds_obs: tuple[float, ...]
    sds_out: tuple[float, ...]

    @classmethod
    def create(
        cls,
        fleet: int,
        years: Sequence[int] | int,
        sds_obs: Sequence[float] | float,
        sds_out: Sequence[float] | float = None,
        seas: Sequence[int] | int = 1,
    ) -> "FleetRequest":
        """
        Build a request, broadcasting single values over the years.

        Args:
            fleet (int): Fleet number.
            years (Sequence[int] | int): Years to sample.
            sds_obs (Sequence[float] | float): One value for all years or one
                value per year.
            sds_out (Sequence[float] | float, optional): Same shape rules as
                `sds_obs`. Defaults to `sds_obs`.
            seas (Sequence[int] | int, optional): One season for all years or
                one per year. Defaults to 1.

        Returns:
            FleetRequest: Request with every sequence as long as `years`.

        Raises:
            ShapeMismatchError: If a sequence longer than one does not match
                the number of years.
            SamplingError: If a standard deviation is negative or not finite.
        """
        fleet = int(fleet)
        years = tuple(int(y) for y in _as_list(years))
        n = len(years)

        if sds_out is None:
            sds_out = sds_obs

        sds_obs = tuple(float(s) for s in _broadcast(sds_obs, n, "sds_obs", fleet))
        sds_out = tuple(float(s) for s in _broadcast(sds_out, n, "sds_out", fleet))
        seas = tuple(int(s) for s in _broadcast(seas, n, "seas", fleet))

        if any(not np.isfinite(s) or s < 0 for s in sds_obs + sds_out):
            raise SamplingError(
                f"Standard deviations must be finite and non-negative for fleet {fleet}"
            )

        return cls(fleet=fleet, years=years, seas=seas, sds_obs=sds_obs, sds_out=sds_out)

    def combinations(self) -> list[tuple[int, int, int]]:
        """Requested (fleet, year, season) combinations in year order."""
        return [(self.fleet, y, s) for y, s in zip(self.years, self.seas)]

    def to_frame(self) -> pd.DataFrame:
        """One row per sampled year with the columns used for joining."""
        return pd.DataFrame({
            "year": np.asarray(self.years, dtype=np.int64),
            "seas": np.asarray(self.seas, dtype=np.int64),
            "index": np.full(len(self.years), self.fleet, dtype=np.int64),
            "se_in": np.asarray(self.sds_obs, dtype=float),
            "se_log": np.asarray(self.sds_out, dtype=float),
        }, columns=REQUEST_COLUMNS)


def standardize_sampling_args(
    fleets: Sequence[int],
    years: Sequence[Sequence[int]],
    other_input: Sequence[Any] | Any,
) -> list[list]:
    """
    Broadcast a per-fleet argument so each fleet has one value per year.

    A single entry (or a bare scalar) is reused for every fleet, and a single
    value within a fleet's entry is reused for every one of its years.

    Args:
        fleets (Sequence[int]): Fleet numbers.
        years (Sequence[Sequence[int]]): Years per fleet.
        other_input (Sequence[Any] | Any): Value(s) to broadcast.

    Returns:
        list[list]: One list per fleet, each as long as that fleet's years.

    Raises:
        ShapeMismatchError: If the number of entries matches neither one nor
            the number of fleets, or an entry does not match its years.

    Example:
        ```python
        standardize_sampling_args([1, 2], [[1, 2, 3], [5, 6]], [0.1])
        # [[0.1, 0.1, 0.1], [0.1, 0.1]]
        ```
    """
    if np.isscalar(other_input):
        other_input = [other_input]
    other_input = list(other_input)

    if len(other_input) == 1 and len(fleets) != 1:
        other_input = other_input * len(fleets)
    if len(other_input) != len(fleets):
        raise ShapeMismatchError(
            f"Expected 1 or {len(fleets)} entries, one per fleet, got {len(other_input)}"
        )

    return [
        list(_broadcast(value, len(_as_list(yrs)), "input", int(fleet)))
        for fleet, yrs, value in zip(fleets, years, other_input)
    ]


def build_requests(
    fleets: Sequence[int],
    years: Sequence[Sequence[int]],
    sds_obs: Sequence[Any],
    sds_out: Sequence[Any] = None,
    seas: Sequence[Any] | int = None,
) -> list[FleetRequest]:
    """
    Validate parallel per-fleet lists and turn them into requests.

    Args:
        fleets (Sequence[int]): Fleet numbers to sample.
        years (Sequence[Sequence[int]]): One sequence of years per fleet.
        sds_obs (Sequence[Any]): One entry per fleet, each a single value or
            one value per year.
        sds_out (Sequence[Any], optional): Same shape as `sds_obs`. Defaults
            to `sds_obs`.
        seas (Sequence[Any] | int, optional): One entry per fleet, or a
            single entry used for every fleet. Defaults to season 1.

    Returns:
        list[FleetRequest]: One request per fleet, in the order given.

    Raises:
        ShapeMismatchError: If list lengths disagree with the number of fleets
            or with a fleet's years.
    """
    fleets = [int(f) for f in _as_list(fleets)]
    n_fleets = len(fleets)

    if np.isscalar(sds_obs) or len(sds_obs) != n_fleets:
        raise ShapeMismatchError("sds_obs needs to be a list of same length as fleets")
    if np.isscalar(years) or len(years) != n_fleets:
        raise ShapeMismatchError("years needs to be a list of same length as fleets")

    if sds_out is None:
        sds_out = sds_obs
    elif np.isscalar(sds_out) or len(sds_out) != n_fleets:
        raise ShapeMismatchError("sds_out needs to be a list of same length as fleets")

    for fleet, yrs, sds in zip(fleets, years, sds_obs):
        n_sds = len(_as_list(sds))
        if n_sds > 1 and n_sds != len(_as_list(yrs)):
            raise ShapeMismatchError(
                f"Length of sds_obs does not match length of years for fleet {fleet}"
            )

    if seas is None:
        seas = [1]
    elif np.isscalar(seas):
        seas = [seas]
    seas = list(seas)
    if len(seas) == 1 and n_fleets != 1:
        seas = seas * n_fleets
    if len(seas) != n_fleets:
        raise ShapeMismatchError("seas needs to be a list of length 1 or the same length as fleets")

    return [
        FleetRequest.create(fleet, yrs, sds_obs=obs, sds_out=out, seas=s)
        for fleet, yrs, obs, out, s in zip(fleets, years, sds_obs, sds_out, seas)
    ]
