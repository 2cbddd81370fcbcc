"""Sample an index of abundance with observation error.

This module creates an index of abundance by sampling from the expected
values of a data file for chosen fleets in chosen years. Samples from a
lognormal fleet follow

    B_y * exp(Z * sd_obs - sd_obs**2 / 2),    Z ~ N(0, 1)

where B_y is the expected value in year y and sd_obs is the standard error of
log(B_y). This is the parameterization Stock Synthesis uses for indices, and
the second term is the lognormal bias correction that keeps the expected
value of the sample at B_y. Fleets whose `Errtype` is not 0 are sampled from
Normal(B_y, sd_obs).

If only the coefficient of variation is known, sd_obs can be approximated
with sqrt(log(1 + CV**2)). A normal or proportional error only approximates
the lognormal well when the variance is low (CV < 0.5).

Typical usage example:

    import numpy as np
    from ss3sim_tools.utils.datfile import read_dat
    from ss3sim_tools.sampling import sample_index

    dat = read_dat("ss3_expected_values.dat")
    years = list(range(76, 101, 2))
    dat = sample_index(
        dat,
        fleets=[2],
        years=[years],
        sds_obs=[np.linspace(0.001, 0.1, len(years))],
        rng=np.random.default_rng(3),
    )
"""

from typing import Any, Sequence

import logging
import numpy as np
import pandas as pd

from ss3sim_tools.utils.datfile import CPUE_COLUMNS, DatList, write_dat
from ss3sim_tools.utils.distributions import ErrorFamily, draw_observations
from .errors import EmptyJoinError, InvalidDatError, UnknownFleetError
from .request import FleetRequest, build_requests


KEY_COLUMNS = ["index", "year", "seas"]


def _get_cpue(dat_list: dict) -> pd.DataFrame:
    if not isinstance(dat_list, dict) or dat_list.get("CPUE") is None:
        raise InvalidDatError("dat_list must be a data-file structure read in using read_dat().")
    cpue = dat_list["CPUE"]
    missing = [c for c in ("year", "seas", "index", "obs") if c not in cpue.columns]
    if missing:
        raise InvalidDatError(f"CPUE table is missing columns: {missing}")
    return cpue


def _check_fleets(cpue: pd.DataFrame, fleets: Sequence[int]):
    available = set(int(f) for f in cpue["index"].unique())
    unknown = [int(f) for f in fleets if int(f) not in available]
    if unknown:
        raise UnknownFleetError(
            f"The specified fleet numbers do not match input file: {unknown}"
        )


def _format_combinations(combos: list[tuple[int, int, int]]) -> str:
    return "\n".join(f"  fleet {f}, year {y}, seas {s}" for f, y, s in combos)


def resolve_error_families(dat_list: dict, fleets: Sequence[int]) -> list[ErrorFamily]:
    """
    Look up the error family of each fleet in the `CPUEinfo` table.

    Args:
        dat_list (dict): Data-file structure with a `CPUEinfo` table holding
            `Fleet` and `Errtype` columns.
        fleets (Sequence[int]): Fleet of each row to resolve.

    Returns:
        list[ErrorFamily]: One family per entry of `fleets`.

    Raises:
        UnknownFleetError: If `CPUEinfo` is missing or lacks a fleet.
    """
    info = dat_list.get("CPUEinfo")
    if info is None:
        raise UnknownFleetError("dat_list has no CPUEinfo table to look up error types")

    lookup = {
        int(fleet): ErrorFamily.from_errtype(errtype)
        for fleet, errtype in zip(info["Fleet"], info["Errtype"])
    }
    missing = sorted(set(int(f) for f in fleets) - set(lookup))
    if missing:
        raise UnknownFleetError(f"Fleets {missing} are not listed in CPUEinfo")

    return [lookup[int(f)] for f in fleets]


def sample_index_requests(
    dat_list: dict,
    requests: Sequence[FleetRequest],
    outfile: str = None,
    rng=None,
) -> DatList:
    """
    Replace the index table of a data file with sampled observations.

    Args:
        dat_list (dict): Data-file structure holding expected values in its
            `CPUE` table and error types in `CPUEinfo`. It is modified in
            place.
        requests (Sequence[FleetRequest]): What to sample, one per fleet.
        outfile (str, optional): If given, the updated data file is written
            here, replacing any existing file.
        rng (np.random.Generator, optional): Generator to draw from. If None,
            NumPy's global random stream is used. This function never seeds.

    Returns:
        DatList: `dat_list` with `CPUE` holding the sampled rows, sorted by
            fleet, year and season, and `N_cpue` set to the row count.

    Raises:
        InvalidDatError: If `dat_list` has no `CPUE` table.
        UnknownFleetError: If a requested fleet is not in the data.
        EmptyJoinError: If no requested combination has an expected value.
    """
    cpue = _get_cpue(dat_list)
    _check_fleets(cpue, [r.fleet for r in requests])

    if not requests:
        sampled = pd.DataFrame(
            {c: pd.Series(dtype="int64" if c in KEY_COLUMNS else float) for c in CPUE_COLUMNS}
        )
    else:
        wanted = pd.concat([r.to_frame() for r in requests], ignore_index=True)
        expected = cpue[["year", "seas", "index", "obs"]].rename(columns={"obs": "obs_old"})
        for col in KEY_COLUMNS:
            expected[col] = expected[col].astype("int64")

        joined = wanted.merge(expected, on=["year", "seas", "index"], how="left", indicator=True)
        unmatched = joined.loc[joined["_merge"] == "left_only", KEY_COLUMNS]
        combos = list(unmatched.itertuples(index=False, name=None))

        if len(combos) == len(joined):
            raise EmptyJoinError(
                "The following specified years, seas, index combinations are not "
                "in dat_list, thus these expected values are not available:\n"
                + _format_combinations(combos)
            )
        if combos:
            logging.warning(
                f"Skipping combinations without expected values:\n{_format_combinations(combos)}"
            )

        joined = joined[joined["_merge"] == "both"]
        joined = joined.sort_values(KEY_COLUMNS, kind="mergesort").reset_index(drop=True)

        families = resolve_error_families(dat_list, joined["index"])
        joined["obs"] = draw_observations(joined["obs_old"], joined["se_in"], families, rng=rng)
        sampled = joined[CPUE_COLUMNS]

    dat_list["CPUE"] = sampled
    dat_list["N_cpue"] = int(len(sampled)) if requests else 0

    if outfile is not None:
        write_dat(dat_list, outfile, overwrite=True)
        logging.info(f"Wrote sampled index to {outfile}")

    return dat_list


def sample_index(
    dat_list: dict,
    fleets: Sequence[int],
    years: Sequence[Sequence[int]],
    sds_obs: Sequence[Any],
    sds_out: Sequence[Any] = None,
    seas: Sequence[Any] | int = None,
    outfile: str = None,
    rng=None,
) -> DatList:
    """
    Sample an index of abundance from expected values.

    Arguments are parallel lists with one entry per fleet. Each entry of
    `sds_obs`, `sds_out` and `seas` is either a single value, used for all of
    that fleet's years, or one value per year.

    Args:
        dat_list (dict): Data-file structure with expected values in `CPUE`.
            Modified in place.
        fleets (Sequence[int]): Fleets to sample.
        years (Sequence[Sequence[int]]): Years to sample, per fleet. Fewer
            years than are in the data may be sampled, but not more.
        sds_obs (Sequence[Any]): Observation error standard deviation used
            to sample, per fleet.
        sds_out (Sequence[Any], optional): Standard deviation written to the
            `se_log` column, per fleet. Setting it apart from `sds_obs` tests
            what happens when the model's input error is biased. Defaults to
            `sds_obs`.
        seas (Sequence[Any] | int, optional): Season(s) per fleet. A single
            entry is used for every fleet. Defaults to season 1.
        outfile (str, optional): Where to write the updated data file.
        rng (np.random.Generator, optional): Generator to draw from. Defaults
            to NumPy's global random stream.

    Returns:
        DatList: The updated data-file structure.

    Raises:
        InvalidDatError: If `dat_list` has no `CPUE` table.
        UnknownFleetError: If a fleet is not in the data.
        ShapeMismatchError: If the per-fleet lists disagree in length.
        EmptyJoinError: If no requested combination has an expected value.

    Example:
        ```python
        ex = sample_index(
            dat,
            fleets=[2],
            years=[range(76, 101, 2)],
            sds_obs=[0.01],
            sds_out=[0.2],
            rng=np.random.default_rng(3),
        )
        assert (ex["CPUE"]["se_log"] == 0.2).all()
        ```
    """
    fleets = [int(f) for f in np.atleast_1d(fleets)]
    _check_fleets(_get_cpue(dat_list), fleets)
    requests = build_requests(fleets, years, sds_obs, sds_out=sds_out, seas=seas)
    return sample_index_requests(dat_list, requests, outfile=outfile, rng=rng)
