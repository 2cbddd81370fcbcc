"""
# Index Sampling Configuration

This module provides the configuration class describing how an index of
abundance is sampled in a scenario.

## Classes

- `IndexSamplingConfig`: Fleets, years, seasons and observation errors

## Example Usage

```python
from ss3sim_tools.config import IndexSamplingConfig

config = IndexSamplingConfig.from_dict({
    'fleets': [2],
    'years': [{'from': 76, 'to': 100, 'by': 2}],
    'sds_obs': [0.1],
    'sds_out': [0.2]
})
requests = config.to_requests()
```
"""

from ss3sim_tools.sampling.request import FleetRequest, build_requests

import json
from dataclasses import dataclass, asdict
from typing import Any, Optional


def _expand_years(years: Any) -> list[int]:
    """Expand a `{'from', 'to', 'by'}` mapping into an inclusive year list."""
    if isinstance(years, dict):
        by = years.get("by", 1)
        return list(range(years["from"], years["to"] + 1, by))
    if isinstance(years, (int, float)):
        return [int(years)]
    return [int(y) for y in years]


@dataclass
class IndexSamplingConfig:
    """
    Configuration for sampling an index of abundance.

    The fields mirror the arguments of `sample_index`: parallel lists with one
    entry per fleet.

    Attributes:
        fleets (list[int]): Fleets to sample.
        years (list[list[int]]): Years to sample for each fleet.
        sds_obs (list): Observation error standard deviation per fleet, a
            single value or one per year.
        sds_out (list, optional): Standard deviation written to the output.
            Defaults to None, meaning `sds_obs`.
        seas (list, optional): Season per fleet. Defaults to None, meaning
            season 1 for every fleet.

    Example:
        ```python
        config = IndexSamplingConfig(
            fleets=[2, 3],
            years=[list(range(76, 101, 2)), [90, 95, 100]],
            sds_obs=[0.1, 0.2]
        )
        config.to_json("index_config.json")
        ```
    """

    fleets: list[int]
    years: list[list[int]]
    sds_obs: list[Any]
    sds_out: Optional[list[Any]] = None
    seas: Optional[list[Any]] = None

    @classmethod
    def from_dict(cls, data: dict):
        """
        Create an IndexSamplingConfig from a dictionary.

        Each entry of 'years' may be a list of years, a single year, or a
        mapping with 'from', 'to' and optional 'by' keys, expanded inclusively.

        Args:
            data (dict): Configuration with keys 'fleets', 'years', 'sds_obs'
                and optionally 'sds_out' and 'seas'.

        Returns:
            IndexSamplingConfig: Configured instance.

        Raises:
            KeyError: If a required key is missing.
        """
        return cls(
            fleets=[int(f) for f in data["fleets"]],
            years=[_expand_years(y) for y in data["years"]],
            sds_obs=list(data["sds_obs"]),
            sds_out=data.get("sds_out"),
            seas=data.get("seas"),
        )

    @classmethod
    def from_json(cls, infile: str):
        """
        Create an IndexSamplingConfig from a JSON file.

        Raises:
            FileNotFoundError: If the specified file does not exist.
            json.JSONDecodeError: If the file contains invalid JSON.
        """
        with open(infile, "r") as f:
            data = json.load(f)
        return cls.from_dict(data)

    def to_dict(self) -> dict:
        return asdict(self)

    def to_json(self, outfile: str):
        """
        Serialize the configuration to a JSON file.

        Note:
            The file is opened in exclusive creation mode ("+x"), so an
            existing file raises FileExistsError instead of being replaced.
        """
        with open(outfile, "+x") as f:
            json.dump(self.to_dict(), f, indent=4)

    def to_requests(self) -> list[FleetRequest]:
        """Validate the lists and convert them into per-fleet requests."""
        return build_requests(
            self.fleets,
            self.years,
            self.sds_obs,
            sds_out=self.sds_out,
            seas=self.seas,
        )
