"""Configuration classes for replicate sampling settings.

This module provides the configuration class for Monte Carlo simulation
testing: which scenarios to sample, how many iterations, the seed, and the
metrics used to compare sampled and expected observations. It supports
serialization to and from JSON format for easy persistence and loading of
simulation configurations.

Typical usage example:

    from ss3sim_tools.montecarlo import MonteCarloConfig

    config = MonteCarloConfig.from_json("mc_config.json")
    config.iterations = 500
    config.to_json("updated_config.json")

A configuration file looks like:

    {
        "scenarios": {
            "base": {"fleets": [2], "years": [{"from": 76, "to": 100, "by": 2}], "sds_obs": [0.1]},
            "biased": {"fleets": [2], "years": [{"from": 76, "to": 100, "by": 2}],
                       "sds_obs": [0.1], "sds_out": [0.3]}
        },
        "iterations": 100,
        "seed": 42
    }
"""

from ..config.index import IndexSamplingConfig

import json
from dataclasses import dataclass, asdict, field


@dataclass
class MonteCarloConfig:
    """Configuration class for replicate sampling settings.

    Attributes:
        scenarios (dict[str, IndexSamplingConfig], optional): Sampling
            settings per scenario name. Scenario names become folder names.
            Defaults to no scenarios.
        iterations (int): Number of iterations sampled for every scenario.
            Defaults to 100.
        seed (int): Seed for the per-iteration random generators. Defaults
            to 42.
        num_worker (int): Number of parallel workers used when running a
            model on the sampled folders. Defaults to 4.
        dat_name (str): File name of the sampled data file in each iteration
            folder. Defaults to "ss3.dat".
        metrics (list[str]): Names of the metrics used by `Sim.evaluate`.
            Defaults to ["rmse", "mape"].

    Example:
        ```python
        config = MonteCarloConfig(
            scenarios={"base": IndexSamplingConfig([2], [[76, 78, 80]], [0.1])},
            iterations=50,
            seed=1
        )
        config.to_json("mc_config.json")

        # Load from file
        loaded_config = MonteCarloConfig.from_json("mc_config.json")
        ```
    """

    scenarios: dict[str, IndexSamplingConfig] = field(default_factory=dict)
    iterations: int = 100
    seed: int = 42
    num_worker: int = 4
    dat_name: str = "ss3.dat"
    metrics: list[str] = field(default_factory=lambda: ["rmse", "mape"])

    @classmethod
    def from_dict(cls, data: dict):
        """Create a MonteCarloConfig from a dictionary, converting scenarios."""
        data = dict(data)
        data['scenarios'] = {
            name: IndexSamplingConfig.from_dict(scenario)
            for name, scenario in (data.get('scenarios') or {}).items()
        }
        return cls(**data)

    @classmethod
    def from_json(cls, infile: str):
        """Create a MonteCarloConfig instance from a JSON file.

        Args:
            infile (str): Path to the JSON file containing the configuration
                data.

        Returns:
            MonteCarloConfig: A new MonteCarloConfig instance initialized
                with data from the file.

        Raises:
            FileNotFoundError: If the specified file does not exist.
            json.JSONDecodeError: If the file contains invalid JSON.
            KeyError: If a scenario is missing required keys.
            TypeError: If the loaded data doesn't match the expected structure.
        """
        with open(infile, "r") as f:
            data = json.load(f)
        return cls.from_dict(data)

    def to_json(self, outfile: str):
        """Serialize the configuration to a JSON file.

        Note:
            This method uses the dataclass `asdict()` function for serialization,
            which recursively converts nested scenario configurations as well.
            The file is opened in exclusive creation mode ("+x") to prevent
            accidental overwrites.
        """
        with open(outfile, "+x") as f:
            json.dump(asdict(self), f, indent=4)
