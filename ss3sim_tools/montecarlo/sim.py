"""Replicate sampling of scenarios with per-iteration random generators.

This module provides the Sim class, which samples observations from a set of
expected values once per iteration of every scenario, lays the sampled data
files out in a `scenario/iteration` folder structure, optionally launches an
assessment model in each folder, and summarizes the sampled observations.

Each iteration draws from its own generator, spawned from the configured
seed. Iteration i uses the same generator in every scenario, so differences
between scenarios are not confounded with sampling noise.

Typical usage example:

```python
    from ss3sim_tools import SS3Model
    from ss3sim_tools.montecarlo import MonteCarloConfig, Sim
    from ss3sim_tools.utils.datfile import read_dat

    expected = read_dat("ss3_expected_values.dat")
    config = MonteCarloConfig.from_json("mc_config.json")
    sim = Sim(expected, config, model=SS3Model(run_kwargs={"exe": "ss3"}))
    results = sim.run("sims/")
    stats = sim.analyze(results)
    errors = sim.evaluate(results)
```
"""

# Model running
from ss3sim_tools import Model
from .config import MonteCarloConfig
from ss3sim_tools.sampling import sample_index_requests
from ss3sim_tools.utils.datfile import DatList, write_dat
from ss3sim_tools.utils.metric import Metric
from ss3sim_tools.utils.results import IterationResult, StatsResults

# Data
import pandas as pd
import numpy as np

import os
import logging

# Plotting
import matplotlib.pyplot as plt


KEY_COLUMNS = ["index", "year", "seas"]


class Sim:
    """Replicate sampler over scenarios and iterations.

    Attributes:
        expected (DatList): Data file holding expected values. Never modified.
        requests (dict[str, list[FleetRequest]]): Validated sampling requests
            per scenario.
        iterations (int): Number of iterations per scenario.
        seed (int): Seed the per-iteration generators are spawned from.
        dat_name (str): Name of the sampled data file in each folder.
        metrics (list[Metric]): Metrics used by `evaluate`.
        model (Model): Model launched in each folder, or None.
        run_kwargs (dict): Arguments passed to the model runs.
    """

    def __init__(
        self,
        expected: DatList,
        config: MonteCarloConfig,
        model: Model = None,
        run_kwargs: dict = None,
    ):
        """Initializes the Sim and validates every scenario's sampling settings.

        Args:
            expected (DatList): Data file with expected values in `CPUE`.
            config (MonteCarloConfig): Scenarios, iterations, seed and metrics.
            model (Model, optional): Model to run on the sampled folders.
                Defaults to None, which only samples.
            run_kwargs (dict, optional): Keyword arguments for the model runs.
                Defaults to the model's own `run_kwargs`.

        Raises:
            ShapeMismatchError: If a scenario's per-fleet lists disagree.
            ValueError: If a metric name is unknown.
        """
        self.expected = DatList(expected)
        self.requests = {
            name: scenario.to_requests()
            for name, scenario in (config.scenarios or {}).items()
        }
        self.iterations: int = config.iterations
        self.seed: int = config.seed
        self.num_worker: int = config.num_worker
        self.dat_name: str = config.dat_name
        self.metrics = [Metric.from_name(m) for m in config.metrics]

        self.model: Model = model
        if run_kwargs is None:
            run_kwargs = dict(model.run_kwargs) if model is not None else {}
        self.run_kwargs: dict = dict(run_kwargs)

        # Ensure return_on_fail is passed in kwargs
        self.run_kwargs["return_on_fail"] = self.run_kwargs.get("return_on_fail", True)

        self._seeds = np.random.SeedSequence(self.seed).spawn(self.iterations)

    def get_rng(self, iteration: int) -> np.random.Generator:
        """Fresh generator for a 1-based iteration number."""
        if not 1 <= iteration <= self.iterations:
            raise ValueError(f"iteration must be between 1 and {self.iterations}, got {iteration}")
        return np.random.default_rng(self._seeds[iteration - 1])

    def sample(self, scenario: str, iteration: int) -> DatList:
        """Sample the expected values for one scenario iteration.

        Args:
            scenario (str): Scenario name from the configuration.
            iteration (int): Iteration number, starting at 1.

        Returns:
            DatList: Copy of the expected data file with sampled observations.

        Raises:
            KeyError: If the scenario is not configured.
        """
        return sample_index_requests(
            self.expected.copy(),
            self.requests[scenario],
            rng=self.get_rng(iteration)
        )

    def run(
        self,
        out_dir: str = None,
        parallel: bool = True,
        workers: int = None,
    ) -> list[IterationResult]:
        """Samples every iteration of every scenario, optionally running the model.

        With an output directory, each sampled data file is written to
        `out_dir/<scenario>/<iteration>/<dat_name>`. If a model is attached,
        it is then launched in each of those folders.

        Args:
            out_dir (str, optional): Root of the folder structure. Defaults to
                None, which keeps the samples in memory only.
            parallel (bool, optional): Launch model runs in parallel. Defaults
                to True.
            workers (int, optional): Number of parallel model runs. Defaults to
                the configured `num_worker`.

        Returns:
            list[IterationResult]: One result per scenario iteration, ordered
                by scenario then iteration.

        Raises:
            ValueError: If a model is attached but no out_dir is given.
        """
        if self.model is not None and out_dir is None:
            raise ValueError("out_dir is required to run a model")

        results = []
        for scenario in self.requests:
            logging.info(f"Sampling {self.iterations} iterations of scenario {scenario}.")
            for iteration in range(1, self.iterations + 1):
                dat = self.sample(scenario, iteration)

                folder = None
                if out_dir is not None:
                    folder = os.path.join(out_dir, scenario, str(iteration))
                    os.makedirs(folder, exist_ok=True)
                    write_dat(dat, os.path.join(folder, self.dat_name), overwrite=True)

                results.append(IterationResult(scenario, iteration, folder, dat))

        if self.model is not None:
            logging.info(f"Running model in {len(results)} folders.")
            folders = [r.folder for r in results]
            run_kwargs = dict(self.run_kwargs, dat_name=self.dat_name)

            if parallel:
                reports = self.model.run_parallel(
                    folders,
                    workers=workers or self.num_worker,
                    **run_kwargs
                )
            else:
                reports = []
                for folder in folders:
                    try:
                        reports.append(self.model.run(folder, **run_kwargs))
                    except Exception as e:
                        logging.error(f"Model run in {folder} failed: {e}")
                        reports.append(None)

            for result, report in zip(results, reports):
                result.success = report is not None

            failed = sum(not r.success for r in results)
            if failed:
                logging.warning(f"{failed} of {len(results)} model runs failed.")

        return results

    def _expected_frame(self) -> pd.DataFrame:
        expected = self.expected["CPUE"][KEY_COLUMNS + ["obs"]]
        return expected.rename(columns={"obs": "expected"})

    def analyze(self, results: list[IterationResult]) -> StatsResults:
        """Summarizes sampled observations across iterations.

        Statistics are computed per scenario, fleet, year and season over all
        successful iterations.

        Args:
            results (list[IterationResult]): Output of `run`. Failed iterations
                are excluded.

        Returns:
            StatsResults: DataFrames keyed by statistic:
                - ci_low, ci_high: 2.5% and 97.5% quantiles
                - mean: Sample means
                - stddev: Sample standard deviations
                - stderr: Standard errors of the means
                - min_val, max_val: Minimum and maximum values
                Each has columns scenario, index, year, seas, obs and
                expected.

        Raises:
            ValueError: If there are no successful results.
        """
        # Final N may be smaller than the number of iterations due to failures
        frames = [r.index_frame() for r in results if r.success]
        if not frames:
            raise ValueError("No successful iterations to analyze")

        data = pd.concat(frames, ignore_index=True)
        grouped = data.groupby(["scenario"] + KEY_COLUMNS)["obs"]

        stddev = grouped.std(ddof=1)  # Sample std dev
        stats = {
            "ci_low": grouped.quantile(0.025),
            "ci_high": grouped.quantile(0.975),
            "mean": grouped.mean(),
            "stddev": stddev,
            "stderr": stddev / np.sqrt(grouped.count()),
            "min_val": grouped.min(),
            "max_val": grouped.max(),
        }

        expected = self._expected_frame()
        return StatsResults({
            key: val.rename("obs").reset_index().merge(expected, on=KEY_COLUMNS, how="left")
            for key, val in stats.items()
        })

    def evaluate(self, results: list[IterationResult]) -> pd.DataFrame:
        """Compares each iteration's sampled observations with the expected values.

        Args:
            results (list[IterationResult]): Output of `run`. Failed iterations
                are excluded.

        Returns:
            pd.DataFrame: One row per iteration with columns scenario,
                iteration and one column per configured metric.
        """
        expected = self._expected_frame()

        rows = []
        for result in results:
            if not result.success:
                continue
            joined = result.dat["CPUE"].merge(expected, on=KEY_COLUMNS, how="inner")
            row = {"scenario": result.scenario, "iteration": result.iteration}
            for metric in self.metrics:
                row[metric.name] = metric(joined["expected"], joined["obs"])
            rows.append(row)

        return pd.DataFrame(rows, columns=["scenario", "iteration"] + [m.name for m in self.metrics])

    @staticmethod
    def plot_ci(stats: StatsResults, scenario: str, fleet: int):
        """Plots the sampled index of one fleet against its expected values.

        Shows the mean over iterations as a line with the 95% interval as a
        shaded region, and the expected values as a dashed line.

        Args:
            stats (StatsResults): Output of `analyze`.
            scenario (str): Scenario to plot.
            fleet (int): Fleet to plot.

        Returns:
            matplotlib.figure.Figure: The figure, for saving or showing.
        """

        def select(key):
            df = stats[key]
            df = df[(df["scenario"] == scenario) & (df["index"] == fleet)]
            return df.sort_values(["year", "seas"])

        mean = select("mean")
        ci_low = select("ci_low")
        ci_high = select("ci_high")

        fig, ax = plt.subplots()
        ax.plot(mean["year"], mean["obs"], label="Mean")
        ax.fill_between(
            mean["year"], ci_low["obs"], ci_high["obs"],
            color="lightblue", alpha=0.5, label="95% CI"
        )
        ax.plot(mean["year"], mean["expected"], linestyle="--", color="black", label="Expected")
        ax.set_title(f"Sampled index for fleet {fleet}, scenario {scenario}")
        ax.set_xlabel("Year")
        ax.set_ylabel("Index")
        ax.legend()
        return fig
