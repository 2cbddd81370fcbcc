"""
# Results Management

This module provides data structures for storing and saving the outcome of
replicate sampling runs and their summaries.

## Classes

- `IterationResult`: Outcome of one scenario iteration
- `StatsResults`: Collection of statistical summaries across iterations

## Example Usage

```python
from ss3sim_tools.utils.results import StatsResults

stats = sim.analyze(results)
stats["mean"].head()
stats.save("/results/directory")
```
"""

from dataclasses import dataclass
import pandas as pd
import os

from .datfile import DatList


@dataclass
class IterationResult:
    """
    Outcome of sampling (and optionally running) one scenario iteration.

    Attributes:
        scenario (str): Scenario name.
        iteration (int): Iteration number, starting at 1.
        folder (str): Folder holding the iteration's files, or None if nothing
            was written.
        dat (DatList): Sampled data file.
        success (bool): False if the model was run and failed.
    """
    scenario: str
    iteration: int
    folder: str | None
    dat: DatList
    success: bool = True

    def index_frame(self) -> pd.DataFrame:
        """Sampled index rows tagged with scenario and iteration."""
        cpue = self.dat["CPUE"].copy()
        cpue.insert(0, "iteration", self.iteration)
        cpue.insert(0, "scenario", self.scenario)
        return cpue


class StatsResults(dict[str, pd.DataFrame]):
    """
    Collection of statistical summary DataFrames from replicate sampling.

    Each key is a statistic (e.g. 'mean', 'ci_low') and each value a DataFrame
    with one row per scenario, fleet, year and season.

    Example:
        ```python
        stats = StatsResults({'mean': mean_df, 'ci_low': low_df})
        stats.save('/results/monte_carlo/')
        ```
    """

    def save(self, directory: str):
        """
        Save all statistical DataFrames to CSV files in the specified directory.

        Each statistic is saved as `<statistic>.csv`, without the row index.
        Existing files are overwritten.

        Args:
            directory (str): Directory to write to. Created if missing.
        """
        os.makedirs(directory, exist_ok=True)
        for stat, data in self.items():
            data.to_csv(os.path.join(directory, f"{stat}.csv"), index=False)
