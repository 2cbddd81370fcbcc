"""
# Utilities

This module provides utility functions and classes for data files,
observation error distributions, metrics and results management in the
ss3sim_tools package.

## Components

- **datfile**: In-memory data-file structure, reader and writer
- **distributions**: Observation error families and their samplers
- **metric**: Metrics comparing sampled and expected observations
- **results**: Data structures for storing and saving simulation results

## Example Usage

```python
from ss3sim_tools.utils.datfile import read_dat
from ss3sim_tools.utils.distributions import sample_lognormal
from ss3sim_tools.utils.metric import Metric

dat = read_dat("ss3_expected_values.dat")
obs = sample_lognormal(dat["CPUE"]["obs"], 0.2)
Metric.from_name('re')(dat["CPUE"]["obs"], obs)
```
"""
