"""
# Monte Carlo Simulations

This module provides functionality for replicate sampling of observations
across scenarios and iterations, running the assessment model on the results,
and summarizing them.

## Components

- `Sim`: Main simulation class for running replicate sampling experiments
- `MonteCarloConfig`: Configuration for scenarios, iterations and metrics

## Example Usage

```python
from ss3sim_tools.montecarlo import Sim, MonteCarloConfig
from ss3sim_tools.utils.datfile import read_dat

# Load configuration
config = MonteCarloConfig.from_json('mc_config.json')

# Setup simulation
sim = Sim(read_dat('ss3_expected_values.dat'), config)

# Sample every scenario iteration into sims/<scenario>/<iteration>/
results = sim.run('sims/')

# Analyze results
stats = sim.analyze(results)
stats.save('/path/to/results/')
fig = Sim.plot_ci(stats, scenario='base', fleet=2)
```
"""

from .sim import *
from .config import *
