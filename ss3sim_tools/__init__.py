"""
# ss3sim Tools

A toolkit for simulation testing of Stock Synthesis (SS3) assessment models, providing functionality for:

- **Observation Sampling**: Sampling an index of abundance with lognormal or normal observation error
- **Data Files**: Reading and writing the data-file structure the sampler works on
- **Monte Carlo Simulations**: Replicate sampling across scenarios and iterations, with summaries
- **Model Interface**: Launching the SS3 executable in prepared folders
- **Configuration Management**: JSON-backed sampling and simulation settings

## Main Components

- `Model`: Base class for model execution
- `SS3Model`: Concrete implementation for the SS3 executable
- `sampling`: Observation sampling functions
- `montecarlo`: Replicate sampling framework
- `config`: Configuration for index sampling
- `utils`: Data files, error distributions, metrics and results

## Example Usage

```python
import numpy as np
from ss3sim_tools.utils.datfile import read_dat
from ss3sim_tools.sampling import sample_index
from ss3sim_tools.montecarlo import Sim, MonteCarloConfig

expected = read_dat("ss3_expected_values.dat")

# Sample once
dat = sample_index(
    expected.copy(),
    fleets=[2],
    years=[range(76, 101, 2)],
    sds_obs=[0.1],
    rng=np.random.default_rng(3)
)

# Sample many iterations of several scenarios
config = MonteCarloConfig.from_json("mc_config.json")
sim = Sim(expected, config)
results = sim.run("sims/")
stats = sim.analyze(results)
```
"""

from .model import *
