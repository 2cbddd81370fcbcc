"""
# Observation Sampling

This module samples observations with error from the expected values of a
data file, currently the index of abundance.

## Components

- `sample_index`: Sample an index from parallel per-fleet lists
- `sample_index_requests`: Sample an index from `FleetRequest` objects
- `FleetRequest`: Validated sampling request for one fleet
- `build_requests`, `standardize_sampling_args`: Argument broadcasting helpers
- `SamplingError` and subclasses: Input validation failures

## Example Usage

```python
import numpy as np
from ss3sim_tools.utils.datfile import read_dat
from ss3sim_tools.sampling import FleetRequest, sample_index_requests

dat = read_dat("ss3_expected_values.dat")
request = FleetRequest.create(fleet=2, years=range(76, 101, 2), sds_obs=0.1)
dat = sample_index_requests(dat, [request], rng=np.random.default_rng(3))
```
"""

from .errors import *
from .request import *
from .index import *
