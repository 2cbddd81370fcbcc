"""
# Configuration Management

This module provides configuration classes for the sampling settings used
throughout the ss3sim_tools package.

## Components

- **IndexSamplingConfig**: Fleets, years and observation errors for sampling an index

## Example Usage

```python
from ss3sim_tools.config import IndexSamplingConfig

config = IndexSamplingConfig.from_json("index_config.json")
requests = config.to_requests()
```
"""

from .index import *
