"""
# Evaluation Metrics

This module provides metrics comparing sampled observations with the expected
values they were drawn from. It wraps standard metrics from scikit-learn and
adds a few used in simulation testing.

## Functions

- `nash_sutcliffe_efficiency`: Nash-Sutcliffe model efficiency coefficient
- `normalized_nash_sutcliffe_efficiency`: Normalized Nash-Sutcliffe efficiency
- `mean_relative_error`: Mean of (sample - expected) / expected
- `mean_log_ratio`: Mean of log(sample / expected)

## Classes

- `Metric`: Named metric with its evaluation function

## Example Usage

```python
from ss3sim_tools.utils.metric import Metric
import numpy as np

rmse = Metric.from_name('rmse')
expected = np.array([1.0, 2.0, 3.0])
sampled = np.array([1.1, 1.9, 3.2])
rmse.func(expected, sampled)
```
"""

import numpy as np
from dataclasses import dataclass
from typing import Callable

# Metrics
from sklearn.metrics import (
    mean_squared_error,
    r2_score,
    root_mean_squared_error,
    mean_absolute_percentage_error,
    median_absolute_error
)


def nash_sutcliffe_efficiency(targets, predictions):
    """
    Nash-Sutcliffe model efficiency coefficient.

    NSE ranges from -inf to 1, where 1 indicates perfect agreement and 0 means
    the predictions are as accurate as the mean of the targets.

    Formula:
        NSE = 1 - (sum((targets - predictions)^2)) / (sum((targets - mean(targets))^2))

    Reference:
        Nash, J. E. and Sutcliffe, J. V. (1970). River flow forecasting through
        conceptual models part I. Journal of Hydrology, 10(3), 282-290.
    """
    targets = np.asarray(targets, dtype=float)
    predictions = np.asarray(predictions, dtype=float)
    return 1 - (np.sum((targets - predictions) ** 2) / np.sum((targets - np.mean(targets)) ** 2))


def normalized_nash_sutcliffe_efficiency(targets, predictions):
    """Nash-Sutcliffe efficiency rescaled to (0, 1] as 1 / (2 - NSE)."""
    return 1 / (2 - nash_sutcliffe_efficiency(targets, predictions))


def mean_relative_error(targets, predictions):
    """
    Mean relative error of predictions against targets.

    For unbiased observation error this is close to 0 over many samples.
    """
    targets = np.asarray(targets, dtype=float)
    predictions = np.asarray(predictions, dtype=float)
    return float(np.mean((predictions - targets) / targets))


def mean_log_ratio(targets, predictions):
    """Mean of log(predictions / targets); about -sd^2 / 2 for lognormal samples."""
    targets = np.asarray(targets, dtype=float)
    predictions = np.asarray(predictions, dtype=float)
    return float(np.mean(np.log(predictions / targets)))


@dataclass
class Metric:
    """
    Named evaluation metric.

    Attributes:
        name (str): Identifier used as the column name in evaluation output.
        func (Callable): Function called as `func(expected, sampled)`.

    Example:
        ```python
        from sklearn.metrics import mean_squared_error

        mse = Metric(name='mse', func=mean_squared_error)
        mse.func([1.0, 2.0], [1.1, 1.9])
        ```
    """
    name: str
    func: Callable

    @staticmethod
    def from_name(metric_name: str) -> "Metric":
        """
        Create a Metric from its name.

        Args:
            metric_name (str): One of 'mse', 'rmse', 'r2', 'mape', 'made',
                'nse', 'nnse', 're' (mean relative error) or 'mlr' (mean log
                ratio). Case-insensitive.

        Returns:
            Metric: Metric named `metric_name` in lower case.

        Raises:
            ValueError: If metric_name is not recognized.
        """
        mapping = {
            "mse": mean_squared_error,
            "rmse": root_mean_squared_error,
            "r2": r2_score,
            "mape": mean_absolute_percentage_error,
            "made": median_absolute_error,
            "nse": nash_sutcliffe_efficiency,
            "nnse": normalized_nash_sutcliffe_efficiency,
            "re": mean_relative_error,
            "mlr": mean_log_ratio,
        }

        func = mapping.get(metric_name.lower())
        if func is None:
            raise ValueError(f"Unknown metric name: {metric_name}")

        return Metric(name=metric_name.lower(), func=func)

    def __call__(self, expected, sampled) -> float:
        return float(self.func(expected, sampled))
