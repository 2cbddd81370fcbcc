import numpy as np
import pytest

from ss3sim_tools.utils.metric import (
    Metric,
    mean_relative_error,
    nash_sutcliffe_efficiency,
)


def test_from_name():
    m = Metric.from_name("RMSE")
    assert m.name == "rmse"
    assert m([1.0, 2.0], [1.0, 2.0]) == 0.0


def test_unknown_metric():
    with pytest.raises(ValueError):
        Metric.from_name("nope")


def test_mean_relative_error():
    assert mean_relative_error([10.0, 20.0], [11.0, 18.0]) == pytest.approx(0.0)


def test_nse_perfect():
    x = np.array([1.0, 2.0, 3.0])
    assert nash_sutcliffe_efficiency(x, x) == 1.0


def test_mean_log_ratio():
    assert Metric.from_name("mlr")([1.0, 1.0], [np.e, np.e]) == pytest.approx(1.0)
