import os
import pytest

from ss3sim_tools.utils.datfile import read_dat


DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data")


@pytest.fixture
def dat_path() -> str:
    return os.path.join(DATA_DIR, "expected.dat")


@pytest.fixture
def dat(dat_path):
    # Fleet 2: lognormal, years 76-100, season 1
    # Fleet 3: normal, years 90-100, season 7
    # Fleet 1: listed in CPUEinfo, no index rows
    return read_dat(dat_path)
