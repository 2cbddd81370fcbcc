import os
import stat
import subprocess
import pytest

from ss3sim_tools.model import SS3Model, Model
from ss3sim_tools.utils.datfile import read_dat


def make_exe(directory, body: str) -> str:
    path = os.path.join(directory, "fake_ss3")
    with open(path, "w") as f:
        f.write("#!/bin/sh\n" + body + "\n")
    os.chmod(path, os.stat(path).st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def good_exe(tmp_path):
    return make_exe(str(tmp_path), "echo done > Report.sso")


@pytest.fixture
def failing_exe(tmp_path):
    return make_exe(str(tmp_path), "exit 3")


def test_model_inheritance():
    assert issubclass(SS3Model, Model)


def test_get_objective_returns_callable():
    model = SS3Model(run_kwargs={'exe': 'ss3'})
    obj = model.get_objective()
    assert callable(obj)


def test_default_run_kwargs():
    assert SS3Model().run_kwargs == {}


def test_run_writes_dat_and_returns_report(tmp_path, good_exe, dat):
    folder = tmp_path / "run"
    folder.mkdir()
    report = SS3Model.run(str(folder), dat=dat, dat_name="data.ss", exe=good_exe)
    assert report == os.path.join(str(folder), "Report.sso")
    assert read_dat(str(folder / "data.ss"))["N_cpue"] == 36


def test_run_failure_raises(tmp_path, failing_exe):
    with pytest.raises(subprocess.CalledProcessError):
        SS3Model.run(str(tmp_path), exe=failing_exe)


def test_run_failure_returns_none(tmp_path, failing_exe):
    assert SS3Model.run(str(tmp_path), exe=failing_exe, return_on_fail=True) is None


def test_missing_report(tmp_path):
    exe = make_exe(str(tmp_path), "exit 0")
    with pytest.raises(FileNotFoundError):
        SS3Model.run(str(tmp_path), exe=exe)


def test_run_parallel_keeps_order(tmp_path, good_exe):
    folders = []
    for i in range(3):
        folder = tmp_path / str(i)
        folder.mkdir()
        folders.append(str(folder))
    # The last folder does not exist, so its run fails
    folders.append(str(tmp_path / "missing"))

    reports = SS3Model.run_parallel(folders, workers=2, exe=good_exe)
    assert reports[:3] == [os.path.join(f, "Report.sso") for f in folders[:3]]
    assert reports[3] is None
