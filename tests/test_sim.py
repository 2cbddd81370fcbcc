import os
import stat

import matplotlib
matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from ss3sim_tools import SS3Model
from ss3sim_tools.config import IndexSamplingConfig
from ss3sim_tools.montecarlo import MonteCarloConfig, Sim
from ss3sim_tools.utils.datfile import read_dat


YEARS = list(range(90, 101))


@pytest.fixture
def config():
    return MonteCarloConfig(
        scenarios={
            "base": IndexSamplingConfig(fleets=[2], years=[YEARS], sds_obs=[0.2]),
            "biased": IndexSamplingConfig(fleets=[2, 3], years=[YEARS, YEARS], sds_obs=[0.2, 5.0],
                                          sds_out=[0.4, 5.0], seas=[[1], [7]]),
        },
        iterations=20,
        seed=11,
        metrics=["re", "rmse"],
    )


def test_run_in_memory(dat, config):
    sim = Sim(dat, config)
    results = sim.run()
    assert len(results) == 40
    assert [r.scenario for r in results[:2]] == ["base", "base"]
    assert [r.iteration for r in results[:3]] == [1, 2, 3]
    assert all(r.folder is None for r in results)
    assert results[0].dat["N_cpue"] == len(YEARS)
    assert results[-1].dat["N_cpue"] == 2 * len(YEARS)
    # Expected values are never modified
    assert dat["N_cpue"] == 36


def test_iterations_are_reproducible(dat, config):
    a = Sim(dat, config).sample("base", 4)
    b = Sim(dat, config).sample("base", 4)
    pd.testing.assert_frame_equal(a["CPUE"], b["CPUE"])


def test_iterations_differ(dat, config):
    sim = Sim(dat, config)
    a = sim.sample("base", 1)["CPUE"]["obs"].to_numpy()
    b = sim.sample("base", 2)["CPUE"]["obs"].to_numpy()
    assert not np.array_equal(a, b)


def test_iteration_range(dat, config):
    with pytest.raises(ValueError):
        Sim(dat, config).get_rng(21)


def test_run_writes_folders(dat, config, tmp_path):
    sim = Sim(dat, config)
    results = sim.run(str(tmp_path))
    folder = os.path.join(str(tmp_path), "biased", "3")
    assert results[22].folder == folder
    written = read_dat(os.path.join(folder, "ss3.dat"))
    np.testing.assert_allclose(written["CPUE"]["obs"], results[22].dat["CPUE"]["obs"])


def test_run_with_model(dat, config, tmp_path):
    exe = tmp_path / "fake_ss3"
    exe.write_text("#!/bin/sh\necho done > Report.sso\n")
    os.chmod(exe, os.stat(exe).st_mode | stat.S_IXUSR)

    config.iterations = 2
    model = SS3Model(run_kwargs={"exe": str(exe)})
    sims = tmp_path / "sims"
    results = Sim(dat, config, model=model).run(str(sims), workers=2)

    assert all(r.success for r in results)
    assert os.path.exists(os.path.join(str(sims), "base", "2", "Report.sso"))


def test_model_needs_out_dir(dat, config):
    with pytest.raises(ValueError):
        Sim(dat, config, model=SS3Model()).run()


def test_analyze(dat, config, tmp_path):
    sim = Sim(dat, config)
    stats = sim.analyze(sim.run())

    assert set(stats) == {"ci_low", "ci_high", "mean", "stddev", "stderr", "min_val", "max_val"}
    mean = stats["mean"]
    assert list(mean.columns) == ["scenario", "index", "year", "seas", "obs", "expected"]
    # One row per sampled key per scenario
    assert len(mean) == len(YEARS) + 2 * len(YEARS)
    assert (stats["ci_low"]["obs"] <= stats["ci_high"]["obs"]).all()
    assert (stats["min_val"]["obs"] <= mean["obs"]).all()

    stats.save(str(tmp_path / "stats"))
    assert os.path.exists(str(tmp_path / "stats" / "mean.csv"))


def test_evaluate(dat, config):
    sim = Sim(dat, config)
    errors = sim.evaluate(sim.run())
    assert list(errors.columns) == ["scenario", "iteration", "re", "rmse"]
    assert len(errors) == 40
    assert errors["re"].abs().mean() < 0.2


def test_failed_iterations_are_skipped(dat, config):
    sim = Sim(dat, config)
    results = sim.run()
    for r in results[1:]:
        r.success = False
    assert len(sim.evaluate(results)) == 1
    for r in results:
        r.success = False
    with pytest.raises(ValueError):
        sim.analyze(results)


def test_plot_ci(dat, config):
    sim = Sim(dat, config)
    stats = sim.analyze(sim.run())
    fig = Sim.plot_ci(stats, scenario="biased", fleet=3)
    ax = fig.axes[0]
    assert ax.get_xlabel() == "Year"
    assert len(ax.lines) == 2


@pytest.mark.parametrize("parallel", [True, False])
def test_missing_report_marks_iteration_failed(dat, config, tmp_path, parallel, caplog):
    exe = tmp_path / "no_report_ss3"
    exe.write_text("#!/bin/sh\nexit 0\n")
    os.chmod(exe, os.stat(exe).st_mode | stat.S_IXUSR)

    config.iterations = 2
    model = SS3Model(run_kwargs={"exe": str(exe)})
    results = Sim(dat, config, model=model).run(str(tmp_path / "sims"), parallel=parallel)

    assert len(results) == 4
    assert not any(r.success for r in results)
    assert "Report.sso" in caplog.text
