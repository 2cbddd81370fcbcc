import pytest

from ss3sim_tools.sampling import (
    FleetRequest,
    SamplingError,
    ShapeMismatchError,
    build_requests,
    standardize_sampling_args,
)


def test_create_broadcasts_scalars():
    r = FleetRequest.create(fleet=2, years=range(76, 81), sds_obs=0.1)
    assert r.years == (76, 77, 78, 79, 80)
    assert r.seas == (1,) * 5
    assert r.sds_obs == (0.1,) * 5
    assert r.sds_out == r.sds_obs


def test_create_keeps_vectors():
    r = FleetRequest.create(fleet=2, years=[76, 78], sds_obs=[0.1, 0.2], sds_out=0.3, seas=[1, 7])
    assert r.sds_obs == (0.1, 0.2)
    assert r.sds_out == (0.3, 0.3)
    assert r.seas == (1, 7)
    assert r.combinations() == [(2, 76, 1), (2, 78, 7)]


def test_create_rejects_mismatched_lengths():
    with pytest.raises(ShapeMismatchError, match="fleet 2"):
        FleetRequest.create(fleet=2, years=[76, 78, 80], sds_obs=[0.1, 0.2])


def test_create_rejects_negative_sd():
    with pytest.raises(SamplingError):
        FleetRequest.create(fleet=2, years=[76], sds_obs=-0.1)


def test_to_frame():
    frame = FleetRequest.create(fleet=3, years=[90, 91], sds_obs=0.1, sds_out=0.2, seas=7).to_frame()
    assert list(frame.columns) == ["year", "seas", "index", "se_in", "se_log"]
    assert list(frame["index"]) == [3, 3]
    assert list(frame["seas"]) == [7, 7]
    assert list(frame["se_log"]) == [0.2, 0.2]


def test_standardize_sampling_args():
    out = standardize_sampling_args([1, 2], [[1, 2, 3], [5, 6]], [0.1])
    assert out == [[0.1, 0.1, 0.1], [0.1, 0.1]]
    out = standardize_sampling_args([1, 2], [[1, 2], [5]], [[0.1, 0.2], 0.3])
    assert out == [[0.1, 0.2], [0.3]]


def test_standardize_sampling_args_wrong_count():
    with pytest.raises(ShapeMismatchError):
        standardize_sampling_args([1, 2, 3], [[1], [2], [3]], [0.1, 0.2])


def test_build_requests_broadcasts_single_season():
    requests = build_requests([2, 3], [[76, 77], [90]], [0.1, 0.2], seas=[7])
    assert [r.seas for r in requests] == [(7, 7), (7,)]


def test_build_requests_default_season():
    requests = build_requests([2], [[76, 77]], [0.1])
    assert requests[0].seas == (1, 1)


def test_build_requests_sds_obs_length():
    with pytest.raises(ShapeMismatchError, match="sds_obs"):
        build_requests([2], [[76]], [0.1, 0.1])


def test_build_requests_years_length():
    with pytest.raises(ShapeMismatchError, match="years"):
        build_requests([2], [[76], [77]], [0.1])


def test_build_requests_sds_out_length():
    with pytest.raises(ShapeMismatchError, match="sds_out"):
        build_requests([2, 3], [[76], [90]], [0.1, 0.1], sds_out=[0.2])


def test_build_requests_seas_length():
    with pytest.raises(ShapeMismatchError, match="seas"):
        build_requests([2, 3, 4], [[76], [90], [1]], [0.1, 0.1, 0.1], seas=[1, 7])


def test_build_requests_no_fleets():
    assert build_requests([], [], []) == []


@pytest.mark.parametrize("sd", [float("nan"), float("inf")])
def test_create_rejects_non_finite_sd(sd):
    with pytest.raises(SamplingError, match="finite"):
        FleetRequest.create(fleet=2, years=[76, 77], sds_obs=[0.1, sd])
    with pytest.raises(SamplingError):
        FleetRequest.create(fleet=2, years=[76], sds_obs=0.1, sds_out=sd)
