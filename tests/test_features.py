import math

import numpy as np
import pandas as pd
import pytest

from acc.features import FEATURE_NAMES, extract_all, extract_features, features_frame
from acc.features.stats import (
    correlation,
    excess_kurtosis,
    extrema_indices,
    mean_amplitude,
    norm,
    quantile,
    sd,
)
from acc.records import Bout


def _bout(x, y, z, bout_id=1):
    n = len(x)
    return Bout("A", bout_id, np.arange(n), np.asarray(x, float), np.asarray(y, float), np.asarray(z, float))


def test_mean_amplitude_alternating():
    assert list(extrema_indices([0, 2, 0, 2, 0])) == [1, 2, 3]
    assert mean_amplitude([0, 2, 0, 2, 0]) == pytest.approx(2.0)


def test_mean_amplitude_pairs_successive_extrema():
    # extremum values 3, 1, 4
    x = [0, 3, 1, 4, 2]
    assert mean_amplitude(x) == pytest.approx((abs(1 - 3) + abs(4 - 1)) / 2)


def test_mean_amplitude_undefined_for_monotonic():
    assert math.isnan(mean_amplitude([1, 2, 3, 4, 5]))
    assert math.isnan(mean_amplitude([1, 2, 1]))


def test_basic_statistics():
    x = np.array([1.0, 2.0, 3.0, 4.0])
    assert sd(x) == pytest.approx(np.std(x, ddof=1))
    assert norm(x) == pytest.approx(math.sqrt(30.0))
    assert quantile(x, 0.25) == pytest.approx(1.75)
    assert excess_kurtosis(x) == pytest.approx(-1.36)


def test_correlation_of_constant_signal_is_nan():
    assert math.isnan(correlation([1, 1, 1], [1, 2, 3]))


def test_feature_names_fixed_and_unique():
    assert len(FEATURE_NAMES) == 48
    assert len(set(FEATURE_NAMES)) == 48
    assert FEATURE_NAMES[:3] == ["mean_x", "range_x", "sd_x"]
    assert "amp_z" in FEATURE_NAMES and "sd_diff_yz" in FEATURE_NAMES


def test_extract_features_values():
    x = [0, 2, 0, 2, 0]
    y = [1, 2, 3, 4, 5]
    z = [5, 5, 5, 5, 5]
    fv = extract_features(_bout(x, y, z))
    assert list(fv.values) == FEATURE_NAMES
    assert fv.values["mean_x"] == pytest.approx(0.8)
    assert fv.values["range_y"] == pytest.approx(4.0)
    assert fv.values["q50_y"] == pytest.approx(3.0)
    assert fv.values["amp_x"] == pytest.approx(2.0)
    assert math.isnan(fv.values["amp_y"])
    assert fv.values["mean_diff_xy"] == pytest.approx(0.8 - 3.0)
    assert fv.values["cov_yz"] == pytest.approx(0.0)
    assert math.isnan(fv.values["cor_xz"])


def test_feature_vector_is_read_only():
    fv = extract_features(_bout([0, 1, 0], [0, 1, 2], [1, 1, 2]))
    with pytest.raises(TypeError):
        fv.values["mean_x"] = 1.0


def test_features_frame_one_row_per_bout():
    vectors = [extract_features(_bout(np.random.rand(10), np.random.rand(10), np.random.rand(10), i)) for i in (1, 2)]
    df = features_frame(vectors)
    assert list(df.columns) == ["device_id", "bout_id", *FEATURE_NAMES]
    assert list(df["bout_id"]) == [1, 2]


def test_parallel_extraction_matches_serial():
    rng = np.random.default_rng(4)
    bouts = [_bout(*rng.normal(size=(3, 20)), bout_id=i) for i in range(1, 5)]
    serial = features_frame(extract_all(bouts))
    parallel = features_frame(extract_all(bouts, n_jobs=2))
    pd.testing.assert_frame_equal(serial, parallel)


def test_feature_vector_is_hashable():
    fv = extract_features(_bout([0, 1, 0], [0, 1, 2], [1, 1, 2]))
    assert hash(fv) == hash(fv)
    assert len({fv, fv}) == 1
