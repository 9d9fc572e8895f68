import numpy as np
import pandas as pd
import pytest

from acc.calibration import Calibrator
from acc.errors import ConfigurationError
from acc.records import CalibrationRecord
from conftest import raw_frame, stack


def _calibrator():
    return Calibrator.from_records([
        CalibrationRecord("A", 2.0, 1.0, 3.0, 0.0, 1.0, -1.0),
        CalibrationRecord("B", 4.0, 3.0, 1.0, 2.0, 1.0, 1.0),
    ])


def test_own_coefficients_applied():
    df = stack(raw_frame("A", [[5.0, 2.0, 0.0]]))
    out = _calibrator().transform(df)
    assert out["acc_x"].iloc[0] == pytest.approx((5.0 - 1.0) * 2.0)
    assert out["acc_y"].iloc[0] == pytest.approx((2.0 - 0.0) * 3.0)
    assert out["acc_z"].iloc[0] == pytest.approx((0.0 + 1.0) * 1.0)


def test_unknown_device_uses_mean_coefficients():
    cal = _calibrator()
    assert cal.mean_slope["x"] == pytest.approx(3.0)
    assert cal.mean_intercept["x"] == pytest.approx(2.0)
    out = cal.transform(stack(raw_frame("C", [[4.0, 1.0, 1.0]])))
    assert out["acc_x"].iloc[0] == pytest.approx((4.0 - 2.0) * 3.0)
    assert out["acc_y"].iloc[0] == pytest.approx((1.0 - 1.0) * 2.0)
    assert out["acc_z"].iloc[0] == pytest.approx((1.0 - 0.0) * 1.0)


def test_partial_record_falls_back_per_axis():
    cal = Calibrator.from_records([
        CalibrationRecord("A", 2.0, 1.0, 3.0, 0.0, 1.0, 0.0),
        CalibrationRecord("B", 4.0, 3.0, slope_z=1.0, intercept_z=0.0),
    ])
    coeffs = cal.coefficients("B")
    assert coeffs["x"] == (4.0, 3.0)
    assert coeffs["y"] == (3.0, 0.0)
    out = cal.transform(stack(raw_frame("B", np.ones((5, 3)))))
    assert not out[["acc_x", "acc_y", "acc_z"]].isna().any().any()


def test_from_frame_matches_records():
    table = pd.DataFrame({
        "device_id": ["A", "B"],
        "slope_x": [2.0, 4.0], "intercept_x": [1.0, 3.0],
        "slope_y": [3.0, None], "intercept_y": [0.0, None],
        "slope_z": [1.0, 1.0], "intercept_z": [-1.0, 1.0],
    })
    cal = Calibrator.from_frame(table)
    assert cal.coefficients("B")["y"] == (3.0, 0.0)
    assert cal.uses_fallback("B")
    assert not cal.uses_fallback("A")


def test_empty_calibration_is_configuration_error():
    with pytest.raises(ConfigurationError):
        Calibrator.from_records([])


def test_axis_without_any_values_is_configuration_error():
    with pytest.raises(ConfigurationError):
        Calibrator.from_records([CalibrationRecord("A", slope_x=1.0, intercept_x=0.0)])
