import numpy as np
import pandas as pd
import pytest

from acc.calibration import Calibrator
from acc.records import CalibrationRecord


def raw_frame(device_id, xyz, freq=10, start="2024-05-01 06:00:00", **columns):
    """Raw ACC rows for one device, `freq` samples per timestamp second."""
    xyz = np.asarray(xyz, dtype=float)
    n = len(xyz)
    ts = pd.Timestamp(start, tz="UTC") + pd.to_timedelta(np.arange(n) // freq, unit="s")
    df = pd.DataFrame({
        "device_id": device_id,
        "timestamp": ts,
        "raw_acc_x": xyz[:, 0],
        "raw_acc_y": xyz[:, 1],
        "raw_acc_z": xyz[:, 2],
    })
    for k, v in columns.items():
        df[k] = v
    return df


def stack(*frames):
    df = pd.concat(frames, ignore_index=True)
    df["row"] = np.arange(len(df))
    return df


def behaviour_stream(device_id, behaviours, bout_length=10, seed=0, freq=10, start="2024-05-01 06:00:00"):
    """One bout per behaviour; 'fly' oscillates strongly, 'rest' is near-flat noise.

    Only the first sample of each bout carries the observed label.
    """
    rng = np.random.default_rng(seed)
    t = np.arange(bout_length)
    chunks, labels = [], []
    for b in behaviours:
        if b == "fly":
            base = 5.0 * np.sin(2 * np.pi * t / 4.0)
            xyz = np.column_stack([base, -base, 0.5 * base]) + rng.normal(0, 0.2, (bout_length, 3))
        else:
            xyz = np.column_stack([np.zeros(bout_length), np.zeros(bout_length), np.ones(bout_length)])
            xyz = xyz + rng.normal(0, 0.05, (bout_length, 3))
        chunks.append(xyz)
        labels.extend([b] + [None] * (bout_length - 1))
    return raw_frame(device_id, np.vstack(chunks), freq=freq, start=start, behavior=labels)


@pytest.fixture
def identity_calibrator():
    return Calibrator.from_records([
        CalibrationRecord("A", 1.0, 0.0, 1.0, 0.0, 1.0, 0.0),
        CalibrationRecord("B", 1.0, 0.0, 1.0, 0.0, 1.0, 0.0),
    ])
