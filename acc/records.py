"""Typed records passed between pipeline stages.

Sample-level data stays in pandas DataFrames using the column names below;
everything at bout level and beyond is a frozen dataclass.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

import numpy as np

DEVICE_ID = "device_id"
TIMESTAMP = "timestamp"
BOUT_ID = "bout_id"
ROW = "row"
LABEL = "behavior"
RAW_AXES = ("raw_acc_x", "raw_acc_y", "raw_acc_z")
ACC_AXES = ("acc_x", "acc_y", "acc_z")
AXES = ("x", "y", "z")
KEYS = [DEVICE_ID, BOUT_ID]


@dataclass(frozen=True)
class CalibrationRecord:
    """Per-device, per-axis linear calibration. Missing values are NaN."""
    device_id: str
    slope_x: float = float("nan")
    intercept_x: float = float("nan")
    slope_y: float = float("nan")
    intercept_y: float = float("nan")
    slope_z: float = float("nan")
    intercept_z: float = float("nan")

    def slope(self, axis: str) -> float:
        return getattr(self, f"slope_{axis}")

    def intercept(self, axis: str) -> float:
        return getattr(self, f"intercept_{axis}")


@dataclass(frozen=True, eq=False)
class Bout:
    """A complete bout: one device, `bout_length` samples in original order."""
    device_id: str
    bout_id: int
    timestamps: np.ndarray
    x: np.ndarray
    y: np.ndarray
    z: np.ndarray
    label: str | None = None

    def __len__(self) -> int:
        return len(self.x)

    def axis(self, name: str) -> np.ndarray:
        return getattr(self, name)


@dataclass(frozen=True, eq=False)
class FeatureVector:
    """Statistical features of one bout, keyed by feature name."""
    device_id: str
    bout_id: int
    values: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def as_row(self) -> dict:
        return {DEVICE_ID: self.device_id, BOUT_ID: self.bout_id, **self.values}


@dataclass(frozen=True)
class ClassificationResult:
    """Prediction for one bout.

    Attributes:
        predicted_label: Class with the highest probability.
        probabilities: Class name -> probability, summing to 1.
        confidence: max(probabilities).
    """
    device_id: str
    bout_id: int
    predicted_label: str
    probabilities: Mapping[str, float]
    confidence: float
