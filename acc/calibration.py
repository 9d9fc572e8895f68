"""Calibration of raw ACC counts to physical acceleration.

Each device carries a per-axis linear correction::

    acc = (raw - intercept) * slope

Devices (or single axes) without calibration values fall back to the mean
slope/intercept over all known records, computed once when the calibrator
is built.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

import numpy as np
import pandas as pd

from .errors import ConfigurationError
from .records import ACC_AXES, AXES, DEVICE_ID, RAW_AXES, CalibrationRecord

logger = logging.getLogger(__name__)


def records_from_frame(df: pd.DataFrame) -> List[CalibrationRecord]:
    """One CalibrationRecord per table row; empty cells stay NaN."""
    coeffs = [f"{kind}_{axis}" for axis in AXES for kind in ("slope", "intercept")]
    records = []
    for row in df.to_dict(orient="records"):
        values = {k: float(row[k]) for k in coeffs if k in row and pd.notna(row[k])}
        records.append(CalibrationRecord(device_id=str(row[DEVICE_ID]), **values))
    return records


@dataclass
class Calibrator:
    """Calibration table with precomputed mean fallback.

    Attributes:
        records: device_id -> CalibrationRecord.
        mean_slope: Axis -> mean of known slopes.
        mean_intercept: Axis -> mean of known intercepts.
    """
    records: Dict[str, CalibrationRecord]
    mean_slope: Dict[str, float] = field(default_factory=dict)
    mean_intercept: Dict[str, float] = field(default_factory=dict)

    def __post_init__(self):
        if not self.records:
            raise ConfigurationError("Calibration set is empty; mean coefficients are undefined")
        for axis in AXES:
            slopes = np.array([r.slope(axis) for r in self.records.values()], dtype=float)
            intercepts = np.array([r.intercept(axis) for r in self.records.values()], dtype=float)
            if np.isnan(slopes).all() or np.isnan(intercepts).all():
                raise ConfigurationError(f"No calibration values known for axis {axis!r}")
            self.mean_slope[axis] = float(np.nanmean(slopes))
            self.mean_intercept[axis] = float(np.nanmean(intercepts))

    @classmethod
    def from_records(cls, records: Iterable[CalibrationRecord]) -> "Calibrator":
        return cls({r.device_id: r for r in records})

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "Calibrator":
        """Build from a calibration table (one row per device)."""
        return cls.from_records(records_from_frame(df))

    def coefficients(self, device_id: str) -> Dict[str, Tuple[float, float]]:
        """Return axis -> (slope, intercept), substituting means for gaps."""
        rec = self.records.get(device_id)
        out = {}
        for axis in AXES:
            slope = rec.slope(axis) if rec is not None else np.nan
            intercept = rec.intercept(axis) if rec is not None else np.nan
            out[axis] = (
                self.mean_slope[axis] if np.isnan(slope) else slope,
                self.mean_intercept[axis] if np.isnan(intercept) else intercept,
            )
        return out

    def uses_fallback(self, device_id: str) -> bool:
        rec = self.records.get(device_id)
        if rec is None:
            return True
        return any(np.isnan(rec.slope(a)) or np.isnan(rec.intercept(a)) for a in AXES)

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        """Add calibrated acc_x/acc_y/acc_z columns."""
        out = df.copy()
        devices = out[DEVICE_ID].astype(str)
        fallback = sorted(d for d in devices.unique() if self.uses_fallback(d))
        if fallback:
            logger.info("Mean calibration substituted for device(s): %s", ", ".join(fallback))
        for axis, raw_col, acc_col in zip(AXES, RAW_AXES, ACC_AXES):
            table = {d: self.coefficients(d)[axis] for d in devices.unique()}
            slope = devices.map(lambda d: table[d][0]).astype(float)
            intercept = devices.map(lambda d: table[d][1]).astype(float)
            out[acc_col] = (out[raw_col] - intercept) * slope
        return out
