"""CSV readers for calibration, raw ACC and observation files.

All readers return pandas DataFrames using the column names in
:mod:`acc.records`. Timestamps are parsed as UTC with second resolution.
"""
from __future__ import annotations
import logging
from pathlib import Path
from typing import Iterable, List

import numpy as np
import pandas as pd

from ..calibration import records_from_frame
from ..errors import DataIntegrityError
from ..records import DEVICE_ID, LABEL, RAW_AXES, ROW, TIMESTAMP, CalibrationRecord

logger = logging.getLogger(__name__)

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def _require(df: pd.DataFrame, columns: Iterable[str], path) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise DataIntegrityError(f"{path}: missing required columns {missing}")


def parse_timestamps(values: pd.Series) -> pd.Series:
    """Parse "%Y-%m-%d %H:%M:%S" strings as UTC timestamps."""
    try:
        return pd.to_datetime(values, format=TIME_FORMAT, utc=True)
    except (ValueError, TypeError) as e:
        raise DataIntegrityError(f"Unparseable timestamp: {e}") from e


def read_calibration_csv(path: str | Path) -> List[CalibrationRecord]:
    """Load calibration rows into records. Empty cells become NaN."""
    df = pd.read_csv(path, dtype={DEVICE_ID: str})
    _require(df, [DEVICE_ID], path)
    return records_from_frame(df)


def read_acc_csv(paths: str | Path | Iterable[str | Path]) -> pd.DataFrame:
    """Load one or more raw ACC files in the given order.

    A `row` column records the original position across all files; it is
    the reference order for marker segmentation and label propagation.
    """
    if isinstance(paths, (str, Path)):
        paths = [paths]
    frames = []
    for path in paths:
        df = pd.read_csv(path, dtype={DEVICE_ID: str})
        _require(df, [DEVICE_ID, TIMESTAMP, *RAW_AXES], path)
        frames.append(df)
    if not frames:
        raise DataIntegrityError("No raw ACC files given")
    df = pd.concat(frames, ignore_index=True)
    if "observed_behavior" in df.columns and LABEL not in df.columns:
        df = df.rename(columns={"observed_behavior": LABEL})
    df[TIMESTAMP] = parse_timestamps(df[TIMESTAMP])
    for c in RAW_AXES:
        df[c] = pd.to_numeric(df[c], errors="coerce").astype(float)
    df[ROW] = np.arange(len(df))
    logger.info("Loaded %d ACC samples from %d file(s)", len(df), len(frames))
    return df


def read_observations_csv(path: str | Path, label_column: str = "observed_behavior") -> pd.DataFrame:
    """Load behaviour observations as (device_id, timestamp, behavior)."""
    df = pd.read_csv(path, dtype={DEVICE_ID: str})
    if label_column not in df.columns and LABEL in df.columns:
        label_column = LABEL
    _require(df, [DEVICE_ID, TIMESTAMP, label_column], path)
    df = df[[DEVICE_ID, TIMESTAMP, label_column]].rename(columns={label_column: LABEL})
    df[TIMESTAMP] = parse_timestamps(df[TIMESTAMP])
    return df


def join_observations(acc: pd.DataFrame, observations: pd.DataFrame) -> pd.DataFrame:
    """Attach behaviour labels by exact (device_id, timestamp) match.

    Unmatched ACC rows keep an absent label. Several observations for the
    same second would duplicate ACC rows, so they are rejected.
    """
    dup = observations.duplicated([DEVICE_ID, TIMESTAMP])
    if dup.any():
        raise DataIntegrityError(
            f"{int(dup.sum())} observation(s) share a (device_id, timestamp) with another"
        )
    acc = acc.drop(columns=[LABEL], errors="ignore")
    out = acc.merge(observations, on=[DEVICE_ID, TIMESTAMP], how="left", validate="many_to_one")
    matched = out[LABEL].notna().sum()
    logger.info("Matched %d of %d ACC samples to observations", matched, len(out))
    return out.sort_values(ROW, kind="stable").reset_index(drop=True)
