"""Bout segmentation strategies.

Every strategy adds an integer ``bout_id`` column that never decreases
along the order the strategy scans the samples in:

- DeviceMarkerSegmenter: a marker column value (written by the logger on
  the device) starts a new bout. Original file order, no sorting.
- TimeGapSegmenter: a new bout starts at the first sample of a device or
  after a pause of at least ``threshold_s`` seconds.
- ContinuousWindowSegmenter: consecutive runs of ``bout_length`` samples
  per device, with a check for time gaps inside each window.
"""
from __future__ import annotations
import logging
from typing import FrozenSet, Protocol

import numpy as np
import pandas as pd

from .config import BoutConfig
from .errors import ConfigurationError
from .records import BOUT_ID, DEVICE_ID, ROW, TIMESTAMP

logger = logging.getLogger(__name__)


class Segmenter(Protocol):
    """Assigns bout ids; ids in `incomplete_bout_ids` are discarded downstream."""
    incomplete_bout_ids: FrozenSet[int]

    def transform(self, df: pd.DataFrame) -> pd.DataFrame: ...


def _sort_by_device_time(df: pd.DataFrame) -> pd.DataFrame:
    return df.sort_values([DEVICE_ID, TIMESTAMP], kind="stable").reset_index(drop=True)


def _seconds(delta: pd.Series) -> pd.Series:
    return delta.dt.total_seconds()


class DeviceMarkerSegmenter:
    """Start a new bout wherever ``df[column] == value``.

    Samples are scanned in original file order with a counter starting at
    0; the counter is incremented before it is assigned to the marker
    sample. Samples ahead of the first marker keep id 0 and are incomplete.
    """
    incomplete_bout_ids = frozenset({0})

    def __init__(self, column: str, value: str):
        self.column = column
        self.value = str(value)

    def is_marker(self, column: pd.Series) -> pd.Series:
        """Flag marker samples; numeric columns are compared numerically."""
        if pd.api.types.is_numeric_dtype(column):
            try:
                target = float(self.value)
            except ValueError:
                return pd.Series(False, index=column.index)
            return column.eq(target)
        return column.astype("string").eq(self.value).fillna(False).astype(bool)

    @staticmethod
    def bout_ids(is_marker) -> np.ndarray:
        """Fold over the marker flags carrying the bout counter."""
        ids = np.empty(len(is_marker), dtype=np.int64)
        j = 0
        for i, m in enumerate(is_marker):
            if m:
                j += 1
            ids[i] = j
        return ids

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        if self.column not in df.columns:
            raise ConfigurationError(f"Marker column {self.column!r} not found in ACC data")
        out = df.sort_values(ROW, kind="stable").reset_index(drop=True) if ROW in df.columns else df.copy()
        out[BOUT_ID] = self.bout_ids(self.is_marker(out[self.column]).tolist())
        n_lead = int((out[BOUT_ID] == 0).sum())
        if n_lead:
            logger.info("%d sample(s) precede the first %s=%s marker", n_lead, self.column, self.value)
        return out


class TimeGapSegmenter:
    """Start a new bout after a pause of at least `threshold_s` seconds.

    Ids are a running count of breaks over the whole sorted stream; they
    are not restarted per device.
    """
    incomplete_bout_ids: FrozenSet[int] = frozenset()

    def __init__(self, threshold_s: float):
        if threshold_s is None or threshold_s <= 0:
            raise ConfigurationError("time_threshold must be positive")
        self.threshold_s = float(threshold_s)

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        out = _sort_by_device_time(df)
        delta = _seconds(out.groupby(DEVICE_ID, sort=False)[TIMESTAMP].diff())
        breaks = delta.isna() | (delta >= self.threshold_s)
        out[BOUT_ID] = breaks.cumsum().astype(np.int64)
        return out


class ContinuousWindowSegmenter:
    """Cut each device's sorted stream into windows of `bout_length` samples.

    Windows whose largest consecutive sample gap exceeds `max_gap_s` are
    reported; they are removed only when `drop_gapped` is set.
    """
    incomplete_bout_ids: FrozenSet[int] = frozenset()

    def __init__(self, bout_length: int, max_gap_s: float = 1.0, drop_gapped: bool = False):
        if bout_length <= 0:
            raise ConfigurationError("bout_length must be positive")
        self.bout_length = int(bout_length)
        self.max_gap_s = float(max_gap_s)
        self.drop_gapped = drop_gapped

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        out = _sort_by_device_time(df)
        index = out.groupby(DEVICE_ID, sort=False).cumcount()
        window = index // self.bout_length
        new_device = out[DEVICE_ID].ne(out[DEVICE_ID].shift())
        transitions = window.ne(window.shift()) | new_device
        out[BOUT_ID] = transitions.cumsum().astype(np.int64)

        gapped = self.gapped_bouts(out)
        if len(gapped):
            if self.drop_gapped:
                logger.warning("Dropping %d window(s) with gaps > %.3gs", len(gapped), self.max_gap_s)
                out = out[~out[BOUT_ID].isin(gapped)].reset_index(drop=True)
            else:
                logger.warning("%d window(s) contain gaps > %.3gs (kept)", len(gapped), self.max_gap_s)
        return out

    def gapped_bouts(self, df: pd.DataFrame) -> np.ndarray:
        """Bout ids whose maximum consecutive time delta exceeds `max_gap_s`."""
        delta = _seconds(df.groupby(BOUT_ID, sort=False)[TIMESTAMP].diff())
        worst = delta.groupby(df[BOUT_ID]).max()
        return worst.index[worst > self.max_gap_s].to_numpy()


def make_segmenter(config: BoutConfig) -> Segmenter:
    """Return the segmentation strategy selected by `config.bout_type`."""
    if config.bout_type == "device":
        return DeviceMarkerSegmenter(config.column_bout_id, config.start_bout_id)
    if config.bout_type == "time_diff":
        return TimeGapSegmenter(config.time_threshold)
    if config.bout_type == "cont":
        return ContinuousWindowSegmenter(config.bout_length, config.max_gap, config.drop_gapped_bouts)
    raise ConfigurationError(f"Unknown bout_type {config.bout_type!r}")
