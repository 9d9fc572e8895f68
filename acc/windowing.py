"""Bout integrity filtering and iteration helpers."""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

import pandas as pd

from .records import ACC_AXES, BOUT_ID, KEYS, ROW, TIMESTAMP, Bout

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterReport:
    """Outcome of the integrity filter."""
    kept: int
    dropped: int
    dropped_samples: int


def filter_complete_bouts(
    df: pd.DataFrame, bout_length: int, exclude: Iterable[int] = ()
) -> tuple[pd.DataFrame, FilterReport]:
    """Keep only bouts with exactly `bout_length` samples.

    Args:
        df: Segmented samples.
        bout_length: Required sample count per bout.
        exclude: Bout ids always dropped (e.g. samples ahead of the first marker).
    Returns:
        (filtered samples, FilterReport).
    """
    counts = df.groupby(KEYS, sort=False).size().rename("n_samples")
    sizes = df[KEYS].join(counts, on=KEYS)["n_samples"]
    keep = (sizes == bout_length) & ~df[BOUT_ID].isin(list(exclude))
    n_total = df[KEYS].drop_duplicates().shape[0]
    out = df[keep].reset_index(drop=True)
    n_kept = out[KEYS].drop_duplicates().shape[0]
    report = FilterReport(kept=n_kept, dropped=n_total - n_kept, dropped_samples=int((~keep).sum()))
    logger.info(
        "Bout filter: kept %d, dropped %d incomplete bout(s) (%d samples); expected %d samples per bout",
        report.kept, report.dropped, report.dropped_samples, bout_length,
    )
    return out, report


def iter_bouts(df: pd.DataFrame, labels: Optional[pd.Series] = None) -> Iterator[Bout]:
    """Yield Bout records ordered by (device_id, bout_id), samples in row order.

    Args:
        df: Calibrated, filtered samples.
        labels: Optional Series indexed by (device_id, bout_id).
    """
    order = [*KEYS, ROW] if ROW in df.columns else KEYS
    df = df.sort_values(order, kind="stable")
    for (device_id, bout_id), g in df.groupby(KEYS, sort=False):
        label = None
        if labels is not None:
            value = labels.get((device_id, bout_id))
            label = None if value is None or pd.isna(value) else value
        yield Bout(
            device_id=device_id,
            bout_id=int(bout_id),
            timestamps=g[TIMESTAMP].to_numpy(),
            x=g[ACC_AXES[0]].to_numpy(dtype=float),
            y=g[ACC_AXES[1]].to_numpy(dtype=float),
            z=g[ACC_AXES[2]].to_numpy(dtype=float),
            label=label,
        )
