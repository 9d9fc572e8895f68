"""Long-to-wide reshaping of bout samples and example assembly."""
from __future__ import annotations
import logging
from typing import List, Optional

import pandas as pd

from .errors import DataIntegrityError
from .records import ACC_AXES, KEYS, LABEL, ROW, TIMESTAMP

logger = logging.getLogger(__name__)

SAMPLE_INDEX = "sample"


def wide_columns(bout_length: int) -> List[str]:
    """Column names acc_x_1..acc_x_N, acc_y_1.., acc_z_1.."""
    return [f"{axis}_{i}" for axis in ACC_AXES for i in range(1, bout_length + 1)]


def to_wide(df: pd.DataFrame, bout_length: int) -> pd.DataFrame:
    """Pivot filtered samples to one row per bout.

    Sample positions 1..bout_length follow the original within-bout order.
    """
    order = [*KEYS, ROW] if ROW in df.columns else KEYS
    long = df.sort_values(order, kind="stable")
    long = long.assign(**{SAMPLE_INDEX: long.groupby(KEYS, sort=False).cumcount() + 1})
    if len(long) and long[SAMPLE_INDEX].max() > bout_length:
        raise DataIntegrityError(f"Bout longer than {bout_length} samples reached the assembler")
    wide = long.pivot(index=KEYS, columns=SAMPLE_INDEX, values=list(ACC_AXES))
    wide.columns = [f"{axis}_{i}" for axis, i in wide.columns]
    wide = wide.reindex(columns=wide_columns(bout_length))
    return wide.reset_index()


def bout_starts(df: pd.DataFrame) -> pd.DataFrame:
    """First timestamp of every bout."""
    return df.groupby(KEYS, sort=True, as_index=False)[TIMESTAMP].min()


def _merge_exact(left: pd.DataFrame, right: pd.DataFrame, what: str) -> pd.DataFrame:
    merged = left.merge(right, on=KEYS, how="outer", indicator=True, validate="one_to_one")
    unmatched = merged["_merge"] != "both"
    if unmatched.any():
        keys = merged.loc[unmatched, KEYS].head(5).to_dict(orient="records")
        raise DataIntegrityError(
            f"{int(unmatched.sum())} bout(s) could not be matched to {what}, e.g. {keys}"
        )
    return merged.drop(columns="_merge")


def assemble(
    wide: pd.DataFrame,
    features: pd.DataFrame,
    labels: Optional[pd.Series] = None,
    timestamps: Optional[pd.DataFrame] = None,
) -> pd.DataFrame:
    """Merge wide samples, bout label or start time, and features by (device_id, bout_id).

    Args:
        wide: Output of to_wide.
        features: Output of features_frame.
        labels: Series indexed by (device_id, bout_id) (training).
        timestamps: Frame with device_id, bout_id, timestamp (inference).
    Returns:
        One row per bout.
    Raises:
        DataIntegrityError: when any bout is missing from one of the inputs.
    """
    out = wide
    if labels is not None:
        label_frame = labels.rename(LABEL).reset_index()
        label_frame.columns = [*KEYS, LABEL]
        out = _merge_exact(out, label_frame, "labels")
    if timestamps is not None:
        out = _merge_exact(out, timestamps[[*KEYS, TIMESTAMP]], "start times")
    out = _merge_exact(out, features, "features")
    front = [*KEYS] + [c for c in (LABEL, TIMESTAMP) if c in out.columns]
    rest = [c for c in out.columns if c not in front]
    return out[front + rest].sort_values(KEYS, kind="stable").reset_index(drop=True)
