"""Behaviour label propagation within bouts."""
from __future__ import annotations
import logging

import pandas as pd

from .records import KEYS, LABEL, ROW

logger = logging.getLogger(__name__)


def propagate_labels(df: pd.DataFrame, label_col: str = LABEL) -> pd.DataFrame:
    """Carry the last observed label forward inside each bout.

    Samples are taken in original row order. Samples ahead of the first
    observation in their bout have no prior value and stay unlabeled.
    """
    out = df.copy()
    if label_col not in out.columns:
        out[label_col] = pd.Series(pd.NA, index=out.index, dtype="object")
        return out
    order = [*KEYS, ROW] if ROW in out.columns else KEYS
    out = out.sort_values(order, kind="stable")
    out[label_col] = out.groupby(KEYS, sort=False)[label_col].ffill()
    return out.sort_index()


def bout_labels(df: pd.DataFrame, label_col: str = LABEL) -> pd.Series:
    """Reduce propagated labels to one label per (device_id, bout_id).

    A bout is labeled only when every sample carries the same label; bouts
    with unlabeled samples or conflicting labels map to NaN.
    """
    if label_col not in df.columns:
        index = pd.MultiIndex.from_frame(df[KEYS].drop_duplicates())
        return pd.Series(pd.NA, index=index, name=label_col, dtype="object")
    grouped = df.groupby(KEYS, sort=True)[label_col]
    stats = grouped.agg(["count", "size", "nunique", "first"])
    uniform = (stats["count"] == stats["size"]) & (stats["nunique"] == 1)
    labels = stats["first"].where(uniform).rename(label_col)
    n_unlabeled = int((~uniform).sum())
    if n_unlabeled:
        n_mixed = int((stats["nunique"] > 1).sum())
        logger.info("%d bout(s) left unlabeled (%d with conflicting labels)", n_unlabeled, n_mixed)
    return labels
