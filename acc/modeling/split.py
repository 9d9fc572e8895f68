"""Stratified train/test split of assembled examples."""
from __future__ import annotations
import logging
from typing import Tuple

import pandas as pd
from sklearn.model_selection import train_test_split

from ..errors import ModelError
from ..records import LABEL

logger = logging.getLogger(__name__)


def class_train_count(n: int, train_size: float) -> int:
    """Training rows for a class of n >= 2 examples; at least one row stays on each side."""
    return min(max(int(round(train_size * n)), 1), n - 1)


def stratified_split(
    examples: pd.DataFrame,
    label_col: str = LABEL,
    train_size: float = 0.667,
    seed: int = 42,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Split examples into (train, test), stratified by label.

    Each class is split on its own, so every class with two or more
    examples appears in both partitions. Classes with a single example are
    kept in the training partition. The two partitions are disjoint and
    together contain every input row.
    """
    if label_col not in examples.columns:
        raise ModelError(f"Examples have no {label_col!r} column to stratify on")
    labeled = examples[examples[label_col].notna()]
    if len(labeled) < len(examples):
        raise ModelError("Cannot split examples with missing labels; drop unlabeled bouts first")

    train_idx, test_idx, rare = [], [], []
    for label, group in labeled.groupby(label_col, sort=True):
        n = len(group)
        if n < 2:
            rare.append(label)
            train_idx.extend(group.index)
            continue
        tr, te = train_test_split(
            group.index.to_numpy(), train_size=class_train_count(n, train_size), random_state=seed
        )
        train_idx.extend(tr)
        test_idx.extend(te)
    if rare:
        logger.warning("Class(es) with a single example kept in the training split: %s", rare)

    train = labeled.loc[train_idx]
    test = labeled.loc[test_idx]
    logger.info("Split %d examples into %d train / %d test", len(examples), len(train), len(test))
    return train, test
