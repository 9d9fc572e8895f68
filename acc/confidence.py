"""Confidence score from per-class probabilities."""
from __future__ import annotations
from typing import List

import pandas as pd

from .records import BOUT_ID, DEVICE_ID, ClassificationResult


def confidence_scores(probabilities: pd.DataFrame) -> pd.Series:
    """Row-wise maximum class probability."""
    return probabilities.max(axis=1).rename("confidence")


def predicted_labels(probabilities: pd.DataFrame) -> pd.Series:
    """Class with the highest probability per row (first one on ties)."""
    return probabilities.idxmax(axis=1).rename("predicted_label")


def classification_results(keys: pd.DataFrame, probabilities: pd.DataFrame) -> List[ClassificationResult]:
    """Pair (device_id, bout_id) rows with their probabilities and confidence."""
    labels = predicted_labels(probabilities)
    conf = confidence_scores(probabilities)
    results = []
    for i, key in zip(probabilities.index, keys[[DEVICE_ID, BOUT_ID]].itertuples(index=False)):
        results.append(ClassificationResult(
            device_id=key[0],
            bout_id=int(key[1]),
            predicted_label=labels[i],
            probabilities={str(c): float(p) for c, p in probabilities.loc[i].items()},
            confidence=float(conf[i]),
        ))
    return results


def scored_frame(examples: pd.DataFrame, probabilities: pd.DataFrame) -> pd.DataFrame:
    """Append predicted_label, prob_<class> columns and confidence to examples."""
    prob_cols = probabilities.add_prefix("prob_")
    return pd.concat(
        [examples, predicted_labels(probabilities), prob_cols, confidence_scores(probabilities)],
        axis=1,
    )
