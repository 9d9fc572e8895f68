"""Per-bout feature extraction.

Every complete bout is summarized by a fixed, ordered set of statistics
(see FEATURE_NAMES). Names follow ``<stat>_<axis>`` for per-axis values and
``<stat>_<pair>`` for cross-axis values, e.g. ``sd_x`` or ``cor_xz``.
"""
from __future__ import annotations
import logging
from itertools import combinations
from typing import Callable, Dict, Iterable, List

import numpy as np
import pandas as pd
from joblib import Parallel, delayed

from ..records import AXES, KEYS, Bout, FeatureVector
from . import stats

logger = logging.getLogger(__name__)

AXIS_STATS: Dict[str, Callable[[np.ndarray], float]] = {
    "mean": lambda x: float(np.mean(x)),
    "range": stats.value_range,
    "sd": stats.sd,
    "skew": stats.skewness,
    "kurt": stats.excess_kurtosis,
    "max": lambda x: float(np.max(x)),
    "min": lambda x: float(np.min(x)),
    "norm": stats.norm,
    "q25": lambda x: stats.quantile(x, 0.25),
    "q50": lambda x: stats.quantile(x, 0.50),
    "q75": lambda x: stats.quantile(x, 0.75),
    "amp": stats.mean_amplitude,
}

PAIR_STATS: Dict[str, Callable[[np.ndarray, np.ndarray], float]] = {
    "cov": stats.covariance,
    "cor": stats.correlation,
    "mean_diff": stats.mean_diff,
    "sd_diff": stats.sd_diff,
}

PAIRS = ["".join(p) for p in combinations(AXES, 2)]  # xy, xz, yz

FEATURE_NAMES: List[str] = (
    [f"{name}_{axis}" for axis in AXES for name in AXIS_STATS]
    + [f"{name}_{pair}" for pair in PAIRS for name in PAIR_STATS]
)


def feature_values(bout: Bout) -> Dict[str, float]:
    """Compute all statistics for one bout, in FEATURE_NAMES order."""
    values: Dict[str, float] = {}
    for axis in AXES:
        x = bout.axis(axis)
        for name, fn in AXIS_STATS.items():
            values[f"{name}_{axis}"] = fn(x)
    for pair in PAIRS:
        a, b = bout.axis(pair[0]), bout.axis(pair[1])
        for name, fn in PAIR_STATS.items():
            values[f"{name}_{pair}"] = fn(a, b)
    return values


def extract_features(bout: Bout) -> FeatureVector:
    return FeatureVector(device_id=bout.device_id, bout_id=bout.bout_id, values=feature_values(bout))


def extract_all(bouts: Iterable[Bout], n_jobs: int = 1) -> List[FeatureVector]:
    """Extract features for many bouts, optionally across worker processes."""
    if n_jobs == 1:
        return [extract_features(b) for b in bouts]
    bouts = list(bouts)
    # FeatureVector.values is a mappingproxy, which cannot be pickled
    values = Parallel(n_jobs=n_jobs)(delayed(feature_values)(b) for b in bouts)
    return [FeatureVector(b.device_id, b.bout_id, v) for b, v in zip(bouts, values)]


def features_frame(vectors: Iterable[FeatureVector]) -> pd.DataFrame:
    """One row per bout: device_id, bout_id, then FEATURE_NAMES in order."""
    rows = [v.as_row() for v in vectors]
    df = pd.DataFrame(rows, columns=[*KEYS, *FEATURE_NAMES])
    n_undefined = int(df[FEATURE_NAMES].isna().any(axis=1).sum()) if len(df) else 0
    if n_undefined:
        logger.info("%d bout(s) have at least one undefined feature", n_undefined)
    return df
