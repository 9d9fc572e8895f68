"""Scalar statistics computed over one bout axis or a pair of axes.

Per-axis:
- mean, range, sd (sample, n-1), skew, excess kurtosis, max, min
- norm: Euclidean norm sqrt(sum x^2)
- quantiles with linear interpolation
- mean amplitude: mean height between successive local extrema

Pairwise:
- covariance (n-1), Pearson correlation
- mean and sd of the elementwise difference

Statistics that are undefined for the input (e.g. correlation of a
constant signal, amplitude of a monotonic one) return NaN.
"""
from __future__ import annotations
import numpy as np
from scipy import stats


def sd(x: np.ndarray) -> float:
    """Sample standard deviation (divisor n-1)."""
    x = np.asarray(x, dtype=float)
    if x.size < 2:
        return float("nan")
    return float(np.std(x, ddof=1))


def value_range(x: np.ndarray) -> float:
    x = np.asarray(x, dtype=float)
    return float(np.max(x) - np.min(x))


def skewness(x: np.ndarray) -> float:
    x = np.asarray(x, dtype=float)
    with np.errstate(invalid="ignore", divide="ignore"):
        return float(stats.skew(x))


def excess_kurtosis(x: np.ndarray) -> float:
    """Fisher kurtosis (0 for a normal distribution)."""
    x = np.asarray(x, dtype=float)
    with np.errstate(invalid="ignore", divide="ignore"):
        return float(stats.kurtosis(x, fisher=True))


def norm(x: np.ndarray) -> float:
    """Euclidean norm sqrt(sum x^2)."""
    x = np.asarray(x, dtype=float)
    return float(np.sqrt(np.sum(x * x)))


def quantile(x: np.ndarray, q: float) -> float:
    """Quantile with linear interpolation between order statistics."""
    return float(np.quantile(np.asarray(x, dtype=float), q, method="linear"))


def extrema_indices(x: np.ndarray) -> np.ndarray:
    """Indices of local extrema, in sequence order.

    An extremum sits at i+1 wherever the sign of the first difference flips
    from +1 to -1 or back, i.e. |diff(sign(diff(x)))|[i] == 2.
    """
    x = np.asarray(x, dtype=float)
    if x.size < 3:
        return np.empty(0, dtype=int)
    sign_diff = np.diff(np.sign(np.diff(x)))
    return np.flatnonzero(np.abs(sign_diff) == 2) + 1


def mean_amplitude(x: np.ndarray) -> float:
    """Mean absolute height between successive local extrema.

    Extremum k is paired with extremum k+1. Fewer than two extrema give NaN.
    """
    x = np.asarray(x, dtype=float)
    idx = extrema_indices(x)
    if idx.size < 2:
        return float("nan")
    starts = x[idx[:-1]]
    ends = x[idx[1:]]
    return float(np.mean(np.abs(ends - starts)))


def covariance(a: np.ndarray, b: np.ndarray) -> float:
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    if a.size < 2:
        return float("nan")
    return float(np.cov(a, b, ddof=1)[0, 1])


def correlation(a: np.ndarray, b: np.ndarray) -> float:
    """Pearson correlation; NaN when either signal is constant."""
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    if a.size < 2 or np.ptp(a) == 0 or np.ptp(b) == 0:
        return float("nan")
    return float(np.corrcoef(a, b)[0, 1])


def mean_diff(a: np.ndarray, b: np.ndarray) -> float:
    return float(np.mean(np.asarray(a, dtype=float) - np.asarray(b, dtype=float)))


def sd_diff(a: np.ndarray, b: np.ndarray) -> float:
    return sd(np.asarray(a, dtype=float) - np.asarray(b, dtype=float))
