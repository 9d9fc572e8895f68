"""Configuration dataclasses for the ACC bout pipeline.

This module centralizes the parameters read by every stage (segmentation
strategy, bout geometry, split proportion, model selector) so the training
and inference flows share one immutable setup.
"""
from __future__ import annotations
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping

import yaml

from .errors import ConfigurationError

BOUT_TYPES = ("device", "time_diff", "cont")
RF_MODELS = ("own_model", "griffon_model")


@dataclass(frozen=True)
class BoutConfig:
    """Top-level configuration for segmentation, features and modeling.

    Attributes:
        bout_type: Segmentation strategy: "device", "time_diff" or "cont".
        column_bout_id: Marker column scanned by the "device" strategy.
        start_bout_id: Marker value that starts a new bout ("device").
        time_threshold: Gap (s) that starts a new bout ("time_diff").
        bout_duration: Bout duration in seconds.
        acc_frequency: ACC sampling rate in Hz.
        max_gap: Largest within-bout sample gap (s) accepted by the "cont" check.
        drop_gapped_bouts: Remove "cont" bouts failing the gap check instead
            of only reporting them.
        train_proportion: Share of examples assigned to the training split.
        seed: Seed for the stratified split and the classifier.
        rf_model: Persisted model used for inference: "own_model" or "griffon_model".
        n_jobs: Worker processes for per-bout feature extraction.
    """

    bout_type: str = "cont"

    # Device-marker strategy
    column_bout_id: str | None = None
    start_bout_id: str | None = None

    # Time-gap strategy
    time_threshold: float | None = None

    # Bout geometry
    bout_duration: float = 1.0
    acc_frequency: float = 20.0

    # Continuous-window gap check
    max_gap: float = 1.0
    drop_gapped_bouts: bool = False

    # Modeling
    train_proportion: float = 0.667
    seed: int = 42
    rf_model: str = "own_model"

    n_jobs: int = 1

    def __post_init__(self):
        if self.bout_type not in BOUT_TYPES:
            raise ConfigurationError(
                f"Unknown bout_type {self.bout_type!r}; expected one of {BOUT_TYPES}"
            )
        if self.bout_type == "device" and (not self.column_bout_id or self.start_bout_id is None):
            raise ConfigurationError("bout_type 'device' requires column_bout_id and start_bout_id")
        if self.bout_type == "time_diff":
            if self.time_threshold is None or self.time_threshold <= 0:
                raise ConfigurationError("bout_type 'time_diff' requires a positive time_threshold")
        if self.bout_duration <= 0 or self.acc_frequency <= 0:
            raise ConfigurationError("bout_duration and acc_frequency must be positive")
        n = self.bout_duration * self.acc_frequency
        if abs(n - round(n)) > 1e-9:
            raise ConfigurationError(
                f"bout_duration x acc_frequency must be a whole number of samples, got {n}"
            )
        if not 0.0 < self.train_proportion < 1.0:
            raise ConfigurationError("train_proportion must be in (0, 1)")
        if self.rf_model not in RF_MODELS:
            raise ConfigurationError(
                f"Unknown rf_model {self.rf_model!r}; expected one of {RF_MODELS}"
            )

    @property
    def bout_length(self) -> int:
        """Number of samples in a complete bout."""
        return int(round(self.bout_duration * self.acc_frequency))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "BoutConfig":
        """Build a config from a plain mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {unknown}")
        values = dict(data)
        if values.get("start_bout_id") is not None:
            values["start_bout_id"] = str(values["start_bout_id"])
        return cls(**values)


def load_config(path: str | Path, overrides: Mapping[str, Any] | None = None) -> BoutConfig:
    """Load a YAML config file and apply non-None overrides on top."""
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    for k, v in (overrides or {}).items():
        if v is not None:
            data[k] = v
    return BoutConfig.from_mapping(data)


def add_config_args(ap) -> None:
    """Register --config and per-key override flags on an argparse parser."""
    ap.add_argument("--config", type=Path, help="YAML file with pipeline settings")
    ap.add_argument("--bout-type", choices=BOUT_TYPES)
    ap.add_argument("--column-bout-id")
    ap.add_argument("--start-bout-id")
    ap.add_argument("--time-threshold", type=float)
    ap.add_argument("--bout-duration", type=float)
    ap.add_argument("--acc-frequency", type=float)
    ap.add_argument("--rf-model", choices=RF_MODELS)
    ap.add_argument("--seed", type=int)
    ap.add_argument("--n-jobs", type=int)


def config_from_args(args) -> BoutConfig:
    """Combine the YAML file (if any) with command-line overrides."""
    overrides = {
        "bout_type": args.bout_type,
        "column_bout_id": args.column_bout_id,
        "start_bout_id": args.start_bout_id,
        "time_threshold": args.time_threshold,
        "bout_duration": args.bout_duration,
        "acc_frequency": args.acc_frequency,
        "rf_model": args.rf_model,
        "seed": args.seed,
        "n_jobs": args.n_jobs,
    }
    if args.config is not None:
        return load_config(args.config, overrides)
    return BoutConfig.from_mapping({k: v for k, v in overrides.items() if v is not None})
