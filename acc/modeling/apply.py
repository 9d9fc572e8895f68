"""Inference flow: apply a persisted classifier to new ACC streams.

Usage:
    acc-apply --calibration calib.csv --acc new.csv --config bouts.yaml \
        --rf-model griffon_model --out results/predictions.csv
"""
from __future__ import annotations
import argparse
import logging
from pathlib import Path
from typing import Iterable, Optional

import pandas as pd

from ..calibration import Calibrator
from ..config import BoutConfig, add_config_args, config_from_args
from ..confidence import scored_frame
from ..errors import ConfigurationError
from ..io import read_acc_csv, read_calibration_csv
from ..pipeline import BoutPipeline
from ..records import LABEL
from ..settings import Settings
from .classical import ClassifierAdapter, ModelSource, TrainedModel

logger = logging.getLogger(__name__)


def apply_model(
    raw: pd.DataFrame,
    calibrator: Calibrator,
    config: BoutConfig,
    model: TrainedModel,
) -> pd.DataFrame:
    """Segment, featurize and classify; one scored row per complete bout."""
    if model.bout_length is not None and model.bout_length != config.bout_length:
        raise ConfigurationError(
            f"Model was trained on bouts of {model.bout_length} samples, config gives {config.bout_length}"
        )
    examples = BoutPipeline(config, calibrator).run(raw.drop(columns=[LABEL], errors="ignore"), labeled=False)
    proba = ClassifierAdapter().predict_probabilities(model, examples)
    scored = scored_frame(examples, proba)
    logger.info(
        "Classified %d bout(s); mean confidence %.3f", len(scored), float(scored["confidence"].mean())
    )
    return scored


def run_inference(
    calibration_csv: Path,
    acc_csvs: Iterable[Path],
    config: BoutConfig,
    out_csv: Path,
    model_source: Optional[ModelSource] = None,
    settings: Optional[Settings] = None,
) -> pd.DataFrame:
    """Read inputs, load the selected model, classify and write the output dataset."""
    source = model_source or ModelSource.from_selector(config.rf_model, settings)
    model = source.load()
    calibrator = Calibrator.from_records(read_calibration_csv(calibration_csv))
    raw = read_acc_csv(list(acc_csvs))
    scored = apply_model(raw, calibrator, config, model)
    out_csv.parent.mkdir(parents=True, exist_ok=True)
    scored.to_csv(out_csv, index=False)
    logger.info("Wrote %d prediction(s) to %s", len(scored), out_csv)
    return scored


def main():
    """CLI entry point for applying a trained model."""
    settings = Settings()
    logging.basicConfig(level=settings.log_level, format="%(levelname)s:%(name)s:%(message)s")
    ap = argparse.ArgumentParser(description="Classify ACC bouts with a trained model")
    ap.add_argument("--calibration", type=Path, required=True, help="Calibration CSV")
    ap.add_argument("--acc", type=Path, nargs="+", required=True, help="Raw ACC CSV file(s)")
    ap.add_argument("--out", type=Path, default=Path("results/predictions.csv"), help="Output CSV")
    ap.add_argument("--model", type=Path, help="Explicit model path (overrides --rf-model)")
    add_config_args(ap)
    args = ap.parse_args()

    config = config_from_args(args)
    source = ModelSource(args.model) if args.model else ModelSource.from_selector(config.rf_model, settings)
    run_inference(args.calibration, args.acc, config, args.out, source)


if __name__ == "__main__":
    main()
