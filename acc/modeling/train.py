"""Training flow: raw ACC + observations -> labeled bouts -> fitted classifier.

Usage:
    acc-train --calibration calib.csv --acc acc1.csv acc2.csv \
        --observations obs.csv --config bouts.yaml --out results/train
"""
from __future__ import annotations
import argparse
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

import pandas as pd

from ..calibration import Calibrator
from ..config import BoutConfig, add_config_args, config_from_args
from ..confidence import scored_frame
from ..evaluation.metrics import classification_metrics, confusion_table
from ..io import join_observations, read_acc_csv, read_calibration_csv, read_observations_csv
from ..pipeline import BoutPipeline, PipelineReport
from ..records import LABEL
from ..settings import Settings
from .classical import ClassifierAdapter, ModelSource, ModelSpec, TrainedModel
from .split import stratified_split

logger = logging.getLogger(__name__)


@dataclass
class TrainingResult:
    model: TrainedModel
    train: pd.DataFrame
    test: pd.DataFrame
    metrics: dict
    report: PipelineReport


def train_from_frames(
    raw: pd.DataFrame,
    calibrator: Calibrator,
    config: BoutConfig,
    spec: Optional[ModelSpec] = None,
    hyperparameters: Optional[dict] = None,
) -> TrainingResult:
    """Run the full training flow on in-memory tables.

    `raw` must already carry the behaviour label column (observations joined).
    The returned test frame holds predictions, prob_<class> columns and confidence.
    """
    pipeline = BoutPipeline(config, calibrator)
    examples = pipeline.run(raw, labeled=True)
    labeled = examples[examples[LABEL].notna()]
    if len(labeled) < len(examples):
        logger.warning("Excluding %d unlabeled bout(s) from training", len(examples) - len(labeled))

    train, test = stratified_split(labeled, LABEL, config.train_proportion, config.seed)
    adapter = ClassifierAdapter(spec or ModelSpec(random_state=config.seed))
    model = adapter.train(train, LABEL, hyperparameters, bout_length=config.bout_length)

    metrics = {}
    if len(test):
        proba = adapter.predict_probabilities(model, test)
        test = scored_frame(test, proba)
        metrics = classification_metrics(test[LABEL].astype(str), test["predicted_label"])
        logger.info("Test accuracy %.3f, weighted F1 %.3f", metrics["accuracy"], metrics["f1"])
        logger.info("Confusion matrix:\n%s", confusion_table(test[LABEL], test["predicted_label"]))
    else:
        logger.warning("Test split is empty; no evaluation performed")
    return TrainingResult(model, train, test, metrics, pipeline.report)


def run_training(
    calibration_csv: Path,
    acc_csvs: Iterable[Path],
    config: BoutConfig,
    observations_csv: Optional[Path] = None,
    out_dir: Path = Path("results"),
    model_source: Optional[ModelSource] = None,
) -> TrainingResult:
    """Read input files, train, save the model and write the scored test split."""
    calibrator = Calibrator.from_records(read_calibration_csv(calibration_csv))
    raw = read_acc_csv(list(acc_csvs))
    if observations_csv is not None:
        raw = join_observations(raw, read_observations_csv(observations_csv))
    result = train_from_frames(raw, calibrator, config)

    source = model_source or ModelSource.from_selector("own_model")
    source.save(result.model)
    out_dir.mkdir(parents=True, exist_ok=True)
    result.test.to_csv(out_dir / "test_predictions.csv", index=False)
    result.train.to_csv(out_dir / "train_examples.csv", index=False)
    logger.info("Wrote training outputs to %s", out_dir)
    return result


def main():
    """CLI entry point for model training."""
    settings = Settings()
    logging.basicConfig(level=settings.log_level, format="%(levelname)s:%(name)s:%(message)s")
    ap = argparse.ArgumentParser(description="Train a bout behaviour classifier from ACC data")
    ap.add_argument("--calibration", type=Path, required=True, help="Calibration CSV")
    ap.add_argument("--acc", type=Path, nargs="+", required=True, help="Raw ACC CSV file(s)")
    ap.add_argument("--observations", type=Path, help="Behaviour observations CSV")
    ap.add_argument("--out", type=Path, default=Path("results"), help="Output directory")
    ap.add_argument("--model-out", type=Path, help="Model path (default: own model in ACC_MODEL_DIR)")
    add_config_args(ap)
    args = ap.parse_args()

    config = config_from_args(args)
    source = ModelSource(args.model_out) if args.model_out else ModelSource.from_selector("own_model", settings)
    run_training(args.calibration, args.acc, config, args.observations, args.out, source)


if __name__ == "__main__":
    main()
