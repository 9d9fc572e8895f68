"""Sequential composition of the bout pipeline stages.

Normalizer -> Segmenter -> Propagator -> Filter -> Extractor/Assembler.
Each stage is a DataFrame transform; data only flows downstream.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Iterable, Protocol

import pandas as pd

from .calibration import Calibrator
from .config import BoutConfig
from .errors import DataIntegrityError
from .features import extract_all, features_frame
from .labels import bout_labels, propagate_labels
from .records import KEYS, LABEL
from .segmentation import make_segmenter
from .wide import assemble, bout_starts, to_wide
from .windowing import FilterReport, filter_complete_bouts, iter_bouts

logger = logging.getLogger(__name__)


class Stage(Protocol):
    """A pipeline stage with a transform method."""
    def transform(self, df: pd.DataFrame) -> pd.DataFrame: ...


class Pipeline:
    """Simple sequential pipeline over sample tables."""
    def __init__(self, stages: Iterable[Stage]):
        self.stages = list(stages)

    def transform(self, df):
        y = df
        for s in self.stages:
            y = s.transform(y)
        return y


class LabelPropagator:
    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        return propagate_labels(df)


@dataclass
class PipelineReport:
    """Counts collected during one pipeline run."""
    samples: int = 0
    bouts_found: int = 0
    bouts_kept: int = 0
    bouts_dropped: int = 0
    samples_dropped: int = 0
    bouts_unlabeled: int = 0


class BoutPipeline:
    """Turn raw ACC samples into one example row per complete bout.

    The segmentation strategy is resolved when the pipeline is built, so an
    invalid selector fails before any data is processed.
    """

    def __init__(self, config: BoutConfig, calibrator: Calibrator):
        self.config = config
        self.calibrator = calibrator
        self.segmenter = make_segmenter(config)
        self.samples = Pipeline([calibrator, self.segmenter, LabelPropagator()])
        self.report = PipelineReport()

    def segment(self, raw: pd.DataFrame) -> pd.DataFrame:
        """Calibrate, segment and propagate labels; then drop incomplete bouts."""
        df = self.samples.transform(raw)
        self.report.samples = len(raw)
        self.report.bouts_found = df[KEYS].drop_duplicates().shape[0]
        df, filtered = filter_complete_bouts(
            df, self.config.bout_length, exclude=self.segmenter.incomplete_bout_ids
        )
        self._record(filtered)
        return df

    def _record(self, filtered: FilterReport) -> None:
        self.report.bouts_kept = filtered.kept
        self.report.bouts_dropped = filtered.dropped
        self.report.samples_dropped = filtered.dropped_samples

    def run(self, raw: pd.DataFrame, labeled: bool = True) -> pd.DataFrame:
        """Build examples from raw samples.

        Args:
            raw: Raw ACC samples (see acc.io.read_acc_csv).
            labeled: Attach the propagated bout label (training) instead of
                the bout start timestamp (inference).
        Returns:
            One row per retained bout: keys, label or timestamp, wide sample
            columns, features.
        """
        self.report = PipelineReport()
        df = self.segment(raw)
        if df.empty:
            raise DataIntegrityError(
                f"No complete bouts of {self.config.bout_length} samples in {len(raw)} input samples"
            )
        labels = bout_labels(df) if labeled else None
        vectors = extract_all(iter_bouts(df, labels), n_jobs=self.config.n_jobs)
        features = features_frame(vectors)
        wide = to_wide(df, self.config.bout_length)
        if labeled:
            examples = assemble(wide, features, labels=labels)
            self.report.bouts_unlabeled = int(examples[LABEL].isna().sum())
        else:
            examples = assemble(wide, features, timestamps=bout_starts(df))
        logger.info("Pipeline: %s", self.report)
        return examples
