"""Classifier adapter over scikit-learn models.

Only the bout statistics in FEATURE_NAMES are used as model inputs; wide
sample columns and device ids never reach the estimator. Undefined
statistics (NaN) are imputed with the training median.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import joblib
import numpy as np
import pandas as pd
from sklearn.ensemble import RandomForestClassifier
from sklearn.impute import SimpleImputer
from sklearn.linear_model import LogisticRegression
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler
from sklearn.svm import SVC

from ..config import RF_MODELS
from ..errors import ConfigurationError, ModelError
from ..features import FEATURE_NAMES
from ..records import LABEL
from ..settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class ModelSpec:
    """Specification for model creation.

    kind: "rf" | "svc" | "logreg".
    """
    kind: str = "rf"  # rf|svc|logreg
    n_estimators: int = 500
    C: float = 1.0
    random_state: int = 42
    params: Dict[str, Any] = field(default_factory=dict)


def create_classifier(spec: ModelSpec) -> Pipeline:
    """Create a classification pipeline with imputation (and scaling for margin models)."""
    steps = [("impute", SimpleImputer(strategy="median", keep_empty_features=True))]
    if spec.kind == "rf":
        clf = RandomForestClassifier(n_estimators=spec.n_estimators, random_state=spec.random_state)
    elif spec.kind == "svc":
        steps.append(("scaler", StandardScaler()))
        clf = SVC(C=spec.C, probability=True, random_state=spec.random_state)
    elif spec.kind == "logreg":
        steps.append(("scaler", StandardScaler()))
        clf = LogisticRegression(C=spec.C, max_iter=1000)
    else:
        raise ConfigurationError(f"Unknown classifier kind: {spec.kind}")
    steps.append(("clf", clf))
    pipe = Pipeline(steps)
    if spec.params:
        try:
            pipe.set_params(**{f"clf__{k}": v for k, v in spec.params.items()})
        except ValueError as e:
            raise ConfigurationError(f"Invalid hyperparameters for {spec.kind}: {e}") from e
    return pipe


@dataclass
class TrainedModel:
    """A fitted estimator with the feature order it was trained on."""
    estimator: Pipeline
    feature_names: List[str]
    classes: List[str]
    bout_length: Optional[int] = None


class ClassifierAdapter:
    """Train/predict entry points used by the pipeline flows."""

    def __init__(self, spec: Optional[ModelSpec] = None):
        self.spec = spec or ModelSpec()

    def train(
        self,
        examples: pd.DataFrame,
        label_col: str = LABEL,
        hyperparameters: Optional[Mapping[str, Any]] = None,
        bout_length: Optional[int] = None,
    ) -> TrainedModel:
        """Fit on FEATURE_NAMES of the labeled examples.

        Raises:
            ModelError: no labels, fewer than two classes, or the estimator fails.
        """
        if label_col not in examples.columns:
            raise ModelError(f"Training examples have no {label_col!r} column")
        labeled = examples[examples[label_col].notna()]
        if len(labeled) < len(examples):
            logger.warning("Ignoring %d unlabeled example(s)", len(examples) - len(labeled))
        y = labeled[label_col].astype(str).to_numpy()
        if len(np.unique(y)) < 2:
            raise ModelError(f"Training needs at least 2 classes, got {sorted(set(y))}")
        spec = self.spec
        if hyperparameters:
            spec = ModelSpec(**{**spec.__dict__, "params": {**spec.params, **hyperparameters}})
        estimator = create_classifier(spec)
        X = _feature_matrix(labeled, FEATURE_NAMES)
        try:
            estimator.fit(X, y)
        except ValueError as e:
            raise ModelError(f"Classifier training failed: {e}") from e
        classes = [str(c) for c in estimator.classes_]
        logger.info("Trained %s on %d examples, classes: %s", spec.kind, len(y), classes)
        return TrainedModel(estimator, list(FEATURE_NAMES), classes, bout_length)

    def predict(self, model: TrainedModel, examples: pd.DataFrame) -> np.ndarray:
        """Predicted label per example."""
        X = _feature_matrix(examples, model.feature_names)
        try:
            return model.estimator.predict(X)
        except ValueError as e:
            raise ModelError(f"Prediction failed: {e}") from e

    def predict_probabilities(self, model: TrainedModel, examples: pd.DataFrame) -> pd.DataFrame:
        """Class probabilities per example, one column per class."""
        X = _feature_matrix(examples, model.feature_names)
        try:
            proba = model.estimator.predict_proba(X)
        except ValueError as e:
            raise ModelError(f"Prediction failed: {e}") from e
        return pd.DataFrame(proba, columns=model.classes, index=examples.index)


def _feature_matrix(examples: pd.DataFrame, names: List[str]) -> pd.DataFrame:
    missing = [c for c in names if c not in examples.columns]
    if missing:
        raise ModelError(f"Examples are missing {len(missing)} feature column(s), e.g. {missing[:3]}")
    return examples[names].astype(float)


@dataclass
class ModelSource:
    """Location of a persisted TrainedModel (joblib file)."""
    path: Path

    @classmethod
    def from_selector(cls, rf_model: str, settings: Optional[Settings] = None) -> "ModelSource":
        """Resolve "own_model" / "griffon_model" to a file in the model directory."""
        settings = settings or Settings()
        if rf_model == "own_model":
            return cls(settings.model_dir / settings.own_model_file)
        if rf_model == "griffon_model":
            return cls(settings.model_dir / settings.griffon_model_file)
        raise ConfigurationError(f"Unknown rf_model {rf_model!r}; expected one of {RF_MODELS}")

    def save(self, model: TrainedModel) -> Path:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        joblib.dump(model, self.path)
        logger.info("Saved model to %s", self.path)
        return self.path

    def load(self) -> TrainedModel:
        if not self.path.exists():
            raise ModelError(f"Model file not found: {self.path}")
        model = joblib.load(self.path)
        if not isinstance(model, TrainedModel):
            raise ModelError(f"{self.path} does not contain a trained bout classifier")
        return model
