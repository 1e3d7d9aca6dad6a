"""
Model training functionality.

Every classifier kind goes through the same shape: build a
preprocessor + model pipeline, select hyperparameters by repeated stratified
k-fold cross-validation, refit on the full training subset.
"""

import time
from dataclasses import dataclass, field
from typing import Any

import numpy as np
import pandas as pd
from sklearn.model_selection import (
    GridSearchCV,
    RepeatedStratifiedKFold,
    cross_val_score,
)
from sklearn.pipeline import Pipeline

from harpredict.config.settings import PipelineConfig
from harpredict.modeling.models import (
    ClassifierKind,
    get_model,
    get_param_grid,
    parse_kind,
)
from harpredict.modeling.preprocessing import build_preprocessor
from harpredict.utils.logging import get_logger

log = get_logger(__name__)


@dataclass
class TrainedModel:
    """
    Container for a trained classifier with metadata.

    Attributes:
        kind: Classifier kind.
        pipeline: Fitted sklearn pipeline (preprocessor + model).
        cv_scores: Cross-validated accuracy (mean, std, number of folds).
        best_params: Selected hyperparameters (if tuned).
        feature_names: Input feature names.
        classes: Class labels known to the model.
        training_time_s: Total training time in seconds.
    """

    kind: ClassifierKind
    pipeline: Pipeline
    cv_scores: dict[str, float] = field(default_factory=dict)
    best_params: dict[str, Any] | None = None
    feature_names: list[str] = field(default_factory=list)
    classes: list[str] = field(default_factory=list)
    training_time_s: float = 0.0

    @property
    def name(self) -> str:
        """Human-readable classifier name."""
        return self.kind.label

    def predict(self, X: pd.DataFrame) -> np.ndarray:
        """Predict labels for rows of X, using the training feature order."""
        return self.pipeline.predict(X[self.feature_names])


def _as_labels(y: pd.Series) -> pd.Series:
    """Labels as plain strings so predictions come back as strings."""
    return y.astype(str)


class ModelTrainer:
    """
    Trainer for the activity quality classifiers.

    Handles pipeline construction, cross-validated tuning and refitting.
    """

    def __init__(self, config: PipelineConfig) -> None:
        """
        Initialize trainer.

        Args:
            config: Pipeline configuration.
        """
        self.config = config
        self.models: dict[ClassifierKind, TrainedModel] = {}

    def cross_validator(self) -> RepeatedStratifiedKFold:
        """Repeated stratified k-fold splitter from configuration."""
        training = self.config.training
        return RepeatedStratifiedKFold(
            n_splits=training.cv_folds,
            n_repeats=training.cv_repeats,
            random_state=training.random_state,
        )

    def train(
        self,
        X: pd.DataFrame,
        y: pd.Series,
        kinds: list[str | ClassifierKind] | None = None,
        *,
        tune_hyperparameters: bool | None = None,
    ) -> dict[ClassifierKind, TrainedModel]:
        """
        Train classifiers on data.

        Args:
            X: Predictor matrix.
            y: Labels.
            kinds: Classifier kinds to train (default: from config).
            tune_hyperparameters: Whether to grid-search (default: from config).

        Returns:
            Dictionary of trained models in training order.

        Raises:
            KeyError: If a kind is unknown.
        """
        if kinds is None:
            kinds = list(self.config.models.enabled)
        if tune_hyperparameters is None:
            tune_hyperparameters = self.config.training.tune

        resolved = [parse_kind(k) for k in kinds]
        labels = _as_labels(y)

        log.info(
            "Starting training",
            n_samples=len(X),
            n_features=X.shape[1],
            models=[k.value for k in resolved],
            cv_folds=self.config.training.cv_folds,
            cv_repeats=self.config.training.cv_repeats,
        )

        for kind in resolved:
            log.info("Training model", kind=kind.value)
            self.models[kind] = self._train_single_model(
                X, labels, kind, tune=tune_hyperparameters
            )

        log.info("Training complete", n_models=len(self.models))
        return self.models

    def build_pipeline(self, kind: ClassifierKind) -> Pipeline:
        """Unfitted preprocessor + model pipeline for one kind."""
        overrides = self.config.models.hyperparameters.get(kind.value, {})
        model = get_model(
            kind, random_state=self.config.training.random_state, **overrides
        )
        return Pipeline(
            steps=[
                ("preprocessor", build_preprocessor(kind)),
                ("model", model),
            ]
        )

    def _train_single_model(
        self,
        X: pd.DataFrame,
        y: pd.Series,
        kind: ClassifierKind,
        *,
        tune: bool = True,
    ) -> TrainedModel:
        """Train a single classifier."""
        training_start = time.perf_counter()

        pipeline = self.build_pipeline(kind)
        cv = self.cross_validator()
        n_jobs = self.config.training.n_jobs
        grid = get_param_grid(kind, self.config.models.param_grids)

        best_params = None
        if tune and grid:
            gs = GridSearchCV(
                pipeline,
                param_grid=grid,
                cv=cv,
                scoring="accuracy",
                n_jobs=n_jobs,
                refit=True,
            )
            gs.fit(X, y)
            pipeline = gs.best_estimator_
            best_params = gs.best_params_
            idx = gs.best_index_
            fold_mean = float(gs.cv_results_["mean_test_score"][idx])
            fold_std = float(gs.cv_results_["std_test_score"][idx])
            log.info("Hyperparameter tuning complete", kind=kind.value, best_params=best_params)
        else:
            scores = cross_val_score(
                pipeline, X, y, cv=cv, scoring="accuracy", n_jobs=n_jobs
            )
            fold_mean = float(np.mean(scores))
            fold_std = float(np.std(scores))
            pipeline.fit(X, y)

        training_time_s = time.perf_counter() - training_start
        cv_scores = {
            "accuracy_cv": fold_mean,
            "accuracy_cv_std": fold_std,
            "n_folds": float(cv.get_n_splits()),
        }

        log.info(
            "CV accuracy",
            kind=kind.value,
            accuracy_cv=f"{fold_mean:.4f}",
            accuracy_cv_std=f"{fold_std:.4f}",
            training_time_s=f"{training_time_s:.1f}",
        )

        return TrainedModel(
            kind=kind,
            pipeline=pipeline,
            cv_scores=cv_scores,
            best_params=best_params,
            feature_names=list(X.columns),
            classes=[str(c) for c in pipeline.classes_],
            training_time_s=training_time_s,
        )


def train_model(
    X: pd.DataFrame,
    y: pd.Series,
    config: PipelineConfig,
    kind: str | ClassifierKind | None = None,
) -> TrainedModel:
    """
    Convenience function to train a single classifier.

    Args:
        X: Predictor matrix.
        y: Labels.
        config: Pipeline configuration.
        kind: Classifier to train (default: first enabled in config).

    Returns:
        Trained model.
    """
    trainer = ModelTrainer(config)
    resolved = parse_kind(kind if kind is not None else config.models.enabled[0])
    models = trainer.train(X, y, [resolved])
    return models[resolved]
