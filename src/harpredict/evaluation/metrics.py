"""
Evaluation metrics for classification models.

Provides confusion-matrix statistics for in-sample and out-of-sample
predictions, and the gap between them as an overfitting signal.
"""

from dataclasses import dataclass

import numpy as np
import pandas as pd
from scipy.stats import beta
from sklearn.metrics import accuracy_score, cohen_kappa_score, confusion_matrix

from harpredict.modeling.data import PartitionedData
from harpredict.modeling.models import ClassifierKind
from harpredict.modeling.training import TrainedModel
from harpredict.utils.logging import get_logger

log = get_logger(__name__)

# Accuracy gap thresholds for the overfitting risk levels
GAP_LOW = 0.05
GAP_MODERATE = 0.10


def accuracy_interval(
    n_correct: int,
    n_total: int,
    confidence: float = 0.95,
) -> tuple[float, float]:
    """
    Exact (Clopper-Pearson) binomial confidence interval for accuracy.

    Args:
        n_correct: Number of correct predictions.
        n_total: Number of predictions.
        confidence: Coverage of the interval.

    Returns:
        Tuple of (lower, upper) bounds in [0, 1].
    """
    if n_total == 0:
        return 0.0, 0.0

    alpha = 1.0 - confidence
    n_wrong = n_total - n_correct

    lower = 0.0
    if n_correct > 0:
        lower = beta.ppf(alpha / 2, n_correct, n_wrong + 1)

    upper = 1.0
    if n_wrong > 0:
        upper = beta.ppf(1 - alpha / 2, n_correct + 1, n_wrong)

    return float(lower), float(upper)


@dataclass(frozen=True)
class ClassificationMetrics:
    """
    Confusion-matrix statistics for one set of predictions.

    Attributes:
        accuracy: Share of correct predictions.
        accuracy_lower: Lower bound of the 95% confidence interval.
        accuracy_upper: Upper bound of the 95% confidence interval.
        kappa: Cohen's kappa.
        no_information_rate: Share of the most frequent true class.
        confusion: Confusion matrix, rows = actual, columns = predicted.
        per_class: Sensitivity, specificity, precision and balanced accuracy
            per class.
        n_samples: Number of predictions.
    """

    accuracy: float
    accuracy_lower: float
    accuracy_upper: float
    kappa: float
    no_information_rate: float
    confusion: pd.DataFrame
    per_class: pd.DataFrame
    n_samples: int

    @property
    def error_rate(self) -> float:
        """Share of wrong predictions."""
        return 1.0 - self.accuracy

    def to_dict(self) -> dict[str, float]:
        """Convert scalar metrics to a dictionary."""
        return {
            "accuracy": self.accuracy,
            "accuracy_lower": self.accuracy_lower,
            "accuracy_upper": self.accuracy_upper,
            "kappa": self.kappa,
            "no_information_rate": self.no_information_rate,
            "n_samples": self.n_samples,
        }

    def __str__(self) -> str:
        """String representation."""
        return (
            f"Accuracy={self.accuracy:.4f} "
            f"(95% CI {self.accuracy_lower:.4f}-{self.accuracy_upper:.4f}), "
            f"Kappa={self.kappa:.4f}, NIR={self.no_information_rate:.4f}"
        )


def _per_class_stats(matrix: np.ndarray, labels: list[str]) -> pd.DataFrame:
    """One-vs-rest statistics from a confusion matrix (rows = actual)."""
    total = matrix.sum()
    tp = np.diag(matrix).astype(float)
    actual = matrix.sum(axis=1).astype(float)
    predicted = matrix.sum(axis=0).astype(float)
    fn = actual - tp
    fp = predicted - tp
    tn = total - tp - fn - fp

    with np.errstate(divide="ignore", invalid="ignore"):
        sensitivity = np.where(actual > 0, tp / actual, np.nan)
        specificity = np.where(tn + fp > 0, tn / (tn + fp), np.nan)
        precision = np.where(predicted > 0, tp / predicted, np.nan)

    return pd.DataFrame(
        {
            "sensitivity": sensitivity,
            "specificity": specificity,
            "precision": precision,
            "balanced_accuracy": (sensitivity + specificity) / 2,
            "support": actual.astype(int),
        },
        index=pd.Index(labels, name="class"),
    )


def compute_metrics(
    y_true: np.ndarray | pd.Series,
    y_pred: np.ndarray | pd.Series,
    labels: list[str] | None = None,
) -> ClassificationMetrics:
    """
    Compute classification metrics.

    Args:
        y_true: True labels.
        y_pred: Predicted labels.
        labels: Class order for the confusion matrix (default: sorted union).

    Returns:
        ClassificationMetrics object.
    """
    y_true = np.asarray(y_true, dtype=str).ravel()
    y_pred = np.asarray(y_pred, dtype=str).ravel()

    if labels is None:
        labels = sorted(set(y_true) | set(y_pred))

    if len(y_true) == 0 or len(y_pred) == 0:
        log.warning("Empty arrays provided for metrics")
        empty = pd.DataFrame(0, index=labels, columns=labels)
        return ClassificationMetrics(
            accuracy=0.0,
            accuracy_lower=0.0,
            accuracy_upper=0.0,
            kappa=0.0,
            no_information_rate=0.0,
            confusion=empty,
            per_class=_per_class_stats(empty.to_numpy(), labels),
            n_samples=0,
        )

    matrix = confusion_matrix(y_true, y_pred, labels=labels)
    n_correct = int(np.trace(matrix))
    lower, upper = accuracy_interval(n_correct, len(y_true))

    kappa = float(cohen_kappa_score(y_true, y_pred, labels=labels))
    if np.isnan(kappa):
        # Undefined when only one class occurs in both arrays
        kappa = 0.0

    confusion = pd.DataFrame(
        matrix,
        index=pd.Index(labels, name="actual"),
        columns=pd.Index(labels, name="predicted"),
    )

    metrics = ClassificationMetrics(
        accuracy=float(accuracy_score(y_true, y_pred)),
        accuracy_lower=lower,
        accuracy_upper=upper,
        kappa=kappa,
        no_information_rate=float(matrix.sum(axis=1).max() / matrix.sum()),
        confusion=confusion,
        per_class=_per_class_stats(matrix, labels),
        n_samples=len(y_true),
    )

    log.debug("Computed metrics", **metrics.to_dict())
    return metrics


@dataclass(frozen=True)
class EvaluationResult:
    """
    In-sample and out-of-sample evaluation of one classifier.

    Attributes:
        kind: Classifier kind.
        in_sample: Metrics on the training subset.
        out_of_sample: Metrics on the validation subset.
        cv_scores: Cross-validated accuracy from training.
        training_time_s: Training time in seconds.
    """

    kind: ClassifierKind
    in_sample: ClassificationMetrics
    out_of_sample: ClassificationMetrics
    cv_scores: dict[str, float]
    training_time_s: float

    @property
    def accuracy_gap(self) -> float:
        """In-sample minus out-of-sample accuracy."""
        return self.in_sample.accuracy - self.out_of_sample.accuracy

    @property
    def overfitting_risk(self) -> str:
        """
        Assess overfitting risk based on the accuracy gap.

        Returns:
            'low' if gap < 0.05
            'moderate' if 0.05 <= gap < 0.10
            'high' if gap >= 0.10
        """
        if self.accuracy_gap < GAP_LOW:
            return "low"
        if self.accuracy_gap < GAP_MODERATE:
            return "moderate"
        return "high"

    def to_dict(self) -> dict[str, float | str]:
        """Flat summary row for comparison tables and tracking."""
        return {
            "model": self.kind.value,
            "accuracy_cv": self.cv_scores.get("accuracy_cv", float("nan")),
            "accuracy_in_sample": self.in_sample.accuracy,
            "accuracy_out_of_sample": self.out_of_sample.accuracy,
            "accuracy_lower": self.out_of_sample.accuracy_lower,
            "accuracy_upper": self.out_of_sample.accuracy_upper,
            "kappa_out_of_sample": self.out_of_sample.kappa,
            "out_of_sample_error": self.out_of_sample.error_rate,
            "accuracy_gap": self.accuracy_gap,
            "overfitting_risk": self.overfitting_risk,
            "training_time_s": self.training_time_s,
        }


def evaluate_model(model: TrainedModel, data: PartitionedData) -> EvaluationResult:
    """
    Predict both subsets with a trained model and compute their metrics.

    Args:
        model: Trained classifier.
        data: Partition the model was trained on.

    Returns:
        EvaluationResult with in-sample and out-of-sample metrics.
    """
    labels = model.classes
    in_sample = compute_metrics(
        data.y_train.astype(str), model.predict(data.X_train), labels
    )
    out_of_sample = compute_metrics(
        data.y_validation.astype(str), model.predict(data.X_validation), labels
    )

    result = EvaluationResult(
        kind=model.kind,
        in_sample=in_sample,
        out_of_sample=out_of_sample,
        cv_scores=model.cv_scores,
        training_time_s=model.training_time_s,
    )

    log.info(
        "Evaluated model",
        kind=model.kind.value,
        accuracy_in_sample=f"{in_sample.accuracy:.4f}",
        accuracy_out_of_sample=f"{out_of_sample.accuracy:.4f}",
        accuracy_gap=f"{result.accuracy_gap:.3f}",
        overfitting_risk=result.overfitting_risk,
    )
    return result
