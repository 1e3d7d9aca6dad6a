"""
Prediction for the unlabeled table and answer file output.

Each trained classifier predicts every row of the prediction table; the
labels of the best classifier are written one file per row as
problem_id_<i>.txt (1-indexed), holding only the label token.
"""

from pathlib import Path

import numpy as np
import pandas as pd

from harpredict.cleaning.columns import FeatureSchema
from harpredict.evaluation.metrics import EvaluationResult
from harpredict.modeling.models import ClassifierKind
from harpredict.modeling.training import TrainedModel
from harpredict.schemas.activity import PredictionOutputSchema
from harpredict.utils.logging import get_logger

log = get_logger(__name__)

ANSWER_PREFIX = "problem_id_"


def answer_filename(row_number: int) -> str:
    """File name for the 1-indexed prediction row."""
    return f"{ANSWER_PREFIX}{row_number}.txt"


def select_best(evaluations: dict[ClassifierKind, EvaluationResult]) -> ClassifierKind:
    """
    Pick the classifier with the highest out-of-sample accuracy.

    Ties go to the kind listed first in ClassifierKind.

    Raises:
        ValueError: If there are no evaluations.
    """
    best: ClassifierKind | None = None
    best_accuracy = -np.inf
    for kind in ClassifierKind:
        if kind not in evaluations:
            continue
        accuracy = evaluations[kind].out_of_sample.accuracy
        if accuracy > best_accuracy:
            best, best_accuracy = kind, accuracy

    if best is None:
        msg = "No evaluated models to choose from"
        raise ValueError(msg)

    log.info("Selected best model", kind=best.value, accuracy=f"{best_accuracy:.4f}")
    return best


def _majority_share(labels: pd.DataFrame) -> pd.Series:
    """Per row, the share of columns holding the most common label."""
    n_methods = labels.shape[1]
    if labels.empty:
        return pd.Series(dtype=float, index=labels.index)
    counts = labels.apply(lambda row: row.value_counts().iloc[0], axis=1)
    return (counts / n_methods).astype(float)


def predict_all(
    models: dict[ClassifierKind, TrainedModel],
    prediction: pd.DataFrame,
    schema: FeatureSchema,
    best: ClassifierKind,
) -> pd.DataFrame:
    """
    Predict the prediction table with every trained classifier.

    Args:
        models: Trained classifiers.
        prediction: Selected prediction table.
        schema: Feature schema of the table.
        best: Classifier whose labels become the 'best' column.

    Returns:
        Result table, one row per prediction row: the identifier column (if
        any), one label column per classifier, 'best' and 'agreement'.

    Raises:
        KeyError: If best is not among the trained models.
    """
    if best not in models:
        msg = f"Best model '{best.value}' was not trained"
        raise KeyError(msg)

    results = pd.DataFrame(index=prediction.index)
    if schema.id_column is not None:
        results[schema.id_column] = prediction[schema.id_column]

    method_columns = []
    for kind in ClassifierKind:
        if kind not in models:
            continue
        results[kind.value] = models[kind].predict(prediction)
        method_columns.append(kind.value)

    results["best"] = results[best.value]
    results["agreement"] = _majority_share(results[method_columns])
    results = results.reset_index(drop=True)

    log.info(
        "Predicted prediction table",
        n_rows=len(results),
        methods=method_columns,
        mean_agreement=f"{results['agreement'].mean():.3f}" if len(results) else "n/a",
    )
    return PredictionOutputSchema.validate(results)


def write_answer_files(labels: list[str] | pd.Series, output_dir: Path) -> list[Path]:
    """
    Write one answer file per label.

    File i (1-indexed) holds the i-th label followed by a single newline:
    no header, no quoting, no row names. Answer files left from an earlier
    run in the same directory are removed first.

    Args:
        labels: Predicted labels in prediction-table row order.
        output_dir: Directory to write into.

    Returns:
        Written paths in row order.
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    stale = sorted(output_dir.glob(f"{ANSWER_PREFIX}*.txt"))
    for path in stale:
        path.unlink()
    if stale:
        log.debug("Removed stale answer files", n_files=len(stale))

    paths = []
    for row_number, label in enumerate(labels, start=1):
        path = output_dir / answer_filename(row_number)
        path.write_text(f"{label}\n", encoding="utf-8", newline="\n")
        paths.append(path)

    log.info("Wrote answer files", n_files=len(paths), output_dir=str(output_dir))
    return paths


def save_prediction_table(results: pd.DataFrame, path: Path) -> Path:
    """Save the per-method result table as CSV."""
    path.parent.mkdir(parents=True, exist_ok=True)
    results.to_csv(path, index=False, float_format="%.6f")
    log.info("Saved prediction table", path=str(path), n_rows=len(results))
    return path
