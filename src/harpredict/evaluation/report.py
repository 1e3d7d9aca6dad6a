"""
Model comparison tables.

Collects per-classifier evaluation results into one table and writes it
alongside the confusion matrices.
"""

from pathlib import Path

import pandas as pd

from harpredict.evaluation.metrics import EvaluationResult
from harpredict.modeling.models import ClassifierKind
from harpredict.utils.logging import get_logger

log = get_logger(__name__)


def comparison_table(
    evaluations: dict[ClassifierKind, EvaluationResult],
) -> pd.DataFrame:
    """
    Build the model comparison table.

    Rows follow ClassifierKind order, so ties in accuracy always list the
    same model first.

    Args:
        evaluations: Evaluation result per classifier kind.

    Returns:
        DataFrame indexed by model with accuracy, gap and timing columns.
    """
    rows = [
        evaluations[kind].to_dict() for kind in ClassifierKind if kind in evaluations
    ]
    if not rows:
        return pd.DataFrame()
    return pd.DataFrame(rows).set_index("model")


def save_comparison(
    evaluations: dict[ClassifierKind, EvaluationResult],
    output_dir: Path,
) -> list[Path]:
    """
    Save the comparison table and one out-of-sample confusion matrix per model.

    Args:
        evaluations: Evaluation result per classifier kind.
        output_dir: Directory to write into.

    Returns:
        Paths of the written CSV files, comparison table first.
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    table_path = output_dir / "model_comparison.csv"
    comparison_table(evaluations).to_csv(table_path, float_format="%.6f")
    paths = [table_path]

    for kind, result in evaluations.items():
        matrix_path = output_dir / f"confusion_{kind.value}.csv"
        result.out_of_sample.confusion.to_csv(matrix_path)
        paths.append(matrix_path)

    log.info("Saved model comparison", path=str(table_path), n_models=len(evaluations))
    return paths
