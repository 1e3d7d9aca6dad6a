"""
Evaluation layer: confusion-matrix metrics, variable importance,
comparison tables and optional MLflow tracking.
"""

from harpredict.evaluation.metrics import (
    ClassificationMetrics,
    EvaluationResult,
    compute_metrics,
    evaluate_model,
)

__all__ = [
    "ClassificationMetrics",
    "EvaluationResult",
    "compute_metrics",
    "evaluate_model",
]
