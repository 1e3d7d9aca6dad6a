"""
Feature selection layer.

Near-zero-variance, all-missing and correlation filters, derived once and
applied identically to training and prediction tables.
"""

from harpredict.selection.correlation import (
    correlated_columns,
    correlation_matrix,
    find_correlated,
)
from harpredict.selection.near_zero_variance import (
    near_zero_variance,
    near_zero_variance_metrics,
)
from harpredict.selection.pipeline import (
    SelectionResult,
    all_missing_columns,
    select_features,
    select_from_cleaned,
)

__all__ = [
    "SelectionResult",
    "all_missing_columns",
    "correlated_columns",
    "correlation_matrix",
    "find_correlated",
    "near_zero_variance",
    "near_zero_variance_metrics",
    "select_features",
    "select_from_cleaned",
]
