"""
Feature selection pipeline.

Applies three filters in sequence. Each drop set is derived from one table
and applied to both, so training and prediction always end with the same
predictor columns:

1. near-zero-variance columns (derived from training)
2. columns entirely missing in the prediction table
3. highly correlated columns (derived from training)
"""

from dataclasses import dataclass, field

import pandas as pd

from harpredict.cleaning.columns import CleanedTables, FeatureSchema
from harpredict.config.settings import SelectionConfig
from harpredict.selection.correlation import correlated_columns
from harpredict.selection.near_zero_variance import near_zero_variance
from harpredict.utils.logging import get_logger

log = get_logger(__name__)

# Filter names in application order
FILTERS = ("near_zero_variance", "all_missing", "correlated")


@dataclass(frozen=True)
class SelectionResult:
    """
    Tables after feature selection.

    Attributes:
        training: Training table with surviving predictors and the label.
        prediction: Prediction table with identifier and surviving predictors.
        schema: Feature schema of both tables.
        dropped: Removed columns per filter name.
    """

    training: pd.DataFrame
    prediction: pd.DataFrame
    schema: FeatureSchema
    dropped: dict[str, list[str]] = field(default_factory=dict)

    @property
    def n_dropped(self) -> int:
        """Total number of removed predictors."""
        return sum(len(cols) for cols in self.dropped.values())


def all_missing_columns(df: pd.DataFrame, columns: list[str]) -> list[str]:
    """List the given columns whose every value is missing."""
    return [col for col in columns if df[col].isna().all()]


def _apply(
    training: pd.DataFrame,
    prediction: pd.DataFrame,
    schema: FeatureSchema,
    drop: list[str],
) -> tuple[pd.DataFrame, pd.DataFrame, FeatureSchema]:
    """Remove the same predictors from both tables."""
    schema = schema.without(drop)
    return (
        training[schema.training_columns].copy(),
        prediction[schema.prediction_columns].copy(),
        schema,
    )


def select_features(
    training: pd.DataFrame,
    prediction: pd.DataFrame,
    schema: FeatureSchema,
    config: SelectionConfig,
) -> SelectionResult:
    """
    Run the three selection filters.

    Args:
        training: Cleaned training table.
        prediction: Cleaned prediction table.
        schema: Feature schema of both tables.
        config: Selection thresholds.

    Returns:
        SelectionResult with both tables pruned identically.
    """
    dropped: dict[str, list[str]] = {}

    nzv = near_zero_variance(
        training,
        list(schema.predictors),
        freq_cut=config.freq_cut,
        unique_cut=config.unique_cut,
    )
    training, prediction, schema = _apply(training, prediction, schema, nzv)
    dropped["near_zero_variance"] = nzv

    missing = all_missing_columns(prediction, list(schema.predictors))
    training, prediction, schema = _apply(training, prediction, schema, missing)
    dropped["all_missing"] = missing

    correlated = correlated_columns(
        training, list(schema.predictors), config.correlation_cutoff
    )
    training, prediction, schema = _apply(training, prediction, schema, correlated)
    dropped["correlated"] = correlated

    log.info(
        "Selected features",
        n_predictors=len(schema.predictors),
        **{f"dropped_{name}": len(cols) for name, cols in dropped.items()},
    )

    if not schema.predictors:
        msg = "Feature selection removed every predictor"
        raise ValueError(msg)

    return SelectionResult(
        training=training,
        prediction=prediction,
        schema=schema,
        dropped=dropped,
    )


def select_from_cleaned(
    cleaned: CleanedTables,
    config: SelectionConfig,
) -> SelectionResult:
    """Convenience wrapper taking the cleaner's output directly."""
    return select_features(
        cleaned.training, cleaned.prediction, cleaned.schema, config
    )
