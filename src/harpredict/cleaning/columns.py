"""
Column pruning and type coercion for the raw activity tables.

Every function returns a new DataFrame; inputs are never modified. The
surviving column layout is carried alongside the tables as a FeatureSchema.
"""

from dataclasses import dataclass, replace

import pandas as pd
from pandas.api.types import is_numeric_dtype

from harpredict.config.settings import CleaningConfig, CoercionPolicy
from harpredict.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class FeatureSchema:
    """
    Column layout shared by the training and prediction tables.

    Attributes:
        label_column: Categorical label, present only in the training table.
        predictors: Ordered predictor columns, identical in both tables.
        id_column: Identifier present only in the prediction table (optional).
    """

    label_column: str
    predictors: tuple[str, ...]
    id_column: str | None = None

    @property
    def training_columns(self) -> list[str]:
        """Column order of the training table."""
        return [*self.predictors, self.label_column]

    @property
    def prediction_columns(self) -> list[str]:
        """Column order of the prediction table."""
        if self.id_column is None:
            return list(self.predictors)
        return [self.id_column, *self.predictors]

    def without(self, columns: list[str] | set[str]) -> "FeatureSchema":
        """Return a schema with the given predictors removed."""
        dropped = set(columns)
        return replace(
            self,
            predictors=tuple(c for c in self.predictors if c not in dropped),
        )


@dataclass(frozen=True)
class CleanedTables:
    """Training and prediction tables after cleaning."""

    training: pd.DataFrame
    prediction: pd.DataFrame
    schema: FeatureSchema


def drop_leading_columns(df: pd.DataFrame, n: int) -> pd.DataFrame:
    """
    Drop the first n columns by position.

    Args:
        df: Table to prune.
        n: Number of leading columns to drop.

    Returns:
        New DataFrame without the leading columns.

    Raises:
        ValueError: If the table has fewer than n columns.
    """
    if n < 0:
        msg = f"Number of leading columns must be >= 0, got {n}"
        raise ValueError(msg)
    if n > df.shape[1]:
        msg = f"Cannot drop {n} leading columns from a table with {df.shape[1]}"
        raise ValueError(msg)

    dropped = list(df.columns[:n])
    if dropped:
        log.debug("Dropping leading columns", columns=dropped)
    return df.iloc[:, n:].copy()


def coerce_label(df: pd.DataFrame, label_column: str) -> pd.DataFrame:
    """
    Convert the label column to a categorical with sorted categories.

    Raises:
        ValueError: If the label column is missing or has missing values.
    """
    if label_column not in df.columns:
        msg = f"Label column '{label_column}' not found"
        raise ValueError(msg)

    label = df[label_column]
    if label.isna().any():
        msg = f"Label column '{label_column}' has {int(label.isna().sum())} missing values"
        raise ValueError(msg)

    as_text = label.astype(str)
    categories = sorted(as_text.unique())

    result = df.copy()
    result[label_column] = pd.Categorical(as_text, categories=categories)
    log.debug("Coerced label", column=label_column, classes=categories)
    return result


def coerce_numeric(
    df: pd.DataFrame,
    exclude: list[str] | None = None,
    policy: CoercionPolicy = CoercionPolicy.COERCE,
) -> pd.DataFrame:
    """
    Convert every non-excluded column to a numeric dtype.

    Text that does not parse as a number becomes a missing value. Under
    CoercionPolicy.COERCE each affected column is logged with the number of
    values lost; under CoercionPolicy.FAIL a ValueError names them instead.
    Values that were already missing are not counted.

    Args:
        df: Table to convert.
        exclude: Columns left untouched (label, identifier).
        policy: Behavior when non-numeric text is found.

    Returns:
        New DataFrame with numeric columns.
    """
    skip = set(exclude or [])
    result = df.copy()
    lost: dict[str, int] = {}

    for col in result.columns:
        if col in skip or is_numeric_dtype(result[col]):
            continue

        original = result[col]
        converted = pd.to_numeric(original, errors="coerce")
        n_lost = int((converted.isna() & original.notna()).sum())
        if n_lost:
            lost[col] = n_lost
        result[col] = converted

    if lost and policy == CoercionPolicy.FAIL:
        msg = f"Non-numeric values found in columns: {lost}"
        raise ValueError(msg)

    for col, n_lost in lost.items():
        log.warning("Non-numeric values coerced to missing", column=col, n_lost=n_lost)

    return result


def clean_tables(
    training: pd.DataFrame,
    prediction: pd.DataFrame,
    config: CleaningConfig,
) -> CleanedTables:
    """
    Clean both tables identically.

    Drops the leading identifier/timestamp columns, coerces the label to
    categorical and every predictor to numeric. Predictors are the training
    columns other than the label; the prediction table is reordered to match
    them, keeping its identifier column in front.

    Args:
        training: Raw labeled table.
        prediction: Raw unlabeled table.
        config: Cleaning configuration.

    Returns:
        CleanedTables with identical predictor columns in both tables.

    Raises:
        ValueError: If the label is missing from training or predictors are
            missing from prediction.
    """
    training = drop_leading_columns(training, config.drop_leading)
    prediction = drop_leading_columns(prediction, config.drop_leading)

    label = config.label_column
    if label not in training.columns:
        msg = f"Label column '{label}' not found in training table"
        raise ValueError(msg)

    predictors = [c for c in training.columns if c != label]
    if not predictors:
        msg = "No predictor columns left after dropping leading columns"
        raise ValueError(msg)

    missing = [c for c in predictors if c not in prediction.columns]
    if missing:
        msg = f"Prediction table is missing predictor columns: {missing}"
        raise ValueError(msg)

    id_column = config.id_column if config.id_column in prediction.columns else None
    schema = FeatureSchema(
        label_column=label,
        predictors=tuple(predictors),
        id_column=id_column,
    )

    extra = [c for c in prediction.columns if c not in schema.prediction_columns]
    if extra:
        log.warning("Ignoring prediction-only columns", columns=extra)

    training = coerce_label(training[schema.training_columns], label)
    training = coerce_numeric(training, exclude=[label], policy=config.coercion)
    prediction = coerce_numeric(
        prediction[schema.prediction_columns],
        exclude=[id_column] if id_column else None,
        policy=config.coercion,
    )

    log.info(
        "Cleaned tables",
        n_predictors=len(schema.predictors),
        training_rows=len(training),
        prediction_rows=len(prediction),
        classes=list(training[label].cat.categories),
    )
    return CleanedTables(training=training, prediction=prediction, schema=schema)
