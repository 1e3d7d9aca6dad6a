"""
Internal train/validation partition.

Splits the selected training table into a training subset and a held-out
validation subset, stratified by label.
"""

from dataclasses import dataclass

import pandas as pd
from sklearn.model_selection import train_test_split

from harpredict.cleaning.columns import FeatureSchema
from harpredict.utils.logging import get_logger

log = get_logger(__name__)


@dataclass
class PartitionedData:
    """
    Container for the stratified split.

    Attributes:
        X_train: Predictors of the training subset.
        X_validation: Predictors of the validation subset.
        y_train: Labels of the training subset.
        y_validation: Labels of the validation subset.
        feature_names: Predictor column names.
    """

    X_train: pd.DataFrame
    X_validation: pd.DataFrame
    y_train: pd.Series
    y_validation: pd.Series
    feature_names: list[str]

    @property
    def n_samples(self) -> int:
        """Total number of rows across both subsets."""
        return len(self.X_train) + len(self.X_validation)

    def class_counts(self) -> pd.DataFrame:
        """Per-label row counts of both subsets."""
        return pd.DataFrame(
            {
                "train": self.y_train.value_counts(sort=False),
                "validation": self.y_validation.value_counts(sort=False),
            }
        ).fillna(0).astype(int)


def partition(
    training: pd.DataFrame,
    schema: FeatureSchema,
    *,
    train_fraction: float = 0.7,
    random_state: int = 1337,
) -> PartitionedData:
    """
    Split rows into training and validation subsets, stratified by label.

    Rows are sampled without replacement; every row lands in exactly one
    subset and per-label proportions match train_fraction up to rounding.

    Args:
        training: Selected training table.
        schema: Feature schema naming predictors and label.
        train_fraction: Share of rows in the training subset.
        random_state: Seed for the split.

    Returns:
        PartitionedData with both subsets.

    Raises:
        ValueError: If a label class has fewer than two rows.
    """
    X = training[list(schema.predictors)]
    y = training[schema.label_column]

    counts = y.value_counts()
    too_small = [str(label) for label, n in counts.items() if 0 < n < 2]
    if too_small:
        msg = f"Stratified split needs at least 2 rows per class, too few for: {too_small}"
        raise ValueError(msg)

    X_train, X_validation, y_train, y_validation = train_test_split(
        X,
        y,
        train_size=train_fraction,
        random_state=random_state,
        stratify=y,
    )

    log.info(
        "Partitioned training data",
        n_train=len(X_train),
        n_validation=len(X_validation),
        train_fraction=train_fraction,
    )

    return PartitionedData(
        X_train=X_train,
        X_validation=X_validation,
        y_train=y_train,
        y_validation=y_validation,
        feature_names=list(schema.predictors),
    )
