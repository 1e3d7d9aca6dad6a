"""
Pandera schemas for the PML activity tables.

The label and identifier column names come from configuration, so the input
schemas are built per run instead of being declared as static models.
"""

import pandas as pd
import pandera.pandas as pa
from pandera.typing import Series


def _has_rows(df: pd.DataFrame) -> bool:
    return len(df) > 0


def _min_columns(n: int) -> pa.Check:
    return pa.Check(
        lambda df: df.shape[1] >= n,
        name="min_columns",
        error=f"table must have at least {n} columns",
    )


def training_table_schema(
    label_column: str,
    drop_leading: int,
) -> pa.DataFrameSchema:
    """
    Schema for the raw labeled training table.

    Args:
        label_column: Name of the categorical label column.
        drop_leading: Number of leading columns the cleaner will drop; the
            table needs at least that many plus the label and one predictor.

    Returns:
        DataFrameSchema validating the table as read from disk.
    """
    return pa.DataFrameSchema(
        columns={
            label_column: pa.Column(
                nullable=False,
                description="Activity quality class",
            ),
        },
        checks=[
            pa.Check(_has_rows, name="has_rows", error="training table is empty"),
            _min_columns(drop_leading + 2),
        ],
        name="TrainingTableSchema",
        strict=False,  # Allow all sensor columns
    )


def prediction_table_schema(
    label_column: str,
    drop_leading: int,
) -> pa.DataFrameSchema:
    """
    Schema for the raw unlabeled prediction table.

    The label must be absent: a prediction table carrying it would leak
    the answer into the feature set.
    """
    return pa.DataFrameSchema(
        checks=[
            pa.Check(_has_rows, name="has_rows", error="prediction table is empty"),
            _min_columns(drop_leading + 1),
            pa.Check(
                lambda df: label_column not in df.columns,
                name="no_label",
                error=f"prediction table must not contain label '{label_column}'",
            ),
        ],
        name="PredictionTableSchema",
        strict=False,
    )


class PredictionOutputSchema(pa.DataFrameModel):
    """
    Schema for the per-method prediction result table.

    One column per classifier kind holds predicted labels; those columns are
    not declared here because the enabled kinds come from configuration.
    """

    best: Series[str] = pa.Field(
        nullable=False,
        description="Label predicted by the best-performing method",
    )
    agreement: Series[float] = pa.Field(
        ge=0.0,
        le=1.0,
        description="Share of methods agreeing with the majority label",
    )

    class Config:
        """Schema configuration."""

        name = "PredictionOutputSchema"
        strict = False  # Allow per-method and identifier columns
        coerce = True
