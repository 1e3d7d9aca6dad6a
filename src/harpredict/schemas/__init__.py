"""
Schema definitions using Pandera for data validation.

Input tables are validated when loaded, the prediction result table before
it is written.
"""

from harpredict.schemas.activity import (
    PredictionOutputSchema,
    prediction_table_schema,
    training_table_schema,
)

__all__ = [
    "PredictionOutputSchema",
    "prediction_table_schema",
    "training_table_schema",
]
