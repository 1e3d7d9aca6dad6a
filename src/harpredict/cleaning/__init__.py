"""
Feature cleaning layer.

Drops identifier/timestamp columns and coerces column types.
"""

from harpredict.cleaning.columns import (
    CleanedTables,
    FeatureSchema,
    clean_tables,
    coerce_label,
    coerce_numeric,
    drop_leading_columns,
)

__all__ = [
    "CleanedTables",
    "FeatureSchema",
    "clean_tables",
    "coerce_label",
    "coerce_numeric",
    "drop_leading_columns",
]
