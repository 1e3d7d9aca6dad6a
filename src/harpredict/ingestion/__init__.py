"""
Data ingestion layer.

Loads the input CSV files and validates them at the system boundary.
"""

from harpredict.ingestion.activity import (
    PredictionTableLoader,
    TrainingTableLoader,
    load_tables,
)

__all__ = ["PredictionTableLoader", "TrainingTableLoader", "load_tables"]
