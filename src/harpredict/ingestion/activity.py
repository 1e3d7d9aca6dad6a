"""
Loaders for the PML training and prediction tables.
"""

import pandas as pd
import pandera.pandas as pa

from harpredict.config.settings import PipelineConfig
from harpredict.ingestion.base import CsvTableLoader
from harpredict.schemas.activity import (
    prediction_table_schema,
    training_table_schema,
)


class TrainingTableLoader(CsvTableLoader):
    """Loads the labeled table (pml-training.csv)."""

    path_attr = "training"

    @property
    def schema(self) -> pa.DataFrameSchema:
        cleaning = self.config.cleaning
        return training_table_schema(cleaning.label_column, cleaning.drop_leading)


class PredictionTableLoader(CsvTableLoader):
    """Loads the unlabeled table (pml-testing.csv)."""

    path_attr = "prediction"

    @property
    def schema(self) -> pa.DataFrameSchema:
        cleaning = self.config.cleaning
        return prediction_table_schema(cleaning.label_column, cleaning.drop_leading)


def load_tables(
    config: PipelineConfig,
    *,
    validate: bool = True,
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """
    Load both input tables.

    Both files are checked for existence before either is parsed, so a
    missing prediction file fails fast instead of after a large read.

    Returns:
        Tuple of (training, prediction).
    """
    training_loader = TrainingTableLoader(config)
    prediction_loader = PredictionTableLoader(config)

    for loader in (training_loader, prediction_loader):
        if not loader.path.exists():
            msg = f"Input file not found: {loader.path}"
            raise FileNotFoundError(msg)

    training = training_loader.load(validate=validate)
    prediction = prediction_loader.load(validate=validate)
    return training, prediction
