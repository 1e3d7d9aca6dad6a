"""
Base classes and utilities for data ingestion.

Provides common functionality for all table loaders.
"""

from abc import ABC, abstractmethod
from pathlib import Path

import pandas as pd
import pandera.pandas as pa

from harpredict.config.settings import PipelineConfig
from harpredict.utils.logging import get_logger

log = get_logger(__name__)


class DataLoader(ABC):
    """
    Abstract base class for table loaders.

    All loaders inherit from this class to ensure consistent
    schema validation at system boundaries.
    """

    def __init__(self, config: PipelineConfig) -> None:
        """
        Initialize data loader.

        Args:
            config: Pipeline configuration.
        """
        self.config = config

    @property
    @abstractmethod
    def schema(self) -> pa.DataFrameSchema:
        """Schema the loaded table must satisfy."""
        ...

    @abstractmethod
    def _load_raw(self) -> pd.DataFrame:
        """Load raw data from source. Implemented by subclasses."""
        ...

    def load(self, *, validate: bool = True) -> pd.DataFrame:
        """
        Load and optionally validate data.

        Args:
            validate: Whether to validate against schema.

        Returns:
            Loaded (and optionally validated) DataFrame.

        Raises:
            FileNotFoundError: If data file not found.
            pandera.errors.SchemaError: If validation fails.
        """
        log.info("Loading data", loader=self.__class__.__name__)

        df = self._load_raw()
        log.info("Loaded raw data", rows=len(df), columns=df.shape[1])

        if validate:
            df = self.schema.validate(df)
            log.info("Schema validation passed", schema=self.schema.name)

        return df


class CsvTableLoader(DataLoader):
    """Loader for one delimited file with a header row."""

    path_attr: str = ""

    @property
    def path(self) -> Path:
        """Path of the file this loader reads."""
        return self.config.data_paths.resolve(self.path_attr)

    def _load_raw(self) -> pd.DataFrame:
        data_paths = self.config.data_paths
        return pd.read_csv(
            self.path,
            sep=data_paths.delimiter,
            na_values=data_paths.na_values,
            keep_default_na=False,
            low_memory=False,
        )
