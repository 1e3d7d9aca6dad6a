"""Tests for loading the input tables."""

from pathlib import Path

import numpy as np
import pandas as pd
import pandera.pandas as pa
import pytest

from harpredict.config.settings import DataPathsConfig, PipelineConfig
from harpredict.ingestion import PredictionTableLoader, TrainingTableLoader, load_tables


class TestCsvLoaders:
    """Tests for the training and prediction loaders."""

    def test_load_training(self, fast_config: PipelineConfig) -> None:
        """Test loading the labeled table."""
        df = TrainingTableLoader(fast_config).load()
        assert len(df) == 100
        assert "classe" in df.columns
        assert df.columns[0] == "X"

    def test_na_tokens_read_as_missing(self, fast_config: PipelineConfig) -> None:
        """Test that NA and #DIV/0! become missing values on read."""
        df = TrainingTableLoader(fast_config).load()
        sparse = df["kurtosis_roll_belt"]
        assert sparse.notna().sum() == 10
        assert pd.api.types.is_numeric_dtype(sparse)

    def test_load_prediction(self, fast_config: PipelineConfig) -> None:
        """Test loading the unlabeled table."""
        df = PredictionTableLoader(fast_config).load()
        assert len(df) == 20
        assert "classe" not in df.columns
        assert list(df["problem_id"]) == list(range(1, 21))

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test that a missing file raises FileNotFoundError."""
        config = PipelineConfig(
            project="missing", data_paths=DataPathsConfig(data_root=tmp_path)
        )
        with pytest.raises(FileNotFoundError, match="pml-training.csv"):
            TrainingTableLoader(config).load()

    def test_paths_resolved_against_data_root(self, tmp_path: Path) -> None:
        """Test that each loader reads its configured file under data_root."""
        config = PipelineConfig(
            project="paths",
            data_paths=DataPathsConfig(data_root=tmp_path, prediction=Path("quiz.csv")),
        )
        assert TrainingTableLoader(config).path == tmp_path / "pml-training.csv"
        assert PredictionTableLoader(config).path == tmp_path / "quiz.csv"

    def test_label_in_prediction_rejected(
        self, fast_config: PipelineConfig, data_dir: Path, raw_prediction: pd.DataFrame
    ) -> None:
        """Test that a prediction file carrying the label fails validation."""
        raw_prediction.assign(classe="A").to_csv(data_dir / "pml-testing.csv", index=False)
        with pytest.raises(pa.errors.SchemaError):
            PredictionTableLoader(fast_config).load()

    def test_validation_can_be_skipped(
        self, fast_config: PipelineConfig, data_dir: Path, raw_prediction: pd.DataFrame
    ) -> None:
        """Test that validate=False returns the raw table."""
        raw_prediction.assign(classe="A").to_csv(data_dir / "pml-testing.csv", index=False)
        df = PredictionTableLoader(fast_config).load(validate=False)
        assert "classe" in df.columns

    def test_custom_delimiter(
        self, fast_config: PipelineConfig, data_dir: Path, raw_training: pd.DataFrame
    ) -> None:
        """Test reading a semicolon-delimited file."""
        raw_training.to_csv(data_dir / "semi.csv", index=False, sep=";", na_rep="NA")
        config = fast_config.model_copy(
            update={
                "data_paths": DataPathsConfig(
                    data_root=data_dir, training=Path("semi.csv"), delimiter=";"
                )
            }
        )
        df = TrainingTableLoader(config).load()
        assert df.shape == raw_training.shape
        np.testing.assert_allclose(df["roll_belt"], raw_training["roll_belt"])


class TestLoadTables:
    """Tests for loading both tables together."""

    def test_returns_both_tables(self, fast_config: PipelineConfig) -> None:
        """Test that training and prediction are returned in order."""
        training, prediction = load_tables(fast_config)
        assert "classe" in training.columns
        assert "problem_id" in prediction.columns

    def test_missing_prediction_fails_before_reading(
        self, fast_config: PipelineConfig, data_dir: Path
    ) -> None:
        """Test that a missing prediction file is reported by name."""
        (data_dir / "pml-testing.csv").unlink()
        with pytest.raises(FileNotFoundError, match="pml-testing.csv"):
            load_tables(fast_config)
