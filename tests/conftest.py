"""Pytest configuration and shared fixtures."""

from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from harpredict.config.settings import (
    DataPathsConfig,
    ModelConfig,
    OutputConfig,
    PipelineConfig,
    TrainingConfig,
)

CLASSES = ["A", "B", "C", "D"]
ROWS_PER_CLASS = 25
N_PREDICTION_ROWS = 20

# Columns the selection filters are expected to remove
CONSTANT_COLUMN = "gyros_dumbbell_const"
RARE_COLUMN = "amplitude_yaw_belt"
SPARSE_COLUMN = "kurtosis_roll_belt"
DUPLICATE_COLUMN = "total_accel_belt"


def _leading(n_rows: int, rng: np.random.Generator) -> dict[str, list]:
    users = ["adelmo", "carlitos", "charles", "eurico", "jeremy", "pedro"]
    return {
        "X": list(range(1, n_rows + 1)),
        "user_name": [users[i % len(users)] for i in range(n_rows)],
        "raw_timestamp_part_1": list(1322489729 + np.arange(n_rows)),
        "raw_timestamp_part_2": list(rng.integers(0, 999999, n_rows)),
        "cvtd_timestamp": ["05/12/2011 11:23"] * n_rows,
        "new_window": ["no"] * n_rows,
        "num_window": list(rng.integers(1, 864, n_rows)),
    }


def _sensors(class_index: np.ndarray, rng: np.random.Generator) -> dict[str, np.ndarray]:
    """Predictors whose means shift with the class, plus filter bait."""
    n_rows = len(class_index)
    roll_belt = 3.0 * class_index + rng.normal(0, 0.5, n_rows)
    rare = np.zeros(n_rows)
    rare[:2] = 1.0
    return {
        "roll_belt": roll_belt,
        "pitch_belt": -2.0 * class_index + rng.normal(0, 1.5, n_rows),
        "yaw_belt": rng.normal(0, 1.0, n_rows),
        "accel_arm_x": 5.0 * (class_index % 2) + rng.normal(0, 1.0, n_rows),
        "magnet_dumbbell_z": 1.5 * class_index**2 + rng.normal(0, 2.0, n_rows),
        DUPLICATE_COLUMN: 2.0 * roll_belt + rng.normal(0, 0.01, n_rows),
        CONSTANT_COLUMN: np.zeros(n_rows),
        RARE_COLUMN: rare,
    }


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def raw_training() -> pd.DataFrame:
    """Labeled table laid out like pml-training.csv: 4 balanced classes, 100 rows."""
    rng = np.random.default_rng(42)
    class_index = np.repeat(np.arange(len(CLASSES)), ROWS_PER_CLASS)
    n_rows = len(class_index)

    df = pd.DataFrame(_leading(n_rows, rng))
    for name, values in _sensors(class_index, rng).items():
        df[name] = values

    # Summary-statistic column: mostly missing, with spreadsheet error tokens
    sparse = np.full(n_rows, None, dtype=object)
    sparse[::10] = [f"{v:.4f}" for v in rng.normal(0, 1, len(sparse[::10]))]
    sparse[5::10] = "#DIV/0!"
    df.insert(9, SPARSE_COLUMN, sparse)

    df["classe"] = [CLASSES[i] for i in class_index]
    return df


@pytest.fixture
def raw_prediction() -> pd.DataFrame:
    """Unlabeled table laid out like pml-testing.csv, with problem_id last."""
    rng = np.random.default_rng(7)
    class_index = np.arange(N_PREDICTION_ROWS) % len(CLASSES)

    df = pd.DataFrame(_leading(N_PREDICTION_ROWS, rng))
    for name, values in _sensors(class_index, rng).items():
        df[name] = values
    df.insert(9, SPARSE_COLUMN, np.nan)
    df["problem_id"] = list(range(1, N_PREDICTION_ROWS + 1))
    return df


@pytest.fixture
def data_dir(tmp_path: Path, raw_training: pd.DataFrame, raw_prediction: pd.DataFrame) -> Path:
    """Directory holding both tables as CSV, missing values written as NA."""
    root = tmp_path / "data"
    root.mkdir()
    raw_training.to_csv(root / "pml-training.csv", index=False, na_rep="NA")
    raw_prediction.to_csv(root / "pml-testing.csv", index=False, na_rep="NA")
    return root


@pytest.fixture
def fast_config(tmp_path: Path, data_dir: Path) -> PipelineConfig:
    """Configuration with small models and a single CV repeat."""
    return PipelineConfig(
        project="test-pml",
        data_paths=DataPathsConfig(data_root=data_dir),
        training=TrainingConfig(cv_folds=3, cv_repeats=1, n_jobs=1, tune=False),
        models=ModelConfig(
            enabled=["rf", "lda"],
            hyperparameters={"rf": {"n_estimators": 25, "n_jobs": 1}},
        ),
        output=OutputConfig(output_root=tmp_path / "output"),
    )
