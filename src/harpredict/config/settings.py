"""
Typed configuration models using Pydantic.

All configuration is defined here with explicit typing and validation.
Column names, thresholds and seeds never appear as literals in processing code.
"""

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CoercionPolicy(str, Enum):
    """What to do when non-numeric text meets numeric coercion."""

    COERCE = "coerce"  # Turn into missing values and log the loss
    FAIL = "fail"  # Raise ValueError naming the columns


class DataPathsConfig(BaseModel):
    """
    Input file configuration.

    Both file paths are relative to data_root. Use resolve() to get the
    path actually read.
    """

    model_config = ConfigDict(frozen=True)

    data_root: Path = Field(
        default=Path("./data"), description="Root directory for input files"
    )
    training: Path = Field(
        default=Path("pml-training.csv"), description="Labeled training table"
    )
    prediction: Path = Field(
        default=Path("pml-testing.csv"), description="Unlabeled prediction table"
    )
    na_values: list[str] = Field(
        default_factory=lambda: ["NA", "#DIV/0!", ""],
        description="Tokens read as missing values",
    )
    delimiter: str = Field(default=",", min_length=1, max_length=1)

    def resolve(self, path_attr: str) -> Path:
        """Resolve one of the configured file paths against data_root."""
        return self.data_root / getattr(self, path_attr)


class CleaningConfig(BaseModel):
    """Feature cleaning configuration."""

    model_config = ConfigDict(frozen=True)

    drop_leading: int = Field(
        default=7,
        ge=0,
        description="Number of leading identifier/timestamp columns to drop",
    )
    label_column: str = Field(default="classe", description="Categorical label")
    id_column: str | None = Field(
        default="problem_id",
        description="Identifier column present only in the prediction table",
    )
    coercion: CoercionPolicy = Field(default=CoercionPolicy.COERCE)


class SelectionConfig(BaseModel):
    """Feature selection thresholds."""

    model_config = ConfigDict(frozen=True)

    freq_cut: float = Field(
        default=95 / 5,
        gt=1.0,
        description="Most common / second most common value ratio cutoff",
    )
    unique_cut: float = Field(
        default=10.0,
        gt=0.0,
        le=100.0,
        description="Percentage of distinct values below which a column may be NZV",
    )
    correlation_cutoff: float = Field(default=0.95, gt=0.0, le=1.0)


class SplitConfig(BaseModel):
    """Internal train/validation partition configuration."""

    model_config = ConfigDict(frozen=True)

    train_fraction: float = Field(default=0.7, gt=0.0, lt=1.0)


class TrainingConfig(BaseModel):
    """Model training configuration."""

    model_config = ConfigDict(frozen=True)

    cv_folds: int = Field(default=5, ge=2, le=20)
    cv_repeats: int = Field(default=3, ge=1, le=20)
    random_state: int = Field(default=1337)
    n_jobs: int | None = Field(
        default=-1, description="Worker count for scikit-learn (-1 = all cores)"
    )
    tune: bool = Field(default=True, description="Grid-search hyperparameters")


class ModelConfig(BaseModel):
    """Classifier selection and hyperparameter configuration."""

    model_config = ConfigDict(frozen=True)

    enabled: list[str] = Field(
        default_factory=lambda: ["rf", "gbm", "svm_radial", "lda"],
        description="Classifier kinds to train, in comparison order",
    )
    hyperparameters: dict[str, dict[str, Any]] = Field(
        default_factory=dict, description="Default parameter overrides per kind"
    )
    param_grids: dict[str, dict[str, list[Any]]] = Field(
        default_factory=dict, description="Tuning grid overrides per kind"
    )

    @field_validator("enabled")
    @classmethod
    def validate_enabled(cls, v: list[str]) -> list[str]:
        """Ensure at least one classifier is enabled and none twice."""
        if not v:
            msg = "At least one model must be enabled"
            raise ValueError(msg)
        if len(set(v)) != len(v):
            msg = f"Duplicate model names in enabled list: {v}"
            raise ValueError(msg)
        return v


class MLflowConfig(BaseModel):
    """MLflow experiment tracking configuration."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = Field(default=False)
    tracking_uri: str = Field(default="sqlite:///mlflow.db")
    artifact_location: str | None = Field(
        default=None, description="Artifact root for new experiments (default: server's)"
    )
    # experiment_name is optional; derived from project if not set
    experiment_name: str | None = Field(
        default=None, description="MLflow experiment name (defaults to project name)"
    )


class OutputConfig(BaseModel):
    """
    Output paths configuration.

    Structure: ./output/{project}/answers, ./output/{project}/predictions, etc.
    """

    model_config = ConfigDict(frozen=True)

    output_root: Path = Field(
        default=Path("./output"), description="Root directory for all outputs"
    )


class PipelineConfig(BaseModel):
    """
    Complete pipeline configuration.

    The project name drives the MLflow experiment name (if not explicitly
    set) and the output directory structure ./output/{project}/.
    """

    model_config = ConfigDict(frozen=True)

    project: str = Field(description="Project identifier (e.g., 'pml-2015')")

    data_paths: DataPathsConfig = Field(default_factory=DataPathsConfig)
    cleaning: CleaningConfig = Field(default_factory=CleaningConfig)
    selection: SelectionConfig = Field(default_factory=SelectionConfig)
    split: SplitConfig = Field(default_factory=SplitConfig)
    training: TrainingConfig = Field(default_factory=TrainingConfig)
    models: ModelConfig = Field(default_factory=ModelConfig)
    mlflow: MLflowConfig = Field(default_factory=MLflowConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @field_validator("project")
    @classmethod
    def validate_project(cls, v: str) -> str:
        """Project names become directory names, so keep them path-safe."""
        if not v or "/" in v or "\\" in v:
            msg = f"Project must be a non-empty name without path separators, got: {v!r}"
            raise ValueError(msg)
        return v

    @property
    def random_state(self) -> int:
        """Convenience accessor for the shared seed."""
        return self.training.random_state

    @property
    def label_column(self) -> str:
        """Convenience accessor for the label column."""
        return self.cleaning.label_column

    @property
    def experiment_name(self) -> str:
        """MLflow experiment name (derived from project if not set)."""
        return self.mlflow.experiment_name or self.project

    # Output path helpers
    @property
    def project_dir(self) -> Path:
        """Root of everything written for this project."""
        return self.output.output_root / self.project

    @property
    def answers_dir(self) -> Path:
        """Directory for the problem_id_<i>.txt answer files."""
        return self.project_dir / "answers"

    @property
    def predictions_dir(self) -> Path:
        """Directory for per-method prediction tables."""
        return self.project_dir / "predictions"

    @property
    def reports_dir(self) -> Path:
        """Directory for model comparison tables."""
        return self.project_dir / "reports"

    @property
    def cleaned_dir(self) -> Path:
        """Directory for cleaned and selected input tables."""
        return self.project_dir / "cleaned"
