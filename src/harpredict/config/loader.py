"""
Configuration loading utilities.

Supports environment variable interpolation and config inheritance.
Minimal configs only need: project
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml

from harpredict.config.settings import (
    CleaningConfig,
    CoercionPolicy,
    DataPathsConfig,
    MLflowConfig,
    ModelConfig,
    OutputConfig,
    PipelineConfig,
    SelectionConfig,
    SplitConfig,
    TrainingConfig,
)


def _interpolate_env_vars(value: str) -> str:
    """
    Interpolate environment variables in string values.

    Supports ${VAR} and ${VAR:default} syntax.
    """
    pattern = r"\$\{([^}:]+)(?::([^}]*))?\}"

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        default = match.group(2)
        return os.environ.get(var_name, default if default is not None else "")

    return re.sub(pattern, replacer, value)


def _process_config_values(obj: Any) -> Any:
    """Recursively process config values for env var interpolation."""
    if isinstance(obj, str):
        return _interpolate_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _process_config_values(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_process_config_values(item) for item in obj]
    return obj


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _section(merged: dict[str, Any], name: str) -> dict[str, Any]:
    """Return a config section, treating an empty YAML key as an empty mapping."""
    section = merged.get(name) or {}
    if not isinstance(section, dict):
        msg = f"Config section '{name}' must be a mapping, got {type(section).__name__}"
        raise ValueError(msg)
    return section


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file and process environment variables."""
    with path.open(encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return _process_config_values(data) if data else {}


def load_config(
    config_path: Path,
    base_path: Path | None = None,
) -> PipelineConfig:
    """
    Load pipeline configuration from YAML file(s).

    Minimal config requires only:
        - project: str

    Every other section falls back to the PML defaults (7 leading columns,
    label 'classe', 0.95 correlation cutoff, 70/30 split, repeated 5-fold CV).

    Args:
        config_path: Path to the main configuration file.
        base_path: Optional path to base configuration for inheritance.

    Returns:
        Fully validated PipelineConfig instance.
    """
    if base_path is not None:
        base_data = load_yaml(base_path)
    else:
        # Try to find base.yaml in same directory
        potential_base = config_path.parent / "base.yaml"
        if potential_base.exists() and potential_base.resolve() != config_path.resolve():
            base_data = load_yaml(potential_base)
        else:
            base_data = {}

    main_data = load_yaml(config_path)
    merged = _deep_merge(base_data, main_data)

    project = merged.get("project")
    if not project:
        msg = "Config must specify 'project' name"
        raise ValueError(msg)

    # Data paths
    data_data = _section(merged, "data")
    data_paths = DataPathsConfig(
        data_root=Path(data_data.get("root", "./data")),
        training=Path(data_data.get("training", "pml-training.csv")),
        prediction=Path(data_data.get("prediction", "pml-testing.csv")),
        na_values=data_data.get("na_values", ["NA", "#DIV/0!", ""]),
        delimiter=data_data.get("delimiter", ","),
    )

    # Cleaning (id_column may be explicitly null)
    cleaning_data = _section(merged, "cleaning")
    cleaning = CleaningConfig(
        drop_leading=cleaning_data.get("drop_leading", 7),
        label_column=cleaning_data.get("label_column", "classe"),
        id_column=cleaning_data.get("id_column", "problem_id"),
        coercion=CoercionPolicy(cleaning_data.get("coercion", "coerce")),
    )

    selection_data = _section(merged, "selection")
    selection = SelectionConfig(
        freq_cut=selection_data.get("freq_cut", 95 / 5),
        unique_cut=selection_data.get("unique_cut", 10.0),
        correlation_cutoff=selection_data.get("correlation_cutoff", 0.95),
    )

    split_data = _section(merged, "split")
    split = SplitConfig(
        train_fraction=split_data.get("train_fraction", 0.7),
    )

    training_data = _section(merged, "training")
    training = TrainingConfig(
        cv_folds=training_data.get("cv_folds", 5),
        cv_repeats=training_data.get("cv_repeats", 3),
        random_state=training_data.get("random_state", 1337),
        n_jobs=training_data.get("n_jobs", -1),
        tune=training_data.get("tune", True),
    )

    models_data = _section(merged, "models")
    models = ModelConfig(
        enabled=models_data.get("enabled", ["rf", "gbm", "svm_radial", "lda"]),
        hyperparameters=models_data.get("hyperparameters", {}),
        param_grids=models_data.get("param_grids", {}),
    )

    # MLflow (experiment_name derived from project if not set)
    mlflow_data = _section(merged, "mlflow")
    mlflow = MLflowConfig(
        enabled=mlflow_data.get("enabled", False),
        tracking_uri=mlflow_data.get("tracking_uri", "sqlite:///mlflow.db"),
        artifact_location=mlflow_data.get("artifact_location"),
        experiment_name=mlflow_data.get("experiment_name"),
    )

    output_data = _section(merged, "output")
    output = OutputConfig(
        output_root=Path(output_data.get("root", "./output")),
    )

    return PipelineConfig(
        project=project,
        data_paths=data_paths,
        cleaning=cleaning,
        selection=selection,
        split=split,
        training=training,
        models=models,
        mlflow=mlflow,
        output=output,
    )
