"""
Configuration management with typed Pydantic models.

Provides the pipeline's column, threshold and seed parameters and
environment-aware configuration loading.
"""

from harpredict.config.loader import load_config
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

__all__ = [
    "CleaningConfig",
    "CoercionPolicy",
    "DataPathsConfig",
    "MLflowConfig",
    "ModelConfig",
    "OutputConfig",
    "PipelineConfig",
    "SelectionConfig",
    "SplitConfig",
    "TrainingConfig",
    "load_config",
]
