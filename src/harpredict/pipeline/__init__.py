"""
Pipeline orchestration.

Runs loading, cleaning, selection, training, evaluation and prediction in order.
"""

from harpredict.pipeline.run import (
    ActivityPipeline,
    PipelineResult,
    PreparedData,
    prepare_data,
    run_pipeline,
    save_prepared,
)

__all__ = [
    "ActivityPipeline",
    "PipelineResult",
    "PreparedData",
    "prepare_data",
    "run_pipeline",
    "save_prepared",
]
