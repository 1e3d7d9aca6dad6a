"""
Prediction layer: per-method predictions and answer files.
"""

from harpredict.prediction.writer import (
    answer_filename,
    predict_all,
    save_prediction_table,
    select_best,
    write_answer_files,
)

__all__ = [
    "answer_filename",
    "predict_all",
    "save_prediction_table",
    "select_best",
    "write_answer_files",
]
