"""Tests for prediction output and answer files."""

from pathlib import Path

import numpy as np
import pandas as pd
import pytest
from sklearn.dummy import DummyClassifier
from sklearn.pipeline import Pipeline

from harpredict.cleaning import FeatureSchema
from harpredict.evaluation.metrics import EvaluationResult, compute_metrics
from harpredict.modeling.models import ClassifierKind
from harpredict.modeling.training import TrainedModel
from harpredict.prediction import (
    answer_filename,
    predict_all,
    save_prediction_table,
    select_best,
    write_answer_files,
)


def _evaluation(kind: ClassifierKind, n_correct: int) -> EvaluationResult:
    y_true = ["A"] * 10
    y_pred = ["A"] * n_correct + ["B"] * (10 - n_correct)
    metrics = compute_metrics(y_true, y_pred, labels=["A", "B"])
    return EvaluationResult(
        kind=kind,
        in_sample=metrics,
        out_of_sample=metrics,
        cv_scores={},
        training_time_s=0.0,
    )


def _constant_model(kind: ClassifierKind, label: str, features: list[str]) -> TrainedModel:
    """A fitted model that always predicts the same label."""
    X = pd.DataFrame(np.zeros((2, len(features))), columns=features)
    pipeline = Pipeline([("model", DummyClassifier(strategy="constant", constant=label))])
    pipeline.fit(X, [label, "Z"])
    return TrainedModel(
        kind=kind, pipeline=pipeline, feature_names=features, classes=[label, "Z"]
    )


class TestAnswerFiles:
    """Tests for write_answer_files()."""

    def test_one_file_per_label(self, tmp_path: Path) -> None:
        """Test 20 labels give problem_id_1..20, each one label and a newline."""
        labels = list("ABCDE") * 4
        paths = write_answer_files(labels, tmp_path)

        assert [p.name for p in paths] == [f"problem_id_{i}.txt" for i in range(1, 21)]
        for path, label in zip(paths, labels, strict=True):
            assert path.read_bytes() == f"{label}\n".encode()

    def test_creates_directory(self, tmp_path: Path) -> None:
        """Test that a missing output directory is created."""
        paths = write_answer_files(["A"], tmp_path / "nested" / "answers")
        assert paths[0].exists()

    def test_stale_files_removed(self, tmp_path: Path) -> None:
        """Test that answer files from a longer earlier run are removed."""
        write_answer_files(["A"] * 5, tmp_path)
        (tmp_path / "notes.txt").write_text("keep", encoding="utf-8")
        write_answer_files(["B", "C"], tmp_path)

        names = sorted(p.name for p in tmp_path.glob("problem_id_*.txt"))
        assert names == ["problem_id_1.txt", "problem_id_2.txt"]
        assert (tmp_path / "notes.txt").exists()

    def test_series_input(self, tmp_path: Path) -> None:
        """Test that row order, not the index, numbers the files."""
        labels = pd.Series(["C", "A"], index=[17, 3])
        paths = write_answer_files(labels, tmp_path)
        assert paths[0].read_text(encoding="utf-8") == "C\n"

    def test_filename(self) -> None:
        """Test the 1-indexed file name."""
        assert answer_filename(7) == "problem_id_7.txt"


class TestSelectBest:
    """Tests for choosing the best classifier."""

    def test_highest_out_of_sample_accuracy(self) -> None:
        """Test that the most accurate model wins."""
        evaluations = {
            ClassifierKind.RANDOM_FOREST: _evaluation(ClassifierKind.RANDOM_FOREST, 8),
            ClassifierKind.LDA: _evaluation(ClassifierKind.LDA, 9),
        }
        assert select_best(evaluations) is ClassifierKind.LDA

    def test_tie_goes_to_first_kind(self) -> None:
        """Test that ties are broken by comparison order."""
        evaluations = {
            ClassifierKind.LDA: _evaluation(ClassifierKind.LDA, 9),
            ClassifierKind.GRADIENT_BOOSTING: _evaluation(ClassifierKind.GRADIENT_BOOSTING, 9),
        }
        assert select_best(evaluations) is ClassifierKind.GRADIENT_BOOSTING

    def test_empty_raises(self) -> None:
        """Test that there must be something to choose from."""
        with pytest.raises(ValueError, match="No evaluated models"):
            select_best({})


class TestPredictAll:
    """Tests for the per-method result table."""

    @pytest.fixture
    def prediction(self) -> pd.DataFrame:
        """Prediction table with identifier and two predictors."""
        return pd.DataFrame(
            {"problem_id": [1, 2, 3], "x1": [0.1, 0.2, 0.3], "x2": [1.0, 2.0, 3.0]},
            index=[10, 11, 12],
        )

    def test_columns_and_agreement(self, prediction: pd.DataFrame) -> None:
        """Test one column per method plus best and agreement."""
        schema = FeatureSchema("classe", ("x1", "x2"), "problem_id")
        features = ["x1", "x2"]
        models = {
            kind: _constant_model(kind, label, features)
            for kind, label in [
                (ClassifierKind.RANDOM_FOREST, "A"),
                (ClassifierKind.GRADIENT_BOOSTING, "A"),
                (ClassifierKind.LDA, "B"),
            ]
        }

        results = predict_all(models, prediction, schema, ClassifierKind.LDA)

        assert list(results.columns) == ["problem_id", "rf", "gbm", "lda", "best", "agreement"]
        assert list(results.index) == [0, 1, 2]
        assert (results["best"] == "B").all()
        assert results["agreement"].tolist() == pytest.approx([2 / 3] * 3)

    def test_without_identifier(self, prediction: pd.DataFrame) -> None:
        """Test that the identifier column is optional."""
        schema = FeatureSchema("classe", ("x1", "x2"))
        models = {ClassifierKind.LDA: _constant_model(ClassifierKind.LDA, "C", ["x1", "x2"])}

        results = predict_all(models, prediction, schema, ClassifierKind.LDA)
        assert list(results.columns) == ["lda", "best", "agreement"]
        assert results["agreement"].tolist() == [1.0, 1.0, 1.0]

    def test_untrained_best_raises(self, prediction: pd.DataFrame) -> None:
        """Test that best must be one of the trained models."""
        schema = FeatureSchema("classe", ("x1", "x2"))
        models = {ClassifierKind.LDA: _constant_model(ClassifierKind.LDA, "C", ["x1", "x2"])}
        with pytest.raises(KeyError, match="rf"):
            predict_all(models, prediction, schema, ClassifierKind.RANDOM_FOREST)

    def test_save_table(self, tmp_path: Path) -> None:
        """Test that the result table round-trips through CSV."""
        results = pd.DataFrame({"problem_id": [1], "lda": ["A"], "best": ["A"], "agreement": [1.0]})
        path = save_prediction_table(results, tmp_path / "predictions" / "predictions.csv")
        assert pd.read_csv(path).columns.tolist() == list(results.columns)
