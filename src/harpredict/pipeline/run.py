"""
End-to-end pipeline implementation.

Load -> clean -> select -> partition -> train/evaluate -> predict -> write.
Each stage takes the previous stage's tables and returns new ones; any
failure aborts the run before anything is written.
"""

from dataclasses import dataclass, field
from pathlib import Path

import pandas as pd

from harpredict.cleaning.columns import CleanedTables, clean_tables
from harpredict.config.settings import PipelineConfig
from harpredict.evaluation.experiment import ModelComparisonExperiment
from harpredict.evaluation.importance import (
    FeatureImportance,
    extract_feature_importance,
)
from harpredict.evaluation.metrics import EvaluationResult, evaluate_model
from harpredict.evaluation.report import save_comparison
from harpredict.ingestion.activity import load_tables
from harpredict.modeling.data import PartitionedData, partition
from harpredict.modeling.models import ClassifierKind
from harpredict.modeling.training import ModelTrainer, TrainedModel
from harpredict.prediction.writer import (
    predict_all,
    save_prediction_table,
    select_best,
    write_answer_files,
)
from harpredict.selection.pipeline import SelectionResult, select_from_cleaned
from harpredict.utils.logging import get_logger, run_context

log = get_logger(__name__)


@dataclass
class PreparedData:
    """
    Tables after loading, cleaning and feature selection.

    Attributes:
        raw_shapes: (rows, columns) of the raw training and prediction tables.
        cleaned: Tables after cleaning.
        selection: Tables after feature selection.
    """

    raw_shapes: dict[str, tuple[int, int]]
    cleaned: CleanedTables
    selection: SelectionResult


@dataclass
class PipelineResult:
    """
    Result of a full pipeline run.

    Attributes:
        prepared: Loaded, cleaned and selected tables.
        data: Stratified training/validation partition.
        models: Trained classifiers.
        evaluations: In- and out-of-sample metrics per classifier.
        best: Classifier whose labels were written.
        predictions: Per-method result table for the prediction table.
        importance: Variable importance of the best classifier.
        answer_paths: Written problem_id_<i>.txt files.
        report_paths: Written comparison and prediction tables.
        run_id: MLflow run ID (if tracking was enabled and succeeded).
    """

    prepared: PreparedData
    data: PartitionedData
    models: dict[ClassifierKind, TrainedModel]
    evaluations: dict[ClassifierKind, EvaluationResult]
    best: ClassifierKind
    predictions: pd.DataFrame
    importance: FeatureImportance | None = None
    answer_paths: list[Path] = field(default_factory=list)
    report_paths: list[Path] = field(default_factory=list)
    run_id: str | None = None


class ActivityPipeline:
    """
    Pipeline for activity quality classification.

    Compares the configured classifiers on a stratified hold-out split and
    writes the best one's predictions for the unlabeled table.
    """

    def __init__(
        self,
        config: PipelineConfig,
        *,
        kinds: list[str | ClassifierKind] | None = None,
        tune: bool | None = None,
        track: bool | None = None,
    ) -> None:
        """
        Initialize pipeline.

        Args:
            config: Pipeline configuration.
            kinds: Classifier kinds to compare (default: from config).
            tune: Whether to grid-search hyperparameters (default: from config).
            track: Whether to log to MLflow (default: from config).
        """
        self.config = config
        self.kinds = kinds
        self.tune = tune
        self.track = config.mlflow.enabled if track is None else track

    def prepare(self) -> PreparedData:
        """Load both tables, clean them and select features."""
        training, prediction = load_tables(self.config)
        raw_shapes = {"training": training.shape, "prediction": prediction.shape}

        cleaned = clean_tables(training, prediction, self.config.cleaning)
        selection = select_from_cleaned(cleaned, self.config.selection)
        return PreparedData(raw_shapes=raw_shapes, cleaned=cleaned, selection=selection)

    def run(self) -> PipelineResult:
        """
        Run the full pipeline.

        Outputs go to the project directory under the configured output root.

        Returns:
            PipelineResult with models, metrics and written paths.
        """
        project_dir = self.config.project_dir

        with run_context(self.config):
            log.info("Starting pipeline", output_dir=str(project_dir))

            prepared = self.prepare()
            selection = prepared.selection

            data = partition(
                selection.training,
                selection.schema,
                train_fraction=self.config.split.train_fraction,
                random_state=self.config.random_state,
            )

            trainer = ModelTrainer(self.config)
            models = trainer.train(
                data.X_train,
                data.y_train,
                self.kinds,
                tune_hyperparameters=self.tune,
            )
            evaluations = {kind: evaluate_model(model, data) for kind, model in models.items()}

            best = select_best(evaluations)
            predictions = predict_all(
                models, selection.prediction, selection.schema, best
            )
            importance = extract_feature_importance(
                models[best],
                data.X_validation,
                data.y_validation,
                random_state=self.config.random_state,
            )

            # Nothing is written until every model has been fitted and evaluated
            answer_paths = write_answer_files(predictions["best"], self.config.answers_dir)
            report_paths = save_comparison(evaluations, self.config.reports_dir)
            report_paths.append(
                save_prediction_table(
                    predictions, self.config.predictions_dir / "predictions.csv"
                )
            )

            run_id = None
            if self.track:
                run_id = self._track(
                    evaluations, best, len(selection.schema.predictors), report_paths
                )

            log.info("Pipeline complete", best=best.value, n_answers=len(answer_paths))

        return PipelineResult(
            prepared=prepared,
            data=data,
            models=models,
            evaluations=evaluations,
            best=best,
            predictions=predictions,
            importance=importance,
            answer_paths=answer_paths,
            report_paths=report_paths,
            run_id=run_id,
        )

    def _track(
        self,
        evaluations: dict[ClassifierKind, EvaluationResult],
        best: ClassifierKind,
        n_features: int,
        artifacts: list[Path],
    ) -> str | None:
        """Log the run to MLflow; tracking problems never fail the pipeline."""
        try:
            experiment = ModelComparisonExperiment(self.config)
            return experiment.record(
                evaluations, best, n_features=n_features, artifacts=artifacts
            )
        except Exception as e:
            log.warning("MLflow logging failed", error=str(e))
            return None


def prepare_data(config: PipelineConfig) -> PreparedData:
    """Convenience function: load, clean and select only."""
    return ActivityPipeline(config).prepare()


def save_prepared(prepared: PreparedData, output_dir: Path) -> list[Path]:
    """
    Save the selected tables as CSV.

    Returns:
        Paths of training.csv and prediction.csv.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    selection = prepared.selection

    paths = []
    for name, df in (("training", selection.training), ("prediction", selection.prediction)):
        path = output_dir / f"{name}.csv"
        df.to_csv(path, index=False)
        paths.append(path)

    log.info(
        "Saved prepared tables",
        output_dir=str(output_dir),
        n_predictors=len(selection.schema.predictors),
    )
    return paths


def run_pipeline(
    config: PipelineConfig,
    *,
    kinds: list[str | ClassifierKind] | None = None,
    tune: bool | None = None,
    track: bool | None = None,
) -> PipelineResult:
    """
    Convenience function to run the full pipeline.

    Args:
        config: Pipeline configuration.
        kinds: Classifier kinds to compare (default: from config).
        tune: Whether to grid-search hyperparameters (default: from config).
        track: Whether to log to MLflow (default: from config).

    Returns:
        PipelineResult.
    """
    pipeline = ActivityPipeline(config, kinds=kinds, tune=tune, track=track)
    return pipeline.run()
