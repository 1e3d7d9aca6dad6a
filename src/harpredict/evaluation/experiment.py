"""
MLflow experiment tracking.

Records the parameters and accuracy figures of a comparison run. Fitted
models are never logged; only metrics, parameters and CSV artifacts.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

import mlflow

from harpredict.config.settings import PipelineConfig
from harpredict.evaluation.metrics import EvaluationResult
from harpredict.modeling.models import ClassifierKind
from harpredict.utils.logging import get_logger

log = get_logger(__name__)


@dataclass
class ExperimentConfig:
    """
    Configuration for an MLflow experiment.

    Attributes:
        name: Experiment name.
        question: Single question this experiment answers.
        experiment_type: Category of experiment.
    """

    name: str
    question: str
    experiment_type: str
    tags: dict[str, str] = field(default_factory=dict)


class Experiment:
    """
    Base class for MLflow experiments.

    Each experiment answers a single clear question.
    """

    def __init__(
        self,
        config: PipelineConfig,
        experiment_config: ExperimentConfig,
    ) -> None:
        """
        Initialize experiment.

        Args:
            config: Pipeline configuration.
            experiment_config: Experiment-specific configuration.
        """
        self.config = config
        self.experiment_config = experiment_config
        self._run_id: str | None = None

    def setup(self) -> None:
        """Point MLflow at the configured tracking store and experiment."""
        mlflow_config = self.config.mlflow
        mlflow.set_tracking_uri(mlflow_config.tracking_uri)

        name = self.experiment_config.name
        if mlflow.get_experiment_by_name(name) is None:
            mlflow.create_experiment(name, artifact_location=mlflow_config.artifact_location)
        mlflow.set_experiment(name)

        log.info(
            "Experiment setup",
            name=self.experiment_config.name,
            tracking_uri=self.config.mlflow.tracking_uri,
        )

    def start_run(self, run_name: str | None = None) -> str:
        """
        Start an MLflow run.

        Args:
            run_name: Optional run name.

        Returns:
            Run ID.
        """
        self.setup()

        tags = {
            "experiment_type": self.experiment_config.experiment_type,
            "project": self.config.project,
            "question": self.experiment_config.question,
            **self.experiment_config.tags,
        }

        run = mlflow.start_run(run_name=run_name, tags=tags)
        self._run_id = run.info.run_id

        log.info("Started MLflow run", run_id=self._run_id)
        return self._run_id

    def end_run(self) -> None:
        """End the current MLflow run."""
        mlflow.end_run()
        log.info("Ended MLflow run", run_id=self._run_id)

    def log_params(self, params: dict[str, Any]) -> None:
        """Log parameters."""
        mlflow.log_params(params)

    def log_metrics(self, metrics: dict[str, float]) -> None:
        """Log metrics."""
        mlflow.log_metrics(metrics)

    def log_artifact(self, path: Path, artifact_path: str | None = None) -> None:
        """Log an artifact."""
        mlflow.log_artifact(str(path), artifact_path)


class ModelComparisonExperiment(Experiment):
    """
    Experiment comparing the classifier kinds.

    Question: Which classifier achieves the best out-of-sample accuracy?
    """

    def __init__(self, config: PipelineConfig) -> None:
        """Initialize model comparison experiment."""
        exp_config = ExperimentConfig(
            name=config.experiment_name,
            question="Which classifier achieves the best out-of-sample accuracy?",
            experiment_type="model_comparison",
        )
        super().__init__(config, exp_config)

    def record(
        self,
        evaluations: dict[ClassifierKind, EvaluationResult],
        best: ClassifierKind,
        *,
        n_features: int,
        artifacts: list[Path] | None = None,
    ) -> str:
        """
        Log one comparison run.

        Args:
            evaluations: Evaluation result per classifier kind.
            best: Kind whose predictions were written.
            n_features: Number of predictors after selection.
            artifacts: Files to attach (comparison tables).

        Returns:
            Run ID.
        """
        run_id = self.start_run(f"compare-{datetime.now():%Y%m%d-%H%M}")
        try:
            training = self.config.training
            self.log_params(
                {
                    "models": ",".join(k.value for k in evaluations),
                    "best_model": best.value,
                    "n_features": n_features,
                    "train_fraction": self.config.split.train_fraction,
                    "cv_folds": training.cv_folds,
                    "cv_repeats": training.cv_repeats,
                    "random_state": training.random_state,
                    "correlation_cutoff": self.config.selection.correlation_cutoff,
                }
            )

            for kind, result in evaluations.items():
                self.log_metrics(
                    {
                        f"{kind.value}_accuracy_cv": result.cv_scores.get(
                            "accuracy_cv", 0.0
                        ),
                        f"{kind.value}_accuracy_in_sample": result.in_sample.accuracy,
                        f"{kind.value}_accuracy_out_of_sample": result.out_of_sample.accuracy,
                        f"{kind.value}_kappa_out_of_sample": result.out_of_sample.kappa,
                    }
                )

            for path in artifacts or []:
                self.log_artifact(path, artifact_path="reports")
        finally:
            self.end_run()

        return run_id
