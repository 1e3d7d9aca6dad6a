"""
Classifier registry and factory.

The set of classifier kinds is closed: each ClassifierKind maps to one
scikit-learn estimator with default parameters and a small tuning grid.
Grids mirror the usual defaults of the R caret package for the same methods:
three mtry values from sqrt(p) to p for random forests, 50-150 trees of
depth 1-3 for boosting, C in 0.25-1 for the radial SVM, no tuning for LDA.
"""

from enum import Enum
from typing import Any

from sklearn.base import BaseEstimator
from sklearn.discriminant_analysis import LinearDiscriminantAnalysis
from sklearn.ensemble import GradientBoostingClassifier, RandomForestClassifier
from sklearn.svm import SVC

from harpredict.utils.logging import get_logger

log = get_logger(__name__)


class ClassifierKind(str, Enum):
    """Supported classifier families, in comparison order."""

    RANDOM_FOREST = "rf"
    GRADIENT_BOOSTING = "gbm"
    SVM_RADIAL = "svm_radial"
    LDA = "lda"

    @property
    def label(self) -> str:
        """Human-readable name."""
        return _LABELS[self]

    @property
    def needs_scaling(self) -> bool:
        """Whether predictors should be standardized before fitting."""
        return self in {ClassifierKind.SVM_RADIAL, ClassifierKind.LDA}

    @property
    def accepts_random_state(self) -> bool:
        """Whether the estimator takes a random_state parameter."""
        return self is not ClassifierKind.LDA


_LABELS: dict[ClassifierKind, str] = {
    ClassifierKind.RANDOM_FOREST: "Random Forest",
    ClassifierKind.GRADIENT_BOOSTING: "Gradient Boosting",
    ClassifierKind.SVM_RADIAL: "SVM (radial kernel)",
    ClassifierKind.LDA: "Linear Discriminant Analysis",
}


# Model configurations: kind -> (class, default_kwargs)
MODEL_REGISTRY: dict[ClassifierKind, tuple[type[BaseEstimator], dict[str, Any]]] = {
    ClassifierKind.RANDOM_FOREST: (
        RandomForestClassifier,
        {"n_estimators": 500, "n_jobs": -1},
    ),
    ClassifierKind.GRADIENT_BOOSTING: (
        GradientBoostingClassifier,
        {"n_estimators": 150, "max_depth": 3, "learning_rate": 0.1},
    ),
    ClassifierKind.SVM_RADIAL: (
        SVC,
        {"kernel": "rbf", "C": 1.0, "gamma": "scale"},
    ),
    ClassifierKind.LDA: (LinearDiscriminantAnalysis, {"solver": "svd"}),
}


# Hyperparameter grids for tuning; keys address the "model" pipeline step
PARAM_GRIDS: dict[ClassifierKind, dict[str, list[Any]]] = {
    ClassifierKind.RANDOM_FOREST: {
        "model__max_features": ["sqrt", 0.5, 1.0],
    },
    ClassifierKind.GRADIENT_BOOSTING: {
        "model__n_estimators": [50, 100, 150],
        "model__max_depth": [1, 2, 3],
        "model__learning_rate": [0.1],
    },
    ClassifierKind.SVM_RADIAL: {
        "model__C": [0.25, 0.5, 1.0],
    },
}


def parse_kind(name: str | ClassifierKind) -> ClassifierKind:
    """
    Resolve a classifier kind from its value or enum member.

    Raises:
        KeyError: If the name is not a known kind.
    """
    if isinstance(name, ClassifierKind):
        return name
    try:
        return ClassifierKind(name)
    except ValueError:
        available = ", ".join(k.value for k in ClassifierKind)
        msg = f"Unknown model '{name}'. Available: {available}"
        raise KeyError(msg) from None


def get_model(
    kind: str | ClassifierKind,
    *,
    random_state: int | None = None,
    **kwargs: Any,
) -> BaseEstimator:
    """
    Get an unfitted classifier instance.

    Args:
        kind: Classifier kind or its value.
        random_state: Seed passed to estimators that accept one.
        **kwargs: Override default parameters.

    Returns:
        Estimator instance.

    Raises:
        KeyError: If the kind is unknown.
    """
    kind = parse_kind(kind)
    model_class, default_kwargs = MODEL_REGISTRY[kind]
    params = {**default_kwargs, **kwargs}
    if random_state is not None and kind.accepts_random_state:
        params.setdefault("random_state", random_state)

    log.debug("Creating model", kind=kind.value, params=params)
    return model_class(**params)


def get_param_grid(
    kind: str | ClassifierKind,
    overrides: dict[str, dict[str, list[Any]]] | None = None,
) -> dict[str, list[Any]] | None:
    """
    Get the tuning grid for a classifier.

    Override grids may name parameters with or without the "model__" prefix.

    Args:
        kind: Classifier kind.
        overrides: Grids from configuration keyed by kind value.

    Returns:
        Parameter grid, or None if the kind is not tuned.
    """
    kind = parse_kind(kind)
    if overrides and kind.value in overrides:
        grid = overrides[kind.value]
        return {
            key if key.startswith("model__") else f"model__{key}": list(values)
            for key, values in grid.items()
        } or None
    return PARAM_GRIDS.get(kind)


def list_models() -> list[ClassifierKind]:
    """List all classifier kinds in comparison order."""
    return list(ClassifierKind)
