"""
Variable importance ranking for fitted classifiers.
"""

from dataclasses import dataclass

import numpy as np
import pandas as pd
from sklearn.inspection import permutation_importance

from harpredict.modeling.training import TrainedModel
from harpredict.utils.logging import get_logger

log = get_logger(__name__)


@dataclass
class FeatureImportance:
    """Feature importance data for a model."""

    feature_names: list[str]
    importances: np.ndarray
    importance_type: str  # 'gini_importance', 'coefficient_magnitude', 'permutation'

    def ranked(self, top_n: int | None = None) -> pd.DataFrame:
        """
        Features sorted by decreasing importance.

        Returns:
            DataFrame with feature, importance and share of the total.
        """
        total = float(np.sum(self.importances))
        frame = pd.DataFrame(
            {
                "feature": self.feature_names,
                "importance": self.importances,
                "share": self.importances / total if total > 0 else 0.0,
            }
        )
        frame = frame.sort_values(
            "importance", ascending=False, kind="stable"
        ).reset_index(drop=True)
        return frame.head(top_n) if top_n is not None else frame


def extract_feature_importance(
    model: TrainedModel,
    X: pd.DataFrame | None = None,
    y: pd.Series | None = None,
    *,
    n_repeats: int = 5,
    random_state: int = 1337,
) -> FeatureImportance | None:
    """
    Extract feature importances from a trained classifier.

    Handles different model types:
    - Tree ensembles (random forest, gradient boosting): feature_importances_
    - Linear discriminants: mean absolute coefficient across classes
    - Other models (kernel SVM): permutation importance on X, y

    Args:
        model: Trained classifier.
        X: Predictors for permutation importance (held-out data preferred).
        y: Labels for permutation importance.
        n_repeats: Permutation rounds per feature.
        random_state: Seed for the permutations.

    Returns:
        FeatureImportance, or None when permutation importance is needed but
        no data was given.
    """
    inner_model = model.pipeline.named_steps["model"]
    feature_names = list(model.feature_names)

    if hasattr(inner_model, "feature_importances_"):
        importances = np.asarray(inner_model.feature_importances_, dtype=float)
        importance_type = "gini_importance"

    elif hasattr(inner_model, "coef_"):
        coef = np.atleast_2d(inner_model.coef_)
        importances = np.abs(coef).mean(axis=0)
        importance_type = "coefficient_magnitude"

    elif X is not None and y is not None:
        result = permutation_importance(
            model.pipeline,
            X[feature_names],
            y.astype(str),
            scoring="accuracy",
            n_repeats=n_repeats,
            random_state=random_state,
        )
        # Negative means are noise around zero
        importances = np.clip(result.importances_mean, 0.0, None)
        importance_type = "permutation"

    else:
        log.debug("No importance available without data", kind=model.kind.value)
        return None

    if len(importances) != len(feature_names):
        log.warning(
            "Feature importance length mismatch",
            n_importances=len(importances),
            n_features=len(feature_names),
        )
        feature_names = [f"feature_{i}" for i in range(len(importances))]

    return FeatureImportance(
        feature_names=feature_names,
        importances=importances,
        importance_type=importance_type,
    )
