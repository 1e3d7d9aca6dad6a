"""
Preprocessing pipeline construction.

Every classifier sees median-imputed predictors; kernel and linear
classifiers additionally see standardized ones. Imputation matters only when
numeric coercion turned text into missing values.
"""

from sklearn.impute import SimpleImputer
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler

from harpredict.modeling.models import ClassifierKind
from harpredict.utils.logging import get_logger

log = get_logger(__name__)


def build_preprocessor(kind: ClassifierKind) -> Pipeline:
    """
    Build the preprocessing steps for one classifier kind.

    Args:
        kind: Classifier the preprocessor feeds.

    Returns:
        Unfitted preprocessing pipeline.
    """
    steps: list[tuple[str, object]] = [
        # keep_empty_features keeps column positions stable for importances
        ("impute", SimpleImputer(strategy="median", keep_empty_features=True)),
    ]
    if kind.needs_scaling:
        steps.append(("scale", StandardScaler()))

    log.debug("Built preprocessor", kind=kind.value, steps=[name for name, _ in steps])
    return Pipeline(steps=steps)
