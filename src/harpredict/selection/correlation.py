"""
Correlation-based predictor pruning.

Greedy elimination over the absolute correlation matrix: columns are
visited in decreasing order of mean absolute correlation, and for every pair
still above the cutoff the member with the larger mean absolute correlation
against the remaining columns is removed. When elimination stops no pair of
remaining columns exceeds the cutoff.
"""

import warnings

import numpy as np
import pandas as pd

from harpredict.utils.logging import get_logger

log = get_logger(__name__)

DEFAULT_CUTOFF = 0.95


def correlation_matrix(df: pd.DataFrame, columns: list[str]) -> pd.DataFrame:
    """
    Pearson correlation over pairwise-complete observations.

    Undefined correlations (constant columns) are reported as 0.
    """
    with warnings.catch_warnings():
        # Constant columns trigger divide-by-zero warnings inside numpy
        warnings.simplefilter("ignore", category=RuntimeWarning)
        corr = df[columns].corr(method="pearson")
    return corr.fillna(0.0)


def _row_mean(values: np.ndarray) -> float:
    """Mean of the non-missing entries, 0 when there are none."""
    present = values[~np.isnan(values)]
    return float(present.mean()) if present.size else 0.0


def find_correlated(
    corr: pd.DataFrame,
    cutoff: float = DEFAULT_CUTOFF,
) -> list[str]:
    """
    Find columns to remove so no remaining pair exceeds the cutoff.

    Args:
        corr: Square, symmetric correlation matrix with matching labels.
        cutoff: Absolute correlation threshold.

    Returns:
        Columns to remove, in the matrix's column order.

    Raises:
        ValueError: If the matrix is not square and symmetric.
    """
    names = [str(c) for c in corr.columns]
    n = len(names)
    if list(corr.index.astype(str)) != names:
        msg = "Correlation matrix rows and columns must carry the same labels"
        raise ValueError(msg)
    if n < 2:
        return []

    x = np.abs(np.nan_to_num(corr.to_numpy(dtype=float), nan=0.0))
    if not np.allclose(x, x.T):
        msg = "Correlation matrix is not symmetric"
        raise ValueError(msg)

    # Off-diagonal view; removed columns are blanked out with NaN
    off = x.copy()
    np.fill_diagonal(off, np.nan)

    order = np.argsort(-np.nanmean(off, axis=0), kind="stable")
    x = x[np.ix_(order, order)]
    off = off[np.ix_(order, order)]

    delete = np.zeros(n, dtype=bool)
    for i in range(n - 1):
        remaining = off[~np.isnan(off)]
        if not np.any(remaining > cutoff):
            break
        if delete[i]:
            continue
        for j in range(i + 1, n):
            if delete[i] or delete[j] or x[i, j] <= cutoff:
                continue
            drop = i if _row_mean(off[i]) > _row_mean(off[j]) else j
            delete[drop] = True
            off[drop, :] = np.nan
            off[:, drop] = np.nan

    removed = {names[order[k]] for k in range(n) if delete[k]}
    return [name for name in names if name in removed]


def correlated_columns(
    df: pd.DataFrame,
    columns: list[str],
    cutoff: float = DEFAULT_CUTOFF,
) -> list[str]:
    """
    Compute the correlation matrix of the given columns and prune it.

    Args:
        df: Table holding the columns.
        columns: Numeric predictor columns to consider.
        cutoff: Absolute correlation threshold.

    Returns:
        Columns to remove, in the given column order.
    """
    if len(columns) < 2:
        return []

    corr = correlation_matrix(df, columns)
    removed = find_correlated(corr, cutoff)

    log.debug(
        "Correlation scan",
        n_checked=len(columns),
        n_removed=len(removed),
        cutoff=cutoff,
    )
    return removed
