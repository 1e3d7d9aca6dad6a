"""
Near-zero-variance detection.

A predictor is near zero variance when it is constant, or when its most
common value dominates (frequency ratio of the most common to the second most
common value above freq_cut) while it takes few distinct values (percentage
of distinct values at or below unique_cut).
"""

import pandas as pd

from harpredict.utils.logging import get_logger

log = get_logger(__name__)

DEFAULT_FREQ_CUT = 95 / 5
DEFAULT_UNIQUE_CUT = 10.0


def _column_metrics(values: pd.Series) -> tuple[float, float, bool]:
    """Return (freq_ratio, percent_unique, zero_var) for one column."""
    counts = values.value_counts(dropna=True)
    n_distinct = len(counts)

    if n_distinct < 2:
        freq_ratio = 0.0
    else:
        top = counts.iloc[:2].to_numpy()
        freq_ratio = float(top[0] / top[1])

    percent_unique = 100.0 * n_distinct / len(values) if len(values) else 0.0
    return freq_ratio, percent_unique, n_distinct < 2


def near_zero_variance_metrics(
    df: pd.DataFrame,
    columns: list[str] | None = None,
    *,
    freq_cut: float = DEFAULT_FREQ_CUT,
    unique_cut: float = DEFAULT_UNIQUE_CUT,
) -> pd.DataFrame:
    """
    Compute near-zero-variance diagnostics per column.

    Missing values are ignored when counting value frequencies and count
    towards the row total in percent_unique. An all-missing column is
    treated as constant.

    Args:
        df: Table to inspect.
        columns: Columns to inspect (default: all).
        freq_cut: Frequency ratio cutoff.
        unique_cut: Percent-unique cutoff.

    Returns:
        DataFrame indexed by column name with freq_ratio, percent_unique,
        zero_var and nzv.
    """
    columns = list(df.columns) if columns is None else columns

    rows = []
    for col in columns:
        freq_ratio, percent_unique, zero_var = _column_metrics(df[col])
        nzv = zero_var or (freq_ratio > freq_cut and percent_unique <= unique_cut)
        rows.append(
            {
                "column": col,
                "freq_ratio": freq_ratio,
                "percent_unique": percent_unique,
                "zero_var": zero_var,
                "nzv": nzv,
            }
        )

    metrics = pd.DataFrame(
        rows, columns=["column", "freq_ratio", "percent_unique", "zero_var", "nzv"]
    )
    return metrics.set_index("column")


def near_zero_variance(
    df: pd.DataFrame,
    columns: list[str] | None = None,
    *,
    freq_cut: float = DEFAULT_FREQ_CUT,
    unique_cut: float = DEFAULT_UNIQUE_CUT,
) -> list[str]:
    """
    List the near-zero-variance columns, in table order.

    Args:
        df: Table to inspect.
        columns: Columns to inspect (default: all).
        freq_cut: Frequency ratio cutoff.
        unique_cut: Percent-unique cutoff.

    Returns:
        Names of columns to drop.
    """
    metrics = near_zero_variance_metrics(
        df, columns, freq_cut=freq_cut, unique_cut=unique_cut
    )
    flagged = [str(c) for c in metrics.index[metrics["nzv"].to_numpy(dtype=bool)]]

    log.debug(
        "Near-zero-variance scan",
        n_checked=len(metrics),
        n_flagged=len(flagged),
        n_zero_var=int(metrics["zero_var"].sum()),
    )
    return flagged
