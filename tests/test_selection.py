"""Tests for near-zero-variance, missingness and correlation filters."""

import numpy as np
import pandas as pd
import pytest

from harpredict.cleaning import CleanedTables, clean_tables
from harpredict.config.settings import CleaningConfig, SelectionConfig
from harpredict.selection import (
    all_missing_columns,
    correlated_columns,
    correlation_matrix,
    find_correlated,
    near_zero_variance,
    near_zero_variance_metrics,
    select_features,
    select_from_cleaned,
)


@pytest.fixture
def cleaned(raw_training: pd.DataFrame, raw_prediction: pd.DataFrame) -> CleanedTables:
    """Cleaned synthetic tables."""
    return clean_tables(raw_training, raw_prediction, CleaningConfig())


class TestNearZeroVariance:
    """Tests for near-zero-variance detection."""

    def test_constant_column_flagged(self) -> None:
        """Test that a constant column is zero variance."""
        df = pd.DataFrame({"const": [1.0] * 20, "x": np.arange(20.0)})
        assert near_zero_variance(df) == ["const"]

    def test_dominant_value_flagged(self) -> None:
        """Test that a rare second value with few distinct values is flagged."""
        values = np.zeros(100)
        values[:2] = 1.0
        df = pd.DataFrame({"rare": values})

        metrics = near_zero_variance_metrics(df)
        assert metrics.loc["rare", "freq_ratio"] == 49.0
        assert metrics.loc["rare", "percent_unique"] == 2.0
        assert bool(metrics.loc["rare", "nzv"])
        assert not bool(metrics.loc["rare", "zero_var"])

    def test_balanced_binary_kept(self) -> None:
        """Test that a balanced binary column is not flagged despite few values."""
        df = pd.DataFrame({"binary": [0.0, 1.0] * 50})
        assert near_zero_variance(df) == []

    def test_all_missing_treated_as_constant(self) -> None:
        """Test that a column without values is zero variance."""
        df = pd.DataFrame({"empty": [np.nan] * 10, "x": np.arange(10.0)})
        assert near_zero_variance(df) == ["empty"]

    def test_freq_cut_threshold(self) -> None:
        """Test that a looser frequency cutoff keeps the column."""
        values = np.zeros(100)
        values[:2] = 1.0
        df = pd.DataFrame({"rare": values})
        assert near_zero_variance(df, freq_cut=60.0) == []

    def test_only_listed_columns_checked(self) -> None:
        """Test that columns outside the list are ignored."""
        df = pd.DataFrame({"const": [1.0] * 5, "label": ["A"] * 5})
        assert near_zero_variance(df, ["const"]) == ["const"]


class TestCorrelation:
    """Tests for correlation-based pruning."""

    def test_duplicate_pair_loses_one(self) -> None:
        """Test that one member of a perfectly correlated pair is removed."""
        rng = np.random.default_rng(0)
        a = rng.normal(size=50)
        df = pd.DataFrame({"a": a, "b": 2 * a + 1, "c": rng.normal(size=50)})

        removed = correlated_columns(df, ["a", "b", "c"], cutoff=0.9)
        assert len(removed) == 1
        assert removed[0] in {"a", "b"}

    def test_uncorrelated_kept(self) -> None:
        """Test that independent columns survive."""
        rng = np.random.default_rng(1)
        df = pd.DataFrame(rng.normal(size=(200, 4)), columns=list("wxyz"))
        assert correlated_columns(df, list("wxyz"), cutoff=0.9) == []

    def test_removes_most_connected_column(self) -> None:
        """Test that a hub correlated with two others is removed first."""
        corr = pd.DataFrame(
            [
                [1.0, 0.97, 0.2],
                [0.97, 1.0, 0.96],
                [0.2, 0.96, 1.0],
            ],
            index=list("abc"),
            columns=list("abc"),
        )
        assert find_correlated(corr, cutoff=0.95) == ["b"]

    def test_negative_correlation_counts(self) -> None:
        """Test that the absolute value of the correlation is used."""
        rng = np.random.default_rng(2)
        a = rng.normal(size=50)
        df = pd.DataFrame({"a": a, "neg": -a})
        assert len(correlated_columns(df, ["a", "neg"])) == 1

    def test_no_remaining_pair_above_cutoff(self) -> None:
        """Test the postcondition on a block of related columns."""
        rng = np.random.default_rng(3)
        base = rng.normal(size=(300, 1))
        df = pd.DataFrame(
            base + rng.normal(scale=[0.05, 0.1, 0.2, 0.4, 1.0, 2.0], size=(300, 6)),
            columns=[f"s{i}" for i in range(6)],
        )
        cutoff = 0.9
        removed = correlated_columns(df, list(df.columns), cutoff)
        kept = [c for c in df.columns if c not in removed]

        corr = correlation_matrix(df, kept).abs().to_numpy(copy=True)
        np.fill_diagonal(corr, 0.0)
        assert corr.max() <= cutoff

    def test_constant_column_has_zero_correlation(self) -> None:
        """Test that undefined correlations are reported as zero."""
        df = pd.DataFrame({"const": [1.0] * 5, "x": np.arange(5.0)})
        corr = correlation_matrix(df, ["const", "x"])
        assert corr.loc["const", "x"] == 0.0

    def test_asymmetric_matrix_rejected(self) -> None:
        """Test that a non-symmetric matrix is rejected."""
        corr = pd.DataFrame([[1.0, 0.5], [0.1, 1.0]], index=["a", "b"], columns=["a", "b"])
        with pytest.raises(ValueError, match="symmetric"):
            find_correlated(corr)

    def test_mismatched_labels_rejected(self) -> None:
        """Test that rows and columns must carry the same labels."""
        corr = pd.DataFrame([[1.0, 0.5], [0.5, 1.0]], index=["a", "b"], columns=["a", "c"])
        with pytest.raises(ValueError, match="same labels"):
            find_correlated(corr)


class TestAllMissing:
    """Tests for the prediction-table missingness filter."""

    def test_flags_only_fully_missing(self) -> None:
        """Test that a single present value keeps a column."""
        df = pd.DataFrame({"empty": [np.nan, np.nan], "partial": [np.nan, 1.0]})
        assert all_missing_columns(df, ["empty", "partial"]) == ["empty"]


class TestSelectFeatures:
    """Tests for the full selection sequence."""

    def test_expected_columns_dropped(self, cleaned: CleanedTables) -> None:
        """Test each filter removes the column it was built to catch."""
        result = select_from_cleaned(cleaned, SelectionConfig())

        assert result.dropped["near_zero_variance"] == [
            "gyros_dumbbell_const",
            "amplitude_yaw_belt",
        ]
        for table in (result.training, result.prediction):
            assert "gyros_dumbbell_const" not in table.columns
        assert result.dropped["all_missing"] == ["kurtosis_roll_belt"]
        assert len(result.dropped["correlated"]) == 1
        assert result.dropped["correlated"][0] in {"roll_belt", "total_accel_belt"}
        assert result.n_dropped == 4

    def test_same_predictors_in_both_tables(self, cleaned: CleanedTables) -> None:
        """Test that training and prediction end with identical predictors."""
        result = select_from_cleaned(cleaned, SelectionConfig())

        predictors = list(result.schema.predictors)
        assert list(result.training.columns) == [*predictors, "classe"]
        assert list(result.prediction.columns) == ["problem_id", *predictors]

    def test_idempotent(self, cleaned: CleanedTables) -> None:
        """Test that selecting again removes nothing more."""
        config = SelectionConfig()
        first = select_from_cleaned(cleaned, config)
        second = select_features(first.training, first.prediction, first.schema, config)

        assert second.n_dropped == 0
        assert second.schema.predictors == first.schema.predictors

    def test_rows_preserved(self, cleaned: CleanedTables) -> None:
        """Test that selection never drops rows."""
        result = select_from_cleaned(cleaned, SelectionConfig())
        assert len(result.training) == len(cleaned.training)
        assert len(result.prediction) == len(cleaned.prediction)

    def test_nothing_left_raises(self) -> None:
        """Test that removing every predictor is an error."""
        from harpredict.cleaning import FeatureSchema

        training = pd.DataFrame({"const": [1.0] * 4, "classe": list("ABAB")})
        prediction = pd.DataFrame({"const": [1.0, 1.0]})
        schema = FeatureSchema("classe", ("const",))
        with pytest.raises(ValueError, match="every predictor"):
            select_features(training, prediction, schema, SelectionConfig())
