"""Unit tests for L1 soft-thresholding."""

import numpy as np
import pandas as pd
import pytest

from causal_robustness.robustness import (
    L1Regularizer,
    RegularizationConfig,
    RegularizationError,
    soft_threshold,
)


class TestSoftThreshold:
    """The shrinkage operator."""

    def test_shrinks_toward_zero(self):
        values = np.array([-2.0, -0.5, 0.0, 0.3, 1.5])
        result = soft_threshold(values, 1.0)

        np.testing.assert_allclose(result, [-1.0, 0.0, 0.0, 0.0, 0.5])

    def test_zero_threshold_is_identity(self):
        values = np.array([-2.0, 0.1, 3.0])
        np.testing.assert_allclose(soft_threshold(values, 0.0), values)


class TestL1Regularizer:
    """Centered soft-thresholding per variable."""

    def test_centers_and_restores_mean(self):
        regularizer = L1Regularizer(RegularizationConfig(l1_lambda=0.5))
        df = pd.DataFrame({"x": [1.0, 2.0, 3.0]})

        result = regularizer.regularize(df, ["x"])

        # centered [-1, 0, 1] -> [-0.5, 0, 0.5] -> + mean 2
        np.testing.assert_allclose(result["x"], [1.5, 2.0, 2.5])
        assert result["x"].mean() == pytest.approx(df["x"].mean())

    def test_large_deviations_shrink_by_lambda(self):
        regularizer = L1Regularizer(RegularizationConfig(l1_lambda=0.01))
        df = pd.DataFrame({"x": [10.0, 10.005, 9.995, 50.0]})

        result = regularizer.regularize(df, ["x"])
        mean = df["x"].mean()

        # Every value is far from the mean, so each moves by exactly lambda
        np.testing.assert_allclose(
            result["x"] - mean,
            np.sign(df["x"] - mean) * (np.abs(df["x"] - mean) - 0.01),
        )

    def test_deviations_below_lambda_zeroed(self):
        regularizer = L1Regularizer(RegularizationConfig(l1_lambda=1.0))
        df = pd.DataFrame({"x": [4.5, 5.0, 5.5]})

        result = regularizer.regularize(df, ["x"])

        np.testing.assert_allclose(result["x"], [5.0, 5.0, 5.0])

    def test_missing_values_stay_missing(self):
        regularizer = L1Regularizer(RegularizationConfig(l1_lambda=0.5))
        df = pd.DataFrame({"x": [1.0, np.nan, 3.0]})

        result = regularizer.regularize(df, ["x"])

        assert np.isnan(result["x"].iloc[1])
        np.testing.assert_allclose(result["x"].iloc[[0, 2]], [1.5, 2.5])

    def test_non_numeric_variable_unchanged(self):
        regularizer = L1Regularizer(RegularizationConfig())
        df = pd.DataFrame({"label": ["a", "b"], "x": [1.0, 2.0]})

        result = regularizer.regularize(df, ["label", "missing"])

        assert result["label"].tolist() == ["a", "b"]
        assert "missing" not in result.columns

    def test_mixed_column_keeps_non_numeric_cells(self):
        regularizer = L1Regularizer(RegularizationConfig(l1_lambda=0.5))
        df = pd.DataFrame({"x": [1.0, "n/a", 3.0]})

        result = regularizer.regularize(df, ["x"])

        assert result["x"].iloc[1] == "n/a"
        assert result["x"].iloc[0] == pytest.approx(1.5)
        assert result["x"].iloc[2] == pytest.approx(2.5)

    def test_integer_column_becomes_float(self):
        regularizer = L1Regularizer(RegularizationConfig(l1_lambda=0.5))
        df = pd.DataFrame({"x": [1, 2, 3]})

        result = regularizer.regularize(df, ["x"])

        np.testing.assert_allclose(result["x"], [1.5, 2.0, 2.5])

    def test_input_not_mutated(self):
        regularizer = L1Regularizer(RegularizationConfig(l1_lambda=0.5))
        df = pd.DataFrame({"x": [1.0, 2.0, 3.0]})

        regularizer.regularize(df, ["x"])

        assert df["x"].tolist() == [1.0, 2.0, 3.0]

    def test_failure_reports_stage(self):
        regularizer = L1Regularizer(RegularizationConfig())

        with pytest.raises(RegularizationError, match="^Regularization failed"):
            regularizer.regularize(None, ["x"])
