"""
Tests for hurdle prediction combination and response-scale conversion.
"""

import numpy as np
import pandas as pd
import pytest
from scipy import special

from zihurdle.stats.hurdle import combine_hurdle_predictions, to_response_scale
from zihurdle.utils.validators import InvalidParameter, ShapeMismatch


class TestCombinePositional:
    """Array-like inputs are multiplied element-wise."""

    def test_product(self):
        result = combine_hurdle_predictions([0.8, 0.3], [5.0, 2.0])
        np.testing.assert_array_equal(result, [4.0, 0.6])

    def test_returns_float_array(self):
        result = combine_hurdle_predictions(np.array([1, 0]), np.array([3, 4]))
        assert isinstance(result, np.ndarray)
        assert result.dtype == float

    def test_length_mismatch_raises(self):
        with pytest.raises(ShapeMismatch, match="length"):
            combine_hurdle_predictions([0.5, 0.5], [1.0, 2.0, 3.0])

    def test_shape_mismatch_is_value_error(self):
        with pytest.raises(ValueError):
            combine_hurdle_predictions([0.5], [1.0, 2.0])

    def test_two_dimensional_rejected(self):
        with pytest.raises(ShapeMismatch):
            combine_hurdle_predictions(np.ones((2, 2)), np.ones((2, 2)))

    def test_missing_values_propagate(self):
        result = combine_hurdle_predictions([0.5, None, 0.2], [2.0, 3.0, np.nan])
        assert result[0] == 1.0
        assert np.isnan(result[1])
        assert np.isnan(result[2])

    def test_empty(self):
        result = combine_hurdle_predictions([], [])
        assert result.shape == (0,)

    def test_commutative(self):
        a = np.array([0.1, 0.7, 0.95])
        b = np.array([1.2, 3.4, 8.0])
        np.testing.assert_array_equal(combine_hurdle_predictions(a, b), combine_hurdle_predictions(b, a))

    def test_zero_presence_gives_zero(self):
        result = combine_hurdle_predictions([0.0, 0.0], [10.0, 2.5])
        np.testing.assert_array_equal(result, [0.0, 0.0])


class TestCombineKeyed:
    """Series inputs are joined on their observation index."""

    def test_join_ignores_order(self):
        presence = pd.Series([0.8, 0.3], index=[10, 20])
        positive = pd.Series([2.0, 5.0], index=[20, 10])

        result = combine_hurdle_predictions(presence, positive)

        assert result.name == "prediction"
        assert result.loc[10] == 4.0
        assert result.loc[20] == 0.6

    def test_missing_key_gives_nan(self):
        presence = pd.Series([0.8, 0.3, 0.5], index=["a", "b", "c"])
        positive = pd.Series([5.0, 2.0], index=["a", "b"])

        result = combine_hurdle_predictions(presence, positive)

        assert len(result) == 3
        assert result.loc["a"] == 4.0
        assert np.isnan(result.loc["c"])

    def test_union_of_keys(self):
        presence = pd.Series([0.5], index=["a"])
        positive = pd.Series([2.0], index=["b"])

        result = combine_hurdle_predictions(presence, positive)

        assert set(result.index) == {"a", "b"}
        assert result.isna().all()

    def test_duplicate_keys_raise(self):
        presence = pd.Series([0.5, 0.5], index=["a", "a"])
        positive = pd.Series([2.0], index=["a"])
        with pytest.raises(ShapeMismatch, match="duplicate"):
            combine_hurdle_predictions(presence, positive)

    def test_mixed_keyed_and_positional_raise(self):
        with pytest.raises(ShapeMismatch):
            combine_hurdle_predictions(pd.Series([0.5, 0.2]), [1.0, 2.0])

    def test_commutative(self):
        presence = pd.Series([0.1, 0.9], index=[1, 2])
        positive = pd.Series([3.0, 4.0], index=[2, 1])
        pd.testing.assert_series_equal(
            combine_hurdle_predictions(presence, positive),
            combine_hurdle_predictions(positive, presence),
        )

    def test_integer_series_cast_to_float(self):
        result = combine_hurdle_predictions(pd.Series([1, 0]), pd.Series([3, 4]))
        assert result.dtype == float


class TestToResponseScale:
    """Test to_response_scale."""

    def test_logit(self):
        eta = np.array([-1.0, 0.0, 2.0])
        np.testing.assert_allclose(to_response_scale(eta, "logit"), special.expit(eta))

    def test_log(self):
        eta = np.array([0.0, 1.0])
        np.testing.assert_allclose(to_response_scale(eta, "log"), np.exp(eta))

    def test_identity_copies(self):
        values = np.array([1.5, 2.5])
        result = to_response_scale(values, "identity")
        np.testing.assert_array_equal(result, values)
        assert result is not values

    def test_series_keeps_index(self):
        eta = pd.Series([0.0, 1.0], index=[7, 3], name="fitted")
        result = to_response_scale(eta, "log")
        assert list(result.index) == [7, 3]
        assert result.name == "fitted"

    def test_unknown_link_raises(self):
        with pytest.raises(InvalidParameter, match="Unknown link"):
            to_response_scale([0.0], "probit")

    def test_logit_overflow_raises(self):
        with pytest.raises(InvalidParameter):
            to_response_scale([0.0, 900.0], "logit")

    def test_pipeline_on_link_scale_scores(self):
        """Link-scale scores converted first give the expected hurdle value."""
        presence = to_response_scale(np.array([0.0]), "logit")
        positive = to_response_scale(np.array([np.log(4.0)]), "log")
        result = combine_hurdle_predictions(presence, positive)
        assert result[0] == pytest.approx(2.0)
