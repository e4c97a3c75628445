"""
Integration tests for model fitting on simulated data.

These tests fit statsmodels models to the walkthrough datasets and check
that the generating parameters are recovered.
"""

import numpy as np
import pandas as pd
import pytest

from tests.config import (
    N_GROUPS,
    N_OBS,
    PRESENCE_SLOPE_TOLERANCE,
    PZ_TOLERANCE,
    SEED,
    SLOPE_TOLERANCE,
)
from zihurdle.stats.data_generation import (
    add_presence_indicator,
    generate_hurdle_data,
    generate_zero_inflated_data,
)
from zihurdle.stats.distributions import ProbabilityInterval
from zihurdle.stats.fitting import (
    FitSummary,
    compare_aic,
    fit_negative_binomial,
    fit_poisson,
    fit_presence_model,
    fit_truncated_poisson,
    fit_zero_inflated_poisson,
    hurdle_aic,
    predict_presence_probability,
    predict_truncated_mean,
    zero_inflation_probability,
)
from zihurdle.stats.hurdle import combine_hurdle_predictions


@pytest.fixture(scope="module")
def zi_table():
    return generate_zero_inflated_data(sample_size=N_OBS, n_groups=N_GROUPS, pz=0.3, rng=SEED).table


@pytest.fixture(scope="module")
def zi_fits(zi_table):
    return {
        "poisson": fit_poisson(zi_table),
        "negative_binomial": fit_negative_binomial(zi_table),
        "zero_inflated_poisson": fit_zero_inflated_poisson(zi_table),
    }


@pytest.fixture(scope="module")
def hurdle_table():
    return add_presence_indicator(generate_hurdle_data(sample_size=N_OBS, n_groups=N_GROUPS, rng=SEED).table)


@pytest.fixture(scope="module")
def hurdle_fits(hurdle_table):
    return {
        "presence": fit_presence_model(hurdle_table),
        "truncated_poisson": fit_truncated_poisson(hurdle_table),
    }


class TestZeroInflationFits:
    """Poisson, negative binomial and ZIP on zero-inflated data."""

    def test_summaries(self, zi_fits):
        for label, fit in zi_fits.items():
            assert isinstance(fit, FitSummary)
            assert fit.name == label
            assert fit.n_obs == N_OBS
            assert np.isfinite(fit.aic)
            assert list(fit.params.index) == list(fit.bse.index)

    def test_zip_beats_poisson(self, zi_fits):
        assert zi_fits["zero_inflated_poisson"].aic < zi_fits["poisson"].aic

    def test_zip_has_extra_parameter(self, zi_fits):
        assert zi_fits["zero_inflated_poisson"].n_params == zi_fits["poisson"].n_params + 1

    def test_negative_binomial_dispersion_reported(self, zi_fits):
        assert "alpha" in zi_fits["negative_binomial"].params.index

    def test_zip_slope_recovered(self, zi_fits):
        assert zi_fits["zero_inflated_poisson"].coefficient("x") == pytest.approx(1.0, abs=SLOPE_TOLERANCE)

    def test_pz_recovered(self, zi_fits):
        interval = zero_inflation_probability(zi_fits["zero_inflated_poisson"])
        assert isinstance(interval, ProbabilityInterval)
        assert interval.estimate == pytest.approx(0.3, abs=PZ_TOLERANCE)
        assert interval.lower < interval.estimate < interval.upper

    def test_pz_interval_width_follows_z(self, zi_fits):
        fit = zi_fits["zero_inflated_poisson"]
        narrow = zero_inflation_probability(fit, z=1.0)
        wide = zero_inflation_probability(fit)
        assert wide.lower < narrow.lower
        assert wide.upper > narrow.upper

    def test_pz_needs_inflation_term(self, zi_fits):
        with pytest.raises(KeyError, match="inflate_const"):
            zero_inflation_probability(zi_fits["poisson"])

    def test_conf_int(self, zi_fits):
        ci = zi_fits["poisson"].conf_int()
        assert list(ci.columns) == ["lower", "upper"]
        assert (ci["lower"] <= ci["upper"]).all()

    def test_custom_formula(self, zi_table):
        fit = fit_poisson(zi_table, "response ~ x")
        assert fit.n_params == 2


class TestHurdleFits:
    """Presence GLM and zero-truncated Poisson on hurdle data."""

    def test_presence_slope_recovered(self, hurdle_fits):
        assert hurdle_fits["presence"].coefficient("x") == pytest.approx(-2.0, abs=PRESENCE_SLOPE_TOLERANCE)

    def test_presence_uses_all_rows(self, hurdle_fits):
        assert hurdle_fits["presence"].n_obs == N_OBS

    def test_presence_adds_indicator(self):
        table = generate_hurdle_data(sample_size=300, n_groups=5, rng=SEED).table
        assert "present" not in table.columns
        fit = fit_presence_model(table)
        assert fit.n_obs == 300

    def test_truncated_uses_positive_rows(self, hurdle_table, hurdle_fits):
        assert hurdle_fits["truncated_poisson"].n_obs == int((hurdle_table["response"] > 0).sum())

    def test_truncated_group_without_positives_raises(self, hurdle_table):
        table = hurdle_table.copy()
        table.loc[table["group"] == "g01", "response"] = 0

        with pytest.raises(np.linalg.LinAlgError, match="g01"):
            fit_truncated_poisson(table)

    def test_truncated_group_without_positives_pooled_formula(self, hurdle_table):
        table = hurdle_table.copy()
        table.loc[table["group"] == "g01", "response"] = 0

        fit = fit_truncated_poisson(table, "response ~ x")
        assert fit.n_obs == int((table["response"] > 0).sum())

    def test_truncated_slope_recovered(self, hurdle_fits):
        assert hurdle_fits["truncated_poisson"].coefficient("x") == pytest.approx(1.0, abs=SLOPE_TOLERANCE)

    def test_hurdle_aic_is_sum(self, hurdle_fits):
        total = hurdle_aic(hurdle_fits["presence"], hurdle_fits["truncated_poisson"])
        assert total == pytest.approx(hurdle_fits["presence"].aic + hurdle_fits["truncated_poisson"].aic)


class TestHurdlePrediction:
    """Response-scale predictions joined by observation id."""

    def test_presence_probabilities(self, hurdle_fits, hurdle_table):
        presence = predict_presence_probability(hurdle_fits["presence"], hurdle_table)
        assert presence.index.equals(hurdle_table.index)
        assert ((presence > 0) & (presence < 1)).all()
        # Logistic GLM with intercept reproduces the observed presence rate
        assert presence.mean() == pytest.approx(hurdle_table["present"].mean(), abs=1e-4)

    def test_truncated_mean_covers_zero_rows(self, hurdle_fits, hurdle_table):
        positive = predict_truncated_mean(hurdle_fits["truncated_poisson"], hurdle_table)
        assert len(positive) == len(hurdle_table)
        assert (positive > 1).all()

    def test_combined_mean_matches_response(self, hurdle_fits, hurdle_table):
        presence = predict_presence_probability(hurdle_fits["presence"], hurdle_table)
        positive = predict_truncated_mean(hurdle_fits["truncated_poisson"], hurdle_table)

        prediction = combine_hurdle_predictions(presence, positive)

        assert prediction.notna().all()
        assert prediction.mean() == pytest.approx(hurdle_table["response"].mean(), rel=0.1)

    def test_join_survives_reordering(self, hurdle_fits, hurdle_table):
        presence = predict_presence_probability(hurdle_fits["presence"], hurdle_table)
        positive = predict_truncated_mean(hurdle_fits["truncated_poisson"], hurdle_table)
        shuffled = positive.sample(frac=1.0, random_state=SEED)

        pd.testing.assert_series_equal(
            combine_hurdle_predictions(presence, shuffled),
            combine_hurdle_predictions(presence, positive),
        )


class TestCompareAIC:
    """Test the AIC ranking table."""

    def test_sorted_with_delta(self, zi_fits):
        table = compare_aic(zi_fits)
        assert list(table.columns) == ["aic", "delta_aic", "n_params", "converged"]
        assert table["aic"].is_monotonic_increasing
        assert table["delta_aic"].iloc[0] == 0.0
        assert table.index[0] != "poisson"

    def test_iterable_uses_fit_names(self, zi_fits):
        table = compare_aic(list(zi_fits.values()))
        assert set(table.index) == set(zi_fits)

    def test_extra_rows(self, zi_fits):
        table = compare_aic({"poisson": zi_fits["poisson"]}, extra={"reference": 0.0})
        assert table.index[0] == "reference"
        assert np.isnan(table.loc["reference", "n_params"])

    def test_empty_raises(self):
        with pytest.raises(ValueError):
            compare_aic({})
