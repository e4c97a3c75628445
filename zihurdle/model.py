"""
Zero-inflation and hurdle studies.

This module provides the two walkthrough classes: :class:`ZeroInflationStudy`
(simulate zero-inflated counts, fit Poisson / negative binomial / ZIP and
compare AIC) and :class:`HurdleStudy` (simulate hurdle counts, fit the
presence and truncated-count parts and combine their predictions).
"""

import warnings
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

import numpy as np
import pandas as pd

from .progress import ProgressCallback, ReplicateTracker
from .stats.data_generation import (
    DEFAULT_HURDLE_CONFIG,
    DEFAULT_ZERO_INFLATION_CONFIG,
    SimulatedData,
    add_presence_indicator,
    generate_hurdle_data,
    generate_zero_inflated_data,
)
from .stats.distributions import ProbabilityInterval
from .stats.fitting import (
    COUNT_FORMULA,
    PRESENCE_FORMULA,
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
from .stats.hurdle import combine_hurdle_predictions
from .utils.parsers import _parse_effects
from .utils.validators import (
    InvalidParameter,
    _validate_coefficient,
    _validate_n_replicates,
    _validate_probability,
    _validate_sample_size,
    _validate_standard_deviation,
)
from .utils.visualization import _create_hurdle_plot, _create_selection_plot, _create_zero_inflation_plot


class _Study(ABC):
    """Shared configuration and generation plumbing.

    Subclasses declare their effect names, default configuration and
    generator, and implement :meth:`fit` and :meth:`compare_models`.

    Every ``set_*`` call discards the current dataset and fits, so the
    next fit runs on data simulated from the new configuration.
    """

    _EFFECT_NAMES: List[str] = []
    _DEFAULTS: Dict[str, Any] = {}
    _generator: Callable[..., SimulatedData]

    def __init__(self, sample_size: Optional[int] = None, n_groups: Optional[int] = None):
        self.seed: Optional[int] = 2137
        self.max_failed_replicates = 0.10

        self.sample_size = self._DEFAULTS["sample_size"]
        self.n_groups = self._DEFAULTS["n_groups"]
        self.group_sd = self._DEFAULTS["group_sd"]
        self.effects: Dict[str, float] = {name: self._DEFAULTS[name] for name in self._EFFECT_NAMES}
        self.count_formula = COUNT_FORMULA

        self.data: Optional[SimulatedData] = None
        self.fits: Dict[str, FitSummary] = {}

        if sample_size is not None or n_groups is not None:
            self.set_sample_size(sample_size if sample_size is not None else self.sample_size, n_groups)

    def _discard_data(self):
        """Drop the cached dataset and fits after a configuration change."""
        self.data = None
        self.fits = {}

    # =========================================================================
    # Configuration methods
    # =========================================================================

    def set_seed(self, seed: Optional[int] = None):
        """Set the random seed for reproducibility.

        Args:
            seed: Non-negative integer. Pass ``None`` for fresh entropy on
                every :meth:`generate` call.

        Returns:
            self: For method chaining.

        Raises:
            TypeError: If *seed* is not an integer or ``None``.
            ValueError: If *seed* is negative.
        """
        if seed is not None:
            if isinstance(seed, bool) or not isinstance(seed, (int, np.integer)):
                raise TypeError("seed must be an integer or None")
            if seed < 0:
                raise ValueError("seed must be non-negative")

        self.seed = None if seed is None else int(seed)
        self._discard_data()
        return self

    def set_sample_size(self, sample_size: int, n_groups: Optional[int] = None):
        """Set the number of observations (and optionally groups).

        Returns:
            self: For method chaining.
        """
        n_groups = self.n_groups if n_groups is None else n_groups
        result = _validate_sample_size(sample_size, n_groups)
        result.raise_if_invalid()
        for msg in result.warnings:
            warnings.warn(msg, UserWarning, stacklevel=2)

        self.sample_size, self.n_groups = sample_size, n_groups
        self._discard_data()
        return self

    def set_groups(self, n_groups: Optional[int] = None, group_sd: Optional[float] = None):
        """Set the number of groups and the random-intercept standard deviation.

        Returns:
            self: For method chaining.
        """
        if n_groups is not None:
            self.set_sample_size(self.sample_size, n_groups)
        if group_sd is not None:
            _validate_standard_deviation(group_sd).raise_if_invalid()
            self.group_sd = float(group_sd)
            self._discard_data()
        return self

    def set_effects(self, effects: Union[str, Mapping[str, float]]):
        """Set generating coefficients.

        Args:
            effects: Assignment string such as ``"intercept=1, slope=0.5"``
                or a mapping. Unnamed effects keep their current values.

        Returns:
            self: For method chaining.

        Raises:
            InvalidParameter: For unknown names or invalid values.
        """
        parsed, errors = _parse_effects(effects, self._EFFECT_NAMES)
        if errors:
            raise InvalidParameter("Validation failed:\n" + "\n".join(f"• {err}" for err in errors))

        for name, value in parsed.items():
            self._validate_effect(name, value)
        self.effects.update(parsed)
        self._discard_data()
        return self

    def set_formula(self, count: Optional[str] = None):
        """Override the count-model formula (default ``response ~ x + C(group)``).

        Returns:
            self: For method chaining.
        """
        if count is not None:
            self.count_formula = count
            self.fits = {}
        return self

    def _validate_effect(self, name: str, value: float):
        _validate_coefficient(value, name).raise_if_invalid()

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def parameters(self) -> Dict[str, Any]:
        """Current generating parameters."""
        return {
            "sample_size": self.sample_size,
            "n_groups": self.n_groups,
            "group_sd": self.group_sd,
            **self.effects,
        }

    # =========================================================================
    # Generation
    # =========================================================================

    def _simulate(self, rng) -> SimulatedData:
        return type(self)._generator(rng=rng, **self.parameters)

    def generate(self) -> SimulatedData:
        """Simulate one dataset from the current parameters.

        A fresh generator is seeded from :attr:`seed` on each call, so two
        calls with the same seed return identical tables.
        """
        data = self._simulate(np.random.default_rng(self.seed))
        data.parameters["seed"] = self.seed
        self.data = data
        self.fits = {}
        return data

    def _resolve_data(self, data: Optional[SimulatedData]) -> SimulatedData:
        if data is not None:
            return data
        if self.data is None:
            return self.generate()
        return self.data

    @abstractmethod
    def fit(self, data: Optional[SimulatedData] = None) -> Dict[str, FitSummary]:
        """Fit the study's models to *data* (default: the current dataset)."""

    @abstractmethod
    def compare_models(self, data: Optional[SimulatedData] = None, print_results: bool = True) -> pd.DataFrame:
        """AIC table of the study's models, best first."""

    # =========================================================================
    # Replication
    # =========================================================================

    def replicate(
        self,
        n_replicates: int = 100,
        progress_callback: Optional[ProgressCallback] = None,
        print_results: bool = True,
    ) -> Dict[str, Any]:
        """Repeat simulate-and-compare and count which model wins on AIC.

        Child generators are spawned from one ``SeedSequence(seed)`` so
        each replicate is independent and the whole run is reproducible.

        Args:
            n_replicates: Number of simulated datasets.
            progress_callback: Optional ``(done, total, n_failed)``
                callback. It may raise
                :class:`~zihurdle.progress.SimulationCancelled` to stop
                the run.
            print_results: Print the win-rate table.

        Returns:
            Dict with ``win_rates`` (Series), ``aic`` (DataFrame, one row
            per successful replicate), ``n_replicates``, ``n_failed`` and
            ``failure_reasons``.

        Raises:
            RuntimeError: If every replicate fails or the failure rate
                exceeds :attr:`max_failed_replicates`.
        """
        result = _validate_n_replicates(n_replicates)
        result.raise_if_invalid()
        for msg in result.warnings:
            warnings.warn(msg, UserWarning, stacklevel=2)

        children = np.random.SeedSequence(self.seed).spawn(n_replicates)
        tracker = ReplicateTracker(n_replicates, progress_callback)
        tracker.start()

        rows = []
        for child in children:
            data = self._simulate(np.random.default_rng(child))
            try:
                table = self.compare_models(data, print_results=False)
            except InvalidParameter:
                raise
            except (np.linalg.LinAlgError, ValueError) as e:
                tracker.record(failure=type(e).__name__)
            else:
                rows.append(table["aic"])
                tracker.record()

        if not rows:
            raise RuntimeError("All replicates failed")

        if tracker.failure_rate > self.max_failed_replicates:
            raise RuntimeError(
                f"Too many failed replicates: {tracker.n_failed}/{n_replicates} "
                f"({tracker.failure_rate:.1%}), threshold: {self.max_failed_replicates:.1%}"
            )
        elif tracker.n_failed > 0:
            warnings.warn(f"{tracker.n_failed} replicates failed ({tracker.failure_rate:.1%})")

        aic = pd.DataFrame(rows).reset_index(drop=True)
        winners = aic.idxmin(axis=1)
        win_rates = winners.value_counts(normalize=True).reindex(aic.columns, fill_value=0.0)
        win_rates.name = "win_rate"

        if print_results:
            print(f"\nAIC model selection over {tracker.n_succeeded} replicates")
            print(win_rates.map(lambda v: f"{v:.1%}").to_string())

        return {
            "win_rates": win_rates,
            "aic": aic,
            "n_replicates": n_replicates,
            "n_failed": tracker.n_failed,
            "failure_reasons": dict(tracker.failure_reasons),
        }

    def plot_selection(self, replicate_result: Dict[str, Any]):
        """Bar chart of AIC win rates from :meth:`replicate`."""
        return _create_selection_plot(replicate_result["win_rates"])


def _print_aic_table(title: str, table: pd.DataFrame):
    print(f"\n{title}")
    print("=" * len(title))
    print(table.to_string(float_format=lambda v: f"{v:.2f}"))


class ZeroInflationStudy(_Study):
    """Zero-inflated Poisson walkthrough.

    Simulates counts where each observation is a structural zero with
    probability ``pz`` and otherwise a Poisson draw with log-rate
    ``group_offset + intercept + slope * x``, then fits Poisson, negative
    binomial and zero-inflated Poisson models and compares AIC.

    Example:
        >>> study = ZeroInflationStudy(sample_size=1000, n_groups=10)
        >>> study.set_effects("intercept=1, slope=1, pz=0.3")
        >>> study.compare_models()
        >>> study.zero_inflation_estimate()
    """

    _EFFECT_NAMES = ["intercept", "slope", "pz"]
    _DEFAULTS = DEFAULT_ZERO_INFLATION_CONFIG
    _generator = staticmethod(generate_zero_inflated_data)

    def _validate_effect(self, name: str, value: float):
        if name == "pz":
            _validate_probability(value, "pz").raise_if_invalid()
        else:
            super()._validate_effect(name, value)

    def fit(self, data: Optional[SimulatedData] = None) -> Dict[str, FitSummary]:
        """Fit Poisson, negative binomial and zero-inflated Poisson models."""
        data = self._resolve_data(data)
        table = data.table
        fits = {
            "poisson": fit_poisson(table, self.count_formula),
            "negative_binomial": fit_negative_binomial(table, self.count_formula),
            "zero_inflated_poisson": fit_zero_inflated_poisson(table, self.count_formula),
        }
        if data is self.data:
            self.fits = fits
        return fits

    def compare_models(self, data: Optional[SimulatedData] = None, print_results: bool = True) -> pd.DataFrame:
        """AIC table of the three count models, best first."""
        table = compare_aic(self.fit(data))
        if print_results:
            _print_aic_table("Zero-inflation: model comparison", table)
        return table

    def zero_inflation_estimate(self, data: Optional[SimulatedData] = None) -> ProbabilityInterval:
        """Estimated structural-zero probability with its back-transformed interval."""
        if data is None and "zero_inflated_poisson" in self.fits:
            zip_fit = self.fits["zero_inflated_poisson"]
        else:
            data = self._resolve_data(data)
            zip_fit = fit_zero_inflated_poisson(data.table, self.count_formula)
        return zero_inflation_probability(zip_fit)

    def plot(self, data: Optional[SimulatedData] = None):
        """Scatter and histogram of the simulated counts by generating branch."""
        return _create_zero_inflation_plot(self._resolve_data(data).table)


class HurdleStudy(_Study):
    """Hurdle walkthrough.

    Presence follows a logistic model on ``presence_intercept +
    presence_slope * x`` (plus the group offset); present observations
    get a zero-truncated Poisson count. The two parts are fitted
    separately and their response-scale predictions multiplied per
    observation id.

    Example:
        >>> study = HurdleStudy().set_effects("presence_slope=-2")
        >>> predicted = study.predict()
        >>> study.compare_models()
    """

    _EFFECT_NAMES = ["presence_intercept", "presence_slope", "intercept", "slope"]
    _DEFAULTS = DEFAULT_HURDLE_CONFIG
    _generator = staticmethod(generate_hurdle_data)

    def __init__(self, sample_size: Optional[int] = None, n_groups: Optional[int] = None):
        super().__init__(sample_size, n_groups)
        self.presence_formula = PRESENCE_FORMULA

    def set_formula(self, count: Optional[str] = None, presence: Optional[str] = None):
        """Override the truncated-count and/or presence formulas.

        Returns:
            self: For method chaining.
        """
        super().set_formula(count)
        if presence is not None:
            self.presence_formula = presence
            self.fits = {}
        return self

    def fit(self, data: Optional[SimulatedData] = None) -> Dict[str, FitSummary]:
        """Fit the presence GLM and the zero-truncated Poisson part."""
        data = self._resolve_data(data)
        table = add_presence_indicator(data.table)
        fits = {
            "presence": fit_presence_model(table, self.presence_formula),
            "truncated_poisson": fit_truncated_poisson(table, self.count_formula),
        }
        if data is self.data:
            self.fits = fits
        return fits

    def compare_models(self, data: Optional[SimulatedData] = None, print_results: bool = True) -> pd.DataFrame:
        """AIC of the hurdle model against single-part Poisson and ZIP fits."""
        data = self._resolve_data(data)
        parts = self.fit(data)
        table = compare_aic(
            {
                "poisson": fit_poisson(data.table, self.count_formula),
                "zero_inflated_poisson": fit_zero_inflated_poisson(data.table, self.count_formula),
            },
            extra={"hurdle": hurdle_aic(parts["presence"], parts["truncated_poisson"])},
        )
        if print_results:
            _print_aic_table("Hurdle: model comparison", table)
        return table

    def predict(self, data: Optional[SimulatedData] = None) -> pd.DataFrame:
        """Observation table with fitted hurdle predictions.

        Returns a new table with ``present``, ``presence_fitted``,
        ``positive_fitted`` and ``prediction`` columns. Both parts are on
        the response scale and are joined on ``obs_id``.
        """
        data = self._resolve_data(data)
        fits = self.fits if (data is self.data and self.fits) else self.fit(data)

        table = add_presence_indicator(data.table)
        presence = predict_presence_probability(fits["presence"], table)
        positive = predict_truncated_mean(fits["truncated_poisson"], table)
        prediction = combine_hurdle_predictions(presence, positive)

        return table.assign(
            presence_fitted=presence,
            positive_fitted=positive,
            prediction=prediction,
        )

    def plot(self, data: Optional[SimulatedData] = None, with_prediction: bool = True):
        """Response and presence diagnostics, optionally with fitted predictions."""
        data = self._resolve_data(data)
        table = self.predict(data) if with_prediction else data.table
        return _create_hurdle_plot(table)
