"""Model fitting for zero-inflation and hurdle walkthroughs.

Thin wrappers over statsmodels that fit the comparison models and return
a uniform :class:`FitSummary` (coefficients, standard errors, AIC). The
estimation itself is entirely statsmodels'.

Group random intercepts are represented by a fixed ``C(group)`` term in
the default formulas; statsmodels offers no frequentist Poisson GLMM
with a likelihood-based AIC.
"""

import warnings
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Union

import numpy as np
import pandas as pd
import statsmodels.api as sm
import statsmodels.formula.api as smf
from statsmodels.discrete.count_model import ZeroInflatedPoisson
from statsmodels.discrete.truncated_model import TruncatedLFPoisson

from .data_generation import add_presence_indicator
from .distributions import ProbabilityInterval, back_transform_logit, truncated_poisson_mean
from .hurdle import to_response_scale

COUNT_FORMULA = "response ~ x + C(group)"
PRESENCE_FORMULA = "present ~ x + C(group)"
INFLATION_PARAM = "inflate_const"


@dataclass
class FitSummary:
    """Estimates of one fitted model.

    Attributes:
        name: Short model label used in AIC tables.
        params: Coefficient estimates (link scale).
        bse: Standard errors of *params*.
        aic: Akaike information criterion.
        n_obs: Number of rows the model was fitted on.
        converged: Optimiser convergence flag reported by statsmodels.
        result: The underlying statsmodels results object.
    """

    name: str
    params: pd.Series
    bse: pd.Series
    aic: float
    n_obs: int
    converged: bool
    result: Any = None

    @property
    def n_params(self) -> int:
        return len(self.params)

    def coefficient(self, term: str) -> float:
        return float(self.params[term])

    def conf_int(self, z: float = 1.96) -> pd.DataFrame:
        """Wald interval ``params ± z·bse`` on the link scale."""
        return pd.DataFrame({"lower": self.params - z * self.bse, "upper": self.params + z * self.bse})


def _converged(result) -> bool:
    """Read the convergence flag from discrete-model or GLM results."""
    retvals = getattr(result, "mle_retvals", None)
    if isinstance(retvals, dict) and "converged" in retvals:
        return bool(retvals["converged"])
    return bool(getattr(result, "converged", True))


def _fit(name: str, model, **fit_kwargs) -> FitSummary:
    """Fit *model*, silence statsmodels' optimiser chatter, and summarise."""
    # statsmodels emits ConvergenceWarning / overflow RuntimeWarnings on
    # small or degenerate samples; convergence is reported via the flag.
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        result = model.fit(**fit_kwargs)

    converged = _converged(result)
    if not converged:
        warnings.warn(f"{name} model did not converge; estimates may be unreliable", RuntimeWarning, stacklevel=3)

    return FitSummary(
        name=name,
        params=pd.Series(result.params),
        bse=pd.Series(result.bse),
        aic=float(result.aic),
        n_obs=int(result.nobs),
        converged=converged,
        result=result,
    )


def fit_poisson(table: pd.DataFrame, formula: str = COUNT_FORMULA) -> FitSummary:
    """Poisson regression with log link."""
    return _fit("poisson", smf.poisson(formula, data=table), disp=0, maxiter=200)


def fit_negative_binomial(table: pd.DataFrame, formula: str = COUNT_FORMULA) -> FitSummary:
    """NB2 negative binomial regression with log link (``alpha`` is the dispersion)."""
    return _fit("negative_binomial", smf.negativebinomial(formula, data=table), disp=0, maxiter=500)


def fit_zero_inflated_poisson(table: pd.DataFrame, formula: str = COUNT_FORMULA) -> FitSummary:
    """Zero-inflated Poisson with an intercept-only logit inflation part.

    The inflation intercept is reported as ``inflate_const``; see
    :func:`zero_inflation_probability` for its probability-scale value.
    """
    model = ZeroInflatedPoisson.from_formula(formula, data=table, inflation="logit")
    return _fit("zero_inflated_poisson", model, method="bfgs", maxiter=1000, disp=0)


def fit_presence_model(table: pd.DataFrame, formula: str = PRESENCE_FORMULA) -> FitSummary:
    """Binomial GLM (logit link) for presence / absence.

    Adds the ``present`` indicator column when *table* lacks it.
    """
    if "present" not in table.columns:
        table = add_presence_indicator(table)
    model = smf.glm(formula, data=table, family=sm.families.Binomial())
    return _fit("presence", model)


def fit_truncated_poisson(table: pd.DataFrame, formula: str = COUNT_FORMULA) -> FitSummary:
    """Zero-truncated Poisson fitted on the positive-response rows only.

    Raises:
        numpy.linalg.LinAlgError: If *formula* has a ``C(group)`` term and
            some group has no positive rows; its dummy column would be all
            zeros and the design singular.
    """
    positives = table.loc[table["response"] > 0]
    if "C(group)" in formula and isinstance(positives["group"].dtype, pd.CategoricalDtype):
        empty = positives["group"].value_counts().loc[lambda counts: counts == 0].index
        if len(empty):
            raise np.linalg.LinAlgError(
                f"Singular design: groups without positive responses ({', '.join(map(str, empty))})"
            )
    model = TruncatedLFPoisson.from_formula(formula, data=positives, truncation=0)
    return _fit("truncated_poisson", model, method="bfgs", maxiter=1000, disp=0)


def zero_inflation_probability(fit: FitSummary, z: float = 1.96) -> ProbabilityInterval:
    """Structural-zero probability with a logit-scale interval.

    Raises:
        KeyError: If *fit* has no ``inflate_const`` term.
    """
    if INFLATION_PARAM not in fit.params.index:
        raise KeyError(f"{fit.name} has no '{INFLATION_PARAM}' term; fit a zero-inflated model first")
    return back_transform_logit(float(fit.params[INFLATION_PARAM]), float(fit.bse[INFLATION_PARAM]), z=z)


def predict_presence_probability(fit: FitSummary, table: pd.DataFrame) -> pd.Series:
    """Response-scale presence probabilities keyed by the table index."""
    predicted = fit.result.predict(table)
    return pd.Series(np.asarray(predicted, dtype=float), index=table.index, name="presence_probability")


def predict_truncated_mean(fit: FitSummary, table: pd.DataFrame) -> pd.Series:
    """Expected positive count ``E[Y | Y > 0]`` keyed by the table index.

    *table* may contain rows the model never saw (the zeros). The linear
    predictor is converted to a rate on the response scale and then to
    the zero-truncated mean.
    """
    linear = np.asarray(fit.result.predict(table, which="linear"), dtype=float)
    mean = truncated_poisson_mean(to_response_scale(linear, "log"))
    return pd.Series(np.asarray(mean, dtype=float), index=table.index, name="positive_mean")


def hurdle_aic(presence_fit: FitSummary, truncated_fit: FitSummary) -> float:
    """AIC of the hurdle model, the sum of its two independent parts."""
    return presence_fit.aic + truncated_fit.aic


def compare_aic(fits: Union[Mapping[str, FitSummary], Iterable[FitSummary]], extra: Optional[Dict[str, float]] = None) -> pd.DataFrame:
    """Rank fitted models by AIC.

    Args:
        fits: FitSummary objects (a mapping's keys override their names).
        extra: Additional ``{label: aic}`` rows, e.g. a combined hurdle AIC.

    Returns:
        DataFrame indexed by model label with ``aic``, ``delta_aic``,
        ``n_params`` and ``converged``, best model first.
    """
    items = fits.items() if isinstance(fits, Mapping) else ((f.name, f) for f in fits)
    rows = [
        {"model": label, "aic": fit.aic, "n_params": fit.n_params, "converged": fit.converged}
        for label, fit in items
    ]
    for label, aic in (extra or {}).items():
        rows.append({"model": label, "aic": float(aic), "n_params": np.nan, "converged": True})

    if not rows:
        raise ValueError("compare_aic needs at least one fitted model")

    table = pd.DataFrame(rows).set_index("model").sort_values("aic")
    table.insert(1, "delta_aic", table["aic"] - table["aic"].min())
    return table
