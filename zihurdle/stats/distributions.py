"""Distribution helpers for zero-inflation and hurdle models.

Provides the logistic transform pair, the logit-to-probability
back-transform with its symmetric (logit-scale) interval, and the
zero-truncated Poisson sampler and mean.

All functions are pure apart from drawing from the caller's
``numpy.random.Generator``.

Usage:
    from zihurdle.stats.distributions import inverse_logit, sample_truncated_poisson
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

import numpy as np
from scipy import special
from scipy.stats import poisson as _poisson_dist

from ..utils.validators import (
    InvalidParameter,
    _validate_coefficient,
    _validate_open_probabilities,
    _validate_rates,
    _validate_standard_deviation,
)

ArrayLike = Union[float, np.ndarray]

# Normal quantile used for the documented 95% interval
Z_95 = 1.96

# Half-width (in Poisson SDs, plus a constant for small rates) of the
# support window scanned by the inverse-CDF sampler.
_SUPPORT_SDS = 12.0
_SUPPORT_PAD = 20


def _as_output(values: np.ndarray, like) -> ArrayLike:
    """Return a Python scalar when the input was a scalar."""
    if np.ndim(like) == 0:
        return values.item()
    return values


def inverse_logit(eta: ArrayLike) -> ArrayLike:
    """Map log-odds to probabilities, ``p = 1 / (1 + exp(-eta))``.

    Raises:
        InvalidParameter: If any result lands on 0 or 1 because the
            linear predictor overflowed. Values are never clamped.
    """
    p = special.expit(np.asarray(eta, dtype=float))
    _validate_open_probabilities(p, "inverse_logit result").raise_if_invalid()
    return _as_output(p, eta)


def logit(p: ArrayLike) -> ArrayLike:
    """Log-odds of a probability in the open interval (0, 1)."""
    p_arr = np.asarray(p, dtype=float)
    _validate_open_probabilities(p_arr, "logit argument").raise_if_invalid()
    return _as_output(special.logit(p_arr), p)


@dataclass(frozen=True)
class ProbabilityInterval:
    """Logit-scale estimate and interval mapped to the probability scale.

    The bounds come from ``estimate ± z·se`` on the logit scale, so the
    interval is symmetric there but not on the probability scale.
    """

    lower: float
    estimate: float
    upper: float

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.lower, self.estimate, self.upper)

    def __str__(self) -> str:
        return f"{self.estimate:.4f} [{self.lower:.4f}, {self.upper:.4f}]"


def back_transform_logit(estimate: float, se: float, z: float = Z_95) -> ProbabilityInterval:
    """Back-transform a logit-scale estimate and its interval to probabilities.

    Applies the inverse logit to ``(estimate - z*se, estimate, estimate + z*se)``.
    The transform is monotonic so ``lower <= estimate <= upper`` holds.

    Args:
        estimate: Point estimate on the logit scale.
        se: Standard error on the logit scale (must be >= 0).
        z: Normal quantile for the interval half-width (default 1.96).

    Returns:
        ProbabilityInterval with all three values in (0, 1).

    Raises:
        InvalidParameter: For a negative or non-finite SE, a non-finite
            estimate, or when a bound overflows to 0 or 1.
    """
    _validate_coefficient(estimate, "estimate").raise_if_invalid()
    _validate_standard_deviation(se, "se").raise_if_invalid()
    _validate_standard_deviation(z, "z").raise_if_invalid()

    half_width = z * se
    lower, mid, upper = inverse_logit(np.array([estimate - half_width, estimate, estimate + half_width]))
    return ProbabilityInterval(lower=float(lower), estimate=float(mid), upper=float(upper))


def _truncated_poisson_ppf(w: np.ndarray, rate: float) -> np.ndarray:
    """Quantiles of a zero-truncated Poisson for uniforms *w* in [0, 1).

    Drawing ``U`` on ``[CDF(0), 1)`` and taking the smallest ``k`` with
    ``CDF(k) >= U`` is the same as taking the smallest ``k >= 1`` with
    ``1 - SF(k) / SF(0) >= w``. The second form keeps its resolution when
    ``CDF(0)`` rounds to 1 for very small rates.
    """
    sf0 = -np.expm1(-rate)
    spread = _SUPPORT_SDS * np.sqrt(rate) + _SUPPORT_PAD
    k_lo = max(1, int(np.floor(rate - spread)))
    k_hi = int(np.ceil(rate + spread))

    ks = np.arange(k_lo, k_hi + 1, dtype=np.int64)
    conditional_cdf = 1.0 - _poisson_dist.sf(ks, rate) / sf0

    idx = np.searchsorted(conditional_cdf, w, side="left")
    idx = np.minimum(idx, len(ks) - 1)
    return ks[idx]


def sample_truncated_poisson(
    lam: ArrayLike,
    rng: Optional[Union[np.random.Generator, int]] = None,
    size: Optional[Union[int, Tuple[int, ...]]] = None,
) -> Union[int, np.ndarray]:
    """Draw zero-truncated Poisson deviates by inverse-CDF sampling.

    Args:
        lam: Rate(s), scalar or array. Every rate must be > 0.
        rng: Caller-owned ``numpy.random.Generator`` (or a seed for
            ``numpy.random.default_rng``).
        size: Output shape when *lam* is broadcast.

    Returns:
        Integer draws, all >= 1. A Python ``int`` for scalar *lam* and
        ``size=None``, otherwise an ``int64`` array.

    Raises:
        InvalidParameter: If any rate is <= 0 or not finite.
    """
    rng = np.random.default_rng(rng)
    lam_arr = np.asarray(lam, dtype=float)
    if size is not None:
        lam_arr = np.broadcast_to(lam_arr, size)
    _validate_rates(lam_arr).raise_if_invalid()

    w = rng.random(lam_arr.shape)
    draws = np.empty(lam_arr.shape, dtype=np.int64)

    flat_lam = lam_arr.reshape(-1)
    flat_w = w.reshape(-1)
    flat_draws = draws.reshape(-1)

    # One quantile table per distinct rate
    rates, inverse = np.unique(flat_lam, return_inverse=True)
    inverse = inverse.reshape(-1)
    for i, rate in enumerate(rates):
        mask = inverse == i
        flat_draws[mask] = _truncated_poisson_ppf(flat_w[mask], float(rate))

    if np.ndim(lam) == 0 and size is None:
        return int(flat_draws[0])
    return draws


def truncated_poisson_mean(lam: ArrayLike) -> ArrayLike:
    """Mean of a zero-truncated Poisson, ``lam / (1 - exp(-lam))``."""
    lam_arr = np.asarray(lam, dtype=float)
    _validate_rates(lam_arr).raise_if_invalid()
    return _as_output(lam_arr / -np.expm1(-lam_arr), lam)


def truncated_poisson_cdf(k: ArrayLike, lam: float) -> ArrayLike:
    """CDF of the zero-truncated Poisson, 0 for ``k < 1``."""
    _validate_rates(np.asarray(lam, dtype=float)).raise_if_invalid()
    k_arr = np.asarray(k, dtype=float)
    cdf = 1.0 - _poisson_dist.sf(k_arr, lam) / -np.expm1(-lam)
    cdf = np.where(k_arr < 1, 0.0, cdf)
    return _as_output(cdf, k)


__all__ = [
    "InvalidParameter",
    "ProbabilityInterval",
    "Z_95",
    "back_transform_logit",
    "inverse_logit",
    "logit",
    "sample_truncated_poisson",
    "truncated_poisson_cdf",
    "truncated_poisson_mean",
]
