"""
Data generators for zero-inflated and hurdle count models.

Generates synthetic observation tables with:
- Contiguous group blocks with normal random intercepts
- A uniform covariate and a log-linear count predictor
- Structural zeros (zero-inflation) or a logistic presence hurdle

Every generator draws from a caller-owned ``numpy.random.Generator``;
nothing here touches numpy's global random state.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

import numpy as np
import pandas as pd

from ..utils.validators import (
    _validate_coefficient,
    _validate_probability,
    _validate_sample_size,
    _validate_standard_deviation,
)
from .distributions import inverse_logit, sample_truncated_poisson

RandomSource = Optional[Union[np.random.Generator, np.random.SeedSequence, int]]

OBS_INDEX_NAME = "obs_id"

DEFAULT_ZERO_INFLATION_CONFIG: Dict[str, Any] = {
    "sample_size": 1000,
    "n_groups": 10,
    "pz": 0.3,
    "intercept": 1.0,
    "slope": 1.0,
    "group_sd": 0.5,
}
"""Generating parameters of the zero-inflation walkthrough."""

DEFAULT_HURDLE_CONFIG: Dict[str, Any] = {
    "sample_size": 1000,
    "n_groups": 10,
    "presence_intercept": 0.5,
    "presence_slope": -2.0,
    "intercept": 1.0,
    "slope": 1.0,
    "group_sd": 0.5,
}
"""Generating parameters of the hurdle walkthrough."""


@dataclass
class SimulatedData:
    """One simulated dataset.

    Attributes:
        table: Observation table indexed by ``obs_id``.
        group_effects: Random intercept per group label.
        parameters: Generating parameters (and seed, when known).
    """

    table: pd.DataFrame
    group_effects: pd.Series
    parameters: Dict[str, Any] = field(default_factory=dict)

    @property
    def n_obs(self) -> int:
        return len(self.table)

    @property
    def zero_fraction(self) -> float:
        """Share of observations with a zero response."""
        return float(np.mean(self.table["response"].to_numpy() == 0))


def group_labels(n_groups: int) -> list:
    """Zero-padded group labels ``g01, g02, ...``."""
    width = max(2, len(str(n_groups)))
    return [f"g{i + 1:0{width}d}" for i in range(n_groups)]


def assign_groups(sample_size: int, n_groups: int) -> np.ndarray:
    """Assign observations to groups in contiguous blocks.

    Blocks are as equal as possible; when *n_groups* does not divide
    *sample_size* the first ``sample_size % n_groups`` groups get one
    extra observation.

    Returns:
        (sample_size,) integer group index per observation,
        ``[0,0,...,0, 1,1,...,1, ..., G-1]``.
    """
    _validate_sample_size(sample_size, n_groups).raise_if_invalid()

    base, extra = divmod(sample_size, n_groups)
    block_sizes = np.full(n_groups, base, dtype=np.intp)
    block_sizes[:extra] += 1
    return np.repeat(np.arange(n_groups, dtype=np.intp), block_sizes)


def generate_group_effects(n_groups: int, group_sd: float, rng: RandomSource = None) -> pd.Series:
    """Draw one Normal(0, group_sd) intercept offset per group.

    Returns:
        Series indexed by group label.
    """
    _validate_standard_deviation(group_sd).raise_if_invalid()
    rng = np.random.default_rng(rng)

    offsets = rng.normal(0.0, group_sd, size=n_groups)
    return pd.Series(offsets, index=pd.Index(group_labels(n_groups), name="group"), name="group_effect")


def _base_table(
    sample_size: int,
    n_groups: int,
    intercept: float,
    slope: float,
    group_sd: float,
    rng: np.random.Generator,
):
    """Groups, random intercepts, covariate and count predictor shared by both generators."""
    _validate_coefficient(intercept, "intercept").raise_if_invalid()
    _validate_coefficient(slope, "slope").raise_if_invalid()

    group_idx = assign_groups(sample_size, n_groups)
    group_effects = generate_group_effects(n_groups, group_sd, rng)
    x = rng.random(sample_size)

    offsets = group_effects.to_numpy()[group_idx]
    linear_predictor = offsets + intercept + slope * x

    labels = group_effects.index.to_numpy()
    table = pd.DataFrame(
        {
            "group": pd.Categorical(labels[group_idx], categories=labels),
            "x": x,
            "linear_predictor": linear_predictor,
        },
        index=pd.RangeIndex(sample_size, name=OBS_INDEX_NAME),
    )
    return table, group_effects, offsets


def generate_zero_inflated_data(
    sample_size: int = DEFAULT_ZERO_INFLATION_CONFIG["sample_size"],
    n_groups: int = DEFAULT_ZERO_INFLATION_CONFIG["n_groups"],
    pz: float = DEFAULT_ZERO_INFLATION_CONFIG["pz"],
    intercept: float = DEFAULT_ZERO_INFLATION_CONFIG["intercept"],
    slope: float = DEFAULT_ZERO_INFLATION_CONFIG["slope"],
    group_sd: float = DEFAULT_ZERO_INFLATION_CONFIG["group_sd"],
    rng: RandomSource = None,
) -> SimulatedData:
    """
    Simulate zero-inflated Poisson counts with a per-group random intercept.

    Algorithm:

    1. Assign observations to *n_groups* contiguous blocks.
    2. Draw one intercept per group from Normal(0, group_sd).
    3. Draw ``x`` ~ Uniform[0, 1).
    4. ``linear_predictor = group_offset + intercept + slope * x``.
    5. Draw ``is_excess_zero`` ~ Bernoulli(pz).
    6. ``response`` is 0 for excess zeros, otherwise
       Poisson(exp(linear_predictor)).

    ``pz = 0`` gives plain Poisson mixed data and ``pz = 1`` an all-zero
    response; both are valid.

    Args:
        sample_size: Number of observations.
        n_groups: Number of groups.
        pz: Probability of a structural zero, in [0, 1].
        intercept: Fixed intercept of the log-rate.
        slope: Fixed slope of ``x`` on the log-rate.
        group_sd: Standard deviation of the group intercepts.
        rng: Caller-owned generator or seed.

    Returns:
        SimulatedData with columns ``group, x, linear_predictor, response,
        is_excess_zero``.

    Raises:
        InvalidParameter: If any parameter is out of range.
    """
    _validate_probability(pz, "pz").raise_if_invalid()
    rng = np.random.default_rng(rng)

    table, group_effects, _ = _base_table(sample_size, n_groups, intercept, slope, group_sd, rng)

    is_excess_zero = rng.random(sample_size) < pz
    counts = rng.poisson(np.exp(table["linear_predictor"].to_numpy()))
    table["response"] = np.where(is_excess_zero, 0, counts).astype(np.int64)
    table["is_excess_zero"] = is_excess_zero

    parameters = {
        "scenario": "zero_inflation",
        "sample_size": sample_size,
        "n_groups": n_groups,
        "pz": pz,
        "intercept": intercept,
        "slope": slope,
        "group_sd": group_sd,
    }
    return SimulatedData(table=table, group_effects=group_effects, parameters=parameters)


def generate_hurdle_data(
    sample_size: int = DEFAULT_HURDLE_CONFIG["sample_size"],
    n_groups: int = DEFAULT_HURDLE_CONFIG["n_groups"],
    presence_intercept: float = DEFAULT_HURDLE_CONFIG["presence_intercept"],
    presence_slope: float = DEFAULT_HURDLE_CONFIG["presence_slope"],
    intercept: float = DEFAULT_HURDLE_CONFIG["intercept"],
    slope: float = DEFAULT_HURDLE_CONFIG["slope"],
    group_sd: float = DEFAULT_HURDLE_CONFIG["group_sd"],
    rng: RandomSource = None,
) -> SimulatedData:
    """
    Simulate hurdle counts: logistic presence, zero-truncated Poisson positives.

    The group offset enters both predictors:

    - ``presence_predictor = group_offset + presence_intercept + presence_slope * x``
    - ``linear_predictor = group_offset + intercept + slope * x``

    Each observation is present with probability
    ``inverse_logit(presence_predictor)``. Absent observations get 0,
    present ones a zero-truncated Poisson(exp(linear_predictor)) draw, so
    ``is_present`` is equivalent to ``response >= 1``.

    Returns:
        SimulatedData with columns ``group, x, linear_predictor,
        presence_predictor, presence_probability, response, is_present``.

    Raises:
        InvalidParameter: If a parameter is out of range or the presence
            probability overflows to exactly 0 or 1.
    """
    _validate_coefficient(presence_intercept, "presence_intercept").raise_if_invalid()
    _validate_coefficient(presence_slope, "presence_slope").raise_if_invalid()
    rng = np.random.default_rng(rng)

    table, group_effects, offsets = _base_table(sample_size, n_groups, intercept, slope, group_sd, rng)

    presence_predictor = offsets + presence_intercept + presence_slope * table["x"].to_numpy()
    presence_probability = inverse_logit(presence_predictor)
    is_present = rng.random(sample_size) < presence_probability

    response = np.zeros(sample_size, dtype=np.int64)
    rates = np.exp(table["linear_predictor"].to_numpy()[is_present])
    if rates.size:
        response[is_present] = sample_truncated_poisson(rates, rng)

    table["presence_predictor"] = presence_predictor
    table["presence_probability"] = presence_probability
    table["response"] = response
    table["is_present"] = is_present

    parameters = {
        "scenario": "hurdle",
        "sample_size": sample_size,
        "n_groups": n_groups,
        "presence_intercept": presence_intercept,
        "presence_slope": presence_slope,
        "intercept": intercept,
        "slope": slope,
        "group_sd": group_sd,
    }
    return SimulatedData(table=table, group_effects=group_effects, parameters=parameters)


def add_presence_indicator(table: pd.DataFrame) -> pd.DataFrame:
    """Return a copy of *table* with a 0/1 ``present`` column (``response > 0``)."""
    return table.assign(present=(table["response"] > 0).astype(np.int64))
