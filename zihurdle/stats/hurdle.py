"""Hurdle-model scoring: response-scale conversion and prediction combination.

A hurdle prediction is ``P(present) * E[count | present]``. The two parts
come from separately fitted models, usually on different rows (the
positive-count model only sees present observations), so the combiner
joins them by observation key whenever keys are available.
"""

from typing import Sequence, Union

import numpy as np
import pandas as pd

from ..utils.validators import InvalidParameter, ShapeMismatch, _validate_equal_length
from .distributions import inverse_logit

Scores = Union[pd.Series, np.ndarray, Sequence[float]]

_LINKS = ("logit", "log", "identity")


def to_response_scale(values: Scores, link: str) -> Scores:
    """Convert link-scale scores to the response scale.

    Args:
        values: Scores on the link scale (Series keeps its index).
        link: ``"logit"`` (probabilities), ``"log"`` (rates) or
            ``"identity"`` (already on the response scale).

    Raises:
        InvalidParameter: For an unknown link, or a logistic result that
            overflows to exactly 0 or 1.
    """
    if link not in _LINKS:
        raise InvalidParameter(f"Unknown link '{link}'. Valid options: {', '.join(_LINKS)}")

    arr = np.asarray(values, dtype=float)
    if link == "logit":
        converted = np.asarray(inverse_logit(arr), dtype=float)
    elif link == "log":
        converted = np.exp(arr)
    else:
        converted = arr.copy()

    if isinstance(values, pd.Series):
        return pd.Series(converted, index=values.index, name=values.name)
    return converted


def combine_hurdle_predictions(presence: Scores, positive: Scores) -> Scores:
    """Multiply presence and positive-value predictions per observation.

    With two ``pandas.Series`` the scores are joined on their index (the
    observation id). Observations present on only one side get NaN.
    Array-likes are combined positionally and must have equal length.
    Missing values (NaN or None) propagate to NaN in the output.

    Both inputs should already be on the response scale; see
    :func:`to_response_scale`.

    Args:
        presence: Presence probabilities per observation.
        positive: Expected positive values per observation.

    Returns:
        ``pandas.Series`` named ``prediction`` for keyed inputs, otherwise
        a float ``numpy`` array.

    Raises:
        ShapeMismatch: If positional inputs differ in length, keyed inputs
            have duplicate keys, or only one input carries keys.
    """
    keyed = (isinstance(presence, pd.Series), isinstance(positive, pd.Series))

    if all(keyed):
        for name, series in (("presence", presence), ("positive", positive)):
            if not series.index.is_unique:
                raise ShapeMismatch(f"{name} predictions have duplicate observation keys")
        left, right = presence.astype(float).align(positive.astype(float), join="outer")
        return (left * right).rename("prediction")

    if any(keyed):
        raise ShapeMismatch("Cannot join keyed and positional predictions; pass two Series or two arrays")

    presence_arr = np.asarray(presence, dtype=float)
    positive_arr = np.asarray(positive, dtype=float)
    if presence_arr.ndim != 1 or positive_arr.ndim != 1:
        raise ShapeMismatch("Predictions must be one-dimensional")
    _validate_equal_length(presence_arr, positive_arr).raise_if_invalid(ShapeMismatch)

    return presence_arr * positive_arr
