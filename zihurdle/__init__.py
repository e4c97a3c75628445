"""ZIHurdle - zero-inflated and hurdle count models by simulation.

Simulates zero-inflated and hurdle count data with per-group random
intercepts, fits the comparison models through statsmodels, combines
hurdle predictions by observation id and back-transforms logit-scale
estimates to probabilities.

Example:
    >>> from zihurdle import ZeroInflationStudy, HurdleStudy
    >>>
    >>> study = ZeroInflationStudy(sample_size=1000, n_groups=10)
    >>> study.set_effects("intercept=1, slope=1, pz=0.3")
    >>> study.compare_models()
    >>> study.zero_inflation_estimate()
    >>>
    >>> hurdle = HurdleStudy().set_effects("presence_slope=-2")
    >>> hurdle.predict()
"""

from importlib.metadata import version as _get_version

from .model import HurdleStudy, ZeroInflationStudy
from .progress import PrintReporter, ReplicateTracker, SimulationCancelled, TqdmReporter
from .stats.data_generation import SimulatedData, generate_hurdle_data, generate_zero_inflated_data
from .stats.distributions import (
    ProbabilityInterval,
    back_transform_logit,
    inverse_logit,
    logit,
    sample_truncated_poisson,
)
from .stats.hurdle import combine_hurdle_predictions, to_response_scale
from .utils.validators import InvalidParameter, ShapeMismatch

__version__ = _get_version("ZIHurdle")

__all__ = [
    "ZeroInflationStudy",
    "HurdleStudy",
    "SimulatedData",
    "generate_zero_inflated_data",
    "generate_hurdle_data",
    "sample_truncated_poisson",
    "inverse_logit",
    "logit",
    "back_transform_logit",
    "ProbabilityInterval",
    "combine_hurdle_predictions",
    "to_response_scale",
    "InvalidParameter",
    "ShapeMismatch",
    "SimulationCancelled",
    "ReplicateTracker",
    "PrintReporter",
    "TqdmReporter",
]
