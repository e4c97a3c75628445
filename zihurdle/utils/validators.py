"""
Validation utilities for zero-inflation and hurdle simulations.

This module provides the package exceptions and the validation functions
for simulation parameters, probabilities, rates and prediction shapes.
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Type, Union

import numpy as np

__all__ = ["InvalidParameter", "ShapeMismatch"]

_NUMERIC_TYPES = (int, float, np.integer, np.floating)


class InvalidParameter(ValueError):
    """Raised when a parameter lies outside its valid domain."""

    pass


class ShapeMismatch(ValueError):
    """Raised when two prediction vectors cannot be aligned."""

    pass


@dataclass
class _ValidationResult:
    """Outcome of a validation check, carrying errors and warnings.

    Attributes:
        is_valid: ``True`` if no errors were found.
        errors: List of error messages (empty when valid).
        warnings: List of non-fatal warning messages.
    """

    is_valid: bool
    errors: List[str]
    warnings: List[str]

    def raise_if_invalid(self, error_cls: Type[Exception] = InvalidParameter):
        """Raise *error_cls* if the validation failed."""
        if not self.is_valid:
            error_msg = "Validation failed:\n" + "\n".join(f"• {err}" for err in self.errors)
            raise error_cls(error_msg)


class _Validator:
    """Static helpers for type and range checks used by all validators."""

    @staticmethod
    def _check_type(value: Any, expected_types: tuple, name: str) -> Optional[str]:
        """Check if value has expected type."""
        if isinstance(value, bool) or not isinstance(value, expected_types):
            actual_type = type(value).__name__
            expected = expected_types[0].__name__ if len(expected_types) == 1 else f"one of {[t.__name__ for t in expected_types]}"
            return f"{name} must be {expected}, got {actual_type}"
        return None

    @staticmethod
    def _check_range(
        value: Union[int, float],
        min_val: Optional[float],
        max_val: Optional[float],
        name: str,
    ) -> Optional[str]:
        """Check if value is within range."""
        if not np.isfinite(value):
            return f"{name} must be finite, got {value}"
        if min_val is not None and value < min_val:
            return f"{name} must be >= {min_val}, got {value}"
        if max_val is not None and value > max_val:
            return f"{name} must be <= {max_val}, got {value}"
        return None


_validator = _Validator()


def _validate_numeric_parameter(
    value: Any,
    name: str,
    expected_types: tuple = _NUMERIC_TYPES,
    min_val: Optional[float] = None,
    max_val: Optional[float] = None,
) -> _ValidationResult:
    """Generic validation for numeric parameters."""
    errors: List[str] = []

    type_error = _validator._check_type(value, expected_types, name)
    if type_error:
        errors.append(type_error)
        return _ValidationResult(False, errors, [])

    range_error = _validator._check_range(value, min_val, max_val, name)
    if range_error:
        errors.append(range_error)

    return _ValidationResult(len(errors) == 0, errors, [])


def _validate_probability(p: Any, name: str = "pz") -> _ValidationResult:
    """Validate a probability on the closed interval [0, 1]."""
    return _validate_numeric_parameter(p, name, min_val=0.0, max_val=1.0)


def _validate_coefficient(value: Any, name: str) -> _ValidationResult:
    """Validate a finite regression coefficient."""
    return _validate_numeric_parameter(value, name)


def _validate_standard_deviation(sd: Any, name: str = "group_sd") -> _ValidationResult:
    """Validate a non-negative standard deviation (or standard error)."""
    return _validate_numeric_parameter(sd, name, min_val=0.0)


def _validate_sample_size(sample_size: Any, n_groups: Any = 1) -> _ValidationResult:
    """Validate sample size and group count.

    Requires integers with ``sample_size >= n_groups >= 1``. A warning is
    attached when groups end up with fewer than 5 observations on average.
    """
    errors: List[str] = []
    warnings: List[str] = []

    for value, name in [(sample_size, "sample_size"), (n_groups, "n_groups")]:
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
            errors.append(f"{name} must be an integer, got {type(value).__name__}")
        elif value < 1:
            errors.append(f"{name} must be at least 1, got {value}")

    if errors:
        return _ValidationResult(False, errors, warnings)

    if n_groups > sample_size:
        errors.append(f"n_groups ({n_groups}) cannot exceed sample_size ({sample_size})")
    elif sample_size / n_groups < 5:
        warnings.append(
            f"Only {sample_size / n_groups:.1f} observations per group on average. Group intercepts will be poorly estimated."
        )

    return _ValidationResult(len(errors) == 0, errors, warnings)


def _validate_rates(lam: np.ndarray) -> _ValidationResult:
    """Validate strictly positive, finite Poisson rates."""
    errors = []
    lam = np.asarray(lam, dtype=float)

    if lam.size and not np.all(np.isfinite(lam)):
        errors.append("Poisson rate must be finite")
    elif lam.size and np.any(lam <= 0):
        errors.append(f"Zero-truncated Poisson requires rate > 0, got min rate {lam.min()}")

    return _ValidationResult(len(errors) == 0, errors, [])


def _validate_open_probabilities(p: np.ndarray, name: str = "probability") -> _ValidationResult:
    """Validate that every probability lies strictly inside (0, 1).

    Used after a logistic transform, where an exact 0 or 1 signals
    floating-point overflow of the linear predictor.
    """
    errors = []
    p = np.asarray(p, dtype=float)
    finite = p[~np.isnan(p)]

    if finite.size and (np.any(finite <= 0.0) or np.any(finite >= 1.0)):
        n_bad = int(np.sum((finite <= 0.0) | (finite >= 1.0)))
        errors.append(f"{name} must lie strictly inside (0, 1); {n_bad} value(s) overflowed to the boundary")

    return _ValidationResult(len(errors) == 0, errors, [])


def _validate_equal_length(a: np.ndarray, b: np.ndarray, names=("presence", "positive")) -> _ValidationResult:
    """Validate that two positional prediction vectors have the same length."""
    if len(a) != len(b):
        return _ValidationResult(
            False,
            [f"{names[0]} ({len(a)}) and {names[1]} ({len(b)}) predictions must have the same length"],
            [],
        )
    return _ValidationResult(True, [], [])


def _validate_n_replicates(n_replicates: Any) -> _ValidationResult:
    """Validate the number of Monte Carlo replicates."""
    errors: List[str] = []
    warnings: List[str] = []

    if isinstance(n_replicates, bool) or not isinstance(n_replicates, (int, np.integer)):
        errors.append(f"n_replicates must be an integer, got {type(n_replicates).__name__}")
    elif n_replicates < 1:
        errors.append(f"n_replicates must be at least 1, got {n_replicates}")
    elif n_replicates < 100:
        warnings.append(f"Low replicate count ({n_replicates}). Consider using at least 100 for stable model-selection rates.")

    return _ValidationResult(len(errors) == 0, errors, warnings)
