"""
Parsing utilities for study configuration.

This module parses the comma-separated ``name=value`` strings accepted by
``set_effects()``, e.g. ``"intercept=1, slope=0.5, pz=0.3"``.
"""

import math
from typing import Dict, List, Mapping, Tuple, Union

__all__ = []


class _AssignmentParser:
    """Parses comma-separated ``name=value`` assignment strings.

    Every value must be a finite number. Names are checked against the
    parameters the calling study accepts.

    A module-level singleton ``_parser`` is used throughout the codebase.
    """

    def _parse(self, input_string: str, available_items: List[str]) -> Tuple[Dict[str, float], List[str]]:
        """Parse a comma-separated assignment string.

        Args:
            input_string: Raw user input (e.g. ``"intercept=1, pz=0.3"``).
            available_items: Valid names that may appear on the left-hand
                side of assignments.

        Returns:
            Tuple of ``(parsed_dict, error_list)``.
        """
        parsed_items: Dict[str, float] = {}
        errors: List[str] = []

        if not input_string or not input_string.strip():
            return parsed_items, ["Empty assignment string"]

        for assignment in self._split_assignments(input_string):
            try:
                name, value = self._parse_assignment(assignment)
            except ValueError as e:
                errors.append(str(e))
                continue

            if name not in available_items:
                errors.append(f"'{name}' not found. Available: {', '.join(available_items)}")
                continue
            if name in parsed_items:
                errors.append(f"'{name}' assigned more than once")
                continue

            parsed_value, error = self._parse_effect_value(value)
            if error:
                errors.append(f"{name}: {error}")
                continue

            parsed_items[name] = parsed_value

        return parsed_items, errors

    def _split_assignments(self, input_string: str) -> List[str]:
        """Split on commas, dropping empty pieces."""
        return [part.strip() for part in input_string.split(",") if part.strip()]

    def _parse_assignment(self, assignment: str) -> Tuple[str, str]:
        """Parse single assignment into name and value parts."""
        if "=" not in assignment:
            raise ValueError(f"Invalid format: '{assignment}'. Expected 'name=value'")

        name, value = assignment.split("=", 1)
        return name.strip(), value.strip()

    def _parse_effect_value(self, value: str) -> Tuple[float, Union[str, None]]:
        """Parse a numeric value."""
        try:
            number = float(value)
        except ValueError:
            return 0.0, f"Invalid value '{value}'. Must be a number"
        if not math.isfinite(number):
            return 0.0, f"Invalid value '{value}'. Must be finite"
        return number, None


_parser = _AssignmentParser()


def _parse_effects(effects: Union[str, Mapping[str, float]], available: List[str]) -> Tuple[Dict[str, float], List[str]]:
    """Parse effects given either as an assignment string or a mapping."""
    if isinstance(effects, str):
        return _parser._parse(effects, available)

    if isinstance(effects, Mapping):
        as_string = ", ".join(f"{name}={value}" for name, value in effects.items())
        return _parser._parse(as_string, available)

    return {}, [f"effects must be a string or a mapping, got {type(effects).__name__}"]
