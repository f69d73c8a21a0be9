"""
Value normalisation shared by the collectors.

RouterOS reports everything as text: durations like "3d3h42m53s",
comma-joined tx/rx pairs like "1024,2048", and enumerated states.
These helpers turn that text into floats, and build the metric
descriptions collectors hand out.
"""

from __future__ import annotations

import math
import re
from typing import Mapping, Optional, Sequence

from mikrotik_exporter.metrics import MetricDescription

# Weeks, days, hours, minutes, seconds, milliseconds; each part optional
_DURATION_RE = re.compile(r"(?:(\d*)w)?(?:(\d*)d)?(?:(\d*)h)?(?:(\d*)m)?(?:(\d*)s)?(?:(\d*)ms)?")
_DURATION_WEIGHTS = (604800, 86400, 3600, 60, 1, 0.001)


class PairParseError(ValueError):
    """A comma-joined pair could not be split into two floats."""

    def __init__(self, value: str, reason: str):
        super().__init__(f"cannot split {value!r} into two floats: {reason}")
        self.value = value
        self.result = (math.nan, math.nan)


def parse_duration(value: str) -> float:
    """Convert a RouterOS duration string into seconds.

    Missing parts count as zero, so "" and "s" are 0. Anything the
    pattern cannot consume entirely (e.g. a bare "59") raises ValueError.
    """
    match = _DURATION_RE.fullmatch(value)
    if match is None:
        raise ValueError(f"invalid duration {value!r}")

    total = 0.0
    for part, weight in zip(match.groups(), _DURATION_WEIGHTS):
        if part:
            total += int(part) * weight
    return total


def split_pair_to_floats(value: str) -> tuple[float, float]:
    """Split "a,b" into (a, b). Tokens after the second are ignored."""
    parts = value.split(",")
    if len(parts) < 2:
        raise PairParseError(value, "expected two comma separated values")
    try:
        return float(parts[0]), float(parts[1])
    except ValueError as e:
        raise PairParseError(value, str(e)) from e


def metric_string_cleanup(name: str) -> str:
    return name.replace("-", "_")


def description(
    subsystem: str,
    name: str,
    help_text: str,
    label_names: Sequence[str],
) -> MetricDescription:
    return MetricDescription(
        subsystem=subsystem,
        name=metric_string_cleanup(name),
        help_text=help_text,
        label_names=tuple(label_names),
    )


def description_for_property(
    subsystem: str,
    prop: str,
    label_names: Sequence[str],
    help_text: Optional[str] = None,
) -> MetricDescription:
    """Description for a router property; help text defaults to the property name."""
    return description(subsystem, prop, help_text or prop, label_names)


def reply_value(value) -> str:
    """Turn a decoded API value back into its RouterOS text form.

    librouteros converts "true"/"yes" to True and digit strings to int;
    collectors work on the text so they apply one set of rules.
    """
    if value is None:
        return ""
    if value is True:
        return "true"
    if value is False:
        return "false"
    return str(value)


def lookup_value(value: str, mapping: Mapping[str, float], default: Optional[float] = None) -> float:
    """Map an enumerated router value to a number.

    Unknown values fall back to `default`, or raise ValueError when
    there is none.
    """
    if value in mapping:
        return mapping[value]
    if default is None:
        raise ValueError(f"unexpected value {value!r}, expected one of {sorted(mapping)}")
    return default


def strip_suffix(value: str, separator: str = "@") -> str:
    """Drop a RouterOS "@interface" suffix, e.g. "5,4@wlan1" -> "5,4"."""
    return value.split(separator, 1)[0]
