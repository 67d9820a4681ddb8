# -*- coding: utf-8 -*-
"""
Uncertainty by data provenance and the confidence labels derived from it.

    >>> uncertainty_of(DataSource.SECONDARY_RESEARCH)
    0.2
    >>> confidence_level(0.2)
    'high'
"""

from enum import Enum
from typing import Iterable, Union

from foodprint.data.records import DataSource


class ConfidenceLevel(str, Enum):
    VERY_HIGH = "very high"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    VERY_LOW = "very low"


DEFAULT_UNCERTAINTY = 0.25

UNCERTAINTY_BY_SOURCE = {
    DataSource.PRIMARY_RESEARCH: 0.10,
    DataSource.SECONDARY_RESEARCH: 0.20,
    DataSource.AI_ESTIMATED: 0.25,
    DataSource.EXTRAPOLATED: 0.30,
    DataSource.ERROR: 0.50,
    DataSource.ERROR_FALLBACK: 0.50,
}

# Upper bound (inclusive) of uncertainty for each label
_LEVEL_BOUNDS = (
    (0.1, ConfidenceLevel.VERY_HIGH),
    (0.2, ConfidenceLevel.HIGH),
    (0.3, ConfidenceLevel.MEDIUM),
    (0.4, ConfidenceLevel.LOW),
)

LEVEL_SCORES = {
    ConfidenceLevel.VERY_HIGH: 0.9,
    ConfidenceLevel.HIGH: 0.75,
    ConfidenceLevel.MEDIUM: 0.5,
    ConfidenceLevel.LOW: 0.25,
    ConfidenceLevel.VERY_LOW: 0.1,
}

# Lower bound (inclusive) of the mean score for each label
_SCORE_BOUNDS = (
    (0.8, ConfidenceLevel.VERY_HIGH),
    (0.6, ConfidenceLevel.HIGH),
    (0.4, ConfidenceLevel.MEDIUM),
    (0.2, ConfidenceLevel.LOW),
)


def uncertainty_of(data_source: Union[DataSource, str, None]) -> float:
    """Relative uncertainty (fraction of the estimate) for a data source."""
    try:
        return UNCERTAINTY_BY_SOURCE[DataSource(data_source)]
    except (ValueError, KeyError):
        return DEFAULT_UNCERTAINTY


def confidence_level(uncertainty: float) -> str:
    for bound, level in _LEVEL_BOUNDS:
        if uncertainty <= bound:
            return level.value
    return ConfidenceLevel.VERY_LOW.value


def overall_confidence(levels: Iterable[str]) -> str:
    """
    Combine per-ingredient labels into one dish-level label.

    Labels are scored, averaged and mapped back. No labels (or only
    unrecognised ones) gives "very low".
    """
    scores = []
    for level in levels:
        try:
            scores.append(LEVEL_SCORES[ConfidenceLevel(level)])
        except ValueError:
            continue
    if not scores:
        return ConfidenceLevel.VERY_LOW.value

    mean = sum(scores) / len(scores)
    for bound, level in _SCORE_BOUNDS:
        if mean >= bound:
            return level.value
    return ConfidenceLevel.VERY_LOW.value
