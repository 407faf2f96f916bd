# aggregation.py
"""Combining per-criterion scores into one total per candidate."""

import math
from typing import Mapping, Optional

import pandas as pd


def fixed_contribution_total(contributions: pd.DataFrame) -> pd.Series:
    """
    Sums weighted contributions row by row (comparison model)

    Each column holds normalized desirability already multiplied by its
    weight. With weights summing to 100 the total is on a 0-100 scale.

    Args:
        contributions: One row per candidate, one column per criterion

    Returns:
        Series of totals indexed like the input
    """
    if contributions.empty:
        return pd.Series(dtype='float64', index=contributions.index)
    return contributions.sum(axis=1).astype('float64')


def normalized_weight_score(scores: Mapping[str, Optional[float]],
                            weights: Mapping[str, float],
                            input_scale: float = 10.0) -> float:
    """
    Weighted percentage over the criteria that actually received a score

    Args:
        scores: criterion id -> raw score (0..input_scale). Missing or None
            entries are treated as absent, not as zero.
        weights: criterion id -> weight. Scores for ids without a weight
            are ignored.
        input_scale: Maximum raw score (default 10)

    Returns:
        0-100 percentage, or 0.0 when no weighted criterion was scored

    Example:
        normalized_weight_score({'c1': 10}, {'c1': 20, 'c2': 80}) == 100.0
    """
    total_score = 0.0
    total_weight = 0.0

    for criterion_id, score in scores.items():
        if score is None or (isinstance(score, float) and math.isnan(score)):
            continue
        weight = weights.get(criterion_id)
        if weight is None:
            continue
        total_score += (score / input_scale) * weight
        total_weight += weight

    if total_weight > 0:
        return total_score / total_weight * 100
    return 0.0
