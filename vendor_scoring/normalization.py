# normalization.py
"""Min-max normalization of raw metrics onto a [0, 1] desirability scale."""

import pandas as pd


def normalize(value: float, minimum: float, maximum: float,
              higher_is_better: bool = False) -> float:
    """
    Maps a raw metric value onto [0, 1] relative to the observed range

    Args:
        value: Raw value of one candidate
        minimum: Smallest value of the metric across the candidate set
        maximum: Largest value of the metric across the candidate set
        higher_is_better: If False (price, lead time, payment terms), the
            lowest value gets 1.0; if True (warranty), the highest does

    Returns:
        Desirability in [0, 1]. When every candidate has the same value the
        metric carries no information and everyone gets 1.0.
    """
    if maximum == minimum:
        return 1.0

    span = maximum - minimum
    if higher_is_better:
        return (value - minimum) / span
    return (maximum - value) / span


def normalize_series(values: pd.Series, higher_is_better: bool = False) -> pd.Series:
    """Applies normalize() to a column using the column's own min and max"""
    if values.empty:
        return pd.Series(dtype='float64', index=values.index)

    minimum, maximum = values.min(), values.max()
    if maximum == minimum:
        return pd.Series(1.0, index=values.index)

    if higher_is_better:
        return (values - minimum) / (maximum - minimum)
    return (maximum - values) / (maximum - minimum)
