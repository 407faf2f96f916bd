# criteria.py
from abc import ABC, abstractmethod
from typing import Any, Dict

import pandas as pd

from .normalization import normalize_series


# Fixed comparison metrics: column -> (display name, higher_is_better)
COMPARISON_METRICS = {
    'price': ('Price', False),
    'lead_time': ('Lead Time', False),
    'warranty': ('Warranty', True),
    'payment_terms': ('Payment Terms', False),
}


class CriterionBase(ABC):
    """Base class for all scoring criteria"""

    def __init__(self, name: str, weight: float, **kwargs):
        self.name = name
        self.weight = weight
        self.config = kwargs
        self._statistics = {}

    def calculate_statistics(self, values: pd.Series) -> Dict[str, Any]:
        """Statistics of the raw values, ignoring absent entries"""
        present = values.dropna()
        if present.empty:
            return {'count': 0}
        return {
            'count': int(present.count()),
            'min': present.min(),
            'max': present.max(),
            'mean': present.mean(),
        }

    @abstractmethod
    def evaluate(self, values: pd.Series) -> pd.Series:
        """Returns each candidate's weighted contribution for this criterion"""
        pass


class MinMaxCriterion(CriterionBase):
    """Min-max normalized metric scaled by the criterion weight"""

    def evaluate(self, values: pd.Series) -> pd.Series:
        self._statistics = self.calculate_statistics(values)

        higher_is_better = self.config.get('higher_is_better', False)
        return normalize_series(values, higher_is_better=higher_is_better) * self.weight

