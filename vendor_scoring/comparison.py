# comparison.py
"""Vendor comparison: ranks project vendors on price, lead time, warranty and payment terms."""

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

import pandas as pd

from .aggregation import fixed_contribution_total
from .config import check_number, load_config, pick
from .criteria import COMPARISON_METRICS, CriterionBase, MinMaxCriterion
from .exceptions import ConfigurationError
from .ranking import rank_candidates

logger = logging.getLogger(__name__)

# camelCase keys used by stored application records
_METRIC_ALIASES = {
    'price': ('price',),
    'lead_time': ('lead_time', 'leadTime'),
    'warranty': ('warranty',),
    'payment_terms': ('payment_terms', 'paymentTerms'),
}

VENDOR_COLUMNS = ['id', 'name'] + list(COMPARISON_METRICS)


@dataclass(frozen=True)
class Weights:
    """Percentage weights of the four comparison metrics. Must sum to 100."""

    price: float
    lead_time: float
    warranty: float
    payment_terms: float

    def __post_init__(self):
        for metric in COMPARISON_METRICS:
            check_number(getattr(self, metric), f"weight '{metric}'", minimum=0)
        if not math.isclose(self.total, 100.0, abs_tol=1e-9):
            raise ConfigurationError(f"Weights must sum to 100, got {self.total:g}")

    @property
    def total(self) -> float:
        return sum(getattr(self, metric) for metric in COMPARISON_METRICS)

    def as_dict(self) -> Dict[str, float]:
        return {metric: getattr(self, metric) for metric in COMPARISON_METRICS}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Weights':
        """Build from a mapping; accepts snake_case or camelCase keys"""
        values = {}
        for metric, aliases in _METRIC_ALIASES.items():
            value = pick(data, *aliases)
            if value is None:
                raise ConfigurationError(f"Missing weight for '{metric}'")
            values[metric] = value
        return cls(**values)


@dataclass(frozen=True)
class ComparisonVendor:
    """A vendor offer inside a comparison project."""

    id: str
    name: str
    price: float
    lead_time: float  # days
    warranty: float  # months
    payment_terms: float  # days

    def __post_init__(self):
        for metric in COMPARISON_METRICS:
            check_number(getattr(self, metric), f"{self.name}: '{metric}'", minimum=0)

    def as_dict(self) -> Dict[str, Any]:
        return {column: getattr(self, column) for column in VENDOR_COLUMNS}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ComparisonVendor':
        metrics = {metric: pick(data, *aliases) for metric, aliases in _METRIC_ALIASES.items()}
        return cls(id=str(data['id']), name=data.get('name', str(data['id'])), **metrics)


@dataclass(frozen=True)
class ComparisonProject:
    """A named comparison with its weights and vendor offers."""

    id: str
    name: str
    weights: Weights
    vendors: List[ComparisonVendor] = field(default_factory=list)
    description: str = ''
    created_at: Optional[str] = None
    deadline: Optional[str] = None

    def is_overdue(self, today: Optional[date] = None) -> bool:
        """True once the deadline has passed"""
        if not self.deadline:
            return False
        today = today or date.today()
        return date.fromisoformat(self.deadline) < today

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'ComparisonProject':
        """
        Create a project from a configuration dictionary

        Example:
            config = {
                'id': 'proj-1',
                'name': 'Office laptops 2025',
                'weights': {'price': 50, 'leadTime': 20, 'warranty': 20, 'paymentTerms': 10},
                'vendors': [
                    {'id': 'v1', 'name': 'PT Sinar Jaya', 'price': 12500000,
                     'leadTime': 14, 'warranty': 24, 'paymentTerms': 30},
                ]
            }
        """
        return cls(
            id=str(config['id']),
            name=config.get('name', str(config['id'])),
            description=config.get('description', ''),
            weights=Weights.from_dict(config.get('weights', {})),
            vendors=[ComparisonVendor.from_dict(v) for v in config.get('vendors', [])],
            created_at=pick(config, 'created_at', 'createdAt'),
            deadline=config.get('deadline'),
        )


def vendors_to_frame(vendors: List[ComparisonVendor]) -> pd.DataFrame:
    """One row per vendor with the id, name and metric columns"""
    return pd.DataFrame([v.as_dict() for v in vendors], columns=VENDOR_COLUMNS)


class ComparisonRanker:
    """Ranks vendors by weighted, min-max normalized metrics"""

    def __init__(self, weights: Weights):
        """
        Args:
            weights: Validated metric weights (sum to 100)
        """
        self.weights = weights
        self.criteria: Dict[str, CriterionBase] = {
            metric: MinMaxCriterion(name, getattr(weights, metric),
                                    higher_is_better=higher_is_better)
            for metric, (name, higher_is_better) in COMPARISON_METRICS.items()
        }

    # === Factory methods (from config) ===

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'ComparisonRanker':
        """
        Create ranker from configuration dictionary

        Example:
            ranker = ComparisonRanker.from_config(
                {'weights': {'price': 50, 'lead_time': 20, 'warranty': 20, 'payment_terms': 10}})
        """
        return cls(Weights.from_dict(config.get('weights', {})))

    @classmethod
    def from_yaml(cls, filepath: str) -> 'ComparisonRanker':
        """
        Create ranker from YAML file

        Example YAML:
            weights:
              price: 50
              lead_time: 20
              warranty: 20
              payment_terms: 10
        """
        return cls.from_config(load_config(filepath))

    @classmethod
    def from_json(cls, filepath: str) -> 'ComparisonRanker':
        """Create ranker from JSON file"""
        return cls.from_config(load_config(filepath))

    # === Core methods ===

    def evaluate(self, vendors_df: pd.DataFrame,
                 include_details: bool = True) -> pd.DataFrame:
        """
        Scores and ranks all vendors

        Args:
            vendors_df: DataFrame with price, lead_time, warranty and
                payment_terms columns
            include_details: If True, includes each metric's weighted
                contribution as score_<metric>

        Returns:
            DataFrame sorted by rank with final_score (0-100) and rank
        """
        result = vendors_df.copy()
        logger.debug("Ranking %d vendors", len(result))

        if result.empty:
            if include_details:
                for metric in self.criteria:
                    result[f'score_{metric}'] = pd.Series(dtype='float64')
            result['final_score'] = pd.Series(dtype='float64')
            result['rank'] = pd.Series(dtype='int64')
            return result

        if len(result) == 1:
            # Nothing to compare against
            for metric, criterion in self.criteria.items():
                criterion._statistics = criterion.calculate_statistics(vendors_df[metric])
            if include_details:
                for metric in self.criteria:
                    result[f'score_{metric}'] = 100.0
            result['final_score'] = 100.0
            return rank_candidates(result)

        contributions = pd.DataFrame(
            {metric: criterion.evaluate(vendors_df[metric])
             for metric, criterion in self.criteria.items()},
            index=vendors_df.index,
        )

        if include_details:
            for metric in self.criteria:
                result[f'score_{metric}'] = contributions[metric]

        result['final_score'] = fixed_contribution_total(contributions)
        return rank_candidates(result)

    def get_statistics(self) -> Dict[str, Dict[str, Any]]:
        """Gets statistics of the last evaluated vendor set"""
        statistics = {}

        for criterion in self.criteria.values():
            if criterion._statistics:
                statistics[criterion.name] = criterion._statistics

        return statistics

    def summary(self) -> pd.DataFrame:
        """Returns a summary of the four metrics and their weights"""
        data = []
        for metric, criterion in self.criteria.items():
            data.append({
                'column': metric,
                'criterion_name': criterion.name,
                'higher_is_better': criterion.config.get('higher_is_better', False),
                'weight': criterion.weight,
            })

        return pd.DataFrame(data)


def rank_vendors(project: Optional[ComparisonProject],
                 include_details: bool = True) -> pd.DataFrame:
    """
    Ranked vendors of a project

    Returns an empty frame for a missing project or a project without
    vendors.
    """
    if project is None:
        result = vendors_to_frame([])
        result['final_score'] = pd.Series(dtype='float64')
        result['rank'] = pd.Series(dtype='int64')
        return result

    ranker = ComparisonRanker(project.weights)
    return ranker.evaluate(vendors_to_frame(project.vendors), include_details=include_details)
