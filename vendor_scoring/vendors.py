# vendors.py
"""Vendor master records, periodic evaluations and the consolidated procurement score."""

import logging
import math
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Dict, List, Optional

import pandas as pd

from .config import check_number, pick
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

VENDOR_STATUSES = ('Aktif', 'Nonaktif', 'Blacklist')
PERFORMANCE_TRENDS = ('up', 'down', 'stable')

TREND_MODIFIERS = {'up': 10, 'down': -10, 'stable': 0}

# Each dimension is rated on a 1-5 scale
EVALUATION_DIMENSIONS = ('quality', 'price', 'delivery', 'communication')


@dataclass(frozen=True)
class Evaluation:
    quality: float
    price: float
    delivery: float
    communication: float
    date: Optional[str] = None
    comment: str = ''

    def __post_init__(self):
        for dimension in EVALUATION_DIMENSIONS:
            check_number(getattr(self, dimension), f"evaluation {dimension}",
                         minimum=1, maximum=5)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Evaluation':
        missing = [d for d in EVALUATION_DIMENSIONS if d not in data]
        if missing:
            raise ConfigurationError(f"Evaluation is missing {missing}")
        return cls(
            quality=data['quality'],
            price=data['price'],
            delivery=data['delivery'],
            communication=data['communication'],
            date=data.get('date'),
            comment=data.get('comment') or '',
        )


@dataclass(frozen=True)
class Vendor:
    id: str
    name: str
    rating: float  # 0-5, 0 until first evaluated
    review_count: int = 0
    status: str = 'Aktif'
    performance_trend: str = 'stable'
    category: str = ''
    product: str = ''
    phone: str = ''
    email: str = ''
    address: str = ''
    last_evaluated: Optional[str] = None
    evaluations: List[Evaluation] = field(default_factory=list)

    def __post_init__(self):
        check_number(self.rating, f"{self.name}: rating", minimum=0, maximum=5)
        check_number(self.review_count, f"{self.name}: review_count", minimum=0)
        if self.status not in VENDOR_STATUSES:
            raise ConfigurationError(f"Unknown vendor status: {self.status!r}")
        if self.performance_trend not in PERFORMANCE_TRENDS:
            raise ConfigurationError(f"Unknown performance trend: {self.performance_trend!r}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Vendor':
        """Builds a vendor from a stored record (snake_case or camelCase keys)"""
        return cls(
            id=str(data['id']),
            name=data.get('name', str(data['id'])),
            rating=data.get('rating', 0),
            review_count=pick(data, 'review_count', 'reviewCount', default=0),
            status=data.get('status', 'Aktif'),
            performance_trend=pick(data, 'performance_trend', 'performanceTrend',
                                   default='stable'),
            category=data.get('category', ''),
            product=pick(data, 'product', 'produk', default=''),
            phone=data.get('phone', ''),
            email=data.get('email') or '',
            address=data.get('address', ''),
            last_evaluated=pick(data, 'last_evaluated', 'lastEvaluated'),
            evaluations=[Evaluation.from_dict(e) for e in data.get('evaluations', [])],
        )


def evaluate_vendor(vendor: Vendor, evaluation: Evaluation,
                    today: Optional[date] = None) -> Vendor:
    """
    Records a new evaluation and recomputes the vendor's rating

    The evaluation is stamped with today's date. Each dimension is averaged
    over every evaluation the vendor has received, and the new rating is the
    mean of those four averages, rounded to 2 decimals. The performance trend
    compares the unrounded new rating with the previous rating.

    Args:
        vendor: Vendor to evaluate
        evaluation: Scores for quality, price, delivery and communication
        today: Evaluation date (defaults to date.today())

    Returns:
        Copy of the vendor with the evaluation appended
    """
    stamp = (today or date.today()).isoformat()
    evaluations = vendor.evaluations + [replace(evaluation, date=stamp)]

    averages = pd.DataFrame(
        [[getattr(e, d) for d in EVALUATION_DIMENSIONS] for e in evaluations],
        columns=list(EVALUATION_DIMENSIONS),
        dtype='float64',
    ).mean()
    new_rating = float(averages.mean())

    if new_rating > vendor.rating:
        trend = 'up'
    elif new_rating < vendor.rating:
        trend = 'down'
    else:
        trend = 'stable'

    logger.debug("Vendor %s rating %.2f -> %.2f (%s)", vendor.id, vendor.rating, new_rating, trend)
    return replace(
        vendor,
        rating=round(new_rating, 2),
        review_count=len(evaluations),
        last_evaluated=stamp,
        evaluations=evaluations,
        performance_trend=trend,
    )


def calculate_procurement_score(vendor: Vendor) -> int:
    """
    Consolidated 0-100 score of a vendor

    rating * 20, plus 10 for an upward trend (minus 10 for a downward one),
    plus one point per two evaluations up to 10. The sum is clamped to
    0-100 and halved for inactive vendors. Blacklisted vendors score 0.
    """
    if vendor.status == 'Blacklist':
        return 0

    score = vendor.rating * 20
    score += TREND_MODIFIERS[vendor.performance_trend]
    score += min(10, int(vendor.review_count) // 2)
    score = max(0, min(100, score))

    if vendor.status == 'Nonaktif':
        score *= 0.5

    # round half up
    return int(math.floor(score + 0.5))
