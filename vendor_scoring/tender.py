# tender.py
"""Tender scoring: weighted 0-10 criterion scores per bid, ranking and award."""

import logging
import warnings
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from .aggregation import normalized_weight_score
from .config import check_number, load_config, pick
from .exceptions import ConfigurationError, TenderStateError
from .ranking import AwardDecision, rank_candidates, select_winner

logger = logging.getLogger(__name__)

MAX_SCORE = 10

BID_COLUMNS = ['bid_id', 'vendor_id', 'vendor_name', 'price']


class TenderStatus(str, Enum):
    OPEN = 'Open'
    CLOSED = 'Closed'
    AWARDED = 'Awarded'

    @classmethod
    def parse(cls, value) -> 'TenderStatus':
        try:
            return cls(value)
        except ValueError:
            raise ConfigurationError(
                f"Unknown tender status: {value!r}. Use 'Open', 'Closed' or 'Awarded'."
            ) from None


@dataclass(frozen=True)
class ScoringCriterion:
    """A tender-defined evaluation dimension with its weight in percent."""

    id: str
    name: str
    weight: float

    def __post_init__(self):
        check_number(self.weight, f"criterion '{self.name}' weight", minimum=0)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ScoringCriterion':
        return cls(id=str(data['id']), name=data.get('name', str(data['id'])),
                   weight=data.get('weight'))


@dataclass(frozen=True)
class BidScore:
    criterion_id: str
    score: float  # 0-10

    def __post_init__(self):
        check_number(self.score, f"score for criterion '{self.criterion_id}'",
                     minimum=0, maximum=MAX_SCORE)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BidScore':
        return cls(criterion_id=str(pick(data, 'criterion_id', 'criterionId')),
                   score=data.get('score'))


@dataclass(frozen=True)
class BidDetail:
    """The vendor's submission text for one criterion."""

    criterion_id: str
    value: str


@dataclass(frozen=True)
class Bid:
    id: str
    vendor_id: str
    vendor_name: str
    price: float = 0.0
    tender_id: Optional[str] = None
    submission_date: Optional[str] = None
    details: List[BidDetail] = field(default_factory=list)
    scores: List[BidScore] = field(default_factory=list)

    def __post_init__(self):
        seen = set()
        for s in self.scores:
            if s.criterion_id in seen:
                raise ConfigurationError(
                    f"Bid '{self.id}' has more than one score for criterion '{s.criterion_id}'"
                )
            seen.add(s.criterion_id)

    def score_map(self) -> Dict[str, float]:
        """criterion id -> score"""
        return {s.criterion_id: s.score for s in self.scores}

    def with_scores(self, scores: List[BidScore]) -> 'Bid':
        return replace(self, scores=list(scores))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Bid':
        details = [
            BidDetail(criterion_id=str(pick(d, 'criterion_id', 'criterionId')),
                      value=str(d.get('value', '')))
            for d in data.get('details', [])
        ]
        return cls(
            id=str(data['id']),
            vendor_id=str(pick(data, 'vendor_id', 'vendorId')),
            vendor_name=pick(data, 'vendor_name', 'vendorName', default=''),
            price=data.get('price', 0.0),
            tender_id=pick(data, 'tender_id', 'tenderId'),
            submission_date=pick(data, 'submission_date', 'submissionDate'),
            details=details,
            scores=[BidScore.from_dict(s) for s in data.get('scores', [])],
        )


@dataclass(frozen=True)
class Tender:
    """A tender with its weighted criteria, submitted bids and status."""

    id: str
    name: str
    criteria: List[ScoringCriterion] = field(default_factory=list)
    bids: List[Bid] = field(default_factory=list)
    status: TenderStatus = TenderStatus.OPEN
    description: str = ''
    open_date: Optional[str] = None
    close_date: Optional[str] = None
    winning_vendor_id: Optional[str] = None
    winning_vendor_name: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, 'status', TenderStatus.parse(self.status))

    @property
    def total_weight(self) -> float:
        return sum(c.weight for c in self.criteria)

    def criterion(self, criterion_id: str) -> Optional[ScoringCriterion]:
        for c in self.criteria:
            if c.id == criterion_id:
                return c
        return None

    # === Factory methods (from config) ===

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'Tender':
        """
        Create a tender from a configuration dictionary

        Example:
            config = {
                'id': 't1',
                'name': 'Office supplies 2025',
                'status': 'Open',
                'criteria': [
                    {'id': 'c1', 'name': 'Price', 'weight': 40},
                    {'id': 'c2', 'name': 'Quality', 'weight': 60},
                ],
                'bids': [
                    {'id': 'b1', 'vendorId': 'v3', 'vendorName': 'Sumber Bahan Baku',
                     'scores': [{'criterionId': 'c1', 'score': 8}]},
                ]
            }
        """
        criteria = [ScoringCriterion.from_dict(c) for c in config.get('criteria', [])]
        return cls(
            id=str(config['id']),
            name=config.get('name', str(config['id'])),
            description=config.get('description', ''),
            status=TenderStatus.parse(config.get('status', TenderStatus.OPEN.value)),
            open_date=pick(config, 'open_date', 'openDate'),
            close_date=pick(config, 'close_date', 'closeDate'),
            criteria=criteria,
            bids=[Bid.from_dict(b) for b in config.get('bids', [])],
            winning_vendor_id=pick(config, 'winning_vendor_id', 'winningVendorId'),
            winning_vendor_name=pick(config, 'winning_vendor_name', 'winningVendorName'),
        )

    @classmethod
    def from_yaml(cls, filepath: str) -> 'Tender':
        """Create a tender from a YAML file"""
        return cls.from_config(load_config(filepath))

    @classmethod
    def from_json(cls, filepath: str) -> 'Tender':
        """Create a tender from a JSON file"""
        return cls.from_config(load_config(filepath))


def calculate_weighted_score(bid: Bid, criteria: List[ScoringCriterion]) -> float:
    """
    Weighted percentage score of one bid

    Only criteria the bid was scored on count towards the denominator, so
    a bid scored 10/10 on a single criterion gets 100 whatever that
    criterion's weight is. A bid with no scores gets 0.

    Args:
        bid: Bid with 0-10 scores per criterion id
        criteria: The tender's criteria

    Returns:
        Score between 0 and 100
    """
    weights = {c.id: c.weight for c in criteria}
    scores = bid.score_map()

    unknown = sorted(set(scores) - set(weights))
    if unknown:
        warnings.warn(
            f"Bid '{bid.id}' has scores for unknown criteria {unknown}; they are ignored."
        )

    return normalized_weight_score(scores, weights, input_scale=MAX_SCORE)


def rank_bids(tender: Tender, include_details: bool = True) -> pd.DataFrame:
    """
    Scores and ranks all bids of a tender

    Args:
        tender: Tender with criteria and bids
        include_details: If True, includes each raw 0-10 score as
            score_<criterion id> (NaN when unscored)

    Returns:
        DataFrame sorted by rank with bid_id, vendor_id, vendor_name,
        price, final_score and rank
    """
    logger.debug("Ranking %d bids of tender %s", len(tender.bids), tender.id)

    result = pd.DataFrame(
        [[b.id, b.vendor_id, b.vendor_name, b.price] for b in tender.bids],
        columns=BID_COLUMNS,
    )

    if include_details:
        for c in tender.criteria:
            result[f'score_{c.id}'] = pd.Series(
                [b.score_map().get(c.id, np.nan) for b in tender.bids],
                index=result.index, dtype='float64',
            )

    result['final_score'] = pd.Series(
        [calculate_weighted_score(b, tender.criteria) for b in tender.bids],
        index=result.index, dtype='float64',
    )
    return rank_candidates(result)


def award_tender(tender: Tender) -> AwardDecision:
    """
    Awards an open tender to its rank 1 bid

    The decision is refused (awarded=False, with a message) when the tender
    has no bids or the best bid scores exactly 0. On success the decision
    carries a copy of the tender with status Awarded and the winning vendor
    recorded; the tender passed in is left unchanged.

    Raises:
        TenderStateError: If the tender is not Open
    """
    if tender.status != TenderStatus.OPEN:
        raise TenderStateError(
            f"Tender '{tender.id}' is {tender.status.value}; only Open tenders can be awarded."
        )

    decision = select_winner(rank_bids(tender, include_details=False))
    if not decision.awarded:
        return replace(decision, tender=tender)

    winner = decision.winner
    awarded = replace(
        tender,
        status=TenderStatus.AWARDED,
        winning_vendor_id=winner['vendor_id'],
        winning_vendor_name=winner['vendor_name'],
    )
    logger.info("Tender %s awarded to %s (%.2f)",
                tender.id, winner['vendor_name'], decision.final_score)
    return replace(decision, tender=awarded,
                   message=f"Tender awarded to {winner['vendor_name']}.")


def change_status(tender: Tender, status) -> Tender:
    """
    Returns a copy of the tender with a new status

    Only Open <-> Closed is allowed here. Awarded is reached through
    award_tender() and cannot be left.
    """
    status = TenderStatus.parse(status)
    if tender.status == status:
        return tender
    if tender.status == TenderStatus.AWARDED:
        raise TenderStateError(f"Tender '{tender.id}' is already Awarded.")
    if status == TenderStatus.AWARDED:
        raise TenderStateError("Use award_tender() to award a tender.")
    return replace(tender, status=status)
