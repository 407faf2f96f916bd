"""
Vendor Scoring Library
Multi-criteria vendor comparison and tender scoring for procurement
"""

__version__ = "0.1.0"

from .exceptions import ConfigurationError, TenderStateError

from .normalization import normalize, normalize_series

from .criteria import (
    COMPARISON_METRICS,
    CriterionBase,
    MinMaxCriterion,
)

from .aggregation import fixed_contribution_total, normalized_weight_score

from .ranking import AwardDecision, rank_candidates, select_winner

from .comparison import (
    Weights,
    ComparisonVendor,
    ComparisonProject,
    ComparisonRanker,
    vendors_to_frame,
    rank_vendors,
)

from .tender import (
    TenderStatus,
    ScoringCriterion,
    BidScore,
    BidDetail,
    Bid,
    Tender,
    calculate_weighted_score,
    rank_bids,
    award_tender,
    change_status,
)

from .vendors import Evaluation, Vendor, calculate_procurement_score, evaluate_vendor

from .pricing import (
    PriceRecord,
    PricedItem,
    new_priced_item,
    update_item_price,
    compare_vendor_prices,
)

from .store import ProcurementStore

__all__ = [
    "ConfigurationError",
    "TenderStateError",
    "normalize",
    "normalize_series",
    "COMPARISON_METRICS",
    "CriterionBase",
    "MinMaxCriterion",
    "fixed_contribution_total",
    "normalized_weight_score",
    "AwardDecision",
    "rank_candidates",
    "select_winner",
    "Weights",
    "ComparisonVendor",
    "ComparisonProject",
    "ComparisonRanker",
    "vendors_to_frame",
    "rank_vendors",
    "TenderStatus",
    "ScoringCriterion",
    "BidScore",
    "BidDetail",
    "Bid",
    "Tender",
    "calculate_weighted_score",
    "rank_bids",
    "award_tender",
    "change_status",
    "Evaluation",
    "Vendor",
    "calculate_procurement_score",
    "evaluate_vendor",
    "PriceRecord",
    "PricedItem",
    "new_priced_item",
    "update_item_price",
    "compare_vendor_prices",
    "ProcurementStore",
]
