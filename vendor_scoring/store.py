# store.py
"""In-memory store of comparison projects and tenders."""

import itertools
import logging
import threading
from dataclasses import replace
from datetime import date
from typing import Any, Dict, List, Optional

import pandas as pd

from .comparison import ComparisonProject, ComparisonVendor, Weights, rank_vendors
from .config import load_config
from .exceptions import ConfigurationError, TenderStateError
from .pricing import (
    UNKNOWN_VENDOR,
    PricedItem,
    compare_vendor_prices,
    new_priced_item,
    update_item_price,
)
from .ranking import AwardDecision
from .tender import (
    Bid,
    BidDetail,
    BidScore,
    ScoringCriterion,
    Tender,
    TenderStatus,
    award_tender,
    change_status,
    rank_bids,
)
from .vendors import Evaluation, Vendor, evaluate_vendor

logger = logging.getLogger(__name__)

PROJECT_FIELDS = ('name', 'description', 'weights', 'deadline')
VENDOR_FIELDS = ('name', 'price', 'lead_time', 'warranty', 'payment_terms')
TENDER_FIELDS = ('name', 'description', 'open_date', 'close_date', 'criteria', 'status')


def _check_fields(changes: Dict[str, Any], allowed, kind: str):
    unknown = sorted(set(changes) - set(allowed))
    if unknown:
        raise ConfigurationError(f"Cannot update {kind} fields: {unknown}")


def _to_criteria(criteria) -> List[ScoringCriterion]:
    return [c if isinstance(c, ScoringCriterion) else ScoringCriterion.from_dict(c)
            for c in criteria]


class ProcurementStore:
    """Holds vendors, priced items, projects and tenders and serializes every write.

    Records are immutable; each write swaps in a new record, so rankings
    computed from an earlier snapshot are never affected by later writes.
    """

    def __init__(self, projects: Optional[List[ComparisonProject]] = None,
                 tenders: Optional[List[Tender]] = None,
                 vendors: Optional[List[Vendor]] = None,
                 items: Optional[List[PricedItem]] = None):
        self._lock = threading.RLock()
        self._projects: Dict[str, ComparisonProject] = {p.id: p for p in projects or []}
        self._tenders: Dict[str, Tender] = {t.id: t for t in tenders or []}
        self._vendors: Dict[str, Vendor] = {v.id: v for v in vendors or []}
        self._items: Dict[str, PricedItem] = {i.id: i for i in items or []}
        self._ids = itertools.count(1)

    # === Factory methods ===

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'ProcurementStore':
        """
        Create a store from a configuration dictionary

        Example:
            config = {
                'projects': [{'id': 'proj-1', 'name': 'Laptops', 'weights': {...}, 'vendors': [...]}],
                'tenders': [{'id': 't1', 'name': 'Office supplies', 'criteria': [...], 'bids': [...]}],
                'vendors': [{'id': 'v1', 'name': 'PT Sejuk Abadi', 'rating': 3.8, ...}],
                'items': [{'id': 'p1', 'name': 'Karton Box', 'lastPrice': 2600, ...}],
            }
        """
        return cls(
            projects=[ComparisonProject.from_config(p) for p in config.get('projects', [])],
            tenders=[Tender.from_config(t) for t in config.get('tenders', [])],
            vendors=[Vendor.from_dict(v) for v in config.get('vendors', [])],
            items=[PricedItem.from_dict(i) for i in config.get('items', [])],
        )

    @classmethod
    def from_yaml(cls, filepath: str) -> 'ProcurementStore':
        return cls.from_config(load_config(filepath))

    @classmethod
    def from_json(cls, filepath: str) -> 'ProcurementStore':
        return cls.from_config(load_config(filepath))

    def _used_ids(self) -> set:
        used = set(self._projects) | set(self._tenders) | set(self._vendors) | set(self._items)
        for project in self._projects.values():
            used.update(v.id for v in project.vendors)
        for tender in self._tenders.values():
            used.update(b.id for b in tender.bids)
        return used

    def _next_id(self, prefix: str) -> str:
        """Next counter id not already taken by a stored record; call with the lock held"""
        used = self._used_ids()
        while True:
            candidate = f"{prefix}{next(self._ids)}"
            if candidate not in used:
                return candidate

    # === Vendors ===

    @property
    def vendors(self) -> List[Vendor]:
        with self._lock:
            return list(self._vendors.values())

    def get_vendor(self, vendor_id: str) -> Vendor:
        with self._lock:
            if vendor_id not in self._vendors:
                raise KeyError(f"Unknown vendor: {vendor_id}")
            return self._vendors[vendor_id]

    def add_vendor(self, name: str, status: str = 'Aktif', category: str = '',
                   product: str = '', phone: str = '', email: str = '',
                   address: str = '') -> Vendor:
        """Adds a vendor with no evaluations yet (rating 0, trend stable)"""
        with self._lock:
            vendor = Vendor(
                id=self._next_id('v'),
                name=name,
                rating=0,
                status=status,
                category=category,
                product=product,
                phone=phone,
                email=email,
                address=address,
                last_evaluated=date.today().isoformat(),
            )
            self._vendors[vendor.id] = vendor

        logger.info("Added vendor %s (%s)", vendor.id, name)
        return vendor

    def evaluate_vendor(self, vendor_id: str, evaluation) -> Vendor:
        """Records an evaluation; evaluation may be an Evaluation or a mapping"""
        if not isinstance(evaluation, Evaluation):
            evaluation = Evaluation.from_dict(evaluation)

        with self._lock:
            vendor = evaluate_vendor(self.get_vendor(vendor_id), evaluation)
            self._vendors[vendor_id] = vendor
        return vendor

    def delete_vendor(self, vendor_id: str):
        with self._lock:
            self.get_vendor(vendor_id)
            del self._vendors[vendor_id]
        logger.info("Deleted vendor %s", vendor_id)

    def _vendor_name(self, vendor_id: str) -> str:
        vendor = self._vendors.get(vendor_id)
        return vendor.name if vendor is not None else UNKNOWN_VENDOR

    # === Priced items ===

    @property
    def items(self) -> List[PricedItem]:
        with self._lock:
            return list(self._items.values())

    def get_item(self, item_id: str) -> PricedItem:
        with self._lock:
            if item_id not in self._items:
                raise KeyError(f"Unknown item: {item_id}")
            return self._items[item_id]

    def add_item(self, name: str, initial_price: float, vendor_id: str,
                 category: str = '', status: str = 'Aktif') -> PricedItem:
        """Adds an item with its first quoted price; unknown vendors are named 'Unknown Vendor'"""
        with self._lock:
            item = new_priced_item(
                self._next_id('p'), name, initial_price, vendor_id,
                vendor_name=self._vendor_name(vendor_id),
                category=category, status=status,
            )
            self._items[item.id] = item

        logger.info("Added item %s (%s)", item.id, name)
        return item

    def update_item_price(self, item_id: str, new_price: float, vendor_id: str) -> PricedItem:
        with self._lock:
            item = update_item_price(self.get_item(item_id), new_price, vendor_id,
                                     vendor_name=self._vendor_name(vendor_id))
            self._items[item_id] = item
        return item

    def delete_item(self, item_id: str):
        with self._lock:
            self.get_item(item_id)
            del self._items[item_id]

    def price_comparison(self, item_id: str) -> pd.DataFrame:
        """Latest price per vendor for the item, cheapest first"""
        with self._lock:
            item = self.get_item(item_id)
            vendors = list(self._vendors.values())
        return compare_vendor_prices(item, vendors)

    # === Comparison projects ===

    @property
    def projects(self) -> List[ComparisonProject]:
        with self._lock:
            return list(self._projects.values())

    def get_project(self, project_id: str) -> ComparisonProject:
        with self._lock:
            if project_id not in self._projects:
                raise KeyError(f"Unknown project: {project_id}")
            return self._projects[project_id]

    def add_project(self, name: str, weights, description: str = '',
                    deadline: Optional[str] = None) -> ComparisonProject:
        """Adds an empty project. weights may be a Weights or a mapping."""
        if not isinstance(weights, Weights):
            weights = Weights.from_dict(weights)

        with self._lock:
            project = ComparisonProject(
                id=self._next_id('proj-'),
                name=name,
                description=description,
                weights=weights,
                created_at=date.today().isoformat(),
                deadline=deadline,
            )
            self._projects[project.id] = project

        logger.info("Added project %s (%s)", project.id, name)
        return project

    def update_project(self, project_id: str, **changes) -> ComparisonProject:
        _check_fields(changes, PROJECT_FIELDS, 'project')
        if 'weights' in changes and not isinstance(changes['weights'], Weights):
            changes['weights'] = Weights.from_dict(changes['weights'])

        with self._lock:
            project = replace(self.get_project(project_id), **changes)
            self._projects[project_id] = project
        return project

    def delete_project(self, project_id: str):
        with self._lock:
            self.get_project(project_id)
            del self._projects[project_id]
        logger.info("Deleted project %s", project_id)

    def add_vendor_to_project(self, project_id: str, name: str, price: float,
                              lead_time: float, warranty: float,
                              payment_terms: float) -> ComparisonVendor:
        with self._lock:
            project = self.get_project(project_id)
            vendor = ComparisonVendor(
                id=self._next_id(f"v-{project_id}-"),
                name=name,
                price=price,
                lead_time=lead_time,
                warranty=warranty,
                payment_terms=payment_terms,
            )
            self._projects[project_id] = replace(project, vendors=project.vendors + [vendor])
        return vendor

    def update_vendor_in_project(self, project_id: str, vendor_id: str,
                                 **changes) -> ComparisonVendor:
        _check_fields(changes, VENDOR_FIELDS, 'vendor')

        with self._lock:
            project = self.get_project(project_id)
            vendors = list(project.vendors)
            for i, vendor in enumerate(vendors):
                if vendor.id == vendor_id:
                    vendors[i] = replace(vendor, **changes)
                    break
            else:
                raise KeyError(f"Unknown vendor {vendor_id} in project {project_id}")

            self._projects[project_id] = replace(project, vendors=vendors)
            return vendors[i]

    def delete_vendor_from_project(self, project_id: str, vendor_id: str):
        with self._lock:
            project = self.get_project(project_id)
            vendors = [v for v in project.vendors if v.id != vendor_id]
            if len(vendors) == len(project.vendors):
                raise KeyError(f"Unknown vendor {vendor_id} in project {project_id}")
            self._projects[project_id] = replace(project, vendors=vendors)

    def ranked_vendors(self, project_id: str, include_details: bool = True) -> pd.DataFrame:
        """Ranking of the project's current vendors"""
        return rank_vendors(self.get_project(project_id), include_details=include_details)

    # === Tenders ===

    @property
    def tenders(self) -> List[Tender]:
        with self._lock:
            return list(self._tenders.values())

    def get_tender(self, tender_id: str) -> Tender:
        with self._lock:
            if tender_id not in self._tenders:
                raise KeyError(f"Unknown tender: {tender_id}")
            return self._tenders[tender_id]

    def add_tender(self, name: str, criteria, description: str = '',
                   status=TenderStatus.OPEN, open_date: Optional[str] = None,
                   close_date: Optional[str] = None) -> Tender:
        """Adds a tender; criteria may be ScoringCriterion objects or mappings"""
        criteria = _to_criteria(criteria)
        status = TenderStatus.parse(status)
        if status == TenderStatus.AWARDED:
            raise TenderStateError("A new tender cannot start as Awarded.")

        with self._lock:
            tender = Tender(
                id=self._next_id('t'),
                name=name,
                description=description,
                criteria=list(criteria),
                status=status,
                open_date=open_date,
                close_date=close_date,
            )
            self._tenders[tender.id] = tender

        logger.info("Added tender %s (%s)", tender.id, name)
        return tender

    def update_tender(self, tender_id: str, **changes) -> Tender:
        """Edits tender fields; status changes follow change_status()"""
        _check_fields(changes, TENDER_FIELDS, 'tender')
        if 'criteria' in changes:
            changes['criteria'] = _to_criteria(changes['criteria'])

        with self._lock:
            tender = self.get_tender(tender_id)
            if tender.status == TenderStatus.AWARDED:
                raise TenderStateError(f"Tender '{tender_id}' is Awarded and can no longer change.")

            status = changes.pop('status', None)
            if status is not None:
                tender = change_status(tender, status)
            tender = replace(tender, **changes)
            self._tenders[tender_id] = tender
        return tender

    def _open_tender(self, tender_id: str) -> Tender:
        tender = self.get_tender(tender_id)
        if tender.status != TenderStatus.OPEN:
            raise TenderStateError(
                f"Tender '{tender_id}' is {tender.status.value}; bids can only change while Open."
            )
        return tender

    def add_bid(self, tender_id: str, vendor_id: str, vendor_name: str,
                price: float = 0.0, details: Optional[List[BidDetail]] = None,
                scores: Optional[List[BidScore]] = None,
                submission_date: Optional[str] = None) -> Bid:
        with self._lock:
            tender = self._open_tender(tender_id)
            bid = Bid(
                id=self._next_id('b'),
                tender_id=tender_id,
                vendor_id=vendor_id,
                vendor_name=vendor_name,
                price=price,
                submission_date=submission_date or date.today().isoformat(),
                details=list(details or []),
                scores=list(scores or []),
            )
            self._tenders[tender_id] = replace(tender, bids=tender.bids + [bid])

        logger.info("Added bid %s from %s to tender %s", bid.id, vendor_name, tender_id)
        return bid

    def update_bid_scores(self, tender_id: str, bid_id: str, scores) -> Bid:
        """Replaces a bid's scores; scores may be BidScore objects or mappings"""
        scores = [s if isinstance(s, BidScore) else BidScore.from_dict(s) for s in scores]

        with self._lock:
            tender = self._open_tender(tender_id)
            bids = list(tender.bids)
            for i, bid in enumerate(bids):
                if bid.id == bid_id:
                    bids[i] = bid.with_scores(scores)
                    break
            else:
                raise KeyError(f"Unknown bid {bid_id} in tender {tender_id}")

            self._tenders[tender_id] = replace(tender, bids=bids)
            return bids[i]

    def ranked_bids(self, tender_id: str, include_details: bool = True) -> pd.DataFrame:
        return rank_bids(self.get_tender(tender_id), include_details=include_details)

    def award(self, tender_id: str) -> AwardDecision:
        """Awards the tender and stores the result when the award succeeds"""
        with self._lock:
            decision = award_tender(self.get_tender(tender_id))
            if decision.awarded:
                self._tenders[tender_id] = decision.tender
        return decision
