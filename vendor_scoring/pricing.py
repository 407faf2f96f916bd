# pricing.py
"""Price tracking of purchased items and per-vendor price comparison."""

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from .config import check_number, pick
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ITEM_STATUSES = ('Aktif', 'Nonaktif')
PRICE_TRENDS = ('up', 'down', 'stable')

UNKNOWN_VENDOR = 'Unknown Vendor'

COMPARISON_COLUMNS = ['vendor_id', 'vendor_name', 'latest_price', 'latest_date', 'vendor_rating']


@dataclass(frozen=True)
class PriceRecord:
    """One quoted price of an item"""

    date: str
    price: float
    vendor_id: str
    vendor_name: str = UNKNOWN_VENDOR

    def __post_init__(self):
        check_number(self.price, f"price from vendor '{self.vendor_id}'", minimum=0)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PriceRecord':
        return cls(
            date=str(data['date']),
            price=data.get('price'),
            vendor_id=str(pick(data, 'vendor_id', 'vendorId')),
            vendor_name=pick(data, 'vendor_name', 'vendorName', default=UNKNOWN_VENDOR),
        )


@dataclass(frozen=True)
class PricedItem:
    id: str
    name: str
    last_price: float
    last_vendor_id: str
    last_vendor_name: str = UNKNOWN_VENDOR
    last_update: Optional[str] = None
    price_trend: str = 'stable'
    category: str = ''
    status: str = 'Aktif'
    history: List[PriceRecord] = field(default_factory=list)

    def __post_init__(self):
        check_number(self.last_price, f"{self.name}: last_price", minimum=0)
        if self.status not in ITEM_STATUSES:
            raise ConfigurationError(f"Unknown item status: {self.status!r}")
        if self.price_trend not in PRICE_TRENDS:
            raise ConfigurationError(f"Unknown price trend: {self.price_trend!r}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PricedItem':
        """
        Builds an item from a stored record

        Example:
            {'id': 'p2', 'name': 'Tepung Terigu Curah', 'lastPrice': 8300,
             'lastVendorId': 'v4', 'lastVendorName': 'Toko Sembako Jaya',
             'lastUpdate': '2024-07-20', 'priceTrend': 'down',
             'history': [{'date': '2024-02-15', 'price': 8000, 'vendorId': 'v3', ...}]}
        """
        return cls(
            id=str(data['id']),
            name=data.get('name', str(data['id'])),
            category=data.get('category', ''),
            status=data.get('status', 'Aktif'),
            last_price=pick(data, 'last_price', 'lastPrice'),
            last_vendor_id=str(pick(data, 'last_vendor_id', 'lastVendorId', default='')),
            last_vendor_name=pick(data, 'last_vendor_name', 'lastVendorName',
                                  default=UNKNOWN_VENDOR),
            last_update=pick(data, 'last_update', 'lastUpdate'),
            price_trend=pick(data, 'price_trend', 'priceTrend', default='stable'),
            history=[PriceRecord.from_dict(r) for r in data.get('history', [])],
        )


def price_trend(old_price: float, new_price: float) -> str:
    if new_price > old_price:
        return 'up'
    if new_price < old_price:
        return 'down'
    return 'stable'


def new_priced_item(item_id: str, name: str, initial_price: float, vendor_id: str,
                    vendor_name: str = UNKNOWN_VENDOR, category: str = '',
                    status: str = 'Aktif', today: Optional[date] = None) -> PricedItem:
    """Creates an item whose history holds its first quoted price"""
    stamp = (today or date.today()).isoformat()
    record = PriceRecord(date=stamp, price=initial_price,
                         vendor_id=vendor_id, vendor_name=vendor_name)
    return PricedItem(
        id=item_id,
        name=name,
        category=category,
        status=status,
        last_price=initial_price,
        last_vendor_id=vendor_id,
        last_vendor_name=vendor_name,
        last_update=stamp,
        price_trend='stable',
        history=[record],
    )


def update_item_price(item: PricedItem, new_price: float, vendor_id: str,
                      vendor_name: str = UNKNOWN_VENDOR,
                      today: Optional[date] = None) -> PricedItem:
    """
    Records a new quoted price for an item

    The trend compares the new price with the item's last price, whichever
    vendor quoted it. The quote is appended to the history.

    Returns:
        Copy of the item with the new price as its last price
    """
    stamp = (today or date.today()).isoformat()
    record = PriceRecord(date=stamp, price=new_price,
                         vendor_id=vendor_id, vendor_name=vendor_name)
    trend = price_trend(item.last_price, new_price)

    logger.debug("Item %s price %s -> %s (%s)", item.id, item.last_price, new_price, trend)
    return replace(
        item,
        last_price=new_price,
        last_vendor_id=vendor_id,
        last_vendor_name=vendor_name,
        last_update=stamp,
        price_trend=trend,
        history=item.history + [record],
    )


def compare_vendor_prices(item: PricedItem, vendors: Optional[Iterable] = None) -> pd.DataFrame:
    """
    Latest price of each vendor that quoted the item, cheapest first

    The latest quote is the one with the latest date; among quotes on the
    same date the one recorded last wins. Vendors with equal latest prices
    keep the order in which they first appear in the history.

    Args:
        item: Priced item with its quote history
        vendors: Vendor records used to look up each vendor's rating
            (0 for vendors not found)

    Returns:
        DataFrame with vendor_id, vendor_name, latest_price, latest_date
        and vendor_rating
    """
    if not item.history:
        return pd.DataFrame(columns=COMPARISON_COLUMNS)

    history = pd.DataFrame(
        [[r.vendor_id, r.vendor_name, r.price, r.date] for r in item.history],
        columns=COMPARISON_COLUMNS[:4],
    )
    history['_order'] = history.groupby('vendor_id', sort=False).ngroup()

    latest = (history.sort_values('latest_date', kind='mergesort')
              .groupby('vendor_id', sort=False)
              .tail(1))

    ratings = {v.id: v.rating for v in vendors or []}
    latest = latest.assign(
        vendor_rating=latest['vendor_id'].map(ratings).fillna(0.0).astype('float64')
    )

    result = latest.sort_values(['latest_price', '_order'], kind='mergesort')
    return result[COMPARISON_COLUMNS].reset_index(drop=True)
