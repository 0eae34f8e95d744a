# Overview: Internal pricing lookup over saved card sales: weighted average, liquidity, confidence.

"""
Pricing Service

Market value for a card comes from its saved sold listings (card_sales),
grouped by the catalog card_id so every certificate of the same card shares
one price history.

- averagePrice: weighted mean of price + shipping over the last 30 days
  (verified sales weight 1.0, unverified 0.5), falling back to all time
- liquidity: total sales volume bucket
- confidence: 90-day volume, boosted by 180-day history for thin markets,
  scaled down by price dispersion
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass

from ..extensions import db
from ..models import CardSale, GlobalAsset
from ..time_utils import days_ago, to_naive_utc, to_utc_z


logger = logging.getLogger(__name__)


PRICING_WINDOW_DAYS = 30
CONFIDENCE_WINDOW_DAYS = 90
HISTORY_WINDOW_DAYS = 180

VERIFIED_WEIGHT = 1.0
UNVERIFIED_WEIGHT = 0.5

# (minimum total sales, liquidity), checked in order
LIQUIDITY_THRESHOLDS = (
    (50, "fire"),
    (30, "hot"),
    (15, "warm"),
    (5, "cool"),
)

# (minimum 90-day sales, base confidence), checked in order
CONFIDENCE_STEPS = (
    (15, 95),
    (8, 85),
    (5, 70),
    (3, 55),
    (1, 35),
)


class PricingError(Exception):
    """Raised for pricing lookup errors."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


@dataclass
class PricingData:
    average_price: float
    highest_price: float
    lowest_price: float
    liquidity: str
    confidence: int
    last_sale_date: str | None
    sales_count: int
    exit_time: str
    pricing_period: str
    thirty_day_sales_count: int

    def to_dict(self) -> dict:
        data = asdict(self)
        return {
            "averagePrice": data["average_price"],
            "highestPrice": data["highest_price"],
            "lowestPrice": data["lowest_price"],
            "liquidity": data["liquidity"],
            "confidence": data["confidence"],
            "lastSaleDate": data["last_sale_date"],
            "salesCount": data["sales_count"],
            "exitTime": data["exit_time"],
            "pricingPeriod": data["pricing_period"],
            "thirtyDaySalesCount": data["thirty_day_sales_count"],
        }


def _since(sales: list[CardSale], days: int) -> list[CardSale]:
    cutoff = days_ago(days)
    return [s for s in sales if s.sold_at is not None and to_naive_utc(s.sold_at) >= cutoff]


def weighted_average(sales: list[CardSale]) -> float:
    total = 0.0
    weight_sum = 0.0
    for sale in sales:
        weight = VERIFIED_WEIGHT if sale.verified else UNVERIFIED_WEIGHT
        total += sale.total_price * weight
        weight_sum += weight
    return total / weight_sum if weight_sum > 0 else 0.0


def liquidity_for(sales_count: int) -> str:
    for minimum, label in LIQUIDITY_THRESHOLDS:
        if sales_count >= minimum:
            return label
    return "cold"


def price_consistency(sales: list[CardSale]) -> float:
    """1 - coefficient of variation, floored at 0.3. Needs 3+ sales to judge."""
    if len(sales) < 3:
        return 1.0
    prices = [s.total_price for s in sales]
    mean = sum(prices) / len(prices)
    variance = sum((p - mean) ** 2 for p in prices) / len(prices)
    cv = math.sqrt(variance) / mean if mean > 0 else 1.0
    return max(0.3, 1 - cv)


def confidence_for(all_sales: list[CardSale], recent_sales: list[CardSale]) -> int:
    base = 0
    for minimum, value in CONFIDENCE_STEPS:
        if len(recent_sales) >= minimum:
            base = value
            break

    # Thin recent market with some history: lean on the last six months
    if len(recent_sales) < 3 and len(all_sales) >= 3:
        extended = _since(all_sales, HISTORY_WINDOW_DAYS)
        if len(extended) >= 2:
            base = max(base, min(55, 25 + len(extended) * 8))

    return round(base * price_consistency(recent_sales))


def exit_time_for(liquidity: str, recent_sales_count: int) -> str:
    if liquidity == "fire":
        return "1-2 weeks" if recent_sales_count >= 10 else "2-3 weeks"
    if liquidity == "hot":
        return "2-3 weeks"
    if liquidity == "warm":
        return "3-4 weeks"
    if liquidity == "cool":
        return "4-6 weeks"
    return "6+ weeks"


def get_saved_sales(card_key: str) -> list[CardSale]:
    """Saved sales for a card, most recent first."""
    return (
        db.session.query(CardSale)
        .filter(CardSale.card_id == card_key)
        .order_by(CardSale.sold_at.desc())
        .all()
    )


def summarize_sales(sales: list[CardSale]) -> PricingData:
    """Pricing summary from sales ordered most recent first."""
    window = _since(sales, PRICING_WINDOW_DAYS)
    pricing_period = f"{PRICING_WINDOW_DAYS} days"
    basis = window
    if not window:
        pricing_period = "All time"
        basis = sales

    average = highest = lowest = 0.0
    last_sale_date = None
    if basis:
        prices = [s.total_price for s in basis]
        average = weighted_average(basis)
        highest = max(prices)
        lowest = min(prices)
        last_sale_date = to_utc_z(basis[0].sold_at)

    liquidity = liquidity_for(len(sales))
    recent = _since(sales, CONFIDENCE_WINDOW_DAYS)

    return PricingData(
        average_price=round(average, 2),
        highest_price=round(highest, 2),
        lowest_price=round(lowest, 2),
        liquidity=liquidity,
        confidence=confidence_for(sales, recent),
        last_sale_date=last_sale_date,
        sales_count=len(sales),
        exit_time=exit_time_for(liquidity, len(recent)),
        pricing_period=pricing_period,
        thirty_day_sales_count=len(window),
    )


def calculate_pricing(asset_id: str) -> PricingData:
    """Pricing for a catalog card. Raises PricingError when the card is unknown."""
    asset = db.session.get(GlobalAsset, asset_id)
    if asset is None:
        raise PricingError("Card not found", details={"asset_id": asset_id})
    return summarize_sales(get_saved_sales(asset.pricing_key))


def market_value_for_asset(asset_id: str) -> float:
    """
    Best-effort market value used for offer snapshots.

    Missing cards, missing sales, or any lookup failure yield 0.0. The
    lookup runs in a savepoint so a failed query leaves the caller's
    transaction usable.
    """
    nested = db.session.begin_nested()
    try:
        value = calculate_pricing(asset_id).average_price
        nested.commit()
        return value
    except PricingError:
        nested.rollback()
        logger.warning("No catalog card %s for pricing; using market value 0", asset_id)
        return 0.0
    except Exception:
        nested.rollback()
        logger.warning("Pricing lookup failed for %s; using market value 0", asset_id, exc_info=True)
        return 0.0
