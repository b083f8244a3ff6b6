"""Effective-price resolution for listings.

Pure-function module — NO database access.

Every place that needs "the price of this listing for this visitor" goes
through here so the fallback chain lives in one spot:

    1. Primary field by purpose (rental_price for RENT, price otherwise)
    2. Pre-discount field (original_rental_price / original_price)
    3. Offices only: per-sqm price x size_sqm
    4. Cross-purpose field (sale <-> rent), scoring and display only
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from propmatch.domain.enums import SearchPurpose
from propmatch.domain.schemas import ListingRecord


class PriceSource(str, Enum):
    PRIMARY = "primary"
    ORIGINAL = "original"
    PER_AREA = "per_area"
    CROSS_PURPOSE = "cross_purpose"
    NONE = "none"


@dataclass(frozen=True)
class ResolvedPrice:
    """Outcome of the fallback chain.

    ``per_area_only`` is set when an office carries a per-sqm price but no
    floor area, so no total can be derived.
    """

    amount: Optional[float]
    source: PriceSource
    per_area_price: Optional[float] = None
    per_area_only: bool = False

    @property
    def is_wildcard(self) -> bool:
        return not self.amount and not self.per_area_only


@dataclass(frozen=True)
class DisplayPrice:
    """What a result card shows."""

    amount: float
    original_price: Optional[float] = None
    secondary_price: Optional[float] = None
    is_sqm_price: bool = False


def _is_rent(purpose: SearchPurpose | str) -> bool:
    return purpose == SearchPurpose.RENT


def _per_area_price(listing: ListingRecord, purpose: SearchPurpose | str) -> Optional[float]:
    return listing.rent_price_per_sqm if _is_rent(purpose) else listing.price_per_sqm


def resolve_price(
    listing: ListingRecord,
    purpose: SearchPurpose | str,
    *,
    allow_cross_purpose: bool = True,
) -> ResolvedPrice:
    """Walk the fallback chain and return the first usable price."""
    if _is_rent(purpose):
        primary, original = listing.rental_price, listing.original_rental_price
        cross = (listing.price, listing.original_price)
    else:
        primary, original = listing.price, listing.original_price
        cross = (listing.rental_price, listing.original_rental_price)

    if primary:
        return ResolvedPrice(primary, PriceSource.PRIMARY)
    if original:
        return ResolvedPrice(original, PriceSource.ORIGINAL)

    per_area_only = False
    sqm_price = None
    if listing.is_office:
        sqm_price = _per_area_price(listing, purpose)
        if sqm_price and listing.size_sqm:
            return ResolvedPrice(
                sqm_price * listing.size_sqm,
                PriceSource.PER_AREA,
                per_area_price=sqm_price,
            )
        per_area_only = bool(sqm_price)

    if allow_cross_purpose:
        for value in cross:
            if value:
                return ResolvedPrice(value, PriceSource.CROSS_PURPOSE, per_area_price=sqm_price)

    return ResolvedPrice(None, PriceSource.NONE, per_area_price=sqm_price, per_area_only=per_area_only)


def effective_price(listing: ListingRecord, purpose: SearchPurpose | str) -> float:
    """Price used for scoring; 0 when nothing usable exists."""
    return resolve_price(listing, purpose).amount or 0


def fits_budget(
    listing: ListingRecord,
    purpose: SearchPurpose | str,
    low: Optional[float],
    high: Optional[float],
) -> bool:
    """Availability rule for budget buckets.

    A null or zero price ("price on request") fits every bucket. An office
    priced only per sqm with no floor area fits none, since its per-sqm
    figure is not comparable to a total budget.
    """
    resolved = resolve_price(listing, purpose, allow_cross_purpose=False)
    if resolved.per_area_only:
        return False
    if resolved.is_wildcard:
        return True
    lower = low if low is not None else 0
    if resolved.amount < lower:
        return False
    return high is None or resolved.amount <= high


def display_price(listing: ListingRecord, purpose: SearchPurpose | str) -> DisplayPrice:
    """Price shown on a match card.

    Offices with a calculated total show the per-sqm rate as a secondary
    figure; offices with only a per-sqm rate show that rate flagged as such.
    Strikethrough originals are only shown for genuine discounts on
    non-office assets.
    """
    resolved = resolve_price(listing, purpose, allow_cross_purpose=False)
    amount = resolved.amount
    secondary = None
    is_sqm_price = False

    if resolved.source == PriceSource.PER_AREA:
        secondary = resolved.per_area_price
    elif resolved.per_area_only:
        amount = resolved.per_area_price
        is_sqm_price = True

    if not amount:
        amount = resolve_price(listing, purpose).amount

    original = None
    if not listing.is_office:
        raw_original = listing.original_rental_price if _is_rent(purpose) else listing.original_price
        if raw_original and amount and raw_original > amount:
            original = raw_original

    return DisplayPrice(
        amount=amount or 0,
        original_price=original,
        secondary_price=secondary,
        is_sqm_price=is_sqm_price,
    )
