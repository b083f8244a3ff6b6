"""Inventory availability checks for the Smart-Match wizard.

Before a step renders its choices, the wizard asks which of them are backed
by at least one live listing given everything locked in so far, and
disables the rest. The checks are advisory: on a datastore error they log
and return an empty answer, which the wizard treats as "no narrowing".
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from propmatch.domain.enums import (
    ListingType,
    OfficeSizeBucket,
    PropertyType,
    SearchPurpose,
    TransitOption,
)
from propmatch.domain.schemas import (
    BudgetRangeOption,
    ListingRecord,
    NumericRange,
    OfficeSizeAvailability,
)
from propmatch.services.listing_pricing import fits_budget
from propmatch.services.listing_query import ListingFilter, fetch_listings

logger = logging.getLogger(__name__)


def classify_office_size(size_sqm: float) -> OfficeSizeBucket:
    """Return the S/M/L/XL bucket for a floor area."""
    if size_sqm < 40:
        return OfficeSizeBucket.S
    if size_sqm <= 70:
        return OfficeSizeBucket.M
    if size_sqm <= 100:
        return OfficeSizeBucket.L
    return OfficeSizeBucket.XL


def _within_budget(
    listings: list[ListingRecord],
    purpose: SearchPurpose,
    budget: Optional[NumericRange],
) -> list[ListingRecord]:
    if budget is None:
        return listings
    return [p for p in listings if fits_budget(p, purpose, budget.min, budget.max)]


class InventoryService:
    """Answers "which next-step options still have inventory?"."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _fetch(self, listing_filter: ListingFilter, check: str) -> Optional[list[ListingRecord]]:
        try:
            return await fetch_listings(self.db, listing_filter)
        except SQLAlchemyError as exc:
            logger.error("Inventory check %s failed: %s", check, exc)
            return None

    async def check_purpose_availability(self) -> list[str]:
        """Purposes (BUY/RENT/INVEST) with any active inventory at all."""
        listings = await self._fetch(ListingFilter(), "purpose")
        if listings is None:
            return []

        available: list[str] = []
        for listing in listings:
            if listing.listing_type in (ListingType.RENT, ListingType.SALE_AND_RENT):
                available.append(SearchPurpose.RENT.value)
            if listing.listing_type in (ListingType.SALE, ListingType.SALE_AND_RENT):
                available.extend((SearchPurpose.BUY.value, SearchPurpose.INVEST.value))
        return list(dict.fromkeys(available))

    async def check_property_type_availability(self, purpose: SearchPurpose) -> list[str]:
        """Distinct property types on offer for *purpose*."""
        listings = await self._fetch(ListingFilter.for_purpose(purpose), "property_type")
        if listings is None:
            return []
        return list(dict.fromkeys(p.property_type for p in listings if p.property_type))

    async def check_office_size_availability(
        self, purpose: SearchPurpose
    ) -> list[OfficeSizeAvailability]:
        """Live office counts per size bucket. Every bucket is listed, zeros included."""
        listings = await self._fetch(
            ListingFilter.for_purpose(purpose, property_type=PropertyType.OFFICE_BUILDING),
            "office_size",
        )
        if listings is None:
            return []

        counts = {bucket: 0 for bucket in OfficeSizeBucket}
        for listing in listings:
            if listing.size_sqm is None:
                continue
            counts[classify_office_size(listing.size_sqm)] += 1
        return [OfficeSizeAvailability(size=bucket, count=n) for bucket, n in counts.items()]

    async def check_budget_availability(
        self,
        purpose: SearchPurpose,
        *,
        property_type: Optional[PropertyType] = None,
        office_size: Optional[NumericRange] = None,
        budget_ranges: list[BudgetRangeOption],
    ) -> list[str]:
        """Ids of the budget buckets that at least one listing fits.

        Price-on-request listings fit every bucket.
        """
        listings = await self._fetch(
            ListingFilter.for_purpose(
                purpose, property_type=property_type, floor_area=office_size
            ),
            "budget",
        )
        if listings is None:
            return []

        return [
            budget_range.id
            for budget_range in budget_ranges
            if any(
                fits_budget(p, purpose, budget_range.min_value, budget_range.max_value)
                for p in listings
            )
        ]

    async def check_transit_availability(
        self,
        purpose: SearchPurpose,
        *,
        property_type: Optional[PropertyType] = None,
        office_size: Optional[NumericRange] = None,
        budget: Optional[NumericRange] = None,
    ) -> list[str]:
        """NEAR_TRANSIT when any match is near transit, ANY_LOCATION when any isn't."""
        listings = await self._fetch(
            ListingFilter.for_purpose(
                purpose, property_type=property_type, floor_area=office_size
            ),
            "transit",
        )
        if listings is None:
            return []

        listings = _within_budget(listings, purpose, budget)
        near = sum(1 for p in listings if p.near_transit)

        available: list[str] = []
        if near > 0:
            available.append(TransitOption.NEAR_TRANSIT.value)
        if listings and near < len(listings):
            available.append(TransitOption.ANY_LOCATION.value)
        return available

    async def check_location_availability(
        self,
        purpose: SearchPurpose,
        *,
        property_type: Optional[PropertyType] = None,
        office_size: Optional[NumericRange] = None,
        budget: Optional[NumericRange] = None,
        near_transit: Optional[bool] = None,
    ) -> list[str]:
        """District and popular-area names that still have a matching listing."""
        listings = await self._fetch(
            ListingFilter.for_purpose(
                purpose,
                property_type=property_type,
                floor_area=office_size,
                near_transit=near_transit,
            ),
            "location",
        )
        if listings is None:
            return []

        areas: list[str] = []
        for listing in _within_budget(listings, purpose, budget):
            if listing.district:
                areas.append(listing.district)
            if listing.popular_area:
                areas.append(listing.popular_area)
        return list(dict.fromkeys(areas))
