"""Listing-store queries used by the Smart-Match engine.

``fetch_listings`` is the single read path: it translates a ``ListingFilter``
into one SELECT against ``properties`` and hands back ``ListingRecord``
values. ``keyword_search`` layers the free-text search used by the chat
front end on top of it.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from propmatch.domain.enums import ListingStatus, ListingType, PropertyType, SearchPurpose
from propmatch.domain.models import Property
from propmatch.domain.schemas import ListingRecord, NumericRange
from propmatch.services.location_normalizer import expand
from propmatch.services.match_scorer import listing_types_for

logger = logging.getLogger(__name__)

# Columns searched by free-text terms
TEXT_COLUMNS = (
    Property.title,
    Property.description,
    Property.popular_area,
    Property.district,
    Property.subdistrict,
    Property.province,
)

KEYWORD_SEARCH_LIMIT = 15

# Words people use for each property type, matched against title/description
PROPERTY_TYPE_SYNONYMS: dict[PropertyType, tuple[str, ...]] = {
    PropertyType.OFFICE_BUILDING: (
        "ออฟฟิศ", "สำนักงาน", "พื้นที่เช่าทำงาน", "Office", "Co-working space", "Service Office",
    ),
    PropertyType.HOUSE: ("บ้าน", "บ้านเดี่ยว", "วิลล่า", "House", "Villa", "Single House"),
    PropertyType.CONDO: (
        "คอนโด", "คอนโดมิเนียม", "ห้องชุด", "อพาร์ทเม้นท์", "Condo", "Condominium", "Apartment", "Studio",
    ),
    PropertyType.TOWNHOME: ("ทาวน์โฮม", "ทาวน์เฮ้าส์", "ทาวน์เฮาส์", "Townhome", "Townhouse"),
    PropertyType.COMMERCIAL_BUILDING: (
        "ตึกแถว", "อาคารพาณิชย์", "โฮมออฟฟิศ", "Commercial Building", "Shophouse", "Home Office",
    ),
    PropertyType.WAREHOUSE: ("โกดัง", "โรงงาน", "คลังสินค้า", "Warehouse", "Factory", "Storage"),
    PropertyType.LAND: ("ที่ดิน", "ที่เปล่า", "Land", "Plot"),
}


@dataclass
class ListingFilter:
    """Predicates understood by the listing store. Unset fields don't filter."""

    status: ListingStatus = ListingStatus.ACTIVE
    listing_types: Optional[Iterable[ListingType]] = None
    property_type: Optional[PropertyType | str] = None
    floor_area: Optional[NumericRange] = None
    price: Optional[NumericRange] = None
    price_purpose: SearchPurpose = SearchPurpose.BUY
    near_transit: Optional[bool] = None
    text_terms: list[str] = field(default_factory=list)
    location_terms: list[str] = field(default_factory=list)
    type_terms: list[str] = field(default_factory=list)
    ids: Optional[list[str]] = None
    limit: Optional[int] = None

    @classmethod
    def for_purpose(cls, purpose: SearchPurpose | str, **kwargs) -> "ListingFilter":
        """Active listings whose listing type serves *purpose*."""
        return cls(
            listing_types=listing_types_for(purpose),
            price_purpose=SearchPurpose(purpose),
            **kwargs,
        )


def build_listing_query(listing_filter: ListingFilter):
    """Translate *listing_filter* into a SELECT over ``properties``."""
    f = listing_filter
    stmt = select(Property).where(Property.status == f.status.value)

    if f.listing_types is not None:
        stmt = stmt.where(Property.listing_type.in_([t.value for t in f.listing_types]))

    if f.property_type:
        stmt = stmt.where(Property.property_type == PropertyType(f.property_type).value)

    if f.floor_area is not None:
        if f.floor_area.min is not None:
            stmt = stmt.where(Property.size_sqm >= f.floor_area.min)
        if f.floor_area.max is not None:
            stmt = stmt.where(Property.size_sqm <= f.floor_area.max)

    if f.price is not None:
        price_col = Property.rental_price if f.price_purpose == SearchPurpose.RENT else Property.price
        if f.price.min:
            stmt = stmt.where(price_col >= f.price.min)
        if f.price.max:
            stmt = stmt.where(price_col <= f.price.max)

    if f.near_transit:
        stmt = stmt.where(Property.near_transit.is_(True))

    if f.text_terms:
        stmt = stmt.where(
            or_(*(col.ilike(f"%{term}%") for term in f.text_terms for col in TEXT_COLUMNS))
        )

    # Each term group must match on its own
    if f.location_terms:
        stmt = stmt.where(
            or_(*(col.ilike(f"%{term}%") for term in f.location_terms for col in TEXT_COLUMNS))
        )

    if f.type_terms:
        stmt = stmt.where(
            or_(
                *(
                    col.ilike(f"%{term}%")
                    for term in f.type_terms
                    for col in (Property.property_type, Property.title, Property.description)
                )
            )
        )

    if f.ids is not None:
        stmt = stmt.where(Property.id.in_(f.ids))

    stmt = stmt.order_by(Property.created_at.desc(), Property.id)
    if f.limit:
        stmt = stmt.limit(f.limit)
    return stmt


async def fetch_listings(db: AsyncSession, listing_filter: ListingFilter) -> list[ListingRecord]:
    """Run *listing_filter* and return read-only listing records.

    Datastore errors propagate; callers decide whether to fail open.
    """
    result = await db.execute(build_listing_query(listing_filter))
    return [ListingRecord.model_validate(row) for row in result.scalars().all()]


async def keyword_search(
    db: AsyncSession,
    q: Optional[str] = None,
    *,
    location: Optional[str] = None,
    property_type: Optional[PropertyType] = None,
    purpose: Optional[SearchPurpose] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    limit: int = KEYWORD_SEARCH_LIMIT,
) -> list[ListingRecord]:
    """Free-text listing search for the chat front end.

    The query and location are expanded through the popular-area synonym
    table (with a no-space variant, so "Rama9" finds "Rama 9"), and the
    property type through ``PROPERTY_TYPE_SYNONYMS``. When both a query
    and a location are given, a listing has to match each of them.
    """
    type_terms: list[str] = []
    if property_type is not None:
        type_terms = [property_type.value, *PROPERTY_TYPE_SYNONYMS.get(property_type, ())]

    price = None
    if min_price or max_price:
        price = NumericRange(min=min_price, max=max_price)

    listing_filter = ListingFilter(
        listing_types=listing_types_for(purpose) if purpose else None,
        price=price,
        price_purpose=purpose or SearchPurpose.BUY,
        text_terms=_search_terms(q),
        location_terms=_search_terms(location),
        type_terms=type_terms,
        limit=limit,
    )
    listings = await fetch_listings(db, listing_filter)
    logger.info("Keyword search q=%r location=%r -> %d listings", q, location, len(listings))
    return listings


def _search_terms(raw: Optional[str]) -> list[str]:
    """Area synonyms of *raw* plus its no-space variant."""
    if not raw or not raw.strip():
        return []
    cleaned = raw.strip()
    terms = expand(cleaned)
    terms.add("".join(cleaned.split()))
    return sorted(terms)
