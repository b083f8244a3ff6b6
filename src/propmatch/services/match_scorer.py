"""Deterministic Smart-Match scorer.

Pure-function module — NO database access.

Scores one listing against the visitor's criteria as a weighted sum:
    - Budget    (up to 40)  — exact fit, or a near miss over the ceiling
    - Purpose   (20)        — listing type serves the visitor's purpose
    - Location  (up to 30)  — exact popular area, synonym hit, or metro fallback
    - Transit   (up to 10)  — requested and present, or an unsolicited bonus
    - Type      (+30 / -20) — property type match or mismatch

The sum is clamped to [0, 100]. Callers apply the relevance cutoff.
"""

from __future__ import annotations

from propmatch.domain.enums import ListingType, SearchPurpose
from propmatch.domain.schemas import ListingRecord, ScoreBreakdown, ScoreResult, SearchCriteria
from propmatch.services.listing_pricing import effective_price
from propmatch.services.location_normalizer import expand

# ── Points ───────────────────────────────────────────────────────────────────

PTS_BUDGET_EXACT = 40
PTS_BUDGET_NEAR = 30  # min+max given, within 15% over max
PTS_BUDGET_SLIGHTLY_OVER = 25  # max only, within 10% over max
PTS_PURPOSE = 20
PTS_AREA_EXACT = 30
PTS_AREA_NEAR = 25
PTS_AREA_METRO = 10
PTS_TRANSIT_REQUESTED = 10
PTS_TRANSIT_BONUS = 5
PTS_TYPE_MATCH = 30
PTS_TYPE_MISMATCH = -20

NEAR_RANGE_TOLERANCE = 1.15
NEAR_MAX_TOLERANCE = 1.10

MIN_SCORE = 0
MAX_SCORE = 100

# Province markers that earn the soft "same metro" location fallback
METRO_MARKERS = ("กรุงเทพ", "bangkok")

SALE_LISTING_TYPES = frozenset({ListingType.SALE, ListingType.SALE_AND_RENT})
RENT_LISTING_TYPES = frozenset({ListingType.RENT, ListingType.SALE_AND_RENT})

REASON_MESSAGES: dict[str, str] = {
    "budget_ok": "Within your budget",
    "budget_near": "Close to your budget range",
    "budget_slightly_over": "Slightly over your budget",
    "purpose_match": "Matches what you are looking for",
    "investment": "Good fit for investment",
    "area_exact": "In your preferred area",
    "area_near": "Near your preferred area",
    "area_metro": "In the Bangkok metro area",
    "transit_requested": "Close to BTS/MRT as requested",
    "transit_bonus": "Bonus: close to BTS/MRT",
    "type_match": "Matches your property type",
    "type_mismatch": "Different property type from your choice",
}


def listing_types_for(purpose: SearchPurpose | str) -> frozenset[ListingType]:
    """Listing types that can serve *purpose*."""
    if purpose == SearchPurpose.RENT:
        return RENT_LISTING_TYPES
    return SALE_LISTING_TYPES


# ── Factors ──────────────────────────────────────────────────────────────────

def _budget_points(price: float, criteria: SearchCriteria) -> tuple[int, str | None]:
    """Budget factor.

    A zero price earns nothing: "price on request" is only a wildcard for
    availability checks, never for ranking.
    """
    if price <= 0 or criteria.budget is None:
        return 0, None

    budget_min = criteria.budget.min
    budget_max = criteria.budget.max

    if budget_min and budget_max:
        if budget_min <= price <= budget_max:
            return PTS_BUDGET_EXACT, "budget_ok"
        if budget_max < price <= budget_max * NEAR_RANGE_TOLERANCE:
            return PTS_BUDGET_NEAR, "budget_near"
    elif budget_max:
        if price <= budget_max:
            return PTS_BUDGET_EXACT, "budget_ok"
        if price <= budget_max * NEAR_MAX_TOLERANCE:
            return PTS_BUDGET_SLIGHTLY_OVER, "budget_slightly_over"
    return 0, None


def _purpose_points(listing: ListingRecord, criteria: SearchCriteria) -> tuple[int, str | None]:
    if listing.listing_type not in listing_types_for(criteria.purpose):
        return 0, None
    if criteria.purpose == SearchPurpose.INVEST:
        return PTS_PURPOSE, "investment"
    return PTS_PURPOSE, "purpose_match"


def _area_points(listing: ListingRecord, criteria: SearchCriteria) -> tuple[int, str | None]:
    if not criteria.area:
        return 0, None

    if listing.popular_area == criteria.area:
        return PTS_AREA_EXACT, "area_exact"

    haystack = " ".join(
        part or ""
        for part in (
            listing.popular_area,
            listing.district,
            listing.subdistrict,
            listing.title,
            listing.description,
        )
    ).lower()
    if any(term.lower() in haystack for term in expand(criteria.area)):
        return PTS_AREA_NEAR, "area_near"

    province = (listing.province or "").lower()
    if any(marker in province for marker in METRO_MARKERS):
        return PTS_AREA_METRO, "area_metro"
    return 0, None


def _transit_points(listing: ListingRecord, criteria: SearchCriteria) -> tuple[int, str | None]:
    if not listing.near_transit:
        return 0, None
    if criteria.near_transit:
        return PTS_TRANSIT_REQUESTED, "transit_requested"
    # False means "any location", which is no preference either
    return PTS_TRANSIT_BONUS, "transit_bonus"


def _type_points(listing: ListingRecord, criteria: SearchCriteria) -> tuple[int, str | None]:
    if criteria.property_type is None:
        return 0, None
    if listing.property_type == criteria.property_type:
        return PTS_TYPE_MATCH, "type_match"
    return PTS_TYPE_MISMATCH, "type_mismatch"


# ── Main scorer ──────────────────────────────────────────────────────────────

def score_listing(listing: ListingRecord, criteria: SearchCriteria) -> ScoreResult:
    """Score *listing* against *criteria*.

    Returns the clamped score, one reason per non-zero factor (in factor
    order), and a breakdown whose points sum to the unclamped score.
    """
    price = effective_price(listing, criteria.purpose)

    factors = (
        ("budget", _budget_points(price, criteria)),
        ("purpose", _purpose_points(listing, criteria)),
        ("location", _area_points(listing, criteria)),
        ("transit", _transit_points(listing, criteria)),
        ("type", _type_points(listing, criteria)),
    )

    raw = 0
    reason_codes: list[str] = []
    breakdown: list[ScoreBreakdown] = []
    for label, (points, reason) in factors:
        if points == 0:
            continue
        raw += points
        breakdown.append(ScoreBreakdown(label=label, points=points))
        if reason:
            reason_codes.append(reason)

    return ScoreResult(
        score=max(MIN_SCORE, min(MAX_SCORE, raw)),
        reasons=[REASON_MESSAGES[code] for code in reason_codes],
        reason_codes=reason_codes,
        breakdown=breakdown,
    )
