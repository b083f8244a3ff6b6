"""Pydantic v2 schemas for the Smart-Match engine and its API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from propmatch.domain.enums import (
    ListingType,
    OfficeSizeBucket,
    PropertyType,
    SearchPurpose,
    WizardStep,
)


# ---------------------------------------------------------------------------
# Criteria
# ---------------------------------------------------------------------------


class NumericRange(BaseModel):
    """Inclusive ``{min, max}`` range. Either bound may be open."""

    model_config = ConfigDict(frozen=True)

    min: float | None = None
    max: float | None = None

    def contains(self, value: float) -> bool:
        if self.min is not None and value < self.min:
            return False
        if self.max is not None and value > self.max:
            return False
        return True


class SearchCriteria(BaseModel):
    """Everything the visitor has told the wizard so far."""

    purpose: SearchPurpose = SearchPurpose.BUY
    property_type: PropertyType | None = None
    office_size: NumericRange | None = None  # only meaningful for OFFICE_BUILDING
    budget: NumericRange | None = None  # sale or rental price, by purpose
    area: str | None = None
    near_transit: bool | None = None


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


class ListingRecord(BaseModel):
    """Read-only view of a listing row as the engine sees it."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    slug: str | None = None
    title: str = ""
    description: str | None = None
    status: str | None = None
    listing_type: ListingType | None = None
    property_type: str | None = None

    price: float | None = None
    original_price: float | None = None
    rental_price: float | None = None
    original_rental_price: float | None = None
    price_per_sqm: float | None = None
    rent_price_per_sqm: float | None = None

    size_sqm: float | None = None
    bedrooms: int | None = None
    bathrooms: int | None = None

    popular_area: str | None = None
    district: str | None = None
    subdistrict: str | None = None
    province: str | None = None

    near_transit: bool | None = None
    transit_type: str | None = None
    transit_station_name: str | None = None
    transit_distance_meters: int | None = None

    image_urls: list[str] | None = None
    created_at: datetime | None = None

    @property
    def is_office(self) -> bool:
        return self.property_type == PropertyType.OFFICE_BUILDING.value


# ---------------------------------------------------------------------------
# Scoring / results
# ---------------------------------------------------------------------------


class ScoreBreakdown(BaseModel):
    """Points contributed by one scoring factor."""

    label: str
    points: int


class ScoreResult(BaseModel):
    """Output of the scoring engine for one listing."""

    score: int
    reasons: list[str] = []
    reason_codes: list[str] = []
    breakdown: list[ScoreBreakdown] = []


class PropertyMatch(BaseModel):
    """A ranked, buyer-facing match card."""

    listing_id: str
    slug: str | None = None
    title: str
    price: float = 0
    original_price: float | None = None
    secondary_price: float | None = None
    is_sqm_price: bool = False
    image_url: str
    score: int
    reasons: list[str] = []
    score_breakdown: list[ScoreBreakdown] = []
    commute_time: int | None = None
    bedrooms: int | None = None
    bathrooms: int | None = None
    near_transit: bool | None = None
    transit_station_name: str | None = None
    transit_type: str | None = None
    transit_distance_meters: int | None = None
    property_type: str | None = None


class SearchResult(BaseModel):
    """Response of one executed search."""

    session_id: str | None = None
    session_token: str | None = None
    matches: list[PropertyMatch] = []


class MatchRecordResponse(BaseModel):
    """A persisted match row."""

    model_config = ConfigDict(from_attributes=True)

    property_id: str
    match_score: int
    match_reasons: list[str] = []
    rank: int


class SearchSessionResponse(BaseModel):
    """A persisted search session with its match rows."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    session_token: str
    purpose: str
    criteria: dict = {}
    created_at: datetime | None = None
    lead_id: str | None = None
    converted_at: datetime | None = None
    matches: list[MatchRecordResponse] = []


# ---------------------------------------------------------------------------
# Lead conversion
# ---------------------------------------------------------------------------


class LeadConversionRequest(BaseModel):
    """Visitor contact details submitted from a result card."""

    session_id: str
    listing_id: str
    full_name: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    email: str | None = None
    line_id: str | None = None


class LeadConversionResponse(BaseModel):
    """Result of a successful conversion."""

    success: bool = True
    lead_id: str


# ---------------------------------------------------------------------------
# Availability
# ---------------------------------------------------------------------------


class OfficeSizeAvailability(BaseModel):
    """Live office count for one floor-area bucket."""

    size: OfficeSizeBucket
    count: int


class BudgetRangeOption(BaseModel):
    """A budget bucket offered on the budget step."""

    id: str
    label: str = ""
    label_en: str | None = None
    min_value: float
    max_value: float
    purpose: SearchPurpose = SearchPurpose.BUY
    sort_order: int | None = None
    is_active: bool = True


class PropertyTypeOption(BaseModel):
    """A property-type choice offered on the property-type step."""

    id: str
    label: str
    label_en: str | None = None
    value: PropertyType
    sort_order: int | None = None
    is_active: bool = True


class OfficeSizeOption(BaseModel):
    """An office floor-area bucket offered on the office-size step."""

    id: str
    bucket: OfficeSizeBucket
    label: str
    label_en: str | None = None
    min_sqm: float
    max_sqm: float
    sort_order: int | None = None
    is_active: bool = True


class BudgetAvailabilityRequest(BaseModel):
    """Body of the budget availability check."""

    purpose: SearchPurpose
    property_type: PropertyType | None = None
    office_size: NumericRange | None = None
    budget_ranges: list[BudgetRangeOption]


class LocationAvailabilityRequest(BaseModel):
    """Body of the location availability check."""

    purpose: SearchPurpose
    property_type: PropertyType | None = None
    office_size: NumericRange | None = None
    budget: NumericRange | None = None
    near_transit: bool | None = None


class TransitAvailabilityRequest(BaseModel):
    """Body of the transit availability check."""

    purpose: SearchPurpose
    property_type: PropertyType | None = None
    office_size: NumericRange | None = None
    budget: NumericRange | None = None


# ---------------------------------------------------------------------------
# Wizard
# ---------------------------------------------------------------------------


class StepOption(BaseModel):
    """One selectable choice on the current wizard step."""

    id: str
    label: str
    available: bool = True
    count: int | None = None


class WizardState(BaseModel):
    """Client-held wizard state, round-tripped with every transition."""

    step: WizardStep = WizardStep.PURPOSE
    purpose: SearchPurpose = SearchPurpose.BUY
    property_type: PropertyType | None = None
    office_size: NumericRange | None = None
    budget: NumericRange | None = None
    budget_range_id: str | None = None
    near_transit: bool | None = None
    area: str | None = None
    is_office_mode: bool = False
    transit_enabled: bool = True
    session_id: str | None = None
    matches: list[PropertyMatch] = []
    error: str | None = None


class WizardSelection(BaseModel):
    """A choice made on the current step.

    ``value`` carries the option id (purpose, property type, bucket id,
    transit option or area name); ranges travel in ``range``.
    """

    state: WizardState
    value: str | None = None
    range: NumericRange | None = None
