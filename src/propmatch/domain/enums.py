"""Domain enumerations for the Smart-Match engine.

All enums use the (str, Enum) pattern to ensure JSON serialization compatibility.
"""

from enum import Enum


class SearchPurpose(str, Enum):
    """Why the visitor is searching."""

    BUY = "BUY"
    RENT = "RENT"
    INVEST = "INVEST"


class ListingType(str, Enum):
    """Whether a property is offered for sale, for rent, or both."""

    SALE = "SALE"
    RENT = "RENT"
    SALE_AND_RENT = "SALE_AND_RENT"


class ListingStatus(str, Enum):
    """Publication status of a listing. Only ACTIVE listings are matchable."""

    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    RESERVED = "RESERVED"
    SOLD = "SOLD"
    RENTED = "RENTED"
    INACTIVE = "INACTIVE"


class PropertyType(str, Enum):
    """Asset classes a listing can belong to."""

    HOUSE = "HOUSE"
    CONDO = "CONDO"
    TOWNHOME = "TOWNHOME"
    LAND = "LAND"
    OFFICE_BUILDING = "OFFICE_BUILDING"
    WAREHOUSE = "WAREHOUSE"
    COMMERCIAL_BUILDING = "COMMERCIAL_BUILDING"


class OfficeSizeBucket(str, Enum):
    """Coarse floor-area classes used only for office listings."""

    S = "S"
    M = "M"
    L = "L"
    XL = "XL"


class TransitOption(str, Enum):
    """Answers offered on the transit step."""

    NEAR_TRANSIT = "NEAR_TRANSIT"
    ANY_LOCATION = "ANY_LOCATION"


class WizardStep(str, Enum):
    """Smart-Match wizard steps.

    Values keep the historical numeric step identifiers so stored client
    state stays readable.
    """

    PURPOSE = "1"
    PROPERTY_TYPE = "1.5"
    OFFICE_SIZE = "1.7"
    BUDGET = "2"
    TRANSIT = "2.5"
    AREA = "3"
    SEARCHING = "4"
    RESULTS = "9"


class LeadType(str, Enum):
    """Kind of party a lead represents."""

    INDIVIDUAL = "INDIVIDUAL"
    COMPANY = "COMPANY"


class LeadSource(str, Enum):
    """Channel a lead came in through."""

    WEBSITE = "WEBSITE"
    LINE = "LINE"
    PHONE = "PHONE"
    REFERRAL = "REFERRAL"


class LeadStage(str, Enum):
    """Pipeline stage of a lead."""

    NEW = "NEW"
    CONTACTED = "CONTACTED"
    VIEWING = "VIEWING"
    NEGOTIATING = "NEGOTIATING"
    CLOSED = "CLOSED"
    LOST = "LOST"


class ActivityType(str, Enum):
    """Types of activity recorded against a lead."""

    SYSTEM = "SYSTEM"
    CALL = "CALL"
    NOTE = "NOTE"
    VIEWING = "VIEWING"
