"""SQLAlchemy ORM models for the Smart-Match engine.

All models use SQLite-compatible types:
- String(36) for UUID primary keys
- JSON for structured data (no JSONB)
- DateTime for timestamps (no TIMESTAMPTZ)
"""

import uuid

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from propmatch.infra.database import Base


# ---------------------------------------------------------------------------
# Listing store
# ---------------------------------------------------------------------------


class Property(Base):
    """A property listing. Owned by the CRM; read-only to Smart-Match."""

    __tablename__ = "properties"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    slug = Column(String(255), nullable=True, index=True)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="ACTIVE", index=True)
    listing_type = Column(String(20), nullable=False, default="SALE")  # SALE, RENT, SALE_AND_RENT
    property_type = Column(String(50), nullable=True, index=True)

    # Pricing: current, pre-discount, and per-sqm (area-priced assets such as offices)
    price = Column(Float, nullable=True)
    original_price = Column(Float, nullable=True)
    rental_price = Column(Float, nullable=True)
    original_rental_price = Column(Float, nullable=True)
    price_per_sqm = Column(Float, nullable=True)
    rent_price_per_sqm = Column(Float, nullable=True)

    size_sqm = Column(Float, nullable=True)
    bedrooms = Column(Integer, nullable=True)
    bathrooms = Column(Integer, nullable=True)

    # Location
    popular_area = Column(String(150), nullable=True, index=True)
    district = Column(String(150), nullable=True)
    subdistrict = Column(String(150), nullable=True)
    province = Column(String(150), nullable=True)

    # Transit
    near_transit = Column(Boolean, default=False)
    transit_type = Column(String(20), nullable=True)  # BTS, MRT, ARL, SRT
    transit_station_name = Column(String(150), nullable=True)
    transit_distance_meters = Column(Integer, nullable=True)

    image_urls = Column(JSON, default=list)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())


# ---------------------------------------------------------------------------
# Lead store
# ---------------------------------------------------------------------------


class Lead(Base):
    """A prospective client captured by the CRM."""

    __tablename__ = "leads"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    full_name = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=False)
    email = Column(String(255), nullable=True)
    line_id = Column(String(100), nullable=True)
    lead_type = Column(String(20), nullable=False, default="INDIVIDUAL")
    source = Column(String(20), nullable=False, default="WEBSITE")
    stage = Column(String(20), nullable=False, default="NEW")
    note = Column(Text, nullable=True)
    created_at = Column(DateTime, default=func.now())

    activities = relationship("LeadActivity", back_populates="lead")


class LeadActivity(Base):
    """Timeline entry recorded against a lead."""

    __tablename__ = "lead_activities"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    lead_id = Column(String(36), ForeignKey("leads.id"), nullable=False, index=True)
    activity_type = Column(String(20), nullable=False, default="SYSTEM")
    note = Column(Text, nullable=True)
    created_at = Column(DateTime, default=func.now())

    lead = relationship("Lead", back_populates="activities")


# ---------------------------------------------------------------------------
# Smart-Match sessions
# ---------------------------------------------------------------------------


class SearchSession(Base):
    """One executed Smart-Match search.

    Written once by the search that created it, then at most once more
    when the visitor converts into a lead.
    """

    __tablename__ = "property_search_sessions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    session_token = Column(String(64), unique=True, nullable=False, index=True)
    purpose = Column(String(10), nullable=False)
    preferred_property_type = Column(String(50), nullable=True)
    office_size_min = Column(Float, nullable=True)
    office_size_max = Column(Float, nullable=True)
    budget_min = Column(Float, nullable=True)
    budget_max = Column(Float, nullable=True)
    preferred_area = Column(String(150), nullable=True)
    near_transit = Column(Boolean, nullable=True)
    criteria = Column(JSON, default=dict)  # full SearchCriteria snapshot
    created_at = Column(DateTime, default=func.now())
    lead_id = Column(String(36), ForeignKey("leads.id"), nullable=True)
    converted_at = Column(DateTime, nullable=True)

    matches = relationship(
        "PropertyMatchRecord",
        back_populates="session",
        order_by="PropertyMatchRecord.rank",
    )


class PropertyMatchRecord(Base):
    """A ranked match surfaced by a search. Insert-only."""

    __tablename__ = "property_matches"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    session_id = Column(
        String(36), ForeignKey("property_search_sessions.id"), nullable=False, index=True
    )
    property_id = Column(String(36), ForeignKey("properties.id"), nullable=False)
    match_score = Column(Integer, nullable=False)
    match_reasons = Column(JSON, default=list)
    rank = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=func.now())

    session = relationship("SearchSession", back_populates="matches")


# ---------------------------------------------------------------------------
# Wizard configuration
# ---------------------------------------------------------------------------


class SmartMatchBudgetRange(Base):
    """Admin-managed budget bucket shown on the budget step."""

    __tablename__ = "smart_match_budget_ranges"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    purpose = Column(String(10), nullable=False, index=True)
    label = Column(String(100), nullable=False)
    label_en = Column(String(100), nullable=True)
    min_value = Column(Float, nullable=False)
    max_value = Column(Float, nullable=False)
    sort_order = Column(Integer, nullable=True)
    is_active = Column(Boolean, default=True)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())


class SmartMatchPropertyType(Base):
    """Admin-managed property-type choice."""

    __tablename__ = "smart_match_property_types"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    label = Column(String(100), nullable=False)
    label_en = Column(String(100), nullable=True)
    value = Column(String(50), nullable=False)
    sort_order = Column(Integer, nullable=True)
    is_active = Column(Boolean, default=True)


class SmartMatchOfficeSize(Base):
    """Admin-managed office floor-area bucket."""

    __tablename__ = "smart_match_office_sizes"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    bucket = Column(String(4), nullable=False)  # S, M, L, XL
    label = Column(String(150), nullable=False)
    label_en = Column(String(150), nullable=True)
    min_sqm = Column(Float, nullable=False)
    max_sqm = Column(Float, nullable=False)
    sort_order = Column(Integer, nullable=True)
    is_active = Column(Boolean, default=True)


class SmartMatchSetting(Base):
    """Key/value wizard setting (e.g. transit_question_enabled)."""

    __tablename__ = "smart_match_settings"

    key = Column(String(100), primary_key=True)
    value = Column(JSON, nullable=True)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
