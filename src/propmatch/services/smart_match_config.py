"""Smart-Match wizard configuration.

Budget buckets, property-type choices, office-size buckets and wizard
settings ship with code defaults. Admins can reorder or deactivate them
(and add their own) through the ``smart_match_*`` tables; stored rows win
over defaults with the same id.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from propmatch.app.config import get_settings
from propmatch.domain.enums import OfficeSizeBucket, PropertyType, SearchPurpose
from propmatch.domain.models import (
    SmartMatchBudgetRange,
    SmartMatchOfficeSize,
    SmartMatchPropertyType,
    SmartMatchSetting,
)
from propmatch.domain.schemas import BudgetRangeOption, OfficeSizeOption, PropertyTypeOption

logger = logging.getLogger(__name__)

# Open upper bound used by the top bucket of each purpose
NO_BUDGET_CEILING = 999_999_999

DEFAULT_RENT_RANGES: list[BudgetRangeOption] = [
    BudgetRangeOption(id="rent_1", label="< 1.5 หมื่น", label_en="< 15K", min_value=0, max_value=15_000,
                      purpose=SearchPurpose.RENT, sort_order=1),
    BudgetRangeOption(id="rent_2", label="1.5 - 5 หมื่น", label_en="15K - 50K", min_value=15_000,
                      max_value=50_000, purpose=SearchPurpose.RENT, sort_order=2),
    BudgetRangeOption(id="rent_3", label="5 หมื่น - 1.5 แสน", label_en="50K - 150K", min_value=50_000,
                      max_value=150_000, purpose=SearchPurpose.RENT, sort_order=3),
    BudgetRangeOption(id="rent_4", label="> 1.5 แสน", label_en="> 150K", min_value=150_000,
                      max_value=NO_BUDGET_CEILING, purpose=SearchPurpose.RENT, sort_order=4),
]

DEFAULT_BUY_RANGES: list[BudgetRangeOption] = [
    BudgetRangeOption(id="buy_1", label="< 3 ล้าน", label_en="< 3M", min_value=0, max_value=3_000_000,
                      purpose=SearchPurpose.BUY, sort_order=1),
    BudgetRangeOption(id="buy_2", label="3 - 5 ล้าน", label_en="3M - 5M", min_value=3_000_000,
                      max_value=5_000_000, purpose=SearchPurpose.BUY, sort_order=2),
    BudgetRangeOption(id="buy_3", label="5 - 10 ล้าน", label_en="5M - 10M", min_value=5_000_000,
                      max_value=10_000_000, purpose=SearchPurpose.BUY, sort_order=3),
    BudgetRangeOption(id="buy_4", label="> 10 ล้าน", label_en="> 10M", min_value=10_000_000,
                      max_value=NO_BUDGET_CEILING, purpose=SearchPurpose.BUY, sort_order=4),
]

DEFAULT_PROPERTY_TYPES: list[PropertyTypeOption] = [
    PropertyTypeOption(id="house", label="บ้าน", label_en="House", value=PropertyType.HOUSE, sort_order=1),
    PropertyTypeOption(id="condo", label="คอนโด", label_en="Condo", value=PropertyType.CONDO, sort_order=2),
    PropertyTypeOption(id="office", label="ออฟฟิศ", label_en="Office", value=PropertyType.OFFICE_BUILDING,
                       sort_order=3),
    PropertyTypeOption(id="townhome", label="ทาวน์โฮม", label_en="Townhome", value=PropertyType.TOWNHOME,
                       sort_order=4),
]

DEFAULT_OFFICE_SIZES: list[OfficeSizeOption] = [
    OfficeSizeOption(id="office_s", bucket=OfficeSizeBucket.S, label="(S) < 40 ตร.ม.", label_en="(S) < 40 sqm",
                     min_sqm=0, max_sqm=39.99, sort_order=1),
    OfficeSizeOption(id="office_m", bucket=OfficeSizeBucket.M, label="(M) 40-70 ตร.ม.", label_en="(M) 40-70 sqm",
                     min_sqm=40, max_sqm=70, sort_order=2),
    OfficeSizeOption(id="office_l", bucket=OfficeSizeBucket.L, label="(L) 71-100 ตร.ม.",
                     label_en="(L) 71-100 sqm", min_sqm=70.01, max_sqm=100, sort_order=3),
    OfficeSizeOption(id="office_xl", bucket=OfficeSizeBucket.XL, label="(XL) > 100 ตร.ม.",
                     label_en="(XL) > 100 sqm", min_sqm=100.01, max_sqm=NO_BUDGET_CEILING, sort_order=4),
]


def default_settings() -> dict[str, Any]:
    return {
        "transit_question_enabled": get_settings().transit_question_enabled,
        "wizard_title": "วันนี้คุณกำลังมองหา...",
        "wizard_title_en": "What are you looking for today?",
        "loading_text": "กำลังวิเคราะห์ข้อมูล...",
        "loading_text_en": "Analysing listings...",
        "pdpa_text": "ข้อมูลของคุณจะถูกเก็บเป็นความลับตามนโยบาย PDPA",
        "pdpa_text_en": "Your details are kept confidential under our PDPA policy.",
    }


@dataclass
class SmartMatchConfig:
    """Everything the wizard needs to render its steps."""

    buy_budget_ranges: list[BudgetRangeOption] = field(default_factory=list)
    rent_budget_ranges: list[BudgetRangeOption] = field(default_factory=list)
    property_types: list[PropertyTypeOption] = field(default_factory=list)
    office_sizes: list[OfficeSizeOption] = field(default_factory=list)
    settings: dict[str, Any] = field(default_factory=dict)

    @property
    def transit_question_enabled(self) -> bool:
        return bool(self.settings.get("transit_question_enabled", True))

    def budget_ranges_for(self, purpose: SearchPurpose) -> list[BudgetRangeOption]:
        """Active buckets for *purpose*. INVEST shares the BUY buckets."""
        ranges = self.rent_budget_ranges if purpose == SearchPurpose.RENT else self.buy_budget_ranges
        return [r for r in ranges if r.is_active]

    def to_dict(self) -> dict:
        return {
            "buy_budget_ranges": [r.model_dump(mode="json") for r in self.buy_budget_ranges],
            "rent_budget_ranges": [r.model_dump(mode="json") for r in self.rent_budget_ranges],
            "property_types": [p.model_dump(mode="json") for p in self.property_types],
            "office_sizes": [o.model_dump(mode="json") for o in self.office_sizes],
            "settings": dict(self.settings),
        }


def _merge(defaults: list, stored: list) -> list:
    """Stored rows override defaults by id; result sorted by sort_order."""
    merged = {item.id: item for item in defaults}
    for item in stored:
        merged[item.id] = item
    return sorted(merged.values(), key=lambda item: (item.sort_order is None, item.sort_order or 0))


def default_config() -> SmartMatchConfig:
    return SmartMatchConfig(
        buy_budget_ranges=list(DEFAULT_BUY_RANGES),
        rent_budget_ranges=list(DEFAULT_RENT_RANGES),
        property_types=list(DEFAULT_PROPERTY_TYPES),
        office_sizes=list(DEFAULT_OFFICE_SIZES),
        settings=default_settings(),
    )


async def get_smart_match_config(db: AsyncSession) -> SmartMatchConfig:
    """Load wizard configuration, stored rows layered over code defaults."""
    budget_rows = (await db.execute(select(SmartMatchBudgetRange))).scalars().all()
    type_rows = (await db.execute(select(SmartMatchPropertyType))).scalars().all()
    size_rows = (await db.execute(select(SmartMatchOfficeSize))).scalars().all()
    setting_rows = (await db.execute(select(SmartMatchSetting))).scalars().all()

    budgets = [
        BudgetRangeOption(
            id=r.id,
            label=r.label,
            label_en=r.label_en,
            min_value=r.min_value,
            max_value=r.max_value,
            purpose=SearchPurpose(r.purpose),
            sort_order=r.sort_order,
            is_active=bool(r.is_active),
        )
        for r in budget_rows
    ]
    types = [
        PropertyTypeOption(
            id=r.id,
            label=r.label,
            label_en=r.label_en,
            value=PropertyType(r.value),
            sort_order=r.sort_order,
            is_active=bool(r.is_active),
        )
        for r in type_rows
    ]
    sizes = [
        OfficeSizeOption(
            id=r.id,
            bucket=OfficeSizeBucket(r.bucket),
            label=r.label,
            label_en=r.label_en,
            min_sqm=r.min_sqm,
            max_sqm=r.max_sqm,
            sort_order=r.sort_order,
            is_active=bool(r.is_active),
        )
        for r in size_rows
    ]

    settings = default_settings()
    settings.update({row.key: row.value for row in setting_rows})

    return SmartMatchConfig(
        buy_budget_ranges=_merge(DEFAULT_BUY_RANGES, [b for b in budgets if b.purpose != SearchPurpose.RENT]),
        rent_budget_ranges=_merge(DEFAULT_RENT_RANGES, [b for b in budgets if b.purpose == SearchPurpose.RENT]),
        property_types=[t for t in _merge(DEFAULT_PROPERTY_TYPES, types) if t.is_active],
        office_sizes=[s for s in _merge(DEFAULT_OFFICE_SIZES, sizes) if s.is_active],
        settings=settings,
    )


async def update_setting(db: AsyncSession, key: str, value: Any) -> None:
    """Upsert one wizard setting."""
    row = await db.get(SmartMatchSetting, key)
    if row is None:
        db.add(SmartMatchSetting(key=key, value=value))
    else:
        row.value = value
    await db.commit()
    logger.info("Smart-Match setting %s updated", key)


async def save_budget_range(db: AsyncSession, budget_range: BudgetRangeOption) -> None:
    """Create or update a budget bucket (e.g. to deactivate a default one)."""
    row = await db.get(SmartMatchBudgetRange, budget_range.id)
    if row is None:
        row = SmartMatchBudgetRange(id=budget_range.id)
        db.add(row)
    row.purpose = budget_range.purpose.value
    row.label = budget_range.label
    row.label_en = budget_range.label_en
    row.min_value = budget_range.min_value
    row.max_value = budget_range.max_value
    row.sort_order = budget_range.sort_order
    row.is_active = budget_range.is_active
    await db.commit()
