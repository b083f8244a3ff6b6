"""Tests for wizard configuration defaults and stored overrides."""

from propmatch.domain.enums import SearchPurpose
from propmatch.domain.models import SmartMatchOfficeSize, SmartMatchPropertyType
from propmatch.domain.schemas import BudgetRangeOption
from propmatch.services.smart_match_config import (
    DEFAULT_BUY_RANGES,
    DEFAULT_OFFICE_SIZES,
    DEFAULT_PROPERTY_TYPES,
    default_config,
    get_smart_match_config,
    save_budget_range,
    update_setting,
)


class TestDefaults:

    def test_invest_shares_buy_buckets(self):
        config = default_config()
        assert config.budget_ranges_for(SearchPurpose.INVEST) == config.budget_ranges_for(SearchPurpose.BUY)

    def test_rent_buckets(self):
        ids = [r.id for r in default_config().budget_ranges_for(SearchPurpose.RENT)]
        assert ids == ["rent_1", "rent_2", "rent_3", "rent_4"]

    def test_buckets_are_contiguous(self):
        for lower, upper in zip(DEFAULT_BUY_RANGES, DEFAULT_BUY_RANGES[1:]):
            assert lower.max_value == upper.min_value

    def test_to_dict_is_json_ready(self):
        data = default_config().to_dict()
        assert data["property_types"][2]["value"] == "OFFICE_BUILDING"
        assert data["office_sizes"][0]["bucket"] == "S"
        assert "transit_question_enabled" in data["settings"]


class TestStoredConfig:

    async def test_empty_tables_give_defaults(self, db_session):
        config = await get_smart_match_config(db_session)
        assert config.buy_budget_ranges == DEFAULT_BUY_RANGES
        assert config.property_types == DEFAULT_PROPERTY_TYPES
        assert config.office_sizes == DEFAULT_OFFICE_SIZES

    async def test_setting_override(self, db_session):
        await update_setting(db_session, "transit_question_enabled", False)
        config = await get_smart_match_config(db_session)
        assert config.transit_question_enabled is False

    async def test_setting_update_in_place(self, db_session):
        await update_setting(db_session, "wizard_title_en", "Find a home")
        await update_setting(db_session, "wizard_title_en", "Find an office")
        config = await get_smart_match_config(db_session)
        assert config.settings["wizard_title_en"] == "Find an office"

    async def test_deactivate_default_bucket(self, db_session):
        top = DEFAULT_BUY_RANGES[-1].model_copy(update={"is_active": False})
        await save_budget_range(db_session, top)

        config = await get_smart_match_config(db_session)
        ids = [r.id for r in config.budget_ranges_for(SearchPurpose.BUY)]
        assert ids == ["buy_1", "buy_2", "buy_3"]

    async def test_custom_bucket_sorted_in(self, db_session):
        await save_budget_range(db_session, BudgetRangeOption(
            id="rent_luxury", label="> 5 แสน", label_en="> 500K",
            min_value=500_000, max_value=999_999_999,
            purpose=SearchPurpose.RENT, sort_order=5,
        ))

        config = await get_smart_match_config(db_session)
        assert config.rent_budget_ranges[-1].id == "rent_luxury"
        assert "rent_luxury" not in [r.id for r in config.buy_budget_ranges]

    async def test_inactive_property_type_hidden(self, db_session):
        db_session.add(SmartMatchPropertyType(
            id="townhome", label="ทาวน์โฮม", label_en="Townhome", value="TOWNHOME",
            sort_order=4, is_active=False,
        ))
        await db_session.flush()

        config = await get_smart_match_config(db_session)
        assert "townhome" not in [t.id for t in config.property_types]

    async def test_office_size_override(self, db_session):
        db_session.add(SmartMatchOfficeSize(
            id="office_s", bucket="S", label="(S) < 50 ตร.ม.", min_sqm=0, max_sqm=49.99, sort_order=1,
        ))
        await db_session.flush()

        config = await get_smart_match_config(db_session)
        assert config.office_sizes[0].max_sqm == 49.99
        assert len(config.office_sizes) == len(DEFAULT_OFFICE_SIZES)
