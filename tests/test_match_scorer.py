"""Unit tests for the deterministic Smart-Match scorer."""

import pytest

from propmatch.domain.enums import ListingType, PropertyType, SearchPurpose
from propmatch.domain.schemas import ListingRecord, NumericRange, SearchCriteria
from propmatch.services.match_scorer import (
    PTS_AREA_EXACT,
    PTS_AREA_METRO,
    PTS_AREA_NEAR,
    PTS_BUDGET_EXACT,
    PTS_BUDGET_NEAR,
    PTS_BUDGET_SLIGHTLY_OVER,
    PTS_PURPOSE,
    PTS_TRANSIT_BONUS,
    PTS_TRANSIT_REQUESTED,
    PTS_TYPE_MATCH,
    PTS_TYPE_MISMATCH,
    REASON_MESSAGES,
    listing_types_for,
    score_listing,
)


# ---------------------------------------------------------------------------
# Helpers to build minimal records
# ---------------------------------------------------------------------------

def _listing(**kwargs) -> ListingRecord:
    defaults = {
        "id": "l-1",
        "title": "Condo",
        "listing_type": ListingType.SALE,
        "property_type": "CONDO",
        "price": 4_000_000,
        "popular_area": "พระราม 9",
        "district": "ห้วยขวาง",
        "province": "กรุงเทพมหานคร",
        "near_transit": True,
    }
    defaults.update(kwargs)
    return ListingRecord(**defaults)


def _criteria(**kwargs) -> SearchCriteria:
    defaults = {
        "purpose": SearchPurpose.BUY,
        "budget": NumericRange(min=3_000_000, max=5_000_000),
        "area": "พระราม 9",
        "near_transit": True,
        "property_type": PropertyType.CONDO,
    }
    defaults.update(kwargs)
    return SearchCriteria(**defaults)


def _bare(**kwargs) -> SearchCriteria:
    """Criteria with only what the test sets (purpose defaults to BUY)."""
    return SearchCriteria(**kwargs)


def _points(result, label: str) -> int:
    return sum(b.points for b in result.breakdown if b.label == label)


# ---------------------------------------------------------------------------
# Concrete scenarios
# ---------------------------------------------------------------------------


class TestScenarios:

    def test_perfect_match_clamped_to_100(self):
        result = score_listing(_listing(), _criteria())
        assert result.score == 100
        # 40 + 20 + 30 + 10 + 30
        assert sum(b.points for b in result.breakdown) == 130

    def test_type_mismatch_penalty(self):
        result = score_listing(_listing(property_type="HOUSE"), _criteria())
        assert _points(result, "type") == PTS_TYPE_MISMATCH
        assert result.score == 80
        assert "type_mismatch" in result.reason_codes

    def test_reasons_follow_factor_order(self):
        result = score_listing(_listing(), _criteria())
        assert result.reason_codes == [
            "budget_ok", "purpose_match", "area_exact", "transit_requested", "type_match",
        ]
        assert result.reasons == [REASON_MESSAGES[c] for c in result.reason_codes]

    def test_deterministic(self):
        listing, criteria = _listing(), _criteria()
        assert score_listing(listing, criteria) == score_listing(listing, criteria)


# ---------------------------------------------------------------------------
# Bounds
# ---------------------------------------------------------------------------


class TestBounds:

    def test_floor_at_zero(self):
        listing = _listing(listing_type=ListingType.RENT, near_transit=False, province=None, property_type="HOUSE")
        result = score_listing(listing, _bare(property_type=PropertyType.CONDO))
        assert result.score == 0
        assert sum(b.points for b in result.breakdown) == -20

    @pytest.mark.parametrize("listing_kwargs", [
        {},
        {"property_type": "HOUSE"},
        {"listing_type": ListingType.RENT, "price": None},
        {"price": 0, "near_transit": False, "popular_area": None, "district": None, "province": None},
        {"price": 99_000_000, "property_type": "LAND"},
    ])
    @pytest.mark.parametrize("criteria", [
        _bare(),
        _criteria(),
        _criteria(purpose=SearchPurpose.RENT, near_transit=False),
        _bare(property_type=PropertyType.OFFICE_BUILDING, budget=NumericRange(max=1)),
    ])
    def test_score_within_bounds(self, listing_kwargs, criteria):
        result = score_listing(_listing(**listing_kwargs), criteria)
        assert 0 <= result.score <= 100


# ---------------------------------------------------------------------------
# Budget factor
# ---------------------------------------------------------------------------


class TestBudget:

    def _budget(self, price, budget):
        return _points(score_listing(_listing(price=price), _bare(budget=budget)), "budget")

    def test_in_range(self):
        assert self._budget(4_000_000, NumericRange(min=3_000_000, max=5_000_000)) == PTS_BUDGET_EXACT

    def test_range_inclusive(self):
        budget = NumericRange(min=3_000_000, max=5_000_000)
        assert self._budget(3_000_000, budget) == PTS_BUDGET_EXACT
        assert self._budget(5_000_000, budget) == PTS_BUDGET_EXACT

    def test_near_over_range(self):
        assert self._budget(5_500_000, NumericRange(min=3_000_000, max=5_000_000)) == PTS_BUDGET_NEAR

    def test_beyond_tolerance(self):
        assert self._budget(5_800_000, NumericRange(min=3_000_000, max=5_000_000)) == 0

    def test_below_min_earns_nothing(self):
        assert self._budget(2_000_000, NumericRange(min=3_000_000, max=5_000_000)) == 0

    def test_max_only(self):
        assert self._budget(4_000_000, NumericRange(max=5_000_000)) == PTS_BUDGET_EXACT

    def test_max_only_slightly_over(self):
        assert self._budget(5_400_000, NumericRange(max=5_000_000)) == PTS_BUDGET_SLIGHTLY_OVER

    def test_max_only_too_far_over(self):
        assert self._budget(5_600_000, NumericRange(max=5_000_000)) == 0

    def test_zero_min_behaves_as_max_only(self):
        assert self._budget(5_400_000, NumericRange(min=0, max=5_000_000)) == PTS_BUDGET_SLIGHTLY_OVER

    def test_unpriced_listing_earns_nothing(self):
        assert self._budget(None, NumericRange(min=0, max=5_000_000)) == 0

    def test_no_budget(self):
        assert self._budget(4_000_000, None) == 0

    def test_office_scored_on_derived_price(self):
        office = _listing(property_type="OFFICE_BUILDING", price=None, price_per_sqm=500, size_sqm=100)
        result = score_listing(office, _bare(budget=NumericRange(min=40_000, max=60_000)))
        assert _points(result, "budget") == PTS_BUDGET_EXACT

    def test_rent_uses_rental_price(self):
        listing = _listing(listing_type=ListingType.SALE_AND_RENT, rental_price=20_000)
        result = score_listing(
            listing, _bare(purpose=SearchPurpose.RENT, budget=NumericRange(min=15_000, max=50_000)),
        )
        assert _points(result, "budget") == PTS_BUDGET_EXACT


# ---------------------------------------------------------------------------
# Purpose factor
# ---------------------------------------------------------------------------


class TestPurpose:

    def test_sale_for_buy(self):
        assert _points(score_listing(_listing(), _bare()), "purpose") == PTS_PURPOSE

    def test_rent_listing_for_buy(self):
        result = score_listing(_listing(listing_type=ListingType.RENT), _bare())
        assert _points(result, "purpose") == 0

    def test_sale_and_rent_serves_both(self):
        listing = _listing(listing_type=ListingType.SALE_AND_RENT)
        for purpose in SearchPurpose:
            assert _points(score_listing(listing, _bare(purpose=purpose)), "purpose") == PTS_PURPOSE

    def test_invest_reason(self):
        result = score_listing(_listing(), _bare(purpose=SearchPurpose.INVEST))
        assert "investment" in result.reason_codes

    def test_listing_types_for(self):
        assert listing_types_for(SearchPurpose.RENT) == {ListingType.RENT, ListingType.SALE_AND_RENT}
        assert listing_types_for(SearchPurpose.INVEST) == {ListingType.SALE, ListingType.SALE_AND_RENT}


# ---------------------------------------------------------------------------
# Location factor
# ---------------------------------------------------------------------------


class TestLocation:

    def _area(self, area, **listing_kwargs):
        return _points(score_listing(_listing(**listing_kwargs), _bare(area=area)), "location")

    def test_exact_popular_area(self):
        assert self._area("พระราม 9") == PTS_AREA_EXACT

    def test_synonym_in_district(self):
        assert self._area("Rama 9", popular_area=None) == PTS_AREA_NEAR

    def test_synonym_in_title_case_insensitive(self):
        assert self._area("อโศก", popular_area=None, district=None, title="Condo near ASOKE BTS") == PTS_AREA_NEAR

    def test_unmapped_term_substring(self):
        assert self._area("Huai Khwang", popular_area=None, district="Huai Khwang district") == PTS_AREA_NEAR

    def test_metro_fallback(self):
        assert self._area("สีลม", popular_area="บางนา", district="สรรพาวุธ") == PTS_AREA_METRO

    def test_metro_english_province(self):
        assert self._area("สีลม", popular_area=None, district=None, province="Bangkok") == PTS_AREA_METRO

    def test_outside_metro(self):
        assert self._area("สีลม", popular_area=None, district=None, province="ชลบุรี") == 0

    def test_no_area(self):
        assert self._area(None) == 0


# ---------------------------------------------------------------------------
# Transit factor
# ---------------------------------------------------------------------------


class TestTransit:

    def _transit(self, wanted, near):
        return _points(score_listing(_listing(near_transit=near), _bare(near_transit=wanted)), "transit")

    def test_requested_and_present(self):
        assert self._transit(True, True) == PTS_TRANSIT_REQUESTED

    def test_unrequested_bonus(self):
        assert self._transit(None, True) == PTS_TRANSIT_BONUS

    def test_any_location_bonus(self):
        assert self._transit(False, True) == PTS_TRANSIT_BONUS

    def test_not_near_transit(self):
        assert self._transit(True, False) == 0


# ---------------------------------------------------------------------------
# Type factor
# ---------------------------------------------------------------------------


class TestType:

    def test_match(self):
        result = score_listing(_listing(), _bare(property_type=PropertyType.CONDO))
        assert _points(result, "type") == PTS_TYPE_MATCH

    def test_mismatch(self):
        result = score_listing(_listing(), _bare(property_type=PropertyType.HOUSE))
        assert _points(result, "type") == PTS_TYPE_MISMATCH

    def test_no_preference(self):
        result = score_listing(_listing(), _bare())
        assert _points(result, "type") == 0
