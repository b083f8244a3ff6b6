"""Unit tests for the popular-area synonym table."""

import pytest

from propmatch.services.location_normalizer import (
    AREA_SYNONYMS,
    POPULAR_AREAS,
    canonical_area,
    expand,
)


class TestExpand:

    def test_rama9_english_includes_thai(self):
        terms = expand("Rama 9")
        assert "Rama 9" in terms
        assert "พระราม 9" in terms

    def test_rama9_thai_includes_english(self):
        terms = expand("พระราม 9")
        assert "พระราม 9" in terms
        assert "Rama 9" in terms

    def test_includes_districts(self):
        assert "ห้วยขวาง" in expand("พระราม 9")

    def test_case_insensitive_lookup(self):
        terms = expand("  rama 9 ")
        assert "พระราม 9" in terms
        # input kept verbatim
        assert "  rama 9 " in terms

    def test_unknown_term_is_singleton(self):
        assert expand("Hua Hin") == {"Hua Hin"}

    def test_no_partial_matching(self):
        assert expand("Rama") == {"Rama"}

    def test_district_is_forward_only(self):
        # วัฒนา belongs to several areas, so it doesn't expand on its own
        assert expand("วัฒนา") == {"วัฒนา"}

    @pytest.mark.parametrize("canonical", list(AREA_SYNONYMS))
    def test_every_alias_resolves_to_its_area(self, canonical):
        for alias in AREA_SYNONYMS[canonical].aliases:
            assert canonical in expand(alias)


class TestCanonicalArea:

    def test_alias(self):
        assert canonical_area("Thonglor") == "ทองหล่อ"

    def test_canonical(self):
        assert canonical_area("สีลม") == "สีลม"

    def test_unknown(self):
        assert canonical_area("Pattaya") is None

    def test_empty(self):
        assert canonical_area("") is None


def test_popular_areas_follow_table_order():
    assert POPULAR_AREAS[0] == "อ่อนนุช"
    assert len(POPULAR_AREAS) == len(AREA_SYNONYMS)
