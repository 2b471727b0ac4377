"""Tests for license code formatting, validation and admin filtering."""

from nutriplan.planner.license_code import (
    clean_license_code,
    filter_licenses,
    format_license_input,
    is_valid_license_code,
)
from nutriplan.planner.models import License
from tests.conftest import make_license


class TestFormatLicenseInput:
    def test_uppercases_and_strips_spaces(self):
        assert format_license_input("nutri abcd") == "NUTRI-ABCD"

    def test_full_code(self):
        assert format_license_input("nutriabcd2345wxyz") == "NUTRI-ABCD-2345-WXYZ"

    def test_keeps_typed_dashes(self):
        assert format_license_input("NUTRI-ABCD-2345-WXYZ") == "NUTRI-ABCD-2345-WXYZ"

    def test_partial_prefix_capped(self):
        assert format_license_input("nut") == "NUT"
        assert format_license_input("abcdefgh") == "ABCDE"

    def test_strips_disallowed_characters(self):
        assert format_license_input("nutri_ab*cd") == "NUTRI-ABCD"

    def test_truncates_after_three_segments(self):
        assert format_license_input("NUTRIAAAABBBBCCCCDDDD") == "NUTRI-AAAA-BBBB-CCCC"

    def test_prefix_only(self):
        assert format_license_input("nutri") == "NUTRI"

    def test_empty(self):
        assert format_license_input("") == ""


class TestIsValidLicenseCode:
    def test_valid(self):
        assert is_valid_license_code("NUTRI-ABCD-EFGH-2345") is True

    def test_lowercase_and_spaces_are_cleaned(self):
        assert is_valid_license_code(" nutri-abcd-efgh-2345 ") is True

    def test_zero_and_one_rejected(self):
        assert is_valid_license_code("NUTRI-ABCD-EFGH-2301") is False

    def test_short_segment_rejected(self):
        assert is_valid_license_code("NUTRI-ABC-EFGH-2345") is False

    def test_wrong_prefix_rejected(self):
        assert is_valid_license_code("NUTRA-ABCD-EFGH-2345") is False

    def test_clean(self):
        assert clean_license_code(" nutri-ab cd ") == "NUTRI-ABCD"


class TestFilterLicenses:
    def _licenses(self) -> list[License]:
        return [
            License.model_validate(make_license("l1", "NUTRI-AAAA-BBBB-CCCC", "QUOTA", "Clinique Dakar")),
            License.model_validate(
                make_license("l2", "NUTRI-DDDD-EEEE-FFFF", "SUBSCRIPTION", "Hôpital Bamako", is_active=False)
            ),
            License.model_validate(make_license("l3", "NUTRI-GGGG-HHHH-JJJJ", "SUBSCRIPTION", "Centre Lomé")),
        ]

    def test_no_filters(self):
        assert len(filter_licenses(self._licenses())) == 3

    def test_all_means_no_filter(self):
        assert len(filter_licenses(self._licenses(), "all", "all")) == 3

    def test_by_type(self):
        ids = [lic.id for lic in filter_licenses(self._licenses(), license_type="SUBSCRIPTION")]
        assert ids == ["l2", "l3"]

    def test_by_status(self):
        assert [lic.id for lic in filter_licenses(self._licenses(), status="inactive")] == ["l2"]
        assert [lic.id for lic in filter_licenses(self._licenses(), status="active")] == ["l1", "l3"]

    def test_search_code_case_insensitive(self):
        assert [lic.id for lic in filter_licenses(self._licenses(), search="dddd")] == ["l2"]

    def test_search_name(self):
        assert [lic.id for lic in filter_licenses(self._licenses(), search="clinique")] == ["l1"]

    def test_blank_search_ignored(self):
        assert len(filter_licenses(self._licenses(), search="   ")) == 3

    def test_combined(self):
        result = filter_licenses(self._licenses(), "SUBSCRIPTION", "active", "centre")
        assert [lic.id for lic in result] == ["l3"]
