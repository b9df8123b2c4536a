# tests/test_phone.py
import pytest

from accounts.phone import build_phone_variants, normalize_phone


class TestNormalizePhone:

    def test_strips_separators(self):
        assert normalize_phone("050-123 4567") == "0501234567"
        assert normalize_phone("(050) 123.4567") == "0501234567"

    def test_keeps_leading_plus(self):
        assert normalize_phone("+966 50 123 4567") == "+966501234567"

    def test_empty(self):
        assert normalize_phone("") == ""
        assert normalize_phone(None) == ""


class TestBuildPhoneVariants:

    @pytest.mark.parametrize(
        "raw",
        ["0501234567", "501234567", "966501234567", "+966501234567", "00966501234567", "050 123-4567"],
    )
    def test_every_stored_form_matches(self, raw):
        variants = build_phone_variants(raw, country_code="966")

        for form in ("0501234567", "501234567", "966501234567", "+966501234567"):
            assert form in variants

    def test_result_is_sorted_and_unique(self):
        variants = build_phone_variants("+966501234567", country_code="966")

        assert variants == sorted(set(variants))

    def test_deterministic(self):
        assert build_phone_variants("0501234567", "966") == build_phone_variants("0501234567", "966")

    def test_uses_configured_country_code(self, settings):
        settings.DEFAULT_PHONE_COUNTRY_CODE = "971"

        assert "+971501234567" in build_phone_variants("0501234567")

    def test_blank_input_has_no_variants(self):
        assert build_phone_variants("   ", country_code="966") == []
