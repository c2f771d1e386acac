"""Unit tests for deployment.site_naming module."""

from unittest.mock import patch

import pytest

from src.deployment.site_naming import (
    fallback_site_name,
    normalize_site_name,
    site_name_for,
    uniqueness_token,
)


class TestNormalizeSiteName:
    """Test cases for normalize_site_name."""

    @pytest.mark.parametrize("slug,expected", [
        ("Summer Sale!! 2024", "summer-sale-2024"),
        ("--already-ok--", "already-ok"),
        ("café crème", "caf-cr-me"),
        ("a___b", "a-b"),
        ("", "landing-page"),
        ("!!!", "landing-page"),
        (None, "landing-page"),
    ])
    def test_normalization(self, slug, expected):
        assert normalize_site_name(slug) == expected

    def test_length_is_capped_without_trailing_dash(self):
        name = normalize_site_name("a" * 49 + "-bcdef")

        assert len(name) <= 50
        assert name == "a" * 49
        assert not name.endswith("-")


class TestSiteNames:
    """Test cases for derived site names."""

    def test_site_name_appends_token(self):
        assert site_name_for("Summer Sale", "1700000000000") == "summer-sale-1700000000000"

    @patch('src.deployment.site_naming.time.time', return_value=1700000000.5)
    def test_default_token_is_millisecond_timestamp(self, mock_time):
        assert uniqueness_token() == "1700000000500"
        assert site_name_for("sale") == "sale-1700000000500"

    def test_fallback_site_name(self):
        assert fallback_site_name("Landing 1", "42") == "landing-page-landing-1-42"

    def test_fallback_site_name_truncates_page_part(self):
        name = fallback_site_name("p" * 80, "42")
        assert name == "landing-page-" + "p" * 30 + "-42"
