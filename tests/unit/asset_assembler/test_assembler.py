"""Unit tests for asset_assembler.assembler module."""

from datetime import datetime, timezone

import pytest
from bs4 import BeautifulSoup

from src.asset_assembler.assembler import AssetAssembler, ordered_components
from src.page_model.errors import ValidationError
from src.page_model.models import GlobalTheme, TrackingConfig
from tests.fixtures.sample_pages import (
    CTA_CONTENT,
    FIXED_BUILD_TIME,
    make_instance,
    make_page_model,
)


def _component_order(index_html: str):
    soup = BeautifulSoup(index_html, "html.parser")
    return [div["data-component-id"] for div in soup.find_all("div", attrs={"data-component-id": True})]


class TestOrderedComponents:
    """Test cases for ordered_components."""

    def test_sorts_by_order_index(self):
        model = make_page_model(components=[
            make_instance("b", 5),
            make_instance("a", 2),
            make_instance("c", 9),
        ])
        assert [c.id for c in ordered_components(model)] == ["a", "b", "c"]


class TestAssetAssembler:
    """Test cases for AssetAssembler.assemble."""

    def setup_method(self):
        self.assembler = AssetAssembler()

    def test_file_set(self):
        site = self.assembler.assemble(make_page_model(), build_time=FIXED_BUILD_TIME)

        assert site.files.paths == ["_headers", "_redirects", "app.js", "index.html", "styles.css"]
        assert site.build_time == FIXED_BUILD_TIME
        assert site.diagnostics == []
        assert site.used_fallback is False

    def test_components_follow_order_index_not_list_order(self):
        """A cta with order 1 renders before a hero with order 2."""
        model = make_page_model(components=[
            make_instance("hero-1", 2, "hero", 1),
            make_instance("cta-1", 1, "cta", 1, content=dict(CTA_CONTENT), media_urls={}),
        ])

        site = self.assembler.assemble(model, build_time=FIXED_BUILD_TIME)

        assert _component_order(site.files.text("index.html")) == ["cta-1", "hero-1"]
        assert [result.component_id for result in site.components] == ["cta-1", "hero-1"]

    def test_document_shell(self):
        site = self.assembler.assemble(make_page_model(theme=GlobalTheme(direction="rtl", language="ar")),
                                       build_time=FIXED_BUILD_TIME)
        index_html = site.files.text("index.html")

        assert index_html.startswith("<!DOCTYPE html>\n")
        assert '<html lang="ar" dir="rtl">' in index_html
        assert "<title>Summer Sale</title>" in index_html
        assert '<meta name="build-timestamp" content="2024-06-01T12:00:00+00:00">' in index_html
        assert '<link rel="stylesheet" href="styles.css">' in index_html
        assert '<script src="app.js" defer></script>' in index_html
        assert 'data-component="HeroVariation1"' in index_html
        assert "fonts.googleapis.com/css2?family=Inter" in index_html

    def test_deployment_url_sets_canonical(self):
        site = self.assembler.assemble(make_page_model(), build_time=FIXED_BUILD_TIME,
                                       deployment_url="https://summer-sale-x.netlify.app")

        assert '<link rel="canonical" href="https://summer-sale-x.netlify.app">' in site.files.text("index.html")

    def test_identical_inputs_give_identical_files(self):
        first = self.assembler.assemble(make_page_model(), build_time=FIXED_BUILD_TIME)
        second = AssetAssembler().assemble(make_page_model(), build_time=FIXED_BUILD_TIME)

        assert first.files == second.files
        assert first.files.digests() == second.files.digests()

    def test_only_index_changes_with_build_time(self):
        first = self.assembler.assemble(make_page_model(), build_time=FIXED_BUILD_TIME)
        later = datetime(2025, 1, 1, tzinfo=timezone.utc)
        second = self.assembler.assemble(make_page_model(), build_time=later)

        changed = [path for path in first.files.paths
                   if first.files.get(path).sha1 != second.files.get(path).sha1]
        assert changed == ["index.html"]

    def test_invalid_model_fails_before_rendering(self):
        model = make_page_model(components=[make_instance("a", 1), make_instance("b", 1)])
        self.assembler.engine = None

        with pytest.raises(ValidationError):
            self.assembler.assemble(model)

    def test_fallback_and_tracking_problems_become_diagnostics(self):
        model = make_page_model(
            components=[make_instance("g", 1, "gallery", content={}, media_urls={})],
            tracking=TrackingConfig(facebook_pixel_id="123"),
        )

        site = self.assembler.assemble(model, build_time=FIXED_BUILD_TIME)

        assert site.used_fallback is True
        assert len(site.diagnostics) == 2
        assert site.diagnostics[0].startswith("component g:")
        assert "fbq('init'" not in site.files.text("index.html")

    def test_component_styles_reach_stylesheet(self):
        model = make_page_model(components=[
            make_instance("hero-1", 1, styles={"headline": {"fontSize": 48}}),
        ])

        css = self.assembler.assemble(model, build_time=FIXED_BUILD_TIME).files.text("styles.css")

        assert '#component-hero-1 [data-element="headline"] {\n  font-size: 48px;\n}' in css

    def test_source_archive_adds_netlify_toml(self):
        site = self.assembler.assemble(make_page_model(), build_time=FIXED_BUILD_TIME)

        archive = site.source_archive_files()

        assert "netlify.toml" in archive
        assert "netlify.toml" not in site.files
        assert len(archive) == len(site.files) + 1
