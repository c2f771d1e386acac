"""Unit tests for content_injection.engine module."""

import logging

from src.content_injection.engine import (
    ContentInjectionEngine,
    inject_component,
    name_marker,
    normalize_whitespace,
    theme_namespace,
)
from src.content_injection.errors import MissingHookError, TemplateError, TemplateSyntaxError
from src.content_injection.renderers import RenderVariant
from src.page_model.models import GlobalTheme
from tests.fixtures.sample_pages import make_instance


class TestNormalizeWhitespace:
    """Test cases for normalize_whitespace."""

    def test_trailing_spaces_and_blank_runs(self):
        assert normalize_whitespace("\n\na  \n\n\n\nb\t\n\n") == "a\n\nb"

    def test_crlf_is_converted(self):
        assert normalize_whitespace("a\r\nb") == "a\nb"


class TestThemeNamespace:
    """Test cases for theme_namespace."""

    def test_snake_and_camel_keys(self):
        values = theme_namespace(GlobalTheme(primary_color="#111111"))

        assert values["primary_color"] == "#111111"
        assert values["primaryColor"] == "#111111"
        assert values["language"] == "en"


class TestContentInjectionEngine:
    """Test cases for ContentInjectionEngine.inject."""

    def setup_method(self):
        self.engine = ContentInjectionEngine()
        self.theme = GlobalTheme()

    def test_library_hero_renders_content(self):
        """The built-in hero template is filled with the instance content."""
        result = self.engine.inject(make_instance(), self.theme)

        assert result.name == "HeroVariation1"
        assert result.component_id == "c1"
        assert result.used_fallback is False
        assert result.errors == []
        assert result.html.startswith(name_marker("HeroVariation1"))
        assert "Summer Sale" in result.html
        assert "49 USD" in result.html
        assert 'src="https://cdn.example.com/p.png"' in result.html
        assert "{{" not in result.html

    def test_editor_blocks_are_removed(self):
        result = self.engine.inject(make_instance(), self.theme)

        assert "lp-editor-overlay" not in result.html
        assert "data-editable" not in result.html

    def test_hidden_elements_are_pruned(self):
        instance = make_instance(visibility={"badge": False, "price": False})

        html = self.engine.inject(instance, self.theme).html

        assert 'data-element="badge"' not in html
        assert 'data-element="priceContainer"' not in html
        assert 'data-element="headline"' in html

    def test_absent_visibility_key_renders(self):
        """A variation default does not hide a key the instance leaves out."""
        instance = make_instance(visibility={"price": False}, default_visibility=(("badge", False),))

        html = self.engine.inject(instance, self.theme).html

        assert 'data-element="badge"' in html
        assert 'data-element="priceContainer"' not in html

    def test_content_is_escaped(self):
        instance = make_instance(content={"headline": "<script>alert(1)</script>",
                                          "subheadline": "{{content.x}}", "ctaText": "Go"})

        html = self.engine.inject(instance, self.theme).html

        assert "<script>" not in html
        assert "&lt;script&gt;" in html
        assert "&#123;&#123;content.x&#125;&#125;" in html

    def test_rendering_is_idempotent(self):
        """Feeding rendered output back in as the template changes nothing."""
        first = self.engine.inject(make_instance(), self.theme)

        second = self.engine.inject(make_instance(template=first.html), self.theme)

        assert second.used_fallback is False
        assert second.html == first.html

    def test_idempotent_for_custom_template_with_unbalanced_braces_in_content(self):
        template = "<h1>{{content.headline}}</h1>"
        instance = make_instance(template=template, content={"headline": "a { b }} c"})
        first = self.engine.inject(instance, self.theme)

        second = self.engine.inject(make_instance(template=first.html, content={}), self.theme)

        assert second.html == first.html

    def test_theme_reference(self):
        instance = make_instance(template='<p style="color: {{theme.primaryColor}}">x</p>')

        html = self.engine.inject(instance, GlobalTheme(primary_color="#ff0000")).html

        assert 'style="color: #ff0000"' in html

    def test_missing_hook_renders_fallback(self, caplog):
        """A template without a required hook degrades to the fallback skeleton."""
        instance = make_instance(
            template="<h1>{{content.headline}}</h1>",
            required_fields=("headline", "ctaText"),
        )

        with caplog.at_level(logging.WARNING, logger="src.content_injection.engine"):
            result = self.engine.inject(instance, self.theme)

        assert result.used_fallback is True
        assert isinstance(result.errors[0], MissingHookError)
        assert result.errors[0].missing == ["content.ctaText"]
        assert 'data-fallback="true"' in result.html
        assert result.html.startswith(name_marker("HeroVariation1"))
        assert "Summer Sale" in result.html
        assert "fallback skeleton" in caplog.text

    def test_missing_image_slot_renders_fallback(self):
        instance = make_instance(template="<h1>{{content.headline}}</h1>", required_images=1)

        result = self.engine.inject(instance, self.theme)

        assert result.used_fallback is True
        assert "image slot" in str(result.errors[0])
        assert 'src="https://cdn.example.com/p.png"' in result.html

    def test_syntax_error_renders_fallback(self):
        instance = make_instance(template="<h1>{{#visibility.a}}</h1>")

        result = self.engine.inject(instance, self.theme)

        assert result.used_fallback is True
        assert isinstance(result.errors[0], TemplateSyntaxError)

    def test_unknown_variation_without_template_renders_fallback(self):
        instance = make_instance(component_type="gallery", number=3, content={}, media_urls={})

        result = self.engine.inject(instance, self.theme)

        assert result.name == "GalleryVariation3"
        assert result.used_fallback is True
        assert isinstance(result.errors[0], TemplateError)
        assert "Gallery Component" in result.html
        assert "Variation 3" in result.html

    def test_fallback_honours_custom_actions(self):
        instance = make_instance(
            component_type="gallery",
            content={"ctaText": "Buy"},
            media_urls={},
            custom_actions={"cta": "checkout"},
        )

        html = self.engine.inject(instance, self.theme).html

        assert 'data-element="ctaButton"' in html
        assert 'data-action="checkout"' in html
        assert ">Buy</button>" in html

    def test_compile_is_cached(self):
        variation = make_instance().variation
        assert self.engine.compile(variation) is self.engine.compile(variation)

    def test_resolved_template_skips_hook_check(self):
        """Already rendered markup is accepted even though it has no hooks."""
        rendered = f"{name_marker('HeroVariation1')}\n<section>done</section>"
        instance = make_instance(template=rendered, required_fields=("headline",))

        result = self.engine.inject(instance, self.theme)

        assert result.used_fallback is False
        assert result.html == rendered


class TestEditableVariant:
    """Test cases for the editable rendering."""

    def test_editable_output_keeps_editor_constructs(self):
        result = inject_component(make_instance(visibility={"badge": False}), GlobalTheme(),
                                  variant=RenderVariant.EDITABLE)

        assert "lp-editor-overlay" in result.html
        assert 'data-field="content.headline"' in result.html
        assert 'data-visibility-key="badge"' in result.html
