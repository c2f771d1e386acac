"""Unit tests for content_injection.renderers module."""

from src.content_injection.parser import TemplateParser
from src.content_injection.renderers import (
    EditableRenderer,
    ProductionRenderer,
    RenderVariant,
    escape_literal,
    format_value,
    get_renderer,
)
from src.content_injection.template_model import RenderContext


def _render(renderer, source, **context):
    return renderer.render(TemplateParser.compile(source), RenderContext(**context))


class TestValueFormatting:
    """Test cases for literal value formatting."""

    def test_escape_literal_neutralises_markup_and_braces(self):
        assert escape_literal('<b>{{x}}</b> & "q"') == (
            "&lt;b&gt;&#123;&#123;x&#125;&#125;&lt;/b&gt; &amp; &quot;q&quot;"
        )

    def test_non_string_values_are_json_encoded_with_sorted_keys(self):
        assert format_value(49) == "49"
        assert format_value(True) == "true"
        assert format_value({"b": 1, "a": 2}) == "&#123;&quot;a&quot;:2,&quot;b&quot;:1&#125;"


class TestProductionRenderer:
    """Test cases for ProductionRenderer."""

    renderer = ProductionRenderer()

    def test_substitutes_content(self):
        html = _render(self.renderer, "<h1>{{content.headline}}</h1>", content={"headline": "Hi"})
        assert html == "<h1>Hi</h1>"

    def test_missing_value_uses_default(self):
        html = _render(self.renderer, "<h1>{{content.headline|Fallback}}</h1>")
        assert html == "<h1>Fallback</h1>"

    def test_missing_value_without_default_is_empty(self):
        html = _render(self.renderer, "<h1>{{content.headline}}</h1>", content={"headline": None})
        assert html == "<h1></h1>"

    def test_list_index_path(self):
        content = {"features": [{"title": "Fast"}, {"title": "Cheap"}]}
        html = _render(self.renderer, "{{content.features.1.title}}|{{content.features.5.title|none}}",
                       content=content)
        assert html == "Cheap|none"

    def test_hidden_block_is_removed(self):
        source = "a{{#visibility.badge}}<span>B</span>{{/visibility.badge}}c"

        assert _render(self.renderer, source, visibility={"badge": False}) == "ac"
        assert _render(self.renderer, source, visibility={}) == "a<span>B</span>c"

    def test_only_explicit_false_hides_block(self):
        source = "{{#visibility.badge}}B{{/visibility.badge}}"

        assert _render(self.renderer, source, visibility={"other": False}) == "B"
        assert _render(self.renderer, source, visibility={"badge": None}) == "B"
        assert _render(self.renderer, source, visibility={"badge": True}) == "B"
        assert _render(self.renderer, source, visibility={"badge": False}) == ""

    def test_editor_blocks_and_comments_are_dropped(self):
        html = _render(self.renderer, "x{{#editor}}<div>tools</div>{{/editor}}{{! note }}y")
        assert html == "xy"

    def test_visibility_reference_renders_boolean(self):
        html = _render(self.renderer, "{{visibility.badge}}", visibility={"badge": False})
        assert html == "false"


class TestEditableRenderer:
    """Test cases for EditableRenderer."""

    renderer = EditableRenderer()

    def test_content_is_wrapped_in_selection_span(self):
        html = _render(self.renderer, "<h1>{{content.headline}}</h1>", content={"headline": "Hi"})
        assert html == '<h1><span data-field="content.headline" data-editable="true">Hi</span></h1>'

    def test_attribute_values_are_not_wrapped(self):
        html = _render(self.renderer, '<img alt="{{content.headline}}">', content={"headline": "Hi"})
        assert html == '<img alt="Hi">'

    def test_hidden_block_is_kept_behind_hidden_wrapper(self):
        html = _render(self.renderer, "{{#visibility.badge}}B{{/visibility.badge}}",
                       visibility={"badge": False})
        assert html == '<div data-visibility-key="badge" data-hidden="true" hidden>B</div>'

    def test_editor_blocks_are_kept(self):
        assert _render(self.renderer, "{{#editor}}tools{{/editor}}") == "tools"


def test_get_renderer_returns_matching_variant():
    assert get_renderer(RenderVariant.PRODUCTION).variant is RenderVariant.PRODUCTION
    assert isinstance(get_renderer(RenderVariant.EDITABLE), EditableRenderer)
