"""Unit tests for page_model.validator module."""

import pytest

from src.page_model.errors import ValidationError
from src.page_model.models import GlobalTheme, PageModel
from src.page_model.validator import PageValidator
from tests.fixtures.sample_pages import make_instance, make_page_model


class TestPageValidator:
    """Test cases for PageValidator.validate."""

    def test_valid_page_passes(self):
        PageValidator.validate(make_page_model())

    def test_page_without_components_fails(self):
        with pytest.raises(ValidationError) as exc_info:
            PageValidator.validate(make_page_model(components=[]))
        assert exc_info.value.field == "components"

    def test_missing_page_fails(self):
        with pytest.raises(ValidationError, match="no page data"):
            PageValidator.validate(PageModel(page=None))

    def test_duplicate_order_index_fails(self):
        model = make_page_model(components=[
            make_instance("a", 1),
            make_instance("b", 1),
        ])
        with pytest.raises(ValidationError) as exc_info:
            PageValidator.validate(model)
        assert exc_info.value.field == "order_index"

    def test_duplicate_component_id_fails(self):
        model = make_page_model(components=[
            make_instance("a", 1),
            make_instance("a", 2),
        ])
        with pytest.raises(ValidationError, match="duplicate component id"):
            PageValidator.validate(model)

    def test_missing_component_type_fails(self):
        model = make_page_model(components=[make_instance("a", 1, component_type="")])
        with pytest.raises(ValidationError) as exc_info:
            PageValidator.validate(model)
        assert exc_info.value.field == "variation"

    def test_invalid_direction_fails(self):
        model = make_page_model(theme=GlobalTheme(direction="up"))
        with pytest.raises(ValidationError) as exc_info:
            PageValidator.validate(model)
        assert exc_info.value.field == "theme.direction"

    def test_empty_language_fails(self):
        model = make_page_model(theme=GlobalTheme(language=" "))
        with pytest.raises(ValidationError, match="language"):
            PageValidator.validate(model)

    def test_rtl_page_passes(self):
        PageValidator.validate(make_page_model(theme=GlobalTheme(direction="rtl", language="ar")))
