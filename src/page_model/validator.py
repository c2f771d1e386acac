"""Semantic validation of page models.

Runs before asset generation so a malformed page fails fast, before any
request reaches the hosting provider.
"""

import logging
from typing import Set

from .errors import ValidationError
from .models import PageModel, TextDirection

logger = logging.getLogger(__name__)


class PageValidator:
    """Validates a parsed PageModel.

    Checks:
        - the page has at least one component
        - every component has an id and a complete variation reference
        - order_index values are integers and unique within the page
        - component ids are unique (they become DOM ids)
        - theme direction is "ltr" or "rtl" and language is a non-empty string
    """

    VALID_DIRECTIONS = {d.value for d in TextDirection}

    @classmethod
    def validate(cls, model: PageModel) -> None:
        """Validate a page model.

        Args:
            model: Page model to validate

        Raises:
            ValidationError: On the first problem found
        """
        if model is None or model.page is None:
            raise ValidationError("no page data provided")

        if not model.page.id or not str(model.page.id).strip():
            raise ValidationError("page id is required", 'id')

        if not model.components:
            raise ValidationError("page must have at least one component", 'components')

        seen_orders: Set[int] = set()
        seen_ids: Set[str] = set()
        for index, component in enumerate(model.components):
            if not component.id:
                raise ValidationError(f"component at index {index} is missing an id", 'components')

            if component.id in seen_ids:
                raise ValidationError(f"duplicate component id '{component.id}'", 'components')
            seen_ids.add(component.id)

            variation = component.variation
            if variation is None or not variation.component_type:
                raise ValidationError(
                    f"component {component.id} is missing its component type",
                    'variation'
                )
            if not isinstance(variation.variation_number, int) or variation.variation_number < 1:
                raise ValidationError(
                    f"component {component.id} has invalid variation number "
                    f"{variation.variation_number!r}",
                    'variation'
                )

            order = component.order_index
            if not isinstance(order, int) or isinstance(order, bool):
                raise ValidationError(
                    f"component {component.id} has invalid order_index {order!r}",
                    'order_index'
                )
            if order in seen_orders:
                raise ValidationError(
                    f"duplicate order_index {order} (component {component.id})",
                    'order_index'
                )
            seen_orders.add(order)

        cls._validate_theme(model)
        logger.debug(f"Page {model.page.id} passed validation ({len(model.components)} components)")

    @classmethod
    def _validate_theme(cls, model: PageModel) -> None:
        theme = model.page.theme
        if theme.direction not in cls.VALID_DIRECTIONS:
            raise ValidationError(
                f'theme direction must be "ltr" or "rtl", got {theme.direction!r}',
                'theme.direction'
            )
        if not isinstance(theme.language, str) or not theme.language.strip():
            raise ValidationError("theme language must be a non-empty string", 'theme.language')
