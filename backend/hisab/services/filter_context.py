from typing import Optional

from pydantic import ValidationError as SchemaError

from hisab.config import settings
from hisab.errors import ValidationError
from hisab.schemas.product_schema import ProductFilter


class FilterContext:
    """
    Product filter selection for one UI session.

    Owned by the application (``app.state.filter_context``) and handed to the
    request handlers that need it, so the selection survives navigation
    between screens without a module-level global.
    """

    def __init__(self, initial: Optional[ProductFilter] = None):
        self._current = initial.model_copy() if initial else self.defaults()

    @staticmethod
    def defaults() -> ProductFilter:
        return ProductFilter(sort_by=settings.DEFAULT_SORT_BY, sort_order=settings.DEFAULT_SORT_ORDER)

    def get(self) -> ProductFilter:
        return self._current.model_copy()

    def set(self, filters: ProductFilter) -> ProductFilter:
        self._current = filters.model_copy()
        return self.get()

    def merge(self, **updates) -> ProductFilter:
        """
        Partial update; keys may use either the field names (``min_price``)
        or the camelCase aliases (``minPrice``). ``None`` clears a field.
        """
        data = self._current.model_dump()
        try:
            data.update(ProductFilter.model_validate(updates).model_dump(include=self._touched(updates)))
            merged = ProductFilter.model_validate(data)
        except SchemaError as e:
            raise ValidationError(f"Invalid filter: {e}")
        self._current = merged
        return self.get()

    @staticmethod
    def _touched(updates: dict) -> set:
        names = set()
        for key in updates:
            for name, field in ProductFilter.model_fields.items():
                if key in (name, field.alias):
                    names.add(name)
        return names
