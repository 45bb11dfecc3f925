# store/categories.py
"""
Level-by-level walk over the category tree.

Only one level is ever loaded; ``selected_path`` holds the ancestors from the
root down to the current level, and ``selected_path[i].slug`` is the parent
filter that produced level ``i + 1``.
"""

import logging

from django.utils.translation import gettext as _

from .api import ApiError
from .api import categories as categories_api
from .schemas import Category

logger = logging.getLogger(__name__)

SESSION_KEY = 'category_path'


class CategoryNavigator:
    def __init__(self, client, categories=(), selected_path=()):
        self.client = client
        self.categories = list(categories)
        self.selected_path = list(selected_path)
        self.error = None

    @property
    def is_root(self):
        return not self.selected_path

    @property
    def current(self):
        return self.selected_path[-1] if self.selected_path else None

    @property
    def is_empty_level(self):
        """A leaf: no subcategories below the selected category."""
        return not self.categories and not self.is_root and self.error is None

    @property
    def breadcrumbs(self):
        return [(index, category) for index, category in enumerate(self.selected_path)]

    def _fetch(self, parent):
        try:
            categories = categories_api.get_categories(self.client, parent=parent)
        except ApiError as exc:
            logger.warning("Category level %r failed to load: %s", parent, exc)
            self.error = _("Failed to load categories.")
            return None
        self.error = None
        return categories

    def load_root(self):
        categories = self._fetch(None)
        if categories is None:
            return False
        self.categories = categories
        self.selected_path = []
        return True

    def descend(self, category):
        categories = self._fetch(category.slug)
        if categories is None:
            return False
        self.selected_path.append(category)
        self.categories = categories
        return True

    def ascend_to(self, index):
        """Go back to the level below ``selected_path[index]``; -1 is the root."""
        if index < 0:
            return self.load_root()
        path = self.selected_path[:index + 1]
        categories = self._fetch(path[-1].slug)
        if categories is None:
            return False
        self.selected_path = path
        self.categories = categories
        return True

    def to_session(self):
        return [category.model_dump(mode='json') for category in self.selected_path]

    @classmethod
    def from_session(cls, client, data):
        path = [Category.model_validate(row) for row in data or []]
        return cls(client, selected_path=path)

    def reload(self):
        """Fetch the level the stored path points at."""
        if self.is_root:
            return self.load_root()
        return self.ascend_to(len(self.selected_path) - 1)
