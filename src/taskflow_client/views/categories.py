# src/taskflow_client/views/categories.py

from __future__ import annotations

import logging

from ..api.client import ApiClient
from ..api.errors import ApiError, friendly_api_error_message
from ..core.ports import Notifier
from ..core.scope import ViewScope
from ..forms import validate_category
from ..tasks.task_models import Category, categories_from_api

logger = logging.getLogger(__name__)


class CategoriesView:
    """
    Category list with the edit/delete policy applied locally:
    system defaults (user_id None) are read-only, categories still holding tasks can't be deleted.
    """

    def __init__(self, api: ApiClient, notifier: Notifier, *, scope: ViewScope | None = None) -> None:
        self._api = api
        self._notifier = notifier
        self._scope = scope or ViewScope("categories")
        self._categories: list[Category] = []
        self.loading = False

    @property
    def categories(self) -> list[Category]:
        return list(self._categories)

    def find(self, category_id: int | str) -> Category | None:
        for c in self._categories:
            if str(c.id) == str(category_id):
                return c
        return None

    async def load(self) -> bool:
        self.loading = True
        try:
            response = await self._scope.run(self._api.categories.list())
        except ApiError as e:
            logger.info("Categories failed to load: %s", e)
            self._notifier.error("Failed to load categories")
            return False
        finally:
            self.loading = False
        if not response.success or self._scope.closed:
            return False
        self._categories = categories_from_api(response.data)
        return True

    async def create(self, name: str, color: str) -> bool:
        payload = validate_category(name, color)
        try:
            response = await self._scope.run(self._api.categories.create(payload))
        except ApiError as e:
            self._notifier.error(friendly_api_error_message(e, "Failed to create category"))
            return False
        if not response.success:
            self._notifier.error(response.message or "Failed to create category")
            return False
        self._notifier.success("Category created successfully")
        await self.load()
        return True

    async def update(self, category_id: int | str, name: str, color: str) -> bool:
        category = self.find(category_id)
        if category is None or not category.can_edit:
            self._notifier.error("This category can't be edited")
            return False
        payload = validate_category(name, color)
        try:
            response = await self._scope.run(self._api.categories.update(category.id, payload))
        except ApiError as e:
            self._notifier.error(friendly_api_error_message(e, "Failed to update category"))
            return False
        if not response.success:
            self._notifier.error(response.message or "Failed to update category")
            return False
        self._notifier.success("Category updated successfully")
        await self.load()
        return True

    async def delete(self, category_id: int | str) -> bool:
        category = self.find(category_id)
        if category is None or not category.can_delete:
            self._notifier.error("This category can't be deleted")
            return False
        try:
            response = await self._scope.run(self._api.categories.delete(category.id))
        except ApiError as e:
            self._notifier.error(friendly_api_error_message(e, "Failed to delete category"))
            return False
        if not response.success:
            self._notifier.error(response.message or "Failed to delete category")
            return False
        if self._scope.closed:
            return False
        self._categories = [c for c in self._categories if str(c.id) != str(category.id)]
        self._notifier.success("Category deleted successfully")
        return True

    async def close(self) -> None:
        await self._scope.close()
