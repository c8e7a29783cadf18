"""
Cost category service.

Categories are global reference data: any authenticated user can read them,
writes need the ``system.settings.manage`` permission.
"""

from __future__ import annotations

from typing import List, Optional

from fnb_cost.core.database.entities import Category, User
from fnb_cost.core.database.repositories import SqlRepoBundle
from fnb_cost.core.errors import ConflictError, NotFoundError
from fnb_cost.core.logging_config import get_logger
from fnb_cost.core.models.domain import CategoryType
from fnb_cost.core.models.io.categories import CategoryCreate, CategoryRead, CategoryUpdate

from .access import AccessControl
from .audit import AuditService, snapshot

logger = get_logger(__name__)

RESOURCE = "category"
MANAGE_PERMISSION = "system.settings.manage"


class CategoryService:
    def __init__(self, repos: SqlRepoBundle, user: User, audit: AuditService) -> None:
        self.repos = repos
        self.user = user
        self.access = AccessControl(repos, user)
        self.audit = audit

    async def _get(self, category_id: int) -> Category:
        category = await self.repos.categories.get_by_id(category_id)
        if category is None:
            raise NotFoundError("Category", category_id)
        return category

    async def list_categories(self, category_type: Optional[CategoryType] = None) -> List[CategoryRead]:
        categories = await self.repos.categories.list_by_type(category_type.value if category_type else None)
        return [CategoryRead.model_validate(c) for c in categories]

    async def get_category(self, category_id: int) -> CategoryRead:
        return CategoryRead.model_validate(await self._get(category_id))

    async def create_category(self, data: CategoryCreate) -> CategoryRead:
        self.access.require(MANAGE_PERMISSION)
        if await self.repos.categories.get_by_name(data.name, data.type.value):
            raise ConflictError(f"{data.type.value} category {data.name} already exists")
        category = await self.repos.categories.create(
            Category(name=data.name, description=data.description, type=data.type.value)
        )
        await self.audit.log_data_change("CREATE", RESOURCE, category.id, after=category)
        return CategoryRead.model_validate(category)

    async def update_category(self, category_id: int, data: CategoryUpdate) -> CategoryRead:
        self.access.require(MANAGE_PERMISSION)
        category = await self._get(category_id)
        changes = data.model_dump(exclude_unset=True)
        name = changes.get("name") or category.name
        category_type = changes["type"].value if changes.get("type") else category.type
        existing = await self.repos.categories.get_by_name(name, category_type)
        if existing is not None and existing.id != category.id:
            raise ConflictError(f"{category_type} category {name} already exists")

        before = snapshot(category)
        category.name = name
        category.type = category_type
        if "description" in changes:
            category.description = changes["description"]
        category = await self.repos.categories.update(category)
        await self.audit.log_data_change("UPDATE", RESOURCE, category.id, before=before, after=category)
        return CategoryRead.model_validate(category)

    async def delete_category(self, category_id: int) -> None:
        self.access.require(MANAGE_PERMISSION)
        category = await self._get(category_id)
        if await self.repos.categories.is_in_use(category_id):
            raise ConflictError(f"Category {category_id} is used by cost entries")
        before = snapshot(category)
        await self.repos.categories.delete(category_id)
        logger.info(f"User {self.user.id} deleted category {category_id}")
        await self.audit.log_data_change("DELETE", RESOURCE, category_id, before=before)
