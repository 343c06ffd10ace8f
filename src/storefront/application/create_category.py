"""Application service: Create Category use case."""

from __future__ import annotations

import logging

from storefront.application.dto import CategoryDTO, CreateCategoryRequest
from storefront.domain.exceptions import ConflictError, NotFoundError, ValidationError
from storefront.domain.model.category import (
    MAX_CATEGORY_DEPTH,
    MAX_CATEGORY_LEVEL,
    NewCategory,
)
from storefront.domain.repository.category_repository import CategoryRepository


class CreateCategoryHandler:

    def __init__(
        self,
        category_repo: CategoryRepository,
        logger: logging.Logger | None = None,
    ) -> None:
        self._category_repo = category_repo
        self._log = logger or logging.getLogger(__name__)

    async def handle(self, request: CreateCategoryRequest) -> CategoryDTO:
        if await self._category_repo.slug_exists(request.slug):
            raise ConflictError(f"Category with slug '{request.slug}' already exists")

        if request.parent_id is not None:
            parent = await self._category_repo.find_by_id(request.parent_id)
            if parent is None:
                raise NotFoundError(
                    f"Parent category with id '{request.parent_id}' not found"
                )
            if parent.level >= MAX_CATEGORY_LEVEL:
                raise ValidationError(
                    f"Category nesting cannot exceed {MAX_CATEGORY_DEPTH} levels"
                )

        category = await self._category_repo.create(
            NewCategory(
                name=request.name.strip(),
                slug=request.slug,
                parent_id=request.parent_id,
                description=request.description,
                image_url=request.image_url,
                sort_order=request.sort_order,
                is_active=request.is_active,
            )
        )
        self._log.info("category %s created at level %s", category.id, category.level)
        return CategoryDTO.from_entity(category)
