"""Application service: Show Category Tree use case (query)."""

from __future__ import annotations

from collections import defaultdict

from storefront.application.dto import CategoryDTO
from storefront.domain.model.category import Category
from storefront.domain.repository.category_repository import CategoryRepository


class ShowCategoryTreeHandler:

    def __init__(self, category_repo: CategoryRepository) -> None:
        self._category_repo = category_repo

    async def handle(self) -> list[CategoryDTO]:
        """Every category, depth-first: each parent directly above its children.

        Siblings keep the repository's ordering (sort order, then name).
        """
        categories = await self._category_repo.find_category_tree()
        known = {c.id for c in categories}
        children: dict[str | None, list[Category]] = defaultdict(list)
        for category in categories:
            # A dangling parent reference is shown as a root.
            parent = category.parent_id if category.parent_id in known else None
            children[parent].append(category)

        ordered: list[CategoryDTO] = []
        stack = list(reversed(children[None]))
        while stack:
            category = stack.pop()
            ordered.append(CategoryDTO.from_entity(category))
            stack.extend(reversed(children[category.id]))
        return ordered
