"""Integration tests for SqlCategoryRepository."""

import pytest

from storefront.domain.exceptions import ConflictError, NotFoundError, ValidationError
from storefront.domain.model.category import CategoryChanges, NewCategory
from storefront.domain.repository.query import CategoryFilters
from storefront.infrastructure.persistence.sql_category_repository import SqlCategoryRepository


@pytest.fixture
def repo(store, clock):
    return SqlCategoryRepository(store, clock=clock)


def _create(run, repo, slug, parent_id=None, **extra):
    name = extra.pop("name", slug.replace("-", " ").title())
    return run(repo.create(NewCategory(name=name, slug=slug, parent_id=parent_id, **extra)))


def _chain(run, repo, depth):
    """Create *depth* categories, each nested under the previous one."""
    created = []
    parent_id = None
    for i in range(depth):
        category = _create(run, repo, f"level-{i}", parent_id=parent_id)
        created.append(category)
        parent_id = category.id
    return created


class TestLevels:

    def test_root_is_level_zero(self, run, repo):
        root = _create(run, repo, "shoes")
        assert root.level == 0
        assert root.is_root_category()

    def test_child_is_one_below_parent(self, run, repo):
        root = _create(run, repo, "shoes")
        child = _create(run, repo, "trail", parent_id=root.id)
        assert child.level == 1
        assert child.parent_id == root.id

    def test_five_levels_allowed(self, run, repo):
        chain = _chain(run, repo, 5)
        assert [c.level for c in chain] == [0, 1, 2, 3, 4]

    def test_sixth_level_rejected(self, run, repo):
        chain = _chain(run, repo, 5)
        with pytest.raises(ValidationError, match="cannot exceed 5 levels"):
            _create(run, repo, "too-deep", parent_id=chain[-1].id)

    def test_unknown_parent(self, run, repo):
        with pytest.raises(NotFoundError, match="Parent category"):
            _create(run, repo, "orphan", parent_id="ghost")

    def test_reparenting_recomputes_level(self, run, repo):
        a = _create(run, repo, "a")
        b = _create(run, repo, "b", parent_id=a.id)
        c = _create(run, repo, "c")

        moved = run(repo.update(c.id, CategoryChanges(parent_id=b.id)))
        assert moved.level == 2

        back = run(repo.update(c.id, CategoryChanges(parent_id=None)))
        assert back.level == 0
        assert back.parent_id is None

    def test_category_cannot_be_its_own_parent(self, run, repo):
        a = _create(run, repo, "a")
        with pytest.raises(ValidationError, match="own parent"):
            run(repo.update(a.id, CategoryChanges(parent_id=a.id)))

    def test_cannot_move_under_own_descendant(self, run, repo):
        a, b, c = _chain(run, repo, 3)
        with pytest.raises(ValidationError, match="own descendant"):
            run(repo.update(a.id, CategoryChanges(parent_id=c.id)))

        root = run(repo.find_by_id(a.id))
        assert root.parent_id is None
        assert root.level == 0
        assert [x.id for x in run(repo.find_category_tree())] == [a.id, b.id, c.id]


class TestWrites:

    def test_duplicate_slug(self, run, repo):
        _create(run, repo, "shoes")
        with pytest.raises(ConflictError, match="'shoes' already exists"):
            _create(run, repo, "shoes", name="Other Shoes")

    def test_update_fields(self, run, repo):
        a = _create(run, repo, "shoes")
        updated = run(repo.update(a.id, CategoryChanges(name="Footwear", is_active=False)))
        assert updated.name == "Footwear"
        assert updated.slug == "shoes"
        assert updated.is_active is False

    def test_update_without_fields_rejected(self, run, repo):
        a = _create(run, repo, "shoes")
        with pytest.raises(ValidationError):
            run(repo.update(a.id, CategoryChanges()))

    def test_update_missing(self, run, repo):
        with pytest.raises(NotFoundError):
            run(repo.update("ghost", CategoryChanges(name="x")))

    def test_update_into_taken_slug_conflicts(self, run, repo):
        _create(run, repo, "shoes")
        bags = _create(run, repo, "bags")
        with pytest.raises(ConflictError, match="'shoes' already exists"):
            run(repo.update(bags.id, CategoryChanges(slug="shoes")))

    def test_invalid_update_is_never_written(self, run, repo):
        a = _create(run, repo, "shoes")
        with pytest.raises(ValidationError, match="kebab-case"):
            run(repo.update(a.id, CategoryChanges(slug="Bad Slug")))
        assert run(repo.find_by_id(a.id)).slug == "shoes"

    def test_delete_leaf(self, run, repo):
        a = _create(run, repo, "shoes")
        run(repo.delete(a.id))
        assert run(repo.find_by_id(a.id)) is None

    def test_delete_with_children_refused(self, run, repo):
        a = _create(run, repo, "shoes")
        _create(run, repo, "trail", parent_id=a.id)
        with pytest.raises(ConflictError, match="child categories"):
            run(repo.delete(a.id))
        assert run(repo.exists(a.id))

    def test_delete_missing(self, run, repo):
        with pytest.raises(NotFoundError):
            run(repo.delete("ghost"))

    def test_update_sort_order(self, run, repo):
        a = _create(run, repo, "shoes")
        run(repo.update_sort_order(a.id, 7))
        assert run(repo.find_by_slug("shoes")).sort_order == 7

    def test_negative_sort_order_rejected(self, run, repo):
        a = _create(run, repo, "shoes")
        with pytest.raises(ValidationError):
            run(repo.update_sort_order(a.id, -1))

    def test_slug_check_excludes_self(self, run, repo):
        a = _create(run, repo, "shoes")
        assert run(repo.slug_exists("shoes"))
        assert not run(repo.slug_exists("shoes", exclude_id=a.id))


class TestReads:

    def _seed(self, run, repo):
        shoes = _create(run, repo, "shoes", sort_order=2)
        bags = _create(run, repo, "bags", sort_order=1)
        _create(run, repo, "trail", parent_id=shoes.id, sort_order=1)
        _create(run, repo, "road", parent_id=shoes.id, sort_order=0)
        _create(run, repo, "totes", parent_id=bags.id, is_active=False)
        return shoes, bags

    def test_roots_in_sort_order(self, run, repo):
        self._seed(run, repo)
        page = run(repo.find_root_categories())
        assert [c.slug for c in page.items] == ["bags", "shoes"]

    def test_children_in_sort_order(self, run, repo):
        shoes, _ = self._seed(run, repo)
        page = run(repo.find_children(shoes.id))
        assert [c.slug for c in page.items] == ["road", "trail"]

    def test_tree_orders_by_level_then_sort_order(self, run, repo):
        self._seed(run, repo)
        tree = run(repo.find_category_tree())
        assert [c.slug for c in tree] == ["bags", "shoes", "road", "totes", "trail"]

    def test_filters(self, run, repo):
        self._seed(run, repo)
        inactive = run(repo.find_by_filters(CategoryFilters(is_active=False)))
        assert [c.slug for c in inactive.items] == ["totes"]

        level_one = run(repo.find_by_filters(CategoryFilters(level=1)))
        assert level_one.total == 3

        searched = run(repo.find_by_filters(CategoryFilters(search="TRA")))
        assert [c.slug for c in searched.items] == ["trail"]

    def test_find_all_counts_everything(self, run, repo):
        self._seed(run, repo)
        assert run(repo.find_all()).total == 5
