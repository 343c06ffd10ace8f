"""Integration tests for SqlVariantRepository."""

from decimal import Decimal

import pytest

from storefront.domain.exceptions import ConflictError, NotFoundError, ValidationError
from storefront.domain.model.product import NewProduct, ProductDimensions
from storefront.domain.model.value_objects import Money
from storefront.domain.model.variant import NewProductVariant, VariantChanges
from storefront.infrastructure.persistence.sql_product_repository import SqlProductRepository
from storefront.infrastructure.persistence.sql_variant_repository import SqlVariantRepository


@pytest.fixture
def repo(store, clock):
    return SqlVariantRepository(store, clock=clock)


@pytest.fixture
def product(run, store, clock):
    products = SqlProductRepository(store, clock=clock)
    return run(
        products.create(
            NewProduct(seller_id="alice", name="Tee", slug="tee", price=Money.of("20"))
        )
    )


def _variant(product_id, **overrides):
    fields = dict(product_id=product_id, name="Tee", sku="TEE-R-L", stock_quantity=5)
    fields.update(overrides)
    return NewProductVariant(**fields)


class TestVariants:

    def test_create_and_read_back(self, run, repo, product):
        created = run(
            repo.create(
                _variant(
                    product.id,
                    price=Money.of("22"),
                    attributes={"color": "Red", "size": "L"},
                    dimensions=ProductDimensions(Decimal("70"), Decimal("50"), None),
                    weight=Decimal("0.2"),
                )
            )
        )
        found = run(repo.find_by_id(created.id))
        assert found.display_name() == "Tee (Red / L)"
        assert found.effective_price(product.price) == Money.of("22")
        assert found.dimensions.length == Decimal("70")
        assert run(repo.find_by_sku("TEE-R-L")).id == created.id

    def test_variant_without_price_inherits(self, run, repo, product):
        created = run(repo.create(_variant(product.id)))
        assert not created.has_custom_pricing()
        assert created.effective_price(product.price) == Money.of("20")

    def test_duplicate_sku(self, run, repo, product):
        run(repo.create(_variant(product.id)))
        with pytest.raises(ConflictError, match="TEE-R-L"):
            run(repo.create(_variant(product.id, name="Tee copy")))

    def test_sku_exists(self, run, repo, product):
        created = run(repo.create(_variant(product.id)))
        assert run(repo.sku_exists("TEE-R-L"))
        assert not run(repo.sku_exists("TEE-R-L", exclude_id=created.id))

    def test_active_filter(self, run, repo, product):
        run(repo.create(_variant(product.id, sku="A")))
        hidden = run(repo.create(_variant(product.id, sku="B")))
        run(repo.update(hidden.id, VariantChanges(is_active=False)))

        assert len(run(repo.find_by_product(product.id))) == 2
        assert [v.sku for v in run(repo.find_active_by_product(product.id))] == ["A"]

    def test_update_missing(self, run, repo):
        with pytest.raises(NotFoundError):
            run(repo.update("ghost", VariantChanges(name="x")))

    def test_update_without_fields(self, run, repo, product):
        created = run(repo.create(_variant(product.id)))
        with pytest.raises(ValidationError):
            run(repo.update(created.id, VariantChanges()))

    def test_reserve_and_release(self, run, repo, product):
        created = run(repo.create(_variant(product.id, stock_quantity=5)))

        assert run(repo.reserve_stock(created.id, 5)) is True
        assert run(repo.reserve_stock(created.id, 1)) is False
        run(repo.release_stock(created.id, 2))

        assert run(repo.find_by_id(created.id)).stock_quantity == 2

    def test_update_stock(self, run, repo, product):
        created = run(repo.create(_variant(product.id)))
        run(repo.update_stock(created.id, 9))
        assert run(repo.find_by_id(created.id)).stock_quantity == 9

    def test_delete_by_product(self, run, repo, product):
        run(repo.create(_variant(product.id, sku="A")))
        run(repo.create(_variant(product.id, sku="B")))
        run(repo.delete_by_product(product.id))
        assert run(repo.find_by_product(product.id)) == []

    def test_delete_single(self, run, repo, product):
        created = run(repo.create(_variant(product.id)))
        run(repo.delete(created.id))
        assert not run(repo.exists(created.id))
        with pytest.raises(NotFoundError):
            run(repo.delete(created.id))
