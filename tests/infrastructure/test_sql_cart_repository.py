"""Integration tests for SqlCartRepository."""

import asyncio

import pytest

from storefront.domain.exceptions import NotFoundError
from storefront.domain.model.product import NewProduct, ProductStatus
from storefront.domain.model.value_objects import Money, Quantity
from storefront.infrastructure.persistence.sql_cart_repository import SqlCartRepository
from storefront.infrastructure.persistence.sql_product_repository import SqlProductRepository


@pytest.fixture
def repo(store, clock):
    return SqlCartRepository(store, clock=clock)


@pytest.fixture
def catalog(run, store, clock):
    """Two live products keyed by slug."""
    products = SqlProductRepository(store, clock=clock)
    created = {}
    for slug, name, price in (("shoe", "Trail Shoe", "50"), ("sock", "Wool Sock", "8.50")):
        created[slug] = run(
            products.create(
                NewProduct(
                    seller_id="alice",
                    name=name,
                    slug=slug,
                    price=Money.of(price),
                    status=ProductStatus.ACTIVE,
                    stock_quantity=10,
                )
            )
        )
    return created


class TestCarts:

    def test_find_or_create_is_idempotent(self, run, repo):
        first = run(repo.find_or_create_cart_by_user_id("u1"))
        second = run(repo.find_or_create_cart_by_user_id("u1"))
        assert first.id == second.id
        assert first.user_id == "u1"

    def test_each_user_gets_their_own_cart(self, run, repo):
        a = run(repo.find_or_create_cart_by_user_id("u1"))
        b = run(repo.find_or_create_cart_by_user_id("u2"))
        assert a.id != b.id

    def test_concurrent_first_access_yields_one_cart(self, run, repo):
        async def open_carts():
            return await asyncio.gather(
                *(repo.find_or_create_cart_by_user_id("u1") for _ in range(5))
            )

        carts = run(open_carts())
        assert len({cart.id for cart in carts}) == 1

    def test_find_active_cart_never_creates(self, run, repo):
        assert run(repo.find_active_cart_by_user_id("u1")) is None
        assert run(repo.find_active_cart_by_user_id("u1")) is None

        cart = run(repo.find_or_create_cart_by_user_id("u1"))
        assert run(repo.find_active_cart_by_user_id("u1")).id == cart.id


class TestItems:

    def test_add_new_line(self, run, repo, catalog):
        cart = run(repo.find_or_create_cart_by_user_id("u1"))
        item = run(repo.add_cart_item(cart.id, catalog["shoe"].id, Quantity(2), Money.of("50")))
        assert item.quantity == Quantity(2)
        assert item.total_price == Money.of("100")

    def test_adding_same_product_merges_and_reprices(self, run, repo, catalog):
        cart = run(repo.find_or_create_cart_by_user_id("u1"))
        shoe = catalog["shoe"].id
        first = run(repo.add_cart_item(cart.id, shoe, Quantity(2), Money.of("50")))
        merged = run(repo.add_cart_item(cart.id, shoe, Quantity(3), Money.of("45")))

        assert merged.id == first.id
        lines = run(repo.get_cart_items("u1"))
        assert len(lines) == 1
        assert lines[0].quantity == 5
        assert lines[0].price == Money.of("45")
        assert lines[0].total_price == Money.of("225")

    def test_lines_carry_product_names_newest_first(self, run, repo, catalog):
        cart = run(repo.find_or_create_cart_by_user_id("u1"))
        run(repo.add_cart_item(cart.id, catalog["shoe"].id, Quantity(1), Money.of("50")))
        run(repo.add_cart_item(cart.id, catalog["sock"].id, Quantity(4), Money.of("8.50")))

        lines = run(repo.get_cart_items("u1"))
        assert [line.product_name for line in lines] == ["Wool Sock", "Trail Shoe"]
        assert lines[0].total_price == Money.of("34")

    def test_lines_are_scoped_to_the_user(self, run, repo, catalog):
        cart = run(repo.find_or_create_cart_by_user_id("u1"))
        run(repo.add_cart_item(cart.id, catalog["shoe"].id, Quantity(1), Money.of("50")))
        assert run(repo.get_cart_items("u2")) == []

    def test_soft_deleted_products_drop_out_of_the_cart(self, run, repo, catalog, store, clock):
        cart = run(repo.find_or_create_cart_by_user_id("u1"))
        run(repo.add_cart_item(cart.id, catalog["shoe"].id, Quantity(1), Money.of("50")))
        run(repo.add_cart_item(cart.id, catalog["sock"].id, Quantity(2), Money.of("8.50")))

        run(SqlProductRepository(store, clock=clock).soft_delete(catalog["shoe"].id))

        lines = run(repo.get_cart_items("u1"))
        assert [line.product_name for line in lines] == ["Wool Sock"]

    def test_update_quantity_recomputes_total(self, run, repo, catalog):
        cart = run(repo.find_or_create_cart_by_user_id("u1"))
        run(repo.add_cart_item(cart.id, catalog["sock"].id, Quantity(1), Money.of("8.50")))
        run(repo.update_cart_item_quantity(cart.id, catalog["sock"].id, Quantity(3)))

        (line,) = run(repo.get_cart_items("u1"))
        assert line.quantity == 3
        assert line.total_price == Money.of("25.50")

    def test_update_quantity_for_absent_product(self, run, repo, catalog):
        cart = run(repo.find_or_create_cart_by_user_id("u1"))
        with pytest.raises(NotFoundError, match="not in the cart"):
            run(repo.update_cart_item_quantity(cart.id, catalog["shoe"].id, Quantity(1)))

    def test_remove_line(self, run, repo, catalog):
        cart = run(repo.find_or_create_cart_by_user_id("u1"))
        item = run(repo.add_cart_item(cart.id, catalog["shoe"].id, Quantity(1), Money.of("50")))
        run(repo.remove_cart_item(item.id))
        assert run(repo.get_cart_items("u1")) == []

    def test_remove_missing_line(self, run, repo):
        with pytest.raises(NotFoundError):
            run(repo.remove_cart_item("ghost"))

    def test_clear_keeps_the_cart(self, run, repo, catalog):
        cart = run(repo.find_or_create_cart_by_user_id("u1"))
        run(repo.add_cart_item(cart.id, catalog["shoe"].id, Quantity(1), Money.of("50")))
        run(repo.add_cart_item(cart.id, catalog["sock"].id, Quantity(1), Money.of("8.50")))

        run(repo.clear_cart(cart.id))

        assert run(repo.get_cart_items("u1")) == []
        assert run(repo.find_or_create_cart_by_user_id("u1")).id == cart.id
