"""Unit tests for the StockReservationService domain service."""

import pytest

from storefront.domain.exceptions import NotFoundError, StoreError
from storefront.domain.model.product import Product
from storefront.domain.model.value_objects import Money, Quantity
from storefront.domain.service.stock_reservation_service import (
    StockLine,
    StockReservationService,
)
from tests.fakes import FakeProductRepository


def _repo(*specs: tuple[str, int]) -> FakeProductRepository:
    """Create repo with (product_id, stock) tuples."""
    return FakeProductRepository(
        [
            Product(
                id=pid,
                seller_id="seller-1",
                name=f"Product {pid}",
                slug=f"product-{pid}",
                price=Money.of("10"),
                stock_quantity=stock,
            )
            for pid, stock in specs
        ]
    )


def _lines(*specs: tuple[str, int]) -> list[StockLine]:
    return [StockLine(pid, Quantity(qty)) for pid, qty in specs]


class ExplodingProductRepository(FakeProductRepository):
    """Fails when asked to reserve one specific product."""

    def __init__(self, products, explode_on: str) -> None:
        super().__init__(products)
        self._explode_on = explode_on

    async def reserve_stock(self, product_id, quantity):
        if product_id == self._explode_on:
            raise StoreError("connection reset")
        return await super().reserve_stock(product_id, quantity)


class TestReserveLines:

    def test_reserves_all_lines(self, run):
        repo = _repo(("1", 100), ("2", 50))
        svc = StockReservationService(repo)

        assert run(svc.reserve_lines(_lines(("1", 10), ("2", 5)))) is True

        assert repo.raw("1").stock_quantity == 90
        assert repo.raw("2").stock_quantity == 45

    def test_shortfall_reports_false(self, run):
        repo = _repo(("1", 5))
        svc = StockReservationService(repo)

        assert run(svc.reserve_lines(_lines(("1", 10)))) is False
        assert repo.raw("1").stock_quantity == 5

    def test_no_partial_reservation_on_shortfall(self, run):
        """If line 1 succeeds but line 2 is short, line 1 is given back."""
        repo = _repo(("1", 100), ("2", 3))
        svc = StockReservationService(repo)

        assert run(svc.reserve_lines(_lines(("1", 10), ("2", 5)))) is False

        assert repo.raw("1").stock_quantity == 100
        assert repo.raw("2").stock_quantity == 3

    def test_missing_product_fails_before_any_reservation(self, run):
        repo = _repo(("1", 100))
        svc = StockReservationService(repo)

        with pytest.raises(NotFoundError, match="'missing' not found"):
            run(svc.reserve_lines(_lines(("1", 10), ("missing", 1))))

        assert repo.raw("1").stock_quantity == 100

    def test_store_failure_releases_and_reraises(self, run):
        products = _repo(("1", 100), ("2", 100))
        repo = ExplodingProductRepository(
            [products.raw("1"), products.raw("2")], explode_on="2"
        )
        svc = StockReservationService(repo)

        with pytest.raises(StoreError, match="connection reset"):
            run(svc.reserve_lines(_lines(("1", 10), ("2", 5))))

        assert repo.raw("1").stock_quantity == 100


class TestReleaseLines:

    def test_release_puts_units_back(self, run):
        repo = _repo(("1", 4))
        svc = StockReservationService(repo)

        run(svc.release_lines(_lines(("1", 6))))

        assert repo.raw("1").stock_quantity == 10
