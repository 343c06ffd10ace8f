"""Application services: Reserve Stock and Release Stock use cases."""

from __future__ import annotations

from storefront.domain.model.value_objects import Quantity
from storefront.domain.service.stock_reservation_service import (
    StockLine,
    StockReservationService,
)


def _lines(items: list[tuple[str, int]]) -> list[StockLine]:
    return [StockLine(product_id, Quantity(quantity)) for product_id, quantity in items]


class ReserveStockHandler:

    def __init__(self, reservation_service: StockReservationService) -> None:
        self._reservation_service = reservation_service

    async def handle(self, items: list[tuple[str, int]]) -> bool:
        """Reserve every ``(product_id, quantity)`` pair, or none.

        Returns False when any product is short; nothing stays reserved.
        """
        return await self._reservation_service.reserve_lines(_lines(items))


class ReleaseStockHandler:

    def __init__(self, reservation_service: StockReservationService) -> None:
        self._reservation_service = reservation_service

    async def handle(self, items: list[tuple[str, int]]) -> None:
        await self._reservation_service.release_lines(_lines(items))
