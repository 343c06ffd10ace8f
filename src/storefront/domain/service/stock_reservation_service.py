"""Domain service: Stock Reservation.

Coordinates reserving stock for several products at once. Each single
reservation is already atomic in the store (a conditional decrement), so
this service only adds all-or-nothing semantics across lines:

  Phase 1: every product must exist. Fails before any mutation.
  Phase 2: reserve line by line. On the first shortfall, release the
           lines already taken and report failure.

Running short of stock is an expected outcome, reported as False rather
than raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from storefront.domain.exceptions import NotFoundError
from storefront.domain.model.value_objects import Quantity
from storefront.domain.repository.product_repository import ProductRepository


@dataclass(frozen=True)
class StockLine:
    product_id: str
    quantity: Quantity


class StockReservationService:

    def __init__(
        self,
        product_repo: ProductRepository,
        logger: logging.Logger | None = None,
    ) -> None:
        self._product_repo = product_repo
        self._log = logger or logging.getLogger(__name__)

    async def reserve_lines(self, lines: list[StockLine]) -> bool:
        """Reserve every line or none of them."""
        # Phase 1: validate
        for line in lines:
            if not await self._product_repo.exists(line.product_id):
                raise NotFoundError(f"Product with id '{line.product_id}' not found")

        # Phase 2: reserve, compensating on shortfall
        reserved: list[StockLine] = []
        try:
            for line in lines:
                ok = await self._product_repo.reserve_stock(
                    line.product_id, line.quantity.value
                )
                if not ok:
                    self._log.info(
                        "insufficient stock product=%s requested=%s",
                        line.product_id,
                        line.quantity.value,
                    )
                    await self.release_lines(reserved)
                    return False
                reserved.append(line)
        except Exception:
            self._log.error(
                "reservation aborted, releasing %s reserved line(s)", len(reserved)
            )
            await self.release_lines(reserved)
            raise

        self._log.info("reserved stock for %s line(s)", len(reserved))
        return True

    async def release_lines(self, lines: list[StockLine]) -> None:
        """Give back previously reserved units."""
        for line in lines:
            await self._product_repo.release_stock(line.product_id, line.quantity.value)
