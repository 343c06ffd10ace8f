"""Application service: Add To Cart use case.

Looks the product up so the line captures its *current* price, then
merges into the user's active cart (created on first use).
"""

from __future__ import annotations

import logging

from storefront.application.dto import AddToCartRequest, AddToCartResponse
from storefront.domain.exceptions import DomainException, NotFoundError, ValidationError
from storefront.domain.model.value_objects import Quantity
from storefront.domain.repository.cart_repository import CartRepository
from storefront.domain.repository.product_repository import ProductRepository


class AddToCartHandler:

    def __init__(
        self,
        cart_repo: CartRepository,
        product_repo: ProductRepository,
        logger: logging.Logger | None = None,
    ) -> None:
        self._cart_repo = cart_repo
        self._product_repo = product_repo
        self._log = logger or logging.getLogger(__name__)

    async def handle(self, request: AddToCartRequest) -> AddToCartResponse:
        self._log.info(
            "add to cart user=%s product=%s quantity=%s",
            request.user_id,
            request.product_id,
            request.quantity,
        )
        try:
            quantity = Quantity(request.quantity)

            product = await self._product_repo.find_by_id(request.product_id)
            if product is None:
                raise NotFoundError(f"Product with id '{request.product_id}' not found")
            if not product.is_available():
                raise ValidationError(f"Product '{product.name}' is not available")

            cart = await self._cart_repo.find_or_create_cart_by_user_id(request.user_id)
            item = await self._cart_repo.add_cart_item(
                cart.id, product.id, quantity, product.price
            )
        except DomainException as exc:
            self._log.error(
                "add to cart failed user=%s product=%s: %s",
                request.user_id,
                request.product_id,
                exc,
            )
            raise

        return AddToCartResponse(
            cart_id=cart.id,
            cart_item_id=item.id,
            product_id=item.product_id,
            quantity=item.quantity.value,
            unit_price=str(item.unit_price),
            total_price=str(item.total_price),
        )
