"""Unit tests for the Product aggregate."""

from decimal import Decimal

import pytest

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.product import (
    Product,
    ProductChanges,
    ProductImage,
    ProductStatus,
    ProductVisibility,
)
from storefront.domain.model.value_objects import Money


def _product(**overrides) -> Product:
    fields = dict(
        id="p1",
        seller_id="seller-1",
        name="Trail Runner",
        slug="trail-runner",
        price=Money.of("80"),
    )
    fields.update(overrides)
    return Product(**fields)


class TestProductValidation:

    def test_valid_product_has_defaults(self):
        p = _product()
        assert p.status == ProductStatus.DRAFT
        assert p.visibility == ProductVisibility.PUBLIC
        assert p.low_stock_threshold == 10
        assert p.view_count == 0
        assert p.average_rating == Decimal("0")

    def test_name_required(self):
        with pytest.raises(ValidationError, match="name is required"):
            _product(name="  ")

    def test_slug_required(self):
        with pytest.raises(ValidationError, match="slug is required"):
            _product(slug="")

    def test_first_violation_is_reported(self):
        with pytest.raises(ValidationError, match="name is required"):
            _product(name="", slug="Not A Slug")

    def test_slug_must_be_kebab_case(self):
        with pytest.raises(ValidationError, match="kebab-case"):
            _product(slug="Trail_Runner")

    def test_slug_length_limit(self):
        with pytest.raises(ValidationError, match="255 characters"):
            _product(slug="a" * 256)

    def test_negative_stock_rejected(self):
        with pytest.raises(ValidationError, match="stock quantity must be non-negative"):
            _product(stock_quantity=-1)

    def test_rating_above_five_rejected(self):
        with pytest.raises(ValidationError, match="between 0 and 5"):
            _product(average_rating=Decimal("5.1"))

    def test_at_most_five_images(self):
        images = [ProductImage(url=f"https://img/{i}.jpg") for i in range(6)]
        with pytest.raises(ValidationError, match="maximum 5 images"):
            _product(images=images)

    def test_password_protected_needs_password(self):
        with pytest.raises(ValidationError, match="Password is required"):
            _product(visibility=ProductVisibility.PASSWORD_PROTECTED)

    def test_password_protected_with_password(self):
        p = _product(visibility=ProductVisibility.PASSWORD_PROTECTED, password="s3cret")
        assert p.password == "s3cret"

    def test_lists_are_frozen_into_tuples(self):
        p = _product(tags=["running", "outdoor"])
        assert p.tags == ("running", "outdoor")


class TestAvailability:

    def test_draft_is_not_available(self):
        assert not _product(stock_quantity=5).is_available()

    def test_active_in_stock_is_available(self):
        assert _product(status=ProductStatus.ACTIVE, stock_quantity=5).is_available()

    def test_active_out_of_stock_is_not_available(self):
        p = _product(status=ProductStatus.ACTIVE, stock_quantity=0)
        assert not p.is_available()
        assert p.is_out_of_stock()

    def test_backorders_keep_it_available(self):
        p = _product(status=ProductStatus.ACTIVE, stock_quantity=0, allow_backorders=True)
        assert p.is_available()

    def test_untracked_inventory_is_always_in_stock(self):
        p = _product(status=ProductStatus.ACTIVE, stock_quantity=0, track_inventory=False)
        assert p.is_available()
        assert not p.is_out_of_stock()
        assert not p.is_low_stock()

    def test_low_stock_at_threshold(self):
        assert _product(stock_quantity=10).is_low_stock()
        assert not _product(stock_quantity=11).is_low_stock()


class TestPricing:

    def test_on_sale_with_discount(self):
        p = _product(price=Money.of("80"), compare_price=Money.of("100"))
        assert p.is_on_sale()
        assert p.discount_percentage() == 20

    def test_compare_price_equal_to_price_is_not_a_sale(self):
        p = _product(price=Money.of("100"), compare_price=Money.of("100"))
        assert not p.is_on_sale()
        assert p.discount_percentage() == 0

    def test_no_compare_price_is_not_a_sale(self):
        p = _product()
        assert not p.is_on_sale()
        assert p.discount_percentage() == 0


class TestImages:

    def test_main_image_is_the_flagged_one(self):
        images = [
            ProductImage(url="a.jpg", sort_order=0),
            ProductImage(url="b.jpg", sort_order=1, is_main=True),
        ]
        assert _product(images=images).main_image().url == "b.jpg"

    def test_main_image_falls_back_to_first_added(self):
        images = [ProductImage(url="a.jpg", sort_order=2), ProductImage(url="b.jpg", sort_order=1)]
        assert _product(images=images).main_image().url == "a.jpg"

    def test_no_images(self):
        assert _product().main_image() is None

    def test_sorted_images(self):
        images = [ProductImage(url="c.jpg", sort_order=3), ProductImage(url="a.jpg", sort_order=1)]
        assert [i.url for i in _product(images=images).sorted_images()] == ["a.jpg", "c.jpg"]


class TestTransitions:

    def test_update_returns_new_instance(self):
        p = _product()
        updated = p.update(name="Road Runner")
        assert updated.name == "Road Runner"
        assert p.name == "Trail Runner"
        assert updated.updated_at >= p.updated_at

    def test_update_revalidates(self):
        with pytest.raises(ValidationError, match="kebab-case"):
            _product().update(slug="Bad Slug")

    def test_id_cannot_change(self):
        with pytest.raises(ValidationError, match="id cannot be changed"):
            _product().update(id="p2")

    def test_apply_changes_only_touches_supplied_fields(self):
        p = _product(description="Grippy")
        updated = p.apply(ProductChanges(price=Money.of("70")))
        assert updated.price == Money.of("70")
        assert updated.description == "Grippy"

    def test_apply_can_clear_a_field(self):
        p = _product(description="Grippy")
        assert p.apply(ProductChanges(description=None)).description is None

    def test_mark_as_deleted(self):
        deleted = _product(status=ProductStatus.ACTIVE).mark_as_deleted()
        assert deleted.deleted_at is not None
        assert deleted.status == ProductStatus.INACTIVE

    def test_belongs_to_seller(self):
        p = _product()
        assert p.belongs_to_seller("seller-1")
        assert not p.belongs_to_seller("seller-2")

    def test_empty_changes(self):
        assert ProductChanges().is_empty()
        assert not ProductChanges(name="x").is_empty()
