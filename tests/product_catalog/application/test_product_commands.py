"""Application tests for product commands."""

import json
from datetime import UTC, datetime, timedelta

import pytest
from product_catalog.product.creation import CreateProduct
from product_catalog.product.details import TagProduct, UpdateProductDetails
from product_catalog.product.lifecycle import (
    ArchiveProduct,
    PublishProduct,
    PublishScheduledProducts,
    ScheduleProduct,
)
from product_catalog.product.media import AddProductMedia, SetCoverMedia
from product_catalog.product.product import Product, ProductStatus
from product_catalog.product.variants import AddVariant, RemoveVariant, UpdateVariant
from protean import current_domain
from protean.exceptions import ValidationError


def _create_product(**overrides):
    defaults = {"title": "Cotton Chinos", "brand": "Modett"}
    defaults.update(overrides)
    return current_domain.process(CreateProduct(**defaults), asynchronous=False)


def _add_variant(product_id, sku="CHINO-32", price=65.0):
    return current_domain.process(AddVariant(product_id=product_id, sku=sku, price=price), asynchronous=False)


class TestCreateProduct:
    def test_persists_product(self):
        product_id = _create_product(tags=json.dumps(["cotton"]))
        product = current_domain.repository_for(Product).get(product_id)
        assert product.title == "Cotton Chinos"
        assert product.tag_list() == ["cotton"]

    def test_duplicate_slug_rejected(self):
        _create_product()
        with pytest.raises(ValidationError) as exc:
            _create_product()
        assert "slug" in exc.value.messages


class TestUpdateProduct:
    def test_update_details(self):
        product_id = _create_product()
        current_domain.process(
            UpdateProductDetails(product_id=product_id, short_description="Slim fit"),
            asynchronous=False,
        )
        product = current_domain.repository_for(Product).get(product_id)
        assert product.short_description == "Slim fit"

    def test_slug_change_checks_uniqueness(self):
        _create_product(title="Other Product")
        product_id = _create_product()
        with pytest.raises(ValidationError):
            current_domain.process(
                UpdateProductDetails(product_id=product_id, slug="other-product"),
                asynchronous=False,
            )

    def test_tag_product(self):
        product_id = _create_product()
        current_domain.process(TagProduct(product_id=product_id, tags=json.dumps(["Summer"])), asynchronous=False)
        assert current_domain.repository_for(Product).get(product_id).tag_list() == ["summer"]


class TestVariantCommands:
    def test_add_variant_returns_id(self):
        product_id = _create_product()
        variant_id = _add_variant(product_id)
        product = current_domain.repository_for(Product).get(product_id)
        assert str(product.variants[0].id) == variant_id

    def test_update_variant_price(self):
        product_id = _create_product()
        variant_id = _add_variant(product_id)
        current_domain.process(
            UpdateVariant(product_id=product_id, variant_id=variant_id, price=55.555),
            asynchronous=False,
        )
        product = current_domain.repository_for(Product).get(product_id)
        assert product.variants[0].price == 55.56

    def test_remove_variant(self):
        product_id = _create_product()
        variant_id = _add_variant(product_id)
        current_domain.process(RemoveVariant(product_id=product_id, variant_id=variant_id), asynchronous=False)
        assert len(current_domain.repository_for(Product).get(product_id).variants) == 0


class TestMediaCommands:
    def test_add_and_set_cover(self):
        product_id = _create_product()
        current_domain.process(
            AddProductMedia(product_id=product_id, asset_url="https://cdn.example.com/1.jpg"),
            asynchronous=False,
        )
        second = current_domain.process(
            AddProductMedia(product_id=product_id, asset_url="https://cdn.example.com/2.jpg"),
            asynchronous=False,
        )
        current_domain.process(SetCoverMedia(product_id=product_id, media_id=second), asynchronous=False)
        product = current_domain.repository_for(Product).get(product_id)
        assert product.cover().asset_url == "https://cdn.example.com/2.jpg"


class TestLifecycleCommands:
    def test_publish(self):
        product_id = _create_product()
        _add_variant(product_id)
        current_domain.process(PublishProduct(product_id=product_id), asynchronous=False)
        product = current_domain.repository_for(Product).get(product_id)
        assert product.status == ProductStatus.PUBLISHED.value

    def test_archive(self):
        product_id = _create_product()
        current_domain.process(ArchiveProduct(product_id=product_id), asynchronous=False)
        product = current_domain.repository_for(Product).get(product_id)
        assert product.status == ProductStatus.ARCHIVED.value

    def test_publish_scheduled_products(self):
        product_id = _create_product()
        _add_variant(product_id)
        publish_at = datetime.now(UTC) + timedelta(hours=1)
        current_domain.process(ScheduleProduct(product_id=product_id, publish_at=publish_at), asynchronous=False)

        count = current_domain.process(
            PublishScheduledProducts(as_of=publish_at + timedelta(minutes=1)),
            asynchronous=False,
        )

        assert count == 1
        product = current_domain.repository_for(Product).get(product_id)
        assert product.status == ProductStatus.PUBLISHED.value

    def test_scheduled_products_not_yet_due_stay_scheduled(self):
        product_id = _create_product()
        _add_variant(product_id)
        publish_at = datetime.now(UTC) + timedelta(hours=1)
        current_domain.process(ScheduleProduct(product_id=product_id, publish_at=publish_at), asynchronous=False)

        count = current_domain.process(PublishScheduledProducts(), asynchronous=False)

        assert count == 0
        product = current_domain.repository_for(Product).get(product_id)
        assert product.status == ProductStatus.SCHEDULED.value
