"""Product details and tagging: commands and handler."""

import json

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from product_catalog.domain import product_catalog
from product_catalog.product.creation import assert_slug_available
from product_catalog.product.product import Product


@product_catalog.command(part_of="Product")
class UpdateProductDetails:
    product_id: Identifier(required=True)
    title: String(max_length=255)
    slug: String(max_length=255)
    brand: String(max_length=100)
    short_description: String(max_length=500)
    long_description: Text()
    country_of_origin: String(max_length=2)
    seo_title: String(max_length=70)
    seo_description: String(max_length=160)
    category_ids: Text()  # JSON list


@product_catalog.command(part_of="Product")
class TagProduct:
    product_id: Identifier(required=True)
    tags: Text(required=True)  # JSON list, replaces the current tags


@product_catalog.command_handler(part_of=Product)
class ProductDetailsHandler:
    @handle(UpdateProductDetails)
    def update_details(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        if command.slug and command.slug != product.slug:
            assert_slug_available(command.slug, exclude_id=product.id)

        product.update_details(
            title=command.title,
            slug=command.slug,
            brand=command.brand,
            short_description=command.short_description,
            long_description=command.long_description,
            country_of_origin=command.country_of_origin,
            seo_title=command.seo_title,
            seo_description=command.seo_description,
            category_ids=json.loads(command.category_ids) if command.category_ids else None,
        )
        repo.add(product)

    @handle(TagProduct)
    def tag_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.tag(json.loads(command.tags))
        repo.add(product)
