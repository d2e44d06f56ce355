"""Product creation: command and handler."""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from product_catalog.domain import logger, product_catalog
from product_catalog.product.product import Product, slugify


@product_catalog.command(part_of="Product")
class CreateProduct:
    title: String(required=True, max_length=255)
    slug: String(max_length=255)
    brand: String(max_length=100)
    short_description: String(max_length=500)
    long_description: Text()
    country_of_origin: String(max_length=2)
    seo_title: String(max_length=70)
    seo_description: String(max_length=160)
    category_ids: Text()  # JSON list
    tags: Text()  # JSON list
    created_by: Identifier()


def assert_slug_available(slug, exclude_id=None):
    repo = current_domain.repository_for(Product)
    clashes = [p for p in repo._dao.query.filter(slug=slug).all().items if str(p.id) != str(exclude_id)]
    if clashes:
        raise ValidationError({"slug": [f"Slug '{slug}' is already in use"]})


@product_catalog.command_handler(part_of=Product)
class CreateProductHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        slug = command.slug or slugify(command.title)
        assert_slug_available(slug)

        product = Product.create(
            title=command.title,
            slug=slug,
            brand=command.brand,
            short_description=command.short_description,
            long_description=command.long_description,
            country_of_origin=command.country_of_origin,
            seo_title=command.seo_title,
            seo_description=command.seo_description,
            category_ids=json.loads(command.category_ids) if command.category_ids else [],
            tags=json.loads(command.tags) if command.tags else [],
        )
        current_domain.repository_for(Product).add(product)
        logger.info("Product created", product_id=str(product.id), slug=slug)
        return str(product.id)
