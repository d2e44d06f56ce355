"""Product card: listing and search read model."""

from protean.core.projector import on
from protean.fields import DateTime, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from product_catalog.domain import product_catalog
from product_catalog.product.events import (
    ProductCoverChanged,
    ProductCreated,
    ProductDetailsUpdated,
    ProductStatusChanged,
    ProductVariantsChanged,
)
from product_catalog.product.product import Product


@product_catalog.projection
class ProductCard:
    product_id: Identifier(identifier=True, required=True)
    title: String(required=True)
    slug: String(required=True)
    brand: String()
    status: String(required=True)
    min_price: Float()
    max_price: Float()
    variant_count: Integer(default=0)
    cover_url: String()
    category_ids: Text()
    tags: Text()
    created_at: DateTime()


@product_catalog.projector(projector_for=ProductCard, aggregates=[Product])
class ProductCardProjector:
    @on(ProductCreated)
    def on_product_created(self, event):
        current_domain.repository_for(ProductCard).add(
            ProductCard(
                product_id=event.product_id,
                title=event.title,
                slug=event.slug,
                brand=event.brand,
                status=event.status,
                variant_count=0,
                category_ids=event.category_ids,
                tags=event.tags,
                created_at=event.created_at,
            )
        )

    @on(ProductDetailsUpdated)
    def on_details_updated(self, event):
        repo = current_domain.repository_for(ProductCard)
        card = repo.get(event.product_id)
        card.title = event.title
        card.slug = event.slug
        card.brand = event.brand
        card.category_ids = event.category_ids
        card.tags = event.tags
        repo.add(card)

    @on(ProductStatusChanged)
    def on_status_changed(self, event):
        repo = current_domain.repository_for(ProductCard)
        card = repo.get(event.product_id)
        card.status = event.to_status
        repo.add(card)

    @on(ProductVariantsChanged)
    def on_variants_changed(self, event):
        repo = current_domain.repository_for(ProductCard)
        card = repo.get(event.product_id)
        card.variant_count = event.variant_count
        card.min_price = event.min_price
        card.max_price = event.max_price
        repo.add(card)

    @on(ProductCoverChanged)
    def on_cover_changed(self, event):
        repo = current_domain.repository_for(ProductCard)
        card = repo.get(event.product_id)
        card.cover_url = event.cover_url
        repo.add(card)
