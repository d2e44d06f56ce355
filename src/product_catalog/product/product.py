"""Product aggregate root with ProductVariant and ProductMedia entities.

State Machine:
    DRAFT → PUBLISHED | SCHEDULED | ARCHIVED
    SCHEDULED → PUBLISHED | DRAFT | ARCHIVED
    PUBLISHED → DRAFT | ARCHIVED
    ARCHIVED → DRAFT
"""

import json
import re

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Integer, String, Text

from product_catalog.domain import product_catalog
from product_catalog.product.events import (
    ProductCoverChanged,
    ProductCreated,
    ProductDetailsUpdated,
    ProductStatusChanged,
    ProductVariantsChanged,
)
from shared.clock import is_past, utcnow
from shared.money import round_money
from shared.status import StatusEnum, assert_transition


class ProductStatus(StatusEnum):
    DRAFT = "draft"
    PUBLISHED = "published"
    SCHEDULED = "scheduled"
    ARCHIVED = "archived"


_VALID_TRANSITIONS = {
    ProductStatus.DRAFT: {ProductStatus.PUBLISHED, ProductStatus.SCHEDULED, ProductStatus.ARCHIVED},
    ProductStatus.SCHEDULED: {ProductStatus.PUBLISHED, ProductStatus.DRAFT, ProductStatus.ARCHIVED},
    ProductStatus.PUBLISHED: {ProductStatus.DRAFT, ProductStatus.ARCHIVED},
    ProductStatus.ARCHIVED: {ProductStatus.DRAFT},
}


def slugify(text: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", (text or "").lower()).strip("-")
    if not slug:
        raise ValidationError({"slug": ["Cannot derive a slug from an empty title"]})
    return slug


def _dump_list(values) -> str:
    if values is None:
        return json.dumps([])
    if isinstance(values, str):
        return values
    return json.dumps(list(values))


@product_catalog.entity(part_of="Product")
class ProductVariant:
    """A purchasable size/colour combination with its own SKU and price."""

    sku: String(required=True, max_length=64)
    size: String(max_length=20)
    color: String(max_length=50)
    barcode: String(max_length=64)
    price: Float(required=True, min_value=0.0)
    compare_at_price: Float(min_value=0.0)
    weight_g: Integer(min_value=0)
    is_active: Boolean(default=True)


@product_catalog.entity(part_of="Product")
class ProductMedia:
    asset_url: String(required=True, max_length=500)
    alt_text: String(max_length=255)
    position: Integer(default=0)
    is_cover: Boolean(default=False)


@product_catalog.aggregate
class Product:
    title: String(required=True, max_length=255)
    slug: String(required=True, max_length=255)
    brand: String(max_length=100)
    short_description: String(max_length=500)
    long_description: Text()
    status: String(choices=ProductStatus, default=ProductStatus.DRAFT.value)
    publish_at: DateTime()
    country_of_origin: String(max_length=2)
    seo_title: String(max_length=70)
    seo_description: String(max_length=160)
    category_ids: Text()  # JSON list of category ids
    tags: Text()  # JSON list of tags
    variants: HasMany(ProductVariant)
    media: HasMany(ProductMedia)
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def exactly_one_cover_when_media_exist(self):
        if not self.media:
            return
        covers = [m for m in self.media if m.is_cover]
        if len(covers) != 1:
            raise ValidationError({"media": ["Exactly one media item must be the cover"]})

    @invariant.post
    def variant_skus_are_unique(self):
        skus = [v.sku for v in self.variants]
        if len(skus) != len(set(skus)):
            raise ValidationError({"variants": ["Variant SKUs must be unique within a product"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        title,
        slug=None,
        brand=None,
        short_description=None,
        long_description=None,
        country_of_origin=None,
        seo_title=None,
        seo_description=None,
        category_ids=None,
        tags=None,
    ):
        now = utcnow()
        product = cls(
            title=title,
            slug=slug or slugify(title),
            brand=brand,
            short_description=short_description,
            long_description=long_description,
            country_of_origin=country_of_origin,
            seo_title=seo_title,
            seo_description=seo_description,
            category_ids=_dump_list(category_ids),
            tags=_dump_list(tags),
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductCreated(
                product_id=str(product.id),
                title=product.title,
                slug=product.slug,
                brand=product.brand,
                status=product.status,
                category_ids=product.category_ids,
                tags=product.tags,
                created_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Details
    # -------------------------------------------------------------------
    def update_details(self, **changes):
        """Apply the provided (non-None) descriptive fields."""
        allowed = {
            "title",
            "slug",
            "brand",
            "short_description",
            "long_description",
            "country_of_origin",
            "seo_title",
            "seo_description",
            "category_ids",
        }
        unknown = set(changes) - allowed
        if unknown:
            raise ValidationError({"product": [f"Unknown fields: {', '.join(sorted(unknown))}"]})

        for field, value in changes.items():
            if value is None:
                continue
            if field == "category_ids":
                value = _dump_list(value)
            setattr(self, field, value)

        self._touch_details()

    def tag(self, tags):
        cleaned = sorted({t.strip().lower() for t in tags if t and t.strip()})
        self.tags = json.dumps(cleaned)
        self._touch_details()

    def tag_list(self) -> list[str]:
        return json.loads(self.tags) if self.tags else []

    def category_list(self) -> list[str]:
        return json.loads(self.category_ids) if self.category_ids else []

    def _touch_details(self):
        now = utcnow()
        self.updated_at = now
        self.raise_(
            ProductDetailsUpdated(
                product_id=str(self.id),
                title=self.title,
                slug=self.slug,
                brand=self.brand,
                category_ids=self.category_ids,
                tags=self.tags,
                updated_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def _change_status(self, target: ProductStatus, publish_at=None):
        current = ProductStatus.from_string(self.status)
        assert_transition(_VALID_TRANSITIONS, current, target)

        now = utcnow()
        self.status = target.value
        self.publish_at = publish_at
        self.updated_at = now
        self.raise_(
            ProductStatusChanged(
                product_id=str(self.id),
                from_status=current.value,
                to_status=target.value,
                publish_at=publish_at,
                changed_at=now,
            )
        )

    def _assert_sellable(self):
        if not any(v.is_active for v in self.variants):
            raise ValidationError({"variants": ["Product needs at least one active variant to be published"]})

    def publish(self):
        self._assert_sellable()
        self._change_status(ProductStatus.PUBLISHED)

    def schedule(self, publish_at):
        if is_past(publish_at):
            raise ValidationError({"publish_at": ["Publish time must be in the future"]})
        self._assert_sellable()
        self._change_status(ProductStatus.SCHEDULED, publish_at=publish_at)

    def is_due(self, as_of=None) -> bool:
        return self.status == ProductStatus.SCHEDULED.value and is_past(self.publish_at, as_of)

    def unpublish(self):
        self._change_status(ProductStatus.DRAFT)

    def archive(self):
        self._change_status(ProductStatus.ARCHIVED)

    def restore(self):
        if self.status != ProductStatus.ARCHIVED.value:
            raise ValidationError({"status": ["Only archived products can be restored"]})
        self._change_status(ProductStatus.DRAFT)

    # -------------------------------------------------------------------
    # Variants
    # -------------------------------------------------------------------
    @staticmethod
    def _check_prices(price, compare_at_price):
        if compare_at_price is not None and compare_at_price < price:
            raise ValidationError({"compare_at_price": ["Compare-at price cannot be lower than the price"]})

    def _find_variant(self, variant_id):
        variant = next((v for v in self.variants if str(v.id) == str(variant_id)), None)
        if variant is None:
            raise ValidationError({"variants": [f"Variant {variant_id} not found"]})
        return variant

    def price_range(self) -> tuple[float | None, float | None]:
        prices = [v.price for v in self.variants if v.is_active]
        if not prices:
            return None, None
        return min(prices), max(prices)

    def _variants_changed(self, variant_id, change):
        self.updated_at = utcnow()
        low, high = self.price_range()
        self.raise_(
            ProductVariantsChanged(
                product_id=str(self.id),
                variant_id=str(variant_id),
                change=change,
                variant_count=len(self.variants),
                min_price=low,
                max_price=high,
            )
        )

    def add_variant(
        self,
        sku,
        price,
        size=None,
        color=None,
        barcode=None,
        compare_at_price=None,
        weight_g=None,
    ):
        price = round_money(price)
        compare_at_price = round_money(compare_at_price) if compare_at_price is not None else None
        self._check_prices(price, compare_at_price)

        variant = ProductVariant(
            sku=sku.strip().upper(),
            size=size,
            color=color,
            barcode=barcode,
            price=price,
            compare_at_price=compare_at_price,
            weight_g=weight_g,
        )
        self.add_variants(variant)
        self._variants_changed(variant.id, "added")
        return variant

    def update_variant(self, variant_id, **changes):
        variant = self._find_variant(variant_id)

        price = round_money(changes["price"]) if changes.get("price") is not None else variant.price
        compare_at = changes.get("compare_at_price", variant.compare_at_price)
        compare_at = round_money(compare_at) if compare_at is not None else None
        self._check_prices(price, compare_at)

        with atomic_change(self):
            variant.price = price
            variant.compare_at_price = compare_at
            for field in ("size", "color", "barcode", "weight_g", "is_active"):
                if changes.get(field) is not None:
                    setattr(variant, field, changes[field])

        self._variants_changed(variant_id, "updated")

    def remove_variant(self, variant_id):
        variant = self._find_variant(variant_id)
        if self.status == ProductStatus.PUBLISHED.value and len([v for v in self.variants if v.is_active]) == 1:
            if variant.is_active:
                raise ValidationError({"variants": ["Cannot remove the last active variant of a published product"]})
        self.remove_variants(variant)
        self._variants_changed(variant_id, "removed")

    # -------------------------------------------------------------------
    # Media
    # -------------------------------------------------------------------
    def cover(self):
        return next((m for m in self.media if m.is_cover), None)

    def _cover_changed(self):
        self.updated_at = utcnow()
        cover = self.cover()
        self.raise_(
            ProductCoverChanged(
                product_id=str(self.id),
                media_id=str(cover.id) if cover else None,
                cover_url=cover.asset_url if cover else None,
            )
        )

    def attach_media(self, asset_url, alt_text=None, is_cover=False):
        with atomic_change(self):
            # First media item is always the cover
            if not self.media:
                is_cover = True
            if is_cover:
                for item in self.media:
                    item.is_cover = False

            media = ProductMedia(
                asset_url=asset_url,
                alt_text=alt_text,
                position=len(self.media),
                is_cover=is_cover,
            )
            self.add_media(media)

        if is_cover:
            self._cover_changed()
        return media

    def set_cover(self, media_id):
        media = next((m for m in self.media if str(m.id) == str(media_id)), None)
        if media is None:
            raise ValidationError({"media": [f"Media {media_id} not found"]})

        with atomic_change(self):
            for item in self.media:
                item.is_cover = False
            media.is_cover = True

        self._cover_changed()

    def detach_media(self, media_id):
        media = next((m for m in self.media if str(m.id) == str(media_id)), None)
        if media is None:
            raise ValidationError({"media": [f"Media {media_id} not found"]})

        was_cover = media.is_cover
        with atomic_change(self):
            self.remove_media(media)
            if was_cover and self.media:
                self.media[0].is_cover = True

        if was_cover:
            self._cover_changed()
