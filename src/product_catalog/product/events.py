"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from product_catalog.domain import product_catalog


@product_catalog.event(part_of="Product")
class ProductCreated:
    """A new product was drafted."""

    __version__ = 1

    product_id: Identifier(required=True)
    title: String(required=True)
    slug: String(required=True)
    brand: String()
    status: String(required=True)
    category_ids: Text()
    tags: Text()
    created_at: DateTime(required=True)


@product_catalog.event(part_of="Product")
class ProductDetailsUpdated:
    """Descriptive fields of a product changed."""

    __version__ = 1

    product_id: Identifier(required=True)
    title: String(required=True)
    slug: String(required=True)
    brand: String()
    category_ids: Text()
    tags: Text()
    updated_at: DateTime(required=True)


@product_catalog.event(part_of="Product")
class ProductStatusChanged:
    """The product moved to another lifecycle status."""

    __version__ = 1

    product_id: Identifier(required=True)
    from_status: String(required=True)
    to_status: String(required=True)
    publish_at: DateTime()
    changed_at: DateTime(required=True)


@product_catalog.event(part_of="Product")
class ProductVariantsChanged:
    """A variant was added, updated or removed.

    Carries the resulting active price range so read models need not reload
    the product.
    """

    __version__ = 1

    product_id: Identifier(required=True)
    variant_id: Identifier(required=True)
    change: String(required=True)  # added, updated, removed
    variant_count: Integer(required=True)
    min_price: Float()
    max_price: Float()


@product_catalog.event(part_of="Product")
class ProductCoverChanged:
    """The cover image of the product changed (or was cleared)."""

    __version__ = 1

    product_id: Identifier(required=True)
    media_id: Identifier()
    cover_url: String()
