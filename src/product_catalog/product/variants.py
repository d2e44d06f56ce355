"""Product variant management: commands and handler."""

from protean import handle
from protean.fields import Boolean, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from product_catalog.domain import product_catalog
from product_catalog.product.product import Product


@product_catalog.command(part_of="Product")
class AddVariant:
    product_id: Identifier(required=True)
    sku: String(required=True, max_length=64)
    price: Float(required=True, min_value=0.0)
    size: String(max_length=20)
    color: String(max_length=50)
    barcode: String(max_length=64)
    compare_at_price: Float(min_value=0.0)
    weight_g: Integer(min_value=0)


@product_catalog.command(part_of="Product")
class UpdateVariant:
    product_id: Identifier(required=True)
    variant_id: Identifier(required=True)
    price: Float(min_value=0.0)
    compare_at_price: Float(min_value=0.0)
    size: String(max_length=20)
    color: String(max_length=50)
    barcode: String(max_length=64)
    weight_g: Integer(min_value=0)
    is_active: Boolean()


@product_catalog.command(part_of="Product")
class RemoveVariant:
    product_id: Identifier(required=True)
    variant_id: Identifier(required=True)


@product_catalog.command_handler(part_of=Product)
class ManageVariantsHandler:
    @handle(AddVariant)
    def add_variant(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        variant = product.add_variant(
            sku=command.sku,
            price=command.price,
            size=command.size,
            color=command.color,
            barcode=command.barcode,
            compare_at_price=command.compare_at_price,
            weight_g=command.weight_g,
        )
        repo.add(product)
        return str(variant.id)

    @handle(UpdateVariant)
    def update_variant(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        changes = {
            field: getattr(command, field)
            for field in ("price", "size", "color", "barcode", "weight_g", "is_active")
            if getattr(command, field) is not None
        }
        if command.compare_at_price is not None:
            changes["compare_at_price"] = command.compare_at_price
        product.update_variant(command.variant_id, **changes)
        repo.add(product)

    @handle(RemoveVariant)
    def remove_variant(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.remove_variant(command.variant_id)
        repo.add(product)
