"""Product media: commands and handler."""

from protean import handle
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from product_catalog.domain import product_catalog
from product_catalog.product.product import Product


@product_catalog.command(part_of="Product")
class AddProductMedia:
    product_id: Identifier(required=True)
    asset_url: String(required=True, max_length=500)
    alt_text: String(max_length=255)
    is_cover: Boolean(default=False)


@product_catalog.command(part_of="Product")
class SetCoverMedia:
    product_id: Identifier(required=True)
    media_id: Identifier(required=True)


@product_catalog.command(part_of="Product")
class RemoveProductMedia:
    product_id: Identifier(required=True)
    media_id: Identifier(required=True)


@product_catalog.command_handler(part_of=Product)
class ManageMediaHandler:
    @handle(AddProductMedia)
    def add_media(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        media = product.attach_media(
            asset_url=command.asset_url,
            alt_text=command.alt_text,
            is_cover=bool(command.is_cover),
        )
        repo.add(product)
        return str(media.id)

    @handle(SetCoverMedia)
    def set_cover(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.set_cover(command.media_id)
        repo.add(product)

    @handle(RemoveProductMedia)
    def remove_media(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.detach_media(command.media_id)
        repo.add(product)
