"""Wishlist commands.

An owner has at most one default wishlist: marking one as default clears the
flag on the owner's other lists.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Identifier, String, Text
from protean.utils.globals import current_domain

from engagement.domain import engagement, logger
from engagement.wishlist.wishlist import Wishlist


@engagement.command(part_of="Wishlist")
class CreateWishlist:
    user_id = Identifier()
    guest_token = String(max_length=255)
    name = String(max_length=100)
    description = Text()
    is_default = Boolean(default=False)
    is_public = Boolean(default=False)


@engagement.command(part_of="Wishlist")
class AddToWishlist:
    wishlist_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    product_id = Identifier()
    note = String(max_length=500)


@engagement.command(part_of="Wishlist")
class RemoveFromWishlist:
    wishlist_id = Identifier(required=True)
    variant_id = Identifier(required=True)


@engagement.command(part_of="Wishlist")
class UpdateWishlist:
    wishlist_id = Identifier(required=True)
    name = String(max_length=100)
    description = Text()
    is_public = Boolean()
    is_default = Boolean()


@engagement.command(part_of="Wishlist")
class DeleteWishlist:
    wishlist_id = Identifier(required=True)


@engagement.command(part_of="Wishlist")
class TransferGuestWishlists:
    guest_token = String(required=True, max_length=255)
    user_id = Identifier(required=True)


def wishlists_of(user_id=None, guest_token=None):
    dao = current_domain.repository_for(Wishlist)._dao
    if user_id:
        return dao.query.filter(user_id=str(user_id)).all().items
    if guest_token:
        return dao.query.filter(guest_token=guest_token).all().items
    return []


def _clear_other_defaults(wishlist):
    repo = current_domain.repository_for(Wishlist)
    for other in wishlists_of(wishlist.user_id, wishlist.guest_token):
        if other.id != wishlist.id and other.is_default:
            other.is_default = False
            repo.add(other)


@engagement.command_handler(part_of=Wishlist)
class WishlistHandler:
    @handle(CreateWishlist)
    def create(self, command):
        existing = wishlists_of(command.user_id, command.guest_token)
        wishlist = Wishlist.create(
            user_id=command.user_id,
            guest_token=command.guest_token,
            name=command.name,
            description=command.description,
            # The first list an owner creates is their default
            is_default=command.is_default or not existing,
            is_public=command.is_public,
        )
        if wishlist.is_default:
            _clear_other_defaults(wishlist)
        current_domain.repository_for(Wishlist).add(wishlist)
        logger.info("Wishlist created", wishlist_id=str(wishlist.id))
        return str(wishlist.id)

    @handle(AddToWishlist)
    def add_item(self, command):
        repo = current_domain.repository_for(Wishlist)
        wishlist = repo.get(command.wishlist_id)
        item = wishlist.add_item(command.variant_id, command.product_id, command.note)
        repo.add(wishlist)
        return str(item.id)

    @handle(RemoveFromWishlist)
    def remove_item(self, command):
        repo = current_domain.repository_for(Wishlist)
        wishlist = repo.get(command.wishlist_id)
        wishlist.remove_item(command.variant_id)
        repo.add(wishlist)

    @handle(UpdateWishlist)
    def update(self, command):
        repo = current_domain.repository_for(Wishlist)
        wishlist = repo.get(command.wishlist_id)
        wishlist.update(
            name=command.name,
            description=command.description,
            is_public=command.is_public,
            is_default=command.is_default,
        )
        if command.is_default:
            _clear_other_defaults(wishlist)
        repo.add(wishlist)

    @handle(DeleteWishlist)
    def delete(self, command):
        repo = current_domain.repository_for(Wishlist)
        wishlist = repo.get(command.wishlist_id)
        repo._dao.delete(wishlist)
        logger.info("Wishlist deleted", wishlist_id=str(command.wishlist_id))

    @handle(TransferGuestWishlists)
    def transfer(self, command):
        if not command.guest_token:
            raise ValidationError({"guest_token": ["Guest token is required"]})
        repo = current_domain.repository_for(Wishlist)
        has_default = any(w.is_default for w in wishlists_of(user_id=command.user_id))
        moved = 0
        for wishlist in wishlists_of(guest_token=command.guest_token):
            wishlist.transfer_to_user(command.user_id)
            if has_default:
                wishlist.is_default = False
            has_default = has_default or wishlist.is_default
            repo.add(wishlist)
            moved += 1
        return moved
