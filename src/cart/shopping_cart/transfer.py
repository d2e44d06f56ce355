"""Hand a guest cart over to a user once they sign in."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from cart.domain import cart, logger
from cart.shopping_cart.cart import ShoppingCart
from cart.shopping_cart.management import find_active_cart


@cart.command(part_of="ShoppingCart")
class TransferGuestCart:
    guest_token = String(required=True, max_length=255)
    user_id = Identifier(required=True)


@cart.command_handler(part_of=ShoppingCart)
class TransferGuestCartHandler:
    @handle(TransferGuestCart)
    def transfer(self, command):
        """Merge into the user's active cart when one exists, otherwise adopt the guest cart."""
        repo = current_domain.repository_for(ShoppingCart)
        guest_cart = find_active_cart(guest_token=command.guest_token)
        if guest_cart is None:
            raise ValidationError({"guest_token": ["No active cart for this guest token"]})

        user_cart = find_active_cart(user_id=command.user_id)
        if user_cart is None:
            guest_cart.assign_to_user(command.user_id)
            repo.add(guest_cart)
            target = guest_cart
        else:
            user_cart.merge_from(guest_cart)
            repo.add(guest_cart)
            repo.add(user_cart)
            target = user_cart

        logger.info(
            "Guest cart transferred",
            cart_id=str(target.id),
            user_id=str(command.user_id),
            merged=user_cart is not None,
        )
        return str(target.id)
