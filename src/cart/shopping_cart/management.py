"""Cart lifecycle: creation, clearing, abandonment and guest cart expiry."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from cart.domain import cart, logger
from cart.shopping_cart.cart import CartStatus, ShoppingCart
from shared.clock import utcnow
from shared.settings import get_settings


@cart.command(part_of="ShoppingCart")
class CreateCart:
    user_id = Identifier()
    guest_token = String(max_length=255)
    currency = String(max_length=3, default="USD")


@cart.command(part_of="ShoppingCart")
class ClearCart:
    cart_id = Identifier(required=True)


@cart.command(part_of="ShoppingCart")
class AbandonCart:
    cart_id = Identifier(required=True)


@cart.command(part_of="ShoppingCart")
class ExpireGuestCarts:
    """Expire active guest carts whose time-to-live has passed."""

    as_of = DateTime()


def find_active_cart(user_id=None, guest_token=None):
    """Return the active cart of a user or guest token, or None."""
    dao = current_domain.repository_for(ShoppingCart)._dao
    if user_id:
        carts = dao.query.filter(user_id=user_id, status=CartStatus.ACTIVE.value).all().items
    elif guest_token:
        carts = dao.query.filter(guest_token=guest_token, status=CartStatus.ACTIVE.value).all().items
    else:
        return None
    return carts[0] if carts else None


@cart.command_handler(part_of=ShoppingCart)
class CartLifecycleHandler:
    @handle(CreateCart)
    def create_cart(self, command):
        if bool(command.user_id) == bool(command.guest_token):
            raise ValidationError({"cart": ["Provide either a user id or a guest token"]})

        existing = find_active_cart(command.user_id, command.guest_token)
        if existing:
            return str(existing.id)

        shopping_cart = ShoppingCart.create(
            user_id=command.user_id,
            guest_token=command.guest_token,
            currency=command.currency,
            guest_ttl_days=get_settings().GUEST_CART_TTL_DAYS,
        )
        current_domain.repository_for(ShoppingCart).add(shopping_cart)
        logger.info(
            "Cart created",
            cart_id=str(shopping_cart.id),
            user_id=str(command.user_id) if command.user_id else None,
            guest=bool(command.guest_token),
        )
        return str(shopping_cart.id)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        shopping_cart = repo.get(command.cart_id)
        shopping_cart.clear()
        repo.add(shopping_cart)

    @handle(AbandonCart)
    def abandon_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        shopping_cart = repo.get(command.cart_id)
        shopping_cart.abandon()
        repo.add(shopping_cart)
        logger.info("Cart abandoned", cart_id=str(command.cart_id))

    @handle(ExpireGuestCarts)
    def expire_guest_carts(self, command):
        as_of = command.as_of or utcnow()
        repo = current_domain.repository_for(ShoppingCart)
        active = repo._dao.query.filter(status=CartStatus.ACTIVE.value).all().items

        expired = 0
        for shopping_cart in active:
            if shopping_cart.is_expired(as_of):
                shopping_cart.expire()
                repo.add(shopping_cart)
                expired += 1

        logger.info("Guest carts expired", count=expired)
        return expired
