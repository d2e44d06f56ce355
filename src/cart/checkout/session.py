"""Checkout commands: initialize, complete, cancel and expire."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from cart.checkout.checkout import Checkout, CheckoutStatus
from cart.domain import cart, logger
from cart.shopping_cart.cart import CartStatus, ShoppingCart
from shared.clock import utcnow
from shared.settings import get_settings


@cart.command(part_of="Checkout")
class InitializeCheckout:
    cart_id = Identifier(required=True)
    user_id = Identifier()
    guest_token = String(max_length=255)


@cart.command(part_of="Checkout")
class CompleteCheckout:
    checkout_id = Identifier(required=True)


@cart.command(part_of="Checkout")
class CancelCheckout:
    checkout_id = Identifier(required=True)


@cart.command(part_of="Checkout")
class ExpireCheckouts:
    as_of = DateTime()


@cart.command_handler(part_of=Checkout)
class CheckoutHandler:
    @handle(InitializeCheckout)
    def initialize_checkout(self, command):
        shopping_cart = current_domain.repository_for(ShoppingCart).get(command.cart_id)

        if shopping_cart.status != CartStatus.ACTIVE.value:
            raise ValidationError({"cart": [f"Cannot check out a {shopping_cart.status} cart"]})
        if not shopping_cart.items:
            raise ValidationError({"cart": ["Cannot check out an empty cart"]})
        if not shopping_cart.owned_by(command.user_id, command.guest_token):
            raise ValidationError({"cart": ["Cart does not belong to the caller"]})

        checkout = Checkout.start(
            cart_id=command.cart_id,
            total_amount=shopping_cart.total(),
            currency=shopping_cart.currency,
            user_id=command.user_id,
            guest_token=None if command.user_id else command.guest_token,
            ttl_minutes=get_settings().CHECKOUT_TTL_MINUTES,
        )
        current_domain.repository_for(Checkout).add(checkout)
        logger.info(
            "Checkout initialized",
            checkout_id=str(checkout.id),
            cart_id=str(command.cart_id),
            total=checkout.total_amount,
        )
        return {
            "checkout_id": str(checkout.id),
            "total_amount": checkout.total_amount,
            "currency": checkout.currency,
            "expires_at": checkout.expires_at.isoformat(),
        }

    @handle(CompleteCheckout)
    def complete_checkout(self, command):
        repo = current_domain.repository_for(Checkout)
        checkout = repo.get(command.checkout_id)
        checkout.complete()

        cart_repo = current_domain.repository_for(ShoppingCart)
        shopping_cart = cart_repo.get(checkout.cart_id)
        shopping_cart.mark_converted()

        repo.add(checkout)
        cart_repo.add(shopping_cart)
        logger.info("Checkout completed", checkout_id=str(checkout.id), cart_id=str(checkout.cart_id))

    @handle(CancelCheckout)
    def cancel_checkout(self, command):
        repo = current_domain.repository_for(Checkout)
        checkout = repo.get(command.checkout_id)
        checkout.cancel()
        repo.add(checkout)

    @handle(ExpireCheckouts)
    def expire_checkouts(self, command):
        as_of = command.as_of or utcnow()
        repo = current_domain.repository_for(Checkout)
        pending = repo._dao.query.filter(status=CheckoutStatus.PENDING.value).all().items

        expired = 0
        for checkout in pending:
            if checkout.is_expired(as_of):
                checkout.expire()
                repo.add(checkout)
                expired += 1

        logger.info("Checkouts expired", count=expired)
        return expired
