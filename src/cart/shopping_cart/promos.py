"""Promotion codes applied to a cart."""

from protean import handle
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from cart.domain import cart, logger
from cart.shopping_cart.cart import ShoppingCart


@cart.command(part_of="ShoppingCart")
class ApplyPromoToCart:
    cart_id = Identifier(required=True)
    code = String(required=True, max_length=50)
    promo_type = String(required=True, max_length=20)
    value = Float(min_value=0.0)


@cart.command(part_of="ShoppingCart")
class RemovePromoFromCart:
    cart_id = Identifier(required=True)
    code = String(required=True, max_length=50)


@cart.command_handler(part_of=ShoppingCart)
class CartPromotionsHandler:
    @handle(ApplyPromoToCart)
    def apply_promo(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        shopping_cart = repo.get(command.cart_id)
        shopping_cart.apply_promo(command.code, command.promo_type, command.value)
        repo.add(shopping_cart)
        logger.info("Promotion applied to cart", cart_id=str(command.cart_id), code=command.code.upper())

    @handle(RemovePromoFromCart)
    def remove_promo(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        shopping_cart = repo.get(command.cart_id)
        shopping_cart.remove_promo(command.code)
        repo.add(shopping_cart)
