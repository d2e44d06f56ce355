"""Cart line items: add, update and remove."""

from protean import handle
from protean.fields import Boolean, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from cart.domain import cart
from cart.shopping_cart.cart import ShoppingCart


@cart.command(part_of="ShoppingCart")
class AddToCart:
    cart_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    product_id = Identifier()
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    is_gift = Boolean(default=False)
    gift_message = String(max_length=500)


@cart.command(part_of="ShoppingCart")
class UpdateCartItem:
    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    quantity = Integer(min_value=1)
    is_gift = Boolean()
    gift_message = String(max_length=500)


@cart.command(part_of="ShoppingCart")
class RemoveFromCart:
    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)


@cart.command_handler(part_of=ShoppingCart)
class CartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        shopping_cart = repo.get(command.cart_id)
        item = shopping_cart.add_item(
            variant_id=command.variant_id,
            quantity=command.quantity,
            unit_price=command.unit_price,
            product_id=command.product_id,
            is_gift=command.is_gift,
            gift_message=command.gift_message,
        )
        repo.add(shopping_cart)
        return str(item.id)

    @handle(UpdateCartItem)
    def update_cart_item(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        shopping_cart = repo.get(command.cart_id)
        shopping_cart.update_item(
            command.item_id,
            quantity=command.quantity,
            is_gift=command.is_gift,
            gift_message=command.gift_message,
        )
        repo.add(shopping_cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        shopping_cart = repo.get(command.cart_id)
        shopping_cart.remove_item(command.item_id)
        repo.add(shopping_cart)
