"""Domain events for the ShoppingCart aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from cart.domain import cart


@cart.event(part_of="ShoppingCart")
class CartItemAdded:
    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    quantity = Integer(required=True)
    unit_price = Float(required=True)


@cart.event(part_of="ShoppingCart")
class CartItemRemoved:
    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    variant_id = Identifier(required=True)


@cart.event(part_of="ShoppingCart")
class CartPromoApplied:
    __version__ = 1

    cart_id = Identifier(required=True)
    code = String(required=True)
    promo_type = String(required=True)
    value = Float()


@cart.event(part_of="ShoppingCart")
class GuestCartTransferred:
    """A guest cart was handed over to a signed-in user."""

    __version__ = 1

    cart_id = Identifier(required=True)
    source_cart_id = Identifier(required=True)
    user_id = Identifier(required=True)
    items_merged = Integer(required=True)


@cart.event(part_of="ShoppingCart")
class CartStatusChanged:
    __version__ = 1

    cart_id = Identifier(required=True)
    from_status = String(required=True)
    to_status = String(required=True)
    changed_at = DateTime(required=True)
