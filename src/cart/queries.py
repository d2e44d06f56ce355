"""Read-side queries for carts, checkouts and reservations."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from cart.checkout.checkout import Checkout
from cart.reservation.holds import reserved_quantity
from cart.reservation.reservation import Reservation
from cart.shopping_cart.cart import ShoppingCart
from cart.shopping_cart.management import find_active_cart


def get_cart(cart_id: str) -> dict:
    return current_domain.repository_for(ShoppingCart).get(cart_id).summary()


def get_active_cart(user_id: str | None = None, guest_token: str | None = None) -> dict:
    shopping_cart = find_active_cart(user_id=user_id, guest_token=guest_token)
    if shopping_cart is None:
        raise ObjectNotFoundError("No active cart found")
    return shopping_cart.summary()


def get_checkout(checkout_id: str) -> dict:
    checkout = current_domain.repository_for(Checkout).get(checkout_id)
    data = checkout.to_dict()
    data["is_expired"] = checkout.is_expired()
    return data


def get_reservation(reservation_id: str) -> dict:
    reservation = current_domain.repository_for(Reservation).get(reservation_id)
    data = reservation.to_dict()
    data["seconds_until_expiry"] = reservation.seconds_until_expiry()
    return data


def list_cart_reservations(cart_id: str) -> list[dict]:
    dao = current_domain.repository_for(Reservation)._dao
    return [r.to_dict() for r in dao.query.filter(cart_id=cart_id).all().items]


def variant_availability(variant_id: str) -> dict:
    return {"variant_id": variant_id, "reserved_quantity": reserved_quantity(variant_id)}
