"""Domain tests for the ShoppingCart aggregate."""

import json
from datetime import timedelta
from uuid import uuid4

import pytest
from cart.shopping_cart.cart import CartStatus, PromoType, ShoppingCart
from cart.shopping_cart.events import CartItemAdded, CartStatusChanged, GuestCartTransferred
from protean.exceptions import ValidationError
from shared.clock import utcnow


def _user_cart():
    return ShoppingCart.create(user_id=str(uuid4()))


def _guest_cart(token="guest-abc"):
    return ShoppingCart.create(guest_token=token)


class TestCartCreation:
    def test_user_cart_defaults(self):
        cart = _user_cart()
        assert cart.status == CartStatus.ACTIVE.value
        assert cart.currency == "USD"
        assert cart.expires_at is None
        assert json.loads(cart.applied_promos) == []

    def test_guest_cart_gets_expiry(self):
        cart = ShoppingCart.create(guest_token="guest-1", guest_ttl_days=7)
        assert cart.expires_at > utcnow() + timedelta(days=6)

    def test_unsupported_currency_rejected(self):
        with pytest.raises(ValidationError):
            ShoppingCart.create(user_id=str(uuid4()), currency="XYZ")


class TestCartItems:
    def test_add_item(self):
        cart = _user_cart()
        item = cart.add_item(variant_id=str(uuid4()), quantity=2, unit_price=25.0)
        assert len(cart.items) == 1
        assert item.line_total == 50.0
        assert any(isinstance(e, CartItemAdded) for e in cart._events)

    def test_same_variant_merges_quantity(self):
        cart = _user_cart()
        variant_id = str(uuid4())
        cart.add_item(variant_id=variant_id, quantity=1, unit_price=10.0)
        cart.add_item(variant_id=variant_id, quantity=3, unit_price=10.0)
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 4

    def test_unit_price_rounded_half_up(self):
        cart = _user_cart()
        item = cart.add_item(variant_id=str(uuid4()), quantity=1, unit_price=10.005)
        assert item.unit_price == 10.01

    def test_gift_requires_message(self):
        cart = _user_cart()
        with pytest.raises(ValidationError) as exc:
            cart.add_item(variant_id=str(uuid4()), quantity=1, unit_price=10.0, is_gift=True)
        assert "gift_message" in exc.value.messages

    def test_update_quantity(self):
        cart = _user_cart()
        item = cart.add_item(variant_id=str(uuid4()), quantity=1, unit_price=10.0)
        cart.update_item(item.id, quantity=5)
        assert cart.items[0].quantity == 5

    def test_update_unknown_item_fails(self):
        cart = _user_cart()
        with pytest.raises(ValidationError):
            cart.update_item(str(uuid4()), quantity=2)

    def test_remove_item(self):
        cart = _user_cart()
        item = cart.add_item(variant_id=str(uuid4()), quantity=1, unit_price=10.0)
        cart.remove_item(item.id)
        assert len(cart.items) == 0

    def test_clear_drops_items_and_promos(self):
        cart = _user_cart()
        cart.add_item(variant_id=str(uuid4()), quantity=1, unit_price=10.0)
        cart.apply_promo("SAVE10", "percentage", 10)
        cart.clear()
        assert len(cart.items) == 0
        assert cart.promos() == []


class TestCartTotals:
    def _cart_worth_100(self):
        cart = _user_cart()
        cart.add_item(variant_id=str(uuid4()), quantity=2, unit_price=50.0)
        return cart

    def test_percentage_discount(self):
        cart = self._cart_worth_100()
        cart.apply_promo("save10", "percentage", 10)
        assert cart.subtotal() == 100.0
        assert cart.discount() == 10.0
        assert cart.total() == 90.0
        assert cart.promos()[0]["code"] == "SAVE10"

    def test_fixed_discount_capped_at_subtotal(self):
        cart = self._cart_worth_100()
        cart.apply_promo("BIGOFF", "fixed_amount", 150)
        assert cart.discount() == 100.0
        assert cart.total() == 0.0

    def test_free_shipping_only_sets_flag(self):
        cart = self._cart_worth_100()
        cart.apply_promo("SHIPFREE", PromoType.FREE_SHIPPING.value)
        assert cart.discount() == 0.0
        assert cart.has_free_shipping() is True

    def test_percentage_above_100_rejected(self):
        cart = self._cart_worth_100()
        with pytest.raises(ValidationError):
            cart.apply_promo("TOOMUCH", "percentage", 120)

    def test_unknown_promo_type_rejected(self):
        cart = self._cart_worth_100()
        with pytest.raises(ValidationError) as exc:
            cart.apply_promo("WHAT", "bogus", 5)
        assert "promo_type" in exc.value.messages

    def test_duplicate_code_rejected(self):
        cart = self._cart_worth_100()
        cart.apply_promo("SAVE10", "percentage", 10)
        with pytest.raises(ValidationError):
            cart.apply_promo("save10", "percentage", 10)

    def test_remove_promo(self):
        cart = self._cart_worth_100()
        cart.apply_promo("SAVE10", "percentage", 10)
        cart.remove_promo("save10")
        assert cart.total() == 100.0

    def test_summary(self):
        cart = self._cart_worth_100()
        summary = cart.summary()
        assert summary["item_count"] == 2
        assert summary["total"] == 100.0
        assert summary["items"][0]["line_total"] == 100.0


class TestCartLifecycle:
    def test_abandoned_cart_is_frozen(self):
        cart = _user_cart()
        cart.abandon()
        assert cart.status == CartStatus.ABANDONED.value
        with pytest.raises(ValidationError):
            cart.add_item(variant_id=str(uuid4()), quantity=1, unit_price=10.0)

    def test_empty_cart_cannot_convert(self):
        cart = _user_cart()
        with pytest.raises(ValidationError):
            cart.mark_converted()

    def test_convert_raises_status_event(self):
        cart = _user_cart()
        cart.add_item(variant_id=str(uuid4()), quantity=1, unit_price=10.0)
        cart.mark_converted()
        event = next(e for e in cart._events if isinstance(e, CartStatusChanged))
        assert event.from_status == "active"
        assert event.to_status == "converted"

    def test_guest_cart_expiry(self):
        cart = ShoppingCart.create(guest_token="guest-2", guest_ttl_days=1)
        assert cart.is_expired() is False
        assert cart.is_expired(utcnow() + timedelta(days=2)) is True

    def test_user_cart_never_expires_by_ttl(self):
        cart = _user_cart()
        assert cart.is_expired(utcnow() + timedelta(days=365)) is False


class TestGuestTransfer:
    def test_assign_to_user(self):
        cart = _guest_cart()
        user_id = str(uuid4())
        cart.assign_to_user(user_id)
        assert cart.user_id == user_id
        assert cart.guest_token is None
        assert any(isinstance(e, GuestCartTransferred) for e in cart._events)

    def test_user_cart_cannot_be_assigned(self):
        cart = _user_cart()
        with pytest.raises(ValidationError):
            cart.assign_to_user(str(uuid4()))

    def test_merge_from_guest_cart(self):
        variant_id = str(uuid4())
        guest = _guest_cart()
        guest.add_item(variant_id=variant_id, quantity=1, unit_price=20.0)
        guest.apply_promo("WELCOME", "fixed_amount", 5)

        user_cart = _user_cart()
        user_cart.add_item(variant_id=variant_id, quantity=2, unit_price=20.0)
        user_cart.merge_from(guest)

        assert user_cart.items[0].quantity == 3
        assert [p["code"] for p in user_cart.promos()] == ["WELCOME"]
        assert guest.status == CartStatus.CONVERTED.value
