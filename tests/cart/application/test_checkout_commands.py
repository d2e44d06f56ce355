"""Application tests for checkout and reservation commands."""

from datetime import timedelta
from uuid import uuid4

import pytest
from cart.checkout.checkout import Checkout, CheckoutStatus
from cart.checkout.session import CancelCheckout, CompleteCheckout, ExpireCheckouts, InitializeCheckout
from cart.reservation.holds import (
    CreateReservation,
    ExpireReservations,
    ExtendReservation,
    ReleaseReservation,
    reserved_quantity,
)
from cart.reservation.reservation import Reservation, ReservationStatus
from cart.shopping_cart.cart import CartStatus, ShoppingCart
from cart.shopping_cart.items import AddToCart
from cart.shopping_cart.management import CreateCart
from protean import current_domain
from protean.exceptions import ValidationError
from shared.clock import utcnow


@pytest.fixture()
def user_id():
    return str(uuid4())


@pytest.fixture()
def filled_cart(user_id):
    cart_id = current_domain.process(CreateCart(user_id=user_id), asynchronous=False)
    current_domain.process(
        AddToCart(cart_id=cart_id, variant_id=str(uuid4()), quantity=2, unit_price=45.5),
        asynchronous=False,
    )
    return cart_id


def _initialize(cart_id, user_id):
    return current_domain.process(InitializeCheckout(cart_id=cart_id, user_id=user_id), asynchronous=False)


class TestInitializeCheckout:
    def test_snapshots_cart_total(self, filled_cart, user_id):
        result = _initialize(filled_cart, user_id)
        checkout = current_domain.repository_for(Checkout).get(result["checkout_id"])
        assert checkout.total_amount == 91.0
        assert checkout.status == CheckoutStatus.PENDING.value

    def test_empty_cart_rejected(self, user_id):
        cart_id = current_domain.process(CreateCart(user_id=user_id), asynchronous=False)
        with pytest.raises(ValidationError):
            _initialize(cart_id, user_id)

    def test_foreign_cart_rejected(self, filled_cart):
        with pytest.raises(ValidationError) as exc:
            _initialize(filled_cart, str(uuid4()))
        assert "Cart does not belong to the caller" in str(exc.value)


class TestCompleteCheckout:
    def test_marks_cart_converted(self, filled_cart, user_id):
        checkout_id = _initialize(filled_cart, user_id)["checkout_id"]
        current_domain.process(CompleteCheckout(checkout_id=checkout_id), asynchronous=False)

        assert current_domain.repository_for(Checkout).get(checkout_id).status == CheckoutStatus.COMPLETED.value
        assert current_domain.repository_for(ShoppingCart).get(filled_cart).status == CartStatus.CONVERTED.value

    def test_cancelled_checkout_cannot_complete(self, filled_cart, user_id):
        checkout_id = _initialize(filled_cart, user_id)["checkout_id"]
        current_domain.process(CancelCheckout(checkout_id=checkout_id), asynchronous=False)
        with pytest.raises(ValidationError):
            current_domain.process(CompleteCheckout(checkout_id=checkout_id), asynchronous=False)

    def test_expire_checkouts(self, filled_cart, user_id):
        checkout_id = _initialize(filled_cart, user_id)["checkout_id"]
        count = current_domain.process(ExpireCheckouts(as_of=utcnow() + timedelta(minutes=16)), asynchronous=False)
        assert count == 1
        assert current_domain.repository_for(Checkout).get(checkout_id).status == CheckoutStatus.EXPIRED.value


class TestReservations:
    def _reserve(self, variant_id, quantity=1, cart_id=None):
        return current_domain.process(
            CreateReservation(cart_id=cart_id or str(uuid4()), variant_id=variant_id, quantity=quantity),
            asynchronous=False,
        )

    def test_reserved_quantity_counts_active_holds(self):
        variant_id = str(uuid4())
        self._reserve(variant_id, 2)
        released = self._reserve(variant_id, 5)
        current_domain.process(ReleaseReservation(reservation_id=released), asynchronous=False)

        assert reserved_quantity(variant_id) == 2

    def test_extend_beyond_maximum_rejected(self):
        reservation_id = self._reserve(str(uuid4()))
        current_domain.process(ExtendReservation(reservation_id=reservation_id, minutes=100), asynchronous=False)
        with pytest.raises(ValidationError):
            current_domain.process(ExtendReservation(reservation_id=reservation_id, minutes=30), asynchronous=False)

    def test_expire_reservations(self):
        variant_id = str(uuid4())
        reservation_id = self._reserve(variant_id, 3)
        count = current_domain.process(ExpireReservations(as_of=utcnow() + timedelta(hours=1)), asynchronous=False)

        assert count == 1
        reservation = current_domain.repository_for(Reservation).get(reservation_id)
        assert reservation.status == ReservationStatus.EXPIRED.value
        assert reserved_quantity(variant_id) == 0
