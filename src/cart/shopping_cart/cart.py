"""Shopping Cart aggregate (CQRS).

A cart is owned by exactly one of a user id or a guest token. Promotions are
stored as JSON snapshots ({code, type, value}) so totals can be computed
without reaching into the payments context.
"""

import json
from datetime import timedelta

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, Text

from cart.domain import cart
from cart.shopping_cart.events import (
    CartItemAdded,
    CartItemRemoved,
    CartPromoApplied,
    CartStatusChanged,
    GuestCartTransferred,
)
from shared.clock import is_past, utcnow
from shared.money import SUPPORTED_CURRENCIES, round_money
from shared.status import StatusEnum


class CartStatus(StatusEnum):
    ACTIVE = "active"
    CONVERTED = "converted"
    ABANDONED = "abandoned"
    EXPIRED = "expired"


class PromoType(StatusEnum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"
    FREE_SHIPPING = "free_shipping"

    @classmethod
    def field_name(cls):
        return "promo_type"


@cart.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier()
    variant_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    is_gift = Boolean(default=False)
    gift_message = String(max_length=500)
    added_at = DateTime()

    @property
    def line_total(self) -> float:
        return round_money(self.quantity * self.unit_price)


def _check_gift(is_gift, gift_message):
    if is_gift and not (gift_message or "").strip():
        raise ValidationError({"gift_message": ["A gift message is required for gift items"]})


@cart.aggregate
class ShoppingCart:
    user_id = Identifier()
    guest_token = String(max_length=255)
    currency = String(max_length=3, default="USD")
    items = HasMany(CartItem)
    applied_promos = Text()  # JSON list of {code, type, value}
    status = String(choices=CartStatus, default=CartStatus.ACTIVE.value)
    reservation_expires_at = DateTime()
    expires_at = DateTime()  # guest carts only
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def owned_by_exactly_one_of_user_or_guest(self):
        if bool(self.user_id) == bool(self.guest_token):
            raise ValidationError({"cart": ["A cart belongs to either a user or a guest token, not both or neither"]})

    @invariant.post
    def currency_is_supported(self):
        if self.currency not in SUPPORTED_CURRENCIES:
            raise ValidationError({"currency": [f"Unsupported currency: {self.currency}"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, user_id=None, guest_token=None, currency="USD", guest_ttl_days=30):
        now = utcnow()
        return cls(
            user_id=user_id,
            guest_token=guest_token,
            currency=(currency or "USD").upper(),
            applied_promos=json.dumps([]),
            expires_at=now + timedelta(days=guest_ttl_days) if guest_token else None,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Guards & helpers
    # -------------------------------------------------------------------
    def _assert_active(self, action):
        if self.status != CartStatus.ACTIVE.value:
            raise ValidationError({"status": [f"Cannot {action} a {self.status} cart"]})

    def _find_item(self, item_id):
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise ValidationError({"item_id": [f"Item {item_id} not found in cart"]})
        return item

    def owned_by(self, user_id=None, guest_token=None) -> bool:
        if user_id:
            return str(self.user_id) == str(user_id)
        if guest_token:
            return self.guest_token == guest_token
        return False

    def promos(self) -> list[dict]:
        return json.loads(self.applied_promos) if self.applied_promos else []

    def _touch(self):
        self.updated_at = utcnow()

    def _set_status(self, target: CartStatus):
        previous = self.status
        now = utcnow()
        self.status = target.value
        self.updated_at = now
        self.raise_(
            CartStatusChanged(
                cart_id=str(self.id),
                from_status=previous,
                to_status=target.value,
                changed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Items
    # -------------------------------------------------------------------
    def add_item(self, variant_id, quantity, unit_price, product_id=None, is_gift=False, gift_message=None):
        """Add a variant, merging the quantity into an existing line for it."""
        self._assert_active("add items to")
        _check_gift(is_gift, gift_message)
        unit_price = round_money(unit_price)

        existing = next((i for i in self.items if str(i.variant_id) == str(variant_id)), None)
        if existing:
            existing.quantity += quantity
            existing.unit_price = unit_price
            if is_gift:
                existing.is_gift = True
                existing.gift_message = gift_message
            item = existing
        else:
            item = CartItem(
                product_id=product_id,
                variant_id=variant_id,
                quantity=quantity,
                unit_price=unit_price,
                is_gift=bool(is_gift),
                gift_message=gift_message,
                added_at=utcnow(),
            )
            self.add_items(item)

        self._touch()
        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=str(item.id),
                variant_id=str(variant_id),
                quantity=quantity,
                unit_price=unit_price,
            )
        )
        return item

    def update_item(self, item_id, quantity=None, is_gift=None, gift_message=None):
        self._assert_active("update items in")
        item = self._find_item(item_id)

        new_is_gift = item.is_gift if is_gift is None else is_gift
        new_message = gift_message if gift_message is not None else item.gift_message
        _check_gift(new_is_gift, new_message)

        if quantity is not None:
            if quantity < 1:
                raise ValidationError({"quantity": ["Quantity must be at least 1"]})
            item.quantity = quantity
        item.is_gift = new_is_gift
        item.gift_message = new_message if new_is_gift else None
        self._touch()

    def remove_item(self, item_id):
        self._assert_active("remove items from")
        item = self._find_item(item_id)
        self.remove_items(item)
        self._touch()
        self.raise_(CartItemRemoved(cart_id=str(self.id), item_id=str(item.id), variant_id=str(item.variant_id)))

    def clear(self):
        self._assert_active("clear")
        for item in list(self.items):
            self.remove_items(item)
        self.applied_promos = json.dumps([])
        self._touch()

    # -------------------------------------------------------------------
    # Promotions
    # -------------------------------------------------------------------
    def apply_promo(self, code, promo_type, value=None):
        self._assert_active("apply promotions to")
        code = code.strip().upper()
        promo_type = PromoType.from_string(promo_type)

        if promo_type == PromoType.PERCENTAGE and not (0 < (value or 0) <= 100):
            raise ValidationError({"value": ["Percentage promotions must be between 0 and 100"]})
        if promo_type == PromoType.FIXED_AMOUNT and (value or 0) <= 0:
            raise ValidationError({"value": ["Fixed amount promotions must be positive"]})

        promos = self.promos()
        if any(p["code"] == code for p in promos):
            raise ValidationError({"code": [f"Promotion {code} is already applied"]})

        promos.append({"code": code, "type": promo_type.value, "value": value or 0})
        self.applied_promos = json.dumps(promos)
        self._touch()
        self.raise_(CartPromoApplied(cart_id=str(self.id), code=code, promo_type=promo_type.value, value=value))

    def remove_promo(self, code):
        self._assert_active("remove promotions from")
        code = code.strip().upper()
        promos = self.promos()
        remaining = [p for p in promos if p["code"] != code]
        if len(remaining) == len(promos):
            raise ValidationError({"code": [f"Promotion {code} is not applied"]})
        self.applied_promos = json.dumps(remaining)
        self._touch()

    # -------------------------------------------------------------------
    # Totals
    # -------------------------------------------------------------------
    def subtotal(self) -> float:
        return round_money(sum(item.quantity * item.unit_price for item in self.items))

    def discount(self) -> float:
        subtotal = self.subtotal()
        discount = 0.0
        for promo in self.promos():
            if promo["type"] == PromoType.PERCENTAGE.value:
                discount += subtotal * min(promo["value"], 100) / 100
            elif promo["type"] == PromoType.FIXED_AMOUNT.value:
                discount += promo["value"]
        return round_money(min(discount, subtotal))

    def has_free_shipping(self) -> bool:
        return any(p["type"] == PromoType.FREE_SHIPPING.value for p in self.promos())

    def total(self) -> float:
        return round_money(self.subtotal() - self.discount())

    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def summary(self) -> dict:
        return {
            "cart_id": str(self.id),
            "user_id": str(self.user_id) if self.user_id else None,
            "guest_token": self.guest_token,
            "status": self.status,
            "currency": self.currency,
            "items": [
                {
                    "item_id": str(item.id),
                    "product_id": str(item.product_id) if item.product_id else None,
                    "variant_id": str(item.variant_id),
                    "quantity": item.quantity,
                    "unit_price": item.unit_price,
                    "line_total": item.line_total,
                    "is_gift": item.is_gift,
                    "gift_message": item.gift_message,
                }
                for item in self.items
            ],
            "promotions": self.promos(),
            "item_count": self.item_count(),
            "subtotal": self.subtotal(),
            "discount": self.discount(),
            "free_shipping": self.has_free_shipping(),
            "total": self.total(),
        }

    # -------------------------------------------------------------------
    # Ownership transfer
    # -------------------------------------------------------------------
    def assign_to_user(self, user_id):
        """Turn this guest cart into the user's cart."""
        self._assert_active("transfer")
        if not self.guest_token:
            raise ValidationError({"cart": ["Only guest carts can be transferred"]})
        source_id = str(self.id)
        with atomic_change(self):
            self.user_id = user_id
            self.guest_token = None
        self.expires_at = None
        self._touch()
        self.raise_(
            GuestCartTransferred(
                cart_id=str(self.id),
                source_cart_id=source_id,
                user_id=str(user_id),
                items_merged=len(self.items),
            )
        )

    def merge_from(self, guest_cart: "ShoppingCart"):
        """Fold a guest cart's lines and promotions into this user cart."""
        self._assert_active("merge into")
        guest_cart._assert_active("merge")

        for item in guest_cart.items:
            self.add_item(
                variant_id=item.variant_id,
                quantity=item.quantity,
                unit_price=item.unit_price,
                product_id=item.product_id,
                is_gift=item.is_gift,
                gift_message=item.gift_message,
            )

        existing_codes = {p["code"] for p in self.promos()}
        promos = self.promos() + [p for p in guest_cart.promos() if p["code"] not in existing_codes]
        self.applied_promos = json.dumps(promos)

        guest_cart._set_status(CartStatus.CONVERTED)
        self.raise_(
            GuestCartTransferred(
                cart_id=str(self.id),
                source_cart_id=str(guest_cart.id),
                user_id=str(self.user_id),
                items_merged=len(guest_cart.items),
            )
        )

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def mark_converted(self):
        self._assert_active("convert")
        if not self.items:
            raise ValidationError({"cart": ["Cannot convert an empty cart"]})
        self._set_status(CartStatus.CONVERTED)

    def abandon(self):
        self._assert_active("abandon")
        self._set_status(CartStatus.ABANDONED)

    def is_expired(self, as_of=None) -> bool:
        return bool(self.guest_token) and is_past(self.expires_at, as_of)

    def expire(self):
        self._assert_active("expire")
        self._set_status(CartStatus.EXPIRED)
