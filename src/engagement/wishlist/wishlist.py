"""Wishlist aggregate.

Like carts, a wishlist belongs to exactly one of a user or a guest token, and
guest wishlists can be handed over to the user once they sign in.
"""

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, HasMany, Identifier, String, Text

from engagement.domain import engagement
from shared.clock import utcnow


@engagement.entity(part_of="Wishlist")
class WishlistItem:
    variant_id = Identifier(required=True)
    product_id = Identifier()
    note = String(max_length=500)
    added_at = DateTime(required=True)


@engagement.aggregate
class Wishlist:
    user_id = Identifier()
    guest_token = String(max_length=255)
    name = String(required=True, max_length=100, default="My Wishlist")
    description = Text()
    is_default = Boolean(default=False)
    is_public = Boolean(default=False)
    items = HasMany(WishlistItem)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def owned_by_exactly_one_of_user_or_guest(self):
        if not self.user_id and not self.guest_token:
            raise ValidationError({"wishlist": ["Wishlist must belong to either a user or a guest"]})
        if self.user_id and self.guest_token:
            raise ValidationError({"wishlist": ["Wishlist cannot belong to both a user and a guest"]})

    @invariant.post
    def variants_are_unique(self):
        variants = [str(i.variant_id) for i in self.items]
        if len(variants) != len(set(variants)):
            raise ValidationError({"items": ["A variant can only appear once in a wishlist"]})

    @classmethod
    def create(cls, user_id=None, guest_token=None, name=None, description=None, is_default=False, is_public=False):
        now = utcnow()
        return cls(
            user_id=user_id,
            guest_token=guest_token,
            name=(name or "My Wishlist").strip(),
            description=description,
            is_default=is_default,
            is_public=is_public,
            created_at=now,
            updated_at=now,
        )

    def owned_by(self, user_id=None, guest_token=None) -> bool:
        if user_id:
            return str(self.user_id) == str(user_id)
        return bool(guest_token) and self.guest_token == guest_token

    def has_variant(self, variant_id) -> bool:
        return any(str(i.variant_id) == str(variant_id) for i in self.items)

    def add_item(self, variant_id, product_id=None, note=None):
        if self.has_variant(variant_id):
            raise ValidationError({"variant_id": [f"Variant {variant_id} is already in this wishlist"]})
        item = WishlistItem(variant_id=variant_id, product_id=product_id, note=note, added_at=utcnow())
        self.add_items(item)
        self.updated_at = item.added_at
        return item

    def remove_item(self, variant_id):
        item = next((i for i in self.items if str(i.variant_id) == str(variant_id)), None)
        if item is None:
            raise ValidationError({"variant_id": [f"Variant {variant_id} is not in this wishlist"]})
        self.remove_items(item)
        self.updated_at = utcnow()

    def update(self, name=None, description=None, is_public=None, is_default=None):
        if name is not None:
            if not name.strip():
                raise ValidationError({"name": ["Wishlist name cannot be empty"]})
            self.name = name.strip()
        if description is not None:
            self.description = description
        if is_public is not None:
            self.is_public = is_public
        if is_default is not None:
            self.is_default = is_default
        self.updated_at = utcnow()

    def transfer_to_user(self, user_id):
        if not user_id:
            raise ValidationError({"user_id": ["User ID cannot be empty"]})
        with atomic_change(self):
            self.user_id = user_id
            self.guest_token = None
        self.updated_at = utcnow()
