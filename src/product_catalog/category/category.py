"""Category aggregate: a node in the storefront navigation tree."""

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, Integer, String

from product_catalog.domain import product_catalog
from product_catalog.product.product import slugify
from shared.clock import utcnow

MAX_DEPTH = 4


@product_catalog.aggregate
class Category:
    name: String(required=True, max_length=100)
    slug: String(required=True, max_length=120)
    parent_id: Identifier()
    level: Integer(default=0, min_value=0, max_value=MAX_DEPTH)
    position: Integer(default=0, min_value=0)
    is_active: Boolean(default=True)
    created_at: DateTime()
    updated_at: DateTime()

    @classmethod
    def create(cls, name, slug=None, parent=None, position=0):
        now = utcnow()
        return cls(
            name=name,
            slug=slug or slugify(name),
            parent_id=str(parent.id) if parent else None,
            level=parent.level + 1 if parent else 0,
            position=position or 0,
            created_at=now,
            updated_at=now,
        )

    def update(self, name=None, position=None):
        if name is not None:
            self.name = name
        if position is not None:
            self.position = position
        self.updated_at = utcnow()

    def move_under(self, parent):
        """Re-parent this category; `parent=None` makes it a root."""
        if parent is not None and str(parent.id) == str(self.id):
            raise ValidationError({"parent_id": ["A category cannot be its own parent"]})
        if parent is not None and not parent.is_active:
            raise ValidationError({"parent_id": ["Parent category is inactive"]})
        self.parent_id = str(parent.id) if parent else None
        self.level = parent.level + 1 if parent else 0
        self.updated_at = utcnow()

    def deactivate(self):
        if not self.is_active:
            raise ValidationError({"is_active": ["Category is already inactive"]})
        self.is_active = False
        self.updated_at = utcnow()
