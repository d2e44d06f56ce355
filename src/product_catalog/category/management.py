"""Category management: commands and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from product_catalog.category.category import Category
from product_catalog.domain import product_catalog


@product_catalog.command(part_of="Category")
class CreateCategory:
    name: String(required=True, max_length=100)
    slug: String(max_length=120)
    parent_id: Identifier()
    position: Integer(default=0)


@product_catalog.command(part_of="Category")
class UpdateCategory:
    category_id: Identifier(required=True)
    name: String(max_length=100)
    parent_id: Identifier()
    position: Integer()


@product_catalog.command(part_of="Category")
class DeactivateCategory:
    category_id: Identifier(required=True)


@product_catalog.command_handler(part_of=Category)
class ManageCategoryHandler:
    @handle(CreateCategory)
    def create_category(self, command):
        repo = current_domain.repository_for(Category)
        parent = repo.get(command.parent_id) if command.parent_id else None
        if parent is not None and not parent.is_active:
            raise ValidationError({"parent_id": ["Parent category is inactive"]})

        category = Category.create(
            name=command.name,
            slug=command.slug,
            parent=parent,
            position=command.position,
        )
        if repo._dao.query.filter(slug=category.slug).all().items:
            raise ValidationError({"slug": [f"Slug '{category.slug}' is already in use"]})

        repo.add(category)
        return str(category.id)

    @handle(UpdateCategory)
    def update_category(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)
        category.update(name=command.name, position=command.position)
        if command.parent_id is not None:
            if str(command.parent_id) == str(category.id):
                raise ValidationError({"parent_id": ["A category cannot be its own parent"]})
            category.move_under(repo.get(command.parent_id))
        repo.add(category)

    @handle(DeactivateCategory)
    def deactivate_category(self, command):
        repo = current_domain.repository_for(Category)
        category = repo.get(command.category_id)
        category.deactivate()
        repo.add(category)
