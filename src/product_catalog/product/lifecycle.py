"""Product lifecycle: publish, schedule, unpublish, archive and restore."""

from protean import handle
from protean.fields import DateTime, Identifier
from protean.utils.globals import current_domain

from product_catalog.domain import logger, product_catalog
from product_catalog.product.product import Product, ProductStatus
from shared.clock import utcnow


@product_catalog.command(part_of="Product")
class PublishProduct:
    product_id: Identifier(required=True)


@product_catalog.command(part_of="Product")
class ScheduleProduct:
    product_id: Identifier(required=True)
    publish_at: DateTime(required=True)


@product_catalog.command(part_of="Product")
class UnpublishProduct:
    product_id: Identifier(required=True)


@product_catalog.command(part_of="Product")
class ArchiveProduct:
    product_id: Identifier(required=True)


@product_catalog.command(part_of="Product")
class RestoreProduct:
    product_id: Identifier(required=True)


@product_catalog.command(part_of="Product")
class PublishScheduledProducts:
    """Publish every scheduled product whose publish time has passed."""

    as_of: DateTime()


@product_catalog.command_handler(part_of=Product)
class ProductLifecycleHandler:
    def _apply(self, product_id, action):
        repo = current_domain.repository_for(Product)
        product = repo.get(product_id)
        previous = product.status
        action(product)
        repo.add(product)
        logger.info(
            "Product status changed",
            product_id=str(product_id),
            from_status=previous,
            to_status=product.status,
        )

    @handle(PublishProduct)
    def publish_product(self, command):
        self._apply(command.product_id, lambda p: p.publish())

    @handle(ScheduleProduct)
    def schedule_product(self, command):
        self._apply(command.product_id, lambda p: p.schedule(command.publish_at))

    @handle(UnpublishProduct)
    def unpublish_product(self, command):
        self._apply(command.product_id, lambda p: p.unpublish())

    @handle(ArchiveProduct)
    def archive_product(self, command):
        self._apply(command.product_id, lambda p: p.archive())

    @handle(RestoreProduct)
    def restore_product(self, command):
        self._apply(command.product_id, lambda p: p.restore())

    @handle(PublishScheduledProducts)
    def publish_scheduled(self, command):
        as_of = command.as_of or utcnow()
        repo = current_domain.repository_for(Product)
        scheduled = repo._dao.query.filter(status=ProductStatus.SCHEDULED.value).all().items

        published = 0
        for product in scheduled:
            if product.is_due(as_of):
                product.publish()
                repo.add(product)
                published += 1

        logger.info("Scheduled products published", count=published)
        return published
