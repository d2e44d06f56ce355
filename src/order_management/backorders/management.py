"""Backorder and preorder commands."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier
from protean.utils.globals import current_domain

from order_management.backorders.backorder import Backorder, Preorder
from order_management.domain import logger, order_management


@order_management.command(part_of="Backorder")
class CreateBackorder:
    order_item_id = Identifier(required=True)
    promised_eta = DateTime()


@order_management.command(part_of="Backorder")
class UpdateBackorderEta:
    order_item_id = Identifier(required=True)
    promised_eta = DateTime(required=True)


@order_management.command(part_of="Backorder")
class MarkBackorderNotified:
    order_item_id = Identifier(required=True)


@order_management.command(part_of="Preorder")
class CreatePreorder:
    order_item_id = Identifier(required=True)
    release_date = DateTime()


@order_management.command(part_of="Preorder")
class MarkPreorderNotified:
    order_item_id = Identifier(required=True)


def _find_by_item(aggregate_cls, order_item_id):
    dao = current_domain.repository_for(aggregate_cls)._dao
    records = dao.query.filter(order_item_id=order_item_id).all().items
    return records[0] if records else None


def _get_by_item(aggregate_cls, order_item_id):
    record = _find_by_item(aggregate_cls, order_item_id)
    if record is None:
        raise ValidationError({"order_item_id": [f"No {aggregate_cls.__name__.lower()} for order item {order_item_id}"]})
    return record


@order_management.command_handler(part_of=Backorder)
class BackorderHandler:
    @handle(CreateBackorder)
    def create_backorder(self, command):
        if _find_by_item(Backorder, command.order_item_id):
            raise ValidationError({"order_item_id": ["Backorder already exists for this order item"]})
        backorder = Backorder.create(command.order_item_id, command.promised_eta)
        current_domain.repository_for(Backorder).add(backorder)
        logger.info("Backorder created", order_item_id=str(command.order_item_id))
        return str(backorder.id)

    @handle(UpdateBackorderEta)
    def update_eta(self, command):
        backorder = _get_by_item(Backorder, command.order_item_id)
        backorder.update_eta(command.promised_eta)
        current_domain.repository_for(Backorder).add(backorder)

    @handle(MarkBackorderNotified)
    def mark_notified(self, command):
        backorder = _get_by_item(Backorder, command.order_item_id)
        backorder.mark_notified()
        current_domain.repository_for(Backorder).add(backorder)


@order_management.command_handler(part_of=Preorder)
class PreorderHandler:
    @handle(CreatePreorder)
    def create_preorder(self, command):
        if _find_by_item(Preorder, command.order_item_id):
            raise ValidationError({"order_item_id": ["Preorder already exists for this order item"]})
        preorder = Preorder.create(command.order_item_id, command.release_date)
        current_domain.repository_for(Preorder).add(preorder)
        logger.info("Preorder created", order_item_id=str(command.order_item_id))
        return str(preorder.id)

    @handle(MarkPreorderNotified)
    def mark_notified(self, command):
        preorder = _get_by_item(Preorder, command.order_item_id)
        preorder.mark_notified()
        current_domain.repository_for(Preorder).add(preorder)
