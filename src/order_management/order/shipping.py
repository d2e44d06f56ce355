"""Order shipments: create, dispatch and deliver."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from order_management.domain import logger, order_management
from order_management.order.order import Order


@order_management.command(part_of="Order")
class CreateShipment:
    order_id = Identifier(required=True)
    carrier = String(max_length=100)
    tracking_no = String(max_length=255)


@order_management.command(part_of="Order")
class MarkShipmentShipped:
    order_id = Identifier(required=True)
    shipment_id = Identifier(required=True)
    carrier = String(max_length=100)
    tracking_no = String(max_length=255)


@order_management.command(part_of="Order")
class MarkShipmentDelivered:
    order_id = Identifier(required=True)
    shipment_id = Identifier(required=True)


@order_management.command_handler(part_of=Order)
class ShipmentHandler:
    @handle(CreateShipment)
    def create_shipment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        shipment = order.create_shipment(carrier=command.carrier, tracking_no=command.tracking_no)
        repo.add(order)
        return str(shipment.id)

    @handle(MarkShipmentShipped)
    def mark_shipped(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.mark_shipment_shipped(command.shipment_id, carrier=command.carrier, tracking_no=command.tracking_no)
        repo.add(order)
        logger.info("Shipment dispatched", order_id=str(order.id), shipment_id=str(command.shipment_id))
        return order.status

    @handle(MarkShipmentDelivered)
    def mark_delivered(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.mark_shipment_delivered(command.shipment_id)
        repo.add(order)
        logger.info("Shipment delivered", order_id=str(order.id), shipment_id=str(command.shipment_id))
        return order.status
