"""Return request (RMA) commands."""

from protean import handle
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from customer_care.domain import customer_care, logger
from customer_care.returns.return_request import ReturnRequest


@customer_care.command(part_of="ReturnRequest")
class CreateReturnRequest:
    order_id = Identifier(required=True)
    rma_type = String(required=True, max_length=20)
    reason = Text()


@customer_care.command(part_of="ReturnRequest")
class AddReturnItem:
    return_id = Identifier(required=True)
    order_item_id = Identifier(required=True)
    quantity = Integer(required=True)
    condition = String(max_length=20)
    disposition = String(max_length=20)
    fees = Float()


@customer_care.command(part_of="ReturnRequest")
class UpdateReturnItemCondition:
    return_id = Identifier(required=True)
    item_id = Identifier(required=True)
    condition = String(max_length=20)
    disposition = String(max_length=20)


@customer_care.command(part_of="ReturnRequest")
class UpdateReturnStatus:
    return_id = Identifier(required=True)
    status = String(required=True, max_length=20)


@customer_care.command(part_of="ReturnRequest")
class ApproveReturn:
    return_id = Identifier(required=True)


@customer_care.command(part_of="ReturnRequest")
class RejectReturn:
    return_id = Identifier(required=True)
    reason = Text()


@customer_care.command(part_of="ReturnRequest")
class MarkReturnInTransit:
    return_id = Identifier(required=True)


@customer_care.command(part_of="ReturnRequest")
class MarkReturnReceived:
    return_id = Identifier(required=True)


@customer_care.command(part_of="ReturnRequest")
class MarkReturnRefunded:
    return_id = Identifier(required=True)


@customer_care.command_handler(part_of=ReturnRequest)
class ReturnRequestHandler:
    def _transition(self, return_id, change):
        repo = current_domain.repository_for(ReturnRequest)
        rma = repo.get(return_id)
        previous = rma.status
        change(rma)
        repo.add(rma)
        logger.info("Return status changed", return_id=str(return_id), from_status=previous, to_status=rma.status)
        return rma.status

    @handle(CreateReturnRequest)
    def create(self, command):
        rma = ReturnRequest.create(command.order_id, command.rma_type, command.reason)
        current_domain.repository_for(ReturnRequest).add(rma)
        logger.info("Return request created", return_id=str(rma.id), order_id=str(command.order_id))
        return str(rma.id)

    @handle(AddReturnItem)
    def add_item(self, command):
        repo = current_domain.repository_for(ReturnRequest)
        rma = repo.get(command.return_id)
        item = rma.add_item(
            order_item_id=command.order_item_id,
            quantity=command.quantity,
            condition=command.condition,
            disposition=command.disposition,
            fees=command.fees,
        )
        repo.add(rma)
        return str(item.id)

    @handle(UpdateReturnItemCondition)
    def update_item_condition(self, command):
        repo = current_domain.repository_for(ReturnRequest)
        rma = repo.get(command.return_id)
        rma.update_item_condition(command.item_id, command.condition, command.disposition)
        repo.add(rma)

    @handle(UpdateReturnStatus)
    def update_status(self, command):
        return self._transition(command.return_id, lambda r: r.change_status(command.status))

    @handle(ApproveReturn)
    def approve(self, command):
        return self._transition(command.return_id, lambda r: r.approve())

    @handle(RejectReturn)
    def reject(self, command):
        def _reject(rma):
            if command.reason:
                rma.update_reason(command.reason)
            rma.reject()

        return self._transition(command.return_id, _reject)

    @handle(MarkReturnInTransit)
    def mark_in_transit(self, command):
        return self._transition(command.return_id, lambda r: r.mark_in_transit())

    @handle(MarkReturnReceived)
    def mark_received(self, command):
        return self._transition(command.return_id, lambda r: r.mark_received())

    @handle(MarkReturnRefunded)
    def mark_refunded(self, command):
        return self._transition(command.return_id, lambda r: r.mark_refunded())
