"""Domain events for the ReturnRequest aggregate."""

from protean.fields import DateTime, Identifier, String

from customer_care.domain import customer_care


@customer_care.event(part_of="ReturnRequest")
class ReturnStatusChanged:
    """An RMA moved along its lifecycle."""

    __version__ = 1

    return_id = Identifier(required=True)
    order_id = Identifier(required=True)
    from_status = String(required=True)
    to_status = String(required=True)
    changed_at = DateTime(required=True)
