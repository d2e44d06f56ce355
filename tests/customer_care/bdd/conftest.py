"""Shared BDD fixtures and step definitions for the Customer Care domain."""

from uuid import uuid4

import pytest
from customer_care.returns.return_request import ReturnRequest
from customer_care.ticket.ticket import SupportTicket
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("an open support ticket", target_fixture="ticket")
def open_ticket():
    ticket = SupportTicket.open(source="web", subject="Parcel never arrived", user_id=str(uuid4()))
    ticket._events.clear()
    return ticket


@given("a closed support ticket", target_fixture="ticket")
def closed_ticket():
    ticket = SupportTicket.open(source="email", subject="Missing button")
    ticket.change_status("closed")
    ticket._events.clear()
    return ticket


@given("a return request with one item", target_fixture="rma")
def return_with_item():
    rma = ReturnRequest.create(order_id=str(uuid4()), rma_type="return", reason="Too large")
    rma.add_item(order_item_id=str(uuid4()), quantity=1, condition="new", disposition="refund")
    rma._events.clear()
    return rma


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the ticket status is "{status}"'))
def ticket_status_is(ticket, status):
    assert ticket.status == status


@then("the ticket action fails with a validation error")
def ticket_action_fails(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)


@then(parsers.cfparse('the return status is "{status}"'))
def return_status_is(rma, status):
    assert rma.status == status


@then("the return action fails with a validation error")
def return_action_fails(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)
