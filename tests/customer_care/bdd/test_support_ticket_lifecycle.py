"""BDD tests for the support ticket lifecycle."""

from uuid import uuid4

from protean.exceptions import ValidationError
from pytest_bdd import parsers, scenarios, when

scenarios("features/support_ticket_lifecycle.feature")


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when("an agent is assigned to the ticket")
def assign_agent(ticket, error):
    try:
        ticket.assign(str(uuid4()))
    except ValidationError as exc:
        error["exc"] = exc


@when(parsers.cfparse('the ticket status is changed to "{status}"'))
def change_status(ticket, status, error):
    try:
        ticket.change_status(status)
    except ValidationError as exc:
        error["exc"] = exc


@when("the ticket is reopened")
def reopen(ticket, error):
    try:
        ticket.reopen()
    except ValidationError as exc:
        error["exc"] = exc


@when(parsers.cfparse('the customer adds the message "{body}"'))
def add_message(ticket, body, error):
    try:
        ticket.add_message("customer", body)
    except ValidationError as exc:
        error["exc"] = exc
