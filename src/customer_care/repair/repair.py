"""Repair aggregate and its commands.

State Machine:
    PENDING → IN_PROGRESS | FAILED | CANCELLED
    IN_PROGRESS → COMPLETED | FAILED | CANCELLED
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from customer_care.domain import customer_care, logger
from shared.clock import utcnow
from shared.status import StatusEnum, assert_transition


class RepairStatus(StatusEnum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


_VALID_TRANSITIONS = {
    RepairStatus.PENDING: {RepairStatus.IN_PROGRESS, RepairStatus.FAILED, RepairStatus.CANCELLED},
    RepairStatus.IN_PROGRESS: {RepairStatus.COMPLETED, RepairStatus.FAILED, RepairStatus.CANCELLED},
    RepairStatus.COMPLETED: set(),
    RepairStatus.FAILED: set(),
    RepairStatus.CANCELLED: set(),
}


@customer_care.aggregate
class Repair:
    order_item_id = Identifier(required=True)
    notes = Text()
    status = String(choices=RepairStatus, default=RepairStatus.PENDING.value)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, order_item_id, notes=None):
        now = utcnow()
        return cls(order_item_id=order_item_id, notes=notes, created_at=now, updated_at=now)

    def is_finalized(self) -> bool:
        return not _VALID_TRANSITIONS[RepairStatus.from_string(self.status)]

    def change_status(self, status, note=None):
        target = RepairStatus.from_string(status)
        current = RepairStatus.from_string(self.status)
        if current != target:
            assert_transition(_VALID_TRANSITIONS, current, target)
        if note:
            self.append_notes(note)
        self.status = target.value
        self.updated_at = utcnow()

    def append_notes(self, note):
        if self.is_finalized():
            raise ValidationError({"notes": ["Cannot update notes of a finalized repair"]})
        self.notes = f"{self.notes}\n{note.strip()}" if self.notes else note.strip()


@customer_care.command(part_of=Repair)
class CreateRepair:
    order_item_id = Identifier(required=True)
    notes = Text()


@customer_care.command(part_of=Repair)
class UpdateRepairStatus:
    repair_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    note = Text()


@customer_care.command_handler(part_of=Repair)
class RepairHandler:
    @handle(CreateRepair)
    def create(self, command):
        repair = Repair.create(command.order_item_id, command.notes)
        current_domain.repository_for(Repair).add(repair)
        logger.info("Repair created", repair_id=str(repair.id), order_item_id=str(command.order_item_id))
        return str(repair.id)

    @handle(UpdateRepairStatus)
    def update_status(self, command):
        repo = current_domain.repository_for(Repair)
        repair = repo.get(command.repair_id)
        repair.change_status(command.status, command.note)
        repo.add(repair)
        return repair.status
