"""Stylist and in-store appointments.

State Machine:
    SCHEDULED → CANCELLED | COMPLETED
"""

from protean import atomic_change, handle, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from engagement.domain import engagement, logger
from shared.clock import as_aware, is_past, utcnow
from shared.status import StatusEnum, assert_transition


class AppointmentType(StatusEnum):
    STYLIST = "stylist"
    IN_STORE = "in_store"

    @classmethod
    def field_name(cls):
        return "appointment_type"


class AppointmentStatus(StatusEnum):
    SCHEDULED = "scheduled"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


_VALID_TRANSITIONS = {
    AppointmentStatus.SCHEDULED: {AppointmentStatus.CANCELLED, AppointmentStatus.COMPLETED},
    AppointmentStatus.CANCELLED: set(),
    AppointmentStatus.COMPLETED: set(),
}


def _check_window(start_at, end_at):
    if is_past(start_at):
        raise ValidationError({"start_at": ["Appointments cannot start in the past"]})
    if as_aware(end_at) <= as_aware(start_at):
        raise ValidationError({"end_at": ["End time must be after start time"]})


@engagement.aggregate
class Appointment:
    user_id = Identifier(required=True)
    appointment_type = String(choices=AppointmentType, required=True)
    start_at = DateTime(required=True)
    end_at = DateTime(required=True)
    location_id = Identifier()
    notes = Text()
    status = String(choices=AppointmentStatus, default=AppointmentStatus.SCHEDULED.value)
    cancellation_reason = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def ends_after_it_starts(self):
        if self.start_at and self.end_at and as_aware(self.end_at) <= as_aware(self.start_at):
            raise ValidationError({"end_at": ["End time must be after start time"]})

    @classmethod
    def book(cls, user_id, appointment_type, start_at, end_at, location_id=None, notes=None):
        _check_window(start_at, end_at)
        now = utcnow()
        return cls(
            user_id=user_id,
            appointment_type=AppointmentType.from_string(appointment_type).value,
            start_at=start_at,
            end_at=end_at,
            location_id=location_id,
            notes=notes,
            created_at=now,
            updated_at=now,
        )

    def _assert_scheduled(self, action):
        if self.status != AppointmentStatus.SCHEDULED.value:
            raise ValidationError({"status": [f"Cannot {action} a {self.status} appointment"]})

    def reschedule(self, start_at, end_at):
        self._assert_scheduled("reschedule")
        _check_window(start_at, end_at)
        with atomic_change(self):
            self.start_at = start_at
            self.end_at = end_at
        self.updated_at = utcnow()

    def _change_status(self, target):
        assert_transition(_VALID_TRANSITIONS, AppointmentStatus.from_string(self.status), target)
        self.status = target.value
        self.updated_at = utcnow()

    def cancel(self, reason=None):
        self._change_status(AppointmentStatus.CANCELLED)
        self.cancellation_reason = reason

    def complete(self):
        self._change_status(AppointmentStatus.COMPLETED)


@engagement.command(part_of=Appointment)
class CreateAppointment:
    user_id = Identifier(required=True)
    appointment_type = String(required=True, max_length=20)
    start_at = DateTime(required=True)
    end_at = DateTime(required=True)
    location_id = Identifier()
    notes = Text()


@engagement.command(part_of=Appointment)
class RescheduleAppointment:
    appointment_id = Identifier(required=True)
    start_at = DateTime(required=True)
    end_at = DateTime(required=True)


@engagement.command(part_of=Appointment)
class CancelAppointment:
    appointment_id = Identifier(required=True)
    reason = String(max_length=500)


@engagement.command(part_of=Appointment)
class CompleteAppointment:
    appointment_id = Identifier(required=True)


@engagement.command_handler(part_of=Appointment)
class AppointmentHandler:
    @handle(CreateAppointment)
    def create(self, command):
        appointment = Appointment.book(
            user_id=command.user_id,
            appointment_type=command.appointment_type,
            start_at=command.start_at,
            end_at=command.end_at,
            location_id=command.location_id,
            notes=command.notes,
        )
        current_domain.repository_for(Appointment).add(appointment)
        logger.info("Appointment booked", appointment_id=str(appointment.id), user_id=str(command.user_id))
        return str(appointment.id)

    @handle(RescheduleAppointment)
    def reschedule(self, command):
        repo = current_domain.repository_for(Appointment)
        appointment = repo.get(command.appointment_id)
        appointment.reschedule(command.start_at, command.end_at)
        repo.add(appointment)

    @handle(CancelAppointment)
    def cancel(self, command):
        repo = current_domain.repository_for(Appointment)
        appointment = repo.get(command.appointment_id)
        appointment.cancel(command.reason)
        repo.add(appointment)
        return appointment.status

    @handle(CompleteAppointment)
    def complete(self, command):
        repo = current_domain.repository_for(Appointment)
        appointment = repo.get(command.appointment_id)
        appointment.complete()
        repo.add(appointment)
        return appointment.status
