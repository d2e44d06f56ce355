"""Reservation commands and the reserved-quantity lookup."""

from protean import handle
from protean.fields import DateTime, Identifier, Integer
from protean.utils.globals import current_domain

from cart.domain import cart, logger
from cart.reservation.reservation import Reservation, ReservationStatus
from shared.clock import utcnow
from shared.settings import get_settings


@cart.command(part_of="Reservation")
class CreateReservation:
    cart_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    duration_minutes = Integer(min_value=1)


@cart.command(part_of="Reservation")
class ExtendReservation:
    reservation_id = Identifier(required=True)
    minutes = Integer(required=True)


@cart.command(part_of="Reservation")
class RenewReservation:
    reservation_id = Identifier(required=True)
    duration_minutes = Integer(min_value=1)


@cart.command(part_of="Reservation")
class AdjustReservation:
    reservation_id = Identifier(required=True)
    quantity = Integer(required=True)


@cart.command(part_of="Reservation")
class ReleaseReservation:
    reservation_id = Identifier(required=True)


@cart.command(part_of="Reservation")
class ConsumeReservation:
    reservation_id = Identifier(required=True)


@cart.command(part_of="Reservation")
class ExpireReservations:
    as_of = DateTime()


def reserved_quantity(variant_id, as_of=None, exclude_cart_id=None) -> int:
    """Units of a variant held by active, unexpired reservations."""
    dao = current_domain.repository_for(Reservation)._dao
    holds = dao.query.filter(variant_id=variant_id, status=ReservationStatus.ACTIVE.value).all().items
    return sum(
        r.quantity
        for r in holds
        if r.is_holding(as_of) and (exclude_cart_id is None or str(r.cart_id) != str(exclude_cart_id))
    )


@cart.command_handler(part_of=Reservation)
class ReservationHandler:
    @handle(CreateReservation)
    def create_reservation(self, command):
        settings = get_settings()
        reservation = Reservation.create(
            cart_id=command.cart_id,
            variant_id=command.variant_id,
            quantity=command.quantity,
            duration_minutes=command.duration_minutes or settings.RESERVATION_TTL_MINUTES,
            max_extension_minutes=settings.RESERVATION_MAX_EXTENSION_MINUTES,
        )
        current_domain.repository_for(Reservation).add(reservation)
        logger.info(
            "Reservation created",
            reservation_id=str(reservation.id),
            variant_id=str(command.variant_id),
            quantity=command.quantity,
        )
        return str(reservation.id)

    def _apply(self, reservation_id, action):
        repo = current_domain.repository_for(Reservation)
        reservation = repo.get(reservation_id)
        action(reservation)
        repo.add(reservation)
        return reservation

    @handle(ExtendReservation)
    def extend_reservation(self, command):
        reservation = self._apply(command.reservation_id, lambda r: r.extend(command.minutes))
        return reservation.expires_at.isoformat()

    @handle(RenewReservation)
    def renew_reservation(self, command):
        duration = command.duration_minutes or get_settings().RESERVATION_TTL_MINUTES
        reservation = self._apply(command.reservation_id, lambda r: r.renew(duration))
        return reservation.expires_at.isoformat()

    @handle(AdjustReservation)
    def adjust_reservation(self, command):
        self._apply(command.reservation_id, lambda r: r.adjust_quantity(command.quantity))

    @handle(ReleaseReservation)
    def release_reservation(self, command):
        self._apply(command.reservation_id, lambda r: r.release())
        logger.info("Reservation released", reservation_id=str(command.reservation_id))

    @handle(ConsumeReservation)
    def consume_reservation(self, command):
        self._apply(command.reservation_id, lambda r: r.consume())

    @handle(ExpireReservations)
    def expire_reservations(self, command):
        as_of = command.as_of or utcnow()
        repo = current_domain.repository_for(Reservation)
        active = repo._dao.query.filter(status=ReservationStatus.ACTIVE.value).all().items

        expired = 0
        for reservation in active:
            if reservation.is_expired(as_of):
                reservation.expire()
                repo.add(reservation)
                expired += 1

        logger.info("Reservations expired", count=expired)
        return expired
