"""FastAPI routes for the Cart domain: carts, checkouts and reservations."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from cart import queries
from cart.api.schemas import (
    AddToCartRequest,
    ApplyPromoRequest,
    CreateCartRequest,
    CreateReservationRequest,
    ExtendReservationRequest,
    InitializeCheckoutRequest,
    RenewReservationRequest,
    TransferGuestCartRequest,
    UpdateCartItemRequest,
)
from cart.checkout.session import CancelCheckout, CompleteCheckout, InitializeCheckout
from cart.reservation.holds import (
    ConsumeReservation,
    CreateReservation,
    ExtendReservation,
    ReleaseReservation,
    RenewReservation,
)
from cart.shopping_cart.items import AddToCart, RemoveFromCart, UpdateCartItem
from cart.shopping_cart.management import AbandonCart, ClearCart, CreateCart
from cart.shopping_cart.promos import ApplyPromoToCart, RemovePromoFromCart
from cart.shopping_cart.transfer import TransferGuestCart
from payment_loyalty.domain import payment_loyalty
from payment_loyalty.queries import promotion_terms
from shared.api import UUIDStr
from shared.result import CommandResult

# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


def lookup_promotion(code: str, order_amount: float) -> dict:
    """Resolve a promotion code to its terms in the payment & loyalty context.

    Raises a ValidationError on `code` when the promotion is unknown or cannot
    be used on an order of `order_amount`.
    """
    with payment_loyalty.domain_context():
        return promotion_terms(code, order_amount)


def get_promotion_lookup():
    return lookup_promotion


@cart_router.post("", status_code=201, response_model=CommandResult)
async def create_cart(body: CreateCartRequest) -> CommandResult:
    cart_id = current_domain.process(CreateCart(**body.model_dump()), asynchronous=False)
    return CommandResult.ok({"cart_id": cart_id})


@cart_router.get("/active", response_model=CommandResult)
async def get_active_cart(user_id: str | None = None, guest_token: str | None = None) -> CommandResult:
    return CommandResult.ok(queries.get_active_cart(user_id=user_id, guest_token=guest_token))


@cart_router.post("/transfer", response_model=CommandResult)
async def transfer_guest_cart(body: TransferGuestCartRequest) -> CommandResult:
    cart_id = current_domain.process(TransferGuestCart(**body.model_dump()), asynchronous=False)
    return CommandResult.ok({"cart_id": cart_id})


@cart_router.get("/{cart_id}", response_model=CommandResult)
async def get_cart(cart_id: UUIDStr) -> CommandResult:
    return CommandResult.ok(queries.get_cart(cart_id))


@cart_router.post("/{cart_id}/items", status_code=201, response_model=CommandResult)
async def add_to_cart(cart_id: UUIDStr, body: AddToCartRequest) -> CommandResult:
    item_id = current_domain.process(AddToCart(cart_id=cart_id, **body.model_dump()), asynchronous=False)
    return CommandResult.ok({"cart_id": cart_id, "item_id": item_id})


@cart_router.put("/{cart_id}/items/{item_id}", response_model=CommandResult)
async def update_cart_item(cart_id: UUIDStr, item_id: UUIDStr, body: UpdateCartItemRequest) -> CommandResult:
    command = UpdateCartItem(cart_id=cart_id, item_id=item_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return CommandResult.ok(queries.get_cart(cart_id))


@cart_router.delete("/{cart_id}/items/{item_id}", response_model=CommandResult)
async def remove_from_cart(cart_id: UUIDStr, item_id: UUIDStr) -> CommandResult:
    current_domain.process(RemoveFromCart(cart_id=cart_id, item_id=item_id), asynchronous=False)
    return CommandResult.ok(queries.get_cart(cart_id))


@cart_router.delete("/{cart_id}/items", response_model=CommandResult)
async def clear_cart(cart_id: UUIDStr) -> CommandResult:
    current_domain.process(ClearCart(cart_id=cart_id), asynchronous=False)
    return CommandResult.ok(queries.get_cart(cart_id))


@cart_router.post("/{cart_id}/promos", response_model=CommandResult)
async def apply_promo(
    cart_id: UUIDStr,
    body: ApplyPromoRequest,
    lookup=Depends(get_promotion_lookup),
) -> CommandResult:
    terms = lookup(body.code, queries.get_cart(cart_id)["subtotal"])
    current_domain.process(
        ApplyPromoToCart(cart_id=cart_id, code=terms["code"], promo_type=terms["promo_type"], value=terms["value"]),
        asynchronous=False,
    )
    return CommandResult.ok(queries.get_cart(cart_id))


@cart_router.delete("/{cart_id}/promos/{code}", response_model=CommandResult)
async def remove_promo(cart_id: UUIDStr, code: str) -> CommandResult:
    current_domain.process(RemovePromoFromCart(cart_id=cart_id, code=code), asynchronous=False)
    return CommandResult.ok(queries.get_cart(cart_id))


@cart_router.put("/{cart_id}/abandon", response_model=CommandResult)
async def abandon_cart(cart_id: UUIDStr) -> CommandResult:
    current_domain.process(AbandonCart(cart_id=cart_id), asynchronous=False)
    return CommandResult.ok({"cart_id": cart_id, "status": "abandoned"})


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkouts", tags=["checkouts"])


@checkout_router.post("", status_code=201, response_model=CommandResult)
async def initialize_checkout(body: InitializeCheckoutRequest) -> CommandResult:
    result = current_domain.process(InitializeCheckout(**body.model_dump()), asynchronous=False)
    return CommandResult.ok(result)


@checkout_router.get("/{checkout_id}", response_model=CommandResult)
async def get_checkout(checkout_id: UUIDStr) -> CommandResult:
    return CommandResult.ok(queries.get_checkout(checkout_id))


@checkout_router.put("/{checkout_id}/complete", response_model=CommandResult)
async def complete_checkout(checkout_id: UUIDStr) -> CommandResult:
    current_domain.process(CompleteCheckout(checkout_id=checkout_id), asynchronous=False)
    return CommandResult.ok({"checkout_id": checkout_id, "status": "completed"})


@checkout_router.put("/{checkout_id}/cancel", response_model=CommandResult)
async def cancel_checkout(checkout_id: UUIDStr) -> CommandResult:
    current_domain.process(CancelCheckout(checkout_id=checkout_id), asynchronous=False)
    return CommandResult.ok({"checkout_id": checkout_id, "status": "cancelled"})


# ---------------------------------------------------------------------------
# Reservation Router
# ---------------------------------------------------------------------------
reservation_router = APIRouter(prefix="/reservations", tags=["reservations"])


@reservation_router.post("", status_code=201, response_model=CommandResult)
async def create_reservation(body: CreateReservationRequest) -> CommandResult:
    reservation_id = current_domain.process(CreateReservation(**body.model_dump()), asynchronous=False)
    return CommandResult.ok({"reservation_id": reservation_id})


@reservation_router.get("/variants/{variant_id}", response_model=CommandResult)
async def variant_availability(variant_id: UUIDStr) -> CommandResult:
    return CommandResult.ok(queries.variant_availability(variant_id))


@reservation_router.get("/{reservation_id}", response_model=CommandResult)
async def get_reservation(reservation_id: UUIDStr) -> CommandResult:
    return CommandResult.ok(queries.get_reservation(reservation_id))


@reservation_router.put("/{reservation_id}/extend", response_model=CommandResult)
async def extend_reservation(reservation_id: UUIDStr, body: ExtendReservationRequest) -> CommandResult:
    expires_at = current_domain.process(
        ExtendReservation(reservation_id=reservation_id, minutes=body.minutes), asynchronous=False
    )
    return CommandResult.ok({"reservation_id": reservation_id, "expires_at": expires_at})


@reservation_router.put("/{reservation_id}/renew", response_model=CommandResult)
async def renew_reservation(reservation_id: UUIDStr, body: RenewReservationRequest) -> CommandResult:
    expires_at = current_domain.process(
        RenewReservation(reservation_id=reservation_id, duration_minutes=body.duration_minutes), asynchronous=False
    )
    return CommandResult.ok({"reservation_id": reservation_id, "expires_at": expires_at})


@reservation_router.put("/{reservation_id}/release", response_model=CommandResult)
async def release_reservation(reservation_id: UUIDStr) -> CommandResult:
    current_domain.process(ReleaseReservation(reservation_id=reservation_id), asynchronous=False)
    return CommandResult.ok({"reservation_id": reservation_id, "status": "released"})


@reservation_router.put("/{reservation_id}/consume", response_model=CommandResult)
async def consume_reservation(reservation_id: UUIDStr) -> CommandResult:
    current_domain.process(ConsumeReservation(reservation_id=reservation_id), asynchronous=False)
    return CommandResult.ok({"reservation_id": reservation_id, "status": "consumed"})
