"""FastAPI routes for the Payment & Loyalty domain."""

import json

from fastapi import APIRouter
from protean.utils.globals import current_domain

from payment_loyalty import queries
from payment_loyalty.api.schemas import (
    AdjustPointsRequest,
    AwardOrderPointsRequest,
    AwardPointsRequest,
    BnplActionRequest,
    CreateBnplRequest,
    CreatePaymentIntentRequest,
    CreatePromotionRequest,
    EnrollRequest,
    EvaluatePromotionRequest,
    FailPaymentRequest,
    GiftCardAmountRequest,
    IssueGiftCardRequest,
    PaymentWebhookRequest,
    RecordUsageRequest,
    RedeemPointsRequest,
    RefundPaymentRequest,
)
from payment_loyalty.bnpl.management import CreateBnplTransaction, UpdateBnplStatus
from payment_loyalty.gift_card.management import CancelGiftCard, IssueGiftCard, RedeemGiftCard, RefundGiftCard
from payment_loyalty.loyalty.points import AdjustPoints, AwardPoints, AwardPointsForOrder, EnrollInLoyalty, RedeemPoints
from payment_loyalty.payment.processing import (
    AuthorizePayment,
    CancelPayment,
    CapturePayment,
    CreatePaymentIntent,
    FailPayment,
    RefundPayment,
)
from payment_loyalty.payment.webhook import ProcessPaymentWebhook
from payment_loyalty.promotion.management import (
    ActivatePromotion,
    CreatePromotion,
    DeactivatePromotion,
    RecordPromotionUsage,
)
from shared.api import UUIDStr
from shared.result import CommandResult

# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("/intents", status_code=201, response_model=CommandResult)
async def create_payment_intent(body: CreatePaymentIntentRequest) -> CommandResult:
    result = current_domain.process(CreatePaymentIntent(**body.model_dump()), asynchronous=False)
    return CommandResult.ok(result)


@payment_router.get("/intents/{intent_id}", response_model=CommandResult)
async def get_payment_intent(intent_id: UUIDStr) -> CommandResult:
    return CommandResult.ok(queries.get_payment_intent(intent_id))


@payment_router.post("/intents/{intent_id}/authorize", response_model=CommandResult)
async def authorize_payment(intent_id: UUIDStr) -> CommandResult:
    status = current_domain.process(AuthorizePayment(intent_id=intent_id), asynchronous=False)
    return CommandResult.ok({"intent_id": intent_id, "status": status})


@payment_router.post("/intents/{intent_id}/capture", response_model=CommandResult)
async def capture_payment(intent_id: UUIDStr) -> CommandResult:
    status = current_domain.process(CapturePayment(intent_id=intent_id), asynchronous=False)
    return CommandResult.ok({"intent_id": intent_id, "status": status})


@payment_router.post("/intents/{intent_id}/fail", response_model=CommandResult)
async def fail_payment(intent_id: UUIDStr, body: FailPaymentRequest) -> CommandResult:
    status = current_domain.process(FailPayment(intent_id=intent_id, reason=body.reason), asynchronous=False)
    return CommandResult.ok({"intent_id": intent_id, "status": status})


@payment_router.post("/intents/{intent_id}/refund", response_model=CommandResult)
async def refund_payment(intent_id: UUIDStr, body: RefundPaymentRequest) -> CommandResult:
    refunded = current_domain.process(
        RefundPayment(intent_id=intent_id, amount=body.amount, reason=body.reason), asynchronous=False
    )
    return CommandResult.ok({"intent_id": intent_id, "refunded": refunded})


@payment_router.post("/intents/{intent_id}/cancel", response_model=CommandResult)
async def cancel_payment(intent_id: UUIDStr) -> CommandResult:
    status = current_domain.process(CancelPayment(intent_id=intent_id), asynchronous=False)
    return CommandResult.ok({"intent_id": intent_id, "status": status})


@payment_router.post("/webhooks", response_model=CommandResult)
async def payment_webhook(body: PaymentWebhookRequest) -> CommandResult:
    result = current_domain.process(
        ProcessPaymentWebhook(event_type=body.event_type, intent_id=body.intent_id, payload_json=json.dumps(body.payload)),
        asynchronous=False,
    )
    return CommandResult.ok(result)


# ---------------------------------------------------------------------------
# Gift Card Router
# ---------------------------------------------------------------------------
gift_card_router = APIRouter(prefix="/gift-cards", tags=["gift-cards"])


@gift_card_router.post("", status_code=201, response_model=CommandResult)
async def issue_gift_card(body: IssueGiftCardRequest) -> CommandResult:
    result = current_domain.process(IssueGiftCard(**body.model_dump()), asynchronous=False)
    return CommandResult.ok(result)


@gift_card_router.get("/{code_or_id}/balance", response_model=CommandResult)
async def gift_card_balance(code_or_id: str) -> CommandResult:
    return CommandResult.ok(queries.gift_card_balance(code_or_id))


@gift_card_router.post("/{gift_card_id}/redeem", response_model=CommandResult)
async def redeem_gift_card(gift_card_id: UUIDStr, body: GiftCardAmountRequest) -> CommandResult:
    balance = current_domain.process(
        RedeemGiftCard(gift_card_id=gift_card_id, amount=body.amount, order_id=body.order_id), asynchronous=False
    )
    return CommandResult.ok({"gift_card_id": gift_card_id, "balance": balance})


@gift_card_router.post("/{gift_card_id}/refund", response_model=CommandResult)
async def refund_gift_card(gift_card_id: UUIDStr, body: GiftCardAmountRequest) -> CommandResult:
    balance = current_domain.process(
        RefundGiftCard(gift_card_id=gift_card_id, amount=body.amount, order_id=body.order_id), asynchronous=False
    )
    return CommandResult.ok({"gift_card_id": gift_card_id, "balance": balance})


@gift_card_router.put("/{gift_card_id}/cancel", response_model=CommandResult)
async def cancel_gift_card(gift_card_id: UUIDStr) -> CommandResult:
    current_domain.process(CancelGiftCard(gift_card_id=gift_card_id), asynchronous=False)
    return CommandResult.ok({"gift_card_id": gift_card_id, "status": "cancelled"})


# ---------------------------------------------------------------------------
# Loyalty Router
# ---------------------------------------------------------------------------
loyalty_router = APIRouter(prefix="/loyalty", tags=["loyalty"])


@loyalty_router.post("/accounts", status_code=201, response_model=CommandResult)
async def enroll(body: EnrollRequest) -> CommandResult:
    account_id = current_domain.process(EnrollInLoyalty(user_id=body.user_id), asynchronous=False)
    return CommandResult.ok({"account_id": account_id})


@loyalty_router.get("/accounts/{user_id}", response_model=CommandResult)
async def get_account(user_id: UUIDStr) -> CommandResult:
    return CommandResult.ok(queries.get_loyalty_account(user_id))


@loyalty_router.post("/award", response_model=CommandResult)
async def award_points(body: AwardPointsRequest) -> CommandResult:
    balance = current_domain.process(AwardPoints(**body.model_dump()), asynchronous=False)
    return CommandResult.ok({"user_id": body.user_id, "points_balance": balance})


@loyalty_router.post("/award-order", response_model=CommandResult)
async def award_order_points(body: AwardOrderPointsRequest) -> CommandResult:
    balance = current_domain.process(AwardPointsForOrder(**body.model_dump()), asynchronous=False)
    return CommandResult.ok({"user_id": body.user_id, "points_balance": balance})


@loyalty_router.post("/redeem", response_model=CommandResult)
async def redeem_points(body: RedeemPointsRequest) -> CommandResult:
    balance = current_domain.process(RedeemPoints(**body.model_dump()), asynchronous=False)
    return CommandResult.ok({"user_id": body.user_id, "points_balance": balance})


@loyalty_router.post("/adjust", response_model=CommandResult)
async def adjust_points(body: AdjustPointsRequest) -> CommandResult:
    balance = current_domain.process(AdjustPoints(**body.model_dump()), asynchronous=False)
    return CommandResult.ok({"user_id": body.user_id, "points_balance": balance})


# ---------------------------------------------------------------------------
# Promotion Router
# ---------------------------------------------------------------------------
promotion_router = APIRouter(prefix="/promotions", tags=["promotions"])


@promotion_router.post("", status_code=201, response_model=CommandResult)
async def create_promotion(body: CreatePromotionRequest) -> CommandResult:
    promotion_id = current_domain.process(CreatePromotion(**body.model_dump()), asynchronous=False)
    return CommandResult.ok({"promotion_id": promotion_id})


@promotion_router.get("", response_model=CommandResult)
async def list_promotions(active_only: bool = False, page: int = 1, page_size: int = 20) -> CommandResult:
    return CommandResult.ok(queries.list_promotions(active_only, page, page_size))


@promotion_router.post("/evaluate", response_model=CommandResult)
async def evaluate_promotion(body: EvaluatePromotionRequest) -> CommandResult:
    return CommandResult.ok(queries.evaluate_promotion(body.code, body.order_amount, body.shipping_amount))


@promotion_router.put("/{promotion_id}/activate", response_model=CommandResult)
async def activate_promotion(promotion_id: UUIDStr) -> CommandResult:
    current_domain.process(ActivatePromotion(promotion_id=promotion_id), asynchronous=False)
    return CommandResult.ok({"promotion_id": promotion_id, "is_active": True})


@promotion_router.put("/{promotion_id}/deactivate", response_model=CommandResult)
async def deactivate_promotion(promotion_id: UUIDStr) -> CommandResult:
    current_domain.process(DeactivatePromotion(promotion_id=promotion_id), asynchronous=False)
    return CommandResult.ok({"promotion_id": promotion_id, "is_active": False})


@promotion_router.post("/{promotion_id}/usages", status_code=201, response_model=CommandResult)
async def record_usage(promotion_id: UUIDStr, body: RecordUsageRequest) -> CommandResult:
    count = current_domain.process(
        RecordPromotionUsage(promotion_id=promotion_id, **body.model_dump()), asynchronous=False
    )
    return CommandResult.ok({"promotion_id": promotion_id, "usage_count": count})


# ---------------------------------------------------------------------------
# BNPL Router
# ---------------------------------------------------------------------------
bnpl_router = APIRouter(prefix="/bnpl", tags=["bnpl"])


@bnpl_router.post("", status_code=201, response_model=CommandResult)
async def create_bnpl(body: CreateBnplRequest) -> CommandResult:
    bnpl_id = current_domain.process(CreateBnplTransaction(**body.model_dump()), asynchronous=False)
    return CommandResult.ok({"bnpl_id": bnpl_id})


@bnpl_router.get("/{bnpl_id}", response_model=CommandResult)
async def get_bnpl(bnpl_id: UUIDStr) -> CommandResult:
    return CommandResult.ok(queries.get_bnpl_transaction(bnpl_id))


@bnpl_router.put("/{bnpl_id}/status", response_model=CommandResult)
async def update_bnpl_status(bnpl_id: UUIDStr, body: BnplActionRequest) -> CommandResult:
    status = current_domain.process(UpdateBnplStatus(bnpl_id=bnpl_id, action=body.action), asynchronous=False)
    return CommandResult.ok({"bnpl_id": bnpl_id, "status": status})
