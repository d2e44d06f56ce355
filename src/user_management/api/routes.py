"""FastAPI routes for the User Management domain.

`/auth` is public. `/users/me/...` acts on the bearer token's user; the
remaining `/users` routes are for staff and admins.
"""

import json

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from shared.api import UUIDStr
from shared.auth import Principal, get_current_principal, require_role
from shared.result import CommandResult
from user_management import queries
from user_management.api.schemas import (
    AddressRequest,
    BlockUserRequest,
    ChangePasswordRequest,
    ChangeRoleRequest,
    GuestRequest,
    LoginRequest,
    PaymentMethodRequest,
    RefreshRequest,
    RegisterRequest,
    ResetPasswordRequest,
    UpdateAddressRequest,
    UpdateProfileRequest,
)
from user_management.authentication import authenticate, issue_guest_tokens, refresh_tokens
from user_management.user.account import (
    ActivateUser,
    BlockUser,
    ChangePassword,
    ChangeUserRole,
    ResetPassword,
    UpdateProfile,
    VerifyEmail,
)
from user_management.user.addresses import AddAddress, RemoveAddress, SetDefaultAddress, UpdateAddress
from user_management.user.payment_methods import AddPaymentMethod, RemovePaymentMethod, SetDefaultPaymentMethod
from user_management.user.registration import RegisterGuest, RegisterUser


def _process(command):
    return current_domain.process(command, asynchronous=False)


# ---------------------------------------------------------------------------
# Auth Router
# ---------------------------------------------------------------------------
auth_router = APIRouter(prefix="/auth", tags=["auth"])


@auth_router.post("/register", status_code=201, response_model=CommandResult)
async def register(body: RegisterRequest) -> CommandResult:
    _process(RegisterUser(**body.model_dump()))
    return CommandResult.ok(authenticate(body.email, body.password))


@auth_router.post("/guest", status_code=201, response_model=CommandResult)
async def register_guest(body: GuestRequest) -> CommandResult:
    user_id = _process(RegisterGuest(email=body.email))
    return CommandResult.ok(issue_guest_tokens(user_id))


@auth_router.post("/login", response_model=CommandResult)
async def login(body: LoginRequest) -> CommandResult:
    return CommandResult.ok(authenticate(body.email, body.password))


@auth_router.post("/refresh", response_model=CommandResult)
async def refresh(body: RefreshRequest) -> CommandResult:
    return CommandResult.ok(refresh_tokens(body.refresh_token))


# ---------------------------------------------------------------------------
# User Router
# ---------------------------------------------------------------------------
user_router = APIRouter(prefix="/users", tags=["users"])


@user_router.get("/me", response_model=CommandResult)
async def me(principal: Principal = Depends(get_current_principal)) -> CommandResult:
    return CommandResult.ok(queries.get_user(principal.user_id))


@user_router.put("/me/profile", response_model=CommandResult)
async def update_profile(body: UpdateProfileRequest, principal: Principal = Depends(get_current_principal)) -> CommandResult:
    data = body.model_dump()
    prefs = data.pop("style_preferences")
    _process(
        UpdateProfile(
            user_id=principal.user_id,
            style_preferences=json.dumps(prefs) if prefs is not None else None,
            **data,
        )
    )
    return CommandResult.ok(queries.get_user(principal.user_id)["profile"])


@user_router.put("/me/password", response_model=CommandResult)
async def change_password(body: ChangePasswordRequest, principal: Principal = Depends(get_current_principal)) -> CommandResult:
    _process(ChangePassword(user_id=principal.user_id, **body.model_dump()))
    return CommandResult.ok({"user_id": principal.user_id, "password_changed": True})


@user_router.get("/me/addresses", response_model=CommandResult)
async def list_addresses(address_type: str | None = None, principal: Principal = Depends(get_current_principal)) -> CommandResult:
    return CommandResult.ok(queries.list_addresses(principal.user_id, address_type))


@user_router.post("/me/addresses", status_code=201, response_model=CommandResult)
async def add_address(body: AddressRequest, principal: Principal = Depends(get_current_principal)) -> CommandResult:
    address_id = _process(AddAddress(user_id=principal.user_id, **body.model_dump()))
    return CommandResult.ok({"address_id": address_id})


@user_router.put("/me/addresses/{address_id}", response_model=CommandResult)
async def update_address(
    address_id: UUIDStr,
    body: UpdateAddressRequest,
    principal: Principal = Depends(get_current_principal),
) -> CommandResult:
    _process(UpdateAddress(user_id=principal.user_id, address_id=address_id, **body.model_dump()))
    return CommandResult.ok(queries.list_addresses(principal.user_id))


@user_router.delete("/me/addresses/{address_id}", response_model=CommandResult)
async def remove_address(address_id: UUIDStr, principal: Principal = Depends(get_current_principal)) -> CommandResult:
    _process(RemoveAddress(user_id=principal.user_id, address_id=address_id))
    return CommandResult.ok(queries.list_addresses(principal.user_id))


@user_router.put("/me/addresses/{address_id}/default", response_model=CommandResult)
async def set_default_address(address_id: UUIDStr, principal: Principal = Depends(get_current_principal)) -> CommandResult:
    _process(SetDefaultAddress(user_id=principal.user_id, address_id=address_id))
    return CommandResult.ok(queries.list_addresses(principal.user_id))


@user_router.post("/me/payment-methods", status_code=201, response_model=CommandResult)
async def add_payment_method(body: PaymentMethodRequest, principal: Principal = Depends(get_current_principal)) -> CommandResult:
    payment_method_id = _process(AddPaymentMethod(user_id=principal.user_id, **body.model_dump()))
    return CommandResult.ok({"payment_method_id": payment_method_id})


@user_router.delete("/me/payment-methods/{payment_method_id}", response_model=CommandResult)
async def remove_payment_method(payment_method_id: UUIDStr, principal: Principal = Depends(get_current_principal)) -> CommandResult:
    _process(RemovePaymentMethod(user_id=principal.user_id, payment_method_id=payment_method_id))
    return CommandResult.ok(queries.get_user(principal.user_id)["payment_methods"])


@user_router.put("/me/payment-methods/{payment_method_id}/default", response_model=CommandResult)
async def set_default_payment_method(
    payment_method_id: UUIDStr,
    principal: Principal = Depends(get_current_principal),
) -> CommandResult:
    _process(SetDefaultPaymentMethod(user_id=principal.user_id, payment_method_id=payment_method_id))
    return CommandResult.ok(queries.get_user(principal.user_id)["payment_methods"])


@user_router.get("", response_model=CommandResult, dependencies=[Depends(require_role("admin", "staff"))])
async def list_users(
    status: str | None = None,
    role: str | None = None,
    include_guests: bool = False,
    page: int = 1,
    page_size: int = 20,
) -> CommandResult:
    return CommandResult.ok(queries.list_users(status, role, include_guests, page, page_size))


@user_router.post("/reset-password", response_model=CommandResult, dependencies=[Depends(require_role("admin"))])
async def reset_password(body: ResetPasswordRequest) -> CommandResult:
    _process(ResetPassword(**body.model_dump()))
    return CommandResult.ok({"email": body.email.strip().lower(), "password_reset": True})


@user_router.get("/{user_id}", response_model=CommandResult, dependencies=[Depends(require_role("admin", "staff"))])
async def get_user(user_id: UUIDStr) -> CommandResult:
    return CommandResult.ok(queries.get_user(user_id))


@user_router.post("/{user_id}/verify-email", response_model=CommandResult, dependencies=[Depends(require_role("admin", "staff"))])
async def verify_email(user_id: UUIDStr) -> CommandResult:
    _process(VerifyEmail(user_id=user_id))
    return CommandResult.ok({"user_id": user_id, "email_verified": True})


@user_router.post("/{user_id}/block", response_model=CommandResult, dependencies=[Depends(require_role("admin", "staff"))])
async def block_user(user_id: UUIDStr, body: BlockUserRequest) -> CommandResult:
    status = _process(BlockUser(user_id=user_id, reason=body.reason))
    return CommandResult.ok({"user_id": user_id, "status": status})


@user_router.post("/{user_id}/activate", response_model=CommandResult, dependencies=[Depends(require_role("admin", "staff"))])
async def activate_user(user_id: UUIDStr) -> CommandResult:
    status = _process(ActivateUser(user_id=user_id))
    return CommandResult.ok({"user_id": user_id, "status": status})


@user_router.put("/{user_id}/role", response_model=CommandResult, dependencies=[Depends(require_role("admin"))])
async def change_role(user_id: UUIDStr, body: ChangeRoleRequest) -> CommandResult:
    role = _process(ChangeUserRole(user_id=user_id, role=body.role))
    return CommandResult.ok({"user_id": user_id, "role": role})
