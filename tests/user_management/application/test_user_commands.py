"""Application tests for user management commands, authentication and queries."""

import json

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError
from shared.security import create_refresh_token, decode_token
from user_management import queries
from user_management.authentication import authenticate, refresh_tokens
from user_management.user.account import BlockUser, ChangePassword, ChangeUserRole, ResetPassword, UpdateProfile
from user_management.user.addresses import AddAddress, RemoveAddress, SetDefaultAddress, UpdateAddress
from user_management.user.payment_methods import AddPaymentMethod, SetDefaultPaymentMethod
from user_management.user.registration import RegisterGuest, RegisterUser, check_password_strength


def _process(command):
    return current_domain.process(command, asynchronous=False)


def _register(email="nadia@example.com", password="linen2024", **extra):
    return _process(RegisterUser(email=email, password=password, **extra))


class TestPasswordStrength:
    @pytest.mark.parametrize("password", ["short1", "longenough", "12345678", ""])
    def test_weak_passwords(self, password):
        with pytest.raises(ValidationError):
            check_password_strength(password)

    def test_all_problems_are_reported(self):
        with pytest.raises(ValidationError) as exc:
            check_password_strength("abc")
        assert len(exc.value.messages["password"]) == 2

    def test_strong_password(self):
        check_password_strength("linen2024")

    def test_password_over_72_bytes(self):
        with pytest.raises(ValidationError) as exc:
            check_password_strength("\u00e91" * 25)
        assert exc.value.messages["password"] == ["Password must be at most 72 bytes long"]

    def test_72_byte_password_is_accepted(self):
        check_password_strength("a1" * 36)


class TestRegistration:
    def test_register_and_sign_in(self):
        user_id = _register(first_name="Nadia")
        tokens = authenticate("NADIA@example.com", "linen2024")
        assert tokens["user_id"] == user_id
        assert decode_token(tokens["access_token"])["role"] == "customer"
        assert queries.get_user(user_id)["last_login_at"] is not None

    def test_duplicate_email(self):
        _register()
        with pytest.raises(ValidationError) as exc:
            _register(email="Nadia@Example.com")
        assert exc.value.messages["email"] == ["Email is already registered"]

    def test_guest_is_reused_then_upgraded(self):
        guest_id = _process(RegisterGuest(email="guest@example.com"))
        assert _process(RegisterGuest(email="guest@example.com")) == guest_id
        assert _register(email="guest@example.com") == guest_id
        details = queries.get_user(guest_id)
        assert details["is_guest"] is False
        assert details["role"] == "customer"

    def test_long_password_is_a_validation_error(self):
        with pytest.raises(ValidationError) as exc:
            _register(password="a1" * 40)
        assert "password" in exc.value.messages

    def test_guest_registration_for_customer_email(self):
        _register()
        with pytest.raises(ValidationError):
            _process(RegisterGuest(email="nadia@example.com"))


class TestAuthentication:
    def test_wrong_password(self):
        _register()
        with pytest.raises(ValidationError) as exc:
            authenticate("nadia@example.com", "wrong-pass1")
        assert exc.value.messages["credentials"] == ["Invalid email or password"]

    def test_over_long_password_fails_like_a_wrong_one(self):
        _register()
        with pytest.raises(ValidationError) as exc:
            authenticate("nadia@example.com", "z9" * 40)
        assert exc.value.messages["credentials"] == ["Invalid email or password"]

    def test_unknown_email(self):
        with pytest.raises(ValidationError) as exc:
            authenticate("nobody@example.com", "linen2024")
        assert exc.value.messages["credentials"] == ["Invalid email or password"]

    def test_blocked_user_is_rejected(self):
        user_id = _register()
        _process(BlockUser(user_id=user_id, reason="Fraud"))
        with pytest.raises(ValidationError) as exc:
            authenticate("nadia@example.com", "linen2024")
        assert exc.value.messages["account"] == ["Account is blocked"]

    def test_guest_cannot_sign_in(self):
        _process(RegisterGuest(email="guest@example.com"))
        with pytest.raises(ValidationError):
            authenticate("guest@example.com", "linen2024")

    def test_refresh_reflects_new_role(self):
        user_id = _register()
        tokens = authenticate("nadia@example.com", "linen2024")
        _process(ChangeUserRole(user_id=user_id, role="staff"))
        refreshed = refresh_tokens(tokens["refresh_token"])
        assert decode_token(refreshed["access_token"])["role"] == "staff"

    def test_access_token_cannot_refresh(self):
        _register()
        tokens = authenticate("nadia@example.com", "linen2024")
        with pytest.raises(ValidationError):
            refresh_tokens(tokens["access_token"])

    def test_refresh_for_unknown_user(self):
        with pytest.raises(ValidationError):
            refresh_tokens(create_refresh_token("00000000-0000-4000-8000-000000000000", "customer"))


class TestCredentialCommands:
    def test_change_password(self):
        user_id = _register()
        _process(ChangePassword(user_id=user_id, current_password="linen2024", new_password="cotton2025"))
        assert authenticate("nadia@example.com", "cotton2025")["user_id"] == user_id

    def test_change_password_requires_current(self):
        user_id = _register()
        with pytest.raises(ValidationError) as exc:
            _process(ChangePassword(user_id=user_id, current_password="nope12345", new_password="cotton2025"))
        assert "current_password" in exc.value.messages

    def test_reset_password(self):
        user_id = _register()
        _process(ResetPassword(email="nadia@example.com", new_password="silk2026x"))
        assert authenticate("nadia@example.com", "silk2026x")["user_id"] == user_id

    def test_reset_unknown_email(self):
        with pytest.raises(ObjectNotFoundError):
            _process(ResetPassword(email="nobody@example.com", new_password="silk2026x"))


class TestProfileCommands:
    def test_update_profile(self):
        user_id = _register()
        _process(UpdateProfile(user_id=user_id, locale="en-GB", style_preferences=json.dumps({"fit": "slim"})))
        profile = queries.get_user(user_id)["profile"]
        assert profile["locale"] == "en-GB"
        assert profile["style_preferences"] == {"fit": "slim"}

    def test_invalid_preferences_json(self):
        user_id = _register()
        with pytest.raises(ValidationError):
            _process(UpdateProfile(user_id=user_id, style_preferences="{not json"))


class TestAddressCommands:
    def test_address_book(self):
        user_id = _register()
        first = _process(AddAddress(user_id=user_id, line1="12 Galle Rd", city="Colombo", country="LK"))
        second = _process(AddAddress(user_id=user_id, line1="4 Hill St", city="Kandy", country="LK"))
        _process(AddAddress(user_id=user_id, address_type="billing", line1="1 Bank Rd", city="Colombo", country="LK"))

        _process(SetDefaultAddress(user_id=user_id, address_id=second))
        _process(UpdateAddress(user_id=user_id, address_id=first, city="Galle"))
        shipping = queries.list_addresses(user_id, "shipping")
        assert shipping[0]["address_id"] == second
        assert {a["city"] for a in shipping} == {"Galle", "Kandy"}

        _process(RemoveAddress(user_id=user_id, address_id=second))
        remaining = queries.list_addresses(user_id, "shipping")
        assert remaining[0]["address_id"] == first
        assert remaining[0]["is_default"] is True
        assert len(queries.list_addresses(user_id)) == 2


class TestPaymentMethodCommands:
    def test_set_default(self):
        user_id = _register()
        _process(AddPaymentMethod(user_id=user_id, method_type="card", last4="4242", exp_month=6, exp_year=2099))
        wallet = _process(AddPaymentMethod(user_id=user_id, method_type="wallet", provider_ref="wallet-9"))
        _process(SetDefaultPaymentMethod(user_id=user_id, payment_method_id=wallet))
        methods = queries.get_user(user_id)["payment_methods"]
        assert [m["payment_method_id"] for m in methods if m["is_default"]] == [wallet]


class TestUserQueries:
    def test_list_users_filters_and_hides_guests(self):
        staff_id = _register(email="staff@example.com")
        _process(ChangeUserRole(user_id=staff_id, role="staff"))
        _register(email="customer@example.com")
        _process(RegisterGuest(email="guest@example.com"))

        assert queries.list_users()["total"] == 2
        assert queries.list_users(include_guests=True)["total"] == 3
        staff = queries.list_users(role="staff")
        assert [u["user_id"] for u in staff["items"]] == [staff_id]
