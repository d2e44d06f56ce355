"""Domain tests for the User aggregate."""

import json

import pytest
from protean.exceptions import ValidationError
from user_management.user.events import UserRegistered, UserStatusChanged
from user_management.user.user import EmailAddress, User, UserProfile, UserRole, UserStatus


def _user(**overrides):
    values = {"email": " Nadia@Example.com ", "password_hash": "hashed", "first_name": "Nadia"}
    values.update(overrides)
    return User.register(**values)


class TestRegistration:
    def test_email_is_normalized(self):
        user = _user()
        assert user.email.address == "nadia@example.com"
        assert user.role == UserRole.CUSTOMER.value
        assert user.status == UserStatus.ACTIVE.value
        assert isinstance(user._events[-1], UserRegistered)

    def test_invalid_email(self):
        with pytest.raises(ValidationError):
            _user(email="nadia@example")

    def test_email_value_object_must_be_normalized(self):
        with pytest.raises(ValidationError):
            EmailAddress(address="Nadia@Example.com")

    def test_guest_registration(self):
        guest = User.register_guest("guest@example.com")
        assert guest.is_guest is True
        assert guest.role == UserRole.GUEST.value
        assert guest.password_hash is None

    def test_guest_role_needs_guest_registration(self):
        with pytest.raises(ValidationError):
            _user(role="guest")

    def test_upgrade_guest(self):
        guest = User.register_guest("guest@example.com")
        guest.upgrade_from_guest("hashed", first_name="Kasun")
        assert guest.is_guest is False
        assert guest.role == UserRole.CUSTOMER.value
        assert guest.profile.first_name == "Kasun"

    def test_registered_user_cannot_be_upgraded(self):
        with pytest.raises(ValidationError):
            _user().upgrade_from_guest("hashed")


class TestProfile:
    def test_partial_update_keeps_other_fields(self):
        user = _user()
        user.update_profile(last_name="Perera", style_preferences={"fit": "relaxed"})
        assert user.profile.first_name == "Nadia"
        assert user.profile.last_name == "Perera"
        assert user.profile.preferences() == {"fit": "relaxed"}

    def test_currency_is_upper_cased(self):
        user = _user()
        user.update_profile(currency="gbp")
        assert user.profile.currency == "GBP"

    @pytest.mark.parametrize("locale", ["english", "EN-us", "en_US"])
    def test_invalid_locale(self, locale):
        with pytest.raises(ValidationError):
            UserProfile(locale=locale)

    def test_unsupported_currency(self):
        with pytest.raises(ValidationError):
            UserProfile(currency="XYZ")

    def test_phone_change_resets_verification(self):
        user = _user(phone="+94771234567")
        user.verify_phone()
        user.update_profile(phone="+94779999999")
        assert user.phone_verified is False

    def test_style_preferences_round_trip_as_json(self):
        profile = UserProfile(style_preferences=json.dumps({"colors": ["navy"]}))
        assert profile.preferences()["colors"] == ["navy"]


class TestStatusAndRole:
    def test_block_and_activate(self):
        user = _user()
        user.block("Chargeback")
        assert user.is_blocked()
        event = user._events[-1]
        assert isinstance(event, UserStatusChanged)
        assert event.reason == "Chargeback"
        user.activate()
        assert user.status == UserStatus.ACTIVE.value

    def test_blocked_cannot_go_inactive(self):
        user = _user()
        user.block()
        with pytest.raises(ValidationError) as exc:
            user.deactivate()
        assert "Cannot transition from blocked to inactive" in str(exc.value.messages)

    def test_change_role(self):
        user = _user()
        user.change_role("Staff")
        assert user.role == UserRole.STAFF.value

    def test_guest_role_is_fixed(self):
        guest = User.register_guest("guest@example.com")
        with pytest.raises(ValidationError):
            guest.change_role("admin")

    def test_guest_cannot_set_password(self):
        guest = User.register_guest("guest@example.com")
        with pytest.raises(ValidationError):
            guest.change_password("hashed")


class TestAddresses:
    def _add(self, user, address_type="shipping", **extra):
        return user.add_address(line1="12 Galle Rd", city="Colombo", country="lk", address_type=address_type, **extra)

    def test_first_address_of_each_type_is_default(self):
        user = _user()
        shipping = self._add(user)
        billing = self._add(user, address_type="billing")
        second = self._add(user)
        assert shipping.is_default and billing.is_default
        assert not second.is_default
        assert shipping.country == "LK"

    def test_new_default_replaces_previous_of_same_type(self):
        user = _user()
        first = self._add(user)
        billing = self._add(user, address_type="billing")
        second = self._add(user, is_default=True)
        assert second.is_default and not first.is_default
        assert billing.is_default
        assert user.default_address("shipping").id == second.id

    def test_removing_default_promotes_another_of_same_type(self):
        user = _user()
        first = self._add(user)
        second = self._add(user)
        user.remove_address(first.id)
        assert second.is_default

    def test_set_default(self):
        user = _user()
        first = self._add(user)
        second = self._add(user)
        user.set_default_address(second.id)
        assert second.is_default and not first.is_default

    def test_update_unknown_field(self):
        user = _user()
        address = self._add(user)
        with pytest.raises(ValidationError):
            user.update_address(address.id, street="Main")

    def test_unknown_address(self):
        with pytest.raises(ValidationError):
            _user().remove_address("missing")


class TestPaymentMethods:
    def test_first_method_is_default(self):
        user = _user()
        card = user.add_payment_method("card", brand="visa", last4="4242", exp_month=12, exp_year=2099)
        wallet = user.add_payment_method("wallet", provider_ref="wallet-1")
        assert card.is_default and not wallet.is_default
        user.set_default_payment_method(wallet.id)
        assert wallet.is_default and not card.is_default

    def test_card_needs_last4_and_expiry(self):
        user = _user()
        with pytest.raises(ValidationError):
            user.add_payment_method("card", last4="42")
        with pytest.raises(ValidationError):
            user.add_payment_method("card", last4="4242")

    def test_expired_card(self):
        with pytest.raises(ValidationError):
            _user().add_payment_method("card", last4="4242", exp_month=1, exp_year=2001)

    def test_removing_default_promotes_next(self):
        user = _user()
        first = user.add_payment_method("bnpl", provider_ref="koko")
        second = user.add_payment_method("wallet", provider_ref="wallet-1")
        user.remove_payment_method(first.id)
        assert second.is_default

    def test_details_hide_password_hash(self):
        details = _user().details()
        assert "password_hash" not in details
        assert details["email"] == "nadia@example.com"
