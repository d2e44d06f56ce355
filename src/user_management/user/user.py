"""User aggregate root with Address and PaymentMethod entities.

A user holds at most one default address per address type and at most one
default payment method. Guests are users without a password that can later be
upgraded to a full account with the same email.

State Machine:
    ACTIVE → INACTIVE | BLOCKED
    INACTIVE → ACTIVE | BLOCKED
    BLOCKED → ACTIVE
"""

import json
import re

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, HasMany, Integer, String, Text, ValueObject

from shared.clock import utcnow
from shared.email import normalize_email
from shared.money import SUPPORTED_CURRENCIES
from shared.status import StatusEnum, assert_transition
from user_management.domain import user_management
from user_management.user.events import PasswordChanged, UserRegistered, UserRoleChanged, UserStatusChanged

# Sentinel for distinguishing "not provided" from None in partial updates
_UNSET = object()

_LOCALE = re.compile(r"^[a-z]{2}-[A-Z]{2}$")


class UserStatus(StatusEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    BLOCKED = "blocked"


class UserRole(StatusEnum):
    CUSTOMER = "customer"
    ADMIN = "admin"
    STAFF = "staff"
    GUEST = "guest"

    @classmethod
    def field_name(cls):
        return "role"


class AddressType(StatusEnum):
    BILLING = "billing"
    SHIPPING = "shipping"

    @classmethod
    def field_name(cls):
        return "address_type"


class PaymentMethodType(StatusEnum):
    CARD = "card"
    WALLET = "wallet"
    BNPL = "bnpl"

    @classmethod
    def field_name(cls):
        return "method_type"


_VALID_TRANSITIONS = {
    UserStatus.ACTIVE: {UserStatus.INACTIVE, UserStatus.BLOCKED},
    UserStatus.INACTIVE: {UserStatus.ACTIVE, UserStatus.BLOCKED},
    UserStatus.BLOCKED: {UserStatus.ACTIVE},
}


@user_management.value_object(part_of="User")
class EmailAddress:
    """A normalized (trimmed, lower-cased) email address."""

    address: String(required=True, max_length=254)

    @invariant.post
    def address_is_well_formed(self):
        if normalize_email(self.address) != self.address:
            raise ValidationError({"email": [f"Email must be normalized: {self.address!r}"]})


def email_address(raw: str) -> EmailAddress:
    return EmailAddress(address=normalize_email(raw))


@user_management.value_object(part_of="User")
class UserProfile:
    """Personal preferences of a user. Replaced wholesale on update."""

    first_name: String(max_length=100)
    last_name: String(max_length=100)
    locale: String(max_length=5, default="en-US")
    currency: String(max_length=3, default="USD")
    style_preferences: Text()  # JSON object

    @invariant.post
    def locale_is_a_language_region_tag(self):
        if self.locale and not _LOCALE.match(self.locale):
            raise ValidationError({"locale": [f"Invalid locale {self.locale!r}. Use a form like 'en-US'"]})

    @invariant.post
    def currency_is_supported(self):
        if self.currency and self.currency not in SUPPORTED_CURRENCIES:
            raise ValidationError({"currency": [f"Unsupported currency: {self.currency}"]})

    def preferences(self) -> dict:
        return json.loads(self.style_preferences) if self.style_preferences else {}


@user_management.entity(part_of="User")
class Address:
    address_type: String(choices=AddressType, default=AddressType.SHIPPING.value)
    first_name: String(max_length=100)
    last_name: String(max_length=100)
    line1: String(required=True, max_length=255)
    line2: String(max_length=255)
    city: String(required=True, max_length=100)
    region: String(max_length=100)
    postal_code: String(max_length=20)
    country: String(required=True, max_length=2)
    phone: String(max_length=20)
    is_default: Boolean(default=False)


@user_management.entity(part_of="User")
class PaymentMethod:
    """A tokenized payment instrument. Only the provider reference and display details are kept."""

    method_type: String(choices=PaymentMethodType, required=True)
    brand: String(max_length=50)
    last4: String(max_length=4)
    exp_month: Integer(min_value=1, max_value=12)
    exp_year: Integer(min_value=2000)
    provider_ref: String(max_length=255)
    is_default: Boolean(default=False)

    def is_expired(self, as_of=None) -> bool:
        if not self.exp_year or not self.exp_month:
            return False
        now = as_of or utcnow()
        return (self.exp_year, self.exp_month) < (now.year, now.month)


_ADDRESS_FIELDS = ("first_name", "last_name", "line1", "line2", "city", "region", "postal_code", "country", "phone")


@user_management.aggregate
class User:
    """A registered customer, staff member, admin or guest shopper.

    The password hash never leaves the aggregate; read models use `details()`.
    """

    email: ValueObject(EmailAddress, required=True)
    phone: String(max_length=20)
    password_hash: String(max_length=255)
    is_guest: Boolean(default=False)
    email_verified: Boolean(default=False)
    phone_verified: Boolean(default=False)
    status: String(choices=UserStatus, default=UserStatus.ACTIVE.value)
    role: String(choices=UserRole, default=UserRole.CUSTOMER.value)
    profile: ValueObject(UserProfile)
    addresses: HasMany(Address)
    payment_methods: HasMany(PaymentMethod)
    last_login_at: DateTime()
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def one_default_address_per_type(self):
        for address_type in AddressType:
            defaults = [a for a in self.addresses if a.address_type == address_type.value and a.is_default]
            if len(defaults) > 1:
                raise ValidationError({"addresses": [f"Only one default {address_type.value} address is allowed"]})

    @invariant.post
    def one_default_payment_method(self):
        if len([m for m in self.payment_methods if m.is_default]) > 1:
            raise ValidationError({"payment_methods": ["Only one default payment method is allowed"]})

    # -------------------------------------------------------------------
    # Factories
    # -------------------------------------------------------------------
    @classmethod
    def register(cls, email, password_hash, phone=None, first_name=None, last_name=None, role=UserRole.CUSTOMER):
        role = UserRole.from_string(role)
        if role == UserRole.GUEST:
            raise ValidationError({"role": ["Use guest registration for guest accounts"]})
        now = utcnow()
        user = cls(
            email=email_address(email),
            phone=phone,
            password_hash=password_hash,
            role=role.value,
            profile=UserProfile(first_name=first_name, last_name=last_name),
            created_at=now,
            updated_at=now,
        )
        user._registered(now)
        return user

    @classmethod
    def register_guest(cls, email):
        now = utcnow()
        user = cls(
            email=email_address(email),
            is_guest=True,
            role=UserRole.GUEST.value,
            profile=UserProfile(),
            created_at=now,
            updated_at=now,
        )
        user._registered(now)
        return user

    def _registered(self, now):
        self.raise_(
            UserRegistered(
                user_id=str(self.id),
                email=self.email.address,
                role=self.role,
                is_guest=self.is_guest,
                registered_at=now,
            )
        )

    def upgrade_from_guest(self, password_hash, phone=None, first_name=None, last_name=None):
        """Turn a guest account into a customer account keeping its id and history."""
        if not self.is_guest:
            raise ValidationError({"email": ["Email is already registered"]})
        with atomic_change(self):
            self.is_guest = False
            self.role = UserRole.CUSTOMER.value
            self.password_hash = password_hash
            self.phone = phone or self.phone
            self.profile = UserProfile(
                first_name=first_name,
                last_name=last_name,
                locale=self.profile.locale if self.profile else "en-US",
                currency=self.profile.currency if self.profile else "USD",
                style_preferences=self.profile.style_preferences if self.profile else None,
            )
        self.updated_at = utcnow()
        self._registered(self.updated_at)

    # -------------------------------------------------------------------
    # Profile & credentials
    # -------------------------------------------------------------------
    def update_profile(
        self,
        first_name=_UNSET,
        last_name=_UNSET,
        locale=_UNSET,
        currency=_UNSET,
        style_preferences=_UNSET,
        phone=_UNSET,
    ):
        current = self.profile or UserProfile()

        def pick(value, existing):
            return existing if value is _UNSET else value

        if style_preferences is not _UNSET and isinstance(style_preferences, dict):
            style_preferences = json.dumps(style_preferences)
        if currency is not _UNSET and currency:
            currency = currency.strip().upper()

        self.profile = UserProfile(
            first_name=pick(first_name, current.first_name),
            last_name=pick(last_name, current.last_name),
            locale=pick(locale, current.locale) or "en-US",
            currency=pick(currency, current.currency) or "USD",
            style_preferences=pick(style_preferences, current.style_preferences),
        )
        if phone is not _UNSET and phone != self.phone:
            self.phone = phone
            self.phone_verified = False
        self.updated_at = utcnow()

    def change_password(self, password_hash):
        if self.is_guest:
            raise ValidationError({"password": ["Guest users cannot set a password"]})
        now = utcnow()
        self.password_hash = password_hash
        self.updated_at = now
        self.raise_(PasswordChanged(user_id=str(self.id), changed_at=now))

    def verify_email(self):
        self.email_verified = True
        self.updated_at = utcnow()

    def verify_phone(self):
        if not self.phone:
            raise ValidationError({"phone": ["No phone number to verify"]})
        self.phone_verified = True
        self.updated_at = utcnow()

    def record_login(self):
        self.last_login_at = utcnow()

    # -------------------------------------------------------------------
    # Status & role
    # -------------------------------------------------------------------
    def _change_status(self, target: UserStatus, reason=None):
        current = UserStatus.from_string(self.status)
        if current == target:
            return
        assert_transition(_VALID_TRANSITIONS, current, target)

        now = utcnow()
        self.status = target.value
        self.updated_at = now
        self.raise_(
            UserStatusChanged(
                user_id=str(self.id),
                from_status=current.value,
                to_status=target.value,
                reason=reason,
                changed_at=now,
            )
        )

    def block(self, reason=None):
        self._change_status(UserStatus.BLOCKED, reason)

    def activate(self):
        self._change_status(UserStatus.ACTIVE)

    def deactivate(self):
        self._change_status(UserStatus.INACTIVE)

    def is_blocked(self) -> bool:
        return self.status == UserStatus.BLOCKED.value

    def change_role(self, role):
        target = UserRole.from_string(role)
        if self.is_guest or target == UserRole.GUEST:
            raise ValidationError({"role": ["Guest roles cannot be changed"]})
        if target.value == self.role:
            return
        previous = self.role
        self.role = target.value
        self.updated_at = utcnow()
        self.raise_(UserRoleChanged(user_id=str(self.id), from_role=previous, to_role=target.value))

    # -------------------------------------------------------------------
    # Addresses
    # -------------------------------------------------------------------
    def _find_address(self, address_id):
        address = next((a for a in self.addresses if str(a.id) == str(address_id)), None)
        if address is None:
            raise ValidationError({"addresses": [f"Address {address_id} not found"]})
        return address

    def default_address(self, address_type):
        address_type = AddressType.from_string(address_type).value
        return next((a for a in self.addresses if a.address_type == address_type and a.is_default), None)

    def add_address(self, line1, city, country, address_type=AddressType.SHIPPING, is_default=False, **details):
        address_type = AddressType.from_string(address_type).value
        unknown = set(details) - set(_ADDRESS_FIELDS)
        if unknown:
            raise ValidationError({"addresses": [f"Unknown fields: {', '.join(sorted(unknown))}"]})

        # The first address of a type becomes its default
        if not any(a.address_type == address_type for a in self.addresses):
            is_default = True

        with atomic_change(self):
            if is_default:
                for existing in self.addresses:
                    if existing.address_type == address_type:
                        existing.is_default = False
            address = Address(
                address_type=address_type,
                line1=line1,
                city=city,
                country=country.strip().upper(),
                is_default=is_default,
                **details,
            )
            self.add_addresses(address)

        self.updated_at = utcnow()
        return address

    def update_address(self, address_id, **changes):
        address = self._find_address(address_id)
        unknown = set(changes) - set(_ADDRESS_FIELDS)
        if unknown:
            raise ValidationError({"addresses": [f"Unknown fields: {', '.join(sorted(unknown))}"]})
        for field, value in changes.items():
            if value is None:
                continue
            setattr(address, field, value.strip().upper() if field == "country" else value)
        self.updated_at = utcnow()

    def remove_address(self, address_id):
        address = self._find_address(address_id)
        was_default = address.is_default

        with atomic_change(self):
            self.remove_addresses(address)
            if was_default:
                same_type = [a for a in self.addresses if a.address_type == address.address_type]
                if same_type:
                    same_type[0].is_default = True

        self.updated_at = utcnow()

    def set_default_address(self, address_id):
        address = self._find_address(address_id)
        with atomic_change(self):
            for other in self.addresses:
                if other.address_type == address.address_type:
                    other.is_default = False
            address.is_default = True
        self.updated_at = utcnow()

    # -------------------------------------------------------------------
    # Payment methods
    # -------------------------------------------------------------------
    def _find_payment_method(self, payment_method_id):
        method = next((m for m in self.payment_methods if str(m.id) == str(payment_method_id)), None)
        if method is None:
            raise ValidationError({"payment_methods": [f"Payment method {payment_method_id} not found"]})
        return method

    def add_payment_method(
        self,
        method_type,
        provider_ref=None,
        brand=None,
        last4=None,
        exp_month=None,
        exp_year=None,
        is_default=False,
    ):
        method_type = PaymentMethodType.from_string(method_type)
        if method_type == PaymentMethodType.CARD:
            if not last4 or len(last4) != 4 or not last4.isdigit():
                raise ValidationError({"last4": ["Cards need the last four digits"]})
            if not exp_month or not exp_year:
                raise ValidationError({"exp_month": ["Cards need an expiry month and year"]})

        method = PaymentMethod(
            method_type=method_type.value,
            brand=brand,
            last4=last4,
            exp_month=exp_month,
            exp_year=exp_year,
            provider_ref=provider_ref,
        )
        if method.is_expired():
            raise ValidationError({"exp_year": ["Card has expired"]})

        with atomic_change(self):
            if is_default or not self.payment_methods:
                for existing in self.payment_methods:
                    existing.is_default = False
                method.is_default = True
            self.add_payment_methods(method)

        self.updated_at = utcnow()
        return method

    def remove_payment_method(self, payment_method_id):
        method = self._find_payment_method(payment_method_id)
        was_default = method.is_default
        with atomic_change(self):
            self.remove_payment_methods(method)
            if was_default and self.payment_methods:
                self.payment_methods[0].is_default = True
        self.updated_at = utcnow()

    def set_default_payment_method(self, payment_method_id):
        method = self._find_payment_method(payment_method_id)
        with atomic_change(self):
            for other in self.payment_methods:
                other.is_default = False
            method.is_default = True
        self.updated_at = utcnow()

    # -------------------------------------------------------------------
    # Read side
    # -------------------------------------------------------------------
    def details(self) -> dict:
        profile = self.profile or UserProfile()
        return {
            "user_id": str(self.id),
            "email": self.email.address,
            "phone": self.phone,
            "is_guest": self.is_guest,
            "email_verified": self.email_verified,
            "phone_verified": self.phone_verified,
            "status": self.status,
            "role": self.role,
            "profile": {
                "first_name": profile.first_name,
                "last_name": profile.last_name,
                "locale": profile.locale,
                "currency": profile.currency,
                "style_preferences": profile.preferences(),
            },
            "addresses": [address_dict(a) for a in self.addresses],
            "payment_methods": [
                {
                    "payment_method_id": str(m.id),
                    "method_type": m.method_type,
                    "brand": m.brand,
                    "last4": m.last4,
                    "exp_month": m.exp_month,
                    "exp_year": m.exp_year,
                    "is_default": m.is_default,
                }
                for m in self.payment_methods
            ],
            "last_login_at": self.last_login_at,
            "created_at": self.created_at,
        }


def address_dict(address) -> dict:
    data = {field: getattr(address, field) for field in _ADDRESS_FIELDS}
    data.update(address_id=str(address.id), address_type=address.address_type, is_default=address.is_default)
    return data
