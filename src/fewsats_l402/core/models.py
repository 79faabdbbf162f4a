"""
Value objects for offers, payment instructions and payment records.

All models are frozen dataclasses. Offers and bundles run client-side sanity
checks on construction so obviously broken input fails before a network round
trip; the server remains the authority on what it accepts.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
import re
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, ClassVar, Dict, Mapping, Optional, Sequence, Tuple, Union

from .errors import MalformedInputError

__all__ = [
    "Balance",
    "DEFAULT_OFFER_KIND",
    "LightningPaymentRequest",
    "Offer",
    "OfferBundle",
    "OpaquePaymentRequest",
    "PaymentDetails",
    "PaymentRecord",
    "PaymentRequest",
    "PaymentStatus",
    "StoredPaymentMethod",
    "UserInfo",
    "WebhookAcknowledgement",
    "offers_from_sequence",
]

DEFAULT_OFFER_KIND = "one-off"
PENDING = "pending"
LIGHTNING_INVOICE_KEY = "lightning_invoice"

_FRACTION = re.compile(r"\.(\d+)")


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _client_value(value: Any) -> Any:
    if dataclasses.is_dataclass(value):
        return value.as_client_dict()
    if isinstance(value, (list, tuple)):
        return [_client_value(item) for item in value]
    return value


class _ClientView:
    """Mixin rendering a model in the camelCase client format."""

    def as_client_dict(self) -> Dict[str, Any]:
        view: Dict[str, Any] = {}
        for item in dataclasses.fields(self):
            value = getattr(self, item.name)
            if value is None:
                continue
            name = item.metadata.get("client_name", _camel(item.name))
            view[name] = _client_value(value)
        return view


def _require_text(value: Any, field_name: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise MalformedInputError(f"{field_name} must be a non-empty string")


def _require_minor_units(value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedInputError(
            f"amount must be an integer number of minor units, got {value!r}"
        )
    if value < 0:
        raise MalformedInputError(f"amount must not be negative, got {value}")


@dataclass(frozen=True)
class Offer(_ClientView):
    """One purchasable item; ``amount`` is in minor units (cents)."""

    offer_id: str
    amount: int
    currency: str
    title: str
    description: str
    payment_methods: Tuple[str, ...] = ()
    kind: str = field(default=DEFAULT_OFFER_KIND, metadata={"client_name": "type"})

    def __post_init__(self) -> None:
        _require_text(self.offer_id, "offer_id")
        _require_minor_units(self.amount)
        _require_text(self.currency, "currency")
        _require_text(self.title, "title")
        _require_text(self.description, "description")
        if isinstance(self.payment_methods, str):
            raise MalformedInputError("payment_methods must be a sequence of method names")
        object.__setattr__(self, "payment_methods", tuple(self.payment_methods))
        if self.kind is None:
            object.__setattr__(self, "kind", DEFAULT_OFFER_KIND)

    @property
    def major_amount(self) -> Decimal:
        return Decimal(self.amount) / 100


@dataclass(frozen=True)
class OfferBundle(_ClientView):
    """Offers published together under one payment context token."""

    offers: Tuple[Offer, ...]
    payment_context_token: str
    payment_request_url: str
    version: str

    def __post_init__(self) -> None:
        offers = tuple(self.offers)
        if not offers:
            raise MalformedInputError("an offer bundle needs at least one offer")
        seen = set()
        for offer in offers:
            if offer.offer_id in seen:
                raise MalformedInputError(f"duplicate offer id '{offer.offer_id}' in bundle")
            seen.add(offer.offer_id)
        object.__setattr__(self, "offers", offers)
        _require_text(self.payment_context_token, "payment_context_token")

    def offer(self, offer_id: str) -> Offer:
        for candidate in self.offers:
            if candidate.offer_id == offer_id:
                return candidate
        raise MalformedInputError(f"offer '{offer_id}' is not part of this bundle")

    def __str__(self) -> str:
        lines = ["L402 Offers:"]
        lines.extend(
            f"- {offer.title} ({offer.major_amount} {offer.currency})" for offer in self.offers
        )
        lines.append(f"Payment URL: {self.payment_request_url}")
        lines.append(f"Context Token: {self.payment_context_token}")
        return "\n".join(lines)


@dataclass(frozen=True)
class LightningPaymentRequest(_ClientView):
    """Lightning instructions; ``extra`` keeps any other keys the server sent."""

    method: ClassVar[str] = "lightning"

    invoice: str
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        _require_text(self.invoice, "invoice")
        if LIGHTNING_INVOICE_KEY in self.extra:
            raise MalformedInputError(
                f"'{LIGHTNING_INVOICE_KEY}' belongs in invoice, not in extra"
            )
        object.__setattr__(self, "extra", dict(self.extra))


@dataclass(frozen=True)
class OpaquePaymentRequest(_ClientView):
    """Payload for a method this client has no structured view of."""

    method: ClassVar[Optional[str]] = None

    fields: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        invoice = self.fields.get(LIGHTNING_INVOICE_KEY)
        if isinstance(invoice, str) and invoice:
            raise MalformedInputError(
                "a payload carrying a lightning invoice must be a LightningPaymentRequest"
            )
        object.__setattr__(self, "fields", dict(self.fields))

    def as_client_dict(self) -> Dict[str, Any]:
        return dict(self.fields)


PaymentRequest = Union[LightningPaymentRequest, OpaquePaymentRequest]


@dataclass(frozen=True)
class PaymentDetails(_ClientView):
    expires_at: str
    offer_id: str
    payment_request: PaymentRequest
    version: str

    def expires_at_datetime(self) -> datetime:
        raw = self.expires_at
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        # fromisoformat before 3.11 only takes 3 or 6 fractional digits
        raw = _FRACTION.sub(lambda match: "." + match.group(1)[:6].ljust(6, "0"), raw, count=1)
        try:
            moment = datetime.fromisoformat(raw)
        except ValueError as exc:
            raise MalformedInputError(f"unparseable expiry timestamp '{self.expires_at}'") from exc
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return moment

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Best-effort local check; the server makes the final call."""
        current = now or datetime.now(timezone.utc)
        if current.tzinfo is None:
            current = current.replace(tzinfo=timezone.utc)
        return current >= self.expires_at_datetime()


@dataclass(frozen=True)
class PaymentStatus(_ClientView):
    """Settlement state of a payment context; ``status`` is kept verbatim."""

    status: str
    payment_context_token: Optional[str] = None
    paid_at: Optional[str] = None
    amount: Optional[int] = None
    currency: Optional[str] = None
    offer_id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.amount is not None:
            _require_minor_units(self.amount)

    @property
    def is_pending(self) -> bool:
        return self.status == PENDING

    @property
    def is_terminal(self) -> bool:
        return not self.is_pending


@dataclass(frozen=True)
class PaymentRecord(_ClientView):
    id: Union[str, int]
    status: str
    created_at: Optional[str] = None
    payment_method: Optional[str] = None
    amount: Optional[int] = None
    currency: Optional[str] = None
    description: Optional[str] = None
    title: Optional[str] = None
    invoice: Optional[str] = None
    preimage: Optional[str] = None
    is_test: Optional[bool] = None
    payment_context_token: Optional[str] = None
    payment_request_url: Optional[str] = None
    offer_type: Optional[str] = field(default=None, metadata={"client_name": "type"})

    def __post_init__(self) -> None:
        if self.amount is not None:
            _require_minor_units(self.amount)


@dataclass(frozen=True)
class UserInfo(_ClientView):
    id: Union[str, int]
    email: str
    created_at: Optional[str] = None


@dataclass(frozen=True)
class Balance(_ClientView):
    currency: str
    balance: Union[int, float]


@dataclass(frozen=True)
class StoredPaymentMethod(_ClientView):
    id: Union[str, int]
    type: Optional[str] = None
    last4: Optional[str] = None
    brand: Optional[str] = None
    exp_month: Optional[int] = None
    exp_year: Optional[int] = None
    is_default: Optional[bool] = None


@dataclass(frozen=True)
class WebhookAcknowledgement(_ClientView):
    fields: Mapping[str, Any] = field(default_factory=dict)

    def as_client_dict(self) -> Dict[str, Any]:
        return dict(self.fields)


def offers_from_sequence(offers: Sequence[Offer]) -> Tuple[Offer, ...]:
    """Validate a caller-supplied offer list the way a bundle would."""
    items = tuple(offers)
    if not items:
        raise MalformedInputError("at least one offer is required")
    ids = [offer.offer_id for offer in items]
    duplicates = sorted({offer_id for offer_id in ids if ids.count(offer_id) > 1})
    if duplicates:
        raise MalformedInputError(f"duplicate offer ids: {', '.join(duplicates)}")
    return items
