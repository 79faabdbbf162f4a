"""
Translation between wire records (snake_case JSON) and the domain models.

Each entity is described once by a :class:`RecordSchema`: a table of
:class:`WireField` entries naming the wire key, the model attribute and any
value conversion. Encoding and decoding both walk the same table, so the two
directions cannot drift apart. Unknown wire keys are ignored on decode.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Type

from .errors import MalformedInputError
from .models import (
    DEFAULT_OFFER_KIND,
    LIGHTNING_INVOICE_KEY,
    Balance,
    LightningPaymentRequest,
    Offer,
    OfferBundle,
    OpaquePaymentRequest,
    PaymentDetails,
    PaymentRecord,
    PaymentRequest,
    PaymentStatus,
    StoredPaymentMethod,
    UserInfo,
    WebhookAcknowledgement,
)

__all__ = [
    "ABSENT",
    "BALANCE",
    "OFFER",
    "OFFER_BUNDLE",
    "PAYMENT_DETAILS",
    "PAYMENT_RECORD",
    "PAYMENT_STATUS",
    "RecordSchema",
    "STORED_PAYMENT_METHOD",
    "USER_INFO",
    "WireField",
    "balances_from_wire",
    "bundle_from_wire",
    "bundle_to_wire",
    "offer_from_wire",
    "offer_to_wire",
    "payment_details_from_wire",
    "payment_details_to_wire",
    "payment_methods_from_wire",
    "payment_record_from_wire",
    "payment_record_to_wire",
    "payment_request_from_wire",
    "payment_request_to_wire",
    "payment_status_from_wire",
    "payment_status_to_wire",
    "user_info_from_wire",
    "webhook_ack_from_wire",
]


class _Absent:
    def __repr__(self) -> str:
        return "ABSENT"


ABSENT: Any = _Absent()


@dataclass(frozen=True)
class WireField:
    attr: str
    wire: str
    required: bool = True
    default: Any = ABSENT
    encode: Optional[Callable[[Any], Any]] = None
    decode: Optional[Callable[[Any], Any]] = None


class RecordSchema:
    """Bidirectional mapping between one model class and its wire record."""

    def __init__(self, model: Type[Any], fields: Sequence[WireField]) -> None:
        self.model = model
        self.fields = tuple(fields)

    def to_wire(self, obj: Any) -> Dict[str, Any]:
        record: Dict[str, Any] = {}
        for spec in self.fields:
            value = getattr(obj, spec.attr)
            if value is None and not spec.required:
                continue
            record[spec.wire] = spec.encode(value) if spec.encode else value
        return record

    def from_wire(self, record: Mapping[str, Any]) -> Any:
        if not isinstance(record, Mapping):
            raise MalformedInputError(
                f"expected a {self.model.__name__} record, got {type(record).__name__}"
            )
        kwargs: Dict[str, Any] = {}
        for spec in self.fields:
            raw = record.get(spec.wire)
            if raw is None:
                if spec.required:
                    raise MalformedInputError(
                        f"{self.model.__name__} record is missing required field '{spec.wire}'"
                    )
                kwargs[spec.attr] = None if spec.default is ABSENT else spec.default
                continue
            kwargs[spec.attr] = spec.decode(raw) if spec.decode else raw
        return self.model(**kwargs)


def _minor_units(value: Any) -> int:
    if isinstance(value, bool):
        raise MalformedInputError(f"amount must be numeric, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise MalformedInputError(f"amount must be whole minor units, got {value!r}")


def _method_list(value: Any) -> Tuple[str, ...]:
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise MalformedInputError(f"payment_methods must be a list, got {value!r}")
    return tuple(value)


OFFER = RecordSchema(
    Offer,
    [
        WireField("offer_id", "offer_id"),
        WireField("amount", "amount", decode=_minor_units),
        WireField("currency", "currency"),
        WireField("title", "title"),
        WireField("description", "description"),
        WireField(
            "payment_methods",
            "payment_methods",
            required=False,
            default=(),
            encode=list,
            decode=_method_list,
        ),
        WireField("kind", "type", required=False, default=DEFAULT_OFFER_KIND),
    ],
)


def _offers_from_wire(items: Any) -> Tuple[Offer, ...]:
    if not isinstance(items, (list, tuple)):
        raise MalformedInputError(f"offers must be a list, got {type(items).__name__}")
    return tuple(OFFER.from_wire(item) for item in items)


def _offers_to_wire(offers: Sequence[Offer]) -> List[Dict[str, Any]]:
    return [OFFER.to_wire(offer) for offer in offers]


OFFER_BUNDLE = RecordSchema(
    OfferBundle,
    [
        WireField("offers", "offers", encode=_offers_to_wire, decode=_offers_from_wire),
        WireField("payment_context_token", "payment_context_token"),
        WireField("payment_request_url", "payment_request_url"),
        WireField("version", "version"),
    ],
)


def payment_request_from_wire(payload: Any) -> PaymentRequest:
    """
    Pick the structured variant for a method-specific payload.

    Payloads carrying a Lightning invoice become :class:`LightningPaymentRequest`;
    everything else is kept as an :class:`OpaquePaymentRequest`.
    """
    if not isinstance(payload, Mapping):
        raise MalformedInputError(
            f"payment_request must be an object, got {type(payload).__name__}"
        )
    invoice = payload.get(LIGHTNING_INVOICE_KEY)
    if isinstance(invoice, str) and invoice:
        extra = {key: value for key, value in payload.items() if key != LIGHTNING_INVOICE_KEY}
        return LightningPaymentRequest(invoice=invoice, extra=extra)
    return OpaquePaymentRequest(fields=dict(payload))


def payment_request_to_wire(request: PaymentRequest) -> Dict[str, Any]:
    if isinstance(request, LightningPaymentRequest):
        payload = dict(request.extra)
        payload[LIGHTNING_INVOICE_KEY] = request.invoice
        return payload
    return dict(request.fields)


PAYMENT_DETAILS = RecordSchema(
    PaymentDetails,
    [
        WireField("expires_at", "expires_at"),
        WireField("offer_id", "offer_id"),
        WireField(
            "payment_request",
            "payment_request",
            encode=payment_request_to_wire,
            decode=payment_request_from_wire,
        ),
        WireField("version", "version"),
    ],
)

PAYMENT_STATUS = RecordSchema(
    PaymentStatus,
    [
        WireField("status", "status"),
        WireField("payment_context_token", "payment_context_token", required=False),
        WireField("paid_at", "paid_at", required=False),
        WireField("amount", "amount", required=False, decode=_minor_units),
        WireField("currency", "currency", required=False),
        WireField("offer_id", "offer_id", required=False),
    ],
)

PAYMENT_RECORD = RecordSchema(
    PaymentRecord,
    [
        WireField("id", "id"),
        WireField("status", "status"),
        WireField("created_at", "created_at", required=False),
        WireField("payment_method", "payment_method", required=False),
        WireField("amount", "amount", required=False, decode=_minor_units),
        WireField("currency", "currency", required=False),
        WireField("description", "description", required=False),
        WireField("title", "title", required=False),
        WireField("invoice", "invoice", required=False),
        WireField("preimage", "preimage", required=False),
        WireField("is_test", "is_test", required=False),
        WireField("payment_context_token", "payment_context_token", required=False),
        WireField("payment_request_url", "payment_request_url", required=False),
        WireField("offer_type", "type", required=False),
    ],
)

USER_INFO = RecordSchema(
    UserInfo,
    [
        WireField("id", "id"),
        WireField("email", "email"),
        WireField("created_at", "created_at", required=False),
    ],
)

BALANCE = RecordSchema(
    Balance,
    [
        WireField("currency", "currency"),
        WireField("balance", "balance"),
    ],
)

STORED_PAYMENT_METHOD = RecordSchema(
    StoredPaymentMethod,
    [
        WireField("id", "id"),
        WireField("type", "type", required=False),
        WireField("last4", "last4", required=False),
        WireField("brand", "brand", required=False),
        WireField("exp_month", "exp_month", required=False),
        WireField("exp_year", "exp_year", required=False),
        WireField("is_default", "is_default", required=False),
    ],
)


def offer_to_wire(offer: Offer) -> Dict[str, Any]:
    return OFFER.to_wire(offer)


def offer_from_wire(record: Mapping[str, Any]) -> Offer:
    return OFFER.from_wire(record)


def bundle_to_wire(bundle: OfferBundle) -> Dict[str, Any]:
    return OFFER_BUNDLE.to_wire(bundle)


def bundle_from_wire(record: Mapping[str, Any]) -> OfferBundle:
    return OFFER_BUNDLE.from_wire(record)


def payment_details_to_wire(details: PaymentDetails) -> Dict[str, Any]:
    return PAYMENT_DETAILS.to_wire(details)


def payment_details_from_wire(record: Mapping[str, Any]) -> PaymentDetails:
    return PAYMENT_DETAILS.from_wire(record)


def payment_status_to_wire(status: PaymentStatus) -> Dict[str, Any]:
    return PAYMENT_STATUS.to_wire(status)


def payment_status_from_wire(record: Mapping[str, Any]) -> PaymentStatus:
    return PAYMENT_STATUS.from_wire(record)


def payment_record_to_wire(payment: PaymentRecord) -> Dict[str, Any]:
    return PAYMENT_RECORD.to_wire(payment)


def payment_record_from_wire(record: Mapping[str, Any]) -> PaymentRecord:
    return PAYMENT_RECORD.from_wire(record)


def user_info_from_wire(record: Mapping[str, Any]) -> UserInfo:
    return USER_INFO.from_wire(record)


def _list_of(schema: RecordSchema, records: Any) -> List[Any]:
    if not isinstance(records, (list, tuple)):
        raise MalformedInputError(
            f"expected a list of {schema.model.__name__} records, got {type(records).__name__}"
        )
    return [schema.from_wire(record) for record in records]


def balances_from_wire(records: Any) -> List[Balance]:
    return _list_of(BALANCE, records)


def payment_methods_from_wire(records: Any) -> List[StoredPaymentMethod]:
    return _list_of(STORED_PAYMENT_METHOD, records)


def webhook_ack_from_wire(record: Any) -> WebhookAcknowledgement:
    if not isinstance(record, Mapping):
        raise MalformedInputError(
            f"expected a webhook acknowledgement object, got {type(record).__name__}"
        )
    return WebhookAcknowledgement(fields=dict(record))
