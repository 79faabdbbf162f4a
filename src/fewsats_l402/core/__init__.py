"""
Core primitives that implement the L402 offer and payment lifecycle.
"""

from .client import FewsatsClient
from .config import (
    ClientConfig,
    ClientParameters,
    ConfigError,
    load_client_config,
)
from .environment import ClientEnvironment, build_environment
from .errors import (
    HTTPStatusError,
    L402Error,
    MalformedInputError,
    OfferRejectedError,
    ProtocolError,
    TransportError,
    TransportTimeoutError,
)
from .models import (
    Balance,
    LightningPaymentRequest,
    Offer,
    OfferBundle,
    OpaquePaymentRequest,
    PaymentDetails,
    PaymentRecord,
    PaymentStatus,
    StoredPaymentMethod,
    UserInfo,
    WebhookAcknowledgement,
)
from .schema import (
    bundle_from_wire,
    bundle_to_wire,
    offer_from_wire,
    offer_to_wire,
    payment_details_from_wire,
    payment_details_to_wire,
    payment_record_from_wire,
    payment_record_to_wire,
    payment_status_from_wire,
    payment_status_to_wire,
)
from .transport import RequestsTransport, Transport

__all__ = [
    "Balance",
    "ClientConfig",
    "ClientEnvironment",
    "ClientParameters",
    "ConfigError",
    "FewsatsClient",
    "HTTPStatusError",
    "L402Error",
    "LightningPaymentRequest",
    "MalformedInputError",
    "Offer",
    "OfferBundle",
    "OfferRejectedError",
    "OpaquePaymentRequest",
    "PaymentDetails",
    "PaymentRecord",
    "PaymentStatus",
    "ProtocolError",
    "RequestsTransport",
    "StoredPaymentMethod",
    "Transport",
    "TransportError",
    "TransportTimeoutError",
    "UserInfo",
    "WebhookAcknowledgement",
    "build_environment",
    "bundle_from_wire",
    "bundle_to_wire",
    "load_client_config",
    "offer_from_wire",
    "offer_to_wire",
    "payment_details_from_wire",
    "payment_details_to_wire",
    "payment_record_from_wire",
    "payment_record_to_wire",
    "payment_status_from_wire",
    "payment_status_to_wire",
]
