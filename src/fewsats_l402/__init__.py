"""
Public facade for the L402 client package.

The most useful pieces are re-exported so integrators can
``from fewsats_l402 import ...`` without navigating the package.
"""

from .api import create_client, purchase_offer
from .core import (
    Balance,
    ClientConfig,
    ClientEnvironment,
    ClientParameters,
    ConfigError,
    FewsatsClient,
    HTTPStatusError,
    L402Error,
    LightningPaymentRequest,
    MalformedInputError,
    Offer,
    OfferBundle,
    OfferRejectedError,
    OpaquePaymentRequest,
    PaymentDetails,
    PaymentRecord,
    PaymentStatus,
    ProtocolError,
    RequestsTransport,
    StoredPaymentMethod,
    Transport,
    TransportError,
    TransportTimeoutError,
    UserInfo,
    WebhookAcknowledgement,
    build_environment,
    bundle_from_wire,
    bundle_to_wire,
    load_client_config,
    offer_from_wire,
    offer_to_wire,
    payment_details_from_wire,
    payment_details_to_wire,
    payment_record_from_wire,
    payment_record_to_wire,
    payment_status_from_wire,
    payment_status_to_wire,
)

__all__ = (
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
    "create_client",
    "load_client_config",
    "offer_from_wire",
    "offer_to_wire",
    "payment_details_from_wire",
    "payment_details_to_wire",
    "payment_record_from_wire",
    "payment_record_to_wire",
    "payment_status_from_wire",
    "payment_status_to_wire",
    "purchase_offer",
)
