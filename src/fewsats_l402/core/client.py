"""
Asynchronous client for the L402 offer and payment lifecycle.

A purchase runs create_offers -> get_payment_details -> pay_offer, with
get_payment_status and payment_info polled by the caller as needed. The client
keeps no state between calls and never retries: re-sending a payment after a
timeout can charge twice, so that decision stays with the caller.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Sequence, TypeVar, Union
from urllib.parse import quote

from .config import ClientConfig
from .errors import HTTPStatusError, MalformedInputError, OfferRejectedError, ProtocolError
from .models import (
    Balance,
    Offer,
    OfferBundle,
    PaymentDetails,
    PaymentRecord,
    PaymentStatus,
    StoredPaymentMethod,
    UserInfo,
    WebhookAcknowledgement,
    offers_from_sequence,
)
from .schema import (
    balances_from_wire,
    bundle_from_wire,
    bundle_to_wire,
    offer_to_wire,
    payment_details_from_wire,
    payment_methods_from_wire,
    payment_record_from_wire,
    payment_status_from_wire,
    user_info_from_wire,
    webhook_ack_from_wire,
)
from .transport import RequestsTransport, Transport

__all__ = ["FewsatsClient"]

T = TypeVar("T")

_OFFER_REJECTION_STATUSES = (400, 422)


def _decode(what: str, decoder: Callable[[Any], T], payload: Any) -> T:
    try:
        return decoder(payload)
    except MalformedInputError as exc:
        raise ProtocolError(f"Unexpected {what} response: {exc}") from exc


class FewsatsClient:
    """
    Thin async wrapper around the vendor API endpoints.

    ``transport`` defaults to a :class:`RequestsTransport` built from ``config``.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: Optional[Transport] = None,
    ) -> None:
        self.config = config
        self.transport = transport or RequestsTransport(config.base_url, config.api_key)

    async def _call(
        self,
        method: str,
        path: str,
        body: Optional[dict] = None,
        *,
        timeout: Optional[float] = None,
        params: Optional[dict] = None,
        authenticate: bool = True,
    ) -> Any:
        return await self.transport.send(
            method,
            path,
            body,
            timeout=timeout or self.config.timeout_seconds,
            params=params,
            authenticate=authenticate,
        )

    async def me(self) -> UserInfo:
        payload = await self._call("GET", "/v0/users/me")
        return _decode("user info", user_info_from_wire, payload)

    async def balance(self) -> List[Balance]:
        payload = await self._call("GET", "/v0/wallets")
        return _decode("wallet balance", balances_from_wire, payload)

    async def payment_methods(self) -> List[StoredPaymentMethod]:
        payload = await self._call("GET", "/v0/stripe/payment-methods")
        return _decode("payment methods", payment_methods_from_wire, payload)

    async def create_offers(self, offers: Sequence[Offer]) -> OfferBundle:
        """
        Register ``offers`` and return the bundle the server issued for them.

        A 400/422 answer means the server refused the offers and surfaces as
        :class:`OfferRejectedError` carrying its message.
        """
        items = offers_from_sequence(offers)
        logging.info("Creating %d offer(s)", len(items))
        body = {"offers": [offer_to_wire(offer) for offer in items]}
        try:
            payload = await self._call("POST", "/v0/l402/offers", body)
        except HTTPStatusError as exc:
            if exc.status_code in _OFFER_REJECTION_STATUSES:
                raise OfferRejectedError(
                    exc.server_message or str(exc), status_code=exc.status_code
                ) from exc
            raise
        bundle = _decode("offer bundle", bundle_from_wire, payload)
        logging.info("Offers registered under context %s", bundle.payment_context_token)
        return bundle

    async def get_payment_status(self, payment_context_token: str) -> PaymentStatus:
        logging.info("Polling payment status")
        payload = await self._call(
            "GET",
            "/v0/l402/payment-status",
            params={"payment_context_token": payment_context_token},
        )
        return _decode("payment status", payment_status_from_wire, payload)

    async def get_payment_details(
        self,
        payment_request_url: str,
        offer_id: str,
        payment_method: str,
        payment_context_token: str,
    ) -> PaymentDetails:
        """
        Ask the bundle's payment endpoint how to pay ``offer_id``.

        The endpoint may live on another host, so the vendor credential is not
        sent along. Whether ``payment_method`` is acceptable is for the server
        to decide.
        """
        logging.info("Requesting %s payment details for offer %s", payment_method, offer_id)
        payload = await self._call(
            "POST",
            payment_request_url,
            {
                "offer_id": offer_id,
                "payment_method": payment_method,
                "payment_context_token": payment_context_token,
            },
            authenticate=False,
        )
        return _decode("payment details", payment_details_from_wire, payload)

    async def set_webhook(self, webhook_url: str) -> WebhookAcknowledgement:
        payload = await self._call(
            "POST", "/v0/users/webhook/set", {"webhook_url": webhook_url}
        )
        return _decode("webhook", webhook_ack_from_wire, payload)

    async def pay_lightning(
        self,
        invoice: str,
        amount: int,
        currency: str = "USD",
        description: str = "",
    ) -> PaymentRecord:
        logging.info("Paying lightning invoice for %s %s", amount, currency)
        payload = await self._call(
            "POST",
            "/v0/l402/purchases/lightning",
            {
                "invoice": invoice,
                "amount": amount,
                "currency": currency,
                "description": description,
            },
            timeout=self.config.payment_timeout_seconds,
        )
        return _decode("lightning payment", payment_record_from_wire, payload)

    async def pay_offer(self, offer_id: str, bundle: OfferBundle) -> PaymentRecord:
        """
        Pay one offer of ``bundle``; the whole bundle travels as payment context.
        """
        logging.info("Paying offer %s", offer_id)
        body = {"offer_id": offer_id}
        body.update(bundle_to_wire(bundle))
        payload = await self._call(
            "POST",
            "/v0/l402/purchases/from-offer",
            body,
            timeout=self.config.payment_timeout_seconds,
        )
        record = _decode("offer payment", payment_record_from_wire, payload)
        logging.info("Payment %s is %s", record.id, record.status)
        return record

    async def payment_info(self, payment_id: Union[str, int]) -> PaymentRecord:
        path = f"/v0/l402/outgoing-payments/{quote(str(payment_id), safe='')}"
        payload = await self._call("GET", path)
        return _decode("payment info", payment_record_from_wire, payload)

    async def close(self) -> None:
        await self.transport.close()

    async def __aenter__(self) -> "FewsatsClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
