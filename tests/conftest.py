"""
Shared fixtures for the L402 client tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

import pytest

from fewsats_l402 import ClientConfig, FewsatsClient, Offer


@dataclass
class RecordedCall:
    method: str
    url: str
    body: Optional[Dict[str, Any]]
    timeout: float
    params: Optional[Dict[str, str]]
    authenticate: bool


@dataclass
class FakeTransport:
    """Answers ``send`` from queued responses and records every call."""

    responses: Dict[tuple, List[Any]] = field(default_factory=dict)
    calls: List[RecordedCall] = field(default_factory=list)
    closed: bool = False

    def add(self, method: str, url: str, response: Any) -> None:
        self.responses.setdefault((method, url), []).append(response)

    async def send(
        self,
        method: str,
        url: str,
        body: Optional[Mapping[str, Any]] = None,
        *,
        timeout: float,
        params: Optional[Mapping[str, str]] = None,
        authenticate: bool = True,
    ) -> Any:
        self.calls.append(
            RecordedCall(
                method=method,
                url=url,
                body=dict(body) if body is not None else None,
                timeout=timeout,
                params=dict(params) if params else None,
                authenticate=authenticate,
            )
        )
        queue = self.responses.get((method, url))
        if not queue:
            raise AssertionError(f"No fake response for {method} {url}")
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, Exception):
            raise response
        return response

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(api_key="test-key", base_url="https://api.example.test")


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def client(config: ClientConfig, transport: FakeTransport) -> FewsatsClient:
    return FewsatsClient(config, transport=transport)


@pytest.fixture
def one_cent_offer() -> Offer:
    return Offer(
        offer_id="o1",
        amount=1,
        currency="USD",
        title="One Cent Offer",
        description="A simple 1 cent offer for testing",
        payment_methods=("lightning",),
    )


@pytest.fixture
def bundle_wire() -> Dict[str, Any]:
    return {
        "offers": [
            {
                "offer_id": "o1",
                "amount": 1,
                "currency": "USD",
                "title": "One Cent Offer",
                "description": "A simple 1 cent offer for testing",
                "payment_methods": ["lightning"],
                "type": "one-off",
            }
        ],
        "payment_context_token": "ctx-123",
        "payment_request_url": "https://pay.example.test/l402/payment-request",
        "version": "0.2.2",
    }


@pytest.fixture
def payment_wire() -> Dict[str, Any]:
    return {
        "id": 42,
        "status": "pending",
        "created_at": "2024-03-01T12:00:00Z",
        "payment_method": "lightning",
        "amount": 1,
        "currency": "USD",
        "description": "A simple 1 cent offer for testing",
        "title": "One Cent Offer",
        "invoice": "lnbc10n1example",
        "is_test": True,
        "payment_context_token": "ctx-123",
        "payment_request_url": "https://pay.example.test/l402/payment-request",
        "type": "one-off",
    }
