"""
Public, high-level helpers for talking to the L402 vendor API.
"""

from __future__ import annotations

from typing import Mapping, Optional

from .core.client import FewsatsClient
from .core.config import ClientConfig, ClientParameters, load_client_config
from .core.models import OfferBundle, PaymentRecord
from .core.transport import Transport

__all__ = [
    "create_client",
    "purchase_offer",
]


def _resolve_config(
    *,
    config: Optional[ClientConfig],
    env_file: Optional[str],
    overrides: Optional[Mapping[str, str]],
    base: Optional[Mapping[str, str]],
    parameters: Optional[ClientParameters],
    api_key: Optional[str],
    base_url: Optional[str],
    timeout_seconds: Optional[float | int | str],
    payment_timeout_seconds: Optional[float | int | str],
) -> ClientConfig:
    if config is not None:
        extras = (
            overrides,
            base,
            parameters,
            api_key,
            base_url,
            timeout_seconds,
            payment_timeout_seconds,
        )
        if any(item is not None and item != {} for item in extras):
            raise ValueError(
                "Provide either a pre-built ClientConfig or individual parameters, not both."
            )
        return config
    return load_client_config(
        env_file=env_file,
        overrides=overrides,
        base=base,
        parameters=parameters,
        api_key=api_key,
        base_url=base_url,
        timeout_seconds=timeout_seconds,
        payment_timeout_seconds=payment_timeout_seconds,
    )


def create_client(
    *,
    config: Optional[ClientConfig] = None,
    transport: Optional[Transport] = None,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    parameters: Optional[ClientParameters] = None,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    timeout_seconds: Optional[float | int | str] = None,
    payment_timeout_seconds: Optional[float | int | str] = None,
) -> FewsatsClient:
    """
    Construct a :class:`FewsatsClient`.

    Callers can either supply a ready-made :class:`ClientConfig` or let the
    helper assemble one from the environment. A missing API key raises
    :class:`ConfigError` here, before any request is made.
    """
    cfg = _resolve_config(
        config=config,
        env_file=env_file,
        overrides=overrides,
        base=base,
        parameters=parameters,
        api_key=api_key,
        base_url=base_url,
        timeout_seconds=timeout_seconds,
        payment_timeout_seconds=payment_timeout_seconds,
    )
    return FewsatsClient(cfg, transport=transport)


async def purchase_offer(
    offer_id: str,
    bundle: OfferBundle,
    *,
    config: Optional[ClientConfig] = None,
    transport: Optional[Transport] = None,
    env_file: Optional[str] = ".env",
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
) -> PaymentRecord:
    """
    One-shot helper: build a client, pay ``offer_id`` from ``bundle``, close it.
    """
    client = create_client(
        config=config,
        transport=transport,
        env_file=env_file,
        api_key=api_key,
        base_url=base_url,
    )
    async with client:
        return await client.pay_offer(offer_id, bundle)
