"""
HTTP transport used by :class:`fewsats_l402.core.client.FewsatsClient`.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Mapping, Optional, Protocol

import requests

from .errors import HTTPStatusError, ProtocolError, TransportError, TransportTimeoutError

__all__ = [
    "RequestsTransport",
    "Transport",
    "extract_server_message",
]


class Transport(Protocol):
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
        ...

    async def close(self) -> None:
        ...


def extract_server_message(payload: Any) -> Optional[str]:
    """Pull a human readable message out of an error body."""
    if isinstance(payload, str):
        return payload.strip() or None
    if not isinstance(payload, Mapping):
        return None
    for key in ("detail", "error", "message"):
        value = payload.get(key)
        if isinstance(value, str) and value:
            return value
        if isinstance(value, Mapping):
            nested = extract_server_message(value)
            if nested:
                return nested
        if isinstance(value, list) and value:
            return "; ".join(
                str(item.get("msg", item)) if isinstance(item, Mapping) else str(item)
                for item in value
            )
    return None


def _decode_error_body(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class RequestsTransport:
    """
    Send JSON requests through a :class:`requests.Session`.

    The blocking call runs in a worker thread so an awaiting task never holds
    up the event loop. Nothing is retried.

    ``requests`` applies ``timeout`` to the connect and to each socket read, so a
    server trickling bytes could outlast it; ``send`` therefore also bounds the
    whole call by ``timeout``. A call abandoned that way may still finish in
    its worker thread, but its result is discarded.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._api_key = api_key
        self.session = session or requests.Session()

    def _url(self, path_or_url: str) -> str:
        if path_or_url.startswith(("http://", "https://")):
            return path_or_url
        return f"{self.base_url}/{path_or_url.lstrip('/')}"

    def _headers(self, authenticate: bool) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if authenticate:
            headers["Authorization"] = f"Token {self._api_key}"
        return headers

    def _send_blocking(
        self,
        method: str,
        url: str,
        body: Optional[Mapping[str, Any]],
        timeout: float,
        params: Optional[Mapping[str, str]],
        authenticate: bool,
    ) -> Any:
        logging.debug("%s %s (timeout %.1fs)", method, url, timeout)
        try:
            response = self.session.request(
                method,
                url,
                json=dict(body) if body is not None else None,
                params=dict(params) if params else None,
                headers=self._headers(authenticate),
                timeout=timeout,
            )
        except requests.Timeout as exc:
            raise TransportTimeoutError(
                f"{method} {url} timed out after {timeout:.1f}s"
            ) from exc
        except requests.RequestException as exc:
            raise TransportError(f"{method} {url} failed: {exc}") from exc

        if response.status_code >= 400:
            payload = _decode_error_body(response)
            raise HTTPStatusError(
                response.status_code,
                url,
                body=payload,
                server_message=extract_server_message(payload),
            )

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise ProtocolError(
                f"Failed to parse JSON from {url}: {response.text[:200]}"
            ) from exc

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
        method = method.upper()
        full_url = self._url(url)
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(
                    self._send_blocking,
                    method,
                    full_url,
                    body,
                    timeout,
                    params,
                    authenticate,
                ),
                timeout,
            )
        except asyncio.TimeoutError as exc:
            raise TransportTimeoutError(
                f"{method} {full_url} exceeded its {timeout:.1f}s deadline"
            ) from exc

    async def close(self) -> None:
        self.session.close()

