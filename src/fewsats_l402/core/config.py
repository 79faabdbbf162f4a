"""
Configuration objects and helpers for the L402 client.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from .environment import build_environment
from .errors import ConfigError

__all__ = [
    "ConfigError",
    "ClientConfig",
    "ClientParameters",
    "DEFAULT_BASE_URL",
    "load_client_config",
]

DEFAULT_BASE_URL = "https://api.fewsats.com"
DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_PAYMENT_TIMEOUT_SECONDS = 30.0

_PARAMETER_TO_ENV_KEY = {
    "api_key": "FEWSATS_API_KEY",
    "base_url": "FEWSATS_BASE_URL",
    "timeout_seconds": "FEWSATS_TIMEOUT_SECONDS",
    "payment_timeout_seconds": "FEWSATS_PAYMENT_TIMEOUT_SECONDS",
}


@dataclass(frozen=True)
class ClientParameters:
    """
    Explicit parameter bundle for constructing :class:`ClientConfig`.

    Callers can either instantiate this helper or pass the individual keyword
    arguments directly to :func:`load_client_config`.
    """

    api_key: Optional[str] = None
    base_url: Optional[str] = None
    timeout_seconds: Optional[float | int | str] = None
    payment_timeout_seconds: Optional[float | int | str] = None

    def as_overrides(self) -> Dict[str, str]:
        overrides: Dict[str, str] = {}
        for field_name, env_key in _PARAMETER_TO_ENV_KEY.items():
            value = getattr(self, field_name)
            if value is None:
                continue
            overrides[env_key] = str(value)
        return overrides


def _collect_parameter_overrides(
    parameters: Optional[ClientParameters],
    explicit: Mapping[str, Any],
) -> Dict[str, str]:
    overrides: Dict[str, str] = {}
    if parameters is not None:
        overrides.update(parameters.as_overrides())

    for key, value in explicit.items():
        if value is None:
            continue
        try:
            env_key = _PARAMETER_TO_ENV_KEY[key]
        except KeyError as exc:
            raise TypeError(f"Unknown client parameter '{key}'") from exc
        overrides[env_key] = str(value)
    return overrides


def _positive_seconds(raw: str, field_name: str) -> float:
    try:
        seconds = float(raw)
    except ValueError as exc:
        raise ConfigError(f"{field_name} must be a number, got '{raw}'") from exc
    if seconds <= 0:
        raise ConfigError(f"{field_name} must be greater than zero")
    return seconds


@dataclass(frozen=True)
class ClientConfig:
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    payment_timeout_seconds: float = DEFAULT_PAYMENT_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        if not self.api_key or not self.api_key.strip():
            raise ConfigError(
                "The API key must be set either by passing api_key to the client "
                "or by setting the FEWSATS_API_KEY environment variable"
            )

    def __repr__(self) -> str:
        return (
            f"ClientConfig(api_key='***', base_url={self.base_url!r}, "
            f"timeout_seconds={self.timeout_seconds}, "
            f"payment_timeout_seconds={self.payment_timeout_seconds})"
        )

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> "ClientConfig":
        api_key = (values.get("FEWSATS_API_KEY") or "").strip()
        base_url = (values.get("FEWSATS_BASE_URL") or DEFAULT_BASE_URL).rstrip("/")
        timeout_seconds = _positive_seconds(
            values.get("FEWSATS_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS)),
            "FEWSATS_TIMEOUT_SECONDS",
        )
        payment_timeout_seconds = _positive_seconds(
            values.get(
                "FEWSATS_PAYMENT_TIMEOUT_SECONDS", str(DEFAULT_PAYMENT_TIMEOUT_SECONDS)
            ),
            "FEWSATS_PAYMENT_TIMEOUT_SECONDS",
        )
        return cls(
            api_key=api_key,
            base_url=base_url,
            timeout_seconds=timeout_seconds,
            payment_timeout_seconds=payment_timeout_seconds,
        )

    @classmethod
    def from_env(
        cls,
        *,
        env_file: Optional[str] = ".env",
        overrides: Optional[Mapping[str, str]] = None,
        base: Optional[Mapping[str, str]] = None,
        parameters: Optional[ClientParameters] = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[float | int | str] = None,
        payment_timeout_seconds: Optional[float | int | str] = None,
    ) -> "ClientConfig":
        parameter_overrides = _collect_parameter_overrides(
            parameters,
            {
                "api_key": api_key,
                "base_url": base_url,
                "timeout_seconds": timeout_seconds,
                "payment_timeout_seconds": payment_timeout_seconds,
            },
        )
        merged_overrides = dict(overrides or {})
        merged_overrides.update(parameter_overrides)

        environment = build_environment(
            env_file=env_file,
            base=base,
            overrides=merged_overrides,
        )
        return cls.from_mapping(environment.variables)


def load_client_config(
    *,
    env_file: Optional[str] = ".env",
    overrides: Optional[Mapping[str, str]] = None,
    base: Optional[Mapping[str, str]] = None,
    parameters: Optional[ClientParameters] = None,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    timeout_seconds: Optional[float | int | str] = None,
    payment_timeout_seconds: Optional[float | int | str] = None,
) -> ClientConfig:
    """
    Convenience wrapper that mirrors :meth:`ClientConfig.from_env`.

    The configuration can come from environment variables, a ``.env`` file,
    direct keyword arguments, or any combination of the three.
    """
    return ClientConfig.from_env(
        env_file=env_file,
        overrides=overrides,
        base=base,
        parameters=parameters,
        api_key=api_key,
        base_url=base_url,
        timeout_seconds=timeout_seconds,
        payment_timeout_seconds=payment_timeout_seconds,
    )
