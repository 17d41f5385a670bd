"""
SDK configuration: RPC endpoints, call defaults, syncing debounce and timeouts.

- Loads sane defaults and supports overrides via environment variables (ETH_SDK_*).
- Provides helpers for building HTTP headers and validating endpoints.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .version import user_agent

_DEFAULT_RPC = "http://127.0.0.1:8545"

DEFAULT_BLOCK = "latest"
DEFAULT_SYNCING_DEBOUNCE = 0.5
DEFAULT_SYNCING_NEAR_TIP = 200


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name)
    return v if v is not None else default


def _ensure_scheme(url: Optional[str], allowed: tuple[str, ...]) -> Optional[str]:
    if not url:
        return url
    lower = url.lower()
    if not any(lower.startswith(f"{sch}://") for sch in allowed):
        raise ValueError(f"URL must start with {allowed}, got: {url!r}")
    return url


def ws_url_from_http(http_url: str) -> str:
    return http_url.replace("http://", "ws://", 1).replace("https://", "wss://", 1)


@dataclass(slots=True)
class SDKConfig:
    # Endpoints
    rpc_url: str = field(default_factory=lambda: _DEFAULT_RPC)
    # Optional WS (for subscriptions); derived from rpc_url when unset
    ws_url: Optional[str] = field(default=None)
    # HTTP/WS behavior
    request_timeout: float = 10.0
    max_retries: int = 3
    backoff_base: float = 0.25
    # Per-call defaults broadcast by DefaultContext
    default_block: Any = DEFAULT_BLOCK
    default_account: Optional[str] = None
    # Syncing subscription smoothing
    syncing_debounce: float = DEFAULT_SYNCING_DEBOUNCE
    syncing_near_tip: int = DEFAULT_SYNCING_NEAR_TIP
    # Logging / identity
    log_level: str = "WARNING"
    user_agent: str = field(default_factory=user_agent)

    @classmethod
    def from_env(cls, prefix: str = "ETH_SDK_") -> "SDKConfig":
        """
        Create config from environment variables:

        ETH_SDK_RPC_URL          (http/https)
        ETH_SDK_WS_URL           (ws/wss) optional
        ETH_SDK_TIMEOUT          (float seconds)
        ETH_SDK_MAX_RETRIES      (int)
        ETH_SDK_BACKOFF          (float seconds, first retry delay)
        ETH_SDK_DEFAULT_BLOCK    (tag or number)
        ETH_SDK_DEFAULT_ACCOUNT  (0x address) optional
        ETH_SDK_SYNC_DEBOUNCE    (float seconds)
        ETH_SDK_SYNC_NEAR_TIP    (int blocks)
        ETH_SDK_LOG_LEVEL        (logging level name)
        ETH_SDK_USER_AGENT       (str)
        """
        rpc = _env(f"{prefix}RPC_URL", _DEFAULT_RPC)
        ws = _env(f"{prefix}WS_URL", None)
        _ensure_scheme(rpc, ("http", "https"))
        _ensure_scheme(ws, ("ws", "wss"))

        default_block: Any = _env(f"{prefix}DEFAULT_BLOCK", DEFAULT_BLOCK) or DEFAULT_BLOCK
        if isinstance(default_block, str) and default_block.isdigit():
            default_block = int(default_block)

        return cls(
            rpc_url=rpc or _DEFAULT_RPC,
            ws_url=ws or None,
            request_timeout=float(_env(f"{prefix}TIMEOUT", "10.0")),
            max_retries=int(_env(f"{prefix}MAX_RETRIES", "3")),
            backoff_base=float(_env(f"{prefix}BACKOFF", "0.25")),
            default_block=default_block,
            default_account=_env(f"{prefix}DEFAULT_ACCOUNT", None) or None,
            syncing_debounce=float(_env(f"{prefix}SYNC_DEBOUNCE", str(DEFAULT_SYNCING_DEBOUNCE))),
            syncing_near_tip=int(_env(f"{prefix}SYNC_NEAR_TIP", str(DEFAULT_SYNCING_NEAR_TIP))),
            log_level=(_env(f"{prefix}LOG_LEVEL", "WARNING") or "WARNING").upper(),
            user_agent=_env(f"{prefix}USER_AGENT", None) or user_agent(),
        )

    @classmethod
    def with_overrides(
        cls, base: Optional["SDKConfig"] = None, **overrides: Any
    ) -> "SDKConfig":
        """
        Build from an existing config plus keyword overrides.
        Unknown keys and None values are ignored.
        """
        base = base or cls.from_env()
        data = base.to_dict()
        data.update({k: v for k, v in overrides.items() if k in data and v is not None})
        if "rpc_url" in overrides:
            _ensure_scheme(data["rpc_url"], ("http", "https"))
        if "ws_url" in overrides:
            _ensure_scheme(data["ws_url"], ("ws", "wss"))
        return cls(**data)

    @property
    def effective_ws_url(self) -> str:
        return self.ws_url or ws_url_from_http(self.rpc_url)

    def http_headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rpc_url": self.rpc_url,
            "ws_url": self.ws_url,
            "request_timeout": float(self.request_timeout),
            "max_retries": int(self.max_retries),
            "backoff_base": float(self.backoff_base),
            "default_block": self.default_block,
            "default_account": self.default_account,
            "syncing_debounce": float(self.syncing_debounce),
            "syncing_near_tip": int(self.syncing_near_tip),
            "log_level": self.log_level,
            "user_agent": self.user_agent,
        }


__all__ = [
    "SDKConfig",
    "DEFAULT_BLOCK",
    "DEFAULT_SYNCING_DEBOUNCE",
    "DEFAULT_SYNCING_NEAR_TIP",
    "ws_url_from_http",
]
