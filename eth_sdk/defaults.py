"""
Process-held call defaults (default account, default block) and their
broadcast to every listener.

A DefaultContext is created once per client. Listeners (the client's
MethodInvoker, and collaborators such as a contract factory or a
personal-account subsystem) register at construction time. Each setter
normalizes its input and then calls `apply()`, which pushes the new values
to every listener synchronously, so no call encoded after the setter returns
can observe the old default.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Protocol, runtime_checkable

from . import address as _address
from .config import DEFAULT_BLOCK
from .formatters import input_block_number

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallDefaults:
    """Snapshot of the defaults a single call is encoded with."""

    account: Optional[str] = None
    block: Any = DEFAULT_BLOCK


@runtime_checkable
class DefaultsListener(Protocol):
    def set_default_account(self, account: Optional[str]) -> Any: ...
    def set_default_block(self, block: Any) -> Any: ...


class DefaultContext:
    def __init__(self, *, default_account: Optional[str] = None, default_block: Any = DEFAULT_BLOCK) -> None:
        self._listeners: List[DefaultsListener] = []
        self._account: Optional[str] = self._normalize_account(default_account)
        self._block: Any = self._normalize_block(default_block)

    # --- listeners ------------------------------------------------------

    def add_listener(self, listener: DefaultsListener) -> None:
        """Register `listener` and bring it up to date with the current values."""
        self._listeners.append(listener)
        listener.set_default_account(self._account)
        listener.set_default_block(self._block)

    def apply(self) -> None:
        for listener in self._listeners:
            listener.set_default_account(self._account)
            listener.set_default_block(self._block)
        log.debug(
            "defaults applied to %d listener(s): account=%s block=%r",
            len(self._listeners), self._account, self._block,
        )

    # --- values ---------------------------------------------------------

    @property
    def default_account(self) -> Optional[str]:
        return self._account

    @property
    def default_block(self) -> Any:
        return self._block

    def snapshot(self) -> CallDefaults:
        return CallDefaults(account=self._account, block=self._block)

    def set_default_account(self, value: Optional[str]) -> Optional[str]:
        """
        Set (or clear, with a falsy value) the default account. Non-empty input
        must be a valid address and is stored checksummed; invalid input raises
        FormatError and leaves the current value untouched.
        """
        self._account = self._normalize_account(value)
        self.apply()
        return self._account

    def set_default_block(self, value: Any) -> Any:
        """Set the default block reference; None/""/False reset it to "latest"."""
        self._block = self._normalize_block(value)
        self.apply()
        return self._block

    @staticmethod
    def _normalize_account(value: Optional[str]) -> Optional[str]:
        if not value:
            return None
        return _address.to_checksum_address(value)

    @staticmethod
    def _normalize_block(value: Any) -> Any:
        if value is None or value is False or value == "":
            return DEFAULT_BLOCK
        input_block_number(value)  # validates; raises FormatError
        return value


__all__ = ["CallDefaults", "DefaultsListener", "DefaultContext"]
