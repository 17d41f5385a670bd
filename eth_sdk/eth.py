"""
eth_sdk.eth
===========

`Eth` is the client facade: one DefaultContext, the method registry, one
MethodInvoker and one SubscriptionRegistry, plus any collaborators that need
the same defaults or transport.

    from eth_sdk import Eth
    from eth_sdk.rpc.http import HttpTransport

    eth = Eth(HttpTransport("http://localhost:8545"))
    eth.set_default_account("0x...")
    balance = await eth.get_balance("0x...", None)     # None -> default block
    block = await eth.invoke("getBlock", "latest", False)

Collaborators are arbitrary objects. Those implementing
`set_default_account` / `set_default_block` receive every defaults change;
those implementing `set_provider` receive every transport change.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Iterable, List, Mapping, Optional, Protocol, runtime_checkable

from .config import SDKConfig
from .defaults import DefaultContext, DefaultsListener
from .errors import ResolutionError
from .invoker import Callback, MethodInvoker
from .methods import REGISTRY, MethodDescriptor
from .network import Net, get_network_type
from .rpc import Transport
from .scheduler import Scheduler
from .subscriptions import Listener, Subscription, SubscriptionCallback, SubscriptionRegistry

log = logging.getLogger(__name__)


@runtime_checkable
class ProviderListener(Protocol):
    def set_provider(self, transport: Transport) -> Any: ...


class Eth:
    def __init__(
        self,
        transport: Transport,
        *,
        config: Optional[SDKConfig] = None,
        collaborators: Iterable[Any] = (),
        scheduler: Optional[Scheduler] = None,
        registry: Mapping[str, MethodDescriptor] = REGISTRY,
    ) -> None:
        self.config = config
        self.transport = transport
        self.registry = registry
        self.invoker = MethodInvoker(transport, registry)
        self.subscriptions = SubscriptionRegistry(transport, scheduler=scheduler, config=config)
        self.net = Net(transport)
        self.collaborators: List[Any] = [self.net, *collaborators]

        self._by_attr = {desc.attr_name: desc.name for desc in registry.values()}

        if config is not None:
            self.defaults = DefaultContext(
                default_account=config.default_account, default_block=config.default_block
            )
        else:
            self.defaults = DefaultContext()
        self.defaults.add_listener(self.invoker)
        for c in self.collaborators:
            if isinstance(c, DefaultsListener):
                self.defaults.add_listener(c)

    # --- calls ------------------------------------------------------------

    def invoke(self, name: str, *args: Any, callback: Optional[Callback] = None) -> Awaitable[Any]:
        return self.invoker.invoke(name, *args, callback=callback)

    def __getattr__(self, attr: str) -> Callable[..., Awaitable[Any]]:
        # Only reached for names not found normally.
        by_attr = self.__dict__.get("_by_attr")
        if by_attr is None or attr not in by_attr:
            raise AttributeError(f"{type(self).__name__!s} has no attribute {attr!r}")
        name = by_attr[attr]

        def bound(*args: Any, callback: Optional[Callback] = None) -> Awaitable[Any]:
            return self.invoker.invoke(name, *args, callback=callback)

        bound.__name__ = attr
        bound.__doc__ = f"Invoke {name!r} ({self.registry[name].arity} argument(s))."
        return bound

    def __dir__(self) -> List[str]:
        return sorted(set(super().__dir__()) | set(self._by_attr))

    def operation(self, name: str) -> MethodDescriptor:
        desc = self.registry.get(name)
        if desc is None:
            raise ResolutionError(name, "method")
        return desc

    # --- subscriptions ----------------------------------------------------

    async def subscribe(
        self,
        name: str,
        *args: Any,
        callback: Optional[SubscriptionCallback] = None,
        listeners: Optional[Mapping[str, Listener]] = None,
    ) -> Subscription:
        return await self.subscriptions.subscribe(name, *args, callback=callback, listeners=listeners)

    async def clear_subscriptions(self) -> int:
        return await self.subscriptions.clear()

    # --- defaults ---------------------------------------------------------

    @property
    def default_account(self) -> Optional[str]:
        return self.defaults.default_account

    @property
    def default_block(self) -> Any:
        return self.defaults.default_block

    def set_default_account(self, value: Optional[str]) -> Optional[str]:
        return self.defaults.set_default_account(value)

    def set_default_block(self, value: Any) -> Any:
        return self.defaults.set_default_block(value)

    # --- provider ---------------------------------------------------------

    def set_provider(self, transport: Transport) -> None:
        """Use `transport` for every later call, here and in every collaborator."""
        self.transport = transport
        self.invoker.set_provider(transport)
        self.subscriptions.set_provider(transport)
        for c in self.collaborators:
            if isinstance(c, ProviderListener):
                c.set_provider(transport)
        log.debug("provider set on eth and %d collaborator(s)", len(self.collaborators))

    async def get_network_type(self) -> str:
        return await get_network_type(self)


__all__ = ["Eth", "ProviderListener"]
