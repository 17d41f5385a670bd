"""
eth_sdk: Ethereum JSON-RPC call resolution for Python.
Convenience exports for the most common client APIs.
"""

from .version import __version__  # noqa: F401

# Config & errors
from .config import SDKConfig  # noqa: F401
from .errors import (  # noqa: F401
    ArityError,
    DecodeError,
    EthSdkError,
    FormatError,
    ResolutionError,
    TransportError,
)

# Client
from .eth import Eth  # noqa: F401
from .defaults import DefaultContext  # noqa: F401
from .invoker import MethodInvoker  # noqa: F401
from .methods import REGISTRY, MethodDescriptor  # noqa: F401
from .subscriptions import SUBSCRIPTIONS, Subscription, SubscriptionRegistry  # noqa: F401
from .network import Net  # noqa: F401

# Transports
from .rpc.http import HttpTransport  # noqa: F401
from .rpc.ws import WsTransport  # noqa: F401

# Addresses
from .address import is_address, to_checksum_address  # noqa: F401

__all__ = [
    "__version__",
    "SDKConfig",
    "EthSdkError",
    "ArityError",
    "FormatError",
    "ResolutionError",
    "TransportError",
    "DecodeError",
    "Eth",
    "DefaultContext",
    "MethodInvoker",
    "MethodDescriptor",
    "REGISTRY",
    "Subscription",
    "SubscriptionRegistry",
    "SUBSCRIPTIONS",
    "Net",
    "HttpTransport",
    "WsTransport",
    "is_address",
    "to_checksum_address",
]
