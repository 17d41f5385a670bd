"""
Version string for the eth_sdk package.

Bump on release; the HTTP/WS transports and the CLI derive their
User-Agent from it.
"""

from __future__ import annotations

__version__ = "0.1.0"


def user_agent() -> str:
    return f"eth-sdk-python/{__version__}"


__all__ = ["__version__", "user_agent"]
