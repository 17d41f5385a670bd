"""
eth_sdk.cli
===========

Command-line interface, exposed as the `eth-sdk` console script. Typer is only
imported when the CLI is actually used.

    >>> from eth_sdk.cli import main
    >>> main(["methods"])
"""

from __future__ import annotations

from importlib import import_module
from typing import Any, List, Optional

__all__: List[str] = ["main", "app"]

_SUBMODULE = "eth_sdk.cli.main"


def __getattr__(name: str) -> Any:  # PEP 562 lazy attribute access
    if name == "app":
        return import_module(_SUBMODULE).app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def main(argv: Optional[list[str]] = None) -> int:
    return int(import_module(_SUBMODULE).main(argv))
