"""Rail network kinematic simulator."""
from __future__ import annotations

from importlib import metadata as _metadata

try:
    __version__: str = _metadata.version("railnet-sim")
except _metadata.PackageNotFoundError:
    __version__ = "0.0.0-dev"

__all__ = ["config", "simulator"]
