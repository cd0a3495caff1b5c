"""Global configuration definitions.

All simulation-wide tunables live here so that every component of the
simulator can access them in a single import.  Config objects can be created
either programmatically or loaded from YAML files, which also carry the static
network (stations and tracks) and the trains to dispatch at start-up.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .simulator.topology import Topology
from .simulator.trains import TrainRequest

__all__ = [
    "SimulationConfig",
]

DEFAULT_YAML_INDENT = 2


@dataclass
class SimulationConfig:
    """Container for all simulation parameters.

    Attributes
    ----------
    tick_interval_s
        Wall-clock period between two ticks of the stepper (seconds).
    time_scale
        Simulated seconds elapsing per wall-clock second.  With the default
        0.1 s tick this advances the simulation clock by 100 s per tick.
    n_ticks
        Number of ticks executed by a batch (non real-time) run.
    log_level
        Name of the logging level used by the command-line interface.
    stations
        Station records (``id``, ``name``, ``x``, ``y``, ``is_major``).
    tracks
        Track records (``id``, ``from``, ``to``, ``category``, ``length``,
        ``elevation_profile``, ``num_curves``).
    trains
        Train requests admitted when a run starts.
    """

    tick_interval_s: float = 0.1
    time_scale: float = 1000.0
    n_ticks: int = 600
    log_level: str = "INFO"

    stations: List[Dict[str, Any]] = field(default_factory=list)
    tracks: List[Dict[str, Any]] = field(default_factory=list)
    trains: List[Dict[str, Any]] = field(default_factory=list)

    # Free-form field to store arbitrary user metadata (e.g., scenario name).
    tag: str = ""

    # Automatically filled, not expected to be loaded from file.
    _yaml_path: Optional[Path] = field(default=None, repr=False, compare=False)

    # ---------------------------------------------------------------------
    # YAML helpers
    # ---------------------------------------------------------------------
    @classmethod
    def from_yaml(cls, path: os.PathLike | str) -> "SimulationConfig":
        """Load a configuration from a YAML file."""
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        cfg = cls(**data)
        cfg._yaml_path = Path(path)
        return cfg

    def to_yaml(self, path: os.PathLike | str) -> None:
        """Save the config to YAML."""
        data = asdict(self)
        data.pop("_yaml_path", None)
        with open(path, "w", encoding="utf-8") as fh:
            yaml.safe_dump(data, fh, indent=DEFAULT_YAML_INDENT, sort_keys=False)

    # ------------------------------------------------------------------
    # Derived quantities
    # ------------------------------------------------------------------
    @property
    def simulated_seconds_per_tick(self) -> float:
        return self.tick_interval_s * self.time_scale

    def topology(self) -> Topology:
        """Build the static network described by ``stations`` and ``tracks``."""
        return Topology.from_records(self.stations, self.tracks)

    def initial_requests(self) -> List[TrainRequest]:
        """Return the configured trains as creation requests."""
        return [TrainRequest.from_mapping(record) for record in self.trains]

    # Convenience str representation for logging
    def __str__(self) -> str:  # noqa: DunderStr
        return (
            f"SimulationConfig(stations={len(self.stations)}, tracks={len(self.tracks)}, "
            f"trains={len(self.trains)}, tick={self.tick_interval_s}s x{self.time_scale:g})"
        )

    def __post_init__(self):
        # YAML may hand us strings or ints (e.g. '1e3')
        self.tick_interval_s = float(self.tick_interval_s)
        self.time_scale = float(self.time_scale)
        self.n_ticks = int(self.n_ticks)
        if self.tick_interval_s <= 0:
            raise ValueError(f"tick_interval_s must be positive, got {self.tick_interval_s}")
        if self.time_scale <= 0:
            raise ValueError(f"time_scale must be positive, got {self.time_scale}")
        if self.n_ticks < 0:
            raise ValueError(f"n_ticks must be non-negative, got {self.n_ticks}")
        self.stations = list(self.stations or [])
        self.tracks = list(self.tracks or [])
        self.trains = list(self.trains or [])
