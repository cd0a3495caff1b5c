"""Static rail network: stations, tracks and their elevation profiles."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import numpy as np

__all__ = [
    "ElevationPoint",
    "Station",
    "Track",
    "TrackCategory",
    "Topology",
]

LOGGER = logging.getLogger(__name__)


class TrackCategory(Enum):
    """Presentation-only track class (line style on the map)."""

    MAIN = "main"
    EXPRESS = "express"
    LOCAL = "local"


@dataclass(frozen=True)
class ElevationPoint:
    distance_km: float
    elevation_m: float


@dataclass(frozen=True)
class Station:
    id: str
    name: str
    x: float
    y: float
    is_major: bool = False

    @property
    def xy(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class Track:
    """Undirected edge between two stations.

    The elevation profile is an ordered sequence of (cumulative distance,
    elevation) samples.  ``length`` is kept as declared; travel times are
    derived from the profile only.
    """

    id: str
    from_station: str
    to_station: str
    category: TrackCategory
    length: float
    elevation_profile: Tuple[ElevationPoint, ...]
    num_curves: int = 0

    def __post_init__(self) -> None:
        if self.num_curves < 0:
            raise ValueError(f"Track '{self.id}': num_curves must be non-negative, got {self.num_curves}")
        distances = np.array([p.distance_km for p in self.elevation_profile], dtype=float)
        if distances.size >= 2 and np.any(np.diff(distances) <= 0):
            raise ValueError(f"Track '{self.id}': profile distances must be strictly increasing")

    @property
    def endpoints(self) -> Tuple[str, str]:
        return (self.from_station, self.to_station)

    @property
    def total_distance_km(self) -> float:
        if not self.elevation_profile:
            return 0.0
        return self.elevation_profile[-1].distance_km - self.elevation_profile[0].distance_km

    def connects(self, a: str, b: str) -> bool:
        """True if the track joins ``a`` and ``b`` in either direction."""
        return (self.from_station == a and self.to_station == b) or (
            self.from_station == b and self.to_station == a
        )

    @classmethod
    def from_mapping(cls, record: Mapping[str, Any]) -> "Track":
        profile = tuple(
            ElevationPoint(float(p["distance_km"]), float(p["elevation_m"]))
            for p in record.get("elevation_profile", [])
        )
        return cls(
            id=str(record["id"]),
            from_station=str(record["from"]),
            to_station=str(record["to"]),
            category=TrackCategory(record.get("category", record.get("type", "main"))),
            length=float(record.get("length", 0.0)),
            elevation_profile=profile,
            num_curves=int(record.get("num_curves", 0)),
        )


class Topology:
    """Read-only store of stations and tracks.

    Track resolution by endpoint pair is a linear scan in declaration order;
    networks in scope have at most a few hundred tracks.
    """

    def __init__(self, stations: Iterable[Station], tracks: Iterable[Track]):
        self._stations: Dict[str, Station] = {}
        for station in stations:
            if station.id in self._stations:
                raise ValueError(f"Duplicate station id '{station.id}'")
            self._stations[station.id] = station

        self._tracks: List[Track] = []
        seen = set()
        for track in tracks:
            if track.id in seen:
                raise ValueError(f"Duplicate track id '{track.id}'")
            for endpoint in track.endpoints:
                if endpoint not in self._stations:
                    raise ValueError(f"Track '{track.id}' references unknown station '{endpoint}'")
            seen.add(track.id)
            self._tracks.append(track)
        LOGGER.debug("Topology loaded: %d stations, %d tracks", len(self._stations), len(self._tracks))

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------
    @classmethod
    def from_records(
        cls,
        stations: Iterable[Mapping[str, Any]],
        tracks: Iterable[Mapping[str, Any]],
    ) -> "Topology":
        """Build a topology from plain mappings (as loaded from YAML)."""
        station_objs = [
            Station(
                id=str(s["id"]),
                name=str(s.get("name", s["id"])),
                x=float(s["x"]),
                y=float(s["y"]),
                is_major=bool(s.get("is_major", False)),
            )
            for s in stations
        ]
        track_objs = [Track.from_mapping(t) for t in tracks]
        return cls(station_objs, track_objs)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    @property
    def stations(self) -> Tuple[Station, ...]:
        return tuple(self._stations.values())

    @property
    def tracks(self) -> Tuple[Track, ...]:
        return tuple(self._tracks)

    def station(self, station_id: str) -> Optional[Station]:
        return self._stations.get(station_id)

    def track(self, track_id: str) -> Optional[Track]:
        for track in self._tracks:
            if track.id == track_id:
                return track
        return None

    def track_between(self, a: str, b: str) -> Optional[Track]:
        """Return the track joining ``a`` and ``b`` regardless of direction."""
        for track in self._tracks:
            if track.connects(a, b):
                return track
        return None

    def neighbours(self, station_id: str) -> List[str]:
        result = []
        for track in self._tracks:
            if track.from_station == station_id:
                result.append(track.to_station)
            elif track.to_station == station_id:
                result.append(track.from_station)
        return result

    def __repr__(self) -> str:
        return f"Topology(stations={len(self._stations)}, tracks={len(self._tracks)})"
