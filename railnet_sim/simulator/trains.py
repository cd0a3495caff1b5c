"""Train records and the in-memory registry that owns them."""
from __future__ import annotations

import itertools
import logging
import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Tuple

__all__ = [
    "Outcome",
    "TrainCategory",
    "Train",
    "TrainRequest",
    "Admission",
    "TrainRegistry",
]

LOGGER = logging.getLogger(__name__)


class Outcome(Enum):
    """What happened to a train (or a request) during one operation."""

    ACCEPTED = "accepted"
    REJECTED = "rejected"
    ADVANCED = "advanced"
    REVERSED = "reversed"
    HELD = "held"
    INACTIVE = "inactive"


class TrainCategory(Enum):
    EXPRESS = "express"
    PASSENGER = "passenger"
    FREIGHT = "freight"


@dataclass(frozen=True)
class Train:
    """Immutable snapshot of one train.

    ``progress`` is the completed percentage of the leg from ``origin`` to
    ``destination``; ``x``/``y`` are recomputed by the stepper every tick.
    """

    id: str
    name: str
    origin: str
    destination: str
    weight_tonnes: float
    speed_kmh: float
    category: TrainCategory = TrainCategory.PASSENGER
    x: float = 0.0
    y: float = 0.0
    progress: float = 0.0
    active: bool = True

    @property
    def position(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def reversed(self) -> "Train":
        """Swap the leg direction and restart it from zero progress."""
        return replace(self, origin=self.destination, destination=self.origin, progress=0.0)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "origin": self.origin,
            "destination": self.destination,
            "weight_tonnes": self.weight_tonnes,
            "speed_kmh": self.speed_kmh,
            "category": self.category.value,
            "x": self.x,
            "y": self.y,
            "progress": self.progress,
            "active": self.active,
        }


@dataclass(frozen=True)
class TrainRequest:
    """Raw train-creation input, typically straight from a form or YAML.

    Numeric fields may be strings; they are parsed on admission.
    """

    name: Any = None
    origin: Any = None
    destination: Any = None
    weight_tonnes: Any = None
    speed_kmh: Any = None
    category: Any = TrainCategory.PASSENGER.value

    @classmethod
    def from_mapping(cls, record: Mapping[str, Any]) -> "TrainRequest":
        return cls(
            name=record.get("name"),
            origin=record.get("origin", record.get("from")),
            destination=record.get("destination", record.get("to")),
            weight_tonnes=record.get("weight_tonnes", record.get("weight")),
            speed_kmh=record.get("speed_kmh", record.get("speed")),
            category=record.get("category", record.get("type", TrainCategory.PASSENGER.value)),
        )


@dataclass(frozen=True)
class Admission:
    outcome: Outcome
    train: Optional[Train] = None
    reason: str = ""

    @property
    def accepted(self) -> bool:
        return self.outcome is Outcome.ACCEPTED


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _parse_number(value: Any) -> Optional[float]:
    """Parse form input; strings are truncated to whole numbers."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(int(float(str(value).strip())))
        except (ValueError, OverflowError):
            return None
    return number if math.isfinite(number) else None


def _parse_category(value: Any) -> Optional[TrainCategory]:
    if _is_missing(value):
        return TrainCategory.PASSENGER
    if isinstance(value, TrainCategory):
        return value
    try:
        return TrainCategory(str(value).strip().lower())
    except ValueError:
        return None


def _next_serial(ids: Iterable[str]) -> int:
    """First serial after every existing ``train-<n>`` id."""
    highest = 0
    for train_id in ids:
        prefix, _, serial = train_id.rpartition("-")
        if prefix == "train" and serial.isdigit():
            highest = max(highest, int(serial))
    return highest + 1


class TrainRegistry:
    """Ordered collection of trains.

    Insertion order is display order.  The stepper never edits a ``Train`` in
    place: it hands back a complete new sequence through ``replace_all``.
    """

    def __init__(self, trains: Iterable[Train] = ()):
        self._trains: Tuple[Train, ...] = tuple(trains)
        ids = [t.id for t in self._trains]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Duplicate train ids in {ids}")
        self._ids = itertools.count(_next_serial(ids))

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------
    def add_train(self, request: TrainRequest) -> Admission:
        """Validate ``request`` and append a new train on success."""
        for field_name in ("name", "origin", "destination", "weight_tonnes", "speed_kmh"):
            if _is_missing(getattr(request, field_name)):
                return self._reject(request, f"missing {field_name}")

        weight = _parse_number(request.weight_tonnes)
        speed = _parse_number(request.speed_kmh)
        if weight is None or weight <= 0:
            return self._reject(request, f"invalid weight {request.weight_tonnes!r}")
        if speed is None or speed <= 0:
            return self._reject(request, f"invalid speed {request.speed_kmh!r}")
        category = _parse_category(request.category)
        if category is None:
            return self._reject(request, f"unknown category {request.category!r}")

        origin, destination = str(request.origin), str(request.destination)
        if origin == destination:
            LOGGER.debug("Train '%s' admitted with identical origin and destination '%s'", request.name, origin)

        train = Train(
            id=f"train-{next(self._ids)}",
            name=str(request.name),
            origin=origin,
            destination=destination,
            weight_tonnes=weight,
            speed_kmh=speed,
            category=category,
        )
        self._trains = self._trains + (train,)
        LOGGER.debug("Admitted %s (%s: %s -> %s)", train.id, train.name, origin, destination)
        return Admission(Outcome.ACCEPTED, train)

    @staticmethod
    def _reject(request: TrainRequest, reason: str) -> Admission:
        LOGGER.debug("Rejected train request %r: %s", request.name, reason)
        return Admission(Outcome.REJECTED, None, reason)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def replace_all(self, trains: Iterable[Train]) -> None:
        self._trains = tuple(trains)

    def remove_train(self, train_id: str) -> bool:
        remaining = tuple(t for t in self._trains if t.id != train_id)
        removed = len(remaining) != len(self._trains)
        self._trains = remaining
        return removed

    def set_active(self, train_id: str, active: bool) -> bool:
        """Pause or resume a train.  Returns False for unknown ids."""
        found = False
        updated = []
        for train in self._trains:
            if train.id == train_id:
                train = replace(train, active=active)
                found = True
            updated.append(train)
        self._trains = tuple(updated)
        return found

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def get(self, train_id: str) -> Optional[Train]:
        for train in self._trains:
            if train.id == train_id:
                return train
        return None

    def snapshot(self) -> Tuple[Train, ...]:
        return self._trains

    def __len__(self) -> int:
        return len(self._trains)

    def __iter__(self) -> Iterator[Train]:
        return iter(self._trains)
