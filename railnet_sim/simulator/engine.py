"""Fixed-tick stepper that advances every train along its current leg."""
from __future__ import annotations

import logging
import math
import threading
from collections import Counter
from dataclasses import dataclass, replace
from typing import Callable, Iterable, Optional, Tuple

from ..config import SimulationConfig
from .position import train_position
from .topology import Topology
from .trains import Admission, Outcome, Train, TrainRegistry, TrainRequest
from .travel_time import estimate_travel_time_hours

__all__ = [
    "SECONDS_PER_HOUR",
    "TrainStep",
    "TickResult",
    "progress_increment",
    "step_train",
    "tick",
    "SimulationRunner",
]

LOGGER = logging.getLogger(__name__)

SECONDS_PER_HOUR = 3600.0
FULL_LEG = 100.0


@dataclass(frozen=True)
class TrainStep:
    """Result of advancing a single train by one tick."""

    train: Train
    outcome: Outcome
    reason: str = ""
    travel_time_h: Optional[float] = None


@dataclass(frozen=True)
class TickResult:
    """New registry snapshot produced by one tick."""

    tick: int
    steps: Tuple[TrainStep, ...]

    @property
    def trains(self) -> Tuple[Train, ...]:
        return tuple(step.train for step in self.steps)

    def count(self, outcome: Outcome) -> int:
        return sum(1 for step in self.steps if step.outcome is outcome)


# ------------------------------------------------------------------
# Pure stepping functions
# ------------------------------------------------------------------

def progress_increment(travel_time_h: float, simulated_seconds_per_tick: float) -> float:
    """Progress units gained per tick for a leg lasting ``travel_time_h`` hours.

    Non-finite or non-positive travel times give no progress.
    """
    if not math.isfinite(travel_time_h) or travel_time_h <= 0:
        return 0.0
    return (FULL_LEG / (travel_time_h * SECONDS_PER_HOUR)) * simulated_seconds_per_tick


def step_train(train: Train, topology: Topology, simulated_seconds_per_tick: float) -> TrainStep:
    """Advance one train by one tick without mutating it."""
    if not train.active:
        return TrainStep(train, Outcome.INACTIVE)

    track = topology.track_between(train.origin, train.destination)
    if track is None:
        LOGGER.debug("%s held: no track between %s and %s", train.id, train.origin, train.destination)
        return TrainStep(train, Outcome.HELD, "no track")

    travel_time_h = estimate_travel_time_hours(
        track.elevation_profile,
        train.weight_tonnes,
        train.speed_kmh,
        track.num_curves,
    )
    increment = progress_increment(travel_time_h, simulated_seconds_per_tick)
    if increment <= 0:
        LOGGER.debug("%s held: travel time %s h on %s", train.id, travel_time_h, track.id)
        return TrainStep(train, Outcome.HELD, "no progress", travel_time_h)

    progress = train.progress + increment
    if progress >= FULL_LEG:
        arrived = train.reversed()
        x, y = train_position(arrived.origin, arrived.destination, arrived.progress, topology)
        LOGGER.debug("%s arrived at %s, returning to %s", train.id, arrived.origin, arrived.destination)
        return TrainStep(replace(arrived, x=x, y=y), Outcome.REVERSED, travel_time_h=travel_time_h)

    x, y = train_position(train.origin, train.destination, progress, topology)
    return TrainStep(replace(train, progress=progress, x=x, y=y), Outcome.ADVANCED, travel_time_h=travel_time_h)


def tick(
    trains: Iterable[Train],
    topology: Topology,
    simulated_seconds_per_tick: float,
    tick_index: int = 0,
) -> TickResult:
    """Step every train once and return the replacement snapshot."""
    steps = tuple(step_train(train, topology, simulated_seconds_per_tick) for train in trains)
    return TickResult(tick=tick_index, steps=steps)


# ------------------------------------------------------------------
# Driver
# ------------------------------------------------------------------

class SimulationRunner:
    """Owns the tick loop for one registry/topology pair.

    ``step`` and ``run`` are synchronous.  ``start`` ticks on a background
    thread every ``cfg.tick_interval_s`` until ``stop``; using the runner as a
    context manager guarantees the thread is stopped on exit.
    """

    def __init__(
        self,
        registry: TrainRegistry,
        topology: Topology,
        cfg: SimulationConfig,
        on_tick: Optional[Callable[[TickResult], None]] = None,
    ):
        self.registry = registry
        self.topology = topology
        self.cfg = cfg
        self.on_tick = on_tick
        self.tick_count = 0
        self.reversals: Counter = Counter()
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # ------------------------------------------------------------------
    # Synchronous API
    # ------------------------------------------------------------------
    def add_train(self, request: TrainRequest) -> Admission:
        with self._lock:
            return self.registry.add_train(request)

    def set_active(self, train_id: str, active: bool) -> bool:
        with self._lock:
            return self.registry.set_active(train_id, active)

    def remove_train(self, train_id: str) -> bool:
        with self._lock:
            return self.registry.remove_train(train_id)

    def step(self) -> TickResult:
        with self._lock:
            result = tick(
                self.registry.snapshot(),
                self.topology,
                self.cfg.simulated_seconds_per_tick,
                tick_index=self.tick_count + 1,
            )
            self.registry.replace_all(result.trains)
            self.tick_count = result.tick
            for step in result.steps:
                if step.outcome is Outcome.REVERSED:
                    self.reversals[step.train.id] += 1
        if self.on_tick is not None:
            self.on_tick(result)
        return result

    def run(self, n_ticks: int, realtime: bool = False) -> Optional[TickResult]:
        """Run ``n_ticks`` ticks; sleep one tick interval between them if ``realtime``."""
        result = None
        if realtime and not self.running:
            self._stop_event.clear()
        for i in range(n_ticks):
            if realtime and i > 0 and self._stop_event.wait(self.cfg.tick_interval_s):
                break
            result = self.step()
        return result

    # ------------------------------------------------------------------
    # Background lifecycle
    # ------------------------------------------------------------------
    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            raise RuntimeError("Simulation runner is already running")
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, name="railnet-ticker", daemon=True)
        self._thread.start()
        LOGGER.info("Runner started (tick every %.3f s)", self.cfg.tick_interval_s)

    def _loop(self) -> None:
        while not self._stop_event.wait(self.cfg.tick_interval_s):
            try:
                self.step()
            except Exception:  # pylint: disable=broad-except
                LOGGER.exception("Tick %d failed; continuing", self.tick_count)

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                LOGGER.warning("Ticker thread did not stop within %s s", timeout)
                return
            self._thread = None
            LOGGER.info("Runner stopped after %d ticks", self.tick_count)

    def __enter__(self) -> "SimulationRunner":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
