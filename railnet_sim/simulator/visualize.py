"""Visualisation helpers (Matplotlib)."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable

import matplotlib.pyplot as plt
import numpy as np

from .topology import Topology, TrackCategory
from .trains import Train, TrainCategory

__all__ = [
    "TRAIN_COLOURS",
    "TRACK_STYLES",
    "plot_network",
]

TRAIN_COLOURS = {
    TrainCategory.EXPRESS: "tab:red",
    TrainCategory.PASSENGER: "tab:blue",
    TrainCategory.FREIGHT: "tab:olive",
}

# (colour, linestyle, linewidth)
TRACK_STYLES = {
    TrackCategory.MAIN: ("dimgray", "-", 2.5),
    TrackCategory.EXPRESS: ("tab:purple", "-", 3.0),
    TrackCategory.LOCAL: ("darkgray", (0, (5, 5)), 1.5),
}


def plot_network(
    topology: Topology,
    trains: Iterable[Train] = (),
    save_path: Path | None = None,
    title: str = "Railway Network",
) -> None:
    """Draw tracks, stations and train markers at their current positions.

    Coordinates follow screen convention (y grows downwards), so the y axis
    is inverted.
    """
    fig, ax = plt.subplots(figsize=(7, 6))

    for track in topology.tracks:
        a = topology.station(track.from_station)
        b = topology.station(track.to_station)
        colour, style, width = TRACK_STYLES[track.category]
        ax.plot([a.x, b.x], [a.y, b.y], color=colour, linestyle=style, lw=width, zorder=1)

    stations = topology.stations
    if stations:
        xy = np.array([s.xy for s in stations])
        sizes = np.array([80 if s.is_major else 30 for s in stations])
        ax.scatter(xy[:, 0], xy[:, 1], s=sizes, c="black", zorder=2)
        for s in stations:
            offset = 15 if s.is_major else 12
            ax.annotate(s.name, (s.x, s.y - offset), ha="center", fontsize=8)

    for train in trains:
        ax.scatter(train.x, train.y, s=50, c=TRAIN_COLOURS[train.category], edgecolors="white", zorder=3)
        ax.annotate(train.name, (train.x, train.y - 12), ha="center", fontsize=7)

    ax.set_title(title)
    ax.set_aspect("equal", adjustable="datalim")
    ax.invert_yaxis()
    ax.grid(True, ls=":", lw=0.5)

    if save_path is not None:
        save_path = Path(save_path)
        save_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(save_path.with_suffix(".png"), dpi=300, bbox_inches="tight")
        fig.savefig(save_path.with_suffix(".svg"), bbox_inches="tight")
    else:
        plt.show()

    plt.close(fig)
