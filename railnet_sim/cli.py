"""Command-line interface entry-point.

Usage examples
--------------
Run a batch of ticks and print train states every 50 ticks:
    python -m railnet_sim.cli run --config cfgs/base.yaml --ticks 500 --every 50

Travel times of every track for a 500 t train at 80 km/h:
    python -m railnet_sim.cli estimate --config cfgs/base.yaml --weight 500 --speed 80

Render the network after 200 ticks:
    python -m railnet_sim.cli plot --config cfgs/base.yaml --ticks 200 --save_path figs/network

List stations and the stations they connect to:
    python -m railnet_sim.cli stations --config cfgs/base.yaml
"""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List

from .config import SimulationConfig
from .simulator.engine import SimulationRunner, TickResult
from .simulator.trains import TrainRegistry
from .simulator.travel_time import estimate_travel_time_hours, flat_track_time_hours

LOGGER = logging.getLogger(__name__)


def _parse_args(argv: List[str] | None = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="railnet_sim", description="Rail network kinematic simulator")

    subparsers = parser.add_subparsers(dest="cmd", required=True)

    # ------------------------------------------------------------------
    # run
    # ------------------------------------------------------------------
    p_run = subparsers.add_parser("run", help="Advance the configured trains for a number of ticks")
    p_run.add_argument("--config", required=True, type=Path, help="YAML config file")
    p_run.add_argument("--ticks", type=int, default=None, help="Number of ticks (default: n_ticks from config)")
    p_run.add_argument("--realtime", action="store_true", help="Sleep tick_interval_s between ticks")
    p_run.add_argument("--every", type=int, default=0, help="Print train states every K ticks (0 = only at the end)")

    # ------------------------------------------------------------------
    # estimate
    # ------------------------------------------------------------------
    p_est = subparsers.add_parser("estimate", help="Print travel-time estimates per track")
    p_est.add_argument("--config", required=True, type=Path, help="YAML config file")
    p_est.add_argument("--weight", required=True, type=float, help="Train weight in tonnes")
    p_est.add_argument("--speed", required=True, type=float, help="Average speed in km/h")
    p_est.add_argument("--track", type=str, default=None, help="Only this track id")

    # ------------------------------------------------------------------
    # plot
    # ------------------------------------------------------------------
    p_plot = subparsers.add_parser("plot", help="Run some ticks and render the network")
    p_plot.add_argument("--config", required=True, type=Path, help="YAML config file")
    p_plot.add_argument("--ticks", type=int, default=0, help="Ticks to run before rendering")
    p_plot.add_argument("--save_path", type=Path, default=None, help="Figure path without suffix (PNG and SVG are written)")

    # ------------------------------------------------------------------
    # stations
    # ------------------------------------------------------------------
    p_st = subparsers.add_parser("stations", help="List stations and their neighbours")
    p_st.add_argument("--config", required=True, type=Path, help="YAML config file")
    return parser


def _build_runner(cfg: SimulationConfig, on_tick=None) -> SimulationRunner:
    topology = cfg.topology()
    registry = TrainRegistry()
    runner = SimulationRunner(registry, topology, cfg, on_tick=on_tick)
    for request in cfg.initial_requests():
        admission = runner.add_train(request)
        if not admission.accepted:
            print(f"[WARNING] Skipping train {request.name!r}: {admission.reason}")
            continue
        train = admission.train
        if train.destination not in topology.neighbours(train.origin):
            print(f"[WARNING] Train {train.id} ({train.name}) will be held: no track between {train.origin} and {train.destination}")
    return runner


def _print_states(result: TickResult) -> None:
    print(f"--- tick {result.tick} ---")
    print(f"{'id':<10}{'name':<16}{'leg':<28}{'progress':>10}{'x':>9}{'y':>9}  outcome")
    for step in result.steps:
        t = step.train
        leg = f"{t.origin} -> {t.destination}"
        print(f"{t.id:<10}{t.name[:15]:<16}{leg[:27]:<28}{t.progress:>9.2f}%{t.x:>9.1f}{t.y:>9.1f}  {step.outcome.value}")


def main(argv: List[str] | None = None) -> None:  # noqa: D401
    """Main entry point for the command-line interface."""
    parser = _parse_args(argv)
    args = parser.parse_args(argv)

    cfg = SimulationConfig.from_yaml(args.config)
    logging.basicConfig(
        level=getattr(logging, str(cfg.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    LOGGER.debug("Loaded %s from %s", cfg, args.config)

    if args.cmd == "run":
        n_ticks = cfg.n_ticks if args.ticks is None else args.ticks
        every = args.every

        def on_tick(result: TickResult) -> None:
            if every > 0 and result.tick % every == 0:
                _print_states(result)

        runner = _build_runner(cfg, on_tick=on_tick)
        try:
            last = runner.run(n_ticks, realtime=args.realtime)
        except KeyboardInterrupt:
            last = None
            print("[INFO] Interrupted")
        finally:
            runner.stop()

        if last is not None and (every <= 0 or last.tick % every != 0):
            _print_states(last)
        simulated_h = runner.tick_count * cfg.simulated_seconds_per_tick / 3600.0
        print(f"Ran {runner.tick_count} ticks ({simulated_h:.2f} simulated hours), {len(runner.registry)} trains")
        for train in runner.registry:
            print(f"  {train.id} {train.name}: {runner.reversals[train.id]} reversals")

    elif args.cmd == "estimate":
        topology = cfg.topology()
        if args.track is not None:
            track = topology.track(args.track)
            if track is None:
                raise KeyError(f"Track '{args.track}' not found. Available: {[t.id for t in topology.tracks]}")
            tracks = [track]
        else:
            tracks = list(topology.tracks)

        print(f"{'track':<8}{'leg':<28}{'km':>8}{'curves':>8}{'time [h]':>11}{'flat [h]':>11}")
        for track in tracks:
            hours = estimate_travel_time_hours(track.elevation_profile, args.weight, args.speed, track.num_curves)
            flat = flat_track_time_hours(track.elevation_profile, args.speed, track.num_curves)
            leg = f"{track.from_station} - {track.to_station}"
            print(f"{track.id:<8}{leg[:27]:<28}{track.total_distance_km:>8.1f}{track.num_curves:>8d}{hours:>11.3f}{flat:>11.3f}")

    elif args.cmd == "plot":
        from .simulator.visualize import plot_network

        runner = _build_runner(cfg)
        runner.run(args.ticks)
        plot_network(
            runner.topology,
            runner.registry.snapshot(),
            save_path=args.save_path,
            title=f"Railway Network (tick {runner.tick_count})",
        )
        if args.save_path is not None:
            print(f"[INFO] Figure saved to {args.save_path.with_suffix('.png')}")
    elif args.cmd == "stations":
        topology = cfg.topology()
        print(f"{'id':<14}{'name':<16}{'x':>7}{'y':>7}  {'major':<7}neighbours")
        for station in topology.stations:
            neighbours = ", ".join(topology.neighbours(station.id)) or "-"
            major = "yes" if station.is_major else "no"
            print(f"{station.id:<14}{station.name[:15]:<16}{station.x:>7.0f}{station.y:>7.0f}  {major:<7}{neighbours}")
    else:
        raise ValueError(f"Unknown command: {args.cmd}")


if __name__ == "__main__":
    main()
