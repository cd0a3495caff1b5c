from pathlib import Path

import pytest

from railnet_sim.config import SimulationConfig

CFG_DIR = Path(__file__).resolve().parent.parent / "cfgs"


def test_base_config_builds_reference_network():
    cfg = SimulationConfig.from_yaml(CFG_DIR / "base.yaml")
    topology = cfg.topology()
    assert len(topology.stations) == 10
    assert [t.id for t in topology.tracks] == [f"t{i}" for i in range(1, 11)]
    assert topology.track_between("davanagere", "bangalore").num_curves == 8
    assert cfg.simulated_seconds_per_tick == pytest.approx(100.0)
    assert len(cfg.initial_requests()) == 3


def test_yaml_round_trip(tmp_path):
    cfg = SimulationConfig.from_yaml(CFG_DIR / "debug.yaml")
    out = tmp_path / "copy.yaml"
    cfg.to_yaml(out)
    again = SimulationConfig.from_yaml(out)
    assert again == cfg
    assert again.tracks[0]["elevation_profile"][1] == {"distance_km": 10, "elevation_m": 140}


def test_string_numbers_are_coerced():
    cfg = SimulationConfig(tick_interval_s="0.5", time_scale="1e3", n_ticks="10")
    assert (cfg.tick_interval_s, cfg.time_scale, cfg.n_ticks) == (0.5, 1000.0, 10)


@pytest.mark.parametrize("kwargs", [{"tick_interval_s": 0}, {"time_scale": -1}, {"n_ticks": -3}])
def test_invalid_timing_rejected(kwargs):
    with pytest.raises(ValueError):
        SimulationConfig(**kwargs)
