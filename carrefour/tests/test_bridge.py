from __future__ import annotations

import json

from carrefour.bridge import main, run


def write(path, doc):
    path.write_text(json.dumps(doc))
    return str(path)


def test_run_until_every_vehicle_crossed(tmp_path):
    src = write(tmp_path / "in.json", {"config": {
        "vehicle_count_per_approach": 2,
        "spawn_interval_ms": 0,
        "tick_interval_ms": 30,
        "crossing_duration_ms": 5,
    }})
    out = tmp_path / "out.json"

    run(src, str(out))

    result = json.loads(out.read_text())
    assert result["errors"] == []
    stats = result["snapshot"]["statistics"]
    assert stats["crossed_A"] == stats["crossed_B"] == 2
    assert result["snapshot"]["running"] is False


def test_duration_bounds_the_run(tmp_path):
    src = write(tmp_path / "in.json", {
        "config": {"vehicle_count_per_approach": 100, "spawn_interval_ms": 50, "tick_interval_ms": 2000},
        "durationMs": 100,
    })
    out = tmp_path / "out.json"

    result = run(src, str(out))

    stats = result["snapshot"]["statistics"]
    assert stats["spawned_A"] < 100
    assert stats["crossed_B"] == 0


def test_main_usage_error(capsys):
    assert main([]) == 1
    assert "Usage" in capsys.readouterr().err


def test_main_invalid_config(tmp_path, capsys):
    src = write(tmp_path / "in.json", {"config": {"tick_interval_ms": -1}})
    assert main([src, str(tmp_path / "out.json")]) == 1
    assert "Simulator error" in capsys.readouterr().err
