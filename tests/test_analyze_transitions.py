#!/usr/bin/env python3
"""
Transition Log Analysis Tests.

Run all tests:
    pytest tests/test_analyze_transitions.py -v
"""

import json
import sys
from pathlib import Path

import pytest

# Add project root and tools to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))
sys.path.insert(0, str(PROJECT_ROOT / "tools"))

from analyze_transitions import load_transitions, compute_stats, generate_graphs


def _write_log(path, rows):
    with open(path, "w") as f:
        for seconds, old, new, interrupted in rows:
            f.write(json.dumps({
                "timestamp": f"2024-01-01T00:00:{seconds:06.3f}+00:00",
                "tick": int(seconds * 60),
                "from_state": old,
                "to_state": new,
                "is_tracking": new != "hidden",
                "in_melee": new in ("in", "behind"),
                "is_behind": new == "behind",
                "interrupted": interrupted,
            }) + "\n")
        f.write("not json\n")


@pytest.fixture
def transition_log(tmp_path):
    path = tmp_path / "telemetry.jsonl"
    _write_log(path, [
        (0.0, "hidden", "out", False),
        (2.0, "out", "in", False),
        (3.0, "in", "behind", False),
        (3.1, "behind", "in", True),
        (5.0, "in", "hidden", False),
    ])
    return path


class TestTransitionAnalysis:
    """Test loading and summarizing transition logs."""

    def test_invalid_lines_skipped(self, transition_log):
        df = load_transitions(transition_log)
        assert len(df) == 5

    def test_empty_log_rejected(self, tmp_path):
        path = tmp_path / "empty.jsonl"
        path.write_text("\n")

        with pytest.raises(ValueError):
            load_transitions(path)

    def test_stats(self, transition_log):
        stats = compute_stats(load_transitions(transition_log))

        assert stats.total_transitions == 5
        assert stats.duration_seconds == pytest.approx(5.0)
        assert stats.sessions == 1
        assert stats.interrupted == 1
        assert stats.entries["in"] == 2
        assert stats.dwell_seconds["out"] == pytest.approx(2.0)
        assert stats.dwell_seconds["in"] == pytest.approx(1.0 + 1.9)
        assert stats.dwell_seconds["behind"] == pytest.approx(0.1)

    def test_graphs_written(self, transition_log, tmp_path):
        df = load_transitions(transition_log)
        files = generate_graphs(df, compute_stats(df), tmp_path / "reports")

        assert [f.name for f in files] == ["state_timeline.png", "dwell_time.png"]
        assert all(f.exists() for f in files)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
