#!/usr/bin/env python3
"""
Transition Log Analysis Tool for Position Indicator

Analyzes telemetry.jsonl transition logs and reports how long the indicator
spent in each state, how often fades were interrupted, and plots the state
timeline as PNG files.

Usage:
    python tools/analyze_transitions.py [telemetry_file] [--output-dir DIR]

Examples:
    python tools/analyze_transitions.py telemetry.jsonl
    python tools/analyze_transitions.py telemetry.jsonl --output-dir reports/
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Dict
from dataclasses import dataclass, field

import numpy as np
import pandas as pd
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import matplotlib.dates as mdates


# Plot order, bottom to top
STATE_ORDER = ["hidden", "out", "in", "behind"]

STATE_LABELS = {
    "hidden": "Hidden",
    "out": "Out of range",
    "in": "In range (front)",
    "behind": "In range (behind)",
}

STATE_COLORS = {
    "hidden": "#888888",
    "out": "#dc3c3c",
    "in": "#ffc800",
    "behind": "#3cb43c",
}


@dataclass
class TransitionStats:
    """Statistics computed from a transition log."""
    total_transitions: int = 0
    duration_seconds: float = 0.0

    interrupted: int = 0
    interrupted_ratio: float = 0.0

    # Transitions into each state
    entries: Dict[str, int] = field(default_factory=dict)

    # Seconds spent in each state between the first and last record
    dwell_seconds: Dict[str, float] = field(default_factory=dict)

    # Tracking sessions (transitions out of hidden)
    sessions: int = 0


def load_transitions(filepath: Path) -> pd.DataFrame:
    """Load a transition JSONL file into a DataFrame."""
    records = []

    with open(filepath, 'r') as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue
            try:
                records.append(json.loads(line))
            except json.JSONDecodeError as e:
                print(f"Warning: Skipping invalid JSON at line {line_num}: {e}")
                continue

    if not records:
        raise ValueError(f"No valid transition records found in {filepath}")

    df = pd.DataFrame(records)

    if 'timestamp' in df.columns:
        df['timestamp'] = pd.to_datetime(df['timestamp'])
        df = df.sort_values('timestamp', kind='stable').reset_index(drop=True)

    print(f"Loaded {len(df)} transition records from {filepath}")
    return df


def compute_stats(df: pd.DataFrame) -> TransitionStats:
    """Compute statistics from a transition DataFrame."""
    stats = TransitionStats()
    stats.total_transitions = len(df)

    if 'timestamp' in df.columns and len(df) > 1:
        stats.duration_seconds = (df['timestamp'].iloc[-1] - df['timestamp'].iloc[0]).total_seconds()

    if 'interrupted' in df.columns:
        stats.interrupted = int(df['interrupted'].sum())
        stats.interrupted_ratio = stats.interrupted / len(df)

    if 'to_state' in df.columns:
        counts = df['to_state'].value_counts().to_dict()
        stats.entries = {str(k): int(v) for k, v in counts.items()}

    if 'from_state' in df.columns:
        stats.sessions = int((df['from_state'] == 'hidden').sum())

    # Each record's state lasts until the next record
    if 'timestamp' in df.columns and 'to_state' in df.columns and len(df) > 1:
        held = df['timestamp'].shift(-1) - df['timestamp']
        dwell = held.dt.total_seconds().groupby(df['to_state']).sum()
        stats.dwell_seconds = {str(k): float(v) for k, v in dwell.items()}

    return stats


def print_stats(stats: TransitionStats) -> None:
    """Print statistics to console."""
    print("\n" + "=" * 60)
    print("TRANSITION ANALYSIS REPORT")
    print("=" * 60)

    print(f"\nTransitions:     {stats.total_transitions}")
    print(f"Duration:        {stats.duration_seconds:.1f} s")
    print(f"Sessions:        {stats.sessions}")
    print(f"Interrupted:     {stats.interrupted} ({stats.interrupted_ratio * 100:.1f}%)")

    print("\nState            Entries   Dwell (s)")
    print("-" * 40)
    for state in STATE_ORDER:
        entries = stats.entries.get(state, 0)
        dwell = stats.dwell_seconds.get(state, 0.0)
        print(f"{STATE_LABELS[state]:<17}{entries:>7}   {dwell:>9.2f}")

    print("=" * 60)


def generate_graphs(df: pd.DataFrame, stats: TransitionStats, output_dir: Path) -> List[Path]:
    """Generate analysis graphs and save as PNG files."""
    output_dir.mkdir(parents=True, exist_ok=True)
    generated_files = []

    # 1. State timeline
    if 'timestamp' in df.columns and 'to_state' in df.columns:
        levels = df['to_state'].map({s: i for i, s in enumerate(STATE_ORDER)})

        fig, ax = plt.subplots(figsize=(12, 4))
        ax.step(df['timestamp'], levels, where='post', linewidth=1.5)
        if 'interrupted' in df.columns:
            interrupted = df[df['interrupted'].astype(bool)]
        else:
            interrupted = df.iloc[0:0]
        if len(interrupted) > 0:
            ax.scatter(
                interrupted['timestamp'],
                levels[interrupted.index],
                color='red', marker='x', zorder=3, label='Interrupted fade',
            )
            ax.legend(loc='upper right')
        ax.set_yticks(range(len(STATE_ORDER)))
        ax.set_yticklabels([STATE_LABELS[s] for s in STATE_ORDER])
        ax.set_xlabel('Time')
        ax.set_title('Indicator State Timeline')
        ax.xaxis.set_major_formatter(mdates.DateFormatter('%H:%M:%S'))
        plt.xticks(rotation=45)
        plt.tight_layout()

        filepath = output_dir / 'state_timeline.png'
        plt.savefig(filepath, dpi=150)
        plt.close()
        generated_files.append(filepath)
        print(f"  ✓ {filepath.name}")

    # 2. Dwell time per state
    if stats.dwell_seconds:
        states = [s for s in STATE_ORDER if s in stats.dwell_seconds]
        values = np.array([stats.dwell_seconds[s] for s in states])

        fig, ax = plt.subplots(figsize=(8, 5))
        ax.bar(
            [STATE_LABELS[s] for s in states],
            values,
            color=[STATE_COLORS[s] for s in states],
            edgecolor='black',
        )
        ax.set_ylabel('Seconds')
        ax.set_title('Time Spent per State')
        plt.tight_layout()

        filepath = output_dir / 'dwell_time.png'
        plt.savefig(filepath, dpi=150)
        plt.close()
        generated_files.append(filepath)
        print(f"  ✓ {filepath.name}")

    return generated_files


def main():
    parser = argparse.ArgumentParser(
        description='Analyze Position Indicator transition logs',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python tools/analyze_transitions.py telemetry.jsonl
    python tools/analyze_transitions.py telemetry.jsonl --output-dir reports/
        """
    )
    parser.add_argument('telemetry_file', type=str, nargs='?', default='telemetry.jsonl',
                        help='Path to transition JSONL file (default: telemetry.jsonl)')
    parser.add_argument('-o', '--output-dir', type=str, default='telemetry_reports',
                        help='Output directory for graphs (default: telemetry_reports)')
    parser.add_argument('--no-graphs', action='store_true',
                        help='Skip graph generation, print stats only')

    args = parser.parse_args()

    telemetry_path = Path(args.telemetry_file)
    output_dir = Path(args.output_dir)

    if not telemetry_path.exists():
        print(f"Error: Telemetry file not found: {telemetry_path}")
        sys.exit(1)

    print(f"\nLoading transitions from: {telemetry_path}")

    try:
        df = load_transitions(telemetry_path)
        stats = compute_stats(df)
        print_stats(stats)

        if not args.no_graphs:
            print(f"\nGenerating graphs in: {output_dir}/")
            generated_files = generate_graphs(df, stats, output_dir)
            print(f"\nGenerated {len(generated_files)} graph(s)")
            print(f"   Output directory: {output_dir.absolute()}")

    except (OSError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
