"""Replay a saved game log through a fresh reducer and export the events as CSV.

Contract
- Inputs: a log file written by the game (whole file, read once).
- Outputs: one CSV row per event, in emission order, with the flattened
  stream fields as columns (player lists stay JSON-encoded).
- Unresolved identities are printed to stderr, not exported.

Usage:
    uv run python scripts/replay_log.py path/to/output_log.txt events.csv
    uv run python scripts/replay_log.py Player.log events.csv --turn-one-policy first_turn_start

This script is deterministic.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import pandas as pd

from hearthwatch.core.events import event_to_fields
from hearthwatch.core.models import TurnOnePolicy
from hearthwatch.platform_defaults import default_line_break
from hearthwatch.reducer import ReducerConfig, SessionReducer


def replay(path: Path, *, config: ReducerConfig) -> pd.DataFrame:
    reducer = SessionReducer(config)
    result = reducer.feed(path.read_bytes())

    for u in result.unresolved:
        print(f"unresolved {u.context}: {u.entity_name!r} in {u.line!r}", file=sys.stderr)

    rows = [{"seq": i, **event_to_fields(e)} for i, e in enumerate(result.events)]
    return pd.DataFrame(rows, columns=None if rows else ["seq", "type"])


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("log_file", type=Path)
    parser.add_argument("out_csv", type=Path)
    parser.add_argument(
        "--turn-one-policy",
        choices=[p.value for p in TurnOnePolicy],
        default=TurnOnePolicy.mulligan_wait.value,
    )
    parser.add_argument("--line-break", default=None, help="defaults to the host line ending")
    args = parser.parse_args(argv)

    config = ReducerConfig(
        line_break=args.line_break or default_line_break(),
        turn_one_policy=TurnOnePolicy(args.turn_one_policy),
    )
    df = replay(args.log_file, config=config)
    df.to_csv(args.out_csv, index=False)
    print(f"wrote {len(df)} events to {args.out_csv}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
