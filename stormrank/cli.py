"""
Command Line Interface (CLI)
============================

This file provides the interactive terminal program you run like:

    python -m stormrank.cli --csv "path/to/repdata_StormData.csv.bz2"

It loads the file once, runs the whole pipeline, and then lets you look at
the ranked tables, write charts, a DOCX report, or CSV/JSON exports.
The CLI DOES NOT modify your dataset file.
"""

from __future__ import annotations
import argparse, logging, shlex
from typing import List, Optional
from .config import DEFAULT_TOP_N, METRICS, PipelineConfig, YEAR_MAX, YEAR_MIN
from .engine import StormAnalysis
from .loader import load_storm_csv
from .report import METRIC_LABELS, format_total

HELP = """
Commands:
  help
  stats                         records kept/dropped at each stage
  top <metric> [n]              metric: fatalities | injuries | crop_damage | property_damage
  types [prefix]                event types in the working set with record counts
  rules                         the ordered canonicalization rules
  charts "<dir>"                write one bar chart per metric (PNG)
  report "<path.docx>"
  export csv "<out.csv>"
  export json "<out.json>"
  quit
"""


def __make_citation(engine: StormAnalysis):
    from .report import DatasetCitation
    import os
    p = engine.dataset_path
    fn = os.path.basename(p) if p else None
    return DatasetCitation(file_name=fn)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="stormrank", description="Rank storm event types by health and economic impact.")
    ap.add_argument("--csv", required=True, help="Path to the storm data file (.csv or .csv.bz2)")
    ap.add_argument("--year-min", type=int, default=YEAR_MIN, help=f"First year kept (default {YEAR_MIN})")
    ap.add_argument("--year-max", type=int, default=YEAR_MAX, help=f"Last year kept (default {YEAR_MAX})")
    ap.add_argument("--top", type=int, default=DEFAULT_TOP_N, help="Rows shown in charts and tables")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return ap


def main(argv: Optional[List[str]] = None):
    """Entry point for the CLI.

    1) Load dataset
    2) Run the pipeline
    3) Start an interactive REPL
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("Loading dataset...")
    records = load_storm_csv(args.csv)
    config = PipelineConfig(year_min=args.year_min, year_max=args.year_max, top_n=args.top)
    engine = StormAnalysis(records=records, config=config, dataset_path=args.csv)
    engine.run()

    print(f"Loaded {len(records)} records, {len(engine.working)} in the working set. Type 'help' for commands.")
    while True:
        try:
            line = input("stormrank> ")
        except EOFError:
            break
        if not line.strip():
            continue
        if line.strip().lower() in ("quit", "exit"):
            break
        try:
            handle(engine, line)
        except Exception as e:
            print(f"Error: {e}")


def handle(engine: StormAnalysis, line: str) -> None:
    """Handle one CLI command line."""
    parts = shlex.split(line)
    cmd = parts[0].lower()

    if cmd == "help":
        print(HELP)
        return

    if cmd == "stats":
        fs, rs, ds = engine.filter_stats, engine.rule_stats, engine.damage_stats
        print(f"Records loaded: {fs.total} | kept: {fs.kept}")
        print(f"Dropped: bad date={fs.bad_date} out of range={fs.out_of_range} "
              f"zero impact={fs.zero_impact} unknown type={fs.excluded_type}")
        print(f"Event types: {rs.distinct_before} -> {rs.distinct_after} ({len(rs.unmatched)} unmatched)")
        print(f"Invalid damage codes: property={ds.invalid_property} crop={ds.invalid_crop}")
        return

    if cmd == "top":
        if len(parts) < 2:
            raise ValueError(f"Usage: top <metric> [n]  (metric: {' | '.join(METRICS)})")
        metric = parts[1].lower()
        n = int(parts[2]) if len(parts) >= 3 else engine.config.top_n
        table = engine.summary.get(metric)
        print(f"{METRIC_LABELS[metric][0]} (top {n}):")
        for i, (k, v) in enumerate(table.top(n), start=1):
            print(f"  {i:>2}. {k:<28} {format_total(metric, v)}")
        if table.excluded:
            print(f"  ({table.excluded} records excluded: invalid value)")
        return

    if cmd == "types":
        prefix = parts[1].lower() if len(parts) >= 2 else ""
        rows = [(k, c) for k, c in engine.event_type_counts() if k.lower().startswith(prefix)]
        for k, c in rows[:50]:
            print(f"{c:>8}  {k}")
        if len(rows) > 50:
            print(f"... ({len(rows)} total, showing 50)")
        return

    if cmd == "rules":
        from .rules import rules_table
        hits = engine.rule_stats.hits if engine.rule_stats else {}
        for pos, label, pattern in rules_table():
            print(f"{pos:>2}. {label:<24} hits={hits.get(label, 0):<7} {pattern}")
        return

    if cmd == "charts":
        from .report import render_bar_charts
        out_dir = parts[1] if len(parts) >= 2 else "charts"
        charts = render_bar_charts(engine.summary, out_dir, top_n=engine.config.top_n)
        for _, path in charts:
            print(f"Wrote {path}")
        return

    if cmd == "report":
        from .report import generate_docx_report, ReportConfig
        if len(parts) < 2:
            raise ValueError('Usage: report "<path.docx>"')
        cfg = ReportConfig(citation=__make_citation(engine), top_n=engine.config.top_n)
        generate_docx_report(engine, parts[1], config=cfg)
        print(f"Report written to {parts[1]}")
        return

    if cmd == "export":
        if len(parts) < 3:
            print('Usage: export csv "out.csv"  OR  export json "out.json"')
            return
        fmt, out_path = parts[1].lower(), parts[2]
        if fmt == "csv":
            engine.export_csv(out_path)
            print(f"Exported CSV to {out_path}")
            return
        if fmt == "json":
            engine.export_json(out_path)
            print(f"Exported JSON to {out_path}")
            return
        print("Unknown export format. Use: csv or json")
        return

    print("Unknown command. Type 'help'.")


if __name__ == "__main__":
    main()
