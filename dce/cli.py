"""
DCE Command Line Interface (CLI)
================================

Interactive terminal program:

    dce --json curves.json
    dce --url https://example.org/api/disaster-curves
    dce --table curves.xlsx

It loads the curve data once, then answers commands in a REPL loop. The
data source is never modified.
"""

from __future__ import annotations
import argparse, logging, shlex
from typing import Optional, Sequence

from .engine import DCE
from .hazards import CATALOG, spec_for
from .loader import CURVES_FILE, CURVES_URL, HTTP_TIMEOUT, provider_for
from .models import QueryResult

HELP = """
DCE commands
------------

1) Inspect
   hazards                          (list hazards and their sample counts)
   categories <hazard>              (example: categories flood)
   curve <hazard> <category>        (example: curve earthquake mur)
   bounds <hazard>

2) Damage lookup
   check <hazard> <intensity>       (example: check banjir 1.5)
   nearest <hazard> <intensity>     (closest curve point)
   pixel <hazard> <px> <width>      (closest point under a pointer on a chart)

3) Export
   export csv "<out.csv>"           (last damage check)
   export json "<out.json>"
   curves "<out.csv>" <hazard>      (curve table for one hazard)

4) Exit
   quit

Hazards: earthquake (gempa), flood (banjir), volcanic (gunungberapi), landslide (longsor)
"""


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Entry point for the DCE CLI.

    1) Pick a data provider from the arguments (or environment)
    2) Load the curves
    3) Start an interactive REPL
    """
    ap = argparse.ArgumentParser(prog="dce", description="Damage Curve Engine")
    src = ap.add_mutually_exclusive_group()
    src.add_argument("--json", help="Path to the curve JSON document")
    src.add_argument("--url", help="Curve API endpoint")
    src.add_argument("--table", help="Long-format CSV/XLSX with hazard, category, x, y")
    ap.add_argument("--timeout", type=float, default=HTTP_TIMEOUT, help="HTTP timeout in seconds")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    source = args.json or args.url or args.table or CURVES_URL or CURVES_FILE
    if not source:
        ap.error("no curve source: pass --json/--url/--table or set DCE_CURVES_URL / DCE_CURVES_FILE")

    print("Loading curves...")
    engine = DCE.from_provider(provider_for(source, timeout=args.timeout), source=source)
    if engine.available:
        print(f"Loaded curves from {source}. Type 'help' for commands.")
    else:
        print(f"Curve data unavailable: {engine.error}")

    while True:
        try:
            line = input("dce> ")
        except EOFError:
            break
        stripped = line.strip()
        if not stripped:
            continue
        if stripped.lower() in ("quit", "exit"):
            break
        if stripped.split()[0].lower() in ("check", "nearest", "pixel"):
            engine.command_log.append(stripped)
        try:
            handle(engine, stripped)
        except Exception as e:
            print(f"Error: {e}")


def handle(engine: DCE, line: str) -> None:
    """Handle one CLI command line."""
    parts = shlex.split(line)
    cmd = parts[0].lower()

    if cmd == "help":
        print(HELP); return

    if not engine.available:
        print(f"Curve data unavailable: {engine.error}")
        return
    store = engine.store

    if cmd == "hazards":
        for h, spec in CATALOG.items():
            print(f"{h.name.lower():<10} ({h.key}) | {spec.title} | {spec.x_axis_label} | samples={store.sample_count(h)}")
        return

    if cmd == "categories":
        spec = spec_for(parts[1])
        for c in store.categories_for(spec.hazard):
            print(f"{c:<10} {spec.label_for(c)}  ({len(store.curve_for(spec.hazard, c))} points)")
        return

    if cmd == "curve":
        spec = spec_for(parts[1]); category = parts[2]
        curve = store.curve_for(spec.hazard, category)
        if curve.is_empty:
            print(f"No data for {spec.label_for(category)}.")
            return
        print(f"{spec.title} / {spec.label_for(category)}  ({spec.x_axis_label} -> damage)")
        for s in curve:
            print(f"  {s.intensity:>10.4g}  {s.damage:.4f}")
        return

    if cmd == "bounds":
        b = engine.bounds(parts[1])
        print(f"x: [{b.x_min:g}, {b.x_max:g}]  y: [{b.y_min:g}, {b.y_max:g}]")
        return

    if cmd == "check":
        if len(parts) < 3:
            print("Usage: check <hazard> <intensity>"); return
        _print_result(engine.check(parts[1], parts[2]))
        return

    if cmd == "nearest":
        pt = engine.nearest(parts[1], float(parts[2]))
        _print_point(pt); return

    if cmd == "pixel":
        pt = engine.nearest_at_pixel(parts[1], float(parts[2]), float(parts[3]))
        _print_point(pt); return

    if cmd == "export":
        if len(parts) < 3:
            print('Usage: export csv "out.csv"  OR  export json "out.json"')
            return
        fmt, out_path = parts[1].lower(), parts[2]
        if fmt == "csv":
            engine.export_csv(out_path)
        elif fmt == "json":
            engine.export_json(out_path)
        else:
            print("Unknown export format. Use: csv or json"); return
        print(f"Exported {fmt.upper()} to {out_path}")
        return

    if cmd == "curves":
        n = engine.export_curves_csv(parts[1], parts[2])
        print(f"Wrote {n} rows to {parts[1]}")
        return

    print("Unknown command. Type 'help'.")


def _print_result(result: QueryResult) -> None:
    if not result.ok:
        print(f"Invalid intensity ({result.error}).")
        return
    spec = spec_for(result.hazard)
    print(f"{spec.title} at {result.intensity:g} ({spec.x_axis_label}):")
    for e in result.entries:
        shown = f"{e.value:.4f}" if e.found else str(e.value)
        print(f"  {e.label:<12} {shown}")


def _print_point(pt) -> None:
    if pt is None:
        print("No curve points for this hazard.")
        return
    print(f"{pt.label}: intensity={pt.x:g} damage={pt.y:.4f}")


if __name__ == "__main__":
    main()
