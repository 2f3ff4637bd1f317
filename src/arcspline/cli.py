"""
Command-line interface for ArcSpline.

Commands:
    fit          fit every stroke of a stroke file, write splines.json and final.svg
    inspect      print a per-spline summary of a splines.json document
    init-config  write the default configuration as YAML
"""

import argparse
import sys

from arcspline.tracer import configure_tracer, get_tracer


def build_parser():
    trace_options = argparse.ArgumentParser(add_help=False)
    trace_group = trace_options.add_argument_group("tracing")
    trace_group.add_argument("--trace", action="store_true", default=None,
                             help="Enable runtime tracing (default from config)")
    trace_group.add_argument("--trace-level", default=None,
                             choices=["ERROR", "WARN", "INFO", "DEBUG"],
                             help="Trace log level (default from config)")
    trace_group.add_argument("--trace-file", default=None, help="Also write trace lines to this file")
    trace_group.add_argument("--trace-json", action="store_true", help="Write trace lines as JSON")

    parser = argparse.ArgumentParser(
        prog="arcspline",
        description="ArcSpline: Fit freeform strokes with arcs and segments",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    fit_parser = subparsers.add_parser("fit", parents=[trace_options],
                                       help="Fit splines to a stroke file")
    fit_parser.add_argument("--lines", "-l", required=True, help="Stroke file to fit")
    fit_parser.add_argument("--out", "-o", required=True, help="Output directory")
    fit_parser.add_argument("--config", "-c", default=None, help="Path to YAML configuration file")
    fit_parser.add_argument("--show-source", action="store_true",
                            help="Draw the source strokes underneath the splines")

    inspect_parser = subparsers.add_parser("inspect", help="Summarize a splines.json document")
    inspect_parser.add_argument("document", help="Path to splines.json")

    init_parser = subparsers.add_parser("init-config", help="Create default config file")
    init_parser.add_argument("--out", "-o", default="arcspline_config.yaml",
                             help="Output path for config file")

    return parser


def main(argv=None):
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "fit":
        return handle_fit(args)
    if args.command == "inspect":
        return handle_inspect(args)
    if args.command == "init-config":
        return handle_init_config(args)

    parser.print_help()
    return 0


def handle_fit(args):
    from arcspline.config import load_config
    from arcspline.pipeline import run_pipeline

    try:
        config = load_config(args.config)
    except (OSError, ValueError) as e:
        print(f"\nError: {str(e)}", file=sys.stderr)
        return 1

    configure_tracer(
        enabled=config.tracing.enabled if args.trace is None else args.trace,
        level=args.trace_level or config.tracing.level,
        file_path=args.trace_file or config.tracing.file_path,
        json_output=args.trace_json or config.tracing.json_output,
    )
    tracer = get_tracer()

    try:
        with tracer.span("cli_fit", module="cli"):
            document = run_pipeline(
                lines_path=args.lines,
                out_dir=args.out,
                config=config,
                show_source=args.show_source,
            )
    except (OSError, ValueError) as e:
        tracer.event(f"Fitting failed: {str(e)}", level="ERROR")
        print(f"\nError: {str(e)}", file=sys.stderr)
        return 1
    finally:
        tracer.config.close()

    print("\nFitting completed successfully.")
    print(f"  Splines: {len(document.splines)}")
    print(f"  Arcs: {sum(r.arc_count for r in document.splines)}")
    print(f"  Segments: {sum(r.segment_count for r in document.splines)}")
    print(f"  Corners: {sum(len(r.corners) for r in document.splines)}")
    if tracer.counts["WARN"]:
        print(f"  Warnings: {tracer.counts['WARN']}")
    print(f"\nOutputs saved to: {args.out}/")
    print("  - splines.json")
    print("  - final.svg")
    return 0


def handle_inspect(args):
    from arcspline.io.save_artifacts import load_json_model
    from arcspline.models import SplineDocument

    # pydantic's ValidationError is a ValueError
    try:
        document = load_json_model(args.document, SplineDocument)
    except (OSError, ValueError) as e:
        print(f"\nError: {str(e)}", file=sys.stderr)
        return 1

    print(f"{document.doc_id}  source={document.source_path}  splines={len(document.splines)}")
    for record in document.splines:
        print(f"  {record.spline_id}  length={record.length:.1f}  h={record.half_smoothing_spread:g}  "
              f"arcs={record.arc_count}  segments={record.segment_count}  corners={len(record.corners)}")
    return 0


def handle_init_config(args):
    from arcspline.config import save_default_config

    save_default_config(args.out)
    print(f"Default configuration saved to: {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
