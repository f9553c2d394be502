"""
Command-line interface for gesturematch.

Provides commands for matching a drawn figure, listing the built-in
templates, and writing a default configuration.
"""

import argparse
import sys

from gesturematch.config import load_config, save_default_config
from gesturematch.errors import GeometryError
from gesturematch.tracer import configure_from, configure_tracer, get_tracer


def main(argv=None):
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="gesturematch: recognize hand-drawn 3D symbols against built-in templates",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Match command
    match_parser = subparsers.add_parser("match", help="Match a drawn figure against the templates")
    match_parser.add_argument(
        "--figure", "-f",
        required=True,
        help="Drawn figure JSON file",
    )
    match_parser.add_argument(
        "--out", "-o",
        default=None,
        help="Path to write the match result JSON",
    )
    match_parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to YAML configuration file",
    )
    match_parser.add_argument(
        "--trace",
        action="store_true",
        help="Enable runtime tracing",
    )
    match_parser.add_argument(
        "--trace-level",
        default="INFO",
        choices=["ERROR", "WARN", "INFO", "DEBUG"],
        help="Trace log level",
    )
    match_parser.add_argument(
        "--trace-file",
        default=None,
        help="Path to write trace logs",
    )
    match_parser.add_argument(
        "--trace-json",
        action="store_true",
        help="Enable JSON trace output",
    )

    # Templates command
    subparsers.add_parser("templates", help="List the built-in templates")

    # Init config command
    init_parser = subparsers.add_parser("init-config", help="Create default config file")
    init_parser.add_argument(
        "--out", "-o",
        default="gesturematch_config.yaml",
        help="Output path for config file",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "match":
        return handle_match(args)
    elif args.command == "templates":
        return handle_templates(args)
    elif args.command == "init-config":
        return handle_init_config(args)

    return 0


def handle_match(args):
    """Handle the match command."""
    config = load_config(args.config)

    if args.trace:
        configure_tracer(
            enabled=True,
            level=args.trace_level,
            file_path=args.trace_file,
            json_output=args.trace_json,
        )
    else:
        configure_from(config.tracing)

    tracer = get_tracer()

    try:
        from gesturematch.io.figure_io import load_figure, result_to_dict, save_json
        from gesturematch.matching.matcher import match_against_templates

        with tracer.span("cli_match", module="cli"):
            figure = load_figure(args.figure, config=config.curves)
            result = match_against_templates(
                figure.segments, figure.arcs, figure.circles, config=config,
            )

            if args.out:
                save_json(result_to_dict(result, config=config.curves), args.out)

    except (OSError, ValueError, GeometryError) as e:
        tracer.event(f"Match failed: {str(e)}", level="ERROR")
        print(f"\nError: {str(e)}", file=sys.stderr)
        return 1

    if result.template is None:
        print("No template could be matched against this figure.")
        return 0

    verdict = "accepted" if result.accepted else "rejected"
    print(f"Best match: {result.template.name} ({verdict})")
    print(f"  score: {result.score:.3f}")
    print(f"  raw score: {result.raw_score:.3f} (min {result.template.min_score:g})")
    print(f"  rmsd: {result.rmsd:.6f}")
    centroid = ", ".join(f"{c:.3f}" for c in result.centroid)
    print(f"  centroid: ({centroid})")
    if args.out:
        print(f"\nResult saved to: {args.out}")

    return 0


def handle_templates(args):
    """Handle the templates command."""
    from gesturematch.templates.library import get_template_library

    for template in get_template_library():
        print(
            f"{template.name:<16} {template.family.value:<12} "
            f"segments={template.segment_count} arcs={template.arc_count} "
            f"circles={template.circle_count} min_score={template.min_score:g}  "
            f"{template.description}"
        )
    return 0


def handle_init_config(args):
    """Handle the init-config command."""
    save_default_config(args.out)
    print(f"Default configuration saved to: {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
