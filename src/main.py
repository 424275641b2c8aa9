#!/usr/bin/env python3
"""
Three-Phase Power Analyzer
Computes deterministic power-system metrics and merges an optional Gemini analysis
"""

import argparse
import json
import logging
import sys

from assistant import PROCESSING_MODES, AnalysisError, GeminiClient
from config import LOGGING_CONFIG
from power_analytics import (
    EXAMPLES,
    WaveformBatch,
    build_baseline,
    create_example,
    merge_results,
    plot_three_phase_waveforms,
    validate_payload,
)

logger = logging.getLogger(__name__)


def setup_logging(debug=False):
    """Configure the root logger for command-line use"""
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if debug else LOGGING_CONFIG["level"])

    if not root_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOGGING_CONFIG["format"]))
        root_logger.addHandler(handler)


def load_json(path):
    """Read a JSON document from a file ('-' for stdin)"""
    if path == "-":
        return json.load(sys.stdin)
    with open(path) as f:
        return json.load(f)


def request_external_analysis(batch, mode):
    """Ask Gemini for an analysis; None when it is unavailable"""
    try:
        return GeminiClient().analyze(batch, mode)
    except AnalysisError as e:
        logger.error("External analysis unavailable, using baseline only: %s", e)
        return None


def list_examples():
    """List the built-in example datasets"""
    print("Available example datasets:")
    for name, description in EXAMPLES.items():
        print(f"  {name}: {description}")


def main(argv=None):
    """Main entry point with command-line interface"""
    parser = argparse.ArgumentParser(
        description="Three-Phase Power Analyzer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --example balanced
  %(prog)s --input data.json --output results.json
  %(prog)s --input data.json --ai --mode power_quality
  %(prog)s --input data.json --external gemini.json
  %(prog)s --input data.json --validate-only
        """,
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument("--input", metavar="FILE", help="JSON waveform batch ('-' for stdin)")
    source.add_argument("--example", choices=sorted(EXAMPLES), help="Use an example dataset")
    source.add_argument(
        "--list-examples", action="store_true", help="List example datasets"
    )

    parser.add_argument(
        "--mode",
        default="waveform",
        choices=list(PROCESSING_MODES),
        help="Processing mode for the AI analysis (default: waveform)",
    )
    parser.add_argument(
        "--ai", action="store_true", help="Request a Gemini analysis (needs GEMINI_API_KEY)"
    )
    parser.add_argument(
        "--external", metavar="FILE", help="Merge a saved external analysis JSON"
    )
    parser.add_argument("--output", metavar="FILE", help="Write merged results to FILE")
    parser.add_argument("--plot", action="store_true", help="Show waveform plots")
    parser.add_argument(
        "--validate-only", action="store_true", help="Only validate the input batch"
    )
    parser.add_argument("--debug", action="store_true", help="Enable DEBUG logging")

    args = parser.parse_args(argv)
    setup_logging(args.debug)

    if args.list_examples:
        list_examples()
        return 0

    if args.example:
        batch = create_example(args.example)
    elif args.input:
        try:
            payload = load_json(args.input)
        except (OSError, json.JSONDecodeError) as e:
            print(f"Failed to read input: {e}", file=sys.stderr)
            return 1

        errors = validate_payload(payload)
        if errors:
            print("Invalid data:", file=sys.stderr)
            for error in errors:
                print(f"  - {error}", file=sys.stderr)
            return 1
        batch = WaveformBatch.from_dict(payload)
    else:
        parser.error("one of --input, --example or --list-examples is required")

    if args.validate_only:
        print(f"Valid batch: {batch.num_samples} samples at {batch.sampling_rate_hz:g} Hz")
        return 0

    external = None
    if args.external:
        try:
            external = load_json(args.external)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Ignoring external analysis %s: %s", args.external, e)
    if args.ai:
        ai_result = request_external_analysis(batch, args.mode)
        if ai_result is not None:
            external = ai_result

    baseline = build_baseline(batch)
    results = merge_results(baseline, external)

    text = json.dumps(results, indent=2)
    if args.output:
        with open(args.output, "w") as f:
            f.write(text + "\n")
        print(f"Results written to {args.output}")
    else:
        print(text)

    if args.plot:
        plot_three_phase_waveforms(
            batch, p_total=baseline["power_analysis"]["active_power"]["total"], show=True
        )

    return 0


if __name__ == "__main__":
    sys.exit(main())
