"""Command line entry point for running discovery on a CSV file.

Usage:
    causal-robustness observations.csv
    causal-robustness observations.csv --variables a,b,c --seed 7
    causal-robustness observations.csv --output result.json
"""

import argparse
import json
import sys
from pathlib import Path

import pandas as pd

from causal_robustness.config import get_settings
from causal_robustness.logging_config.structured import get_logger, setup_logging
from causal_robustness.robustness import (
    CausalRobustnessEngine,
    CausalRobustnessError,
    EngineState,
)

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Discover robust pairwise causal edges in time-ordered observations"
    )
    parser.add_argument("path", type=Path, help="CSV file with one observation per row")
    parser.add_argument(
        "--variables",
        type=str,
        help="Comma-separated variables to analyze (default: all numeric columns)",
    )
    parser.add_argument("--alpha", type=float, help="EWMA smoothing factor in (0, 1]")
    parser.add_argument("--sample-size", type=int, help="Bootstrap resample size")
    parser.add_argument("--num-samples", type=int, help="Number of bootstrap resamples")
    parser.add_argument(
        "--confidence-level", type=float, help="Bootstrap confidence level, e.g. 0.95"
    )
    parser.add_argument("--seed", type=int, help="Random seed for resampling")
    parser.add_argument(
        "--output",
        type=Path,
        help="Write the JSON result here instead of stdout",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()

    try:
        df = pd.read_csv(args.path)
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        print(f"Error: cannot read {args.path}: {e}", file=sys.stderr)
        return 1

    if args.variables:
        variables = [v.strip() for v in args.variables.split(",") if v.strip()]
    else:
        variables = df.select_dtypes(include="number").columns.tolist()

    bootstrap_changes = {
        key: value
        for key, value in {
            "sample_size": args.sample_size,
            "num_samples": args.num_samples,
            "confidence_level": args.confidence_level,
            "random_seed": args.seed,
        }.items()
        if value is not None
    }

    try:
        engine = CausalRobustnessEngine(state=EngineState(), settings=get_settings())
        if bootstrap_changes:
            engine.update_bootstrap_config(**bootstrap_changes)
        if args.alpha is not None:
            for variable in variables:
                engine.add_filter(variable, args.alpha)
        result = engine.discover_causal_relationships(df, variables)
    except CausalRobustnessError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    payload = json.dumps(result.to_dict(), indent=2, default=str)
    if args.output:
        args.output.write_text(payload)
        logger.info("result_written", path=str(args.output))
    else:
        print(payload)
    return 0


if __name__ == "__main__":
    sys.exit(main())
