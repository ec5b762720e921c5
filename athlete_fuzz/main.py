"""
Athlete Endpoint Fuzzing Framework

Generates every combination of athlete profile inputs, POSTs each one to the
nutrition endpoint named by BASE_URL and reports pass/fail and latency:
- sequential mode: one request in flight at a time
- parallel mode: one worker process per chunk of the input matrix
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from athlete_fuzz.config import Config, ConfigurationError
from athlete_fuzz.fuzz_generator import MatrixGenerator
from athlete_fuzz.fuzzer import AthleteFuzzer
from athlete_fuzz.parallel import ParallelRunner
from athlete_fuzz.utils import ResultAnalyzer

logger = logging.getLogger(__name__)

EXIT_PASS = 0
EXIT_FAILURES = 1
EXIT_CONFIG_ERROR = 2


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments"""
    parser = argparse.ArgumentParser(
        description="POST the full athlete input matrix to an endpoint and report the results."
    )
    parser.add_argument("--config", help="Path to a JSON config file")
    parser.add_argument("--base-url", help="Target endpoint, overrides BASE_URL")
    parser.add_argument("--timeout", type=float, help="Per-request timeout in seconds")
    parser.add_argument("--parallel", action="store_true", default=None,
                        help="Run chunks of the matrix in separate worker processes")
    parser.add_argument("--workers", type=int, help="Number of worker processes (default: CPU count)")
    parser.add_argument("--log-file", help="Per-case log file, truncated at the start of a run")
    parser.add_argument("--output-dir", help="Directory for JSON results and saved reports")
    parser.add_argument("--save-json", action="store_true", default=None,
                        help="Save raw results and the report to the output directory")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> Config:
    """Load the config file and environment, then apply CLI overrides"""
    config = Config(args.config)
    if args.base_url is not None:
        config.endpoint.base_url = args.base_url
    if args.timeout is not None:
        config.endpoint.timeout_seconds = args.timeout
    if args.parallel is not None:
        config.run.parallel = args.parallel
    if args.workers is not None:
        config.run.workers = args.workers
    if args.log_file is not None:
        config.run.log_file = args.log_file
    if args.output_dir is not None:
        config.run.output_dir = args.output_dir
    if args.save_json is not None:
        config.run.save_json = args.save_json
    return config


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    logging.basicConfig(level=logging.INFO)
    args = parse_args(argv)

    try:
        config = build_config(args)
        config.validate()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_CONFIG_ERROR

    test_cases = MatrixGenerator().generate_test_cases()
    logger.info(f"Generated {len(test_cases)} test cases")

    if config.run.parallel:
        outcome = ParallelRunner(config).run(test_cases)
        report = ResultAnalyzer(config.run.output_dir).generate_report(
            outcome.summary, title="Combined Worker Report"
        )
        print(report)
        if outcome.crashed_workers:
            logger.error(f"Workers without results: {outcome.crashed_workers}")
        return EXIT_PASS if outcome.ok else EXIT_FAILURES

    summary = asyncio.run(AthleteFuzzer(config).run(test_cases))
    return EXIT_PASS if summary.failure_count == 0 else EXIT_FAILURES


def cli():
    sys.exit(main())


if __name__ == "__main__":
    cli()
