"""Command line entry point: obtain a slow query trace from the hosted service.

Finds a query log line for a deployment in Loki, re-runs that query against
graph-node with tracing turned on, and prints where the time went.
"""

import argparse
import logging
import sys
from typing import List, Optional, TextIO

from dotenv import load_dotenv, find_dotenv

from . import __version__
from .aggregate import summarize
from .config import Config, default_config_path
from .errors import QtraceError
from .graph_node import GraphNodeClient
from .loki import LokiClient
from .output import save_output, save_query, save_trace
from .parser import parse_trace
from .render import render_report

load_dotenv(find_dotenv(usecwd=True), override=False)

logger = logging.getLogger(__name__)


def non_negative_int(value: str) -> int:
    """argparse type for millisecond thresholds"""
    try:
        number = int(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid int value: '{value}'") from e
    if number < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="qtrace",
        description="Obtain slow query traces from the hosted service",
    )
    parser.add_argument(
        "-c", "--config",
        default=default_config_path(),
        help="The config file to use (default: $QTRACE_CONFIG or config.toml)")
    parser.add_argument(
        "-q", "--qid",
        default=None,
        help="The query_id to trace")
    parser.add_argument(
        "-m", "--min-time",
        type=non_negative_int,
        default=None,
        help="Only consider queries that took longer than this many milliseconds")
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print some more information")
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Do not print the timing report")
    parser.add_argument(
        "-d", "--data",
        default=None,
        help="Save the query result in this file")
    parser.add_argument(
        "-t", "--trace",
        default=None,
        help="Save the query trace in this file")
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}")
    parser.add_argument(
        "deployment",
        help="The IPFS hash of the deployment")
    return parser


def run(args: argparse.Namespace, out: Optional[TextIO] = None) -> None:
    """Fetch, save, parse and print one trace.

    Raises
    ------
    QtraceError
        On any failure along the way; nothing is retried.
    """
    config = Config.load(args.config)

    logger.info("Querying Loki for query log entry")
    log_entry = LokiClient(config.loki).query(args.deployment, args.qid, args.min_time)
    save_query(config, log_entry)

    logger.info("Querying graph-node for query trace")
    response = GraphNodeClient(config.graph_node).query(args.deployment, log_entry)
    save_output(config, response, args.data)

    raw_trace = response.get("trace")
    save_trace(config, raw_trace, args.trace)

    trace = parse_trace(raw_trace)
    summary = summarize(trace)
    if summary.inconsistent:
        logger.warning(
            f"Inconsistent trace: sub-queries took {summary.query_ms}ms "
            f"but the query only took {summary.total_ms}ms; reporting 0ms other time"
        )

    if not args.quiet:
        for line in render_report(trace, args.deployment):
            print(line, file=out)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(message)s",
    )

    try:
        run(args)
    except QtraceError as e:
        logger.error(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
