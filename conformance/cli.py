"""
Command line entry point.

    conformance [-t TRACE | -d DIR] [-v] [--host-command CMD] MANIFEST
"""

import argparse
import shlex
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from .framework.config import HarnessConfig
from .framework.errors import HarnessError
from .framework.host.stdio import StdioHost
from .framework.logging_config import setup_logging
from .framework.manifest import validate_manifest
from .framework.runner import SuiteResult, run_traces
from .framework.traces.parser import discover_traces


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="conformance",
        description="Replay command traces against an extension host and check the responses",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument("-t", "--trace", type=Path, help="path to a single trace file")
    source.add_argument("-d", "--dir", type=Path, help="directory of trace files (default ./traces)")
    parser.add_argument("manifest_path", type=Path, help="path to the extension manifest")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="stream extension output (-v) or all harness logs (-vv)")
    parser.add_argument("--host-command",
                        help="command that starts the extension host; the manifest path is appended "
                             "(default: $CONFORMANCE_HOST_COMMAND)")
    parser.add_argument("--poll-interval", type=float, help="seconds between host readiness checks")
    parser.add_argument("--ready-timeout", type=float,
                        help="give up if the host is not ready after this many seconds (default: wait forever)")
    parser.add_argument("--keep-going", action="store_true",
                        help="run every trace even after one fails")
    return parser


def config_from_args(args: argparse.Namespace, environ=None) -> HarnessConfig:
    config = HarnessConfig.from_env(environ)
    config.verbose = args.verbose
    if args.dir is not None:
        config.traces_dir = args.dir
    if args.host_command:
        config.host_command = shlex.split(args.host_command)
    if args.poll_interval is not None:
        config.poll_interval = args.poll_interval
    if args.ready_timeout is not None:
        config.ready_timeout = args.ready_timeout
    config.continue_on_failure = args.keep_going
    return config


def run_cli(args: argparse.Namespace, config: HarnessConfig, out: TextIO) -> SuiteResult:
    out.write("=== Starting conformance run for extension host ===\n\n")

    manifest = validate_manifest(args.manifest_path)
    if not config.host_command:
        raise HarnessError("No host command given: use --host-command or CONFORMANCE_HOST_COMMAND")
    host_command = config.host_command + [str(manifest.path)]

    if args.trace is not None:
        paths = [str(args.trace)]
    else:
        paths = discover_traces(str(config.traces_dir))

    return run_traces(paths, lambda: StdioHost(host_command), config=config, stream=out)


def report_failure(suite: Optional[SuiteResult], error: Optional[str], config: HarnessConfig, out: TextIO):
    failed = suite.first_failure if suite is not None else None
    if failed is not None and config.verbose == 0:
        out.write("\n=== Extension output ===\n\n")
        for line in failed.logs:
            out.write(line + "\n")
        out.write("\n=== End Extension output ===\n\n")
    if failed is not None:
        out.write(f"{failed.trace_name}: {failed.failure}\n")
    if error:
        out.write(error + "\n")
    if suite is not None and len(suite.results) > 1:
        passed = sum(1 for r in suite.results if r.passed)
        out.write(f"\n{passed}/{suite.trace_count} traces passed\n")


def main(argv: Optional[List[str]] = None, out: Optional[TextIO] = None) -> int:
    out = out or sys.stdout
    args = build_parser().parse_args(argv)
    try:
        config = config_from_args(args)
    except ValueError as e:
        out.write(f"{e}\n")
        return 2
    setup_logging(config.verbose)

    try:
        suite = run_cli(args, config, out)
    except HarnessError as e:
        report_failure(None, str(e), config, out)
        return 1

    if not suite.passed:
        report_failure(suite, None, config, out)
        return 1

    out.write("\n=== All test commands completed successfully ===\n\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
