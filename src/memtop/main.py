"""memtop command line entrypoint."""
from __future__ import annotations

import argparse
import logging
import os
import sys

import psutil

from .config import ConfigError, LoggingConfig, MonitorConfig, RootConfig, load_config
from .metrics.smaps import SummaryError, read_summary
from .report import format_size
from .runner import Sampler
from .writer import SnapshotWriteError

logger = logging.getLogger("memtop")

DEFAULT_CONFIG = "memtop.yaml"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="memtop",
        description="Report the processes holding the most resident memory.",
    )
    parser.add_argument("-c", "--config", help=f"YAML config file (default: {DEFAULT_CONFIG} if present)")
    parser.add_argument("-t", "--runtime", type=float, metavar="MINUTES",
                        help="observation window in minutes, negative runs forever")
    parser.add_argument("-l", "--maxlen", type=int, metavar="CHARS", help="truncate output lines to CHARS")
    parser.add_argument("-n", "--maxlines", type=int, metavar="N", help="number of processes to keep")
    parser.add_argument("-r", "--refresh", type=float, metavar="SECONDS", help="seconds between rounds")
    parser.add_argument("-w", "--write", metavar="PREFIX", help="also write each round to PREFIX")
    parser.add_argument("-f", "--wstrftime", metavar="PATTERN",
                        help="strftime pattern appended to the write prefix every round")
    parser.add_argument("-p", "--pid", type=int, help="print the memory summary of one process and exit")
    parser.add_argument("--log-level", help="logging level (default: WARNING)")
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.maxlines is not None and args.maxlines < 1:
        parser.error("--maxlines must be at least 1")
    if args.maxlen is not None and args.maxlen < 2:
        parser.error("--maxlen must be at least 2")
    if args.refresh is not None and args.refresh < 0:
        parser.error("--refresh must not be negative")
    return args


def load_root_config(path: str | None) -> RootConfig:
    if path is None:
        if not os.path.exists(DEFAULT_CONFIG):
            return RootConfig(monitor=MonitorConfig(), logging=LoggingConfig())
        path = DEFAULT_CONFIG
    return load_config(path)


def apply_overrides(cfg: RootConfig, args: argparse.Namespace) -> RootConfig:
    if args.runtime is not None:
        cfg.monitor.runtime_minutes = args.runtime
    if args.maxlen is not None:
        cfg.monitor.max_line_length = args.maxlen
    if args.maxlines is not None:
        cfg.monitor.max_lines = args.maxlines
    if args.refresh is not None:
        cfg.monitor.refresh_seconds = args.refresh
    if args.write:
        cfg.monitor.write_prefix = args.write
    if args.wstrftime:
        cfg.monitor.write_strftime = args.wstrftime
    if args.log_level:
        cfg.logging.level = args.log_level.upper()
    return cfg


def setup_logging(cfg: LoggingConfig) -> None:
    level = getattr(logging, cfg.level, None)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)


def print_summary(pid: int, proc_root: str) -> int:
    try:
        summary = read_summary(pid, proc_root)
    except SummaryError as exc:
        logger.error("%s", exc)
        return 1
    width = max(len(name) for name in summary)
    for name in sorted(summary):
        print(f"{name:<{width}} {summary[name]:>10} kB")
    return 0


def _log_host_memory() -> None:
    mem = psutil.virtual_memory()
    logger.info(
        "host memory: total=%s available=%s",
        format_size(mem.total // 1024),
        format_size(mem.available // 1024),
    )


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        cfg = apply_overrides(load_root_config(args.config), args)
    except ConfigError as exc:
        logging.basicConfig(format=LOG_FORMAT, stream=sys.stderr)
        logger.error("%s", exc)
        return 2
    setup_logging(cfg.logging)

    if args.pid is not None:
        return print_summary(args.pid, cfg.monitor.proc_root)

    if cfg.monitor.max_lines < 1 or cfg.monitor.max_line_length < 2:
        logger.error("max_lines must be >= 1 and max_line_length >= 2")
        return 2

    _log_host_memory()
    sampler = Sampler(cfg.monitor)
    try:
        rounds = sampler.run()
    except SnapshotWriteError as exc:
        logger.error("%s", exc)
        return 1
    except KeyboardInterrupt:
        rounds = sampler.rounds
    logger.info("stopped after %d rounds", rounds)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
