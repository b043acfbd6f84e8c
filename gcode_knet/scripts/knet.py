#!/usr/bin/env python3
"""
gcode-knet: G-code massager for multi-core (IDEX) CNC machines.

Rewrites a CAM program so every core addresses its own axis letter, parks
the released core on each tool change and optionally splits the program
into one file per tool change.  Output lands beside the source file.

Usage:
    gcode-knet part.nc
    gcode-knet -v part.nc
    gcode-knet --config my_knet.yaml --log-file logs/knet.log part.nc
    gcode-knet @knet.args part.nc
    python -m gcode_knet.scripts.knet part.nc

Recognised comments in the source:
    (SplitByTool: true)
    (Core: A; X-Axis: X; Park: 10; Feed: 500)
    (Tool Change [B])

An ``@file`` argument reads further arguments from that file, one per line.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from gcode_knet.configs.loader import ConfigError, load_config
from gcode_knet.gcode.processor import process_file
from gcode_knet.utils.logging_config import (
    install_excepthook,
    pop_context,
    push_context,
    setup_logging,
    shutdown,
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gcode-knet",
        description="G-code massager for happier multi-core outcomes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        fromfile_prefix_chars="@",
        epilog="Outputs: <name>_knet<ext>, or <name>_knet_<N><ext> "
               "once (SplitByTool: true) is seen.",
    )
    parser.add_argument(
        "source",
        type=str,
        help="G-code file to rewrite",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Debug logging",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        help="Configuration file path (default: packaged knet.yaml)",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        help="Also write the log to this file",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Write the log file as JSON lines",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except (ConfigError, FileNotFoundError) as e:
        setup_logging("INFO", args.log_file, json=args.json_logs)
        logger.error("Invalid configuration: %s", e)
        shutdown()
        return 1

    level = "DEBUG" if args.verbose else config.logging.level
    setup_logging(
        level,
        args.log_file,
        json=args.json_logs,
        color=config.logging.color,
    )
    install_excepthook()
    cmd_args = sys.argv[1:] if argv is None else argv
    logger.info("%s %s", parser.prog, " ".join(cmd_args))

    source = Path(args.source)
    push_context(source=source.name)
    try:
        if not source.is_file():
            logger.error("FAIL, file '%s' not found.", source)
            return 1

        try:
            result = process_file(source, config)
        except (OSError, UnicodeError):
            logger.exception("Processing failed")
            return 1

        for path in result.outputs:
            logger.info("Wrote %s", path)
        stats = result.stats
        logger.info(
            "%d park move(s), %d tool change(s), %d remapped line(s)",
            stats.park_moves, stats.tool_changes, stats.remapped_lines,
        )
        if stats.config_errors:
            logger.warning(
                "%d core config comment(s) could not be parsed",
                stats.config_errors,
            )
        return 0
    finally:
        pop_context(keys=["source"])
        shutdown()


if __name__ == "__main__":
    sys.exit(main())
