"""Driver loop: feed a G-code file through the rewriter.

Usage::

    from gcode_knet.gcode.processor import process_file
    result = process_file("part.nc")
    print(result.outputs)   # [PosixPath('part_knet.nc')]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from gcode_knet.configs.loader import KnetConfig, load_config
from gcode_knet.gcode.machine_state import MachineState
from gcode_knet.gcode.rewriter import LineRewriter, RewriteStats
from gcode_knet.gcode.segmenter import OutputSegmenter, RunContext
from gcode_knet.utils.fs import iter_lines

logger = logging.getLogger(__name__)


@dataclass
class ProcessResult:
    """Outcome of one run."""

    outputs: list[Path] = field(default_factory=list)
    stats: RewriteStats = field(default_factory=RewriteStats)
    active_core: str | None = None
    split_by_tool: bool = False


def process_lines(
    lines: Iterable[str],
    context: RunContext,
    config: KnetConfig | None = None,
) -> ProcessResult:
    """Rewrite *lines* into the output files described by *context*.

    Parameters
    ----------
    lines : Iterable[str]
        Source lines without terminators, consumed once, in order.
    context : RunContext
        Output naming.
    config : KnetConfig, optional
        Run configuration.  ``None`` loads the packaged default.

    Returns
    -------
    ProcessResult
        Files written and run counters.

    Raises
    ------
    OSError
        If an output file cannot be written.  Files written so far are
        left in place.
    """
    if config is None:
        config = load_config()

    state = MachineState()
    with OutputSegmenter(context, encoding=config.output.encoding) as output:
        rewriter = LineRewriter(state, output, park=config.park)
        for line in lines:
            rewriter.process_line(line)

    return ProcessResult(
        outputs=output.paths,
        stats=rewriter.stats,
        active_core=state.active_core,
        split_by_tool=output.split_by_tool,
    )


def process_file(
    source: str | Path,
    config: KnetConfig | None = None,
) -> ProcessResult:
    """Rewrite a G-code file; outputs are written beside it.

    Raises
    ------
    FileNotFoundError
        If *source* does not exist.  No output is created.
    """
    source = Path(source)
    if not source.is_file():
        raise FileNotFoundError(f"Source file not found: {source}")

    if config is None:
        config = load_config()

    context = RunContext.from_source(source, suffix=config.output.suffix)
    logger.info("Processing %s", source)

    result = process_lines(
        iter_lines(source, encoding=config.output.encoding),
        context,
        config,
    )

    logger.info(
        "Processing complete: %d line(s) in, %d line(s) out, %d file(s)",
        result.stats.lines_read,
        result.stats.lines_written,
        len(result.outputs),
    )
    return result
