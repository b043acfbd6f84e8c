"""Line classifier and rewriter -- the per-line state machine.

Every input line is classified by its leading text (case-insensitive,
first match wins) and handled in one step:

==================  ========================  =================================
Kind                Prefix                    Effect
==================  ========================  =================================
``SPLIT_BY_TOOL``   ``(SplitByTool:``         ``true``/``1`` starts segment 0
``CORE_CONFIG``     ``(Core :`` / ``(Core:``  registers a core
``TOOL_CHANGE``     ``(Tool Change``          parks the old core, activates
                                              the ``[Id]`` core, next segment
``MOTION``          ``G``                     ``X`` -> active core's letter
``OTHER``           anything else             copied unchanged
==================  ========================  =================================

Axis remapping is a blind character replacement: every uppercase ``X`` on
a motion line becomes the active core's letter, including any inside a
trailing comment.  Output generated by earlier releases depends on this.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from gcode_knet.configs.loader import ParkConfig
from gcode_knet.gcode.core_config import (
    CANONICAL_AXIS,
    CoreConfigError,
    parse_core_comment,
)
from gcode_knet.gcode.machine_state import MachineState
from gcode_knet.gcode.segmenter import OutputSegmenter

logger = logging.getLogger(__name__)

SPLIT_PREFIX = "(splitbytool:"
CORE_PREFIXES = ("(core :", "(core:")
TOOL_CHANGE_PREFIX = "(tool change"
MOTION_PREFIX = "g"

_SPLIT_TRUTHY = ("true", "1")

DEFAULT_PARK = ParkConfig(rapid_command="G00", feed_command="G1", decimals=3)


class LineKind(enum.Enum):
    """Directive kinds recognised by :func:`classify_line`."""

    SPLIT_BY_TOOL = "split_by_tool"
    CORE_CONFIG = "core_config"
    TOOL_CHANGE = "tool_change"
    MOTION = "motion"
    OTHER = "other"


def classify_line(line: str) -> LineKind:
    """Classify *line* by its leading text.

    ``MOTION`` only says the line starts with ``G``; whether it is
    remapped depends on the machine state.
    """
    lowered = line.lower()
    if lowered.startswith(SPLIT_PREFIX):
        return LineKind.SPLIT_BY_TOOL
    if lowered.startswith(CORE_PREFIXES):
        return LineKind.CORE_CONFIG
    if lowered.startswith(TOOL_CHANGE_PREFIX):
        return LineKind.TOOL_CHANGE
    if lowered.startswith(MOTION_PREFIX):
        return LineKind.MOTION
    return LineKind.OTHER


def split_requested(line: str) -> bool:
    """True if a ``(SplitByTool: ...)`` line asks for splitting."""
    value = line[len(SPLIT_PREFIX):].lower()
    return any(token in value for token in _SPLIT_TRUTHY)


def tool_change_target(line: str) -> str | None:
    """Core id between the first ``[`` and the first ``]``, trimmed.

    ``None`` if the brackets are missing or out of order.
    """
    start = line.find("[")
    end = line.find("]")
    if start < 0 or end <= start:
        return None
    return line[start + 1:end].strip()


def remap_axis(line: str, axis_letter: str) -> str:
    """Replace every ``X`` in *line* with *axis_letter*."""
    if axis_letter.upper() == CANONICAL_AXIS:
        return line
    return line.replace(CANONICAL_AXIS, axis_letter)


@dataclass
class RewriteStats:
    """Counters for one run."""

    lines_read: int = 0
    lines_written: int = 0
    remapped_lines: int = 0
    park_moves: int = 0
    tool_changes: int = 0
    config_errors: int = 0


class LineRewriter:
    """Apply the per-line rules to a stream of G-code lines.

    Parameters
    ----------
    state : MachineState
        Known cores and the active core; mutated in place.
    output : OutputSegmenter
        Destination for every emitted line.
    park : ParkConfig, optional
        Park move format.  Defaults to ``G00`` / ``G1`` with 3 decimals.
    """

    def __init__(
        self,
        state: MachineState,
        output: OutputSegmenter,
        park: ParkConfig | None = None,
    ) -> None:
        self.state = state
        self.output = output
        self.park = park or DEFAULT_PARK
        self.stats = RewriteStats()
        self._handlers = {
            LineKind.SPLIT_BY_TOOL: self._on_split_by_tool,
            LineKind.CORE_CONFIG: self._on_core_config,
            LineKind.TOOL_CHANGE: self._on_tool_change,
            LineKind.MOTION: self._on_motion,
            LineKind.OTHER: self._emit,
        }

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def process_line(self, line: str) -> LineKind:
        """Handle one input line (without terminator).

        Returns the kind the line was classified as.
        """
        self.stats.lines_read += 1
        kind = classify_line(line)
        self._handlers[kind](line)
        return kind

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _emit(self, line: str) -> None:
        self.output.write(line)
        self.stats.lines_written += 1

    def _on_split_by_tool(self, line: str) -> None:
        if split_requested(line):
            self.output.enable_split()
        self._emit(line)

    def _on_core_config(self, line: str) -> None:
        try:
            config = parse_core_comment(line)
        except CoreConfigError as exc:
            self.stats.config_errors += 1
            logger.warning("Failed to parse Core config: %s (%s)", line, exc)
        else:
            if config is None:
                logger.debug("Core comment without a core id ignored: %s", line)
            else:
                self.state.register(config)
        self._emit(line)

    def _on_tool_change(self, line: str) -> None:
        self.stats.tool_changes += 1
        target = tool_change_target(line)

        if target and self.state.is_known(target):
            outgoing = self.state.activate(target)
            if outgoing is not None:
                command = outgoing.park_command(
                    rapid_command=self.park.rapid_command,
                    feed_command=self.park.feed_command,
                    decimals=self.park.decimals,
                )
                logger.info(
                    "Parking core %s with command: %s",
                    outgoing.core_id, command,
                )
                # park goes out before any segment switch
                self._emit(command)
                self.stats.park_moves += 1
            logger.debug("Active core is now %s", target)
        else:
            logger.debug(
                "Tool change without a known core (%r), active core stays %s",
                target, self.state.active_core,
            )

        if self.output.split_by_tool:
            path = self.output.next_segment()
            logger.info("Tool change: writing segment %s", path.name)
        self._emit(line)

    def _on_motion(self, line: str) -> None:
        active = self.state.active_config()
        if active is not None and not active.is_canonical:
            rewritten = remap_axis(line, active.axis_letter)
            if rewritten != line:
                self.stats.remapped_lines += 1
            line = rewritten
        self._emit(line)
