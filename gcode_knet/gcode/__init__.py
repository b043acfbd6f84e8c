"""
G-code rewriting module.

Streams a CAM program line by line, remaps ``X`` moves to the active
core's axis letter, inserts park moves on core hand-offs and optionally
splits the output at every tool change.
"""

from gcode_knet.gcode.core_config import (
    CoreConfig,
    CoreConfigError,
    decode_core_config,
    parse_core_comment,
)
from gcode_knet.gcode.machine_state import MachineState
from gcode_knet.gcode.processor import ProcessResult, process_file, process_lines
from gcode_knet.gcode.rewriter import LineKind, LineRewriter, classify_line
from gcode_knet.gcode.segmenter import OutputSegmenter, RunContext

__all__ = [
    "CoreConfig",
    "CoreConfigError",
    "LineKind",
    "LineRewriter",
    "MachineState",
    "OutputSegmenter",
    "ProcessResult",
    "RunContext",
    "classify_line",
    "decode_core_config",
    "parse_core_comment",
    "process_file",
    "process_lines",
]
