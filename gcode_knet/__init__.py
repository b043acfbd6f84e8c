"""
gcode-knet Package.

Post-processor for CAM-generated G-code on CNC machines with several
independently addressable motion cores (e.g. IDEX routers).  Reads
``(Core: ...)`` comments, remaps ``X`` moves to the active core's axis
letter, parks the released core on every tool change and optionally
splits the program into one file per tool change.

Subpackages:
    gcode: comment parser, machine state, line rewriter, output segmenter
    configs: run configuration loading and validation
    scripts: command-line entrypoint
    utils: file I/O and logging helpers
"""

__version__ = "1.0.0"

__all__ = ["gcode", "configs", "scripts", "utils"]
