"""Cross-cutting utilities (lowest dependency layer).

This package provides shared primitives for:
    - File and YAML I/O (fs)
    - Unified logging (logging_config)

No module in utils/ may import from upper layers (gcode, configs, scripts).

Convenience imports:
    from gcode_knet.utils import fs
    from gcode_knet.utils.logging_config import setup_logging, push_context
"""

from . import fs
from . import logging_config

from .logging_config import pop_context, push_context, setup_logging, shutdown

__all__ = [
    # Modules
    'fs',
    'logging_config',
    # Direct exports
    'setup_logging',
    'pop_context',
    'push_context',
    'shutdown',
]
