"""Filesystem helpers for reading G-code sources and YAML configs.

Provides:
    - YAML load with safe_load
    - Lazy, newline-stripped line iteration over a text file

All paths use pathlib.Path for cross-platform compatibility.

Usage:
    from gcode_knet.utils import fs
    data = fs.load_yaml("knet.yaml")
    for line in fs.iter_lines("part.nc"):
        ...
"""

from pathlib import Path
from typing import Any, Dict, Iterator, Union

import yaml


def load_yaml(path: Union[str, Path]) -> Dict[str, Any]:
    """Load YAML file safely.

    Parameters
    ----------
    path : Union[str, Path]
        YAML file path

    Returns
    -------
    Dict[str, Any]
        Parsed YAML content

    Raises
    ------
    FileNotFoundError
        If file doesn't exist
    yaml.YAMLError
        If YAML parsing fails

    Notes
    -----
    Uses safe_load to prevent arbitrary code execution.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Failed to parse YAML file {path}: {e}") from e


def iter_lines(
    path: Union[str, Path],
    encoding: str = 'utf-8',
    errors: str = 'surrogateescape'
) -> Iterator[str]:
    """Yield the lines of a text file without their line terminators.

    Parameters
    ----------
    path : Union[str, Path]
        Source file path
    encoding : str
        Text encoding, default "utf-8"
    errors : str
        Decoding error handler, default "surrogateescape" so bytes that
        are not valid in *encoding* survive a write with the same handler

    Yields
    ------
    str
        One line at a time, in file order, with ``\\n`` / ``\\r\\n``
        stripped.

    Raises
    ------
    FileNotFoundError
        If file doesn't exist

    Notes
    -----
    The file is read lazily and closed when the generator is exhausted
    or garbage collected.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Source file not found: {path}")

    with open(path, 'r', encoding=encoding, errors=errors) as f:
        for raw in f:
            yield raw.rstrip('\r\n')
