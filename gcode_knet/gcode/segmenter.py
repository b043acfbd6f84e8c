"""Output naming and the segmenting output writer.

Output files are written beside the source::

    part.nc -> part_knet.nc                 (no splitting)
            -> part_knet_0.nc, part_knet_1.nc, ...  (split by tool)

Exactly one output stream is open at a time.  Switching segments closes
the current stream before the next one is opened, and every ``write``
goes straight to the stream that is current at the time of the call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

logger = logging.getLogger(__name__)

DEFAULT_SUFFIX = "_knet"


@dataclass(frozen=True)
class RunContext:
    """Output naming derived once from the source path.

    Parameters
    ----------
    source : Path
        G-code file being rewritten.
    suffix : str
        Inserted between the source stem and extension.
    """

    source: Path
    suffix: str = DEFAULT_SUFFIX

    @classmethod
    def from_source(
        cls, source: str | Path, suffix: str = DEFAULT_SUFFIX,
    ) -> RunContext:
        return cls(source=Path(source), suffix=suffix)

    @property
    def directory(self) -> Path:
        return self.source.parent

    @property
    def base(self) -> str:
        return self.source.stem

    @property
    def ext(self) -> str:
        return self.source.suffix

    @property
    def default_path(self) -> Path:
        """``<dir>/<base><suffix><ext>``, used until splitting starts."""
        return self.directory / f"{self.base}{self.suffix}{self.ext}"

    def segment_path(self, index: int) -> Path:
        """``<dir>/<base><suffix>_<index><ext>``."""
        return self.directory / f"{self.base}{self.suffix}_{index}{self.ext}"


class OutputSegmenter:
    """Owns the current output stream and switches it on request.

    Parameters
    ----------
    context : RunContext
        Output naming for this run.
    encoding : str
        Text encoding for every output file.  Undecodable source bytes
        carried as surrogates are written back unchanged.

    Notes
    -----
    The default output file is opened lazily on the first write, so a
    program that enables splitting before writing anything produces only
    the numbered segment files.  A run that writes nothing at all still
    leaves an empty default file behind on :meth:`close`.
    """

    def __init__(self, context: RunContext, encoding: str = "utf-8") -> None:
        self._ctx = context
        self._encoding = encoding
        self._stream: TextIO | None = None
        self._current_path: Path | None = None
        self._paths: list[Path] = []
        self._closed = False
        self.split_by_tool = False
        self.segment_index = 0

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> OutputSegmenter:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close(create_default=exc_type is None)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def paths(self) -> list[Path]:
        """Every file opened so far, in order."""
        return list(self._paths)

    @property
    def current_path(self) -> Path | None:
        return self._current_path

    def write(self, line: str) -> None:
        """Write one line (without terminator) to the current output."""
        if self._closed:
            raise ValueError("write to a closed OutputSegmenter")
        if self._stream is None:
            self._open(self._ctx.default_path)
        self._stream.write(line + "\n")

    def enable_split(self) -> bool:
        """Start splitting: switch to segment 0.

        Returns ``False`` (and leaves the output alone) if splitting is
        already active.
        """
        if self.split_by_tool:
            logger.debug("SplitByTool already enabled, keeping segment %d",
                         self.segment_index)
            return False
        self.split_by_tool = True
        self.segment_index = 0
        self._switch(self._ctx.segment_path(self.segment_index))
        logger.info(
            "SplitByTool enabled. Separate output files will be generated "
            "for each Tool Change."
        )
        return True

    def next_segment(self) -> Path:
        """Close the current segment and open the next numbered one.

        Raises
        ------
        RuntimeError
            If splitting has not been enabled.
        """
        if not self.split_by_tool:
            raise RuntimeError("next_segment() requires split_by_tool")
        self.segment_index += 1
        path = self._ctx.segment_path(self.segment_index)
        self._switch(path)
        return path

    def close(self, create_default: bool = True) -> None:
        """Close the open stream.  Idempotent.

        With *create_default*, a run that opened no file at all still
        leaves an empty default output behind.
        """
        if self._closed:
            return
        self._closed = True
        if create_default and self._stream is None and not self._paths:
            self._open(self._ctx.default_path)
        self._close_stream()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _switch(self, path: Path) -> None:
        self._close_stream()
        self._open(path)

    def _open(self, path: Path) -> None:
        logger.debug("Opening output %s", path)
        self._stream = open(
            path, "w", encoding=self._encoding, errors="surrogateescape",
        )
        self._current_path = path
        self._paths.append(path)

    def _close_stream(self) -> None:
        if self._stream is not None:
            stream, self._stream = self._stream, None
            stream.close()
            logger.debug("Closed output %s", self._current_path)
