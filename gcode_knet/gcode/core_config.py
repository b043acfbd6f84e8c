"""Core configuration records and the relaxed comment parser.

Each motion core is described by a comment embedded in the G-code::

    (Core: A; X-Axis: X; Park: 10; Feed: 500)
    (Core : {Core: B; X-Axis: U; Park: 300})

The text between the first ``(`` and the last ``)`` is wrapped in braces
and read as a loosely formatted object.  Hand-written comments rarely
quote anything, so three rewrites run before JSON decoding:

1. bare keys followed by ``:`` are quoted (a key is word characters or
   hyphens),
2. bare alphabetic values directly followed by ``,``, ``;`` or ``}`` are
   quoted, numbers stay unquoted,
3. ``;`` separators become ``,``.

Recognised fields are ``Core`` (required), ``X-Axis``, ``Park`` and
``Feed``; anything else is ignored.  Field names are case-sensitive.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

CANONICAL_AXIS = "X"

_BARE_KEY = re.compile(r"([{,;]\s*)([\w-]+)\s*:")
_BARE_VALUE = re.compile(r":\s*([A-Za-z]+)(?=[,;}])")


class CoreConfigError(ValueError):
    """Raised when a ``(Core: ...)`` comment cannot be decoded."""

    pass


@dataclass(frozen=True)
class CoreConfig:
    """Settings for one independently addressable motion core.

    Parameters
    ----------
    core_id : str
        Identifier used in tool-change comments, e.g. ``"A"``.
    axis_letter : str
        Letter this core answers to in place of ``X``.  Stored uppercase.
    park : float
        Coordinate the core moves to when it is released.
    feed : float
        Park feed rate.  Zero or below parks with a rapid move, anything
        above with a linear feed move.
    """

    core_id: str
    axis_letter: str
    park: float = 0.0
    feed: float = 0.0

    def __post_init__(self) -> None:
        if not self.core_id:
            raise CoreConfigError("core_id must not be empty")
        if len(self.axis_letter) != 1 or not self.axis_letter.isalpha():
            raise CoreConfigError(
                f"axis_letter must be a single letter, got {self.axis_letter!r}"
            )
        object.__setattr__(self, "axis_letter", self.axis_letter.upper())

    @property
    def is_canonical(self) -> bool:
        """True if this core drives the canonical ``X`` axis."""
        return self.axis_letter == CANONICAL_AXIS

    def park_command(
        self,
        rapid_command: str = "G00",
        feed_command: str = "G1",
        decimals: int = 3,
    ) -> str:
        """Return the move that parks this core.

        ``G00 X10.000`` when the feed is not positive,
        ``G1 X10.000 F500.000`` otherwise.
        """
        target = f"{self.axis_letter}{self.park:.{decimals}f}"
        if self.feed > 0:
            return f"{feed_command} {target} F{self.feed:.{decimals}f}"
        return f"{rapid_command} {target}"


# ---------------------------------------------------------------------------
# Relaxed fragment decoding
# ---------------------------------------------------------------------------


def extract_fragment(line: str) -> str | None:
    """Return the text strictly between the first ``(`` and the last ``)``.

    ``None`` if the line has no such pair.
    """
    start = line.find("(")
    end = line.rfind(")")
    if start < 0 or end <= start:
        return None
    return line[start + 1:end]


def sanitize_fragment(fragment: str) -> str:
    """Turn a relaxed ``{Key: value; ...}`` object into strict JSON text."""
    text = _BARE_KEY.sub(r'\1"\2":', fragment)
    text = _BARE_VALUE.sub(r': "\1"', text)
    return text.replace(";", ",")


def _number(data: dict[str, Any], key: str) -> float:
    value = data.get(key, 0)
    if value is None:
        return 0.0
    # bool is an int subclass; JSON true/false is not a coordinate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise CoreConfigError(f"{key} must be a number, got {value!r}")
    return float(value)


def decode_core_config(fragment: str) -> CoreConfig | None:
    """Decode a comment fragment into a :class:`CoreConfig`.

    Parameters
    ----------
    fragment : str
        Comment text without the enclosing parentheses, e.g.
        ``"Core: A; X-Axis: X; Park: 10"``.

    Returns
    -------
    CoreConfig | None
        The decoded record, or ``None`` when the object has no ``Core``
        identifier (such comments are ignored).

    Raises
    ------
    CoreConfigError
        If the fragment is not a well-formed object or a field has the
        wrong type.
    """
    text = sanitize_fragment("{" + fragment + "}")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise CoreConfigError(f"malformed core object {text!r}: {exc}") from exc

    if not isinstance(data, dict):
        raise CoreConfigError(f"expected an object, got {text!r}")

    # "(Core : {Core: A; ...})" nests the record under the marker key
    if isinstance(data.get("Core"), dict):
        data = data["Core"]

    core_id = data.get("Core")
    if core_id is None or core_id == "":
        return None
    if not isinstance(core_id, str):
        raise CoreConfigError(f"Core must be a string, got {core_id!r}")

    axis = data.get("X-Axis")
    if not isinstance(axis, str):
        raise CoreConfigError(
            f"core {core_id!r}: X-Axis must be a letter, got {axis!r}"
        )

    return CoreConfig(
        core_id=core_id,
        axis_letter=axis,
        park=_number(data, "Park"),
        feed=_number(data, "Feed"),
    )


def parse_core_comment(line: str) -> CoreConfig | None:
    """Parse a full ``(Core: ...)`` comment line.

    Returns ``None`` for comments without a usable fragment or without a
    ``Core`` identifier.

    Raises
    ------
    CoreConfigError
        If the fragment cannot be decoded.
    """
    fragment = extract_fragment(line.strip())
    if fragment is None:
        logger.debug("No parenthesised fragment in core comment: %s", line)
        return None
    return decode_core_config(fragment)
