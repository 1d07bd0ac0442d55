"""Quartz routing protocol line codec.

Every Quartz message is a line of ASCII starting with ``.`` and terminated
by a carriage return. Ids are plain decimal; level codes are single upper
case letters, concatenated when a message covers several levels.

Outbound::

    .S{levels}{dest},{src}   set crosspoint
    .I{level}{dest}          interrogate route
    .RD{dest} / .RS{src}     read destination / source name
    .BL{dest} / .BU{dest}    lock / unlock destination
    .BI{dest}                interrogate lock

Inbound::

    .A                       acknowledge
    .E...                    error
    .P...                    power-on notice
    .U{levels}{dest},{src}   route update
    .A{levels}{dest},{src}   route interrogate reply
    .RAD{dest},{name}        destination name
    .RAS{src},{name}         source name
    .RAL{level},{name}       level name
    .BA{dest},{0|1}          lock status
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from pymagnum._constants import ENCODING, LEVEL_CODES, LINE_END, LINE_START, MAX_LINE_LENGTH
from pymagnum.exceptions import MagnumProtocolError
from pymagnum.models.messages import (
    Acknowledge,
    DestinationName,
    ErrorResponse,
    LevelName,
    LockStatus,
    PowerOn,
    QuartzResponse,
    RouteUpdate,
    SourceName,
    UnknownResponse,
)

_logger = logging.getLogger(__name__)

# .UVAB12,7 (update) or .AV12,7 (interrogate reply)
ROUTE_RESPONSE = re.compile(r"^\.([UA])([A-Z]+)(\d+),(\d+)$")

# .RAD12,PGM 1
DESTINATION_NAME_RESPONSE = re.compile(r"^\.RAD(\d+),(.*)$")

# .RAS3,CAM 3
SOURCE_NAME_RESPONSE = re.compile(r"^\.RAS(\d+),(.*)$")

# .RALA,AUDIO 1
LEVEL_NAME_RESPONSE = re.compile(r"^\.RAL([A-Z]),(.*)$")

# .BA12,1
LOCK_STATUS_RESPONSE = re.compile(r"^\.BA(\d+),([01])$")

ERROR_RESPONSE = re.compile(r"^\.E(.*)$")
POWER_ON_RESPONSE = re.compile(r"^\.P(.*)$")


def _check_id(value: int, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{what} must be a non-negative integer, got {value!r}")
    return value


def _check_level_code(code: str) -> str:
    if not isinstance(code, str) or len(code) != 1 or code not in LEVEL_CODES:
        raise ValueError(f"invalid level code {code!r}")
    return code


# ------------------------------------------------------------------
# Encoding
# ------------------------------------------------------------------


def encode_set_crosspoint(level_codes: Iterable[str], destination: int, source: int) -> str:
    codes = "".join(_check_level_code(code) for code in level_codes)
    if not codes:
        raise ValueError("at least one level is required")
    return f".S{codes}{_check_id(destination, 'destination')},{_check_id(source, 'source')}"


def encode_interrogate_route(level_code: str, destination: int) -> str:
    return f".I{_check_level_code(level_code)}{_check_id(destination, 'destination')}"


def encode_read_destination_name(destination: int) -> str:
    return f".RD{_check_id(destination, 'destination')}"


def encode_read_source_name(source: int) -> str:
    return f".RS{_check_id(source, 'source')}"


def encode_lock_destination(destination: int) -> str:
    return f".BL{_check_id(destination, 'destination')}"


def encode_unlock_destination(destination: int) -> str:
    return f".BU{_check_id(destination, 'destination')}"


def encode_interrogate_lock(destination: int) -> str:
    return f".BI{_check_id(destination, 'destination')}"


def frame(line: str) -> bytes:
    """Terminate *line* and encode it for the wire."""
    return f"{line}{LINE_END}".encode(ENCODING)


# ------------------------------------------------------------------
# Decoding
# ------------------------------------------------------------------


def decode_line(line: str) -> QuartzResponse:
    """Decode one inbound line (without terminator) into a typed message.

    Lines that match no known response decode to :class:`UnknownResponse`.
    """
    line = line.strip()

    if line == ".A":
        return Acknowledge(raw=line)

    route_match = ROUTE_RESPONSE.match(line)
    if route_match:
        return RouteUpdate(
            raw=line,
            levels=tuple(route_match.group(2)),
            destination=int(route_match.group(3)),
            source=int(route_match.group(4)),
        )

    destination_match = DESTINATION_NAME_RESPONSE.match(line)
    if destination_match:
        return DestinationName(
            raw=line,
            destination=int(destination_match.group(1)),
            name=destination_match.group(2).strip(),
        )

    source_match = SOURCE_NAME_RESPONSE.match(line)
    if source_match:
        return SourceName(
            raw=line,
            source=int(source_match.group(1)),
            name=source_match.group(2).strip(),
        )

    level_match = LEVEL_NAME_RESPONSE.match(line)
    if level_match:
        return LevelName(raw=line, level=level_match.group(1), name=level_match.group(2).strip())

    lock_match = LOCK_STATUS_RESPONSE.match(line)
    if lock_match:
        return LockStatus(
            raw=line,
            destination=int(lock_match.group(1)),
            locked=lock_match.group(2) == "1",
        )

    error_match = ERROR_RESPONSE.match(line)
    if error_match:
        return ErrorResponse(raw=line, message=error_match.group(1).strip())

    power_match = POWER_ON_RESPONSE.match(line)
    if power_match:
        return PowerOn(raw=line, message=power_match.group(1).strip())

    _logger.debug("Unrecognised Quartz line: %r", line)
    return UnknownResponse(raw=line)


def decode_line_strict(line: str) -> QuartzResponse:
    """Like :func:`decode_line` but raise :class:`MagnumProtocolError` on unknown lines."""
    message = decode_line(line)
    if isinstance(message, UnknownResponse):
        raise MagnumProtocolError(f"unrecognised Quartz line {line!r}", line=line)
    return message


class LineBuffer:
    """Reassemble Quartz lines from arbitrarily split TCP reads.

    The router may pack several responses in one read or split one across
    reads. Lines are terminated by ``\\r``; a stray ``\\n`` is tolerated.
    Bytes before the first ``.`` of a line are dropped, and an unterminated
    tail is capped at ``MAX_LINE_LENGTH`` characters.
    """

    def __init__(self) -> None:
        self._pending = ""

    def feed(self, data: bytes) -> list[str]:
        text = self._pending + data.decode(ENCODING, errors="replace")
        parts = re.split(r"[\r\n]", text)
        self._pending = parts.pop()
        if len(self._pending) > MAX_LINE_LENGTH:
            _logger.debug("Dropping %s bytes of unterminated input", len(self._pending) - MAX_LINE_LENGTH)
            self._pending = self._pending[-MAX_LINE_LENGTH:]
        lines: list[str] = []
        for part in parts:
            start = part.find(LINE_START)
            if start < 0:
                continue
            line = part[start:].strip()
            if line:
                lines.append(line)
        return lines

    @property
    def pending(self) -> str:
        return self._pending
