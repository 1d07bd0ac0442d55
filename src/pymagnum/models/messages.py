"""Typed inbound Quartz messages.

Every line received from the router is decoded into exactly one of these
frozen models. ``kind`` is the discriminator, so :data:`QuartzResponse` can be
validated from a plain dict and dispatched by kind without ``isinstance``
chains.
"""

from __future__ import annotations

import enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pymagnum._constants import LEVEL_CODES


class ResponseKind(enum.StrEnum):
    ACKNOWLEDGE = "acknowledge"
    ERROR = "error"
    POWER_ON = "power_on"
    ROUTE_UPDATE = "route_update"
    DESTINATION_NAME = "destination_name"
    SOURCE_NAME = "source_name"
    LEVEL_NAME = "level_name"
    LOCK_STATUS = "lock_status"
    UNKNOWN = "unknown"


class QuartzMessage(BaseModel):
    """Base for all decoded inbound messages."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    raw: str = Field(default="", description="Line as received, without terminator")


class Acknowledge(QuartzMessage):
    kind: Literal[ResponseKind.ACKNOWLEDGE] = ResponseKind.ACKNOWLEDGE


class ErrorResponse(QuartzMessage):
    kind: Literal[ResponseKind.ERROR] = ResponseKind.ERROR
    message: str = ""


class PowerOn(QuartzMessage):
    kind: Literal[ResponseKind.POWER_ON] = ResponseKind.POWER_ON
    message: str = ""


class RouteUpdate(QuartzMessage):
    """Crosspoint change or route interrogate reply.

    ``levels`` holds the device level codes exactly as received. Codes are
    validated against the alphabet here so the dispatcher can rely on them.
    """

    kind: Literal[ResponseKind.ROUTE_UPDATE] = ResponseKind.ROUTE_UPDATE
    destination: int = Field(..., ge=0)
    source: int = Field(..., ge=0)
    levels: tuple[str, ...] = Field(..., min_length=1)

    @field_validator("levels")
    @classmethod
    def _check_level_codes(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        for code in value:
            if len(code) != 1 or code not in LEVEL_CODES:
                raise ValueError(f"unknown level code {code!r}")
        return value


class DestinationName(QuartzMessage):
    kind: Literal[ResponseKind.DESTINATION_NAME] = ResponseKind.DESTINATION_NAME
    destination: int = Field(..., ge=0)
    name: str


class SourceName(QuartzMessage):
    kind: Literal[ResponseKind.SOURCE_NAME] = ResponseKind.SOURCE_NAME
    source: int = Field(..., ge=0)
    name: str


class LevelName(QuartzMessage):
    kind: Literal[ResponseKind.LEVEL_NAME] = ResponseKind.LEVEL_NAME
    level: str
    name: str


class LockStatus(QuartzMessage):
    kind: Literal[ResponseKind.LOCK_STATUS] = ResponseKind.LOCK_STATUS
    destination: int = Field(..., ge=0)
    locked: bool


class UnknownResponse(QuartzMessage):
    kind: Literal[ResponseKind.UNKNOWN] = ResponseKind.UNKNOWN


QuartzResponse = Annotated[
    Acknowledge
    | ErrorResponse
    | PowerOn
    | RouteUpdate
    | DestinationName
    | SourceName
    | LevelName
    | LockStatus
    | UnknownResponse,
    Field(discriminator="kind"),
]
"""Tagged union of every inbound message type."""
