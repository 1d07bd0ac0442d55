"""Typed models for Quartz messages and router snapshots."""

from pymagnum.models.messages import (
    Acknowledge,
    DestinationName,
    ErrorResponse,
    LevelName,
    LockStatus,
    PowerOn,
    QuartzMessage,
    QuartzResponse,
    ResponseKind,
    RouteUpdate,
    SourceName,
    UnknownResponse,
)
from pymagnum.models.snapshot import RouterSnapshot

__all__ = [
    "Acknowledge",
    "DestinationName",
    "ErrorResponse",
    "LevelName",
    "LockStatus",
    "PowerOn",
    "QuartzMessage",
    "QuartzResponse",
    "ResponseKind",
    "RouteUpdate",
    "RouterSnapshot",
    "SourceName",
    "UnknownResponse",
]
