"""pymagnum - Async Python client mirroring an Evertz Magnum router over Quartz."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pymagnum")
except PackageNotFoundError:
    __version__ = "0+local"
from pymagnum._transport import QuartzConnection, Transport
from pymagnum.config import MagnumConfig
from pymagnum.dispatcher import DispatcherState
from pymagnum.exceptions import (
    MagnumConfigError,
    MagnumError,
    MagnumLevelMappingError,
    MagnumNotConnectedError,
    MagnumProtocolError,
    MagnumTransportError,
)
from pymagnum.levels import index_to_level, level_to_index
from pymagnum.models import (
    Acknowledge,
    DestinationName,
    ErrorResponse,
    LevelName,
    LockStatus,
    PowerOn,
    QuartzResponse,
    ResponseKind,
    RouterSnapshot,
    RouteUpdate,
    SourceName,
    UnknownResponse,
)
from pymagnum.router import MagnumRouter

__all__ = [
    "__version__",
    "Acknowledge",
    "DestinationName",
    "DispatcherState",
    "ErrorResponse",
    "LevelName",
    "LockStatus",
    "MagnumConfig",
    "MagnumConfigError",
    "MagnumError",
    "MagnumLevelMappingError",
    "MagnumNotConnectedError",
    "MagnumProtocolError",
    "MagnumRouter",
    "MagnumTransportError",
    "PowerOn",
    "QuartzConnection",
    "QuartzResponse",
    "ResponseKind",
    "RouteUpdate",
    "RouterSnapshot",
    "SourceName",
    "Transport",
    "UnknownResponse",
    "index_to_level",
    "level_to_index",
]
