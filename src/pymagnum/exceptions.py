"""Custom exception hierarchy for pymagnum."""

from __future__ import annotations


class MagnumError(Exception):
    """Base exception for all pymagnum errors."""


class MagnumConfigError(MagnumError):
    """Invalid or missing configuration."""


class MagnumTransportError(MagnumError):
    """Connection-level failure (connect, send, receive)."""

    def __init__(
        self,
        message: str,
        *,
        command: str = "",
    ) -> None:
        self.command = command
        super().__init__(message)


class MagnumNotConnectedError(MagnumTransportError):
    """Operation attempted on a transport that is not connected."""


class MagnumLevelMappingError(MagnumError, ValueError):
    """Level code outside the Quartz alphabet, or level index out of range.

    Subclasses :class:`ValueError` so callers validating user input can
    catch it alongside other argument errors.
    """

    def __init__(self, message: str, *, value: object = None) -> None:
        self.value = value
        super().__init__(message)


class MagnumProtocolError(MagnumError):
    """Inbound line could not be decoded as a Quartz response."""

    def __init__(self, message: str, *, line: str = "") -> None:
        self.line = line
        super().__init__(message)
