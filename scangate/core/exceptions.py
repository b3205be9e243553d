"""Exception hierarchy shared by the container and analysis layers."""

from __future__ import annotations


class ScanGateError(Exception):
    """Base class for all scangate errors."""


class ConnectionSetupError(ScanGateError):
    """The Docker daemon connection could not be configured or reached."""


class ImageNotFoundTransient(ScanGateError):
    """The scanner image is not present locally yet. Retried by the pull loop."""

    def __init__(self, reference: str) -> None:
        super().__init__(f"image {reference} is not loaded")
        self.reference = reference


class PullTimeoutError(ScanGateError):
    """The image did not become available before the pull deadline."""

    def __init__(self, reference: str, timeout: float) -> None:
        super().__init__(f"timeout: image {reference} not available after {timeout:g}s")
        self.reference = reference
        self.timeout = timeout


class ContainerAPIError(ScanGateError):
    """A create/start/wait/logs/remove round-trip to the daemon failed."""

    def __init__(self, operation: str, message: str, cid: str | None = None) -> None:
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation
        self.cid = cid


class WaitTimeoutError(ContainerAPIError):
    """The scanner container did not exit within the configured bound."""

    def __init__(self, cid: str | None, timeout: float) -> None:
        super().__init__("wait", f"container did not exit within {timeout:g}s", cid=cid)
        self.timeout = timeout


class InvalidCommandError(ScanGateError):
    """The command template resolved to an empty command."""


class OutputParseError(ScanGateError):
    """Scanner output does not match the expected schema."""

    def __init__(self, analyzer: str, message: str, raw_output: str) -> None:
        super().__init__(f"{analyzer}: {message}")
        self.analyzer = analyzer
        self.raw_output = raw_output


class PersistenceError(ScanGateError):
    """A run record could not be written."""
