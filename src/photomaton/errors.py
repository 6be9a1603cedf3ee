"""
Error Taxonomy
==============

Exceptions raised across the capture, stylize and export layers.

Every error is terminal for the operation that raised it. Nothing in this
package retries automatically; the caller decides whether to re-invoke.

Hierarchy:
    PhotomatonError
    ├── StylizeError
    │   ├── AuthError          missing or rejected credential
    │   └── RemoteError        remote call failed, timed out or returned non-2xx
    ├── DeviceError            camera unavailable or permission denied
    ├── ConfigError            export destination not configured
    ├── MediaDecodeError       upload or video could not be decoded
    └── PipelineRejectedError
        ├── PipelineBusyError  a run is already in flight for the session
        ├── EmptySequenceError nothing to stylize, present or export
        └── EmptyInstructionError
"""

from typing import Optional


class PhotomatonError(Exception):
    """Base class for all Photomaton errors."""
    pass


class StylizeError(PhotomatonError):
    """Raised when a stylize call cannot produce a result."""
    pass


class AuthError(StylizeError):
    """Raised when the credential is missing or rejected. Never retried."""
    pass


class RemoteError(StylizeError):
    """
    Raised when a remote call errors, times out or reports a non-2xx status.

    Attributes:
        status_code: HTTP status when the service answered, else None
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DeviceError(PhotomatonError):
    """Raised when a camera or media device cannot be opened or read."""
    pass


class ConfigError(PhotomatonError):
    """Raised when an export destination has not been configured."""
    pass


class MediaDecodeError(PhotomatonError):
    """Raised when uploaded media cannot be decoded into frames."""
    pass


class PipelineRejectedError(PhotomatonError):
    """Raised when a pipeline request is rejected before any work starts."""
    pass


class PipelineBusyError(PipelineRejectedError):
    """Raised when a run is requested while another run is in flight."""
    pass


class EmptySequenceError(PipelineRejectedError):
    """Raised when there are no frames to operate on."""
    pass


class EmptyInstructionError(PipelineRejectedError):
    """Raised when an edit is requested with blank instruction text."""
    pass
