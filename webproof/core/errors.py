"""Error taxonomy for the web proof facade.

Every failure the facade can surface is a ``WebProofError`` subclass whose
``kind`` tags it with an :class:`ErrorKind`.  ``web_proof`` embeds the kind
in the result object; ``simple_web_proof`` raises the exception itself.
"""

from __future__ import annotations

from enum import Enum
from typing import ClassVar


class ErrorKind(str, Enum):
    INVALID_URL = "InvalidUrl"
    INVALID_NOTARY_URL = "InvalidNotaryUrl"
    INVALID_OPTION = "InvalidOption"
    BINDING_LOAD_FAILURE = "BindingLoadFailure"
    CAPABILITY_MISSING = "CapabilityMissing"
    TIMEOUT = "Timeout"
    CAPABILITY_INVOCATION_FAILURE = "CapabilityInvocationFailure"
    MALFORMED_RESPONSE = "MalformedResponse"


class WebProofError(Exception):
    """Base class for all facade errors."""

    kind: ClassVar[ErrorKind] = ErrorKind.CAPABILITY_INVOCATION_FAILURE


class InvalidUrlError(WebProofError, ValueError):
    kind = ErrorKind.INVALID_URL


class InvalidNotaryUrlError(WebProofError, ValueError):
    kind = ErrorKind.INVALID_NOTARY_URL


class InvalidOptionError(WebProofError, ValueError):
    kind = ErrorKind.INVALID_OPTION


class BindingLoadError(WebProofError):
    """Raised when no candidate location yields an importable module."""

    kind = ErrorKind.BINDING_LOAD_FAILURE


class CapabilityMissingError(BindingLoadError):
    """Raised when a module loaded but lacks a required operation."""

    kind = ErrorKind.CAPABILITY_MISSING


class CapabilityTimeoutError(WebProofError):
    kind = ErrorKind.TIMEOUT

    def __init__(self, operation: str, timeout_ms: float) -> None:
        super().__init__(f"{operation} timed out after {timeout_ms:g} ms")
        self.operation = operation
        self.timeout_ms = timeout_ms


class CapabilityInvocationError(WebProofError):
    kind = ErrorKind.CAPABILITY_INVOCATION_FAILURE


class MalformedResponseError(WebProofError):
    kind = ErrorKind.MALFORMED_RESPONSE


#: Fixed message for the unsupported synchronous entry point.
SYNC_UNSUPPORTED_MESSAGE = (
    "web_proof_sync is not supported; only the asynchronous web_proof() is available"
)


class SyncUnsupportedError(NotImplementedError):
    def __init__(self) -> None:
        super().__init__(SYNC_UNSUPPORTED_MESSAGE)
