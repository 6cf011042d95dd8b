"""Client-side facade for notarized web transaction proofs.

Usage::

    from webproof import web_proof

    result = await web_proof("https://api.example.com/data")
    if result.success:
        print(result.proof)
"""

from webproof.core.binding import SUPPORTED_PLATFORMS, NativeBindingLoader
from webproof.core.config import Settings, settings
from webproof.core.errors import (
    BindingLoadError,
    CapabilityInvocationError,
    CapabilityMissingError,
    CapabilityTimeoutError,
    ErrorKind,
    InvalidNotaryUrlError,
    InvalidOptionError,
    InvalidUrlError,
    MalformedResponseError,
    SyncUnsupportedError,
    WebProofError,
)
from webproof.models.common import BindingInfo
from webproof.models.proof.schemas import (
    HttpMethod,
    NotaryConfig,
    ParsedUrl,
    PerformanceMetrics,
    WebProofOptions,
    WebProofRequest,
    WebProofResponse,
    WebProofResult,
)
from webproof.services.proof.normalizer import create_performance_metrics
from webproof.services.proof.request import (
    build_web_proof_request,
    format_headers,
    validate_web_proof_options,
)
from webproof.services.proof.service import (
    WebProofService,
    get_native_binding_info,
    is_native_binding_loaded,
    simple_web_proof,
    web_proof,
    web_proof_sync,
)
from webproof.utils.urls import is_valid_url, parse_notary_url, parse_url

__version__ = "1.0.0"

__all__ = [
    "BindingInfo",
    "BindingLoadError",
    "CapabilityInvocationError",
    "CapabilityMissingError",
    "CapabilityTimeoutError",
    "ErrorKind",
    "HttpMethod",
    "InvalidNotaryUrlError",
    "InvalidOptionError",
    "InvalidUrlError",
    "MalformedResponseError",
    "NativeBindingLoader",
    "NotaryConfig",
    "ParsedUrl",
    "PerformanceMetrics",
    "SUPPORTED_PLATFORMS",
    "Settings",
    "SyncUnsupportedError",
    "WebProofError",
    "WebProofOptions",
    "WebProofRequest",
    "WebProofResponse",
    "WebProofResult",
    "WebProofService",
    "build_web_proof_request",
    "create_performance_metrics",
    "format_headers",
    "get_native_binding_info",
    "is_native_binding_loaded",
    "is_valid_url",
    "parse_notary_url",
    "parse_url",
    "settings",
    "simple_web_proof",
    "validate_web_proof_options",
    "web_proof",
    "web_proof_sync",
]
