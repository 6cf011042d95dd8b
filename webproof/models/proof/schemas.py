from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt

from webproof.core.errors import ErrorKind


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


class WebProofOptions(BaseModel):
    """Caller-supplied options for ``web_proof``.

    Types are checked here; value constraints (positive bounds, known
    methods) are enforced by ``validate_web_proof_options`` so the error
    messages stay stable.
    ``headers`` accepts any entries; ``format_headers`` keeps only the
    non-blank strings.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    host: Optional[str] = None
    notary_url: Optional[str] = None
    method: Optional[str] = None
    headers: Optional[list[Any]] = None
    data: Optional[str] = None
    max_sent_data: Optional[StrictInt] = None
    max_recv_data: Optional[StrictInt] = None


class WebProofRequest(BaseModel):
    """Normalised request handed to the capability module."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(min_length=1)
    host: Optional[str] = None
    notary_url: Optional[str] = None
    method: Optional[str] = None
    headers: tuple[str, ...] = ()
    data: Optional[str] = None
    max_sent_data: Optional[int] = Field(default=None, gt=0)
    max_recv_data: Optional[int] = Field(default=None, gt=0)

    def to_params(self) -> dict:
        """Return the parameter mapping passed to ``generate_web_proof``."""
        params = self.model_dump()
        params["headers"] = list(self.headers)
        return params


class WebProofResponse(BaseModel):
    """Raw outcome returned by ``generate_web_proof``."""

    model_config = ConfigDict(from_attributes=True)

    success: StrictBool
    data: Optional[str] = None
    error: Optional[str] = None


class PerformanceMetrics(BaseModel):
    """Timing of one invocation, in milliseconds on a monotonic clock."""

    start_time: float
    end_time: float
    duration: float
    memory_usage: Optional[int] = None


class WebProofResult(BaseModel):
    """Public result of ``web_proof``."""

    success: bool
    proof: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    metrics: Optional[PerformanceMetrics] = None


class ParsedUrl(BaseModel):
    model_config = ConfigDict(frozen=True)

    domain: str
    uri: str
    protocol: str
    port: int = Field(ge=1, le=65535)


class NotaryConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str
    port: int = Field(ge=1, le=65535)
    path_prefix: str
    enable_tls: bool


class WebProofCreateRequest(BaseModel):
    """Request body for POST /web-proof."""

    url: str
    options: Optional[WebProofOptions] = None


class SimpleWebProofCreateRequest(BaseModel):
    """Request body for POST /web-proof/simple."""

    notary_host: str
    notary_port: int
    url: str


class SimpleWebProofResponse(BaseModel):
    proof: str
