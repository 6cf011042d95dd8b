from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from webproof.core.binding import binding
from webproof.core.errors import ErrorKind, WebProofError
from webproof.models.common import BindingInfo, ErrorResponse
from webproof.models.proof.schemas import (
    SimpleWebProofCreateRequest,
    SimpleWebProofResponse,
    WebProofCreateRequest,
    WebProofResult,
)
from webproof.services.proof.service import WebProofService, get_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/web-proof", tags=["web-proof"])

_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.INVALID_URL: 422,
    ErrorKind.INVALID_NOTARY_URL: 422,
    ErrorKind.INVALID_OPTION: 422,
    ErrorKind.BINDING_LOAD_FAILURE: 503,
    ErrorKind.CAPABILITY_MISSING: 503,
    ErrorKind.TIMEOUT: 504,
    ErrorKind.CAPABILITY_INVOCATION_FAILURE: 502,
    ErrorKind.MALFORMED_RESPONSE: 502,
}


# ---------------------------------------------------------------------------
# Dependency
# ---------------------------------------------------------------------------


def _get_service() -> WebProofService:
    """FastAPI dependency that builds a ``WebProofService`` for each request."""
    return get_service()


# ---------------------------------------------------------------------------
# POST /web-proof
# ---------------------------------------------------------------------------


@router.post(
    "",
    response_model=WebProofResult,
    summary="Generate a web proof for a URL",
)
async def post_web_proof(
    request: WebProofCreateRequest,
    service: WebProofService = Depends(_get_service),
) -> WebProofResult:
    """Generate a notarized proof for ``url``.

    Always answers **200**; inspect ``success`` and ``error_kind`` in the
    body to tell a proof from a failure.
    """
    return await service.web_proof(request.url, request.options)


# ---------------------------------------------------------------------------
# POST /web-proof/simple
# ---------------------------------------------------------------------------


@router.post(
    "/simple",
    response_model=SimpleWebProofResponse,
    responses={
        422: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
    summary="Generate a web proof through an explicit notary",
)
async def post_simple_web_proof(
    request: SimpleWebProofCreateRequest,
    service: WebProofService = Depends(_get_service),
) -> SimpleWebProofResponse:
    """Generate a proof through ``notary_host:notary_port``.

    - **200**: proof generated
    - **422**: invalid host, port or URL
    - **502**: the native call failed or returned a malformed value
    - **503**: native binding unavailable
    - **504**: the native call exceeded its deadline
    """
    try:
        proof = await service.simple_web_proof(
            request.notary_host, request.notary_port, request.url
        )
    except WebProofError as exc:
        status = _STATUS_BY_KIND.get(exc.kind, 500)
        logger.warning("POST /web-proof/simple failed (%s): %s", exc.kind.value, exc)
        return JSONResponse(
            status_code=status,
            content=ErrorResponse(detail=str(exc), kind=exc.kind).model_dump(mode="json"),
        )
    return SimpleWebProofResponse(proof=proof)


# ---------------------------------------------------------------------------
# GET /web-proof/binding
# ---------------------------------------------------------------------------


@router.get("/binding", response_model=BindingInfo, summary="Native binding status")
async def get_binding_info() -> BindingInfo:
    return binding.info()
