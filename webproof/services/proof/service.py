from __future__ import annotations

import logging
from typing import Any, NoReturn

from webproof.core.binding import binding
from webproof.core.errors import (
    CapabilityInvocationError,
    InvalidNotaryUrlError,
    SyncUnsupportedError,
    WebProofError,
)
from webproof.models.common import BindingInfo
from webproof.models.proof.schemas import WebProofResult
from webproof.services.proof.normalizer import (
    create_performance_metrics,
    normalize_error,
    normalize_response,
    now_ms,
)
from webproof.services.proof.request import (
    OptionsInput,
    build_web_proof_request,
    coerce_options,
    validate_web_proof_options,
)
from webproof.utils.urls import parse_url
from webproof.workers.invoker import CapabilityInvoker

logger = logging.getLogger(__name__)


class WebProofService:
    """Public web proof operations on top of a ``CapabilityInvoker``.

    The two operations surface errors differently: ``web_proof`` always
    returns a ``WebProofResult``, ``simple_web_proof`` raises.
    """

    def __init__(self, invoker: CapabilityInvoker) -> None:
        self._invoker = invoker

    async def web_proof(self, url: Any, options: OptionsInput = None) -> WebProofResult:
        """Generate a proof for *url*.  Never raises.

        Options are validated and the URL is parsed before the native
        binding is touched, so invalid input never costs a load attempt.
        """
        start = now_ms()
        try:
            opts = coerce_options(options)
            validate_web_proof_options(opts)
            parse_url(url)
            request = build_web_proof_request(url, opts)
            response = await self._invoker.generate_web_proof(request)
        except WebProofError as exc:
            logger.warning("web_proof failed for %s: %s", url, exc)
            return normalize_error(exc, create_performance_metrics(start))
        except Exception as exc:
            logger.exception("Unexpected error in web_proof for %s", url)
            return normalize_error(exc, create_performance_metrics(start))

        result = normalize_response(response, create_performance_metrics(start))
        if not result.success:
            logger.warning("web_proof for %s returned an error: %s", url, result.error)
        return result

    async def simple_web_proof(
        self, notary_host: Any, notary_port: Any, url: Any
    ) -> str:
        """Generate a proof through the notary at *notary_host*:*notary_port*.

        Raises:
            InvalidNotaryUrlError: empty host or port outside 1-65535.
            InvalidUrlError: *url* is not a valid http(s) URL.
            WebProofError: any binding, timeout or invocation failure.
        """
        if not isinstance(notary_host, str) or not notary_host.strip():
            raise InvalidNotaryUrlError("Notary host must be a non-empty string")
        if (
            isinstance(notary_port, bool)
            or not isinstance(notary_port, int)
            or not 1 <= notary_port <= 65535
        ):
            raise InvalidNotaryUrlError(
                "Notary port must be an integer between 1 and 65535"
            )
        parse_url(url)

        try:
            return await self._invoker.generate_simple_web_proof(
                notary_host, notary_port, url
            )
        except WebProofError:
            raise
        except Exception as exc:
            logger.exception("Unexpected error in simple_web_proof for %s", url)
            raise CapabilityInvocationError(
                f"Failed to generate web proof: {exc}"
            ) from exc


def get_service() -> WebProofService:
    """Build a service bound to the process-wide native binding."""
    return WebProofService(CapabilityInvoker(binding))


async def web_proof(url: Any, options: OptionsInput = None) -> WebProofResult:
    return await get_service().web_proof(url, options)


async def simple_web_proof(notary_host: Any, notary_port: Any, url: Any) -> str:
    return await get_service().simple_web_proof(notary_host, notary_port, url)


def web_proof_sync(*args: Any, **kwargs: Any) -> NoReturn:
    """Always raises: proofs can only be generated asynchronously."""
    raise SyncUnsupportedError()


def is_native_binding_loaded() -> bool:
    return binding.is_loaded()


def get_native_binding_info() -> BindingInfo:
    return binding.info()
