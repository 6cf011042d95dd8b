"""Option validation and request construction for ``web_proof``."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Optional

from pydantic import ValidationError

from webproof.core.config import settings
from webproof.core.errors import InvalidOptionError
from webproof.models.proof.schemas import HttpMethod, WebProofOptions, WebProofRequest
from webproof.utils.urls import parse_notary_url

logger = logging.getLogger(__name__)

_BOUND_FIELDS = ("max_sent_data", "max_recv_data")
_METHODS = frozenset(m.value for m in HttpMethod)

OptionsInput = WebProofOptions | Mapping[str, Any] | None


def coerce_options(options: OptionsInput) -> WebProofOptions:
    """Turn raw caller input into a ``WebProofOptions`` instance.

    Type errors reported by pydantic are re-raised as ``InvalidOptionError``
    with the same wording the value checks use for byte bounds.
    """
    if options is None:
        return WebProofOptions()
    if isinstance(options, WebProofOptions):
        return options
    if not isinstance(options, Mapping):
        raise InvalidOptionError(
            f"Options must be a mapping, got {type(options).__name__}"
        )
    try:
        return WebProofOptions.model_validate(dict(options))
    except ValidationError as exc:
        messages = []
        for error in exc.errors():
            field = str(error["loc"][0]) if error["loc"] else "options"
            if field in _BOUND_FIELDS:
                messages.append(f"{field} must be a positive integer")
            else:
                messages.append(f"{field}: {error['msg']}")
        raise InvalidOptionError("; ".join(messages)) from exc


def validate_web_proof_options(options: OptionsInput) -> None:
    """Check option values before any capability call is attempted.

    Raises:
        InvalidOptionError: non-positive byte bound or unknown HTTP method.
        InvalidNotaryUrlError: ``notary_url`` present but malformed.
    """
    opts = coerce_options(options)

    for field in _BOUND_FIELDS:
        value = getattr(opts, field)
        if value is not None and (
            isinstance(value, bool) or not isinstance(value, int) or value <= 0
        ):
            raise InvalidOptionError(f"{field} must be a positive integer")

    if opts.method is not None and opts.method not in _METHODS:
        raise InvalidOptionError(f"Invalid HTTP method: {opts.method}")

    if opts.notary_url is not None:
        parse_notary_url(opts.notary_url)


def format_headers(headers: Optional[Iterable[Any]]) -> tuple[str, ...]:
    """Drop non-string and blank entries, keeping the original order."""
    if not headers:
        return ()
    return tuple(h for h in headers if isinstance(h, str) and h.strip())


def build_web_proof_request(
    url: str, options: OptionsInput = None
) -> WebProofRequest:
    """Merge validated *options* with the configured defaults.

    Byte bounds and the notary URL are always filled in here, so the
    capability module never falls back to its own defaults.
    """
    opts = coerce_options(options)
    logger.debug("Building web proof request for %s", url)
    return WebProofRequest(
        url=url,
        host=opts.host,
        notary_url=opts.notary_url or settings.default_notary_url,
        method=opts.method,
        headers=format_headers(opts.headers),
        data=opts.data,
        max_sent_data=opts.max_sent_data or settings.default_max_sent_data,
        max_recv_data=opts.max_recv_data or settings.default_max_recv_data,
    )
