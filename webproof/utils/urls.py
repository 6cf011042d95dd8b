"""URL parsing for proof targets and notary endpoints.

Both parsers lean on pydantic's ``AnyHttpUrl`` for syntax checks and then
enforce the port range and host requirements themselves.  ``HttpUrl`` is
avoided because it caps URLs at 2083 characters.  Every failure is reported
through the module's own error classes; a ``ValidationError`` never escapes.
"""

from __future__ import annotations

from typing import Any

from pydantic import AnyHttpUrl, ValidationError

from webproof.core.errors import InvalidNotaryUrlError, InvalidUrlError
from webproof.models.proof.schemas import NotaryConfig, ParsedUrl

_SECURE_SCHEME = "https"


def _validation_detail(exc: ValidationError) -> str:
    errors = exc.errors()
    return errors[0]["msg"] if errors else str(exc)


def _default_port(scheme: str) -> int:
    return 443 if scheme == _SECURE_SCHEME else 80


def _parse(url: str) -> AnyHttpUrl:
    """Parse *url* or raise ``ValueError`` with a short reason."""
    try:
        parsed = AnyHttpUrl(url)
    except ValidationError as exc:
        raise ValueError(_validation_detail(exc)) from exc
    port = parsed.port if parsed.port is not None else _default_port(parsed.scheme)
    if not 1 <= port <= 65535:
        raise ValueError(f"Invalid port number: {port}")
    return parsed


def parse_url(url: Any) -> ParsedUrl:
    """Split a target URL into domain, uri, protocol and port.

    Raises:
        InvalidUrlError: empty input, malformed URL or out-of-range port.
    """
    if not url or not isinstance(url, str):
        raise InvalidUrlError("URL must be a non-empty string")
    try:
        parsed = _parse(url)
    except ValueError as exc:
        raise InvalidUrlError(f"Invalid URL format: {url}. {exc}") from exc

    uri = parsed.path or "/"
    if parsed.query:
        uri += f"?{parsed.query}"
    if parsed.fragment:
        uri += f"#{parsed.fragment}"

    return ParsedUrl(
        domain=parsed.host or "",
        uri=uri,
        protocol=f"{parsed.scheme}:",
        port=parsed.port or _default_port(parsed.scheme),
    )


def parse_notary_url(notary_url: Any) -> NotaryConfig:
    """Parse a notary endpoint into host, port, path prefix and TLS flag.

    ``https://notary.example.com:7047/api/`` becomes
    ``NotaryConfig(host="notary.example.com", port=7047, path_prefix="api",
    enable_tls=True)``.

    Raises:
        InvalidNotaryUrlError: empty input, malformed URL, bad port or
            missing hostname.
    """
    if not notary_url or not isinstance(notary_url, str):
        raise InvalidNotaryUrlError("Notary URL must be a non-empty string")
    try:
        parsed = _parse(notary_url)
        if not parsed.host:
            raise ValueError("Notary URL must contain a valid hostname")
    except ValueError as exc:
        raise InvalidNotaryUrlError(
            f"Invalid notary URL format: {notary_url}. {exc}"
        ) from exc

    return NotaryConfig(
        host=parsed.host,
        port=parsed.port or _default_port(parsed.scheme),
        path_prefix=(parsed.path or "").strip("/"),
        enable_tls=parsed.scheme == _SECURE_SCHEME,
    )


def is_valid_url(url: Any) -> bool:
    """Return ``True`` when *url* parses as a proof target."""
    try:
        parse_url(url)
    except InvalidUrlError:
        return False
    return True
