"""Capability invoker.

Calls an operation on the native binding and races it against a deadline.

Coroutine capabilities run as asyncio tasks; plain callables run on a worker
thread so a blocking native call never stalls the event loop.  When the
deadline wins, the call is abandoned rather than stopped: worker threads keep
running until the native code returns, and coroutine tasks are cancelled
only when ``settings.cancel_on_timeout`` is set.  Whatever an abandoned call
eventually produces is logged and discarded.
"""

from __future__ import annotations

import asyncio
import functools
import inspect
import logging
from typing import Any, Callable

from pydantic import ValidationError

from webproof.core.binding import NativeBindingLoader, binding
from webproof.core.config import settings
from webproof.core.errors import (
    CapabilityInvocationError,
    CapabilityMissingError,
    CapabilityTimeoutError,
    MalformedResponseError,
    WebProofError,
)
from webproof.models.proof.schemas import WebProofRequest, WebProofResponse

logger = logging.getLogger(__name__)


async def _call(func: Callable[..., Any], args: tuple[Any, ...]) -> Any:
    if inspect.iscoroutinefunction(func):
        return await func(*args)
    result = await asyncio.to_thread(func, *args)
    if inspect.isawaitable(result):
        return await result
    return result


def _log_abandoned(operation: str, task: asyncio.Future) -> None:
    if task.cancelled():
        logger.debug("Abandoned %s call was cancelled.", operation)
        return
    exc = task.exception()
    if exc is not None:
        logger.warning("Abandoned %s call failed after its deadline: %s", operation, exc)
    else:
        logger.debug("Abandoned %s call finished after its deadline; result discarded.", operation)


class CapabilityInvoker:
    """Runs capability operations from the loaded binding under a deadline."""

    def __init__(
        self,
        loader: NativeBindingLoader | None = None,
        timeout_ms: float | None = None,
    ) -> None:
        self._loader = loader if loader is not None else binding
        self._timeout_ms = timeout_ms

    @property
    def timeout_ms(self) -> float:
        if self._timeout_ms is not None:
            return self._timeout_ms
        return settings.timeout_ms

    async def invoke(
        self, operation: str, *args: Any, timeout_ms: float | None = None
    ) -> Any:
        """Call *operation* with *args* and return its raw result.

        Raises:
            BindingLoadError: the binding could not be loaded.
            CapabilityMissingError: the binding has no such operation.
            CapabilityTimeoutError: the deadline elapsed first.
            CapabilityInvocationError: the operation raised.
        """
        module = self._loader.load()
        func = getattr(module, operation, None)
        if not callable(func):
            raise CapabilityMissingError(f"Native binding has no callable {operation!r}")

        deadline = timeout_ms if timeout_ms is not None else self.timeout_ms
        task = asyncio.ensure_future(_call(func, args))
        try:
            done, _ = await asyncio.wait({task}, timeout=deadline / 1000)
        except asyncio.CancelledError:
            task.cancel()
            raise

        if task not in done:
            self._abandon(task, operation)
            logger.warning("%s exceeded its %g ms deadline.", operation, deadline)
            raise CapabilityTimeoutError(operation, deadline)

        try:
            return task.result()
        except WebProofError:
            raise
        except Exception as exc:
            raise CapabilityInvocationError(
                f"Native {operation} call failed: {exc}"
            ) from exc

    def _abandon(self, task: asyncio.Future, operation: str) -> None:
        if settings.cancel_on_timeout:
            task.cancel()
        task.add_done_callback(functools.partial(_log_abandoned, operation))

    # ------------------------------------------------------------------
    # Typed wrappers for the two capability operations
    # ------------------------------------------------------------------

    async def generate_web_proof(
        self, request: WebProofRequest, timeout_ms: float | None = None
    ) -> WebProofResponse:
        raw = await self.invoke(
            "generate_web_proof", request.to_params(), timeout_ms=timeout_ms
        )
        try:
            return WebProofResponse.model_validate(raw)
        except ValidationError as exc:
            raise MalformedResponseError(
                f"Malformed response from generate_web_proof: {exc.errors()[0]['msg']}"
            ) from exc

    async def generate_simple_web_proof(
        self,
        notary_host: str,
        notary_port: int,
        url: str,
        timeout_ms: float | None = None,
    ) -> str:
        raw = await self.invoke(
            "generate_simple_web_proof",
            notary_host,
            notary_port,
            url,
            timeout_ms=timeout_ms,
        )
        if not isinstance(raw, str):
            raise MalformedResponseError(
                f"generate_simple_web_proof returned {type(raw).__name__}, expected str"
            )
        return raw
