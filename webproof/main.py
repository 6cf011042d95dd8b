from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from webproof.api.router import router
from webproof.core.binding import binding
from webproof.core.config import settings
from webproof.core.errors import BindingLoadError


def _configure_logging() -> None:
    """Configure the ``webproof`` logger namespace.

    ``logging.basicConfig`` is a no-op when the root logger already has
    handlers (e.g. when uvicorn installs its own before the lifespan runs),
    so the package namespace gets its own handler with ``propagate = False``.
    """
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s")
    )
    pkg_log = logging.getLogger("webproof")
    pkg_log.setLevel(level)
    if not pkg_log.handlers:
        pkg_log.addHandler(handler)
    pkg_log.propagate = False


_configure_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # ── Startup ──────────────────────────────────────────────────────
    if settings.preload_binding:
        try:
            binding.load()
        except BindingLoadError as exc:
            # Requests retry the load until the attempt cap is reached.
            logger.warning("Native binding preload failed: %s", exc)
    yield
    # ── Shutdown ─────────────────────────────────────────────────────
    logger.info("Shutting down; native binding loaded=%s.", binding.is_loaded())


app = FastAPI(
    title="Web Proof",
    description="Facade that generates notarized web transaction proofs.",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(router)


@app.get("/health", tags=["health"])
async def health() -> dict[str, str]:
    return {"status": "ok"}
