from __future__ import annotations

import sys
import textwrap
from pathlib import Path
from typing import Callable
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from webproof.core.binding import NativeBindingLoader
from webproof.main import app
from webproof.services.proof.service import WebProofService
from webproof.workers.invoker import CapabilityInvoker

#: A well-behaved capability module: async full proof, sync simple proof.
FAKE_BINDING = """
CALLS = []

async def generate_web_proof(params):
    CALLS.append(params)
    return {"success": True, "data": "proof:" + params["url"]}

def generate_simple_web_proof(notary_host, notary_port, url):
    CALLS.append((notary_host, notary_port, url))
    return f"simple:{notary_host}:{notary_port}:{url}"
"""

BINDING_NAME = "vlayer_web_proof.py"


@pytest.fixture(autouse=True)
def _no_bytecode(monkeypatch):
    """Fake bindings are rewritten in place; never load them from a stale .pyc."""
    monkeypatch.setattr(sys, "dont_write_bytecode", True)


@pytest.fixture
def make_binding(tmp_path: Path) -> Callable[..., Path]:
    """Write a capability module into ``tmp_path`` and return its path."""

    def _make(source: str = FAKE_BINDING, name: str = BINDING_NAME) -> Path:
        path = tmp_path / name
        path.write_text(textwrap.dedent(source))
        return path

    return _make


@pytest.fixture
def make_loader(tmp_path: Path) -> Callable[..., NativeBindingLoader]:
    def _make(*candidates: str, max_attempts: int = 3) -> NativeBindingLoader:
        return NativeBindingLoader(
            candidates=list(candidates) or [BINDING_NAME],
            base_dir=tmp_path,
            max_attempts=max_attempts,
        )

    return _make


@pytest.fixture
def loader(make_binding, make_loader) -> NativeBindingLoader:
    """Loader pointed at the default fake binding."""
    make_binding()
    return make_loader()


@pytest.fixture
def service(loader) -> WebProofService:
    return WebProofService(CapabilityInvoker(loader, timeout_ms=2000))


@pytest.fixture
def client(loader):
    """TestClient whose routes and lifespan use the fake binding."""
    with (
        patch("webproof.services.proof.service.binding", loader),
        patch("webproof.api.proof.routes.binding", loader),
        patch("webproof.main.binding", loader),
    ):
        with TestClient(app) as c:
            yield c
