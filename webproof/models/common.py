from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from webproof.core.errors import ErrorKind


class ErrorResponse(BaseModel):
    detail: str
    kind: Optional[ErrorKind] = None


class BindingInfo(BaseModel):
    """Snapshot of the native binding loader state."""

    loaded: bool
    phase: str
    attempts: int
    max_attempts: int
    source: Optional[str] = None
    platform: str
    supported: bool
    error: Optional[str] = None
