"""Native binding loader.

Resolves the external capability module that actually produces web proofs.
The module is searched for across an ordered list of candidate paths; the
first one that imports and exposes the required operations is cached for
the rest of the process.

Lifecycle::

    module = binding.load()   # first call resolves, later calls hit the cache
    binding.info()            # diagnostics, never raises
    binding.reset()           # tests only

Failed attempts are counted.  Once ``max_attempts`` consecutive attempts
have failed the last error is cached and replayed by every later ``load()``
without touching the filesystem again.

Loading is synchronous and holds no lock.  Under asyncio it always completes
within a single scheduling turn; two callers racing in the UNLOADED phase may
both resolve, and the first module stored wins.
"""

from __future__ import annotations

import importlib.util
import logging
import platform
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from types import ModuleType
from typing import ClassVar, Sequence

from webproof.core.config import settings
from webproof.core.errors import BindingLoadError, CapabilityMissingError
from webproof.models.common import BindingInfo

logger = logging.getLogger(__name__)

#: Platform identifier -> binary tag used in the native module file name.
PLATFORM_BINARIES: dict[str, str] = {
    "linux-x64": "linux-x64-gnu",
    "darwin-x64": "darwin-x64",
    "darwin-arm64": "darwin-arm64",
    "win32-x64": "win32-x64-msvc",
}

SUPPORTED_PLATFORMS: tuple[str, ...] = tuple(PLATFORM_BINARIES)

_ARCH_ALIASES = {
    "x86_64": "x64",
    "amd64": "x64",
    "arm64": "arm64",
    "aarch64": "arm64",
}

_PACKAGE_DIR = Path(__file__).resolve().parent.parent


def platform_key() -> str:
    """Return the running platform as ``<os>-<arch>``, e.g. ``linux-x64``."""
    system = "linux" if sys.platform.startswith("linux") else sys.platform
    machine = platform.machine().lower()
    return f"{system}-{_ARCH_ALIASES.get(machine, machine)}"


def default_candidates(module_name: str, key: str | None = None) -> list[str]:
    """Build the default search list for *module_name* on platform *key*.

    The platform-specific file comes first, then an untagged fallback; each
    name is tried next to the package, one level up and under ``dist/``.
    """
    key = key or platform_key()
    ext = ".pyd" if key.startswith("win32") else ".so"
    names = []
    tag = PLATFORM_BINARIES.get(key)
    if tag is not None:
        names.append(f"{module_name}.{tag}{ext}")
    names.append(f"{module_name}{ext}")
    return [str(Path(folder) / name) for folder in (".", "..", "dist") for name in names]


class BindingPhase(str, Enum):
    UNLOADED = "unloaded"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


@dataclass
class BindingState:
    """Mutable loader state shared by every invocation in the process.

    ``module`` is set at most once.  ``cached_error`` is set only when the
    attempt cap has been reached, which makes the failure terminal.
    """

    phase: BindingPhase = BindingPhase.UNLOADED
    module: ModuleType | None = None
    source: Path | None = None
    attempts: int = 0
    last_error: BindingLoadError | None = None
    cached_error: BindingLoadError | None = None

    @property
    def terminal(self) -> bool:
        return self.cached_error is not None


class NativeBindingLoader:
    """Loads and caches the capability module.

    Constructor arguments override the matching ``settings`` values; when
    omitted, settings are read on every ``load()`` so patches in tests take
    effect without rebuilding the loader.
    """

    REQUIRED_CAPABILITIES: ClassVar[tuple[str, ...]] = (
        "generate_web_proof",
        "generate_simple_web_proof",
    )

    def __init__(
        self,
        candidates: Sequence[str | Path] | None = None,
        base_dir: Path | None = None,
        max_attempts: int | None = None,
        module_name: str | None = None,
    ) -> None:
        self._candidates = list(candidates) if candidates is not None else None
        self._base_dir = base_dir
        self._max_attempts = max_attempts
        self._module_name = module_name
        self.state = BindingState()

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def module_name(self) -> str:
        return self._module_name or settings.binding_module_name

    @property
    def max_attempts(self) -> int:
        if self._max_attempts is not None:
            return self._max_attempts
        return settings.binding_max_attempts

    def candidate_paths(self) -> list[Path]:
        """Return the ordered candidate locations as absolute paths."""
        base = self._base_dir or settings.binding_dir or _PACKAGE_DIR
        if self._candidates is not None:
            candidates = self._candidates
        elif settings.binding_paths is not None:
            candidates = settings.binding_paths
        else:
            candidates = default_candidates(self.module_name)
        return [(base / Path(c)).resolve() for c in candidates]

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> ModuleType:
        """Return the capability module, resolving it on first use.

        Raises:
            BindingLoadError: no candidate could be imported, or the attempt
                cap was reached earlier (the cached error is re-raised).
            CapabilityMissingError: a module was imported but lacks one of
                ``REQUIRED_CAPABILITIES``.
        """
        state = self.state
        if state.module is not None:
            return state.module
        if state.cached_error is not None:
            raise state.cached_error

        state.phase = BindingPhase.LOADING
        try:
            module, source = self._resolve()
            self._check_capabilities(module, source)
        except BindingLoadError as exc:
            self._record_failure(exc)
            raise

        if state.module is None:
            state.module = module
            state.source = source
        state.phase = BindingPhase.LOADED
        state.last_error = None
        logger.info("Native binding loaded from %s.", state.source)
        return state.module

    def is_loaded(self) -> bool:
        return self.state.module is not None

    def info(self) -> BindingInfo:
        state = self.state
        key = platform_key()
        error = state.cached_error or state.last_error
        return BindingInfo(
            loaded=state.module is not None,
            phase=state.phase.value,
            attempts=state.attempts,
            max_attempts=self.max_attempts,
            source=str(state.source) if state.source is not None else None,
            platform=key,
            supported=key in PLATFORM_BINARIES,
            error=str(error) if error is not None else None,
        )

    def reset(self) -> None:
        """Forget everything, including a terminal failure.  Test helper."""
        self.state = BindingState()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _resolve(self) -> tuple[ModuleType, Path]:
        failures: list[str] = []
        for path in self.candidate_paths():
            if not path.is_file():
                failures.append(f"{path}: not found")
                continue
            try:
                module = self._import(path)
            except Exception as exc:
                # Native imports fail with ImportError, OSError and friends.
                logger.debug("Candidate %s failed to import: %s", path, exc)
                failures.append(f"{path}: {exc}")
                continue
            return module, path

        detail = "; ".join(failures) or "no candidate locations configured"
        raise BindingLoadError(f"Failed to load native binding: {detail}")

    def _import(self, path: Path) -> ModuleType:
        spec = importlib.util.spec_from_file_location(self.module_name, path)
        if spec is None or spec.loader is None:
            raise ImportError(f"unsupported module type {path.suffix!r}")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module

    def _check_capabilities(self, module: ModuleType, source: Path) -> None:
        missing = [
            name
            for name in self.REQUIRED_CAPABILITIES
            if not callable(getattr(module, name, None))
        ]
        if missing:
            raise CapabilityMissingError(
                f"Native binding at {source} is missing required capabilities: "
                f"{', '.join(missing)}"
            )

    def _record_failure(self, exc: BindingLoadError) -> None:
        state = self.state
        state.attempts += 1
        state.last_error = exc
        state.phase = BindingPhase.FAILED
        if state.attempts >= self.max_attempts:
            state.cached_error = exc
            logger.error(
                "Native binding unavailable after %d attempts; caching failure: %s",
                state.attempts,
                exc,
            )
        else:
            logger.warning(
                "Native binding load attempt %d/%d failed: %s",
                state.attempts,
                self.max_attempts,
                exc,
            )


#: Module-level loader shared by the whole process.
binding: NativeBindingLoader = NativeBindingLoader()
