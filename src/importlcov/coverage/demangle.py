"""Lazily loaded C++ symbol demangling.

The demangling backend is an ordinary ``str -> str`` callable named by a
``"module:attribute"`` string (``cxxfilt:demangle`` by default). Importing it
can be slow (``cxxfilt`` locates and loads libstdc++ through ctypes), so it
happens off the event loop and only when the first mangled name shows up.

Usage::

    cache = DemanglerCache(lambda: load_backend("cxxfilt:demangle"))
    demangle = await cache.get()
    demangle("_Z3fooi")  # 'foo(int)'
"""

from __future__ import annotations

import asyncio
import importlib
import re
from collections.abc import Awaitable, Callable

import structlog

from importlcov.core.errors import DemangleError

logger = structlog.get_logger()

Demangle = Callable[[str], str]
DemangleLoader = Callable[[], Awaitable[Demangle]]

# Itanium C++ ABI: _Z, plus up to two extra underscores on platforms that
# prefix symbols (Mach-O adds one, some toolchains add block-invocation ones).
MANGLED_NAME_RE = re.compile(r"^_{1,3}Z")


def is_mangled(name: str) -> bool:
    return MANGLED_NAME_RE.match(name) is not None


def _import_backend(spec: str) -> Demangle:
    module_name, _, attr = spec.partition(":")
    module = importlib.import_module(module_name)
    demangle = getattr(module, attr)
    if not callable(demangle):
        raise TypeError(f"{spec} is not callable")
    return demangle  # type: ignore[no-any-return]


async def load_backend(spec: str) -> Demangle:
    """Import a demangling callable without blocking the event loop.

    Raises:
        DemangleError: If the module cannot be imported or the attribute is
            missing or not callable.
    """
    loop = asyncio.get_running_loop()
    try:
        demangle = await loop.run_in_executor(None, _import_backend, spec)
    except (ImportError, AttributeError, OSError, TypeError) as e:
        raise DemangleError.load_failed(spec, str(e)) from e
    logger.debug("demangler_loaded", backend=spec)
    return demangle


class DemanglerCache:
    """Loads the demangler once and hands the same callable to every caller.

    Concurrent first callers share one in-flight load. A failed load is not
    remembered: every waiter sees the error, and the next ``get`` starts a
    fresh load.
    """

    def __init__(self, loader: DemangleLoader) -> None:
        self._loader = loader
        self._demangle: Demangle | None = None
        self._pending: asyncio.Future[Demangle] | None = None
        self.load_count = 0

    @property
    def loaded(self) -> bool:
        return self._demangle is not None

    async def get(self) -> Demangle:
        if self._demangle is not None:
            return self._demangle
        if self._pending is None:
            self._pending = asyncio.ensure_future(self._load())
        # Shielded so one cancelled waiter doesn't cancel the load for the rest
        return await asyncio.shield(self._pending)

    async def _load(self) -> Demangle:
        self.load_count += 1
        try:
            demangle = await self._loader()
        except DemangleError as e:
            logger.warning("demangler_load_failed", error=str(e))
            raise
        except Exception as e:
            logger.warning("demangler_load_failed", error=str(e))
            raise DemangleError.load_failed("<loader>", str(e)) from e
        finally:
            self._pending = None
        self._demangle = demangle
        return demangle
