"""Tool catalog: time-cached tool listing behind a versioned provider handle.

The catalog serves a cached snapshot for five minutes before asking the
provider again.

The active provider can be swapped from outside a running turn. A swap bumps
the handle version and drops the cache; a fetch that started against an older
version never writes its result into the new version's cache.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from chatstream.exceptions import ProviderUnavailable
from chatstream.interfaces import ToolDescriptor, ToolExecutor, ToolProvider

logger = logging.getLogger(__name__)

# Cache TTL in seconds
TOOL_CACHE_TTL_SECONDS = 300


@dataclass(frozen=True)
class ToolHandle:
    """Versioned capability handle captured by value at the start of a turn."""

    provider: ToolProvider | None
    executor: ToolExecutor | None
    version: int


@dataclass(frozen=True)
class _CacheEntry:
    """Internal cache entry with TTL tracking."""

    tools: tuple[ToolDescriptor, ...]
    fetched_at: float
    version: int


class ToolCatalog:
    """Fetches and caches the list of callable tools."""

    def __init__(
        self,
        provider: ToolProvider | None = None,
        executor: ToolExecutor | None = None,
        *,
        ttl_seconds: float = TOOL_CACHE_TTL_SECONDS,
        time_func: Callable[[], float] | None = None,
    ):
        """Initialize the catalog.

        Args:
            provider: Capability listing the tools (``None`` = no tools).
            executor: Capability running them; defaults to ``provider`` when
                it can also invoke tools.
            ttl_seconds: Cache lifetime.
            time_func: Callable returning current time in seconds (default:
                time.monotonic). Inject a mock clock for deterministic testing.
        """
        self._ttl = ttl_seconds
        self._time_func = time_func or time.monotonic
        self._cache: _CacheEntry | None = None
        self._handle = ToolHandle(provider=provider, executor=_default_executor(provider, executor), version=0)

    @property
    def handle(self) -> ToolHandle:
        return self._handle

    @property
    def is_cached(self) -> bool:
        return self._cache is not None and not self._is_expired(self._cache)

    def _is_expired(self, entry: _CacheEntry) -> bool:
        return (self._time_func() - entry.fetched_at) >= self._ttl

    async def get_tools(self) -> list[ToolDescriptor]:
        """Return the tool list, from cache while it is fresh.

        Returns:
            Tool descriptors of the current provider (empty without one).

        Raises:
            ProviderUnavailable: The provider failed and no cache exists.
        """
        handle = self._handle
        if handle.provider is None:
            return []

        entry = self._cache
        if entry is not None and entry.version == handle.version and not self._is_expired(entry):
            logger.debug("Using cached tools (%d tools)", len(entry.tools))
            return list(entry.tools)

        logger.debug("Fetching fresh tools from provider")
        try:
            tools = await handle.provider.list_tools()
        except Exception as e:
            if entry is not None and entry.version == handle.version:
                logger.warning("Tool listing failed, serving stale cache: %s", e)
                return list(entry.tools)
            raise ProviderUnavailable(
                f"Tool listing failed: {type(e).__name__}: {e}",
                provider=type(handle.provider).__name__,
            ) from e

        snapshot = tuple(tools)
        if self._handle.version == handle.version:
            self._cache = _CacheEntry(tools=snapshot, fetched_at=self._time_func(), version=handle.version)
            logger.info("Cached %d tools", len(snapshot))
        else:
            logger.info("Tool provider swapped during fetch; not caching stale listing")
        return list(snapshot)

    def invalidate(self) -> None:
        """Unconditionally drop the cached listing."""
        logger.debug("Invalidating tools cache")
        self._cache = None

    def swap_provider(
        self,
        provider: ToolProvider | None,
        executor: ToolExecutor | None = None,
    ) -> ToolHandle:
        """Install a new provider and invalidate the cache.

        Does not affect turns that already captured the previous handle.
        """
        self._handle = ToolHandle(
            provider=provider,
            executor=_default_executor(provider, executor),
            version=self._handle.version + 1,
        )
        self.invalidate()
        return self._handle


def _default_executor(provider: ToolProvider | None, executor: ToolExecutor | None) -> ToolExecutor | None:
    if executor is not None:
        return executor
    if provider is not None and callable(getattr(provider, "invoke", None)):
        return provider  # type: ignore[return-value]
    return None
