"""Unit tests for the TTL tool catalog.

Uses an injectable clock for deterministic expiry checks.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from chatstream.exceptions import ProviderUnavailable
from chatstream.interfaces import ToolDescriptor
from chatstream.tools import TOOL_CACHE_TTL_SECONDS, ToolCatalog
from tests.helpers.streams import FakeToolProvider


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestCaching:
    @pytest.mark.asyncio
    async def test_served_from_cache_within_ttl(self):
        clock = FakeClock()
        provider = FakeToolProvider(["list_files"])
        catalog = ToolCatalog(provider, time_func=clock)

        await catalog.get_tools()
        clock.now += 299
        tools = await catalog.get_tools()

        assert [t.name for t in tools] == ["list_files"]
        assert provider.list_calls == 1
        assert catalog.is_cached

    @pytest.mark.asyncio
    async def test_refetched_after_ttl(self):
        clock = FakeClock()
        provider = FakeToolProvider(["list_files"])
        catalog = ToolCatalog(provider, time_func=clock)

        await catalog.get_tools()
        clock.now += 301
        assert not catalog.is_cached
        await catalog.get_tools()

        assert provider.list_calls == 2

    def test_default_ttl_is_five_minutes(self):
        assert TOOL_CACHE_TTL_SECONDS == 300

    @pytest.mark.asyncio
    async def test_invalidate_forces_refetch(self):
        provider = FakeToolProvider(["a"])
        catalog = ToolCatalog(provider)

        await catalog.get_tools()
        catalog.invalidate()
        await catalog.get_tools()

        assert provider.list_calls == 2

    @pytest.mark.asyncio
    async def test_returned_list_is_a_copy(self):
        catalog = ToolCatalog(FakeToolProvider(["a"]))
        tools = await catalog.get_tools()
        tools.clear()
        assert len(await catalog.get_tools()) == 1


class TestFailures:
    @pytest.mark.asyncio
    async def test_no_provider_means_no_tools(self):
        assert await ToolCatalog().get_tools() == []

    @pytest.mark.asyncio
    async def test_failure_without_cache_raises(self):
        provider = AsyncMock()
        provider.list_tools.side_effect = ConnectionError("server gone")
        catalog = ToolCatalog(provider)

        with pytest.raises(ProviderUnavailable):
            await catalog.get_tools()

    @pytest.mark.asyncio
    async def test_failure_serves_stale_cache(self):
        clock = FakeClock()
        provider = AsyncMock()
        provider.list_tools.side_effect = [[ToolDescriptor(name="a")], ConnectionError("down")]
        catalog = ToolCatalog(provider, time_func=clock)

        await catalog.get_tools()
        clock.now += 600
        tools = await catalog.get_tools()

        assert [t.name for t in tools] == ["a"]


class TestProviderSwap:
    @pytest.mark.asyncio
    async def test_swap_invalidates_and_bumps_version(self):
        old = FakeToolProvider(["old_tool"])
        new = FakeToolProvider(["new_tool"])
        catalog = ToolCatalog(old)
        await catalog.get_tools()

        handle = catalog.swap_provider(new)

        assert handle.version == 1
        assert handle.executor is new
        assert [t.name for t in await catalog.get_tools()] == ["new_tool"]

    @pytest.mark.asyncio
    async def test_fetch_racing_a_swap_is_not_cached(self):
        release = asyncio.Event()

        class SlowProvider(FakeToolProvider):
            async def list_tools(self):
                await release.wait()
                return await super().list_tools()

        old = SlowProvider(["old_tool"])
        new = FakeToolProvider(["new_tool"])
        catalog = ToolCatalog(old)

        pending = asyncio.ensure_future(catalog.get_tools())
        await asyncio.sleep(0)
        catalog.swap_provider(new)
        release.set()

        assert [t.name for t in await pending] == ["old_tool"]
        assert not catalog.is_cached
        assert [t.name for t in await catalog.get_tools()] == ["new_tool"]

    def test_explicit_executor_wins(self):
        provider = FakeToolProvider()
        executor = FakeToolProvider()
        catalog = ToolCatalog(provider, executor)
        assert catalog.handle.executor is executor
