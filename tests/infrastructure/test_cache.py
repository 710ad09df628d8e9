"""Tests for RemoteCache — single-flight loads, invalidation, failures."""

from __future__ import annotations

import asyncio

import anyio
import pytest

from realmctl.infrastructure.cache import CacheState, RemoteCache


class Loader:
    """Counting loader; the first call blocks on ``gate`` when one is given."""

    def __init__(self, *, gate: asyncio.Event | None = None, fail_first: bool = False) -> None:
        self.calls = 0
        self.gate = gate
        self.fail_first = fail_first

    async def __call__(self) -> int:
        self.calls += 1
        call = self.calls
        if call == 1 and self.gate is not None:
            await self.gate.wait()
        if call == 1 and self.fail_first:
            msg = "backend down"
            raise RuntimeError(msg)
        return call


async def _settle() -> None:
    for _ in range(3):
        await asyncio.sleep(0)


class TestResolve:
    def test_loads_once_then_serves_cached(self) -> None:
        cache = RemoteCache()
        loader = Loader()

        async def scenario() -> None:
            assert await cache.resolve("k", loader) == 1
            assert await cache.resolve("k", loader) == 1

        anyio.run(scenario)
        assert loader.calls == 1
        entry = cache.get("k")
        assert entry is not None
        assert entry.state is CacheState.READY
        assert entry.fetched_at is not None

    def test_concurrent_resolves_share_one_load(self) -> None:
        cache = RemoteCache()

        async def scenario() -> tuple[int, ...]:
            loader = Loader(gate=asyncio.Event())
            tasks = [asyncio.create_task(cache.resolve("k", loader)) for _ in range(3)]
            await _settle()
            assert cache.is_pending("k")
            assert cache.get("k").state is CacheState.PENDING  # type: ignore[union-attr]
            loader.gate.set()  # type: ignore[union-attr]
            results = await asyncio.gather(*tasks)
            assert loader.calls == 1
            return tuple(results)

        assert anyio.run(scenario) == (1, 1, 1)
        assert not cache.is_pending("k")

    def test_distinct_keys_load_independently(self) -> None:
        cache = RemoteCache()
        loader = Loader()

        async def scenario() -> None:
            await cache.resolve("a", loader)
            await cache.resolve("b", loader)

        anyio.run(scenario)
        assert loader.calls == 2
        assert sorted(cache.keys()) == ["a", "b"]


class TestInvalidate:
    def test_invalidate_forces_reload(self) -> None:
        cache = RemoteCache()
        loader = Loader()

        async def scenario() -> int:
            await cache.resolve("k", loader)
            assert cache.invalidate("k") is True
            assert cache.is_stale("k")
            return await cache.resolve("k", loader)

        assert anyio.run(scenario) == 2
        assert loader.calls == 2
        assert cache.is_stale("k") is False

    def test_stale_entry_keeps_old_value_until_reload(self) -> None:
        cache = RemoteCache()
        cache.put("k", "old")
        cache.invalidate("k")
        entry = cache.get("k")
        assert entry is not None
        assert entry.value == "old"
        assert entry.stale is True

    def test_unknown_key_is_noop(self) -> None:
        cache = RemoteCache()
        assert cache.invalidate("missing") is False
        assert cache.is_stale("missing") is False
        assert cache.get("missing") is None

    def test_invalidate_prefix(self) -> None:
        cache = RemoteCache()
        for key in ("/a?list", "/a#detail", "/b?list"):
            cache.put(key, [])
        assert cache.invalidate_prefix("/a") == 2
        assert cache.is_stale("/a?list")
        assert not cache.is_stale("/b?list")

    def test_invalidation_during_load_triggers_fresh_load(self) -> None:
        cache = RemoteCache()

        async def scenario() -> tuple[int, int, int]:
            loader = Loader(gate=asyncio.Event())
            first = asyncio.create_task(cache.resolve("k", loader))
            await _settle()
            assert cache.invalidate("k") is True
            second = asyncio.create_task(cache.resolve("k", loader))
            await _settle()
            loader.gate.set()  # type: ignore[union-attr]
            a, b = await asyncio.gather(first, second)
            return a, b, loader.calls

        assert anyio.run(scenario) == (1, 2, 2)
        entry = cache.get("k")
        assert entry is not None
        assert entry.value == 2
        assert entry.stale is False


class TestFailures:
    def test_failure_is_recorded_and_raised(self) -> None:
        cache = RemoteCache()
        loader = Loader(fail_first=True)

        async def scenario() -> None:
            with pytest.raises(RuntimeError, match="backend down"):
                await cache.resolve("k", loader)

        anyio.run(scenario)
        entry = cache.get("k")
        assert entry is not None
        assert entry.state is CacheState.FAILED
        assert entry.value is None
        assert isinstance(entry.error, RuntimeError)

    def test_failed_entry_retries_on_next_resolve(self) -> None:
        cache = RemoteCache()
        loader = Loader(fail_first=True)

        async def scenario() -> int:
            with pytest.raises(RuntimeError):
                await cache.resolve("k", loader)
            return await cache.resolve("k", loader)

        assert anyio.run(scenario) == 2
        entry = cache.get("k")
        assert entry is not None
        assert entry.state is CacheState.READY
        assert entry.error is None

    def test_cancelled_caller_does_not_cancel_shared_load(self) -> None:
        cache = RemoteCache()

        async def scenario() -> int:
            loader = Loader(gate=asyncio.Event())
            waiter = asyncio.create_task(cache.resolve("k", loader))
            await _settle()
            waiter.cancel()
            loader.gate.set()  # type: ignore[union-attr]
            await _settle()
            assert cache.get("k").state is CacheState.READY  # type: ignore[union-attr]
            value = await cache.resolve("k", loader)
            assert loader.calls == 1
            return value

        assert anyio.run(scenario) == 1


class TestSnapshots:
    def test_get_returns_a_copy(self) -> None:
        cache = RemoteCache()
        cache.put("k", 1)
        snapshot = cache.get("k")
        assert snapshot is not None
        snapshot.value = 99
        assert cache.get("k").value == 1  # type: ignore[union-attr]
