"""Tests for the single-flight AsyncOnce primitive."""

from __future__ import annotations

import asyncio

import pytest

from progression_engine.storage.once import AsyncOnce


class TestAsyncOnce:
    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_run(self):
        calls = 0
        release = asyncio.Event()

        async def factory():
            nonlocal calls
            calls += 1
            await release.wait()
            return "loaded"

        once = AsyncOnce(factory)
        waiters = [asyncio.create_task(once.get()) for _ in range(5)]
        await asyncio.sleep(0)
        assert once.started and not once.done
        release.set()
        assert await asyncio.gather(*waiters) == ["loaded"] * 5
        assert calls == 1
        assert once.done

    @pytest.mark.asyncio
    async def test_start_does_not_block(self):
        release = asyncio.Event()

        async def factory():
            await release.wait()
            return 1

        once = AsyncOnce(factory)
        once.start()
        once.start()
        assert not once.done
        release.set()
        assert await once.get() == 1

    @pytest.mark.asyncio
    async def test_later_calls_return_cached_value(self):
        calls = 0

        async def factory():
            nonlocal calls
            calls += 1
            return calls

        once = AsyncOnce(factory)
        assert await once.get() == 1
        assert await once.get() == 1
        assert calls == 1

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_cancel_run(self):
        release = asyncio.Event()

        async def factory():
            await release.wait()
            return "ok"

        once = AsyncOnce(factory)
        first = asyncio.create_task(once.get())
        await asyncio.sleep(0)
        first.cancel()
        with pytest.raises(asyncio.CancelledError):
            await first
        release.set()
        assert await once.get() == "ok"
