import asyncio
import random

import pytest

from filtercam.progress import LoadingProgress


class MaxRandom:
    def random(self):
        return 1.0


def test_step_clamps_at_100():
    updates = []
    prog = LoadingProgress(max_step=20.0, rng=MaxRandom(), on_update=updates.append)
    values = [prog.step() for _ in range(7)]
    assert values == [20, 40, 60, 80, 100, 100, 100]
    assert updates == [20, 40, 60, 80, 100]


def test_step_is_reproducible_with_seeded_rng():
    a = LoadingProgress(rng=random.Random(7))
    b = LoadingProgress(rng=random.Random(7))
    assert [a.step() for _ in range(5)] == [b.step() for _ in range(5)]


def test_track_success_forces_100_and_stops():
    async def scenario():
        prog = LoadingProgress(interval=0.005, max_step=1.0, rng=MaxRandom())

        async def load():
            await asyncio.sleep(0.03)
            return "detector"

        result = await prog.track(load())
        running = prog.running
        await asyncio.sleep(0.02)
        return prog, result, running

    prog, result, running = asyncio.run(scenario())
    assert result == "detector"
    assert prog.value == 100
    assert prog.done and not prog.failed
    assert running is False


def test_track_failure_stops_silently_and_reraises():
    async def scenario():
        prog = LoadingProgress(interval=0.005, max_step=1.0, rng=MaxRandom())

        async def load():
            await asyncio.sleep(0.03)
            raise RuntimeError("no webgl")

        with pytest.raises(RuntimeError):
            await prog.track(load())
        frozen = prog.value
        await asyncio.sleep(0.03)
        return prog, frozen

    prog, frozen = asyncio.run(scenario())
    assert prog.failed and not prog.done
    assert 0 < frozen < 100
    assert prog.value == frozen
    assert prog.running is False


def test_cancelled_track_stops_without_marking_failure():
    async def scenario():
        prog = LoadingProgress(interval=0.005, max_step=1.0, rng=MaxRandom())
        task = asyncio.get_running_loop().create_task(prog.track(asyncio.sleep(1.0)))
        await asyncio.sleep(0.02)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        return prog

    prog = asyncio.run(scenario())
    assert prog.failed is False
    assert prog.done is False
    assert prog.running is False
