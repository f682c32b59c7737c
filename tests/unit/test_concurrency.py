import asyncio

import pytest

from event_navi.concurrency import map_with_concurrency, run_with_concurrency


def test_every_item_processed_once_and_results_in_input_order():
    seen = []

    async def worker(item, index):
        # Later items finish first
        await asyncio.sleep(0.001 * (10 - item))
        seen.append(item)
        return item * 2

    results = run_with_concurrency(list(range(10)), 3, worker)

    assert results == [i * 2 for i in range(10)]
    assert sorted(seen) == list(range(10))


def test_in_flight_calls_never_exceed_limit():
    in_flight = 0
    peak = 0

    async def worker(item, index):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.001)
        in_flight -= 1
        return item

    run_with_concurrency(range(20), 4, worker)
    assert peak == 4


def test_limit_one_is_sequential():
    order = []

    async def worker(item, index):
        order.append(("start", item))
        await asyncio.sleep(0)
        order.append(("end", item))
        return index

    results = run_with_concurrency(["a", "b", "c"], 1, worker)

    assert results == [0, 1, 2]
    assert order == [
        ("start", "a"), ("end", "a"),
        ("start", "b"), ("end", "b"),
        ("start", "c"), ("end", "c"),
    ]


def test_empty_items_and_bad_limit():
    async def worker(item, index):
        return item

    assert run_with_concurrency([], 3, worker) == []
    assert run_with_concurrency([1, 2], 0, worker) == [1, 2]


def test_worker_errors_propagate_unless_caught():
    async def failing(item, index):
        if item == 2:
            raise ValueError("bad item")
        return item

    with pytest.raises(ValueError):
        asyncio.run(map_with_concurrency([1, 2, 3], 2, failing))

    async def tolerant(item, index):
        try:
            return await failing(item, index)
        except ValueError:
            return None

    assert run_with_concurrency([1, 2, 3], 2, tolerant) == [1, None, 3]
