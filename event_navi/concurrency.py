import asyncio


async def sleep(ms):
    await asyncio.sleep(ms / 1000)


async def map_with_concurrency(items, limit, worker):
    """
    Run worker(item, index) over items with at most `limit` calls in flight.

    Workers pull the next index from a shared cursor as they finish, so every
    item is processed exactly once. Results come back in input order. An
    exception raised by a worker propagates; catch per item inside the worker
    when partial success is wanted.
    """
    items = list(items or [])
    concurrency = max(1, int(limit or 1))
    results = [None] * len(items)
    cursor = 0

    async def run():
        nonlocal cursor
        while True:
            index = cursor
            cursor += 1
            if index >= len(items):
                return
            results[index] = await worker(items[index], index)

    await asyncio.gather(*(run() for _ in range(min(concurrency, len(items)) or 1)))
    return results


def run_with_concurrency(items, limit, worker):
    """Synchronous entry point for scripts that are not already inside an event loop."""
    return asyncio.run(map_with_concurrency(items, limit, worker))
