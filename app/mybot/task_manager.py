# -*- coding: utf-8 -*-
"""
Background task registry for update handlers.

Each inbound update is processed as its own task so one slow translation never
holds up the dispatcher. Tasks are tracked until they finish so shutdown can
drain them.
"""
import asyncio
import functools
from typing import Awaitable, Callable, Set

from loguru import logger

Handler = Callable[..., Awaitable[None]]


class TaskRegistry:
    def __init__(self):
        self._tasks: Set[asyncio.Task] = set()

    def __len__(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Awaitable[None], name: str) -> asyncio.Task:
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.debug(f"Spawned {name} task (active: {len(self._tasks)})")
        return task

    async def drain(self, timeout: float) -> bool:
        """Wait for every tracked task; False when the timeout expired first."""
        if not self._tasks:
            return True

        pending = list(self._tasks)
        logger.info(f"Draining {len(pending)} in-flight message tasks")
        _, still_running = await asyncio.wait(pending, timeout=timeout)
        if still_running:
            logger.warning(f"{len(still_running)} message tasks still running after {timeout}s")
            return False

        logger.info("All message tasks finished")
        return True

    def cancel(self) -> None:
        running = [task for task in self._tasks if not task.done()]
        if not running:
            return

        logger.warning(f"Cancelling {len(running)} message tasks")
        for task in running:
            task.cancel()
        self._tasks.clear()


_registry = TaskRegistry()


async def _run_handler(handler: Handler, update, context, handler_name: str) -> None:
    try:
        await handler(update, context)
    except Exception as err:
        logger.exception(f"Error in {handler_name} handler: {err}")


def non_blocking_handler(handler_name: str = "unknown"):
    """
    Run the decorated handler as a tracked background task.

    The wrapper returns the created task; the dispatcher ignores it.

    Usage:
        @non_blocking_handler("handle_message")
        async def handle_message(update, context):
            ...
    """

    def decorator(handler: Handler):
        @functools.wraps(handler)
        async def wrapper(update, context) -> asyncio.Task:
            return _registry.spawn(_run_handler(handler, update, context, handler_name), handler_name)

        return wrapper

    return decorator


def get_active_tasks_count() -> int:
    return len(_registry)


async def wait_for_all_tasks(timeout: float = 30.0) -> bool:
    return await _registry.drain(timeout)


def cancel_all_tasks() -> None:
    _registry.cancel()
