from typing import Callable, Dict, List, Set
import asyncio
import inspect
import logging
logger = logging.getLogger(__name__)


class EventEmitter:
    """Simple event emitter for state change notifications."""

    def __init__(self):
        self._listeners: Dict[str, List[Callable]] = {}
        self._pending: Set[asyncio.Task] = set()

    def on(self, event_name: str, callback: Callable):
        """Subscribe to an event."""
        if event_name not in self._listeners:
            self._listeners[event_name] = []
        if callback not in self._listeners[event_name]:
            self._listeners[event_name].append(callback)

    def off(self, event_name: str, callback: Callable):
        """Unsubscribe from an event."""
        if event_name in self._listeners:
            if callback in self._listeners[event_name]:
                self._listeners[event_name].remove(callback)

    def listener_count(self, event_name: str) -> int:
        return len(self._listeners.get(event_name, []))

    def emit(self, event_name: str, *args, **kwargs):
        """
        Emit an event to all listeners without blocking.

        Plain callbacks run inline; coroutine callbacks are scheduled on the
        running loop.
        """
        if event_name not in self._listeners:
            return

        for callback in self._listeners[event_name][:]:  # Copy list to avoid modification during iteration
            try:
                result = callback(*args, **kwargs)
                if inspect.isawaitable(result):
                    self._schedule(event_name, result)
            except Exception as e:
                logger.error(f"Error in event listener for {event_name}: {e}", exc_info=True)

    def _schedule(self, event_name: str, awaitable):
        async def runner():
            try:
                await awaitable
            except Exception as e:
                logger.error(f"Error in event listener for {event_name}: {e}", exc_info=True)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop is running, run it to completion here
            asyncio.run(runner())
            return
        task = loop.create_task(runner())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self):
        """Wait for scheduled coroutine listeners to finish."""
        while True:
            pending = [task for task in self._pending if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending)
