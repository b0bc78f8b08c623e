import asyncio
import inspect
from typing import Dict, List, Callable, Set, Type

from wildcam_tv.domain.stack.events import Event
from wildcam_tv.common.logger import setup_logger

logger = setup_logger("MessageBus")


def handler_name(handler: Callable) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)


def _log_task_error(handler: Callable, task: asyncio.Task) -> None:
    if task.cancelled() or task.exception() is None:
        return
    logger.error(f"Error in handler {handler_name(handler)}: {task.exception()}")


def dispatch(handler: Callable, payload, tasks: Set[asyncio.Task]) -> None:
    """Call a sync handler inline or schedule a coroutine handler as a task."""
    if inspect.iscoroutinefunction(handler):
        task = asyncio.get_running_loop().create_task(handler(payload))
        tasks.add(task)
        task.add_done_callback(tasks.discard)
        task.add_done_callback(lambda done: _log_task_error(handler, done))
    else:
        handler(payload)


class MessageBus:
    def __init__(self):
        self._handlers: Dict[Type[Event], List[Callable]] = {}
        self._tasks: Set[asyncio.Task] = set()

    def handle(self, event: Event):
        event_type = type(event)
        handlers = list(self._handlers.get(event_type, []))

        logger.debug(
            f"Handling {event_type.__name__} with {len(handlers)} handlers"
        )

        for handler in handlers:
            try:
                dispatch(handler, event, self._tasks)
            except Exception as e:
                logger.error(
                    f"Error in handler {handler_name(handler)} for "
                    f"{event_type.__name__}: {e}"
                )

    def subscribe(self, event_type: Type[Event], handler: Callable):
        self._handlers.setdefault(event_type, []).append(handler)
        logger.info(f"Subscribed {handler_name(handler)} to {event_type.__name__}")

    def unsubscribe(self, event_type: Type[Event], handler: Callable):
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)
