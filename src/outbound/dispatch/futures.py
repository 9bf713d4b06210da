"""
Helpers for concurrent.futures.Future.
"""

from concurrent.futures import Future
from typing import Any, Callable


def failed_future(exception: BaseException) -> Future:
    future: Future = Future()
    future.set_exception(exception)
    return future


def settle(future: Future, fn: Callable[[], Any]) -> None:
    """Resolve ``future`` with ``fn()``, or reject it with whatever fn raises."""
    try:
        result = fn()
    except Exception as e:
        future.set_exception(e)
    else:
        future.set_result(result)


def chain(source: Future, fn: Callable[[Any], Any]) -> Future:
    """
    Return a future resolving to ``fn(source.result())``.

    A rejected source rejects the returned future with the same exception.
    """
    target: Future = Future()

    def _on_done(done: Future) -> None:
        if done.cancelled():
            target.cancel()
            return
        exception = done.exception()
        if exception is not None:
            target.set_exception(exception)
            return
        settle(target, lambda: fn(done.result()))

    source.add_done_callback(_on_done)
    return target
