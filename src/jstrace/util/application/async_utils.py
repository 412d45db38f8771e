"""
Utilities for running instrumentation work on background threads.

``async_func`` runs a function on its own thread and hands back the thread
object. ``async_limited`` does the same but never lets more than ``count``
calls run at once; extra callers block in the call until a slot frees up.
"""

__all__ = ["async_func", "async_limited"]

import functools
import threading


def async_func(func):
    """Decorator to execute a function asynchronously in a separate thread.

    Args:
        func: The function to be executed asynchronously.

    Returns:
        A wrapper that starts a thread running ``func`` and returns it.

    Example:
        @async_func
        def instrument_later(code):
            ...

        thread = instrument_later("x = 1;")  # Returns immediately
        thread.join()
    """
    @functools.wraps(func)
    def async_wrapper(*args, **kargs):
        t = threading.Thread(target=func, args=args, kwargs=kargs)
        t.start()
        return t

    return async_wrapper


def async_limited(count):
    """Decorator factory for async execution with a concurrency limit.

    Args:
        count: Maximum number of calls running at the same time.

    Returns:
        A decorator. Decorated calls block until one of the ``count`` slots
        is free, then return the started thread.
    """
    def limited_func(func):
        semaphore = threading.BoundedSemaphore(count)

        # The slot is given back even if func raises.
        def thread_wrap(*args, **kargs):
            try:
                return func(*args, **kargs)
            finally:
                semaphore.release()

        @functools.wraps(func)
        def limited_wrap(*args, **kargs):
            semaphore.acquire()
            t = threading.Thread(target=thread_wrap, args=args, kwargs=kargs)
            t.start()
            return t

        return limited_wrap

    return limited_func
