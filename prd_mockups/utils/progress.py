"""
Rotating wait messages while a long call runs in a worker thread.
"""

import itertools
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any, Callable, Sequence


def run_with_messages(
    func: Callable[..., Any],
    messages: Sequence[str],
    show: Callable[[str], Any],
    interval: float = 2.5,
    *args,
    **kwargs
) -> Any:
    """
    Call func(*args, **kwargs) in a worker thread and show the next message
    every ``interval`` seconds until it returns.

    Exceptions raised by func propagate to the caller.
    """
    cycle = itertools.cycle(messages)
    with ThreadPoolExecutor(max_workers=1) as executor:
        future = executor.submit(func, *args, **kwargs)
        while not future.done():
            show(next(cycle))
            wait([future], timeout=interval)
    return future.result()
