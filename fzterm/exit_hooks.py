"""Functions to run once at program termination, newest first."""

from __future__ import annotations

import threading
from typing import Callable

_exit_funcs: list[Callable[[], None]] = []


def at_exit(func: Callable[[], object]) -> None:
    """Register func to be called by run_at_exit_funcs, in reverse order of registration."""
    if func is None:
        raise ValueError("at_exit called with None")
    lock = threading.Lock()
    done = False

    def run() -> None:
        nonlocal done
        with lock:
            if done:
                return
            done = True
        func()

    _exit_funcs.append(run)


def run_at_exit_funcs() -> None:
    """Run every registered function, last registered first, then forget them."""
    global _exit_funcs
    funcs = _exit_funcs
    for func in reversed(funcs):
        func()
    _exit_funcs = []